import argparse
import json
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from speech_practice.recording.lifecycle import RecordingLifecycle  # noqa: E402
from speech_practice.transcript.models import event_from_dict  # noqa: E402


def load_events(path: Path) -> list[dict]:
    events = []
    with path.open("r", encoding="utf-8") as handle:
        for line_no, line in enumerate(handle, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                events.append(json.loads(line))
            except json.JSONDecodeError as exc:
                raise RuntimeError(f"{path.name}:{line_no} is not valid JSON: {exc}") from exc
    return events


def replay(raw_events: list[dict]) -> dict:
    lifecycle = RecordingLifecycle()
    lifecycle.start()

    applied = 0
    for raw in raw_events:
        if lifecycle.assembler.ingest(event_from_dict(raw)):
            applied += 1

    live_text = lifecycle.assembler.display_text()
    details = [detail.to_dict() for detail in lifecycle.assembler.details]
    finalized_text = lifecycle.assembler.finalized_text
    final_state = lifecycle.finish("replay_end")

    return {
        "events": len(raw_events),
        "applied": applied,
        "final_state": final_state.value,
        "finalized_text": finalized_text,
        "live_text": live_text,
        "details": details,
    }


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Replay a JSON-lines recognition fixture through the transcript assembler")
    parser.add_argument("fixture", help="path to a .jsonl file, one recognition event per line")
    args = parser.parse_args(argv)

    report = replay(load_events(Path(args.fixture)))
    print(json.dumps(report, indent=2, ensure_ascii=False))


if __name__ == "__main__":
    main()
