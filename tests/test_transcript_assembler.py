from conftest import make_event

from speech_practice.transcript.engine import TranscriptAssembler
from speech_practice.transcript.models import ConfidenceTier, WordConfidenceDetail


def test_final_slots_append_one_detail_per_word_in_order():
    assembler = TranscriptAssembler()

    assembler.ingest(make_event(1, (0, True, "hello world", 0.9)))
    assembler.ingest(make_event(2, (1, True, "how are you", 0.7)))
    assembler.ingest(make_event(3, (2, True, "today", 0.3)))

    assert assembler.finalized_text == "hello world how are you today"
    assert [d.word for d in assembler.details] == assembler.finalized_text.split()
    assert len(assembler.details) == 2 + 3 + 1
    assert [d.tier for d in assembler.details] == [
        ConfidenceTier.CORRECT,
        ConfidenceTier.CORRECT,
        ConfidenceTier.FAIR,
        ConfidenceTier.FAIR,
        ConfidenceTier.FAIR,
        ConfidenceTier.INCORRECT,
    ]


def test_interim_slots_never_touch_finalized_state():
    assembler = TranscriptAssembler()

    assembler.ingest(make_event(1, (0, False, "hel", 0.2)))

    assert assembler.finalized_text == ""
    assert assembler.details == []
    assert assembler.interim_text == "hel"


def test_interim_text_is_replaced_not_concatenated():
    assembler = TranscriptAssembler()

    assembler.ingest(make_event(1, (0, False, "hello", 0.4)))
    assembler.ingest(make_event(2, (0, False, "hello wor", 0.5)))

    assert assembler.interim_text == "hello wor"

    assembler.ingest(make_event(3, (0, True, "hello world", 0.95)))

    assert assembler.interim_text == ""
    assert assembler.finalized_text == "hello world"


def test_interim_joins_all_non_final_slots_of_one_event():
    assembler = TranscriptAssembler()

    assembler.ingest(
        make_event(
            1,
            (0, True, "good morning", 0.9),
            (1, False, "how is", 0.3),
            (2, False, "it going", 0.2),
        )
    )

    assert assembler.finalized_text == "good morning"
    assert assembler.interim_text == "how is it going"
    assert assembler.display_text() == "good morning how is it going"


def test_out_of_order_and_duplicate_final_events_are_ignored():
    assembler = TranscriptAssembler()

    assert assembler.ingest(make_event(5, (0, True, "hello", 0.9))) is True
    assert assembler.ingest(make_event(4, (1, True, "stale", 0.9))) is False
    assert assembler.ingest(make_event(6, (0, True, "hello", 0.9))) is True

    assert assembler.finalized_text == "hello"
    assert assembler.details == [WordConfidenceDetail(word="hello", tier=ConfidenceTier.CORRECT)]


def test_blank_final_slot_keeps_word_count_invariant():
    assembler = TranscriptAssembler()

    assembler.ingest(make_event(1, (0, True, "   ", 0.9)))
    assembler.ingest(make_event(2, (1, True, "  spaced   out  ", 0.9)))

    assert assembler.finalized_text == "spaced   out"
    assert len(assembler.details) == len(assembler.finalized_text.split()) == 2


def test_reset_clears_everything():
    assembler = TranscriptAssembler()
    assembler.ingest(make_event(1, (0, True, "hello", 0.9), (1, False, "there", 0.1)))

    assembler.reset()

    assert assembler.finalized_text == ""
    assert assembler.interim_text == ""
    assert assembler.details == []
    assert assembler.snapshot()["last_sequence"] is None
