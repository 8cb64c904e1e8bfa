from speech_practice.conversation.models import Turn
from speech_practice.conversation.summary import summarize
from speech_practice.conversation.timeline import TurnTimeline


def _turn(turn_id: str, sender: str, score=None, feedback=None, content="text") -> Turn:
    return Turn.model_validate(
        {
            "messageId": turn_id,
            "senderType": sender,
            "content": content,
            "pronunciationScore": score,
            "feedback": feedback,
        }
    )


def test_average_is_zero_without_scored_user_turns():
    summary = summarize([_turn("a", "AI"), _turn("b", "USER")])

    assert summary.total_turns == 2
    assert summary.average_pronunciation_score == 0


def test_average_over_scored_user_turns_only():
    turns = [
        _turn("a", "AI", score=0.1),
        _turn("b", "USER", score=0.5),
        _turn("c", "USER", score=1.0),
        _turn("d", "USER"),
    ]

    summary = summarize(turns)

    assert summary.total_turns == 4
    assert summary.average_pronunciation_score == 0.75
    assert summary.average_percent == 75


def test_zero_score_counts_as_present():
    summary = summarize([_turn("a", "USER", score=0.0), _turn("b", "USER", score=1.0)])

    assert summary.average_pronunciation_score == 0.5


def test_empty_timeline_summary():
    summary = summarize([])

    assert summary.total_turns == 0
    assert summary.average_pronunciation_score == 0


def test_toggle_translation_is_local_and_per_turn():
    timeline = TurnTimeline()
    timeline.replace(
        [
            _turn("a", "AI", feedback="TRANSLATION:Xin chào", content="Hello"),
            _turn("b", "AI", feedback="TRANSLATION:Tạm biệt", content="Bye"),
        ]
    )

    assert timeline.toggle_translation("a") is True
    assert timeline.visible_text(timeline.get("a")) == "Xin chào"
    assert timeline.visible_text(timeline.get("b")) == "Bye"

    assert timeline.toggle_translation("a") is False
    assert timeline.visible_text(timeline.get("a")) == "Hello"
    assert timeline.toggle_translation("missing") is None


def test_visible_text_falls_back_to_content_without_translation():
    timeline = TurnTimeline()
    timeline.replace([_turn("a", "USER", content="hi")])
    timeline.toggle_translation("a")

    assert timeline.visible_text(timeline.get("a")) == "hi"


def test_replace_swaps_whole_list_and_tracks_capacity():
    timeline = TurnTimeline(max_messages=3)
    timeline.replace([_turn("a", "AI"), _turn("b", "USER")])
    timeline.toggle_translation("a")

    timeline.replace([_turn("a", "AI"), _turn("b", "USER"), _turn("c", "AI")])

    assert [turn.id for turn in timeline] == ["a", "b", "c"]
    assert timeline.get("a").show_translation is False
    assert timeline.remaining_capacity == 0
    assert timeline.is_full
