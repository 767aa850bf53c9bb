"""
Unit tests for the brief summarizer.

Rules covered:
1. Per-type and per-tone counts over the window
2. Average intensity over entries that declare one, rounded to one decimal
3. Highlights: intensity >= 8 or tone "urgent", in input order, text truncated
4. Trend observations from fixed thresholds
"""

from datetime import datetime, timedelta

from mediecho.models import Log
from mediecho.services.summarizer import (
    MAX_HIGHLIGHTS,
    TREND_HIGH_INTENSITY,
    TREND_HIGH_SYMPTOMS,
    TREND_NEGATIVE_TONE,
    detect_trends,
    empty_summary,
    round_one_decimal,
    summarize_logs,
    truncate_text,
)

MONDAY = datetime(2024, 1, 8, 9, 0)


def make(type="symptom", text="Entry", tone=None, day=0, **meta):
    return Log(
        type=type,
        text=text,
        tone=tone,
        meta=meta or None,
        created_at=MONDAY + timedelta(days=day),
    )


class TestSummarizeLogs:
    """Tests for summarize_logs."""

    def test_week_with_one_severe_symptom(self):
        """Three symptoms and a mood entry, one symptom at intensity 9."""
        logs = [
            make("symptom", "Headache", day=0),
            make("symptom", "Migraine", day=2, intensity=9),
            make("mood", "Fine", day=4),
            make("symptom", "Sore throat", day=6),
        ]

        summary = summarize_logs(logs)

        assert summary["total_logs"] == 4
        assert summary["by_type"] == {"symptom": 3, "mood": 1}
        assert len(summary["highlights"]) == 1
        assert summary["highlights"][0]["text"] == "Migraine"
        assert summary["highlights"][0]["date"] == MONDAY + timedelta(days=2)
        assert TREND_HIGH_SYMPTOMS in summary["trends"]

    def test_type_counts_sum_to_total(self):
        logs = [make(t) for t in ["food", "food", "fitness", "voice", "mood", "symptom"]]
        summary = summarize_logs(logs)
        assert sum(summary["by_type"].values()) == summary["total_logs"] == 6

    def test_empty_input(self):
        """No logs gives the zero summary."""
        assert summarize_logs([]) == empty_summary()

    def test_avg_intensity_zero_without_intensity(self):
        summary = summarize_logs([make(), make(tone="calm")])
        assert summary["avg_intensity"] == 0

    def test_avg_intensity_ignores_entries_without_one(self):
        logs = [make(intensity=7), make(), make(intensity=8)]
        assert summarize_logs(logs)["avg_intensity"] == 7.5

    def test_avg_intensity_rounds_to_one_decimal(self):
        logs = [make(intensity=1), make(intensity=2), make(intensity=2)]
        assert summarize_logs(logs)["avg_intensity"] == 1.7

    def test_tone_counts_skip_missing_tone(self):
        logs = [make(tone="calm"), make(tone="calm"), make(), make(tone="anxious")]
        assert summarize_logs(logs)["by_tone"] == {"calm": 2, "anxious": 1}

    def test_tag_counts(self):
        logs = [make(tags=["sleep", "stress"]), make(tags=["sleep"])]
        assert summarize_logs(logs)["tags"] == {"sleep": 2, "stress": 1}


class TestHighlights:
    """Tests for highlight selection."""

    def test_urgent_tone_is_highlight(self):
        summary = summarize_logs([make(tone="urgent")])
        assert len(summary["highlights"]) == 1

    def test_intensity_boundary(self):
        """Intensity 8 qualifies, 7 does not."""
        logs = [make(text="seven", intensity=7), make(text="eight", intensity=8)]
        highlights = summarize_logs(logs)["highlights"]
        assert [h["text"] for h in highlights] == ["eight"]

    def test_highlights_keep_input_order(self):
        logs = [
            make(text="first", tone="urgent", day=1),
            make(text="skip", day=2),
            make(text="second", intensity=10, day=3),
        ]
        highlights = summarize_logs(logs)["highlights"]
        assert [h["text"] for h in highlights] == ["first", "second"]

    def test_long_text_truncated(self):
        text = "x" * 150
        highlight = summarize_logs([make(text=text, tone="urgent")])["highlights"][0]
        assert highlight["text"] == "x" * 100 + "..."

    def test_highlights_capped(self):
        logs = [make(tone="urgent", text=f"n{i}") for i in range(MAX_HIGHLIGHTS + 5)]
        summary = summarize_logs(logs)
        assert len(summary["highlights"]) == MAX_HIGHLIGHTS
        assert summary["highlights"][0]["text"] == "n0"

    def test_truncate_text_short_unchanged(self):
        assert truncate_text("short") == "short"
        assert truncate_text("y" * 100) == "y" * 100


class TestTrends:
    """Tests for detect_trends."""

    def test_symptom_share_must_exceed_half(self):
        """Exactly half symptoms does not trigger the symptom trend."""
        logs = [make("symptom"), make("mood")]
        assert TREND_HIGH_SYMPTOMS not in summarize_logs(logs)["trends"]

    def test_negative_tone_without_positive_entries(self):
        """A missing positive count is treated as zero."""
        logs = [make("mood", tone="negative")]
        assert TREND_NEGATIVE_TONE in summarize_logs(logs)["trends"]

    def test_negative_tone_equal_to_positive(self):
        logs = [make("mood", tone="negative"), make("mood", tone="positive")]
        assert TREND_NEGATIVE_TONE not in summarize_logs(logs)["trends"]

    def test_high_average_intensity(self):
        logs = [make("fitness", intensity=7), make("fitness", intensity=7)]
        assert summarize_logs(logs)["trends"] == [TREND_HIGH_INTENSITY]

    def test_trend_order(self):
        summary = {
            "total_logs": 3,
            "by_type": {"symptom": 3},
            "by_tone": {"negative": 2, "positive": 1},
            "avg_intensity": 8.0,
        }
        assert detect_trends(summary) == [
            TREND_HIGH_SYMPTOMS,
            TREND_NEGATIVE_TONE,
            TREND_HIGH_INTENSITY,
        ]

    def test_no_trends_for_quiet_week(self):
        logs = [make("food", tone="positive"), make("fitness", intensity=3)]
        assert summarize_logs(logs)["trends"] == []


class TestRounding:
    """Tests for round_one_decimal."""

    def test_half_rounds_up(self):
        assert round_one_decimal(2.25) == 2.3
        assert round_one_decimal(2.35) == 2.4

    def test_whole_numbers(self):
        assert round_one_decimal(9) == 9.0
