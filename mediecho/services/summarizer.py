"""
Brief Summarizer

Aggregates a week of log entries into the summary stored with a weekly brief.
Pure: no database or filesystem access.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List

HIGHLIGHT_INTENSITY = 8
HIGHLIGHT_TONE = "urgent"
HIGHLIGHT_TEXT_LENGTH = 100
MAX_HIGHLIGHTS = 20

SYMPTOM_SHARE_THRESHOLD = 0.5
HIGH_AVG_INTENSITY = 7

TREND_HIGH_SYMPTOMS = "High symptom activity this week"
TREND_NEGATIVE_TONE = "More negative entries than positive"
TREND_HIGH_INTENSITY = (
    "High average intensity - consider consulting a healthcare provider"
)


def round_one_decimal(value: float) -> float:
    """Round half away from zero to one decimal place."""
    return float(Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def truncate_text(text: str, length: int = HIGHLIGHT_TEXT_LENGTH) -> str:
    if len(text) > length:
        return text[:length] + "..."
    return text


def is_highlight(log) -> bool:
    intensity = log.intensity
    if intensity is not None and intensity >= HIGHLIGHT_INTENSITY:
        return True
    return log.tone == HIGHLIGHT_TONE


def empty_summary() -> Dict[str, Any]:
    return {
        "total_logs": 0,
        "by_type": {},
        "by_tone": {},
        "avg_intensity": 0,
        "trends": [],
        "tags": {},
        "highlights": [],
    }


def summarize_logs(logs: Iterable) -> Dict[str, Any]:
    """
    Compute weekly statistics for a set of logs.

    Args:
        logs: Log entries (anything exposing type, text, tone, intensity,
            tags and created_at), in chronological order.

    Returns:
        Summary dict with total_logs, by_type, by_tone, avg_intensity, tags,
        highlights and trends. Highlights keep input order.
    """
    summary = empty_summary()

    total_intensity = 0
    intensity_count = 0

    for log in logs:
        summary["total_logs"] += 1

        by_type = summary["by_type"]
        by_type[log.type] = by_type.get(log.type, 0) + 1

        if log.tone:
            by_tone = summary["by_tone"]
            by_tone[log.tone] = by_tone.get(log.tone, 0) + 1

        if log.intensity is not None:
            total_intensity += log.intensity
            intensity_count += 1

        for tag in log.tags:
            summary["tags"][tag] = summary["tags"].get(tag, 0) + 1

        if is_highlight(log) and len(summary["highlights"]) < MAX_HIGHLIGHTS:
            summary["highlights"].append(
                {
                    "date": log.created_at,
                    "type": log.type,
                    "text": truncate_text(log.text),
                }
            )

    if intensity_count:
        summary["avg_intensity"] = round_one_decimal(total_intensity / intensity_count)

    summary["trends"] = detect_trends(summary)
    return summary


def detect_trends(summary: Dict[str, Any]) -> List[str]:
    """Threshold-based observations about a computed summary."""
    trends = []
    total = summary["total_logs"]
    by_type = summary["by_type"]
    by_tone = summary["by_tone"]

    if total and by_type.get("symptom", 0) > total * SYMPTOM_SHARE_THRESHOLD:
        trends.append(TREND_HIGH_SYMPTOMS)
    if by_tone.get("negative", 0) > by_tone.get("positive", 0):
        trends.append(TREND_NEGATIVE_TONE)
    if summary["avg_intensity"] >= HIGH_AVG_INTENSITY:
        trends.append(TREND_HIGH_INTENSITY)

    return trends
