"""
Screen-time aggregation.

Groups ScreenTime events by screen and reports total time, visit count and
average time per screen. Sums are order-independent, so aggregating a log
in one batch or in slices gives the same totals.

Duration of one event, in priority order:
  1. rawTimeSeconds (authoritative)
  2. minutes/seconds parsed from details, e.g. "Spent 2 minutes 5 seconds on Home Screen"
  3. zero, logged as a data-quality gap
"""

import logging
import re
from typing import Iterable

from models.event import ActivityEvent, Category
from models.screen_time import ScreenTimeStats
from tracking.errors import DurationParseGap
from tracking.vocabulary import SCREEN_TIME_PREFIX

logger = logging.getLogger(__name__)

_SPENT_RE = re.compile(r"Spent (.*) on")
_MINUTES_RE = re.compile(r"(\d+) minute")
_SECONDS_RE = re.compile(r"(\d+) second")


# ---------- Formatting ----------

def _plural(count: int, unit: str) -> str:
    return f"{count} {unit if count == 1 else unit + 's'}"


def format_time_spent(seconds: int) -> str:
    """
    Human-readable duration for reports.

    The trailing seconds clause is always plural ("1 minute 1 seconds"),
    matching what the mobile client has always displayed.
    """
    if seconds < 60:
        return f"{seconds} seconds"

    minutes, secs = divmod(seconds, 60)
    if minutes < 60:
        return _plural(minutes, "minute") + (f" {secs} seconds" if secs > 0 else "")

    hours, remaining_minutes = divmod(minutes, 60)
    suffix = f" {_plural(remaining_minutes, 'minute')}" if remaining_minutes > 0 else ""
    return _plural(hours, "hour") + suffix


def format_duration_details(seconds: int) -> str:
    """Duration as written into a ScreenTime event's details (minutes at most)."""
    if seconds < 60:
        return f"{seconds} seconds"
    minutes, secs = divmod(seconds, 60)
    return _plural(minutes, "minute") + (f" {secs} seconds" if secs > 0 else "")


# ---------- Duration resolution ----------

def screen_name_of(event: ActivityEvent) -> str:
    return event.activity.replace(SCREEN_TIME_PREFIX, "", 1)


def parse_details_duration(details: str) -> int:
    """Seconds described by a "Spent ... on ..." sentence. Raises DurationParseGap."""
    match = _SPENT_RE.search(details or "")
    if match is None:
        raise DurationParseGap(f"no duration in details {details!r}")

    spent = match.group(1)
    minutes = _MINUTES_RE.search(spent)
    secs = _SECONDS_RE.search(spent)
    if minutes is None and secs is None:
        raise DurationParseGap(f"no minutes or seconds in {spent!r}")

    total = 0
    if minutes:
        total += int(minutes.group(1)) * 60
    if secs:
        total += int(secs.group(1))
    return total


def resolve_duration(event: ActivityEvent) -> int:
    """Seconds one ScreenTime event contributes. Raises DurationParseGap."""
    if event.raw_time_seconds:
        return event.raw_time_seconds
    return parse_details_duration(event.details_text)


# ---------- Aggregation ----------

def aggregate_screen_time(events: Iterable[ActivityEvent]) -> dict[str, ScreenTimeStats]:
    """Per-screen totals over every ScreenTime event in `events`."""
    totals: dict[str, int] = {}
    visits: dict[str, int] = {}

    for event in events:
        if event.category != Category.SCREEN_TIME.value:
            continue
        screen = screen_name_of(event)
        try:
            seconds = resolve_duration(event)
        except DurationParseGap as exc:
            logger.warning("Aggregator: event %s contributes 0s: %s", event.id, exc)
            seconds = 0
        totals[screen] = totals.get(screen, 0) + seconds
        visits[screen] = visits.get(screen, 0) + 1

    stats: dict[str, ScreenTimeStats] = {}
    for screen, total in totals.items():
        average = _round_half_up(total / visits[screen])
        stats[screen] = ScreenTimeStats(
            total_time_seconds=total,
            visits=visits[screen],
            average_time_seconds=average,
            total_time_formatted=format_time_spent(total),
            average_time_formatted=format_time_spent(average),
        )
    return stats


def total_screen_time(stats: dict[str, ScreenTimeStats]) -> int:
    return sum(s.total_time_seconds for s in stats.values())


def _round_half_up(value: float) -> int:
    # round() is banker's rounding; reports round .5 up
    return int(value + 0.5)
