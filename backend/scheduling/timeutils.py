"""Wall-clock and day-code parsing for catalogue sections.

Day codes use the greedy two-letter scheme: ``Tu``, ``Th``, ``Sa`` and ``Su``
are matched first (case-insensitive), then the single letters ``M``, ``W``,
``F`` and ``U`` (Sunday). ``MWF`` and ``TuTh`` are the common forms. Unknown
characters are skipped.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable


logger = logging.getLogger(__name__)


DAY_ORDER: tuple[str, ...] = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)

_TWO_LETTER_DAYS: dict[str, str] = {
    "TU": "Tuesday",
    "TH": "Thursday",
    "SA": "Saturday",
    "SU": "Sunday",
}

_ONE_LETTER_DAYS: dict[str, str] = {
    "M": "Monday",
    "W": "Wednesday",
    "F": "Friday",
    "U": "Sunday",
}

_DAY_CODES: dict[str, str] = {
    "Monday": "M",
    "Tuesday": "Tu",
    "Wednesday": "W",
    "Thursday": "Th",
    "Friday": "F",
    "Saturday": "Sa",
    "Sunday": "Su",
}

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})(?:\s*([AaPp][Mm]))?$")

DEFAULT_DURATION_HOURS = 1.0


def parse_time(value: str | None) -> float | None:
    """Return decimal hours for ``value``, or None when it cannot be parsed."""

    if not value:
        return None
    m = _TIME_RE.match(str(value).strip())
    if m is None:
        logger.debug("Unparseable time %r", value)
        return None

    hours = int(m.group(1))
    minutes = int(m.group(2))
    meridiem = (m.group(3) or "").upper()

    if minutes >= 60:
        logger.debug("Unparseable time %r (minutes out of range)", value)
        return None
    if meridiem:
        if hours < 1 or hours > 12:
            logger.debug("Unparseable time %r (12-hour clock out of range)", value)
            return None
        if meridiem == "PM" and hours != 12:
            hours += 12
        if meridiem == "AM" and hours == 12:
            hours = 0
    elif hours > 24:
        logger.debug("Unparseable time %r (hour out of range)", value)
        return None

    return hours + minutes / 60


def time_to_decimal(value: str | None) -> float:
    """Convert ``"13:30"`` or ``"1:30 PM"`` to decimal hours (13.5).

    Missing or malformed input yields 0.0 so a single bad record cannot abort
    a conflict scan.
    """

    parsed = parse_time(value)
    return 0.0 if parsed is None else parsed


def calculate_duration(start: str | None, end: str | None) -> float:
    """Duration in decimal hours, rounded to 2 places.

    Falls back to one hour when either endpoint cannot be parsed.
    """

    start_h = parse_time(start)
    end_h = parse_time(end)
    if start_h is None or end_h is None:
        return DEFAULT_DURATION_HOURS
    return round(end_h - start_h, 2)


def parse_days(value: str | None) -> frozenset[str]:
    """Parse a compact day code (``"MWF"``, ``"TuTh"``) into full day names."""

    if not value:
        return frozenset()

    text = str(value).strip().upper()
    days: set[str] = set()
    i = 0
    while i < len(text):
        pair = text[i : i + 2]
        if pair in _TWO_LETTER_DAYS:
            days.add(_TWO_LETTER_DAYS[pair])
            i += 2
            continue
        single = _ONE_LETTER_DAYS.get(text[i])
        if single is not None:
            days.add(single)
        elif not text[i].isspace():
            logger.debug("Skipping unknown day letter %r in %r", text[i], value)
        i += 1
    return frozenset(days)


def format_days(days: Iterable[str]) -> str:
    """Render a set of day names back to the canonical compact code."""

    present = set(days)
    return "".join(_DAY_CODES[d] for d in DAY_ORDER if d in present)


def canonical_day_code(value: str | None) -> str:
    return format_days(parse_days(value))
