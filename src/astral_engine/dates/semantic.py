"""Semantic date tokens and user date parsing.

A *semantic date token* is a relative expression such as ``@hoy`` that is
resolved against an evaluation-time "now".  Every token resolves to an
inclusive ``DateRange``: single days span ``00:00`` to ``23:59:59.999999``,
and ``@esta_semana`` / ``@semana_pasada`` cover Sunday through Saturday.

Supported tokens::

    @hoy  @ayer  @mañana  @esta_semana  @semana_pasada  @este_mes  @mes_pasado

Tokens are matched after folding, so ``@manana`` and ``@MAÑANA`` work too.

The engine keeps all date-times naive in local time.  Timezone-aware
inputs are converted to local time and stripped by ``to_naive``.
"""
from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Final

from astral_engine.model.clock import resolve_now, to_naive
from astral_engine.model.text import fold_text

# Python's weekday(): Monday == 0 ... Sunday == 6.
WEEK_STARTS_ON: Final[int] = 6

_DMY_RE: Final[re.Pattern[str]] = re.compile(
    r"^(\d{1,2})[/-](\d{1,2})[/-](\d{4})(?:[ T](\d{1,2}):(\d{2}))?$"
)


@dataclass(frozen=True, slots=True)
class DateRange:
    """Inclusive ``[start, end]`` interval."""

    start: datetime
    end: datetime

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end

    @classmethod
    def for_day(cls, day: date) -> "DateRange":
        return cls(datetime.combine(day, time.min), datetime.combine(day, time.max))

    @classmethod
    def for_days(cls, first: date, last: date) -> "DateRange":
        return cls(datetime.combine(first, time.min), datetime.combine(last, time.max))


def week_start(day: date) -> date:
    """Return the Sunday that opens the week containing ``day``."""
    return day - timedelta(days=(day.weekday() - WEEK_STARTS_ON) % 7)


def _month_start(day: date) -> date:
    return day.replace(day=1)


def _previous_month_start(day: date) -> date:
    return (_month_start(day) - timedelta(days=1)).replace(day=1)


def _today(today: date) -> DateRange:
    return DateRange.for_day(today)


def _yesterday(today: date) -> DateRange:
    return DateRange.for_day(today - timedelta(days=1))


def _tomorrow(today: date) -> DateRange:
    return DateRange.for_day(today + timedelta(days=1))


def _this_week(today: date) -> DateRange:
    start = week_start(today)
    return DateRange.for_days(start, start + timedelta(days=6))


def _last_week(today: date) -> DateRange:
    start = week_start(today) - timedelta(days=7)
    return DateRange.for_days(start, start + timedelta(days=6))


def _this_month(today: date) -> DateRange:
    start = _month_start(today)
    next_month = (start + timedelta(days=32)).replace(day=1)
    return DateRange.for_days(start, next_month - timedelta(days=1))


def _last_month(today: date) -> DateRange:
    start = _previous_month_start(today)
    return DateRange.for_days(start, _month_start(today) - timedelta(days=1))


# Keys are folded and written without the leading "@".
SEMANTIC_TOKENS: Final[dict[str, Callable[[date], DateRange]]] = {
    "hoy": _today,
    "ayer": _yesterday,
    "manana": _tomorrow,
    "esta_semana": _this_week,
    "semana_pasada": _last_week,
    "este_mes": _this_month,
    "mes_pasado": _last_month,
}


def is_semantic_token(value: object) -> bool:
    """Return True if ``value`` is an ``@``-prefixed semantic date token."""
    if not isinstance(value, str):
        return False
    stripped = value.strip()
    return stripped.startswith("@") and fold_text(stripped[1:]) in SEMANTIC_TOKENS


def resolve_semantic_range(
    token: str,
    now: datetime | None = None,
    require_prefix: bool = True,
) -> DateRange | None:
    """Resolve a semantic date token to an inclusive range.

    Parameters
    ----------
    token:
        The token, e.g. ``"@hoy"``.
    now:
        Evaluation time; defaults to the wall clock.
    require_prefix:
        When ``False``, bare words such as ``"mañana"`` are accepted too.

    Returns
    -------
    DateRange | None
        The resolved range, or ``None`` if ``token`` is not a known token.
    """
    stripped = token.strip()
    if stripped.startswith("@"):
        stripped = stripped[1:]
    elif require_prefix:
        return None
    resolver = SEMANTIC_TOKENS.get(fold_text(stripped))
    if resolver is None:
        return None
    return resolver(resolve_now(now).date())


def parse_user_date(text: str, now: datetime | None = None) -> datetime | None:
    """Parse a user-typed date or date-time.

    Tries, in order: semantic tokens (with or without ``@``, resolving to
    the start of the range), ISO 8601 via ``datetime.fromisoformat``, and
    day-first ``DD/MM/YYYY`` or ``DD-MM-YYYY`` with an optional ``HH:MM``.

    Returns ``None`` if nothing matches.
    """
    stripped = text.strip()
    if not stripped:
        return None

    semantic = resolve_semantic_range(stripped, now, require_prefix=False)
    if semantic is not None:
        return semantic.start

    try:
        return to_naive(datetime.fromisoformat(stripped))
    except ValueError:
        pass

    match = _DMY_RE.match(stripped)
    if match:
        day, month, year, hour, minute = match.groups()
        try:
            return datetime(
                int(year),
                int(month),
                int(day),
                int(hour) if hour else 0,
                int(minute) if minute else 0,
            )
        except ValueError:
            return None
    return None


def parse_user_range(text: str, now: datetime | None = None) -> DateRange | None:
    """Parse a filter value into an inclusive range.

    Semantic tokens give their own range; a date without a time component
    covers the whole day; a date-time is a single instant.
    """
    semantic = resolve_semantic_range(text, now)
    if semantic is not None:
        return semantic
    parsed = parse_user_date(text, now)
    if parsed is None:
        return None
    if _has_time_component(text):
        return DateRange(parsed, parsed)
    return DateRange.for_day(parsed.date())


def _has_time_component(text: str) -> bool:
    return ":" in text
