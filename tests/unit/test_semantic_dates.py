"""Unit tests for astral_engine.dates.semantic — tokens, ranges and user dates."""
from __future__ import annotations

from datetime import date, datetime, time

import pytest

from astral_engine.dates import (
    DateRange,
    is_semantic_token,
    parse_user_date,
    parse_user_range,
    resolve_semantic_range,
    week_start,
)

NOW = datetime(2024, 5, 15, 10, 30)


def day_range(first: date, last: date | None = None) -> DateRange:
    return DateRange(datetime.combine(first, time.min), datetime.combine(last or first, time.max))


# ---------------------------------------------------------------------------
# Semantic tokens
# ---------------------------------------------------------------------------


class TestSemanticRanges:
    @pytest.mark.parametrize("token, expected", [
        ("@hoy", day_range(date(2024, 5, 15))),
        ("@ayer", day_range(date(2024, 5, 14))),
        ("@mañana", day_range(date(2024, 5, 16))),
        ("@esta_semana", day_range(date(2024, 5, 12), date(2024, 5, 18))),
        ("@semana_pasada", day_range(date(2024, 5, 5), date(2024, 5, 11))),
        ("@este_mes", day_range(date(2024, 5, 1), date(2024, 5, 31))),
        ("@mes_pasado", day_range(date(2024, 4, 1), date(2024, 4, 30))),
    ])
    def test_token_ranges(self, token: str, expected: DateRange) -> None:
        assert resolve_semantic_range(token, NOW) == expected

    def test_folded_spelling_is_accepted(self) -> None:
        assert resolve_semantic_range("@MANANA", NOW) == resolve_semantic_range("@mañana", NOW)

    def test_unknown_token_is_none(self) -> None:
        assert resolve_semantic_range("@pasado_mañana", NOW) is None

    def test_prefix_required_by_default(self) -> None:
        assert resolve_semantic_range("hoy", NOW) is None
        assert resolve_semantic_range("hoy", NOW, require_prefix=False) == day_range(date(2024, 5, 15))

    def test_last_month_across_year_boundary(self) -> None:
        assert resolve_semantic_range("@mes_pasado", datetime(2024, 1, 10)) == day_range(
            date(2023, 12, 1), date(2023, 12, 31)
        )

    def test_this_month_in_leap_february(self) -> None:
        assert resolve_semantic_range("@este_mes", datetime(2024, 2, 10)).end.date() == date(2024, 2, 29)

    def test_range_contains_is_inclusive(self) -> None:
        today = resolve_semantic_range("@hoy", NOW)
        assert today.contains(datetime(2024, 5, 15))
        assert today.contains(datetime(2024, 5, 15, 23, 59, 59))
        assert not today.contains(datetime(2024, 5, 16))

    @pytest.mark.parametrize("value, expected", [
        ("@hoy", True),
        (" @Ayer ", True),
        ("hoy", False),
        ("@luego", False),
        (42, False),
        (None, False),
    ])
    def test_is_semantic_token(self, value: object, expected: bool) -> None:
        assert is_semantic_token(value) is expected


class TestWeekStart:
    def test_wednesday_maps_to_previous_sunday(self) -> None:
        assert week_start(date(2024, 5, 15)) == date(2024, 5, 12)

    def test_sunday_is_its_own_week_start(self) -> None:
        assert week_start(date(2024, 5, 12)) == date(2024, 5, 12)

    def test_saturday_closes_the_week(self) -> None:
        assert week_start(date(2024, 5, 18)) == date(2024, 5, 12)


# ---------------------------------------------------------------------------
# User-typed dates
# ---------------------------------------------------------------------------


class TestParseUserDate:
    def test_iso_date(self) -> None:
        assert parse_user_date("2024-05-20") == datetime(2024, 5, 20)

    def test_iso_datetime(self) -> None:
        assert parse_user_date("2024-05-20T14:45") == datetime(2024, 5, 20, 14, 45)

    def test_day_first_with_slashes(self) -> None:
        assert parse_user_date("03/04/2024") == datetime(2024, 4, 3)

    def test_day_first_with_time(self) -> None:
        assert parse_user_date("03-04-2024 09:15") == datetime(2024, 4, 3, 9, 15)

    def test_semantic_word_resolves_to_range_start(self) -> None:
        assert parse_user_date("mañana", NOW) == datetime(2024, 5, 16)
        assert parse_user_date("@esta_semana", NOW) == datetime(2024, 5, 12)

    @pytest.mark.parametrize("text", ["", "   ", "pronto", "31/02/2024", "2024-13-01"])
    def test_unparsable_is_none(self, text: str) -> None:
        assert parse_user_date(text, NOW) is None


class TestParseUserRange:
    def test_plain_date_covers_whole_day(self) -> None:
        assert parse_user_range("2024-05-20", NOW) == day_range(date(2024, 5, 20))

    def test_datetime_is_single_instant(self) -> None:
        moment = datetime(2024, 5, 20, 8, 0)
        assert parse_user_range("2024-05-20T08:00", NOW) == DateRange(moment, moment)

    def test_semantic_token_keeps_its_range(self) -> None:
        assert parse_user_range("@esta_semana", NOW) == day_range(date(2024, 5, 12), date(2024, 5, 18))

    def test_garbage_is_none(self) -> None:
        assert parse_user_range("cuando sea", NOW) is None
