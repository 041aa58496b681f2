"""Unit tests for astral_engine.model — text folding, values, schema records."""
from __future__ import annotations

from datetime import datetime, timezone

import pytest

from astral_engine.errors import SchemaError
from astral_engine.model import (
    AstralObject,
    BoolValue,
    DateValue,
    NumberValue,
    ObjectType,
    PropertyDefinition,
    PropertyType,
    RelationRef,
    RelationValue,
    StringListValue,
    TextValue,
    TypeCatalog,
)
from astral_engine.model.clock import resolve_now, to_naive
from astral_engine.model.text import fold_text, fold_with_map, strip_html, truncate
from astral_engine.model.values import is_empty_value


# ---------------------------------------------------------------------------
# Text folding
# ---------------------------------------------------------------------------


class TestFoldText:
    @pytest.mark.parametrize("raw", ["Mañana", "MANANA", "mañana", "  manana  "])
    def test_case_and_accent_variants_fold_together(self, raw: str) -> None:
        assert fold_text(raw) == "manana"

    def test_empty_string(self) -> None:
        assert fold_text("") == ""

    @pytest.mark.parametrize("raw", ["İSTANBUL", "İstanbul", "istanbul"])
    def test_dotted_capital_i_folds_without_marks(self, raw: str) -> None:
        assert fold_text(raw) == "istanbul"

    def test_folded_text_has_no_combining_marks(self) -> None:
        import unicodedata

        folded, index_map = fold_with_map("İ ǰ ΐ Ǆ ẞ")
        assert not any(unicodedata.combining(c) for c in folded)
        assert len(index_map) == len(folded)

    def test_fold_with_map_points_back_to_original(self) -> None:
        folded, index_map = fold_with_map("Él está")
        assert folded == "el esta"
        assert len(index_map) == len(folded)
        assert index_map[folded.index("esta")] == 3

    def test_strip_html_collapses_whitespace(self) -> None:
        assert strip_html("<p>Hola <b>mundo</b></p>\n<p>!</p>") == "Hola mundo !"

    def test_truncate_short_text_unchanged(self) -> None:
        assert truncate("corto", 30) == "corto"

    def test_truncate_adds_ellipsis(self) -> None:
        assert truncate("a" * 40, 30) == "a" * 30 + "…"


# ---------------------------------------------------------------------------
# Property values
# ---------------------------------------------------------------------------


class TestPropertyValues:
    def test_integral_number_displays_without_decimals(self) -> None:
        assert NumberValue(3.0).display() == "3"

    def test_fractional_number_display(self) -> None:
        assert NumberValue(2.5).display() == "2.5"

    def test_integer_number_is_stored_as_float(self) -> None:
        value = NumberValue(3)
        assert isinstance(value.value, float)
        assert value.display() == "3"
        assert value == NumberValue(3.0)

    def test_aware_date_value_becomes_naive(self) -> None:
        aware = datetime(2024, 5, 15, 10, 30, tzinfo=timezone.utc)
        value = DateValue(aware)
        assert value.value.tzinfo is None
        assert value.value == to_naive(aware)

    def test_bool_display_is_spanish(self) -> None:
        assert BoolValue(True).display() == "sí"
        assert BoolValue(False).display() == "no"

    def test_date_only_value_displays_iso_date(self) -> None:
        assert DateValue(datetime(2024, 5, 15)).display() == "2024-05-15"

    def test_datetime_value_displays_minutes(self) -> None:
        assert DateValue(datetime(2024, 5, 15, 9, 5)).display() == "2024-05-15T09:05"

    def test_list_and_relation_display_join_with_commas(self) -> None:
        assert StringListValue(("a", "b")).display() == "a, b"
        refs = (RelationRef("p1", "Astral"), RelationRef("p2", "Huerto"))
        assert RelationValue(refs).display() == "Astral, Huerto"

    @pytest.mark.parametrize(
        "value, expected",
        [
            (None, True),
            (TextValue("   "), True),
            (StringListValue(()), True),
            (RelationValue(()), True),
            (TextValue("x"), False),
            (NumberValue(0), False),
            (BoolValue(False), False),
        ],
    )
    def test_is_empty_value(self, value: object, expected: bool) -> None:
        assert is_empty_value(value) is expected  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Schema records
# ---------------------------------------------------------------------------


class TestObjectType:
    def test_duplicate_property_ids_raise_schema_error(self) -> None:
        with pytest.raises(SchemaError) as excinfo:
            ObjectType(
                id="tarea",
                name="Tarea",
                properties=(
                    PropertyDefinition("fecha", "Fecha", PropertyType.DATE),
                    PropertyDefinition("fecha", "Otra fecha", PropertyType.DATE),
                ),
            )
        assert excinfo.value.type_id == "tarea"
        assert excinfo.value.property_id == "fecha"
        assert "duplicate" in str(excinfo.value)

    def test_empty_id_raises_schema_error(self) -> None:
        with pytest.raises(SchemaError):
            ObjectType(id="", name="Nada")

    def test_schema_error_is_value_error(self) -> None:
        assert issubclass(SchemaError, ValueError)

    def test_find_property_by_name_or_id(self, task_type: ObjectType) -> None:
        assert task_type.find_property("ESTADO").id == "status"
        assert task_type.find_property("status").id == "status"
        assert task_type.find_property("inexistente") is None

    def test_matches_plural(self, task_type: ObjectType) -> None:
        assert task_type.matches("tareas")
        assert not task_type.matches("")


class TestAstralObject:
    def test_aware_timestamps_become_naive(self) -> None:
        aware = datetime(2024, 5, 15, 8, 0, tzinfo=timezone.utc)
        obj = AstralObject(id="o1", type="nota", title="x", created_at=aware, updated_at=aware)
        assert obj.created_at.tzinfo is None
        assert obj.updated_at.tzinfo is None
        assert obj.updated_at == to_naive(aware)

    def test_naive_timestamps_are_kept(self) -> None:
        moment = datetime(2024, 5, 15, 8, 0)
        obj = AstralObject(id="o1", type="nota", title="x", created_at=moment, updated_at=moment)
        assert obj.created_at == moment


class TestTypeCatalog:
    def test_resolve_by_id_name_and_plural(self, types: list[ObjectType]) -> None:
        catalog = TypeCatalog(types)
        assert catalog.resolve("project").id == "project"
        assert catalog.resolve("Proyecto").id == "project"
        assert catalog.resolve("PROYECTOS").id == "project"

    def test_unknown_token_resolves_to_none(self, types: list[ObjectType]) -> None:
        assert TypeCatalog(types).resolve("receta") is None

    def test_ambiguous_token_resolves_to_none(self) -> None:
        catalog = TypeCatalog(
            [ObjectType(id="nota", name="Apunte"), ObjectType(id="apunte", name="Nota")]
        )
        assert catalog.resolve("nota") is None

    def test_display_falls_back_for_unknown_type(self, types: list[ObjectType]) -> None:
        fallback = TypeCatalog(types).display("borrado")
        assert fallback.name == "borrado"
        assert fallback.icon
        assert fallback.color

    def test_property_for_unknown_type_is_none(self, types: list[ObjectType]) -> None:
        obj = AstralObject(id="x", type="borrado", title="x")
        assert TypeCatalog(types).property_for(obj, "status") is None


# ---------------------------------------------------------------------------
# Clock
# ---------------------------------------------------------------------------


class TestClock:
    def test_naive_passes_through(self) -> None:
        moment = datetime(2024, 5, 15, 10, 30)
        assert to_naive(moment) is moment

    def test_aware_value_becomes_naive(self) -> None:
        aware = datetime(2024, 5, 15, 10, 30, tzinfo=timezone.utc)
        assert to_naive(aware).tzinfo is None

    def test_resolve_now_prefers_injected_value(self) -> None:
        fixed = datetime(2020, 1, 1)
        assert resolve_now(fixed) == fixed

    def test_resolve_now_defaults_to_clock(self) -> None:
        assert isinstance(resolve_now(None), datetime)
