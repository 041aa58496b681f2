"""Unit tests for astral_engine.command.coercion — value conversion and previews."""
from __future__ import annotations

from datetime import datetime

import pytest

from astral_engine.command import (
    ConvertedProperties,
    convert_property_values,
    format_properties_preview,
    parse_locale_number,
    resolve_property,
)
from astral_engine.command.coercion import split_list
from astral_engine.model import (
    AstralObject,
    BoolValue,
    DateValue,
    NumberValue,
    ObjectType,
    RelationRef,
    RelationValue,
    StringListValue,
    TextValue,
)


@pytest.fixture()
def convert(task_type: ObjectType, objects: list[AstralObject], now: datetime):
    """Convert a raw mapping against the task type at the fixed clock."""

    def _convert(raw: dict[str, str]) -> ConvertedProperties:
        return convert_property_values(raw, task_type, objects, now)

    return _convert


# ---------------------------------------------------------------------------
# Scalar parsers
# ---------------------------------------------------------------------------


class TestLocaleNumbers:
    @pytest.mark.parametrize("text, expected", [
        ("12", 12.0),
        ("3,5", 3.5),
        ("1.5", 1.5),
        (".5", 0.5),
        ("-3,25", -3.25),
        ("1,500", 1500.0),
        ("1.500", 1500.0),
        ("-2.750", -2750.0),
        ("0.500", 0.5),
        ("0,500", 0.5),
        ("1.5000", 1.5),
        ("12.34", 12.34),
        ("1.234,5", 1234.5),
        ("1,234.5", 1234.5),
        ("1.500.000", 1500000.0),
        ("2,000,000", 2000000.0),
        ("1 234", 1234.0),
        ("1 234,75", 1234.75),
    ])
    def test_valid(self, text: str, expected: float) -> None:
        assert parse_locale_number(text) == expected

    @pytest.mark.parametrize("text", ["", "   ", "abc", "1e3", "12abc", "--1", "1,2,a"])
    def test_invalid(self, text: str) -> None:
        assert parse_locale_number(text) is None


class TestSplitList:
    def test_bracketed(self) -> None:
        assert split_list("[a, b ,]") == ["a", "b"]

    def test_bare(self) -> None:
        assert split_list(" uno,dos ") == ["uno", "dos"]

    def test_empty(self) -> None:
        assert split_list("") == []


# ---------------------------------------------------------------------------
# Property names
# ---------------------------------------------------------------------------


class TestResolveProperty:
    def test_exact_name(self, task_type: ObjectType) -> None:
        assert resolve_property(task_type, "Estado").id == "status"

    def test_exact_id(self, task_type: ObjectType) -> None:
        assert resolve_property(task_type, "status").id == "status"

    def test_unique_partial_match(self, task_type: ObjectType) -> None:
        assert resolve_property(task_type, "fech").id == "fecha"
        assert resolve_property(task_type, "recordatorios").id == "recordatorio"

    def test_ambiguous_partial_match(self, task_type: ObjectType) -> None:
        # "etiquetas" and "notas" both contain "tas".
        assert resolve_property(task_type, "tas") is None

    def test_short_tokens_do_not_match_fuzzily(self, task_type: ObjectType) -> None:
        assert resolve_property(task_type, "ur") is None


# ---------------------------------------------------------------------------
# Coercion table
# ---------------------------------------------------------------------------


class TestDates:
    def test_day_first_date(self, convert) -> None:
        assert convert({"fecha": "15/05/2024"}).properties == {"fecha": DateValue(datetime(2024, 5, 15))}

    def test_semantic_token(self, convert) -> None:
        assert convert({"fecha": "@hoy"}).properties == {"fecha": DateValue(datetime(2024, 5, 15))}

    def test_date_drops_time_of_day(self, convert) -> None:
        assert convert({"fecha": "2024-05-16T09:30"}).properties == {"fecha": DateValue(datetime(2024, 5, 16))}

    def test_datetime_keeps_time_of_day(self, convert) -> None:
        result = convert({"recordatorio": "2024-05-16T09:30"})
        assert result.properties == {"recordatorio": DateValue(datetime(2024, 5, 16, 9, 30))}

    def test_invalid_date(self, convert) -> None:
        result = convert({"fecha": "pronto"})
        assert result.properties == {"fecha": TextValue("pronto")}
        assert result.warnings == ('Fecha: "pronto" no es una fecha válida',)


class TestScalars:
    @pytest.mark.parametrize("raw, expected", [("sí", True), ("YES", True), ("1", True), ("No", False), ("0", False)])
    def test_booleans(self, convert, raw: str, expected: bool) -> None:
        assert convert({"urgente": raw}).properties == {"urgente": BoolValue(expected)}

    def test_invalid_boolean(self, convert) -> None:
        result = convert({"urgente": "quizá"})
        assert result.properties == {"urgente": TextValue("quizá")}
        assert result.warnings == ('Urgente: "quizá" no es un valor booleano válido',)

    def test_number(self, convert) -> None:
        assert convert({"prioridad": "2,5"}).properties == {"prioridad": NumberValue(2.5)}

    def test_dot_grouped_thousands(self, convert) -> None:
        result = convert({"prioridad": "1.500"})
        assert result.properties == {"prioridad": NumberValue(1500)}
        assert result.warnings == ()

    def test_invalid_number(self, convert) -> None:
        assert convert({"prioridad": "alta"}).warnings == ('Prioridad: "alta" no es un número válido',)

    def test_select_returns_canonical_option(self, convert) -> None:
        assert convert({"estado": "en PROGRESO"}).properties == {"status": TextValue("En progreso")}

    def test_invalid_select_option(self, convert) -> None:
        result = convert({"estado": "Bloqueada"})
        assert result.properties == {"status": TextValue("Bloqueada")}
        assert result.warnings == ('Estado: "Bloqueada" no es una opción válida',)

    def test_string_list(self, convert) -> None:
        assert convert({"etiquetas": "[casa, jardín]"}).properties == {
            "etiquetas": StringListValue(("casa", "jardín"))
        }

    def test_text_strips_quotes(self, convert) -> None:
        assert convert({"notas": '"hola"'}).properties == {"notas": TextValue("hola")}


class TestRelations:
    def test_exact_title(self, convert) -> None:
        assert convert({"proyecto": "astral"}).properties == {
            "proyecto": RelationValue((RelationRef("p1", "Astral"),))
        }

    def test_list_with_partial_title(self, convert) -> None:
        assert convert({"proyecto": "[@Astral, huerto]"}).properties == {
            "proyecto": RelationValue((RelationRef("p1", "Astral"), RelationRef("p2", "Huerto urbano")))
        }

    def test_falls_back_to_other_types(self, convert) -> None:
        assert convert({"proyecto": "Comprar pan"}).properties == {
            "proyecto": RelationValue((RelationRef("t1", "Comprar pan"),))
        }

    def test_unresolved_stays_raw_without_warning(self, convert) -> None:
        result = convert({"proyecto": "Astral, Inexistente"})
        assert result.properties == {"proyecto": TextValue("Astral, Inexistente")}
        assert result.warnings == ()


class TestConvertPropertyValues:
    def test_unknown_type_yields_nothing(self, objects: list[AstralObject]) -> None:
        assert convert_property_values({"fecha": "hoy"}, None, objects) == ConvertedProperties()

    def test_blank_value_is_skipped(self, convert) -> None:
        result = convert({"fecha": "   "})
        assert result.properties == {}
        assert result.warnings == ()

    def test_warnings_keep_input_order(self, convert) -> None:
        result = convert({"fecha": "pronto", "color": "rojo", "urgente": "quizá"})
        assert result.warnings == (
            'Fecha: "pronto" no es una fecha válida',
            'Propiedad desconocida: "color"',
            'Urgente: "quizá" no es un valor booleano válido',
        )


# ---------------------------------------------------------------------------
# Preview
# ---------------------------------------------------------------------------


class TestPreview:
    def test_display_names_and_truncation(self, task_type: ObjectType) -> None:
        preview = format_properties_preview({"estado": "Pendiente", "notas": "x" * 40}, task_type)
        assert preview == "Estado: Pendiente, Notas: " + "x" * 30 + "…"

    def test_unknown_names_are_shown_as_typed(self, task_type: ObjectType) -> None:
        assert format_properties_preview({"color ": "rojo"}, task_type) == "color: rojo"

    def test_without_type(self) -> None:
        assert format_properties_preview({"a": '"b"'}, None) == "a: b"

    def test_empty(self, task_type: ObjectType) -> None:
        assert format_properties_preview({}, task_type) == ""
