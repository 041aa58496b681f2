"""Test that the quickstart API works for astral-engine."""
from __future__ import annotations

from datetime import datetime

NOW = datetime(2024, 5, 15, 10, 30)


def test_quickstart_public_functions_are_callable() -> None:
    import astral_engine

    for name in astral_engine.__all__:
        if name != "__version__":
            assert callable(getattr(astral_engine, name))


def test_quickstart_version(package_name: str, expected_version: str) -> None:
    import importlib

    module = importlib.import_module(package_name)
    assert module.__version__ == expected_version


def test_quickstart_search(objects, types) -> None:
    import astral_engine

    results = astral_engine.search(objects, types, "pan #compras")
    assert [r.object.id for r in results] == ["t1", "n1"]
    groups = astral_engine.group_results_by_type(results, types)
    assert list(groups) == ["nota", "tarea"]


def test_quickstart_search_stays_callable(objects, types) -> None:
    import astral_engine
    import astral_engine.ranking.ranker  # noqa: F401

    astral_engine.search(objects, types, "pan")
    assert callable(astral_engine.search)
    assert [r.object.id for r in astral_engine.search(objects, types, "pan masa")] == ["n1"]


def test_quickstart_tags(objects) -> None:
    import astral_engine

    assert astral_engine.get_all_tags(objects)[0] == "compras"


def test_quickstart_query_and_chart(objects, types, chart_panel) -> None:
    import astral_engine
    from astral_engine.model import PanelQuery, SpecialFilter

    inbox = astral_engine.execute_query(
        PanelQuery(special_filter=SpecialFilter.INBOX), objects, types, now=NOW
    )
    assert [obj.id for obj in inbox] == ["d1", "p2", "x1"]
    points = astral_engine.generate_chart_data(chart_panel, objects, types, now=NOW)
    assert sum(p.value for p in points) == len(objects)


def test_quickstart_command(objects, types, task_type) -> None:
    import astral_engine

    command = astral_engine.parse_command(
        "@tarea/Comprar pan > prioridad = 4", types, objects, now=NOW
    )
    assert command.is_update
    assert command.existing_object_id == "t1"

    converted = astral_engine.convert_property_values({"urgente": "sí"}, task_type, objects, now=NOW)
    assert converted.warnings == ()
    assert astral_engine.format_properties_preview({"urgente": "sí"}, task_type) == "Urgente: sí"

    context = astral_engine.get_relation_suggestions("@tarea/x > proyecto = ast", types, objects)
    assert [s.id for s in context.suggestions] == ["p1"]
