"""Shared test fixtures for astral-engine.

Fixtures defined here are available to all tests in the suite without
needing an explicit import.  The snapshot is a small Spanish workspace:
tasks, projects, notes, a daily note and one object whose type has been
deleted.  ``now`` is fixed to Wednesday 2024-05-15 10:30, so "this week"
runs from Sunday 2024-05-12 to Saturday 2024-05-18.
"""
from __future__ import annotations

from datetime import datetime

import pytest

from astral_engine.model import (
    AstralObject,
    BoolValue,
    DashboardPanel,
    DateValue,
    NumberValue,
    ObjectType,
    PropertyDefinition,
    PropertyType,
    RelationRef,
    RelationValue,
    StringListValue,
    TextValue,
)

NOW = datetime(2024, 5, 15, 10, 30)


@pytest.fixture()
def package_name() -> str:
    """Return the importable package name for assertions."""
    return "astral_engine"


@pytest.fixture()
def expected_version() -> str:
    """Return the current expected version string.

    Update this fixture when cutting a release so that the version
    test immediately catches stale ``__version__`` values.
    """
    return "0.1.0"


@pytest.fixture()
def now() -> datetime:
    return NOW


@pytest.fixture()
def task_type() -> ObjectType:
    return ObjectType(
        id="tarea",
        name="Tarea",
        name_plural="Tareas",
        icon="✅",
        color="#f87171",
        properties=(
            PropertyDefinition("fecha", "Fecha", PropertyType.DATE),
            PropertyDefinition(
                "status",
                "Estado",
                PropertyType.SELECT,
                options=("Pendiente", "En progreso", "Completada", "Cancelada"),
            ),
            PropertyDefinition("prioridad", "Prioridad", PropertyType.NUMBER),
            PropertyDefinition("proyecto", "Proyecto", PropertyType.RELATION, relation_type_id="project"),
            PropertyDefinition("urgente", "Urgente", PropertyType.BOOLEAN),
            PropertyDefinition("etiquetas", "Etiquetas", PropertyType.STRING_LIST),
            PropertyDefinition("recordatorio", "Recordatorio", PropertyType.DATETIME),
            PropertyDefinition("notas", "Notas", PropertyType.TEXT),
        ),
    )


@pytest.fixture()
def types(task_type: ObjectType) -> list[ObjectType]:
    return [
        task_type,
        ObjectType(
            id="project",
            name="Proyecto",
            name_plural="Proyectos",
            icon="🎯",
            color="#8b5cf6",
            properties=(
                PropertyDefinition(
                    "status", "Estado", PropertyType.SELECT, options=("Activo", "Pausado", "Completado")
                ),
            ),
        ),
        ObjectType(id="nota", name="Nota", name_plural="Notas", icon="📝", color="#6366f1"),
        ObjectType(id="daily", name="Nota diaria", name_plural="Notas diarias", icon="📅"),
        ObjectType(
            id="persona",
            name="Persona",
            name_plural="Personas",
            icon="👤",
            color="#10b981",
            properties=(PropertyDefinition("empresa", "Empresa", PropertyType.TEXT),),
        ),
    ]


@pytest.fixture()
def objects() -> list[AstralObject]:
    return [
        AstralObject(
            id="t1",
            type="tarea",
            title="Comprar pan",
            properties={
                "status": TextValue("Pendiente"),
                "fecha": DateValue(datetime(2024, 5, 15)),
                "prioridad": NumberValue(2),
            },
            tags=("compras",),
            created_at=datetime(2024, 5, 10, 9, 0),
            updated_at=datetime(2024, 5, 14, 12, 0),
        ),
        AstralObject(
            id="t2",
            type="tarea",
            title="Llamar al banco",
            properties={
                "status": TextValue("Completada"),
                "fecha": DateValue(datetime(2024, 5, 13)),
                "prioridad": NumberValue(5),
                "urgente": BoolValue(True),
            },
            tags=("Finanzas",),
            backlinks=("p1",),
            created_at=datetime(2024, 5, 1, 8, 0),
            updated_at=datetime(2024, 5, 13, 8, 0),
        ),
        AstralObject(
            id="t3",
            type="tarea",
            title="Revisar presupuesto",
            properties={
                "status": TextValue("En progreso"),
                "prioridad": NumberValue(3),
                "proyecto": RelationValue((RelationRef("p1", "Astral"),)),
                "etiquetas": StringListValue(("dinero", "trimestre")),
            },
            links=("p1",),
            created_at=datetime(2024, 4, 20, 16, 0),
            updated_at=datetime(2024, 5, 2, 10, 0),
        ),
        AstralObject(
            id="p1",
            type="project",
            title="Astral",
            content="<p>Motor de búsqueda y paneles</p>",
            properties={"status": TextValue("Activo")},
            tags=("trabajo",),
            links=("t2",),
            backlinks=("t3",),
            created_at=datetime(2024, 3, 1, 9, 0),
            updated_at=datetime(2024, 5, 15, 9, 0),
        ),
        AstralObject(
            id="p2",
            type="project",
            title="Huerto urbano",
            properties={"status": TextValue("Pausado")},
            created_at=datetime(2024, 2, 1, 9, 0),
            updated_at=datetime(2024, 4, 1, 9, 0),
        ),
        AstralObject(
            id="n1",
            type="nota",
            title="Ideas de pan casero",
            content="<p>Masa madre y <b>harina</b> integral para hornear el pan del domingo</p>",
            properties={"favorito": BoolValue(True)},
            tags=("Compras", "cocina"),
            created_at=datetime(2024, 5, 12, 18, 0),
            updated_at=datetime(2024, 5, 12, 18, 0),
        ),
        AstralObject(
            id="d1",
            type="daily",
            title="2024-05-15",
            created_at=datetime(2024, 5, 15, 7, 0),
            updated_at=datetime(2024, 5, 15, 7, 0),
        ),
        AstralObject(
            id="x1",
            type="borrado",
            title="Objeto huérfano",
            created_at=datetime(2024, 1, 1, 9, 0),
            updated_at=datetime(2024, 1, 1, 9, 0),
        ),
    ]


@pytest.fixture()
def by_id(objects: list[AstralObject]) -> dict[str, AstralObject]:
    return {obj.id: obj for obj in objects}


@pytest.fixture()
def chart_panel() -> DashboardPanel:
    from astral_engine.model import ChartConfig, ChartType, DisplayMode

    return DashboardPanel(
        id="by_type",
        name="Por tipo",
        display_mode=DisplayMode.CHART,
        chart_config=ChartConfig(type=ChartType.PIE),
    )
