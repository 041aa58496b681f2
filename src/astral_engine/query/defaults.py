"""Built-in dashboard panels seeded for a fresh workspace."""
from __future__ import annotations

from typing import Final

from astral_engine.model.panels import (
    ChartConfig,
    ChartType,
    DashboardPanel,
    DisplayMode,
    FilterOperator,
    PanelQuery,
    PropertyFilter,
    SortDirection,
    SpecialFilter,
)

DEFAULT_PANELS: Final[tuple[DashboardPanel, ...]] = (
    DashboardPanel(
        id="inbox",
        name="Bandeja de Entrada",
        icon="Inbox",
        color="#f59e0b",
        query=PanelQuery(
            special_filter=SpecialFilter.INBOX,
            sort_by="createdAt",
            sort_direction=SortDirection.DESC,
        ),
        max_items=8,
    ),
    DashboardPanel(
        id="pending_tasks",
        name="Tareas Pendientes",
        icon="CheckCircle",
        color="#f87171",
        query=PanelQuery(
            types=("tarea",),
            property_filters=(
                PropertyFilter("status", FilterOperator.NOT_EQUALS, "Completada"),
                PropertyFilter("status", FilterOperator.NOT_EQUALS, "Cancelada"),
            ),
            sort_by="dueDate",
            sort_direction=SortDirection.ASC,
        ),
        max_items=8,
    ),
    DashboardPanel(
        id="active_projects",
        name="Proyectos Activos",
        icon="Target",
        color="#8b5cf6",
        query=PanelQuery(
            types=("project",),
            property_filters=(PropertyFilter("status", FilterOperator.EQUALS, "Activo"),),
        ),
        max_items=5,
    ),
    DashboardPanel(
        id="follow_up",
        name="Seguimiento",
        icon="Eye",
        color="#10b981",
        query=PanelQuery(
            property_filters=(PropertyFilter("seguimiento", FilterOperator.EQUALS, True),),
        ),
        max_items=5,
    ),
    DashboardPanel(
        id="orphans",
        name="Huérfanos",
        icon="Unlink",
        color="#94a3b8",
        query=PanelQuery(
            special_filter=SpecialFilter.ORPHANS,
            sort_by="createdAt",
            sort_direction=SortDirection.ASC,
        ),
        max_items=6,
    ),
    DashboardPanel(
        id="stats_by_type",
        name="Estadísticas por Tipo",
        icon="PieChart",
        color="#6366f1",
        display_mode=DisplayMode.CHART,
        chart_config=ChartConfig(type=ChartType.PIE, group_by_property="type"),
    ),
)


def default_panel(panel_id: str) -> DashboardPanel | None:
    """Return the built-in panel with ``panel_id``, if any."""
    for panel in DEFAULT_PANELS:
        if panel.id == panel_id:
            return panel
    return None
