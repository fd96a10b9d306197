"""Assumption tools: set_solar_density, set_wind_density, reset_assumptions."""

import math

from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations

from ..state import state
from ..core.assumptions import SOLAR_RANGE, WIND_RANGE


def _refreshed_reports() -> str:
    """Current reports for every active feature, in drawing order."""
    entries = state.registry.entries()
    if not entries:
        return "No active features."
    lines = []
    for entry in entries:
        r = entry.report
        if r.kind == "transect":
            lines.append(f"- {entry.feature_id}: {r.length_km:.2f} km transect (unaffected)")
        else:
            lines.append(
                f"- {entry.feature_id}: {r.area_hectares:.2f} ha, "
                f"solar ~{r.solar_capacity_mw:.2f} MW, wind ~{r.wind_capacity_mw:.2f} MW"
            )
    return "\n".join(lines)


def _adjustment_note(requested: float, effective: float, bounds: tuple[float, float]) -> str:
    if math.isnan(requested):
        return " (not a number; default used)"
    if effective != requested:
        return f" (clamped to {bounds[0]}-{bounds[1]})"
    return ""


def register_assumption_tools(mcp: FastMCP):

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=False))
    def set_solar_density(value: float) -> str:
        """Set the solar energy density (MW per hectare) and refresh every report.

        Values outside 0.1-2.0 are clamped to the nearest bound; NaN restores
        the default. Default 0.5 (1 MW per 2 ha).

        Args:
            value: Solar density in MW/ha.
        """
        effective = state.assumptions.set_solar_density(value)
        note = _adjustment_note(value, effective, SOLAR_RANGE)
        return f"Solar density: {effective:g} MW/ha{note}\n{_refreshed_reports()}"

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=False))
    def set_wind_density(value: float) -> str:
        """Set the wind energy density (MW per hectare) and refresh every report.

        Values outside 0.05-0.5 are clamped to the nearest bound; NaN restores
        the default. Default 0.1.

        Args:
            value: Wind density in MW/ha.
        """
        effective = state.assumptions.set_wind_density(value)
        note = _adjustment_note(value, effective, WIND_RANGE)
        return f"Wind density: {effective:g} MW/ha{note}\n{_refreshed_reports()}"

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=False))
    def reset_assumptions() -> str:
        """Restore default densities (solar 0.5, wind 0.1 MW/ha) and refresh every report."""
        a = state.assumptions.reset_to_defaults()
        return (
            f"Assumptions reset: solar {a.solar_density:g} MW/ha, wind {a.wind_density:g} MW/ha\n"
            f"{_refreshed_reports()}"
        )
