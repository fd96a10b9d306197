"""Drawing event tools: finish_polygon, finish_circle, finish_line, finish_feature,
delete_feature, select_feature, clear_features, get_report."""

import json
from typing import Any

from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations

from ..state import state
from ..errors import InvalidGeometry
from ..models import parse_geometry
from ..core.markers import format_report
from ._prereqs import require_feature


def _finish(feature_id: str, payload: dict[str, Any]) -> str:
    """Evaluate a payload and bind the result to feature_id."""
    try:
        geometry = parse_geometry(payload)
        entry = state.registry.finish(feature_id, geometry)
    except InvalidGeometry as e:
        return f"Error: {e}"

    marker = state.markers.get(entry.marker)
    lon, lat = marker.position
    return (
        f"Feature '{feature_id}' ({geometry.type}) annotated at {lon:.6f}, {lat:.6f}:\n"
        f"{marker.label}"
    )


def register_feature_tools(mcp: FastMCP):

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=False))
    def finish_polygon(feature_id: str, coordinates: list[list[float]]) -> str:
        """Record a finished (or re-finished) polygon and return its feasibility report.

        Re-using a feature_id replaces that feature's annotation.
        **Next:** adjust assumptions with set_solar_density / set_wind_density,
        or read the report again with get_report.

        Args:
            feature_id: Stable identifier of the drawn feature.
            coordinates: Closed ring of [lon, lat] pairs (first == last, at least 4 pairs).
        """
        return _finish(feature_id, {"type": "Polygon", "coordinates": [coordinates]})

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=False))
    def finish_circle(feature_id: str, lon: float, lat: float, radius_m: float) -> str:
        """Record a finished circle site and return its feasibility report.

        Args:
            feature_id: Stable identifier of the drawn feature.
            lon: Center longitude (degrees).
            lat: Center latitude (degrees).
            radius_m: Radius in meters (>= 0).
        """
        return _finish(feature_id, {"type": "Circle", "center": [lon, lat], "radius_m": radius_m})

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=False))
    def finish_line(feature_id: str, coordinates: list[list[float]]) -> str:
        """Record a finished line (transect) and return its length.

        Lines are measured only; they get no capacity, overlap or grid figures.

        Args:
            feature_id: Stable identifier of the drawn feature.
            coordinates: At least 2 [lon, lat] pairs.
        """
        return _finish(feature_id, {"type": "LineString", "coordinates": coordinates})

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=False))
    def finish_feature(feature_id: str, geometry: dict[str, Any]) -> str:
        """Record a finished feature from a raw drawing-tool payload.

        Accepts a GeoJSON geometry or Feature (Polygon, LineString, or a Point
        with radiusMeters for circles) or {"type": "Circle", "center": [lon, lat], "radius_m": r}.

        Args:
            feature_id: Stable identifier of the drawn feature.
            geometry: The geometry payload.
        """
        return _finish(feature_id, geometry)

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=True))
    def delete_feature(feature_id: str) -> str:
        """Remove a deleted feature's annotation.

        Args:
            feature_id: Identifier of the deleted feature.
        """
        if state.registry.delete(feature_id):
            return f"Annotation for feature '{feature_id}' removed."
        return f"No annotation for feature '{feature_id}'; nothing to remove."

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=True))
    def select_feature(feature_id: str) -> str:
        """Mark a feature as selected for editing, which hides its annotation.

        **Next:** finish_polygon / finish_circle / finish_line with the same
        feature_id once editing is done.

        Args:
            feature_id: Identifier of the selected feature.
        """
        if state.registry.deselect(feature_id):
            return f"Feature '{feature_id}' selected for editing; annotation removed."
        return f"Feature '{feature_id}' selected; it had no annotation."

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=False, destructiveHint=True))
    def clear_features() -> str:
        """Remove every annotation (the drawing tool's "clear all")."""
        count = state.registry.clear()
        return f"Cleared {count} annotation(s)."

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=True))
    def get_report(feature_id: str) -> str:
        """Return the current feasibility report of a feature as JSON.

        **Requires:** the feature has been finished with one of the finish_* tools.

        Args:
            feature_id: Identifier of the feature.
        """
        try:
            require_feature(state, feature_id)
        except ValueError as e:
            return f"Error: {e}"

        entry = state.registry.get(feature_id)
        return json.dumps(
            {
                "feature_id": feature_id,
                "geometry": entry.geometry.type,
                "report": entry.report.model_dump(mode="json", exclude_none=True),
                "label": format_report(entry.report),
            },
            indent=2,
        )
