"""Reference data tools: list_restricted_zones, list_grid_lines."""

import json

from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations

from ..state import state


def register_catalog_tools(mcp: FastMCP):

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=True))
    def list_restricted_zones() -> str:
        """List the restricted zones sites are checked against (name, category, color, boundary)."""
        return json.dumps(
            [
                {
                    "name": z.name,
                    "category": z.category,
                    "color": z.color,
                    "boundary": [list(p) for p in z.boundary.coordinates],
                }
                for z in state.catalog.all_restricted_zones()
            ],
            indent=2,
        )

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=True))
    def list_grid_lines() -> str:
        """List the grid infrastructure lines used for grid-distance figures."""
        return json.dumps(
            [
                {
                    "name": g.name,
                    "voltage": g.voltage_class,
                    "category": g.category,
                    "path": [list(p) for p in g.path.coordinates],
                }
                for g in state.catalog.all_grid_lines()
            ],
            indent=2,
        )
