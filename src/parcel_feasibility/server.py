"""MCP server for parcel-feasibility.

Registers all tools and runs via stdio transport.
"""

from mcp.server.fastmcp import FastMCP

from .tools.features import register_feature_tools
from .tools.assumptions import register_assumption_tools
from .tools.catalog import register_catalog_tools
from .tools.status import register_status_tools

mcp = FastMCP(
    "parcel-feasibility",
    instructions=(
        "Measure sketched land parcels: area, solar/wind capacity, distance to the grid, "
        "and overlap with restricted zones"
    ),
)

# Register all tool groups
register_feature_tools(mcp)
register_assumption_tools(mcp)
register_catalog_tools(mcp)
register_status_tools(mcp)


def main():
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
