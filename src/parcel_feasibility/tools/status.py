"""Status tool and resource: get_status, state://session."""

import json
from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations

from ..state import state


def register_status_tools(mcp: FastMCP):

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=True))
    def get_status() -> str:
        """Return a summary of the current planning session.

        Shows current assumptions, catalog sizes, and the report of every
        annotated feature.
        """
        return json.dumps(state.summary(), indent=2)

    @mcp.resource("state://session")
    def session_state() -> str:
        """Current planning session summary as JSON."""
        return json.dumps(state.summary(), indent=2)
