"""Prerequisite checking helpers for MCP tools."""


def require_feature(state, feature_id) -> None:
    """Raise ValueError with a descriptive message if the feature has no annotation.

    Usage in a tool:
        try:
            require_feature(state, feature_id)
        except ValueError as e:
            return f"Error: {e}"
    """
    if feature_id not in state.registry:
        raise ValueError(
            f"No annotation for feature '{feature_id}'. "
            "Draw it first with finish_polygon, finish_circle, finish_line or finish_feature."
        )
