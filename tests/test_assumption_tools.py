"""Tests for assumption tools."""
from unittest.mock import MagicMock

import pytest

RING_A = [[36.70, -1.20], [36.71, -1.20], [36.71, -1.19], [36.70, -1.19], [36.70, -1.20]]
RING_B = [[36.72, -1.20], [36.74, -1.20], [36.74, -1.19], [36.72, -1.19], [36.72, -1.20]]


def _register_and_get(register):
    tools = {}
    mock_mcp = MagicMock()
    def capture(**kwargs):
        def decorator(fn):
            tools[fn.__name__] = fn
            return fn
        return decorator
    mock_mcp.tool = capture
    register(mock_mcp)
    return tools


@pytest.fixture
def tools(clean_state):
    from parcel_feasibility.tools.assumptions import register_assumption_tools
    from parcel_feasibility.tools.features import register_feature_tools
    found = _register_and_get(register_assumption_tools)
    found.update(_register_and_get(register_feature_tools))
    return found


def test_solar_change_doubles_capacity_of_every_polygon(tools, clean_state):
    tools["finish_polygon"](feature_id="a", coordinates=RING_A)
    tools["finish_polygon"](feature_id="b", coordinates=RING_B)
    before = {e.feature_id: e for e in clean_state.registry.entries()}

    result = tools["set_solar_density"](value=1.0)

    assert result.startswith("Solar density: 1 MW/ha")
    assert "- a:" in result and "- b:" in result
    for entry in clean_state.registry.entries():
        old = before[entry.feature_id]
        assert entry.report.solar_capacity_mw == pytest.approx(2 * old.report.solar_capacity_mw)
        assert entry.geometry == old.geometry


def test_wind_out_of_range_is_clamped(tools, clean_state):
    result = tools["set_wind_density"](value=3.0)
    assert "0.5 MW/ha" in result
    assert "clamped" in result
    assert clean_state.assumptions.get().wind_density == 0.5


def test_nan_density_reports_default_not_clamp(tools, clean_state):
    clean_state.assumptions.set_solar_density(1.5)
    result = tools["set_solar_density"](value=float("nan"))
    assert result.startswith("Solar density: 0.5 MW/ha (not a number; default used)")
    assert "clamped" not in result
    assert clean_state.assumptions.get().solar_density == 0.5


def test_in_range_density_has_no_note(tools, clean_state):
    result = tools["set_wind_density"](value=0.2)
    assert result.startswith("Wind density: 0.2 MW/ha\n")


def test_no_active_features(tools, clean_state):
    assert "No active features." in tools["set_solar_density"](value=0.8)


def test_transects_listed_as_unaffected(tools, clean_state):
    tools["finish_line"](feature_id="l", coordinates=[[36.7, -1.2], [36.8, -1.2]])
    assert "transect (unaffected)" in tools["set_wind_density"](value=0.2)


def test_reset_assumptions(tools, clean_state):
    tools["finish_polygon"](feature_id="a", coordinates=RING_A)
    tools["set_solar_density"](value=2.0)
    result = tools["reset_assumptions"]()
    assert "solar 0.5 MW/ha, wind 0.1 MW/ha" in result
    report = clean_state.registry.get("a").report
    assert report.solar_capacity_mw == pytest.approx(report.area_hectares * 0.5)
