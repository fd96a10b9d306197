"""Tests for the annotation registry lifecycle."""
import logging

import pytest

from parcel_feasibility.core.assumptions import AssumptionState
from parcel_feasibility.core.catalog import load_catalog
from parcel_feasibility.core.markers import MarkerBoard
from parcel_feasibility.core.registry import AnnotationRegistry
from parcel_feasibility.errors import InvalidGeometry
from parcel_feasibility.models import Circle, LineString, Polygon


def _box(west, south, east, north) -> Polygon:
    return Polygon(coordinates=[
        (west, south), (east, south), (east, north), (west, north), (west, south),
    ])


class RecordingBoard(MarkerBoard):
    """MarkerBoard that logs every presenter call in order."""

    def __init__(self):
        super().__init__()
        self.calls = []

    def show(self, feature_id, report, position):
        handle = super().show(feature_id, report, position)
        self.calls.append(("show", feature_id, handle))
        return handle

    def update(self, handle, report):
        super().update(handle, report)
        self.calls.append(("update", handle))

    def remove(self, handle):
        super().remove(handle)
        self.calls.append(("remove", handle))


class TestAnnotationRegistry:
    def setup_method(self):
        self.assumptions = AssumptionState()
        self.board = RecordingBoard()
        self.registry = AnnotationRegistry(load_catalog(), self.assumptions, self.board)
        self.assumptions.subscribe(self.registry.refresh)
        self.site_a = _box(36.70, -1.20, 36.71, -1.19)
        self.site_b = _box(36.72, -1.20, 36.74, -1.19)

    def test_finish_creates_entry_and_marker(self):
        entry = self.registry.finish("a", self.site_a)
        assert "a" in self.registry
        assert len(self.registry) == 1
        assert entry.geometry == self.site_a
        assert entry.report.kind == "site"
        marker = self.board.get(entry.marker)
        assert marker.feature_id == "a"
        assert marker.position == pytest.approx((36.705, -1.195))
        assert "Area:" in marker.label

    def test_refinish_replaces_entry_tearing_down_old_marker_first(self):
        first = self.registry.finish("a", self.site_a)
        second = self.registry.finish("a", self.site_b)

        assert len(self.registry) == 1
        assert self.registry.get("a") == second
        assert second.geometry == self.site_b
        assert second.marker != first.marker
        assert self.board.get(first.marker) is None
        assert len(self.board) == 1
        assert self.board.calls == [
            ("show", "a", first.marker),
            ("remove", first.marker),
            ("show", "a", second.marker),
        ]

    def test_refinish_keeps_table_position(self):
        self.registry.finish("a", self.site_a)
        self.registry.finish("b", self.site_b)
        self.registry.finish("a", self.site_b)
        assert [e.feature_id for e in self.registry.entries()] == ["a", "b"]

    def test_invalid_geometry_leaves_previous_entry(self):
        original = self.registry.finish("a", self.site_a)
        calls_before = list(self.board.calls)
        broken = Polygon(coordinates=[(0, 0), (1, 1), (0, 0)])

        with pytest.raises(InvalidGeometry):
            self.registry.finish("a", broken)

        assert self.registry.get("a") == original
        assert self.board.calls == calls_before
        assert self.board.get(original.marker) is not None

    def test_presenter_failure_on_refinish_leaves_feature_absent(self, caplog):
        first = self.registry.finish("a", self.site_a)
        self.registry.finish("b", self.site_b)

        def broken_show(feature_id, report, position):
            raise RuntimeError("map unavailable")
        self.board.show = broken_show

        with caplog.at_level(logging.WARNING, logger="parcel_feasibility.core.registry"):
            with pytest.raises(RuntimeError, match="map unavailable"):
                self.registry.finish("a", self.site_b)

        assert "a" not in self.registry
        assert self.board.get(first.marker) is None
        assert [e.feature_id for e in self.registry.entries()] == ["b"]
        assert any("annotation dropped" in r.getMessage() for r in caplog.records)

    def test_invalid_geometry_for_new_id_creates_nothing(self):
        with pytest.raises(InvalidGeometry):
            self.registry.finish("x", Circle(center=(0, 0), radius_m=-1))
        assert "x" not in self.registry
        assert len(self.board) == 0

    def test_assumption_change_refreshes_every_entry(self):
        a = self.registry.finish("a", self.site_a)
        b = self.registry.finish("b", self.site_b)

        self.assumptions.set_solar_density(1.0)

        new_a, new_b = self.registry.entries()
        assert [new_a.feature_id, new_b.feature_id] == ["a", "b"]
        assert new_a.report.solar_capacity_mw == pytest.approx(2 * a.report.solar_capacity_mw)
        assert new_b.report.solar_capacity_mw == pytest.approx(2 * b.report.solar_capacity_mw)
        assert new_a.geometry == a.geometry
        assert new_b.geometry == b.geometry
        assert new_a.marker == a.marker
        assert new_b.marker == b.marker
        updates = [c for c in self.board.calls if c[0] == "update"]
        assert updates == [("update", a.marker), ("update", b.marker)]

    def test_refresh_returns_reports_in_order(self):
        self.registry.finish("b", self.site_b)
        self.registry.finish(7, self.site_a)
        refreshed = self.registry.refresh()
        assert [fid for fid, _ in refreshed] == ["b", 7]

    def test_refresh_updates_marker_label(self):
        entry = self.registry.finish("a", self.site_a)
        self.assumptions.set_wind_density(0.5)
        wind_line = self.board.get(entry.marker).label.splitlines()[-1]
        assert wind_line.startswith("Wind potential")
        assert "based on 0.5 MW/ha" in wind_line

    def test_transect_unchanged_by_assumptions(self):
        line = LineString(coordinates=[(36.7, -1.2), (36.8, -1.2)])
        before = self.registry.finish("line", line).report
        self.assumptions.set_solar_density(2.0)
        assert self.registry.get("line").report == before

    def test_delete_removes_entry_and_marker(self):
        entry = self.registry.finish("a", self.site_a)
        assert self.registry.delete("a") is True
        assert "a" not in self.registry
        assert self.board.get(entry.marker) is None
        assert self.registry.delete("a") is False

    def test_deselect_removes_entry(self):
        entry = self.registry.finish("a", self.site_a)
        assert self.registry.deselect("a") is True
        assert self.registry.get("a") is None
        assert ("remove", entry.marker) in self.board.calls
        assert self.registry.deselect("a") is False

    def test_clear_removes_everything(self):
        self.registry.finish("a", self.site_a)
        self.registry.finish("b", self.site_b)
        assert self.registry.clear() == 2
        assert len(self.registry) == 0
        assert len(self.board) == 0
        assert self.registry.clear() == 0

    def test_display_points(self):
        self.registry.finish("a", self.site_a)
        self.registry.finish("c", Circle(center=(36.9, -1.1), radius_m=200))
        points = self.registry.display_points()
        assert [p[0] for p in points] == ["a", "c"]
        assert points[1][2] == (36.9, -1.1)
        assert points[0][1].kind == "site"

    def test_one_entry_per_live_id_after_event_sequence(self):
        events = [
            ("finish", 1), ("finish", 2), ("finish", 3), ("finish", 2),
            ("delete", 1), ("finish", 4), ("deselect", 3), ("finish", 3),
            ("finish", 1), ("delete", 4), ("finish", 2), ("delete", 99),
        ]
        live = set()
        for action, fid in events:
            if action == "finish":
                self.registry.finish(fid, _box(36.7 + fid * 0.01, -1.2, 36.705 + fid * 0.01, -1.195))
                live.add(fid)
            elif action == "delete":
                self.registry.delete(fid)
                live.discard(fid)
            else:
                self.registry.deselect(fid)
                live.discard(fid)

        ids = [e.feature_id for e in self.registry.entries()]
        assert sorted(ids) == sorted(live)
        assert len(ids) == len(set(ids))
        assert len(self.board) == len(live)
