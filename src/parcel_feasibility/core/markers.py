"""Marker presentation boundary.

The registry hands each report to a MarkerPresenter together with a display
coordinate. What a marker looks like is the presenter's business; the
in-memory MarkerBoard keeps plain records with a popup label.
"""

from abc import ABC, abstractmethod

from pydantic import BaseModel, Field

from ..models import Position
from .evaluator import FeasibilityReport


class Marker(BaseModel):
    handle: int = Field(gt=0)
    feature_id: str | int
    position: Position
    label: str


class MarkerPresenter(ABC):
    """Shows, refreshes and removes the marker bound to one feature."""

    @abstractmethod
    def show(self, feature_id: str | int, report: FeasibilityReport, position: Position) -> int:
        """Display a new marker and return its handle."""
        pass

    @abstractmethod
    def update(self, handle: int, report: FeasibilityReport) -> None:
        """Replace the content of an existing marker, keeping its position."""
        pass

    @abstractmethod
    def remove(self, handle: int) -> None:
        """Tear down a marker. Unknown handles are ignored."""
        pass


class MarkerBoard(MarkerPresenter):
    """In-memory presenter: one Marker record per handle."""

    def __init__(self):
        self._markers: dict[int, Marker] = {}
        self._next_handle = 1

    def show(self, feature_id, report, position) -> int:
        handle = self._next_handle
        self._next_handle += 1
        self._markers[handle] = Marker(
            handle=handle,
            feature_id=feature_id,
            position=position,
            label=format_report(report),
        )
        return handle

    def update(self, handle, report) -> None:
        marker = self._markers.get(handle)
        if marker is not None:
            self._markers[handle] = marker.model_copy(update={"label": format_report(report)})

    def remove(self, handle) -> None:
        self._markers.pop(handle, None)

    def get(self, handle: int) -> Marker | None:
        return self._markers.get(handle)

    def markers(self) -> list[Marker]:
        return list(self._markers.values())

    def __len__(self) -> int:
        return len(self._markers)


def format_report(report: FeasibilityReport) -> str:
    """Popup text for a report, one fact per line."""
    if report.kind == "transect":
        return f"Distance: {report.length_km:.2f} km ({report.length_meters:.2f} m)"

    lines = [f"Area: {report.area_hectares:.2f} ha ({report.area_square_meters:.2f} m²)"]
    if report.grid_distance_km is not None:
        lines.append(
            f"Distance to grid: ~{report.grid_distance_km:.1f} km ({report.nearest_grid_line})"
        )
    for finding in report.overlap_findings:
        lines.append(
            f"Warning: {finding.overlap_percent:.1f}% overlaps {finding.zone_name} "
            f"[{finding.zone_category}]"
        )
    a = report.assumptions
    lines.append(
        f"Solar potential: ~{report.solar_capacity_mw:.2f} MW (based on {a.solar_density:g} MW/ha)"
    )
    lines.append(
        f"Wind potential: ~{report.wind_capacity_mw:.2f} MW (based on {a.wind_density:g} MW/ha)"
    )
    return "\n".join(lines)
