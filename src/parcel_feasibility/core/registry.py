"""Annotation registry: one live report/marker pair per drawn feature.

Entries live in an insertion-ordered table keyed by feature id. Per id:

    absent --finish(G)--> active
    active --finish(G')--> active     (old marker torn down, new one shown)
    active --refresh(A)--> active     (report recomputed, geometry kept)
    active --delete/deselect/clear--> absent

A finish that fails evaluation raises InvalidGeometry and leaves the
table and the presenter untouched. If the presenter fails to show the new
marker, the error propagates and the feature is left absent.
"""

import logging

from pydantic import BaseModel, ConfigDict

from ..models import Geometry, Position
from .assumptions import AssumptionSet, AssumptionState
from .catalog import ConstraintCatalog
from .evaluator import FeasibilityReport, evaluate
from .geometry import centroid
from .markers import MarkerPresenter

logger = logging.getLogger(__name__)


class AnnotationEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    feature_id: str | int
    geometry: Geometry
    report: FeasibilityReport
    marker: int


class AnnotationRegistry:
    def __init__(
        self,
        catalog: ConstraintCatalog,
        assumptions: AssumptionState,
        presenter: MarkerPresenter,
    ):
        self._catalog = catalog
        self._assumptions = assumptions
        self._presenter = presenter
        self._entries: dict[str | int, AnnotationEntry] = {}

    def finish(self, feature_id: str | int, geometry) -> AnnotationEntry:
        """Create or replace the annotation for a feature that finished drawing."""
        report = evaluate(geometry, self._assumptions.get(), self._catalog)
        position = centroid(geometry)

        previous = self._entries.get(feature_id)
        if previous is not None:
            self._presenter.remove(previous.marker)
        try:
            handle = self._presenter.show(feature_id, report, position)
        except Exception:
            # The old marker is gone; keep no entry pointing at it.
            if previous is not None:
                del self._entries[feature_id]
            logger.warning("Marker for feature %r could not be shown; annotation dropped", feature_id)
            raise

        entry = AnnotationEntry(
            feature_id=feature_id, geometry=geometry, report=report, marker=handle,
        )
        self._entries[feature_id] = entry
        logger.info(
            "Annotation %s for feature %r (%s)",
            "replaced" if previous is not None else "created", feature_id, report.kind,
        )
        return entry

    def refresh(self, assumptions: AssumptionSet | None = None) -> list[tuple[str | int, FeasibilityReport]]:
        """Re-evaluate every active entry once, in table order."""
        if assumptions is None:
            assumptions = self._assumptions.get()
        refreshed = []
        for feature_id, entry in list(self._entries.items()):
            report = evaluate(entry.geometry, assumptions, self._catalog)
            self._presenter.update(entry.marker, report)
            self._entries[feature_id] = entry.model_copy(update={"report": report})
            refreshed.append((feature_id, report))
        logger.debug("Refreshed %d annotation(s)", len(refreshed))
        return refreshed

    def delete(self, feature_id: str | int) -> bool:
        return self._remove(feature_id, "deleted")

    def deselect(self, feature_id: str | int) -> bool:
        """Drop the annotation of a feature selected for editing."""
        return self._remove(feature_id, "selected for editing")

    def clear(self) -> int:
        count = len(self._entries)
        for entry in self._entries.values():
            self._presenter.remove(entry.marker)
        self._entries.clear()
        logger.info("Annotation registry cleared (%d entr%s)", count, "y" if count == 1 else "ies")
        return count

    def _remove(self, feature_id, reason: str) -> bool:
        entry = self._entries.pop(feature_id, None)
        if entry is None:
            return False
        self._presenter.remove(entry.marker)
        logger.info("Annotation removed for feature %r (%s)", feature_id, reason)
        return True

    def get(self, feature_id: str | int) -> AnnotationEntry | None:
        return self._entries.get(feature_id)

    def entries(self) -> tuple[AnnotationEntry, ...]:
        return tuple(self._entries.values())

    def display_points(self) -> list[tuple[str | int, FeasibilityReport, Position]]:
        """(feature id, report, centroid) for every active entry."""
        return [(e.feature_id, e.report, centroid(e.geometry)) for e in self._entries.values()]

    def __contains__(self, feature_id) -> bool:
        return feature_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)
