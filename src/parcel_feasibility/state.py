"""Session state for the parcel-feasibility MCP server.

Holds everything for the current planning session: the constraint catalog,
the energy-density assumptions, the marker board and the annotation
registry that binds them together.
"""

from .core.assumptions import AssumptionState
from .core.catalog import ConstraintCatalog, load_catalog
from .core.markers import MarkerBoard
from .core.registry import AnnotationRegistry


class PlanningSession:
    def __init__(self, catalog: ConstraintCatalog):
        self.catalog = catalog
        self.assumptions = AssumptionState()
        self.markers = MarkerBoard()
        self.registry = AnnotationRegistry(catalog, self.assumptions, self.markers)
        self.assumptions.subscribe(self.registry.refresh)

    @classmethod
    def create(cls, zones_path=None, grid_path=None) -> "PlanningSession":
        """Load the catalog and build a fresh session. CatalogLoadFailure propagates."""
        return cls(load_catalog(zones_path, grid_path))

    def summary(self) -> dict:
        a = self.assumptions.get()
        return {
            "assumptions": {
                "solar_density_mw_per_ha": a.solar_density,
                "wind_density_mw_per_ha": a.wind_density,
            },
            "catalog": self.catalog.summary(),
            "annotations": {
                "count": len(self.registry),
                # Ids 1 and "1" are distinct features.
                "features": [
                    {
                        "feature_id": entry.feature_id,
                        "geometry": entry.geometry.type,
                        "report": entry.report.model_dump(exclude_none=True, exclude={"assumptions"}),
                    }
                    for entry in self.registry.entries()
                ],
            },
            "markers": len(self.markers),
        }


# Global session state, one per MCP server process. A catalog that fails to
# load aborts startup here.
state = PlanningSession.create()
