"""Feasibility evaluation for a single drawn geometry.

Given a geometry, the current assumptions and the constraint catalog,
``evaluate`` returns an immutable FeasibilityReport:

- LineString (transect): length only. Transects are exempt from siting
  constraints, so capacity, overlap and grid fields are left unset.
- Polygon / Circle (site): area, solar and wind capacity, overlap with each
  restricted zone, and distance from the site centroid to the nearest grid
  line.

Evaluation is synchronous and deterministic. It either produces a complete
report or raises InvalidGeometry.
"""

import logging
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict
from shapely.errors import GEOSException

from ..errors import InvalidGeometry
from ..models import Circle, LineString, Polygon
from .assumptions import AssumptionSet
from .catalog import ConstraintCatalog
from . import geometry as geo

logger = logging.getLogger(__name__)

SQUARE_METERS_PER_HECTARE = 10_000.0

# Overlaps at or below this percentage are noise from near-tangent shapes.
OVERLAP_NOISE_THRESHOLD_PCT = 0.1


class OverlapFinding(BaseModel):
    model_config = ConfigDict(frozen=True)

    zone_name: str
    zone_category: str
    overlap_percent: float


class FeasibilityReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["site", "transect"]
    area_hectares: Optional[float] = None
    area_square_meters: Optional[float] = None
    length_km: Optional[float] = None
    length_meters: Optional[float] = None
    solar_capacity_mw: Optional[float] = None
    wind_capacity_mw: Optional[float] = None
    grid_distance_km: Optional[float] = None
    nearest_grid_line: Optional[str] = None
    overlap_findings: tuple[OverlapFinding, ...] = ()
    assumptions: Optional[AssumptionSet] = None


def evaluate(
    geometry: Polygon | LineString | Circle,
    assumptions: AssumptionSet,
    catalog: ConstraintCatalog,
) -> FeasibilityReport:
    """Compute the feasibility report for one geometry."""
    geo.check_geometry(geometry)

    match geometry:
        case LineString():
            return _evaluate_transect(geometry)
        case Polygon() | Circle():
            return _evaluate_site(geometry, assumptions, catalog)
        case _:
            raise InvalidGeometry(f"Unsupported geometry type: {type(geometry).__name__}")


def _evaluate_transect(line: LineString) -> FeasibilityReport:
    meters = geo.line_length(line)
    return FeasibilityReport(kind="transect", length_meters=meters, length_km=meters / 1000.0)


def _evaluate_site(
    site: Polygon | Circle,
    assumptions: AssumptionSet,
    catalog: ConstraintCatalog,
) -> FeasibilityReport:
    area_m2 = geo.area(site)
    hectares = area_m2 / SQUARE_METERS_PER_HECTARE

    findings = overlap_findings(site, catalog) if area_m2 > 0 else ()
    grid_km, grid_name = nearest_grid(site, catalog)

    return FeasibilityReport(
        kind="site",
        area_square_meters=area_m2,
        area_hectares=hectares,
        solar_capacity_mw=hectares * assumptions.solar_density,
        wind_capacity_mw=hectares * assumptions.wind_density,
        grid_distance_km=grid_km,
        nearest_grid_line=grid_name,
        overlap_findings=findings,
        assumptions=assumptions,
    )


def overlap_findings(site: Polygon | Circle, catalog: ConstraintCatalog) -> tuple[OverlapFinding, ...]:
    """Zones the site overlaps by more than the noise threshold, largest first."""
    basis = geo.overlap_basis_area(site)
    if basis <= 0:
        return ()

    findings = []
    for zone in catalog.all_restricted_zones():
        try:
            if not geo.intersects(site, zone.boundary):
                continue
            shared = geo.intersection_area(site, zone.boundary)
        except GEOSException as exc:
            # Malformed zone data; the zone contributes no finding.
            logger.debug("Overlap check skipped for zone %r: %s", zone.name, exc)
            continue
        if shared is None:
            continue

        percent = min(shared / basis * 100.0, 100.0)
        if percent <= OVERLAP_NOISE_THRESHOLD_PCT:
            continue
        findings.append(OverlapFinding(
            zone_name=zone.name,
            zone_category=zone.category,
            overlap_percent=percent,
        ))

    # sorted() is stable: equal percentages keep catalog order.
    return tuple(sorted(findings, key=lambda f: f.overlap_percent, reverse=True))


def nearest_grid(site: Polygon | Circle, catalog: ConstraintCatalog) -> tuple[float | None, str | None]:
    """Distance (km) from the site centroid to the nearest grid line, and its name."""
    lines = catalog.all_grid_lines()
    if not lines:
        return None, None

    center = geo.centroid(site)
    best_m, best_name = None, None
    for line in lines:
        d = geo.distance_point_to_line(center, line.path)
        if best_m is None or d < best_m:
            best_m, best_name = d, line.name
    return best_m / 1000.0, best_name
