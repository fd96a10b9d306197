"""Constraint catalog: restricted zones and grid infrastructure lines.

Reference data is loaded once from GeoJSON FeatureCollections and is
read-only afterwards. Any problem while loading raises CatalogLoadFailure;
a partially loaded catalog is never returned.
"""

import json
import logging
import re
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from ..errors import CatalogLoadFailure, InvalidGeometry
from ..models import LineString, Polygon, parse_geometry
from .geometry import check_geometry

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parent.parent / "data"
DEFAULT_ZONES_PATH = DATA_DIR / "restricted_zones.geojson"
DEFAULT_GRID_PATH = DATA_DIR / "grid_infrastructure.geojson"


class RestrictedZone(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    category: Literal["protected", "settlement", "floodplain"]
    boundary: Polygon
    color: str = "#9CA3AF"

    @field_validator("color", mode="before")
    @classmethod
    def validate_and_normalize_hex(cls, v: str) -> str:
        if not isinstance(v, str):
            raise ValueError("Color must be a string")
        v = v.strip()
        if not re.match(r'^#[0-9A-Fa-f]{6}$', v):
            raise ValueError(f"Invalid hex color '{v}'. Must be #RRGGBB format.")
        return f"#{v[1:].upper()}"


class GridLine(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    voltage_class: str
    category: Literal["transmission", "distribution"]
    path: LineString


class ConstraintCatalog:
    """Immutable collections of restricted zones and grid lines."""

    def __init__(self, zones=(), grid_lines=()):
        self._zones = tuple(zones)
        self._grid_lines = tuple(grid_lines)

    def all_restricted_zones(self) -> tuple[RestrictedZone, ...]:
        return self._zones

    def all_grid_lines(self) -> tuple[GridLine, ...]:
        return self._grid_lines

    def summary(self) -> dict:
        return {
            "restricted_zones": len(self._zones),
            "grid_lines": len(self._grid_lines),
        }


def _read_features(path: Path) -> list[dict]:
    try:
        with open(path) as f:
            data = json.load(f)
    except OSError as e:
        raise CatalogLoadFailure(f"Cannot read catalog file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise CatalogLoadFailure(f"Invalid JSON in catalog file {path}: {e}") from e

    if not isinstance(data, dict) or data.get("type") != "FeatureCollection":
        raise CatalogLoadFailure(f"{path} is not a GeoJSON FeatureCollection")
    features = data.get("features")
    if not isinstance(features, list):
        raise CatalogLoadFailure(f"{path} has no features list")
    return features


def _feature_properties(feature) -> dict:
    if not isinstance(feature, dict):
        raise InvalidGeometry(f"Feature must be an object, got {type(feature).__name__}")
    props = feature.get("properties") or {}
    if not isinstance(props, dict):
        raise InvalidGeometry(f"Feature properties must be an object, got {type(props).__name__}")
    return props


def _zone_from_feature(feature: dict) -> RestrictedZone:
    props = _feature_properties(feature)
    boundary = parse_geometry(feature.get("geometry") or {})
    if not isinstance(boundary, Polygon):
        raise InvalidGeometry(f"Zone boundary must be a Polygon, got {boundary.type}")
    check_geometry(boundary)
    return RestrictedZone(
        name=props.get("name"),
        category=props.get("type"),
        boundary=boundary,
        **({"color": props["color"]} if "color" in props else {}),
    )


def _grid_line_from_feature(feature: dict) -> GridLine:
    props = _feature_properties(feature)
    path = parse_geometry(feature.get("geometry") or {})
    if not isinstance(path, LineString):
        raise InvalidGeometry(f"Grid line path must be a LineString, got {path.type}")
    check_geometry(path)
    return GridLine(
        name=props.get("name"),
        voltage_class=props.get("voltage"),
        category=props.get("type"),
        path=path,
    )


def load_catalog(
    zones_path: str | Path | None = None,
    grid_path: str | Path | None = None,
) -> ConstraintCatalog:
    """Load restricted zones and grid lines from GeoJSON files.

    Defaults to the reference data shipped in the package ``data/`` dir.
    """
    zones_path = Path(zones_path) if zones_path else DEFAULT_ZONES_PATH
    grid_path = Path(grid_path) if grid_path else DEFAULT_GRID_PATH

    zones = []
    for i, feature in enumerate(_read_features(zones_path)):
        try:
            zones.append(_zone_from_feature(feature))
        except (ValidationError, InvalidGeometry) as e:
            raise CatalogLoadFailure(f"Malformed restricted zone #{i} in {zones_path}: {e}") from e

    grid_lines = []
    for i, feature in enumerate(_read_features(grid_path)):
        try:
            grid_lines.append(_grid_line_from_feature(feature))
        except (ValidationError, InvalidGeometry) as e:
            raise CatalogLoadFailure(f"Malformed grid line #{i} in {grid_path}: {e}") from e

    logger.info(
        "Constraint catalog loaded: %d restricted zone(s), %d grid line(s)",
        len(zones), len(grid_lines),
    )
    return ConstraintCatalog(zones, grid_lines)
