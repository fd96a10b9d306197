"""Pydantic domain models for drawn geometries.

Coordinates are (longitude, latitude) pairs in decimal degrees, matching
GeoJSON axis order. Models are frozen: an edit produces a new geometry.
Structural rules (vertex counts, closed rings, radius sign) are enforced by
``core.geometry.check_geometry`` so that they surface as ``InvalidGeometry``.
"""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from .errors import InvalidGeometry

Position = tuple[float, float]


class Polygon(BaseModel):
    """A single closed ring (first vertex repeated as last)."""
    model_config = ConfigDict(frozen=True)

    type: Literal["Polygon"] = "Polygon"
    coordinates: tuple[Position, ...]


class LineString(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["LineString"] = "LineString"
    coordinates: tuple[Position, ...]


class Circle(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["Circle"] = "Circle"
    center: Position
    radius_m: float


Geometry = Annotated[Union[Polygon, LineString, Circle], Field(discriminator="type")]

_geometry_adapter = TypeAdapter(Geometry)


def parse_geometry(payload: dict[str, Any]) -> Polygon | LineString | Circle:
    """Build a geometry from a drawing-tool payload.

    Accepts bare GeoJSON geometries, GeoJSON Features, the native
    ``{"type": "Circle", "center": ..., "radius_m": ...}`` form, and the
    draw tool's circle encoding (a Point carrying ``radiusMeters``).
    """
    if not isinstance(payload, dict):
        raise InvalidGeometry(f"Geometry payload must be an object, got {type(payload).__name__}")

    properties = {}
    if payload.get("type") == "Feature":
        properties = payload.get("properties") or {}
        payload = payload.get("geometry") or {}
        if not isinstance(payload, dict):
            raise InvalidGeometry(f"Feature geometry must be an object, got {type(payload).__name__}")
        if not isinstance(properties, dict):
            raise InvalidGeometry(f"Feature properties must be an object, got {type(properties).__name__}")

    kind = payload.get("type")
    if kind == "Polygon":
        rings = payload.get("coordinates")
        if not isinstance(rings, (list, tuple)):
            raise InvalidGeometry(f"Polygon coordinates must be a list of rings, got {type(rings).__name__}")
        if not rings:
            raise InvalidGeometry("Polygon has no rings")
        # Holes are not produced by the drawing tool; only the outer ring is kept.
        data = {"type": "Polygon", "coordinates": rings[0]}
    elif kind == "Point":
        radius = properties.get("radiusMeters", payload.get("radiusMeters"))
        if radius is None:
            raise InvalidGeometry("Point geometry without radiusMeters is not a circle")
        data = {"type": "Circle", "center": payload.get("coordinates"), "radius_m": radius}
    else:
        data = payload

    try:
        return _geometry_adapter.validate_python(data)
    except ValidationError as e:
        raise InvalidGeometry(f"Malformed {kind or 'geometry'} payload: {e}") from e
