"""Geometry math for drawn features: area, length, centroid, distance, overlap.

Inputs are (lon, lat) degree coordinates. Polygon areas use the
spherical-excess ring formula on the WGS84 equatorial radius; lengths use
haversine on the mean Earth radius. Overlay operations (intersection) are
done by shapely in degree space and measured back with the same ring
formula, so a site fully inside a zone measures the same area both ways.
"""

import math

import numpy as np
from shapely.geometry import Polygon as ShapelyPolygon
from shapely.geometry.base import BaseGeometry

from ..errors import InvalidGeometry
from ..models import Circle, LineString, Polygon, Position

WGS84_RADIUS_M = 6_378_137.0
MEAN_EARTH_RADIUS_M = 6_371_008.8

# Areas below this are treated as zero (degenerate rings, zero-radius circles).
AREA_EPSILON_M2 = 1e-6

# Vertex count of the polygon standing in for a circle in overlay operations.
CIRCLE_STEPS = 64


def check_geometry(geometry) -> None:
    """Raise InvalidGeometry if the geometry cannot be measured."""
    match geometry:
        case Polygon(coordinates=ring):
            if len(ring) < 4:
                raise InvalidGeometry(f"Polygon ring needs at least 4 positions, got {len(ring)}")
            if ring[0] != ring[-1]:
                raise InvalidGeometry("Polygon ring is not closed: first and last positions differ")
            _check_positions(ring)
        case LineString(coordinates=coords):
            if len(coords) < 2:
                raise InvalidGeometry(f"LineString needs at least 2 positions, got {len(coords)}")
            _check_positions(coords)
        case Circle(center=center, radius_m=radius):
            if not math.isfinite(radius) or radius < 0:
                raise InvalidGeometry(f"Circle radius must be a finite value >= 0, got {radius}")
            _check_positions([center])
        case _:
            raise InvalidGeometry(f"Unsupported geometry type: {type(geometry).__name__}")


def _check_positions(positions) -> None:
    for i, (lon, lat) in enumerate(positions):
        if not (math.isfinite(lon) and math.isfinite(lat)):
            raise InvalidGeometry(f"Position {i} is not finite: ({lon}, {lat})")
        if not (-180.0 <= lon <= 180.0 and -90.0 <= lat <= 90.0):
            raise InvalidGeometry(f"Position {i} out of range: lon={lon}, lat={lat}")


def _ring_area(coords) -> float:
    """Unsigned spherical area (m²) of a closed ring of (lon, lat) positions."""
    pts = np.asarray(coords, dtype=float)
    if len(pts) < 4:
        return 0.0
    pts = pts[:-1]
    lon = np.radians(pts[:, 0])
    lat = np.radians(pts[:, 1])
    total = np.sum((np.roll(lon, -1) - np.roll(lon, 1)) * np.sin(lat))
    return float(abs(total) * WGS84_RADIUS_M * WGS84_RADIUS_M / 2.0)


def polygon_area(polygon: Polygon) -> float:
    """Area of a polygon ring in square meters, independent of winding."""
    a = _ring_area(polygon.coordinates)
    return a if a >= AREA_EPSILON_M2 else 0.0


def circle_area(circle: Circle) -> float:
    a = math.pi * circle.radius_m * circle.radius_m
    return a if a >= AREA_EPSILON_M2 else 0.0


def area(geometry: Polygon | Circle) -> float:
    match geometry:
        case Polygon():
            return polygon_area(geometry)
        case Circle():
            return circle_area(geometry)
        case _:
            raise InvalidGeometry(f"{type(geometry).__name__} has no area")


def line_length(line: LineString) -> float:
    """Sum of great-circle distances between consecutive vertices, in meters."""
    pts = np.radians(np.asarray(line.coordinates, dtype=float))
    lon, lat = pts[:, 0], pts[:, 1]
    dlat = np.diff(lat)
    dlon = np.diff(lon)
    h = np.sin(dlat / 2.0) ** 2 + np.cos(lat[:-1]) * np.cos(lat[1:]) * np.sin(dlon / 2.0) ** 2
    return float(np.sum(2.0 * MEAN_EARTH_RADIUS_M * np.arcsin(np.sqrt(np.clip(h, 0.0, 1.0)))))


def centroid(geometry: Polygon | LineString | Circle) -> Position:
    """Display point for a geometry (label placement, grid distance origin)."""
    match geometry:
        case Polygon(coordinates=ring):
            return _ring_centroid(ring)
        case Circle(center=center):
            return (float(center[0]), float(center[1]))
        case LineString(coordinates=coords):
            pts = np.asarray(coords, dtype=float)
            lo = pts.min(axis=0)
            hi = pts.max(axis=0)
            return (float((lo[0] + hi[0]) / 2.0), float((lo[1] + hi[1]) / 2.0))
        case _:
            raise InvalidGeometry(f"Unsupported geometry type: {type(geometry).__name__}")


def _ring_centroid(ring) -> Position:
    pts = np.asarray(ring, dtype=float)
    # Shift to the first vertex to keep the cross products well conditioned.
    origin = pts[0]
    local = pts - origin
    x0, y0 = local[:-1, 0], local[:-1, 1]
    x1, y1 = local[1:, 0], local[1:, 1]
    cross = x0 * y1 - x1 * y0
    signed = cross.sum() / 2.0
    if abs(signed) < 1e-18:
        mean = pts[:-1].mean(axis=0)
        return (float(mean[0]), float(mean[1]))
    cx = ((x0 + x1) * cross).sum() / (6.0 * signed)
    cy = ((y0 + y1) * cross).sum() / (6.0 * signed)
    return (float(cx + origin[0]), float(cy + origin[1]))


def distance_point_to_line(point: Position, line: LineString) -> float:
    """Minimum distance in meters from a point to any segment of a line.

    Segments are projected onto a local equirectangular plane centred on the
    point; the perpendicular foot is clamped to each segment's endpoints.
    """
    lon0, lat0 = point
    m_per_deg = math.pi / 180.0 * MEAN_EARTH_RADIUS_M
    pts = np.asarray(line.coordinates, dtype=float)
    x = (pts[:, 0] - lon0) * m_per_deg * math.cos(math.radians(lat0))
    y = (pts[:, 1] - lat0) * m_per_deg

    ax, ay = x[:-1], y[:-1]
    dx, dy = x[1:] - ax, y[1:] - ay
    seg_len2 = dx * dx + dy * dy
    with np.errstate(divide="ignore", invalid="ignore"):
        t = np.where(seg_len2 > 0, -(ax * dx + ay * dy) / seg_len2, 0.0)
    t = np.clip(t, 0.0, 1.0)
    return float(np.min(np.hypot(ax + t * dx, ay + t * dy)))


def circle_to_polygon(circle: Circle, steps: int = CIRCLE_STEPS) -> Polygon:
    """Approximate a circle by a closed ring of destination points."""
    lon1 = math.radians(circle.center[0])
    lat1 = math.radians(circle.center[1])
    delta = circle.radius_m / MEAN_EARTH_RADIUS_M
    bearings = np.radians(np.arange(steps) * (360.0 / steps))

    lat2 = np.arcsin(
        math.sin(lat1) * math.cos(delta) + math.cos(lat1) * math.sin(delta) * np.cos(bearings)
    )
    lon2 = lon1 + np.arctan2(
        np.sin(bearings) * math.sin(delta) * math.cos(lat1),
        math.cos(delta) - math.sin(lat1) * np.sin(lat2),
    )
    ring = [(float(lo), float(la)) for lo, la in zip(np.degrees(lon2), np.degrees(lat2))]
    ring.append(ring[0])
    return Polygon(coordinates=ring)


def _to_shapely(site: Polygon | Circle) -> ShapelyPolygon:
    match site:
        case Polygon(coordinates=ring):
            return ShapelyPolygon(ring)
        case Circle():
            return ShapelyPolygon(circle_to_polygon(site).coordinates)
        case _:
            raise InvalidGeometry(f"{type(site).__name__} is not a site shape")


def overlap_basis_area(site: Polygon | Circle) -> float:
    """Area of the shape that takes part in overlay operations.

    Equal to ``area`` for polygons; for circles it is the area of the
    polygon approximation, so a contained circle measures 100% overlap.
    """
    match site:
        case Circle():
            if circle_area(site) == 0.0:
                return 0.0
            return polygon_area(circle_to_polygon(site))
        case _:
            return area(site)


def _shapely_area(geom: BaseGeometry) -> float:
    if geom.is_empty:
        return 0.0
    if geom.geom_type == "Polygon":
        holes = sum(_ring_area(r.coords) for r in geom.interiors)
        return max(_ring_area(geom.exterior.coords) - holes, 0.0)
    if hasattr(geom, "geoms"):
        return sum(_shapely_area(g) for g in geom.geoms)
    # Points and lines left over from touching boundaries carry no area.
    return 0.0


def intersects(a: Polygon | Circle, b: Polygon | Circle) -> bool:
    """True when the shapes share any point, including containment."""
    return bool(_to_shapely(a).intersects(_to_shapely(b)))


def intersection_area(a: Polygon | Circle, b: Polygon | Circle) -> float | None:
    """Area (m²) of the overlap of two site shapes, or None without interior overlap."""
    if overlap_basis_area(a) == 0.0 or overlap_basis_area(b) == 0.0:
        return None
    sa, sb = _to_shapely(a), _to_shapely(b)
    if not sa.intersects(sb):
        return None
    overlap = _shapely_area(sa.intersection(sb))
    return overlap if overlap > AREA_EPSILON_M2 else None
