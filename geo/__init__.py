"""Projection capability layer: rotation, projections, graticule, SVG path data."""

from .types import Point, Extent, Bounds, GeoJSON
from .rotation import Rotation, densify
from .projection import Projection, RawProjection, ProjectionError
from .winkel import Winkel3
from .polyhedral import Waterman
from .graticule import graticule, graticule_lines
from .path import GeoPath, GeoJSONError, fmt_num


def winkel3() -> Projection:
    """Winkel Tripel projection with default scale and translate."""
    return Projection(Winkel3())


def waterman() -> Projection:
    """Waterman butterfly projection with default scale, angle and center."""
    return Projection(Waterman())
