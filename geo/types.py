"""Shared type definitions for the geo package."""
from typing import Any, NamedTuple

Point = tuple[float, float]
Extent = tuple[Point, Point]
GeoJSON = dict[str, Any]

class Bounds(NamedTuple):
    x0: float; y0: float; x1: float; y1: float

    @property
    def width(self) -> float:
        return self.x1 - self.x0

    @property
    def height(self) -> float:
        return self.y1 - self.y0

# Affine map (a, b, c, d, e, f): x' = a*x + b*y + c, y' = d*x + e*y + f
Affine = tuple[float, float, float, float, float, float]
