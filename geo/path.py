"""SVG path data for GeoJSON objects under a projection."""
from typing import Iterator
import numpy as np

from .types import Bounds, GeoJSON

# ============================================================
# Error Type
# ============================================================
class GeoJSONError(ValueError):
    """Raised for GeoJSON objects the path generator cannot read."""

# ============================================================
# Number Formatting
# ============================================================
def fmt_num(v: float, digits: int = 3) -> str:
    """Fixed-point number with trailing zeros removed, e.g. 12.5 -> '12.5', 3.0 -> '3'."""
    s = f"{v:.{digits}f}"
    if "." in s:
        s = s.rstrip("0").rstrip(".")
    return "0" if s == "-0" else s

# ============================================================
# Path Generator
# ============================================================
class GeoPath:
    """Renders GeoJSON through a projection as SVG path data (M/L/Z commands).

    Points and MultiPoints produce nothing. Polygon rings close with Z
    unless the projection cuts them.
    """

    def __init__(self, projection, digits: int = 3):
        self.projection = projection
        self.digits = digits

    def __call__(self, obj: GeoJSON) -> str:
        return "".join(self._piece_data(xy, closed) for xy, closed in self.pieces(obj))

    def bounds(self, obj: GeoJSON) -> Bounds:
        """Projected bounding box of obj; inverted infinities when nothing is drawn."""
        arrays = [xy for xy, _ in self.pieces(obj)]
        if not arrays:
            return Bounds(np.inf, np.inf, -np.inf, -np.inf)
        xy = np.vstack(arrays)
        lo = xy.min(axis=0); hi = xy.max(axis=0)
        return Bounds(float(lo[0]), float(lo[1]), float(hi[0]), float(hi[1]))

    def pieces(self, obj: GeoJSON) -> Iterator[tuple[np.ndarray, bool]]:
        """Projected polylines (xy array, closed) making up obj."""
        kind = obj.get("type") if isinstance(obj, dict) else None
        if kind == "Sphere":
            yield self.projection.outline(), True
        elif kind == "FeatureCollection":
            for feature in obj.get("features", []):
                yield from self.pieces(feature)
        elif kind == "Feature":
            if obj.get("geometry") is not None:
                yield from self.pieces(obj["geometry"])
        elif kind == "GeometryCollection":
            for geometry in obj.get("geometries", []):
                yield from self.pieces(geometry)
        elif kind == "LineString":
            yield from self._lines(obj["coordinates"], False)
        elif kind == "MultiLineString":
            for line in obj["coordinates"]:
                yield from self._lines(line, False)
        elif kind == "Polygon":
            for ring in obj["coordinates"]:
                yield from self._lines(ring, True)
        elif kind == "MultiPolygon":
            for polygon in obj["coordinates"]:
                for ring in polygon:
                    yield from self._lines(ring, True)
        elif kind in ("Point", "MultiPoint"):
            return
        else:
            raise GeoJSONError(f"Unsupported GeoJSON type: {kind!r}")

    def _lines(self, coords, closed: bool) -> Iterator[tuple[np.ndarray, bool]]:
        if len(coords) == 0:
            return
        for xy, is_closed in self.projection.lines(coords, closed):
            if len(xy) > 1:
                yield xy, is_closed

    def _piece_data(self, xy: np.ndarray, closed: bool) -> str:
        d = self.digits
        pts = [f"{fmt_num(x, d)},{fmt_num(y, d)}" for x, y in xy]
        return "M" + "L".join(pts) + ("Z" if closed else "")
