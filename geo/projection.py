"""Projection objects: a raw projection composed with rotation, scale, translate.

Coordinates in are (longitude, latitude) degrees; coordinates out are
canvas (x, y) with y pointing down. Setters return the projection so
calls chain:

    proj = Projection(Winkel3()).scale(200).translate((600, 400))
"""
import math
import numpy as np

from .types import Point, Extent, Bounds, GeoJSON
from .rotation import Rotation, densify

# Longest great-circle step (radians) between projected points
RESAMPLE_STEP = math.radians(2.0)

# ============================================================
# Error Type
# ============================================================
class ProjectionError(ValueError):
    """Raised when a projection cannot be fitted to an object."""

# ============================================================
# Raw Projections
# ============================================================
class RawProjection:
    """Unit-scale projection of rotated (lam, phi) radians to y-up plane coordinates.

    Subclasses implement forward() and outline(). pieces() splits a
    densified line wherever the projection is interrupted; the default
    projection is continuous everywhere.
    """
    default_scale = 150.0
    default_angle = 0.0
    default_center: Point = (0.0, 0.0)

    def forward(self, lam: np.ndarray, phi: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        raise NotImplementedError

    def outline(self) -> tuple[np.ndarray, np.ndarray]:
        """Closed ring (without repeated end point) bounding the projected sphere."""
        raise NotImplementedError

    def pieces(self, lam: np.ndarray, phi: np.ndarray) -> list[tuple[np.ndarray, np.ndarray]]:
        return [(lam, phi)]

# ============================================================
# Projection
# ============================================================
class Projection:
    """Configured transform from geographic to canvas coordinates."""

    def __init__(self, raw: RawProjection):
        self.raw = raw
        self._rotation = Rotation((0.0, 0.0, 0.0))
        self._k = raw.default_scale
        self._x, self._y = 480.0, 250.0
        self._center = raw.default_center
        self._alpha = math.radians(raw.default_angle)
        self._recenter()

    # --- accessors ---

    def rotate(self, angles=None):
        """Get or set the (lam, phi, gamma) rotation in degrees."""
        if angles is None:
            return self._rotation.angles
        self._rotation = Rotation(angles)
        return self

    def scale(self, k: float | None = None):
        if k is None:
            return self._k
        self._k = float(k)
        return self._recenter()

    def translate(self, t: Point | None = None):
        if t is None:
            return (self._x, self._y)
        self._x, self._y = float(t[0]), float(t[1])
        return self._recenter()

    def center(self, c: Point | None = None):
        """Get or set the (lon, lat) that projects onto the translate point."""
        if c is None:
            return self._center
        self._center = (float(c[0]), float(c[1]))
        return self._recenter()

    def angle(self, deg: float | None = None):
        """Get or set the post-projection rotation in degrees."""
        if deg is None:
            return math.degrees(self._alpha)
        self._alpha = math.radians(deg)
        return self._recenter()

    def _recenter(self):
        cx, cy = self.raw.forward(np.radians([self._center[0]]), np.radians([self._center[1]]))
        cx, cy = float(cx[0]), float(cy[0])
        self._a = math.cos(self._alpha) * self._k
        self._b = math.sin(self._alpha) * self._k
        self._dx = self._x - (self._a * cx - self._b * cy)
        self._dy = self._y + (self._b * cx + self._a * cy)
        return self

    # --- projecting ---

    def transform(self, x: np.ndarray, y: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        """Raw plane coordinates to canvas coordinates."""
        return (self._a * x - self._b * y + self._dx,
                self._dy - self._b * x - self._a * y)

    def project(self, lons, lats) -> tuple[np.ndarray, np.ndarray]:
        """Project arrays of degrees point by point (no resampling or cutting)."""
        lam, phi = self._rotation(np.radians(np.asarray(lons, dtype=float)),
                                  np.radians(np.asarray(lats, dtype=float)))
        return self.transform(*self.raw.forward(lam, phi))

    def __call__(self, point: Point) -> Point:
        x, y = self.project([point[0]], [point[1]])
        return (float(x[0]), float(y[0]))

    def lines(self, coords, closed: bool = False) -> list[tuple[np.ndarray, bool]]:
        """Project a line or ring into canvas polylines.

        coords is a sequence of (lon, lat, ...) degrees. Edges are resampled
        along great circles and cut where the projection is interrupted.
        Returns (xy array of shape (n, 2), closed) pairs; a ring that gets
        cut comes back as open pieces.
        """
        # positions may carry altitude or more; only lon, lat are projected
        pts = np.array([p[:2] for p in coords], dtype=float).reshape(-1, 2)
        pts = pts[np.all(np.isfinite(pts), axis=1)]
        if closed and len(pts) > 1 and np.array_equal(pts[0], pts[-1]):
            pts = pts[:-1]
        if len(pts) == 0:
            return []
        if closed:
            pts = np.vstack([pts, pts[:1]])
        lam, phi = densify(np.radians(pts[:, 0]), np.radians(pts[:, 1]), RESAMPLE_STEP)
        lam, phi = self._rotation(lam, phi)
        pieces = self.raw.pieces(lam, phi)
        if closed:
            if len(pieces) == 1:
                pieces = [(lam[:-1], phi[:-1])]
            else:
                # rejoin the piece that wraps past the ring's start point
                last_lam, last_phi = pieces.pop()
                first_lam, first_phi = pieces[0]
                pieces[0] = (np.concatenate([last_lam, first_lam[1:]]),
                             np.concatenate([last_phi, first_phi[1:]]))
                closed = False
        out = []
        for p_lam, p_phi in pieces:
            x, y = self.raw.forward(p_lam, p_phi)
            for xy in _finite_runs(np.column_stack(self.transform(x, y))):
                out.append((xy, closed and len(pieces) == 1 and len(xy) == len(p_lam)))
        return out

    def outline(self) -> np.ndarray:
        """Canvas ring of the projected sphere, shape (n, 2)."""
        return np.column_stack(self.transform(*self.raw.outline()))

    # --- fitting ---

    def fit_extent(self, extent: Extent, obj: GeoJSON):
        """Set scale and translate so obj fills extent ((x0, y0), (x1, y1)), centred."""
        from .path import GeoPath
        self._k = 150.0; self._x, self._y = 0.0, 0.0
        self._recenter()
        b = GeoPath(self).bounds(obj)
        if not (b.width > 0 and b.height > 0 and math.isfinite(b.width) and math.isfinite(b.height)):
            raise ProjectionError(f"Cannot fit object with projected bounds {tuple(b)}")
        (x0, y0), (x1, y1) = extent
        w = x1 - x0; h = y1 - y0
        k = min(w / b.width, h / b.height)
        x = x0 + (w - k * (b.x1 + b.x0)) / 2
        y = y0 + (h - k * (b.y1 + b.y0)) / 2
        self._k = 150.0 * k; self._x, self._y = x, y
        return self._recenter()

    def fit_size(self, size: Point, obj: GeoJSON):
        return self.fit_extent(((0.0, 0.0), size), obj)


def _finite_runs(xy: np.ndarray) -> list[np.ndarray]:
    """Split a polyline at non-finite points."""
    ok = np.all(np.isfinite(xy), axis=1)
    if ok.all():
        return [xy]
    cuts = np.flatnonzero(np.diff(ok.astype(int))) + 1
    return [run for run in np.split(xy, cuts) if np.all(np.isfinite(run))]
