"""Graticule: meridians and parallels as GeoJSON lines."""
import math

from .types import Point, GeoJSON

_EPS = 1e-6


def _range(start: float, stop: float, step: float) -> list[float]:
    n = max(0, math.ceil((stop - start) / step))
    return [start + i * step for i in range(n)]


def _clamp_lat(y: float) -> float:
    return max(-90.0, min(90.0, y))


def _meridian(x: float, y0: float, y1: float, dy: float) -> list[Point]:
    return [(x, _clamp_lat(y)) for y in _range(y0, y1 - _EPS, dy) + [y1]]


def _parallel(y: float, x0: float, x1: float, dx: float) -> list[Point]:
    return [(x, y) for x in _range(x0, x1 - _EPS, dx) + [x1]]


def graticule_lines(step: Point = (15.0, 15.0), major_step: Point = (90.0, 360.0),
                    precision: float = 2.5) -> list[list[Point]]:
    """Graticule lines in drawing order.

    Major meridians (every major_step[0] degrees) run pole to pole; minor
    meridians and parallels stop at +-80 degrees. Lines are sampled every
    *precision* degrees.
    """
    dx, dy = step; DX, DY = major_step
    X0, X1, Y0, Y1 = -180.0, 180.0, -90.0 - _EPS, 90.0 + _EPS
    x0, x1, y0, y1 = -180.0, 180.0, -80.0 - _EPS, 80.0 + _EPS
    lines = [_meridian(x, Y0, Y1, 90.0) for x in _range(math.ceil(X0 / DX) * DX, X1, DX)]
    lines += [_parallel(y, X0, X1, precision) for y in _range(math.ceil(Y0 / DY) * DY, Y1, DY)]
    lines += [_meridian(x, y0, y1, precision) for x in _range(math.ceil(x0 / dx) * dx, x1, dx)
              if abs(math.fmod(x, DX)) > _EPS]
    lines += [_parallel(y, x0, x1, precision) for y in _range(math.ceil(y0 / dy) * dy, y1, dy)
              if abs(math.fmod(y, DY)) > _EPS]
    return lines


def graticule(step: Point = (15.0, 15.0)) -> GeoJSON:
    """The graticule as one MultiLineString."""
    return {"type": "MultiLineString", "coordinates": graticule_lines(step)}
