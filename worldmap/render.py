"""Render an SVG world map: projection, sphere background, graticule, datasets.

The document is built in memory as a list of SVG lines, then written to
the output path in a single write and returned.
"""
import math
from html import escape
from typing import Callable

from geo import GeoPath, Projection, Waterman, Winkel3, graticule
from geo.types import GeoJSON
from worldmap.constants import (
    WIDTH, HEIGHT, WATERMAN_SCALE, WINKEL3_SCALE,
    GRATICULE_STEP, GRATICULE_STROKE, GRATICULE_WIDTH, GRATICULE_DASH,
)
from worldmap.options import RenderOptions, MapStyles, merge_styles
from worldmap.datasets import load_dataset

Loader = Callable[[str], GeoJSON]

# ============================================================
# Error Types
# ============================================================
class UnsupportedProjectionError(ValueError):
    """Raised for a projection identifier other than WB or W3."""

class InvalidBoundsError(ValueError):
    """Raised when a bounds string does not hold four numbers."""

# ============================================================
# Parsing
# ============================================================
def _number(s: str) -> float | None:
    try:
        v = float(s)
    except ValueError:
        return None
    return v if math.isfinite(v) else None


def parse_center(center: str | None) -> tuple[float, float] | None:
    """(lat, lon) from "lat,lon", or None if either part is not a number."""
    if not center:
        return None
    parts = center.split(",")
    if len(parts) < 2:
        return None
    lat, lon = _number(parts[0]), _number(parts[1])
    if lat is None or lon is None:
        return None
    return lat, lon


def parse_bounds(bounds: str) -> tuple[float, float, float, float]:
    """(min_lat, max_lat, min_lon, max_lon) from "minLat,maxLat,minLon,maxLon"."""
    parts = bounds.split(",")
    values = [_number(p) for p in parts]
    if len(values) != 4 or any(v is None for v in values):
        raise InvalidBoundsError(
            f"Invalid bounds format {bounds!r}. Expected: minLat,maxLat,minLon,maxLon")
    return tuple(values)

# ============================================================
# Projection Setup
# ============================================================
def setup_projection(projection_type: str, center: str | None = None) -> Projection:
    """Configured projection for "WB" (Waterman butterfly) or "W3" (Winkel Tripel).

    A center that does not parse is ignored rather than rejected.
    """
    kind = projection_type.upper()
    if kind == "WB":
        proj = Projection(Waterman()).scale(WATERMAN_SCALE)
    elif kind == "W3":
        proj = Projection(Winkel3()).scale(WINKEL3_SCALE)
    else:
        raise UnsupportedProjectionError(f"Unsupported projection type: {projection_type}")
    proj.translate((WIDTH / 2, HEIGHT / 2))
    c = parse_center(center)
    if c is not None:
        lat, lon = c
        proj.rotate((lon, lat, 0.0))
    return proj


def bounding_box(min_lat: float, max_lat: float, min_lon: float, max_lon: float) -> GeoJSON:
    """Polygon feature for a lon/lat rectangle, ring starting at the south-west corner."""
    ring = [[min_lon, min_lat], [min_lon, max_lat], [max_lon, max_lat],
            [max_lon, min_lat], [min_lon, min_lat]]
    return {"type": "Feature", "properties": {},
            "geometry": {"type": "Polygon", "coordinates": [ring]}}


def apply_bounds(projection: Projection, bounds: str) -> Projection:
    """Fit projection so the bounds rectangle fills the canvas, replacing scale and translate."""
    feature = bounding_box(*parse_bounds(bounds))
    return projection.fit_extent(((0, 0), (WIDTH, HEIGHT)), feature)

# ============================================================
# SVG Elements
# ============================================================
def _attr(v) -> str:
    return escape(str(v), quote=True)


def sphere_defs(path: GeoPath) -> list[str]:
    return [
        '<defs>',
        f'  <path id="sphere" d="{path({"type": "Sphere"})}"/>',
        '  <clipPath id="clip"><use href="#sphere"/></clipPath>',
        '</defs>',
    ]


def background(styles: MapStyles) -> str:
    return (f'<use href="#sphere" fill="{_attr(styles.background)}"'
            f' stroke="{_attr(styles.outlinecolor)}" stroke-width="{_attr(styles.outlinethickness)}"/>')


def graticule_path(path: GeoPath) -> str:
    return (f'<path d="{path(graticule(GRATICULE_STEP))}" clip-path="url(#clip)" fill="none"'
            f' stroke="{GRATICULE_STROKE}" stroke-width="{GRATICULE_WIDTH}"'
            f' stroke-dasharray="{GRATICULE_DASH}"/>')


def dataset_path(path: GeoPath, data: GeoJSON, styles: MapStyles) -> str:
    return (f'<path d="{path(data)}" clip-path="url(#clip)" fill="none"'
            f' stroke="{_attr(styles.linecolor)}" stroke-width="{_attr(styles.linethickness)}"/>')

# ============================================================
# Map Renderer
# ============================================================
def render_map(options: RenderOptions, loader: Loader = load_dataset) -> str:
    """Render the map described by options, write it to options.output, return the SVG.

    Datasets are loaded one at a time in the order given and drawn in
    that order. Loader and write errors propagate unchanged.
    """
    datasets = options.datasets()
    styles = merge_styles(options.styles)

    proj = setup_projection(options.projection, options.center)
    if options.bounds:
        apply_bounds(proj, options.bounds)
    path = GeoPath(proj)

    lines = [f'<svg xmlns="http://www.w3.org/2000/svg" width="{WIDTH}" height="{HEIGHT}"'
             f' viewBox="0 0 {WIDTH} {HEIGHT}">']
    lines.extend(sphere_defs(path))
    lines.append(background(styles))
    if styles.graticules_shown():
        lines.append(graticule_path(path))
    for name in datasets:
        lines.append(dataset_path(path, loader(name), styles))
    lines.append('</svg>')

    svg_content = "\n".join(lines)
    with open(options.output, "w", encoding="utf-8") as f:
        f.write(svg_content)
    return svg_content
