"""Render options and style overrides."""
from typing import NamedTuple

from worldmap.constants import DEFAULT_PROJECTION, DEFAULT_MAPDATA, DEFAULT_OUTPUT


class MapStyles(NamedTuple):
    """Stroke and fill settings; values are SVG attribute strings."""
    linethickness: str = "1"
    linecolor: str = "black"
    outlinethickness: str = "0.5"
    outlinecolor: str = "black"
    showgraticules: str = "true"
    background: str = "white"

    def graticules_shown(self) -> bool:
        return self.showgraticules.lower() == "true"


DEFAULT_STYLES = MapStyles()

STYLE_KEYS = MapStyles._fields


def _style_value(v) -> str:
    if isinstance(v, bool):
        return "true" if v else "false"
    return str(v)


def merge_styles(overrides: dict | None = None) -> MapStyles:
    """Defaults with the given keys replaced. None values count as not given.

    Raises ValueError naming any key that is not a style field.
    """
    if not overrides:
        return DEFAULT_STYLES
    unknown = sorted(k for k in overrides if k not in STYLE_KEYS)
    if unknown:
        raise ValueError(f"Unknown style option(s): {', '.join(unknown)}")
    return DEFAULT_STYLES._replace(
        **{k: _style_value(v) for k, v in overrides.items() if v is not None})


class RenderOptions(NamedTuple):
    """Inputs for one map render."""
    projection: str = DEFAULT_PROJECTION
    mapdata: str = DEFAULT_MAPDATA     # comma-separated dataset identifiers
    output: str = DEFAULT_OUTPUT
    center: str | None = None          # "lat,lon"
    bounds: str | None = None          # "minLat,maxLat,minLon,maxLon"
    styles: dict | None = None

    def datasets(self) -> list[str]:
        """Dataset identifiers in drawing order."""
        return [d.strip() for d in self.mapdata.split(",")]
