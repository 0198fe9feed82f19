"""SVG world map rendering: projection setup, bounds fitting, datasets, output."""

from .options import RenderOptions, MapStyles, DEFAULT_STYLES, merge_styles
from .datasets import LoadError, load_dataset, dataset_filename
from .render import (
    UnsupportedProjectionError, InvalidBoundsError,
    setup_projection, apply_bounds, bounding_box, parse_center, parse_bounds,
    render_map,
)
from .constants import WIDTH, HEIGHT
