"""Canvas, style, and dataset constants for map rendering.

Dimensions are SVG user units.
"""
import os

# Canvas
WIDTH, HEIGHT = 1200, 800

# Render option defaults
DEFAULT_PROJECTION = "WB"
DEFAULT_MAPDATA = "50mcoastline"
DEFAULT_OUTPUT = "map.svg"

# Projection scales, as a fraction of canvas width
WATERMAN_SCALE = WIDTH / 10
WINKEL3_SCALE = WIDTH / 6

# Graticule
GRATICULE_STEP = (15.0, 15.0)     # degrees lon, lat
GRATICULE_STROKE = "#666"
GRATICULE_WIDTH = "0.5"
GRATICULE_DASH = "2,2"

# Natural Earth datasets: identifier "<resolution><layer>", e.g. "50mcoastline"
NE_RESOLUTIONS = ("10m", "50m", "110m")
NE_LAYERS = {
    "coastline": "coastline",
    "land": "land",
    "ocean": "ocean",
    "lakes": "lakes",
    "rivers": "rivers_lake_centerlines",
    "borders": "admin_0_boundary_lines_land",
}
NE_URL = "https://raw.githubusercontent.com/nvkelso/natural-earth-vector/master/geojson/{name}"
DATA_DIR = os.path.join(os.path.expanduser("~"), ".cache", "worldmap")
DOWNLOAD_TIMEOUT = 120.0          # seconds
