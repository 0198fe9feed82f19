"""Dataset loading: identifiers to GeoJSON.

An identifier is either a path to a GeoJSON file or a Natural Earth
layer name such as "50mcoastline" or "110mborders". Natural Earth files
are downloaded once into the data directory and read from there after.
"""
import os, re, json
import requests

from geo.types import GeoJSON
from worldmap.constants import NE_RESOLUTIONS, NE_LAYERS, NE_URL, DATA_DIR, DOWNLOAD_TIMEOUT

_NE_ID = re.compile(r"^(\d+m)([a-z]+)$")

# ============================================================
# Error Type
# ============================================================
class LoadError(RuntimeError):
    """Raised when a dataset identifier cannot be resolved to GeoJSON."""

# ============================================================
# Natural Earth Registry
# ============================================================
def dataset_filename(identifier: str) -> str:
    """File name of a registered Natural Earth dataset, e.g. 'ne_50m_coastline.geojson'."""
    m = _NE_ID.match(identifier.strip().lower())
    if not m or m.group(1) not in NE_RESOLUTIONS or m.group(2) not in NE_LAYERS:
        raise LoadError(f"Unknown dataset: {identifier!r}")
    return f"ne_{m.group(1)}_{NE_LAYERS[m.group(2)]}.geojson"


def available_datasets() -> list[str]:
    return [res + layer for res in NE_RESOLUTIONS for layer in NE_LAYERS]

# ============================================================
# Loading
# ============================================================
def read_geojson(path: str) -> GeoJSON:
    """Parse a GeoJSON file; any read or parse failure becomes LoadError."""
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise LoadError(f"Cannot read {path}: {e}") from e
    if not isinstance(data, dict) or "type" not in data:
        raise LoadError(f"Not a GeoJSON object: {path}")
    return data


def download(url: str, path: str) -> None:
    """Fetch url into path, replacing it only once the body is complete."""
    try:
        resp = requests.get(url, timeout=DOWNLOAD_TIMEOUT)
        resp.raise_for_status()
    except requests.RequestException as e:
        raise LoadError(f"Download failed for {url}: {e}") from e
    tmp = path + ".part"
    try:
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        with open(tmp, "wb") as f:
            f.write(resp.content)
        os.replace(tmp, path)
    except OSError as e:
        raise LoadError(f"Cannot cache {url} at {path}: {e}") from e


def load_dataset(identifier: str, data_dir: str | None = None) -> GeoJSON:
    """GeoJSON for a file path or Natural Earth identifier. Raises LoadError."""
    if identifier.lower().endswith((".json", ".geojson")) and os.path.isfile(identifier):
        return read_geojson(identifier)
    name = dataset_filename(identifier)
    path = os.path.join(data_dir or DATA_DIR, name)
    if not os.path.isfile(path):
        download(NE_URL.format(name=name), path)
    return read_geojson(path)
