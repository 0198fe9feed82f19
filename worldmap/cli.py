"""Command line entry point: render a map to an SVG file."""
import sys, argparse
from functools import partial

from worldmap.constants import DEFAULT_PROJECTION, DEFAULT_MAPDATA, DEFAULT_OUTPUT
from worldmap.options import RenderOptions, STYLE_KEYS
from worldmap.datasets import LoadError, load_dataset, available_datasets
from worldmap.render import render_map


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="worldmap", description="Render an SVG world map.")
    p.add_argument("-p", "--projection", default=DEFAULT_PROJECTION,
                   help="WB (Waterman butterfly) or W3 (Winkel Tripel)")
    p.add_argument("-d", "--mapdata", default=DEFAULT_MAPDATA,
                   help="comma-separated datasets or GeoJSON paths, e.g. 50mcoastline,50mrivers")
    p.add_argument("-o", "--output", default=DEFAULT_OUTPUT, help="SVG file to write")
    p.add_argument("-c", "--center", help='rotate to center "lat,lon"')
    p.add_argument("-b", "--bounds", help='fit to "minLat,maxLat,minLon,maxLon"')
    for key in STYLE_KEYS:
        p.add_argument(f"--{key}", help=f"style override for {key}")
    p.add_argument("--data-dir", help="directory caching downloaded datasets")
    p.add_argument("--list-datasets", action="store_true", help="print dataset names and exit")
    return p


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    if args.list_datasets:
        for name in available_datasets():
            print(name)
        return 0

    styles = {k: getattr(args, k) for k in STYLE_KEYS if getattr(args, k) is not None}
    options = RenderOptions(
        projection=args.projection, mapdata=args.mapdata, output=args.output,
        center=args.center, bounds=args.bounds, styles=styles or None,
    )
    loader = partial(load_dataset, data_dir=args.data_dir) if args.data_dir else load_dataset

    print(f"Rendering {options.projection} map: {', '.join(options.datasets())}")
    try:
        svg_content = render_map(options, loader)
    except (ValueError, LoadError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    print(f"SVG written to {options.output} ({len(svg_content)} bytes)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
