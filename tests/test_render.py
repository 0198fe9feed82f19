"""Tests for worldmap/render.py projection setup, bounds fitting and SVG output."""
import math
import re
import pytest

from geo import GeoPath
from worldmap.constants import WIDTH, HEIGHT
from worldmap.datasets import LoadError
from worldmap.options import RenderOptions
from worldmap.render import (
    UnsupportedProjectionError, InvalidBoundsError,
    setup_projection, apply_bounds, bounding_box, parse_center, parse_bounds,
    render_map,
)

_DATASET_PATH = re.compile(r'<path d="([^"]*)" clip-path="url\(#clip\)" fill="none" stroke="black" stroke-width="1"/>')


def _render(tmp_path, loader, **kw):
    kw.setdefault("output", str(tmp_path / "map.svg"))
    return render_map(RenderOptions(**kw), loader)


# ============================================================
# Projection Setup
# ============================================================
class TestSetupProjection:
    @pytest.mark.parametrize("name,scale", [("WB", WIDTH / 10), ("wb", WIDTH / 10),
                                            ("W3", WIDTH / 6), ("w3", WIDTH / 6)])
    def test_supported(self, name, scale):
        proj = setup_projection(name)
        assert abs(proj.scale() - scale) < 1e-12
        assert proj.translate() == (WIDTH / 2, HEIGHT / 2)

    @pytest.mark.parametrize("name", ["XX", "mercator", "", "W"])
    def test_unsupported(self, name):
        with pytest.raises(UnsupportedProjectionError) as exc:
            setup_projection(name)
        assert f"Unsupported projection type: {name}" in str(exc.value)

    def test_center_rotates_lon_lat(self):
        proj = setup_projection("W3", "50,200")
        assert proj.rotate() == (200.0, 50.0, 0.0)

    @pytest.mark.parametrize("center", ["abc,50", "50,abc", "50", "", None, "nan,10"])
    def test_bad_center_ignored(self, center):
        assert setup_projection("W3", center).rotate() == (0.0, 0.0, 0.0)

    def test_winkel_standard_parallel(self):
        # (pi/2)(1 + 2/pi)/2 at the equator, scaled by width/6
        x, y = setup_projection("W3")((90, 0))
        assert abs(x - (WIDTH / 2 + WIDTH / 6 * (math.pi / 2) * (1 + 2 / math.pi) / 2)) < 1e-6
        assert abs(y - HEIGHT / 2) < 1e-9

    def test_winkel_origin_at_canvas_center(self):
        x, y = setup_projection("W3")((0, 0))
        assert abs(x - WIDTH / 2) < 1e-9 and abs(y - HEIGHT / 2) < 1e-9


class TestParsing:
    def test_parse_center(self):
        assert parse_center(" 40.5 , -73 ") == (40.5, -73.0)

    def test_parse_bounds(self):
        assert parse_bounds("10,20,30,40") == (10.0, 20.0, 30.0, 40.0)

    @pytest.mark.parametrize("bounds", ["10,x,30,40", "10,20,30", "10,20,30,40,50", "a,b,c,d", ",,,"])
    def test_invalid_bounds(self, bounds):
        with pytest.raises(InvalidBoundsError, match="minLat,maxLat,minLon,maxLon"):
            parse_bounds(bounds)


# ============================================================
# Bounds Fitting
# ============================================================
class TestApplyBounds:
    def test_bounding_box_ring(self):
        ring = bounding_box(10, 20, 30, 40)["geometry"]["coordinates"][0]
        assert ring == [[30, 10], [30, 20], [40, 20], [40, 10], [30, 10]]

    @pytest.mark.parametrize("name", ["W3", "WB"])
    def test_box_fills_canvas(self, name):
        proj = apply_bounds(setup_projection(name), "10,20,30,40")
        b = GeoPath(proj).bounds(bounding_box(10, 20, 30, 40))
        # centred, touching the canvas edges on the limiting axis
        assert abs((b.x0 + b.x1) / 2 - WIDTH / 2) < 1e-6
        assert abs((b.y0 + b.y1) / 2 - HEIGHT / 2) < 1e-6
        assert abs(max(b.width / WIDTH, b.height / HEIGHT) - 1) < 1e-9

    @pytest.mark.parametrize("name", ["W3", "WB"])
    def test_corners_on_canvas(self, name):
        proj = apply_bounds(setup_projection(name), "10,20,30,40")
        for corner in [(30, 10), (30, 20), (40, 20), (40, 10)]:
            x, y = proj(corner)
            assert -1e-6 <= x <= WIDTH + 1e-6
            assert -1e-6 <= y <= HEIGHT + 1e-6

    @pytest.mark.parametrize("name", ["W3", "WB"])
    def test_limiting_axis_touches_edges(self, name):
        proj = apply_bounds(setup_projection(name), "10,20,30,40")
        b = GeoPath(proj).bounds(bounding_box(10, 20, 30, 40))
        if b.width / WIDTH >= b.height / HEIGHT:
            assert abs(b.x0) < 1e-6 and abs(b.x1 - WIDTH) < 1e-6
        else:
            assert abs(b.y0) < 1e-6 and abs(b.y1 - HEIGHT) < 1e-6

    def test_wide_box_corners_on_side_edges(self):
        # 60 x 10 degrees: width limits, and under Winkel Tripel the
        # western meridian and the south-east corner are the x extremes
        proj = apply_bounds(setup_projection("W3"), "10,20,0,60")
        xs = [proj(c)[0] for c in [(0, 10), (0, 20), (60, 20), (60, 10)]]
        assert abs(xs[0]) < 1e-6 and abs(xs[1]) < 1e-6
        assert abs(xs[3] - WIDTH) < 1e-6
        assert xs[2] < WIDTH

    def test_overrides_scale(self):
        proj = apply_bounds(setup_projection("W3"), "10,20,30,40")
        assert proj.scale() > WIDTH / 6 * 5
        assert proj.translate() != (WIDTH / 2, HEIGHT / 2)

    def test_invalid_bounds(self):
        with pytest.raises(InvalidBoundsError):
            apply_bounds(setup_projection("W3"), "10,x,30,40")


# ============================================================
# Map Renderer
# ============================================================
class TestRenderMap:
    def test_writes_and_returns(self, tmp_path, loader_calls):
        svg = _render(tmp_path, loader_calls, mapdata="a")
        assert (tmp_path / "map.svg").read_text(encoding="utf-8") == svg

    def test_document_frame(self, tmp_path, loader_calls):
        svg = _render(tmp_path, loader_calls, mapdata="a")
        assert svg.startswith('<svg xmlns="http://www.w3.org/2000/svg" width="1200" height="800"'
                              ' viewBox="0 0 1200 800">')
        assert svg.endswith("</svg>")
        assert svg.count('<path id="sphere"') == 1
        assert svg.count('<clipPath id="clip"><use href="#sphere"/></clipPath>') == 1

    def test_background_uses_styles(self, tmp_path, loader_calls):
        svg = _render(tmp_path, loader_calls, mapdata="a",
                      styles={"background": "ivory", "outlinecolor": "navy", "outlinethickness": "2"})
        assert svg.count('<use href="#sphere" fill="ivory" stroke="navy" stroke-width="2"/>') == 1

    def test_datasets_in_order(self, tmp_path, loader_calls):
        svg = _render(tmp_path, loader_calls, mapdata="a,b,c")
        assert loader_calls.calls == ["a", "b", "c"]
        path = GeoPath(setup_projection("WB"))
        expected = [path(loader_calls.data[n]) for n in "abc"]
        assert _DATASET_PATH.findall(svg) == expected

    def test_dataset_names_trimmed(self, tmp_path, loader_calls):
        _render(tmp_path, loader_calls, mapdata=" a , b ")
        assert loader_calls.calls == ["a", "b"]

    def test_line_styles(self, tmp_path, loader_calls):
        svg = _render(tmp_path, loader_calls, mapdata="a,b",
                      styles={"linecolor": "red", "linethickness": 3})
        assert svg.count('fill="none" stroke="red" stroke-width="3"/>') == 2

    def test_graticule_default_shown(self, tmp_path, loader_calls):
        svg = _render(tmp_path, loader_calls, mapdata="a")
        assert svg.count('stroke-dasharray="2,2"') == 1
        assert svg.count('stroke="#666" stroke-width="0.5"') == 1

    @pytest.mark.parametrize("value", ["false", "FALSE", "False"])
    def test_graticule_hidden(self, tmp_path, loader_calls, value):
        svg = _render(tmp_path, loader_calls, mapdata="a", styles={"showgraticules": value})
        assert "stroke-dasharray" not in svg

    def test_graticule_true_shown(self, tmp_path, loader_calls):
        svg = _render(tmp_path, loader_calls, mapdata="a", styles={"showgraticules": "TRUE"})
        assert svg.count('stroke-dasharray="2,2"') == 1

    def test_element_order(self, tmp_path, loader_calls):
        svg = _render(tmp_path, loader_calls, mapdata="a")
        i_defs = svg.index("<defs>")
        i_bg = svg.index('<use href="#sphere" fill=')
        i_grat = svg.index('stroke-dasharray')
        i_data = svg.index('stroke="black" stroke-width="1"')
        assert i_defs < i_bg < i_grat < i_data

    def test_attribute_values_escaped(self, tmp_path, loader_calls):
        svg = _render(tmp_path, loader_calls, mapdata="a", styles={"linecolor": 'x"y'})
        assert 'stroke="x&quot;y"' in svg

    def test_winkel_with_center_and_bounds(self, tmp_path, loader_calls):
        svg = _render(tmp_path, loader_calls, mapdata="a,b", projection="w3",
                      center="10,20", bounds="-30,30,-60,60")
        assert len(_DATASET_PATH.findall(svg)) == 2

    def test_loader_error_propagates(self, tmp_path):
        def failing(name):
            raise LoadError(f"Unknown dataset: {name!r}")
        with pytest.raises(LoadError, match="nowhere"):
            _render(tmp_path, failing, mapdata="nowhere")
        assert not (tmp_path / "map.svg").exists()

    def test_unsupported_projection_writes_nothing(self, tmp_path, loader_calls):
        with pytest.raises(UnsupportedProjectionError):
            _render(tmp_path, loader_calls, projection="XX")
        assert loader_calls.calls == []
        assert not (tmp_path / "map.svg").exists()

    def test_invalid_bounds_writes_nothing(self, tmp_path, loader_calls):
        with pytest.raises(InvalidBoundsError):
            _render(tmp_path, loader_calls, bounds="10,x,30,40")
        assert not (tmp_path / "map.svg").exists()

    def test_write_error_propagates(self, tmp_path, loader_calls):
        with pytest.raises(OSError):
            _render(tmp_path, loader_calls, mapdata="a", output=str(tmp_path / "missing" / "map.svg"))
