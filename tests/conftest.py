"""Shared test fixtures for map projection and rendering tests."""
import math
import numpy as np
import pytest

from geo.projection import Projection, RawProjection


class Plate(RawProjection):
    """Equirectangular raw projection: plane coordinates are lam, phi."""

    def forward(self, lam, phi):
        return np.asarray(lam, dtype=float), np.asarray(phi, dtype=float)

    def outline(self):
        return (np.array([-math.pi, math.pi, math.pi, -math.pi]),
                np.array([-math.pi/2, -math.pi/2, math.pi/2, math.pi/2]))


@pytest.fixture
def plate():
    """Projection where canvas (x, y) = (lon, -lat) in degrees."""
    return Projection(Plate()).scale(180 / math.pi).translate((0, 0))


def line_feature(lon: float) -> dict:
    """A short meridian segment at *lon*, as a Feature."""
    return {"type": "Feature", "properties": {},
            "geometry": {"type": "LineString", "coordinates": [[lon, -10.0], [lon, 10.0]]}}


@pytest.fixture
def loader_calls():
    """In-memory loader recording the identifiers it was asked for."""
    calls = []
    data = {"a": line_feature(-60.0), "b": line_feature(0.0), "c": line_feature(60.0)}

    def load(name):
        calls.append(name)
        return data.get(name, line_feature(30.0))
    load.calls = calls
    load.data = data
    return load
