"""Winkel Tripel projection, computed by PROJ."""
import math
import numpy as np
from pyproj import CRS, Transformer

from .projection import RawProjection

# Unit sphere, so projected coordinates come out in radians like the raw formula
LONGLAT = CRS.from_proj4("+proj=longlat +R=1 +no_defs")

# Sampling of the outline meridians, degrees
_OUTLINE_STEP = 2.5
_EDGE = 180.0 - 1e-6
# Standard parallel acos(2/pi); PROJ drops its own default when the CRS is built
STANDARD_PARALLEL = math.degrees(math.acos(2 / math.pi))


class Winkel3(RawProjection):
    """Winkel Tripel with the standard parallel at acos(2/pi), cut at the antimeridian."""
    default_scale = 158.837

    def __init__(self):
        wintri = CRS.from_proj4(f"+proj=wintri +lat_1={STANDARD_PARALLEL!r} +R=1 +no_defs")
        self._transformer = Transformer.from_crs(LONGLAT, wintri, always_xy=True)

    def forward(self, lam, phi):
        x, y = self._transformer.transform(np.degrees(lam), np.degrees(phi))
        return np.asarray(x, dtype=float), np.asarray(y, dtype=float)

    def pieces(self, lam, phi):
        """Cut where a line crosses the antimeridian, ending both sides on it."""
        crossings = np.flatnonzero(np.abs(np.diff(lam)) > math.pi)
        if len(crossings) == 0:
            return [(lam, phi)]
        out = []; start = 0
        for i in crossings:
            side = math.copysign(math.pi, lam[i])
            l0, l1 = lam[i], lam[i + 1] + 2 * side
            t = (side - l0) / (l1 - l0) if l1 != l0 else 0.0
            phi_x = phi[i] + t * (phi[i + 1] - phi[i])
            out.append((np.append(lam[start:i + 1], side), np.append(phi[start:i + 1], phi_x)))
            lam = lam.copy(); phi = phi.copy()
            # next piece starts on the opposite edge
            lam[i] = -side; phi[i] = phi_x
            start = i
        out.append((lam[start:], phi[start:]))
        return out

    def outline(self):
        lats = np.arange(-90.0, 90.0 + _OUTLINE_STEP / 2, _OUTLINE_STEP)
        lons = np.concatenate([np.full(len(lats), _EDGE), np.full(len(lats), -_EDGE)])
        lats = np.concatenate([lats, lats[::-1]])
        return self.forward(np.radians(lons), np.radians(lats))
