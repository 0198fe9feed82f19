"""Spherical rotations of (longitude, latitude) coordinates.

Angles are given in degrees, coordinates are numpy arrays in radians.
A rotation (lam, phi, gamma) first shifts longitude by lam, then turns
the sphere by phi about the y axis and gamma about the x axis.
"""
import math
import numpy as np

TAU = 2 * math.pi


def wrap_lon(lam: np.ndarray) -> np.ndarray:
    """Wrap longitudes (radians) that overshoot [-pi, pi] by less than a turn."""
    return np.where(lam > math.pi, lam - TAU, np.where(lam < -math.pi, lam + TAU, lam))


def to_cartesian(lam: np.ndarray, phi: np.ndarray) -> np.ndarray:
    """Unit vectors (..., 3) for spherical coordinates in radians."""
    cos_phi = np.cos(phi)
    return np.stack([np.cos(lam) * cos_phi, np.sin(lam) * cos_phi, np.sin(phi)], axis=-1)


def to_spherical(xyz: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Inverse of to_cartesian; vectors need not be normalized."""
    x, y, z = xyz[..., 0], xyz[..., 1], xyz[..., 2]
    return np.arctan2(y, x), np.arctan2(z, np.hypot(x, y))


class Rotation:
    """Rotation of the sphere by (lam, phi, gamma) degrees."""

    def __init__(self, angles):
        lam, phi, gamma = (tuple(angles) + (0.0, 0.0, 0.0))[:3]
        self.angles = (float(lam), float(phi), float(gamma))
        self._dl = math.fmod(math.radians(lam), TAU)
        dp = math.radians(phi); dg = math.radians(gamma)
        self._cp, self._sp = math.cos(dp), math.sin(dp)
        self._cg, self._sg = math.cos(dg), math.sin(dg)
        self._tilt = bool(phi or gamma)

    @property
    def identity(self) -> bool:
        return not self._dl and not self._tilt

    def __call__(self, lam: np.ndarray, phi: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        lam = np.asarray(lam, dtype=float); phi = np.asarray(phi, dtype=float)
        if self._dl:
            lam = wrap_lon(lam + self._dl)
        if not self._tilt:
            return lam, phi
        cos_phi = np.cos(phi)
        x = np.cos(lam) * cos_phi; y = np.sin(lam) * cos_phi; z = np.sin(phi)
        k = z * self._cp + x * self._sp
        return (np.arctan2(y * self._cg - k * self._sg, x * self._cp - z * self._sp),
                np.arcsin(np.clip(k * self._cg + y * self._sg, -1.0, 1.0)))

    def invert(self, lam: np.ndarray, phi: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        lam = np.asarray(lam, dtype=float); phi = np.asarray(phi, dtype=float)
        if self._tilt:
            cos_phi = np.cos(phi)
            x = np.cos(lam) * cos_phi; y = np.sin(lam) * cos_phi; z = np.sin(phi)
            k = z * self._cg - y * self._sg
            lam, phi = (np.arctan2(y * self._cg + z * self._sg, x * self._cp + k * self._sp),
                        np.arcsin(np.clip(k * self._cp - x * self._sp, -1.0, 1.0)))
        if self._dl:
            lam = wrap_lon(lam - self._dl)
        return lam, phi


def densify(lam: np.ndarray, phi: np.ndarray, max_step: float) -> tuple[np.ndarray, np.ndarray]:
    """Insert points along great circles so no step exceeds max_step radians."""
    if len(lam) < 2:
        return lam, phi
    xyz = to_cartesian(lam, phi)
    a, b = xyz[:-1], xyz[1:]
    ang = np.arccos(np.clip(np.sum(a * b, axis=1), -1.0, 1.0))
    n = np.maximum(1, np.ceil(ang / max_step)).astype(int)
    if np.all(n == 1):
        return lam, phi
    seg = np.repeat(np.arange(len(n)), n)
    t = (np.arange(n.sum()) - np.repeat(np.cumsum(n) - n, n) + 1) / n[seg]
    w = ang[seg][:, None]; t = t[:, None]
    sin_w = np.sin(w)
    safe = sin_w > 1e-12
    sw = np.where(safe, sin_w, 1.0)
    fa = np.where(safe, np.sin((1 - t) * w) / sw, 1 - t)
    fb = np.where(safe, np.sin(t * w) / sw, t)
    pts = fa * a[seg] + fb * b[seg]
    out_lam, out_phi = to_spherical(pts)
    # segment ends keep their exact input coordinates
    end = t[:, 0] == 1
    out_lam[end] = lam[1:][seg[end]]; out_phi[end] = phi[1:][seg[end]]
    return np.concatenate([lam[:1], out_lam]), np.concatenate([phi[:1], out_phi])
