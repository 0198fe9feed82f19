"""Polyhedral projections: faces of a polyhedron unfolded into a planar net.

Every face gets its own gnomonic projection from PROJ, centred on the
face, so face edges (great-circle arcs) come out as straight segments.
Child faces are attached to their parent by the similarity transform
that lays their shared edge onto the parent's copy of it.
"""
import math
from functools import lru_cache
import numpy as np
from pyproj import CRS, Transformer

from .types import Point, Affine
from .rotation import to_cartesian, to_spherical
from .projection import RawProjection
from .winkel import LONGLAT

IDENTITY: Affine = (1.0, 0.0, 0.0, 0.0, 1.0, 0.0)
_TOL = 1e-9
# Halvings of a cut segment; leaves the cut well under a nanoradian wide
_BISECT_STEPS = 40

# ============================================================
# Affine Helpers
# ============================================================
def compose(a: Affine, b: Affine) -> Affine:
    """Affine map applying b first, then a."""
    return (a[0]*b[0] + a[1]*b[3], a[0]*b[1] + a[1]*b[4], a[0]*b[2] + a[1]*b[5] + a[2],
            a[3]*b[0] + a[4]*b[3], a[3]*b[1] + a[4]*b[4], a[3]*b[2] + a[4]*b[5] + a[5])

def edge_matrix(a: list[Point], b: list[Point]) -> Affine:
    """Similarity transform taking segment b[0]->b[1] onto a[0]->a[1]."""
    ux, uy = a[1][0]-a[0][0], a[1][1]-a[0][1]
    vx, vy = b[1][0]-b[0][0], b[1][1]-b[0][1]
    phi = math.atan2(ux*vy - uy*vx, ux*vx + uy*vy)
    s = math.hypot(ux, uy) / math.hypot(vx, vy)
    c, sn = math.cos(phi), math.sin(phi)
    return compose((1.0, 0.0, a[0][0], 0.0, 1.0, a[0][1]),
           compose((s, 0.0, 0.0, 0.0, s, 0.0),
           compose((c, sn, 0.0, -sn, c, 0.0),
                   (1.0, 0.0, -b[0][0], 0.0, 1.0, -b[0][1]))))

def same_point(p: Point, q: Point) -> bool:
    """Compare (lon, lat) degrees on the sphere, so poles match at any longitude."""
    a = to_cartesian(np.radians(p[0]), np.radians(p[1]))
    b = to_cartesian(np.radians(q[0]), np.radians(q[1]))
    return bool(np.all(np.abs(a - b) < _TOL))

# ============================================================
# Faces and Nets
# ============================================================
class Face:
    """One polyhedron face: clockwise (lon, lat) vertices plus its placement in the net."""

    def __init__(self, vertices: list[Point], center: Point):
        self.vertices = vertices
        self.center = center
        self.children: list["Face"] = []
        self.transform: Affine = IDENTITY
        n = len(vertices)
        # entries are (p0, p1) boundary edges, or the Face joined across that edge
        self.edges: list = [(vertices[i], vertices[(i+1) % n]) for i in range(n)]
        self._gnomonic = Transformer.from_crs(
            LONGLAT,
            CRS.from_proj4(f"+proj=gnom +lat_0={center[1]!r} +lon_0={center[0]!r} +R=1 +no_defs"),
            always_xy=True)

    def local(self, lons, lats) -> tuple[np.ndarray, np.ndarray]:
        x, y = self._gnomonic.transform(np.asarray(lons, dtype=float), np.asarray(lats, dtype=float))
        return np.asarray(x, dtype=float), np.asarray(y, dtype=float)

    def place(self, lons, lats) -> tuple[np.ndarray, np.ndarray]:
        """Net coordinates for (lon, lat) degrees lying on this face."""
        x, y = self.local(lons, lats)
        t = self.transform
        return t[0]*x + t[1]*y + t[2], t[3]*x + t[4]*y + t[5]

    def place_point(self, p: Point) -> Point:
        x, y = self.place([p[0]], [p[1]])
        return (float(x[0]), float(y[0]))


def shared_edge(face: list[Point], parent: list[Point]) -> list[Point]:
    """The two vertices two faces have in common, in face order."""
    found = [p for p in face if any(same_point(p, q) for q in parent)]
    if len(found) != 2:
        raise ValueError(f"Faces share {len(found)} vertices, expected 2")
    return found


def _is_edge(edge, shared: list[Point]) -> bool:
    if isinstance(edge, Face):
        return False
    return ((same_point(edge[0], shared[0]) and same_point(edge[1], shared[1])) or
            (same_point(edge[0], shared[1]) and same_point(edge[1], shared[0])))


def unfold(node: Face, parent: Face | None = None) -> Face:
    """Place node and its descendants in the plane, linking shared edges."""
    if parent is not None:
        shared = shared_edge(node.vertices, parent.vertices)
        lons, lats = zip(*shared)
        ax, ay = parent.local(lons, lats); bx, by = node.local(lons, lats)
        m = edge_matrix(list(zip(ax, ay)), list(zip(bx, by)))
        node.transform = compose(parent.transform, m)
        parent.edges = [node if _is_edge(e, shared) else e for e in parent.edges]
        node.edges = [parent if _is_edge(e, shared) else e for e in node.edges]
    for child in node.children:
        unfold(child, node)
    return node


def outline_ring(node: Face, parent: Face | None = None, ring: list[Point] | None = None) -> list[Point]:
    """Walk the net boundary: a face's free edges, descending into children in edge order."""
    if ring is None:
        ring = []
    edges = node.edges; n = len(edges)
    j = edges.index(parent) + 1 if parent is not None else 0
    inside = False
    for i in range(n):
        edge = edges[(i + j) % n]
        if isinstance(edge, Face):
            inside = False
            if edge is not parent:
                outline_ring(edge, node, ring)
        else:
            if not inside:
                ring.append(node.place_point(edge[0])); inside = True
            ring.append(node.place_point(edge[1]))
    return ring


def drop_spikes(ring: list[Point]) -> list[Point]:
    """Remove repeated points and there-and-back excursions (A, B, A) from a ring."""
    out: list[Point] = []
    for p in ring:
        if out and math.dist(out[-1], p) < 1e-9:
            continue
        if len(out) >= 2 and math.dist(out[-2], p) < 1e-9:
            out.pop(); continue
        out.append(p)
    return out


def contiguity(faces: list[Face]) -> np.ndarray:
    """Matrix of faces that are the same face or share an edge placed identically in the net."""
    joined = np.eye(len(faces), dtype=bool)
    for i, fa in enumerate(faces):
        for j in range(i + 1, len(faces)):
            fb = faces[j]
            common = [p for p in fa.vertices if any(same_point(p, q) for q in fb.vertices)]
            if len(common) != 2:
                continue
            if all(math.dist(fa.place_point(p), fb.place_point(p)) < 1e-9 for p in common):
                joined[i, j] = joined[j, i] = True
    return joined

# ============================================================
# Waterman Butterfly
# ============================================================
_OCTAHEDRON: list[Point] = [(0.0, 90.0), (-90.0, 0.0), (0.0, 0.0), (90.0, 0.0), (180.0, 0.0), (0.0, -90.0)]
_OCTANTS = [[_OCTAHEDRON[i] for i in f] for f in
            [(0, 2, 1), (0, 3, 2), (5, 1, 2), (5, 2, 3), (0, 1, 4), (0, 4, 3), (5, 4, 1), (5, 3, 4)]]
# Hexagon net: which octant each one hangs off (-1 = root)
_NET_PARENTS = [-1, 0, 0, 1, 0, 1, 4, 5]
# Hexagon corners split each octahedron edge chord 3:1 from either end
_NEAR, _FAR = 3 / math.sqrt(10), 1 / math.sqrt(10)


def _deg(xyz: np.ndarray) -> Point:
    lam, phi = to_spherical(xyz)
    return (math.degrees(float(lam)), math.degrees(float(phi)))


def _cart(p: Point) -> np.ndarray:
    return to_cartesian(np.radians(p[0]), np.radians(p[1]))


@lru_cache(maxsize=1)
def _waterman_net():
    hexagons = []
    for octant in _OCTANTS:
        xyz = [_cart(p) for p in octant]
        a = xyz[-1]; hexagon = []
        for b in xyz:
            hexagon.append(_deg(a * _NEAR + b * _FAR))
            hexagon.append(_deg(b * _NEAR + a * _FAR))
            a = b
        hexagons.append(hexagon)
    faces = [Face(h, _deg(sum(_cart(p) for p in h))) for h in hexagons]
    parents = list(_NET_PARENTS)
    normals = np.zeros((8, 3, 3))
    for j, hexagon in enumerate(hexagons):
        octant = _OCTANTS[j]
        for i, corner in enumerate(octant):
            h2, h1 = hexagon[(2*i + 2) % 6], hexagon[(2*i + 1) % 6]
            faces.append(Face([corner, h2, h1], corner))
            parents.append(j)
            normals[j, i] = np.cross(_cart(h2), _cart(h1))
    for i, p in enumerate(parents):
        if p >= 0:
            faces[p].children.append(faces[i])
    unfold(faces[0])
    ring = drop_spikes(outline_ring(faces[0]))
    return faces, normals, contiguity(faces), np.array(ring)


class Waterman(RawProjection):
    """Waterman butterfly: truncated octahedron net of 8 hexagons and 24 corner triangles."""
    default_scale = 118.626
    default_angle = -30.0
    default_center: Point = (0.0, 45.0)

    def __init__(self):
        self.faces, self._normals, self._contiguous, self._ring = _waterman_net()

    def face_index(self, lam: np.ndarray, phi: np.ndarray) -> np.ndarray:
        """Index into self.faces of the face holding each point (radians)."""
        lam = np.asarray(lam, dtype=float); phi = np.asarray(phi, dtype=float)
        south = phi < 0
        octant = np.where(lam < -math.pi/2, np.where(south, 6, 4),
                 np.where(lam < 0, np.where(south, 2, 0),
                 np.where(lam < math.pi/2, np.where(south, 3, 1), np.where(south, 7, 5))))
        d = np.einsum("nij,nj->ni", self._normals[octant], to_cartesian(lam, phi))
        corner = 8 + 3 * octant
        return np.where(d[:, 0] < 0, corner,
               np.where(d[:, 1] < 0, corner + 1,
               np.where(d[:, 2] < 0, corner + 2, octant)))

    def forward(self, lam, phi):
        lam = np.atleast_1d(np.asarray(lam, dtype=float)); phi = np.atleast_1d(np.asarray(phi, dtype=float))
        idx = self.face_index(lam, phi)
        x = np.empty(len(lam)); y = np.empty(len(lam))
        lons, lats = np.degrees(lam), np.degrees(phi)
        for i in np.unique(idx):
            m = idx == i
            x[m], y[m] = self.faces[i].place(lons[m], lats[m])
        return x, y

    def pieces(self, lam, phi):
        """Cut where a line crosses into a face that is apart in the net.

        Both sides of a cut end on the face edge, each on its own face.
        """
        if len(lam) < 2:
            return [(lam, phi)]
        idx = self.face_index(lam, phi)
        at = np.flatnonzero(~self._contiguous[idx[:-1], idx[1:]])
        if len(at) == 0:
            return [(lam, phi)]
        (lo_lam, lo_phi), (hi_lam, hi_phi) = self._edge_points(lam, phi, idx, at)
        out = []; start = 0
        head_lam = head_phi = np.empty(0)
        for k, i in enumerate(at):
            out.append((np.concatenate([head_lam, lam[start:i + 1], lo_lam[k:k + 1]]),
                        np.concatenate([head_phi, phi[start:i + 1], lo_phi[k:k + 1]])))
            head_lam, head_phi = hi_lam[k:k + 1], hi_phi[k:k + 1]
            start = i + 1
        out.append((np.concatenate([head_lam, lam[start:]]), np.concatenate([head_phi, phi[start:]])))
        return out

    def _edge_points(self, lam, phi, idx, at):
        """Bisect each segment at -> at+1 for where it leaves the faces joined to its start.

        Returns the points just before and just after the crossing.
        """
        a = to_cartesian(lam[at], phi[at]); b = to_cartesian(lam[at + 1], phi[at + 1])
        home = idx[at]
        lo = np.zeros(len(at)); hi = np.ones(len(at))
        for _ in range(_BISECT_STEPS):
            mid = (lo + hi) / 2
            m_lam, m_phi = to_spherical(a + mid[:, None] * (b - a))
            joined = self._contiguous[home, self.face_index(m_lam, m_phi)]
            lo = np.where(joined, mid, lo); hi = np.where(joined, hi, mid)
        return (to_spherical(a + lo[:, None] * (b - a)),
                to_spherical(a + hi[:, None] * (b - a)))

    def outline(self):
        return self._ring[:, 0].copy(), self._ring[:, 1].copy()
