"""
Delaunay triangulation of planar site sets.

The construction is a sweep-hull: sites are inserted in order of distance
from a seed circumcircle, each one is connected to the convex hull edges it
can see, and the new triangles are legalised by edge flips. The result is
stored as flat half-edge arrays: half-edge ``e`` belongs to triangle
``e // 3``, starts at site ``triangles.flat[e]`` and ``halfedges[e]`` is the
opposite half-edge in the neighbouring triangle (``-1`` on the hull).

Determinism and tie-breaks:
    - the seed site is the one closest to the bounding box centre, its
      partner the closest site to it, and the third site the one with the
      smallest circumcircle; every choice keeps the lowest index on ties;
    - sites are inserted by (distance to the seed circumcenter, index);
    - an edge is flipped only when the opposite site lies strictly inside
      the circumcircle, so cocircular quadruples keep the first diagonal.
"""

import math
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import numpy as np
import structlog
from scipy.spatial import cKDTree

from ..config import settings
from .errors import DuplicateSiteError, InvalidInputError, TriangulationStatus
from .geometry import circumcenter, circumradius_sq, incircle, orient2d

logger = structlog.get_logger()


@dataclass(frozen=True, eq=False)
class Triangulation:
    """Immutable Delaunay triangulation over an indexed site set."""
    sites: np.ndarray            # (N, 2) site coordinates
    triangles: np.ndarray        # (T, 3) site indices, counter-clockwise
    halfedges: np.ndarray        # (3T,) opposite half-edge or -1
    circumcenters: np.ndarray    # (T, 2) Voronoi vertices
    hull: np.ndarray             # convex hull site indices, counter-clockwise
    duplicates: Dict[int, int] = field(default_factory=dict)  # merged -> kept
    status: TriangulationStatus = TriangulationStatus.OK

    @property
    def n_sites(self) -> int:
        return len(self.sites)

    @property
    def n_triangles(self) -> int:
        return len(self.triangles)

    @property
    def is_degenerate(self) -> bool:
        return self.status is not TriangulationStatus.OK

    def edges(self) -> np.ndarray:
        """Unique undirected edges as an (E, 2) array of site indices."""
        flat = self.triangles.ravel()
        e = np.arange(len(flat))
        following = e - e % 3 + (e + 1) % 3
        mask = e > self.halfedges
        return np.stack([flat[e[mask]], flat[following[mask]]], axis=1).reshape(-1, 2)

    def site_triangles(self) -> List[List[int]]:
        """Triangles incident to each site, in triangle index order."""
        incident: List[List[int]] = [[] for _ in range(self.n_sites)]
        for t, (a, b, c) in enumerate(self.triangles.tolist()):
            incident[a].append(t)
            incident[b].append(t)
            incident[c].append(t)
        return incident

    def neighbors(self) -> List[List[int]]:
        """Delaunay neighbours of each site, sorted by index."""
        adjacent: List[set] = [set() for _ in range(self.n_sites)]
        for a, b in self.edges().tolist():
            adjacent[a].add(b)
            adjacent[b].add(a)
        return [sorted(s) for s in adjacent]

    def outgoing_hull_edges(self) -> Dict[int, int]:
        """For every hull site, the hull half-edge that starts at it."""
        flat = self.triangles.ravel()
        return {int(flat[e]): int(e) for e in np.flatnonzero(self.halfedges == -1)}


def as_sites(points) -> np.ndarray:
    """
    Validate and copy caller-supplied coordinates.

    Raises:
        InvalidInputError: if the input is not an (N, 2) array of finite numbers
    """
    try:
        sites = np.array(points, dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"Sites must be numeric (x, y) pairs: {exc}") from exc

    if sites.size == 0:
        return np.empty((0, 2), dtype=np.float64)
    if sites.ndim != 2 or sites.shape[1] != 2:
        raise InvalidInputError(f"Sites must have shape (N, 2), got {sites.shape}")
    if not np.isfinite(sites).all():
        bad = np.flatnonzero(~np.isfinite(sites).all(axis=1))
        raise InvalidInputError(f"Non-finite site coordinates at indices {bad.tolist()}")
    return sites


def find_duplicates(sites: np.ndarray, tolerance: float) -> Dict[int, int]:
    """
    Map every site lying within ``tolerance`` of an earlier one to the
    lowest index of its cluster.
    """
    if len(sites) < 2:
        return {}

    pairs = cKDTree(sites).query_pairs(r=tolerance, output_type='ndarray')
    duplicates: Dict[int, int] = {}
    for i, j in sorted(map(tuple, pairs.tolist())):
        root = duplicates.get(i, i)
        if j not in duplicates:
            duplicates[j] = root
    return duplicates


def _merge_skipped(sites: np.ndarray, ids: np.ndarray, skipped: List[int]) -> Dict[int, int]:
    """Map sites the sweep could not attach to their nearest triangulated site."""
    kept = np.setdiff1d(ids, skipped)
    _, nearest = cKDTree(sites[kept]).query(sites[skipped])
    return {int(i): int(kept[k]) for i, k in zip(skipped, nearest)}


class _SweepHull:
    """Mutable construction state for one triangulation run."""

    def __init__(self, xs: List[float], ys: List[float]):
        n = len(xs)
        self.xs = xs
        self.ys = ys
        self.triangles: List[int] = []
        self.halfedges: List[int] = []
        self.hull_prev = [0] * n
        self.hull_next = [0] * n
        self.hull_tri = [0] * n
        self.hull_start = 0
        self.skipped: List[int] = []
        self.hull_hash: List[int] = []
        self.hash_size = 0
        self.cx = 0.0
        self.cy = 0.0

    def _hash_key(self, x: float, y: float) -> int:
        dx = x - self.cx
        dy = y - self.cy
        s = abs(dx) + abs(dy)
        # pseudo-angle: monotone in the real angle, no trigonometry
        p = dx / s if s > 0 else 0.0
        angle = (3 - p) / 4 if dy > 0 else (1 + p) / 4
        return math.floor(angle * self.hash_size) % self.hash_size

    def _link(self, a: int, b: int) -> None:
        self.halfedges[a] = b
        if b != -1:
            self.halfedges[b] = a

    def _add_triangle(self, i0: int, i1: int, i2: int, a: int, b: int, c: int) -> int:
        t = len(self.triangles)
        self.triangles.extend((i0, i1, i2))
        self.halfedges.extend((-1, -1, -1))
        self._link(t, a)
        self._link(t + 1, b)
        self._link(t + 2, c)
        return t

    def _legalize(self, a: int) -> int:
        """
        Flip edges until every triangle around ``a`` is locally Delaunay.

        Returns the half-edge preceding the last one checked, which is the
        new hull edge leaving the inserted site.

                  pl                    pl
                 /||\\                  /  \\
              al/ || \\bl            al/    \\a
               /  ||  \\              /      \\
              /  a||b  \\    flip    /___ar___\\
            p0\\   ||   /p1   =>   p0\\---bl---/p1
               \\  ||  /              \\      /
              ar\\ || /br             b\\    /br
                 \\||/                  \\  /
                  pr                    pr
        """
        triangles = self.triangles
        halfedges = self.halfedges
        xs, ys = self.xs, self.ys
        stack: List[int] = []
        ar = 0

        while True:
            b = halfedges[a]
            a0 = a - a % 3
            ar = a0 + (a + 2) % 3

            if b == -1:  # convex hull edge
                if not stack:
                    break
                a = stack.pop()
                continue

            b0 = b - b % 3
            al = a0 + (a + 1) % 3
            bl = b0 + (b + 2) % 3

            p0 = triangles[ar]
            pr = triangles[a]
            pl = triangles[al]
            p1 = triangles[bl]

            illegal = incircle(xs[p0], ys[p0], xs[pr], ys[pr],
                               xs[pl], ys[pl], xs[p1], ys[p1]) > 0

            if illegal:
                triangles[a] = p1
                triangles[b] = p0

                hbl = halfedges[bl]

                # edge swapped on the other side of the hull; fix the hull reference
                if hbl == -1:
                    e = self.hull_start
                    while True:
                        if self.hull_tri[e] == bl:
                            self.hull_tri[e] = a
                            break
                        e = self.hull_prev[e]
                        if e == self.hull_start:
                            break

                self._link(a, hbl)
                self._link(b, halfedges[ar])
                self._link(ar, bl)

                stack.append(b0 + (b + 1) % 3)
            else:
                if not stack:
                    break
                a = stack.pop()

        return ar

    def _seed(self, ids: np.ndarray, pts: np.ndarray) -> Tuple[int, int, int, float]:
        xs, ys = self.xs, self.ys
        lo = pts.min(axis=0)
        hi = pts.max(axis=0)
        center = (lo + hi) / 2

        # seed close to the centre, then its nearest neighbour
        pos0 = int(np.argmin(((pts - center) ** 2).sum(axis=1)))
        d1 = ((pts - pts[pos0]) ** 2).sum(axis=1)
        d1[pos0] = np.inf
        pos1 = int(np.argmin(d1))
        i0 = int(ids[pos0])
        i1 = int(ids[pos1])

        # third site forming the smallest circumcircle with the first two
        i2 = -1
        min_radius = math.inf
        for i in ids.tolist():
            if i == i0 or i == i1:
                continue
            r = circumradius_sq(xs[i0], ys[i0], xs[i1], ys[i1], xs[i], ys[i])
            if r < min_radius:
                i2 = i
                min_radius = r
        return i0, i1, i2, min_radius

    def run(self, ids: np.ndarray, pts: np.ndarray) -> Optional[List[int]]:
        """Triangulate the sites ``ids``; returns the hull, or None if all are collinear."""
        xs, ys = self.xs, self.ys
        i0, i1, i2, min_radius = self._seed(ids, pts)
        if min_radius == math.inf:
            return None

        if orient2d(xs[i0], ys[i0], xs[i1], ys[i1], xs[i2], ys[i2]) < 0:
            i1, i2 = i2, i1

        self.cx, self.cy = circumcenter(xs[i0], ys[i0], xs[i1], ys[i1], xs[i2], ys[i2])

        # insertion order: distance from the seed circumcenter, then index
        dists = ((pts - np.array([self.cx, self.cy])) ** 2).sum(axis=1)
        order = ids[np.lexsort((ids, dists))].tolist()

        self.hash_size = max(1, math.ceil(math.sqrt(len(ids))))
        self.hull_hash = [-1] * self.hash_size
        hull_next, hull_prev, hull_tri, hull_hash = (
            self.hull_next, self.hull_prev, self.hull_tri, self.hull_hash)

        self.hull_start = i0
        hull_size = 3

        hull_next[i0] = hull_prev[i2] = i1
        hull_next[i1] = hull_prev[i0] = i2
        hull_next[i2] = hull_prev[i1] = i0

        hull_tri[i0] = 0
        hull_tri[i1] = 1
        hull_tri[i2] = 2

        hull_hash[self._hash_key(xs[i0], ys[i0])] = i0
        hull_hash[self._hash_key(xs[i1], ys[i1])] = i1
        hull_hash[self._hash_key(xs[i2], ys[i2])] = i2

        self._add_triangle(i0, i1, i2, -1, -1, -1)

        for i in order:
            if i == i0 or i == i1 or i == i2:
                continue
            x = xs[i]
            y = ys[i]

            # find a visible hull edge, starting from the angular hash
            key = self._hash_key(x, y)
            for j in range(self.hash_size):
                start = hull_hash[(key + j) % self.hash_size]
                if start != -1 and start != hull_next[start]:
                    break
            else:
                start = self.hull_start

            start = hull_prev[start]
            e = start
            while True:
                q = hull_next[e]
                if orient2d(x, y, xs[e], ys[e], xs[q], ys[q]) < 0:
                    break
                e = q
                if e == start:
                    e = -1
                    break

            if e == -1:
                # coincides with a hull vertex up to rounding
                self.skipped.append(i)
                continue

            # first triangle from the new site
            t = self._add_triangle(e, i, hull_next[e], -1, -1, hull_tri[e])
            hull_tri[i] = self._legalize(t + 2)
            hull_tri[e] = t
            hull_size += 1

            # walk forward through the hull
            nxt = hull_next[e]
            while True:
                q = hull_next[nxt]
                if not orient2d(x, y, xs[nxt], ys[nxt], xs[q], ys[q]) < 0:
                    break
                t = self._add_triangle(nxt, i, q, hull_tri[i], -1, hull_tri[nxt])
                hull_tri[i] = self._legalize(t + 2)
                hull_next[nxt] = nxt  # mark as removed
                hull_size -= 1
                nxt = q

            # walk backward from the other side
            if e == start:
                while True:
                    q = hull_prev[e]
                    if not orient2d(x, y, xs[q], ys[q], xs[e], ys[e]) < 0:
                        break
                    t = self._add_triangle(q, i, e, -1, hull_tri[e], hull_tri[q])
                    self._legalize(t + 2)
                    hull_tri[q] = t
                    hull_next[e] = e  # mark as removed
                    hull_size -= 1
                    e = q

            self.hull_start = hull_prev[i] = e
            hull_next[e] = hull_prev[nxt] = i
            hull_next[i] = nxt

            hull_hash[key] = i
            hull_hash[self._hash_key(xs[e], ys[e])] = e

        hull = []
        e = self.hull_start
        for _ in range(hull_size):
            hull.append(e)
            e = hull_next[e]
        return hull


def _collinear_order(ids: np.ndarray, pts: np.ndarray) -> np.ndarray:
    """Order collinear sites along their common line, ties by index."""
    if len(ids) == 0:
        return ids
    spread = pts.max(axis=0) - pts.min(axis=0)
    # projecting on the axis of largest spread is monotone along the line
    axis = 0 if spread[0] >= spread[1] else 1
    return ids[np.lexsort((ids, pts[:, axis]))]


def _freeze(array: np.ndarray) -> np.ndarray:
    array.setflags(write=False)
    return array


def _circumcenters(sites: np.ndarray, triangles: np.ndarray) -> np.ndarray:
    if len(triangles) == 0:
        return np.empty((0, 2), dtype=np.float64)
    a = sites[triangles[:, 0]]
    d = sites[triangles[:, 1]] - a
    e = sites[triangles[:, 2]] - a
    bl = (d ** 2).sum(axis=1)
    cl = (e ** 2).sum(axis=1)
    k = 0.5 / (d[:, 0] * e[:, 1] - d[:, 1] * e[:, 0])
    x = (e[:, 1] * bl - d[:, 1] * cl) * k
    y = (d[:, 0] * cl - e[:, 0] * bl) * k
    return a + np.stack([x, y], axis=1)


def triangulate(points, tolerance: Optional[float] = None,
                strict: Optional[bool] = None) -> Triangulation:
    """
    Build the Delaunay triangulation of a site set.

    Args:
        points: (N, 2) array-like of site coordinates
        tolerance: Sites closer than this are merged into the lowest index,
            defaults to ``settings.duplicate_tolerance``
        strict: Raise ``DuplicateSiteError`` instead of merging, defaults to
            ``settings.strict_duplicates``

    Returns:
        Triangulation; fewer than three distinct sites or an all-collinear
        set give an empty triangle list and a degenerate status

    Raises:
        InvalidInputError: for malformed or non-finite coordinates
        DuplicateSiteError: for near-coincident sites in strict mode
    """
    start_time = time.perf_counter()
    tolerance = settings.duplicate_tolerance if tolerance is None else tolerance
    strict = settings.strict_duplicates if strict is None else strict
    if tolerance < 0:
        raise InvalidInputError(f"Duplicate tolerance must be non-negative, got {tolerance}")

    sites = as_sites(points)
    duplicates = find_duplicates(sites, tolerance)
    if duplicates and strict:
        raise DuplicateSiteError(duplicates)

    ids = np.array([i for i in range(len(sites)) if i not in duplicates], dtype=np.int64)
    pts = sites[ids]

    status = TriangulationStatus.OK
    triangles: List[int] = []
    halfedges: List[int] = []

    if len(ids) < 3:
        status = TriangulationStatus.INSUFFICIENT_SITES
        hull = _collinear_order(ids, pts).tolist()
    else:
        sweep = _SweepHull(sites[:, 0].tolist(), sites[:, 1].tolist())
        hull = sweep.run(ids, pts)
        if hull is None:
            status = TriangulationStatus.COLLINEAR
            hull = _collinear_order(ids, pts).tolist()
        else:
            triangles = sweep.triangles
            halfedges = sweep.halfedges
            if sweep.skipped:
                merged = _merge_skipped(sites, ids, sweep.skipped)
                if strict:
                    raise DuplicateSiteError(merged)
                logger.warning("Sites merged into their nearest neighbour", merged=merged)
                duplicates = {j: merged.get(k, k) for j, k in duplicates.items()}
                duplicates.update(merged)

    tri_array = np.array(triangles, dtype=np.int64).reshape(-1, 3)
    result = Triangulation(
        sites=_freeze(sites),
        triangles=_freeze(tri_array),
        halfedges=_freeze(np.array(halfedges, dtype=np.int64)),
        circumcenters=_freeze(_circumcenters(sites, tri_array)),
        hull=_freeze(np.array(hull, dtype=np.int64)),
        duplicates=duplicates,
        status=status,
    )

    logger.debug("Triangulation built",
                 sites=len(sites), triangles=result.n_triangles,
                 hull=len(hull), duplicates=len(duplicates), status=status.value,
                 elapsed_ms=round((time.perf_counter() - start_time) * 1000, 3))
    return result
