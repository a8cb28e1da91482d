"""
Voronoi cells as the dual of a Delaunay triangulation.

Each cell lists the circumcenters of the triangles around its site, sorted
by angle around the site. Sites on the convex hull have unbounded cells;
their vertex chain starts at the triangle on the site's outgoing hull edge
and the gap between the last and the first vertex is the open side.

Every cell also carries its intersection with a bounding box, built by
clipping the box against the perpendicular bisector of each Delaunay
neighbour. These clipped polygons tile the box exactly and are what the
relaxation and the export work with.
"""

import math
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np
import structlog

from .geometry import BoundingBox, clip_polygon, polygon_area, polygon_centroid
from .triangulation import Triangulation

logger = structlog.get_logger()

_EMPTY_POLYGON = np.empty((0, 2), dtype=np.float64)
_EMPTY_POLYGON.setflags(write=False)
_MERGE_RTOL = 1e-12


@dataclass(frozen=True, eq=False)
class VoronoiCell:
    """Voronoi region of one site."""
    site: int
    vertices: np.ndarray                 # (K, 2) circumcenters, CCW around the site
    vertex_triangles: Tuple[int, ...]    # triangle index of each vertex
    neighbors: Tuple[int, ...]           # Delaunay neighbours of the site
    open: bool                           # unbounded before clipping
    polygon: np.ndarray = field(default_factory=lambda: _EMPTY_POLYGON)  # cell clipped to the box, CCW
    merged_into: Optional[int] = None    # set for merged duplicate sites

    @property
    def bounded(self) -> bool:
        return not self.open and len(self.vertices) >= 3

    @property
    def is_empty(self) -> bool:
        return len(self.polygon) < 3

    @property
    def area(self) -> float:
        return polygon_area(self.polygon)

    def centroid(self) -> Optional[np.ndarray]:
        """Area-weighted centroid of the clipped polygon, None for empty cells."""
        if self.is_empty:
            return None
        return polygon_centroid(self.polygon)

    def edges(self) -> np.ndarray:
        """Boundary segments of the clipped polygon, shape (K, 2, 2)."""
        if self.is_empty:
            return np.empty((0, 2, 2), dtype=np.float64)
        return np.stack([self.polygon, np.roll(self.polygon, -1, axis=0)], axis=1)


def _order_vertices(site: np.ndarray, triangles: List[int],
                    circumcenters: np.ndarray, first: Optional[int]) -> List[int]:
    """Sort triangles by the angle of their circumcenter around ``site``."""
    keyed = sorted(
        (math.atan2(circumcenters[t, 1] - site[1], circumcenters[t, 0] - site[0]), t)
        for t in triangles
    )
    ordered = [t for _, t in keyed]
    if first is not None and first in ordered:
        k = ordered.index(first)
        ordered = ordered[k:] + ordered[:k]
    return ordered


def _close(p: np.ndarray, q: np.ndarray, tol_sq: float) -> bool:
    d = p - q
    return float(d @ d) <= tol_sq


def _dedupe(ordered: List[int], circumcenters: np.ndarray, closed: bool,
            tol_sq: float) -> List[int]:
    """Drop consecutive circumcenters within rounding of each other (cocircular triangles)."""
    result: List[int] = []
    for t in ordered:
        if result and _close(circumcenters[result[-1]], circumcenters[t], tol_sq):
            continue
        result.append(t)
    if closed and len(result) > 1 and _close(circumcenters[result[0]],
                                             circumcenters[result[-1]], tol_sq):
        result.pop()
    return result


def clip_cell(site: np.ndarray, neighbors: np.ndarray, bounds: BoundingBox,
              tol_sq: float = 0.0) -> np.ndarray:
    """
    Intersection of the box with the half-planes closer to ``site`` than to
    each neighbour.

    Bisectors through a shared Voronoi vertex cut the polygon at points that
    differ only by rounding; corners within ``sqrt(tol_sq)`` of the previous
    one are dropped.
    """
    polygon = bounds.corners()
    sx, sy = float(site[0]), float(site[1])
    for nx, ny in neighbors.tolist():
        # keep points x with (x - midpoint) . (neighbour - site) <= 0
        dx = nx - sx
        dy = ny - sy
        offset = dx * (sx + nx) / 2 + dy * (sy + ny) / 2
        polygon = clip_polygon(polygon, dx, dy, offset)
        if not polygon:
            break
    kept: List[np.ndarray] = []
    for corner in np.array(polygon, dtype=np.float64).reshape(-1, 2):
        if kept and _close(kept[-1], corner, tol_sq):
            continue
        kept.append(corner)
    if len(kept) > 1 and _close(kept[0], kept[-1], tol_sq):
        kept.pop()
    if len(kept) < 3:
        return _EMPTY_POLYGON
    return np.array(kept)


def build_dual(triangulation: Triangulation, bounds: BoundingBox) -> List[VoronoiCell]:
    """
    Build the Voronoi cell of every site.

    Args:
        triangulation: Delaunay triangulation of the sites
        bounds: Clipping box for the cell polygons

    Returns:
        One VoronoiCell per site index. Merged duplicates and the sites of a
        degenerate triangulation get empty cells.
    """
    sites = triangulation.sites
    circumcenters = triangulation.circumcenters
    n_sites = triangulation.n_sites

    if triangulation.is_degenerate:
        logger.debug("Degenerate triangulation, cells left empty",
                     status=triangulation.status.value)
        return [
            VoronoiCell(site=i, vertices=_EMPTY_POLYGON, vertex_triangles=(),
                        neighbors=(), open=True,
                        merged_into=triangulation.duplicates.get(i))
            for i in range(n_sites)
        ]

    # merge distance for vertices that only differ by rounding
    tol_sq = (_MERGE_RTOL * max(bounds.width, bounds.height)) ** 2
    incident = triangulation.site_triangles()
    neighbors = triangulation.neighbors()
    hull_edges = triangulation.outgoing_hull_edges()

    cells = []
    for i in range(n_sites):
        if i in triangulation.duplicates or not incident[i]:
            cells.append(VoronoiCell(site=i, vertices=_EMPTY_POLYGON, vertex_triangles=(),
                                     neighbors=(), open=True,
                                     merged_into=triangulation.duplicates.get(i)))
            continue

        is_open = i in hull_edges
        first = hull_edges[i] // 3 if is_open else None
        ordered = _order_vertices(sites[i], incident[i], circumcenters, first)
        ordered = _dedupe(ordered, circumcenters, not is_open, tol_sq)

        vertices = circumcenters[ordered].copy()
        vertices.setflags(write=False)
        polygon = clip_cell(sites[i], sites[neighbors[i]], bounds, tol_sq)
        polygon.setflags(write=False)

        cells.append(VoronoiCell(
            site=i,
            vertices=vertices,
            vertex_triangles=tuple(ordered),
            neighbors=tuple(neighbors[i]),
            open=is_open,
            polygon=polygon,
        ))

    logger.debug("Voronoi cells built", cells=len(cells),
                 open=sum(1 for c in cells if c.open and not c.is_empty))
    return cells
