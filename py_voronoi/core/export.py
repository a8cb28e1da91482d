"""
Flat geometry views for renderers.

Everything here is a projection of a Voronoi snapshot into plain numpy
arrays in site coordinates; the caller picks the draw primitive and colours.
Each call returns fresh arrays, so callers may modify them freely.
"""

from typing import TYPE_CHECKING, List, Optional

import numpy as np
from shapely.geometry import Polygon

if TYPE_CHECKING:
    from .voronoi import Voronoi


def _empty_segments() -> np.ndarray:
    return np.empty((0, 2, 2), dtype=np.float64)


class GeometryExport:
    """Read-only renderer view over a Voronoi snapshot."""

    def __init__(self, voronoi: "Voronoi"):
        self._voronoi = voronoi

    def sites(self) -> np.ndarray:
        """Site positions, shape (N, 2)."""
        return np.array(self._voronoi.sites, dtype=np.float64)

    def triangle_edges(self, unique: bool = False) -> np.ndarray:
        """
        Triangulation wireframe as segments, shape (M, 2, 2).

        Args:
            unique: Emit each shared edge once instead of three segments
                per triangle
        """
        triangulation = self._voronoi.triangulation
        sites = triangulation.sites
        if unique:
            return sites[triangulation.edges()].reshape(-1, 2, 2)

        triangles = triangulation.triangles
        pairs = np.stack([triangles, np.roll(triangles, -1, axis=1)], axis=-1)
        return sites[pairs.reshape(-1, 2)].reshape(-1, 2, 2)

    def triangle_vertices(self) -> np.ndarray:
        """Filled triangles, shape (T, 3, 2), counter-clockwise."""
        triangulation = self._voronoi.triangulation
        return triangulation.sites[triangulation.triangles].reshape(-1, 3, 2)

    def cell_edges(self) -> np.ndarray:
        """Boundary segments of every clipped cell, shape (M, 2, 2)."""
        segments = [cell.edges() for cell in self._voronoi.cells if not cell.is_empty]
        if not segments:
            return _empty_segments()
        return np.concatenate(segments)

    def cell_triangles(self) -> np.ndarray:
        """Fan triangulation of every clipped cell, shape (M, 3, 2)."""
        fans = []
        for cell in self._voronoi.cells:
            if cell.is_empty:
                continue
            polygon = cell.polygon
            k = len(polygon)
            anchor = np.repeat(polygon[:1], k - 2, axis=0)
            fans.append(np.stack([anchor, polygon[1:k - 1], polygon[2:k]], axis=1))
        if not fans:
            return np.empty((0, 3, 2), dtype=np.float64)
        return np.concatenate(fans)

    def to_shapely(self) -> List[Optional[Polygon]]:
        """Clipped cells as shapely polygons, None where a cell is empty."""
        return [None if cell.is_empty else Polygon(cell.polygon.tolist())
                for cell in self._voronoi.cells]
