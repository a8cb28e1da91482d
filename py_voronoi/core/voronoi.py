"""Voronoi diagram snapshots: sites, their triangulation and their cells."""

import time
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

import numpy as np
import structlog

from ..config import settings
from ..utils.random import SeedOrRng
from .dual_graph import VoronoiCell, build_dual
from .errors import TriangulationStatus
from .export import GeometryExport
from .geometry import BoundingBox
from .relaxation import lloyd, relax
from .sampler import default_domain, generate
from .triangulation import Triangulation, triangulate

logger = structlog.get_logger()


@dataclass(frozen=True, eq=False)
class Voronoi:
    """
    Immutable Voronoi diagram snapshot.

    Built in one go from a site set; relaxation returns a new snapshot so
    successive iterations can be kept side by side.
    """
    sites: np.ndarray
    triangulation: Triangulation
    cells: Tuple[VoronoiCell, ...]
    bounds: BoundingBox
    iteration: int = 0
    tolerance: Optional[float] = None
    strict: Optional[bool] = None

    @classmethod
    def from_sites(cls, points, bounds: Optional[BoundingBox] = None,
                   tolerance: Optional[float] = None, strict: Optional[bool] = None,
                   iteration: int = 0) -> "Voronoi":
        """
        Triangulate ``points`` and build their cells.

        Args:
            points: (N, 2) array-like of site coordinates
            bounds: Clipping box, defaults to the site bounding box grown by
                ``settings.clip_margin``
            tolerance: Duplicate merge distance, see ``triangulate``
            strict: Reject duplicates instead of merging them
            iteration: Relaxation counter carried by the snapshot
        """
        start = time.perf_counter()
        triangulation = triangulate(points, tolerance=tolerance, strict=strict)
        sites = triangulation.sites
        if bounds is None:
            bounds = BoundingBox.around(sites, settings.clip_margin)
        cells = tuple(build_dual(triangulation, bounds))

        logger.info("Voronoi built",
                    sites=len(sites), triangles=triangulation.n_triangles,
                    status=triangulation.status.value, iteration=iteration,
                    elapsed_ms=round((time.perf_counter() - start) * 1000, 3))

        return cls(sites=sites, triangulation=triangulation, cells=cells,
                   bounds=bounds, iteration=iteration,
                   tolerance=tolerance, strict=strict)

    @classmethod
    def random(cls, count: Optional[int] = None, seed: SeedOrRng = None,
               bounds: Optional[BoundingBox] = None) -> "Voronoi":
        """
        Sample ``count`` uniform sites and build their diagram.

        The sampling domain doubles as the clipping box.
        """
        if count is None:
            count = settings.default_site_count
        domain = bounds or default_domain()
        return cls.from_sites(generate(count, seed, domain), bounds=domain)

    def rebuild(self, points, iteration: Optional[int] = None) -> "Voronoi":
        """New snapshot over ``points`` with this snapshot's bounds and duplicate policy."""
        return Voronoi.from_sites(
            points, bounds=self.bounds, tolerance=self.tolerance, strict=self.strict,
            iteration=self.iteration if iteration is None else iteration,
        )

    def relax(self) -> "Voronoi":
        """One Lloyd relaxation step."""
        return relax(self)

    def lloyd(self, iterations: int) -> Iterator["Voronoi"]:
        """Successive Lloyd relaxations, one snapshot per step."""
        return lloyd(self, iterations)

    @property
    def export(self) -> GeometryExport:
        return GeometryExport(self)

    @property
    def status(self) -> TriangulationStatus:
        return self.triangulation.status

    @property
    def is_degenerate(self) -> bool:
        return self.triangulation.is_degenerate

    def cell(self, site: int) -> VoronoiCell:
        return self.cells[site]
