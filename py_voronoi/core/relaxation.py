"""Lloyd relaxation over Voronoi snapshots."""

from typing import TYPE_CHECKING, Iterator

import numpy as np
import structlog

if TYPE_CHECKING:
    from .voronoi import Voronoi

logger = structlog.get_logger()


def relax(voronoi: "Voronoi") -> "Voronoi":
    """Apply one step of Lloyd's relaxation.

    Moves each site with a bounded cell to the centroid of its clipped cell
    polygon and rebuilds the whole diagram from the new positions. Hull
    sites (open cells) and merged duplicates keep their position. The input
    snapshot is not modified.

    Args:
        voronoi: Snapshot to relax

    Returns:
        New Voronoi snapshot with the iteration counter advanced
    """
    sites = np.array(voronoi.sites, dtype=np.float64)
    moved = 0

    for cell in voronoi.cells:
        if not cell.bounded or cell.is_empty:
            continue
        sites[cell.site] = cell.centroid()
        moved += 1

    logger.debug("Relaxation step computed", iteration=voronoi.iteration + 1,
                 moved=moved, pinned=len(sites) - moved)
    return voronoi.rebuild(sites, iteration=voronoi.iteration + 1)


def lloyd(voronoi: "Voronoi", iterations: int) -> Iterator["Voronoi"]:
    """Yield ``iterations`` successive relaxations of ``voronoi``."""
    if iterations < 0:
        raise ValueError(f"iterations must be non-negative, got {iterations}")

    current = voronoi
    for _ in range(iterations):
        current = relax(current)
        yield current


def centroid_energy(voronoi: "Voronoi") -> float:
    """Sum of squared distances from each bounded site to its cell centroid."""
    total = 0.0
    for cell in voronoi.cells:
        if not cell.bounded or cell.is_empty:
            continue
        offset = cell.centroid() - voronoi.sites[cell.site]
        total += float(offset @ offset)
    return total
