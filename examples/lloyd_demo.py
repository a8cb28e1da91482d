#!/usr/bin/env python3
"""
Demonstration of Lloyd relaxation on a random site set.

Builds a diagram from 200 seeded sites, relaxes it a few times and prints
how the cells even out at each step.
"""

import numpy as np
from py_voronoi.config import configure_logging
from py_voronoi.core import Voronoi, centroid_energy


def describe(diagram: Voronoi) -> str:
    areas = np.array([cell.area for cell in diagram.cells if cell.bounded])
    return (f"iteration {diagram.iteration:2d}: "
            f"energy={centroid_energy(diagram):.6f}, "
            f"bounded={len(areas)}, "
            f"area mean={areas.mean():.5f} std={areas.std():.5f}")


def main():
    configure_logging(level="WARNING")

    print("=== Lloyd Relaxation Demo ===\n")

    diagram = Voronoi.random(200, seed="lloyd_demo")
    print(f"Sites: {len(diagram.sites)}, triangles: {diagram.triangulation.n_triangles}, "
          f"hull: {len(diagram.triangulation.hull)}")
    print(f"Bounds: {tuple(diagram.bounds)}\n")

    print(describe(diagram))
    for relaxed in diagram.lloyd(10):
        print(describe(relaxed))

    # Hull sites never move
    hull = diagram.triangulation.hull
    moved = np.abs(relaxed.sites[hull] - diagram.sites[hull]).max()
    print(f"\nLargest hull site displacement: {moved}")


if __name__ == "__main__":
    main()
