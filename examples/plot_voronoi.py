#!/usr/bin/env python3
"""
Plot a Voronoi diagram before and after relaxation.

Needs the ``viz`` extra (matplotlib).
"""

import matplotlib.pyplot as plt
from matplotlib.collections import LineCollection, PolyCollection
from py_voronoi.core import Voronoi


def draw(ax, diagram: Voronoi, title: str):
    """Draw cells, the triangulation wireframe and the sites."""
    export = diagram.export

    ax.add_collection(PolyCollection(
        [cell.polygon for cell in diagram.cells if not cell.is_empty],
        facecolors="#dde8f0", edgecolors="#4a6f8a", linewidths=0.8,
    ))
    ax.add_collection(LineCollection(
        export.triangle_edges(unique=True), colors="#d08060", linewidths=0.4, alpha=0.6,
    ))
    sites = export.sites()
    ax.scatter(sites[:, 0], sites[:, 1], s=6, c="black", zorder=3)

    bounds = diagram.bounds
    ax.set_xlim(bounds.min_x, bounds.max_x)
    ax.set_ylim(bounds.min_y, bounds.max_y)
    ax.set_aspect("equal")
    ax.set_title(title)


def main():
    diagram = Voronoi.random(150, seed="plot_demo")
    *_, relaxed = diagram.lloyd(5)

    fig, (left, right) = plt.subplots(1, 2, figsize=(14, 7))
    draw(left, diagram, "Random sites")
    draw(right, relaxed, f"After {relaxed.iteration} Lloyd iterations")

    plt.tight_layout()
    plt.savefig("voronoi_relaxation.png", dpi=150)
    print("Saved voronoi_relaxation.png")


if __name__ == "__main__":
    main()
