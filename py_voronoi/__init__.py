"""
py-voronoi: Delaunay triangulation, Voronoi diagrams and Lloyd relaxation
for planar site sets.
"""

__version__ = "0.1.0"

from .core import (
    BoundingBox, GeometryExport, Triangulation, Voronoi, VoronoiCell,
    build_dual, generate, relax, triangulate,
)

__all__ = ['BoundingBox', 'GeometryExport', 'Triangulation', 'Voronoi', 'VoronoiCell',
           'build_dual', 'generate', 'relax', 'triangulate', '__version__']
