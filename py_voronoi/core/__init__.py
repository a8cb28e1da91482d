"""
Core geometry engine: sampling, triangulation, Voronoi cells and relaxation.
"""

from .errors import DuplicateSiteError, GeometryError, InvalidInputError, TriangulationStatus
from .geometry import BoundingBox, Point, incircle, orient2d
from .sampler import generate, jittered_grid, ring
from .triangulation import Triangulation, triangulate
from .dual_graph import VoronoiCell, build_dual
from .relaxation import centroid_energy, lloyd, relax
from .export import GeometryExport
from .voronoi import Voronoi

__all__ = ['BoundingBox', 'Point', 'orient2d', 'incircle',
           'generate', 'jittered_grid', 'ring',
           'Triangulation', 'triangulate', 'VoronoiCell', 'build_dual',
           'relax', 'lloyd', 'centroid_energy', 'GeometryExport', 'Voronoi',
           'GeometryError', 'InvalidInputError', 'DuplicateSiteError',
           'TriangulationStatus']
