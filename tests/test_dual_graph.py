"""Tests for Voronoi cells built from the triangulation."""

import math

import numpy as np
import pytest
from shapely.geometry import Point, Polygon, box
from shapely.ops import unary_union

from py_voronoi.core import BoundingBox, build_dual, generate, jittered_grid, ring, triangulate
from py_voronoi.core.geometry import polygon_area


class TestTiling:
    """Clipped cells cover the box without overlaps."""

    @pytest.mark.parametrize("seed", ["tile-a", "tile-b"])
    def test_areas_sum_to_box(self, seed):
        """Cell areas add up to the box area."""
        bounds = BoundingBox(-1.0, -1.0, 1.0, 1.0)
        cells = build_dual(triangulate(generate(120, seed)), bounds)
        total = sum(cell.area for cell in cells)
        assert total == pytest.approx(bounds.area, rel=1e-9)

    def test_no_overlaps(self):
        """The union of all cells is the box and no two cells overlap."""
        bounds = BoundingBox(0.0, 0.0, 40.0, 40.0)
        cells = build_dual(triangulate(jittered_grid(40, 40, 4, "union")), bounds)
        polygons = [Polygon(cell.polygon) for cell in cells]

        union = unary_union(polygons)
        assert union.symmetric_difference(box(*bounds)).area < 1e-6
        assert sum(p.area for p in polygons) == pytest.approx(union.area, rel=1e-9)

    def test_site_inside_own_cell(self):
        """Every site lies in its own clipped cell."""
        sites = generate(80, "inside")
        cells = build_dual(triangulate(sites), BoundingBox(-1.0, -1.0, 1.0, 1.0))
        for cell in cells:
            assert Polygon(cell.polygon).buffer(1e-12).contains(Point(sites[cell.site]))


class TestCellShape:
    """Vertex order, openness and adjacency."""

    def test_wheel_centre_is_hexagon(self):
        """The centre of the wheel has a regular hexagonal cell."""
        bounds = BoundingBox(-2.0, -2.0, 2.0, 2.0)
        cells = build_dual(triangulate(ring(6)), bounds)
        centre = cells[0]

        assert not centre.open
        assert centre.bounded
        assert len(centre.vertices) == 6
        np.testing.assert_allclose(np.hypot(*centre.vertices.T), 1 / math.sqrt(3))
        assert polygon_area(centre.vertices) == pytest.approx(math.sqrt(3) / 2)
        assert centre.area == pytest.approx(math.sqrt(3) / 2)
        assert centre.neighbors == (1, 2, 3, 4, 5, 6)
        for cell in cells[1:]:
            assert cell.open
            assert not cell.bounded

    def test_unit_square_cells(self):
        """Four open cells of equal area meeting at the centre."""
        bounds = BoundingBox(-0.1, -0.1, 1.1, 1.1)
        cells = build_dual(triangulate([(0, 0), (1, 0), (0, 1), (1, 1)]), bounds)

        for cell in cells:
            assert cell.open
            assert len(cell.vertices) == 1  # both circumcenters coincide
            np.testing.assert_allclose(cell.vertices[0], [0.5, 0.5])
            assert cell.area == pytest.approx(0.36)

    def test_offset_grid_cells_are_rectangles(self):
        """Cocircular corners off the integer lattice still give four-vertex cells."""
        sites = [(0.3 + 0.1 * i, 0.7 + 0.1 * j) for j in range(5) for i in range(5)]
        cells = build_dual(triangulate(sites), BoundingBox.around(np.array(sites)))
        bounded = [cell for cell in cells if cell.bounded]

        assert len(bounded) == 9
        for cell in bounded:
            assert len(cell.vertices) == 4
            assert len(cell.polygon) == 4
            assert cell.area == pytest.approx(0.01, rel=1e-6)
        for cell in cells:
            lengths = np.linalg.norm(cell.edges()[:, 1] - cell.edges()[:, 0], axis=1)
            assert lengths.min() > 1e-9

    def test_vertices_counter_clockwise(self):
        """Closed cells list their vertices counter-clockwise."""
        cells = build_dual(triangulate(generate(100, "ccw")), BoundingBox(-1, -1, 1, 1))
        closed = [cell for cell in cells if cell.bounded]
        assert closed
        for cell in closed:
            assert polygon_area(cell.vertices) > 0
            assert cell.area > 0

    def test_open_cells_are_hull_sites(self):
        """Exactly the hull sites have open cells."""
        tri = triangulate(generate(60, "hull"))
        cells = build_dual(tri, BoundingBox(-1, -1, 1, 1))
        assert {cell.site for cell in cells if cell.open} == set(tri.hull.tolist())

    def test_open_chain_starts_at_hull_triangle(self):
        """An open cell starts at the triangle of the site's outgoing hull edge."""
        tri = triangulate(generate(60, "chain"))
        cells = build_dual(tri, BoundingBox(-1, -1, 1, 1))
        for site, edge in tri.outgoing_hull_edges().items():
            assert cells[site].vertex_triangles[0] == edge // 3

    def test_neighbors_symmetric(self):
        """Neighbourhood is symmetric."""
        cells = build_dual(triangulate(generate(50, "sym")), BoundingBox(-1, -1, 1, 1))
        for cell in cells:
            for other in cell.neighbors:
                assert cell.site in cells[other].neighbors

    def test_edges_close_the_polygon(self):
        """Cell edges run around the clipped polygon."""
        cells = build_dual(triangulate(ring(6)), BoundingBox(-2, -2, 2, 2))
        edges = cells[0].edges()
        assert edges.shape == (6, 2, 2)
        np.testing.assert_allclose(edges[:, 1], np.roll(edges[:, 0], -1, axis=0))


class TestEmptyCells:
    """Merged and degenerate sites."""

    def test_duplicate_has_empty_cell(self):
        """A merged duplicate points at the kept site and has no polygon."""
        tri = triangulate([(0, 0), (1, 0), (0, 1), (1, 1), (1, 1)])
        cells = build_dual(tri, BoundingBox(-1, -1, 2, 2))
        assert cells[4].merged_into == 3
        assert cells[4].is_empty
        assert cells[4].centroid() is None
        assert cells[4].edges().shape == (0, 2, 2)
        assert not cells[3].is_empty

    def test_collinear_all_empty(self):
        """Collinear input gives one empty cell per site."""
        cells = build_dual(triangulate([(0, 0), (1, 1), (2, 2)]), BoundingBox(-1, -1, 3, 3))
        assert len(cells) == 3
        assert all(cell.is_empty for cell in cells)

    def test_no_sites(self):
        """Empty input gives no cells."""
        assert build_dual(triangulate([]), BoundingBox(-1, -1, 1, 1)) == []
