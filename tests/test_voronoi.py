"""Tests for the Voronoi snapshot API."""

import numpy as np
import pytest

from py_voronoi import BoundingBox, Voronoi, __version__
from py_voronoi.core import DuplicateSiteError, TriangulationStatus, generate, ring


class TestConstruction:
    """Building snapshots."""

    def test_random_defaults(self):
        """A random diagram uses the configured count and domain."""
        diagram = Voronoi.random(seed="defaults")
        assert len(diagram.sites) == 20
        assert diagram.bounds == BoundingBox(-1.0, -1.0, 1.0, 1.0)
        assert diagram.iteration == 0
        assert diagram.status is TriangulationStatus.OK

    def test_random_is_reproducible(self):
        """Same seed, same sites."""
        np.testing.assert_array_equal(Voronoi.random(30, "same").sites,
                                      Voronoi.random(30, "same").sites)

    def test_from_sites_default_bounds(self):
        """Caller-supplied sites get a padded box around them."""
        diagram = Voronoi.from_sites([(0, 0), (2, 0), (0, 1), (2, 1)])
        assert diagram.bounds == BoundingBox(-0.2, -0.2, 2.2, 1.2)
        assert len(diagram.cells) == 4

    def test_explicit_bounds(self):
        """Explicit bounds are used as given."""
        bounds = BoundingBox(-5, -5, 5, 5)
        diagram = Voronoi.from_sites(ring(6), bounds=bounds)
        assert diagram.bounds == bounds
        assert sum(cell.area for cell in diagram.cells) == pytest.approx(100.0)

    def test_cell_lookup(self):
        """cell(i) returns the cell of site i."""
        diagram = Voronoi.from_sites(ring(6))
        assert diagram.cell(0).site == 0
        assert diagram.cell(0).bounded

    def test_version(self):
        """The package exposes its version."""
        assert __version__ == "0.1.0"


class TestDuplicatePolicy:
    """Duplicate handling carries through rebuilds."""

    def test_strict_raises(self):
        """Strict snapshots reject duplicates."""
        with pytest.raises(DuplicateSiteError):
            Voronoi.from_sites([(0, 0), (1, 0), (0, 1), (0, 0)], strict=True)

    def test_merged_site_kept_through_relaxation(self):
        """A merged duplicate on the hull keeps its position and its empty cell."""
        sites = np.vstack([generate(30, "dup"), [[1.0, 1.0], [1.0, 1.0]]])
        diagram = Voronoi.from_sites(sites, bounds=BoundingBox(-1, -1, 1, 1))
        relaxed = diagram.relax()

        assert relaxed.triangulation.duplicates == {31: 30}
        np.testing.assert_array_equal(relaxed.sites[31], [1.0, 1.0])
        assert relaxed.cell(31).is_empty

    def test_rebuild_keeps_settings(self):
        """rebuild() keeps bounds, tolerance and iteration."""
        diagram = Voronoi.from_sites(generate(20, "rebuild"), tolerance=1e-3)
        rebuilt = diagram.rebuild(generate(20, "other"))
        assert rebuilt.bounds == diagram.bounds
        assert rebuilt.tolerance == 1e-3
        assert rebuilt.iteration == diagram.iteration


class TestSnapshots:
    """Relaxation through the snapshot API."""

    def test_relax_and_lloyd(self):
        """Methods delegate to the relaxation module."""
        diagram = Voronoi.random(50, "methods")
        assert diagram.relax().iteration == 1
        assert [v.iteration for v in diagram.lloyd(2)] == [1, 2]

    def test_degenerate_flags(self):
        """Degenerate input is flagged on the snapshot."""
        diagram = Voronoi.from_sites([(0, 0), (1, 0)])
        assert diagram.is_degenerate
        assert diagram.status is TriangulationStatus.INSUFFICIENT_SITES

    def test_immutable(self):
        """Snapshots are frozen."""
        diagram = Voronoi.random(10, "frozen")
        with pytest.raises(AttributeError):
            diagram.iteration = 5
