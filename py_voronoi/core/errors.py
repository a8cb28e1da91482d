"""Error taxonomy and degeneracy statuses for the geometry engine."""

from enum import Enum


class GeometryError(ValueError):
    """Base class for errors raised by the engine."""


class InvalidInputError(GeometryError):
    """Malformed input: non-finite coordinates, wrong shape or a negative count."""


class DuplicateSiteError(GeometryError):
    """Two sites lie within the duplicate tolerance of each other (strict mode only)."""

    def __init__(self, duplicates):
        self.duplicates = dict(duplicates)
        pairs = ", ".join(f"{i}->{j}" for i, j in sorted(self.duplicates.items()))
        super().__init__(f"Near-coincident sites: {pairs}")


class TriangulationStatus(str, Enum):
    """Outcome of a triangulation. Degenerate outcomes are results, not errors."""
    OK = "ok"
    INSUFFICIENT_SITES = "insufficient_sites"
    COLLINEAR = "collinear"
