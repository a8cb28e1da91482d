"""Site generation: uniform random sets, jittered grids and ring layouts."""

import math
from typing import Optional

import numpy as np
import structlog

from ..config import settings
from ..utils.random import SeedOrRng, describe_seed, resolve_prng
from .errors import InvalidInputError
from .geometry import BoundingBox

logger = structlog.get_logger()


def default_domain() -> BoundingBox:
    """Square sampling domain from settings, ``[-1, 1] x [-1, 1]`` by default."""
    return BoundingBox(settings.domain_min, settings.domain_min,
                       settings.domain_max, settings.domain_max)


def _check_count(count) -> int:
    if isinstance(count, bool) or not isinstance(count, (int, np.integer)):
        raise InvalidInputError(f"Site count must be an integer, got {count!r}")
    if count < 0:
        raise InvalidInputError(f"Site count must be non-negative, got {count}")
    return int(count)


def generate(count: int, seed_or_rng: SeedOrRng = None,
             bounds: Optional[BoundingBox] = None) -> np.ndarray:
    """
    Generate uniformly distributed sites.

    Args:
        count: Number of sites, may be below 3 (the triangulation will
            then be reported as degenerate)
        seed_or_rng: Seed for reproducibility or an ``AleaPRNG`` to draw from
        bounds: Sampling rectangle, defaults to the configured domain

    Returns:
        Array of [x, y] site coordinates, shape (count, 2)
    """
    count = _check_count(count)
    bounds = bounds or default_domain()
    if bounds.width < 0 or bounds.height < 0:
        raise InvalidInputError(f"Invalid sampling bounds {bounds}")

    prng = resolve_prng(seed_or_rng)

    points = np.empty((count, 2), dtype=np.float64)
    for i in range(count):
        points[i, 0] = prng.uniform(bounds.min_x, bounds.max_x)
        points[i, 1] = prng.uniform(bounds.min_y, bounds.max_y)

    logger.debug("Sites sampled", count=count, seed=describe_seed(seed_or_rng))
    return points


def jittered_grid(width: float, height: float, spacing: float,
                  seed_or_rng: SeedOrRng = None) -> np.ndarray:
    """
    Sites on the centres of a square lattice, each displaced by up to 45% of
    the spacing along both axes and clamped to ``[0, width] x [0, height]``.

    Rows run bottom to top and the generator is drawn x then y per site, so a
    seed always gives the same layout.
    """
    if spacing <= 0:
        raise InvalidInputError(f"Grid spacing must be positive, got {spacing}")

    prng = resolve_prng(seed_or_rng)

    xs = np.arange(spacing / 2, width, spacing)
    ys = np.arange(spacing / 2, height, spacing)
    gx, gy = np.meshgrid(xs, ys)
    centres = np.column_stack([gx.ravel(), gy.ravel()])

    amplitude = 0.45 * spacing
    draws = np.array([prng.random() for _ in range(centres.size)]).reshape(-1, 2)
    sites = centres + (2.0 * draws - 1.0) * amplitude

    sites[:, 0] = np.clip(sites[:, 0], 0.0, width)
    sites[:, 1] = np.clip(sites[:, 1], 0.0, height)
    logger.debug("Jittered grid sampled", sites=len(sites), spacing=spacing,
                 seed=describe_seed(seed_or_rng))
    return sites.reshape(-1, 2)


def ring(count: int, radius: float = 1.0, center: bool = True) -> np.ndarray:
    """
    Sites evenly spaced on a circle, optionally preceded by the centre.

    The first ring site sits on the positive y axis and the ring runs
    clockwise (``x = r sin a``, ``y = r cos a``). With ``count=6`` and
    ``center=True`` this is the hexagonal "wheel" layout.
    """
    count = _check_count(count)
    points = [[0.0, 0.0]] if center else []
    for i in range(count):
        a = math.radians(i * 360.0 / count)
        points.append([radius * math.sin(a), radius * math.cos(a)])
    return np.array(points, dtype=np.float64).reshape(-1, 2)
