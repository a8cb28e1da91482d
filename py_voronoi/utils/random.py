"""
Random number generation utilities.

Samplers accept either a seed or a ready generator; this module turns
whichever was passed into an ``AleaPRNG`` so the same seed always yields
the same site set.
"""

from typing import Optional, Union

from ..core.alea_prng import AleaPRNG

SeedOrRng = Union[None, str, int, float, AleaPRNG]

DEFAULT_SEED = "default"


def resolve_prng(seed_or_rng: SeedOrRng = None) -> AleaPRNG:
    """
    Get a generator for a seed or generator argument.

    Args:
        seed_or_rng: Seed string or number, an existing ``AleaPRNG`` (used
            as is, so its state advances), or None for the default seed

    Returns:
        AleaPRNG instance
    """
    if isinstance(seed_or_rng, AleaPRNG):
        return seed_or_rng
    if seed_or_rng is None:
        return AleaPRNG(DEFAULT_SEED)
    return AleaPRNG(seed_or_rng)


def describe_seed(seed_or_rng: SeedOrRng) -> Optional[str]:
    """Seed label for log events."""
    if isinstance(seed_or_rng, AleaPRNG):
        return str(seed_or_rng.seed)
    return None if seed_or_rng is None else str(seed_or_rng)
