"""
Alea pseudo random number generator.

Johannes Baagøe's Alea: a small, seedable generator whose output is the same
on every platform for a given seed, which keeps sampled site sets
reproducible without depending on NumPy's bit generators.
"""

_MASH_SEED = 0xEFC8249D
_FRAC_32 = 2.3283064365386963e-10  # 2^-32


def _uint32(n):
    """Convert to unsigned 32-bit integer."""
    return int(n) & 0xFFFFFFFF


class _Mash:
    """Alea's string hashing step, fed once per seed argument."""

    def __init__(self):
        self.n = _MASH_SEED

    def __call__(self, data) -> float:
        for char in str(data):
            self.n += ord(char)
            h = 0.02519603282416938 * self.n
            self.n = _uint32(h)
            h -= self.n
            h *= self.n
            self.n = _uint32(h)
            h -= self.n
            self.n += h * 0x100000000
        return _uint32(self.n) * _FRAC_32


class AleaPRNG:
    """
    Seedable uniform generator.

    Any string or number is accepted as seed; an iterable (other than a
    string) is treated as several seed arguments.
    """

    def __init__(self, seed):
        if hasattr(seed, "__iter__") and not isinstance(seed, str):
            args = list(seed)
        else:
            args = [seed]

        self.seed = seed
        self.draws = 0

        mash = _Mash()
        state = [mash(" "), mash(" "), mash(" ")]
        for arg in args:
            for k in range(3):
                state[k] -= mash(arg)
                if state[k] < 0:
                    state[k] += 1
        self.s0, self.s1, self.s2 = state
        self.c = 1

    def random(self) -> float:
        """Next value in [0, 1)."""
        self.draws += 1
        t = 2091639 * self.s0 + self.c * _FRAC_32
        self.s0 = self.s1
        self.s1 = self.s2
        self.c = int(t)
        self.s2 = t - self.c
        return self.s2

    def uniform(self, low: float, high: float) -> float:
        """Next value in [low, high)."""
        return low + (high - low) * self.random()
