#!/usr/bin/env python3
"""
Deterministic Pseudo-Random Generator
=====================================
15-bit linear congruential generator with a step counter folded into
the increment:

    r = (r * 2005 + 1 + (k % 2005)) % 32768
    k = k + 1

Identical seeds and draw counts always give identical sequences, which
is what makes a generation run reproducible byte for byte.

pick(n) maps the current state onto [0, n) for any n, including n
larger than the 15-bit range, by splitting n into a quotient and a
remainder of 32768.
"""

from gibberkit.settings import get_setting

MULTIPLIER = 2005
INCREMENT = 1
MODULUS = 32768

DEFAULT_SEED = get_setting("random.seed", 17)


class PseudoRandomGenerator:
    """LCG state (r, k) for one generation stream."""

    def __init__(self, seed: int = DEFAULT_SEED):
        self.seed(seed)

    def seed(self, value: int = DEFAULT_SEED):
        """Reset to a known state with a zero step count."""
        self.value = value % MODULUS
        self.steps = 0

    @property
    def state(self) -> tuple[int, int]:
        return self.value, self.steps

    def pick(self, n: int) -> int:
        """
        Index in [0, n) derived from the current state (state unchanged).

        Raises:
            ValueError: n is not positive
        """
        if n < 1:
            raise ValueError(f"Cannot pick from an empty range (n={n})")
        quotient, remainder = divmod(n, MODULUS)
        return (self.value * remainder) // MODULUS + quotient * self.value

    def advance(self) -> int:
        """Step the generator once; returns the new value."""
        self.value = (self.value * MULTIPLIER + INCREMENT + (self.steps % MULTIPLIER)) % MODULUS
        self.steps += 1
        return self.value

    def __repr__(self) -> str:
        return f"PseudoRandomGenerator(value={self.value}, steps={self.steps})"


__all__ = [
    "PseudoRandomGenerator",
    "DEFAULT_SEED",
    "MULTIPLIER",
    "INCREMENT",
    "MODULUS",
]
