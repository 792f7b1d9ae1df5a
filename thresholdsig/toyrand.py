"""
Uniform scalar sampling.

secrets draws from the OS CSPRNG, which is safe to share between threads
and never correlates outputs across callers.
"""

import secrets


def int_sample(upper: int) -> int:
    """
    Return an integer uniformly distributed in [1, upper - 1].

    Candidates are drawn with the bit length of upper and anything outside the
    range is discarded, so there is no modulo bias.
    """
    if upper <= 2:
        raise ValueError("upper bound must be greater than 2")
    nbits = upper.bit_length()
    while True:
        candidate = secrets.randbits(nbits)
        if 0 < candidate < upper:
            return candidate
