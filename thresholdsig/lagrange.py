"""
Lagrange interpolation at x = 0 over the scalar field of secp256k1.

Given the participant indices x_1..x_k of a signing set, each party's
coefficient is

    L_i = prod_{j != i} (-x_j) / (x_i - x_j)   mod order

and sum(L_i * f(x_i)) is f(0) for any polynomial f of degree < k. Applied to
points (L_i * f(x_i) * G) the same sum gives f(0) * G without f(0) ever
existing as a scalar.
"""

from typing import Dict, Iterable, List

from .curve import order, scalar_inv_mod_order, ec_scalar_mul, ec_sum
from .errors import MalformedInput


def check_indices(indices: Iterable[int]) -> List[int]:
    indices = list(indices)
    if not indices:
        raise MalformedInput("At least one participant index is required")
    for x in indices:
        if not isinstance(x, int) or isinstance(x, bool) or x < 1 or x >= order:
            raise MalformedInput(f"Participant index {x!r} is out of range")
    if len(set(indices)) != len(indices):
        raise MalformedInput(f"Participant indices are not distinct: {sorted(indices)}")
    return indices


def lagrange_coefficients(indices: Iterable[int]) -> Dict[int, int]:
    """
    Map every index of the set to its coefficient at 0.

    Numerator and denominator are accumulated separately so each coefficient
    needs a single modular inversion.
    """
    indices = check_indices(indices)
    coefficients = {}
    for x_i in indices:
        num = 1
        denom = 1
        for x_j in indices:
            if x_j != x_i:
                num = num * (-x_j) % order
                denom = denom * (x_i - x_j) % order
        coefficients[x_i] = num * scalar_inv_mod_order(denom) % order
    return coefficients


def interpolate_point(points_by_index: Dict[int, object]):
    """Evaluate at 0 the polynomial hidden in the exponent of the given points."""
    coefficients = lagrange_coefficients(points_by_index.keys())
    return ec_sum(
        ec_scalar_mul(point, coefficients[index])
        for index, point in points_by_index.items()
    )
