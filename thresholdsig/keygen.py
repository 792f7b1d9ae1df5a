"""
Share generation for a t-of-n group.

A dealer draws a random polynomial of degree t - 1 whose constant term is the
group secret, hands participant i the value f(i) and publishes f(i) * G for
everyone. The constant term itself only ever leaves this module as
a0 * G, the group public key.

Alongside the public shares the dealer publishes a_j * G for every
coefficient (Feldman commitments) so a participant can check that its share
lies on the committed polynomial, see verify_share.
"""

import logging
from collections import namedtuple
from typing import Sequence

from .curve import order, pub_key_from_priv, ec_scalar_mul, ec_sum, as_point, Point
from .errors import InvalidParameters, MalformedInput
from .toyrand import int_sample

logger = logging.getLogger(__name__)

MAX_PARTICIPANTS = 50


class ParticipantShare(namedtuple("ParticipantShare", "index value")):
    def __repr__(self):
        # the value is private to its participant
        return f"ParticipantShare(index={self.index}, value=<hidden>)"


PublicShare = namedtuple("PublicShare", "index point")

KeyShareSet = namedtuple(
    "KeyShareSet",
    "shares public_shares group_public_key threshold total coefficient_commitments")


def check_parameters(n, t):
    for name, value in (("n", n), ("t", t)):
        if not isinstance(value, int) or isinstance(value, bool):
            raise InvalidParameters(f"{name} must be an integer, got {value!r}")
    if n < 1 or n > MAX_PARTICIPANTS:
        raise InvalidParameters(f"Participant count must be in [1, {MAX_PARTICIPANTS}], got {n}")
    if t < 1:
        raise InvalidParameters(f"Threshold must be at least 1, got {t}")
    if t > n:
        raise InvalidParameters(f"Threshold cannot exceed total participants ({t} > {n})")


class Polynomial:
    def __init__(self, t, n):
        # coef[0] is the group secret, t coefficients for degree t - 1
        self.coef = [int_sample(order) for _ in range(t)]
        # share j is the polynomial at x = j, evaluated highest coefficient first
        self.yval = []
        for x in range(1, n + 1):
            y = 0
            for c in reversed(self.coef):
                y = (y * x + c) % order
            self.yval.append(y)

        # public points for the coefficients, the first one is the group key
        self.vss = [pub_key_from_priv(x) for x in self.coef]

    def erase(self):
        self.coef = [0] * len(self.coef)


def generate(n: int, t: int) -> KeyShareSet:
    """
    Split a fresh random group secret into n shares, any t of which can sign.

    Raises InvalidParameters unless 1 <= t <= n <= 50. Nothing is drawn
    before the parameters are checked.
    """
    check_parameters(n, t)
    poly = Polynomial(t, n)
    try:
        shares = tuple(ParticipantShare(i, y) for i, y in enumerate(poly.yval, start=1))
        public_shares = tuple(PublicShare(s.index, pub_key_from_priv(s.value)) for s in shares)
        commitments = tuple(poly.vss)
    finally:
        poly.erase()
    logger.info("Generated %d-of-%d key shares for group key %s", t, n, commitments[0])
    return KeyShareSet(
        shares=shares,
        public_shares=public_shares,
        group_public_key=commitments[0],
        threshold=t,
        total=n,
        coefficient_commitments=commitments,
    )


def calc_vss_proof(index: int, coefficient_commitments: Sequence[Point]):
    """
    Right side of the Feldman equation: sum_j A_j * index^j.
    """
    return ec_sum(
        ec_scalar_mul(commitment, pow(index, j, order))
        for j, commitment in enumerate(coefficient_commitments)
    )


def verify_share(share: ParticipantShare, coefficient_commitments: Sequence[Point]) -> bool:
    """Check that share lies on the polynomial the dealer committed to."""
    if not coefficient_commitments:
        raise MalformedInput("No coefficient commitments")
    if not isinstance(share.value, int) or not 0 <= share.value < order:
        return False
    return pub_key_from_priv(share.value) == calc_vss_proof(share.index, coefficient_commitments)


def public_shares_by_index(public_shares, indices) -> dict:
    """Pick the public shares of the given indices, failing on any gap."""
    available = {}
    for public in public_shares:
        available[public.index] = as_point(public.point)
    missing = [i for i in indices if i not in available]
    if missing:
        raise MalformedInput(f"No public share for participants {missing}")
    return {i: available[i] for i in indices}
