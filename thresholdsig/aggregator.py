"""
Combination of signature shares.

The aggregator sees only public data: the session commitments, the public
shares and the signature shares. It recomputes the session context exactly
as the signers did, checks every share on its own and interpolates them
into one scalar z with z * G = R + c * Y.

The signature carries r = z, s = c and the parity of R's y coordinate, so a
verifier holding only Y can rebuild R = r * G - s * Y and recompute c.
"""

import logging
from collections import namedtuple

from .curve import order, pub_key_from_priv, ec_add, ec_scalar_mul, as_point, scalar_to_bytes, scalar_from_bytes, SCALAR_SIZE
from .errors import InsufficientShares, InvalidParameters, InvalidSignatureShare, MalformedInput
from .keygen import public_shares_by_index
from .signer import session_context

logger = logging.getLogger(__name__)

SIGNATURE_SIZE = 2 * SCALAR_SIZE + 1


class AggregatedSignature(namedtuple("AggregatedSignature", "r s recovery_id")):
    def to_bytes(self) -> bytes:
        return bytes(self.r) + bytes(self.s) + bytes([self.recovery_id])

    @classmethod
    def from_bytes(cls, data: bytes):
        if not isinstance(data, (bytes, bytearray)) or len(data) != SIGNATURE_SIZE:
            raise MalformedInput(f"Signature must be exactly {SIGNATURE_SIZE} bytes")
        return cls(bytes(data[:SCALAR_SIZE]), bytes(data[SCALAR_SIZE:2 * SCALAR_SIZE]), data[-1])

    @classmethod
    def from_hex(cls, value: str):
        try:
            data = bytes.fromhex(value)
        except ValueError as e:
            raise MalformedInput("Signature is not valid hex") from e
        return cls.from_bytes(data)

    def __repr__(self):
        return self.to_bytes().hex().upper()


def verify_signature_share(signature_share, commitment_point, public_share_point, c) -> bool:
    """z_i * G == D_i + c * P_i"""
    return pub_key_from_priv(signature_share.value) == ec_add(
        commitment_point, ec_scalar_mul(public_share_point, c))


def combine(message, signature_shares, session_commitments, public_shares, threshold, group_public_key=None) -> AggregatedSignature:
    """
    Interpolate at least threshold signature shares into one signature.

    session_commitments must be the set every signer used. Their order does
    not matter, they are sorted by participant index before hashing.
    """
    if not isinstance(threshold, int) or threshold < 1:
        raise InvalidParameters(f"Threshold must be a positive integer, got {threshold!r}")
    shares = list(signature_shares)
    indices = [s.index for s in shares]
    # only distinct indices count towards the threshold
    if len(set(indices)) < threshold:
        raise InsufficientShares(required=threshold, got=len(shares))
    if len(set(indices)) != len(indices):
        raise MalformedInput(f"Duplicate signature share indices: {sorted(indices)}")
    for s in shares:
        if not isinstance(s.value, int) or not 0 <= s.value < order:
            raise MalformedInput(f"Signature share from participant {s.index} is not a scalar")

    context = session_context(message, session_commitments, public_shares)
    if set(indices) != set(context.coefficients):
        raise MalformedInput(
            f"Signature shares {sorted(indices)} do not match session commitments "
            f"{sorted(context.coefficients)}")
    if group_public_key is not None and context.group_public_key != as_point(group_public_key):
        raise MalformedInput("Public shares do not belong to the given group key")

    commitment_points = {c.participant_index: c.point for c in context.commitments}
    public_points = public_shares_by_index(public_shares, indices)
    for s in shares:
        if not verify_signature_share(s, commitment_points[s.index], public_points[s.index], context.challenge):
            raise InvalidSignatureShare(s.index)

    z = 0
    for s in shares:
        z = (z + s.value * context.coefficients[s.index]) % order

    R = context.group_commitment
    signature = AggregatedSignature(
        r=scalar_to_bytes(z),
        s=scalar_to_bytes(context.challenge),
        recovery_id=R.y & 1,
    )
    logger.info("Combined %d signature shares from participants %s", len(shares), sorted(indices))
    return signature


def signature_scalars(signature):
    """Decode (r, s, recovery_id) to integers, rejecting anything out of range."""
    if isinstance(signature, str):
        signature = AggregatedSignature.from_hex(signature)
    elif isinstance(signature, (bytes, bytearray)):
        signature = AggregatedSignature.from_bytes(signature)
    r, s, recovery_id = signature
    if recovery_id not in (0, 1):
        raise MalformedInput(f"Recovery id must be 0 or 1, got {recovery_id!r}")
    return scalar_from_bytes(r), scalar_from_bytes(s), recovery_id
