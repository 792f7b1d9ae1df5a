"""
Partial signatures.

Each participant in a session publishes D_i = k_i * G. With L_i the Lagrange
coefficients of the session's index set, the session commits to

    R = sum(L_i * D_i)

and the challenge is c = H(H(m) || R || Y) where Y is the group key. A
participant answers with z_i = k_i + c * s_i. Because sum(L_i * s_i) is the
group secret, sum(L_i * z_i) * G = R + c * Y, which is what the verifier
checks. R depends on every commitment in the set, so a share computed
against a different set, or a different message, does not combine.
"""

import logging
from collections import namedtuple
from hashlib import sha256
from typing import Dict, List, Union

from .curve import order, compressed, as_point, ec_scalar_mul, ec_sum, O
from .errors import MalformedInput, MissingState
from .keygen import public_shares_by_index
from .lagrange import check_indices, lagrange_coefficients, interpolate_point
from .nonce import Commitment, NonceCommitment

logger = logging.getLogger(__name__)

SignatureShare = namedtuple("SignatureShare", "index value")

SessionContext = namedtuple("SessionContext", "commitments coefficients group_commitment group_public_key challenge")


def hash_message(message: Union[bytes, str]) -> bytes:
    if isinstance(message, str):
        message = message.encode("utf-8")
    if not isinstance(message, (bytes, bytearray)):
        raise MalformedInput("Message must be bytes or str")
    return sha256(message).digest()


def canonical_commitments(session_commitments) -> List[NonceCommitment]:
    """
    Public commitments ordered by participant index. Accepts private
    Commitment objects too, only their public half is kept.
    """
    commitments = []
    for c in session_commitments:
        if isinstance(c, Commitment):
            c = c.public
        commitments.append(NonceCommitment(c.participant_index, as_point(c.point)))
    check_indices(c.participant_index for c in commitments)
    return sorted(commitments, key=lambda c: c.participant_index)


def group_commitment(commitments: List[NonceCommitment], coefficients: Dict[int, int]):
    return ec_sum(
        ec_scalar_mul(c.point, coefficients[c.participant_index]) for c in commitments
    )


def challenge(message_hash: bytes, R, Y) -> int:
    digest = sha256(message_hash + compressed(R) + compressed(Y)).digest()
    return int.from_bytes(digest, byteorder="big") % order


def session_context(message, session_commitments, public_shares) -> SessionContext:
    """Everything a signer and the aggregator must agree on for one session."""
    commitments = canonical_commitments(session_commitments)
    indices = [c.participant_index for c in commitments]
    coefficients = lagrange_coefficients(indices)
    R = group_commitment(commitments, coefficients)
    if R == O:
        raise MalformedInput("Session commitments cancel out")
    Y = interpolate_point(public_shares_by_index(public_shares, indices))
    if Y == O:
        raise MalformedInput("Public shares interpolate to the point at origin")
    c = challenge(hash_message(message), R, Y)
    return SessionContext(commitments, coefficients, R, Y, c)


def sign(message, share, nonce: Commitment, session_commitments, session_public_shares) -> SignatureShare:
    """
    Compute share.index's signature share for message.

    nonce is the Commitment returned by commit() for this session; its nonce is
    consumed here and cannot sign again.
    """
    if nonce is None or nonce.nonce is None or nonce.nonce.consumed:
        raise MissingState(f"No unused nonce for participant {share.index}")
    if nonce.participant_index != share.index or nonce.nonce.participant_index != share.index:
        raise MissingState(f"Nonce does not belong to participant {share.index}")
    if not isinstance(share.value, int) or not 0 < share.value < order:
        raise MalformedInput("Share value is not a scalar")

    context = session_context(message, session_commitments, session_public_shares)
    listed = {c.participant_index: c.point for c in context.commitments}
    if listed.get(share.index) != nonce.commitment_point:
        raise MissingState(
            f"Participant {share.index} has no commitment in this session matching its nonce")

    k = nonce.nonce.consume()
    value = (k + context.challenge * share.value) % order
    logger.debug("Participant %d produced a signature share", share.index)
    return SignatureShare(share.index, value)
