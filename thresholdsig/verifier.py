"""
Verification of aggregated signatures against the group public key.

    R = r * G - s * Y
    valid  <=>  R != O, parity(R.y) == recovery_id, H(H(m) || R || Y) == s

An invalid signature is an expected outcome, not a fault: verify() returns
False for anything it cannot parse instead of raising.
"""

import hmac
import logging

from .aggregator import signature_scalars
from .curve import pub_key_from_priv, ec_sub, ec_scalar_mul, as_point, scalar_to_bytes, O
from .errors import ThresholdSignatureError
from .signer import hash_message, challenge

logger = logging.getLogger(__name__)


def verify(message, signature, group_public_key) -> bool:
    try:
        z, c, recovery_id = signature_scalars(signature)
        Y = as_point(group_public_key)
        R = ec_sub(pub_key_from_priv(z), ec_scalar_mul(Y, c))
        if R == O:
            return False
        if R.y & 1 != recovery_id:
            return False
        expected = challenge(hash_message(message), R, Y)
        return hmac.compare_digest(scalar_to_bytes(expected), scalar_to_bytes(c))
    except (ThresholdSignatureError, ValueError, TypeError, ArithmeticError) as e:
        logger.debug("Rejecting signature: %s", e)
        return False
