"""
Per-session nonce commitments.

Signing twice with the same nonce and different challenges gives two linear
equations in the share, which can then be solved for. SigningNonce is
therefore a one-shot container: consume() hands the value out once and then
forgets it, and copying or pickling it is refused.
"""

import logging
import threading
from collections import namedtuple

from .curve import order, pub_key_from_priv
from .errors import MissingState
from .toyrand import int_sample

logger = logging.getLogger(__name__)

# what a participant broadcasts to the rest of the session
NonceCommitment = namedtuple("NonceCommitment", "participant_index point")


class SigningNonce:
    __slots__ = ("participant_index", "_value", "_lock")

    def __init__(self, participant_index: int, value: int):
        self.participant_index = participant_index
        self._value = value
        self._lock = threading.Lock()

    @property
    def consumed(self) -> bool:
        return self._value is None

    def consume(self) -> int:
        with self._lock:
            value = self._value
            self._value = None
        if value is None:
            raise MissingState(
                f"Nonce of participant {self.participant_index} was already used")
        return value

    def discard(self):
        """Drop the nonce of an abandoned session."""
        with self._lock:
            self._value = None

    def __copy__(self):
        raise TypeError("SigningNonce cannot be copied")

    def __deepcopy__(self, memo):
        raise TypeError("SigningNonce cannot be copied")

    def __reduce__(self):
        raise TypeError("SigningNonce cannot be serialized")

    def __repr__(self):
        state = "consumed" if self.consumed else "fresh"
        return f"SigningNonce(participant_index={self.participant_index}, {state})"


class Commitment:
    """
    A participant's private half of one signing session: the nonce and the
    point nonce * G that everyone else gets to see.
    """

    def __init__(self, participant_index: int, nonce: SigningNonce, commitment_point):
        self.participant_index = participant_index
        self.nonce = nonce
        self.commitment_point = commitment_point

    @property
    def public(self) -> NonceCommitment:
        return NonceCommitment(self.participant_index, self.commitment_point)

    def __repr__(self):
        return (f"Commitment(participant_index={self.participant_index}, "
                f"nonce={self.nonce!r}, commitment_point={self.commitment_point!r})")


def commit(share) -> Commitment:
    """Draw a fresh nonce for share's participant and commit to it."""
    k = int_sample(order)
    point = pub_key_from_priv(k)
    logger.debug("Participant %d committed to %s", share.index, point)
    return Commitment(share.index, SigningNonce(share.index, k), point)
