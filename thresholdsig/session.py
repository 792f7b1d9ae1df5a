"""
One signing session from first commitment to verification.

    CREATED -> COMMITTED -> PARTIALLY_SIGNED -> AGGREGATED -> VERIFIED | REJECTED

The session object is the coordinator's view: it holds public data only.
Each participant keeps the Commitment that commit() returns and hands it back
to sign(), which consumes its nonce. There is no way back from a terminal
state; retrying means opening a new session with fresh commitments.

Messages put in front of the group should come from authorization_message()
so that every session signs over its own monotonic id.
"""

import enum
import itertools
import logging
import math
import threading
from typing import Iterable, Optional

from .aggregator import combine
from .curve import as_point
from .errors import InsufficientShares, InvalidParameters, SessionStateError
from .keygen import MAX_PARTICIPANTS
from .nonce import commit as commit_nonce
from .signer import sign as sign_share
from .verifier import verify as verify_signature

logger = logging.getLogger(__name__)

_session_ids = itertools.count(1)
_session_ids_lock = threading.Lock()


def next_session_id() -> int:
    with _session_ids_lock:
        return next(_session_ids)


def _field(value) -> bytes:
    if isinstance(value, str):
        value = value.encode("utf-8")
    if not isinstance(value, (bytes, bytearray)):
        raise InvalidParameters(f"Expected str or bytes, got {type(value).__name__}")
    return len(value).to_bytes(4, "big") + bytes(value)


def issued_at_millis(issued_at) -> int:
    if isinstance(issued_at, bool) or not isinstance(issued_at, (int, float)) \
            or not math.isfinite(issued_at) or issued_at < 0:
        raise InvalidParameters(f"Issue time must be a non-negative number, got {issued_at!r}")
    return int(round(issued_at * 1000))


def authorization_message(resource_id, principal_id, action, session_id: int, issued_at: float) -> bytes:
    """
    Length-prefixed encoding of an access request. Binding session_id makes a
    signature useless for any other session; issued_at (seconds, signed with
    millisecond precision) lets validators enforce freshness.
    """
    if isinstance(session_id, bool) or not isinstance(session_id, int) or not 0 <= session_id < 2**64:
        raise InvalidParameters(f"Session id must be a non-negative integer, got {session_id!r}")
    return b"".join([
        _field(resource_id),
        _field(principal_id),
        _field(action),
        session_id.to_bytes(8, "big"),
        issued_at_millis(issued_at).to_bytes(8, "big"),
    ])


class SessionState(enum.Enum):
    CREATED = "created"
    COMMITTED = "committed"
    PARTIALLY_SIGNED = "partially_signed"
    AGGREGATED = "aggregated"
    VERIFIED = "verified"
    REJECTED = "rejected"


class SigningSession:
    def __init__(self, public_shares, group_public_key, threshold: int,
                 participants: Iterable[int], message, session_id: Optional[int] = None):
        public_shares = tuple(public_shares)
        participants = sorted(participants)
        known = {p.index for p in public_shares}
        if len(set(participants)) != len(participants):
            raise InvalidParameters(f"Participants are not distinct: {participants}")
        if not 1 <= threshold <= min(len(known), MAX_PARTICIPANTS):
            raise InvalidParameters(f"Threshold {threshold} is out of range")
        unknown = [i for i in participants if i not in known]
        if unknown:
            raise InvalidParameters(f"Unknown participants {unknown}")
        if len(participants) < threshold:
            raise InsufficientShares(required=threshold, got=len(participants))

        self.session_id = next_session_id() if session_id is None else session_id
        self.public_shares = public_shares
        self.group_public_key = as_point(group_public_key)
        self.threshold = threshold
        self.participants = tuple(participants)
        self.message = message
        self.state = SessionState.CREATED
        self.commitments = {}
        self.signature_shares = {}
        self.signature = None
        self._lock = threading.Lock()

    def _require(self, *states):
        if self.state not in states:
            raise SessionStateError(
                f"Session {self.session_id} is {self.state.value}, expected "
                + " or ".join(s.value for s in states))

    def _move(self, state):
        logger.debug("Session %s: %s -> %s", self.session_id, self.state.value, state.value)
        self.state = state

    def _check_participant(self, index):
        if index not in self.participants:
            raise SessionStateError(f"Participant {index} is not part of session {self.session_id}")

    def commit(self, share):
        """Create share's commitment for this session. Only once per participant."""
        with self._lock:
            self._require(SessionState.CREATED)
            self._check_participant(share.index)
            if share.index in self.commitments:
                raise SessionStateError(
                    f"Participant {share.index} already committed in session {self.session_id}")
            commitment = commit_nonce(share)
            self.commitments[share.index] = commitment.public
            if len(self.commitments) == len(self.participants):
                self._move(SessionState.COMMITTED)
            return commitment

    def sign(self, share, commitment):
        with self._lock:
            self._require(SessionState.COMMITTED, SessionState.PARTIALLY_SIGNED)
            self._check_participant(share.index)
            if share.index in self.signature_shares:
                raise SessionStateError(
                    f"Participant {share.index} already signed in session {self.session_id}")
            signature_share = sign_share(
                self.message, share, commitment, self.commitments.values(), self.public_shares)
            self.signature_shares[share.index] = signature_share
            if self.state is SessionState.COMMITTED:
                self._move(SessionState.PARTIALLY_SIGNED)
            return signature_share

    def aggregate(self):
        with self._lock:
            self._require(SessionState.PARTIALLY_SIGNED)
            self.signature = combine(
                self.message,
                self.signature_shares.values(),
                self.commitments.values(),
                self.public_shares,
                self.threshold,
                group_public_key=self.group_public_key,
            )
            self._move(SessionState.AGGREGATED)
            return self.signature

    def verify(self) -> bool:
        with self._lock:
            self._require(SessionState.AGGREGATED)
            valid = verify_signature(self.message, self.signature, self.group_public_key)
            self._move(SessionState.VERIFIED if valid else SessionState.REJECTED)
            return valid
