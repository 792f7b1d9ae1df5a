"""
Errors raised by the threshold engine.

Verification never raises; everything else fails fast with one of these
before touching any state.
"""


class ThresholdSignatureError(Exception):
    pass


class InvalidParameters(ThresholdSignatureError, ValueError):
    """Threshold or participant count out of bounds."""


class InsufficientShares(ThresholdSignatureError):
    """Fewer distinct signature shares than the threshold."""

    def __init__(self, required: int, got: int):
        super().__init__(f"Not enough signature shares. Need {required}, got {got}")
        self.required = required
        self.got = got


class MissingState(ThresholdSignatureError):
    """A nonce or commitment needed for signing is absent or already used."""


class SessionStateError(MissingState):
    """Operation not allowed in the session's current state."""


class MalformedInput(ThresholdSignatureError, ValueError):
    """Non-scalar, off-curve or wrong-length input."""


class InvalidSignatureShare(MalformedInput):
    def __init__(self, index: int):
        super().__init__(f"Signature share from participant {index} does not verify")
        self.index = index
