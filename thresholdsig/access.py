"""
Capability interface for cloud IAM connectors.

A connector only ever learns whether access is granted. Each provider is a
variant of AccessValidator registered under a CloudProvider tag, so callers
pick one with validator_for() rather than comparing provider names.
"""

import enum
import logging
import threading
import time
from collections import namedtuple

from .curve import as_point
from .errors import ThresholdSignatureError
from .session import authorization_message
from .verifier import verify

logger = logging.getLogger(__name__)

DEFAULT_MAX_AGE = 300

AccessProof = namedtuple("AccessProof", "resource_id principal_id action session_id issued_at signature")


class CloudProvider(enum.Enum):
    AWS = "aws"
    AZURE = "azure"
    GCP = "gcp"


class AccessValidator:
    provider = None

    def __init__(self, group_public_key, max_age: float = DEFAULT_MAX_AGE, clock=time.time):
        self.group_public_key = as_point(group_public_key)
        self.max_age = max_age
        self.clock = clock
        # session id -> signed issue time, pruned once older than max_age
        self._seen_sessions = {}
        self._lock = threading.Lock()

    def accepts_resource(self, resource_id: str) -> bool:
        return bool(resource_id)

    def _forget_expired(self, now):
        expired = [s for s, issued_at in self._seen_sessions.items() if now - issued_at > self.max_age]
        for session_id in expired:
            del self._seen_sessions[session_id]

    def validate_access(self, resource_id: str, principal_id: str, proof: AccessProof) -> bool:
        if proof is None or proof.signature is None:
            return False
        if proof.resource_id != resource_id or proof.principal_id != principal_id:
            return False
        if not self.accepts_resource(resource_id):
            return False
        if isinstance(proof.issued_at, bool) or not isinstance(proof.issued_at, (int, float)):
            return False
        now = self.clock()
        age = now - proof.issued_at
        if not 0 <= age <= self.max_age:
            logger.info("[%s] Proof for %s is stale", self.provider.name, resource_id)
            return False
        try:
            message = authorization_message(
                proof.resource_id, proof.principal_id, proof.action, proof.session_id, proof.issued_at)
        except (ThresholdSignatureError, ValueError, TypeError) as e:
            logger.info("[%s] Malformed proof for %s: %s", self.provider.name, resource_id, e)
            return False
        if not verify(message, proof.signature, self.group_public_key):
            logger.info("[%s] Signature rejected for %s on %s", self.provider.name, principal_id, resource_id)
            return False
        with self._lock:
            self._forget_expired(now)
            if proof.session_id in self._seen_sessions:
                logger.warning("[%s] Replayed session %s", self.provider.name, proof.session_id)
                return False
            self._seen_sessions[proof.session_id] = proof.issued_at
        logger.info("[%s] Access to %s granted to %s", self.provider.name, resource_id, principal_id)
        return True


class AwsAccessValidator(AccessValidator):
    provider = CloudProvider.AWS

    def accepts_resource(self, resource_id: str) -> bool:
        # arn:partition:service:region:account:resource
        parts = resource_id.split(":", 5)
        return len(parts) == 6 and parts[0] == "arn" and bool(parts[2]) and bool(parts[5])


class AzureAccessValidator(AccessValidator):
    provider = CloudProvider.AZURE

    def accepts_resource(self, resource_id: str) -> bool:
        return resource_id.startswith("/subscriptions/")


class GcpAccessValidator(AccessValidator):
    provider = CloudProvider.GCP

    def accepts_resource(self, resource_id: str) -> bool:
        return resource_id.startswith("//")


VALIDATORS = {
    CloudProvider.AWS: AwsAccessValidator,
    CloudProvider.AZURE: AzureAccessValidator,
    CloudProvider.GCP: GcpAccessValidator,
}


def validator_for(provider: CloudProvider, group_public_key, **kwargs) -> AccessValidator:
    return VALIDATORS[provider](group_public_key, **kwargs)
