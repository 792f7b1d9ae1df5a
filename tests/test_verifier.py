"""
Tests
"""

import pytest

from thresholdsig.keygen import generate
from thresholdsig.nonce import commit
from thresholdsig.signer import sign
from thresholdsig.aggregator import combine, AggregatedSignature
from thresholdsig.verifier import verify
from thresholdsig.curve import order, point_to_bytes, Point, generator
from thresholdsig.errors import MalformedInput


@pytest.fixture(scope="module")
def signed():
    key = generate(3, 2)
    commitments = [commit(key.shares[0]), commit(key.shares[2])]
    public = [c.public for c in commitments]
    signature_shares = [
        sign(b"Nitin", key.shares[c.participant_index - 1], c, public, key.public_shares)
        for c in commitments
    ]
    signature = combine(b"Nitin", signature_shares, public, key.public_shares, 2)
    return key, signature


def test_valid_signature(signed):
    key, signature = signed
    assert verify(b"Nitin", signature, key.group_public_key)
    assert verify(b"Nitin", repr(signature), point_to_bytes(key.group_public_key).hex())
    assert AggregatedSignature.from_hex(repr(signature)) == signature


def test_wrong_message_or_key(signed):
    key, signature = signed
    assert not verify(b"wrongdata", signature, key.group_public_key)
    assert not verify(b"Nitin", signature, generate(3, 2).group_public_key)


def test_flipped_recovery_id(signed):
    key, signature = signed
    flipped = signature._replace(recovery_id=1 - signature.recovery_id)
    assert not verify(b"Nitin", flipped, key.group_public_key)


def test_tampered_scalars(signed):
    key, signature = signed
    r = int.from_bytes(signature.r, "big")
    bumped = ((r + 1) % order).to_bytes(32, "big")
    assert not verify(b"Nitin", signature._replace(r=bumped), key.group_public_key)
    swapped = signature._replace(r=signature.s, s=signature.r)
    assert not verify(b"Nitin", swapped, key.group_public_key)


@pytest.mark.parametrize("mutation", [
    {"r": b"\x00" * 31},
    {"s": b"\x00" * 33},
    {"r": order.to_bytes(32, "big")},
    {"s": (2**256 - 1).to_bytes(32, "big")},
    {"recovery_id": 2},
    {"recovery_id": None},
    {"r": "not bytes"},
])
def test_malformed_signature_is_false(signed, mutation):
    key, signature = signed
    assert verify(b"Nitin", signature._replace(**mutation), key.group_public_key) is False


@pytest.mark.parametrize("bad_key", [
    Point(generator.x, generator.y + 1),
    Point(None, None),
    b"\x01" * 63,
    "nothex",
    None,
    12345,
])
def test_malformed_key_is_false(signed, bad_key):
    _, signature = signed
    assert verify(b"Nitin", signature, bad_key) is False


def test_garbage_signature_is_false(signed):
    key, _ = signed
    assert verify(b"Nitin", b"\x00" * 10, key.group_public_key) is False
    assert verify(b"Nitin", "zz", key.group_public_key) is False
    assert verify(b"Nitin", None, key.group_public_key) is False
    assert verify(12345, b"\x00" * 65, key.group_public_key) is False


def test_from_bytes_length():
    with pytest.raises(MalformedInput):
        AggregatedSignature.from_bytes(b"\x00" * 64)
