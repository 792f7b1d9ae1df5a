"""
Tests
"""

import pytest
import random
from ecdsa import SECP256k1, SigningKey
from thresholdsig.curve import (
    ec_scalar_mul, pub_key_from_priv, O, generator, order, ec_add, ec_sub, ec_sum, valid, SECP256K1,
    point_to_bytes, point_from_bytes, scalar_from_bytes, scalar_to_bytes, as_point, Point)
from thresholdsig.errors import MalformedInput


def test_generator():
    # check if order and generator are in sync
    assert O == ec_scalar_mul(generator, order), "Generator seems off"
    assert valid(generator)
    assert SECP256K1.order == order and SECP256K1.generator == generator
    assert SECP256K1.p == 2**256 - 2**32 - 977


def test_pub_key_matches_ecdsa():
    secret = 27777772222
    pub = pub_key_from_priv(secret)
    print(f"pub key\n{pub}\n")
    reference = SigningKey.from_secret_exponent(secret, SECP256k1).verifying_key.pubkey.point
    assert pub == Point(int(reference.x()), int(reference.y()))


def test_point_addition():
    secret1 = random.randint(1, order - 1)
    secret2 = random.randint(1, order - 1)
    pub1 = pub_key_from_priv(secret1)
    pub2 = pub_key_from_priv(secret2)
    master_secret = (secret1 + secret2) % order
    assert ec_add(pub1, pub2) == pub_key_from_priv(master_secret)
    assert ec_sum([pub1, pub2, O]) == pub_key_from_priv(master_secret)
    assert ec_sub(pub1, pub1) == O
    assert ec_add(pub1, pub1) == pub_key_from_priv(2 * secret1)


def test_scalar_mul_of_arbitrary_point():
    secret1 = random.randint(1, order - 1)
    secret2 = random.randint(1, order - 1)
    pub1 = pub_key_from_priv(secret1)
    assert ec_scalar_mul(pub1, secret2) == pub_key_from_priv(secret1 * secret2)


def test_invalid_point_rejected():
    off_curve = Point(generator.x, generator.y + 1)
    assert not valid(off_curve)
    with pytest.raises(MalformedInput):
        ec_add(off_curve, generator)
    with pytest.raises(MalformedInput):
        as_point(off_curve)
    with pytest.raises(MalformedInput):
        as_point("zz")


def test_encodings():
    pub = pub_key_from_priv(random.randint(1, order - 1))
    data = point_to_bytes(pub)
    assert len(data) == 64
    assert point_from_bytes(data) == pub
    assert as_point(data.hex()) == pub
    assert len(scalar_to_bytes(1)) == 32
    with pytest.raises(MalformedInput):
        scalar_from_bytes(order.to_bytes(32, "big"))
    with pytest.raises(MalformedInput):
        scalar_from_bytes(b"\x01" * 31)
    with pytest.raises(MalformedInput):
        point_to_bytes(O)
