import pytest
import copy
import pickle
import threading

from thresholdsig.keygen import generate
from thresholdsig.nonce import commit, SigningNonce
from thresholdsig.curve import order, pub_key_from_priv
from thresholdsig.errors import MissingState
from thresholdsig.toyrand import int_sample


def test_commitment_matches_nonce():
    key = generate(2, 1)
    commitment = commit(key.shares[1])
    assert commitment.participant_index == 2
    assert commitment.public == (2, commitment.commitment_point)
    assert pub_key_from_priv(commitment.nonce.consume()) == commitment.commitment_point


def test_nonces_never_repeat():
    key = generate(1, 1)
    share = key.shares[0]
    nonces = set()
    for _ in range(1000):
        nonces.add(commit(share).nonce.consume())
    assert len(nonces) == 1000


def test_nonce_is_single_use():
    nonce = SigningNonce(1, 12345)
    assert not nonce.consumed
    assert nonce.consume() == 12345
    assert nonce.consumed
    with pytest.raises(MissingState):
        nonce.consume()


def test_discard():
    nonce = SigningNonce(1, 12345)
    nonce.discard()
    with pytest.raises(MissingState):
        nonce.consume()


def test_nonce_cannot_be_copied():
    nonce = SigningNonce(1, 12345)
    with pytest.raises(TypeError):
        copy.copy(nonce)
    with pytest.raises(TypeError):
        copy.deepcopy(nonce)
    with pytest.raises(TypeError):
        pickle.dumps(nonce)
    assert "12345" not in repr(nonce)


def test_concurrent_consume_has_one_winner():
    nonce = SigningNonce(1, 12345)
    results = []
    errors = []

    def worker():
        try:
            results.append(nonce.consume())
        except MissingState as e:
            errors.append(e)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert results == [12345]
    assert len(errors) == 7


def test_int_sample_range():
    for _ in range(200):
        assert 1 <= int_sample(order) < order
    for _ in range(200):
        assert int_sample(5) in (1, 2, 3, 4)
    with pytest.raises(ValueError):
        int_sample(2)
