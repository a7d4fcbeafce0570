"""Tests for esub tokens."""

import re

import pytest

from mini_mailer.tools import TokenFormatError, esub

# Skips the Argon2 run in most tests
KEY = bytes(range(32))
OTHER_KEY = bytes(range(1, 33))


def test_token_shape():
    token = esub.generate("secret", key=KEY)
    assert re.fullmatch(r"[0-9a-f]{48}", token)


def test_token_starts_with_nonce():
    nonce = b"\x01" * 12
    assert esub.generate("secret", nonce=nonce, key=KEY).startswith(nonce.hex())


def test_deterministic_for_fixed_nonce():
    nonce = b"\x02" * 12
    assert esub.generate("x", nonce=nonce, key=KEY) == esub.generate("x", nonce=nonce, key=KEY)


def test_random_nonce():
    assert esub.generate("x", key=KEY) != esub.generate("x", key=KEY)


def test_bad_nonce_length():
    with pytest.raises(ValueError):
        esub.generate("x", nonce=b"short", key=KEY)


def test_verify_with_same_key():
    token = esub.generate("x", key=KEY)
    assert esub.verify(token, "x", key=KEY)


def test_verify_uppercase_hex():
    token = esub.generate("x", key=KEY)
    assert esub.verify(token.upper(), "x", key=KEY)


def test_verify_with_other_key():
    token = esub.generate("x", key=KEY)
    assert not esub.verify(token, "x", key=OTHER_KEY)


def test_verify_tampered():
    token = esub.generate("x", key=KEY)
    flipped = token[:-1] + ("0" if token[-1] != "0" else "1")
    assert not esub.verify(flipped, "x", key=KEY)


@pytest.mark.parametrize("token", [
    "",
    "abc",
    "0" * 47,
    "0" * 49,
    "z" * 48,
    "00 " * 16,
])
def test_malformed_tokens_fail(token):
    assert esub.verify(token, "x", key=KEY) is False


@pytest.mark.parametrize("token", ["0" * 46, "g" * 48, "00 " * 16])
def test_decode_token_errors(token):
    with pytest.raises(TokenFormatError):
        esub.decode_token(token)


def test_decode_token():
    nonce, ciphertext = esub.decode_token("11" * 12 + "22" * 12)
    assert nonce == b"\x11" * 12
    assert ciphertext == b"\x22" * 12


def test_plaintext_constant():
    assert len(esub.PLAINTEXT) == 12
    assert esub.TOKEN_HEX_LENGTH == 48


def test_round_trip_with_real_kdf():
    token = esub.generate("correct horse")
    assert esub.verify(token, "correct horse")
    assert not esub.verify(token, "wrong horse")


def test_derive_key():
    key = esub.derive_key("passphrase")
    assert len(key) == 32
    assert key == esub.derive_key("passphrase")
