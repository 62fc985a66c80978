"""Tests for block-wise RSA encryption."""

import base64
import json

import pytest

from trafficspec.crypto import RSACipher


@pytest.fixture
def cipher(rsa_keys):
    public_pem, private_pem = rsa_keys
    return RSACipher.from_pem(public_pem, private_pem)


def test_max_message_size(rsa_keys):
    public_pem, private_pem = rsa_keys

    assert RSACipher.from_pem(public_pem, private_pem, "pkcs1").max_message_size == 245
    assert RSACipher.from_pem(public_pem, private_pem, "pkcs1_oaep").max_message_size == 214


@pytest.mark.parametrize("scheme", ["pkcs1", "pkcs1_oaep"])
def test_long_payload_round_trips(rsa_keys, scheme):
    public_pem, private_pem = rsa_keys
    cipher = RSACipher.from_pem(public_pem, private_pem, scheme)
    payload = json.dumps({"points": [{"lat": 31.2 + i, "lng": 121.4, "t": i} for i in range(40)]})

    token = cipher.encrypt(payload)
    raw = base64.b64decode(token)

    assert len(raw) % cipher.block_size == 0
    assert len(raw) > cipher.block_size
    assert cipher.decrypt(token).decode() == payload


def test_public_key_derived_from_private(rsa_keys):
    _, private_pem = rsa_keys
    cipher = RSACipher.from_pem(private_pem=private_pem)

    assert cipher.decrypt(cipher.encrypt("hello")) == b"hello"


def test_decrypt_rejects_bad_input(cipher):
    with pytest.raises(ValueError):
        cipher.decrypt("not base64 !!")
    with pytest.raises(ValueError):
        cipher.decrypt(base64.b64encode(b"short").decode())


def test_missing_keys():
    with pytest.raises(ValueError):
        RSACipher().encrypt("x")


def test_unsupported_scheme(rsa_keys):
    with pytest.raises(ValueError):
        RSACipher.from_pem(*rsa_keys, scheme="raw")
