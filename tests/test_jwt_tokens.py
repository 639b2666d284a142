import time
from datetime import datetime, timezone

import jwt
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa

from cloudconnector.jwt_tokens import (
    create_rsa_token,
    new_file_based_jwt_generator,
    new_rsa_based_jwt_generator,
)


@pytest.fixture(scope="module")
def rsa_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


def _pem(key):
    return key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.TraditionalOpenSSL,
        serialization.NoEncryption(),
    )


def test_create_rsa_token_claims_and_header(rsa_key):
    exp = datetime(2100, 1, 1, tzinfo=timezone.utc)
    encoded = create_rsa_token("client-a", "admin", exp, rsa_key)
    claims = jwt.decode(encoded, rsa_key.public_key(), algorithms=["RS256"])
    assert claims["client-id"] == "client-a"
    assert claims["auth-group"] == "admin"
    assert claims["exp"] == int(exp.timestamp())
    header = jwt.get_unverified_header(encoded)
    assert header["kid"] == "rhcloud-connector"
    assert header["alg"] == "RS256"


def test_file_based_generator_returns_file_contents(tmp_path):
    path = tmp_path / "jwt.txt"
    path.write_text("token")
    generator = new_file_based_jwt_generator(str(path))
    assert generator() == "token"
    assert generator() == "token"


def test_file_based_generator_missing_file(tmp_path):
    with pytest.raises(OSError):
        new_file_based_jwt_generator(str(tmp_path / "missing"))


def test_rsa_generator_signs_fresh_tokens(tmp_path, rsa_key):
    key_path = tmp_path / "key.pem"
    key_path.write_bytes(_pem(rsa_key))
    generator = new_rsa_based_jwt_generator(str(key_path), "client-b", 10)
    before = time.time()
    encoded = generator()
    claims = jwt.decode(encoded, rsa_key.public_key(), algorithms=["RS256"])
    assert claims["client-id"] == "client-b"
    assert claims["auth-group"] == "admin"
    assert before + 10 * 60 - 5 <= claims["exp"] <= time.time() + 10 * 60 + 5


def test_rsa_generator_rejects_non_rsa_key(tmp_path):
    key = ec.generate_private_key(ec.SECP256R1())
    key_path = tmp_path / "ec.pem"
    key_path.write_bytes(
        key.private_bytes(
            serialization.Encoding.PEM,
            serialization.PrivateFormat.PKCS8,
            serialization.NoEncryption(),
        )
    )
    with pytest.raises(ValueError):
        new_rsa_based_jwt_generator(str(key_path), "client-c", 10)


def test_rsa_generator_rejects_garbage(tmp_path):
    key_path = tmp_path / "garbage.pem"
    key_path.write_text("not a key")
    with pytest.raises(ValueError):
        new_rsa_based_jwt_generator(str(key_path), "client-d", 10)