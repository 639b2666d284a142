"""JWT generators used to authenticate with the MQTT broker."""

from __future__ import annotations

import logging
import os
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

import jwt
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

log = logging.getLogger(__name__)

RSA_TOKEN_GENERATOR = "jwt_rsa_generator"
FILE_TOKEN_GENERATOR = "jwt_file_reader"
KEY_ID = "rhcloud-connector"

JwtGenerator = Callable[[], str]


def create_rsa_token(client: str, group: str, exp: datetime, sign_key: Any) -> str:
    """Sign an RS256 token carrying the client id, group and expiry."""
    if exp.tzinfo is None:
        exp = exp.replace(tzinfo=timezone.utc)
    claims = {
        "exp": int(exp.timestamp()),
        "client-id": client,
        "auth-group": group,
    }
    return jwt.encode(claims, sign_key, algorithm="RS256", headers={"kid": KEY_ID})


def new_file_based_jwt_generator(jwt_filename: str) -> JwtGenerator:
    """Read a token from a file once and return a generator that yields it."""
    filename = os.path.normpath(jwt_filename)
    log.debug("Loading JWT from a file: %s", filename)
    try:
        with open(filename, encoding="utf-8") as handle:
            text = handle.read()
    except OSError as exc:
        log.error("Could not read jwt from file: %s", exc)
        raise

    return lambda: text


def new_rsa_based_jwt_generator(
    private_key_file: str, client_id: str, token_expiry: int
) -> JwtGenerator:
    """Return a generator signing fresh tokens valid for ``token_expiry`` minutes."""
    with open(os.path.normpath(private_key_file), "rb") as handle:
        pem = handle.read()

    try:
        sign_key = serialization.load_pem_private_key(pem, password=None)
    except TypeError as exc:
        raise ValueError(str(exc)) from exc
    if not isinstance(sign_key, rsa.RSAPrivateKey):
        raise ValueError("key is not a valid RSA private key")

    def generate() -> str:
        expiry = datetime.now(timezone.utc) + timedelta(minutes=token_expiry)
        log.debug(
            "Generating an RSA JWT token with client-id %s and expiry: %s",
            client_id,
            expiry,
        )
        return create_rsa_token(client_id, "admin", expiry, sign_key)

    return generate