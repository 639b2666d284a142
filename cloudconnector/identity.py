"""Decoding of base64 encoded identity headers."""

from __future__ import annotations

import base64
import binascii
import json
import logging
from typing import Any

log = logging.getLogger(__name__)


class IdentityError(ValueError):
    """Raised when an identity string cannot be decoded or parsed."""


def decode_identity(identity: str) -> dict[str, Any]:
    """Return the ``identity`` section of a base64 encoded identity document."""
    try:
        raw = base64.b64decode(identity, validate=True)
    except (binascii.Error, ValueError) as exc:
        log.error("Unable to decode identity string: %s", exc)
        raise IdentityError("Unable to decode identity string") from exc

    try:
        document = json.loads(raw)
    except ValueError as exc:
        log.error("Unable to parse identity string: %s", exc)
        raise IdentityError("Unable to parse identity string") from exc

    section = document.get("identity") if isinstance(document, dict) else None
    if not isinstance(section, dict):
        raise IdentityError("Unable to parse identity string")
    return section


def authenticated_with_certificate(identity: str) -> bool:
    """Tell whether the identity was authenticated with a client certificate."""
    return decode_identity(identity).get("auth_type") == "cert-auth"