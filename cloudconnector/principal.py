"""Who made a request, as established by the authentication middleware."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional

PRINCIPAL_KEY = "cloudconnector.principal"
IDENTITY_KEY = "cloudconnector.identity"


@dataclass(frozen=True)
class Principal:
    """The tenant a request acts for."""

    account: str = ""
    org_id: str = ""


@dataclass(frozen=True)
class ServiceToServicePrincipal(Principal):
    """A principal authenticated with a pre-shared key."""

    client_id: str = ""


@dataclass(frozen=True)
class IdentityPrincipal(Principal):
    """A principal authenticated with an identity header."""


def get_principal(environ: Mapping[str, Any]) -> Optional[Principal]:
    """Return the request's principal, or None when it has none."""
    principal = environ.get(PRINCIPAL_KEY)
    if isinstance(principal, ServiceToServicePrincipal):
        return principal

    identity = environ.get(IDENTITY_KEY)
    if not isinstance(identity, Mapping):
        return None

    org_id = identity.get("org_id") or ""
    if not org_id:
        return None

    return IdentityPrincipal(
        account=identity.get("account_number") or "", org_id=org_id
    )