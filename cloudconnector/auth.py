"""WSGI authentication middleware: identity header, pre-shared key and Turnpike."""

from __future__ import annotations

import enum
import http
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Callable

from cloudconnector.identity import IdentityError, decode_identity
from cloudconnector.principal import (
    IDENTITY_KEY,
    PRINCIPAL_KEY,
    ServiceToServicePrincipal,
)

log = logging.getLogger(__name__)

AUTH_ERROR_MESSAGE = "Authentication failed"
AUTH_ERROR_LOG_HEADER = "Authentication error: "
IDENTITY_HEADER = "x-rh-identity"
PSK_CLIENT_ID_HEADER = "x-rh-cloud-connector-client-id"
PSK_ORG_ID_HEADER = "x-rh-cloud-connector-org-id"
PSK_ACCOUNT_HEADER = "x-rh-cloud-connector-account"
PSK_HEADER = "x-rh-cloud-connector-psk"

WsgiApp = Callable[[dict, Callable], Iterable[bytes]]


class AuthenticationError(Exception):
    """Raised when a request's credentials are missing or wrong."""


class RequiredTenantIdentifier(enum.IntEnum):
    """Which tenant header a pre-shared key request must carry."""

    ACCOUNT = 0
    ORG_ID = 1


@dataclass(frozen=True)
class ServiceCredentials:
    """Credentials presented by another service."""

    client_id: str
    org_id: str
    account: str
    psk: str = field(repr=False)


@dataclass
class ServiceCredentialsValidator:
    """Checks presented credentials against the known pre-shared keys."""

    known_service_credentials: Mapping[str, Any]

    def validate(self, credentials: ServiceCredentials) -> None:
        known = self.known_service_credentials.get(credentials.client_id)
        if known is None:
            raise AuthenticationError(
                AUTH_ERROR_LOG_HEADER + "Provided ClientID not attached to any known keys"
            )
        if credentials.psk != known:
            raise AuthenticationError(
                AUTH_ERROR_LOG_HEADER
                + "Provided PSK does not match known key for this client"
            )


def _header(environ: Mapping[str, Any], name: str) -> str:
    return environ.get("HTTP_" + name.upper().replace("-", "_"), "")


def _error(start_response: Callable, status: int, message: str) -> list[bytes]:
    body = (message + "\n").encode("utf-8")
    start_response(
        f"{status} {http.HTTPStatus(status).phrase}",
        [
            ("Content-Type", "text/plain; charset=utf-8"),
            ("X-Content-Type-Options", "nosniff"),
            ("Content-Length", str(len(body))),
        ],
    )
    return [body]


def _verify_header(environ: Mapping[str, Any], name: str, required: bool) -> str:
    value = _header(environ, name)
    if required and not value:
        raise AuthenticationError(f"{AUTH_ERROR_LOG_HEADER}Missing {name} header")
    return value


def _retrieve_credentials(
    environ: Mapping[str, Any], required: RequiredTenantIdentifier
) -> ServiceCredentials:
    client_id = _verify_header(environ, PSK_CLIENT_ID_HEADER, True)
    org_id = _verify_header(
        environ, PSK_ORG_ID_HEADER, required == RequiredTenantIdentifier.ORG_ID
    )
    account = _verify_header(
        environ, PSK_ACCOUNT_HEADER, required == RequiredTenantIdentifier.ACCOUNT
    )
    psk = _verify_header(environ, PSK_HEADER, True)
    return ServiceCredentials(client_id=client_id, org_id=org_id, account=account, psk=psk)


def enforce_identity(app: WsgiApp) -> WsgiApp:
    """Require a valid identity header and store its identity section."""

    def middleware(environ: dict, start_response: Callable) -> Iterable[bytes]:
        raw = _header(environ, IDENTITY_HEADER)
        if not raw:
            return _error(start_response, 401, "Missing x-rh-identity header")

        try:
            section = dict(decode_identity(raw))
        except IdentityError as exc:
            log.error("Failed to decode Identity header: %s", exc)
            return _error(start_response, 400, "Unable to decode x-rh-identity header")

        if not section.get("org_id"):
            internal = section.get("internal")
            if isinstance(internal, Mapping) and internal.get("org_id"):
                section["org_id"] = internal["org_id"]

        if not section.get("type"):
            return _error(start_response, 400, "x-rh-identity header is missing type")
        if not section.get("org_id"):
            return _error(start_response, 400, "x-rh-identity header is missing org_id")

        environ[IDENTITY_KEY] = section
        return app(environ, start_response)

    return middleware


def enforce_turnpike_authentication(app: WsgiApp) -> WsgiApp:
    """Admit only Associate identities; install after :func:`enforce_identity`."""

    def middleware(environ: dict, start_response: Callable) -> Iterable[bytes]:
        identity = environ.get(IDENTITY_KEY)
        identity_type = identity.get("type", "") if isinstance(identity, Mapping) else ""
        if identity_type != "Associate":
            log.debug("%sInvalid identity type: %s", AUTH_ERROR_LOG_HEADER, identity_type)
            return _error(start_response, 401, AUTH_ERROR_MESSAGE)
        return app(environ, start_response)

    return middleware


@dataclass
class AuthMiddleware:
    """Chooses identity header or pre-shared key authentication per request."""

    secrets: Mapping[str, Any]
    identity_auth: Callable[[WsgiApp], WsgiApp] = enforce_identity
    required_tenant_identifier: RequiredTenantIdentifier = RequiredTenantIdentifier.ACCOUNT

    def authenticate(self, app: WsgiApp) -> WsgiApp:
        identity_app = self.identity_auth(app)

        def middleware(environ: dict, start_response: Callable) -> Iterable[bytes]:
            if _header(environ, IDENTITY_HEADER):
                return identity_app(environ, start_response)
            return self._authenticate_psk(app, environ, start_response)

        return middleware

    def _authenticate_psk(
        self, app: WsgiApp, environ: dict, start_response: Callable
    ) -> Iterable[bytes]:
        try:
            credentials = _retrieve_credentials(environ, self.required_tenant_identifier)
            log.debug(
                "Received service to service request from %s using account:%s and org_id:%s",
                credentials.client_id,
                credentials.account,
                credentials.org_id,
            )
            ServiceCredentialsValidator(self.secrets).validate(credentials)
        except AuthenticationError as exc:
            log.debug("Authentication failure: %s", exc)
            return _error(start_response, 401, AUTH_ERROR_MESSAGE)

        environ[PRINCIPAL_KEY] = ServiceToServicePrincipal(
            account=credentials.account,
            org_id=credentials.org_id,
            client_id=credentials.client_id,
        )
        return app(environ, start_response)