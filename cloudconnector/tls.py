"""Construction of client TLS contexts from composable options."""

from __future__ import annotations

import logging
import os
import re
import ssl
from dataclasses import dataclass
from typing import Callable, Optional

log = logging.getLogger(__name__)

_PEM_CERT = re.compile(
    r"-----BEGIN CERTIFICATE-----.+?-----END CERTIFICATE-----", re.DOTALL
)


@dataclass
class _TlsSettings:
    cert_chain: Optional[tuple[str, str]] = None
    ca_certs: Optional[list[str]] = None
    skip_verify: bool = False


TlsOption = Callable[[_TlsSettings], None]


def with_cert(cert_file_path: str, cert_key_path: str) -> TlsOption:
    """Present the given certificate and key to the server."""

    def apply(settings: _TlsSettings) -> None:
        log.debug("TLS config - setting the pub/priv key pair")
        settings.cert_chain = (cert_file_path, cert_key_path)

    return apply


def with_ca_certs(ca_cert_file_path: str) -> TlsOption:
    """Trust only the CA certificates found in the given PEM file."""

    def apply(settings: _TlsSettings) -> None:
        log.debug("TLS config - setting ca certs")
        path = os.path.normpath(ca_cert_file_path)
        with open(path, "rb") as handle:
            text = handle.read().decode("ascii", errors="ignore")
        settings.ca_certs = _PEM_CERT.findall(text)

    return apply


def with_skip_verify() -> TlsOption:
    """Disable verification of the server certificate."""

    def apply(settings: _TlsSettings) -> None:
        log.debug("TLS config - setting insecure skip verify")
        settings.skip_verify = True

    return apply


def new_tls_config(*options: TlsOption) -> ssl.SSLContext:
    """Build a client context requiring TLS 1.2 or later."""
    settings = _TlsSettings()
    for option in options:
        option(settings)

    context = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
    context.minimum_version = ssl.TLSVersion.TLSv1_2

    if settings.ca_certs is None:
        context.load_default_certs()
    else:
        for block in settings.ca_certs:
            try:
                context.load_verify_locations(cadata=block)
            except ssl.SSLError:
                log.debug("Skipping unparsable CA certificate")

    if settings.cert_chain is not None:
        certfile, keyfile = settings.cert_chain
        context.load_cert_chain(certfile, keyfile)

    if settings.skip_verify:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE

    return context