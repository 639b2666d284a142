"""Reporting of per-account connection counts to Pendo."""

from __future__ import annotations

import json
import logging
import urllib.error
import urllib.request
from collections.abc import Iterable
from typing import Optional

log = logging.getLogger(__name__)

_PENDO_PATH = "/metadata/account/custom/value"


class PendoError(Exception):
    """Raised when a Pendo request cannot be made or is refused."""


def make_request(
    endpoint: str, timeout: float, api_key: str, accounts: Iterable[tuple[str, int]]
) -> str:
    """Post the connection counts and return the response body."""
    payload = [
        {"accountId": str(account), "values": {"connectionCount": int(count)}}
        for account, count in accounts
    ]
    request = urllib.request.Request(
        endpoint + _PENDO_PATH,
        data=json.dumps(payload).encode("utf-8"),
        method="POST",
        headers={
            "content-type": "application/json",
            "x-pendo-integration-key": api_key,
        },
    )
    try:
        with urllib.request.urlopen(request, timeout=timeout) as response:
            status, body = response.status, response.read()
    except urllib.error.HTTPError as exc:
        with exc:
            status, body = exc.code, b""
    except (urllib.error.URLError, OSError) as exc:
        raise PendoError(str(exc)) from exc

    if status != 200:
        raise PendoError(f"Pendo Request Unsuccessful. Status: {status}")
    return body.decode("utf-8")


class PendoReporter:
    """Collects connection counts and sends them to Pendo in batches."""

    def __init__(
        self, endpoint: str, api_key: str, request_size: int, timeout: float = 10.0
    ) -> None:
        if not api_key:
            raise PendoError("No Pendo Integration key.")
        self.endpoint = endpoint
        self.api_key = api_key
        self.request_size = request_size
        self.timeout = timeout
        self._pending: list[tuple[str, int]] = []

    def add(self, account: str, count: int) -> None:
        """Queue one account's count, sending the batch once it is full."""
        print(f"{account} - {count}")
        self._pending.append((account, count))
        if len(self._pending) >= self.request_size:
            self.flush()

    def flush(self) -> Optional[str]:
        """Send whatever is queued; return the response body, or None."""
        if not self._pending:
            return None
        pending, self._pending = self._pending, []
        try:
            body = make_request(self.endpoint, self.timeout, self.api_key, pending)
        except PendoError as exc:
            log.error("%s", exc)
            return None
        log.info("%s", body)
        return body