"""Registration of connected clients with the host inventory."""

from __future__ import annotations

import abc
import json
import logging
import uuid
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional

from cloudconnector.domain import ConnectorClientState
from cloudconnector.identity import IdentityError, authenticated_with_certificate

log = logging.getLogger(__name__)

PLAYBOOK_WORKER_DISPATCHER_KEY = "rhc-worker-playbook"
PACKAGE_MANAGER_DISPATCHER_KEY = "package-manager"
CONVERT2RHEL_WORKER_DISPATCHER_KEY = "rhc-worker-script"
INVENTORY_TAG_NAMESPACE = "rhc_client"

_REGISTERING_DISPATCHERS = (
    PLAYBOOK_WORKER_DISPATCHER_KEY,
    PACKAGE_MANAGER_DISPATCHER_KEY,
    CONVERT2RHEL_WORKER_DISPATCHER_KEY,
)

InventoryMessageProducer = Callable[[bytes, bytes], None]
"""Writes one message, given its key and its value, or raises."""


class ConnectedClientRecorder(abc.ABC):
    """Records that a client has connected."""

    @abc.abstractmethod
    def record_connected_client(
        self, identity: str, client: ConnectorClientState
    ) -> None:
        """Record the connected client."""


def _is_identity_valid(identity: str) -> bool:
    return bool(identity)


def _has_canonical_facts(client: ConnectorClientState) -> bool:
    facts = client.canonical_facts
    return isinstance(facts, Mapping) and len(facts) > 0


def _has_dispatcher(client: ConnectorClientState, name: str) -> bool:
    dispatchers = client.dispatchers
    return isinstance(dispatchers, Mapping) and name in dispatchers


def should_host_be_registered_with_inventory(
    client: ConnectorClientState, identity: str
) -> bool:
    """Tell whether the client carries enough to be registered with inventory."""
    return (
        _is_identity_valid(identity)
        and _has_canonical_facts(client)
        and any(_has_dispatcher(client, name) for name in _REGISTERING_DISPATCHERS)
    )


def cleanup_canonical_facts(canonical_facts: Mapping[str, Any]) -> dict[str, Any]:
    """Copy the facts, dropping empty strings, empty lists and unknown types."""
    host_data: dict[str, Any] = {}
    for key, value in canonical_facts.items():
        if value is None:
            continue
        if isinstance(value, str):
            if value:
                host_data[key] = value
        elif isinstance(value, (list, tuple)):
            if value:
                host_data[key] = value
        else:
            log.debug(
                "Unknown type in canonical facts map - key: %s, value: %s", key, value
            )
    return host_data


def convert_rhc_tags_to_inventory_tags(
    rhc_tags: Any,
) -> Optional[dict[str, dict[str, list[str]]]]:
    """Place the client's tags under the inventory tag namespace."""
    if rhc_tags is None or not isinstance(rhc_tags, Mapping):
        return None
    if not rhc_tags:
        return {}

    namespace: dict[str, list[str]] = {}
    for key, value in rhc_tags.items():
        if not isinstance(value, str):
            raise TypeError(f"tag {key!r} has a non-string value")
        namespace[key] = [value]
    return {INVENTORY_TAG_NAMESPACE: namespace}


def _sorted_mapping(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {key: _sorted_mapping(value[key]) for key in sorted(value)}
    if isinstance(value, (list, tuple)):
        return [_sorted_mapping(item) for item in value]
    return value


@dataclass
class InventoryBasedConnectedClientRecorder(ConnectedClientRecorder):
    """Sends an ``add_host`` message to inventory for each eligible client."""

    message_producer: InventoryMessageProducer
    stale_timestamp_offset: timedelta = timedelta(0)
    reporter_name: str = ""

    def record_connected_client(
        self, identity: str, client: ConnectorClientState
    ) -> None:
        context = (
            f"account={client.account} org_id={client.org_id} "
            f"client_id={client.client_id}"
        )

        if not should_host_be_registered_with_inventory(client, identity):
            log.debug("Skipping inventory registration (%s)", context)
            return

        stale_timestamp = datetime.now(timezone.utc) + self.stale_timestamp_offset

        host_data = cleanup_canonical_facts(client.canonical_facts)
        host_data["account"] = str(client.account)
        host_data["org_id"] = str(client.org_id)
        host_data["stale_timestamp"] = stale_timestamp.strftime("%Y-%m-%dT%H:%M:%SZ")
        host_data["reporter"] = self.reporter_name

        system_profile = {"rhc_client_id": str(client.client_id)}
        host_data["system_profile"] = system_profile

        try:
            cert_auth = authenticated_with_certificate(identity)
        except IdentityError as exc:
            log.error(
                "Unable to determine authentication type. "
                "Skipping inventory registration (%s): %s",
                context,
                exc,
            )
            return

        if cert_auth:
            log.debug("Adding the owner_id to the inventory message (%s)", context)
            system_profile["owner_id"] = str(client.client_id)

        tags = convert_rhc_tags_to_inventory_tags(client.tags)
        if tags is not None:
            host_data["tags"] = tags

        request_id = str(uuid.uuid1())
        envelope = {
            "operation": "add_host",
            "platform_metadata": {
                "request_id": request_id,
                "b64_identity": identity,
            },
            "data": _sorted_mapping(host_data),
        }
        message = json.dumps(envelope, separators=(",", ":")).encode("utf-8")

        log.debug("Writing inventory message (%s request_id=%s)", context, request_id)
        self.message_producer(str(client.org_id).encode("utf-8"), message)


class FakeConnectedClientRecorder(ConnectedClientRecorder):
    """Only logs the client it is asked to record."""

    def record_connected_client(
        self, identity: str, client: ConnectorClientState
    ) -> None:
        log.debug(
            "FAKE: connected client recorder (account=%s client_id=%s org_id=%s): %s",
            client.account,
            client.client_id,
            client.org_id,
            client.canonical_facts,
        )


def new_connected_client_recorder(
    impl: str,
    message_producer: Optional[InventoryMessageProducer],
    stale_timestamp_offset: timedelta,
    reporter_name: str,
) -> ConnectedClientRecorder:
    """Create the recorder named by ``impl``: ``inventory`` or ``fake``."""
    if impl == "inventory":
        if message_producer is None:
            raise ValueError("An inventory message producer is required")
        return InventoryBasedConnectedClientRecorder(
            message_producer=message_producer,
            stale_timestamp_offset=stale_timestamp_offset,
            reporter_name=reporter_name,
        )
    if impl == "fake":
        return FakeConnectedClientRecorder()
    raise ValueError("Invalid ConnectedClientRecorder impl requested")