"""Core domain types shared across the connector."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, NewType, Optional

Identity = NewType("Identity", str)
ClientID = NewType("ClientID", str)
AccountID = NewType("AccountID", str)
OrgID = NewType("OrgID", str)

Dispatchers = Any
CanonicalFacts = Any
Tags = Any


@dataclass
class MessageMetadata:
    """Identifier and time of the latest message seen from a client."""

    latest_message_id: str = ""
    latest_timestamp: Optional[datetime] = None


@dataclass
class ConnectorClientState:
    """Everything known about one connected client."""

    account: AccountID = AccountID("")
    org_id: OrgID = OrgID("")
    client_id: ClientID = ClientID("")
    canonical_facts: CanonicalFacts = None
    dispatchers: Dispatchers = None
    tags: Tags = None
    message_metadata: MessageMetadata = field(default_factory=MessageMetadata)
    tenant_lookup_timestamp: Optional[datetime] = None
    tenant_lookup_failure_count: int = 0