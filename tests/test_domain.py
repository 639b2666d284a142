from datetime import datetime, timezone

from cloudconnector.domain import (
    AccountID,
    ClientID,
    ConnectorClientState,
    MessageMetadata,
    OrgID,
)


def test_state_keeps_given_fields():
    facts = {"rhel_machine_id": "6ca6a085-8d86-11eb-8bd1-f875a43f7183"}
    state = ConnectorClientState(
        account=AccountID("1234567"),
        org_id=OrgID("9876"),
        client_id=ClientID("8974"),
        canonical_facts=facts,
    )
    assert state.account == "1234567"
    assert state.org_id == "9876"
    assert state.client_id == "8974"
    assert state.canonical_facts == facts


def test_state_defaults_are_empty():
    state = ConnectorClientState()
    assert state.account == ""
    assert state.canonical_facts is None
    assert state.dispatchers is None
    assert state.tags is None
    assert state.tenant_lookup_failure_count == 0
    assert state.message_metadata == MessageMetadata()


def test_message_metadata_not_shared_between_states():
    first = ConnectorClientState()
    second = ConnectorClientState()
    first.message_metadata.latest_message_id = "abc"
    assert second.message_metadata.latest_message_id == ""


def test_message_metadata_holds_values():
    stamp = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    metadata = MessageMetadata(latest_message_id="msg-1", latest_timestamp=stamp)
    state = ConnectorClientState(message_metadata=metadata)
    assert state.message_metadata.latest_timestamp == stamp
    assert state.message_metadata.latest_message_id == "msg-1"