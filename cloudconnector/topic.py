"""Building and checking MQTT topic names."""

from __future__ import annotations

import enum

from cloudconnector.domain import ClientID

DEFAULT_TOPIC_PREFIX = "redhat"
_CONTROL_INCOMING = "insights/+/control/out"
_CONTROL_OUTGOING = "insights/{}/control/in"
_DATA_INCOMING = "insights/+/data/out"
_DATA_OUTGOING = "insights/{}/data/in"


class TopicType(enum.IntEnum):
    """Kind of message a topic carries."""

    CONTROL = 0
    DATA = 1


class TopicError(ValueError):
    """Raised when an incoming topic does not have the expected shape."""


class TopicVerifier:
    """Checks incoming topics and extracts the client id from them."""

    def __init__(self, prefix: str = "") -> None:
        self.prefix = prefix or DEFAULT_TOPIC_PREFIX

    def verify_incoming_topic(self, topic: str) -> tuple[TopicType, ClientID]:
        """Return the topic type and client id of an incoming topic."""
        items = topic.split("/")
        if len(items) != 5:
            raise TopicError(
                "MQTT topic requires 4 sections: "
                f"{self.prefix}, insights, <clientID>, <type>, in {topic}"
            )

        prefix, namespace, client_id, kind, direction = items
        if prefix != self.prefix or namespace != "insights" or direction != "out":
            raise TopicError(
                f"MQTT topic needs to be {self.prefix}/insights/<clientID>/<type>/out"
            )

        if kind == "control":
            topic_type = TopicType.CONTROL
        elif kind == "data":
            topic_type = TopicType.DATA
        else:
            raise TopicError("Invalid topic type")

        return topic_type, ClientID(client_id)


class TopicBuilder:
    """Builds outgoing and wildcard topic names for one prefix."""

    def __init__(self, prefix: str = "") -> None:
        self.prefix = prefix or DEFAULT_TOPIC_PREFIX

    def build_outgoing_data_topic(self, client_id: str) -> str:
        return f"{self.prefix}/" + _DATA_OUTGOING.format(client_id)

    def build_outgoing_control_topic(self, client_id: str) -> str:
        return f"{self.prefix}/" + _CONTROL_OUTGOING.format(client_id)

    def build_incoming_wildcard_data_topic(self) -> str:
        return f"{self.prefix}/{_DATA_INCOMING}"

    def build_incoming_wildcard_control_topic(self) -> str:
        return f"{self.prefix}/{_CONTROL_INCOMING}"