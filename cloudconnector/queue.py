"""Kafka producer, consumer and SASL settings."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

_SASL_MECHANISMS = {
    "plain": "PLAIN",
    "scram-sha-512": "SCRAM-SHA-512",
    "scram-sha-256": "SCRAM-SHA-256",
}


def _format_list(items: list[str]) -> str:
    return "[" + " ".join(items) + "]"


@dataclass
class SaslConfig:
    """Credentials and CA used for an authenticated broker connection."""

    sasl_mechanism: str = ""
    sasl_username: str = ""
    sasl_password: str = field(default="", repr=False)
    kafka_ca: str = ""

    def __str__(self) -> str:
        return f"SaslMechanism: {self.sasl_mechanism}\n"


def _format_sasl(config: Optional[SaslConfig]) -> str:
    return "<nil>" if config is None else str(config)


@dataclass
class ProducerConfig:
    """Settings for a Kafka producer."""

    brokers: list[str] = field(default_factory=list)
    sasl_config: Optional[SaslConfig] = None
    topic: str = ""
    batch_size: int = 0
    batch_bytes: int = 0
    balancer: str = ""

    def __str__(self) -> str:
        return (
            f"Brokers: {_format_list(self.brokers)}\n"
            f"SaslConfig: {_format_sasl(self.sasl_config)}\n"
            f"Topic: {self.topic}\n"
            f"BatchSize: {self.batch_size}\n"
            f"BatchBytes: {self.batch_bytes}\n"
            f"Balancer: {self.balancer}\n"
        )


@dataclass
class ConsumerConfig:
    """Settings for a Kafka consumer."""

    brokers: list[str] = field(default_factory=list)
    sasl_config: Optional[SaslConfig] = None
    topic: str = ""
    group_id: str = ""
    consumer_offset: int = 0

    def __str__(self) -> str:
        return (
            f"Brokers: {_format_list(self.brokers)}\n"
            f"SaslConfig: {_format_sasl(self.sasl_config)}\n"
            f"Topic: {self.topic}\n"
            f"GroupID: {self.group_id}\n"
            f"ConsumerOffset: {self.consumer_offset}\n"
        )


def resolve_sasl_mechanism(name: str) -> str:
    """Return the canonical SASL mechanism name for a case-insensitive name."""
    try:
        return _SASL_MECHANISMS[name.lower()]
    except KeyError:
        raise ValueError(f"unable to configure sasl mechanism ({name})") from None