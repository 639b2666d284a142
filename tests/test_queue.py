import pytest

from cloudconnector.queue import (
    ConsumerConfig,
    ProducerConfig,
    SaslConfig,
    resolve_sasl_mechanism,
)


@pytest.mark.parametrize(
    "name, expected",
    [
        ("plain", "PLAIN"),
        ("PLAIN", "PLAIN"),
        ("scram-sha-512", "SCRAM-SHA-512"),
        ("SCRAM-sha-256", "SCRAM-SHA-256"),
    ],
)
def test_resolve_sasl_mechanism(name, expected):
    assert resolve_sasl_mechanism(name) == expected


def test_resolve_unknown_sasl_mechanism():
    with pytest.raises(ValueError, match=r"unable to configure sasl mechanism \(gssapi\)"):
        resolve_sasl_mechanism("gssapi")


def test_sasl_config_string_shows_only_mechanism():
    password = "password"
    config = SaslConfig(
        sasl_mechanism="PLAIN", sasl_username="user", sasl_password=password
    )
    assert str(config) == "SaslMechanism: PLAIN\n"
    assert password not in repr(config)


def test_producer_config_string_without_sasl():
    config = ProducerConfig(
        brokers=["b1:9092", "b2:9092"],
        topic="platform.inventory",
        batch_size=10,
        batch_bytes=2048,
        balancer="crc32",
    )
    text = str(config)
    lines = text.splitlines()
    assert lines[0] == "Brokers: [b1:9092 b2:9092]"
    assert lines[1] == "SaslConfig: <nil>"
    assert "Topic: platform.inventory\n" in text
    assert "BatchSize: 10\n" in text
    assert "BatchBytes: 2048\n" in text
    assert text.endswith("Balancer: crc32\n")


def test_consumer_config_string_with_sasl():
    config = ConsumerConfig(
        brokers=["b1:9092"],
        sasl_config=SaslConfig(sasl_mechanism="SCRAM-SHA-512"),
        topic="topic-a",
        group_id="group-a",
        consumer_offset=-1,
    )
    text = str(config)
    assert "SaslConfig: SaslMechanism: SCRAM-SHA-512\n\n" in text
    assert "GroupID: group-a\n" in text
    assert text.endswith("ConsumerOffset: -1\n")