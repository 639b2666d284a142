"""Handlers for messages arriving from the MQTT broker."""

from __future__ import annotations

import asyncio
import concurrent.futures
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable

from cloudconnector.topic import TopicError, TopicType, TopicVerifier

log = logging.getLogger(__name__)

TOPIC_KAFKA_HEADER_KEY = "topic"
MESSAGE_ID_KAFKA_HEADER_KEY = "mqtt_message_id"
DATE_RECEIVED_HEADER_KEY = "date_received"


@dataclass(frozen=True)
class MqttMessage:
    """A message as delivered by the MQTT broker."""

    topic: str
    payload: bytes = b""
    message_id: int = 0
    duplicate: bool = False


@dataclass(frozen=True)
class KafkaMessage:
    """A message to be written to Kafka."""

    key: bytes
    value: bytes
    headers: tuple[tuple[str, bytes], ...] = ()


class KafkaWriteError(Exception):
    """Raised when a message could not be written to Kafka and must not be acknowledged."""


KafkaWriter = Callable[[KafkaMessage], None]
MessageHandler = Callable[[Any, MqttMessage], None]


def _utc_timestamp(moment: datetime) -> str:
    fraction = f"{moment.microsecond:06d}".rstrip("0")
    text = moment.strftime("%Y-%m-%d %H:%M:%S")
    if fraction:
        text += "." + fraction
    return text + " +0000 UTC"


def control_message_handler(
    kafka_writer: KafkaWriter, topic_verifier: TopicVerifier
) -> MessageHandler:
    """Forward control messages to Kafka, keyed by client id to keep their order."""

    def handle(client: Any, message: MqttMessage) -> None:
        message_id = str(message.message_id)
        try:
            _, client_id = topic_verifier.verify_incoming_topic(message.topic)
        except TopicError as exc:
            log.error("Failed to verify topic: %s", exc)
            return

        context = (
            f"client_id={client_id} mqtt_message_id={message_id} "
            f"duplicate={message.duplicate} topic={message.topic}"
        )

        if not message.payload:
            # Retained message removal, or a client priming the connection.
            log.debug("client sent an empty payload (%s)", context)
            return

        kafka_message = KafkaMessage(
            key=str(client_id).encode("utf-8"),
            value=bytes(message.payload),
            headers=(
                (TOPIC_KAFKA_HEADER_KEY, message.topic.encode("utf-8")),
                (MESSAGE_ID_KAFKA_HEADER_KEY, message_id.encode("utf-8")),
                (
                    DATE_RECEIVED_HEADER_KEY,
                    _utc_timestamp(datetime.now(timezone.utc)).encode("utf-8"),
                ),
            ),
        )

        try:
            kafka_writer(kafka_message)
        except (asyncio.CancelledError, concurrent.futures.CancelledError):
            log.error("Kafka write cancelled (%s)", context)
            return
        except Exception as exc:
            log.critical("Failed writing to kafka (%s): %s", context, exc)
            raise KafkaWriteError("Failed writing to kafka") from exc

        log.debug("MQTT message written to kafka (%s)", context)

    return handle


def data_message_handler() -> MessageHandler:
    """Return a handler that only logs data messages."""

    def handle(client: Any, message: MqttMessage) -> None:
        log.debug("Received data message on topic: %s", message.topic)
        if not message.payload:
            log.debug("Received empty data message")

    return handle


def default_message_handler(
    topic_verifier: TopicVerifier,
    control_handler: MessageHandler,
    data_handler: MessageHandler,
) -> MessageHandler:
    """Route each message to the control or data handler by its topic."""

    def handle(client: Any, message: MqttMessage) -> None:
        log.debug("Received message on topic: %s Message: %r", message.topic, message.payload)
        try:
            topic_type, _ = topic_verifier.verify_incoming_topic(message.topic)
        except TopicError:
            log.debug("Topic verification failed: %s", message.topic)
            return

        if topic_type == TopicType.CONTROL:
            control_handler(client, message)
        elif topic_type == TopicType.DATA:
            data_handler(client, message)
        else:
            log.debug("Received message on unknown topic: %s", message.topic)

    return handle