"""
RabbitMQ event publisher.

Uses pika in a thread-pool executor so blocking I/O doesn't stall the
asyncio event loop. A new connection is opened per publish call.
"""
import asyncio
import json
from dataclasses import asdict
from functools import partial

import pika
import structlog

from classifieds.application.interfaces.event_publisher import EventPublisher
from classifieds.config import settings
from classifieds.domain.events.domain_events import (
    AuditEmissionFailedEvent,
    DomainEvent,
    ListingArchivedEvent,
    ListingCreatedEvent,
    ListingPublishedEvent,
    PhotoUploadedEvent,
)

logger = structlog.get_logger(__name__)

EXCHANGE_NAME = "classifieds.events"

ROUTING_KEYS: dict[type[DomainEvent], str] = {
    ListingCreatedEvent: "listing.created",
    ListingPublishedEvent: "listing.published",
    ListingArchivedEvent: "listing.archived",
    PhotoUploadedEvent: "listing.photo_uploaded",
    AuditEmissionFailedEvent: "audit.emission_failed",
}


def event_to_routing_key(event: DomainEvent) -> str:
    return ROUTING_KEYS.get(type(event), "event.unknown")


def serialise_event(event: DomainEvent) -> str:
    payload = {"event_type": event_to_routing_key(event), **asdict(event)}
    return json.dumps(payload, default=str)


def _blocking_publish(rabbitmq_url: str, routing_key: str, body: str) -> None:
    connection = pika.BlockingConnection(pika.URLParameters(rabbitmq_url))
    try:
        channel = connection.channel()
        channel.exchange_declare(
            exchange=EXCHANGE_NAME, exchange_type="topic", durable=True
        )
        channel.basic_publish(
            exchange=EXCHANGE_NAME,
            routing_key=routing_key,
            body=body.encode(),
            properties=pika.BasicProperties(
                delivery_mode=pika.DeliveryMode.Persistent,
                content_type="application/json",
            ),
        )
    finally:
        connection.close()


class RabbitMQPublisher(EventPublisher):
    """Publishes domain events to a RabbitMQ topic exchange."""

    def __init__(self, rabbitmq_url: str = settings.rabbitmq_url) -> None:
        self._url = rabbitmq_url

    async def publish(self, event: DomainEvent) -> None:
        routing_key = event_to_routing_key(event)
        body = serialise_event(event)
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(
                None,
                partial(_blocking_publish, self._url, routing_key, body),
            )
            logger.debug("event_published", routing_key=routing_key, event_id=str(event.event_id))
        except Exception as exc:
            # The state change is already committed; a lost notification must not fail it.
            logger.error(
                "failed_to_publish_event",
                routing_key=routing_key,
                event_id=str(event.event_id),
                error=str(exc),
            )
