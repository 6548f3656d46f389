"""Kafka publisher that forwards domain events to topics."""

from __future__ import annotations

import json
import logging
import re
import time
from dataclasses import dataclass
from typing import Any

from confluent_kafka import KafkaException, Producer

from finance_core.config import KafkaConfig
from finance_core.exceptions import PublisherError
from finance_core.logging import event_context
from finance_core.models.base import DomainEvent
from finance_core.sinks.serialization import event_to_dict

logger = logging.getLogger(__name__)

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


@dataclass
class PublisherStats:
    """Track publisher delivery statistics."""

    sent: int = 0
    delivered: int = 0
    failed: int = 0
    start_time: float | None = None

    @property
    def success_rate(self) -> float:
        """Calculate success rate."""
        total = self.delivered + self.failed
        return self.delivered / total if total > 0 else 0.0

    @property
    def throughput(self) -> float:
        """Calculate events per second since the first send."""
        if self.start_time is None:
            return 0.0
        duration = time.time() - self.start_time
        return self.sent / duration if duration > 0 else 0.0


def topic_for(event_name: str, prefix: str) -> str:
    """``BudgetExceeded`` -> ``<prefix>.budget-exceeded``."""
    return f"{prefix}.{_CAMEL_BOUNDARY.sub('-', event_name).lower()}"


class KafkaEventPublisher:
    """Event handler that publishes every event it receives to Kafka.

    Register it on an ``EventBus`` for the event names to forward. Messages
    are JSON, keyed by the event's ``user_id`` so a user's events stay in
    one partition.
    """

    def __init__(self, config: KafkaConfig | str) -> None:
        """Initialize Kafka publisher.

        Parameters
        ----------
        config : KafkaConfig | str
            Kafka configuration or bootstrap servers string.
        """
        if isinstance(config, str):
            config = KafkaConfig(bootstrap_servers=config)

        self.config = config
        self.producer = self._create_producer()
        self.stats = PublisherStats()

    def _create_producer(self) -> Producer:
        """Create Kafka producer with configuration."""
        return Producer(self.config.to_dict())

    def _delivery_callback(self, err: Any, msg: Any) -> None:
        """Handle delivery reports."""
        if err:
            self.stats.failed += 1
            logger.error("Delivery failed: %s", err)
        else:
            self.stats.delivered += 1
            logger.debug("Delivered to %s[%d]@%d", msg.topic(), msg.partition(), msg.offset())

    async def handle(self, event: DomainEvent) -> None:
        self.publish(event)

    def publish(self, event: DomainEvent) -> None:
        """Queue one event for delivery.

        Raises
        ------
        PublisherError
            If the producer rejects the message (e.g. local queue full).
        """
        topic = topic_for(event.event_name, self.config.topic_prefix)
        key = event.event_data.get("user_id")
        value = json.dumps(event_to_dict(event), ensure_ascii=False, default=str).encode("utf-8")

        if self.stats.start_time is None:
            self.stats.start_time = time.time()

        try:
            self.producer.produce(
                topic=topic,
                key=key.encode("utf-8") if key else None,
                value=value,
                callback=self._delivery_callback,
            )
        except (BufferError, KafkaException) as exc:
            self.stats.failed += 1
            raise PublisherError(f"Could not publish {event.event_name} to {topic}: {exc}") from exc

        self.stats.sent += 1
        self.producer.poll(0)
        logger.debug("Queued %s on %s", event.event_name, topic, extra=event_context(event))

    def flush(self, timeout: float = 30.0) -> None:
        """Flush pending messages."""
        self.producer.flush(timeout)

    def close(self) -> None:
        """Flush and close the producer."""
        self.flush()
        logger.info(
            "Kafka publisher closed: sent=%d, delivered=%d, failed=%d",
            self.stats.sent,
            self.stats.delivered,
            self.stats.failed,
        )
