"""Outbound publishing of domain events."""

from finance_core.sinks.kafka import KafkaEventPublisher, PublisherStats, topic_for

__all__ = ["KafkaEventPublisher", "PublisherStats", "topic_for"]
