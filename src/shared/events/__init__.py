# src/shared/events/__init__.py
"""
Схемы событий для RabbitMQ.

Сервис такси публикует события об изменении записей:
taxi.created, taxi.updated, taxi.removed.
Каждое событие содержит event_id для дедупликации на стороне подписчика.
"""

from src.shared.events.base import DomainEvent, EventMetadata
from src.shared.events.taxi_events import (
    TaxiChanged,
    TaxiCreated,
    TaxiUpdated,
    TaxiRemoved,
    build_taxi_event,
)

__all__ = [
    "DomainEvent",
    "EventMetadata",
    "TaxiChanged",
    "TaxiCreated",
    "TaxiUpdated",
    "TaxiRemoved",
    "build_taxi_event",
]
