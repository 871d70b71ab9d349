# src/shared/events/taxi_events.py
"""
События домена такси (изменения записи автомобиля).
"""

from __future__ import annotations

from typing import Any, Literal

from src.common.constants import ChangeKind
from src.shared.events.base import DomainEvent, EventMetadata


class TaxiChanged(DomainEvent):
    """Общая часть событий об изменении такси."""

    taxi_id: str
    taxi: dict[str, Any]


class TaxiCreated(TaxiChanged):
    """Событие: такси создано."""

    event_type: Literal["taxi.created"] = "taxi.created"


class TaxiUpdated(TaxiChanged):
    """Событие: запись такси изменена."""

    event_type: Literal["taxi.updated"] = "taxi.updated"


class TaxiRemoved(TaxiChanged):
    """Событие: такси удалено."""

    event_type: Literal["taxi.removed"] = "taxi.removed"


_EVENTS_BY_KIND: dict[ChangeKind, type[TaxiChanged]] = {
    ChangeKind.CREATED: TaxiCreated,
    ChangeKind.UPDATED: TaxiUpdated,
    ChangeKind.REMOVED: TaxiRemoved,
}


def build_taxi_event(
    kind: ChangeKind,
    taxi: dict[str, Any],
    correlation_id: str | None = None,
    source_service: str = "taxi_service",
) -> TaxiChanged:
    """Собирает событие нужного типа по виду изменения."""
    event_cls = _EVENTS_BY_KIND[ChangeKind(kind)]
    return event_cls(
        taxi_id=str(taxi["id"]),
        taxi=taxi,
        metadata=EventMetadata(correlation_id=correlation_id, source_service=source_service),
    )
