# src/infra/__init__.py
"""
Инфраструктурный слой.
Работа с внешними сервисами: PostgreSQL, RabbitMQ.
"""

from src.infra.database import DatabaseManager, init_db, close_db
from src.infra.event_bus import EventBus, init_event_bus, close_event_bus

__all__ = [
    "DatabaseManager",
    "init_db",
    "close_db",
    "EventBus",
    "init_event_bus",
    "close_event_bus",
]
