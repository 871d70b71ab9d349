# tests/conftest.py
"""
Общие фикстуры и настройки для тестов.
"""

from __future__ import annotations

import json
import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock
from uuid import UUID, uuid4

import pytest

# Устанавливаем переменные окружения перед импортом модулей
os.environ.setdefault("DB_PASSWORD", "test_password")
os.environ.setdefault("ENVIRONMENT", "test")


# =============================================================================
# ФИКСТУРЫ КОНФИГУРАЦИИ
# =============================================================================

@pytest.fixture(scope="session")
def project_root() -> Path:
    """Корневая директория проекта."""
    return Path(__file__).parent.parent


@pytest.fixture(scope="session")
def config_path(project_root: Path) -> Path:
    """Путь к файлу конфигурации."""
    return project_root / "config" / "config.json"


@pytest.fixture
def mock_config() -> dict[str, Any]:
    """Мок конфигурации для тестов."""
    return {
        "_comment_system": "тестовая конфигурация",
        "PROJECT_NAME": "taxi_service_test",
        "VERSION": "1.0.0-test",
        "DEBUG": False,
        "ENVIRONMENT": "test",
        "TAXI_SERVICE_HOST": "127.0.0.1",
        "TAXI_SERVICE_PORT": 9092,
        "LOG_LEVEL": "INFO",
        "LOG_TO_FILE": False,
        "LOG_FILE_PATH": "logs/test.log",
        "LOG_FORMAT": "json",
        "DB_HOST": "db.local",
        "DB_PORT": 5433,
        "DB_NAME": "taxi_test",
        "DB_USER": "tester",
        "RABBITMQ_HOST": "mq.local",
        "RABBITMQ_PORT": 5673,
        "RABBITMQ_EXCHANGE": "taxi.test",
        "SEED_ON_EMPTY": False,
        "LIST_DEFAULT_PAGE_SIZE": 5,
        "LIST_MAX_PAGE_SIZE": 50,
        "FIND_MAX_LIMIT": 200,
    }


@pytest.fixture
def temp_config_file(tmp_path: Path, mock_config: dict[str, Any]) -> Path:
    """Создаёт временный файл конфигурации."""
    config_file = tmp_path / "config.json"
    config_file.write_text(json.dumps(mock_config, ensure_ascii=False, indent=2))
    return config_file


# =============================================================================
# ФИКСТУРЫ ИНФРАСТРУКТУРЫ (МОКИ)
# =============================================================================

def make_transaction(connection: Any):
    """Возвращает замену DatabaseManager.transaction, отдающую connection."""
    @asynccontextmanager
    async def transaction():
        yield connection

    return transaction


@pytest.fixture
def mock_connection() -> AsyncMock:
    """Мок соединения asyncpg внутри транзакции."""
    conn = AsyncMock()
    conn.fetchrow = AsyncMock(return_value=None)
    conn.execute = AsyncMock(return_value="INSERT 0 1")
    return conn


@pytest.fixture
def mock_db(mock_connection: AsyncMock) -> MagicMock:
    """Мок менеджера базы данных."""
    db = MagicMock()
    db.fetchrow = AsyncMock(return_value=None)
    db.fetchrow_once = AsyncMock(return_value=None)
    db.fetch = AsyncMock(return_value=[])
    db.execute = AsyncMock(return_value="INSERT 0 1")
    db.fetchval = AsyncMock(return_value=None)
    db.health_check = AsyncMock(return_value=True)
    db.transaction = make_transaction(mock_connection)
    return db


@pytest.fixture
def mock_event_bus() -> AsyncMock:
    """Мок шины событий."""
    event_bus = AsyncMock()
    event_bus.publish = AsyncMock(return_value=None)
    event_bus.health_check = AsyncMock(return_value=True)
    event_bus.is_connected = True
    return event_bus


# =============================================================================
# ФИКСТУРЫ МОДЕЛЕЙ
# =============================================================================

def make_taxi_row(**overrides: Any) -> dict[str, Any]:
    """Строка таблицы taxis в том виде, в каком её отдаёт asyncpg."""
    row = {
        "id": uuid4(),
        "id_driver": "0",
        "maker": "Fiat",
        "model": "Palio",
        "year": 2014,
        "color": "Preto",
        "register_date": datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc),
        "first_trip_date": None,
        "last_trip_date": None,
        "last_pos_update_date": None,
        "last_lat": None,
        "last_lon": None,
        "num_of_trips": 0,
        "distance_traveled": 0.0,
        "avg_dist_per_trip": 0.0,
    }
    row.update(overrides)
    return row


@pytest.fixture
def sample_taxi_row() -> dict[str, Any]:
    """Пример записи такси без поездок и позиции."""
    return make_taxi_row()


class InMemoryTaxiRepository:
    """
    Хранилище такси в памяти с тем же интерфейсом, что у TaxiRepository.
    Порядок выдачи совпадает с порядком вставки.
    """

    def __init__(self, rows: list[dict[str, Any]] | None = None):
        self.rows: dict[UUID, dict[str, Any]] = {}
        for row in rows or []:
            self.rows[row["id"]] = dict(row)

    async def get(self, taxi_id):
        row = self.rows.get(taxi_id)
        return dict(row) if row else None

    async def find(self, query):
        rows = list(self.rows.values())
        if query.has_position:
            rows = [
                r for r in rows
                if r["last_pos_update_date"] is not None
                and r["last_lat"] is not None
                and r["last_lon"] is not None
            ]
        rows = rows[query.offset:]
        if query.limit is not None:
            rows = rows[:query.limit]
        return [dict(r) for r in rows]

    async def count(self, flt=None):
        return len(self.rows)

    async def insert(self, data):
        row = make_taxi_row(**{k: v for k, v in data.items() if v is not None})
        self.rows[row["id"]] = row
        return dict(row)

    async def insert_many(self, records):
        return [await self.insert(data) for data in records]

    async def update_by_id(self, taxi_id, fields):
        row = self.rows.get(taxi_id)
        if row is None:
            return None
        row.update(fields)
        return dict(row)

    async def remove_by_id(self, taxi_id):
        return self.rows.pop(taxi_id, None)


@pytest.fixture
def taxi_repository(sample_taxi_row: dict[str, Any]) -> InMemoryTaxiRepository:
    """Хранилище в памяти с одной записью sample_taxi_row."""
    return InMemoryTaxiRepository([sample_taxi_row])


@pytest.fixture
def taxi_row_factory():
    """Фабрика строк таблицы taxis."""
    return make_taxi_row


@pytest.fixture
def repository_factory():
    """Фабрика хранилищ в памяти."""
    return InMemoryTaxiRepository
