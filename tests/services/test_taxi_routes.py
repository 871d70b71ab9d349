# tests/services/test_taxi_routes.py
"""
Тесты REST API сервиса такси (FastAPI TestClient, хранилище в памяти).
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.config.loader import TaxiSettings
from src.services.taxi_service.app import app, lifespan
from src.services.taxi_service.dependencies import get_taxi_service
from src.services.taxi_service.errors import TaxiStoreError
from src.services.taxi_service.service import TaxiService

BASE = "/api/v1/taxi"

TAXI_FIELDS = [
    "id", "idDriver", "maker", "model", "year", "color", "registerDate",
    "firstTripDate", "lastTripDate", "lastPosUpdateDate", "lastLat", "lastLon",
    "numOfTrips", "distanceTraveled", "avgDistPerTrip",
]


@pytest.fixture
def service(taxi_repository, mock_event_bus) -> TaxiService:
    return TaxiService(taxi_repository, mock_event_bus, TaxiSettings())


@pytest.fixture
def client(service):
    app.dependency_overrides[get_taxi_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestDomainRoutes:
    """Тесты для assign / register / position / findNearby."""

    def test_assign_driver(self, client, sample_taxi_row) -> None:
        response = client.put(f"{BASE}/{sample_taxi_row['id']}/idDriver/assign", json={"idDriver": "d-1"})

        assert response.status_code == 200
        body = response.json()
        assert list(body) == TAXI_FIELDS
        assert body["idDriver"] == "d-1"

    def test_register_trip(self, client, sample_taxi_row) -> None:
        taxi_id = sample_taxi_row["id"]
        client.put(f"{BASE}/{taxi_id}/trip/register", json={"distance": 10})
        response = client.put(f"{BASE}/{taxi_id}/trip/register", json={"distance": 20})

        assert response.status_code == 200
        body = response.json()
        assert body["numOfTrips"] == 2
        assert body["distanceTraveled"] == 30
        assert body["avgDistPerTrip"] == 25

    def test_register_trip_rejects_non_positive(self, client, sample_taxi_row) -> None:
        """Отрицательное расстояние: 422 в формате ErrorResponse."""
        response = client.put(
            f"{BASE}/{sample_taxi_row['id']}/trip/register",
            json={"distance": -1},
            headers={"X-Request-ID": "req-9"},
        )

        assert response.status_code == 422
        body = response.json()
        assert body["error_code"] == "validation_error"
        assert body["request_id"] == "req-9"

    def test_update_position_and_find_nearby(self, client, sample_taxi_row) -> None:
        taxi_id = sample_taxi_row["id"]
        response = client.put(f"{BASE}/{taxi_id}/position/update", json={"lat": -23.5505, "lon": -46.6333})
        assert response.status_code == 200
        assert response.json()["lastPosUpdateDate"] is not None

        response = client.post(f"{BASE}/position/findNearby", json={"lat": -23.56, "lon": -46.64, "distance": 5})

        assert response.status_code == 200
        assert [t["id"] for t in response.json()] == [str(taxi_id)]

    @pytest.mark.parametrize("distance", [True, "10"])
    def test_register_trip_rejects_non_number(self, client, sample_taxi_row, distance) -> None:
        """Булевы значения и строки не приводятся к числу."""
        taxi_id = sample_taxi_row["id"]
        response = client.put(f"{BASE}/{taxi_id}/trip/register", json={"distance": distance})

        assert response.status_code == 422
        assert client.get(f"{BASE}/{taxi_id}").json()["numOfTrips"] == 0

    @pytest.mark.parametrize("position", [{"lat": "10", "lon": 1}, {"lat": 1, "lon": False}])
    def test_update_position_rejects_non_number(self, client, sample_taxi_row, position) -> None:
        taxi_id = sample_taxi_row["id"]
        response = client.put(f"{BASE}/{taxi_id}/position/update", json=position)

        assert response.status_code == 422
        assert client.get(f"{BASE}/{taxi_id}").json()["lastPosUpdateDate"] is None

    @pytest.mark.parametrize("distance", [2.5, True, "5"])
    def test_find_nearby_requires_integer_distance(self, client, distance) -> None:
        response = client.post(f"{BASE}/position/findNearby", json={"lat": 0, "lon": 0, "distance": distance})

        assert response.status_code == 422

    def test_find_nearby_rejects_string_coordinates(self, client) -> None:
        response = client.post(f"{BASE}/position/findNearby", json={"lat": "0", "lon": 0, "distance": 5})

        assert response.status_code == 422

    def test_unknown_id_is_404(self, client) -> None:
        response = client.put(f"{BASE}/{uuid4()}/idDriver/assign", json={"idDriver": "d-1"})

        assert response.status_code == 404
        assert response.json()["error_code"] == "not_found"

    def test_malformed_id_is_422(self, client) -> None:
        response = client.put(f"{BASE}/not-a-uuid/idDriver/assign", json={"idDriver": "d-1"})

        assert response.status_code == 422


class TestCrudRoutes:
    """Тесты для CRUD маршрутов."""

    def test_create(self, client, mock_event_bus) -> None:
        response = client.post(
            f"{BASE}/",
            json={"maker": "Ford", "model": "Ka", "year": 2017, "color": "Branco", "idDriver": "x"},
            headers={"X-Request-ID": "req-1"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["idDriver"] == "0"
        assert body["numOfTrips"] == 0
        event = mock_event_bus.publish.call_args[0][0]
        assert event.metadata.correlation_id == "req-1"

    def test_create_validation(self, client) -> None:
        response = client.post(f"{BASE}/", json={"maker": "F", "model": "Ka", "year": 1800, "color": "Branco"})

        assert response.status_code == 422
        assert response.json()["error_code"] == "validation_error"

    def test_get(self, client, sample_taxi_row) -> None:
        response = client.get(f"{BASE}/{sample_taxi_row['id']}")

        assert response.status_code == 200
        assert response.json()["maker"] == sample_taxi_row["maker"]

    def test_update_rejects_register_date(self, client, sample_taxi_row) -> None:
        """registerDate неизменяема."""
        response = client.put(
            f"{BASE}/{sample_taxi_row['id']}",
            json={"registerDate": "2020-01-01T00:00:00Z"},
        )

        assert response.status_code == 422

    def test_update(self, client, sample_taxi_row) -> None:
        response = client.put(f"{BASE}/{sample_taxi_row['id']}", json={"color": "Azul"})

        assert response.status_code == 200
        assert response.json()["color"] == "Azul"

    def test_delete(self, client, sample_taxi_row) -> None:
        response = client.delete(f"{BASE}/{sample_taxi_row['id']}")
        assert response.status_code == 200

        response = client.get(f"{BASE}/{sample_taxi_row['id']}")
        assert response.status_code == 404

    def test_list_and_count(self, client) -> None:
        response = client.get(f"{BASE}/", params={"page": 1, "pageSize": 5})
        assert response.status_code == 200
        assert response.json()["total"] == 1

        response = client.get(f"{BASE}/count")
        assert response.status_code == 200
        assert response.json() == 1

    def test_insert_many(self, client) -> None:
        response = client.post(
            f"{BASE}/insert",
            json={"entities": [
                {"maker": "Ford", "model": "Ka", "year": 2017, "color": "Branco"},
                {"maker": "Fiat", "model": "Uno", "year": 2012, "color": "Verde"},
            ]},
        )

        assert response.status_code == 200
        assert [t["model"] for t in response.json()] == ["Ka", "Uno"]

    def test_insert_requires_one_of(self, client) -> None:
        response = client.post(f"{BASE}/insert", json={})

        assert response.status_code == 422


class TestErrorMapping:
    """Ошибки хранилища отдаются как 503."""

    def test_store_error(self, client, service) -> None:
        async def broken(*args, **kwargs):
            raise TaxiStoreError("Store failure in get: boom")

        service.repository.get = broken

        response = client.get(f"{BASE}/{uuid4()}")

        assert response.status_code == 503
        assert response.json()["error_code"] == "store_error"


class TestHealth:
    """Тесты для /health."""

    def test_health_without_connections(self) -> None:
        """Без подключений сервис отвечает degraded."""
        response = TestClient(app).get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["service"] == "taxi_service"
        assert body["status"] == "degraded"


class TestLifespan:
    """Тесты для lifespan приложения."""

    @pytest.mark.asyncio
    async def test_connections_closed_when_seed_fails(self) -> None:
        """Ошибка заполнения при старте не оставляет открытыми пул и брокер."""
        db = MagicMock()
        event_bus = MagicMock()
        close_db = AsyncMock()
        close_event_bus = AsyncMock()

        with patch("src.services.taxi_service.app.setup_logging"), \
                patch("src.services.taxi_service.app.init_db", AsyncMock(return_value=db)), \
                patch("src.services.taxi_service.app.init_event_bus", AsyncMock(return_value=event_bus)), \
                patch("src.services.taxi_service.app.close_db", close_db), \
                patch("src.services.taxi_service.app.close_event_bus", close_event_bus), \
                patch("src.services.taxi_service.app.settings") as mock_settings, \
                patch.object(TaxiService, "seed_if_empty", AsyncMock(side_effect=TaxiStoreError("seed failed"))):
            mock_settings.taxi.SEED_ON_EMPTY = True

            with pytest.raises(TaxiStoreError):
                async with lifespan(FastAPI()):
                    pass

        close_db.assert_awaited_once_with(db)
        close_event_bus.assert_awaited_once_with(event_bus)
