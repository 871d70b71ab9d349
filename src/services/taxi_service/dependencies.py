from typing import Optional

from fastapi import Request

from src.services.taxi_service.repository import TaxiRepository
from src.services.taxi_service.service import TaxiService

REQUEST_ID_HEADER = "X-Request-ID"


def get_taxi_repository(request: Request) -> TaxiRepository:
    return TaxiRepository(request.app.state.db)


def get_taxi_service(request: Request) -> TaxiService:
    repository = get_taxi_repository(request)
    event_bus = request.app.state.event_bus
    return TaxiService(repository, event_bus)


def get_correlation_id(request: Request) -> Optional[str]:
    return request.headers.get(REQUEST_ID_HEADER)
