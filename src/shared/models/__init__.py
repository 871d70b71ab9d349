# src/shared/models/__init__.py
"""
DTO и Pydantic-модели сервиса такси.
"""

from src.shared.models.taxi_dto import (
    TaxiDTO,
    TaxiCreateRequest,
    TaxiInsertRequest,
    TaxiUpdateRequest,
    AssignDriverRequest,
    RegisterTripRequest,
    UpdatePositionRequest,
    FindNearbyRequest,
    TaxiFilter,
    TaxiQuery,
)
from src.shared.models.common import (
    PaginationParams,
    PaginatedResponse,
    ErrorResponse,
    HealthStatus,
)

__all__ = [
    # Taxi
    "TaxiDTO",
    "TaxiCreateRequest",
    "TaxiInsertRequest",
    "TaxiUpdateRequest",
    "AssignDriverRequest",
    "RegisterTripRequest",
    "UpdatePositionRequest",
    "FindNearbyRequest",
    "TaxiFilter",
    "TaxiQuery",
    # Common
    "PaginationParams",
    "PaginatedResponse",
    "ErrorResponse",
    "HealthStatus",
]
