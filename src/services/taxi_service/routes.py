from typing import Optional, Union
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from src.services.taxi_service.dependencies import get_correlation_id, get_taxi_service
from src.services.taxi_service.service import TaxiService
from src.shared.models.common import PaginatedResponse
from src.shared.models.taxi_dto import (
    AssignDriverRequest,
    FindNearbyRequest,
    RegisterTripRequest,
    TaxiCreateRequest,
    TaxiDTO,
    TaxiFilter,
    TaxiInsertRequest,
    TaxiQuery,
    TaxiUpdateRequest,
    UpdatePositionRequest,
)

router = APIRouter(prefix="/taxi", tags=["Taxi"])


def get_taxi_filter(
    id_driver: Optional[str] = Query(None, alias="idDriver"),
    maker: Optional[str] = None,
    model: Optional[str] = None,
    year: Optional[int] = None,
    color: Optional[str] = None,
    has_position: Optional[bool] = Query(None, alias="hasPosition"),
) -> TaxiFilter:
    return TaxiFilter(
        id_driver=id_driver,
        maker=maker,
        model=model,
        year=year,
        color=color,
        has_position=has_position,
    )


# Статические пути объявлены раньше /{taxi_id}

@router.get("/", response_model=PaginatedResponse[TaxiDTO])
async def list_taxis(
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, ge=1, alias="pageSize"),
    sort: Optional[str] = None,
    service: TaxiService = Depends(get_taxi_service),
):
    return await service.list_taxis(page, page_size, sort)


@router.post("/find", response_model=list[TaxiDTO])
async def find_taxis(
    query: TaxiQuery,
    service: TaxiService = Depends(get_taxi_service),
):
    return await service.find_taxis(query)


@router.get("/count", response_model=int)
async def count_taxis(
    flt: TaxiFilter = Depends(get_taxi_filter),
    service: TaxiService = Depends(get_taxi_service),
):
    return await service.count_taxis(flt)


@router.post("/", response_model=TaxiDTO)
async def create_taxi(
    request: TaxiCreateRequest,
    service: TaxiService = Depends(get_taxi_service),
    correlation_id: Optional[str] = Depends(get_correlation_id),
):
    return await service.create_taxi(request, correlation_id)


@router.post("/insert", response_model=Union[TaxiDTO, list[TaxiDTO]])
async def insert_taxis(
    request: TaxiInsertRequest,
    service: TaxiService = Depends(get_taxi_service),
    correlation_id: Optional[str] = Depends(get_correlation_id),
):
    return await service.insert_taxis(request, correlation_id)


@router.post("/position/findNearby", response_model=list[TaxiDTO])
async def find_taxis_nearby(
    request: FindNearbyRequest,
    service: TaxiService = Depends(get_taxi_service),
):
    return await service.find_taxis_nearby(request.lat, request.lon, request.distance)


@router.get("/{taxi_id}", response_model=TaxiDTO)
async def get_taxi(
    taxi_id: UUID,
    service: TaxiService = Depends(get_taxi_service),
):
    return await service.get_taxi(taxi_id)


@router.put("/{taxi_id}", response_model=TaxiDTO)
async def update_taxi(
    taxi_id: UUID,
    request: TaxiUpdateRequest,
    service: TaxiService = Depends(get_taxi_service),
    correlation_id: Optional[str] = Depends(get_correlation_id),
):
    return await service.update_taxi(taxi_id, request, correlation_id)


@router.delete("/{taxi_id}", response_model=TaxiDTO)
async def remove_taxi(
    taxi_id: UUID,
    service: TaxiService = Depends(get_taxi_service),
    correlation_id: Optional[str] = Depends(get_correlation_id),
):
    return await service.remove_taxi(taxi_id, correlation_id)


@router.put("/{taxi_id}/idDriver/assign", response_model=TaxiDTO)
async def assign_driver(
    taxi_id: UUID,
    request: AssignDriverRequest,
    service: TaxiService = Depends(get_taxi_service),
    correlation_id: Optional[str] = Depends(get_correlation_id),
):
    return await service.assign_driver(taxi_id, request.id_driver, correlation_id)


@router.put("/{taxi_id}/trip/register", response_model=TaxiDTO)
async def register_trip(
    taxi_id: UUID,
    request: RegisterTripRequest,
    service: TaxiService = Depends(get_taxi_service),
    correlation_id: Optional[str] = Depends(get_correlation_id),
):
    return await service.register_trip(taxi_id, request.distance, correlation_id)


@router.put("/{taxi_id}/position/update", response_model=TaxiDTO)
async def update_position(
    taxi_id: UUID,
    request: UpdatePositionRequest,
    service: TaxiService = Depends(get_taxi_service),
    correlation_id: Optional[str] = Depends(get_correlation_id),
):
    return await service.update_position(taxi_id, request.lat, request.lon, correlation_id)
