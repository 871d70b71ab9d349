from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from src.common.constants import UNASSIGNED_DRIVER_ID


class TaxiDTO(BaseModel):
    """Запись такси в том виде, в котором её видят клиенты."""

    id: UUID
    id_driver: str = Field(UNASSIGNED_DRIVER_ID, alias="idDriver")
    maker: str
    model: str
    year: int
    color: str
    register_date: datetime = Field(..., alias="registerDate")
    first_trip_date: Optional[datetime] = Field(None, alias="firstTripDate")
    last_trip_date: Optional[datetime] = Field(None, alias="lastTripDate")
    last_pos_update_date: Optional[datetime] = Field(None, alias="lastPosUpdateDate")
    last_lat: Optional[float] = Field(None, alias="lastLat")
    last_lon: Optional[float] = Field(None, alias="lastLon")
    # None означает, что счётчик ещё не инициализирован
    num_of_trips: Optional[int] = Field(0, alias="numOfTrips")
    distance_traveled: Optional[float] = Field(0.0, alias="distanceTraveled")
    avg_dist_per_trip: Optional[float] = Field(0.0, alias="avgDistPerTrip")

    class Config:
        from_attributes = True
        populate_by_name = True

    @property
    def has_position(self) -> bool:
        """Позиция известна и пригодна для расчёта расстояния."""
        return (
            self.last_pos_update_date is not None
            and self.last_lat is not None
            and self.last_lon is not None
        )

    def to_event_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


# Колонки хранилища в порядке выдачи клиенту
TAXI_COLUMNS: tuple[str, ...] = tuple(TaxiDTO.model_fields)

# camelCase имя поля -> колонка
COLUMN_BY_ALIAS: dict[str, str] = {
    (field.alias or name): name for name, field in TaxiDTO.model_fields.items()
}

# Поля, которые обязаны иметь значение в хранилище
_NOT_NULL_FIELDS = ("id_driver", "maker", "model", "year", "color")


class _TaxiStateFields(BaseModel):
    """Поля состояния, которые клиент может передать при создании/обновлении."""

    id_driver: Optional[str] = Field(None, alias="idDriver")
    first_trip_date: Optional[datetime] = Field(None, alias="firstTripDate")
    last_trip_date: Optional[datetime] = Field(None, alias="lastTripDate")
    last_pos_update_date: Optional[datetime] = Field(None, alias="lastPosUpdateDate")
    last_lat: Optional[float] = Field(None, alias="lastLat", allow_inf_nan=False)
    last_lon: Optional[float] = Field(None, alias="lastLon", allow_inf_nan=False)
    num_of_trips: Optional[int] = Field(None, ge=0, alias="numOfTrips")
    distance_traveled: Optional[float] = Field(None, ge=0, alias="distanceTraveled", allow_inf_nan=False)
    avg_dist_per_trip: Optional[float] = Field(None, ge=0, alias="avgDistPerTrip", allow_inf_nan=False)

    class Config:
        populate_by_name = True


class TaxiCreateRequest(_TaxiStateFields):
    """
    Данные для создания такси.

    idDriver, registerDate и счётчики принимаются, но при create
    перезаписываются значениями по умолчанию.
    """

    maker: str = Field(..., min_length=2, max_length=30)
    model: str = Field(..., min_length=2, max_length=30)
    year: int = Field(..., ge=1900, le=2999)
    color: str = Field(..., min_length=2, max_length=30)
    register_date: Optional[datetime] = Field(None, alias="registerDate")


class TaxiInsertRequest(BaseModel):
    """Вставка одной (entity) или нескольких (entities) записей как есть."""

    entity: Optional[TaxiCreateRequest] = None
    entities: Optional[list[TaxiCreateRequest]] = Field(None, min_length=1)

    @model_validator(mode="after")
    def check_one_of(self) -> "TaxiInsertRequest":
        if (self.entity is None) == (self.entities is None):
            raise ValueError("Нужно передать ровно одно из полей: entity или entities")
        return self


class TaxiUpdateRequest(_TaxiStateFields):
    """
    Частичное обновление такси.
    registerDate не принимается: дата регистрации неизменна.
    """

    maker: Optional[str] = Field(None, min_length=2, max_length=30)
    model: Optional[str] = Field(None, min_length=2, max_length=30)
    year: Optional[int] = Field(None, ge=1900, le=2999)
    color: Optional[str] = Field(None, min_length=2, max_length=30)

    class Config:
        populate_by_name = True
        extra = "forbid"

    @model_validator(mode="after")
    def check_not_null(self) -> "TaxiUpdateRequest":
        for name in _NOT_NULL_FIELDS:
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"Поле {type(self).model_fields[name].alias or name} не может быть null")
        return self


class AssignDriverRequest(BaseModel):
    id_driver: str = Field(..., alias="idDriver")

    class Config:
        populate_by_name = True


class RegisterTripRequest(BaseModel):
    distance: float = Field(..., gt=0, strict=True, allow_inf_nan=False, description="Расстояние поездки, км")


class UpdatePositionRequest(BaseModel):
    lat: float = Field(..., strict=True, allow_inf_nan=False)
    lon: float = Field(..., strict=True, allow_inf_nan=False)


class FindNearbyRequest(BaseModel):
    lat: float = Field(..., strict=True, allow_inf_nan=False)
    lon: float = Field(..., strict=True, allow_inf_nan=False)
    distance: int = Field(..., gt=0, strict=True, description="Радиус поиска, км (включительно)")


class TaxiFilter(BaseModel):
    """Фильтр по равенству полей."""

    id_driver: Optional[str] = Field(None, alias="idDriver")
    maker: Optional[str] = None
    model: Optional[str] = None
    year: Optional[int] = None
    color: Optional[str] = None
    has_position: Optional[bool] = Field(None, alias="hasPosition")

    class Config:
        populate_by_name = True


class TaxiQuery(TaxiFilter):
    """Фильтр с сортировкой и окном выборки."""

    limit: Optional[int] = Field(None, ge=1)
    offset: int = Field(0, ge=0)
    # Например: "-registerDate,maker"
    sort: Optional[str] = None
