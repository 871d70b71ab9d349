import math
from datetime import datetime, timezone
from typing import Any, Optional, Union
from uuid import UUID

from src.common.constants import UNASSIGNED_DRIVER_ID, ChangeKind, TypeMsg
from src.common.logger import log_debug, log_info
from src.config import TaxiSettings, settings
from src.infra.event_bus import EventBus
from src.services.taxi_service.errors import TaxiNotFoundError, TaxiValidationError
from src.services.taxi_service.repository import TaxiRepository
from src.services.taxi_service.seed import SEED_TAXIS
from src.services.utils.geo_utils import get_distance_by_lat_lon
from src.shared.events.taxi_events import build_taxi_event
from src.shared.models.common import PaginatedResponse, PaginationParams
from src.shared.models.taxi_dto import (
    TaxiCreateRequest,
    TaxiDTO,
    TaxiFilter,
    TaxiInsertRequest,
    TaxiQuery,
    TaxiUpdateRequest,
)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TaxiService:
    """
    Правила изменения записи такси и поиск такси поблизости.

    Хранилище и шина событий передаются снаружи; сервис не держит
    состояния между запросами.
    """

    def __init__(
        self,
        repository: TaxiRepository,
        event_bus: EventBus,
        taxi_settings: Optional[TaxiSettings] = None,
    ):
        self.repository = repository
        self.event_bus = event_bus
        self.settings = taxi_settings or settings.taxi

    # --- CRUD ---

    async def list_taxis(
        self,
        page: int = 1,
        page_size: Optional[int] = None,
        sort: Optional[str] = None,
    ) -> PaginatedResponse[TaxiDTO]:
        """Страница записей и общее количество."""
        page_size = page_size or self.settings.LIST_DEFAULT_PAGE_SIZE
        if page_size > self.settings.LIST_MAX_PAGE_SIZE:
            raise TaxiValidationError(f"pageSize must be <= {self.settings.LIST_MAX_PAGE_SIZE}")

        pagination = PaginationParams(page=page, page_size=page_size)
        rows = await self.repository.find(
            TaxiQuery(limit=pagination.limit, offset=pagination.offset, sort=sort)
        )
        total = await self.repository.count()

        return PaginatedResponse[TaxiDTO].create(
            items=[self._to_dto(row) for row in rows],
            total=total,
            pagination=pagination,
        )

    async def find_taxis(self, query: TaxiQuery) -> list[TaxiDTO]:
        if query.limit is not None and query.limit > self.settings.FIND_MAX_LIMIT:
            raise TaxiValidationError(f"limit must be <= {self.settings.FIND_MAX_LIMIT}")
        rows = await self.repository.find(query)
        return [self._to_dto(row) for row in rows]

    async def count_taxis(self, flt: Optional[TaxiFilter] = None) -> int:
        return await self.repository.count(flt)

    async def get_taxi(self, taxi_id: UUID) -> TaxiDTO:
        row = await self.repository.get(taxi_id)
        if row is None:
            raise TaxiNotFoundError(taxi_id)
        return self._to_dto(row)

    async def create_taxi(
        self,
        request: TaxiCreateRequest,
        correlation_id: Optional[str] = None,
    ) -> TaxiDTO:
        """
        Создаёт такси. Дата регистрации, водитель и счётчики всегда
        выставляются сервисом, что бы ни прислал клиент.
        """
        data = request.model_dump()
        data.update(
            register_date=utcnow(),
            id_driver=UNASSIGNED_DRIVER_ID,
            num_of_trips=0,
            distance_traveled=0.0,
            avg_dist_per_trip=0.0,
        )

        taxi = self._to_dto(await self.repository.insert(data))
        await log_info(f"Такси создано: {taxi.id} ({taxi.maker} {taxi.model})", type_msg=TypeMsg.INFO)

        await self._entity_changed(ChangeKind.CREATED, taxi, correlation_id)
        return taxi

    async def insert_taxis(
        self,
        request: TaxiInsertRequest,
        correlation_id: Optional[str] = None,
    ) -> Union[TaxiDTO, list[TaxiDTO]]:
        """
        Вставляет записи как есть, без принудительного обнуления.
        Незаданные поля получают значения по умолчанию.
        """
        entities = [request.entity] if request.entity is not None else request.entities
        records = [self._insert_defaults(entity) for entity in entities]

        rows = await self.repository.insert_many(records)
        taxis = [self._to_dto(row) for row in rows]
        for taxi in taxis:
            await self._entity_changed(ChangeKind.CREATED, taxi, correlation_id)

        return taxis[0] if request.entity is not None else taxis

    async def update_taxi(
        self,
        taxi_id: UUID,
        request: TaxiUpdateRequest,
        correlation_id: Optional[str] = None,
    ) -> TaxiDTO:
        fields = request.model_dump(exclude_unset=True)
        return await self._update(taxi_id, fields, correlation_id)

    async def remove_taxi(self, taxi_id: UUID, correlation_id: Optional[str] = None) -> TaxiDTO:
        row = await self.repository.remove_by_id(taxi_id)
        if row is None:
            raise TaxiNotFoundError(taxi_id)

        taxi = self._to_dto(row)
        await log_info(f"Такси удалено: {taxi.id}", type_msg=TypeMsg.INFO)

        await self._entity_changed(ChangeKind.REMOVED, taxi, correlation_id)
        return taxi

    # --- Domain actions ---

    async def assign_driver(
        self,
        taxi_id: UUID,
        id_driver: str,
        correlation_id: Optional[str] = None,
    ) -> TaxiDTO:
        """Назначает водителя такси."""
        return await self._update(taxi_id, {"id_driver": id_driver}, correlation_id)

    async def register_trip(
        self,
        taxi_id: UUID,
        distance: float,
        correlation_id: Optional[str] = None,
    ) -> TaxiDTO:
        """
        Регистрирует поездку: счётчик поездок, даты первой/последней
        поездки, пройденное расстояние и avgDistPerTrip.

        avgDistPerTrip накапливается как сумма distanceTraveled / numOfTrips
        по всем поездкам, а не как среднее. Формула сохранена как есть,
        потребители метрики на неё завязаны.

        Чтение и запись не защищены версией: два одновременных вызова
        для одного такси могут потерять одно из приращений.
        """
        if isinstance(distance, bool) or not math.isfinite(distance) or distance <= 0:
            raise TaxiValidationError("distance must be a positive number")

        taxi = await self.get_taxi(taxi_id)
        now = utcnow()

        if taxi.num_of_trips is None:
            num_of_trips = 1
        else:
            num_of_trips = taxi.num_of_trips + 1

        if taxi.first_trip_date is None:
            first_trip_date = now
            last_trip_date = first_trip_date
        else:
            first_trip_date = taxi.first_trip_date
            last_trip_date = now

        if taxi.distance_traveled is None:
            distance_traveled = distance
        else:
            distance_traveled = taxi.distance_traveled + distance

        if taxi.avg_dist_per_trip is None:
            avg_dist_per_trip = distance_traveled
        else:
            avg_dist_per_trip = taxi.avg_dist_per_trip + distance_traveled / num_of_trips

        return await self._update(
            taxi_id,
            {
                "num_of_trips": num_of_trips,
                "first_trip_date": first_trip_date,
                "last_trip_date": last_trip_date,
                "distance_traveled": distance_traveled,
                "avg_dist_per_trip": avg_dist_per_trip,
            },
            correlation_id,
        )

    async def update_position(
        self,
        taxi_id: UUID,
        lat: float,
        lon: float,
        correlation_id: Optional[str] = None,
    ) -> TaxiDTO:
        """Сохраняет последнюю известную позицию такси."""
        return await self._update(
            taxi_id,
            {"last_lat": lat, "last_lon": lon, "last_pos_update_date": utcnow()},
            correlation_id,
        )

    async def find_taxis_nearby(self, lat: float, lon: float, distance: int) -> list[TaxiDTO]:
        """
        Такси, чья последняя позиция не дальше distance км от точки
        (граница включительно). Линейный проход по всем такси с позицией,
        порядок как в хранилище. Событие об изменении не публикуется.
        """
        if isinstance(distance, bool) or not isinstance(distance, int) or distance <= 0:
            raise TaxiValidationError("distance must be a positive integer")

        rows = await self.repository.find(TaxiQuery(has_position=True))

        nearby = []
        for row in rows:
            taxi = self._to_dto(row)
            if not taxi.has_position:
                continue

            result = get_distance_by_lat_lon(taxi.last_lat, taxi.last_lon, lat, lon)
            await log_debug(
                f"findTaxisNearby: такси {taxi.id} в {result:.3f} км от точки, запрошено {distance}"
            )
            if result <= distance:
                nearby.append(taxi)

        return nearby

    # --- Seed ---

    async def seed_if_empty(self) -> int:
        """Заполняет пустую коллекцию тестовыми машинами. Возвращает число вставленных."""
        if await self.repository.count() > 0:
            return 0

        rows = await self.repository.insert_many([dict(item) for item in SEED_TAXIS])
        await log_info(f"Коллекция такси пуста, добавлено {len(rows)} тестовых записей", type_msg=TypeMsg.INFO)
        return len(rows)

    # --- Internals ---

    async def _update(
        self,
        taxi_id: UUID,
        fields: dict[str, Any],
        correlation_id: Optional[str],
    ) -> TaxiDTO:
        row = await self.repository.update_by_id(taxi_id, fields)
        if row is None:
            raise TaxiNotFoundError(taxi_id)

        taxi = self._to_dto(row)
        await self._entity_changed(ChangeKind.UPDATED, taxi, correlation_id)
        return taxi

    async def _entity_changed(
        self,
        kind: ChangeKind,
        taxi: TaxiDTO,
        correlation_id: Optional[str] = None,
    ) -> None:
        event = build_taxi_event(kind, taxi.to_event_payload(), correlation_id=correlation_id)
        await self.event_bus.publish(event)

    @staticmethod
    def _insert_defaults(entity: TaxiCreateRequest) -> dict[str, Any]:
        data = entity.model_dump()
        if data.get("register_date") is None:
            data["register_date"] = utcnow()
        if data.get("id_driver") is None:
            data["id_driver"] = UNASSIGNED_DRIVER_ID
        for counter in ("num_of_trips", "distance_traveled", "avg_dist_per_trip"):
            if data.get(counter) is None:
                data[counter] = 0
        return data

    @staticmethod
    def _to_dto(row: dict[str, Any]) -> TaxiDTO:
        return TaxiDTO.model_validate(row)
