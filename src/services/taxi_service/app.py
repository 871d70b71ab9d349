from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src.common.constants import TypeMsg
from src.common.logger import log_info, log_warning, setup_logging
from src.config import settings
from src.infra.database import close_db, init_db
from src.infra.event_bus import close_event_bus, init_event_bus
from src.services.taxi_service.dependencies import REQUEST_ID_HEADER
from src.services.taxi_service.errors import TaxiServiceError
from src.services.taxi_service.repository import TaxiRepository
from src.services.taxi_service.routes import router
from src.services.taxi_service.service import TaxiService
from src.shared.models.common import ErrorResponse, HealthStatus

SERVICE_NAME = "taxi_service"


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    app.state.db = await init_db()
    try:
        app.state.event_bus = await init_event_bus()

        if settings.taxi.SEED_ON_EMPTY:
            service = TaxiService(TaxiRepository(app.state.db), app.state.event_bus)
            await service.seed_if_empty()

        await log_info(f"{SERVICE_NAME} запущен", type_msg=TypeMsg.INFO)
        yield
    finally:
        await close_db(app.state.db)
        event_bus = getattr(app.state, "event_bus", None)
        if event_bus is not None:
            await close_event_bus(event_bus)


app = FastAPI(
    title="Taxi Service",
    version=settings.system.VERSION,
    lifespan=lifespan
)

app.include_router(router, prefix="/api/v1")


def _error_response(request: Request, status_code: int, body: ErrorResponse) -> JSONResponse:
    body.request_id = request.headers.get(REQUEST_ID_HEADER)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


@app.exception_handler(TaxiServiceError)
async def taxi_error_handler(request: Request, exc: TaxiServiceError):
    if exc.status_code >= 500:
        await log_warning(f"{request.method} {request.url.path}: {exc.kind}: {exc.message}")
    return _error_response(
        request,
        exc.status_code,
        ErrorResponse(error_code=exc.kind, message=exc.message, details=exc.details),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    return _error_response(
        request,
        422,
        ErrorResponse(
            error_code="validation_error",
            message="Request validation failed",
            details={"errors": jsonable_encoder(exc.errors())},
        ),
    )


@app.get("/health", response_model=HealthStatus)
async def health_check(request: Request):
    db = getattr(request.app.state, "db", None)
    event_bus = getattr(request.app.state, "event_bus", None)

    dependencies = {
        "postgres": "healthy" if db is not None and await db.health_check() else "unhealthy",
        "rabbitmq": "healthy" if event_bus is not None and await event_bus.health_check() else "unhealthy",
    }
    status = "healthy" if all(v == "healthy" for v in dependencies.values()) else "degraded"

    return HealthStatus(
        service=SERVICE_NAME,
        status=status,
        version=settings.system.VERSION,
        dependencies=dependencies,
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.services.taxi_service.app:app",
        host=settings.deployment.TAXI_SERVICE_HOST,
        port=settings.deployment.TAXI_SERVICE_PORT,
    )
