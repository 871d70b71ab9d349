#!/usr/bin/env python3
# entrypoint_taxi_service.py
"""
Точка входа для Taxi Service.
Порт: 8092
"""

import asyncio
import sys
from pathlib import Path

# Добавляем корневую директорию проекта в путь
project_root = Path(__file__).parent.parent.resolve()
sys.path.insert(0, str(project_root))

import uvicorn

from src.config import settings
from src.common.logger import log_info
from src.common.constants import TypeMsg


async def main() -> None:
    """Запуск Taxi Service."""
    await log_info(
        f"Запуск Taxi Service на порту {settings.deployment.TAXI_SERVICE_PORT}",
        type_msg=TypeMsg.INFO,
    )

    config = uvicorn.Config(
        "src.services.taxi_service.app:app",
        host=settings.deployment.TAXI_SERVICE_HOST,
        port=settings.deployment.TAXI_SERVICE_PORT,
        reload=settings.system.DEBUG,
        log_level="debug" if settings.system.DEBUG else "info",
    )

    server = uvicorn.Server(config)
    await server.serve()


if __name__ == "__main__":
    asyncio.run(main())
