# src/services/__init__.py
"""
Сервисы приложения.

Архитектура:
- Каждый сервис является независимым FastAPI-приложением
- Хранилище: PostgreSQL (asyncpg)
- Уведомления об изменениях через RabbitMQ (topic exchange)

Сервисы:
- taxi_service: учёт машин такси, водитель, поездки, позиция, поиск поблизости
"""

__all__: list[str] = []
