# src/shared/__init__.py
"""
Общий код сервиса.

Модули:
- events: схемы событий RabbitMQ
- models: DTO и Pydantic-модели запросов/ответов
"""

__all__: list[str] = []
