# src/common/constants.py
"""
Общие константы и перечисления.
"""

from enum import Enum


class TypeMsg(str, Enum):
    """Типы сообщений для логирования."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ChangeKind(str, Enum):
    """Виды изменений сущности, о которых уведомляются подписчики."""
    CREATED = "created"
    UPDATED = "updated"
    REMOVED = "removed"

    def __str__(self) -> str:
        return self.value


# Идентификатор водителя, пока такси никому не назначено
UNASSIGNED_DRIVER_ID = "0"

# Радиус Земли в км
EARTH_RADIUS_KM = 6371.0
