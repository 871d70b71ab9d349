# tests/common/test_constants.py
"""
Тесты для модуля констант.
"""

from src.common.constants import (
    EARTH_RADIUS_KM,
    UNASSIGNED_DRIVER_ID,
    ChangeKind,
    TypeMsg,
)


class TestTypeMsg:
    """Тесты для enum TypeMsg."""

    def test_type_msg_values(self) -> None:
        """Проверяет значения типов сообщений."""
        assert TypeMsg.DEBUG.value == "debug"
        assert TypeMsg.INFO.value == "info"
        assert TypeMsg.CRITICAL.value == "critical"

    def test_type_msg_is_str_enum(self) -> None:
        assert isinstance(TypeMsg.DEBUG, str)
        assert TypeMsg.INFO == "info"


class TestChangeKind:
    """Тесты для enum ChangeKind."""

    def test_values(self) -> None:
        assert [k.value for k in ChangeKind] == ["created", "updated", "removed"]

    def test_str(self) -> None:
        """str() отдаёт значение, а не имя члена."""
        assert str(ChangeKind.UPDATED) == "updated"
        assert ChangeKind("removed") is ChangeKind.REMOVED


def test_domain_constants() -> None:
    assert UNASSIGNED_DRIVER_ID == "0"
    assert EARTH_RADIUS_KM == 6371.0
