from typing import Any, Optional


class TaxiServiceError(Exception):
    """Базовая ошибка сервиса такси: вид ошибки + сообщение."""

    kind: str = "taxi_error"
    status_code: int = 500

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class TaxiValidationError(TaxiServiceError):
    """Некорректные входные данные."""

    kind = "validation_error"
    status_code = 422


class TaxiNotFoundError(TaxiServiceError):
    """Запись с таким id отсутствует в хранилище."""

    kind = "not_found"
    status_code = 404

    def __init__(self, taxi_id: Any):
        super().__init__(f"Taxi not found: {taxi_id}", details={"id": str(taxi_id)})
        self.taxi_id = taxi_id


class TaxiStoreError(TaxiServiceError):
    """Ошибка ввода-вывода хранилища. Не повторяется и не восстанавливается."""

    kind = "store_error"
    status_code = 503
