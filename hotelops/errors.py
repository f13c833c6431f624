"""Service-layer error taxonomy."""

from __future__ import annotations

# Store error code for "zero rows returned" on a single-row request.
ZERO_ROWS = "PGRST116"


class ServiceError(Exception):
    """Base exception for hotel operations service errors."""

    def __init__(self, message: str, code: str = "UNKNOWN_ERROR"):
        self.message = message
        self.code = code
        super().__init__(self.message)


class ValidationError(ServiceError):
    """Malformed input rejected before any store call. Never retried."""

    def __init__(self, message: str, errors: list | None = None):
        super().__init__(message, "VALIDATION_ERROR")
        self.errors = errors or []


class StoreError(ServiceError):
    """Error reported by the backing store."""

    def __init__(self, message: str, code: str = "STORE_ERROR", details: object = None):
        super().__init__(message, code)
        self.details = details

    @property
    def is_zero_rows(self) -> bool:
        return self.code == ZERO_ROWS


class TransientStoreError(StoreError):
    """Store failure on a mutating call; eligible for retry."""

    pass


class RetryExhausted(ServiceError):
    """All retry attempts failed. ``cause`` is the final attempt's error."""

    def __init__(self, attempts: int, cause: BaseException | None):
        super().__init__(f"Failed after {attempts} attempts", "RETRY_EXHAUSTED")
        self.attempts = attempts
        self.cause = cause


class IntegrityError(ServiceError):
    """A write did not affect the rows it was expected to."""

    pass


class NoDataReturned(IntegrityError):
    def __init__(self, table: str):
        super().__init__(f"No data returned from insert into {table}", "NO_DATA_RETURNED")
        self.table = table


class RowNotFound(IntegrityError):
    def __init__(self, table: str, row_id: object):
        super().__init__(f"No row in {table} with id {row_id}", "ROW_NOT_FOUND")
        self.table = table
        self.row_id = row_id
