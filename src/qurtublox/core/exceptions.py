"""Store error types.

Service functions raise these; JsonApiView turns them into
``{"error": ...}`` responses with the matching HTTP status.
"""


class StoreError(Exception):
    """Base class for errors reported to API clients."""

    status_code = 500

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ValidationError(StoreError):
    """Request body is missing fields or has invalid values."""

    status_code = 400


class InvalidCredentials(StoreError):
    """Password did not match."""

    status_code = 401


class NotFound(StoreError):
    """Referenced record does not exist."""

    status_code = 404


class Conflict(StoreError):
    """Write conflicts with existing data (duplicate key, stale revision)."""

    status_code = 409


class StaleRevision(Conflict):
    """Row was modified by someone else since the client read it."""

    def __init__(self, model_name: str, pk: str, expected: int):
        self.model_name = model_name
        self.pk = pk
        self.expected = expected
        super().__init__(
            f"{model_name} {pk} was modified by someone else. Reload and try again.",
            details={"id": pk, "revision": expected},
        )


class StaleCollection(Conflict):
    """Rows the client never saw would be deleted by a bulk save."""

    def __init__(self, model_name: str, pks: list):
        self.model_name = model_name
        self.pks = pks
        super().__init__(
            f"{model_name} list changed since it was loaded. Reload and try again.",
            details={"ids": pks},
        )


class InsufficientPoints(Conflict):
    """Customer balance does not cover the order total."""

    def __init__(self, balance: int, total: int):
        self.balance = balance
        self.total = total
        super().__init__(
            f"Insufficient points: balance {balance}, order total {total}",
            details={"points": balance, "total": total},
        )


class ServiceUnavailable(StoreError):
    """Backing table is missing or the database is unreachable."""

    status_code = 503
