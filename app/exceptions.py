"""
Domain exceptions.

Services raise these; app.main turns each one into a JSON response
`{"detail": message}` with the exception's status code.
"""
from fastapi import status


class StockroomError(Exception):
    """Base class for every error the core raises on purpose."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFoundError(StockroomError):
    status_code = status.HTTP_404_NOT_FOUND


class InvalidStateError(StockroomError):
    """Mutation attempted on an order whose status forbids it."""

    status_code = status.HTTP_400_BAD_REQUEST


class UnauthorizedError(StockroomError):
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Invalid PIN"):
        super().__init__(message)


class ConflictError(StockroomError):
    status_code = status.HTTP_409_CONFLICT


class LedgerImmutableError(StockroomError):
    """Ledger entries are append-only; updates and deletes are refused."""

    def __init__(self, message: str = "Ledger entries cannot be modified or deleted"):
        super().__init__(message)
