from __future__ import annotations


class KanbanError(Exception):
    """Base error carrying the HTTP status it maps to."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(KanbanError):
    """A required field is missing, blank or out of range."""

    status_code = 400


class NotFoundError(KanbanError):
    status_code = 404


class ConflictError(KanbanError):
    """The request is well formed but the target rejects it."""

    status_code = 400


class StoreError(KanbanError):
    """Unexpected persistence failure."""

    status_code = 500
