"""
Application error types.

Routers and the exception handlers in ``app.main`` decide status codes;
everything below them raises one of these.
"""
import functools
import logging

from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """A database statement failed (constraint violation, lost connection)."""


class NotFoundError(Exception):
    """The row does not exist or belongs to another user."""


class ReceiptSaveError(Exception):
    """The receipt upload was rolled back. Carries no storage detail."""

    def __init__(self, message: str = "Failed to save receipt data."):
        super().__init__(message)


class AnalysisError(Exception):
    """The receipt analyzer failed. The message is safe to show to users."""


def storage_operation(description: str):
    """Log and re-raise SQLAlchemy failures of a repository call as StorageError."""

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except SQLAlchemyError as exc:
                logger.exception("Error %s", description)
                raise StorageError(f"Error {description}") from exc

        return wrapper

    return decorator
