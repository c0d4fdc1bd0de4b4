"""
Base Service.

Base class for all services providing common patterns for business logic.
Services orchestrate stores, translate storage failures into application
errors, and implement business rules.

Usage:
    from quicknotes.backend.services.base import BaseService

    class NoteService(BaseService):
        def __init__(self, repo: NoteStore) -> None:
            super().__init__()
            self.repo = repo
"""

from typing import Any, Awaitable, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from quicknotes.backend.core.exceptions import (
    ConflictError,
    DatabaseError,
    StorageError,
    ValidationError,
)
from quicknotes.backend.core.logging import get_logger

T = TypeVar("T")


class BaseService:
    """
    Base class for all services.

    Provides:
    - Logging context
    - Error wrapping for storage operations
    - Common validation patterns
    """

    def __init__(self) -> None:
        self._logger = get_logger(self.__class__.__module__)

    async def _execute_store_operation(
        self,
        operation: str,
        coro: Awaitable[T],
    ) -> T:
        """
        Execute a storage operation with error handling.

        Converts SQLAlchemy and OS-level exceptions to application-specific
        exceptions. ApplicationError subclasses pass through untouched.

        Raises:
            ConflictError: For unique constraint violations
            DatabaseError: For other database errors
            StorageError: For file I/O errors
        """
        try:
            return await coro
        except IntegrityError as e:
            self._logger.warning(
                "Database integrity error",
                extra={"operation": operation, "error": str(e)},
            )
            error_str = str(e).lower()
            if "unique" in error_str or "duplicate" in error_str:
                raise ConflictError("Resource already exists") from e
            raise DatabaseError(f"Database constraint violation: {operation}") from e
        except SQLAlchemyError as e:
            self._logger.error(
                "Database error",
                extra={"operation": operation, "error": str(e)},
            )
            raise DatabaseError(f"Database operation failed: {operation}") from e
        except OSError as e:
            self._logger.error(
                "Storage error",
                extra={"operation": operation, "error": str(e)},
            )
            raise StorageError(f"Storage operation failed: {operation}") from e

    def _validate_required(
        self,
        fields: dict[str, Any],
        field_names: list[str],
    ) -> None:
        """
        Validate that required fields are present and not blank.

        Raises:
            ValidationError: If any required field is missing or empty
        """
        missing = []
        for name in field_names:
            value = fields.get(name)
            if value is None or (isinstance(value, str) and not value.strip()):
                missing.append(name)

        if missing:
            raise ValidationError(
                "Required fields missing",
                details={"missing_fields": missing},
            )

    def _validate_string_length(
        self,
        value: str,
        field_name: str,
        min_length: int | None = None,
        max_length: int | None = None,
    ) -> None:
        """
        Validate string length constraints.

        Raises:
            ValidationError: If string length is out of bounds
        """
        if min_length is not None and len(value) < min_length:
            raise ValidationError(
                f"{field_name} too short",
                details={field_name: f"Minimum length is {min_length}"},
            )
        if max_length is not None and len(value) > max_length:
            raise ValidationError(
                f"{field_name} too long",
                details={field_name: f"Maximum length is {max_length}"},
            )

    def _log_operation(self, operation: str, **context: Any) -> None:
        self._logger.info(
            operation,
            extra={"service": self.__class__.__name__, **context},
        )

    def _log_debug(self, message: str, **context: Any) -> None:
        self._logger.debug(
            message,
            extra={"service": self.__class__.__name__, **context},
        )
