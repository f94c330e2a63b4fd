"""
Base service class providing common functionality for all services.
"""

from contextlib import contextmanager
from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import BaseAppException, handle_database_exception
from app.core.logging import get_audit_logger, get_logger


class BaseService:
    """
    Base service with common behaviors:
    - Shared logger, audit logger and db session
    - Consistent translation of unexpected database errors
    - Transaction management utilities

    Business-rule rejections are raised as ``BaseAppException``
    subclasses and pass through untouched.
    """

    def __init__(self, db_session: Session):
        """
        Initialize base service.

        Args:
            db_session: SQLAlchemy database session
        """
        self.db: Session = db_session
        self._logger = get_logger(self.__class__.__name__)
        self._audit = get_audit_logger()

    # -------------------------------------------------------------------------
    # Exception & Error Handling
    # -------------------------------------------------------------------------

    def _handle_exception(
        self,
        exception: Exception,
        operation: str,
        entity_ref: Optional[Any] = None,
        additional_context: Optional[Dict[str, Any]] = None,
    ) -> BaseAppException:
        """
        Log an unexpected failure and convert it to an application exception.

        Args:
            exception: The caught exception
            operation: Description of the operation that failed
            entity_ref: Reference to the entity involved (ID, name, etc.)
            additional_context: Extra context for logging/debugging

        Returns:
            Exception for the caller to raise
        """
        if isinstance(exception, BaseAppException):
            return exception

        context = {
            "operation": operation,
            "entity_ref": str(entity_ref) if entity_ref is not None else None,
            "exception_type": type(exception).__name__,
        }
        if additional_context:
            context.update(additional_context)

        self._logger.error(
            f"Error during {operation}: {exception}",
            exc_info=True,
            extra=context,
        )
        return handle_database_exception(exception, operation)

    # -------------------------------------------------------------------------
    # Transaction Management
    # -------------------------------------------------------------------------

    @contextmanager
    def transaction(self, operation: str = "transaction"):
        """
        Context manager for database transactions with automatic rollback.

        Example:
            with self.transaction("record exit"):
                self.repository.conditional_update(...)
                # automatic commit on success, rollback on exception
        """
        try:
            yield self.db
            self.db.commit()
            self._logger.debug("Transaction committed successfully")
        except SQLAlchemyError as e:
            self._rollback()
            raise self._handle_exception(e, operation) from e
        except Exception:
            self._rollback()
            raise

    def _rollback(self) -> None:
        """Rollback the current transaction, suppressing rollback errors."""
        try:
            self.db.rollback()
            self._logger.debug("Transaction rolled back")
        except SQLAlchemyError as e:
            # Log but don't raise - rollback errors should not mask original error
            self._logger.warning(f"Rollback failed: {e}")
