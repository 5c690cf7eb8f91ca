"""
Base service class providing common functionality for all services.
"""

from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy.orm import Session

from hostel_admin.config.logging import get_logger
from hostel_admin.schemas.common.enums import UserRole, Vertical
from hostel_admin.services.common.context import CurrentUser
from hostel_admin.services.common.errors import AuthorizationError


class BaseService:
    """
    Base service with common behaviors:
    - Shared logger and db session
    - Transaction management (commit on success, rollback and re-raise)
    - Vertical scoping for superintendents
    """

    def __init__(self, db: Session):
        self.db: Session = db
        self._logger = get_logger(f"hostel_admin.services.{self.__class__.__name__}")

    # -------------------------------------------------------------------------
    # Transaction Management
    # -------------------------------------------------------------------------

    @contextmanager
    def transaction(self, auto_commit: bool = True) -> Iterator[Session]:
        """
        Context manager for database transactions with automatic rollback.

        Example:
            with self.transaction():
                self.rooms.add(room)
                # commit on success, rollback on exception
        """
        try:
            yield self.db
            if auto_commit:
                self._commit()
        except Exception as e:
            self._rollback()
            self._logger.debug(f"Transaction rolled back: {type(e).__name__}: {e}")
            raise

    def _commit(self) -> None:
        try:
            self.db.commit()
        except Exception as e:
            self._logger.error(f"Commit failed: {e}", exc_info=True)
            raise

    def _rollback(self) -> None:
        """Rollback the current transaction, suppressing rollback errors."""
        try:
            self.db.rollback()
        except Exception as e:
            # rollback errors must not mask the original error
            self._logger.warning(f"Rollback failed: {e}")

    # -------------------------------------------------------------------------
    # Scoping
    # -------------------------------------------------------------------------

    @staticmethod
    def scoped_vertical(user: CurrentUser, requested: Optional[Vertical] = None) -> Optional[Vertical]:
        """
        Vertical filter to apply for ``user``.

        Superintendents only ever see their own vertical; other staff see
        what they asked for (``None`` meaning all).
        """
        if user.role == UserRole.SUPERINTENDENT:
            if requested is not None and requested != user.vertical:
                raise AuthorizationError("You can only access records of your own vertical")
            return user.vertical
        return requested

    @staticmethod
    def ensure_vertical_access(user: CurrentUser, vertical: Optional[Vertical]) -> None:
        if user.role == UserRole.SUPERINTENDENT and vertical != user.vertical:
            raise AuthorizationError("You can only access records of your own vertical")
