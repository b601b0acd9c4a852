"""
Base Repository for relational database operations.

Repositories never open or commit transactions on their own: they work on
the AsyncSession of the current request so that every write of one
operation (an order and its items, a variant replacement) commits or rolls
back together.
"""

import functools
import logging
from typing import Any, Callable, Generic, Optional, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.base import Base
from app.utils.error_handler import DatabaseException

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


def log_operation(operation_name: str = None) -> Callable:
    """
    Decorator for logging database operations.

    Storage errors other than integrity violations are wrapped in a
    DatabaseException; integrity errors propagate so callers can map
    unique-constraint conflicts.

    Args:
        operation_name: Optional custom name for the operation

    Returns:
        Decorated function with logging
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(self, *args, **kwargs):
            op_name = operation_name or f"{self.__class__.__name__}.{func.__name__}"
            logger.debug(f"Starting operation: {op_name}")

            try:
                result = await func(self, *args, **kwargs)
                logger.debug(f"Operation successful: {op_name}")
                return result
            except IntegrityError as e:
                logger.warning(f"Integrity violation in {op_name}: {e.orig}")
                raise
            except SQLAlchemyError as e:
                logger.error(f"Operation failed: {op_name} - {e}")
                raise DatabaseException(message="Database operation failed", operation=op_name) from e

        return wrapper

    return decorator


class BaseRepository(Generic[ModelT]):
    """
    Base repository bound to one request session.

    Derived repositories set ``model`` and add their domain queries.
    """

    model: Type[ModelT]

    def __init__(self, session: AsyncSession):
        """
        Initialize the base repository.

        Args:
            session: Session (and transaction) of the current request
        """
        self.session = session
        self._repository_name: str = self.__class__.__name__

    @log_operation()
    async def get(self, entity_id: str) -> Optional[ModelT]:
        """Fetch one row by primary key."""
        if not entity_id:
            return None
        return await self.session.get(self.model, entity_id)

    @log_operation()
    async def exists(self, entity_id: str) -> bool:
        if not entity_id:
            return False
        stmt = select(func.count()).select_from(self.model).where(self.model.id == entity_id)
        return (await self.session.execute(stmt)).scalar_one() > 0

    @log_operation()
    async def add(self, entity: ModelT) -> ModelT:
        """Stage a new row and flush so constraint violations surface here."""
        self.session.add(entity)
        await self.session.flush()
        return entity

    @log_operation()
    async def update(self, entity: ModelT, values: dict[str, Any]) -> ModelT:
        """Apply attribute values to a row and flush."""
        for key, value in values.items():
            setattr(entity, key, value)
        await self.session.flush()
        return entity

    @log_operation()
    async def delete(self, entity: ModelT) -> None:
        await self.session.delete(entity)
        await self.session.flush()

    def __repr__(self) -> str:
        """String representation of the repository."""
        return f"<{self._repository_name}(model={self.model.__name__})>"
