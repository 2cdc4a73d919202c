"""Single-transaction scope for multi-step service mutations."""

import logging
from contextlib import asynccontextmanager

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..exceptions import ConflictError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def unit_of_work(session: AsyncSession):
    """Commit when the block finishes, roll back on any exception.

    Unique-key races surface as ConflictError; store error text is not exposed.
    """
    try:
        yield session
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        logger.warning(f"Integrity error, transaction rolled back: {e.orig}")
        raise ConflictError("Conflicting write, please retry") from e
    except BaseException:
        await session.rollback()
        raise
