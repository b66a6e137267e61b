"""Transaction boundary for state-mutating operations.

Learn: Every write in the services runs inside `atomic(db)`:

    async with atomic(db, on_conflict=lambda e: DuplicateName("...")):
        db.add(tag)
        await db.flush()
        await db.refresh(tag)   # reload server defaults before COMMIT

- normal exit → COMMIT (all effects visible)
- IntegrityError → ROLLBACK, then raise what on_conflict maps it to
  (or StorageFailure if the caller didn't expect a conflict)
- any other SQLAlchemyError → ROLLBACK, then StorageFailure with a
  generic message; the driver error is logged, never returned
- any other exception (NotFound raised mid-block, cancellation from a
  request timeout) → ROLLBACK, then re-raise unchanged

Either everything in the block lands or nothing does.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, Optional

import anyio
import structlog
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tagblaze.errors import StorageFailure

logger = structlog.get_logger()

ConflictHandler = Callable[[IntegrityError], Exception]


@asynccontextmanager
async def atomic(
    db: AsyncSession,
    on_conflict: Optional[ConflictHandler] = None,
) -> AsyncIterator[AsyncSession]:
    """Run the block as one transaction on `db`."""
    try:
        yield db
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        if on_conflict is None:
            logger.error("db.integrity_error", error=str(e.orig))
            raise StorageFailure() from e
        raise on_conflict(e) from e
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("db.transaction_failed", error=str(e))
        raise StorageFailure() from e
    except BaseException:
        # Cancellation keeps being re-delivered inside anyio task groups;
        # the rollback must still reach the driver.
        with anyio.CancelScope(shield=True):
            await db.rollback()
        raise


@asynccontextmanager
async def reading(db: AsyncSession) -> AsyncIterator[AsyncSession]:
    """Wrap read queries so driver failures surface as StorageFailure."""
    try:
        yield db
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("db.read_failed", error=str(e))
        raise StorageFailure() from e
