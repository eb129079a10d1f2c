"""Board Writes — optimistic read-modify-write of the Board aggregate.

Invariants:
    - Every board mutation goes through write_board(): load → mutate → commit
    - A stale version (StaleDataError) rolls back and re-runs the whole mutation on a
      freshly loaded board, at most max_attempts times, then ConcurrencyError (409)
    - Domain errors raised by the mutation roll back and propagate unchanged

Design Decisions:
    - The mutation is a callable re-run per attempt, not a pre-computed diff: after a
      rollback every ORM object is expired, so the mutation reloads what it touches
    - populate_existing on retries: the identity map would otherwise hand back the
      stale row the failed attempt was built on
"""

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from app.core.errors import (
    ConcurrencyError, ErrorContext, ResourceNotFoundError, TaskBoardError,
)
from app.models.board import Board

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def load_board(
    db: AsyncSession, board_id: UUID, *, fresh: bool = False,
) -> Board:
    """Load a board or raise ResourceNotFoundError."""
    stmt = select(Board).where(Board.id == board_id)
    if fresh:
        stmt = stmt.execution_options(populate_existing=True)
    result = await db.execute(stmt)
    board = result.scalar_one_or_none()
    if board is None:
        raise ResourceNotFoundError(
            "Board", str(board_id), ErrorContext(board_id=str(board_id)),
        )
    return board


async def write_board(
    db: AsyncSession,
    board_id: UUID,
    mutate: Callable[[Board], Awaitable[T]],
    max_attempts: int = 3,
) -> T:
    """Run `mutate` against the board and commit, retrying on version conflicts."""
    for attempt in range(1, max_attempts + 1):
        try:
            board = await load_board(db, board_id, fresh=attempt > 1)
            result = await mutate(board)
            await db.commit()
            return result
        except StaleDataError:
            await db.rollback()
            logger.warning(
                f"Board {board_id} changed concurrently (attempt {attempt}/{max_attempts})",
                extra={"board_id": board_id, "attempt": attempt},
            )
        except TaskBoardError:
            await db.rollback()
            raise
    raise ConcurrencyError(
        "Board was modified concurrently; please retry",
        ErrorContext(board_id=str(board_id)),
    )
