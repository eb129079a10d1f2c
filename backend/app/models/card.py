"""Card ORM — persists one card body.

Invariants:
    - board_id and created_by are immutable after creation
    - status always equals column_id (written together by the ordering service)
    - Cards know nothing about ordering; position lives in Board.column_layout

Design Decisions:
    - column_id/status denormalized: lets card queries filter by column without
      reading the board, at the cost of a second write on cross-column moves
    - ON DELETE CASCADE from boards: deleting a board removes its cards even if the
      explicit bulk delete is skipped
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Text, DateTime, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base


class Card(Base):
    """Card entity — title, column/status, assignment, due date, priority."""
    __tablename__ = "cards"
    __table_args__ = (
        Index("ix_cards_board_column", "board_id", "column_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    board_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("boards.id", ondelete="CASCADE"),
        nullable=False,
    )
    column_id: Mapped[str] = mapped_column(
        String(20), nullable=False, default="todo",
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="todo", index=True,
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    assigned_to: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"), nullable=True, index=True,
    )
    due_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, index=True,
    )
    priority: Mapped[str] = mapped_column(
        String(10), nullable=False, default="medium",
    )
    created_by: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"), nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
