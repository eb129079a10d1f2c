"""Board ORM — persists a board and the card order of its fixed columns.

Invariants:
    - team_id is immutable after creation
    - column_layout (DB column `columns`) is the authoritative card order
    - version increments on every UPDATE; stale writers get StaleDataError

Design Decisions:
    - JSON column for the layout: the whole order is read-modify-written as one document
    - version_id_col for optimistic concurrency: UPDATE ... WHERE version = :loaded
    - Layout mutations always assign a fresh list (plain JSON has no change tracking)
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Integer, DateTime, JSON, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from app.core.board_layout import BoardLayout, default_layout
from app.db.base import Base


class Board(Base):
    """Board aggregate — sole owner of its columns' card order."""
    __tablename__ = "boards"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    team_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("teams.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(String(150), nullable=True)
    column_layout: Mapped[list] = mapped_column(
        "columns", JSON, nullable=False,
        default=lambda: default_layout().to_json(),
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False)
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

    __mapper_args__ = {"version_id_col": version}

    @property
    def layout(self) -> BoardLayout:
        """Fresh, detached copy of the layout — mutate it, then store_layout()."""
        return BoardLayout.from_json(self.column_layout)

    def store_layout(self, layout: BoardLayout) -> None:
        self.column_layout = layout.to_json()
