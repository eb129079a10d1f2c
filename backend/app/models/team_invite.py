"""TeamInvite ORM — persists an invitation and its lifecycle state.

Invariants:
    - At most one row with status='pending' per (team_id, invitee_id): partial unique index
    - status transitions: pending -> accepted | declined | expired (terminal)
    - responded_at set on every transition out of pending
    - email is a snapshot of the invitee's address at send time

Design Decisions:
    - Partial unique index instead of check-then-insert: closes the race between two
      concurrent invites for the same pair (postgresql_where / sqlite_where)
    - team/inviter loaded selectin: the invite listing shows both without extra queries
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, DateTime, ForeignKey, Index, text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from app.core.invite_lifecycle import compute_expiry
from app.db.base import Base


PENDING_PAIR_INDEX = "uq_team_invites_pending"


class TeamInvite(Base):
    """Invitation for a user to join a team with a given role."""
    __tablename__ = "team_invites"
    __table_args__ = (
        Index(
            PENDING_PAIR_INDEX,
            "team_id", "invitee_id",
            unique=True,
            postgresql_where=text("status = 'pending'"),
            sqlite_where=text("status = 'pending'"),
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    team_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("teams.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    inviter_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"), nullable=False,
    )
    invitee_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True,
    )
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    role: Mapped[str] = mapped_column(
        String(10), nullable=False, default="member",
    )
    status: Mapped[str] = mapped_column(
        String(10), nullable=False, default="pending", index=True,
    )
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: compute_expiry(datetime.now(timezone.utc)),
    )
    responded_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    team: Mapped["Team"] = relationship("Team", lazy="selectin")
    inviter: Mapped["User"] = relationship(
        "User", foreign_keys=[inviter_id], lazy="selectin",
    )
