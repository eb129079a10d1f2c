"""Invite Lifecycle — pure state machine for team invitations.

Invariants:
    - States: pending → accepted | declined | expired; terminal states never change
    - Expiry is lazy: evaluated per invite at every read that leads to a decision
    - ensure_not_expired is idempotent — a second call on the same invite is a no-op
    - Only the invitee may respond (check_responder)
    - All functions are PURE apart from mutating the invite handed in: no IO, no DB

Design Decisions:
    - No background sweep: expired-but-unread invites stay `pending` in storage until the
      next read transitions them
    - Naive datetimes are read as UTC: SQLite drops tzinfo, PostgreSQL keeps it
"""

from collections.abc import Iterable
from datetime import datetime, timedelta, timezone
from uuid import UUID

from app.core.domain_types import InviteAction, InviteStatus
from app.core.entity_protocols import InviteLike, MemberLike
from app.core.errors import (
    ErrorContext,
    ForbiddenError,
    InvalidInviteActionError,
    InviteAlreadyRespondedError,
)

INVITE_TTL = timedelta(days=7)


def as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def compute_expiry(now: datetime, ttl: timedelta = INVITE_TTL) -> datetime:
    return now + ttl


def is_expired(invite: InviteLike, now: datetime) -> bool:
    """True when the invite is still pending but its deadline has passed."""
    return (
        invite.status == InviteStatus.PENDING
        and invite.expires_at is not None
        and as_utc(invite.expires_at) < as_utc(now)
    )


def ensure_not_expired(invite: InviteLike, now: datetime) -> bool:
    """Transition a stale pending invite to expired. Returns True if it transitioned."""
    if not is_expired(invite, now):
        return False
    invite.status = InviteStatus.EXPIRED.value
    invite.responded_at = now
    return True


def check_responder(invite: InviteLike, actor_id: UUID) -> None:
    if invite.invitee_id != actor_id:
        raise ForbiddenError(
            "You are not authorized to respond to this invite",
            ErrorContext(invite_id=str(invite.id)),
        )


def resolve_response(invite: InviteLike, action: str) -> InviteStatus:
    """Validate a response against current state. Returns the status to move to.

    Call after ensure_not_expired so an overdue invite reports `expired`.
    """
    if invite.status != InviteStatus.PENDING:
        raise InviteAlreadyRespondedError(
            InviteStatus(invite.status).value,
            ErrorContext(invite_id=str(invite.id)),
        )
    try:
        parsed = InviteAction(action)
    except ValueError:
        raise InvalidInviteActionError(
            str(action), ErrorContext(invite_id=str(invite.id)),
        )
    if parsed is InviteAction.ACCEPT:
        return InviteStatus.ACCEPTED
    return InviteStatus.DECLINED


def is_member(members: Iterable[MemberLike], user_id: UUID) -> bool:
    return any(m.user_id == user_id for m in members)


def partition_actionable(
    invites: Iterable[InviteLike], now: datetime,
) -> tuple[list[InviteLike], list[InviteLike]]:
    """Apply lazy expiry to every invite. Returns (still pending, newly expired)."""
    actionable, expired = [], []
    for invite in invites:
        if ensure_not_expired(invite, now):
            expired.append(invite)
        elif invite.status == InviteStatus.PENDING:
            actionable.append(invite)
    return actionable, expired
