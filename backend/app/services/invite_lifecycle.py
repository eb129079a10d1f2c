"""Invite Service — shell around the pure invite state machine.

Invariants:
    - Uniqueness of the pending invite per (team, invitee) comes from the partial unique
      index only: a violation of that index on insert becomes DuplicatePendingInviteError (409);
      any other IntegrityError propagates
    - Lazy expiry applied (and persisted) before every decision and every listing
    - The pending → accepted/declined write is a conditional UPDATE ... WHERE status='pending':
      of two racing responders exactly one wins, the other sees the terminal state
    - Invite status commits before the membership append; the append is idempotent

Design Decisions:
    - No cross-table transaction for accept (invite write, then team write): a crash in
      between leaves an accepted invite without membership, and re-running
      TeamService.ensure_membership repairs it without duplicating
    - Overdue pending invites for the pair are expired and committed before inserting a
      new one, so a stale-but-unread invite does not block re-inviting and the expiry
      survives a failed insert
"""

import logging
from datetime import datetime, timedelta, timezone
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.domain_types import InviteStatus, TeamRole
from app.core.errors import (
    AlreadyMemberError,
    DuplicatePendingInviteError,
    ErrorContext,
    InviteAlreadyRespondedError,
    ResourceNotFoundError,
)
from app.core.invite_lifecycle import (
    INVITE_TTL,
    check_responder,
    compute_expiry,
    ensure_not_expired,
    is_member,
    partition_actionable,
    resolve_response,
)
from app.models.team import Team
from app.models.team_invite import PENDING_PAIR_INDEX, TeamInvite
from app.services.team_membership import TeamService
from app.services.user_directory import UserDirectory

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _violates_pending_pair(exc: IntegrityError) -> bool:
    """PostgreSQL names the violated index; SQLite lists its columns."""
    message = str(exc.orig)
    return (
        PENDING_PAIR_INDEX in message
        or "team_invites.team_id, team_invites.invitee_id" in message
    )


class InviteService:
    """Create, list and respond to team invitations."""

    def __init__(self, db: AsyncSession, ttl: timedelta = INVITE_TTL):
        self.db = db
        self.ttl = ttl

    async def get_invite(self, invite_id: UUID) -> TeamInvite:
        result = await self.db.execute(
            select(TeamInvite).where(TeamInvite.id == invite_id),
        )
        invite = result.scalar_one_or_none()
        if invite is None:
            raise ResourceNotFoundError(
                "Invitation", str(invite_id), ErrorContext(invite_id=str(invite_id)),
            )
        return invite

    async def create_invite(
        self,
        team_id: UUID,
        inviter_id: UUID,
        invitee_id: UUID,
        role: str = TeamRole.MEMBER.value,
    ) -> TeamInvite:
        team = await TeamService(self.db).get_team(team_id)
        invitee = await UserDirectory(self.db).get_user(invitee_id)
        if is_member(team.members, invitee.id):
            raise AlreadyMemberError(
                str(invitee.id), ErrorContext(team_id=str(team_id)),
            )

        now = _now()
        await self._expire_overdue_for_pair(team_id, invitee.id, now)

        invite = TeamInvite(
            team_id=team_id,
            inviter_id=inviter_id,
            invitee_id=invitee.id,
            email=invitee.email,
            role=role,
            status=InviteStatus.PENDING.value,
            expires_at=compute_expiry(now, self.ttl),
        )
        self.db.add(invite)
        try:
            await self.db.commit()
        except IntegrityError as exc:
            await self.db.rollback()
            if not _violates_pending_pair(exc):
                raise
            raise DuplicatePendingInviteError(ErrorContext(team_id=str(team_id)))
        logger.info(
            f"Invite {invite.id} sent to {invitee.id} for team {team_id}",
            extra={"invite_id": invite.id, "team_id": team_id, "user_id": invitee.id},
        )
        return invite

    async def list_my_pending_invites(self, user_id: UUID) -> list[TeamInvite]:
        """Invites the user can still act on. Overdue ones are expired on the way."""
        result = await self.db.execute(
            select(TeamInvite)
            .where(TeamInvite.invitee_id == user_id)
            .where(TeamInvite.status == InviteStatus.PENDING.value)
            .order_by(TeamInvite.created_at.desc())
            .execution_options(populate_existing=True),
        )
        actionable, expired = partition_actionable(result.scalars().all(), _now())
        if expired:
            await self.db.commit()
            logger.info(
                f"Expired {len(expired)} overdue invite(s) for user {user_id}",
                extra={"user_id": user_id},
            )
        return actionable

    async def respond_to_invite(
        self, invite_id: UUID, actor_id: UUID, action: str,
    ) -> TeamInvite:
        invite = await self.get_invite(invite_id)
        check_responder(invite, actor_id)

        now = _now()
        if ensure_not_expired(invite, now):
            await self.db.commit()
            logger.info(
                f"Invite {invite_id} expired on read", extra={"invite_id": invite_id},
            )

        new_status = resolve_response(invite, action)
        await self._transition_from_pending(invite, new_status, now)

        if new_status is InviteStatus.ACCEPTED:
            team = await self._team_for_accept(invite)
            await TeamService(self.db).ensure_membership(team, actor_id, invite.role)
        logger.info(
            f"Invite {invite_id} {new_status.value}",
            extra={"invite_id": invite_id, "user_id": actor_id},
        )
        return invite

    # ─── Internals ───────────────────────────────────────────────

    async def _transition_from_pending(
        self, invite: TeamInvite, status: InviteStatus, now: datetime,
    ) -> None:
        result = await self.db.execute(
            update(TeamInvite)
            .where(TeamInvite.id == invite.id)
            .where(TeamInvite.status == InviteStatus.PENDING.value)
            .values(status=status.value, responded_at=now),
        )
        if result.rowcount != 1:
            await self.db.rollback()
            await self.db.refresh(invite)
            raise InviteAlreadyRespondedError(
                invite.status, ErrorContext(invite_id=str(invite.id)),
            )
        await self.db.commit()
        await self.db.refresh(invite)

    async def _team_for_accept(self, invite: TeamInvite) -> Team:
        result = await self.db.execute(
            select(Team).where(Team.id == invite.team_id),
        )
        team = result.scalar_one_or_none()
        if team is None:
            raise ResourceNotFoundError(
                "Team", str(invite.team_id),
                ErrorContext(team_id=str(invite.team_id), invite_id=str(invite.id)),
            )
        return team

    async def _expire_overdue_for_pair(
        self, team_id: UUID, invitee_id: UUID, now: datetime,
    ) -> None:
        result = await self.db.execute(
            select(TeamInvite)
            .where(TeamInvite.team_id == team_id)
            .where(TeamInvite.invitee_id == invitee_id)
            .where(TeamInvite.status == InviteStatus.PENDING.value),
        )
        expired = [inv for inv in result.scalars().all() if ensure_not_expired(inv, now)]
        if expired:
            await self.db.commit()
            logger.info(
                f"Expired {len(expired)} overdue invite(s) before re-inviting {invitee_id}",
                extra={"team_id": team_id, "user_id": invitee_id},
            )
