"""Team Membership Service — team CRUD and the idempotent membership append.

Invariants:
    - A new team always starts with its creator as the single `owner`
    - ensure_membership appends at most once per (team, user), even when retried or raced:
      in-memory check first, UNIQUE(team_id, user_id) as the backstop
    - delete_team cascades cards → boards → invites → team

Design Decisions:
    - IntegrityError on the membership append means "already a member", not a failure:
      the invite-accept path may be re-run after a crash between its two writes
"""

import logging
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.domain_types import TeamRole
from app.core.errors import (
    AlreadyMemberError, ErrorContext, ResourceNotFoundError,
)
from app.core.invite_lifecycle import is_member
from app.models.board import Board
from app.models.card import Card
from app.models.team import Team, TeamMember
from app.models.team_invite import TeamInvite
from app.services.user_directory import UserDirectory

logger = logging.getLogger(__name__)


class TeamService:
    """Team aggregate operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_team(self, team_id: UUID, *, fresh: bool = False) -> Team:
        stmt = select(Team).where(Team.id == team_id)
        if fresh:
            stmt = stmt.execution_options(populate_existing=True)
        result = await self.db.execute(stmt)
        team = result.scalar_one_or_none()
        if team is None:
            raise ResourceNotFoundError(
                "Team", str(team_id), ErrorContext(team_id=str(team_id)),
            )
        return team

    async def list_teams_for_user(self, user_id: UUID) -> list[Team]:
        result = await self.db.execute(
            select(Team)
            .join(TeamMember, TeamMember.team_id == Team.id)
            .where(TeamMember.user_id == user_id)
            .order_by(Team.created_at.desc()),
        )
        return list(result.scalars().unique().all())

    async def create_team(
        self, name: str, description: str | None, creator_id: UUID,
    ) -> Team:
        team = Team(name=name, description=description, created_by=creator_id)
        team.members.append(
            TeamMember(user_id=creator_id, role=TeamRole.OWNER.value),
        )
        self.db.add(team)
        await self.db.commit()
        logger.info(
            f"Team created: {team.id}",
            extra={"team_id": team.id, "user_id": creator_id},
        )
        return await self.get_team(team.id, fresh=True)

    async def edit_team(self, team_id: UUID, fields: dict) -> Team:
        team = await self.get_team(team_id)
        if fields.get("name"):
            team.name = fields["name"]
        if "description" in fields:
            team.description = fields["description"] or None
        await self.db.commit()
        return team

    async def add_member(self, team_id: UUID, email: str, role: str) -> Team:
        """Explicit membership add by email (owner action)."""
        team = await self.get_team(team_id)
        user = await UserDirectory(self.db).find_by_email(email)
        if user is None:
            raise ResourceNotFoundError("User", email)
        if is_member(team.members, user.id):
            raise AlreadyMemberError(
                str(user.id), ErrorContext(team_id=str(team_id)),
            )
        if not await self.ensure_membership(team, user.id, role):
            raise AlreadyMemberError(
                str(user.id), ErrorContext(team_id=str(team_id)),
            )
        return await self.get_team(team_id, fresh=True)

    async def ensure_membership(self, team: Team, user_id: UUID, role: str) -> bool:
        """Append {user, role, now} to team.members unless present. Returns True if added."""
        if is_member(team.members, user_id):
            return False
        team_id = team.id
        team.members.append(TeamMember(user_id=user_id, role=role))
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            logger.info(
                f"User {user_id} already in team {team_id} (concurrent append)",
                extra={"team_id": team_id, "user_id": user_id},
            )
            return False
        logger.info(
            f"User {user_id} joined team {team_id} as {role}",
            extra={"team_id": team_id, "user_id": user_id},
        )
        return True

    async def delete_team(self, team_id: UUID) -> None:
        team = await self.get_team(team_id)
        board_ids = select(Board.id).where(Board.team_id == team_id)
        await self.db.execute(delete(Card).where(Card.board_id.in_(board_ids)))
        await self.db.execute(delete(Board).where(Board.team_id == team_id))
        await self.db.execute(delete(TeamInvite).where(TeamInvite.team_id == team_id))
        await self.db.delete(team)
        await self.db.commit()
        logger.info(f"Team deleted: {team_id}", extra={"team_id": team_id})
