"""Request Dependencies — caller identity and team access checks.

Invariants:
    - Caller identity comes from the X-User-Id header, set by the upstream auth gateway
      and trusted as-is (token verification happens outside this service)
    - Every board/card/team route resolves the owning team and checks membership
      before the handler runs; owner-only routes also check the owner role
    - Invite responses are NOT guarded here: the invite service authorizes the invitee itself

Design Decisions:
    - Dependencies return the loaded aggregate so handlers do not load it twice
"""

from datetime import timedelta
from uuid import UUID

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.core.errors import AuthenticationRequiredError
from app.core.team_access import require_member, require_owner
from app.infrastructure.database import get_db
from app.models.board import Board
from app.models.card import Card
from app.models.team import Team
from app.services.board_ordering import BoardOrderingService
from app.services.invite_lifecycle import InviteService
from app.services.team_membership import TeamService


async def get_current_user_id(
    x_user_id: str | None = Header(None, alias="X-User-Id"),
) -> UUID:
    if not x_user_id:
        raise AuthenticationRequiredError()
    try:
        return UUID(x_user_id)
    except ValueError:
        raise AuthenticationRequiredError()


async def _team_with_access(
    db: AsyncSession, team_id: UUID, user_id: UUID, owner: bool,
) -> Team:
    team = await TeamService(db).get_team(team_id)
    if owner:
        require_owner(team.members, user_id, team.id)
    else:
        require_member(team.members, user_id, team.id)
    return team


async def require_team_member(
    team_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> Team:
    return await _team_with_access(db, team_id, user_id, owner=False)


async def require_team_owner(
    team_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> Team:
    return await _team_with_access(db, team_id, user_id, owner=True)


async def require_board_member(
    board_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> Board:
    board = await BoardOrderingService(db).get_board(board_id)
    await _team_with_access(db, board.team_id, user_id, owner=False)
    return board


async def require_board_owner(
    board_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> Board:
    board = await BoardOrderingService(db).get_board(board_id)
    await _team_with_access(db, board.team_id, user_id, owner=True)
    return board


async def require_card_member(
    card_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> Card:
    service = BoardOrderingService(db)
    card = await service.get_card(card_id)
    board = await service.get_board(card.board_id)
    await _team_with_access(db, board.team_id, user_id, owner=False)
    return card


# ─── Service factories ──────────────────────────────────────────

def get_board_service(db: AsyncSession = Depends(get_db)) -> BoardOrderingService:
    return BoardOrderingService(db, get_settings().board_write_max_retries)


def get_team_service(db: AsyncSession = Depends(get_db)) -> TeamService:
    return TeamService(db)


def get_invite_service(db: AsyncSession = Depends(get_db)) -> InviteService:
    return InviteService(db, timedelta(days=get_settings().invite_ttl_days))
