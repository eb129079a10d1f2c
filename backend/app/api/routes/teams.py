"""Team Routes — team CRUD and explicit member add.

Invariants:
    - Any registered user may create a team and becomes its owner
    - Reads require membership; edit, delete and member add require the owner role
    - DELETE cascades to boards, cards and invites of the team
"""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import (
    get_current_user_id, get_team_service, require_team_member, require_team_owner,
)
from app.infrastructure.database import get_db
from app.models.team import Team
from app.schemas.team import MemberAdd, TeamCreate, TeamResponse, TeamUpdate
from app.services.team_membership import TeamService
from app.services.user_directory import UserDirectory

router = APIRouter(prefix="/api/v1/teams", tags=["teams"])


@router.post("", response_model=TeamResponse, status_code=status.HTTP_201_CREATED)
async def create_team(
    body: TeamCreate,
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    service: TeamService = Depends(get_team_service),
):
    creator = await UserDirectory(db).get_user(user_id)
    return await service.create_team(body.name, body.description, creator.id)


@router.get("", response_model=list[TeamResponse])
async def list_teams(
    user_id: UUID = Depends(get_current_user_id),
    service: TeamService = Depends(get_team_service),
):
    return await service.list_teams_for_user(user_id)


@router.get("/{team_id}", response_model=TeamResponse)
async def get_team(team: Team = Depends(require_team_member)):
    return team


@router.put("/{team_id}", response_model=TeamResponse)
async def edit_team(
    body: TeamUpdate,
    team: Team = Depends(require_team_owner),
    service: TeamService = Depends(get_team_service),
):
    return await service.edit_team(team.id, body.model_dump(exclude_unset=True))


@router.delete("/{team_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_team(
    team: Team = Depends(require_team_owner),
    service: TeamService = Depends(get_team_service),
):
    await service.delete_team(team.id)


@router.post("/{team_id}/members", response_model=TeamResponse)
async def add_member(
    body: MemberAdd,
    team: Team = Depends(require_team_owner),
    service: TeamService = Depends(get_team_service),
):
    return await service.add_member(team.id, body.email, body.role.value)
