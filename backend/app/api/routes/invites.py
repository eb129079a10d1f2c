"""Invite Routes — send, list and respond to team invitations.

Invariants:
    - Sending requires team membership (any role); the caller is recorded as inviter
    - Listing returns only the caller's invites that are still actionable
    - Responding is authorized by the invite service (invitee only), not by team membership
"""

from uuid import UUID

from fastapi import APIRouter, Depends, status

from app.api.dependencies import (
    get_current_user_id, get_invite_service, require_team_member,
)
from app.models.team import Team
from app.schemas.invite import (
    InviteCreate,
    InviteDecision,
    InviteRespond,
    InviteResponse,
    PendingInviteResponse,
)
from app.services.invite_lifecycle import InviteService

router = APIRouter(prefix="/api/v1", tags=["invitations"])


@router.post(
    "/teams/{team_id}/invitations",
    response_model=InviteResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_invite(
    body: InviteCreate,
    team: Team = Depends(require_team_member),
    user_id: UUID = Depends(get_current_user_id),
    service: InviteService = Depends(get_invite_service),
):
    return await service.create_invite(team.id, user_id, body.invitee_id, body.role.value)


@router.get("/invitations", response_model=list[PendingInviteResponse])
async def list_my_invites(
    user_id: UUID = Depends(get_current_user_id),
    service: InviteService = Depends(get_invite_service),
):
    return await service.list_my_pending_invites(user_id)


@router.patch("/invitations/{invite_id}", response_model=InviteDecision)
async def respond_to_invite(
    invite_id: UUID,
    body: InviteRespond,
    user_id: UUID = Depends(get_current_user_id),
    service: InviteService = Depends(get_invite_service),
):
    invite = await service.respond_to_invite(invite_id, user_id, body.action)
    return InviteDecision(invite_id=invite.id, status=invite.status)
