"""Invite Schemas — send, list and respond.

Invariants:
    - InviteCreate.role defaults to member
    - InviteRespond.action is free text: unknown actions reach the state machine and
      come back as INVALID_ACTION, after authorization and terminal-state checks
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.core.domain_types import TeamRole
from app.schemas.user import UserSummary


class InviteCreate(BaseModel):
    invitee_id: UUID
    role: TeamRole = TeamRole.MEMBER


class InviteRespond(BaseModel):
    action: str = Field(min_length=1, max_length=20)


class InviteResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    team_id: UUID
    inviter_id: UUID
    invitee_id: UUID
    email: str
    role: str
    status: str
    expires_at: datetime
    responded_at: datetime | None
    created_at: datetime


class TeamSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    description: str | None


class PendingInviteResponse(BaseModel):
    """Listing entry: invite plus team and inviter summaries."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    team: TeamSummary | None
    inviter: UserSummary | None
    role: str
    status: str
    expires_at: datetime
    created_at: datetime


class InviteDecision(BaseModel):
    invite_id: UUID
    status: str
