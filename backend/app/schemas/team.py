"""Team Schemas — team CRUD and membership.

Invariants:
    - TeamCreate.name: 2-100 chars, stripped; description ≤200 chars
    - MemberAdd.role defaults to member
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from app.core.domain_types import TeamRole
from app.schemas.user import UserSummary


def _strip(v: str | None) -> str | None:
    return v.strip() if isinstance(v, str) else v


class TeamCreate(BaseModel):
    name: str = Field(min_length=2, max_length=100)
    description: str | None = Field(None, max_length=200)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 2:
            raise ValueError("Team name must be at least 2 characters")
        return v

    @field_validator("description")
    @classmethod
    def strip_description(cls, v: str | None) -> str | None:
        return _strip(v)


class TeamUpdate(BaseModel):
    name: str | None = Field(None, min_length=2, max_length=100)
    description: str | None = Field(None, max_length=200)

    @field_validator("name", "description")
    @classmethod
    def strip_fields(cls, v: str | None) -> str | None:
        return _strip(v)


class MemberAdd(BaseModel):
    email: EmailStr
    role: TeamRole = TeamRole.MEMBER


class MemberResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: UUID
    role: TeamRole
    joined_at: datetime
    user: UserSummary | None = None


class TeamResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    description: str | None
    created_by: UUID
    created_at: datetime
    members: list[MemberResponse]
