"""Team Access Rules — membership and ownership checks over a member list.

Invariants:
    - Pure functions: raise ForbiddenError on violation, return the caller's membership on success
    - Owner-only actions: board edit/delete, team edit/delete, adding members
"""

from collections.abc import Iterable
from uuid import UUID

from app.core.domain_types import TeamRole
from app.core.entity_protocols import MemberLike
from app.core.errors import ErrorContext, ForbiddenError


def find_membership(members: Iterable[MemberLike], user_id: UUID) -> MemberLike | None:
    for member in members:
        if member.user_id == user_id:
            return member
    return None


def require_member(
    members: Iterable[MemberLike], user_id: UUID, team_id: UUID | None = None,
) -> MemberLike:
    member = find_membership(members, user_id)
    if member is None:
        raise ForbiddenError(
            "Access denied: You are not a member of this team",
            ErrorContext(team_id=str(team_id) if team_id else None),
        )
    return member


def require_owner(
    members: Iterable[MemberLike], user_id: UUID, team_id: UUID | None = None,
) -> MemberLike:
    member = require_member(members, user_id, team_id)
    if member.role != TeamRole.OWNER:
        raise ForbiddenError(
            "Only team owners can perform this action",
            ErrorContext(team_id=str(team_id) if team_id else None),
        )
    return member
