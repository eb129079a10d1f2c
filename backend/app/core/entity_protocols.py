"""Entity Protocols — structural contracts between core and shell.

Invariants:
    - Core NEVER imports from models/ or services/ — dependency arrows point inward only
    - Pure functions in core accept anything shaped like these Protocols

Design Decisions:
    - Protocol over ABC: the ORM rows satisfy them structurally, and tests can pass
      plain dataclasses without a database
"""

from datetime import datetime
from typing import Protocol
from uuid import UUID


class InviteLike(Protocol):
    """Structural contract for TeamInvite rows passed to the lifecycle functions."""
    id: UUID
    invitee_id: UUID
    status: str
    expires_at: datetime | None
    responded_at: datetime | None


class MemberLike(Protocol):
    """Structural contract for one entry of a team's membership list."""
    user_id: UUID
    role: str
