"""ORM Models — SQLAlchemy declarative models for all domain entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Team owns members and boards; Board owns the card order of its columns
    - Cards reference their board by id; they are never embedded in the board row

Design Decisions:
    - One file per aggregate for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from app.models.user import User  # noqa: F401
from app.models.team import Team, TeamMember  # noqa: F401
from app.models.board import Board  # noqa: F401
from app.models.card import Card  # noqa: F401
from app.models.team_invite import TeamInvite  # noqa: F401
