"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - The column set is fixed: todo, in-progress, done (ColumnKey)
    - Card status always carries the same value as its column (both are ColumnKey values)
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - str Enums: serialize to JSON and compare equal to their raw DB values
"""

from enum import Enum


# ─── Enums ───────────────────────────────────────────────────────

class ColumnKey(str, Enum):
    """Fixed board columns. Also the domain of Card.status."""
    TODO = "todo"
    IN_PROGRESS = "in-progress"
    DONE = "done"


class CardPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TeamRole(str, Enum):
    """Membership roles — only owners may edit or delete boards and teams."""
    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"


class InviteStatus(str, Enum):
    """Invite lifecycle: pending → accepted | declined | expired (all terminal)."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    EXPIRED = "expired"


class InviteAction(str, Enum):
    ACCEPT = "accept"
    DECLINE = "decline"


COLUMN_TITLES: dict[ColumnKey, str] = {
    ColumnKey.TODO: "To Do",
    ColumnKey.IN_PROGRESS: "In Progress",
    ColumnKey.DONE: "Done",
}
