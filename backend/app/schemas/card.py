"""Card Schemas — create/edit requests and card responses.

Invariants:
    - title: 1-200 chars after stripping; description ≤2000 chars
    - column_id / status restricted to the fixed column set
    - CardUpdate: only fields actually sent are applied (exclude_unset);
      column_id wins over status when both are sent
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.core.domain_types import CardPriority, ColumnKey


class CardCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str | None = Field(None, max_length=2000)
    column_id: ColumnKey = ColumnKey.TODO
    assigned_to: UUID | None = None
    due_date: datetime | None = None
    priority: CardPriority = CardPriority.MEDIUM

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Title cannot be empty")
        return v

    @field_validator("description")
    @classmethod
    def strip_description(cls, v: str | None) -> str | None:
        return v.strip() if v is not None else v


class CardUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, max_length=2000)
    column_id: ColumnKey | None = None
    status: ColumnKey | None = None
    assigned_to: UUID | None = None
    due_date: datetime | None = None
    priority: CardPriority | None = None

    @field_validator("title", "description")
    @classmethod
    def strip_text(cls, v: str | None) -> str | None:
        return v.strip() if v is not None else v

    def changes(self) -> dict:
        """Sent fields only, enums flattened to their stored values."""
        data = self.model_dump(exclude_unset=True)
        for key in ("column_id", "status", "priority"):
            if data.get(key) is not None:
                data[key] = data[key].value
        return data


class CardResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    board_id: UUID
    column_id: str
    status: str
    title: str
    description: str | None
    assigned_to: UUID | None
    due_date: datetime | None
    priority: str
    created_by: UUID
    created_at: datetime
    updated_at: datetime
