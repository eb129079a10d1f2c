"""Board Schemas — board CRUD, board view, and the move-card request.

Invariants:
    - BoardCreate.name: 2-100 chars, stripped; description ≤150 chars
    - CardMove column ids are plain strings: unknown ids are rejected by the
      ordering engine (INVALID_COLUMN), not by the schema
    - CardMove.destination_index may be out of range — the engine clamps it
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from app.schemas.card import CardResponse


class BoardCreate(BaseModel):
    name: str = Field(min_length=2, max_length=100)
    description: str | None = Field(None, max_length=150)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 2:
            raise ValueError("Board name must be at least 2 characters")
        return v

    @field_validator("description")
    @classmethod
    def strip_description(cls, v: str | None) -> str | None:
        return v.strip() if v is not None else v


class BoardUpdate(BaseModel):
    name: str | None = Field(None, min_length=2, max_length=100)
    description: str | None = Field(None, max_length=150)

    @field_validator("name", "description")
    @classmethod
    def strip_fields(cls, v: str | None) -> str | None:
        return v.strip() if v is not None else v


class CardMove(BaseModel):
    """Drag-and-drop move. source_index is advisory; the card is located by id."""
    source_column_id: str = Field(min_length=1, max_length=20)
    destination_column_id: str = Field(min_length=1, max_length=20)
    source_index: int | None = None
    destination_index: int
    card_id: UUID


class ColumnResponse(BaseModel):
    id: str
    title: str
    card_order: list[str]


class BoardResponse(BaseModel):
    id: UUID
    team_id: UUID
    name: str
    description: str | None
    columns: list[ColumnResponse]
    version: int
    created_at: datetime
    updated_at: datetime


class ColumnViewResponse(ColumnResponse):
    cards: list[CardResponse]


class BoardViewResponse(BaseModel):
    id: UUID
    team_id: UUID
    name: str
    description: str | None
    columns: list[ColumnViewResponse]
    version: int


class ReconcileResponse(BaseModel):
    repaired: bool
    column_fixes: dict[str, str]
    dangling: list[str]
    orphans: list[str]
    duplicates: list[str]
