"""Card Routes — create, edit and delete cards.

Invariants:
    - Create appends the card to the tail of its column (default todo)
    - Edit relocates the card when column_id (or status) names another column
    - Delete is idempotent on the board order: a missing id is not an error there
"""

from uuid import UUID

from fastapi import APIRouter, Depends, status

from app.api.dependencies import (
    get_board_service, get_current_user_id, require_board_member, require_card_member,
)
from app.models.board import Board
from app.models.card import Card
from app.schemas.card import CardCreate, CardResponse, CardUpdate
from app.services.board_ordering import BoardOrderingService

router = APIRouter(prefix="/api/v1", tags=["cards"])


@router.post(
    "/boards/{board_id}/cards",
    response_model=CardResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_card(
    body: CardCreate,
    board: Board = Depends(require_board_member),
    user_id: UUID = Depends(get_current_user_id),
    service: BoardOrderingService = Depends(get_board_service),
):
    return await service.create_card(
        board.id,
        user_id,
        body.title,
        column_id=body.column_id.value,
        description=body.description,
        assigned_to=body.assigned_to,
        due_date=body.due_date,
        priority=body.priority.value,
    )


@router.put("/cards/{card_id}", response_model=CardResponse)
async def edit_card(
    body: CardUpdate,
    card: Card = Depends(require_card_member),
    service: BoardOrderingService = Depends(get_board_service),
):
    return await service.edit_card(card.id, body.changes())


@router.delete("/cards/{card_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_card(
    card: Card = Depends(require_card_member),
    service: BoardOrderingService = Depends(get_board_service),
):
    await service.delete_card(card.id)
