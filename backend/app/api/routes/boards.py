"""Board Routes — board CRUD, board view, card move and read repair.

Invariants:
    - Every route checks team membership; PUT and DELETE also require the owner role
    - Responses render the stored card order as-is: columns in fixed order, ids as strings
    - Move returns the whole board so the client can replace its local order
"""

from fastapi import APIRouter, Depends, status

from app.api.dependencies import (
    get_board_service, require_board_member, require_board_owner, require_team_member,
)
from app.models.board import Board
from app.models.team import Team
from app.schemas.board import (
    BoardCreate,
    BoardResponse,
    BoardUpdate,
    BoardViewResponse,
    CardMove,
    ColumnResponse,
    ColumnViewResponse,
    ReconcileResponse,
)
from app.schemas.card import CardResponse
from app.services.board_ordering import BoardOrderingService

router = APIRouter(prefix="/api/v1", tags=["boards"])


def _board_response(board: Board) -> BoardResponse:
    return BoardResponse(
        id=board.id,
        team_id=board.team_id,
        name=board.name,
        description=board.description,
        columns=[ColumnResponse(**col.to_json()) for col in board.layout.columns],
        version=board.version,
        created_at=board.created_at,
        updated_at=board.updated_at,
    )


@router.post(
    "/teams/{team_id}/boards",
    response_model=BoardResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_board(
    body: BoardCreate,
    team: Team = Depends(require_team_member),
    service: BoardOrderingService = Depends(get_board_service),
):
    board = await service.create_board(team.id, body.name, body.description)
    return _board_response(board)


@router.get("/teams/{team_id}/boards", response_model=list[BoardResponse])
async def list_boards(
    team: Team = Depends(require_team_member),
    service: BoardOrderingService = Depends(get_board_service),
):
    return [_board_response(b) for b in await service.list_boards(team.id)]


@router.get("/boards/{board_id}", response_model=BoardViewResponse)
async def get_board(
    board: Board = Depends(require_board_member),
    service: BoardOrderingService = Depends(get_board_service),
):
    """Board with its cards grouped per column, in card-order order."""
    board, views = await service.get_board_view(board.id)
    return BoardViewResponse(
        id=board.id,
        team_id=board.team_id,
        name=board.name,
        description=board.description,
        version=board.version,
        columns=[
            ColumnViewResponse(
                **view.column.to_json(),
                cards=[CardResponse.model_validate(c) for c in view.cards],
            )
            for view in views
        ],
    )


@router.put("/boards/{board_id}", response_model=BoardResponse)
async def edit_board(
    body: BoardUpdate,
    board: Board = Depends(require_board_owner),
    service: BoardOrderingService = Depends(get_board_service),
):
    updated = await service.edit_board(board.id, body.model_dump(exclude_unset=True))
    return _board_response(updated)


@router.delete("/boards/{board_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_board(
    board: Board = Depends(require_board_owner),
    service: BoardOrderingService = Depends(get_board_service),
):
    await service.delete_board(board.id)


@router.post("/boards/{board_id}/cards/order", response_model=BoardResponse)
async def move_card(
    body: CardMove,
    board: Board = Depends(require_board_member),
    service: BoardOrderingService = Depends(get_board_service),
):
    updated = await service.move_card(
        board.id,
        body.source_column_id,
        body.destination_column_id,
        body.source_index,
        body.destination_index,
        body.card_id,
    )
    return _board_response(updated)


@router.post("/boards/{board_id}/reconcile", response_model=ReconcileResponse)
async def reconcile_board(
    board: Board = Depends(require_board_member),
    service: BoardOrderingService = Depends(get_board_service),
):
    plan = await service.reconcile_board(board.id)
    return ReconcileResponse(
        repaired=not plan.is_clean,
        column_fixes=plan.column_fixes,
        dangling=plan.dangling,
        orphans=plan.orphans,
        duplicates=plan.duplicates,
    )
