"""Board Ordering Service — shell around the pure ordering engine.

Invariants:
    - Board.column_layout is only written here (via board_writes.write_board)
    - After every successful create/move/edit/delete, each card of the board sits in
      exactly one column and its column_id/status equal that column
    - Board order is authoritative: decisions read the layout, never card.column_id alone
    - Board and card rows changed by one operation commit in the same transaction
    - A non-null assigned_to must name an existing user (ResourceNotFoundError, 404)

Design Decisions:
    - source_index on move is accepted and logged but never used: the card is found by id
    - Card rows reloaded inside each mutation attempt (they are expired after a retry rollback)
    - Deleting a board uses bulk deletes (cards first, then the board) rather than ORM cascade
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.board_layout import BoardColumn, default_layout
from app.core.board_ordering import (
    apply_reconciliation,
    detach_card,
    insert_card,
    locate_card,
    move_card,
    plan_reconciliation,
    relocate_card,
    ReconciliationPlan,
)
from app.core.domain_types import CardPriority, ColumnKey
from app.core.errors import ErrorContext, ResourceNotFoundError
from app.models.board import Board
from app.models.card import Card
from app.services.board_writes import load_board, write_board
from app.services.user_directory import UserDirectory

logger = logging.getLogger(__name__)

_EDITABLE_CARD_FIELDS = ("title", "description", "assigned_to", "due_date", "priority")


@dataclass
class ColumnView:
    """One column with its card rows, in card-order order."""
    column: BoardColumn
    cards: list[Card]


class BoardOrderingService:
    """Board and card operations that keep card order and card rows consistent."""

    def __init__(self, db: AsyncSession, max_attempts: int = 3):
        self.db = db
        self.max_attempts = max_attempts

    # ─── Boards ──────────────────────────────────────────────────

    async def create_board(
        self, team_id: UUID, name: str, description: str | None = None,
    ) -> Board:
        board = Board(
            team_id=team_id,
            name=name,
            description=description,
            column_layout=default_layout().to_json(),
        )
        self.db.add(board)
        await self.db.commit()
        logger.info(f"Board created: {board.id}", extra={"board_id": board.id})
        return board

    async def list_boards(self, team_id: UUID) -> list[Board]:
        result = await self.db.execute(
            select(Board)
            .where(Board.team_id == team_id)
            .order_by(Board.created_at.desc()),
        )
        return list(result.scalars().all())

    async def get_board(self, board_id: UUID) -> Board:
        return await load_board(self.db, board_id)

    async def get_board_view(self, board_id: UUID) -> tuple[Board, list[ColumnView]]:
        """Board plus card rows grouped by the layout. Dangling ids are skipped."""
        board = await load_board(self.db, board_id)
        cards = await self._cards_of(board_id)
        by_id = {str(c.id): c for c in cards}
        columns = [
            ColumnView(
                column=col,
                cards=[by_id[cid] for cid in col.card_order if cid in by_id],
            )
            for col in board.layout.columns
        ]
        return board, columns

    async def edit_board(self, board_id: UUID, fields: dict) -> Board:
        """Rename / re-describe. An explicit empty description clears it."""
        async def mutate(board: Board) -> Board:
            if fields.get("name"):
                board.name = fields["name"]
            if "description" in fields:
                board.description = fields["description"] or None
            return board

        return await write_board(self.db, board_id, mutate, self.max_attempts)

    async def delete_board(self, board_id: UUID) -> None:
        """Cascade: delete all cards of the board, then the board."""
        await load_board(self.db, board_id)
        await self.db.execute(delete(Card).where(Card.board_id == board_id))
        await self.db.execute(delete(Board).where(Board.id == board_id))
        await self.db.commit()
        logger.info(f"Board deleted: {board_id}", extra={"board_id": board_id})

    # ─── Cards ───────────────────────────────────────────────────

    async def get_card(self, card_id: UUID, *, fresh: bool = False) -> Card:
        stmt = select(Card).where(Card.id == card_id)
        if fresh:
            stmt = stmt.execution_options(populate_existing=True)
        result = await self.db.execute(stmt)
        card = result.scalar_one_or_none()
        if card is None:
            raise ResourceNotFoundError(
                "Card", str(card_id), ErrorContext(card_id=str(card_id)),
            )
        return card

    async def create_card(
        self,
        board_id: UUID,
        creator_id: UUID,
        title: str,
        column_id: str = ColumnKey.TODO.value,
        description: str | None = None,
        assigned_to: UUID | None = None,
        due_date: datetime | None = None,
        priority: str = CardPriority.MEDIUM.value,
    ) -> Card:
        """Insert path: create the card row and append it to its column's tail."""
        if assigned_to is not None:
            await UserDirectory(self.db).get_user(assigned_to)
        card_id = uuid.uuid4()

        async def mutate(board: Board) -> Card:
            layout = board.layout
            insert_card(layout, column_id, str(card_id))
            card = Card(
                id=card_id,
                board_id=board.id,
                title=title,
                description=description or None,
                column_id=column_id,
                status=column_id,
                assigned_to=assigned_to,
                due_date=due_date,
                priority=priority,
                created_by=creator_id,
            )
            self.db.add(card)
            board.store_layout(layout)
            return card

        card = await write_board(self.db, board_id, mutate, self.max_attempts)
        logger.info(
            f"Card created: {card.id} in {column_id}",
            extra={"board_id": board_id, "card_id": card.id},
        )
        return card

    async def move_card(
        self,
        board_id: UUID,
        source_column_id: str,
        destination_column_id: str,
        source_index: int | None,
        destination_index: int,
        card_id: UUID,
    ) -> Board:
        """Drag-reorder: move the card between (or within) columns."""
        key = str(card_id)

        async def mutate(board: Board) -> Board:
            layout = board.layout
            placed_at = move_card(
                layout, source_column_id, destination_column_id,
                destination_index, key,
            )
            if source_column_id != destination_column_id:
                card = await self.get_card(card_id, fresh=True)
                card.column_id = destination_column_id
                card.status = destination_column_id
            board.store_layout(layout)
            logger.debug(
                f"Card {key} moved {source_column_id}->{destination_column_id} "
                f"at {placed_at} (client source_index={source_index})",
                extra={"board_id": board_id, "card_id": key},
            )
            return board

        return await write_board(self.db, board_id, mutate, self.max_attempts)

    async def edit_card(self, card_id: UUID, fields: dict) -> Card:
        """Partial edit. A column change (column_id, else status) relocates the card."""
        card = await self.get_card(card_id)
        target = fields.get("column_id") or fields.get("status")
        if fields.get("assigned_to") is not None:
            await UserDirectory(self.db).get_user(fields["assigned_to"])
        key = str(card_id)

        async def mutate(board: Board) -> Card:
            row = await self.get_card(card_id, fresh=True)
            _apply_card_fields(row, fields)
            if target:
                layout = board.layout
                if locate_card(layout, key) != target:
                    relocate_card(layout, key, target)
                    board.store_layout(layout)
                row.column_id = target
                row.status = target
            return row

        return await write_board(self.db, card.board_id, mutate, self.max_attempts)

    async def delete_card(self, card_id: UUID) -> None:
        """Remove the card id from the board's order, then delete the card row."""
        card = await self.get_card(card_id)
        key = str(card_id)

        async def mutate(board: Board) -> None:
            layout = board.layout
            if detach_card(layout, key):
                board.store_layout(layout)
            await self.db.execute(delete(Card).where(Card.id == card_id))

        await write_board(self.db, card.board_id, mutate, self.max_attempts)
        logger.info(
            f"Card deleted: {key}",
            extra={"board_id": card.board_id, "card_id": key},
        )

    # ─── Read repair ─────────────────────────────────────────────

    async def reconcile_board(self, board_id: UUID) -> ReconciliationPlan:
        """Align card rows and card order; the order wins for column membership."""

        async def mutate(board: Board) -> ReconciliationPlan:
            cards = await self._cards_of(board_id, fresh=True)
            card_columns = {str(c.id): c.column_id for c in cards}
            layout = board.layout
            plan = plan_reconciliation(layout, card_columns)
            if not plan.is_clean:
                apply_reconciliation(layout, plan, card_columns)
                board.store_layout(layout)
            for card in cards:
                target = plan.column_fixes.get(str(card.id), card.column_id)
                if card.column_id != target or card.status != target:
                    card.column_id = target
                    card.status = target
            return plan

        plan = await write_board(self.db, board_id, mutate, self.max_attempts)
        if not plan.is_clean:
            logger.warning(
                f"Board {board_id} repaired: {len(plan.column_fixes)} column fixes, "
                f"{len(plan.dangling)} dangling, {len(plan.orphans)} orphans, "
                f"{len(plan.duplicates)} duplicates",
                extra={"board_id": board_id},
            )
        return plan

    async def _cards_of(self, board_id: UUID, *, fresh: bool = False) -> list[Card]:
        stmt = select(Card).where(Card.board_id == board_id)
        if fresh:
            stmt = stmt.execution_options(populate_existing=True)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())


def _apply_card_fields(card: Card, fields: dict) -> None:
    for name in _EDITABLE_CARD_FIELDS:
        if name not in fields:
            continue
        value = fields[name]
        if name == "title" and not value:
            continue
        if name == "priority" and not value:
            continue
        if name == "description":
            value = value or None
        setattr(card, name, value)
