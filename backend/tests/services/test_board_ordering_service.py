"""Board Ordering Service — card order and card rows stay in step through every write.

Invariants:
    - Move/create/edit/delete leave each card in exactly one column, matching card.column_id
    - Every board write bumps the board version
    - A stale version is retried on a fresh board; exhausted retries raise ConcurrencyError
    - Domain errors roll back: the stored order is unchanged
    - reconcile_board repairs drift toward the board order
    - A non-null assignee must name an existing user, checked before any write

Design Decisions:
    - Stored state asserted with column-only selects, which bypass the identity map
    - Retry paths driven by making session.commit raise StaleDataError; one test writes
      from two sessions over a file-backed SQLite database so version_id_col trips for real
"""

from uuid import uuid4

import pytest
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm.exc import StaleDataError

from app.core.errors import (
    CardNotInColumnError, ConcurrencyError, InvalidColumnError, ResourceNotFoundError,
)
from app.db.base import Base
from app.models.board import Board
from app.models.card import Card
from app.services.board_ordering import BoardOrderingService
from app.services.team_membership import TeamService
from app.services.user_directory import UserDirectory


async def _orders(db, board_id) -> dict[str, list[str]]:
    result = await db.execute(select(Board.column_layout).where(Board.id == board_id))
    return {c["id"]: c["card_order"] for c in result.scalar_one()}


async def _card_row(db, card_id) -> tuple[str, str]:
    result = await db.execute(
        select(Card.column_id, Card.status).where(Card.id == card_id),
    )
    return tuple(result.one())


async def _version(db, board_id) -> int:
    result = await db.execute(select(Board.version).where(Board.id == board_id))
    return result.scalar_one()


@pytest.fixture
async def cards(board_service, board, owner):
    c1 = await board_service.create_card(board.id, owner.id, "Write migration")
    c2 = await board_service.create_card(board.id, owner.id, "Review PR")
    return c1, c2


# ─── Create ──────────────────────────────────────────────────────

async def test_new_board_has_empty_fixed_columns(test_db, board):
    assert await _orders(test_db, board.id) == {"todo": [], "in-progress": [], "done": []}
    assert board.version == 1


async def test_create_card_appends_to_tail(test_db, board, cards):
    c1, c2 = cards
    orders = await _orders(test_db, board.id)
    assert orders["todo"] == [str(c1.id), str(c2.id)]
    assert await _card_row(test_db, c1.id) == ("todo", "todo")
    assert c1.priority == "medium"


async def test_create_card_in_named_column(test_db, board_service, board, owner):
    card = await board_service.create_card(
        board.id, owner.id, "Ship it", column_id="in-progress", priority="high",
    )
    orders = await _orders(test_db, board.id)
    assert orders["in-progress"] == [str(card.id)]
    assert card.status == "in-progress"


async def test_create_card_unknown_column_leaves_nothing(test_db, board_service, board, owner):
    board_id = board.id
    with pytest.raises(InvalidColumnError):
        await board_service.create_card(board_id, owner.id, "Lost", column_id="archive")
    result = await test_db.execute(select(Card.id).where(Card.board_id == board_id))
    assert result.all() == []


async def test_create_card_unknown_assignee(test_db, board_service, board, owner):
    board_id = board.id
    with pytest.raises(ResourceNotFoundError) as exc:
        await board_service.create_card(board_id, owner.id, "Ghost", assigned_to=uuid4())
    assert exc.value.http_status == 404
    result = await test_db.execute(select(Card.id).where(Card.board_id == board_id))
    assert result.all() == []
    assert (await _orders(test_db, board_id))["todo"] == []


async def test_create_card_on_missing_board(board_service, owner):
    with pytest.raises(ResourceNotFoundError):
        await board_service.create_card(uuid4(), owner.id, "Nowhere")


# ─── Move ────────────────────────────────────────────────────────

async def test_move_across_columns_updates_order_and_card(test_db, board_service, board, cards):
    c1, c2 = cards
    board_id = board.id
    await board_service.move_card(board_id, "todo", "done", 0, 0, c1.id)

    orders = await _orders(test_db, board_id)
    assert orders["todo"] == [str(c2.id)]
    assert orders["done"] == [str(c1.id)]
    assert await _card_row(test_db, c1.id) == ("done", "done")


async def test_move_ignores_client_source_index(test_db, board_service, board, cards):
    c1, c2 = cards
    board_id = board.id
    await board_service.move_card(board_id, "todo", "in-progress", 0, 0, c2.id)
    orders = await _orders(test_db, board_id)
    assert orders["todo"] == [str(c1.id)]
    assert orders["in-progress"] == [str(c2.id)]


async def test_move_within_column_keeps_card_column(test_db, board_service, board, cards):
    c1, c2 = cards
    board_id = board.id
    moved = await board_service.move_card(board_id, "todo", "todo", 1, 0, c2.id)
    assert moved.layout.column("todo").card_order == [str(c2.id), str(c1.id)]
    assert await _card_row(test_db, c2.id) == ("todo", "todo")


async def test_move_bumps_version(test_db, board_service, board, cards):
    board_id = board.id
    before = await _version(test_db, board_id)
    await board_service.move_card(board_id, "todo", "done", 0, 99, cards[0].id)
    assert await _version(test_db, board_id) == before + 1


async def test_move_invalid_column_rolls_back(test_db, board_service, board, cards):
    board_id = board.id
    before = await _orders(test_db, board_id)
    with pytest.raises(InvalidColumnError):
        await board_service.move_card(board_id, "todo", "archive", 0, 0, cards[0].id)
    assert await _orders(test_db, board_id) == before


async def test_move_card_not_in_source(test_db, board_service, board, cards):
    board_id = board.id
    card_id = cards[0].id
    with pytest.raises(CardNotInColumnError):
        await board_service.move_card(board_id, "done", "todo", 0, 0, card_id)
    assert await _card_row(test_db, card_id) == ("todo", "todo")


# ─── Version conflicts ───────────────────────────────────────────

async def test_stale_write_is_retried(test_db, board_service, board, cards, monkeypatch):
    board_id = board.id
    c1_id, c2_id = cards[0].id, cards[1].id
    real_commit = test_db.commit
    calls = {"n": 0}

    async def flaky_commit():
        calls["n"] += 1
        if calls["n"] == 1:
            raise StaleDataError("simulated concurrent update")
        await real_commit()

    monkeypatch.setattr(test_db, "commit", flaky_commit)
    await board_service.move_card(board_id, "todo", "done", 0, 0, c1_id)

    assert calls["n"] == 2
    orders = await _orders(test_db, board_id)
    assert orders["todo"] == [str(c2_id)]
    assert orders["done"] == [str(c1_id)]


async def test_exhausted_retries_raise_concurrency_error(
    test_db, board_service, board, cards, monkeypatch,
):
    board_id = board.id
    card_id = cards[0].id
    before = await _orders(test_db, board_id)

    async def always_stale():
        raise StaleDataError("simulated concurrent update")

    monkeypatch.setattr(test_db, "commit", always_stale)
    with pytest.raises(ConcurrencyError) as exc:
        await board_service.move_card(board_id, "todo", "done", 0, 0, card_id)
    assert exc.value.http_status == 409
    monkeypatch.undo()

    assert await _orders(test_db, board_id) == before


@pytest.fixture
async def two_sessions(tmp_path):
    """Two independent sessions over one file-backed SQLite database."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'board.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as first, factory() as second:
        yield first, second
    await engine.dispose()


async def test_stale_board_in_second_session_is_detected(two_sessions):
    db_a, db_b = two_sessions
    owner = await UserDirectory(db_a).create_user("Olivia Owner", "owner@example.com")
    team = await TeamService(db_a).create_team("Platform", None, owner.id)
    service_a = BoardOrderingService(db_a)
    board = await service_a.create_board(team.id, "Sprint 12")
    board_id = board.id
    c1 = await service_a.create_card(board_id, owner.id, "Write migration")
    c2 = await service_a.create_card(board_id, owner.id, "Review PR")
    c1_id, c2_id = c1.id, c2.id

    service_b = BoardOrderingService(db_b)
    stale = await service_b.get_board(board_id)
    assert stale.version == 3

    await service_a.move_card(board_id, "todo", "done", 0, 0, c1_id)
    await service_b.move_card(board_id, "todo", "in-progress", 1, 0, c2_id)

    assert await _orders(db_a, board_id) == {
        "todo": [], "in-progress": [str(c2_id)], "done": [str(c1_id)],
    }
    assert await _version(db_a, board_id) == 5
    assert await _card_row(db_a, c1_id) == ("done", "done")
    assert await _card_row(db_a, c2_id) == ("in-progress", "in-progress")


# ─── Edit ────────────────────────────────────────────────────────

async def test_edit_status_relocates_to_tail(test_db, board_service, board, cards, owner):
    c1, _ = cards
    board_id = board.id
    c3 = await board_service.create_card(board_id, owner.id, "Deploy", column_id="done")

    await board_service.edit_card(c1.id, {"status": "done"})

    orders = await _orders(test_db, board_id)
    assert orders["done"] == [str(c3.id), str(c1.id)]
    assert str(c1.id) not in orders["todo"]
    assert await _card_row(test_db, c1.id) == ("done", "done")


async def test_edit_column_id_wins_over_status(test_db, board_service, board, cards):
    c1, _ = cards
    board_id = board.id
    await board_service.edit_card(c1.id, {"column_id": "in-progress", "status": "done"})
    orders = await _orders(test_db, board_id)
    assert orders["in-progress"] == [str(c1.id)]
    assert orders["done"] == []


async def test_edit_same_column_keeps_position(test_db, board_service, board, cards):
    c1, c2 = cards
    board_id = board.id
    card = await board_service.edit_card(c1.id, {"status": "todo", "title": "Write migrations"})
    assert card.title == "Write migrations"
    assert (await _orders(test_db, board_id))["todo"] == [str(c1.id), str(c2.id)]


async def test_edit_without_column_change_leaves_order(test_db, board_service, board, cards):
    c1, _ = cards
    board_id = board.id
    before = await _orders(test_db, board_id)
    card = await board_service.edit_card(
        c1.id, {"priority": "high", "description": "", "title": ""},
    )
    assert card.priority == "high"
    assert card.description is None
    assert card.title == "Write migration"
    assert await _orders(test_db, board_id) == before


async def test_edit_card_unknown_assignee(test_db, board_service, cards, owner):
    c1_id, owner_id = cards[0].id, owner.id
    with pytest.raises(ResourceNotFoundError):
        await board_service.edit_card(c1_id, {"assigned_to": uuid4(), "title": "Reassigned"})
    result = await test_db.execute(
        select(Card.title, Card.assigned_to).where(Card.id == c1_id),
    )
    assert tuple(result.one()) == ("Write migration", None)

    card = await board_service.edit_card(c1_id, {"assigned_to": owner_id})
    assert card.assigned_to == owner_id


async def test_edit_missing_card(board_service):
    with pytest.raises(ResourceNotFoundError):
        await board_service.edit_card(uuid4(), {"title": "x"})


# ─── Delete ──────────────────────────────────────────────────────

async def test_delete_card_removes_id_and_row(test_db, board_service, board, cards):
    c1, c2 = cards
    board_id = board.id
    c1_id = c1.id
    await board_service.delete_card(c1_id)

    assert (await _orders(test_db, board_id))["todo"] == [str(c2.id)]
    result = await test_db.execute(select(Card.id).where(Card.id == c1_id))
    assert result.scalar_one_or_none() is None


async def test_delete_card_missing_from_order_still_deletes_row(test_db, board_service, board, cards):
    c1, c2 = cards
    board_id = board.id
    c1_id = c1.id
    board_row = await board_service.get_board(board_id)
    layout = board_row.layout
    layout.column("todo").card_order = [str(c2.id)]
    board_row.store_layout(layout)
    await test_db.commit()

    await board_service.delete_card(c1_id)
    result = await test_db.execute(select(Card.id).where(Card.id == c1_id))
    assert result.scalar_one_or_none() is None
    assert (await _orders(test_db, board_id))["todo"] == [str(c2.id)]


async def test_delete_board_cascades_cards(test_db, board_service, board, cards):
    board_id = board.id
    await board_service.delete_board(board_id)
    result = await test_db.execute(select(Card.id).where(Card.board_id == board_id))
    assert result.all() == []
    with pytest.raises(ResourceNotFoundError):
        await board_service.get_board(board_id)


# ─── Views and read repair ───────────────────────────────────────

async def test_board_view_groups_cards_by_order(board_service, board, cards):
    c1, c2 = cards
    await board_service.move_card(board.id, "todo", "done", 0, 0, c2.id)
    _, views = await board_service.get_board_view(board.id)
    by_column = {v.column.id: [c.id for c in v.cards] for v in views}
    assert by_column == {"todo": [c1.id], "in-progress": [], "done": [c2.id]}


async def test_reconcile_clean_board(board_service, board, cards):
    plan = await board_service.reconcile_board(board.id)
    assert plan.is_clean


async def test_reconcile_repairs_drift(test_db, board_service, board, cards):
    c1, c2 = cards
    board_id = board.id
    c1_id, c2_id = c1.id, c2.id
    # card row says done, order says todo; plus a dangling id in the order
    await test_db.execute(
        update(Card).where(Card.id == c1_id).values(column_id="done", status="done"),
    )
    board_row = await board_service.get_board(board_id)
    layout = board_row.layout
    layout.column("in-progress").card_order.append("missing-card")
    board_row.store_layout(layout)
    await test_db.commit()

    plan = await board_service.reconcile_board(board_id)

    assert plan.column_fixes == {str(c1_id): "todo"}
    assert plan.dangling == ["missing-card"]
    assert await _card_row(test_db, c1_id) == ("todo", "todo")
    orders = await _orders(test_db, board_id)
    assert orders == {"todo": [str(c1_id), str(c2_id)], "in-progress": [], "done": []}
