"""Board Layout — JSON shape of the boards.columns document."""

from uuid import uuid4

from app.core.board_layout import BoardLayout, default_layout


def test_default_layout_has_three_fixed_columns():
    layout = default_layout()
    assert layout.column_ids == ["todo", "in-progress", "done"]
    assert [c.title for c in layout.columns] == ["To Do", "In Progress", "Done"]
    assert layout.card_ids() == []


def test_json_round_trip_preserves_order():
    layout = default_layout()
    layout.column("done").card_order = ["b", "a"]
    restored = BoardLayout.from_json(layout.to_json())
    assert restored == layout


def test_from_json_stringifies_ids():
    card_id = uuid4()
    layout = BoardLayout.from_json([{"id": "todo", "title": "To Do", "card_order": [card_id]}])
    assert layout.column("todo").card_order == [str(card_id)]


def test_from_json_tolerates_missing_fields():
    layout = BoardLayout.from_json([{"id": "todo"}])
    assert layout.column("todo").title == "todo"
    assert layout.column("todo").card_order == []
    assert BoardLayout.from_json(None).columns == []


def test_to_json_copies_card_order():
    layout = default_layout()
    data = layout.to_json()
    data[0]["card_order"].append("x")
    assert layout.column("todo").card_order == []
