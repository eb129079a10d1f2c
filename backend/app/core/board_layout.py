"""Board Layout — fixed-shape aggregate of columns and their ordered card ids.

Invariants:
    - Column set fixed at creation: todo, in-progress, done (never added/removed)
    - card_order holds card ids as strings; list order IS the display order
    - to_json()/from_json() round-trip the boards.columns JSON column exactly

Design Decisions:
    - Dataclasses over raw dicts: the ordering engine works on a typed shape,
      the ORM only ever sees plain JSON
    - Card bodies never embedded: columns reference cards by id, card rows live
      in the cards table
"""

from dataclasses import dataclass, field

from app.core.domain_types import COLUMN_TITLES, ColumnKey


@dataclass
class BoardColumn:
    """One board column: identifier, title and ordered card ids."""
    id: str
    title: str
    card_order: list[str] = field(default_factory=list)

    def to_json(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "card_order": list(self.card_order),
        }


@dataclass
class BoardLayout:
    """All columns of a board, in display order."""
    columns: list[BoardColumn] = field(default_factory=list)

    @property
    def column_ids(self) -> list[str]:
        return [c.id for c in self.columns]

    def column(self, column_id: str) -> BoardColumn | None:
        for column in self.columns:
            if column.id == column_id:
                return column
        return None

    def card_ids(self) -> list[str]:
        """Every card id across all columns, in column then position order."""
        return [cid for c in self.columns for cid in c.card_order]

    def to_json(self) -> list[dict]:
        return [c.to_json() for c in self.columns]

    @classmethod
    def from_json(cls, data: list[dict] | None) -> "BoardLayout":
        return cls(columns=[
            BoardColumn(
                id=raw["id"],
                title=raw.get("title", raw["id"]),
                card_order=[str(cid) for cid in raw.get("card_order", [])],
            )
            for raw in data or []
        ])


def default_layout() -> BoardLayout:
    """Fresh layout with the three fixed columns, all empty."""
    return BoardLayout(columns=[
        BoardColumn(id=key.value, title=COLUMN_TITLES[key])
        for key in ColumnKey
    ])
