"""Board Ordering Engine — pure card-order mutations on a BoardLayout.

Invariants:
    - All functions are PURE apart from mutating the layout they are given: no IO, no DB
    - A card id appears in at most one column, at most once (order partition)
    - move_card locates the card by value; the caller's source index is never trusted
    - Destination index is clamped to [0, len(destination)] — never an error
    - Column validation happens before any mutation: a failed call leaves the layout untouched

Design Decisions:
    - Raise typed errors (core/errors.py) instead of returning error dicts: callers are
      HTTP services, and the global handler maps them to 400/404
    - relocate/detach scan every column, so a card held by two columns leaves both
"""

from dataclasses import dataclass, field
from collections.abc import Mapping

from app.core.board_layout import BoardColumn, BoardLayout
from app.core.domain_types import ColumnKey
from app.core.errors import CardNotInColumnError, InvalidColumnError


def clamp_index(index: int, length: int) -> int:
    """Clamp an insertion index to the nearest valid bound of a list of `length`."""
    return max(0, min(index, length))


def _require_column(layout: BoardLayout, column_id: str) -> BoardColumn:
    column = layout.column(column_id)
    if column is None:
        raise InvalidColumnError([column_id])
    return column


def locate_card(layout: BoardLayout, card_id: str) -> str | None:
    """Column id currently holding card_id, or None. Board order is authoritative."""
    for column in layout.columns:
        if card_id in column.card_order:
            return column.id
    return None


def detach_card(layout: BoardLayout, card_id: str) -> list[str]:
    """Remove card_id from every column. Returns ids of the columns it was removed from."""
    removed_from = []
    for column in layout.columns:
        if card_id in column.card_order:
            column.card_order = [cid for cid in column.card_order if cid != card_id]
            removed_from.append(column.id)
    return removed_from


def insert_card(layout: BoardLayout, column_id: str, card_id: str) -> int:
    """Append a new card to the tail of its column. Returns its index."""
    column = _require_column(layout, column_id)
    detach_card(layout, card_id)
    column.card_order.append(card_id)
    return len(column.card_order) - 1


def move_card(
    layout: BoardLayout,
    source_column_id: str,
    destination_column_id: str,
    destination_index: int,
    card_id: str,
) -> int:
    """Move card_id from its source column to destination_index. Returns the final index."""
    source = layout.column(source_column_id)
    destination = layout.column(destination_column_id)
    missing = [
        cid for cid, col in (
            (source_column_id, source), (destination_column_id, destination),
        ) if col is None
    ]
    if missing:
        raise InvalidColumnError(missing)

    try:
        position = source.card_order.index(card_id)
    except ValueError:
        raise CardNotInColumnError(card_id, source_column_id)

    del source.card_order[position]
    index = clamp_index(destination_index, len(destination.card_order))
    destination.card_order.insert(index, card_id)
    return index


def relocate_card(layout: BoardLayout, card_id: str, new_column_id: str) -> int:
    """Edit-triggered move: drop card_id wherever found, append to new column's tail."""
    column = _require_column(layout, new_column_id)
    detach_card(layout, card_id)
    column.card_order.append(card_id)
    return len(column.card_order) - 1


def check_layout(layout: BoardLayout) -> list[str]:
    """List every order-partition violation. Empty list means the layout is sound."""
    violations = []
    seen: dict[str, str] = {}
    for column in layout.columns:
        if column.id not in {k.value for k in ColumnKey}:
            violations.append(f"unknown column '{column.id}'")
        for cid in column.card_order:
            if cid in seen:
                where = (
                    f"twice in '{column.id}'" if seen[cid] == column.id
                    else f"in both '{seen[cid]}' and '{column.id}'"
                )
                violations.append(f"card '{cid}' appears {where}")
            else:
                seen[cid] = column.id
    return violations


# ─── Read repair ─────────────────────────────────────────────────

@dataclass
class ReconciliationPlan:
    """Differences between a board's card order and its card rows."""
    column_fixes: dict[str, str] = field(default_factory=dict)
    dangling: list[str] = field(default_factory=list)
    orphans: list[str] = field(default_factory=list)
    duplicates: list[str] = field(default_factory=list)

    @property
    def is_clean(self) -> bool:
        return not (
            self.column_fixes or self.dangling or self.orphans or self.duplicates
        )


def plan_reconciliation(
    layout: BoardLayout, card_columns: Mapping[str, str],
) -> ReconciliationPlan:
    """Compare the layout against {card_id: card.column_id} for the board's cards.

    column_fixes: card rows whose column disagrees with the card order (order wins)
    dangling: ids in the card order with no card row
    orphans: card rows present in no column
    duplicates: ids held more than once (first occurrence wins)
    """
    plan = ReconciliationPlan()
    seen: set[str] = set()
    for column in layout.columns:
        for cid in column.card_order:
            if cid in seen:
                if cid not in plan.duplicates:
                    plan.duplicates.append(cid)
                continue
            seen.add(cid)
            if cid not in card_columns:
                plan.dangling.append(cid)
            elif card_columns[cid] != column.id:
                plan.column_fixes[cid] = column.id
    plan.orphans = [cid for cid in card_columns if cid not in seen]
    return plan


def _drop_repeats(layout: BoardLayout) -> None:
    seen: set[str] = set()
    for column in layout.columns:
        kept = []
        for cid in column.card_order:
            if cid not in seen:
                seen.add(cid)
                kept.append(cid)
        column.card_order = kept


def apply_reconciliation(
    layout: BoardLayout,
    plan: ReconciliationPlan,
    card_columns: Mapping[str, str],
) -> None:
    """Apply the layout half of a plan. Card-row fixes are left to the caller."""
    if plan.duplicates:
        _drop_repeats(layout)
    for cid in plan.dangling:
        detach_card(layout, cid)
    for cid in plan.orphans:
        target = card_columns[cid]
        if layout.column(target) is None:
            target = ColumnKey.TODO.value
            plan.column_fixes[cid] = target
        insert_card(layout, target, cid)
