"""
Scoreboard views derived from baccarat round history.

Both views are pure functions of the history list; the engine never stores
them.
"""

from dataclasses import dataclass
from typing import Sequence

from tablegames.baccarat.state import BaccaratHistoryItem, BaccaratResult

ROWS = 6


@dataclass(frozen=True)
class BeadPlateItem:
    """One round on the bead plate."""

    item: BaccaratHistoryItem
    row: int
    col: int

    @property
    def result(self) -> BaccaratResult:
        return self.item.result


@dataclass
class BigRoadItem:
    """
    One banker or player circle on the big road.

    Ties never take a cell: they are counted on the circle that was current
    when they happened. Ties seen before the first banker/player result are
    carried onto the first circle, which is then marked ``is_tie_start``.
    """

    result: BaccaratResult
    row: int
    col: int
    tie_count: int = 0
    is_tie_start: bool = False
    banker_pair: bool = False
    player_pair: bool = False


def generate_bead_plate(history: Sequence[BaccaratHistoryItem]) -> list[BeadPlateItem]:
    """Lay rounds out column by column, six to a column."""
    return [
        BeadPlateItem(item=item, row=index % ROWS, col=index // ROWS)
        for index, item in enumerate(history)
    ]


def generate_big_road(history: Sequence[BaccaratHistoryItem]) -> list[BigRoadItem]:
    """
    Build the big road.

    A streak runs down its column; when it reaches the bottom row or the
    cell below is taken it turns right and runs along that row (dragon
    tail). A new result starts at the top of the column after the last
    circle placed, moving further right while that top cell is taken.
    """
    occupied: set[tuple[int, int]] = set()
    items: list[BigRoadItem] = []
    current: BigRoadItem | None = None

    # Annotations seen before the first banker/player result
    pending_ties = 0
    pending_banker_pair = False
    pending_player_pair = False

    for hand in history:
        if hand.result == BaccaratResult.TIE:
            if current is None:
                pending_ties += 1
                pending_banker_pair = pending_banker_pair or hand.banker_pair
                pending_player_pair = pending_player_pair or hand.player_pair
            else:
                current.tie_count += 1
                current.banker_pair = current.banker_pair or hand.banker_pair
                current.player_pair = current.player_pair or hand.player_pair
            continue

        if current is None:
            col, row = 0, 0
        elif hand.result == current.result:
            col, row = current.col, current.row + 1
            if row >= ROWS or (col, row) in occupied:
                col, row = current.col + 1, current.row
        else:
            col, row = current.col + 1, 0
            while (col, 0) in occupied:
                col += 1

        current = BigRoadItem(
            result=hand.result,
            row=row,
            col=col,
            banker_pair=hand.banker_pair,
            player_pair=hand.player_pair,
        )
        if not items and pending_ties:
            current.tie_count = pending_ties
            current.is_tie_start = True
            current.banker_pair = current.banker_pair or pending_banker_pair
            current.player_pair = current.player_pair or pending_player_pair

        occupied.add((col, row))
        items.append(current)

    return items
