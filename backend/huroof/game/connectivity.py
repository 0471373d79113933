"""Win detection: does a team's colour join two opposite board edges?"""

from __future__ import annotations

from collections import deque
from typing import Callable, Iterable

from .hexgrid import cell_id, neighbors
from .models import TEAM_STATES, Cell, CellState, HexCoord

EdgePredicate = Callable[[HexCoord], bool]


def connected(
    cells: Iterable[Cell],
    state: CellState,
    start: EdgePredicate,
    end: EdgePredicate,
) -> bool:
    """Breadth-first search over cells in ``state``.

    Seeds from every such cell satisfying ``start`` and succeeds as soon as a
    visited cell satisfies ``end``. Cells in any other state are never
    enqueued.
    """
    owned = {c.id: c.coord for c in cells if c.state == state}

    adjacency: dict[str, list[str]] = {}
    for cid, coord in owned.items():
        adjacency[cid] = [
            nid for nid in (cell_id(n.col, n.row) for n in neighbors(coord)) if nid in owned
        ]

    queue = deque(cid for cid, coord in owned.items() if start(coord))
    visited = set(queue)
    while queue:
        current = queue.popleft()
        if end(owned[current]):
            return True
        for nid in adjacency[current]:
            if nid not in visited:
                visited.add(nid)
                queue.append(nid)
    return False


def win_axis(team: str, rows: int, cols: int) -> tuple[EdgePredicate, EdgePredicate]:
    # green runs top to bottom, orange runs left to right
    if team == "green":
        return (lambda h: h.row == 0), (lambda h: h.row == rows - 1)
    if team == "orange":
        return (lambda h: h.col == 0), (lambda h: h.col == cols - 1)
    raise ValueError(f"unknown team: {team!r}")


def team_has_won(cells: Iterable[Cell], team: str, rows: int, cols: int) -> bool:
    start, end = win_axis(team, rows, cols)
    return connected(cells, TEAM_STATES[team], start, end)


def winning_teams(cells: Iterable[Cell], rows: int, cols: int) -> dict[str, bool]:
    cells = list(cells)
    return {team: team_has_won(cells, team, rows, cols) for team in TEAM_STATES}
