"""Hex grid geometry.

Pointy-topped hexes addressed by integer ``(col, row)`` offset coordinates,
with odd rows shifted right by half a cell width. Adjacency depends on row
parity, see :func:`neighbors`.
"""

from __future__ import annotations

import math
import random
from typing import NamedTuple, Sequence

from .letters import shuffled
from .models import Cell, CellState, HexCoord

SQRT3 = math.sqrt(3)


class Point(NamedTuple):
    x: float
    y: float


def cell_id(col: int, row: int) -> str:
    return f"{col},{row}"


def parse_cell_id(text: str) -> HexCoord | None:
    parts = (text or "").split(",")
    if len(parts) != 2:
        return None
    try:
        return HexCoord(col=int(parts[0]), row=int(parts[1]))
    except ValueError:
        return None


def project(coord: HexCoord, size: float) -> Point:
    """Centre of ``coord`` in pixels, origin at the centre of (0, 0)."""
    width = size * SQRT3
    offset_x = width / 2 if coord.row % 2 == 1 else 0.0
    return Point(coord.col * width + offset_x, coord.row * size * 1.5)


def pixel_to_coord(point: Point, size: float) -> HexCoord:
    """Address of the hex containing ``point`` (nearest centre wins)."""
    width = size * SQRT3
    row = round(point.y / (size * 1.5))
    offset_x = width / 2 if row % 2 == 1 else 0.0
    guess = HexCoord(col=round((point.x - offset_x) / width), row=row)

    candidates = sorted({guess} | neighbors(guess), key=lambda c: (c.row, c.col))

    def _dist2(c: HexCoord) -> float:
        p = project(c, size)
        return (p.x - point.x) ** 2 + (p.y - point.y) ** 2

    return min(candidates, key=_dist2)


def corners(center: Point, size: float) -> list[Point]:
    points = []
    for i in range(6):
        angle = math.radians(60 * i + 30)
        points.append(Point(center.x + size * math.cos(angle), center.y + size * math.sin(angle)))
    return points


def neighbors(coord: HexCoord) -> set[HexCoord]:
    """The six adjacent addresses, unbounded."""
    col, row = coord.col, coord.row
    # Odd rows lean right, even rows lean left.
    lo, hi = (col, col + 1) if row % 2 == 1 else (col - 1, col)
    return {
        HexCoord(col - 1, row),
        HexCoord(col + 1, row),
        HexCoord(lo, row - 1),
        HexCoord(hi, row - 1),
        HexCoord(lo, row + 1),
        HexCoord(hi, row + 1),
    }


def in_bounds(coord: HexCoord, rows: int, cols: int) -> bool:
    return 0 <= coord.row < rows and 0 <= coord.col < cols


def neighbors_within(coord: HexCoord, rows: int, cols: int) -> set[HexCoord]:
    return {n for n in neighbors(coord) if in_bounds(n, rows, cols)}


def generate_grid(
    letters: Sequence[str],
    rows: int,
    cols: int,
    rng: random.Random | None = None,
) -> list[Cell]:
    """Shuffle the alphabet once and deal it cyclically in row-major order."""
    if not letters:
        raise ValueError("alphabet is empty")
    if rows <= 0 or cols <= 0:
        raise ValueError("grid must have at least one row and one column")

    deck = shuffled(letters, rng)
    cells: list[Cell] = []
    for row in range(rows):
        for col in range(cols):
            cells.append(
                Cell(
                    coord=HexCoord(col=col, row=row),
                    id=cell_id(col, row),
                    letter=deck[len(cells) % len(deck)],
                    state=CellState.BLANK,
                )
            )
    return cells
