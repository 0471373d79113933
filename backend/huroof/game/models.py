from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Literal


Team = Literal["orange", "green"]


class CellState(IntEnum):
    """Cell colouring. Integer values are what goes over the wire."""

    BLANK = 0
    HIGHLIGHTED = 1
    ORANGE = 2
    GREEN = 3

    def next(self) -> "CellState":
        return CellState((self.value + 1) % len(CellState))


TEAM_STATES: dict[str, CellState] = {
    "orange": CellState.ORANGE,
    "green": CellState.GREEN,
}


@dataclass(frozen=True)
class HexCoord:
    col: int
    row: int


@dataclass
class Cell:
    coord: HexCoord
    id: str
    letter: str
    state: CellState = CellState.BLANK


@dataclass
class Player:
    name: str
    team: Team
    # Connection that owns this roster entry, if any.
    sid: str | None = None


@dataclass
class BuzzerState:
    active: bool = False
    winner_name: str | None = None
    locked_at_ms: int = 0

    @property
    def armed(self) -> bool:
        return not self.active


@dataclass
class Room:
    id: str
    host_name: str
    rows: int
    cols: int
    grid: list[Cell] = field(default_factory=list)
    players: dict[str, Player] = field(default_factory=dict)
    buzzer: BuzzerState = field(default_factory=BuzzerState)
    created_at_ms: int = 0
    version: int = 0
    last_empty_at_ms: int | None = None

    def cell(self, cell_id: str) -> Cell | None:
        for c in self.grid:
            if c.id == cell_id:
                return c
        return None
