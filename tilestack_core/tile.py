from __future__ import annotations

import itertools
from dataclasses import dataclass, replace
from typing import Callable, Iterable, Tuple

from .config import TileType

IdFactory = Callable[[str], str]


@dataclass(frozen=True)
class Tile:
    """A single tile on the board. `hidden` is derived and recomputed by the visibility pass."""
    id: str
    type: TileType
    x: float
    y: float
    layer: int
    collected: bool = False
    hidden: bool = False

    @property
    def is_active(self) -> bool:
        return not self.collected

    def with_collected(self) -> 'Tile':
        return replace(self, collected=True)

    def with_hidden(self, hidden: bool) -> 'Tile':
        if hidden == self.hidden:
            return self
        return replace(self, hidden=hidden)


def active_tiles(tiles: Iterable[Tile]) -> Tuple[Tile, ...]:
    return tuple(t for t in tiles if t.is_active)


def max_layer(tiles: Iterable[Tile], default: int = 0) -> int:
    return max((t.layer for t in tiles), default=default)


def id_factory() -> IdFactory:
    """Returns a per-session id source; ids look like 'tile-0', 'rep-42' and never repeat."""
    serial = itertools.count()

    def next_id(prefix: str) -> str:
        return f"{prefix}-{next(serial)}"

    return next_id
