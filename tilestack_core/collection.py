from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from .config import MAX_COLLECTION_SIZE, TILE_TYPES, TileType
from .tile import Tile

MATCH_SIZE = 3


@dataclass(frozen=True)
class AdmitResult:
    matched_type: Optional[TileType] = None
    overflow: bool = False

    @property
    def matched(self) -> bool:
        return self.matched_type is not None


class CollectionBuffer:
    """Bounded tray of collected tiles; three of a kind clear themselves.

    Tiles are kept sorted by type (catalog order, then lexical for unknown
    types). The order only groups tiles for display, but it also decides which
    type wins when two reach a triple on the same admission.
    """

    def __init__(self, capacity: int = MAX_COLLECTION_SIZE, catalog: Sequence[TileType] = TILE_TYPES) -> None:
        self.capacity = capacity
        self._rank: Dict[TileType, int] = {t: i for i, t in enumerate(catalog)}
        self._tiles: List[Tile] = []

    @property
    def tiles(self) -> Tuple[Tile, ...]:
        return tuple(self._tiles)

    def __len__(self) -> int:
        return len(self._tiles)

    def clear(self) -> None:
        self._tiles = []

    def type_key(self, tile_type: TileType) -> Tuple[int, TileType]:
        return (self._rank.get(tile_type, len(self._rank)), tile_type)

    def counts(self) -> Dict[TileType, int]:
        """Occurrences per type, in sorted type order."""
        return dict(Counter(t.type for t in self._tiles))

    def admit(self, tile: Tile) -> AdmitResult:
        """Adds a collected tile, then resolves at most one triple or reports overflow."""
        self._tiles.append(tile)
        self._tiles.sort(key=lambda t: self.type_key(t.type))

        matched = self._first_triple()
        if matched is not None:
            self._tiles = [t for t in self._tiles if t.type != matched]
            return AdmitResult(matched_type=matched)
        return AdmitResult(overflow=len(self._tiles) >= self.capacity)

    def _first_triple(self) -> Optional[TileType]:
        for tile_type, n in self.counts().items():
            if n == MATCH_SIZE:
                return tile_type
        return None
