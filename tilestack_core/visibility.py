from __future__ import annotations

from typing import Sequence, Tuple

from .config import OVERLAP_FACTOR, TILE_SIZE
from .tile import Tile


def overlaps(a: Tile, b: Tile, tile_size: float = TILE_SIZE, factor: float = OVERLAP_FACTOR) -> bool:
    """Footprint test; looser than a full tile width so partial overlaps still cover."""
    limit = tile_size * factor
    return abs(a.x - b.x) < limit and abs(a.y - b.y) < limit


def is_covered(tile: Tile, tiles: Sequence[Tile], tile_size: float = TILE_SIZE, factor: float = OVERLAP_FACTOR) -> bool:
    """True if a non-collected tile on a strictly higher layer overlaps `tile`."""
    for other in tiles:
        if other.collected or other.layer <= tile.layer or other.id == tile.id:
            continue
        if overlaps(tile, other, tile_size, factor):
            return True
    return False


def resolve_visibility(
    tiles: Sequence[Tile],
    tile_size: float = TILE_SIZE,
    factor: float = OVERLAP_FACTOR,
) -> Tuple[Tile, ...]:
    """Recomputes `hidden` for every non-collected tile. Pure; collected tiles pass through."""
    out = []
    for tile in tiles:
        if tile.collected:
            out.append(tile)
        else:
            out.append(tile.with_hidden(is_covered(tile, tiles, tile_size, factor)))
    return tuple(out)


def visibility_changed(before: Sequence[Tile], after: Sequence[Tile]) -> bool:
    if len(before) != len(after):
        return True
    return any(a.hidden != b.hidden for a, b in zip(before, after))
