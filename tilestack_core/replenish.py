from __future__ import annotations

import random
from typing import List, Sequence, Tuple

from .config import GameConfig, TileType
from .tile import IdFactory, Tile, active_tiles


def needs_replenish(tiles: Sequence[Tile], low_water: int) -> bool:
    return len(active_tiles(tiles)) < low_water


def make_batch(
    types: Sequence[TileType],
    layer: int,
    rng: random.Random,
    next_id: IdFactory,
    spawn_range: float,
) -> Tuple[Tile, ...]:
    """One tile triple per type, scattered at random, all sharing `layer`."""
    batch: List[Tile] = []
    for tile_type in types:
        for _ in range(3):
            batch.append(Tile(
                id=next_id('rep'),
                type=tile_type,
                x=rng.random() * spawn_range,
                y=rng.random() * spawn_range,
                layer=layer,
            ))
    return tuple(batch)


def replenish(
    tiles: Sequence[Tile],
    config: GameConfig,
    top_layer: int,
    rng: random.Random,
    next_id: IdFactory,
) -> Tuple[Tuple[Tile, ...], int, Tuple[Tile, ...]]:
    """Endless-mode top-up.

    Returns (tiles, top_layer, batch). When the active count is at or above the
    low-water mark nothing changes and batch is empty; otherwise a balanced
    batch is appended on a fresh layer above every layer used so far.
    """
    if not needs_replenish(tiles, config.replenish_low_water):
        return tuple(tiles), top_layer, ()
    new_top = top_layer + 1
    batch = make_batch(config.tile_types, new_top, rng, next_id, config.spawn_range)
    return tuple(tiles) + batch, new_top, batch
