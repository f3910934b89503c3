from __future__ import annotations

import random
from typing import List, Optional, Tuple, Union

from .config import GameConfig, TileType
from .tile import IdFactory, Tile, id_factory


class LayoutConfigError(ValueError):
    """The tile pool cannot exactly fill the configured pyramid."""


def check_layout_config(config: GameConfig) -> None:
    """Raises LayoutConfigError unless every grid cell gets exactly one pool entry."""
    cells = config.grid_cell_count()
    pool = config.pool_size()
    if cells != pool:
        raise LayoutConfigError(
            f"Invalid layout: {len(config.tile_types)} types x {config.sets_per_type} sets x 3 = {pool} tiles, "
            f"but the layers {list(config.layers)} have {cells} cells"
        )


def build_pool(config: GameConfig) -> List[TileType]:
    """Each type repeated sets_per_type * 3 times, so every type can resolve through triples."""
    pool: List[TileType] = []
    for tile_type in config.tile_types:
        pool.extend([tile_type] * (config.sets_per_type * 3))
    return pool


def cell_position(config: GameConfig, rows: int, cols: int, r: int, c: int) -> Tuple[float, float]:
    """Logical (x, y) of a cell; every layer is centred on the board so smaller layers sit over larger ones."""
    step = config.tile_size * config.spacing_multiplier
    offset_x = cols * step / 2
    offset_y = rows * step / 2
    x = config.board_center - offset_x + c * step
    y = config.board_center - offset_y + r * step
    return x, y


def generate_layout(
    config: Optional[GameConfig] = None,
    rng: Union[random.Random, int, None] = None,
    next_id: Optional[IdFactory] = None,
) -> Tuple[Tile, ...]:
    """Deals a fresh pyramid: fixed structure, shuffled types.

    `rng` may be a Random instance or a seed. Layers are filled in order,
    row-major, with layer index as the stacking order.
    """
    config = config or GameConfig()
    check_layout_config(config)
    if not isinstance(rng, random.Random):
        rng = random.Random(rng)
    next_id = next_id or id_factory()

    pool = build_pool(config)
    rng.shuffle(pool)

    tiles: List[Tile] = []
    cursor = iter(pool)
    for layer, (rows, cols) in enumerate(config.layers):
        for r in range(rows):
            for c in range(cols):
                x, y = cell_position(config, rows, cols, r, c)
                tiles.append(Tile(id=next_id('tile'), type=next(cursor), x=x, y=y, layer=layer))
    return tuple(tiles)
