from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Tuple

TileType = str

# Catalog of tile kinds; order doubles as the display/match sort order.
TILE_TYPES: Tuple[TileType, ...] = tuple(str(i) for i in range(1, 15))

TILE_SIZE = 120
MAX_COLLECTION_SIZE = 7
BASE_SCORE = 100
COMBO_WINDOW_MS = 2000

# Fraction of TILE_SIZE within which two tiles on different layers count as overlapping.
OVERLAP_FACTOR = 0.85
# Legacy constant, not consulted by the overlap rule (OVERLAP_FACTOR is).
TILE_OVERLAP_THRESHOLD = 0.95

SETS_PER_TYPE = 3
PYRAMID_LAYERS: Tuple[Tuple[int, int], ...] = ((7, 7), (6, 6), (5, 5), (4, 4))  # (rows, cols), 126 cells
BOARD_CENTER = 250.0
SPACING_MULTIPLIER = 0.6

REPLENISH_LOW_WATER = 15
SPAWN_RANGE = 380.0

# Live sessions one API process keeps before evicting the least recently used.
MAX_SESSIONS = 1000


@dataclass(frozen=True)
class GameConfig:
    """Tuning knobs for one game session. Defaults reproduce the stock pyramid."""
    tile_types: Tuple[TileType, ...] = TILE_TYPES
    sets_per_type: int = SETS_PER_TYPE
    layers: Tuple[Tuple[int, int], ...] = PYRAMID_LAYERS
    tile_size: float = TILE_SIZE
    overlap_factor: float = OVERLAP_FACTOR
    spacing_multiplier: float = SPACING_MULTIPLIER
    board_center: float = BOARD_CENTER
    max_collection_size: int = MAX_COLLECTION_SIZE
    base_score: int = BASE_SCORE
    combo_window_ms: int = COMBO_WINDOW_MS
    replenish_low_water: int = REPLENISH_LOW_WATER
    spawn_range: float = SPAWN_RANGE

    def grid_cell_count(self) -> int:
        return sum(rows * cols for rows, cols in self.layers)

    def pool_size(self) -> int:
        return len(self.tile_types) * self.sets_per_type * 3

    @property
    def overlap_threshold(self) -> float:
        return self.tile_size * self.overlap_factor

    @classmethod
    def from_env(cls) -> 'GameConfig':
        """Builds a config with numeric overrides from TILESTACK_* environment variables."""
        base = cls()
        return cls(
            max_collection_size=_env_int('TILESTACK_MAX_COLLECTION', base.max_collection_size),
            base_score=_env_int('TILESTACK_BASE_SCORE', base.base_score),
            combo_window_ms=_env_int('TILESTACK_COMBO_WINDOW_MS', base.combo_window_ms),
            replenish_low_water=_env_int('TILESTACK_LOW_WATER', base.replenish_low_water),
        )


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


def max_sessions_from_env() -> int:
    """Session cap for the HTTP API, from TILESTACK_MAX_SESSIONS; never below 1."""
    return max(1, _env_int('TILESTACK_MAX_SESSIONS', MAX_SESSIONS))
