from __future__ import annotations

# Facade module that re-exports Tilestack core functionality.
# The Flask app and tests import from here; single-responsibility modules
# live under tilestack_core/*.

from tilestack_core.config import (
    BASE_SCORE,
    COMBO_WINDOW_MS,
    MAX_COLLECTION_SIZE,
    MAX_SESSIONS,
    OVERLAP_FACTOR,
    REPLENISH_LOW_WATER,
    TILE_OVERLAP_THRESHOLD,
    TILE_SIZE,
    TILE_TYPES,
    GameConfig,
    TileType,
    max_sessions_from_env,
)
from tilestack_core.tile import Tile, active_tiles, id_factory, max_layer
from tilestack_core.layout import (
    LayoutConfigError,
    build_pool,
    cell_position,
    check_layout_config,
    generate_layout,
)
from tilestack_core.visibility import (
    is_covered,
    overlaps,
    resolve_visibility,
    visibility_changed,
)
from tilestack_core.collection import AdmitResult, CollectionBuffer
from tilestack_core.scoring import ComboTracker
from tilestack_core.replenish import make_batch, needs_replenish, replenish
from tilestack_core.controller import (
    ClickResult,
    GameController,
    GameMode,
    GameOver,
    Phase,
    state_summary,
)
from tilestack_core.leaderboard import (
    DEFAULT_DB,
    LeaderboardEntry,
    fetch_leaderboard,
    fetch_leaderboard_or_placeholder,
    submit_score,
    submit_score_quietly,
    validate_submission,
)

__all__ = [
    "BASE_SCORE",
    "COMBO_WINDOW_MS",
    "MAX_COLLECTION_SIZE",
    "MAX_SESSIONS",
    "OVERLAP_FACTOR",
    "REPLENISH_LOW_WATER",
    "TILE_OVERLAP_THRESHOLD",
    "TILE_SIZE",
    "TILE_TYPES",
    "GameConfig",
    "TileType",
    "max_sessions_from_env",
    "Tile",
    "active_tiles",
    "id_factory",
    "max_layer",
    "LayoutConfigError",
    "build_pool",
    "cell_position",
    "check_layout_config",
    "generate_layout",
    "is_covered",
    "overlaps",
    "resolve_visibility",
    "visibility_changed",
    "AdmitResult",
    "CollectionBuffer",
    "ComboTracker",
    "make_batch",
    "needs_replenish",
    "replenish",
    "ClickResult",
    "GameController",
    "GameMode",
    "GameOver",
    "Phase",
    "state_summary",
    "DEFAULT_DB",
    "LeaderboardEntry",
    "fetch_leaderboard",
    "fetch_leaderboard_or_placeholder",
    "submit_score",
    "submit_score_quietly",
    "validate_submission",
]
