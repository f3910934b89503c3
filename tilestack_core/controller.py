from __future__ import annotations

import enum
import logging
import random
from dataclasses import dataclass
from typing import Dict, List, Optional, Set, Tuple, Union

from .collection import CollectionBuffer
from .config import GameConfig
from .layout import check_layout_config, generate_layout
from .replenish import replenish
from .scoring import Clock, ComboTracker
from .tile import Tile, active_tiles, id_factory, max_layer
from .visibility import resolve_visibility, visibility_changed

log = logging.getLogger(__name__)


class GameMode(str, enum.Enum):
    NORMAL = 'normal'
    ENDLESS = 'endless'


class Phase(str, enum.Enum):
    MENU = 'menu'
    PLAYING = 'playing'
    WIN = 'win'
    LOSE = 'lose'


class ClickResult(str, enum.Enum):
    IGNORED = 'ignored'
    COLLECTED = 'collected'
    MATCHED = 'matched'
    OVERFLOW = 'overflow'


@dataclass(frozen=True)
class GameOver:
    """Emitted once when a game reaches WIN or LOSE."""
    mode: GameMode
    phase: Phase
    score: int
    player: Optional[str] = None

    @property
    def should_submit(self) -> bool:
        # Only endless runs go on the leaderboard.
        return self.mode is GameMode.ENDLESS and self.score > 0 and bool(self.player)


class GameController:
    """Owns one game session and exposes it as a click-driven state machine.

    All transitions are synchronous: after every board mutation the controller
    settles the board (visibility fixed point, debounce release, endless
    top-up, win check) before the next click is looked at.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rng: Union[random.Random, int, None] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self.config = config or GameConfig()
        check_layout_config(self.config)
        self.rng = rng if isinstance(rng, random.Random) else random.Random(rng)
        self.mode = GameMode.NORMAL
        self.phase = Phase.MENU
        self.player: Optional[str] = None
        self.tiles: Tuple[Tile, ...] = ()
        self.buffer = CollectionBuffer(self.config.max_collection_size, self.config.tile_types)
        self.tracker = ComboTracker(self.config.base_score, self.config.combo_window_ms, clock)
        self._pending: Set[str] = set()
        self._top_layer = 0
        self._next_id = id_factory()
        self._events: List[GameOver] = []

    # ---------- read side ----------

    @property
    def score(self) -> int:
        return self.tracker.score

    @property
    def combo(self) -> int:
        return self.tracker.combo

    @property
    def collection(self) -> Tuple[Tile, ...]:
        return self.buffer.tiles

    @property
    def top_layer(self) -> int:
        return self._top_layer

    @property
    def pending_clicks(self) -> frozenset:
        return frozenset(self._pending)

    def board_tiles(self) -> Tuple[Tile, ...]:
        """Tiles still on the board, in creation order (what a renderer draws)."""
        return active_tiles(self.tiles)

    def clickable_tiles(self) -> Tuple[Tile, ...]:
        return tuple(t for t in self.board_tiles() if not t.hidden)

    def find_tile(self, tile_id: str) -> Optional[Tile]:
        for tile in self.tiles:
            if tile.id == tile_id:
                return tile
        return None

    def drain_events(self) -> List[GameOver]:
        events, self._events = self._events, []
        return events

    # ---------- session lifecycle ----------

    def login(self, name: str) -> None:
        name = (name or '').strip()
        if not name:
            raise ValueError('player name must not be empty')
        self.player = name

    def logout(self) -> None:
        self.player = None
        self.return_to_menu()

    def init_game(self, mode: Union[GameMode, str] = GameMode.NORMAL) -> None:
        """Starts a fresh game from any phase, discarding the previous board and score."""
        mode = GameMode(mode)
        if self.phase is Phase.PLAYING:
            self._leave_playing(Phase.MENU)
        self.mode = mode
        self._next_id = id_factory()
        self._pending.clear()
        self.buffer.clear()
        self.tracker.reset()
        self.tiles = generate_layout(self.config, self.rng, self._next_id)
        self._top_layer = max_layer(self.tiles)
        self.phase = Phase.PLAYING
        log.debug("new %s game: %d tiles, top layer %d", mode.value, len(self.tiles), self._top_layer)
        self._settle()

    def return_to_menu(self) -> None:
        if self.phase is Phase.PLAYING:
            self._leave_playing(Phase.MENU)
        else:
            self.phase = Phase.MENU

    # ---------- clicks ----------

    def click(self, tile_id: str) -> ClickResult:
        if self.phase is not Phase.PLAYING:
            return ClickResult.IGNORED
        if tile_id in self._pending:
            return ClickResult.IGNORED
        tile = self.find_tile(tile_id)
        if tile is None or tile.collected or tile.hidden:
            return ClickResult.IGNORED

        self._pending.add(tile_id)
        collected = tile.with_collected()
        self.tiles = tuple(collected if t.id == tile_id else t for t in self.tiles)
        outcome = self.buffer.admit(collected)

        result = ClickResult.COLLECTED
        if outcome.matched:
            score, combo = self.tracker.on_match()
            log.debug("matched %s: score=%d combo=%d", outcome.matched_type, score, combo)
            result = ClickResult.MATCHED
        elif outcome.overflow:
            log.debug("collection overflow at %d tiles", len(self.buffer))
            self._leave_playing(Phase.LOSE)
            result = ClickResult.OVERFLOW

        self._settle()
        return result

    # ---------- internals ----------

    def _refresh_visibility(self) -> None:
        updated = resolve_visibility(self.tiles, self.config.tile_size, self.config.overlap_factor)
        if visibility_changed(self.tiles, updated):
            self.tiles = updated

    def _settle(self) -> None:
        self._refresh_visibility()
        if self.phase is not Phase.PLAYING:
            return
        self._pending -= {t.id for t in self.tiles if t.collected}

        if self.mode is GameMode.ENDLESS:
            self.tiles, self._top_layer, batch = replenish(
                self.tiles, self.config, self._top_layer, self.rng, self._next_id,
            )
            if batch:
                log.debug("replenished %d tiles on layer %d", len(batch), self._top_layer)
                self._refresh_visibility()
        elif self.tiles and all(t.collected for t in self.tiles):
            self._leave_playing(Phase.WIN)

    def _leave_playing(self, phase: Phase) -> None:
        self.phase = phase
        self._pending.clear()
        self._top_layer = 0
        if phase in (Phase.WIN, Phase.LOSE):
            log.info("%s game over: %s with score %d", self.mode.value, phase.value, self.score)
            self._events.append(GameOver(self.mode, phase, self.score, self.player))


def state_summary(controller: GameController) -> Dict[str, object]:
    """Counts a UI status bar needs without walking the tile list itself."""
    return {
        'board': len(controller.board_tiles()),
        'clickable': len(controller.clickable_tiles()),
        'collection': len(controller.collection),
        'capacity': controller.config.max_collection_size,
    }
