from __future__ import annotations

import time
from typing import Callable, Optional, Tuple

from .config import BASE_SCORE, COMBO_WINDOW_MS

Clock = Callable[[], float]


def wall_clock_ms() -> float:
    return time.time() * 1000.0


class ComboTracker:
    """Score and time-windowed combo multiplier.

    A match within `window_ms` of the previous match extends the combo; any
    later match restarts it at 1. Each match is worth base_score * combo.
    """

    def __init__(self, base_score: int = BASE_SCORE, window_ms: float = COMBO_WINDOW_MS, clock: Optional[Clock] = None) -> None:
        self.base_score = base_score
        self.window_ms = window_ms
        self.clock = clock or wall_clock_ms
        self.score = 0
        self.combo = 0
        self.last_match_ms: Optional[float] = None

    def reset(self) -> None:
        self.score = 0
        self.combo = 0
        self.last_match_ms = None

    def on_match(self) -> Tuple[int, int]:
        now = self.clock()
        if self.last_match_ms is not None and now - self.last_match_ms < self.window_ms:
            self.combo += 1
        else:
            self.combo = 1
        self.score += self.base_score * self.combo
        self.last_match_ms = now
        return self.score, self.combo
