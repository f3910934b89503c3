"""
Tilestack core Python package.

Pure game-state logic for the layered triple-matching puzzle, kept free of
any web or terminal code so it can be tested directly.
Modules:
- config.py: tuning constants and GameConfig
- tile.py: Tile and per-session id source
- layout.py: pyramid dealing
- visibility.py: which tiles are covered by higher layers
- collection.py: the bounded collection tray and triple matching
- scoring.py: score and combo window
- replenish.py: endless-mode top-ups
- controller.py: GameController state machine
- leaderboard.py: SQLite high-score store
- cli.py: text-mode play
"""
