from __future__ import annotations

import argparse
from collections import defaultdict
from typing import Dict, List, Optional, Sequence

from .config import GameConfig
from .controller import ClickResult, GameController, GameMode, Phase, state_summary
from .leaderboard import DEFAULT_DB, fetch_leaderboard_or_placeholder, submit_score_quietly
from .tile import Tile


def pretty(controller: GameController) -> str:
    """Text view: clickable tiles grouped by type, then the collection tray."""
    groups: Dict[str, List[Tile]] = defaultdict(list)
    for tile in controller.clickable_tiles():
        groups[tile.type].append(tile)
    summary = state_summary(controller)

    lines: List[str] = [
        f"Score {controller.score}  combo x{controller.combo}  "
        f"board {summary['board']} ({summary['clickable']} free)",
    ]
    rank = controller.buffer.type_key
    for tile_type in sorted(groups, key=rank):
        ids = ' '.join(t.id for t in groups[tile_type])
        lines.append(f"  [{tile_type:>2}] {ids}")
    tray = ' '.join(f"[{t.type}]" for t in controller.collection)
    empty = ' '.join('[ ]' for _ in range(summary['capacity'] - summary['collection']))
    lines.append(f"Tray: {tray} {empty}".rstrip())
    return '\n'.join(lines)


def print_leaderboard(db_path: str) -> None:
    print('Leaderboard:')
    for i, entry in enumerate(fetch_leaderboard_or_placeholder(db_path), start=1):
        print(f"  #{i:<2} {entry.name:<16} {entry.score}")


def play(controller: GameController, mode: GameMode, db_path: str, read=input) -> Phase:
    controller.init_game(mode)
    print(pretty(controller))
    while controller.phase is Phase.PLAYING:
        try:
            text = read('Tile id (q to quit, menu to leave): ').strip()
        except EOFError:
            text = 'q'
        if text in ('q', 'quit', 'menu'):
            controller.return_to_menu()
            break
        result = controller.click(text)
        if result is ClickResult.IGNORED:
            print('Not a free tile. Try again.')
            continue
        if result is ClickResult.MATCHED and controller.combo > 1:
            print(f"COMBO x{controller.combo}!")
        print(pretty(controller))

    if controller.phase is Phase.WIN:
        print(f"You cleared the board! Final score {controller.score}")
    elif controller.phase is Phase.LOSE:
        print(f"The tray overflowed. Final score {controller.score}")
    for event in controller.drain_events():
        if event.should_submit and event.player:
            if submit_score_quietly(db_path, event.player, event.score):
                print('Score saved to the leaderboard.')
    return controller.phase


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(description='Tilestack triple-matching puzzle')
    parser.add_argument('--mode', choices=[m.value for m in GameMode], default='normal', help='Game mode')
    parser.add_argument('--seed', type=int, default=None, help='RNG seed for the deal')
    parser.add_argument('--name', default=None, help='Player name for the leaderboard')
    parser.add_argument('--db', default=DEFAULT_DB, help='SQLite leaderboard file path')
    parser.add_argument('--leaderboard', action='store_true', help='Show the leaderboard and exit')
    args = parser.parse_args(argv)

    if args.leaderboard:
        print_leaderboard(args.db)
        return

    controller = GameController(GameConfig.from_env(), rng=args.seed)
    if args.name:
        controller.login(args.name)
    play(controller, GameMode(args.mode), args.db)


if __name__ == '__main__':
    main()
