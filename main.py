"""
Main entry point for BoardWise.
Plays a board from the command line: loads a share token, a board file or a
fresh board, then runs turns until someone wins.
"""

import argparse
import logging
import random

from boardwise.engine.definitions import (
    STATUS_FINISHED,
    STATUS_INTERACTION_PENDING,
    STATUS_PLAYING,
    TILE_QUIZ,
)
from boardwise.engine.codec import new_board
from boardwise.engine.persistence import MemoryPlayStateStore
from boardwise.services.scheduler import ManualScheduler
from boardwise.services.sound import SoundPlayer
from boardwise.session import GameSession


def print_game_state(session: GameSession) -> None:
    state = session.state
    board = state.board_config
    print(f"\nBoard: {board.settings.name} ({len(board.tiles)} tiles, d{board.settings.dice_sides})")
    print(f"Status: {state.game_status}")
    for i, player in enumerate(state.players):
        marker = ">" if i == state.current_player_index else " "
        finished = f" finished #{player.finish_order}" if player.has_finished else ""
        print(f" {marker} {player.name}: tile {player.position + 1}, score {player.score}{finished}")


def print_new_logs(session: GameSession, seen: set[str]) -> None:
    # Logs are newest first
    for entry in reversed(session.state.logs):
        if entry.id in seen:
            continue
        seen.add(entry.id)
        print(f"  [{entry.type}] {entry.message_key} {entry.message_params or ''}")


def choose_option(session: GameSession, interactive: bool, rng: random.Random) -> str:
    tile = session.state.active_tile_for_interaction
    options = tile.config.options
    print(f"\n  QUIZ: {tile.config.question}")
    for i, option in enumerate(options, start=1):
        print(f"    {i}. {option.text}")
    if not interactive:
        return rng.choice(options).id
    while True:
        raw = input("  Your answer: ").strip()
        if raw.isdigit() and 1 <= int(raw) <= len(options):
            return options[int(raw) - 1].id
        print(f"  Enter a number between 1 and {len(options)}")


def play(session: GameSession, scheduler: ManualScheduler, interactive: bool,
         rng: random.Random, max_turns: int = 500) -> None:
    seen: set[str] = set()
    print_new_logs(session, seen)
    for _ in range(max_turns):
        state = session.state
        if state.game_status == STATUS_FINISHED:
            break
        if state.game_status == STATUS_PLAYING:
            if interactive:
                input(f"\n{state.current_player.name}, press Enter to roll...")
            session.roll_dice()
            scheduler.run_all()
        elif state.game_status == STATUS_INTERACTION_PENDING:
            tile = state.active_tile_for_interaction
            if not state.interaction_resolved:
                if tile is not None and tile.type == TILE_QUIZ:
                    session.answer_quiz(choose_option(session, interactive, rng))
                else:
                    session.acknowledge()
            session.proceed()
        print_new_logs(session, seen)

    print_game_state(session)
    winner = session.state.winner
    if winner is not None:
        print(f"\nWinner: {winner.name} with {winner.score} points")
    else:
        print("\nNo winner yet")


def main():
    parser = argparse.ArgumentParser(description="Play a BoardWise board in the terminal")
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--token", help="share token of the board to play")
    source.add_argument("--file", help="path to an exported board JSON file")
    parser.add_argument("--seed", type=int, default=None, help="random seed for dice and shuffles")
    parser.add_argument("--auto", action="store_true", help="answer quizzes at random without prompting")
    parser.add_argument("--verbose", "-v", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    print("BoardWise - build and play your own board game")
    print("=" * 60)

    rng = random.Random(args.seed)
    scheduler = ManualScheduler()
    session = GameSession(
        store=MemoryPlayStateStore(),
        scheduler=scheduler,
        sound=SoundPlayer(),
        rng=rng,
    )

    if args.token:
        session.load_board_from_token(args.token)
    elif args.file:
        with open(args.file, encoding="utf-8") as f:
            session.load_board_from_file(f.read())
    else:
        session.load_board(new_board())

    if session.state.error:
        print(f"✗ {session.state.error}")
        return

    print_game_state(session)
    play(session, scheduler, interactive=not args.auto, rng=rng)


if __name__ == "__main__":
    main()
