import argparse
import contextlib
import logging
from pathlib import Path

import wordHandle
from clock import ThreadingClock
from game import GameEngine, GameSnapshot, format_time
from settings import GameConfig, configure_logging
from storage import JsonFileStore

logger = logging.getLogger(__name__)

COMMANDS_HELP = ":new  :timed  :pause  :resume  :share  :clear  :quit"

MARKS = {wordHandle.CORRECT: "G", wordHandle.PRESENT: "Y", wordHandle.ABSENT: "B"}


def render_board(snap: GameSnapshot) -> str:
    lines = []
    for word, codes in zip(snap.guesses, snap.feedback):
        lines.append(" ".join(word) + "   " + " ".join(MARKS[c] for c in codes))
    for _ in range(snap.attempts_left if not snap.finished else 0):
        lines.append(" ".join("_" * len(snap.target)))
    status = f"Guesses: {len(snap.guesses)}"
    if snap.finished:
        status += "  (finished)"
    if snap.timed_mode:
        status += f"  Time left: {format_time(snap.remaining_secs)}"
        status += "  Paused" if snap.paused else "  Running"
    lines.append(status)
    return "\n".join(lines)


def play_text(engine: GameEngine, lock=None, input_fn=input, output=print) -> None:
    """Terminal loop: each line is a guess or a ':' command."""
    lock = lock if lock is not None else contextlib.nullcontext()
    engine.add_message_listener(lambda m: output(m.text))

    with lock:
        output(render_board(engine.snapshot()))
    output(f"Commands: {COMMANDS_HELP}")

    while True:
        try:
            line = input_fn("> ").strip()
        except EOFError:
            break

        with lock:
            if line in (":quit", ":q"):
                break
            elif line == ":new":
                engine.new_game(timed=False)
            elif line == ":timed":
                engine.new_game(timed=True)
            elif line == ":pause":
                engine.pause()
            elif line == ":resume":
                engine.resume()
            elif line == ":share":
                engine.share_score()
            elif line == ":clear":
                engine.clear_saved()
            elif line.startswith(":"):
                output(f"Unknown command. {COMMANDS_HELP}")
                continue
            else:
                engine.submit_guess(line)
            output(render_board(engine.snapshot()))

    with lock:
        engine.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="wordguess", description="Word guessing game with a countdown mode.")
    parser.add_argument("--text", action="store_true", help="Play in the terminal instead of the window")
    parser.add_argument("--new", action="store_true", help="Start a new game instead of resuming")
    parser.add_argument("--timed", action="store_true", help="Start a new timed game")
    parser.add_argument("--clear", action="store_true", help="Remove the saved game before starting")
    parser.add_argument("--data-dir", type=Path, default=None, help="Directory holding the saved game")
    parser.add_argument("--log-level", default=None, help="Logging level (default: WORDGUESS_LOG_LEVEL or WARNING)")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(default_level=logging.WARNING, level_name=args.log_level)

    config = GameConfig.from_env(data_dir=args.data_dir)
    store = JsonFileStore(config.data_dir)
    if args.clear:
        store.remove(config.save_key)
        logger.info("Saved state cleared")

    if not args.text:
        import UI
        UI.start(store, config=config, new_game=args.new, timed=args.timed)
        return 0

    clock = ThreadingClock()
    engine = GameEngine(store, clock, config=config, share=lambda text: print(f"Share: {text}"))
    with clock.lock:
        engine.load_saved()
        if args.new or args.timed:
            engine.new_game(timed=args.timed)
    play_text(engine, lock=clock.lock)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
