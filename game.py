import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple

import wordHandle
from clock import Clock, TimerHandle
from settings import GameConfig
from state import GameState, SaveFormatError
from storage import PersistenceStore

logger = logging.getLogger(__name__)

# submit_guess() results, for the UI to branch on
GAME_ENDED = "Game Ended"
INVALID_LENGTH = "Invalid Length"
WIN = "Win"
LOSS = "Loss"
NEXT_TURN = "Next Turn"


class MessageKind(str, Enum):
    INFO = "info"
    ERROR = "error"
    WIN = "win"
    LOSS = "loss"
    TIMEOUT = "timeout"


@dataclass(frozen=True)
class Message:
    kind: MessageKind
    text: str


@dataclass(frozen=True)
class GameSnapshot:
    """Read-only view of the engine handed to the UI after every change."""
    target: str
    guesses: Tuple[str, ...]
    finished: bool
    timed_mode: bool
    remaining_secs: int
    paused: bool
    max_attempts: int
    feedback: Tuple[Tuple[int, ...], ...]
    last_message: Optional[Message] = None

    @property
    def attempts_left(self) -> int:
        return max(0, self.max_attempts - len(self.guesses))

    @property
    def is_won(self) -> bool:
        return bool(self.guesses) and self.guesses[-1] == self.target


Listener = Callable[[GameSnapshot], None]
MessageListener = Callable[[Message], None]


def pick_word(words: Sequence[str], now_ms: Optional[int] = None) -> str:
    """Wall-clock derived pick; not meant to be unpredictable."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return words[now_ms % len(words)]


def format_time(total_seconds: int) -> str:
    minutes, seconds = divmod(max(0, total_seconds), 60)
    return f"{minutes:02d}:{seconds:02d}"


class GameEngine:
    """
    The Controller.
    Owns the game state, applies the rules, drives the countdown and saves
    after every change. UIs call the public methods and observe snapshots.
    """

    def __init__(
        self,
        store: PersistenceStore,
        clock: Clock,
        config: Optional[GameConfig] = None,
        share: Optional[Callable[[str], None]] = None,
        picker: Optional[Callable[[Sequence[str]], str]] = None,
    ) -> None:
        self.config = config or GameConfig()
        self.store = store
        self.clock = clock
        self.share_sheet = share
        self._pick = picker or pick_word
        self.state = GameState(target=self._pick(self.config.words))
        self.paused = False
        self.last_message: Optional[Message] = None
        self._timer: Optional[TimerHandle] = None
        self._listeners: List[Listener] = []
        self._message_listeners: List[MessageListener] = []

    # --- Observation ---

    def snapshot(self) -> GameSnapshot:
        s = self.state
        return GameSnapshot(
            target=s.target,
            guesses=tuple(s.guesses),
            finished=s.finished,
            timed_mode=s.timed_mode,
            remaining_secs=s.remaining_secs,
            paused=self.paused,
            max_attempts=self.config.max_attempts,
            feedback=tuple(tuple(self.feedback(g)) for g in s.guesses),
            last_message=self.last_message,
        )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def add_message_listener(self, listener: MessageListener) -> None:
        self._message_listeners.append(listener)

    def feedback(self, guess: str) -> List[int]:
        if self.config.strict_feedback:
            return wordHandle.get_strict_response(guess, self.state.target)
        return wordHandle.get_response(guess, self.state.target)

    @property
    def timer_running(self) -> bool:
        return self._timer is not None and self._timer.active

    # --- Game actions ---

    def new_game(self, timed: bool = False) -> None:
        # We create a fresh State object rather than resetting fields manually
        self._stop_timer()
        self.state = GameState(
            target=self._pick(self.config.words),
            timed_mode=timed,
            remaining_secs=self.config.timed_seconds if timed else 0,
        )
        self.paused = False
        self.last_message = None
        logger.info("New %sgame started", "timed " if timed else "")
        if timed:
            self._start_timer(resume=True)
        self._changed()

    def submit_guess(self, raw: str) -> str:
        """
        Returns a status string for the UI (e.g. 'Win', 'Invalid Length').
        """
        if self.state.finished:
            return GAME_ENDED

        guess = raw.strip().upper()
        length = len(self.state.target)

        # 1. Validation
        if len(guess) != length:
            self._emit(MessageKind.ERROR, f"Guess must be {length} letters")
            self._notify()
            return INVALID_LENGTH

        # 2. Update
        self.state.guesses.append(guess)
        tries = len(self.state.guesses)
        logger.debug("Guess %d: %s -> %s", tries, guess,
                     wordHandle.response_to_str(self.feedback(guess)))

        # 3. Check Win/Loss
        if guess == self.state.target:
            result = WIN
            self._finish(MessageKind.WIN, f"You won in {tries} tries!")
        elif tries >= self.config.max_attempts:
            result = LOSS
            self._finish(MessageKind.LOSS, f"Out of tries! Word: {self.state.target}")
        else:
            result = NEXT_TURN
        self._changed()
        return result

    def pause(self) -> None:
        self.paused = True
        logger.debug("Paused with %d seconds left", self.state.remaining_secs)
        self._changed()

    def resume(self) -> None:
        self.paused = False
        if self.state.timed_mode and not self.state.finished:
            self._start_timer(resume=True)
        logger.debug("Resumed")
        self._changed()

    def enable_timed_mode(self) -> None:
        """Switch the running game to a fresh countdown."""
        if self.state.timed_mode or self.state.finished:
            return
        self.state.timed_mode = True
        self._start_timer(resume=False)
        self._changed()

    def tick(self) -> None:
        if self.state.finished or not self.state.timed_mode:
            return
        if self.paused:
            return
        self.state.remaining_secs = max(0, self.state.remaining_secs - 1)
        if self.state.remaining_secs <= 0:
            self._finish(MessageKind.TIMEOUT, f"Time over! The word was {self.state.target}")
        self._changed()

    # --- Persistence ---

    def load_saved(self) -> bool:
        """Restore the saved game; start a fresh one when nothing usable is stored."""
        raw = self.store.get_string(self.config.save_key)
        if raw is not None:
            try:
                restored = GameState.from_json(raw)
                restored.validate(self.config.max_attempts)
            except SaveFormatError as exc:
                logger.warning("Discarding saved game: %s", exc)
            else:
                self._stop_timer()
                self.state = restored
                self.paused = False
                self.last_message = None
                logger.info("Restored saved game (%d guesses)", len(restored.guesses))
                if restored.timed_mode and not restored.finished:
                    self._start_timer(resume=True)
                self._notify()
                return True
        self.new_game(timed=False)
        return False

    def clear_saved(self) -> None:
        self.store.remove(self.config.save_key)
        self.new_game(timed=False)
        self._emit(MessageKind.INFO, "Saved state cleared. Starting new game.")
        self._notify()

    def on_suspend(self) -> None:
        """Host went to the background: autosave, nothing else."""
        self._save()

    def close(self) -> None:
        self._stop_timer()
        self._save()

    # --- Sharing ---

    def share_score_text(self) -> str:
        tries = len(self.state.guesses)
        if self.state.finished:
            return f"I solved the word in {tries} tries in Word Guess!"
        return f"Playing Word Guess - {tries} tries so far."

    def share_score(self) -> str:
        text = self.share_score_text()
        if self.share_sheet is None:
            logger.debug("No share target configured")
            return text
        try:
            self.share_sheet(text)
        except Exception:
            logger.exception("Share target failed")
        return text

    # --- Internals ---

    def _start_timer(self, resume: bool = False) -> None:
        self._stop_timer()
        self.paused = False
        if not resume:
            self.state.remaining_secs = self.config.timed_seconds
        self._timer = self.clock.schedule_periodic(self.config.tick_interval, self.tick)

    def _stop_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _finish(self, kind: MessageKind, text: str) -> None:
        self.state.finished = True
        self._stop_timer()
        logger.info("Game over (%s) after %d guesses", kind.value, len(self.state.guesses))
        self._emit(kind, text)

    def _changed(self) -> None:
        self._save()
        self._notify()

    def _save(self) -> None:
        try:
            self.store.set_string(self.config.save_key, self.state.to_json())
        except OSError:
            logger.exception("Failed to save game state")

    def _emit(self, kind: MessageKind, text: str) -> None:
        self.last_message = Message(kind, text)
        for listener in list(self._message_listeners):
            try:
                listener(self.last_message)
            except Exception:
                logger.exception("Message listener failed")

    def _notify(self) -> None:
        if not self._listeners:
            return
        snap = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snap)
            except Exception:
                logger.exception("State listener failed")
