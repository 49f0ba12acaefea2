import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional, Tuple

DEFAULT_WORDS = ("APPLE", "BRAVE", "CRANE", "DANCE", "EPOCH", "FLAME")

# 5 minutes, for both "New Timed Game" and "Enable timed mode"
DEFAULT_TIMED_SECONDS = 300

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class GameConfig:
    """Runtime configuration for the game engine and its stores."""

    words: Tuple[str, ...] = DEFAULT_WORDS
    max_attempts: int = 6
    timed_seconds: int = DEFAULT_TIMED_SECONDS
    tick_interval: float = 1.0
    save_key: str = "word_guess_state"
    # Count-aware (standard Wordle) yellows instead of per-position membership
    strict_feedback: bool = False
    data_dir: Optional[Path] = field(default=None)

    def __post_init__(self) -> None:
        words = tuple(w.strip().upper() for w in self.words)
        if not words:
            raise ValueError("Word list must not be empty")
        if len({len(w) for w in words}) != 1 or not words[0]:
            raise ValueError("All words must be non-empty and share one length")
        object.__setattr__(self, "words", words)
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be positive")
        if self.timed_seconds < 1:
            raise ValueError("timed_seconds must be positive")

    @classmethod
    def from_env(cls, environ=None, **overrides) -> "GameConfig":
        """Create a config from WORDGUESS_* environment variables."""
        env = os.environ if environ is None else environ
        cfg = cls()
        values = {}
        if env.get("WORDGUESS_TIMED_SECONDS"):
            values["timed_seconds"] = int(env["WORDGUESS_TIMED_SECONDS"])
        if env.get("WORDGUESS_MAX_ATTEMPTS"):
            values["max_attempts"] = int(env["WORDGUESS_MAX_ATTEMPTS"])
        if env.get("WORDGUESS_DATA_DIR"):
            values["data_dir"] = Path(env["WORDGUESS_DATA_DIR"])
        if env.get("WORDGUESS_WORDS_FILE"):
            values["words"] = tuple(read_words(env["WORDGUESS_WORDS_FILE"]))
        if env.get("WORDGUESS_STRICT_FEEDBACK"):
            values["strict_feedback"] = _truthy(env["WORDGUESS_STRICT_FEEDBACK"])
        values.update({k: v for k, v in overrides.items() if v is not None})
        if values:
            log.debug("Config overrides: %s", values)
            cfg = replace(cfg, **values)
        return cfg


def read_words(path) -> list[str]:
    """
    Read the given file and return one uppercased word per line.
    Empty lines are ignored.
    """
    words = []
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            s = line.strip()
            if s:
                words.append(s.upper())
    return words


def configure_logging(default_level: int = logging.INFO, level_name: Optional[str] = None) -> None:
    """Configure root logger with a sane default format.

    Respects WORDGUESS_LOG_LEVEL env var if no level is given.
    """
    level_name = level_name or os.getenv("WORDGUESS_LOG_LEVEL")
    level = default_level
    if level_name:
        level = getattr(logging, level_name.upper(), default_level)
    logging.basicConfig(
        level=level,
        format="[%(asctime)s] [%(levelname)s] %(name)s: %(message)s",
    )


def _truthy(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}
