import json
from dataclasses import dataclass, field


class WordGuessError(Exception):
    """Base exception for the word guess game."""


class SaveFormatError(WordGuessError):
    """Raised when a persisted game blob cannot be decoded."""


@dataclass
class GameState:
    """
    Holds ONLY the persisted data.
    It does not know about timers, stores, or how to pick targets.
    """
    target: str
    guesses: list[str] = field(default_factory=list)
    finished: bool = False
    timed_mode: bool = False
    remaining_secs: int = 0

    def to_dict(self) -> dict:
        return {
            "target": self.target,
            "guesses": list(self.guesses),
            "finished": self.finished,
            "timedMode": self.timed_mode,
            "remainingSecs": self.remaining_secs,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, data) -> "GameState":
        if not isinstance(data, dict):
            raise SaveFormatError(f"Expected an object, got {type(data).__name__}")
        target = data.get("target")
        if not isinstance(target, str) or not target:
            raise SaveFormatError("Missing or invalid 'target'")

        guesses = data.get("guesses") or []
        if not isinstance(guesses, list) or not all(isinstance(g, str) for g in guesses):
            raise SaveFormatError("'guesses' must be a list of strings")

        remaining = data.get("remainingSecs") or 0
        if isinstance(remaining, bool) or not isinstance(remaining, int):
            raise SaveFormatError("'remainingSecs' must be an integer")

        return cls(
            target=target,
            guesses=list(guesses),
            finished=_bool_field(data, "finished"),
            timed_mode=_bool_field(data, "timedMode"),
            remaining_secs=max(0, remaining),
        )

    @classmethod
    def from_json(cls, raw: str) -> "GameState":
        try:
            data = json.loads(raw)
        except (TypeError, ValueError) as exc:
            raise SaveFormatError(f"Saved game is not valid JSON: {exc}") from exc
        return cls.from_dict(data)

    def validate(self, max_attempts: int) -> None:
        if len(self.guesses) > max_attempts:
            raise SaveFormatError(
                f"{len(self.guesses)} guesses saved, at most {max_attempts} allowed"
            )
        for g in self.guesses:
            if len(g) != len(self.target):
                raise SaveFormatError(f"Guess {g!r} does not match target length")
        if not self.finished and self.guesses:
            # An unfinished game must still accept another guess
            if len(self.guesses) >= max_attempts or self.guesses[-1] == self.target:
                raise SaveFormatError("Game is over but not marked finished")


def _bool_field(data: dict, key: str) -> bool:
    value = data.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise SaveFormatError(f"'{key}' must be a boolean")
    return value
