import logging
import threading
from typing import Callable, List

logger = logging.getLogger(__name__)

Callback = Callable[[], None]


class TimerHandle:
    """Handle to a periodic callback. cancel() is idempotent."""

    def __init__(self) -> None:
        self._cancelled = False

    @property
    def active(self) -> bool:
        return not self._cancelled

    def cancel(self) -> None:
        self._cancelled = True


class Clock:
    """Schedules a callback roughly every `interval` seconds."""

    def schedule_periodic(self, interval: float, callback: Callback) -> TimerHandle:  # pragma: no cover - interface
        raise NotImplementedError


class _ManualTimer(TimerHandle):
    def __init__(self, interval: float, callback: Callback, due: float) -> None:
        super().__init__()
        self.interval = interval
        self.callback = callback
        self.due = due


class ManualClock(Clock):
    """
    Deterministic clock for tests: time only moves when advance() is called,
    and every due callback fires synchronously in due order.
    """

    def __init__(self) -> None:
        self.now = 0.0
        self._timers: List[_ManualTimer] = []

    def schedule_periodic(self, interval: float, callback: Callback) -> TimerHandle:
        timer = _ManualTimer(interval, callback, self.now + interval)
        self._timers.append(timer)
        return timer

    @property
    def active_timers(self) -> int:
        return sum(1 for t in self._timers if t.active)

    def advance(self, seconds: float) -> None:
        end = self.now + seconds
        while True:
            self._timers = [t for t in self._timers if t.active]
            due = [t for t in self._timers if t.due <= end]
            if not due:
                break
            timer = min(due, key=lambda t: t.due)
            self.now = timer.due
            timer.due += timer.interval
            timer.callback()
        self.now = end


class _ThreadTimer(TimerHandle):
    def __init__(self) -> None:
        super().__init__()
        self.stopped = threading.Event()

    def cancel(self) -> None:
        super().cancel()
        self.stopped.set()


class ThreadingClock(Clock):
    """
    Runs each periodic callback on a daemon thread. Callbacks fire while
    holding `lock`; callers driving the same engine from another thread must
    hold it too.
    """

    def __init__(self) -> None:
        self.lock = threading.RLock()

    def schedule_periodic(self, interval: float, callback: Callback) -> TimerHandle:
        timer = _ThreadTimer()

        def run() -> None:
            while not timer.stopped.wait(interval):
                with self.lock:
                    if not timer.active:
                        break
                    try:
                        callback()
                    except Exception:
                        logger.exception("Timer callback failed")

        # daemon=True ensures the thread dies if the main app is closed
        thread = threading.Thread(target=run, name="wordguess-timer", daemon=True)
        thread.start()
        return timer
