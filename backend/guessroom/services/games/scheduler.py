import logging
import time
from typing import Callable


class TimerHandle:
    """Single-shot, cancellable reference to a scheduled callback."""

    def __init__(self, game_id: str, kind: str, delay: float):
        self.game_id = game_id
        self.kind = kind
        self.delay = delay
        self.deadline = time.time() + delay
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True

    @property
    def active(self) -> bool:
        return not (self.cancelled or self.fired)

    def __repr__(self):
        return f"<TimerHandle game={self.game_id} kind={self.kind} delay={self.delay}s active={self.active}>"


class BackgroundScheduler:
    """Run deferred callbacks as Socket.IO background tasks.

    - One background task per armed timer, sleeping with ``socketio.sleep``
      so it cooperates with eventlet/gevent as well as threads
    - The worker sleeps in ``tick``-second slices and exits as soon as its
      handle is cancelled, so superseded timers do not linger
    - A cancelled handle never runs its callback
    - Callers re-check the handle under their own lock before mutating state
    """

    def __init__(self, socketio, logger=None, tick=1.0):
        self.socketio = socketio
        self.logger = logger or logging.getLogger(__name__)
        self.tick = tick

    def call_later(self, game_id: str, kind: str, delay: float, callback: Callable[[TimerHandle], None]) -> TimerHandle:
        handle = TimerHandle(game_id, kind, delay)
        self.logger.info(f"[timer-set] game={game_id} kind={kind} duration={delay}s deadline={handle.deadline}")

        def _worker(h: TimerHandle):
            slept = 0
            while slept < h.delay and not h.cancelled:
                step = min(self.tick, h.delay - slept)
                self.socketio.sleep(step)
                slept += step
            if h.cancelled:
                self.logger.info(f"[timer-abort] game={h.game_id} kind={h.kind} cancelled after {slept}s")
                return
            self.logger.info(f"[timer-fire] game={h.game_id} kind={h.kind}")
            callback(h)

        self.socketio.start_background_task(_worker, handle)
        return handle
