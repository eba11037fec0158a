"""Timer-driven playback over the date axis.

A PlaybackController walks the date index forward once per period and wraps
to 0 after the last date, forever, until stopped. It holds no data; each tick
only moves ``current_index`` and calls the ``on_tick`` listener with it.

The timer is a single daemon ticker thread per controller. Ticks and control
calls (play, stop, set_period, advance, seek) serialise on one re-entrant
lock, which gives two guarantees:

- at most one ticker is ever active;
- once ``stop()`` returns, no further tick fires (a tick already running
  when stop() is called finishes first; stop() waits for it).

The lock is re-entrant so ``on_tick`` may itself call stop() or
set_period() from the ticker thread.
"""

import logging
import threading
from enum import Enum
from typing import Callable, Optional

__all__ = ['PlaybackController', 'PlaybackState']

logger = logging.getLogger(__name__)


class PlaybackState(str, Enum):
    STOPPED = "stopped"
    PLAYING = "playing"


class _PlaybackTicker(threading.Thread):
    """Recurring timer thread; calls back into its controller every period."""

    def __init__(self, controller: "PlaybackController", period_ms: int, name: str):
        super().__init__(daemon=True, name=name)
        self.controller = controller
        self.period_s = period_ms / 1000.0
        self._stop_event = threading.Event()

    def run(self):
        while not self._stop_event.wait(self.period_s):
            self.controller._tick(self)

    def stop(self):
        """Signal ticker to stop."""
        self._stop_event.set()

    def stopped(self):
        return self._stop_event.is_set()


class PlaybackController:
    """Cyclic playback state machine (``stopped`` / ``playing``).

    Parameters
    ----------
    date_count : int
        Number of dates to cycle through. With 0 dates, ticks fire but the
        index stays at 0 and ``on_tick`` is not called.
    period_ms : int
        Default milliseconds between ticks.
    on_tick : callable, optional
        Called as ``on_tick(index)`` after every tick, on the ticker thread,
        while the controller lock is held. Overrunning the period delays the
        next tick; ticks are never queued.
    start_index : int
        Initial date index (clamped into range).

    Examples
    --------
    >>> controller = PlaybackController(date_count=3, period_ms=400, on_tick=print)
    >>> controller.advance()
    1
    >>> controller.play()        # prints 2, 0, 1, ... every 400 ms
    >>> controller.set_period(100)
    >>> controller.stop()
    """

    def __init__(
        self,
        date_count: int,
        period_ms: int = 400,
        on_tick: Optional[Callable[[int], None]] = None,
        start_index: int = 0,
    ):
        if date_count < 0:
            raise ValueError(f"date_count must be >= 0, got {date_count}")
        self.date_count = date_count
        self._period_ms = self._validate_period(period_ms)
        self.on_tick = on_tick

        self._lock = threading.RLock()
        self._ticker: Optional[_PlaybackTicker] = None
        self._generation = 0
        self._index = self._clamp(start_index)

    @staticmethod
    def _validate_period(period_ms) -> int:
        period_ms = int(period_ms)
        if period_ms <= 0:
            raise ValueError(f"period_ms must be positive, got {period_ms}")
        return period_ms

    def _clamp(self, index: int) -> int:
        if self.date_count == 0:
            return 0
        return max(0, min(int(index), self.date_count - 1))

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> PlaybackState:
        with self._lock:
            return PlaybackState.PLAYING if self._ticker is not None else PlaybackState.STOPPED

    @property
    def is_playing(self) -> bool:
        return self.state is PlaybackState.PLAYING

    @property
    def current_index(self) -> int:
        with self._lock:
            return self._index

    @property
    def period_ms(self) -> int:
        return self._period_ms

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def play(self, period_ms: Optional[int] = None) -> None:
        """Start ticking. Restarts at the new period if already playing."""
        if period_ms is not None:
            self.set_period(period_ms)
        with self._lock:
            if self._ticker is not None:
                return
            self._start_locked()

    def stop(self) -> None:
        """Cancel the timer. No tick fires after this returns."""
        with self._lock:
            ticker = self._stop_locked()
        self._join(ticker)

    def set_period(self, period_ms: int) -> None:
        """Change the period; a running timer is stopped and restarted."""
        period_ms = self._validate_period(period_ms)
        with self._lock:
            self._period_ms = period_ms
            if self._ticker is None:
                return
            old = self._stop_locked()
            self._start_locked()
        self._join(old)
        logger.debug("Playback period changed to %d ms", period_ms)

    def advance(self) -> int:
        """Move one date forward, wrapping to 0 past the last date."""
        with self._lock:
            if self.date_count > 0:
                self._index = (self._index + 1) % self.date_count
            return self._index

    def seek(self, index: int) -> int:
        """Jump to ``index`` clamped into ``[0, date_count - 1]``.

        This is navigation (slider) policy. Strict lookups go through the
        query engine, which rejects out-of-range indices.
        """
        with self._lock:
            self._index = self._clamp(index)
            return self._index

    # ------------------------------------------------------------------
    # Timer internals
    # ------------------------------------------------------------------

    def _start_locked(self) -> None:
        self._generation += 1
        self._ticker = _PlaybackTicker(
            self, self._period_ms, name=f"PlaybackTicker-{self._generation}"
        )
        self._ticker.start()
        logger.info("Playback started: period=%d ms, index=%d", self._period_ms, self._index)

    def _stop_locked(self) -> Optional[_PlaybackTicker]:
        ticker = self._ticker
        if ticker is None:
            return None
        ticker.stop()
        self._ticker = None
        logger.info("Playback stopped at index %d", self._index)
        return ticker

    @staticmethod
    def _join(ticker: Optional[_PlaybackTicker]) -> None:
        if ticker is None or ticker is threading.current_thread():
            return
        ticker.join(timeout=5)
        if ticker.is_alive():
            logger.warning("%s did not stop cleanly", ticker.name)

    def _tick(self, ticker: _PlaybackTicker) -> None:
        with self._lock:
            if ticker is not self._ticker or ticker.stopped():
                return
            if self.date_count == 0:
                return
            index = self.advance()
            if self.on_tick is None:
                return
            try:
                self.on_tick(index)
            except Exception:
                # Keep the timer alive; the listener owns its own failures
                logger.exception("Playback listener failed at index %d", index)
