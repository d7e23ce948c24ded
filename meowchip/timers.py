"""Background producer of timer-decrement events."""

import logging
import queue
import threading

from .constants import TIMER_HZ

logger = logging.getLogger(__name__)


class TimerTicker(threading.Thread):
    """Posts one decrement event per period onto the engine's queue.

    The engine is never written to directly; it drains the queue at the end
    of each step, so timer cadence is independent of the instruction rate.
    """

    def __init__(self, events: queue.Queue, hz: float = TIMER_HZ):
        super().__init__(name="chip8-timer", daemon=True)
        if hz <= 0:
            raise ValueError(f"Timer rate must be positive, got {hz}")
        self.events = events
        self.interval = 1.0 / hz
        self._stop_event = threading.Event()
        self.ticks = 0

    def run(self):
        logger.debug("Timer ticker started at %.1f Hz", 1.0 / self.interval)
        while not self._stop_event.wait(self.interval):
            self.events.put(1)
            self.ticks += 1
        logger.debug("Timer ticker stopped after %d ticks", self.ticks)

    def stop(self, timeout: float = 1.0):
        self._stop_event.set()
        if self.is_alive():
            self.join(timeout)
