"""State machine behind FX0A (block until a key is pressed and released).

The wait is serviced once per engine step instead of blocking, so timers
keep draining while the instruction stream is frozen:

    IDLE --FX0A--> AWAITING_RELEASE_PRE --no keys held--> POLLING
    POLLING --key K held, VX := K--> AWAITING_RELEASE_POST
    AWAITING_RELEASE_POST --K released--> IDLE (PC advances past FX0A)
"""

import logging
from enum import Enum
from typing import Callable, Optional

from .constants import NUM_KEYS
from .errors import KeyWaitInProgress
from .registers import RegisterFile

logger = logging.getLogger(__name__)

KeyHeld = Callable[[int], bool]


class KeyWaitPhase(Enum):
    IDLE = "idle"
    AWAITING_RELEASE_PRE = "awaiting_release_pre"
    POLLING = "polling"
    AWAITING_RELEASE_POST = "awaiting_release_post"


def any_held(is_held: KeyHeld) -> bool:
    return any(is_held(k) for k in range(NUM_KEYS))


class KeyWaitState:
    """Tracks an in-progress FX0A"""

    def __init__(self):
        self.phase = KeyWaitPhase.IDLE
        self.register: Optional[int] = None
        self.key: Optional[int] = None

    @property
    def active(self) -> bool:
        return self.phase is not KeyWaitPhase.IDLE

    def begin(self, register: int):
        if self.active:
            raise KeyWaitInProgress(self.register)
        self.register = register
        self.key = None
        self._enter(KeyWaitPhase.AWAITING_RELEASE_PRE)

    def reset(self):
        self.phase = KeyWaitPhase.IDLE
        self.register = None
        self.key = None

    def poll(self, is_held: KeyHeld, registers: RegisterFile) -> bool:
        """Advance by at most one transition; True once the wait has completed."""
        phase = self.phase

        if phase is KeyWaitPhase.AWAITING_RELEASE_PRE:
            if not any_held(is_held):
                self._enter(KeyWaitPhase.POLLING)

        elif phase is KeyWaitPhase.POLLING:
            for k in range(NUM_KEYS):
                if is_held(k):
                    registers.V[self.register] = k
                    self.key = k
                    self._enter(KeyWaitPhase.AWAITING_RELEASE_POST)
                    break

        elif phase is KeyWaitPhase.AWAITING_RELEASE_POST:
            if not is_held(self.key):
                logger.debug("Key %X released, V%X = %X", self.key, self.register, self.key)
                self.reset()
                return True

        return False

    def _enter(self, phase: KeyWaitPhase):
        logger.debug("Key wait: %s -> %s", self.phase.value, phase.value)
        self.phase = phase
