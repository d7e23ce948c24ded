"""Point-in-time snapshot of the 16-key hex keypad.

The input producer replaces the whole snapshot at its own refresh rate; the
engine only ever queries it through :meth:`Keypad.is_held`.
"""

import threading
from typing import FrozenSet, Iterable

from .constants import NUM_KEYS
from .errors import KeyIndexOutOfRange


class Keypad:
    """Thread-safe set of currently held logical keys"""

    def __init__(self):
        self._held: FrozenSet[int] = frozenset()
        self._lock = threading.Lock()

    def update(self, held: Iterable[int]):
        """Replace the snapshot with a new set of held keys."""
        keys = frozenset(held)
        for k in keys:
            if not 0 <= k < NUM_KEYS:
                raise KeyIndexOutOfRange(k)
        with self._lock:
            self._held = keys

    def release_all(self):
        with self._lock:
            self._held = frozenset()

    @property
    def held(self) -> FrozenSet[int]:
        with self._lock:
            return self._held

    def is_held(self, key: int) -> bool:
        if not 0 <= key < NUM_KEYS:
            raise KeyIndexOutOfRange(key)
        return key in self.held

    __call__ = is_held
