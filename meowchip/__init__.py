"""Meow Machine: a CHIP-8 virtual machine.

The core is :class:`Engine`, which owns memory, registers, the frame buffer,
the quirk selection and the FX0A key-wait state, and exposes
``load_program`` and ``step``. Rendering, input and timer threads live in the
driver modules (``frontend``, ``keypad``, ``timers``).
"""

__version__ = "0.1.0"

from .engine import Action, Engine, OutputSnapshot, PCAction
from .errors import (
    Chip8Error,
    ConfigError,
    KeyIndexOutOfRange,
    KeyWaitInProgress,
    MemoryAccessError,
    RomLoadError,
    RomTooBig,
    StackError,
    StackOverflow,
    StackUnderflow,
    UnsupportedOpcode,
)
from .keypad import Keypad
from .quirks import Quirks

__all__ = [
    "Action", "Engine", "OutputSnapshot", "PCAction", "Keypad", "Quirks",
    "Chip8Error", "ConfigError", "KeyIndexOutOfRange", "KeyWaitInProgress",
    "MemoryAccessError",
    "RomLoadError", "RomTooBig", "StackError", "StackOverflow",
    "StackUnderflow", "UnsupportedOpcode",
]
