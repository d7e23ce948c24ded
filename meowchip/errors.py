"""Exceptions raised by the CHIP-8 engine and its driver layer.

Every condition the engine cannot recover from on its own surfaces as a
subclass of :class:`Chip8Error`; callers typically log it and halt.
"""

from typing import Optional


class Chip8Error(Exception):
    """Base class for all emulator errors."""


class RomTooBig(Chip8Error):
    """Program does not fit between the load address and the end of memory."""

    def __init__(self, size: int, offset: int):
        self.size = size
        self.offset = offset
        super().__init__(
            f"ROM of {size} bytes would extend to ${offset:04X}, past end of memory"
        )


class UnsupportedOpcode(Chip8Error):
    """Decoded opcode matches no handler in its family."""

    def __init__(self, opcode: int, address: Optional[int] = None):
        self.opcode = opcode
        self.address = address
        where = f" at ${address:03X}" if address is not None else ""
        super().__init__(f"Unsupported opcode ${opcode:04X}{where}")


class KeyIndexOutOfRange(Chip8Error):
    """A register-derived key index lies outside the 16-key keypad."""

    def __init__(self, index: int):
        self.index = index
        super().__init__(f"Key index {index:#04x} outside keypad range 0x0-0xF")


class KeyWaitInProgress(Chip8Error):
    """FX0A executed while an earlier key wait is still pending."""

    def __init__(self, register: int):
        self.register = register
        super().__init__(f"Key wait for V{register:X} already in progress")


class StackError(Chip8Error):
    """Return-address stack misuse."""


class StackOverflow(StackError):
    def __init__(self, depth: int):
        self.depth = depth
        super().__init__(f"Stack overflow: more than {depth} nested calls")


class StackUnderflow(StackError):
    def __init__(self):
        super().__init__("Stack underflow: return with empty stack")


class MemoryAccessError(Chip8Error):
    """Read or write outside addressable memory."""

    def __init__(self, address: int, length: int = 1):
        self.address = address
        self.length = length
        super().__init__(
            f"Memory access out of bounds: ${address:04X} (+{length} bytes)"
        )


class RomLoadError(Chip8Error):
    """ROM file could not be read."""

    def __init__(self, path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load ROM {path}: {reason}")


class ConfigError(Chip8Error):
    """Invalid quirks or emulator configuration."""
