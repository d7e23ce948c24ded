"""Flat 4KB address space with the glyph set preloaded at $000."""

import logging
from typing import Iterable

from .constants import FONTSET, MEMORY_SIZE, PROGRAM_START
from .errors import MemoryAccessError, RomTooBig

logger = logging.getLogger(__name__)


class Memory:
    """Bounds-checked CHIP-8 RAM"""

    def __init__(self):
        self.data = bytearray(MEMORY_SIZE)
        self._load_fontset()

    def _load_fontset(self):
        """Load built-in font sprites to memory"""
        self.data[0:len(FONTSET)] = FONTSET

    def clear(self):
        self.data[:] = bytes(MEMORY_SIZE)
        self._load_fontset()

    def _check(self, address: int, length: int = 1):
        if address < 0 or length < 0 or address + length > MEMORY_SIZE:
            raise MemoryAccessError(address, length)

    def read(self, address: int) -> int:
        self._check(address)
        return self.data[address]

    def write(self, address: int, value: int):
        self._check(address)
        self.data[address] = value & 0xFF

    def read_word(self, address: int) -> int:
        """Read a big-endian 16-bit word (one opcode)."""
        self._check(address, 2)
        return (self.data[address] << 8) | self.data[address + 1]

    def read_block(self, address: int, length: int) -> bytes:
        self._check(address, length)
        return bytes(self.data[address:address + length])

    def write_block(self, address: int, values: Iterable[int]):
        block = bytes(v & 0xFF for v in values)
        self._check(address, len(block))
        self.data[address:address + len(block)] = block

    def load_program(self, program: bytes, offset: int = PROGRAM_START):
        """Copy program bytes in at ``offset``; nothing is written if it won't fit."""
        end = offset + len(program)
        if end > MEMORY_SIZE:
            raise RomTooBig(len(program), end)
        self.data[offset:end] = program
        logger.debug("Loaded %d program bytes at $%03X", len(program), offset)
