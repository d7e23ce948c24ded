"""CHIP-8 register file: V0-VF, I, PC, call stack and the two timers."""

from dataclasses import dataclass, field
from typing import List

from .constants import FLAG_REGISTER, NUM_REGISTERS, PROGRAM_START, STACK_SIZE
from .errors import StackOverflow, StackUnderflow


@dataclass
class RegisterFile:
    """CHIP-8 register state container"""
    # Registers
    V: List[int] = field(default_factory=lambda: [0] * NUM_REGISTERS)  # V0-VF
    I: int = 0              # Index register (16-bit)
    PC: int = PROGRAM_START # Program counter
    SP: int = 0             # Stack pointer

    # Stack
    stack: List[int] = field(default_factory=lambda: [0] * STACK_SIZE)

    # Timers (decremented by external tick events)
    delay_timer: int = 0
    sound_timer: int = 0

    @property
    def VF(self) -> int:
        return self.V[FLAG_REGISTER]

    @VF.setter
    def VF(self, value: int):
        self.V[FLAG_REGISTER] = value & 0xFF

    def push(self, address: int):
        if self.SP >= STACK_SIZE:
            raise StackOverflow(STACK_SIZE)
        self.stack[self.SP] = address & 0xFFFF
        self.SP += 1

    def pop(self) -> int:
        if self.SP == 0:
            raise StackUnderflow()
        self.SP -= 1
        return self.stack[self.SP]

    def decrement_timers(self, ticks: int = 1):
        """Saturating decrement of both timers."""
        self.delay_timer = max(0, self.delay_timer - ticks)
        self.sound_timer = max(0, self.sound_timer - ticks)

    def dump(self) -> str:
        return "\n".join([
            f"PC: ${self.PC:03X}  I: ${self.I:03X}  SP: {self.SP}",
            f"DT: {self.delay_timer:02X}  ST: {self.sound_timer:02X}",
            "V0-V7: " + " ".join(f"{v:02X}" for v in self.V[:8]),
            "V8-VF: " + " ".join(f"{v:02X}" for v in self.V[8:]),
        ])
