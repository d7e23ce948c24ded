"""CHIP-8 execution engine.

The driver calls :meth:`Engine.step` once per emulated cycle. A step either
services a pending FX0A key wait or fetches, decodes and executes exactly one
instruction, then applies that instruction's program-counter action and
drains every timer-decrement event queued since the previous step.
"""

import logging
import queue
import random
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import numpy as np

from .constants import GLYPH_SIZE, NUM_KEYS
from .errors import KeyIndexOutOfRange, UnsupportedOpcode
from .graphics import GraphicsBuffer
from .keywait import KeyHeld, KeyWaitState
from .memory import Memory
from .quirks import Quirks
from .registers import RegisterFile

logger = logging.getLogger(__name__)


class Action(Enum):
    ADVANCE = "advance"
    SKIP = "skip"
    SET_PC = "set_pc"
    SUSPEND = "suspend"


@dataclass(frozen=True)
class PCAction:
    """What an executed instruction does to the program counter"""
    kind: Action
    target: int = 0


ADVANCE = PCAction(Action.ADVANCE)
SKIP = PCAction(Action.SKIP)
SUSPEND = PCAction(Action.SUSPEND)


def set_pc(address: int) -> PCAction:
    return PCAction(Action.SET_PC, address & 0xFFFF)


def skip_if(condition: bool) -> PCAction:
    return SKIP if condition else ADVANCE


@dataclass(frozen=True)
class OutputSnapshot:
    """Per-step output handed back to the driver"""
    sound_on: bool
    redraw: bool
    graphics: np.ndarray    # read-only (height, width) view


def _no_keys(key: int) -> bool:
    return False


class Engine:
    """CHIP-8 interpreter core"""

    def __init__(self, quirks: Optional[Quirks] = None,
                 timer_events: Optional[queue.Queue] = None,
                 rng: Optional[random.Random] = None):
        self.quirks = quirks if quirks is not None else Quirks()
        self.timer_events = timer_events if timer_events is not None else queue.Queue()
        self.rng = rng if rng is not None else random.Random()

        self.memory = Memory()
        self.registers = RegisterFile()
        self.graphics = GraphicsBuffer()
        self.key_wait = KeyWaitState()
        self._redraw = False

    def reset(self):
        """Reset CPU to initial state"""
        self.memory.clear()
        self.registers = RegisterFile()
        self.graphics.clear()
        self.key_wait.reset()
        self._redraw = True
        logger.debug("Engine reset")

    def load_program(self, program: bytes):
        """Load ROM data into memory at the program start address"""
        self.memory.load_program(bytes(program))

    def current_opcode(self) -> int:
        return self.memory.read_word(self.registers.PC)

    # ─── Cycle ───

    def step(self, is_held: KeyHeld = _no_keys) -> OutputSnapshot:
        """Run one emulated cycle and return the resulting output"""
        self._redraw = False

        if self.key_wait.active:
            if self.key_wait.poll(is_held, self.registers):
                self.registers.PC = (self.registers.PC + 2) & 0xFFFF
        else:
            self._apply(self.execute_one(is_held))

        self._drain_timers()
        return self.snapshot()

    def snapshot(self) -> OutputSnapshot:
        return OutputSnapshot(
            sound_on=self.registers.sound_timer > 0,
            redraw=self._redraw,
            graphics=self.graphics.view(),
        )

    def execute_one(self, is_held: KeyHeld = _no_keys) -> PCAction:
        """Fetch the opcode at PC and execute it, without moving PC"""
        return self.execute(self.current_opcode(), is_held)

    def _apply(self, action: PCAction):
        r = self.registers
        if action.kind is Action.ADVANCE:
            r.PC = (r.PC + 2) & 0xFFFF
        elif action.kind is Action.SKIP:
            r.PC = (r.PC + 4) & 0xFFFF
        elif action.kind is Action.SET_PC:
            r.PC = action.target
        # SUSPEND leaves PC on the waiting instruction

    def _drain_timers(self):
        while True:
            try:
                ticks = self.timer_events.get_nowait()
            except queue.Empty:
                break
            self.registers.decrement_timers(ticks)

    @staticmethod
    def _key(value: int) -> int:
        if not 0 <= value < NUM_KEYS:
            raise KeyIndexOutOfRange(value)
        return value

    # ─── Decode / execute ───

    def execute(self, opcode: int, is_held: KeyHeld = _no_keys) -> PCAction:
        """Decode and execute a single opcode"""
        # Extract common opcode parts
        nnn = opcode & 0x0FFF        # 12-bit address
        kk = opcode & 0x00FF         # 8-bit constant
        n = opcode & 0x000F          # 4-bit constant
        x = (opcode >> 8) & 0x0F     # 4-bit register index
        y = (opcode >> 4) & 0x0F     # 4-bit register index

        op = (opcode >> 12) & 0xF    # First nibble

        r = self.registers
        V = r.V

        # ─── 0x0XXX ───
        if op == 0x0:
            if opcode == 0x00E0:
                # 00E0: CLS
                self.graphics.clear()
                self._redraw = True
                return ADVANCE

            if opcode == 0x00EE:
                # 00EE: RET
                return set_pc(r.pop())

        # ─── 1NNN: JP addr ───
        elif op == 0x1:
            return set_pc(nnn)

        # ─── 2NNN: CALL addr ───
        elif op == 0x2:
            r.push(r.PC + 2)
            return set_pc(nnn)

        # ─── 3XKK: SE Vx, byte ───
        elif op == 0x3:
            return skip_if(V[x] == kk)

        # ─── 4XKK: SNE Vx, byte ───
        elif op == 0x4:
            return skip_if(V[x] != kk)

        # ─── 5XY0: SE Vx, Vy ───
        elif op == 0x5:
            if n == 0x0:
                return skip_if(V[x] == V[y])

        # ─── 6XKK: LD Vx, byte ───
        elif op == 0x6:
            V[x] = kk
            return ADVANCE

        # ─── 7XKK: ADD Vx, byte (no carry) ───
        elif op == 0x7:
            V[x] = (V[x] + kk) & 0xFF
            return ADVANCE

        # ─── 8XYN: ALU operations ───
        elif op == 0x8:
            if self._alu(n, x, y):
                return ADVANCE

        # ─── 9XY0: SNE Vx, Vy ───
        elif op == 0x9:
            if n == 0x0:
                return skip_if(V[x] != V[y])

        # ─── ANNN: LD I, addr ───
        elif op == 0xA:
            r.I = nnn
            return ADVANCE

        # ─── BNNN / BXNN: JP V0, addr ───
        elif op == 0xB:
            if self.quirks.use_source_register_in_jump:
                return set_pc(nnn + V[x])
            return set_pc(nnn + V[0])

        # ─── CXKK: RND Vx, byte ───
        elif op == 0xC:
            V[x] = self.rng.randint(0, 255) & kk
            return ADVANCE

        # ─── DXYN: DRW Vx, Vy, nibble ───
        elif op == 0xD:
            sprite = self.memory.read_block(r.I, n)
            collision = self.graphics.draw(V[x], V[y], sprite, clip=self.quirks.clip_sprites)
            r.VF = 1 if collision else 0
            self._redraw = True
            return ADVANCE

        # ─── EX9E/EXA1: Key operations ───
        elif op == 0xE:
            if kk == 0x9E:
                # EX9E: SKP Vx
                return skip_if(is_held(self._key(V[x])))
            if kk == 0xA1:
                # EXA1: SKNP Vx
                return skip_if(not is_held(self._key(V[x])))

        # ─── FXKK: Misc operations ───
        elif op == 0xF:
            action = self._misc(kk, x)
            if action is not None:
                return action

        raise UnsupportedOpcode(opcode, r.PC)

    def _alu(self, n: int, x: int, y: int) -> bool:
        """8XYN register arithmetic; False if N names no operation"""
        V = self.registers.V
        q = self.quirks

        if n == 0x0:
            # 8XY0: LD Vx, Vy
            V[x] = V[y]

        elif n in (0x1, 0x2, 0x3):
            if n == 0x1:
                V[x] |= V[y]       # 8XY1: OR
            elif n == 0x2:
                V[x] &= V[y]       # 8XY2: AND
            else:
                V[x] ^= V[y]       # 8XY3: XOR
            if q.reset_flag_on_logic_ops:
                V[0xF] = 0

        elif n == 0x4:
            # 8XY4: ADD Vx, Vy (VF = carry)
            result = V[x] + V[y]
            V[x] = result & 0xFF
            V[0xF] = 1 if result > 0xFF else 0

        elif n == 0x5:
            # 8XY5: SUB Vx, Vy (VF = NOT borrow)
            flag = 1 if V[x] >= V[y] else 0
            V[x] = (V[x] - V[y]) & 0xFF
            V[0xF] = flag

        elif n == 0x6:
            # 8XY6: SHR Vx {, Vy}
            if q.use_secondary_register_in_shift:
                V[x] = V[y]
            flag = V[x] & 0x1
            V[x] = V[x] >> 1
            V[0xF] = flag

        elif n == 0x7:
            # 8XY7: SUBN Vx, Vy (VF = NOT borrow)
            flag = 1 if V[y] >= V[x] else 0
            V[x] = (V[y] - V[x]) & 0xFF
            V[0xF] = flag

        elif n == 0xE:
            # 8XYE: SHL Vx {, Vy}
            if q.use_secondary_register_in_shift:
                V[x] = V[y]
            flag = (V[x] >> 7) & 0x1
            V[x] = (V[x] << 1) & 0xFF
            V[0xF] = flag

        else:
            return False
        return True

    def _misc(self, kk: int, x: int) -> Optional[PCAction]:
        """FXKK timer, index and memory operations"""
        r = self.registers
        V = r.V

        if kk == 0x07:
            # FX07: LD Vx, DT
            V[x] = r.delay_timer

        elif kk == 0x0A:
            # FX0A: LD Vx, K
            self.key_wait.begin(x)
            return SUSPEND

        elif kk == 0x15:
            # FX15: LD DT, Vx
            r.delay_timer = V[x]

        elif kk == 0x18:
            # FX18: LD ST, Vx
            r.sound_timer = V[x]

        elif kk == 0x1E:
            # FX1E: ADD I, Vx
            r.I = (r.I + V[x]) & 0xFFFF

        elif kk == 0x29:
            # FX29: LD F, Vx (point I to font sprite)
            r.I = (V[x] & 0xF) * GLYPH_SIZE

        elif kk == 0x33:
            # FX33: LD B, Vx (BCD)
            value = V[x]
            self.memory.write_block(r.I, (value // 100, (value // 10) % 10, value % 10))

        elif kk == 0x55:
            # FX55: LD [I], Vx (store V0-Vx)
            self.memory.write_block(r.I, V[:x + 1])
            if self.quirks.increment_index_on_bulk_copy:
                r.I = (r.I + x + 1) & 0xFFFF

        elif kk == 0x65:
            # FX65: LD Vx, [I] (load V0-Vx)
            V[:x + 1] = self.memory.read_block(r.I, x + 1)
            if self.quirks.increment_index_on_bulk_copy:
                r.I = (r.I + x + 1) & 0xFFFF

        else:
            return None
        return ADVANCE
