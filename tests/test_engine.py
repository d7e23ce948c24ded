"""Engine-level behaviour: stepping, timers, key wait and output snapshots."""

import queue

import pytest
from meowchip import Engine, Quirks
from meowchip.errors import RomTooBig
from meowchip.keywait import KeyWaitPhase

from helpers import held, no_keys, program


class TestScenarios:
    """End-to-end programs."""

    def test_load_then_loop(self, engine):
        """6005 then 1200: V0 = 5 after one step, PC loops back after two."""
        engine.load_program(program(0x6005, 0x1200))
        engine.step()
        assert engine.registers.V[0] == 5
        assert engine.registers.PC == 0x202
        engine.step()
        assert engine.registers.PC == 0x200

    def test_set_index_and_store(self, engine):
        """A2F0 then F255 with V0..V2 = 1, 2, 3."""
        engine.registers.V[0:3] = [1, 2, 3]
        engine.load_program(program(0xA2F0, 0xF255))
        engine.step()
        assert engine.registers.I == 0x2F0
        engine.step()
        assert engine.memory.read_block(0x2F0, 3) == bytes([1, 2, 3])

    def test_countdown_with_delay_timer(self, engine):
        """A delay loop terminates once enough ticks have been queued."""
        # $200 LD V0, 3; $202 LD DT, V0; $204 LD V1, DT; $206 SE V1, 0; $208 JP $204; $20A JP $20A
        engine.load_program(program(0x6003, 0xF015, 0xF107, 0x3100, 0x1204, 0x120A))
        for _ in range(2):
            engine.step()
        for _ in range(20):
            engine.timer_events.put(1)
            engine.step()
        assert engine.registers.delay_timer == 0
        assert engine.registers.PC == 0x20A


class TestLoadProgram:

    def test_rom_too_big(self, engine):
        with pytest.raises(RomTooBig) as exc:
            engine.load_program(bytes(4096 - 0x200 + 2))
        assert exc.value.offset == 4096 + 2

    def test_reset(self, engine):
        """reset() restores power-on state and keeps the glyphs."""
        engine.load_program(program(0x6005, 0xF20A))
        engine.step()
        engine.step()
        engine.graphics.pixels[0, 0] = 1
        engine.reset()
        assert engine.registers.V[0] == 0
        assert engine.registers.PC == 0x200
        assert engine.graphics.lit() == 0
        assert not engine.key_wait.active
        assert engine.memory.read_word(0x200) == 0
        assert engine.memory.read(0) == 0xF0


class TestTimers:

    def test_drain_all_pending_events(self, engine):
        engine.load_program(program(0x1200))
        engine.registers.delay_timer = 10
        engine.registers.sound_timer = 4
        for _ in range(3):
            engine.timer_events.put(1)
        engine.step()
        assert engine.registers.delay_timer == 7
        assert engine.registers.sound_timer == 1
        assert engine.timer_events.empty()

    def test_saturating(self, engine):
        """More decrements than the timer value leave it at zero."""
        engine.load_program(program(0x1200))
        engine.registers.delay_timer = 3
        for _ in range(10):
            engine.timer_events.put(1)
        engine.step()
        assert engine.registers.delay_timer == 0

    def test_instruction_before_drain(self, engine):
        """A timer set this step is decremented by this step's events."""
        engine.load_program(program(0x6005, 0xF018))
        engine.step()
        engine.timer_events.put(2)
        out = engine.step()
        assert engine.registers.sound_timer == 3
        assert out.sound_on is True

    def test_sound_off_at_zero(self, engine):
        engine.load_program(program(0x6001, 0xF018, 0x1204))
        engine.step()
        assert engine.step().sound_on is True
        engine.timer_events.put(1)
        assert engine.step().sound_on is False

    def test_shared_queue(self):
        """An external queue can be handed in."""
        events = queue.Queue()
        eng = Engine(timer_events=events)
        assert eng.timer_events is events


class TestKeyWaitThroughEngine:

    @pytest.fixture
    def waiting(self, engine):
        # $200 LD V3, K; $202 LD V4, $AA; $204 JP $204
        engine.load_program(program(0xF30A, 0x64AA, 0x1204))
        engine.step(no_keys)
        return engine

    def test_press_release_sequence(self, waiting):
        """Key 5 held then released writes 5 and resumes one step later."""
        eng = waiting
        assert eng.key_wait.phase is KeyWaitPhase.AWAITING_RELEASE_PRE
        eng.step(no_keys)
        assert eng.key_wait.phase is KeyWaitPhase.POLLING
        eng.step(held(5))
        assert eng.registers.V[3] == 5
        assert eng.registers.PC == 0x200
        eng.step(held(5))
        assert eng.registers.PC == 0x200

        eng.step(no_keys)
        assert not eng.key_wait.active
        assert eng.registers.PC == 0x202
        assert eng.registers.V[4] == 0

        eng.step(no_keys)
        assert eng.registers.V[4] == 0xAA

    def test_instruction_stream_frozen(self, waiting):
        """Nothing executes while waiting, however many steps pass."""
        for _ in range(10):
            waiting.step(no_keys)
        assert waiting.registers.PC == 0x200
        assert waiting.registers.V[4] == 0

    def test_timers_drain_while_waiting(self, waiting):
        waiting.registers.delay_timer = 5
        for _ in range(3):
            waiting.timer_events.put(1)
            waiting.step(no_keys)
        assert waiting.registers.delay_timer == 2
        assert waiting.key_wait.active


class TestOutputSnapshot:

    def test_redraw_only_on_draw_steps(self, engine):
        engine.load_program(program(0xA000, 0xD015, 0x1204))
        assert engine.step().redraw is False
        assert engine.step().redraw is True
        assert engine.step().redraw is False

    def test_graphics_read_only(self, engine):
        engine.load_program(program(0x1200))
        out = engine.step()
        assert out.graphics.shape == (32, 64)
        with pytest.raises(ValueError):
            out.graphics[0, 0] = 1

    def test_quirks_default(self, engine):
        assert engine.quirks == Quirks()
