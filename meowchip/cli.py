"""Command-line entry point."""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import COLOR_SCHEMES, EmulatorConfig, load_config
from .disassembler import disassemble_program
from .engine import Engine
from .errors import Chip8Error
from .keypad import Keypad
from .quirks import PRESETS, Quirks
from .rom import find_roms, read_rom

logger = logging.getLogger(__name__)

BANNER = """\
╔═══════════════════════════════════════════════════════════════╗
║            🐱 Meow Machine - CHIP-8 Virtual Machine            ║
╚═══════════════════════════════════════════════════════════════╝

Controls:
  CHIP-8 Keypad: 1234 / QWER / ASDF / ZXCV
  P = Pause/Resume   F1 = Debug overlay   F5 = Reload ROM
  ESC = Exit
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="meowchip",
        description="CHIP-8 virtual machine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Play a ROM in a window
    meowchip pong.ch8

    # Run 1000 cycles without a window and dump registers
    meowchip test_opcode.ch8 --headless --cycles 1000

    # Print a listing of a ROM
    meowchip pong.ch8 --disassemble
        """
    )
    parser.add_argument("rom", nargs="?", help="ROM file (.ch8); defaults to the first ROM in the current directory")
    parser.add_argument("--config", "-c", help="JSON config file")
    parser.add_argument("--quirks", "-q", choices=sorted(PRESETS), help="Quirks preset")
    parser.add_argument("--clock-hz", type=int, help="Instructions per second")
    parser.add_argument("--timer-hz", type=int, help="Timer decrement rate")
    parser.add_argument("--scale", type=int, help="Window scale factor")
    parser.add_argument("--color", choices=sorted(COLOR_SCHEMES), help="Pixel colour")
    parser.add_argument("--headless", action="store_true", help="Run without a window")
    parser.add_argument("--cycles", type=int, default=1000, help="Cycles to run in headless mode (default: 1000)")
    parser.add_argument("--disassemble", "-d", action="store_true", help="Print a disassembly and exit")
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Logging verbosity (default: WARNING)")
    return parser


def resolve_config(args: argparse.Namespace) -> EmulatorConfig:
    config = load_config(args.config) if args.config else EmulatorConfig()
    return config.with_overrides(
        quirks=Quirks.preset(args.quirks) if args.quirks else None,
        clock_hz=args.clock_hz,
        timer_hz=args.timer_hz,
        scale=args.scale,
        color=args.color,
    )


def run_headless(engine: Engine, cycles: int, cycles_per_tick: int,
                 keypad: Optional[Keypad] = None):
    """Step the engine ``cycles`` times with no window.

    Without a timer thread, one decrement event is queued every
    ``cycles_per_tick`` steps, the clock-to-timer rate ratio.
    """
    keypad = keypad or Keypad()
    for i in range(1, cycles + 1):
        engine.step(keypad.is_held)
        if i % cycles_per_tick == 0:
            engine.timer_events.put(1)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level),
                        format="%(levelname)s %(name)s: %(message)s")

    try:
        config = resolve_config(args)

        rom_path = Path(args.rom) if args.rom else None
        if rom_path is None:
            roms = find_roms(".")
            if not roms:
                print("No ROM given and no .ch8 files found in the current directory",
                      file=sys.stderr)
                return 2
            rom_path = roms[0]

        data = read_rom(rom_path)

        if args.disassemble:
            for line in disassemble_program(data, jump_uses_vx=config.quirks.use_source_register_in_jump):
                print(line)
            return 0

        if args.headless:
            engine = Engine(config.quirks)
            engine.load_program(data)
            try:
                run_headless(engine, args.cycles, config.cycles_per_tick)
            finally:
                print(engine.registers.dump())
            return 0

    except Chip8Error as e:
        logger.error("%s", e)
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(BANNER)
    from .frontend import run_windowed
    run_windowed(config, rom_path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
