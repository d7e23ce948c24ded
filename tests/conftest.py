"""Shared fixtures for the engine tests."""

import random
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest
from meowchip import Engine, Quirks

from helpers import no_keys, program


@pytest.fixture
def engine():
    return Engine(Quirks(), rng=random.Random(1234))


@pytest.fixture
def run():
    """Load opcodes into a fresh engine and step once per opcode."""
    def _run(*opcodes, quirks=None, steps=None, keys=no_keys):
        eng = Engine(quirks or Quirks(), rng=random.Random(1234))
        eng.load_program(program(*opcodes))
        for _ in range(len(opcodes) if steps is None else steps):
            eng.step(keys)
        return eng
    return _run
