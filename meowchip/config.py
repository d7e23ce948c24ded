"""Emulator settings: rates, display options and quirks, loadable from JSON.

Example document::

    {
        "clock_hz": 700,
        "timer_hz": 60,
        "color": "amber",
        "quirks": {"preset": "schip", "clip_sprites": false}
    }
"""

import json
import logging
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Mapping, Union

from .constants import DEFAULT_CLOCK_HZ, INPUT_HZ, TIMER_HZ
from .errors import ConfigError
from .quirks import Quirks

logger = logging.getLogger(__name__)

# Foreground colours (RGB) for the renderer
COLOR_SCHEMES = {
    'green': (0, 255, 128),
    'amber': (255, 176, 0),
    'white': (220, 220, 220),
    'blue': (100, 180, 255),
}


@dataclass(frozen=True)
class EmulatorConfig:
    clock_hz: int = DEFAULT_CLOCK_HZ
    timer_hz: int = TIMER_HZ
    input_hz: int = INPUT_HZ
    scale: int = 12
    color: str = 'green'
    quirks: Quirks = field(default_factory=Quirks)

    def __post_init__(self):
        for name in ('clock_hz', 'timer_hz', 'input_hz', 'scale'):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ConfigError(f"{name} must be a positive integer, got {value!r}")
        if self.color not in COLOR_SCHEMES:
            raise ConfigError(
                f"Unknown color {self.color!r} (known: {', '.join(COLOR_SCHEMES)})"
            )

    @property
    def cycles_per_frame(self) -> int:
        """Instructions per 60 Hz frame, at least one"""
        return max(1, self.clock_hz // 60)

    @property
    def cycles_per_tick(self) -> int:
        """Instructions between timer decrements, at least one"""
        return max(1, self.clock_hz // self.timer_hz)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EmulatorConfig":
        data = dict(data)
        names = {f.name for f in fields(cls)}
        unknown = set(data) - names
        if unknown:
            raise ConfigError(f"Unknown config key(s): {', '.join(sorted(unknown))}")

        quirks = data.pop('quirks', {})
        if isinstance(quirks, str):
            data['quirks'] = Quirks.preset(quirks)
        elif isinstance(quirks, Mapping):
            data['quirks'] = Quirks.from_dict(quirks)
        else:
            raise ConfigError(f"quirks must be a preset name or an object, got {quirks!r}")
        return cls(**data)

    def with_overrides(self, **overrides) -> "EmulatorConfig":
        """Copy with every non-None override applied"""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes) if changes else self


def load_config(path: Union[str, Path]) -> EmulatorConfig:
    """Load an :class:`EmulatorConfig` from a JSON file."""
    path = Path(path)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read config {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config {path} must contain a JSON object")

    config = EmulatorConfig.from_dict(data)
    logger.info("Loaded config from %s", path)
    return config
