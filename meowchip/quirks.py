"""Configurable opcode behaviours that differ between CHIP-8 interpreters.

Each field is consumed at exactly one point in the decoder:

    reset_flag_on_logic_ops          8XY1/8XY2/8XY3 clear VF afterwards
    increment_index_on_bulk_copy     FX55/FX65 leave I advanced by X+1
    use_secondary_register_in_shift  8XY6/8XYE copy VY into VX before shifting
    use_source_register_in_jump      BNNN jumps to NNN + VX instead of NNN + V0
    clip_sprites                     DXYN drops pixels past the screen edge
"""

from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Mapping

from .errors import ConfigError


@dataclass(frozen=True)
class Quirks:
    """Immutable quirk selection; defaults match the original COSMAC VIP."""
    reset_flag_on_logic_ops: bool = True
    increment_index_on_bulk_copy: bool = True
    use_secondary_register_in_shift: bool = True
    use_source_register_in_jump: bool = False
    clip_sprites: bool = True

    @classmethod
    def preset(cls, name: str) -> "Quirks":
        """Return a named preset (``chip8`` or ``schip``)."""
        try:
            return PRESETS[name.lower()]
        except KeyError:
            known = ", ".join(sorted(PRESETS))
            raise ConfigError(f"Unknown quirks preset {name!r} (known: {known})") from None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Quirks":
        """Build quirks from an optional ``preset`` key plus field overrides."""
        data = dict(data)
        base = cls.preset(data.pop("preset")) if "preset" in data else cls()

        names = {f.name for f in fields(cls)}
        unknown = set(data) - names
        if unknown:
            raise ConfigError(f"Unknown quirk(s): {', '.join(sorted(unknown))}")
        for key, value in data.items():
            if not isinstance(value, bool):
                raise ConfigError(f"Quirk {key!r} must be a boolean, got {value!r}")

        return replace(base, **data)

    def to_dict(self) -> Dict[str, bool]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


PRESETS = {
    'chip8': Quirks(),
    'schip': Quirks(
        reset_flag_on_logic_ops=False,
        increment_index_on_bulk_copy=False,
        use_secondary_register_in_shift=False,
        use_source_register_in_jump=True,
        clip_sprites=True,
    ),
}
