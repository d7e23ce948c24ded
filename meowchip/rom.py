"""ROM file loading for the driver layer."""

import logging
from pathlib import Path
from typing import Union

from .constants import MAX_PROGRAM_SIZE, PROGRAM_START
from .errors import RomLoadError, RomTooBig

logger = logging.getLogger(__name__)

ROM_EXTENSIONS = (".ch8", ".c8")


def read_rom(path: Union[str, Path]) -> bytes:
    """Read a ROM image from disk, rejecting images too big for memory."""
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise RomLoadError(path, e.strerror or str(e)) from e

    if len(data) > MAX_PROGRAM_SIZE:
        raise RomTooBig(len(data), PROGRAM_START + len(data))

    logger.info("Read ROM %s (%d bytes)", path.name, len(data))
    return data


def find_roms(directory: Union[str, Path] = ".") -> list:
    """List ROM files in a directory, sorted by name."""
    directory = Path(directory)
    return sorted(p for p in directory.iterdir()
                  if p.is_file() and p.suffix.lower() in ROM_EXTENSIONS)
