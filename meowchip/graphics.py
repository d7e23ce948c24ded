"""64x32 monochrome frame buffer with XOR sprite blitting."""

import numpy as np

from .constants import DISPLAY_H, DISPLAY_W, SPRITE_WIDTH


class GraphicsBuffer:
    """Display memory as a (height, width) uint8 array of 0/1 cells"""

    def __init__(self, width: int = DISPLAY_W, height: int = DISPLAY_H):
        self.width = width
        self.height = height
        self.pixels = np.zeros((height, width), dtype=np.uint8)

    def clear(self):
        self.pixels.fill(0)

    def draw(self, x: int, y: int, sprite: bytes, clip: bool = True) -> bool:
        """
        XOR an 8-pixel-wide sprite onto the buffer

        Args:
            x, y: top-left corner; wrapped onto the screen before drawing
            sprite: one byte per row, most significant bit leftmost
            clip: drop pixels past the right/bottom edge instead of wrapping

        Returns:
            True if any lit pixel was switched off
        """
        x %= self.width
        y %= self.height

        bits = np.unpackbits(
            np.array(bytearray(sprite), dtype=np.uint8).reshape(-1, 1), axis=1
        )
        rows = y + np.arange(bits.shape[0])
        cols = x + np.arange(SPRITE_WIDTH)

        if clip:
            row_mask = rows < self.height
            col_mask = cols < self.width
            bits = bits[row_mask][:, col_mask]
            rows = rows[row_mask]
            cols = cols[col_mask]
        else:
            rows %= self.height
            cols %= self.width

        target = np.ix_(rows, cols)
        region = self.pixels[target]
        collision = bool(np.any(region & bits))
        self.pixels[target] = region ^ bits
        return collision

    def view(self) -> np.ndarray:
        """Read-only view sharing memory with the live buffer."""
        v = self.pixels.view()
        v.setflags(write=False)
        return v

    def lit(self) -> int:
        return int(self.pixels.sum())
