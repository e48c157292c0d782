# resemble/antialias.py
"""
Anti-aliasing detection from a pixel's 3x3 neighbourhood in its own image.

A smoothed edge pixel sits between its neighbours in brightness: at least one
neighbour is strictly brighter and at least one strictly darker. A pixel with
several neighbours of exactly its colour belongs to a flat fill or a hard edge
and is not treated as anti-aliased.
"""

import numpy as np

from resemble.pixel_buffer import PixelBuffer

# Minimum number of strictly brighter and strictly darker neighbours
MIN_BRIGHTER_NEIGHBOURS = 1
MIN_DARKER_NEIGHBOURS = 1
# This many identical-colour neighbours rules anti-aliasing out
MAX_IDENTICAL_NEIGHBOURS = 3

_OFFSETS = [(dx, dy) for dy in (-1, 0, 1) for dx in (-1, 0, 1) if (dx, dy) != (0, 0)]


def brightness(r, g, b):
    """Luma-style brightness; works on scalars and numpy arrays alike."""
    return 0.3 * r + 0.59 * g + 0.11 * b


def _verdict(brighter, darker, identical):
    return (brighter >= MIN_BRIGHTER_NEIGHBOURS) & (darker >= MIN_DARKER_NEIGHBOURS) & (
        identical < MAX_IDENTICAL_NEIGHBOURS
    )


def is_anti_aliased(buffer: PixelBuffer, x: int, y: int) -> bool:
    """
    Decide whether the pixel at (x, y) looks like an anti-aliasing artifact.

    Neighbour coordinates are clamped to the buffer, so corner and edge pixels
    are judged on fewer neighbours instead of reading outside the image.
    """
    r, g, b, _ = buffer.sample(x, y)
    center = brightness(r, g, b)
    left, right = max(x - 1, 0), min(x + 1, buffer.width - 1)
    top, bottom = max(y - 1, 0), min(y + 1, buffer.height - 1)

    brighter = darker = identical = 0
    for ny in range(top, bottom + 1):
        for nx in range(left, right + 1):
            if nx == x and ny == y:
                continue
            nr, ng, nb, _ = buffer.sample(nx, ny)
            value = brightness(nr, ng, nb)
            if value > center:
                brighter += 1
            elif value < center:
                darker += 1
            if (nr, ng, nb) == (r, g, b):
                identical += 1
    return bool(_verdict(brighter, darker, identical))


class AntiAliasDetector:
    """
    Vectorised detector bound to one buffer for the length of a comparison.

    The brightness plane and a one-pixel sentinel border are computed once;
    ``mask`` then evaluates any row band without further copies. Sentinels
    (NaN brightness, -1 colour) never compare as brighter, darker or equal, so
    edge pixels just see fewer neighbours.
    """

    def __init__(self, buffer: PixelBuffer):
        self.buffer = buffer
        arr = buffer.array
        h, w = arr.shape[:2]
        rgb = arr[..., :3].astype(np.int16)

        self._rgb = rgb
        self._brightness = brightness(rgb[..., 0], rgb[..., 1], rgb[..., 2])
        self._padded_brightness = np.full((h + 2, w + 2), np.nan)
        self._padded_brightness[1:-1, 1:-1] = self._brightness
        self._padded_rgb = np.full((h + 2, w + 2, 3), -1, dtype=np.int16)
        self._padded_rgb[1:-1, 1:-1] = rgb

    def is_anti_aliased(self, x: int, y: int) -> bool:
        return is_anti_aliased(self.buffer, x, y)

    def mask(self, top: int = 0, bottom: int = None) -> np.ndarray:
        """Boolean (bottom - top, width) array of anti-aliased pixels in rows [top, bottom)."""
        w = self.buffer.width
        bottom = self.buffer.height if bottom is None else bottom
        center = self._brightness[top:bottom]
        center_rgb = self._rgb[top:bottom]

        brighter = np.zeros(center.shape, dtype=np.int8)
        darker = np.zeros(center.shape, dtype=np.int8)
        identical = np.zeros(center.shape, dtype=np.int8)
        with np.errstate(invalid="ignore"):
            for dx, dy in _OFFSETS:
                rows = slice(top + 1 + dy, bottom + 1 + dy)
                cols = slice(1 + dx, w + 1 + dx)
                neighbour = self._padded_brightness[rows, cols]
                brighter += neighbour > center
                darker += neighbour < center
                identical += np.all(self._padded_rgb[rows, cols] == center_rgb, axis=2)
        return _verdict(brighter, darker, identical)
