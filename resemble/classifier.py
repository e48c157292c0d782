# resemble/classifier.py
"""
Per-pixel classification into Same / Different / Ignored.

Each ignore mode maps to exactly one rule function in ``_RULES``. The rules
are written against numpy arrays of shape (..., 4), so the same code judges
a single pair of samples and a whole row band of two buffers.
"""

from enum import IntEnum
from typing import NamedTuple, Optional, Sequence

import numpy as np

from resemble.antialias import AntiAliasDetector, is_anti_aliased
from resemble.options import ComparisonOptions, IgnoreMode
from resemble.pixel_buffer import PixelBuffer


class Classification(IntEnum):
    SAME = 0
    DIFFERENT = 1
    IGNORED = 2


class Tolerance(NamedTuple):
    # Largest RGB colour distance still treated as equal
    color_distance: float
    # Largest alpha difference still treated as equal; None ignores alpha
    alpha: Optional[int]


LESS_TOLERANCE = Tolerance(color_distance=24.0, alpha=16)
MORE_TOLERANCE = Tolerance(color_distance=4.0, alpha=4)

TOLERANCES = {
    IgnoreMode.NOTHING: Tolerance(color_distance=0.0, alpha=0),
    IgnoreMode.LESS: LESS_TOLERANCE,
    IgnoreMode.MORE: MORE_TOLERANCE,
    IgnoreMode.ANTIALIASING: MORE_TOLERANCE,
    IgnoreMode.COLORS: Tolerance(color_distance=MORE_TOLERANCE.color_distance, alpha=None),
    IgnoreMode.ALPHA: MORE_TOLERANCE,
}


def color_distance(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Euclidean distance between the RGB channels of two int arrays of shape (..., 4)."""
    delta = a[..., :3] - b[..., :3]
    return np.sqrt(np.sum(delta * delta, axis=-1))


def _rgb_exceeds(a, b, tolerance):
    return color_distance(a, b) > tolerance.color_distance


def _alpha_exceeds(a, b, tolerance):
    return np.abs(a[..., 3] - b[..., 3]) > tolerance.alpha


def _exact_rule(a, b, tolerance):
    return np.any(a != b, axis=-1)


def _threshold_rule(a, b, tolerance):
    return _rgb_exceeds(a, b, tolerance) | _alpha_exceeds(a, b, tolerance)


def _rgb_only_rule(a, b, tolerance):
    return _rgb_exceeds(a, b, tolerance)


def _transparent_rule(a, b, tolerance):
    both_clear = (a[..., 3] == 0) & (b[..., 3] == 0)
    return _threshold_rule(a, b, tolerance) & ~both_clear


_RULES = {
    IgnoreMode.NOTHING: _exact_rule,
    IgnoreMode.LESS: _threshold_rule,
    IgnoreMode.MORE: _threshold_rule,
    # Strict threshold first; anti-alias suppression is applied by the classifier
    IgnoreMode.ANTIALIASING: _threshold_rule,
    IgnoreMode.COLORS: _rgb_only_rule,
    IgnoreMode.ALPHA: _transparent_rule,
}


class ColorClassifier:
    def __init__(self, options: ComparisonOptions, detect_anti_aliasing: bool = True):
        self.options = options
        self.tolerance = TOLERANCES[options.ignore_mode]
        self._rule = _RULES[options.ignore_mode]
        self.detect_anti_aliasing = detect_anti_aliasing and options.ignore_mode is IgnoreMode.ANTIALIASING

    def is_ignored(self, x: int, y: int) -> bool:
        return any(rect.contains(x, y) for rect in self.options.ignore_rectangles)

    def ignore_mask(self, width: int, height: int) -> np.ndarray:
        """Boolean (height, width) mask of pixels covered by any ignore rectangle."""
        mask = np.zeros((height, width), dtype=bool)
        for rect in self.options.ignore_rectangles:
            clipped = rect.clipped(width, height)
            if clipped is not None:
                mask[clipped.y:clipped.bottom, clipped.x:clipped.right] = True
        return mask

    def classify(
        self,
        sample_a: Sequence[int],
        sample_b: Sequence[int],
        x: int,
        y: int,
        buffer_a: Optional[PixelBuffer] = None,
        buffer_b: Optional[PixelBuffer] = None,
    ) -> Classification:
        """
        Classify one pair of samples taken from (x, y) of both sources.

        The source buffers are only consulted for anti-alias detection; when
        they are not given the strict threshold result stands.
        """
        if self.is_ignored(x, y):
            return Classification.IGNORED
        a = np.asarray(sample_a, dtype=np.int32)
        b = np.asarray(sample_b, dtype=np.int32)
        if not self._rule(a, b, self.tolerance):
            return Classification.SAME
        if self.detect_anti_aliasing and buffer_a is not None and buffer_b is not None:
            if is_anti_aliased(buffer_a, x, y) or is_anti_aliased(buffer_b, x, y):
                return Classification.SAME
        return Classification.DIFFERENT

    def classify_rows(
        self,
        rows_a: np.ndarray,
        rows_b: np.ndarray,
        ignored: np.ndarray,
        top: int = 0,
        detector_a: Optional[AntiAliasDetector] = None,
        detector_b: Optional[AntiAliasDetector] = None,
    ) -> np.ndarray:
        """
        Classify a band of rows starting at ``top``. Returns a uint8 array of
        Classification codes with the band's (rows, width) shape.
        """
        bottom = top + rows_a.shape[0]
        differs = self._rule(rows_a.astype(np.int32), rows_b.astype(np.int32), self.tolerance)
        differs &= ~ignored
        if self.detect_anti_aliasing and detector_a is not None and detector_b is not None and differs.any():
            differs &= ~(detector_a.mask(top, bottom) | detector_b.mask(top, bottom))

        codes = np.full(differs.shape, Classification.SAME, dtype=np.uint8)
        codes[differs] = Classification.DIFFERENT
        codes[ignored] = Classification.IGNORED
        return codes
