# resemble/result.py
"""
The value returned by a comparison.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from resemble.options import Rect
from resemble.pixel_buffer import PixelBuffer


@dataclass(frozen=True)
class ComparisonResult:
    """
    Counts, mismatch score and diff image of one comparison.

    ``mismatch_percent`` is taken over non-ignored pixels only; the three
    counts always add up to the number of pixels in ``diff``.
    """

    mismatch_percent: float
    matched_pixels: int
    ignored_pixels: int
    different_pixels: int
    diff: PixelBuffer
    is_same_dimensions: bool = True
    dimension_difference: Tuple[int, int] = (0, 0)
    diff_bounds: Optional[Rect] = None
    diff_regions: Tuple[Rect, ...] = ()
    analysis_time: float = 0.0

    @property
    def total_pixels(self) -> int:
        return self.matched_pixels + self.ignored_pixels + self.different_pixels

    def is_match(self, max_mismatch_percent: float = 0.0) -> bool:
        """True when the mismatch is at or below the given percentage."""
        return self.mismatch_percent <= max_mismatch_percent
