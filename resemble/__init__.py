# resemble/__init__.py
"""
Pixel-level image comparison with anti-aliasing tolerance.
"""

from resemble.classifier import Classification, ColorClassifier
from resemble.diff_engine import ComparisonEngine, compare_images
from resemble.errors import (
    BoundsError,
    ComparisonTimeout,
    ConfigError,
    DimensionError,
    ResembleError,
)
from resemble.options import (
    ComparisonOptions,
    DimensionPolicy,
    ErrorType,
    IgnoreMode,
    Rect,
)
from resemble.pixel_buffer import PixelBuffer
from resemble.result import ComparisonResult

__all__ = [
    "BoundsError",
    "Classification",
    "ColorClassifier",
    "ComparisonEngine",
    "ComparisonOptions",
    "ComparisonResult",
    "ComparisonTimeout",
    "ConfigError",
    "DimensionError",
    "DimensionPolicy",
    "ErrorType",
    "IgnoreMode",
    "PixelBuffer",
    "Rect",
    "ResembleError",
    "compare_images",
]
