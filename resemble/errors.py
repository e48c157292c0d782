# resemble/errors.py
"""
Exception hierarchy raised by option validation and the comparison engine.
"""


class ResembleError(Exception):
    """Base class for every error raised by this package."""


class ConfigError(ResembleError, ValueError):
    """An option value is invalid. Raised when the options are built."""


class DimensionError(ResembleError, ValueError):
    """An input buffer is degenerate (zero width/height) or malformed."""


class BoundsError(ResembleError, IndexError):
    """A coordinate lies outside a PixelBuffer."""


class ComparisonTimeout(ResembleError, TimeoutError):
    """The comparison deadline elapsed before the scan finished."""
