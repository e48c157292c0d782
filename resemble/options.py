# resemble/options.py
"""
Immutable comparison configuration and its fluent builder methods.

Every builder call validates and returns a new ComparisonOptions; the receiver
is never changed, so one options value can be shared by concurrent scans.
"""

import dataclasses
import numbers
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, NamedTuple, Optional, Tuple, Union

from resemble.errors import ConfigError


class _NamedEnum(Enum):
    @classmethod
    def parse(cls, value):
        """Accept a member, its value, or its name in any case."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().lower().replace("-", "_")
            for member in cls:
                if key in (member.value, member.name.lower()):
                    return member
        raise ConfigError(f"Unknown {cls.__name__}: {value!r}")


class IgnoreMode(_NamedEnum):
    NOTHING = "nothing"
    LESS = "less"
    MORE = "more"
    ANTIALIASING = "antialiasing"
    COLORS = "colors"
    ALPHA = "alpha"


class ErrorType(_NamedEnum):
    FLAT_COLOR_ON_ACCURATE = "flat"
    MOVEMENT = "movement"
    DIFF = "diff"
    DIFF_ONLY = "diff_only"


class DimensionPolicy(_NamedEnum):
    PAD = "pad"
    RESIZE = "resize"


class Rect(NamedTuple):
    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    def contains(self, x: int, y: int) -> bool:
        return self.x <= x < self.right and self.y <= y < self.bottom

    def clipped(self, width: int, height: int) -> Optional["Rect"]:
        """Intersection with a width x height buffer, or None if empty."""
        x0, y0 = min(self.x, width), min(self.y, height)
        x1, y1 = min(self.right, width), min(self.bottom, height)
        if x1 <= x0 or y1 <= y0:
            return None
        return Rect(x0, y0, x1 - x0, y1 - y0)


DEFAULT_ERROR_COLOR = (255, 0, 255)
DEFAULT_LARGE_IMAGE_THRESHOLD = 1200


def _is_int(value) -> bool:
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


def _to_rect(value) -> Rect:
    try:
        parts = tuple(value)
    except TypeError:
        parts = ()
    if len(parts) != 4 or not all(_is_int(v) for v in parts):
        raise ConfigError(f"Ignore rectangle must be four integers (x, y, width, height), got {value!r}")
    x, y, w, h = (int(v) for v in parts)
    if w <= 0 or h <= 0:
        raise ConfigError(f"Ignore rectangle {value!r} must have positive width and height")
    if x < 0 or y < 0:
        raise ConfigError(f"Ignore rectangle {value!r} must have a non-negative origin")
    return Rect(x, y, w, h)


@dataclass(frozen=True)
class ComparisonOptions:
    ignore_mode: IgnoreMode = IgnoreMode.ANTIALIASING
    error_color: Tuple[int, int, int] = DEFAULT_ERROR_COLOR
    error_type: ErrorType = ErrorType.FLAT_COLOR_ON_ACCURATE
    transparency: float = 1.0
    ignore_rectangles: Tuple[Rect, ...] = ()
    large_image_threshold: int = DEFAULT_LARGE_IMAGE_THRESHOLD
    dimension_policy: DimensionPolicy = DimensionPolicy.PAD
    workers: int = 1

    def __post_init__(self):
        # Frozen dataclass: normalised values are written through object.__setattr__
        object.__setattr__(self, "ignore_mode", IgnoreMode.parse(self.ignore_mode))
        object.__setattr__(self, "error_type", ErrorType.parse(self.error_type))
        object.__setattr__(self, "dimension_policy", DimensionPolicy.parse(self.dimension_policy))

        try:
            color = tuple(self.error_color)
        except TypeError:
            color = ()
        if len(color) != 3 or any(not _is_int(c) or c < 0 or c > 255 for c in color):
            raise ConfigError(f"Error color must be three integers in 0..255, got {self.error_color!r}")
        object.__setattr__(self, "error_color", tuple(int(c) for c in color))

        if isinstance(self.transparency, bool) or not isinstance(self.transparency, numbers.Real):
            raise ConfigError(f"Transparency must be a number, got {self.transparency!r}")
        transparency = float(self.transparency)
        if not 0.0 <= transparency <= 1.0:
            raise ConfigError(f"Transparency must lie in [0, 1], got {self.transparency}")
        object.__setattr__(self, "transparency", transparency)

        object.__setattr__(self, "ignore_rectangles", tuple(_to_rect(r) for r in self.ignore_rectangles))

        if not _is_int(self.large_image_threshold) or self.large_image_threshold < 0:
            raise ConfigError(f"Large image threshold must be an integer >= 0, got {self.large_image_threshold!r}")
        if not _is_int(self.workers) or self.workers < 1:
            raise ConfigError(f"Workers must be an integer >= 1, got {self.workers!r}")

    # Ignore modes

    def with_ignore_mode(self, mode: Union[IgnoreMode, str]) -> "ComparisonOptions":
        return dataclasses.replace(self, ignore_mode=IgnoreMode.parse(mode))

    def ignore_nothing(self) -> "ComparisonOptions":
        return self.with_ignore_mode(IgnoreMode.NOTHING)

    def ignore_less(self) -> "ComparisonOptions":
        return self.with_ignore_mode(IgnoreMode.LESS)

    def ignore_more(self) -> "ComparisonOptions":
        return self.with_ignore_mode(IgnoreMode.MORE)

    def ignore_antialiasing(self) -> "ComparisonOptions":
        return self.with_ignore_mode(IgnoreMode.ANTIALIASING)

    def ignore_colors(self) -> "ComparisonOptions":
        return self.with_ignore_mode(IgnoreMode.COLORS)

    def ignore_alpha(self) -> "ComparisonOptions":
        return self.with_ignore_mode(IgnoreMode.ALPHA)

    # Output styling

    def with_error_color(self, red: int, green: int, blue: int) -> "ComparisonOptions":
        return dataclasses.replace(self, error_color=(red, green, blue))

    def with_error_type(self, error_type: Union[ErrorType, str]) -> "ComparisonOptions":
        return dataclasses.replace(self, error_type=error_type)

    def with_transparency(self, transparency: float) -> "ComparisonOptions":
        return dataclasses.replace(self, transparency=transparency)

    # Regions and scanning

    def with_ignore_rectangle(self, x: int, y: int, width: int, height: int) -> "ComparisonOptions":
        return dataclasses.replace(self, ignore_rectangles=self.ignore_rectangles + ((x, y, width, height),))

    def with_ignore_rectangles(self, rectangles: Iterable) -> "ComparisonOptions":
        """Replace the ignore rectangles with the given (x, y, w, h) sequence."""
        return dataclasses.replace(self, ignore_rectangles=tuple(rectangles))

    def with_large_image_threshold(self, threshold: int) -> "ComparisonOptions":
        return dataclasses.replace(self, large_image_threshold=threshold)

    def with_dimension_policy(self, policy: Union[DimensionPolicy, str]) -> "ComparisonOptions":
        return dataclasses.replace(self, dimension_policy=policy)

    def with_workers(self, workers: int) -> "ComparisonOptions":
        return dataclasses.replace(self, workers=workers)
