# resemble/pixel_buffer.py
"""
RGBA pixel storage with bounds-checked access, plus the padding and
resampling helpers used to bring two buffers to a common size.
"""

from typing import Iterable, Tuple, Union

import cv2
import numpy as np
from PIL import Image

from resemble.errors import BoundsError, DimensionError

Color = Tuple[int, int, int, int]


def _check_samples(arr: np.ndarray):
    """Reject non-integer sample arrays and values outside 0..255."""
    if arr.size == 0:
        return
    if arr.dtype.kind not in "iu":
        raise DimensionError(f"Samples must be integers, got dtype {arr.dtype}")
    if arr.dtype != np.uint8 and (arr.min() < 0 or arr.max() > 255):
        raise DimensionError("Sample values must lie in 0..255")


class PixelBuffer:
    """
    A width x height grid of 8-bit RGBA samples stored row-major.

    The samples live in a numpy array of shape (height, width, 4) so that the
    engine can scan whole rows at once; ``sample``/``set_sample`` give the
    per-coordinate view.
    """

    def __init__(self, width: int, height: int, samples: Union[bytes, Iterable[int], np.ndarray, None] = None):
        if width < 0 or height < 0:
            raise DimensionError(f"Buffer dimensions must be non-negative, got {width}x{height}")
        if samples is None:
            data = np.zeros((height, width, 4), dtype=np.uint8)
        else:
            if isinstance(samples, (bytes, bytearray)):
                flat = np.frombuffer(samples, dtype=np.uint8)
            else:
                flat = np.asarray(samples)
            if flat.size != width * height * 4:
                raise DimensionError(
                    f"Expected {width * height * 4} samples for a {width}x{height} buffer, got {flat.size}"
                )
            _check_samples(flat)
            data = flat.astype(np.uint8).reshape((height, width, 4)).copy()
        self._data = data

    @classmethod
    def from_array(cls, arr: np.ndarray) -> "PixelBuffer":
        """
        Wrap an (h, w, 4) RGBA or (h, w, 3) RGB uint8 array. RGB input gets an
        opaque alpha channel. The array is copied.
        """
        arr = np.asarray(arr)
        if arr.ndim != 3 or arr.shape[2] not in (3, 4):
            raise DimensionError(f"Unsupported array shape for a pixel buffer: {arr.shape}")
        _check_samples(arr)
        height, width = arr.shape[:2]
        if arr.shape[2] == 3:
            alpha = np.full((height, width, 1), 255, dtype=np.uint8)
            arr = np.concatenate([arr.astype(np.uint8), alpha], axis=2)
        buf = cls(width, height)
        buf._data[...] = arr
        return buf

    @classmethod
    def from_image(cls, image: Image.Image) -> "PixelBuffer":
        # Any PIL mode (L, RGB, P, ...) is normalised to RGBA first
        return cls.from_array(np.array(image.convert("RGBA"), dtype=np.uint8))

    @classmethod
    def blank(cls, width: int, height: int) -> "PixelBuffer":
        """A fully transparent black buffer."""
        return cls(width, height)

    @property
    def width(self) -> int:
        return self._data.shape[1]

    @property
    def height(self) -> int:
        return self._data.shape[0]

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    @property
    def array(self) -> np.ndarray:
        """The backing (height, width, 4) array. Shares memory with the buffer."""
        return self._data

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def sample(self, x: int, y: int) -> Color:
        if not self.in_bounds(x, y):
            raise BoundsError(f"({x}, {y}) is outside a {self.width}x{self.height} buffer")
        r, g, b, a = self._data[y, x]
        return int(r), int(g), int(b), int(a)

    def set_sample(self, x: int, y: int, color: Iterable[int]):
        if not self.in_bounds(x, y):
            raise BoundsError(f"({x}, {y}) is outside a {self.width}x{self.height} buffer")
        color = tuple(color)
        if len(color) == 3:
            color = color + (255,)
        if len(color) != 4 or any(c < 0 or c > 255 for c in color):
            raise DimensionError(f"Invalid RGBA color: {color}")
        self._data[y, x] = color

    def samples(self) -> bytes:
        """Row-major R,G,B,A bytes, ``width * height * 4`` long."""
        return self._data.tobytes()

    def copy(self) -> "PixelBuffer":
        return PixelBuffer.from_array(self._data)

    def padded(self, width: int, height: int) -> "PixelBuffer":
        """
        Return a copy grown to width x height. New pixels are transparent black
        and the original content stays anchored at the top-left corner.
        """
        if width < self.width or height < self.height:
            raise DimensionError(
                f"Cannot pad a {self.width}x{self.height} buffer down to {width}x{height}"
            )
        out = PixelBuffer.blank(width, height)
        out._data[: self.height, : self.width] = self._data
        return out

    def resized(self, width: int, height: int) -> "PixelBuffer":
        """Nearest-neighbour resample to width x height."""
        if width <= 0 or height <= 0:
            raise DimensionError(f"Cannot resize to {width}x{height}")
        if (width, height) == self.size:
            return self.copy()
        scaled = cv2.resize(self._data, (width, height), interpolation=cv2.INTER_NEAREST)
        return PixelBuffer.from_array(scaled)

    def to_image(self) -> Image.Image:
        return Image.fromarray(np.array(self._data))

    def __eq__(self, other):
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return self.size == other.size and np.array_equal(self._data, other._data)

    def __repr__(self):
        return f"PixelBuffer({self.width}x{self.height})"
