# resemble/diff_engine.py
"""
Full-buffer comparison: size reconciliation, per-pixel classification and
diff image synthesis, scanned in row bands with numpy.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Union

import numpy as np
from PIL import Image

from resemble.antialias import AntiAliasDetector
from resemble.classifier import Classification, ColorClassifier
from resemble.errors import ComparisonTimeout, ConfigError, DimensionError
from resemble.options import ComparisonOptions, DimensionPolicy, ErrorType, IgnoreMode
from resemble.pixel_buffer import PixelBuffer
from resemble.regions import diff_bounds, find_diff_regions
from resemble.result import ComparisonResult

logging.basicConfig(level=logging.INFO)

ImageLike = Union[PixelBuffer, np.ndarray, Image.Image]


def render_diff_rows(codes: np.ndarray, rows_a: np.ndarray, rows_b: np.ndarray, options: ComparisonOptions) -> np.ndarray:
    """
    Build the diff pixels for a band of rows from its classification codes.

    Matched and ignored pixels show the first source; with the flat error type
    their alpha is scaled by ``options.transparency``. Differing pixels get the
    error colour, or for the movement type a blend of the error colour with
    the second source.

    DIFF and DIFF_ONLY render identically: neither dims nor blends, the base
    image is copied as-is and differences are painted in the flat error colour.
    """
    out = np.zeros(rows_a.shape, dtype=np.uint8)
    different = codes == Classification.DIFFERENT
    accurate = ~different

    out[accurate] = rows_a[accurate]
    if options.error_type is ErrorType.FLAT_COLOR_ON_ACCURATE and options.transparency != 1.0:
        alpha = rows_a[accurate][:, 3].astype(np.float64) * options.transparency
        out[accurate, 3] = np.rint(alpha).astype(np.uint8)

    error = np.array(options.error_color, dtype=np.float64)
    if options.error_type is ErrorType.MOVEMENT:
        target = rows_b[different].astype(np.float64)
        out[different, :3] = np.rint((target[:, :3] * error / 255.0 + error) / 2.0).astype(np.uint8)
        out[different, 3] = rows_b[different][:, 3]
    else:
        out[different, :3] = error.astype(np.uint8)
        out[different, 3] = 255
    return out


class ComparisonEngine:
    def __init__(self, band_rows: int = 64, region_merge_radius: int = 7):
        if band_rows < 1:
            raise ConfigError(f"band_rows must be >= 1, got {band_rows}")
        self.band_rows = band_rows
        self.region_merge_radius = region_merge_radius

    @staticmethod
    def _conform(buf: PixelBuffer, width: int, height: int, policy: DimensionPolicy) -> PixelBuffer:
        if buf.size == (width, height):
            return buf
        if policy is DimensionPolicy.RESIZE:
            return buf.resized(width, height)
        return buf.padded(width, height)

    def compare(
        self,
        img_a: PixelBuffer,
        img_b: PixelBuffer,
        options: Optional[ComparisonOptions] = None,
        timeout: Optional[float] = None,
    ) -> ComparisonResult:
        """
        Compare two buffers and return counts, mismatch percent and diff image.

        Raises DimensionError when either input has zero width or height and
        ComparisonTimeout when ``timeout`` seconds pass before the scan ends.
        """
        start = time.perf_counter()
        options = options or ComparisonOptions()

        for label, buf in (("first", img_a), ("second", img_b)):
            if buf.width == 0 or buf.height == 0:
                logging.error(f"Cannot compare: {label} image is {buf.width}x{buf.height}")
                raise DimensionError(f"The {label} image has zero width or height ({buf.width}x{buf.height})")

        width = max(img_a.width, img_b.width)
        height = max(img_a.height, img_b.height)
        same_dimensions = img_a.size == img_b.size
        if not same_dimensions:
            logging.warning(
                f"Image sizes differ ({img_a.width}x{img_a.height} vs {img_b.width}x{img_b.height}); "
                f"applying {options.dimension_policy.value} policy to {width}x{height}"
            )
        src_a = self._conform(img_a, width, height, options.dimension_policy)
        src_b = self._conform(img_b, width, height, options.dimension_policy)

        threshold = options.large_image_threshold
        too_large = bool(threshold) and (width > threshold or height > threshold)
        if too_large and options.ignore_mode is IgnoreMode.ANTIALIASING:
            logging.warning(f"Skipping anti-alias detection for {width}x{height} image (threshold {threshold})")
        classifier = ColorClassifier(options, detect_anti_aliasing=not too_large)
        if classifier.detect_anti_aliasing:
            detector_a, detector_b = AntiAliasDetector(src_a), AntiAliasDetector(src_b)
        else:
            detector_a = detector_b = None

        ignored = classifier.ignore_mask(width, height)
        diff = PixelBuffer.blank(width, height)
        codes = np.empty((height, width), dtype=np.uint8)
        deadline = start + timeout if timeout is not None else None

        def scan(top):
            if deadline is not None and time.perf_counter() > deadline:
                raise ComparisonTimeout(f"Comparison exceeded {timeout}s before row {top}")
            bottom = min(top + self.band_rows, height)
            rows_a = src_a.array[top:bottom]
            rows_b = src_b.array[top:bottom]
            band = classifier.classify_rows(rows_a, rows_b, ignored[top:bottom], top, detector_a, detector_b)
            # Each band owns rows [top, bottom) of the outputs
            codes[top:bottom] = band
            diff.array[top:bottom] = render_diff_rows(band, rows_a, rows_b, options)
            return np.bincount(band.ravel(), minlength=len(Classification))

        tops = range(0, height, self.band_rows)
        if options.workers > 1 and len(tops) > 1:
            with ThreadPoolExecutor(max_workers=options.workers) as pool:
                counts = sum(pool.map(scan, tops))
        else:
            counts = sum(scan(top) for top in tops)

        matched = int(counts[Classification.SAME])
        different = int(counts[Classification.DIFFERENT])
        ignored_count = int(counts[Classification.IGNORED])
        compared = matched + different
        mismatch = 100.0 * different / compared if compared else 0.0

        mismatch_mask = codes == Classification.DIFFERENT
        diff.array.flags.writeable = False
        elapsed = time.perf_counter() - start
        logging.info(
            f"Compared {width}x{height} ({options.ignore_mode.value}): "
            f"{different} different, {ignored_count} ignored, {mismatch:.2f}% mismatch in {elapsed:.3f}s"
        )
        return ComparisonResult(
            mismatch_percent=mismatch,
            matched_pixels=matched,
            ignored_pixels=ignored_count,
            different_pixels=different,
            diff=diff,
            is_same_dimensions=same_dimensions,
            dimension_difference=(img_a.width - img_b.width, img_a.height - img_b.height),
            diff_bounds=diff_bounds(mismatch_mask),
            diff_regions=tuple(find_diff_regions(mismatch_mask, self.region_merge_radius)),
            analysis_time=elapsed,
        )


def _as_buffer(image: ImageLike) -> PixelBuffer:
    if isinstance(image, PixelBuffer):
        return image
    if isinstance(image, Image.Image):
        return PixelBuffer.from_image(image)
    return PixelBuffer.from_array(np.asarray(image))


def compare_images(
    img_a: ImageLike,
    img_b: ImageLike,
    options: Optional[ComparisonOptions] = None,
    timeout: Optional[float] = None,
) -> ComparisonResult:
    """Compare two PixelBuffers, RGB/RGBA numpy arrays or PIL images."""
    return ComparisonEngine().compare(_as_buffer(img_a), _as_buffer(img_b), options, timeout)
