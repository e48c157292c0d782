import unittest
import numpy as np
from PIL import Image
from resemble.diff_engine import ComparisonEngine, compare_images
from resemble.errors import ComparisonTimeout, ConfigError, DimensionError
from resemble.options import ComparisonOptions, ErrorType, IgnoreMode, Rect
from resemble.pixel_buffer import PixelBuffer

WHITE = (255, 255, 255, 255)
BLACK = (0, 0, 0, 255)

def solid(width, height, color):
    arr = np.zeros((height, width, 4), dtype=np.uint8)
    arr[:, :] = color
    return PixelBuffer.from_array(arr)

def ramp(center):
    arr = np.array([[0, 128, 255]] * 3, dtype=np.uint8)
    arr[1, 1] = center
    return PixelBuffer.from_array(np.stack([arr, arr, arr], axis=2))

class TestComparisonEngine(unittest.TestCase):
    def setUp(self):
        self.engine = ComparisonEngine()
        rng = np.random.default_rng(5)
        self.noisy_a = PixelBuffer.from_array(rng.integers(0, 256, size=(12, 9, 4), dtype=np.uint8))
        self.noisy_b = PixelBuffer.from_array(rng.integers(0, 256, size=(12, 9, 4), dtype=np.uint8))

    def test_identical_buffers_all_modes(self):
        for mode in IgnoreMode:
            result = self.engine.compare(self.noisy_a, self.noisy_a.copy(), ComparisonOptions(ignore_mode=mode))
            self.assertEqual(result.mismatch_percent, 0.0)
            self.assertEqual(result.different_pixels, 0)
            self.assertEqual(result.matched_pixels, 9 * 12)
            self.assertTrue(result.is_match())

    def test_single_pixel_scenario(self):
        a = solid(2, 2, WHITE)
        b = solid(2, 2, WHITE)
        b.set_sample(1, 0, BLACK)
        result = self.engine.compare(a, b, ComparisonOptions().ignore_nothing())
        self.assertEqual(result.different_pixels, 1)
        self.assertEqual(result.matched_pixels, 3)
        self.assertEqual(result.ignored_pixels, 0)
        self.assertEqual(result.mismatch_percent, 25.0)
        self.assertEqual(result.diff.sample(1, 0), (255, 0, 255, 255))
        self.assertEqual(result.diff.sample(0, 0), WHITE)
        self.assertEqual(result.diff_bounds, Rect(1, 0, 1, 1))

    def test_difference_inside_ignore_rectangle(self):
        a = solid(4, 4, WHITE)
        b = solid(4, 4, WHITE)
        b.set_sample(2, 2, BLACK)
        b.set_sample(3, 3, BLACK)
        opts = ComparisonOptions().ignore_nothing().with_ignore_rectangle(2, 2, 5, 5)
        result = self.engine.compare(a, b, opts)
        self.assertEqual(result.mismatch_percent, 0.0)
        self.assertEqual(result.ignored_pixels, 4)
        self.assertEqual(result.matched_pixels, 12)
        self.assertIsNone(result.diff_bounds)

    def test_all_ignored(self):
        a = solid(2, 2, WHITE)
        b = solid(2, 2, BLACK)
        result = self.engine.compare(a, b, ComparisonOptions().with_ignore_rectangle(0, 0, 2, 2))
        self.assertEqual(result.ignored_pixels, 4)
        self.assertEqual(result.mismatch_percent, 0.0)

    def test_mismatch_excludes_ignored(self):
        a = solid(4, 1, WHITE)
        b = solid(4, 1, BLACK)
        opts = ComparisonOptions().ignore_nothing().with_ignore_rectangle(0, 0, 2, 1)
        result = self.engine.compare(a, b, opts)
        self.assertEqual(result.different_pixels, 2)
        self.assertEqual(result.mismatch_percent, 100.0)

    def test_symmetry(self):
        for mode in IgnoreMode:
            for error_type in (ErrorType.DIFF, ErrorType.DIFF_ONLY):
                opts = ComparisonOptions(ignore_mode=mode, error_type=error_type)
                forward = self.engine.compare(self.noisy_a, self.noisy_b, opts)
                backward = self.engine.compare(self.noisy_b, self.noisy_a, opts)
                self.assertEqual(forward.mismatch_percent, backward.mismatch_percent, mode)

    def test_counts_cover_output(self):
        small = PixelBuffer.from_array(self.noisy_b.array[:5, :7])
        opts = ComparisonOptions().with_ignore_rectangle(1, 1, 3, 3)
        result = self.engine.compare(self.noisy_a, small, opts)
        self.assertEqual(result.total_pixels, 9 * 12)
        self.assertEqual(result.diff.size, (9, 12))

    def test_anti_aliased_pixel_is_same(self):
        a, b = ramp(128), ramp(100)
        result = self.engine.compare(a, b, ComparisonOptions())
        self.assertEqual(result.different_pixels, 0)
        self.assertEqual(result.mismatch_percent, 0.0)
        strict = self.engine.compare(a, b, ComparisonOptions().ignore_more())
        self.assertEqual(strict.different_pixels, 1)

    def test_large_image_skips_anti_alias_detection(self):
        a, b = ramp(128), ramp(100)
        with self.assertLogs(level="WARNING"):
            result = self.engine.compare(a, b, ComparisonOptions(large_image_threshold=2))
        self.assertEqual(result.different_pixels, 1)
        unlimited = self.engine.compare(a, b, ComparisonOptions(large_image_threshold=0))
        self.assertEqual(unlimited.different_pixels, 0)

    def test_unequal_dimensions_are_padded(self):
        a = solid(2, 2, WHITE)
        b = solid(3, 2, WHITE)
        result = self.engine.compare(a, b, ComparisonOptions().ignore_nothing())
        self.assertEqual(result.diff.size, (3, 2))
        self.assertEqual(result.different_pixels, 2)
        self.assertFalse(result.is_same_dimensions)
        self.assertEqual(result.dimension_difference, (-1, 0))
        self.assertEqual(result.diff_bounds, Rect(2, 0, 1, 2))

    def test_padding_matches_transparent_pixels(self):
        a = solid(2, 2, WHITE)
        b = solid(3, 2, WHITE)
        b.set_sample(2, 0, (0, 0, 0, 0))
        b.set_sample(2, 1, (0, 0, 0, 0))
        result = self.engine.compare(a, b, ComparisonOptions().ignore_nothing())
        self.assertEqual(result.different_pixels, 0)

    def test_resize_policy(self):
        a = solid(1, 1, WHITE)
        b = solid(2, 2, WHITE)
        padded = self.engine.compare(a, b, ComparisonOptions().ignore_nothing())
        self.assertEqual(padded.different_pixels, 3)
        resized = self.engine.compare(a, b, ComparisonOptions().ignore_nothing().with_dimension_policy("resize"))
        self.assertEqual(resized.different_pixels, 0)
        self.assertFalse(resized.is_same_dimensions)

    def test_zero_sized_input(self):
        with self.assertRaises(DimensionError):
            self.engine.compare(PixelBuffer(0, 2), solid(2, 2, WHITE))
        with self.assertRaises(DimensionError):
            self.engine.compare(solid(2, 2, WHITE), PixelBuffer(2, 0))

    def test_flat_error_dims_accurate_pixels(self):
        a = solid(2, 1, WHITE)
        b = solid(2, 1, WHITE)
        b.set_sample(1, 0, BLACK)
        opts = ComparisonOptions().ignore_nothing().with_transparency(0.5).with_error_color(255, 0, 0)
        result = self.engine.compare(a, b, opts)
        self.assertEqual(result.diff.sample(0, 0), (255, 255, 255, 128))
        self.assertEqual(result.diff.sample(1, 0), (255, 0, 0, 255))

    def test_diff_error_type_copies_accurate_pixels(self):
        a = solid(2, 1, WHITE)
        b = solid(2, 1, WHITE)
        b.set_sample(1, 0, BLACK)
        for error_type in (ErrorType.DIFF, ErrorType.DIFF_ONLY):
            opts = ComparisonOptions(ignore_mode=IgnoreMode.NOTHING, error_type=error_type, transparency=0.5)
            result = self.engine.compare(a, b, opts)
            self.assertEqual(result.diff.sample(0, 0), WHITE)
            self.assertEqual(result.diff.sample(1, 0), (255, 0, 255, 255))

    def test_diff_and_diff_only_render_identically(self):
        opts = ComparisonOptions().ignore_less().with_transparency(0.4)
        diff = self.engine.compare(self.noisy_a, self.noisy_b, opts.with_error_type(ErrorType.DIFF))
        diff_only = self.engine.compare(self.noisy_a, self.noisy_b, opts.with_error_type(ErrorType.DIFF_ONLY))
        self.assertEqual(diff.diff, diff_only.diff)

    def test_movement_blends_with_second_image(self):
        a = solid(1, 1, WHITE)
        b = solid(1, 1, (100, 100, 100, 255))
        opts = ComparisonOptions().ignore_nothing().with_error_type(ErrorType.MOVEMENT).with_error_color(255, 0, 0)
        result = self.engine.compare(a, b, opts)
        self.assertEqual(result.diff.sample(0, 0), (178, 0, 0, 255))

    def test_workers_do_not_change_result(self):
        engine = ComparisonEngine(band_rows=2)
        opts = ComparisonOptions().ignore_less().with_ignore_rectangle(0, 3, 4, 4)
        single = engine.compare(self.noisy_a, self.noisy_b, opts)
        threaded = engine.compare(self.noisy_a, self.noisy_b, opts.with_workers(4))
        self.assertEqual(single.different_pixels, threaded.different_pixels)
        self.assertEqual(single.ignored_pixels, threaded.ignored_pixels)
        self.assertEqual(single.diff, threaded.diff)

    def test_invalid_band_rows(self):
        with self.assertRaises(ConfigError):
            ComparisonEngine(band_rows=0)

    def test_float_arrays_rejected(self):
        with self.assertRaises(DimensionError):
            compare_images(np.full((2, 2, 3), 0.9), np.full((2, 2, 3), 0.1))

    def test_timeout(self):
        with self.assertRaises(ComparisonTimeout):
            self.engine.compare(self.noisy_a, self.noisy_b, timeout=0)

    def test_diff_regions(self):
        a = solid(20, 20, WHITE)
        b = solid(20, 20, WHITE)
        b.set_sample(15, 2, BLACK)
        b.set_sample(3, 10, BLACK)
        result = self.engine.compare(a, b, ComparisonOptions().ignore_nothing())
        self.assertEqual(result.diff_regions, (Rect(15, 2, 1, 1), Rect(3, 10, 1, 1)))
        self.assertEqual(result.diff_bounds, Rect(3, 2, 13, 9))

    def test_result_is_read_only(self):
        result = self.engine.compare(solid(1, 1, WHITE), solid(1, 1, BLACK))
        with self.assertRaises(ValueError):
            result.diff.set_sample(0, 0, WHITE)

    def test_inputs_not_modified(self):
        a = self.noisy_a.copy()
        b = self.noisy_b.copy()
        self.engine.compare(a, b, ComparisonOptions(transparency=0.2))
        self.assertEqual(a, self.noisy_a)
        self.assertEqual(b, self.noisy_b)

    def test_is_match_threshold(self):
        a = solid(4, 1, WHITE)
        b = solid(4, 1, WHITE)
        b.set_sample(0, 0, BLACK)
        result = self.engine.compare(a, b, ComparisonOptions().ignore_nothing())
        self.assertTrue(result.is_match(25.0))
        self.assertFalse(result.is_match(24.9))

class TestCompareImages(unittest.TestCase):
    def test_pil_and_numpy_inputs(self):
        img = Image.new("RGB", (3, 3), (10, 20, 30))
        arr = np.zeros((3, 3, 3), dtype=np.uint8)
        arr[:, :] = (10, 20, 30)
        result = compare_images(img, arr)
        self.assertEqual(result.mismatch_percent, 0.0)
        self.assertEqual(result.diff.to_image().size, (3, 3))

if __name__ == "__main__":
    unittest.main()
