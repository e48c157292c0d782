# resemble/regions.py
"""
Locating differing areas in a mismatch mask with OpenCV.
"""

from typing import List, Optional

import cv2
import numpy as np

from resemble.options import Rect


def diff_bounds(mask: np.ndarray) -> Optional[Rect]:
    """Smallest rectangle covering every set pixel of a (h, w) mask."""
    ys, xs = np.nonzero(mask)
    if xs.size == 0:
        return None
    x0, y0 = int(xs.min()), int(ys.min())
    return Rect(x0, y0, int(xs.max()) - x0 + 1, int(ys.max()) - y0 + 1)


def find_diff_regions(mask: np.ndarray, merge_radius: int = 7) -> List[Rect]:
    """
    Bounding boxes of connected differing regions.

    Nearby differences are merged by a morphological closing with a
    merge_radius x merge_radius kernel before the external contours are
    taken. Boxes are sorted top-to-bottom, then left-to-right.
    """
    if not mask.any():
        return []
    binary = mask.astype(np.uint8) * 255
    if merge_radius > 1:
        # Pad with background so the closing does not grow regions into the image border
        pad = merge_radius
        binary = cv2.copyMakeBorder(binary, pad, pad, pad, pad, cv2.BORDER_CONSTANT, value=0)
        kernel = np.ones((merge_radius, merge_radius), np.uint8)
        binary = cv2.morphologyEx(binary, cv2.MORPH_CLOSE, kernel)
        binary = np.ascontiguousarray(binary[pad:-pad, pad:-pad])
    contours, _ = cv2.findContours(binary, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)
    boxes = [Rect(*cv2.boundingRect(cnt)) for cnt in contours]
    boxes.sort(key=lambda r: (r.y, r.x))
    return boxes
