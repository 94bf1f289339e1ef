"""gridmarker: find the 3×3 coloured-patch marker in photos.

Quick start::

    from gridmarker import process_image

    item = process_image(Path("photo.jpg"))
    if item.passed:
        print(f"marker found, coverage {item.result.percentage}%")

For pre-segmented patches::

    from gridmarker import detect_marker

    result = detect_marker(patches, image_size=(640, 480))
"""

from gridmarker.constants import FailureReason
from gridmarker.params import GridParams, SegmentationParams, load_params
from gridmarker.pipeline import (
    ImageResult,
    MarkerResult,
    detect_marker,
    format_debug_line,
    format_result_line,
    process_image,
    scan_images,
)
from gridmarker.segment import Patch, segment_color_patches

__all__ = [
    # Pipeline
    "detect_marker",
    "process_image",
    "scan_images",
    "MarkerResult",
    "ImageResult",
    "format_result_line",
    "format_debug_line",
    # Segmentation
    "Patch",
    "segment_color_patches",
    # Configuration
    "GridParams",
    "SegmentationParams",
    "load_params",
    "FailureReason",
]
