"""
Debug visualization of a layout analysis.

Draws headers, footers, columns and tables over the page image (or a
blank canvas) and labels each region with its reading-order position.
"""

import logging
from pathlib import Path
from typing import Optional, Tuple, Union

import cv2
import numpy as np

from .models import LayoutAnalysis, RegionType

logger = logging.getLogger(__name__)

# BGR
REGION_COLORS = {
    RegionType.HEADER: (0, 160, 0),
    RegionType.FOOTER: (0, 160, 160),
    RegionType.COLUMN: (255, 0, 0),
    RegionType.TABLE: (0, 0, 255),
    RegionType.IMAGE: (255, 0, 255),
    RegionType.PARAGRAPH: (128, 128, 128),
}
DROPPED_COLOR = (0, 128, 255)


def draw_layout_debug(
    analysis: LayoutAnalysis,
    image: Optional[np.ndarray] = None,
    page_size: Optional[Tuple[int, int]] = None
) -> np.ndarray:
    """
    Draw detected regions.

    Args:
        analysis: Layout of the page
        image: Page image (BGR or grayscale); a white canvas is used if None
        page_size: (width, height) of the blank canvas when no image is given

    Returns:
        BGR image with the overlay
    """
    if image is None:
        width, height = page_size or _extent(analysis)
        debug_img = np.full((max(height, 1), max(width, 1), 3), 255, dtype=np.uint8)
    elif len(image.shape) == 2:
        debug_img = cv2.cvtColor(image, cv2.COLOR_GRAY2BGR)
    else:
        debug_img = image.copy()

    for region in analysis.reading_order:
        color = REGION_COLORS.get(region.type, (128, 128, 128))
        x0, y0, x1, y1 = (int(round(v)) for v in region.bbox.to_tuple())
        cv2.rectangle(debug_img, (x0, y0), (x1, y1), color, 2)
        cv2.putText(
            debug_img,
            f"{region.order}:{region.type.value}",
            (x0, max(y0 - 5, 10)),
            cv2.FONT_HERSHEY_SIMPLEX,
            0.5,
            color,
            1
        )

    for block in analysis.dropped_blocks:
        x0, y0, x1, y1 = (int(round(v)) for v in block.bbox.to_tuple())
        cv2.rectangle(debug_img, (x0, y0), (x1, y1), DROPPED_COLOR, 1)

    return debug_img


def save_layout_debug(
    analysis: LayoutAnalysis,
    output_path: Union[str, Path],
    image: Optional[np.ndarray] = None,
    page_size: Optional[Tuple[int, int]] = None
) -> Path:
    """Draw the overlay and write it as an image file."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    debug_img = draw_layout_debug(analysis, image=image, page_size=page_size)
    if not cv2.imwrite(str(output_path), debug_img):
        raise IOError(f"Failed to write debug image: {output_path}")

    logger.debug(f"Saved debug image: {output_path}")
    return output_path


def _extent(analysis: LayoutAnalysis) -> Tuple[int, int]:
    boxes = [r.bbox for r in analysis.reading_order] + [b.bbox for b in analysis.dropped_blocks]
    if not boxes:
        return (1, 1)
    return (
        int(max(b.x1 for b in boxes)) + 10,
        int(max(b.y1 for b in boxes)) + 10,
    )
