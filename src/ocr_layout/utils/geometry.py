"""
Geometry primitives shared by the layout detectors.

Provides:
- Immutable page-space bounding boxes
- Union and overlap helpers
- 1-D position clustering used for column and table boundaries

All coordinates are page pixels, origin top-left, y growing downward.
"""

from dataclasses import dataclass
from typing import Iterable, List, Tuple, Dict, Any

import numpy as np


# ============================================================================
# Bounding Box
# ============================================================================

@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned rectangle with corners (x0, y0) and (x1, y1)."""
    x0: float
    y0: float
    x1: float
    y1: float

    def __post_init__(self):
        if self.x1 < self.x0 or self.y1 < self.y0:
            raise ValueError(
                f"Invalid bounding box ({self.x0}, {self.y0}, {self.x1}, {self.y1})"
            )

    @property
    def width(self) -> float:
        return self.x1 - self.x0

    @property
    def height(self) -> float:
        return self.y1 - self.y0

    @property
    def vertical_center(self) -> float:
        return (self.y0 + self.y1) / 2

    def to_tuple(self) -> Tuple[float, float, float, float]:
        return (self.x0, self.y0, self.x1, self.y1)

    @classmethod
    def empty(cls) -> 'BoundingBox':
        return cls(0, 0, 0, 0)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "x0": self.x0,
            "y0": self.y0,
            "x1": self.x1,
            "y1": self.y1,
            "width": self.width,
            "height": self.height,
        }


# ============================================================================
# Box Arithmetic
# ============================================================================

def union_bboxes(boxes: Iterable[BoundingBox]) -> BoundingBox:
    """
    Smallest box containing every input box.

    An empty input yields the zero box at the origin.
    """
    boxes = list(boxes)
    if not boxes:
        return BoundingBox.empty()

    return BoundingBox(
        min(b.x0 for b in boxes),
        min(b.y0 for b in boxes),
        max(b.x1 for b in boxes),
        max(b.y1 for b in boxes),
    )


def vertical_overlap(a: BoundingBox, b: BoundingBox) -> float:
    """Signed overlap of the vertical extents (negative when separated)."""
    return min(a.y1, b.y1) - max(a.y0, b.y0)


def horizontal_overlap(a: BoundingBox, b: BoundingBox) -> float:
    """Signed overlap of the horizontal extents (negative when separated)."""
    return min(a.x1, b.x1) - max(a.x0, b.x0)


# ============================================================================
# Clustering
# ============================================================================

def cluster_positions(positions: Iterable[float], threshold: float) -> List[float]:
    """
    Cluster 1-D positions and return the first member of each cluster.

    Distinct positions are visited in ascending order; a new cluster starts
    whenever a position is more than ``threshold`` past the previous one.

    Args:
        positions: Coordinates to cluster (duplicates allowed)
        threshold: Maximum step between neighbours of the same cluster

    Returns:
        Sorted cluster anchors
    """
    values = np.unique(np.asarray(list(positions), dtype=float))
    if values.size == 0:
        return []

    steps = np.diff(values)
    starts = np.concatenate(([True], steps > threshold))
    return [float(v) for v in values[starts]]
