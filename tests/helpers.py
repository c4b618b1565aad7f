"""Builders for synthetic recognition output used across the tests."""

import sys
from pathlib import Path
from typing import List, Optional, Tuple

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from ocr_layout.utils.geometry import BoundingBox, union_bboxes
from ocr_layout.utils.models import Baseline, Block, Line, PageResult, Word

Box = Tuple[float, float, float, float]


def make_word(text: str, box: Box, confidence: float = 90.0) -> Word:
    return Word(text=text, confidence=confidence, bbox=BoundingBox(*box))


def make_line(
    text: str,
    box: Box,
    confidence: float = 90.0,
    words: Optional[List[Word]] = None,
    baseline: Optional[Baseline] = None
) -> Line:
    """A line; without explicit words it holds one word covering the line."""
    if words is None:
        words = [make_word(text, box, confidence)]
    return Line(
        text=text,
        confidence=confidence,
        bbox=BoundingBox(*box),
        words=words,
        baseline=baseline,
    )


def make_block(text: str, box: Box, lines: Optional[List[Line]] = None) -> Block:
    if lines is None:
        lines = [make_line(text, box)]
    return Block(text=text, confidence=90.0, bbox=BoundingBox(*box), lines=lines)


def block_from_lines(lines: List[Line]) -> Block:
    return Block(
        text="\n".join(line.text for line in lines),
        confidence=90.0,
        bbox=union_bboxes(line.bbox for line in lines),
        lines=lines,
    )


def make_page(
    blocks: Optional[List[Block]] = None,
    text: str = "Sample text",
    width: Optional[int] = 800,
    height: Optional[int] = 1000,
    page_index: int = 0,
    lines: Optional[List[Line]] = None,
    words: Optional[List[Word]] = None
) -> PageResult:
    """A page whose flattened lines and words default to those of its blocks."""
    blocks = blocks or []
    if lines is None:
        lines = [line for block in blocks for line in block.lines]
    if words is None:
        words = [word for line in lines for word in line.words]
    return PageResult(
        text=text,
        confidence=95.0,
        blocks=blocks,
        lines=lines,
        words=words,
        processing_time=1000.0,
        language="eng",
        page_index=page_index,
        image_width=width,
        image_height=height,
    )


def grid_lines(
    rows: List[List[str]],
    x_positions: List[float],
    top: float = 300,
    row_height: float = 20,
    row_gap: float = 10,
    cell_width: float = 80,
    heights: Optional[List[float]] = None
) -> List[Line]:
    """Lines laid out as a table: one line per cell, rows stacked downward."""
    lines = []
    y = top
    for r, row in enumerate(rows):
        h = heights[r] if heights else row_height
        for text, x in zip(row, x_positions):
            lines.append(make_line(text, (x, y, x + cell_width, y + h)))
        y += h + row_gap
    return lines
