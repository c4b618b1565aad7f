#!/usr/bin/env python
"""
Generate synthetic recognition output for trying the layout pipeline.

This script writes page-result JSON files with:
- A two-column article with running header and page number
- A page holding a small table
- A right-to-left (Arabic) two-column page

Usage:
    python examples/generate_samples.py
    ocr-layout --input examples/samples --output ./output --format all --debug-image
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from ocr_layout.utils.geometry import BoundingBox, union_bboxes
from ocr_layout.utils.io import save_json
from ocr_layout.utils.models import Block, Line, PageResult, Word

PAGE_WIDTH = 850
PAGE_HEIGHT = 1100


def make_line(text, x, y, char_width=9, height=18, confidence=92.0):
    """Lay out a line of words left to right from (x, y)."""
    words = []
    cursor = x
    for token in text.split():
        box = BoundingBox(cursor, y, cursor + len(token) * char_width, y + height)
        words.append(Word(text=token, confidence=confidence, bbox=box, font_size=height))
        cursor = box.x1 + char_width

    return Line(
        text=text,
        confidence=confidence,
        bbox=union_bboxes(w.bbox for w in words),
        words=words,
    )


def make_block(lines):
    return Block(
        text="\n".join(line.text for line in lines),
        confidence=sum(line.confidence for line in lines) / len(lines),
        bbox=union_bboxes(line.bbox for line in lines),
        lines=lines,
    )


def make_page(blocks, page_index):
    lines = [line for block in blocks for line in block.lines]
    return PageResult(
        text="\n\n".join(block.text for block in blocks),
        confidence=sum(b.confidence for b in blocks) / len(blocks),
        blocks=blocks,
        lines=lines,
        words=[w for line in lines for w in line.words],
        processing_time=850.0,
        language="eng",
        page_index=page_index,
        image_width=PAGE_WIDTH,
        image_height=PAGE_HEIGHT,
    )


def column_block(texts, x, y):
    return make_block([make_line(text, x, y + i * 26) for i, text in enumerate(texts)])


def create_sample_multicol_page(page_index=0):
    """Running header, two body columns and a page number."""
    left = [
        "Layout analysis recovers the",
        "structure of a scanned page from",
        "the boxes reported by the OCR",
        "engine.",
    ]
    right = [
        "Columns are separated by wide",
        "vertical gaps, and headers sit",
        "in the top tenth of the page.",
    ]
    blocks = [
        make_block([make_line("Proceedings of the Layout Workshop", 250, 40)]),
        column_block(left, 60, 200),
        column_block(left[:2], 60, 340),
        column_block(right, 470, 200),
        make_block([make_line("1", 420, 1040)]),
    ]
    return make_page(blocks, page_index)


def create_sample_table_page(page_index=1):
    """An introductory paragraph followed by a 3x3 table."""
    rows = [
        ["Item", "Qty", "Price"],
        ["Pens", "4", "2.50"],
        ["Paper", "2", "8.00"],
    ]
    cells = []
    for r, row in enumerate(rows):
        height = 24 if r == 0 else 18
        for text, x in zip(row, (100, 300, 500)):
            cells.append(make_line(text, x, 300 + r * 36, height=height))

    blocks = [
        column_block(["Quarterly supply costs are listed below."], 100, 200),
        make_block(cells),
    ]
    return make_page(blocks, page_index)


def create_sample_rtl_page(page_index=2):
    """Two Arabic columns; the right one is read first."""
    blocks = [
        column_block(["النص في العمود الأيمن"], 470, 200),
        column_block(["النص في العمود الأيسر"], 60, 200),
    ]
    return make_page(blocks, page_index)


def main():
    """Generate all sample pages."""
    output_dir = Path(__file__).parent / "samples"

    samples = {
        "multicol_page.json": create_sample_multicol_page(),
        "table_page.json": create_sample_table_page(),
        "rtl_page.json": create_sample_rtl_page(),
    }

    for filename, page in samples.items():
        path = save_json(page.to_dict(), output_dir / filename)
        print(f"Created: {path}")

    print(f"\nSample pages written to {output_dir}")


if __name__ == "__main__":
    main()
