"""
Data model for recognition output and layout analysis.

Recognition side (input, produced by an external OCR engine):
- Word, Line, Block, PageResult

Layout side (output of the analyzer):
- Column, TableCell, Table, TextRegion, ImageRegion, Region, LayoutAnalysis

Every object is built fresh for one page and treated as read-only once
the analyzer returns it. ``to_dict`` produces the camelCase wire form used
by the JSON exporter; ``PageResult.from_dict`` validates and reads the same
form back.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Dict, Any

from .geometry import BoundingBox


# ============================================================================
# Enumerations
# ============================================================================

class BlockType(Enum):
    """Advisory block tag supplied by the recognizer."""
    TEXT = "text"
    TABLE = "table"
    IMAGE = "image"
    HORIZONTAL_LINE = "horizontal_line"
    VERTICAL_LINE = "vertical_line"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Optional[str]) -> 'BlockType':
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


class ScriptDirection(Enum):
    """Dominant reading direction of a page."""
    LTR = "ltr"
    RTL = "rtl"
    TTB = "ttb"


class RegionType(Enum):
    """Kinds of regions that take part in the reading order."""
    COLUMN = "column"
    TABLE = "table"
    IMAGE = "image"
    HEADER = "header"
    FOOTER = "footer"
    PARAGRAPH = "paragraph"


class TextRegionType(Enum):
    HEADER = "header"
    FOOTER = "footer"
    PARAGRAPH = "paragraph"
    HEADING = "heading"
    CAPTION = "caption"


# ============================================================================
# Recognition Output
# ============================================================================

@dataclass
class Baseline:
    """Text baseline segment from (x0, y0) to (x1, y1)."""
    x0: float
    y0: float
    x1: float
    y1: float

    @property
    def slope(self) -> float:
        return (self.y1 - self.y0) / max(1, self.x1 - self.x0)

    def to_dict(self) -> Dict[str, Any]:
        return {"x0": self.x0, "y0": self.y0, "x1": self.x1, "y1": self.y1}


@dataclass
class Word:
    """A single recognized word."""
    text: str
    confidence: float  # 0-100
    bbox: BoundingBox
    baseline: Optional[Baseline] = None
    font_size: float = 0.0
    font_name: str = ""
    is_bold: bool = False
    is_italic: bool = False
    is_underlined: bool = False
    is_monospace: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "confidence": self.confidence,
            "bbox": self.bbox.to_dict(),
            "baseline": self.baseline.to_dict() if self.baseline else None,
            "fontSize": self.font_size,
            "fontName": self.font_name,
            "isBold": self.is_bold,
            "isItalic": self.is_italic,
            "isUnderlined": self.is_underlined,
            "isMonospace": self.is_monospace,
        }


@dataclass
class Line:
    """A line of words in recognition order."""
    text: str
    confidence: float
    bbox: BoundingBox
    words: List[Word] = field(default_factory=list)
    baseline: Optional[Baseline] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "confidence": self.confidence,
            "bbox": self.bbox.to_dict(),
            "words": [w.to_dict() for w in self.words],
            "baseline": self.baseline.to_dict() if self.baseline else None,
        }


@dataclass
class Block:
    """A block of lines (paragraph, table area, image area...)."""
    text: str
    confidence: float
    bbox: BoundingBox
    lines: List[Line] = field(default_factory=list)
    block_type: BlockType = BlockType.TEXT

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "confidence": self.confidence,
            "bbox": self.bbox.to_dict(),
            "lines": [line.to_dict() for line in self.lines],
            "blockType": self.block_type.value,
        }


@dataclass
class PageResult:
    """
    Recognition output for one page.

    ``lines`` and ``words`` are flattened views of ``blocks``; the table and
    script detectors read them directly.
    """
    text: str
    confidence: float
    blocks: List[Block] = field(default_factory=list)
    lines: List[Line] = field(default_factory=list)
    words: List[Word] = field(default_factory=list)
    processing_time: float = 0.0
    language: str = ""
    page_index: int = 0
    image_width: Optional[int] = None
    image_height: Optional[int] = None

    @property
    def has_dimensions(self) -> bool:
        return self.image_width is not None and self.image_height is not None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "text": self.text,
            "confidence": self.confidence,
            "blocks": [b.to_dict() for b in self.blocks],
            "lines": [line.to_dict() for line in self.lines],
            "words": [w.to_dict() for w in self.words],
            "processingTime": self.processing_time,
            "language": self.language,
            "pageIndex": self.page_index,
        }
        if self.has_dimensions:
            data["imageDimensions"] = {
                "width": self.image_width,
                "height": self.image_height,
            }
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PageResult':
        """
        Build a page result from its JSON form.

        Missing ``lines`` / ``words`` arrays are derived by flattening the
        blocks.

        Raises:
            ValueError: If the data does not match the page-result schema
        """
        from pydantic import ValidationError

        from .schema import PageSchema

        try:
            return PageSchema.model_validate(data).to_model()
        except ValidationError as e:
            raise ValueError(f"Malformed page result: {e}") from e


# ============================================================================
# Layout Output
# ============================================================================

@dataclass
class Column:
    """A vertical band of body blocks."""
    id: str
    bbox: BoundingBox
    blocks: List[Block]
    order: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "bbox": self.bbox.to_dict(),
            "blockCount": len(self.blocks),
            "order": self.order,
        }


@dataclass
class TableCell:
    row: int
    col: int
    bbox: BoundingBox
    text: str
    confidence: float
    row_span: int = 1
    col_span: int = 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "row": self.row,
            "col": self.col,
            "rowSpan": self.row_span,
            "colSpan": self.col_span,
            "bbox": self.bbox.to_dict(),
            "text": self.text,
            "confidence": self.confidence,
        }


@dataclass
class Table:
    """A grid of cells re-derived from line geometry."""
    id: str
    bbox: BoundingBox
    rows: int
    cols: int
    cells: List[TableCell] = field(default_factory=list)
    has_header: bool = False

    def grid(self) -> List[List[str]]:
        """
        Cell texts as a rows x cols grid.

        Blank positions hold an empty string; lines that land on the same
        position are joined with a space in row order.
        """
        grid = [["" for _ in range(self.cols)] for _ in range(self.rows)]
        for cell in self.cells:
            if 0 <= cell.row < self.rows and 0 <= cell.col < self.cols:
                current = grid[cell.row][cell.col]
                grid[cell.row][cell.col] = f"{current} {cell.text}" if current else cell.text
        return grid

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "bbox": self.bbox.to_dict(),
            "rows": self.rows,
            "cols": self.cols,
            "hasHeader": self.has_header,
            "cells": [c.to_dict() for c in self.cells],
        }


@dataclass
class TextRegion:
    """A header, footer or other free-standing text area."""
    id: str
    bbox: BoundingBox
    text: str
    type: TextRegionType
    confidence: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "bbox": self.bbox.to_dict(),
            "text": self.text,
            "type": self.type.value,
            "confidence": self.confidence,
        }


@dataclass
class ImageRegion:
    id: str
    bbox: BoundingBox
    caption: Optional[TextRegion] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "bbox": self.bbox.to_dict(),
            "caption": self.caption.to_dict() if self.caption else None,
        }


@dataclass(frozen=True)
class Region:
    """Summary entry in the reading order (id + box + position)."""
    id: str
    type: RegionType
    bbox: BoundingBox
    order: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "bbox": self.bbox.to_dict(),
            "order": self.order,
        }


@dataclass
class LayoutAnalysis:
    """Result of analyzing one page."""
    columns: List[Column] = field(default_factory=list)
    tables: List[Table] = field(default_factory=list)
    images: List[ImageRegion] = field(default_factory=list)
    headers: List[TextRegion] = field(default_factory=list)
    footers: List[TextRegion] = field(default_factory=list)
    reading_order: List[Region] = field(default_factory=list)
    is_multi_column: bool = False
    estimated_columns: int = 0
    language: ScriptDirection = ScriptDirection.LTR
    # Body blocks that straddle a column boundary and belong to no column
    dropped_blocks: List[Block] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "columns": [c.to_dict() for c in self.columns],
            "tables": [t.to_dict() for t in self.tables],
            "images": [i.to_dict() for i in self.images],
            "headers": [h.to_dict() for h in self.headers],
            "footers": [f.to_dict() for f in self.footers],
            "readingOrder": [r.to_dict() for r in self.reading_order],
            "isMultiColumn": self.is_multi_column,
            "estimatedColumns": self.estimated_columns,
            "language": self.language.value,
            "droppedBlocks": len(self.dropped_blocks),
        }
