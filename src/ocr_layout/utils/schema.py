"""
Validation schema for page-result JSON.

The models mirror the camelCase wire form written by ``to_dict`` and turn
a validated document into the dataclasses in ``models``. Numbers must be
JSON numbers; numeric strings and nulls are rejected rather than coerced.
"""

from typing import Annotated, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from .geometry import BoundingBox
from .models import Baseline, Block, BlockType, Line, PageResult, Word

Number = Annotated[float, Field(strict=True)]


class _Schema(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BBoxSchema(_Schema):
    x0: Number
    y0: Number
    x1: Number
    y1: Number

    @model_validator(mode="after")
    def check_corners(self) -> 'BBoxSchema':
        if self.x1 < self.x0 or self.y1 < self.y0:
            raise ValueError(
                f"inverted corners ({self.x0}, {self.y0}, {self.x1}, {self.y1})"
            )
        return self

    def to_model(self) -> BoundingBox:
        return BoundingBox(self.x0, self.y0, self.x1, self.y1)


class BaselineSchema(_Schema):
    x0: Number
    y0: Number
    x1: Number
    y1: Number

    def to_model(self) -> Baseline:
        return Baseline(self.x0, self.y0, self.x1, self.y1)


class WordSchema(_Schema):
    text: str
    confidence: Number = 0.0
    bbox: BBoxSchema
    baseline: Optional[BaselineSchema] = None
    font_size: Number = 0.0
    font_name: str = ""
    is_bold: bool = False
    is_italic: bool = False
    is_underlined: bool = False
    is_monospace: bool = False

    def to_model(self) -> Word:
        return Word(
            text=self.text,
            confidence=self.confidence,
            bbox=self.bbox.to_model(),
            baseline=self.baseline.to_model() if self.baseline else None,
            font_size=self.font_size,
            font_name=self.font_name,
            is_bold=self.is_bold,
            is_italic=self.is_italic,
            is_underlined=self.is_underlined,
            is_monospace=self.is_monospace,
        )


class LineSchema(_Schema):
    text: str
    confidence: Number = 0.0
    bbox: BBoxSchema
    words: List[WordSchema] = Field(default_factory=list)
    baseline: Optional[BaselineSchema] = None

    def to_model(self) -> Line:
        return Line(
            text=self.text,
            confidence=self.confidence,
            bbox=self.bbox.to_model(),
            words=[w.to_model() for w in self.words],
            baseline=self.baseline.to_model() if self.baseline else None,
        )


class BlockSchema(_Schema):
    text: str
    confidence: Number = 0.0
    bbox: BBoxSchema
    lines: List[LineSchema] = Field(default_factory=list)
    block_type: Optional[str] = None

    def to_model(self) -> Block:
        return Block(
            text=self.text,
            confidence=self.confidence,
            bbox=self.bbox.to_model(),
            lines=[line.to_model() for line in self.lines],
            block_type=BlockType.parse(self.block_type),
        )


class DimensionsSchema(_Schema):
    width: int = Field(..., ge=0)
    height: int = Field(..., ge=0)


class PageSchema(_Schema):
    """
    One page of recognition output.

    ``lines`` and ``words`` are optional; when absent they are flattened
    from the blocks.
    """
    text: str
    confidence: Number = 0.0
    blocks: List[BlockSchema] = Field(default_factory=list)
    lines: Optional[List[LineSchema]] = None
    words: Optional[List[WordSchema]] = None
    processing_time: Number = 0.0
    language: str = ""
    page_index: int = 0
    image_dimensions: Optional[DimensionsSchema] = None

    def to_model(self) -> PageResult:
        blocks = [b.to_model() for b in self.blocks]

        if self.lines is not None:
            lines = [line.to_model() for line in self.lines]
        else:
            lines = [line for b in blocks for line in b.lines]

        if self.words is not None:
            words = [w.to_model() for w in self.words]
        else:
            words = [w for line in lines for w in line.words]

        dims = self.image_dimensions
        return PageResult(
            text=self.text,
            confidence=self.confidence,
            blocks=blocks,
            lines=lines,
            words=words,
            processing_time=self.processing_time,
            language=self.language,
            page_index=self.page_index,
            image_width=dims.width if dims else None,
            image_height=dims.height if dims else None,
        )
