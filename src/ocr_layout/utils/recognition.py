"""
Adapters from recognition-engine output to PageResult.

Tesseract's ``image_to_data(..., output_type=Output.DICT)`` returns parallel
lists (``block_num``, ``par_num``, ``line_num``, ``left``, ``top``,
``width``, ``height``, ``conf``, ``text``). Rows with a negative confidence
or blank text carry no word and are skipped.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from .geometry import BoundingBox, union_bboxes
from .models import Block, Line, PageResult, Word

logger = logging.getLogger(__name__)


def _make_line(words: List[Word]) -> Line:
    return Line(
        text=" ".join(w.text for w in words),
        confidence=float(np.mean([w.confidence for w in words])),
        bbox=union_bboxes(w.bbox for w in words),
        words=words,
    )


def _make_block(lines: List[Line]) -> Block:
    return Block(
        text="\n".join(line.text for line in lines),
        confidence=float(np.mean([line.confidence for line in lines])),
        bbox=union_bboxes(line.bbox for line in lines),
        lines=lines,
    )


def page_result_from_tesseract(
    data: Dict[str, List[Any]],
    page_index: int = 0,
    language: str = "eng",
    image_size: Optional[Tuple[int, int]] = None,
    processing_time: float = 0.0
) -> PageResult:
    """
    Build a PageResult from Tesseract ``image_to_data`` output.

    Args:
        data: Dictionary of parallel lists from ``image_to_data``
        page_index: 0-based page index
        language: Recognition language code
        image_size: (width, height) of the recognized image
        processing_time: Recognition time in milliseconds

    Returns:
        PageResult with blocks, flattened lines and words
    """
    # block_num -> (par_num, line_num) -> words, in first-seen order
    grouped: Dict[int, Dict[Tuple[int, int], List[Word]]] = {}

    for i in range(len(data.get("text", []))):
        text = str(data["text"][i]).strip()
        conf = float(data["conf"][i])

        if conf < 0 or not text:
            continue

        left, top = data["left"][i], data["top"][i]
        bbox = BoundingBox(left, top, left + data["width"][i], top + data["height"][i])
        word = Word(text=text, confidence=conf, bbox=bbox, font_size=float(bbox.height))

        line_key = (data["par_num"][i], data["line_num"][i])
        grouped.setdefault(data["block_num"][i], {}).setdefault(line_key, []).append(word)

    blocks = [
        _make_block([_make_line(words) for words in lines.values()])
        for lines in grouped.values()
    ]
    lines = [line for block in blocks for line in block.lines]
    words = [word for line in lines for word in line.words]

    width, height = image_size if image_size else (None, None)
    confidence = float(np.mean([w.confidence for w in words])) if words else 0.0

    logger.debug(f"Tesseract page {page_index}: {len(blocks)} block(s), {len(words)} word(s)")

    return PageResult(
        text="\n\n".join(block.text for block in blocks),
        confidence=confidence,
        blocks=blocks,
        lines=lines,
        words=words,
        processing_time=processing_time,
        language=language,
        page_index=page_index,
        image_width=width,
        image_height=height,
    )
