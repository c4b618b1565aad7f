"""
Script direction detection.

Classifies the dominant reading direction of a page from a text sample
and the shape of the word boxes.
"""

import logging
import re

from .models import PageResult, ScriptDirection

logger = logging.getLogger(__name__)

# Arabic and Hebrew
RTL_PATTERN = re.compile(r"[\u0590-\u05FF\u0600-\u06FF]")
# CJK unified ideographs, Hiragana and Katakana
CJK_PATTERN = re.compile(r"[\u4E00-\u9FFF\u3040-\u30FF]")

SAMPLE_LENGTH = 1000
VERTICAL_ASPECT = 2.0
VERTICAL_WORD_SHARE = 0.3


def detect_script_direction(page: PageResult) -> ScriptDirection:
    """
    Detect the reading direction of a page.

    RTL scripts win over CJK. CJK text counts as vertical only when more
    than 30% of the words are at least twice as tall as they are wide.
    Empty pages default to left-to-right.
    """
    sample = (page.text or "")[:SAMPLE_LENGTH]

    if RTL_PATTERN.search(sample):
        return ScriptDirection.RTL

    if CJK_PATTERN.search(sample):
        vertical = sum(
            1 for w in page.words
            if w.bbox.height > w.bbox.width * VERTICAL_ASPECT
        )
        if vertical > len(page.words) * VERTICAL_WORD_SHARE:
            logger.debug(f"{vertical}/{len(page.words)} vertical word boxes, using ttb")
            return ScriptDirection.TTB

    return ScriptDirection.LTR
