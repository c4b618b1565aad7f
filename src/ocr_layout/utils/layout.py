"""
Layout analysis for recognized pages.

Provides:
- Header/footer classification by vertical position
- Multi-column detection by horizontal gap analysis
- Direction-aware reading order
- The page-level orchestrator (``analyze_layout``)

Functions here do not mutate their inputs or keep state between pages.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from functools import cmp_to_key
from typing import List, Optional, Tuple, Dict, Mapping

from ..config import LayoutConfig, SpanPolicy
from .geometry import BoundingBox, horizontal_overlap, union_bboxes
from .models import (
    Block,
    Column,
    ImageRegion,
    LayoutAnalysis,
    PageResult,
    Region,
    RegionType,
    ScriptDirection,
    Table,
    TextRegion,
    TextRegionType,
)
from .script import detect_script_direction
from .tables import TableDetector

logger = logging.getLogger(__name__)


# ============================================================================
# Headers and Footers
# ============================================================================

@dataclass
class HeaderFooterSplit:
    """Blocks partitioned by vertical band."""
    headers: List[TextRegion] = field(default_factory=list)
    footers: List[TextRegion] = field(default_factory=list)
    content_blocks: List[Block] = field(default_factory=list)


def detect_headers_footers(
    blocks: List[Block],
    page_height: float,
    threshold: float = 0.10
) -> HeaderFooterSplit:
    """
    Split blocks into headers, footers and body content.

    A block whose vertical center lies above ``page_height * threshold`` is
    a header; below ``page_height * (1 - threshold)`` it is a footer. Input
    order is preserved within each group.
    """
    header_limit = page_height * threshold
    footer_limit = page_height * (1 - threshold)
    split = HeaderFooterSplit()

    for block in blocks:
        center = block.bbox.vertical_center

        if center < header_limit:
            split.headers.append(TextRegion(
                id=f"header-{len(split.headers)}",
                bbox=block.bbox,
                text=block.text,
                type=TextRegionType.HEADER,
                confidence=block.confidence,
            ))
        elif center > footer_limit:
            split.footers.append(TextRegion(
                id=f"footer-{len(split.footers)}",
                bbox=block.bbox,
                text=block.text,
                type=TextRegionType.FOOTER,
                confidence=block.confidence,
            ))
        else:
            split.content_blocks.append(block)

    return split


# ============================================================================
# Columns
# ============================================================================

def find_column_boundaries(blocks: List[Block], min_gap: float) -> List[float]:
    """
    Split coordinates between horizontally separated blocks.

    Blocks are ordered by left edge; every gap between neighbours wider
    than ``min_gap`` contributes its midpoint. The result is ascending.
    """
    ordered = sorted(blocks, key=lambda b: b.bbox.x0)
    boundaries = []

    for prev, nxt in zip(ordered, ordered[1:]):
        if nxt.bbox.x0 - prev.bbox.x1 > min_gap:
            boundaries.append((prev.bbox.x1 + nxt.bbox.x0) / 2)

    return boundaries


def _bin_for_block(
    block: Block,
    bands: List[BoundingBox],
    policy: SpanPolicy
) -> Optional[int]:
    for i, band in enumerate(bands):
        if block.bbox.x0 >= band.x0 and block.bbox.x1 <= band.x1:
            return i

    if policy == SpanPolicy.OVERLAP:
        overlaps = [horizontal_overlap(block.bbox, band) for band in bands]
        return max(range(len(bands)), key=lambda i: overlaps[i])

    return None


def detect_columns(
    blocks: List[Block],
    page_width: float,
    gap_ratio: float = 0.03,
    span_policy: SpanPolicy = SpanPolicy.DROP
) -> Tuple[List[Column], List[Block]]:
    """
    Partition body blocks into left-to-right columns.

    Args:
        blocks: Body blocks (headers and footers removed)
        page_width: Page width in pixels
        gap_ratio: Minimum gap, as a fraction of page width, between columns
        span_policy: Handling of blocks that straddle a boundary

    Returns:
        (columns, dropped blocks)
    """
    if not blocks:
        return [], []

    boundaries = find_column_boundaries(blocks, page_width * gap_ratio)

    if not boundaries:
        column = Column(
            id="col-0",
            bbox=union_bboxes(b.bbox for b in blocks),
            blocks=list(blocks),
            order=0,
        )
        return [column], []

    edges = [float("-inf")] + boundaries + [float("inf")]
    # Full-height bands between consecutive boundaries
    bands = [
        BoundingBox(lo, float("-inf"), hi, float("inf"))
        for lo, hi in zip(edges, edges[1:])
    ]
    members: List[List[Block]] = [[] for _ in bands]
    dropped = []

    for block in blocks:
        index = _bin_for_block(block, bands, span_policy)
        if index is None:
            dropped.append(block)
        else:
            members[index].append(block)

    columns = []
    for band_blocks in members:
        if not band_blocks:
            continue
        columns.append(Column(
            id=f"col-{len(columns)}",
            bbox=union_bboxes(b.bbox for b in band_blocks),
            blocks=band_blocks,
            order=len(columns),
        ))

    if dropped:
        logger.debug(f"{len(dropped)} block(s) straddle a column boundary and were dropped")

    return columns, dropped


# ============================================================================
# Image Regions
# ============================================================================

def detect_image_regions(blocks: List[Block]) -> List[ImageRegion]:
    """
    Image regions on the page.

    Geometry alone cannot tell a picture from empty space and the
    recognizer's ``image`` tag is advisory, so no regions are reported.
    """
    return []


# ============================================================================
# Reading Order
# ============================================================================

def _banded_compare(primary_a: float, primary_b: float, secondary: float, tolerance: float) -> float:
    if abs(primary_a - primary_b) > tolerance:
        return primary_a - primary_b
    return secondary


def sort_content_regions(
    regions: List[Region],
    direction: ScriptDirection,
    tolerance: float = 20.0
) -> List[Region]:
    """
    Sort content regions for a script direction.

    ``ltr`` / ``rtl`` read top-to-bottom in rows ``tolerance`` pixels tall,
    then by left edge ascending / descending. ``ttb`` reads columns from
    the right, then top-to-bottom.
    """
    if direction == ScriptDirection.LTR:
        def compare(a, b):
            return _banded_compare(a.bbox.y0, b.bbox.y0, a.bbox.x0 - b.bbox.x0, tolerance)
    elif direction == ScriptDirection.RTL:
        def compare(a, b):
            return _banded_compare(a.bbox.y0, b.bbox.y0, b.bbox.x0 - a.bbox.x0, tolerance)
    else:
        def compare(a, b):
            return _banded_compare(b.bbox.x0, a.bbox.x0, a.bbox.y0 - b.bbox.y0, tolerance)

    return sorted(regions, key=cmp_to_key(compare))


def build_reading_order(
    columns: List[Column],
    tables: List[Table],
    images: List[ImageRegion],
    headers: List[TextRegion],
    footers: List[TextRegion],
    direction: ScriptDirection,
    tolerance: float = 20.0
) -> List[Region]:
    """
    Linearize the page: headers, then content, then footers.

    The ``order`` values of the result are exactly 0..N-1.
    """
    content = (
        [Region(c.id, RegionType.COLUMN, c.bbox, 0) for c in columns]
        + [Region(t.id, RegionType.TABLE, t.bbox, 0) for t in tables]
        + [Region(i.id, RegionType.IMAGE, i.bbox, 0) for i in images]
    )

    sequence = (
        [(h.id, RegionType.HEADER, h.bbox) for h in headers]
        + [(r.id, r.type, r.bbox) for r in sort_content_regions(content, direction, tolerance)]
        + [(f.id, RegionType.FOOTER, f.bbox) for f in footers]
    )

    return [
        Region(id=region_id, type=region_type, bbox=bbox, order=order)
        for order, (region_id, region_type, bbox) in enumerate(sequence)
    ]


# ============================================================================
# Layout Analyzer
# ============================================================================

class LayoutAnalyzer:
    """
    Runs script, header/footer, column, table and reading-order detection
    over one page.
    """

    def __init__(self, config: Optional[LayoutConfig] = None):
        self.config = config or LayoutConfig()
        self.table_detector = TableDetector(self.config)

    def page_size(self, page: PageResult) -> Tuple[float, float]:
        """Page width and height, falling back to the extent of the blocks."""
        if page.has_dimensions:
            return float(page.image_width), float(page.image_height)

        extent = union_bboxes(b.bbox for b in page.blocks)
        return float(extent.x1), float(extent.y1)

    def analyze(self, page: PageResult) -> LayoutAnalysis:
        """
        Analyze the layout of a page.

        Args:
            page: Recognition output for one page

        Returns:
            LayoutAnalysis for the page
        """
        language = detect_script_direction(page)

        if not page.blocks:
            return LayoutAnalysis(language=language)

        page_width, page_height = self.page_size(page)

        split = detect_headers_footers(
            page.blocks,
            page_height,
            self.config.header_footer_threshold
        )

        columns, dropped = detect_columns(
            split.content_blocks,
            page_width,
            self.config.column_gap_ratio,
            self.config.span_policy
        )

        tables = self.table_detector.detect(page.lines)
        images = detect_image_regions(split.content_blocks)

        reading_order = build_reading_order(
            columns,
            tables,
            images,
            split.headers,
            split.footers,
            language,
            self.config.row_tolerance
        )

        logger.debug(
            f"Page {page.page_index}: {len(split.headers)} header(s), "
            f"{len(columns)} column(s), {len(tables)} table(s), "
            f"{len(split.footers)} footer(s), direction={language.value}"
        )

        return LayoutAnalysis(
            columns=columns,
            tables=tables,
            images=images,
            headers=split.headers,
            footers=split.footers,
            reading_order=reading_order,
            is_multi_column=len(columns) > 1,
            estimated_columns=len(columns),
            language=language,
            dropped_blocks=dropped,
        )


def analyze_layout(page: PageResult, config: Optional[LayoutConfig] = None) -> LayoutAnalysis:
    """Analyze one page with the given (or default) configuration."""
    return LayoutAnalyzer(config).analyze(page)


def analyze_pages(
    results: Mapping[int, PageResult],
    config: Optional[LayoutConfig] = None,
    max_workers: int = 1
) -> Dict[int, LayoutAnalysis]:
    """
    Analyze several pages independently.

    Args:
        results: Page index -> recognition output
        config: Layout configuration shared by all pages
        max_workers: Threads to use; 1 runs sequentially

    Returns:
        Page index -> LayoutAnalysis, in ascending page order
    """
    analyzer = LayoutAnalyzer(config)
    indices = sorted(results)

    if max_workers <= 1 or len(indices) <= 1:
        return {i: analyzer.analyze(results[i]) for i in indices}

    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        analyses = pool.map(analyzer.analyze, [results[i] for i in indices])
        return dict(zip(indices, analyses))
