"""
Configuration and constants for the layout reconstruction engine.

This module provides:
- Layout analysis thresholds
- Export options
- Environment overrides for the command line
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List
import logging

logger = logging.getLogger("ocr_layout")


# ============================================================================
# Layout Configuration
# ============================================================================

class SpanPolicy(Enum):
    """What to do with a body block that straddles a column boundary."""
    DROP = "drop"        # belongs to no column, listed in dropped_blocks
    OVERLAP = "overlap"  # joins the column band it overlaps most


@dataclass
class LayoutConfig:
    """Layout analysis configuration."""
    # Minimum horizontal gap, as a fraction of page width, that splits columns
    column_gap_ratio: float = 0.03
    # Fraction of page height treated as header (top) and footer (bottom)
    header_footer_threshold: float = 0.10
    # Minimum number of lines in a table candidate
    min_table_cells: int = 4
    # Vertical overlap, as a fraction of the shorter line, for same-row lines
    line_overlap_threshold: float = 0.5
    # Regions whose top edges differ by no more than this share a reading row
    row_tolerance: float = 20.0
    # Table column anchors closer than this are merged (pixels)
    column_cluster_threshold: float = 20.0
    # Slack when snapping a cell's left edge to a column anchor (pixels)
    column_snap_tolerance: float = 10.0
    span_policy: SpanPolicy = SpanPolicy.DROP

    def __post_init__(self):
        if isinstance(self.span_policy, str):
            self.span_policy = SpanPolicy(self.span_policy)
        if self.column_gap_ratio < 0:
            raise ValueError("column_gap_ratio must be non-negative")
        if not 0 <= self.header_footer_threshold <= 0.5:
            raise ValueError("header_footer_threshold must be within [0, 0.5]")
        if self.min_table_cells < 2:
            raise ValueError("min_table_cells must be at least 2")
        if not 0 <= self.line_overlap_threshold <= 1:
            raise ValueError("line_overlap_threshold must be within [0, 1]")


# ============================================================================
# Export Configuration
# ============================================================================

@dataclass
class ExportOptions:
    """Options shared by all exporters."""
    include_confidence: bool = False
    include_bounding_boxes: bool = False
    preserve_line_breaks: bool = True
    preserve_paragraphs: bool = True
    # 0-based page indices to export; None exports every page
    page_range: Optional[List[int]] = None


@dataclass
class PipelineConfig:
    """Main configuration."""
    layout: LayoutConfig = field(default_factory=LayoutConfig)
    export: ExportOptions = field(default_factory=ExportOptions)

    # Worker threads for multi-page analysis (1 = sequential)
    max_workers: int = 1
    debug_mode: bool = False


# ============================================================================
# Default Configuration Instance
# ============================================================================

def _env_float(name: str) -> Optional[float]:
    value = os.environ.get(name)
    if value is None or value == "":
        return None
    try:
        return float(value)
    except ValueError:
        logger.warning(f"Ignoring non-numeric {name}={value!r}")
        return None


def get_config() -> PipelineConfig:
    """Get the default configuration with environment overrides."""
    config = PipelineConfig()

    gap_ratio = _env_float("OCR_LAYOUT_COLUMN_GAP_RATIO")
    if gap_ratio is not None:
        config.layout.column_gap_ratio = gap_ratio

    header_footer = _env_float("OCR_LAYOUT_HEADER_FOOTER_THRESHOLD")
    if header_footer is not None:
        config.layout.header_footer_threshold = header_footer

    min_cells = _env_float("OCR_LAYOUT_MIN_TABLE_CELLS")
    if min_cells is not None:
        config.layout.min_table_cells = int(min_cells)

    span_policy = os.environ.get("OCR_LAYOUT_SPAN_POLICY", "").lower()
    if span_policy:
        config.layout.span_policy = SpanPolicy(span_policy)

    workers = _env_float("OCR_LAYOUT_WORKERS")
    if workers is not None:
        config.max_workers = max(1, int(workers))

    if os.environ.get("OCR_LAYOUT_DEBUG", "").lower() == "true":
        config.debug_mode = True

    # Re-run validation on the overridden values
    config.layout = LayoutConfig(**vars(config.layout))

    return config


# ============================================================================
# JSON Schema Version
# ============================================================================

JSON_SCHEMA_VERSION = "1.0"
