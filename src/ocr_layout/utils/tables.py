"""
Table detection from line geometry.

Provides:
- Row grouping of recognized lines by vertical overlap
- Table-region candidates from runs of multi-line rows
- Column anchor clustering and cell grid construction
- Header-row inference
- CSV rendering

The recognizer's own ``table`` block tag is ignored; tables are re-derived
from the flattened lines of the page.
"""

import csv
import io
import logging
from typing import List, Optional, Dict

import numpy as np

from ..config import LayoutConfig
from .geometry import union_bboxes, vertical_overlap, cluster_positions
from .models import Line, Table, TableCell, LayoutAnalysis

logger = logging.getLogger(__name__)

HEADER_HEIGHT_RATIO = 1.1


# ============================================================================
# Table Detector
# ============================================================================

class TableDetector:
    """
    Finds row-aligned groups of lines that form a grid.

    A row holding two or more lines is treated as tabular. Consecutive
    tabular rows form a candidate, which is kept once it accumulates at
    least ``min_table_cells`` lines.
    """

    def __init__(self, config: Optional[LayoutConfig] = None):
        self.config = config or LayoutConfig()

    def detect(self, lines: List[Line]) -> List[Table]:
        """
        Detect tables among the lines of a page.

        Args:
            lines: Flattened lines of the page

        Returns:
            Tables in top-to-bottom order
        """
        tables = []
        row_groups = self.group_lines_by_row(lines)

        for region in self.find_table_regions(row_groups):
            table = self.build_table(region, table_id=f"table-{len(tables)}")
            if table:
                tables.append(table)

        logger.debug(f"Detected {len(tables)} table(s) from {len(lines)} line(s)")
        return tables

    def group_lines_by_row(self, lines: List[Line]) -> List[List[Line]]:
        """Group lines whose vertical extents overlap into rows."""
        if not lines:
            return []

        ordered = sorted(lines, key=lambda line: line.bbox.y0)
        groups = [[ordered[0]]]

        for line in ordered[1:]:
            last = groups[-1][-1]
            overlap = vertical_overlap(line.bbox, last.bbox)
            min_height = min(line.bbox.height, last.bbox.height)

            if overlap > min_height * self.config.line_overlap_threshold:
                groups[-1].append(line)
            else:
                groups.append([line])

        return groups

    def find_table_regions(self, row_groups: List[List[Line]]) -> List[List[Line]]:
        """Collect runs of multi-line rows that hold enough lines."""
        regions = []
        current: List[Line] = []

        for group in row_groups:
            if len(group) >= 2:
                current.extend(group)
                continue
            if len(current) >= self.config.min_table_cells:
                regions.append(current)
            current = []

        if len(current) >= self.config.min_table_cells:
            regions.append(current)

        return regions

    def build_table(self, lines: List[Line], table_id: str = "table-0") -> Optional[Table]:
        """
        Build the cell grid for one candidate region.

        Returns:
            Table, or None when the region holds fewer than two lines
        """
        if len(lines) < 2:
            return None

        row_groups = self.group_lines_by_row(lines)
        anchors = self.estimate_column_positions(lines)

        cells = []
        for row_index, row_lines in enumerate(row_groups):
            for line in row_lines:
                cells.append(TableCell(
                    row=row_index,
                    col=self.find_column_index(line.bbox.x0, anchors),
                    bbox=line.bbox,
                    text=line.text,
                    confidence=line.confidence,
                ))

        return Table(
            id=table_id,
            bbox=union_bboxes(line.bbox for line in lines),
            rows=len(row_groups),
            cols=len(anchors),
            cells=cells,
            has_header=detect_table_header(row_groups),
        )

    def estimate_column_positions(self, lines: List[Line]) -> List[float]:
        """Cluster the left edges of lines into column anchors."""
        return cluster_positions(
            (line.bbox.x0 for line in lines),
            self.config.column_cluster_threshold,
        )

    def find_column_index(self, x: float, anchors: List[float]) -> int:
        """Index of the right-most anchor at or left of ``x`` (with slack)."""
        for i in range(len(anchors) - 1, -1, -1):
            if x >= anchors[i] - self.config.column_snap_tolerance:
                return i
        return 0


def detect_table_header(row_groups: List[List[Line]]) -> bool:
    """First row is a header when its lines are over 10% taller than row two's."""
    if len(row_groups) < 2:
        return False

    first = np.mean([line.bbox.height for line in row_groups[0]])
    second = np.mean([line.bbox.height for line in row_groups[1]])
    return bool(first > second * HEADER_HEIGHT_RATIO)


# ============================================================================
# CSV Rendering
# ============================================================================

def table_to_csv(table: Table) -> str:
    """
    Render a table as CSV.

    Every field is quoted, embedded quotes are doubled and rows are
    separated by a single newline with no trailing terminator. Grid
    positions without a line render as ``""``.
    """
    output = io.StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_ALL, lineterminator="\n")

    for row in table.grid():
        writer.writerow(row)

    value = output.getvalue()
    return value[:-1] if value.endswith("\n") else value


def tables_to_csv(layout: LayoutAnalysis) -> Dict[str, str]:
    """CSV rendering of every table in a layout, keyed by table id."""
    return {table.id: table_to_csv(table) for table in layout.tables}
