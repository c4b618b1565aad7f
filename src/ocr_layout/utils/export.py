"""
Export module for recognized pages.

Provides:
- Plain text export (recognition order)
- HTML export with confidence highlighting and layout tables
- hOCR export (ocr_page > ocr_carea > ocr_line > ocrx_word)
- JSON export with optional layout summary
- Multi-format export to a directory, including one CSV per table

Every exporter takes a mapping of page index -> PageResult. Layout input
is either one LayoutAnalysis (applied to every exported page) or a
mapping of page index -> LayoutAnalysis.
"""

import logging
import math
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Any, Optional, List, Union, Mapping

from ..config import ExportOptions, JSON_SCHEMA_VERSION
from .geometry import BoundingBox
from .io import dumps_json, save_text
from .models import PageResult, LayoutAnalysis, Table, Line
from .tables import table_to_csv, tables_to_csv

logger = logging.getLogger(__name__)

LayoutInput = Union[LayoutAnalysis, Mapping[int, LayoutAnalysis], None]

LOW_CONFIDENCE = 70
MEDIUM_CONFIDENCE = 90


# ============================================================================
# Formatting Helpers
# ============================================================================

def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


def format_bbox(bbox: BoundingBox) -> str:
    """Format a box as ``x0 y0 x1 y1`` with integer coordinates."""
    return " ".join(str(round_half_up(v)) for v in bbox.to_tuple())


def escape_html(text: str) -> str:
    """Escape HTML special characters."""
    return (text
        .replace('&', '&amp;')
        .replace('<', '&lt;')
        .replace('>', '&gt;')
        .replace('"', '&quot;')
        .replace("'", '&#039;')
    )


def confidence_class(confidence: float) -> str:
    if confidence < LOW_CONFIDENCE:
        return "low-confidence"
    if confidence < MEDIUM_CONFIDENCE:
        return "medium-confidence"
    return ""


def layout_for_page(layout: LayoutInput, page_index: int) -> Optional[LayoutAnalysis]:
    """Pick the layout that applies to one page."""
    if layout is None:
        return None
    if isinstance(layout, LayoutAnalysis):
        return layout
    return layout.get(page_index)


# ============================================================================
# Base Exporter
# ============================================================================

class BaseExporter:
    """Shared page selection and file writing."""

    extension = ".txt"
    label = "text"

    def __init__(self, options: Optional[ExportOptions] = None):
        self.options = options or ExportOptions()

    def page_indices(self, results: Mapping[int, PageResult]) -> List[int]:
        if self.options.page_range is not None:
            return list(self.options.page_range)
        return sorted(results.keys())

    def render(self, results: Mapping[int, PageResult], layout: LayoutInput = None) -> str:
        raise NotImplementedError

    def export(
        self,
        results: Mapping[int, PageResult],
        output_path: Union[str, Path],
        layout: LayoutInput = None
    ) -> Path:
        """
        Render and write to a file.

        Returns:
            Path to the generated file
        """
        output_path = save_text(self.render(results, layout), output_path)
        logger.info(f"Exported {self.label} to: {output_path}")
        return output_path


# ============================================================================
# Plain Text
# ============================================================================

class PlainTextExporter(BaseExporter):
    """
    Plain text in recognition order.

    Blocks (or lines) are written in the order the recognizer produced
    them, not in the computed reading order.
    """

    extension = ".txt"
    label = "plain text"

    def render(self, results: Mapping[int, PageResult], layout: LayoutInput = None) -> str:
        parts = []

        for page_index in self.page_indices(results):
            page = results.get(page_index)
            if page is None:
                continue

            if parts:
                parts.append(f"\n\n--- Page {page_index + 1} ---\n\n")

            if self.options.preserve_paragraphs and page.blocks:
                for block in page.blocks:
                    parts.append(block.text)
                    parts.append("\n\n")
            elif self.options.preserve_line_breaks and page.lines:
                for line in page.lines:
                    parts.append(line.text)
                    parts.append("\n")
            else:
                parts.append(page.text)

        return "".join(parts).strip()


# ============================================================================
# HTML
# ============================================================================

HTML_STYLE = [
    '    body { font-family: Arial, sans-serif; line-height: 1.6; max-width: 800px; margin: 0 auto; padding: 20px; }',
    '    .page { margin-bottom: 40px; padding-bottom: 20px; border-bottom: 2px solid #ccc; }',
    '    .page-header { color: #666; font-size: 14px; margin-bottom: 10px; }',
    '    .paragraph { margin-bottom: 16px; }',
    '    .line { margin-bottom: 4px; }',
    '    .word { display: inline; }',
    '    .low-confidence { background-color: #ffcccc; }',
    '    .medium-confidence { background-color: #ffffcc; }',
    '    table { border-collapse: collapse; margin: 16px 0; width: 100%; }',
    '    th, td { border: 1px solid #ccc; padding: 8px; text-align: left; }',
    '    th { background-color: #f5f5f5; }',
]


def render_table_html(table: Table) -> str:
    """Render a table grid; the first row uses <th> when it is a header."""
    lines = ['    <table>']

    for r, row in enumerate(table.grid()):
        tag = "th" if table.has_header and r == 0 else "td"
        lines.append('      <tr>')
        for text in row:
            lines.append(f'        <{tag}>{escape_html(text) or "&nbsp;"}</{tag}>')
        lines.append('      </tr>')

    lines.append('    </table>')
    return "\n".join(lines)


class HTMLExporter(BaseExporter):
    """Standalone HTML document with inline styles."""

    extension = ".html"
    label = "HTML"

    def render(self, results: Mapping[int, PageResult], layout: LayoutInput = None) -> str:
        html = [
            '<!DOCTYPE html>',
            '<html lang="en">',
            '<head>',
            '  <meta charset="UTF-8">',
            '  <meta name="viewport" content="width=device-width, initial-scale=1.0">',
            '  <title>OCR Results</title>',
            '  <style>',
            *HTML_STYLE,
            '  </style>',
            '</head>',
            '<body>',
        ]

        for page_index in self.page_indices(results):
            page = results.get(page_index)
            if page is None:
                continue

            html.append(f'  <div class="page" data-page="{page_index + 1}">')
            html.append(f'    <div class="page-header">Page {page_index + 1}</div>')

            page_layout = layout_for_page(layout, page_index)
            if page_layout is not None:
                for table in page_layout.tables:
                    html.append(render_table_html(table))

            html.extend(self._render_page_text(page))
            html.append('  </div>')

        html.append('</body>')
        html.append('</html>')
        return "\n".join(html)

    def _render_page_text(self, page: PageResult) -> List[str]:
        html = []

        if self.options.preserve_paragraphs and page.blocks:
            for block in page.blocks:
                html.append('    <div class="paragraph">')
                if self.options.include_confidence:
                    for line in block.lines:
                        html.extend(self._render_confidence_line(line))
                else:
                    html.append(f'      {escape_html(block.text)}')
                html.append('    </div>')
        elif self.options.preserve_line_breaks and page.lines:
            for line in page.lines:
                html.append(f'    <div class="line">{escape_html(line.text)}</div>')
        else:
            html.append(f'    <p>{escape_html(page.text)}</p>')

        return html

    def _render_confidence_line(self, line: Line) -> List[str]:
        html = ['      <div class="line">']
        for word in line.words:
            css = f"word {confidence_class(word.confidence)}".rstrip()
            html.append(
                f'        <span class="{css}" title="Confidence: {word.confidence:.1f}%">'
                f'{escape_html(word.text)}</span> '
            )
        html.append('      </div>')
        return html


# ============================================================================
# hOCR
# ============================================================================

class HOCRExporter(BaseExporter):
    """
    hOCR (XHTML) with word boxes and confidences.

    The layout argument is not used: hOCR nesting follows the recognizer's
    block / line / word tree.
    """

    extension = ".hocr"
    label = "hOCR"

    def render(self, results: Mapping[int, PageResult], layout: LayoutInput = None) -> str:
        hocr = [
            '<?xml version="1.0" encoding="UTF-8"?>',
            '<!DOCTYPE html PUBLIC "-//W3C//DTD XHTML 1.0 Transitional//EN" '
            '"http://www.w3.org/TR/xhtml1/DTD/xhtml1-transitional.dtd">',
            '<html xmlns="http://www.w3.org/1999/xhtml" xml:lang="en" lang="en">',
            '<head>',
            '  <title>OCR Results - hOCR Format</title>',
            '  <meta http-equiv="Content-Type" content="text/html; charset=utf-8" />',
            '  <meta name="ocr-system" content="ocr-layout" />',
            '  <meta name="ocr-capabilities" content="ocr_page ocr_carea ocr_line ocrx_word" />',
            '</head>',
            '<body>',
        ]

        for page_index in self.page_indices(results):
            page = results.get(page_index)
            if page is None:
                continue
            hocr.extend(self._render_page(page_index, page))

        hocr.append('</body>')
        hocr.append('</html>')
        return "\n".join(hocr)

    def _render_page(self, page_index: int, page: PageResult) -> List[str]:
        if page.has_dimensions:
            page_bbox = f"0 0 {page.image_width} {page.image_height}"
        else:
            page_bbox = "0 0 0 0"

        hocr = [
            f'  <div class="ocr_page" id="page_{page_index + 1}" '
            f'title="image page{page_index + 1}.png; bbox {page_bbox}; ppageno {page_index}">'
        ]

        for block_no, block in enumerate(page.blocks):
            hocr.append(
                f'    <div class="ocr_carea" id="block_{page_index}_{block_no}" '
                f'title="bbox {format_bbox(block.bbox)}">'
            )

            for line_no, line in enumerate(block.lines):
                title = f"bbox {format_bbox(line.bbox)}"
                if line.baseline is not None:
                    title += f"; baseline {line.baseline.slope:.3f} {line.baseline.y0:.1f}"
                hocr.append(
                    f'      <span class="ocr_line" id="line_{page_index}_{block_no}_{line_no}" title="{title}">'
                )

                for word_no, word in enumerate(line.words):
                    hocr.append(
                        f'        <span class="ocrx_word" id="word_{page_index}_{block_no}_{line_no}_{word_no}" '
                        f'title="bbox {format_bbox(word.bbox)}; x_wconf {round_half_up(word.confidence)}">'
                        f'{escape_html(word.text)}</span>'
                    )

                hocr.append('      </span>')

            hocr.append('    </div>')

        hocr.append('  </div>')
        return hocr


# ============================================================================
# JSON
# ============================================================================

def layout_summary(layout: LayoutAnalysis) -> Dict[str, Any]:
    """Column flag, direction and table schemas with their CSV rendering."""
    return {
        "isMultiColumn": layout.is_multi_column,
        "estimatedColumns": layout.estimated_columns,
        "language": layout.language.value,
        "tables": [
            {
                "id": table.id,
                "rows": table.rows,
                "cols": table.cols,
                "hasHeader": table.has_header,
                "csv": table_to_csv(table),
            }
            for table in layout.tables
        ],
    }


class JSONExporter(BaseExporter):
    """Structured per-page JSON."""

    extension = ".json"
    label = "JSON"

    def build(self, results: Mapping[int, PageResult], layout: LayoutInput = None) -> Dict[str, Any]:
        pages = self.page_indices(results)
        output: Dict[str, Any] = {
            "schemaVersion": JSON_SCHEMA_VERSION,
            "exportDate": datetime.now(timezone.utc).isoformat(),
            "pageCount": len(pages),
            "pages": [],
        }

        for page_index in pages:
            page = results.get(page_index)
            if page is None:
                continue

            page_data = {
                "pageNumber": page_index + 1,
                "text": page.text,
                "confidence": page.confidence,
                "processingTime": page.processing_time,
                "blocks": [self._block_data(block) for block in page.blocks],
            }

            if layout is not None and not isinstance(layout, LayoutAnalysis):
                page_layout = layout.get(page_index)
                if page_layout is not None:
                    page_data["layout"] = layout_summary(page_layout)

            output["pages"].append(page_data)

        if isinstance(layout, LayoutAnalysis):
            output["layout"] = layout_summary(layout)

        return output

    def render(self, results: Mapping[int, PageResult], layout: LayoutInput = None) -> str:
        return dumps_json(self.build(results, layout))

    def _block_data(self, block) -> Dict[str, Any]:
        if not self.options.include_bounding_boxes:
            return {"text": block.text, "confidence": block.confidence}

        return {
            "text": block.text,
            "bbox": block.bbox.to_dict(),
            "confidence": block.confidence,
            "lines": [
                {
                    "text": line.text,
                    "bbox": line.bbox.to_dict(),
                    "confidence": line.confidence,
                    "words": [
                        {
                            "text": word.text,
                            "bbox": word.bbox.to_dict(),
                            "confidence": word.confidence,
                        }
                        for word in line.words
                    ],
                }
                for line in block.lines
            ],
        }


# ============================================================================
# Functional Interface
# ============================================================================

def export_to_plain_text(
    results: Mapping[int, PageResult],
    layout: LayoutInput = None,
    options: Optional[ExportOptions] = None
) -> str:
    return PlainTextExporter(options).render(results, layout)


def export_to_html(
    results: Mapping[int, PageResult],
    layout: LayoutInput = None,
    options: Optional[ExportOptions] = None
) -> str:
    return HTMLExporter(options).render(results, layout)


def export_to_hocr(
    results: Mapping[int, PageResult],
    options: Optional[ExportOptions] = None
) -> str:
    return HOCRExporter(options).render(results)


def export_to_json(
    results: Mapping[int, PageResult],
    layout: LayoutInput = None,
    options: Optional[ExportOptions] = None
) -> str:
    return JSONExporter(options).render(results, layout)


# ============================================================================
# Multi-Format Exporter
# ============================================================================

FORMATS = ["text", "html", "hocr", "json", "csv"]


class DocumentExporter:
    """Convenience class for exporting to multiple formats."""

    def __init__(
        self,
        output_dir: Union[str, Path],
        base_name: str = "ocr-export",
        options: Optional[ExportOptions] = None
    ):
        self.output_dir = Path(output_dir)
        self.base_name = base_name
        self.options = options or ExportOptions()

        self.exporters = {
            "text": PlainTextExporter(self.options),
            "html": HTMLExporter(self.options),
            "hocr": HOCRExporter(self.options),
            "json": JSONExporter(self.options),
        }

    def export(
        self,
        results: Mapping[int, PageResult],
        layout: LayoutInput = None,
        formats: Optional[List[str]] = None
    ) -> Dict[str, Path]:
        """
        Export pages to several formats.

        Args:
            results: Page index -> PageResult
            layout: One LayoutAnalysis or page index -> LayoutAnalysis
            formats: Subset of 'text', 'html', 'hocr', 'json', 'csv', 'all'

        Returns:
            Dictionary mapping format (``csv:<file stem>`` for tables) to path
        """
        if formats is None or "all" in formats:
            formats = FORMATS

        unknown = [f for f in formats if f not in FORMATS]
        if unknown:
            raise ValueError(f"Unsupported export format(s): {', '.join(unknown)}")

        self.output_dir.mkdir(parents=True, exist_ok=True)
        written = {}

        for fmt, exporter in self.exporters.items():
            if fmt in formats:
                path = self.output_dir / f"{self.base_name}{exporter.extension}"
                written[fmt] = exporter.export(results, path, layout)

        if "csv" in formats:
            for stem, csv_text in self._table_csvs(results, layout).items():
                path = save_text(csv_text, self.output_dir / f"{stem}.csv")
                logger.info(f"Exported CSV to: {path}")
                written[f"csv:{stem}"] = path

        return written

    def _table_csvs(self, results: Mapping[int, PageResult], layout: LayoutInput) -> Dict[str, str]:
        if layout is None:
            return {}

        if isinstance(layout, LayoutAnalysis):
            return {
                f"{self.base_name}-{table_id}": csv_text
                for table_id, csv_text in tables_to_csv(layout).items()
            }

        csvs = {}
        for page_index in self.exporters["text"].page_indices(results):
            page_layout = layout.get(page_index)
            if page_layout is None:
                continue
            for table_id, csv_text in tables_to_csv(page_layout).items():
                csvs[f"{self.base_name}-page{page_index + 1}-{table_id}"] = csv_text
        return csvs
