"""
Utility modules for the layout reconstruction engine.
"""

from .geometry import BoundingBox, union_bboxes
from .models import (
    Baseline, Word, Line, Block, BlockType, PageResult,
    Column, TableCell, Table, TextRegion, ImageRegion, Region, LayoutAnalysis,
    ScriptDirection, RegionType,
)
from .script import detect_script_direction
from .layout import (
    LayoutAnalyzer, analyze_layout, analyze_pages,
    detect_headers_footers, detect_columns, build_reading_order,
)
from .tables import TableDetector, table_to_csv, tables_to_csv
from .export import (
    PlainTextExporter, HTMLExporter, HOCRExporter, JSONExporter, DocumentExporter,
    export_to_plain_text, export_to_html, export_to_hocr, export_to_json,
)
from .io import load_page_results, save_json, load_json, ensure_dir
from .recognition import page_result_from_tesseract

__all__ = [
    # Geometry
    "BoundingBox", "union_bboxes",
    # Models
    "Baseline", "Word", "Line", "Block", "BlockType", "PageResult",
    "Column", "TableCell", "Table", "TextRegion", "ImageRegion", "Region",
    "LayoutAnalysis", "ScriptDirection", "RegionType",
    # Analysis
    "detect_script_direction", "LayoutAnalyzer", "analyze_layout", "analyze_pages",
    "detect_headers_footers", "detect_columns", "build_reading_order",
    # Tables
    "TableDetector", "table_to_csv", "tables_to_csv",
    # Export
    "PlainTextExporter", "HTMLExporter", "HOCRExporter", "JSONExporter",
    "DocumentExporter", "export_to_plain_text", "export_to_html",
    "export_to_hocr", "export_to_json",
    # IO
    "load_page_results", "save_json", "load_json", "ensure_dir",
    "page_result_from_tesseract",
]
