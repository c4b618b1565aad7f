#!/usr/bin/env python
"""
Command-line interface for the layout reconstruction engine.

Usage:
    ocr-layout --input <page.json|folder> --output <output_dir> [options]

Examples:
    # Analyze a page and export every format
    ocr-layout --input page.json --output ./output --format all

    # Export pages 1-3 as hOCR with a debug overlay per page
    ocr-layout --input ./pages --output ./output --format hocr --pages 1-3 --debug-image
"""

import sys
from pathlib import Path

# Add src directory to path for imports when running as script
_src_dir = Path(__file__).parent.parent
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

import argparse
import logging
import time
from typing import List, Optional

logger = logging.getLogger("ocr_layout")


def setup_argparser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        description="OCR Layout Reconstruction - Rebuild columns, tables and reading order from recognition output",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  Analyze a page and export all formats:
    ocr-layout --input page.json --output ./output --format all

  Treat blocks straddling a column gap as members of the closest column:
    ocr-layout --input page.json --output ./output --span-policy overlap

  Export only specific pages:
    ocr-layout --input ./pages --output ./output --pages 1-5
        """
    )

    # Required arguments
    parser.add_argument(
        "--input", "-i",
        required=True,
        help="Page result JSON file or folder of JSON files"
    )

    parser.add_argument(
        "--output", "-o",
        required=True,
        help="Output directory for generated files"
    )

    # Output options
    parser.add_argument(
        "--format", "-f",
        nargs="+",
        default=["json", "text"],
        choices=["text", "html", "hocr", "json", "csv", "all"],
        help="Output format(s) (default: json text)"
    )

    parser.add_argument(
        "--base-name",
        default="ocr-export",
        help="Base file name for exported documents (default: ocr-export)"
    )

    parser.add_argument(
        "--pages",
        type=str,
        default=None,
        help="Page range to export, e.g., '1-5' or '1,3,5' (default: all)"
    )

    parser.add_argument(
        "--include-confidence",
        action="store_true",
        help="Highlight word confidence in HTML output"
    )

    parser.add_argument(
        "--include-bboxes",
        action="store_true",
        help="Include block/line/word bounding boxes in JSON output"
    )

    parser.add_argument(
        "--no-paragraphs",
        action="store_true",
        help="Do not keep block (paragraph) structure in text and HTML output"
    )

    parser.add_argument(
        "--no-line-breaks",
        action="store_true",
        help="Do not keep line structure in text and HTML output"
    )

    # Layout options
    parser.add_argument(
        "--column-gap-ratio",
        type=float,
        default=None,
        help="Minimum column gap as a fraction of page width (default: 0.03)"
    )

    parser.add_argument(
        "--header-footer-threshold",
        type=float,
        default=None,
        help="Fraction of page height for header/footer bands (default: 0.10)"
    )

    parser.add_argument(
        "--min-table-cells",
        type=int,
        default=None,
        help="Minimum lines in a table (default: 4)"
    )

    parser.add_argument(
        "--span-policy",
        choices=["drop", "overlap"],
        default=None,
        help="Blocks straddling a column gap: drop them or join the most-overlapped column"
    )

    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Threads for multi-page analysis (default: 1)"
    )

    # Debug
    parser.add_argument(
        "--debug-image",
        action="store_true",
        help="Write a layout overlay PNG per page into <output>/debug"
    )

    parser.add_argument(
        "--image",
        default=None,
        help="Page image to draw the overlay on (single-page input)"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Re-raise errors with a traceback (same as OCR_LAYOUT_DEBUG=true)"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose logging"
    )

    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Only log errors and skip the summary"
    )

    return parser


def parse_page_range(page_str: str, max_pages: int) -> List[int]:
    """Parse a 1-based page range string to a sorted list of page numbers."""
    pages = []

    for part in page_str.split(","):
        part = part.strip()
        if not part:
            continue
        if "-" in part:
            start, end = part.split("-")
            start = max(int(start), 1)
            end = min(int(end), max_pages)
            pages.extend(range(start, end + 1))
        else:
            page = int(part)
            if 1 <= page <= max_pages:
                pages.append(page)

    return sorted(set(pages))


def build_config(args):
    """Merge environment configuration with command-line overrides."""
    from ocr_layout.config import get_config, LayoutConfig, SpanPolicy

    config = get_config()
    layout = vars(config.layout).copy()

    if args.column_gap_ratio is not None:
        layout["column_gap_ratio"] = args.column_gap_ratio
    if args.header_footer_threshold is not None:
        layout["header_footer_threshold"] = args.header_footer_threshold
    if args.min_table_cells is not None:
        layout["min_table_cells"] = args.min_table_cells
    if args.span_policy is not None:
        layout["span_policy"] = SpanPolicy(args.span_policy)

    config.layout = LayoutConfig(**layout)

    if args.workers is not None:
        config.max_workers = max(1, args.workers)

    config.export.include_confidence = args.include_confidence
    config.export.include_bounding_boxes = args.include_bboxes
    config.export.preserve_paragraphs = not args.no_paragraphs
    config.export.preserve_line_breaks = not args.no_line_breaks
    config.debug_mode = config.debug_mode or args.debug

    return config


def run_pipeline(args, config=None) -> int:
    """Load page results, analyze their layout and export."""
    from ocr_layout.utils.io import load_page_results, ensure_dir
    from ocr_layout.utils.layout import analyze_pages
    from ocr_layout.utils.export import DocumentExporter

    start_time = time.time()

    output_dir = ensure_dir(args.output)
    if config is None:
        config = build_config(args)

    input_path = Path(args.input)
    if not input_path.exists():
        logger.error(f"Input not found: {input_path}")
        return 1

    results = load_page_results(input_path)
    if not results:
        logger.error("No pages to process")
        return 1

    if args.pages:
        wanted = parse_page_range(args.pages, max(results) + 1)
        config.export.page_range = [p - 1 for p in wanted if p - 1 in results]
        logger.info(f"Exporting pages: {wanted}")

    logger.info(f"Analyzing {len(results)} page(s)...")
    layouts = analyze_pages(results, config.layout, max_workers=config.max_workers)

    exporter = DocumentExporter(output_dir, args.base_name, config.export)
    written = exporter.export(results, layouts, args.format)

    if args.debug_image:
        write_debug_images(args, results, layouts, output_dir)

    elapsed = time.time() - start_time

    if not args.quiet:
        print("\n" + "=" * 60)
        print("LAYOUT RECONSTRUCTION COMPLETE")
        print("=" * 60)
        print(f"Source: {input_path}")
        print(f"Output: {output_dir}")
        print(f"Pages analyzed: {len(layouts)}")
        print(f"Processing time: {elapsed:.2f}s")
        print()
        for page_index, layout in layouts.items():
            print(f"  Page {page_index + 1}: "
                  f"{layout.estimated_columns} column(s), "
                  f"{len(layout.tables)} table(s), "
                  f"{len(layout.headers)} header(s), "
                  f"{len(layout.footers)} footer(s), "
                  f"direction {layout.language.value}")
        print()
        for fmt, path in written.items():
            print(f"  {fmt}: {path}")
        print("=" * 60)

    return 0


def write_debug_images(args, results, layouts, output_dir: Path):
    """Write one overlay image per analyzed page."""
    from ocr_layout.utils.debug import save_layout_debug

    image = None
    if args.image:
        import cv2
        image = cv2.imread(args.image)
        if image is None:
            logger.warning(f"Could not read page image {args.image}, drawing on a blank canvas")
        elif len(layouts) > 1:
            logger.warning("--image applies to single-page input only, drawing on blank canvases")
            image = None

    for page_index, layout in layouts.items():
        page = results[page_index]
        page_size = (page.image_width, page.image_height) if page.has_dimensions else None
        path = output_dir / "debug" / f"page_{page_index + 1}.png"
        save_layout_debug(layout, path, image=image, page_size=page_size)
        logger.info(f"Saved debug image: {path}")


def main(argv: Optional[List[str]] = None):
    """Main entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    parser = setup_argparser()
    args = parser.parse_args(argv)

    # Configure logging level
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    elif args.quiet:
        logging.getLogger().setLevel(logging.ERROR)

    config = None
    try:
        config = build_config(args)
        exit_code = run_pipeline(args, config)
        sys.exit(exit_code)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(130)
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        # --debug or OCR_LAYOUT_DEBUG=true
        if args.debug or (config is not None and config.debug_mode):
            raise
        sys.exit(1)


if __name__ == "__main__":
    main()
