"""
Tests for layout analysis: script direction, headers/footers, columns and
reading order.
"""

import pytest
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from helpers import make_block, make_page, make_word, block_from_lines, grid_lines

from ocr_layout.config import LayoutConfig, SpanPolicy
from ocr_layout.utils.geometry import BoundingBox
from ocr_layout.utils.layout import (
    LayoutAnalyzer,
    analyze_layout,
    analyze_pages,
    build_reading_order,
    detect_columns,
    detect_headers_footers,
    detect_image_regions,
    find_column_boundaries,
)
from ocr_layout.utils.models import (
    Column,
    LayoutAnalysis,
    RegionType,
    ScriptDirection,
    Table,
    TextRegion,
    TextRegionType,
)
from ocr_layout.utils.script import detect_script_direction


def _column(column_id, box):
    return Column(id=column_id, bbox=BoundingBox(*box), blocks=[], order=0)


class TestScriptDirection:
    """Test script direction detection."""

    def test_latin_text_is_ltr(self):
        """Test Latin text detection."""
        page = make_page(text="This is English text")
        assert detect_script_direction(page) == ScriptDirection.LTR

    def test_empty_page_is_ltr(self):
        """Test direction of an empty page."""
        page = make_page(text="")
        assert detect_script_direction(page) == ScriptDirection.LTR

    def test_arabic_is_rtl(self):
        """Test Arabic text detection."""
        page = make_page(text="مرحبا العالم")
        assert detect_script_direction(page) == ScriptDirection.RTL

    def test_hebrew_is_rtl(self):
        """Test Hebrew text detection."""
        page = make_page(text="שלום עולם")
        assert detect_script_direction(page) == ScriptDirection.RTL

    def test_cjk_with_tall_words_is_ttb(self):
        """Most word boxes at least twice as tall as wide means vertical text."""
        words = [make_word("縦書き", (700 - i * 40, 100, 720 - i * 40, 300)) for i in range(5)]
        page = make_page(text="縦書きの日本語", words=words)
        assert detect_script_direction(page) == ScriptDirection.TTB

    def test_cjk_with_wide_words_is_ltr(self):
        """Test horizontal CJK text."""
        words = [make_word("横書き", (100, 100 + i * 40, 300, 120 + i * 40)) for i in range(5)]
        page = make_page(text="横書きの日本語", words=words)
        assert detect_script_direction(page) == ScriptDirection.LTR

    def test_cjk_vertical_share_must_exceed_threshold(self):
        """Exactly 30% vertical words is not enough."""
        tall = [make_word("縦", (i * 40, 100, i * 40 + 20, 300)) for i in range(3)]
        wide = [make_word("横", (100, 400 + i * 40, 300, 420 + i * 40)) for i in range(7)]
        page = make_page(text="日本語", words=tall + wide)
        assert detect_script_direction(page) == ScriptDirection.LTR

    def test_rtl_takes_priority_over_cjk(self):
        """Test RTL precedence over CJK."""
        words = [make_word("縦", (i * 40, 100, i * 40 + 20, 300)) for i in range(5)]
        page = make_page(text="日本語 مرحبا", words=words)
        assert detect_script_direction(page) == ScriptDirection.RTL

    def test_only_first_thousand_characters_sampled(self):
        """Test the sampling limit."""
        page = make_page(text="a" * 1000 + "مرحبا")
        assert detect_script_direction(page) == ScriptDirection.LTR


class TestHeadersFooters:
    """Test header/footer classification."""

    def test_partition_by_vertical_center(self):
        """Test header/footer split by vertical center."""
        header = make_block("Header", (100, 20, 700, 80))
        content = make_block("Content", (100, 200, 700, 800))
        footer = make_block("Footer", (100, 920, 700, 980))

        split = detect_headers_footers([content, footer, header], 1000, 0.10)

        assert [h.text for h in split.headers] == ["Header"]
        assert [f.text for f in split.footers] == ["Footer"]
        assert split.content_blocks == [content]
        assert split.headers[0].type == TextRegionType.HEADER
        assert split.footers[0].type == TextRegionType.FOOTER

    def test_tall_block_near_top_is_content(self):
        """A block starting in the header band but centered below it is body text."""
        block = make_block("Body", (100, 50, 700, 400))
        split = detect_headers_footers([block], 1000, 0.10)

        assert split.headers == []
        assert split.content_blocks == [block]

    def test_input_order_preserved(self):
        """Test that input order is preserved."""
        second = make_block("Second", (500, 10, 700, 40))
        first = make_block("First", (100, 30, 300, 60))

        split = detect_headers_footers([second, first], 1000, 0.10)

        assert [h.text for h in split.headers] == ["Second", "First"]
        assert [h.id for h in split.headers] == ["header-0", "header-1"]

    def test_custom_threshold(self):
        """Test a custom band threshold."""
        block = make_block("Near top", (100, 120, 700, 160))

        assert detect_headers_footers([block], 1000, 0.10).headers == []
        assert len(detect_headers_footers([block], 1000, 0.20).headers) == 1


class TestColumnDetection:
    """Test multi-column detection."""

    def test_no_blocks(self):
        """Test column detection with no blocks."""
        assert detect_columns([], 800) == ([], [])

    def test_single_column(self):
        """Test single column detection."""
        blocks = [
            make_block("Block 1", (100, 200, 700, 300)),
            make_block("Block 2", (100, 320, 700, 420)),
        ]

        columns, dropped = detect_columns(blocks, 800)

        assert len(columns) == 1
        assert columns[0].blocks == blocks
        assert columns[0].bbox.to_tuple() == (100, 200, 700, 420)
        assert dropped == []

    def test_two_columns(self):
        """Test two column detection."""
        left = [make_block("Left 1", (50, 200, 350, 300)), make_block("Left 2", (50, 320, 350, 420))]
        right = [make_block("Right 1", (450, 200, 750, 300)), make_block("Right 2", (450, 320, 750, 420))]

        columns, dropped = detect_columns(left + right, 800)

        assert len(columns) == 2
        assert columns[0].blocks == left
        assert columns[1].blocks == right
        assert [c.order for c in columns] == [0, 1]
        assert [c.id for c in columns] == ["col-0", "col-1"]
        assert dropped == []

    def test_gap_must_exceed_threshold(self):
        """A 20px gap on an 800px page stays under the 24px threshold."""
        blocks = [make_block("A", (0, 200, 390, 300)), make_block("B", (410, 200, 800, 300))]

        assert len(find_column_boundaries(blocks, 800 * 0.03)) == 0
        assert len(detect_columns(blocks, 800)[0]) == 1

    def test_boundary_is_gap_midpoint(self):
        """Test boundary placement."""
        blocks = [make_block("A", (0, 200, 200, 300)), make_block("B", (400, 200, 600, 300))]
        assert find_column_boundaries(blocks, 620 * 0.03) == [300]

    def test_straddling_block_dropped(self):
        """Test the drop policy."""
        left = make_block("Left", (50, 200, 350, 300))
        right = make_block("Right", (450, 200, 750, 300))
        wide = make_block("Wide", (40, 400, 700, 500))

        columns, dropped = detect_columns([left, right, wide], 800, span_policy=SpanPolicy.DROP)

        assert [c.blocks for c in columns] == [[left], [right]]
        assert dropped == [wide]

    def test_straddling_block_joins_most_overlapped_column(self):
        """Test the overlap policy."""
        left = make_block("Left", (50, 200, 350, 300))
        right = make_block("Right", (450, 200, 750, 300))
        wide = make_block("Wide", (40, 400, 700, 500))

        columns, dropped = detect_columns([left, right, wide], 800, span_policy=SpanPolicy.OVERLAP)

        assert [c.blocks for c in columns] == [[left, wide], [right]]
        assert columns[0].bbox.to_tuple() == (40, 200, 700, 500)
        assert dropped == []

    def test_three_columns(self):
        """Test three column detection."""
        blocks = [
            make_block("A", (20, 200, 240, 300)),
            make_block("B", (280, 200, 520, 300)),
            make_block("C", (560, 200, 780, 300)),
        ]

        columns, _ = detect_columns(blocks, 800)

        assert [c.blocks[0].text for c in columns] == ["A", "B", "C"]


class TestReadingOrder:
    """Test reading order construction."""

    def test_headers_first_footers_last(self):
        """Test header and footer placement."""
        headers = [TextRegion("header-0", BoundingBox(0, 0, 100, 20), "H", TextRegionType.HEADER, 90)]
        footers = [TextRegion("footer-0", BoundingBox(0, 980, 100, 1000), "F", TextRegionType.FOOTER, 90)]
        columns = [_column("col-0", (0, 100, 100, 900))]

        order = build_reading_order(columns, [], [], headers, footers, ScriptDirection.LTR)

        assert [r.type for r in order] == [RegionType.HEADER, RegionType.COLUMN, RegionType.FOOTER]
        assert [r.order for r in order] == [0, 1, 2]

    def test_ltr_left_column_first(self):
        """Test left-to-right order."""
        columns = [_column("right", (450, 200, 750, 800)), _column("left", (50, 205, 350, 800))]
        order = build_reading_order(columns, [], [], [], [], ScriptDirection.LTR)
        assert [r.id for r in order] == ["left", "right"]

    def test_rtl_right_column_first(self):
        """Test right-to-left order."""
        columns = [_column("left", (50, 200, 350, 800)), _column("right", (450, 205, 750, 800))]
        order = build_reading_order(columns, [], [], [], [], ScriptDirection.RTL)
        assert [r.id for r in order] == ["right", "left"]

    def test_rows_beyond_tolerance_read_top_down(self):
        """Regions more than 20px apart vertically keep top-to-bottom order."""
        columns = [_column("lower-left", (50, 300, 350, 800)), _column("upper-right", (450, 200, 750, 800))]

        for direction in (ScriptDirection.LTR, ScriptDirection.RTL):
            order = build_reading_order(columns, [], [], [], [], direction)
            assert [r.id for r in order] == ["upper-right", "lower-left"]

    def test_ttb_reads_columns_from_the_right(self):
        """Test vertical order."""
        columns = [
            _column("left", (50, 100, 150, 900)),
            _column("right-lower", (600, 500, 700, 900)),
            _column("right-upper", (610, 100, 710, 450)),
        ]

        order = build_reading_order(columns, [], [], [], [], ScriptDirection.TTB)

        assert [r.id for r in order] == ["right-upper", "right-lower", "left"]

    def test_tables_interleave_with_columns(self):
        """Test tables among columns."""
        columns = [_column("col-0", (50, 100, 750, 300)), _column("col-1", (50, 600, 750, 900))]
        tables = [Table(id="table-0", bbox=BoundingBox(50, 400, 750, 500), rows=2, cols=2)]

        order = build_reading_order(columns, tables, [], [], [], ScriptDirection.LTR)

        assert [r.id for r in order] == ["col-0", "table-0", "col-1"]
        assert order[1].type == RegionType.TABLE

    def test_empty(self):
        """Test reading order of an empty page."""
        assert build_reading_order([], [], [], [], [], ScriptDirection.LTR) == []


class TestLayoutAnalyzer:
    """Test the page-level orchestrator."""

    @pytest.fixture
    def full_page(self):
        """Header, two columns, a 2x2 table in the left column and a footer."""
        table_lines = grid_lines([["A", "B"], ["1", "2"]], [50, 200], top=500)
        blocks = [
            make_block("Running head", (100, 20, 700, 60)),
            make_block("Left text", (50, 200, 350, 260)),
            make_block("Right text", (450, 300, 750, 360)),
            block_from_lines(table_lines),
            make_block("Page 1", (350, 940, 450, 970)),
        ]
        return make_page(blocks)

    def test_empty_page(self):
        """Test analysis of an empty page."""
        layout = analyze_layout(make_page())

        assert layout.columns == []
        assert layout.tables == []
        assert layout.images == []
        assert layout.headers == []
        assert layout.footers == []
        assert layout.reading_order == []
        assert layout.is_multi_column is False
        assert layout.estimated_columns == 0

    def test_single_column_default(self):
        """Test analysis of a single-column page."""
        page = make_page([
            make_block("Block 1", (100, 200, 700, 300)),
            make_block("Block 2", (100, 320, 700, 420)),
        ])

        layout = analyze_layout(page)

        assert layout.is_multi_column is False
        assert layout.estimated_columns == 1

    def test_two_column_sample(self):
        """Test analysis of a two-column page."""
        page = make_page([
            make_block("Left", (0, 200, 200, 300)),
            make_block("Right", (400, 200, 600, 300)),
        ], width=620)

        layout = analyze_layout(page)

        assert len(layout.columns) == 2
        assert [c.order for c in layout.columns] == [0, 1]
        assert layout.columns[0].blocks[0].text == "Left"
        assert layout.columns[1].blocks[0].text == "Right"
        assert layout.is_multi_column is True
        assert layout.estimated_columns == 2

    def test_full_page_structure(self, full_page):
        """Test headers, columns, tables and footers together."""
        layout = analyze_layout(full_page)

        assert [h.text for h in layout.headers] == ["Running head"]
        assert [f.text for f in layout.footers] == ["Page 1"]
        assert layout.estimated_columns == 2
        assert len(layout.tables) == 1
        assert (layout.tables[0].rows, layout.tables[0].cols) == (2, 2)
        assert [r.id for r in layout.reading_order] == [
            "header-0", "col-0", "col-1", "table-0", "footer-0"
        ]

    def test_reading_order_completeness(self, full_page):
        """Test that every region appears once in order."""
        layout = analyze_layout(full_page)

        expected = (
            len(layout.headers) + len(layout.columns) + len(layout.tables)
            + len(layout.images) + len(layout.footers)
        )
        assert len(layout.reading_order) == expected
        assert sorted(r.order for r in layout.reading_order) == list(range(expected))

    def test_partition_invariant(self):
        """Every block is a header, footer, column member or explicitly dropped."""
        blocks = [
            make_block("Header", (100, 20, 700, 60)),
            make_block("Left", (50, 200, 350, 300)),
            make_block("Right", (450, 200, 750, 300)),
            make_block("Wide", (40, 400, 700, 500)),
            make_block("Footer", (100, 940, 700, 970)),
        ]

        layout = analyze_layout(make_page(blocks))
        members = [b for c in layout.columns for b in c.blocks]

        assert [b.text for b in layout.dropped_blocks] == ["Wide"]
        assert (
            len(layout.headers) + len(layout.footers) + len(members) + len(layout.dropped_blocks)
            == len(blocks)
        )

    def test_overlap_policy_keeps_every_block(self):
        """Test that the overlap policy drops nothing."""
        blocks = [
            make_block("Left", (50, 200, 350, 300)),
            make_block("Right", (450, 200, 750, 300)),
            make_block("Wide", (40, 400, 700, 500)),
        ]

        layout = analyze_layout(make_page(blocks), LayoutConfig(span_policy=SpanPolicy.OVERLAP))

        assert layout.dropped_blocks == []
        assert sum(len(c.blocks) for c in layout.columns) == 3

    def test_idempotent(self, full_page):
        """Test repeated analysis of one page."""
        assert analyze_layout(full_page) == analyze_layout(full_page)

    def test_missing_dimensions_fall_back_to_block_extent(self):
        """Test page size fallback."""
        blocks = [
            make_block("Header", (100, 10, 700, 40)),
            make_block("Left", (50, 200, 350, 600)),
            make_block("Right", (450, 200, 750, 600)),
            make_block("Footer", (100, 960, 700, 990)),
        ]

        layout = analyze_layout(make_page(blocks, width=None, height=None))

        assert layout.estimated_columns == 2
        assert len(layout.headers) == 1
        assert len(layout.footers) == 1

    def test_recognizer_block_tags_ignored(self):
        """A block tagged as a table by the recognizer is still ordinary text."""
        from ocr_layout.utils.models import BlockType

        block = make_block("Not a table", (100, 200, 700, 300))
        block.block_type = BlockType.TABLE

        layout = analyze_layout(make_page([block]))

        assert layout.tables == []
        assert layout.estimated_columns == 1

    def test_rtl_page_orders_columns_right_to_left(self):
        """Test analysis of an RTL page."""
        page = make_page([
            make_block("يسار", (50, 200, 350, 300)),
            make_block("يمين", (450, 200, 750, 300)),
        ], text="مرحبا العالم")

        layout = analyze_layout(page)

        assert layout.language == ScriptDirection.RTL
        assert [r.id for r in layout.reading_order] == ["col-1", "col-0"]

    def test_image_regions_not_detected(self):
        """Test that no image regions are reported."""
        assert detect_image_regions([make_block("Figure", (100, 100, 500, 500))]) == []

    def test_analyzer_reuses_config(self):
        """Test analyzer configuration."""
        config = LayoutConfig(column_gap_ratio=0.2)
        analyzer = LayoutAnalyzer(config)
        page = make_page([
            make_block("Left", (50, 200, 350, 300)),
            make_block("Right", (450, 200, 750, 300)),
        ])

        # 100px gap is below 20% of 800px
        assert analyzer.analyze(page).estimated_columns == 1


class TestAnalyzePages:
    """Test multi-page analysis."""

    def test_threaded_matches_sequential(self):
        """Test threaded multi-page analysis."""
        results = {
            i: make_page([
                make_block(f"Left {i}", (50, 200, 350, 300)),
                make_block(f"Right {i}", (450, 200, 750, 300)),
            ], page_index=i)
            for i in range(4)
        }

        sequential = analyze_pages(results)
        threaded = analyze_pages(results, max_workers=3)

        assert list(threaded) == [0, 1, 2, 3]
        assert threaded == sequential
        assert all(isinstance(a, LayoutAnalysis) for a in threaded.values())


class TestLayoutConfig:
    """Test configuration validation."""

    def test_defaults(self):
        """Test default layout settings."""
        config = LayoutConfig()
        assert config.column_gap_ratio == 0.03
        assert config.header_footer_threshold == 0.10
        assert config.min_table_cells == 4
        assert config.line_overlap_threshold == 0.5
        assert config.span_policy == SpanPolicy.DROP

    def test_invalid_values(self):
        """Test rejection of invalid settings."""
        with pytest.raises(ValueError):
            LayoutConfig(column_gap_ratio=-1)
        with pytest.raises(ValueError):
            LayoutConfig(header_footer_threshold=0.8)
        with pytest.raises(ValueError):
            LayoutConfig(min_table_cells=1)

    def test_span_policy_from_string(self):
        """Test span policy conversion from a string."""
        assert LayoutConfig(span_policy="overlap").span_policy == SpanPolicy.OVERLAP


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
