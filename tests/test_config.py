"""
Tests for configuration and environment overrides.
"""

import pytest
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from ocr_layout.config import ExportOptions, LayoutConfig, SpanPolicy, get_config


class TestGetConfig:
    """Test environment overrides."""

    def test_defaults(self, monkeypatch):
        """Test defaults when no environment variables are set."""
        for name in ("COLUMN_GAP_RATIO", "HEADER_FOOTER_THRESHOLD", "MIN_TABLE_CELLS",
                     "SPAN_POLICY", "WORKERS", "DEBUG"):
            monkeypatch.delenv(f"OCR_LAYOUT_{name}", raising=False)

        config = get_config()

        assert config.layout == LayoutConfig()
        assert config.export == ExportOptions()
        assert config.max_workers == 1
        assert config.debug_mode is False

    def test_overrides(self, monkeypatch):
        """Test OCR_LAYOUT_* environment overrides."""
        monkeypatch.setenv("OCR_LAYOUT_COLUMN_GAP_RATIO", "0.05")
        monkeypatch.setenv("OCR_LAYOUT_MIN_TABLE_CELLS", "6")
        monkeypatch.setenv("OCR_LAYOUT_SPAN_POLICY", "OVERLAP")
        monkeypatch.setenv("OCR_LAYOUT_WORKERS", "4")
        monkeypatch.setenv("OCR_LAYOUT_DEBUG", "true")

        config = get_config()

        assert config.layout.column_gap_ratio == 0.05
        assert config.layout.min_table_cells == 6
        assert config.layout.span_policy == SpanPolicy.OVERLAP
        assert config.max_workers == 4
        assert config.debug_mode is True

    def test_non_numeric_value_ignored(self, monkeypatch):
        """Test that a non-numeric override falls back to the default."""
        monkeypatch.setenv("OCR_LAYOUT_COLUMN_GAP_RATIO", "wide")
        assert get_config().layout.column_gap_ratio == 0.03

    def test_invalid_override_rejected(self, monkeypatch):
        """Test that an out-of-range override fails validation."""
        monkeypatch.setenv("OCR_LAYOUT_HEADER_FOOTER_THRESHOLD", "0.9")
        with pytest.raises(ValueError):
            get_config()


class TestLayoutConfigValidation:
    """Test LayoutConfig range checks."""

    @pytest.mark.parametrize("kwargs", [
        {"column_gap_ratio": -0.1},
        {"header_footer_threshold": -0.1},
        {"header_footer_threshold": 0.6},
        {"min_table_cells": 0},
        {"line_overlap_threshold": 1.5},
    ])
    def test_out_of_range(self, kwargs):
        """Test rejection of out-of-range thresholds."""
        with pytest.raises(ValueError):
            LayoutConfig(**kwargs)

    def test_unknown_span_policy(self):
        """Test rejection of an unknown span policy."""
        with pytest.raises(ValueError):
            LayoutConfig(span_policy="full-width")
