"""
OCR Layout Reconstruction
=========================

Reconstructs the logical structure of a scanned page from the flat,
geometry-only output of a text-recognition engine.

Main components:
- Script direction detection (ltr, rtl, ttb)
- Header/footer classification
- Multi-column detection
- Table detection from line geometry
- Direction-aware reading order
- Export to plain text, HTML, hOCR, JSON and CSV
"""

__version__ = "1.0.0"
__author__ = "OCR Layout Team"
