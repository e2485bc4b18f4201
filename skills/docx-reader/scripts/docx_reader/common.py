"""Shared constants, switches and diagnostics for the DOCX reader."""

import os
import sys


# ============================================================
# Constants
# ============================================================

NS = {
    'w': 'http://schemas.openxmlformats.org/wordprocessingml/2006/main',
    'w14': 'http://schemas.microsoft.com/office/word/2010/wordml',
    'r': 'http://schemas.openxmlformats.org/officeDocument/2006/relationships',
}

DOCUMENT_PART = 'word/document.xml'
STYLES_PART = 'word/styles.xml'
NUMBERING_PART = 'word/numbering.xml'
COMMENTS_PART = 'word/comments.xml'

OPTIONAL_PARTS = (STYLES_PART, NUMBERING_PART, COMMENTS_PART)

# Values that switch an OOXML on/off property off
FALSE_VALUES = ('0', 'false', 'off', 'none')


class MissingMainDocumentError(ValueError):
    """Raised when a DOCX archive has no word/document.xml part."""

    def __init__(self, detail: str = ''):
        message = f"Invalid DOCX: {DOCUMENT_PART} not found"
        if detail:
            message += f" ({detail})"
        super().__init__(message)


# ============================================================
# Environment switches
# ============================================================

def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value == '':
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def is_debug_enabled() -> bool:
    """Check whether DOCX_READER_DEBUG asks for trace output."""
    return _env_flag('DOCX_READER_DEBUG', False)


def are_warnings_enabled() -> bool:
    """Check whether DOCX_READER_WARNINGS allows warnings (on by default)."""
    return _env_flag('DOCX_READER_WARNINGS', True)


class Diagnostics:
    """
    Stderr reporter shared by one document load.

    Warnings cover recoverable anomalies that still produce a tree
    (unclosed comment ranges, style cycles). Debug lines trace decisions
    and are only printed when debug output is enabled.
    """

    def __init__(self, debug: bool = None, warnings: bool = None):
        self.debug_enabled = is_debug_enabled() if debug is None else debug
        self.warnings_enabled = are_warnings_enabled() if warnings is None else warnings
        self.warning_count = 0

    def warn(self, message: str):
        self.warning_count += 1
        if self.warnings_enabled:
            print(f"Warning: {message}", file=sys.stderr)

    def debug(self, message: str):
        if self.debug_enabled:
            print(f"[debug] {message}", file=sys.stderr)


def half_points_to_pt(value: str):
    """Convert a w:sz half-point value to a CSS point string ("24" -> "12pt")."""
    try:
        half_points = int(value)
    except (TypeError, ValueError):
        return None
    points = half_points / 2
    if points == int(points):
        return f"{int(points)}pt"
    return f"{points}pt"


def parse_int(value, default=None):
    try:
        return int(value)
    except (TypeError, ValueError):
        return default
