"""
ABOUTME: Renders list marker text from a number format, level text and counter
ABOUTME: Remaps symbol-font bullet glyphs (Wingdings, Symbol, PUA) to Unicode
"""

import re
from typing import Dict, Optional

PLACEHOLDER_PATTERN = re.compile(r'%([1-9])')

HEAVENLY_STEMS = '甲乙丙丁戊己庚辛壬癸'

# Fallback bullets by level (level mod 9)
DEFAULT_BULLETS = ('•', '○', '■', '□', '▪', '▫', '◆', '◇', '►')
GENERIC_BULLET = '•'

# Glyph codes of symbol fonts (without the U+F000 PUA offset) -> Unicode look-alike
SYMBOL_FONT_GLYPHS = {
    'symbol': {
        0xB7: '•', 0xA7: '♣', 0xA8: '♦', 0xA9: '♥', 0xAA: '♠',
        0x2D: '−', 0xAE: '→', 0xDE: '⇒', 0xD7: '⋅', 0xB0: '°',
    },
    'wingdings': {
        0x6C: '●', 0x6D: '❍', 0x6E: '■', 0x6F: '□', 0x70: '◻',
        0x71: '❑', 0x72: '❒', 0x73: '⬧', 0x74: '⧫', 0x75: '◆',
        0x76: '❖', 0x77: '⬥', 0x9F: '•', 0xA1: '○', 0xA4: '◉',
        0xA7: '▪', 0xA8: '◻', 0xD8: '➢', 0xE0: '→', 0xE8: '➔',
        0xF0: '⇨', 0xFB: '✗', 0xFC: '✓', 0xFE: '☑',
    },
    'wingdings 2': {
        0x97: '•', 0x98: '•', 0xA1: '○', 0xA2: '◯', 0xA3: '◯',
        0xF0: '◼', 0xF1: '◻', 0x50: '✓', 0x4F: '✗',
    },
    'wingdings 3': {
        0x7D: '►', 0x75: '▶', 0x71: '◆', 0xC4: '►',
    },
    'webdings': {
        0x3D: '■', 0x6E: '●', 0x63: '□',
    },
}

# PUA glyphs seen without a usable font name (Symbol / Wingdings bullets)
PUA_GLYPHS = {
    0xF0B7: '•', 0xF0A7: '▪', 0xF0A8: '◻', 0xF0D8: '➢', 0xF0FC: '✓',
    0xF076: '❖', 0xF06E: '■', 0xF06C: '●', 0xF06F: '□', 0xF075: '◆',
    0xF0A1: '○', 0xF0E8: '➔', 0xF0FB: '✗',
}

# Word's second-level bullet is a letter "o" in Courier New
LITERAL_FONT_GLYPHS = {
    'courier new': {'o': '○'},
}


def _is_private_use(code_point: int) -> bool:
    return 0xE000 <= code_point <= 0xF8FF


def remap_symbol_char(char: str, font: Optional[str] = None) -> str:
    """
    Map one bullet character to the Unicode glyph it displays as.

    Symbol fonts place glyphs either in the PUA (U+F020-U+F0FF) or at their
    plain 8-bit code; both forms are looked up in the font's table. Any
    other PUA character becomes a generic bullet, since no text font can
    render it. Ordinary characters in ordinary fonts pass through.
    """
    if not char:
        return char
    code_point = ord(char)
    font_key = font.strip().lower() if font else None

    if font_key in SYMBOL_FONT_GLYPHS:
        glyph_code = code_point - 0xF000 if 0xF000 <= code_point <= 0xF0FF else code_point
        glyph = SYMBOL_FONT_GLYPHS[font_key].get(glyph_code)
        if glyph is not None:
            return glyph
        return GENERIC_BULLET

    if font_key in LITERAL_FONT_GLYPHS and char in LITERAL_FONT_GLYPHS[font_key]:
        return LITERAL_FONT_GLYPHS[font_key][char]

    if _is_private_use(code_point):
        return PUA_GLYPHS.get(code_point, GENERIC_BULLET)
    return char


def remap_symbol_text(text: str, font: Optional[str] = None) -> str:
    return ''.join(remap_symbol_char(char, font) for char in text)


def default_bullet(level: int) -> str:
    return DEFAULT_BULLETS[level % len(DEFAULT_BULLETS)]


def to_roman(n: int) -> str:
    """Convert integer to Roman numeral (uppercase)"""
    if n <= 0 or n >= 4000:
        return str(n)
    values = [(1000, 'M'), (900, 'CM'), (500, 'D'), (400, 'CD'),
              (100, 'C'), (90, 'XC'), (50, 'L'), (40, 'XL'),
              (10, 'X'), (9, 'IX'), (5, 'V'), (4, 'IV'), (1, 'I')]
    result = ''
    for value, numeral in values:
        while n >= value:
            result += numeral
            n -= value
    return result


def to_chinese(n: int) -> str:
    """Convert integer to Chinese numeral (1-99)"""
    digits = '零一二三四五六七八九'
    if n <= 0 or n > 99:
        return str(n)
    if n < 10:
        return digits[n]
    if n < 20:
        return '十' + (digits[n % 10] if n % 10 else '')
    tens = n // 10
    ones = n % 10
    return digits[tens] + '十' + (digits[ones] if ones else '')


def to_full_width(n: int) -> str:
    return ''.join(chr(0xFF10 + int(digit)) if digit.isdigit() else digit for digit in str(n))


def to_enclosed_circle(n: int) -> str:
    if 1 <= n <= 20:
        return chr(0x2460 + n - 1)
    return str(n)


# Number format converters
FORMAT_CONVERTERS = {
    'decimal': lambda n: str(n),
    'decimalZero': lambda n: f'{n:02d}' if 0 <= n < 10 else str(n),
    'decimalFullWidth': to_full_width,
    'decimalFullWidth2': to_full_width,
    'decimalEnclosedCircle': to_enclosed_circle,
    'upperRoman': lambda n: to_roman(n),
    'lowerRoman': lambda n: to_roman(n).lower(),
    'upperLetter': lambda n: chr(ord('A') + (n - 1) % 26),
    'lowerLetter': lambda n: chr(ord('a') + (n - 1) % 26),
    'ideographTraditional': lambda n: HEAVENLY_STEMS[(n - 1) % 10],
    'chineseCounting': to_chinese,
    'chineseCountingThousand': to_chinese,
    'none': lambda n: '',
}


def format_number(num_fmt: str, value: int) -> str:
    """Render a counter value in a numbering format; unknown formats fall back to decimal."""
    converter = FORMAT_CONVERTERS.get(num_fmt or 'decimal', FORMAT_CONVERTERS['decimal'])
    return converter(value)


def bullet_marker(lvl_text: Optional[str], level: int, font: Optional[str] = None) -> str:
    """A literal level text is the bullet itself; otherwise use the level default."""
    if lvl_text and '%' not in lvl_text:
        return remap_symbol_text(lvl_text, font)
    return default_bullet(level)


def render_marker(num_fmt: str, lvl_text: Optional[str], value: int, level: int = 0,
                  font: Optional[str] = None, parent_markers: Dict[int, str] = None) -> str:
    """
    Build the visible marker for one list paragraph.

    Args:
        num_fmt: w:numFmt value of the paragraph's level
        lvl_text: w:lvlText template (e.g. "%1.", "第%1条", "%1.%2") or literal bullet
        value: resolved counter value for the paragraph's level
        level: 0-based level of the paragraph
        font: bullet font of the level (for symbol remapping)
        parent_markers: rendered markers of shallower levels, keyed by level,
            used for %1..%n placeholders that refer to parent levels

    Returns:
        Marker text such as "3.", "ii)", "甲", "•"
    """
    if num_fmt == 'bullet':
        base = bullet_marker(lvl_text, level, font)
        if not lvl_text or '%' not in lvl_text:
            return base
    else:
        base = format_number(num_fmt, value)

    if not lvl_text:
        return base

    parents = parent_markers or {}

    def _substitute(match: re.Match) -> str:
        placeholder_level = int(match.group(1)) - 1
        if placeholder_level == level:
            return base
        if placeholder_level < level:
            return parents.get(placeholder_level, '')
        return ''

    return PLACEHOLDER_PATTERN.sub(_substitute, lvl_text)
