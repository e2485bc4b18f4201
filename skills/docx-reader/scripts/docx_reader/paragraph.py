"""
ABOUTME: Normalizes one w:p into a paragraph or heading node
ABOUTME: Applies direct pPr > style chain > document defaults for every paragraph attribute
"""

import re
from typing import List, Optional, Sequence

from .common import half_points_to_pt
from .context import ResolutionContext
from .runs import InlineCollector
from .styles import (
    Indentation,
    NumberingReference,
    ResolvedStyle,
    RunProperties,
    parse_indentation,
    parse_numbering_reference,
    parse_outline_level,
    parse_run_properties,
    parse_spacing,
    parse_tabs,
)
from .xml_tree import XmlNode

MAX_HEADING_LEVEL = 6

# "Heading 1", "heading1", "見出し 1", "見出し１" (full-width digits are int()-able)
HEADING_NAME_PATTERN = re.compile(r'^(?:heading|見出し)\s*(\d+)$', re.IGNORECASE)

# On/off paragraph flags copied from direct pPr
FLAG_ATTRS = ('contextualSpacing', 'snapToGrid', 'keepNext', 'keepLines', 'widowControl')

# Paragraph indent attributes renamed on list paragraphs
LIST_INDENT_ATTRS = {
    'indent': 'listIndentLeft',
    'hanging': 'listIndentHanging',
    'firstLine': 'listIndentFirstLine',
}


def _val(node: Optional[XmlNode], name: str) -> Optional[str]:
    if node is None:
        return None
    child = node.find(name)
    if child is None:
        return None
    return child.get('val')


def _flag_value(ppr: XmlNode, name: str) -> Optional[str]:
    """'1' when the flag element is present without val, its val otherwise."""
    node = ppr.find(name)
    if node is None:
        return None
    return node.get('val', '1')


def heading_level_from_name(name: Optional[str]) -> Optional[int]:
    if not name:
        return None
    match = HEADING_NAME_PATTERN.match(name.strip())
    if not match:
        return None
    level = int(match.group(1))
    if level < 1:
        return None
    return min(level, MAX_HEADING_LEVEL)


def detect_heading_level(style_id: Optional[str], style: Optional[ResolvedStyle],
                         direct_outline: Optional[int]) -> Optional[int]:
    """
    Heading level 1-6 for a paragraph, or None for body text.

    Order: direct w:outlineLvl (0-8 heading, 9 body text), then the style
    name or id pattern, then an outline level inherited through the style chain.
    """
    if direct_outline is not None and 0 <= direct_outline <= 9:
        if direct_outline == 9:
            return None
        return min(direct_outline + 1, MAX_HEADING_LEVEL)

    candidates = (style.name if style else None, style_id)
    for candidate in candidates:
        level = heading_level_from_name(candidate)
        if level:
            return level

    if style is not None and style.outline_level is not None and 0 <= style.outline_level <= 8:
        return min(style.outline_level + 1, MAX_HEADING_LEVEL)
    return None


def _list_heuristic(style_id: Optional[str], style: Optional[ResolvedStyle]) -> Optional[dict]:
    """Styles named like lists ("List Bullet", "ListNumber2") without numPr."""
    names = [value for value in ((style.name if style else None), style_id) if value]
    if not style_id or not any('list' in value.lower() for value in names):
        return None
    is_ordered = not any('bullet' in value.lower() for value in names)
    return {
        'listNumId': f'style-{style_id}',
        'listIlvl': 0,
        'listIsOrdered': is_ordered,
        'listNumFmt': 'decimal' if is_ordered else 'bullet',
        'listStart': 1,
    }


def _indent_list_attrs(indent: Optional[Indentation]) -> dict:
    """
    Indentation of a list paragraph. Left, hanging and firstLine become
    listIndent* attributes; right and the character-based values keep
    their paragraph attribute names.
    """
    if indent is None:
        return {}
    return {LIST_INDENT_ATTRS.get(attr, attr): value for attr, value in indent.to_attrs().items()}


def list_attrs(context: ResolutionContext, style_id: Optional[str], style: Optional[ResolvedStyle],
               direct_ref: Optional[NumberingReference],
               explicit_indent: Optional[Indentation]) -> Optional[dict]:
    """
    Numbering metadata for a paragraph, or None when it is not a list item.

    Counter and marker text are added later by the numbering pass.
    """
    ref = direct_ref or (style.numbering if style else None)
    if ref is None:
        attrs = _list_heuristic(style_id, style)
        if attrs is not None:
            attrs.update(_indent_list_attrs(explicit_indent))
        return attrs

    # numId 0 removes numbering; an unresolvable reference is not a list either
    if ref.num_id == '0':
        return None
    level = context.numbering.level(ref.num_id, ref.ilvl)
    if level is None:
        context.diagnostics.debug(f"numId {ref.num_id} ilvl {ref.ilvl} not defined; paragraph left unnumbered")
        return None

    attrs = {
        'listNumId': ref.num_id,
        'listIlvl': ref.ilvl,
        'listIsOrdered': level.is_ordered,
        'listNumFmt': level.num_fmt,
        'listStart': level.start,
    }
    if level.lvl_text is not None:
        attrs['listLvlText'] = level.lvl_text

    # Indentation written on the paragraph or its style wins over the level's
    if explicit_indent is not None and not explicit_indent.is_empty():
        attrs.update(_indent_list_attrs(explicit_indent.over(level.indent)))
    else:
        attrs.update(_indent_list_attrs(level.indent))
    return attrs


def paragraph_run_defaults(context: ResolutionContext, ppr: Optional[XmlNode],
                           style: Optional[ResolvedStyle]) -> Optional[RunProperties]:
    """pPr/rPr over the style chain's rPr over docDefaults."""
    direct = parse_run_properties(ppr.find('rPr')) if ppr is not None else None
    effective = context.defaults.run if context.defaults is not None else None
    if style is not None and style.run is not None:
        effective = style.run.over(effective)
    if direct is not None:
        effective = direct.over(effective)
    if effective is not None and effective.is_empty():
        return None
    return effective


def paragraph_attrs(context: ResolutionContext, ppr: Optional[XmlNode],
                    style_id: Optional[str], style: Optional[ResolvedStyle],
                    run_defaults: Optional[RunProperties]) -> dict:
    """Block attributes other than heading level and numbering."""
    attrs = {}
    defaults = context.defaults

    if style_id:
        attrs['styleId'] = style_id

    alignment = _val(ppr, 'jc') or (style.alignment if style else None)
    if alignment:
        attrs['textAlign'] = alignment

    spacing = parse_spacing(ppr)
    if style is not None and style.spacing is not None:
        spacing = spacing.over(style.spacing) if spacing is not None else style.spacing
    if defaults is not None and defaults.spacing is not None:
        spacing = spacing.over(defaults.spacing) if spacing is not None else defaults.spacing
    if spacing is not None:
        attrs.update(spacing.to_attrs())

    tabs = parse_tabs(ppr)
    if tabs is None and style is not None:
        tabs = style.tabs
    if tabs:
        attrs['tabs'] = [tab.to_attrs() for tab in tabs]

    if ppr is not None:
        for flag in FLAG_ATTRS:
            value = _flag_value(ppr, flag)
            if value is not None:
                attrs[flag] = value
        shading = ppr.find('shd')
        if shading is not None:
            fill = shading.get('fill')
            if fill and fill != 'auto':
                attrs['backgroundColor'] = f'#{fill}'
    if 'widowControl' not in attrs and defaults is not None and defaults.widow_control is not None:
        attrs['widowControl'] = defaults.widow_control

    if run_defaults is not None:
        if run_defaults.font_size:
            attrs['pPrFontSize'] = half_points_to_pt(run_defaults.font_size)
        if run_defaults.font_family:
            attrs['pPrFontFamily'] = run_defaults.font_family
    return attrs


def explicit_indentation(ppr: Optional[XmlNode], style: Optional[ResolvedStyle]) -> Optional[Indentation]:
    """Indentation from the paragraph and its style chain, ignoring document defaults."""
    direct = parse_indentation(ppr)
    style_indent = style.indent if style is not None else None
    if direct is None:
        return style_indent
    return direct.over(style_indent)


def section_break_follows(ppr: Optional[XmlNode]) -> bool:
    """A pPr/sectPr ends a section; anything but a continuous break starts a new page."""
    if ppr is None:
        return False
    sect_pr = ppr.find('sectPr')
    if sect_pr is None:
        return False
    return _val(sect_pr, 'type') != 'continuous'


def normalize_paragraph(paragraph: XmlNode, context: ResolutionContext,
                        marks: Sequence[dict] = ()) -> List[dict]:
    """
    Convert one w:p into block nodes.

    Returns the paragraph (or heading) node, followed by a pageBreak node
    when the paragraph carries a non-continuous section break. Empty
    paragraphs are kept; their node simply has no content.

    Args:
        paragraph: the w:p element
        context: lookup tables of the document being converted
        marks: track-change marks of block-level wrappers around the paragraph
    """
    ppr = paragraph.find('pPr')
    style_id = _val(ppr, 'pStyle')
    style = context.styles.resolve(style_id, context.diagnostics)

    run_defaults = paragraph_run_defaults(context, ppr, style)
    attrs = paragraph_attrs(context, ppr, style_id, style, run_defaults)

    explicit_indent = explicit_indentation(ppr, style)
    numbering = list_attrs(context, style_id, style, parse_numbering_reference(ppr), explicit_indent)
    if numbering is not None:
        attrs.update(numbering)
    else:
        indent = explicit_indent
        if context.defaults is not None and context.defaults.indent is not None:
            indent = indent.over(context.defaults.indent) if indent is not None else context.defaults.indent
        if indent is not None:
            attrs.update(indent.to_attrs())

    level = detect_heading_level(style_id, style, parse_outline_level(ppr))
    if level:
        attrs['level'] = level

    collector = InlineCollector(context, run_defaults)
    content = collector.collect(paragraph.children, marks)
    collector.comment_ranges.check_closed(context.diagnostics)

    node = {'type': 'heading' if level else 'paragraph', 'attrs': attrs}
    if content:
        node['content'] = content

    blocks = [node]
    if section_break_follows(ppr):
        blocks.append({'type': 'pageBreak'})
    return blocks
