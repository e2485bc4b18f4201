"""
ABOUTME: Converts w:r runs into text, tab and break nodes carrying marks
ABOUTME: Walks inline wrappers (hyperlinks, insertions, content controls) in document order
"""

import copy
from typing import List, Optional, Sequence

from .comments import CommentRangeStack
from .common import half_points_to_pt
from .context import ResolutionContext
from .markers import remap_symbol_char
from .styles import RunProperties, parse_run_properties
from .xml_tree import XmlNode

# Revision wrappers and the mark each one applies to its content
TRACK_CHANGE_KINDS = {
    'ins': 'insertion',
    'moveTo': 'insertion',
    'del': 'deletion',
    'moveFrom': 'deletion',
}

# Inline wrappers whose children are walked as if inlined
TRANSPARENT_INLINE = ('hyperlink', 'smartTag', 'customXml', 'fldSimple', 'dir', 'bdo')

NO_BREAK_HYPHEN = '\u2011'
SOFT_HYPHEN = '\u00ad'


def track_change_kind(node: XmlNode) -> Optional[str]:
    for name, kind in TRACK_CHANGE_KINDS.items():
        if node.is_(name):
            return kind
    return None


def track_change_mark(node: XmlNode) -> dict:
    return {
        'type': track_change_kind(node),
        'attrs': {
            'author': node.get('author') or 'Unknown',
            'date': node.get('date') or '',
        },
    }


def formatting_marks(props: Optional[RunProperties]) -> List[dict]:
    """
    Marks for resolved run formatting, in a fixed order:
    bold, italic, underline, strike, highlight, then one textStyle.
    Toggles that are off never produce a mark.
    """
    if props is None:
        return []
    marks = []
    if props.bold:
        marks.append({'type': 'bold'})
    if props.italic:
        marks.append({'type': 'italic'})
    if props.underline:
        marks.append({'type': 'underline'})
    if props.strike:
        marks.append({'type': 'strike'})
    if props.highlight:
        marks.append({'type': 'highlight', 'attrs': {'color': props.highlight}})

    text_style = {}
    if props.color:
        text_style['color'] = f'#{props.color}'
    if props.font_size:
        size = half_points_to_pt(props.font_size)
        if size:
            text_style['fontSize'] = size
    if props.font_family:
        text_style['fontFamily'] = props.font_family
    if text_style:
        marks.append({'type': 'textStyle', 'attrs': text_style})
    return marks


def dedupe_marks(marks: Sequence[dict]) -> List[dict]:
    """Drop repeated marks (same type and attrs), keeping first occurrences."""
    result = []
    for mark in marks:
        if mark not in result:
            result.append(mark)
    return result


def symbol_text(sym: XmlNode) -> str:
    """w:sym char="F0FC" font="Wingdings" -> the glyph it displays as."""
    char = sym.get('char')
    if not char:
        return ''
    try:
        code_point = int(char, 16)
    except ValueError:
        return ''
    return remap_symbol_char(chr(code_point), sym.get('font'))


def run_nodes(run: XmlNode, marks: Sequence[dict]) -> List[dict]:
    """
    Split a run's content into inline nodes.

    Text accumulates until a tab or break, which flushes it as a text node
    and adds its own node. Tabs and breaks carry no marks.
    """
    nodes = []
    buffer = []

    def flush():
        if not buffer:
            return
        node = {'type': 'text', 'text': ''.join(buffer)}
        if marks:
            node['marks'] = copy.deepcopy(list(marks))
        nodes.append(node)
        buffer.clear()

    for child in run.elements:
        if child.is_('t', 'delText'):
            buffer.append(child.text)
        elif child.is_('tab', 'ptab'):
            flush()
            nodes.append({'type': 'tab'})
        elif child.is_('br'):
            flush()
            if child.get('type') == 'page':
                nodes.append({'type': 'pageBreak'})
            else:
                nodes.append({'type': 'hardBreak'})
        elif child.is_('cr'):
            flush()
            nodes.append({'type': 'hardBreak'})
        elif child.is_('noBreakHyphen'):
            buffer.append(NO_BREAK_HYPHEN)
        elif child.is_('softHyphen'):
            buffer.append(SOFT_HYPHEN)
        elif child.is_('sym'):
            buffer.append(symbol_text(child))
    flush()
    return [node for node in nodes if node['type'] != 'text' or node['text']]


class InlineCollector:
    """
    Walks the inline content of one paragraph.

    Holds the paragraph's run defaults and its comment range stack; the
    track-change marks of enclosing wrappers are passed down the recursion.
    """

    def __init__(self, context: ResolutionContext, run_defaults: Optional[RunProperties] = None):
        self.context = context
        self.run_defaults = run_defaults
        self.comment_ranges = CommentRangeStack()

    def run_properties(self, run: XmlNode) -> Optional[RunProperties]:
        """Direct rPr over the character style over the paragraph's run defaults."""
        rpr = run.find('rPr')
        effective = self.run_defaults
        if rpr is not None:
            rstyle = rpr.find('rStyle')
            if rstyle is not None:
                char_style = self.context.styles.resolve(rstyle.get('val'), self.context.diagnostics)
                if char_style is not None and char_style.run is not None:
                    effective = char_style.run.over(effective)
            direct = parse_run_properties(rpr)
            if direct is not None:
                effective = direct.over(effective)
        return effective

    def run(self, run: XmlNode, marks: Sequence[dict] = ()) -> List[dict]:
        all_marks = list(marks)
        all_marks.extend(self.comment_ranges.marks(self.context.comments))
        all_marks.extend(formatting_marks(self.run_properties(run)))
        return run_nodes(run, dedupe_marks(all_marks))

    def collect(self, children: Sequence[XmlNode], marks: Sequence[dict] = ()) -> List[dict]:
        nodes = []
        for child in children:
            if child.is_text:
                continue
            if child.is_('r'):
                nodes.extend(self.run(child, marks))
            elif child.is_('commentRangeStart'):
                self.comment_ranges.open(child.get('id'))
            elif child.is_('commentRangeEnd'):
                self.comment_ranges.close(child.get('id'))
            elif track_change_kind(child):
                nodes.extend(self.collect(child.children, list(marks) + [track_change_mark(child)]))
            elif child.is_('sdt'):
                content = child.find('sdtContent')
                if content is not None:
                    nodes.extend(self.collect(content.children, marks))
            elif child.is_(*TRANSPARENT_INLINE):
                nodes.extend(self.collect(child.children, marks))
        return nodes
