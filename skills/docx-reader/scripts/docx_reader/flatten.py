"""
ABOUTME: Flattens block-level wrappers (content controls, revisions, customXml) into a block stream
ABOUTME: Dispatches paragraphs and tables to their normalizers in document order
"""

from typing import List, Sequence

from .context import ResolutionContext
from .paragraph import normalize_paragraph
from .runs import TRANSPARENT_INLINE, track_change_kind, track_change_mark
from .tables import normalize_table
from .xml_tree import XmlNode

# Inline-level elements that can appear directly in a block container
LOOSE_INLINE = ('r', 'commentRangeStart', 'commentRangeEnd') + TRANSPARENT_INLINE


def _loose_paragraph(children: List[XmlNode], context: ResolutionContext,
                     marks: Sequence[dict]) -> List[dict]:
    """Wrap runs found outside any w:p in a synthesized paragraph; dropped if empty."""
    blocks = normalize_paragraph(XmlNode('w:p', children=list(children)), context, marks)
    if not blocks[0].get('content'):
        return []
    return blocks


def collect_blocks(children: Sequence[XmlNode], context: ResolutionContext,
                   marks: Sequence[dict] = ()) -> List[dict]:
    """
    Convert the children of a block container (w:body, w:tc, w:sdtContent...).

    Content controls and customXml are transparent; block-level w:ins/w:del
    (and moves) add their revision mark to everything inside. Wrappers may
    nest in any combination.
    """
    blocks = []
    loose = []

    def flush_loose():
        if loose:
            blocks.extend(_loose_paragraph(loose, context, marks))
            loose.clear()

    for child in children:
        if child.is_text:
            continue
        if child.is_('p'):
            flush_loose()
            blocks.extend(normalize_paragraph(child, context, marks))
        elif child.is_('tbl'):
            flush_loose()
            blocks.append(normalize_table(child, context, marks))
        elif child.is_('sdt'):
            flush_loose()
            content = child.find('sdtContent')
            if content is not None:
                blocks.extend(collect_blocks(content.children, context, marks))
        elif track_change_kind(child):
            flush_loose()
            blocks.extend(collect_blocks(child.children, context, list(marks) + [track_change_mark(child)]))
        elif child.is_('customXml'):
            flush_loose()
            blocks.extend(collect_blocks(child.children, context, marks))
        elif child.is_(*LOOSE_INLINE):
            loose.append(child)
    flush_loose()
    return blocks
