"""
ABOUTME: Converts w:tbl into table -> tableRow -> tableCell nodes
ABOUTME: Each cell's blocks go through the block flattener; the numbering pass skips tables
"""

from typing import List, Sequence

from .context import ResolutionContext
from .xml_tree import XmlNode


def _unwrap(children: Sequence[XmlNode], name: str) -> List[XmlNode]:
    """Elements named `name`, looking through content controls and customXml."""
    found = []
    for child in children:
        if child.is_text:
            continue
        if child.is_(name):
            found.append(child)
        elif child.is_('sdt'):
            content = child.find('sdtContent')
            if content is not None:
                found.extend(_unwrap(content.children, name))
        elif child.is_('customXml'):
            found.extend(_unwrap(child.children, name))
    return found


def normalize_cell(cell: XmlNode, context: ResolutionContext, marks: Sequence[dict] = ()) -> dict:
    """
    Convert one w:tc. Cells hold any block content, nested tables included.

    List paragraphs in a cell carry their list metadata but no counter:
    the numbering pass does not look inside tables.
    """
    from .flatten import collect_blocks

    blocks = collect_blocks(cell.children, context, marks)
    if not blocks:
        # A cell always holds at least one paragraph
        blocks = [{'type': 'paragraph', 'attrs': {}}]
    return {'type': 'tableCell', 'content': blocks}


def normalize_row(row: XmlNode, context: ResolutionContext, marks: Sequence[dict] = ()) -> dict:
    cells = [normalize_cell(cell, context, marks) for cell in _unwrap(row.children, 'tc')]
    return {'type': 'tableRow', 'content': cells}


def normalize_table(table: XmlNode, context: ResolutionContext, marks: Sequence[dict] = ()) -> dict:
    """Convert one w:tbl; grid, widths and merge markup are not interpreted."""
    rows = [normalize_row(row, context, marks) for row in _unwrap(table.children, 'tr')]
    return {'type': 'table', 'content': rows}
