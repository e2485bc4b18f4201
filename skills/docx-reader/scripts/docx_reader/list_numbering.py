"""
ABOUTME: Second pass over normalized blocks assigning list counters and marker text
ABOUTME: Counters live in an explicit {numId: {ilvl: value}} map owned by one pass
"""

from typing import Dict, List, Optional

from .markers import render_marker
from .numbering import NumberingTable


class ListCounterState:
    """
    Counters for one numbering pass.

    Each numId keeps its own counters, so interleaved lists never disturb
    each other, and non-list paragraphs between items do not reset them.
    """

    def __init__(self):
        self._counters: Dict[str, Dict[int, int]] = {}

    def advance(self, num_id: str, ilvl: int) -> int:
        """
        Count one item at (num_id, ilvl) and return its value.

        Every level counts from 1; deeper levels of the same list are
        discarded so re-entering them restarts at 1. w:start stays
        metadata (listStart) and never shifts the counter.
        """
        levels = self._counters.setdefault(num_id, {})
        for deeper in [level for level in levels if level > ilvl]:
            del levels[deeper]
        levels[ilvl] = levels.get(ilvl, 0) + 1
        return levels[ilvl]

    def value(self, num_id: str, ilvl: int) -> Optional[int]:
        return self._counters.get(num_id, {}).get(ilvl)


def _parent_markers(num_id: str, ilvl: int, numbering: NumberingTable,
                    state: ListCounterState) -> Dict[int, str]:
    """
    Rendered counters of the shallower levels, for %1..%n in multi-level templates.

    A parent not counted yet renders as 1. A level marked isLgl (legal
    numbering) shows its parents as decimal.
    """
    markers = {}
    definition = numbering.get(num_id)
    if definition is None:
        return markers
    current = definition.level(ilvl)
    legal = current is not None and current.is_legal
    for parent in range(ilvl):
        level = definition.level(parent)
        if level is None:
            continue
        value = state.value(num_id, parent) or 1
        num_fmt = 'decimal' if legal else level.num_fmt
        markers[parent] = render_marker(num_fmt, None, value, parent, level.font)
    return markers


def number_paragraph(attrs: dict, numbering: NumberingTable, state: ListCounterState):
    """Add listCounterValue and listMarkerText to one list paragraph's attrs."""
    num_id = attrs['listNumId']
    ilvl = attrs.get('listIlvl', 0)
    num_fmt = attrs.get('listNumFmt') or 'decimal'
    lvl_text = attrs.get('listLvlText')

    value = state.advance(num_id, ilvl)
    level = numbering.level(num_id, ilvl)
    font = level.font if level is not None else None

    attrs['listCounterValue'] = value
    attrs['listMarkerText'] = render_marker(
        num_fmt, lvl_text, value, ilvl, font,
        _parent_markers(num_id, ilvl, numbering, state),
    )


def apply_list_numbering(blocks: List[dict], numbering: NumberingTable,
                         state: ListCounterState = None) -> List[dict]:
    """
    Walk top-level blocks in document order and number list paragraphs in place.

    Tables are opaque: list paragraphs inside cells keep their static list
    metadata but get no counter or marker. Returns the same list.
    """
    if state is None:
        state = ListCounterState()
    for block in blocks:
        if block.get('type') not in ('paragraph', 'heading'):
            continue
        attrs = block.get('attrs') or {}
        if 'listNumId' in attrs:
            number_paragraph(attrs, numbering, state)
    return blocks
