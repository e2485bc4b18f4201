"""
ABOUTME: Parses numbering.xml into numId -> per-level list definitions
ABOUTME: Pass 1 reads abstractNum templates, pass 2 binds num instances to them
"""

from dataclasses import dataclass, field, replace
from typing import Dict, Optional

from .common import Diagnostics, parse_int
from .styles import Indentation, parse_indentation, parse_toggle
from .xml_tree import XmlNode


@dataclass(frozen=True)
class NumberingLevel:
    """One w:lvl of an abstract definition (levels are 0-based)."""

    ilvl: int
    num_fmt: str = 'decimal'
    lvl_text: Optional[str] = None
    start: int = 1
    indent: Optional[Indentation] = None
    font: Optional[str] = None
    is_legal: bool = False

    @property
    def is_ordered(self) -> bool:
        return self.num_fmt not in ('bullet', 'none')


@dataclass(frozen=True)
class NumberingDefinition:
    num_id: str
    abstract_num_id: str
    levels: Dict[int, NumberingLevel] = field(default_factory=dict)

    def level(self, ilvl: int) -> Optional[NumberingLevel]:
        return self.levels.get(ilvl)


def _level_font(lvl: XmlNode) -> Optional[str]:
    rfonts = lvl.find_path('rPr', 'rFonts')
    if rfonts is None:
        return None
    for attr in ('ascii', 'hAnsi', 'cs', 'eastAsia'):
        value = rfonts.get(attr)
        if value:
            return value
    return None


def parse_level(lvl: XmlNode) -> NumberingLevel:
    """
    Read one w:lvl. Defaults follow Word: decimal format, start 1.

    lvlText is kept verbatim (it may be an empty string or a literal
    bullet glyph); only a missing element leaves it unset.
    """
    num_fmt = lvl.find('numFmt')
    lvl_text = lvl.find('lvlText')
    start = lvl.find('start')
    return NumberingLevel(
        ilvl=parse_int(lvl.get('ilvl'), 0),
        num_fmt=(num_fmt.get('val') if num_fmt is not None else None) or 'decimal',
        lvl_text=lvl_text.get('val') if lvl_text is not None else None,
        start=parse_int(start.get('val'), 1) if start is not None else 1,
        indent=parse_indentation(lvl.find('pPr')),
        font=_level_font(lvl),
        is_legal=bool(parse_toggle(lvl.find('isLgl'))),
    )


class NumberingTable:
    """Numbering definitions keyed by numId, built once per document load."""

    def __init__(self, definitions: Dict[str, NumberingDefinition] = None):
        self._definitions = dict(definitions or {})

    def __len__(self):
        return len(self._definitions)

    def __contains__(self, num_id):
        return num_id in self._definitions

    def get(self, num_id: str) -> Optional[NumberingDefinition]:
        return self._definitions.get(num_id)

    def level(self, num_id: str, ilvl: int) -> Optional[NumberingLevel]:
        definition = self._definitions.get(num_id)
        if definition is None:
            return None
        return definition.level(ilvl)

    @classmethod
    def empty(cls) -> 'NumberingTable':
        return cls()

    @classmethod
    def from_xml(cls, root: Optional[XmlNode], diagnostics: Diagnostics = None) -> 'NumberingTable':
        if root is None:
            return cls.empty()

        # Pass 1: abstract templates
        abstract_levels: Dict[str, Dict[int, NumberingLevel]] = {}
        for abstract in root.find_all('abstractNum'):
            abstract_id = abstract.get('abstractNumId')
            if abstract_id is None:
                continue
            levels = {}
            for lvl in abstract.find_all('lvl'):
                level = parse_level(lvl)
                levels[level.ilvl] = level
            abstract_levels[abstract_id] = levels

        # Pass 2: instances referencing exactly one template
        definitions = {}
        for num in root.find_all('num'):
            num_id = num.get('numId')
            if num_id is None:
                continue
            ref = num.find('abstractNumId')
            abstract_id = ref.get('val') if ref is not None else None
            if abstract_id is None or abstract_id not in abstract_levels:
                if diagnostics is not None:
                    diagnostics.debug(f"numId {num_id} dropped: abstractNumId {abstract_id!r} not found")
                continue
            definitions[num_id] = NumberingDefinition(
                num_id=num_id,
                abstract_num_id=abstract_id,
                levels=_apply_level_overrides(num, abstract_levels[abstract_id]),
            )
        return cls(definitions)


def _apply_level_overrides(num: XmlNode, levels: Dict[int, NumberingLevel]) -> Dict[int, NumberingLevel]:
    """
    Apply w:lvlOverride children of one w:num to a copy of its template levels.

    A full w:lvl inside the override replaces the level; a w:startOverride
    only changes where counting starts for this instance.
    """
    overrides = num.find_all('lvlOverride')
    if not overrides:
        return levels
    result = dict(levels)
    for override in overrides:
        ilvl = parse_int(override.get('ilvl'))
        if ilvl is None:
            continue
        lvl = override.find('lvl')
        if lvl is not None:
            result[ilvl] = replace(parse_level(lvl), ilvl=ilvl)
        start_override = override.find('startOverride')
        start = parse_int(start_override.get('val')) if start_override is not None else None
        if start is not None and ilvl in result:
            result[ilvl] = replace(result[ilvl], start=start)
    return result
