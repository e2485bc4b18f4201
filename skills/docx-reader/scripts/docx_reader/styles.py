"""
ABOUTME: Parses styles.xml into a style table and document defaults
ABOUTME: Resolves basedOn chains per attribute, leaf values winning over ancestors
"""

from dataclasses import dataclass, field, fields, replace
from typing import Dict, List, Optional, Tuple

from .common import FALSE_VALUES, Diagnostics, half_points_to_pt, parse_int
from .xml_tree import XmlNode

# Explicitly cleared colour or highlight: set, so it overrides inherited
# values, but falsy, so no mark is produced
CLEARED = ''


# ============================================================
# Property records
# ============================================================

@dataclass(frozen=True)
class Indentation:
    """w:ind values in twips (or hundredths of a character for *_chars). None = unset."""

    left: Optional[str] = None
    right: Optional[str] = None
    hanging: Optional[str] = None
    first_line: Optional[str] = None
    left_chars: Optional[str] = None
    right_chars: Optional[str] = None
    hanging_chars: Optional[str] = None
    first_line_chars: Optional[str] = None

    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self))

    def over(self, base: Optional['Indentation']) -> 'Indentation':
        """
        Layer these values over a lower-precedence record.

        hanging and firstLine are one property in Word: setting either one
        on this layer discards the other from the base.
        """
        if base is None:
            return self
        merged = {f.name: getattr(self, f.name) if getattr(self, f.name) is not None
                  else getattr(base, f.name) for f in fields(self)}
        if self.hanging is not None and self.first_line is None:
            merged['first_line'] = None
        if self.first_line is not None and self.hanging is None:
            merged['hanging'] = None
        if self.hanging_chars is not None and self.first_line_chars is None:
            merged['first_line_chars'] = None
        if self.first_line_chars is not None and self.hanging_chars is None:
            merged['hanging_chars'] = None
        return Indentation(**merged)

    def to_attrs(self) -> dict:
        """Editor attribute names; explicit "0" values are kept."""
        names = {
            'left': 'indent',
            'right': 'indentRight',
            'hanging': 'hanging',
            'first_line': 'firstLine',
            'left_chars': 'leftChars',
            'right_chars': 'rightChars',
            'hanging_chars': 'hangingChars',
            'first_line_chars': 'firstLineChars',
        }
        return {attr: getattr(self, name) for name, attr in names.items()
                if getattr(self, name) is not None}


@dataclass(frozen=True)
class Spacing:
    """w:spacing values; line is in 240ths of a line or twips depending on line_rule."""

    before: Optional[str] = None
    after: Optional[str] = None
    line: Optional[str] = None
    line_rule: Optional[str] = None

    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self))

    def over(self, base: Optional['Spacing']) -> 'Spacing':
        if base is None:
            return self
        return Spacing(**{f.name: getattr(self, f.name) if getattr(self, f.name) is not None
                          else getattr(base, f.name) for f in fields(self)})

    def to_attrs(self) -> dict:
        names = {
            'before': 'spacingBefore',
            'after': 'spacingAfter',
            'line': 'lineHeight',
            'line_rule': 'lineRule',
        }
        return {attr: getattr(self, name) for name, attr in names.items()
                if getattr(self, name) is not None}


@dataclass(frozen=True)
class TabStop:
    position: str
    alignment: str
    leader: Optional[str] = None

    def to_attrs(self) -> dict:
        attrs = {'pos': self.position, 'val': self.alignment}
        if self.leader:
            attrs['leader'] = self.leader
        return attrs


@dataclass(frozen=True)
class RunProperties:
    """
    Run formatting that can be inherited.

    Toggles are tri-state: True (on), False (explicitly off), None (unset).
    font_size keeps the raw half-point string.
    """

    font_size: Optional[str] = None
    color: Optional[str] = None
    font_family: Optional[str] = None
    highlight: Optional[str] = None
    bold: Optional[bool] = None
    italic: Optional[bool] = None
    underline: Optional[bool] = None
    strike: Optional[bool] = None

    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self))

    def over(self, base: Optional['RunProperties']) -> 'RunProperties':
        if base is None:
            return self
        return RunProperties(**{f.name: getattr(self, f.name) if getattr(self, f.name) is not None
                                else getattr(base, f.name) for f in fields(self)})


@dataclass(frozen=True)
class NumberingReference:
    num_id: str
    ilvl: int = 0


# ============================================================
# Property readers (shared by styles, numbering and paragraphs)
# ============================================================

def parse_indentation(ppr: Optional[XmlNode]) -> Optional[Indentation]:
    if ppr is None:
        return None
    ind = ppr.find('ind')
    if ind is None:
        return None
    result = Indentation(
        left=ind.get('left', ind.get('start')),
        right=ind.get('right', ind.get('end')),
        hanging=ind.get('hanging'),
        first_line=ind.get('firstLine'),
        left_chars=ind.get('leftChars', ind.get('startChars')),
        right_chars=ind.get('rightChars', ind.get('endChars')),
        hanging_chars=ind.get('hangingChars'),
        first_line_chars=ind.get('firstLineChars'),
    )
    return None if result.is_empty() else result


def parse_spacing(ppr: Optional[XmlNode]) -> Optional[Spacing]:
    if ppr is None:
        return None
    spacing = ppr.find('spacing')
    if spacing is None:
        return None
    result = Spacing(
        before=spacing.get('before'),
        after=spacing.get('after'),
        line=spacing.get('line'),
        line_rule=spacing.get('lineRule'),
    )
    return None if result.is_empty() else result


def parse_tabs(ppr: Optional[XmlNode]) -> Optional[Tuple[TabStop, ...]]:
    if ppr is None:
        return None
    tabs = ppr.find('tabs')
    if tabs is None:
        return None
    stops = []
    for tab in tabs.find_all('tab'):
        position = tab.get('pos')
        if position is None:
            continue
        stops.append(TabStop(position=position, alignment=tab.get('val', 'left'), leader=tab.get('leader')))
    return tuple(stops)


def parse_toggle(node: Optional[XmlNode]) -> Optional[bool]:
    """w:b, w:i, w:strike...: present without val means on; val 0/false/off means off."""
    if node is None:
        return None
    value = node.get('val')
    if value is None:
        return True
    return value.lower() not in FALSE_VALUES


def _cleared_or(value: Optional[str], clear_value: str) -> Optional[str]:
    """Map "auto" colour / "none" highlight to CLEARED; missing stays None."""
    if value is None:
        return None
    if value == '' or value.lower() == clear_value:
        return CLEARED
    return value


def pick_font_family(rfonts: Optional[XmlNode]) -> Optional[str]:
    """East Asian font first, then ascii, hAnsi and complex script."""
    if rfonts is None:
        return None
    for attr in ('eastAsia', 'ascii', 'hAnsi', 'cs'):
        value = rfonts.get(attr)
        if value:
            return value
    return None


def parse_run_properties(rpr: Optional[XmlNode]) -> Optional[RunProperties]:
    if rpr is None:
        return None

    sz = rpr.find('sz')
    color = rpr.find('color')
    color_value = color.get('val') if color is not None else None
    highlight = rpr.find('highlight')
    highlight_value = highlight.get('val') if highlight is not None else None
    underline = rpr.find('u')
    underline_value = None
    if underline is not None:
        u_val = underline.get('val')
        underline_value = u_val is None or u_val.lower() not in FALSE_VALUES

    result = RunProperties(
        font_size=sz.get('val') if sz is not None else None,
        color=_cleared_or(color_value, 'auto'),
        font_family=pick_font_family(rpr.find('rFonts')),
        highlight=_cleared_or(highlight_value, 'none'),
        bold=parse_toggle(rpr.find('b')),
        italic=parse_toggle(rpr.find('i')),
        underline=underline_value,
        strike=parse_toggle(rpr.find('strike')),
    )
    return None if result.is_empty() else result


def parse_numbering_reference(ppr: Optional[XmlNode]) -> Optional[NumberingReference]:
    """
    Read w:numPr. A numPr whose numId is missing yields None; numId "0"
    is returned as-is because it explicitly removes inherited numbering.
    """
    if ppr is None:
        return None
    numpr = ppr.find('numPr')
    if numpr is None:
        return None
    num_id_elem = numpr.find('numId')
    num_id = num_id_elem.get('val') if num_id_elem is not None else None
    if not num_id:
        return None
    ilvl_elem = numpr.find('ilvl')
    ilvl = parse_int(ilvl_elem.get('val'), 0) if ilvl_elem is not None else 0
    return NumberingReference(num_id=num_id, ilvl=ilvl)


def parse_outline_level(ppr: Optional[XmlNode]) -> Optional[int]:
    if ppr is None:
        return None
    outline = ppr.find('outlineLvl')
    if outline is None:
        return None
    return parse_int(outline.get('val'))


# ============================================================
# Style table
# ============================================================

@dataclass(frozen=True)
class StyleDefinition:
    style_id: str
    name: Optional[str] = None
    kind: Optional[str] = None
    based_on: Optional[str] = None
    indent: Optional[Indentation] = None
    spacing: Optional[Spacing] = None
    tabs: Optional[Tuple[TabStop, ...]] = None
    run: Optional[RunProperties] = None
    alignment: Optional[str] = None
    outline_level: Optional[int] = None
    numbering: Optional[NumberingReference] = None


@dataclass(frozen=True)
class ResolvedStyle:
    """A style merged with its basedOn ancestors (leaf wins per attribute)."""

    style_id: str
    name: Optional[str] = None
    indent: Optional[Indentation] = None
    spacing: Optional[Spacing] = None
    tabs: Optional[Tuple[TabStop, ...]] = None
    run: Optional[RunProperties] = None
    alignment: Optional[str] = None
    outline_level: Optional[int] = None
    numbering: Optional[NumberingReference] = None


@dataclass(frozen=True)
class DocumentDefaults:
    font_family: Optional[str] = None
    fonts: Dict[str, str] = field(default_factory=dict)
    font_size: Optional[str] = None
    font_size_cs: Optional[str] = None
    lang: Dict[str, str] = field(default_factory=dict)
    spacing: Optional[Spacing] = None
    indent: Optional[Indentation] = None
    widow_control: Optional[str] = None

    @property
    def run(self) -> RunProperties:
        return RunProperties(font_size=self.font_size, font_family=self.font_family)

    def to_attrs(self) -> dict:
        """Document-level attribute form handed to the editor."""
        attrs = {}
        if self.font_family:
            attrs['fontFamily'] = self.font_family
        if self.fonts:
            attrs['rFonts'] = dict(self.fonts)
        if self.font_size:
            attrs['fontSize'] = half_points_to_pt(self.font_size)
            attrs['sz'] = self.font_size
        if self.font_size_cs:
            attrs['szCs'] = self.font_size_cs
        if self.lang:
            attrs['lang'] = dict(self.lang)
        if self.spacing:
            attrs.update(self.spacing.to_attrs())
        if self.indent:
            attrs.update(self.indent.to_attrs())
        if self.widow_control is not None:
            attrs['widowControl'] = self.widow_control
        return attrs


def _strip_prefixes(attrs: Dict[str, str]) -> Dict[str, str]:
    return {key.split(':', 1)[-1]: value for key, value in attrs.items()}


def parse_document_defaults(styles_root: XmlNode) -> Optional[DocumentDefaults]:
    """Read w:docDefaults; None when the section is absent."""
    defaults = styles_root.find('docDefaults')
    if defaults is None:
        return None

    kwargs = {}
    rpr = defaults.find_path('rPrDefault', 'rPr')
    if rpr is not None:
        rfonts = rpr.find('rFonts')
        if rfonts is not None:
            kwargs['fonts'] = _strip_prefixes(rfonts.attrs)
            kwargs['font_family'] = pick_font_family(rfonts)
        sz = rpr.find('sz')
        if sz is not None:
            kwargs['font_size'] = sz.get('val')
        sz_cs = rpr.find('szCs')
        if sz_cs is not None:
            kwargs['font_size_cs'] = sz_cs.get('val')
        lang = rpr.find('lang')
        if lang is not None:
            kwargs['lang'] = _strip_prefixes(lang.attrs)

    ppr = defaults.find_path('pPrDefault', 'pPr')
    if ppr is not None:
        kwargs['spacing'] = parse_spacing(ppr)
        kwargs['indent'] = parse_indentation(ppr)
        widow = ppr.find('widowControl')
        if widow is not None:
            kwargs['widow_control'] = widow.get('val', '1')

    return DocumentDefaults(**kwargs)


class StyleTable:
    """
    Style definitions keyed by styleId, built once per document load.

    Definitions are stored unresolved; resolve() walks the basedOn chain only
    for the styles paragraphs actually reference.
    """

    def __init__(self, styles: Dict[str, StyleDefinition] = None,
                 defaults: Optional[DocumentDefaults] = None):
        self._styles = dict(styles or {})
        self.defaults = defaults

    def __len__(self):
        return len(self._styles)

    def __contains__(self, style_id):
        return style_id in self._styles

    def get(self, style_id: str) -> Optional[StyleDefinition]:
        return self._styles.get(style_id)

    @classmethod
    def empty(cls) -> 'StyleTable':
        return cls()

    @classmethod
    def from_xml(cls, root: Optional[XmlNode]) -> 'StyleTable':
        if root is None:
            return cls.empty()

        styles = {}
        for style in root.find_all('style'):
            style_id = style.get('styleId')
            if not style_id:
                continue
            name_node = style.find('name')
            based_on_node = style.find('basedOn')
            ppr = style.find('pPr')
            jc = ppr.find('jc') if ppr is not None else None
            styles[style_id] = StyleDefinition(
                style_id=style_id,
                name=name_node.get('val') if name_node is not None else None,
                kind=style.get('type'),
                based_on=based_on_node.get('val') if based_on_node is not None else None,
                indent=parse_indentation(ppr),
                spacing=parse_spacing(ppr),
                tabs=parse_tabs(ppr),
                run=parse_run_properties(style.find('rPr')),
                alignment=jc.get('val') if jc is not None else None,
                outline_level=parse_outline_level(ppr),
                numbering=parse_numbering_reference(ppr),
            )
        return cls(styles, parse_document_defaults(root))

    def chain(self, style_id: str, diagnostics: Diagnostics = None) -> List[StyleDefinition]:
        """
        Styles from the given one up through its basedOn ancestors (leaf first).

        Unknown ids end the chain; a revisited id ends it too (cycle).
        """
        result = []
        visited = set()
        current = style_id
        while current:
            if current in visited:
                if diagnostics is not None:
                    diagnostics.warn(f"Style basedOn cycle at '{current}' (starting from '{style_id}')")
                break
            visited.add(current)
            style = self._styles.get(current)
            if style is None:
                break
            result.append(style)
            current = style.based_on
        return result

    def resolve(self, style_id: Optional[str], diagnostics: Diagnostics = None) -> Optional[ResolvedStyle]:
        """Merge the chain root to leaf so the most specific value survives."""
        if not style_id:
            return None
        chain = self.chain(style_id, diagnostics)
        if not chain:
            return None

        resolved = ResolvedStyle(style_id=style_id, name=chain[0].name)
        for style in reversed(chain):
            updates = {}
            if style.indent is not None:
                updates['indent'] = style.indent.over(resolved.indent)
            if style.spacing is not None:
                updates['spacing'] = style.spacing.over(resolved.spacing)
            if style.run is not None:
                updates['run'] = style.run.over(resolved.run)
            for attr in ('tabs', 'alignment', 'outline_level', 'numbering'):
                value = getattr(style, attr)
                if value is not None:
                    updates[attr] = value
            if updates:
                resolved = replace(resolved, **updates)
        return resolved
