#!/usr/bin/env python3
"""
ABOUTME: Tests for the list numbering pass (counters, level resets, marker text)
"""

from _docx_helpers import (
    abstract_num,
    build_docx,
    document_xml,
    level,
    list_paragraph,
    num,
    numbering_xml,
    paragraph,
    paragraph_style,
    simple_numbering,
    styles_xml,
)
from docx_reader import DocxReader
from docx_reader.list_numbering import ListCounterState, apply_list_numbering
from docx_reader.numbering import NumberingTable


def _load(body: str, numbering: str = None, styles: str = None) -> dict:
    data = build_docx(document=document_xml(body), numbering=numbering, styles=styles)
    return DocxReader(warnings=False).load(data)


def _list_attrs(doc: dict, key: str) -> list:
    return [block['attrs'].get(key) for block in doc['content']]


class TestListCounterState:
    def test_counting_starts_at_one(self):
        state = ListCounterState()
        assert state.advance('1', 0) == 1
        assert state.advance('1', 0) == 2

    def test_shallower_level_clears_deeper(self):
        state = ListCounterState()
        state.advance('1', 0)
        state.advance('1', 1)
        state.advance('1', 1)
        state.advance('1', 2)
        state.advance('1', 0)
        assert state.value('1', 1) is None
        assert state.value('1', 2) is None
        assert state.advance('1', 1) == 1

    def test_same_level_keeps_deeper_cleared_only(self):
        state = ListCounterState()
        state.advance('1', 0)
        state.advance('1', 1)
        state.advance('1', 1)
        assert state.value('1', 0) == 1
        assert state.value('1', 1) == 2

    def test_num_ids_independent(self):
        state = ListCounterState()
        state.advance('1', 0)
        state.advance('1', 0)
        assert state.advance('2', 0) == 1
        assert state.advance('1', 0) == 3


class TestSplitList:
    """Text interrupting a list does not restart its numbering."""

    def test_split_list_continues(self):
        doc = _load(
            list_paragraph('Item 1') + paragraph('Interruption') + list_paragraph('Item 2'),
            numbering=simple_numbering(),
        )
        assert len(doc['content']) == 3
        first, plain, second = doc['content']
        assert first['attrs']['listCounterValue'] == 1
        assert 'listNumId' not in plain['attrs']
        assert second['attrs']['listCounterValue'] == 2
        assert second['attrs']['listMarkerText'] == '2.'

    def test_interleaved_lists_count_separately(self):
        numbering = numbering_xml(
            abstract_num('0', level(0)) + num('1', '0') + num('2', '0')
        )
        doc = _load(
            list_paragraph('a', '1') + list_paragraph('b', '2') + list_paragraph('c', '1')
            + list_paragraph('d', '2'),
            numbering=numbering,
        )
        assert _list_attrs(doc, 'listCounterValue') == [1, 1, 2, 2]


class TestLevels:
    def test_nested_levels_and_reset(self):
        doc = _load(
            list_paragraph('one', ilvl=0)
            + list_paragraph('one.a', ilvl=1)
            + list_paragraph('one.b', ilvl=1)
            + list_paragraph('two', ilvl=0)
            + list_paragraph('two.a', ilvl=1),
            numbering=simple_numbering(),
        )
        assert _list_attrs(doc, 'listMarkerText') == ['1.', 'a)', 'b)', '2.', 'a)']
        assert _list_attrs(doc, 'listCounterValue') == [1, 1, 2, 2, 1]

    def test_multi_level_template(self):
        numbering = numbering_xml(
            abstract_num('0', level(0, 'decimal', '%1.') + level(1, 'decimal', '%1.%2'))
            + num('1', '0')
        )
        doc = _load(
            list_paragraph('A', ilvl=0) + list_paragraph('A1', ilvl=1) + list_paragraph('A2', ilvl=1)
            + list_paragraph('B', ilvl=0) + list_paragraph('B1', ilvl=1),
            numbering=numbering,
        )
        assert _list_attrs(doc, 'listMarkerText') == ['1.', '1.1', '1.2', '2.', '2.1']

    def test_uncounted_parent_renders_one(self):
        numbering = numbering_xml(
            abstract_num('0', level(0, 'decimal', '%1.', start=3) + level(1, 'decimal', '%1.%2'))
            + num('1', '0')
        )
        doc = _load(list_paragraph('deep first', ilvl=1), numbering=numbering)
        assert doc['content'][0]['attrs']['listMarkerText'] == '1.1'

    def test_deeper_level_restarts_at_one_regardless_of_start(self):
        numbering = numbering_xml(
            abstract_num('0', level(0) + level(1, 'decimal', '%2)', start=3))
            + num('1', '0')
        )
        doc = _load(
            list_paragraph('one', ilvl=0) + list_paragraph('one.a', ilvl=1)
            + list_paragraph('two', ilvl=0) + list_paragraph('two.a', ilvl=1),
            numbering=numbering,
        )
        assert _list_attrs(doc, 'listCounterValue') == [1, 1, 2, 1]
        assert _list_attrs(doc, 'listStart') == [1, 3, 1, 3]

    def test_legal_numbering_shows_parents_decimal(self):
        numbering = numbering_xml(
            abstract_num('0', level(0, 'upperRoman', '%1.')
                         + level(1, 'decimal', '%1.%2', extra='<w:isLgl/>'))
            + num('1', '0')
        )
        doc = _load(
            list_paragraph('I', ilvl=0) + list_paragraph('I', ilvl=0) + list_paragraph('sub', ilvl=1),
            numbering=numbering,
        )
        assert _list_attrs(doc, 'listMarkerText') == ['I.', 'II.', '2.1']

    def test_start_override_is_metadata_only(self):
        numbering = numbering_xml(
            abstract_num('0', level(0))
            + num('1', '0', '<w:lvlOverride w:ilvl="0"><w:startOverride w:val="4"/></w:lvlOverride>')
        )
        doc = _load(list_paragraph('x') + list_paragraph('y'), numbering=numbering)
        assert _list_attrs(doc, 'listStart') == [4, 4]
        assert _list_attrs(doc, 'listMarkerText') == ['1.', '2.']


class TestMarkers:
    def test_bullet_with_symbol_font(self):
        numbering = numbering_xml(
            abstract_num('0', level(
                0, 'bullet', '\uf0b7',
                extra='<w:rPr><w:rFonts w:ascii="Symbol" w:hAnsi="Symbol" w:hint="default"/></w:rPr>'))
            + num('1', '0')
        )
        doc = _load(list_paragraph('dot'), numbering=numbering)
        attrs = doc['content'][0]['attrs']
        assert attrs['listIsOrdered'] is False
        assert attrs['listNumFmt'] == 'bullet'
        assert attrs['listMarkerText'] == '•'

    def test_ideographic_list(self):
        doc = _load(
            list_paragraph('a') + list_paragraph('b') + list_paragraph('c'),
            numbering=simple_numbering('ideographTraditional', '%1、'),
        )
        assert _list_attrs(doc, 'listMarkerText') == ['甲、', '乙、', '丙、']

    def test_style_heuristic_list_numbered(self):
        styles = styles_xml(paragraph_style('ListNumber', name='List Number')
                            + paragraph_style('ListBullet', name='List Bullet'))
        doc = _load(
            paragraph('one', ppr='<w:pStyle w:val="ListNumber"/>')
            + paragraph('two', ppr='<w:pStyle w:val="ListNumber"/>')
            + paragraph('dot', ppr='<w:pStyle w:val="ListBullet"/>'),
            styles=styles,
        )
        markers = _list_attrs(doc, 'listMarkerText')
        assert markers == ['1', '2', '•']
        assert _list_attrs(doc, 'listNumId') == ['style-ListNumber', 'style-ListNumber', 'style-ListBullet']


class TestApplyListNumbering:
    def test_tables_are_opaque(self):
        blocks = [
            {'type': 'paragraph', 'attrs': {'listNumId': 'style-X', 'listIlvl': 0, 'listNumFmt': 'decimal'}},
            {'type': 'table', 'content': [], 'attrs': {'listNumId': 'style-X'}},
            {'type': 'paragraph', 'attrs': {'listNumId': 'style-X', 'listIlvl': 0, 'listNumFmt': 'decimal'}},
        ]
        apply_list_numbering(blocks, NumberingTable.empty())
        assert blocks[0]['attrs']['listCounterValue'] == 1
        assert 'listCounterValue' not in blocks[1]['attrs']
        assert blocks[2]['attrs']['listCounterValue'] == 2

    def test_other_attrs_untouched(self):
        blocks = [{'type': 'paragraph', 'attrs': {'listNumId': 'style-X', 'textAlign': 'center'}}]
        apply_list_numbering(blocks, NumberingTable.empty())
        assert blocks[0]['attrs']['textAlign'] == 'center'
        assert blocks[0]['attrs']['listMarkerText'] == '1'
