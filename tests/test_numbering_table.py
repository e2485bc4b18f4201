#!/usr/bin/env python3
"""
ABOUTME: Tests for the numbering table builder and the comment table
"""

from _docx_helpers import (
    abstract_num,
    comments_xml,
    level,
    num,
    numbering_xml,
)
from docx_reader.comments import CommentRangeStack, CommentTable
from docx_reader.common import Diagnostics
from docx_reader.numbering import NumberingTable
from docx_reader.xml_tree import parse_xml_part


def _numbering(content: str) -> NumberingTable:
    return NumberingTable.from_xml(parse_xml_part(numbering_xml(content)))


class TestNumberingTable:
    def test_instance_resolves_to_template_levels(self):
        table = _numbering(
            abstract_num('7', level(0, 'upperRoman', '%1.', start=3)
                         + level(1, 'bullet', '\uf0b7', extra='<w:rPr><w:rFonts w:ascii="Symbol" w:hAnsi="Symbol"/></w:rPr>'))
            + num('2', '7')
        )
        first = table.level('2', 0)
        assert first.num_fmt == 'upperRoman'
        assert first.lvl_text == '%1.'
        assert first.start == 3
        assert first.is_ordered
        bullet = table.level('2', 1)
        assert not bullet.is_ordered
        assert bullet.font == 'Symbol'
        assert table.get('2').abstract_num_id == '7'

    def test_level_indentation_read(self):
        table = _numbering(
            abstract_num('0', level(0, extra='<w:pPr><w:ind w:left="720" w:hanging="360"/></w:pPr>'))
            + num('1', '0')
        )
        indent = table.level('1', 0).indent
        assert indent.left == '720'
        assert indent.hanging == '360'

    def test_defaults_when_elements_missing(self):
        table = _numbering(abstract_num('0', '<w:lvl w:ilvl="0"/>') + num('1', '0'))
        lvl = table.level('1', 0)
        assert lvl.num_fmt == 'decimal'
        assert lvl.start == 1
        assert lvl.lvl_text is None

    def test_dangling_abstract_reference_dropped(self):
        table = _numbering(abstract_num('0', level(0)) + num('1', '0') + num('2', '99'))
        assert '1' in table
        assert '2' not in table
        assert table.level('2', 0) is None

    def test_unknown_level_is_none(self):
        table = _numbering(abstract_num('0', level(0)) + num('1', '0'))
        assert table.level('1', 5) is None

    def test_start_override_applies_to_one_instance(self):
        override = '<w:lvlOverride w:ilvl="0"><w:startOverride w:val="5"/></w:lvlOverride>'
        table = _numbering(abstract_num('0', level(0)) + num('1', '0') + num('2', '0', override))
        assert table.level('1', 0).start == 1
        assert table.level('2', 0).start == 5

    def test_legal_numbering_flag(self):
        table = _numbering(abstract_num('0', level(0) + level(1, extra='<w:isLgl/>')) + num('1', '0'))
        assert not table.level('1', 0).is_legal
        assert table.level('1', 1).is_legal

    def test_missing_part(self):
        assert len(NumberingTable.from_xml(None)) == 0


class TestCommentTable:
    COMMENTS = comments_xml(
        '<w:comment w:id="0" w:author="Reviewer" w:initials="R" w:date="2024-01-01T00:00:00Z">'
        '<w:p><w:r><w:t>First </w:t></w:r></w:p><w:p><w:r><w:t>second</w:t></w:r></w:p>'
        '</w:comment>'
        '<w:comment w:id="1"><w:p><w:r><w:t>anon</w:t></w:r></w:p></w:comment>'
    )

    def test_comment_fields(self):
        table = CommentTable.from_xml(parse_xml_part(self.COMMENTS))
        comment = table.get('0')
        assert comment.author == 'Reviewer'
        assert comment.initials == 'R'
        assert comment.content == 'First second'
        assert comment.to_mark() == {
            'type': 'comment',
            'attrs': {'commentId': '0', 'author': 'Reviewer',
                      'date': '2024-01-01T00:00:00Z', 'content': 'First second'},
        }

    def test_missing_author_defaults(self):
        table = CommentTable.from_xml(parse_xml_part(self.COMMENTS))
        assert table.get('1').author == 'Unknown'
        assert table.get('1').date == ''


class TestCommentRangeStack:
    def test_close_out_of_order(self):
        stack = CommentRangeStack()
        stack.open('1')
        stack.open('2')
        stack.close('1')
        assert stack.active_ids == ['2']

    def test_duplicate_open_ignored(self):
        stack = CommentRangeStack()
        stack.open('1')
        stack.open('1')
        assert len(stack) == 1

    def test_unknown_ids_skipped_in_marks(self):
        table = CommentTable.from_xml(parse_xml_part(TestCommentTable.COMMENTS))
        stack = CommentRangeStack()
        stack.open('42')
        stack.open('0')
        marks = stack.marks(table)
        assert [m['attrs']['commentId'] for m in marks] == ['0']

    def test_unclosed_range_warns(self, capsys):
        stack = CommentRangeStack()
        stack.open('3')
        diagnostics = Diagnostics(debug=False, warnings=True)
        stack.check_closed(diagnostics)
        assert diagnostics.warning_count == 1
        assert 'still open' in capsys.readouterr().err
