#!/usr/bin/env python3
"""
ABOUTME: Tests for the parse_docx.py command line front end
ABOUTME: Covers JSON output, statistics and error exits
"""

import json
import zipfile

from _docx_helpers import (
    comments_xml,
    document_xml,
    list_paragraph,
    paragraph,
    paragraph_style,
    simple_numbering,
    styles_xml,
    write_docx,
)
from parse_docx import collect_stats, main  # type: ignore[import-not-found]


# ============================================================
# Helper Functions
# ============================================================

def _sample_docx(path):
    """A small document with a heading, a split list, a comment and a revision."""
    styles = styles_xml(paragraph_style('Heading1', name='heading 1'))
    comments = comments_xml(
        '<w:comment w:id="0" w:author="Reviewer"><w:p><w:r><w:t>check</w:t></w:r></w:p></w:comment>'
    )
    body = (
        paragraph('Résumé', ppr='<w:pStyle w:val="Heading1"/>')
        + list_paragraph('first')
        + '<w:p><w:commentRangeStart w:id="0"/><w:r><w:t>noted</w:t></w:r>'
          '<w:commentRangeEnd w:id="0"/><w:ins w:author="A"><w:r><w:t> added</w:t></w:r></w:ins></w:p>'
        + list_paragraph('second')
    )
    return write_docx(path, document=document_xml(body), styles=styles,
                      numbering=simple_numbering(), comments=comments)


# ============================================================
# Tests
# ============================================================

class TestMain:
    def test_writes_json_next_to_input(self, tmp_path, capsys):
        source = _sample_docx(tmp_path / 'report.docx')
        assert main([str(source)]) == 0

        output = tmp_path / 'report_tree.json'
        raw = output.read_text(encoding='utf-8')
        assert 'Résumé' in raw
        tree = json.loads(raw)
        assert tree['type'] == 'doc'
        assert tree['content'][0]['type'] == 'heading'
        assert tree['content'][3]['attrs']['listMarkerText'] == '2.'

        out = capsys.readouterr().out
        assert 'Parsing document:' in out
        assert 'Extracted 4 top-level blocks' in out
        assert f'Saved to: {output}' in out

    def test_explicit_output_and_compact(self, tmp_path):
        source = _sample_docx(tmp_path / 'report.docx')
        output = tmp_path / 'out' / 'tree.json'
        output.parent.mkdir()
        assert main([str(source), '-o', str(output), '--indent', '0']) == 0
        assert '\n' not in output.read_text(encoding='utf-8')

    def test_stats(self, tmp_path, capsys):
        source = _sample_docx(tmp_path / 'report.docx')
        assert main([str(source), '--stats']) == 0
        out = capsys.readouterr().out
        assert 'Headings: 1' in out
        assert 'List items: 2' in out
        assert 'Commented ranges (distinct comments): 1' in out
        assert 'Tracked insertions / deletions (text spans): 1 / 0' in out

    def test_missing_file(self, tmp_path, capsys):
        assert main([str(tmp_path / 'absent.docx')]) == 1
        assert 'ERROR: File not found' in capsys.readouterr().err

    def test_not_a_zip(self, tmp_path, capsys):
        source = tmp_path / 'fake.docx'
        source.write_bytes(b'not a zip archive')
        assert main([str(source)]) == 1
        assert 'ERROR: Cannot read document' in capsys.readouterr().err

    def test_archive_without_main_document(self, tmp_path, capsys):
        source = tmp_path / 'empty.docx'
        with zipfile.ZipFile(source, 'w') as zf:
            zf.writestr('[Content_Types].xml', '<Types/>')
        assert main([str(source)]) == 1
        err = capsys.readouterr().err
        assert 'ERROR: Not a Word document' in err
        assert 'word/document.xml' in err
        assert not (tmp_path / 'empty_tree.json').exists()


class TestCollectStats:
    def test_counts_nested_content(self):
        tree = {
            'type': 'doc',
            'content': [
                {'type': 'paragraph', 'attrs': {}, 'content': [
                    {'type': 'text', 'text': 'a', 'marks': [
                        {'type': 'comment', 'attrs': {'commentId': '5'}},
                        {'type': 'deletion', 'attrs': {'author': 'X', 'date': ''}},
                    ]},
                    {'type': 'text', 'text': 'b', 'marks': [
                        {'type': 'comment', 'attrs': {'commentId': '5'}},
                    ]},
                ]},
                {'type': 'pageBreak'},
                {'type': 'table', 'content': [{'type': 'tableRow', 'content': [
                    {'type': 'tableCell', 'content': [
                        {'type': 'paragraph', 'attrs': {'listNumId': '1'}},
                    ]},
                ]}]},
            ],
        }
        stats = collect_stats(tree)
        assert stats['top_level_blocks'] == 3
        assert stats['paragraphs'] == 2
        assert stats['tables'] == 1
        assert stats['page_breaks'] == 1
        assert stats['list_items'] == 1
        assert stats['comments'] == 1
        assert stats['deleted_spans'] == 1
