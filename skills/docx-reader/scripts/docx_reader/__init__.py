"""
DOCX structural reader

Parses word/document.xml with its styles, numbering and comments parts into
a normalized document tree (paragraphs, headings, tables, marks) with
resolved formatting and pre-rendered list markers.
"""

from .common import MissingMainDocumentError
from .comments import Comment, CommentTable
from .context import ResolutionContext
from .numbering import NumberingDefinition, NumberingLevel, NumberingTable
from .reader import DocxReader, read_docx
from .styles import DocumentDefaults, StyleTable
from .xml_tree import XmlNode, parse_xml_part

__all__ = [
    'Comment',
    'CommentTable',
    'DocumentDefaults',
    'DocxReader',
    'MissingMainDocumentError',
    'NumberingDefinition',
    'NumberingLevel',
    'NumberingTable',
    'ResolutionContext',
    'StyleTable',
    'XmlNode',
    'parse_xml_part',
    'read_docx',
]
