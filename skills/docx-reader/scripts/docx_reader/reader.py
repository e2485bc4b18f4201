"""
ABOUTME: DocxReader entry point: unpacks a DOCX and assembles the document tree
ABOUTME: Builds style, numbering and comment tables first, then normalizes the body
"""

from typing import Dict, Optional, Union

from .comments import CommentTable
from .common import (
    COMMENTS_PART,
    DOCUMENT_PART,
    NUMBERING_PART,
    STYLES_PART,
    Diagnostics,
    MissingMainDocumentError,
)
from .context import ResolutionContext
from .flatten import collect_blocks
from .list_numbering import apply_list_numbering
from .numbering import NumberingTable
from .package import read_document_parts, read_parts, read_parts_async
from .styles import StyleTable
from .xml_tree import XmlNode, parse_xml_part

# sectPr children copied as raw attribute maps, keyed by output attribute
SECTION_ATTRS = (
    ('pgSz', 'pageSize'),
    ('pgMar', 'pageMargins'),
    ('cols', 'cols'),
    ('docGrid', 'docGrid'),
)

# A part as bytes from the archive, or already converted from python-docx
PartData = Union[XmlNode, bytes, None]


def _trailing_section(body: XmlNode) -> Optional[XmlNode]:
    """The body's own sectPr (last direct child), not those inside paragraphs."""
    sections = body.find_all('sectPr')
    return sections[-1] if sections else None


def section_attrs(sect_pr: XmlNode) -> dict:
    attrs = {}
    for element, attr in SECTION_ATTRS:
        node = sect_pr.find(element)
        if node is not None:
            attrs[attr] = dict(node.attrs)
    attrs['sectPrElements'] = [child.to_dict() for child in sect_pr.elements]
    return attrs


def assemble_document(document_root: XmlNode, context: ResolutionContext) -> dict:
    """
    Build the doc node from a parsed word/document.xml.

    Raises:
        MissingMainDocumentError: the part's root is not w:document
    """
    if not document_root.is_('document'):
        raise MissingMainDocumentError(f"root element is {document_root.name!r}, expected w:document")

    body = document_root.find('body')
    blocks = collect_blocks(body.children, context) if body is not None else []
    blocks = apply_list_numbering(blocks, context.numbering)

    result = {'type': 'doc', 'content': blocks}
    attrs = {}
    sect_pr = _trailing_section(body) if body is not None else None
    if sect_pr is not None:
        attrs.update(section_attrs(sect_pr))
    if context.defaults is not None:
        attrs['docDefaults'] = context.defaults.to_attrs()
    if attrs:
        result['attrs'] = attrs
    return result


class DocxReader:
    """
    Converts DOCX packages into an editor document tree.

    Every load builds its own tables from that document's parts, so one
    reader can be reused for any number of documents, including
    concurrently from async code.

    Args:
        debug: print trace lines to stderr (None reads DOCX_READER_DEBUG)
        warnings: print warnings to stderr (None reads DOCX_READER_WARNINGS)
    """

    def __init__(self, debug: bool = None, warnings: bool = None):
        self.debug = debug
        self.warnings = warnings

    def load(self, source) -> dict:
        """Convert a DOCX given as path, bytes, binary file object or ZipFile."""
        return self.convert_parts(read_parts(source))

    async def load_async(self, source) -> dict:
        """Like load(), awaiting the part reads before the synchronous conversion."""
        parts = await read_parts_async(source)
        return self.convert_parts(parts)

    def load_document(self, document) -> dict:
        """Convert an open python-docx Document, including unsaved edits."""
        return self.convert_parts(read_document_parts(document))

    def _optional_part(self, parts: Dict[str, PartData], name: str,
                       diagnostics: Diagnostics) -> Optional[XmlNode]:
        data = parts.get(name)
        if data is None:
            diagnostics.debug(f"{name} not present")
            return None
        if isinstance(data, XmlNode):
            return data
        try:
            return parse_xml_part(data, name)
        except ValueError as e:
            diagnostics.warn(f"{e}; ignoring {name}")
            return None

    def build_context(self, parts: Dict[str, PartData],
                      diagnostics: Diagnostics = None) -> ResolutionContext:
        """Build the style, numbering and comment tables for one document."""
        if diagnostics is None:
            diagnostics = Diagnostics(self.debug, self.warnings)
        styles = StyleTable.from_xml(self._optional_part(parts, STYLES_PART, diagnostics))
        numbering = NumberingTable.from_xml(self._optional_part(parts, NUMBERING_PART, diagnostics), diagnostics)
        comments = CommentTable.from_xml(self._optional_part(parts, COMMENTS_PART, diagnostics))
        diagnostics.debug(
            f"Loaded {len(styles)} styles, {len(numbering)} numbering definitions, {len(comments)} comments"
        )
        return ResolutionContext(styles=styles, numbering=numbering, comments=comments, diagnostics=diagnostics)

    def convert_parts(self, parts: Dict[str, PartData]) -> dict:
        """
        Convert already-extracted parts keyed by part name: raw bytes, or
        XmlNode trees converted from python-docx.

        Raises:
            MissingMainDocumentError: no word/document.xml entry
            ValueError: word/document.xml is not well-formed XML
        """
        if parts.get(DOCUMENT_PART) is None:
            raise MissingMainDocumentError()
        diagnostics = Diagnostics(self.debug, self.warnings)
        context = self.build_context(parts, diagnostics)
        document_root = parts[DOCUMENT_PART]
        if not isinstance(document_root, XmlNode):
            document_root = parse_xml_part(document_root, DOCUMENT_PART)
        return assemble_document(document_root, context)


def read_docx(source, debug: bool = None, warnings: bool = None) -> dict:
    """Convenience wrapper: DocxReader(debug, warnings).load(source)."""
    return DocxReader(debug=debug, warnings=warnings).load(source)
