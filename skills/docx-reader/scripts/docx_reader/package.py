"""
ABOUTME: Reads the XML parts the reader needs out of a DOCX container
ABOUTME: Accepts paths, bytes, file objects, open ZipFiles and python-docx Documents
"""

import asyncio
import zipfile
from io import BytesIO
from pathlib import Path
from typing import Dict, Optional, Union

from docx.opc.constants import RELATIONSHIP_TYPE as RT

from .common import COMMENTS_PART, DOCUMENT_PART, NUMBERING_PART, STYLES_PART, MissingMainDocumentError
from .xml_tree import XmlNode

PART_NAMES = (STYLES_PART, NUMBERING_PART, COMMENTS_PART, DOCUMENT_PART)

# Main-document relationships that lead to the optional parts
PART_RELATIONSHIPS = {
    RT.STYLES: STYLES_PART,
    RT.NUMBERING: NUMBERING_PART,
    RT.COMMENTS: COMMENTS_PART,
}


def open_archive(source) -> zipfile.ZipFile:
    """
    Open a DOCX source as a ZipFile.

    Args:
        source: path (str/Path), raw bytes, binary file object, or ZipFile

    Raises:
        ValueError: source is not a ZIP archive
    """
    if isinstance(source, zipfile.ZipFile):
        return source
    if isinstance(source, (bytes, bytearray, memoryview)):
        source = BytesIO(bytes(source))
    try:
        return zipfile.ZipFile(source, 'r')
    except zipfile.BadZipFile as e:
        raise ValueError(f"Invalid DOCX: not a ZIP archive ({e})") from e


def _read_member(zf: zipfile.ZipFile, name: str) -> Optional[bytes]:
    if name not in zf.namelist():
        return None
    return zf.read(name)


def read_parts(source) -> Dict[str, Optional[bytes]]:
    """
    Read styles, numbering, comments and main document parts.

    Missing optional parts map to None. A missing main document aborts.
    """
    owns_archive = not isinstance(source, zipfile.ZipFile)
    zf = open_archive(source)
    try:
        parts = {name: _read_member(zf, name) for name in PART_NAMES}
    finally:
        if owns_archive:
            zf.close()

    if parts[DOCUMENT_PART] is None:
        raise MissingMainDocumentError()
    return parts


async def read_parts_async(source) -> Dict[str, Optional[bytes]]:
    """
    Async variant of read_parts.

    The archive is loaded once; each part read is then an independent
    awaitable so callers in an event loop never block on decompression.
    """
    if isinstance(source, (str, Path)):
        source = await asyncio.to_thread(Path(source).read_bytes)
    zf = open_archive(source)
    try:
        contents = await asyncio.gather(
            *(asyncio.to_thread(_read_member, zf, name) for name in PART_NAMES)
        )
    finally:
        if not isinstance(source, zipfile.ZipFile):
            zf.close()

    parts = dict(zip(PART_NAMES, contents))
    if parts[DOCUMENT_PART] is None:
        raise MissingMainDocumentError()
    return parts


def read_document_parts(document) -> Dict[str, Union[XmlNode, bytes, None]]:
    """
    Collect the same parts from an open python-docx Document.

    The main document and every part python-docx keeps as an XML tree are
    converted straight from that tree, so edits made through python-docx
    before the call are reflected without serializing anything. Parts it
    only holds as bytes (e.g. comments in older releases) are returned as
    bytes and parsed like archive parts.
    """
    parts: Dict[str, Union[XmlNode, bytes, None]] = {name: None for name in PART_NAMES}
    parts[DOCUMENT_PART] = XmlNode.from_element(document.element)

    for rel in document.part.rels.values():
        name = PART_RELATIONSHIPS.get(rel.reltype)
        if name is None or rel.is_external:
            continue
        part = rel.target_part
        element = getattr(part, 'element', None)
        parts[name] = XmlNode.from_element(element) if element is not None else part.blob
    return parts
