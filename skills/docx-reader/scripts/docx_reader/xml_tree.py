"""
ABOUTME: Order-preserving XML tree used by every DOCX reader pass
ABOUTME: Keeps namespace prefixes verbatim and never trims text or attribute values
"""

from io import BytesIO
from typing import Dict, Iterator, List, Optional
from xml.etree.ElementTree import ParseError

from defusedxml import DefusedXmlException
from defusedxml import ElementTree as ET
from lxml import etree

XML_NS_URI = 'http://www.w3.org/XML/1998/namespace'
TEXT_NODE = '#text'


def _name_forms(name: str) -> tuple:
    """
    Return the names a lookup must try: the w:-prefixed and the bare form.

    "p" -> ("w:p", "p"); "w:p" -> ("w:p", "p"); "w14:paraId" -> ("w14:paraId", "paraId")
    """
    if ':' in name:
        return (name, name.split(':', 1)[1])
    return (f'w:{name}', name)


class XmlNode:
    """One element: verbatim name, attribute map, ordered children (elements and text)."""

    __slots__ = ('name', 'attrs', 'children', 'value')

    def __init__(self, name: str, attrs: Dict[str, str] = None,
                 children: List['XmlNode'] = None, value: str = None):
        self.name = name
        self.attrs = attrs if attrs is not None else {}
        self.children = children if children is not None else []
        self.value = value  # only set on text nodes

    def __repr__(self):
        if self.is_text:
            return f"XmlNode(#text {self.value!r})"
        return f"XmlNode({self.name!r}, {len(self.children)} children)"

    @property
    def is_text(self) -> bool:
        return self.name == TEXT_NODE

    @property
    def local(self) -> str:
        return self.name.split(':', 1)[-1]

    def is_(self, *names: str) -> bool:
        """Check element name against prefixed and bare forms of each name."""
        if self.is_text:
            return False
        for name in names:
            if self.name in _name_forms(name):
                return True
        return False

    def get(self, name: str, default=None):
        """Attribute lookup trying the prefixed form first, then the bare form."""
        for key in _name_forms(name):
            if key in self.attrs:
                return self.attrs[key]
        return default

    @property
    def elements(self) -> List['XmlNode']:
        return [child for child in self.children if not child.is_text]

    def find(self, name: str) -> Optional['XmlNode']:
        forms = _name_forms(name)
        for child in self.children:
            if child.name in forms:
                return child
        return None

    def find_all(self, name: str) -> List['XmlNode']:
        forms = _name_forms(name)
        return [child for child in self.children if child.name in forms]

    def find_path(self, *names: str) -> Optional['XmlNode']:
        """Follow a chain of child names, e.g. find_path('pPr', 'rPr')."""
        node = self
        for name in names:
            node = node.find(name)
            if node is None:
                return None
        return node

    def iter(self, name: str = None) -> Iterator['XmlNode']:
        """Depth-first iteration over this node and its descendant elements."""
        if self.is_text:
            return
        if name is None or self.is_(name):
            yield self
        for child in self.children:
            yield from child.iter(name)

    @property
    def text(self) -> str:
        """Direct text content, exactly as written (no trimming)."""
        return ''.join(child.value for child in self.children if child.is_text)

    def to_dict(self) -> dict:
        """Plain-data form used to preserve raw subtrees in the output."""
        if self.is_text:
            return {'#text': self.value}
        result = {'name': self.name}
        if self.attrs:
            result['attrs'] = dict(self.attrs)
        if self.children:
            result['children'] = [child.to_dict() for child in self.children]
        return result

    @classmethod
    def text_node(cls, value: str) -> 'XmlNode':
        return cls(TEXT_NODE, value=value)

    @classmethod
    def from_element(cls, element) -> 'XmlNode':
        """
        Convert an lxml element (e.g. python-docx's oxml tree) to an XmlNode.

        Prefixes come from the element's own namespace map, so the node names
        match what parse_xml_part produces for the serialized part.
        """
        reverse = {uri: prefix for prefix, uri in element.nsmap.items()}
        reverse.setdefault(XML_NS_URI, 'xml')
        node = cls(_lxml_name(element.tag, reverse),
                   {_lxml_name(key, reverse): value for key, value in element.attrib.items()})
        if element.text:
            node.children.append(cls.text_node(element.text))
        for child in element:
            if isinstance(child.tag, str):
                node.children.append(cls.from_element(child))
            # Comments and processing instructions only contribute their tail
            if child.tail:
                node.children.append(cls.text_node(child.tail))
        return node


def _lxml_name(tag: str, reverse: Dict[str, str]) -> str:
    qname = etree.QName(tag)
    if qname.namespace is None:
        return qname.localname
    prefix = reverse.get(qname.namespace)
    return f'{prefix}:{qname.localname}' if prefix else qname.localname


def _prefixed(clark_name: str, scope: Dict[str, str]) -> str:
    """Turn "{uri}local" back into "prefix:local" using the in-scope declarations."""
    if not clark_name.startswith('{'):
        return clark_name
    uri, local = clark_name[1:].split('}', 1)
    prefix = scope.get(uri)
    return f'{prefix}:{local}' if prefix else local


def parse_xml_part(data: bytes, part_name: str = 'XML part') -> XmlNode:
    """
    Parse one XML part into an XmlNode tree.

    Uses defusedxml so entity expansion and external references in untrusted
    documents are refused. Namespace declarations are tracked per element so
    each name keeps the prefix the producer wrote.

    Raises:
        ValueError: the part is not well-formed or uses forbidden constructs
    """
    if isinstance(data, str):
        data = data.encode('utf-8')

    scopes = [{XML_NS_URI: 'xml'}]
    pending = []
    stack: List[XmlNode] = []
    root = None

    try:
        for event, item in ET.iterparse(BytesIO(data), events=('start-ns', 'start', 'end')):
            if event == 'start-ns':
                pending.append(item)
            elif event == 'start':
                scope = scopes[-1]
                if pending:
                    scope = dict(scope)
                    for prefix, uri in pending:
                        scope[uri] = prefix
                    pending = []
                scopes.append(scope)
                node = XmlNode(_prefixed(item.tag, scope),
                               {_prefixed(key, scope): value for key, value in item.attrib.items()})
                if stack:
                    stack[-1].children.append(node)
                else:
                    root = node
                stack.append(node)
            else:
                node = stack.pop()
                scopes.pop()
                # Interleave text and tails now that the element is complete
                merged = []
                if item.text:
                    merged.append(XmlNode.text_node(item.text))
                for child_node, child_elem in zip(node.children, item):
                    merged.append(child_node)
                    if child_elem.tail:
                        merged.append(XmlNode.text_node(child_elem.tail))
                node.children = merged
    except (ParseError, DefusedXmlException) as e:
        raise ValueError(f"Malformed XML in {part_name}: {e}") from e

    if root is None:
        raise ValueError(f"Malformed XML in {part_name}: no root element")
    return root
