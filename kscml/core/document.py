"""
Document tree
Tagged element tree for the Spriter interchange document and its text serializer
"""

import xml.etree.ElementTree as ET
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterator, List, Optional, Tuple, Union
from xml.sax.saxutils import escape

AttributeValue = Union[str, int, float]

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'

# Childless nodes of these tags are written as <tag ... />
SELF_CLOSING_TAGS = frozenset({"file", "object_ref", "object"})

_ATTRIBUTE_ENTITIES = {'"': "&quot;", "'": "&apos;", "\n": "&#10;", "\r": "&#13;", "\t": "&#09;"}


def fixed(value: float, digits: int) -> float:
    """
    Round half away from zero on the exact binary value

    Args:
        value: Number to round
        digits: Decimal places to keep

    Returns:
        The rounded number
    """
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def format_number(value: Union[int, float]) -> str:
    """Shortest round-trip text for a number; integral values have no decimal point."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if value == 0:
        return "0"
    if value.is_integer():
        return str(int(value))
    return format(Decimal(repr(value)), "f")


def format_attribute(value: AttributeValue) -> str:
    if isinstance(value, str):
        return value
    return format_number(value)


class DocNode:
    """Element name, ordered attributes and ordered children"""

    def __init__(self, tag: str, attributes: Optional[Dict[str, AttributeValue]] = None,
                 children: Optional[List["DocNode"]] = None):
        self.tag = tag
        self.attributes: List[Tuple[str, AttributeValue]] = list((attributes or {}).items())
        self.children: List[DocNode] = list(children or [])

    def append(self, child: "DocNode") -> "DocNode":
        self.children.append(child)
        return child

    def get(self, name: str) -> Optional[AttributeValue]:
        for key, value in self.attributes:
            if key == name:
                return value
        return None

    def find_all(self, tag: str) -> List["DocNode"]:
        """Direct children with the given tag."""
        return [child for child in self.children if child.tag == tag]

    def iter(self, tag: Optional[str] = None) -> Iterator["DocNode"]:
        """This node and all descendants, depth first."""
        if tag is None or self.tag == tag:
            yield self
        for child in self.children:
            yield from child.iter(tag)

    def __repr__(self) -> str:
        return f"DocNode({self.tag!r}, {len(self.attributes)} attrs, {len(self.children)} children)"

    def to_element(self) -> ET.Element:
        """Convert to an ElementTree element."""
        element = ET.Element(self.tag, {key: format_attribute(value) for key, value in self.attributes})
        for child in self.children:
            element.append(child.to_element())
        return element

    def to_xml(self, indent: str = "\t", declaration: bool = True) -> str:
        """
        Serialize the tree

        One element per line, ``indent`` per depth level. Childless
        ``file``/``object_ref``/``object`` nodes close themselves with
        `` />``; other childless nodes render as ``<tag></tag>``.

        Args:
            indent: Indentation unit
            declaration: Prepend the XML declaration line

        Returns:
            The document text, without a trailing newline
        """
        lines = [XML_DECLARATION] if declaration else []
        self._render(lines, 0, indent)
        return "\n".join(lines)

    def _open_tag(self) -> str:
        parts = [self.tag]
        for key, value in self.attributes:
            parts.append(f'{key}="{escape(format_attribute(value), _ATTRIBUTE_ENTITIES)}"')
        return "<" + " ".join(parts)

    def _render(self, lines: List[str], depth: int, indent: str):
        prefix = indent * depth
        if not self.children:
            if self.tag in SELF_CLOSING_TAGS:
                lines.append(f"{prefix}{self._open_tag()} />")
            else:
                lines.append(f"{prefix}{self._open_tag()}></{self.tag}>")
            return
        lines.append(f"{prefix}{self._open_tag()}>")
        for child in self.children:
            child._render(lines, depth + 1, indent)
        lines.append(f"{prefix}</{self.tag}>")
