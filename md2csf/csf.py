"""
Convert Markdown with diagrams to Confluence Storage Format.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/md2conf
"""

import re
from html.entities import name2codepoint

import lxml.etree as ET

ElementType = ET._Element  # pyright: ignore [reportPrivateUsage]

# XML namespaces typically associated with Confluence Storage Format documents
namespaces = {
    "ac": "http://atlassian.com/content",
    "ri": "http://atlassian.com/resource/identifier",
}
for key, value in namespaces.items():
    ET.register_namespace(key, value)

_XML_ENTITIES = frozenset(["amp", "lt", "gt", "quot", "apos"])


class ParseError(RuntimeError):
    "Raised when a document is not well-formed XML."


def _numeric_entity(m: re.Match[str]) -> str:
    name = m.group(1)
    if name in _XML_ENTITIES:
        return m.group(0)
    codepoint = name2codepoint.get(name)
    if codepoint is None:
        return m.group(0)
    return f"&#{codepoint};"


def elements_from_string(content: str) -> ElementType:
    """
    Parses a Confluence Storage Format document into an XML element tree.

    HTML named entities such as `&nbsp;` or `&copy;` are accepted, and replaced with numeric character references.

    :param content: Document whose root element declares the Confluence namespaces.
    :returns: Root element of the document.
    :raises ParseError: Raised when the document is not well-formed.
    """

    content = re.sub(r"&([A-Za-z][A-Za-z0-9]*);", _numeric_entity, content)
    parser = ET.XMLParser(remove_comments=True, strip_cdata=False, resolve_entities=False)

    try:
        return ET.fromstring(content.encode("utf-8"), parser=parser)
    except ET.XMLSyntaxError as ex:
        raise ParseError(str(ex)) from ex
