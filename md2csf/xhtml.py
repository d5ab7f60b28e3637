"""
Convert Markdown with diagrams to Confluence Storage Format.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/md2conf
"""

import re

from .csf import namespaces

_VOID_ELEMENT_PATTERN = re.compile(
    r"""<(?P<tag>hr|br|img|input|meta|link)\b(?P<attrs>(?:"[^"]*"|'[^']*'|[^'">])*?)\s*/?>""",
    re.IGNORECASE,
)
_ATTRIBUTE_PATTERN = re.compile(
    r"""(?P<name>[^\s"'=<>/]+)(?:\s*=\s*(?:"(?P<dq>[^"]*)"|'(?P<sq>[^']*)'|(?P<bare>[^\s"'<>`]+)))?"""
)
_BARE_AMPERSAND_PATTERN = re.compile(r"&(?!(?:[a-zA-Z][a-zA-Z0-9]*|#[0-9]+|#[xX][0-9a-fA-F]+);)")


def _xml_attribute(m: re.Match[str]) -> str:
    "Quotes an attribute value, and gives a value to a boolean attribute such as `checked`."

    name = m.group("name")
    if m.group("dq") is not None:
        return f'{name}="{m.group("dq")}"'
    elif m.group("sq") is not None:
        return f"{name}='{m.group('sq')}'"
    elif m.group("bare") is not None:
        return f'{name}="{m.group("bare")}"'
    else:
        return f'{name}="{name}"'


def self_close_void_elements(html: str) -> str:
    "Rewrites void elements such as `<br>` or `<img src=...>` into self-closing form."

    def _self_close(m: re.Match[str]) -> str:
        attrs = _ATTRIBUTE_PATTERN.sub(_xml_attribute, m.group("attrs"))
        return f"<{m.group('tag')}{attrs}/>"

    return _VOID_ELEMENT_PATTERN.sub(_self_close, html)


def escape_bare_ampersands(html: str) -> str:
    "Escapes `&` characters that do not start an entity or character reference."

    return _BARE_AMPERSAND_PATTERN.sub("&amp;", html)


def normalize_xhtml(html: str) -> str:
    """
    Turns an HTML fragment into an XHTML fragment suitable for Confluence Storage Format.

    Void elements are self-closed, bare ampersands are escaped, and the fragment is wrapped in a `<div>` that declares
    the namespaces `ac` and `ri`.

    :param html: HTML fragment.
    :returns: XHTML fragment with a single root element.
    """

    html = escape_bare_ampersands(self_close_void_elements(html))
    ns_attr_list = "".join(f' xmlns:{key}="{value}"' for key, value in namespaces.items())
    return f"<div{ns_attr_list}>{html}</div>"
