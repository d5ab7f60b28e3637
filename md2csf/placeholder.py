"""
Placeholder tokens that stand in for images until the final markup is emitted.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/md2conf
"""

import logging
import re
import uuid
from dataclasses import dataclass, field
from typing import Callable
from urllib.parse import quote, unquote

LOGGER = logging.getLogger(__name__)

_QTEXT = r"[A-Za-z0-9._~%-]+"
_KEY = r"[a-z][a-z0-9-]*"
_KEY_PATTERN = re.compile(rf"^{_KEY}$")

# one or more adjacent attribute groups at the start of a text run, e.g. `{width=200px}{height=100}`
_GROUP_PATTERN = re.compile(r"\{([^{}\n]*)\}")
_TOKEN_SEPARATOR = re.compile(r"[\s,;]+")


@dataclass
class Placeholder:
    """
    An image to be emitted as an `<ac:image>` element.

    :param filename: Name of the image file in the image directory.
    :param params: Sizing and other parameters, e.g. `width` or `height`.
    """

    filename: str
    params: dict[str, str] = field(default_factory=dict)


class PlaceholderProtocol:
    """
    Encodes placeholders as tokens, and finds them again in serialized HTML.

    Tokens have the form `@@ATTACH:<nonce>|file=<name>|<key>=<value>;...@@`. Names and values are percent-encoded,
    so a token contains no character that an HTML serializer would escape. The nonce is unique to a conversion, and
    only tokens with the matching nonce are recognized.

    :param nonce: Hexadecimal nonce; a random one is generated if omitted.
    """

    nonce: str
    pattern: re.Pattern[str]

    def __init__(self, nonce: str | None = None) -> None:
        if nonce is None:
            nonce = uuid.uuid4().hex[:12]
        elif not re.fullmatch(r"[0-9a-f]+", nonce):
            raise ValueError(f"expected: hexadecimal nonce; got: {nonce}")

        self.nonce = nonce
        self.pattern = re.compile(
            rf"@@ATTACH:{nonce}\|file=(?P<file>{_QTEXT})(?:\|(?P<params>{_KEY}={_QTEXT}(?:;{_KEY}={_QTEXT})*))?@@"
        )

    def encode(self, placeholder: Placeholder) -> str:
        "Produces the token for a placeholder."

        parts = [f"@@ATTACH:{self.nonce}|file={quote(placeholder.filename, safe='')}"]
        params: list[str] = []
        for key, value in placeholder.params.items():
            if not _KEY_PATTERN.match(key) or not value:
                LOGGER.debug("Skipping image parameter %r=%r", key, value)
                continue
            params.append(f"{key}={quote(value, safe='')}")
        if params:
            parts.append(";".join(params))
        return "|".join(parts) + "@@"

    def decode(self, match: re.Match[str]) -> Placeholder:
        "Reconstructs a placeholder from a token match."

        params: dict[str, str] = {}
        if match.group("params"):
            for item in match.group("params").split(";"):
                key, value = item.split("=", 1)
                params[key] = unquote(value)
        return Placeholder(unquote(match.group("file")), params)

    def sub(self, text: str, repl: Callable[[Placeholder], str]) -> str:
        "Replaces each token in the text with the markup produced by the callable."

        return self.pattern.sub(lambda m: repl(self.decode(m)), text)

    def count(self, text: str) -> int:
        return sum(1 for _ in self.pattern.finditer(text))


def normalize_size(value: str | None) -> str | None:
    """
    Converts a size value into a number of pixels, e.g. `450px` becomes `450`.

    :returns: Pixel count as a string of digits, or `None` for relative or unparsable sizes like `50%` or `auto`.
    """

    if value is None:
        return None
    value = value.strip().lower()
    if value.endswith("px"):
        value = value[:-2].rstrip()
    return value if value.isascii() and value.isdigit() else None


def _parse_group(content: str) -> dict[str, str] | None:
    params: dict[str, str] = {}
    # allow whitespace around separators, e.g. `width: 300px`
    content = re.sub(r"\s*([=:])\s*", r"\1", content.strip())
    for item in _TOKEN_SEPARATOR.split(content):
        if not item:
            continue
        match = re.fullmatch(r"([A-Za-z][A-Za-z0-9_-]*)\s*[=:]\s*(.+)", item)
        if not match:
            return None
        key = match.group(1).lower().replace("_", "-")
        params[key] = match.group(2).strip("\"'")
    return params or None


def parse_size_annotation(text: str | None) -> tuple[dict[str, str], str]:
    """
    Consumes attribute groups such as `{width=200px}` at the start of the text that follows an image.

    Groups must immediately follow the image and each other. Inside a group, entries take the form `key=value` or
    `key:value`, separated by whitespace, commas or semicolons. A group that does not consist entirely of such entries
    is not an annotation, and is left in the text.

    :param text: Text immediately following an image.
    :returns: A tuple of the parameters collected (keys in lowercase) and the remaining text.
    """

    params: dict[str, str] = {}
    if not text:
        return params, text or ""

    position = 0
    while True:
        match = _GROUP_PATTERN.match(text, position)
        if match is None:
            break
        group = _parse_group(match.group(1))
        if group is None:
            break
        params.update(group)
        position = match.end()

    return params, text[position:]
