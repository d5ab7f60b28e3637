"""
Resolves placeholder tokens into Confluence Storage Format image elements.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/md2conf
"""

import html
import logging
import re
from pathlib import Path

from .image import get_image_dimensions
from .placeholder import Placeholder, PlaceholderProtocol, normalize_size

LOGGER = logging.getLogger(__name__)

_STRIKE_OPEN_PATTERN = re.compile(r"<(?:del|s|strike)\b[^>]*>", re.IGNORECASE)
_STRIKE_CLOSE_PATTERN = re.compile(r"</(?:del|s|strike)\s*>", re.IGNORECASE)


def rewrite_strikethrough(content: str) -> str:
    "Replaces `<del>`, `<s>` and `<strike>` with a styled `<span>`, which Confluence preserves."

    content = _STRIKE_OPEN_PATTERN.sub('<span style="text-decoration:line-through;">', content)
    return _STRIKE_CLOSE_PATTERN.sub("</span>", content)


class PlaceholderResolver:
    """
    Replaces placeholder tokens in serialized HTML with `<ac:image>` elements.

    :param protocol: Placeholder protocol of the conversion that produced the HTML.
    :param image_dir: Directory where images referenced by placeholders are found.
    """

    protocol: PlaceholderProtocol
    image_dir: Path
    _dimensions: dict[str, tuple[int | None, int | None]]
    _link_pattern: re.Pattern[str]

    def __init__(self, protocol: PlaceholderProtocol, image_dir: Path) -> None:
        self.protocol = protocol
        self.image_dir = image_dir
        self._dimensions = {}
        self._link_pattern = re.compile(rf"<a\b[^>]*>\s*(?P<token>{protocol.pattern.pattern})\s*</a>")

    def native_dimensions(self, filename: str) -> tuple[int | None, int | None]:
        "Width and height of an image in the image directory, looked up once per file."

        dimensions = self._dimensions.get(filename)
        if dimensions is None:
            dimensions = get_image_dimensions(self.image_dir / filename)
            self._dimensions[filename] = dimensions
        return dimensions

    def image_markup(self, placeholder: Placeholder) -> str:
        "Emits an `<ac:image>` element that references an attachment."

        attrs: list[tuple[str, str]] = []
        width = normalize_size(placeholder.params.get("width"))
        height = normalize_size(placeholder.params.get("height"))
        if width:
            attrs.append(("ac:width", width))
        if height:
            attrs.append(("ac:height", height))
        if width or height:
            attrs.append(("ac:thumbnail", "true"))

        original_width, original_height = self.native_dimensions(placeholder.filename)
        if original_width is not None:
            attrs.append(("ac:original-width", str(original_width)))
        if original_height is not None:
            attrs.append(("ac:original-height", str(original_height)))
        alt = placeholder.params.get("alt")
        if alt:
            attrs.append(("ac:alt", alt))

        attr_list = "".join(f' {name}="{html.escape(value)}"' for name, value in attrs)
        filename = html.escape(placeholder.filename)
        return f'<ac:image{attr_list}><ri:attachment ri:filename="{filename}"/></ac:image>'

    def resolve(self, content: str) -> str:
        """
        Resolves all placeholders in an HTML fragment.

        Links that wrap nothing but a placeholder are removed, strikethrough elements are rewritten.

        :param content: HTML produced by a conversion.
        :returns: HTML with `<ac:image>` elements.
        """

        content = self._link_pattern.sub(lambda m: m.group("token"), content)
        content = self.protocol.sub(content, self.image_markup)
        return rewrite_strikethrough(content)
