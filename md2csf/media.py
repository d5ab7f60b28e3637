"""
Replaces diagrams and images in the Markdown document tree with placeholder tokens.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/md2conf
"""

import html
import logging
import posixpath
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Any
from urllib.parse import unquote, urlsplit

import markdown
from markdown.treeprocessors import Treeprocessor
from markdown.util import HTML_PLACEHOLDER_RE

from .attachment import AttachmentDirectory, AttachmentError
from .cache import RenderCache
from .diagram import DiagramLanguage, DiagramSource
from .extra import override
from .placeholder import Placeholder, PlaceholderProtocol, parse_size_annotation

LOGGER = logging.getLogger(__name__)

_IMG_TAG_PATTERN = re.compile(r"""<img\b(?P<attrs>(?:"[^"]*"|'[^']*'|[^'">])*)>""", re.IGNORECASE)
_ATTR_PATTERN = re.compile(r"""(?P<name>[A-Za-z_:][\w:.-]*)\s*=\s*(?:"(?P<dq>[^"]*)"|'(?P<sq>[^']*)'|(?P<bare>[^\s"'=<>`/]+))""")


@dataclass
class ConversionContext:
    """
    State shared by the parts of a single conversion.

    :param protocol: Placeholder protocol with the nonce of this conversion.
    :param cache: Render cache for diagrams.
    :param attachments: Output image directory.
    :param error: Fatal error raised while processing the document, re-raised when conversion completes.
    :param diagrams: Number of diagrams replaced with placeholders.
    :param images: Number of images replaced with placeholders.
    """

    protocol: PlaceholderProtocol
    cache: RenderCache
    attachments: AttachmentDirectory
    error: AttachmentError | None = None
    diagrams: int = 0
    images: int = 0


def image_filename(src: str) -> str | None:
    """
    Base file name of an image reference, with query string and fragment removed.

    :returns: File name, or `None` if the reference has no file name (e.g. a data URI).
    """

    parts = urlsplit(src.strip())
    if parts.scheme == "data":
        return None
    filename = posixpath.basename(unquote(parts.path).replace("\\", "/"))
    return filename or None


def _get_attributes(attrs: str) -> dict[str, str]:
    result: dict[str, str] = {}
    for m in _ATTR_PATTERN.finditer(attrs):
        value = m.group("dq")
        if value is None:
            value = m.group("sq")
        if value is None:
            value = m.group("bare")
        result[m.group("name").lower()] = html.unescape(value)
    return result


def _style_sizes(style: str) -> dict[str, str]:
    "Extracts `width` and `height` declarations from an inline CSS style, e.g. `width: 200px; border: 0`."

    sizes: dict[str, str] = {}
    for declaration in style.split(";"):
        name, sep, value = declaration.partition(":")
        name = name.strip().lower()
        if sep and name in ("width", "height") and name not in sizes:
            sizes[name] = value.strip()
    return sizes


def _size_params(attrs: dict[str, str]) -> dict[str, str]:
    "Width and height of an image from its attributes, falling back to its inline style."

    params = _style_sizes(attrs.get("style", ""))
    for name in ("width", "height"):
        value = attrs.get(name)
        if value:
            params[name] = value
    return params


def _code_block(source: str, language: str) -> str:
    "HTML for a fenced code block left unchanged."

    return f'<pre class="highlight"><code class="language-{html.escape(language)}">{html.escape(source, quote=False)}</code></pre>'


class MediaTreeprocessor(Treeprocessor):
    """
    Walks the document tree after inline processing, and replaces images with placeholder tokens.

    Markdown images are replaced in place, consuming any size annotation like `{width=200px}` that follows. Raw HTML
    `<img>` tags are rewritten inside the HTML stash where they await insertion into the output.
    """

    context: ConversionContext

    def __init__(self, md: markdown.Markdown, context: ConversionContext) -> None:
        super().__init__(md)
        self.context = context

    @override
    def run(self, root: ET.Element) -> None:
        self._process(root)

    def _process(self, parent: ET.Element) -> None:
        self._scan_stash(parent.text)

        index = 0
        while index < len(parent):
            child = parent[index]
            if child.tag == "img" and self._replace_image(parent, index, child):
                # the element has been removed, and its successor now has the same index
                continue

            self._process(child)
            self._scan_stash(child.tail)
            index += 1

    def _replace_image(self, parent: ET.Element, index: int, img: ET.Element) -> bool:
        src = img.get("src")
        filename = image_filename(src) if src else None
        if filename is None:
            return False

        params = _size_params(dict(img.attrib))
        annotation, rest = parse_size_annotation(img.tail)
        params.update(annotation)
        alt = img.get("alt")
        if alt and "alt" not in params:
            params["alt"] = alt

        token = self.context.protocol.encode(Placeholder(filename, params))
        LOGGER.debug("Replacing image %s with placeholder", src)
        self.context.images += 1

        text = token + rest
        if index > 0:
            previous = parent[index - 1]
            previous.tail = (previous.tail or "") + text
        else:
            parent.text = (parent.text or "") + text
        parent.remove(img)

        # placeholders for raw HTML might follow the image in the same text run
        self._scan_stash(rest)
        return True

    def _scan_stash(self, text: str | None) -> None:
        if not text:
            return

        for m in HTML_PLACEHOLDER_RE.finditer(text):
            stash_index = int(m.group(1))
            blocks = self.md.htmlStash.rawHtmlBlocks
            if stash_index >= len(blocks):
                continue
            block = blocks[stash_index]
            if isinstance(block, str):
                blocks[stash_index] = _IMG_TAG_PATTERN.sub(self._replace_raw_image, block)

    def _replace_raw_image(self, match: re.Match[str]) -> str:
        attrs = _get_attributes(match.group("attrs"))
        src = attrs.get("src")
        filename = image_filename(src) if src else None
        if filename is None:
            return match.group(0)

        params = _size_params(attrs)
        if attrs.get("alt"):
            params["alt"] = attrs["alt"]
        LOGGER.debug("Replacing HTML image %s with placeholder", src)
        self.context.images += 1
        return self.context.protocol.encode(Placeholder(filename, params))


class MediaExtension(markdown.Extension):
    """
    Renders diagrams in fenced code blocks, and replaces diagrams and images with placeholder tokens.

    Diagram fences are handled by `pymdownx.superfences` with the formatters returned by `custom_fences`.
    """

    context: ConversionContext

    def __init__(self, context: ConversionContext, **kwargs: Any) -> None:
        self.context = context
        super().__init__(**kwargs)

    @override
    def extendMarkdown(self, md: markdown.Markdown) -> None:
        # run after inline processing (priority 20) but before prettifying (priority 10)
        md.treeprocessors.register(MediaTreeprocessor(md, self.context), "md2csf_media", 15)

    def custom_fences(self) -> list[dict[str, Any]]:
        "Custom fence definitions for `pymdownx.superfences`."

        return [{"name": language.value, "class": language.value, "format": self.format_fence} for language in DiagramLanguage]

    def format_fence(
        self,
        source: str,
        language: str,
        class_name: str,
        options: dict[str, Any],
        md: markdown.Markdown,
        **kwargs: Any,
    ) -> str:
        """
        Custom formatter for diagram languages in `pymdownx.superfences`.

        Emits a placeholder when the diagram is rendered, and the original code block otherwise.
        """

        diagram_language = DiagramLanguage.from_fence(language)
        if diagram_language is None or self.context.error is not None:
            return _code_block(source, language)

        try:
            cached_path = self.context.cache.ensure_rendered(DiagramSource(diagram_language, source))
        except OSError as ex:
            LOGGER.error("Unable to render %s diagram: %s", diagram_language.value, ex)
            return _code_block(source, language)
        if cached_path is None:
            return _code_block(source, language)

        try:
            filename = self.context.attachments.ensure_available(cached_path)
        except AttachmentError as ex:
            # formatter exceptions are swallowed by the fence extension; re-raised after conversion
            LOGGER.error("%s", ex)
            self.context.error = ex
            return _code_block(source, language)

        self.context.diagrams += 1
        return f"<p>{self.context.protocol.encode(Placeholder(filename))}</p>"
