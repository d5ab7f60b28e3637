"""
Convert Markdown with diagrams to Confluence Storage Format.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/md2conf
"""

import logging
from pathlib import Path

from .attachment import AttachmentDirectory
from .cache import RenderCache
from .csf import elements_from_string
from .diagnostics import DiagnosticLog
from .diagram import DiagramLanguage, RendererMap
from .environment import ConversionProperties
from .markdown import markdown_to_html
from .media import ConversionContext, MediaExtension
from .mermaid import MermaidRenderer
from .placeholder import PlaceholderProtocol
from .plantuml import PlantUMLRenderer
from .resolver import PlaceholderResolver
from .xhtml import normalize_xhtml

LOGGER = logging.getLogger(__name__)


def default_renderers(properties: ConversionProperties) -> RendererMap:
    "Renderers for each diagram language, configured from conversion properties."

    return {
        DiagramLanguage.MERMAID: MermaidRenderer(
            executable=properties.mmdc,
            enabled=properties.render_mermaid,
            debug=properties.debug,
            timeout=properties.render_timeout,
        ),
        DiagramLanguage.PLANTUML: PlantUMLRenderer(
            jar=properties.plantuml_jar,
            work_dir=properties.work_dir,
            enabled=properties.render_plantuml,
            debug=properties.debug,
            timeout=properties.render_timeout,
        ),
    }


class DocumentConverter:
    """
    Converts Markdown documents with embedded diagrams into Confluence Storage Format.

    :param properties: Conversion properties; read from the environment if omitted.
    :param renderers: Renderer for each diagram language; derived from properties if omitted.
    """

    properties: ConversionProperties
    renderers: RendererMap

    def __init__(self, properties: ConversionProperties | None = None, renderers: RendererMap | None = None) -> None:
        self.properties = properties if properties is not None else ConversionProperties()
        self.renderers = renderers if renderers is not None else default_renderers(self.properties)

    def _show_log_tail(self, log: DiagnosticLog) -> None:
        lines = log.tail(self.properties.log_lines)
        if not lines:
            return
        LOGGER.info("Last %d line(s) of diagnostic log %s:", len(lines), log.path)
        for line in lines:
            LOGGER.info("  %s", line)

    def convert(self, text: str, *, validate: bool = False) -> str:
        """
        Converts Markdown text into a Confluence Storage Format XHTML fragment.

        Diagrams are rendered into the image directory, and referenced as attachments.

        :param text: Markdown document.
        :param validate: Whether to check that the output is well-formed XML.
        :returns: XHTML fragment wrapped in a `<div>` that declares the Confluence namespaces.
        :raises AttachmentError: Raised when a rendered diagram cannot be placed into the image directory.
        :raises ParseError: Raised when validation is requested and the output is not well-formed.
        """

        with DiagnosticLog(self.properties.log_path) as log:
            if self.properties.debug:
                self._show_log_tail(log)

            context = ConversionContext(
                protocol=PlaceholderProtocol(),
                cache=RenderCache(self.properties.cache_dir, self.renderers, log),
                attachments=AttachmentDirectory(self.properties.image_dir),
            )
            html = markdown_to_html(text, MediaExtension(context))
            if context.error is not None:
                raise context.error

        LOGGER.info("Replaced %d diagram(s) and %d image(s) with attachments", context.diagrams, context.images)
        html = PlaceholderResolver(context.protocol, self.properties.image_dir).resolve(html)
        content = normalize_xhtml(html)
        if validate:
            elements_from_string(content)
        return content

    def convert_file(self, path: Path, output: Path | None = None, *, validate: bool = False) -> Path:
        """
        Converts a Markdown file, and writes the result into a file.

        :param path: Markdown file.
        :param output: Output file; defaults to the Markdown file with extension `.csf`.
        :param validate: Whether to check that the output is well-formed XML before it is written.
        :returns: Path to the output file.
        """

        LOGGER.info("Converting %s", path)
        text = path.read_text(encoding="utf-8")
        content = self.convert(text, validate=validate)

        if output is None:
            output = path.with_suffix(".csf")
        output.write_text(content, encoding="utf-8")
        LOGGER.info("Written %s", output)
        return output
