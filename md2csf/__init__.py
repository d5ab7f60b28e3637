"""
Convert Markdown with diagrams to Confluence Storage Format.

Parses Markdown files, renders embedded Mermaid and PlantUML diagrams into cached PNG images, and emits XHTML with
`<ac:image>` elements that reference the images as Confluence attachments.
"""

from ._version import __version__

__all__ = ["__version__"]

__author__ = "Levente Hunyadi"
__copyright__ = "Copyright 2022-2026, Levente Hunyadi"
__license__ = "MIT"
__maintainer__ = "Levente Hunyadi"
__status__ = "Production"
