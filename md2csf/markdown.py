"""
Convert Markdown with diagrams to Confluence Storage Format.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/md2conf
"""

import markdown

from .media import MediaExtension


def create_converter(media: MediaExtension) -> markdown.Markdown:
    "Creates a Markdown converter that emits placeholders for diagrams and images."

    return markdown.Markdown(
        extensions=[
            "admonition",
            "footnotes",
            "markdown.extensions.tables",
            "md_in_html",
            "pymdownx.highlight",  # required by `pymdownx.superfences`
            "pymdownx.magiclink",
            "pymdownx.superfences",
            "pymdownx.tilde",
            "sane_lists",
            media,
        ],
        extension_configs={
            "footnotes": {"BACKLINK_TITLE": ""},
            "pymdownx.highlight": {
                "use_pygments": False,
            },
            "pymdownx.superfences": {"custom_fences": media.custom_fences()},
        },
        output_format="xhtml",
    )


def markdown_to_html(content: str, media: MediaExtension) -> str:
    """
    Converts a Markdown document into HTML with Python-Markdown.

    A new converter is created for each document because the media extension carries the state of a single conversion.

    :param content: Markdown input as a string.
    :param media: Extension that replaces diagrams and images with placeholders.
    :returns: HTML output as a string.
    :see: https://python-markdown.github.io/
    """

    return create_converter(media).convert(content)
