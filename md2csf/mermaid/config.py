"""
Convert Markdown with diagrams to Confluence Storage Format.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/md2conf
"""

import os
from dataclasses import dataclass


@dataclass
class MermaidConfigProperties:
    """
    Configuration options for rendering Mermaid diagrams.

    Values are passed to the Mermaid diagram converter verbatim. Options left unset are omitted from the command line
    such that the converter applies its own defaults.

    :param width: Width of the page the diagram is laid out on.
    :param height: Height of the page the diagram is laid out on.
    :param scale: Scaling factor for the rendered diagram.
    :param background_color: Background color, e.g. `transparent` or `#F0F0F0`.
    :param theme: Mermaid theme, e.g. `default`, `forest`, `dark` or `neutral`.
    :param config_file: Path to a JSON configuration file for Mermaid.
    """

    width: str | None = None
    height: str | None = None
    scale: str | None = None
    background_color: str | None = None
    theme: str | None = None
    config_file: str | None = None

    @classmethod
    def from_environment(cls) -> "MermaidConfigProperties":
        "Reads options from `MMD_*` environment variables."

        return cls(
            width=os.getenv("MMD_WIDTH") or None,
            height=os.getenv("MMD_HEIGHT") or None,
            scale=os.getenv("MMD_SCALE") or None,
            background_color=os.getenv("MMD_BG") or None,
            theme=os.getenv("MMD_THEME") or None,
            config_file=os.getenv("MMD_CONFIG") or None,
        )

    def as_arguments(self) -> list[str]:
        "Command-line arguments for the Mermaid diagram converter."

        args: list[str] = []
        for flag, value in (
            ("-w", self.width),
            ("-H", self.height),
            ("-s", self.scale),
            ("-b", self.background_color),
            ("-t", self.theme),
            ("-c", self.config_file),
        ):
            if value is not None:
                args.extend([flag, value])
        return args
