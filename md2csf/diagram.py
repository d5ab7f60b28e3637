"""
Convert Markdown with diagrams to Confluence Storage Format.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/md2conf
"""

import enum
import hashlib
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path


class RendererUnavailable(RuntimeError):
    "Raised when a diagram renderer is not installed or has been switched off."


class RendererFailure(RuntimeError):
    "Raised when a diagram renderer exits with an error or cannot be started."


class ValidationFailure(RendererFailure):
    "Raised when a renderer produces output that is not a valid PNG image."


@enum.unique
class DiagramLanguage(enum.Enum):
    "Fenced code block languages rendered as images."

    MERMAID = "mermaid"
    PLANTUML = "plantuml"

    @classmethod
    def from_fence(cls, name: str) -> "DiagramLanguage | None":
        "Maps a fenced code block language tag to a diagram language, if any."

        try:
            return cls(name.strip().lower())
        except ValueError:
            return None


@dataclass(frozen=True)
class DiagramSource:
    """
    Diagram code extracted from a fenced code block.

    :param language: Diagram language.
    :param code: Diagram source text, passed to the renderer verbatim.
    """

    language: DiagramLanguage
    code: str

    @property
    def key(self) -> str:
        "Content-addressed identifier, stable across runs and documents."

        return hashlib.md5(f"{self.language.value}::{self.code}".encode("utf-8")).hexdigest()

    @property
    def filename(self) -> str:
        return f"{self.key}.png"


class DiagramRenderer(ABC):
    "Produces a PNG image from diagram source with an external tool."

    @abstractmethod
    def render(self, code: str, out_file: Path) -> None:
        """
        Renders diagram source into an image file.

        :param code: Diagram source text.
        :param out_file: Path where the PNG image is to be written.
        :raises RendererUnavailable: Raised when the renderer is missing or disabled.
        :raises RendererFailure: Raised when the renderer fails.
        """
        ...


RendererMap = dict[DiagramLanguage, DiagramRenderer]
