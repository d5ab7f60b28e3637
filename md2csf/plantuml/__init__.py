"""
Convert Markdown with diagrams to Confluence Storage Format.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/md2conf
"""

from .config import get_plantuml_jar_path
from .render import PlantUMLRenderer, has_plantuml

__all__ = ["PlantUMLRenderer", "get_plantuml_jar_path", "has_plantuml"]
