"""
Convert Markdown with diagrams to Confluence Storage Format.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/md2conf
"""

from .config import MermaidConfigProperties
from .render import MermaidRenderer, get_mmdc, has_mmdc

__all__ = ["MermaidConfigProperties", "MermaidRenderer", "get_mmdc", "has_mmdc"]
