"""
PNG validation and dimension extraction utilities.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/md2conf
"""

from pathlib import Path
from struct import unpack
from typing import BinaryIO

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


def is_png_file(path: Path) -> bool:
    "True if the file exists and starts with the PNG signature."

    try:
        with open(path, "rb") as f:
            return f.read(len(PNG_SIGNATURE)) == PNG_SIGNATURE
    except OSError:
        return False


def _read_signature(f: BinaryIO) -> None:
    "Reads and checks PNG signature (first 8 bytes)."

    signature = f.read(8)
    if signature != PNG_SIGNATURE:
        raise ValueError("not a valid PNG file")


def _read_header(f: BinaryIO) -> bytes:
    "Reads the `IHDR` chunk that must follow the signature."

    length_bytes = f.read(4)
    if len(length_bytes) != 4:
        raise ValueError("missing IHDR chunk")

    length = int.from_bytes(length_bytes, "big")
    if length != 13:
        raise ValueError("invalid chunk length")

    chunk_type = f.read(4)
    if chunk_type != b"IHDR":
        raise ValueError(f"expected: IHDR chunk; got: {chunk_type!r}")

    data = f.read(length)
    if len(data) != length:
        raise ValueError(f"insufficient bytes to read chunk data of length {length}")
    return data


def _extract_png_dimensions(source_file: BinaryIO) -> tuple[int, int]:
    _read_signature(source_file)
    width, height = unpack(">II", _read_header(source_file)[:8])
    return width, height


def extract_png_dimensions(path: str | Path) -> tuple[int, int]:
    """
    Returns the width and height of a PNG image inspecting its header.

    :param path: Path to the PNG image file.
    :returns: A tuple of the image's width and height in pixels.
    :raises ValueError: Raised when the file is not a PNG image.
    """

    with open(path, "rb") as f:
        return _extract_png_dimensions(f)
