"""
Texture container
Parses KTEX files and decodes their mip levels on demand
"""

from typing import Dict, List, Optional, Tuple

import numpy as np
from PIL import Image

from .byte_cursor import ByteCursor
from .data_structures import MipLevel, TextureHeader
from .dxt import decode_dxt5
from .errors import FormatError
from ..utils.diagnostics import Diagnostics

TEXTURE_MAGIC = "KTEX"

# platform, pixel format, texture type, mip count, flags, fill
HEADER_FIELD_WIDTHS: Tuple[int, ...] = (4, 5, 4, 5, 2, 12)

PIXEL_FORMAT_DXT5 = 2

PIXEL_FORMAT_NAMES = {
    0: "DXT1",
    1: "DXT3",
    2: "DXT5",
    4: "RGBA",
    5: "RGB",
}


class TextureContainer:
    """Header and mip table of a KTEX file; pixels are decoded lazily"""

    def __init__(self, header: TextureHeader, mips: List[MipLevel],
                 diagnostics: Optional[Diagnostics] = None):
        self.header = header
        self.mips = mips
        self.diagnostics = diagnostics or Diagnostics()
        self._pixels: Dict[int, np.ndarray] = {}

    @classmethod
    def from_bytes(cls, data: bytes, diagnostics: Optional[Diagnostics] = None) -> "TextureContainer":
        """
        Parse a texture container

        Args:
            data: Whole file contents
            diagnostics: Optional diagnostics sink

        Returns:
            The parsed container
        """
        diagnostics = diagnostics or Diagnostics()
        cursor = ByteCursor(data)

        magic = cursor.read_chars(4)
        if magic != TEXTURE_MAGIC:
            raise FormatError(f"Not a texture file (magic {magic!r})")

        header = TextureHeader(*cursor.read_bit_fields(HEADER_FIELD_WIDTHS))
        diagnostics.debug("texture", f"Header: {header}")

        descriptors = cursor.repeat(
            header.mip_count,
            lambda _: (cursor.read_u16(), cursor.read_u16(), cursor.read_u16(), cursor.read_u32()),
        )
        mips = [
            MipLevel(width, height, pitch, byte_length, cursor.read_bytes(byte_length))
            for width, height, pitch, byte_length in descriptors
        ]

        if not cursor.at_end():
            diagnostics.debug("texture", f"{cursor.remaining} trailing byte(s) after mip data")
        return cls(header, mips, diagnostics)

    @property
    def pixel_format_name(self) -> str:
        return PIXEL_FORMAT_NAMES.get(self.header.pixel_format, f"unknown({self.header.pixel_format})")

    @property
    def width(self) -> int:
        return self.mips[0].width if self.mips else 0

    @property
    def height(self) -> int:
        return self.mips[0].height if self.mips else 0

    def mip_pixels(self, index: int = 0) -> np.ndarray:
        """
        Decode one mip level

        Args:
            index: Mip index (0 is the largest)

        Returns:
            (height, width, 4) uint8 RGBA array
        """
        if index in self._pixels:
            return self._pixels[index]
        if self.header.pixel_format != PIXEL_FORMAT_DXT5:
            raise FormatError(f"Unsupported pixel format {self.pixel_format_name}")

        mip = self.mips[index]
        self.diagnostics.debug("texture", f"Decoding mip {index} ({mip.width}x{mip.height})")
        pixels = decode_dxt5(mip.data, mip.width, mip.height)
        self._pixels[index] = pixels
        return pixels

    def to_image(self, index: int = 0) -> Image.Image:
        """Return a mip level as an RGBA PIL image."""
        return Image.fromarray(self.mip_pixels(index))

    def to_dict(self) -> Dict:
        return {
            'header': self.header.to_dict(),
            'pixel_format_name': self.pixel_format_name,
            'mips': [mip.to_dict() for mip in self.mips],
        }
