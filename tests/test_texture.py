from __future__ import annotations

import pytest

from kscml.core.errors import BoundsError, FormatError
from kscml.core.texture import TextureContainer
from tests._utils.builders import dxt5_block, texture

GREEN_BLOCK = dxt5_block(255, 255, [0] * 16, 0x07E0, 0x0000, [0] * 16)


def _two_mips() -> bytes:
    return texture([(8, 4, GREEN_BLOCK * 2), (4, 4, GREEN_BLOCK)], flags=2)


def test_header_and_mip_table() -> None:
    tex = TextureContainer.from_bytes(_two_mips())
    assert tex.header.platform == 0
    assert tex.header.pixel_format == 2
    assert tex.header.texture_type == 1
    assert tex.header.mip_count == 2
    assert tex.header.flags == 2
    assert tex.pixel_format_name == "DXT5"
    assert [(m.width, m.height, m.byte_length) for m in tex.mips] == [(8, 4, 32), (4, 4, 16)]
    assert (tex.width, tex.height) == (8, 4)


def test_mips_decode_lazily_and_are_cached() -> None:
    tex = TextureContainer.from_bytes(_two_mips())
    assert tex._pixels == {}
    first = tex.mip_pixels(1)
    assert first.shape == (4, 4, 4)
    assert (first == [0, 255, 0, 255]).all()
    assert tex.mip_pixels(1) is first


def test_to_image_is_rgba() -> None:
    image = TextureContainer.from_bytes(_two_mips()).to_image()
    assert image.mode == "RGBA"
    assert image.size == (8, 4)
    assert image.getpixel((7, 3)) == (0, 255, 0, 255)


def test_wrong_magic() -> None:
    with pytest.raises(FormatError):
        TextureContainer.from_bytes(b"XTEX" + _two_mips()[4:])


def test_truncated_mip_data() -> None:
    with pytest.raises(BoundsError):
        TextureContainer.from_bytes(_two_mips()[:-1])


def test_other_pixel_formats_are_not_decoded() -> None:
    tex = TextureContainer.from_bytes(texture([(4, 4, b"\x00" * 64)], pixel_format=4))
    assert tex.pixel_format_name == "RGBA"
    with pytest.raises(FormatError):
        tex.mip_pixels(0)


def test_snapshot() -> None:
    snapshot = TextureContainer.from_bytes(_two_mips()).to_dict()
    assert snapshot["header"]["mip_count"] == 2
    assert snapshot["mips"][0] == {"width": 8, "height": 4, "pitch": 32, "byte_length": 32}
