from __future__ import annotations

import numpy as np
import pytest

from kscml.core.dxt import build_alpha_table, decode_block, decode_dxt5, unpack_565
from kscml.core.errors import BoundsError
from tests._utils.builders import dxt5_block

RED = 0xF800
BLUE = 0x001F


def test_six_step_alpha_table() -> None:
    table = build_alpha_table(0, 255)
    assert table[2:6] == [51, 102, 153, 204]
    assert table[6] == 0
    assert table[7] == 255
    assert table[:2] == [0, 255]


def test_eight_step_alpha_table() -> None:
    table = build_alpha_table(200, 50)
    expected = [200, 50] + [((7 - i) * 200 + i * 50) // 7 for i in range(1, 7)]
    assert table == expected
    assert table == [200, 50, 178, 157, 135, 114, 92, 71]


@pytest.mark.parametrize(
    "packed, rgb",
    [(0xFFFF, (255, 255, 255)), (RED, (255, 0, 0)), (0x07E0, (0, 255, 0)), (BLUE, (0, 0, 255)), (0, (0, 0, 0))],
)
def test_unpack_565(packed: int, rgb) -> None:
    assert unpack_565(packed) == rgb


def test_block_cells_combine_palette_and_alpha() -> None:
    block = dxt5_block(0, 255, list(range(8)) * 2, RED, BLUE, [0, 1, 2, 3] * 4)
    cells = decode_block(block)
    assert cells.shape == (16, 4)
    assert tuple(cells[0]) == (255, 0, 0, 0)
    assert tuple(cells[1]) == (0, 0, 255, 255)
    assert tuple(cells[2]) == (170, 0, 85, 51)
    assert tuple(cells[3]) == (85, 0, 170, 102)
    # second row starts over at colour 0, alpha index 4
    assert tuple(cells[4]) == (255, 0, 0, 153)
    assert tuple(cells[6]) == (170, 0, 85, 0)
    assert tuple(cells[7]) == (85, 0, 170, 255)


def test_block_decoding_is_deterministic() -> None:
    block = dxt5_block(17, 230, [3, 1, 4, 1, 5, 1, 2, 6, 5, 3, 5, 7, 0, 2, 1, 4], 0x1234, 0xBEEF, [1, 2, 3, 0] * 4)
    assert np.array_equal(decode_block(block), decode_block(bytes(block)))


def test_blocks_are_placed_row_major() -> None:
    red = dxt5_block(255, 255, [0] * 16, RED, BLUE, [0] * 16)
    blue = dxt5_block(255, 255, [0] * 16, RED, BLUE, [1] * 16)
    wide = decode_dxt5(red + blue, 8, 4)
    assert wide.shape == (4, 8, 4)
    assert (wide[:, :4] == [255, 0, 0, 255]).all()
    assert (wide[:, 4:] == [0, 0, 255, 255]).all()

    tall = decode_dxt5(red + blue, 4, 8)
    assert tall.shape == (8, 4, 4)
    assert (tall[:4] == [255, 0, 0, 255]).all()
    assert (tall[4:] == [0, 0, 255, 255]).all()


def test_cell_position_inside_block() -> None:
    indices = [0] * 16
    indices[6] = 1  # row 1, column 2
    pixels = decode_dxt5(dxt5_block(255, 255, [0] * 16, RED, BLUE, indices), 4, 4)
    assert tuple(pixels[1, 2]) == (0, 0, 255, 255)
    assert tuple(pixels[2, 1]) == (255, 0, 0, 255)


def test_small_mip_is_cropped() -> None:
    pixels = decode_dxt5(dxt5_block(255, 255, [0] * 16, RED, BLUE, [1] * 16), 2, 2)
    assert pixels.shape == (2, 2, 4)
    assert (pixels == [0, 0, 255, 255]).all()


def test_truncated_stream_fails() -> None:
    with pytest.raises(BoundsError):
        decode_dxt5(b"\x00" * 31, 8, 4)
