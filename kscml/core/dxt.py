"""
DXT5 block decoder
Turns block-compressed mip data into a straight (non-premultiplied) RGBA raster
"""

from typing import List

import numpy as np

from .byte_cursor import ByteCursor

BLOCK_SIZE = 16  # bytes per 4x4 block


def _alpha_tables(alpha0: np.ndarray, alpha1: np.ndarray) -> np.ndarray:
    """
    Build the 8-entry alpha table of every block.

    Args:
        alpha0: First alpha endpoint per block
        alpha1: Second alpha endpoint per block

    Returns:
        (n, 8) int32 array
    """
    a0 = alpha0.astype(np.int32)
    a1 = alpha1.astype(np.int32)
    six_step = a0 <= a1

    table = np.empty((a0.shape[0], 8), dtype=np.int32)
    table[:, 0] = a0
    table[:, 1] = a1
    for i in range(1, 7):
        seven = ((7 - i) * a0 + i * a1) // 7
        if i <= 4:
            six = ((5 - i) * a0 + i * a1) // 5
        else:
            six = np.full_like(a0, 0 if i == 5 else 255)
        table[:, 1 + i] = np.where(six_step, six, seven)
    return table


def build_alpha_table(alpha0: int, alpha1: int) -> List[int]:
    """Alpha interpolation table for a single pair of endpoints."""
    table = _alpha_tables(np.array([alpha0]), np.array([alpha1]))
    return [int(v) for v in table[0]]


def _unpack_565(color: np.ndarray) -> np.ndarray:
    """Expand packed 5-6-5 colours to 8-bit RGB, shape (n, 3)."""
    color = color.astype(np.int32)
    r = (color >> 11) & 0x1F
    g = (color >> 5) & 0x3F
    b = color & 0x1F
    return np.stack([(r << 3) | (r >> 2), (g << 2) | (g >> 4), (b << 3) | (b >> 2)], axis=-1)


def unpack_565(color: int) -> tuple:
    """Expand one packed 5-6-5 colour to an (r, g, b) tuple."""
    return tuple(int(v) for v in _unpack_565(np.array([color]))[0])


def decode_blocks(blocks: np.ndarray) -> np.ndarray:
    """
    Decode a stack of 16-byte blocks.

    Args:
        blocks: (n, 16) uint8 array, one row per block

    Returns:
        (n, 16, 4) uint8 array of RGBA cells in row-major block order
    """
    blocks = blocks.astype(np.uint64)
    count = blocks.shape[0]

    # Alpha: two endpoints, then 48 bits of 3-bit indices
    table = _alpha_tables(blocks[:, 0], blocks[:, 1])
    alpha_bits = np.zeros(count, dtype=np.uint64)
    for byte in range(6):
        alpha_bits |= blocks[:, 2 + byte] << np.uint64(8 * byte)
    alpha_index = np.stack(
        [(alpha_bits >> np.uint64(3 * cell)) & np.uint64(0x7) for cell in range(16)], axis=1
    ).astype(np.intp)
    alpha = np.take_along_axis(table, alpha_index, axis=1)

    # Colour: two 5-6-5 endpoints and a two-to-one blend either way
    color0 = _unpack_565(blocks[:, 8] | (blocks[:, 9] << np.uint64(8)))
    color1 = _unpack_565(blocks[:, 10] | (blocks[:, 11] << np.uint64(8)))
    palette = np.stack(
        [color0, color1, (2 * color0 + color1) // 3, (color0 + 2 * color1) // 3], axis=1
    )

    # One byte per row, least-significant pair first
    rows = blocks[:, 12:16].astype(np.int32)
    color_index = np.stack(
        [(rows[:, cell // 4] >> (2 * (cell % 4))) & 0x3 for cell in range(16)], axis=1
    ).astype(np.intp)
    rgb = np.take_along_axis(palette, color_index[:, :, None], axis=1)

    pixels = np.empty((count, 16, 4), dtype=np.uint8)
    pixels[:, :, :3] = rgb
    pixels[:, :, 3] = alpha
    return pixels


def decode_block(block: bytes) -> np.ndarray:
    """Decode one 16-byte block into a (16, 4) RGBA array."""
    cursor = ByteCursor(block)
    raw = np.frombuffer(cursor.read_bytes(BLOCK_SIZE), dtype=np.uint8)
    return decode_blocks(raw.reshape(1, BLOCK_SIZE))[0]


def decode_dxt5(data: bytes, width: int, height: int) -> np.ndarray:
    """
    Decode a DXT5 mip level

    Sizes that are not multiples of 4 are decoded on the padded block grid
    and cropped back.

    Args:
        data: Compressed block stream
        width: Target width in pixels
        height: Target height in pixels

    Returns:
        (height, width, 4) uint8 RGBA array
    """
    blocks_x = max(1, (width + 3) // 4)
    blocks_y = max(1, (height + 3) // 4)
    if width == 0 or height == 0:
        return np.zeros((height, width, 4), dtype=np.uint8)

    cursor = ByteCursor(data)
    raw = cursor.read_bytes(blocks_x * blocks_y * BLOCK_SIZE)
    blocks = np.frombuffer(raw, dtype=np.uint8).reshape(-1, BLOCK_SIZE)
    cells = decode_blocks(blocks)

    raster = (
        cells.reshape(blocks_y, blocks_x, 4, 4, 4)
        .transpose(0, 2, 1, 3, 4)
        .reshape(blocks_y * 4, blocks_x * 4, 4)
    )
    return np.ascontiguousarray(raster[:height, :width])
