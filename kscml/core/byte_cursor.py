"""
Byte Cursor
Sequential little-endian reader shared by the texture, build and animation readers
"""

import struct
from typing import Callable, List, Sequence, TypeVar

from .errors import BoundsError

T = TypeVar("T")

_U16 = struct.Struct("<H")
_U32 = struct.Struct("<I")
_F32 = struct.Struct("<f")


def unpack_bit_fields(word: int, widths: Sequence[int]) -> List[int]:
    """
    Split a 32-bit word into successive fields, least-significant field first.

    Args:
        word: Unsigned 32-bit value
        widths: Bit width of each field, in order

    Returns:
        One integer per width
    """
    if sum(widths) > 32:
        raise ValueError(f"Bit widths {list(widths)} exceed 32 bits")
    fields = []
    shift = 0
    for width in widths:
        fields.append((word >> shift) & ((1 << width) - 1))
        shift += width
    return fields


def pack_bit_fields(values: Sequence[int], widths: Sequence[int]) -> int:
    """Inverse of :func:`unpack_bit_fields`."""
    if len(values) != len(widths):
        raise ValueError("values and widths must have the same length")
    if sum(widths) > 32:
        raise ValueError(f"Bit widths {list(widths)} exceed 32 bits")
    word = 0
    shift = 0
    for value, width in zip(values, widths):
        mask = (1 << width) - 1
        if value < 0 or value > mask:
            raise ValueError(f"Value {value} does not fit in {width} bits")
        word |= (value & mask) << shift
        shift += width
    return word


class ByteCursor:
    """Keeps track of the current offset while reading little-endian data."""

    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)
        self._offset = 0

    def __len__(self) -> int:
        return len(self._data)

    def tell(self) -> int:
        """Return the current read offset."""
        return self._offset

    @property
    def remaining(self) -> int:
        return len(self._data) - self._offset

    def at_end(self) -> bool:
        return self._offset == len(self._data)

    def _take(self, size: int, what: str) -> int:
        if size < 0 or self._offset + size > len(self._data):
            raise BoundsError(self._offset, size, len(self._data), what)
        start = self._offset
        self._offset += size
        return start

    def read_bytes(self, size: int) -> bytes:
        start = self._take(size, "bytes")
        return self._data[start:start + size]

    def read_chars(self, size: int) -> str:
        """Read ``size`` single-byte characters."""
        start = self._take(size, "characters")
        return self._data[start:start + size].decode("latin-1")

    def read_u8(self) -> int:
        start = self._take(1, "uint8")
        return self._data[start]

    def read_u16(self) -> int:
        start = self._take(2, "uint16")
        return _U16.unpack_from(self._data, start)[0]

    def read_u32(self) -> int:
        start = self._take(4, "uint32")
        return _U32.unpack_from(self._data, start)[0]

    def read_f32(self) -> float:
        start = self._take(4, "float")
        return _F32.unpack_from(self._data, start)[0]

    def read_string(self) -> str:
        """Read a uint32 character count followed by that many characters."""
        length = self.read_u32()
        return self.read_chars(length)

    def read_bit_fields(self, widths: Sequence[int]) -> List[int]:
        """Read one uint32 and unpack it with :func:`unpack_bit_fields`."""
        return unpack_bit_fields(self.read_u32(), widths)

    def repeat(self, times: int, reader: Callable[[int], T]) -> List[T]:
        """Call ``reader(index)`` ``times`` times and collect the results."""
        return [reader(index) for index in range(times)]
