"""
Data structures for kscml
Defines the core data types read from Klei texture, build and animation containers
"""

import math
from dataclasses import dataclass, field
from enum import IntFlag
from typing import Dict, Iterator, List, Optional, Tuple


class HashTable:
    """
    Mapping from the format's 32-bit name hashes to their original strings.

    Keys are always unsigned 32-bit integers; later entries for the same
    hash replace earlier ones.
    """

    def __init__(self, entries: Optional[Dict[int, str]] = None) -> None:
        self._names: Dict[int, str] = {}
        for hash_value, name in (entries or {}).items():
            self.add(hash_value, name)

    def add(self, hash_value: int, name: str) -> None:
        self._names[hash_value & 0xFFFFFFFF] = name

    def get(self, hash_value: int) -> Optional[str]:
        return self._names.get(hash_value)

    def name_for(self, hash_value: int) -> str:
        """Return the name for a hash, or the raw hash as text when unknown."""
        name = self._names.get(hash_value)
        return name if name is not None else str(hash_value)

    def items(self) -> Iterator[Tuple[int, str]]:
        return iter(self._names.items())

    def __contains__(self, hash_value: object) -> bool:
        return hash_value in self._names

    def __len__(self) -> int:
        return len(self._names)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, HashTable) and self._names == other._names

    def __repr__(self) -> str:
        return f"HashTable({len(self._names)} entries)"

    def to_dict(self) -> Dict[str, str]:
        return {str(hash_value): name for hash_value, name in self._names.items()}


class Facing(IntFlag):
    """Facing byte of an animation clip"""
    RIGHT = 1 << 0
    UP = 1 << 1
    LEFT = 1 << 2
    DOWN = 1 << 3
    UPRIGHT = 1 << 4
    UPLEFT = 1 << 5
    DOWNRIGHT = 1 << 6
    DOWNLEFT = 1 << 7

    SIDE = LEFT | RIGHT
    UPSIDE = UPLEFT | UPRIGHT
    DOWNSIDE = DOWNLEFT | DOWNRIGHT
    DIAGONALS = UPLEFT | UPRIGHT | DOWNLEFT | DOWNRIGHT
    CARDINALS = UP | DOWN | LEFT | RIGHT
    ANY = DIAGONALS | CARDINALS


# Checked in order; only an exact match adds a suffix
FACING_SUFFIXES: List[Tuple[int, str]] = [
    (Facing.RIGHT, "_right"),
    (Facing.UP, "_up"),
    (Facing.LEFT, "_left"),
    (Facing.DOWN, "_down"),
    (Facing.UPRIGHT, "_upright"),
    (Facing.UPLEFT, "_upleft"),
    (Facing.DOWNRIGHT, "_downright"),
    (Facing.DOWNLEFT, "_downleft"),
    (Facing.SIDE, "_side"),
    (Facing.UPSIDE, "_upside"),
    (Facing.DOWNSIDE, "_downside"),
    (Facing.DIAGONALS, "_45s"),
    (Facing.CARDINALS, "_90s"),
]


def animation_name(name: str, facing: int) -> str:
    """
    Build the exported animation name from a clip name and its facing byte

    Args:
        name: Clip name as stored in the container
        facing: Raw facing byte

    Returns:
        The name with a direction suffix, or the bare name
    """
    for code, suffix in FACING_SUFFIXES:
        if int(code) == facing:
            return f"{name}{suffix}"
    return name


# --------------------------------------------------------------------- #
# Texture
# --------------------------------------------------------------------- #
@dataclass(frozen=True)
class TextureHeader:
    """Fields packed in the texture container's header word"""
    platform: int
    pixel_format: int
    texture_type: int
    mip_count: int
    flags: int
    fill: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            'platform': self.platform,
            'pixel_format': self.pixel_format,
            'texture_type': self.texture_type,
            'mip_count': self.mip_count,
            'flags': self.flags,
        }


@dataclass(frozen=True)
class MipLevel:
    """One resolution variant of a texture, still compressed"""
    width: int
    height: int
    pitch: int
    byte_length: int
    data: bytes = field(default=b"", repr=False)

    def to_dict(self) -> Dict[str, int]:
        return {
            'width': self.width,
            'height': self.height,
            'pitch': self.pitch,
            'byte_length': self.byte_length,
        }


# --------------------------------------------------------------------- #
# Build (atlas)
# --------------------------------------------------------------------- #
@dataclass(frozen=True)
class Vertex:
    """Triangle vertex; u/v address the atlas page selected by w"""
    x: float
    y: float
    z: float
    u: float
    v: float
    w: float


@dataclass(frozen=True)
class BoundingBox:
    """UV extent of a frame inside its atlas page"""
    left: float
    right: float
    top: float
    bottom: float

    def to_dict(self) -> Dict[str, float]:
        return {'left': self.left, 'right': self.right, 'top': self.top, 'bottom': self.bottom}


@dataclass(frozen=True)
class FrameHeader:
    """Symbol frame record exactly as stored in the build container"""
    frame: int
    duration: int
    x: float
    y: float
    w: float
    h: float
    alpha_index: int
    alpha_count: int

    @property
    def triangle_count(self) -> int:
        return self.alpha_count // 3


@dataclass(frozen=True)
class SymbolFrame:
    """Symbol frame enriched with its triangle geometry and derived values"""
    header: FrameHeader
    triangles: Tuple[Tuple[Vertex, Vertex, Vertex], ...] = ()
    bbox: Optional[BoundingBox] = None
    atlas_depth: Optional[int] = None

    @property
    def frame(self) -> int:
        return self.header.frame

    @property
    def width(self) -> int:
        return math.ceil(self.header.w)

    @property
    def height(self) -> int:
        return math.ceil(self.header.h)

    @property
    def pivot(self) -> Tuple[float, float]:
        """
        Normalised pivot of the frame image

        Returns:
            (pivot_x, pivot_y); a zero-sized axis keeps the centre (0.5)
        """
        width = self.width
        height = self.height
        pivot_x = 0.5 - self.header.x / width if width else 0.5
        pivot_y = 0.5 + self.header.y / height if height else 0.5
        return pivot_x, pivot_y

    def to_dict(self) -> Dict:
        header = self.header
        return {
            'frame': header.frame,
            'duration': header.duration,
            'x': header.x,
            'y': header.y,
            'w': header.w,
            'h': header.h,
            'alpha_index': header.alpha_index,
            'alpha_count': header.alpha_count,
            'atlas_depth': self.atlas_depth,
            'bbox': self.bbox.to_dict() if self.bbox else None,
        }


@dataclass(frozen=True)
class AtlasSymbol:
    """Named sprite group of a build"""
    hash: int
    frames: Tuple[SymbolFrame, ...]

    def find_frame(self, frame_number: int) -> Optional[int]:
        """Return the index of the frame numbered ``frame_number``, if any."""
        for index, frame in enumerate(self.frames):
            if frame.frame == frame_number:
                return index
        return None


@dataclass(frozen=True)
class AtlasFile:
    """One exported image of a symbol frame"""
    name: str
    width: int
    height: int
    pivot_x: float
    pivot_y: float


@dataclass(frozen=True)
class AtlasFolder:
    """All exported images of one symbol"""
    symbol_hash: int
    name: str
    files: Tuple[AtlasFile, ...]
    frame_numbers: Tuple[int, ...]


# --------------------------------------------------------------------- #
# Animation
# --------------------------------------------------------------------- #
@dataclass(frozen=True)
class Affine:
    """2x3 affine matrix [[a, c, tx], [b, d, ty]]"""
    a: float = 1.0
    b: float = 0.0
    c: float = 0.0
    d: float = 1.0
    tx: float = 0.0
    ty: float = 0.0

    def as_tuple(self) -> Tuple[float, float, float, float, float, float]:
        return self.a, self.b, self.c, self.d, self.tx, self.ty


@dataclass(frozen=True)
class Element:
    """One placed symbol frame inside an animation frame"""
    symbol_hash: int
    build_frame: int
    layer_hash: int
    matrix: Affine
    z: float

    def to_dict(self) -> Dict:
        return {
            'hash': self.symbol_hash,
            'build_frame': self.build_frame,
            'layer_name_hash': self.layer_hash,
            'matrix': list(self.matrix.as_tuple()),
            'z': self.z,
        }


@dataclass(frozen=True)
class AnimFrame:
    """Animation frame: bounding box, events and the elements drawn"""
    x: float
    y: float
    w: float
    h: float
    event_hashes: Tuple[int, ...]
    elements: Tuple[Element, ...]

    def to_dict(self) -> Dict:
        return {
            'x': self.x,
            'y': self.y,
            'w': self.w,
            'h': self.h,
            'events': list(self.event_hashes),
            'elements': [element.to_dict() for element in self.elements],
        }


@dataclass(frozen=True)
class AnimationClip:
    """Named clip of an animation container"""
    name: str
    facing: int
    bank_hash: int
    frame_rate: float
    frames: Tuple[AnimFrame, ...]

    @property
    def frame_duration(self) -> float:
        """Milliseconds per frame (0 when the frame rate is 0)"""
        return 1000.0 / self.frame_rate if self.frame_rate else 0.0

    @property
    def length_ms(self) -> float:
        return len(self.frames) * self.frame_duration

    @property
    def display_name(self) -> str:
        return animation_name(self.name, self.facing)

    def extended_frames(self) -> List[AnimFrame]:
        """Frames with the last one repeated once as a terminal key."""
        frames = list(self.frames)
        if frames:
            frames.append(frames[-1])
        return frames

    def to_dict(self) -> Dict:
        return {
            'name': self.name,
            'facing': self.facing,
            'bank_hash': self.bank_hash,
            'frame_rate': self.frame_rate,
            'frames': [frame.to_dict() for frame in self.frames],
        }
