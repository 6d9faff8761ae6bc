"""
Animation container
Parses ANIM files: clips, frames, elements and the shared hash table
"""

from typing import Dict, List, Optional

from .byte_cursor import ByteCursor
from .data_structures import Affine, AnimationClip, AnimFrame, Element, HashTable
from .errors import FormatError
from .texture_atlas import read_hash_table
from ..utils.diagnostics import Diagnostics

ANIM_MAGIC = "ANIM"


def _read_element(cursor: ByteCursor) -> Element:
    symbol_hash = cursor.read_u32()
    build_frame = cursor.read_u32()
    layer_hash = cursor.read_u32()
    matrix = Affine(*(cursor.read_f32() for _ in range(6)))
    return Element(
        symbol_hash=symbol_hash,
        build_frame=build_frame,
        layer_hash=layer_hash,
        matrix=matrix,
        z=cursor.read_f32(),
    )


def _read_frame(cursor: ByteCursor) -> AnimFrame:
    x = cursor.read_f32()
    y = cursor.read_f32()
    w = cursor.read_f32()
    h = cursor.read_f32()
    events = cursor.repeat(cursor.read_u32(), lambda _: cursor.read_u32())
    elements = cursor.repeat(cursor.read_u32(), lambda _: _read_element(cursor))
    return AnimFrame(
        x=x,
        y=y,
        w=w,
        h=h,
        # duplicates dropped, first occurrence kept
        event_hashes=tuple(dict.fromkeys(events)),
        elements=tuple(elements),
    )


def _read_clip(cursor: ByteCursor) -> AnimationClip:
    name = cursor.read_string()
    facing = cursor.read_u8()
    bank_hash = cursor.read_u32()
    frame_rate = cursor.read_f32()
    frames = cursor.repeat(cursor.read_u32(), lambda _: _read_frame(cursor))
    return AnimationClip(
        name=name,
        facing=facing,
        bank_hash=bank_hash,
        frame_rate=frame_rate,
        frames=tuple(frames),
    )


class AnimationContainer:
    """Clips of one animation bank"""

    def __init__(
        self,
        version: int,
        element_count: int,
        frame_count: int,
        event_count: int,
        clips: List[AnimationClip],
        hash_table: HashTable,
    ):
        self.version = version
        self.element_count = element_count
        self.frame_count = frame_count
        self.event_count = event_count
        self.clips = clips
        self.hash_table = hash_table

    @classmethod
    def from_bytes(cls, data: bytes, diagnostics: Optional[Diagnostics] = None) -> "AnimationContainer":
        """
        Parse an animation container

        Args:
            data: Whole file contents
            diagnostics: Optional diagnostics sink

        Returns:
            The parsed container
        """
        diagnostics = diagnostics or Diagnostics()
        cursor = ByteCursor(data)

        magic = cursor.read_chars(4)
        if magic != ANIM_MAGIC:
            raise FormatError(f"Not an animation file (magic {magic!r})")

        version = cursor.read_u32()
        element_count = cursor.read_u32()
        frame_count = cursor.read_u32()
        event_count = cursor.read_u32()
        clip_count = cursor.read_u32()

        clips = cursor.repeat(clip_count, lambda _: _read_clip(cursor))
        for clip in clips:
            diagnostics.debug(
                "animation",
                f"Clip '{clip.name}' facing={clip.facing} {len(clip.frames)} frame(s) @ {clip.frame_rate} fps",
            )

        hash_table = read_hash_table(cursor)
        if not cursor.at_end():
            diagnostics.debug("animation", f"{cursor.remaining} trailing byte(s) after hash table")
        return cls(version, element_count, frame_count, event_count, clips, hash_table)

    @property
    def bank_hash(self) -> Optional[int]:
        return self.clips[0].bank_hash if self.clips else None

    def sorted_clips(self) -> List[AnimationClip]:
        """Clips in export order: ascending by name."""
        return sorted(self.clips, key=lambda clip: clip.name)

    def to_dict(self) -> Dict:
        return {
            'version': self.version,
            'element_count': self.element_count,
            'frame_count': self.frame_count,
            'event_count': self.event_count,
            'clips': [clip.to_dict() for clip in self.clips],
            'hash_table': self.hash_table.to_dict(),
        }
