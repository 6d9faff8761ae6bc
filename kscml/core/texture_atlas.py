"""
Texture Atlas management
Parses BILD build containers: symbols, frame geometry and atlas page selection
"""

import math
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

from PIL import Image

from .byte_cursor import ByteCursor
from .data_structures import (
    AtlasFile,
    AtlasFolder,
    AtlasSymbol,
    BoundingBox,
    FrameHeader,
    HashTable,
    SymbolFrame,
    Vertex,
)
from .errors import FormatError, GeometryInconsistencyError, ResourceLimitError
from .texture import TextureContainer
from ..utils.diagnostics import Diagnostics

BUILD_MAGIC = "BILD"

# Maximum spread (max - min) of w over the vertices of one frame
DEPTH_TOLERANCE = 0.5

Triangle = Tuple[Vertex, Vertex, Vertex]
TextureSource = Union[TextureContainer, Callable[[str], TextureContainer]]


def read_hash_table(cursor: ByteCursor) -> HashTable:
    """Read a uint32 count followed by (hash, name) pairs."""
    table = HashTable()
    for _ in range(cursor.read_u32()):
        hash_value = cursor.read_u32()
        table.add(hash_value, cursor.read_string())
    return table


def _read_frame_header(cursor: ByteCursor) -> FrameHeader:
    return FrameHeader(
        frame=cursor.read_u32(),
        duration=cursor.read_u32(),
        x=cursor.read_f32(),
        y=cursor.read_f32(),
        w=cursor.read_f32(),
        h=cursor.read_f32(),
        alpha_index=cursor.read_u32(),
        alpha_count=cursor.read_u32(),
    )


def _read_vertex(cursor: ByteCursor) -> Vertex:
    return Vertex(*(cursor.read_f32() for _ in range(6)))


def derive_frame(symbol_hash: int, header: FrameHeader, triangles: Sequence[Triangle]) -> SymbolFrame:
    """
    Attach geometry to a frame header and derive its UV box and atlas depth

    Args:
        symbol_hash: Owning symbol, used in error messages
        header: Frame record as read
        triangles: Triangles that belong to the frame

    Returns:
        The enriched frame
    """
    vertices = [vertex for triangle in triangles for vertex in triangle]
    if not vertices:
        return SymbolFrame(header=header)

    depths = [vertex.w for vertex in vertices]
    if max(depths) - min(depths) > DEPTH_TOLERANCE:
        raise GeometryInconsistencyError(symbol_hash, header.frame, min(depths), max(depths))

    us = [vertex.u for vertex in vertices]
    vs = [vertex.v for vertex in vertices]
    return SymbolFrame(
        header=header,
        triangles=tuple(triangles),
        bbox=BoundingBox(left=min(us), right=max(us), top=min(vs), bottom=max(vs)),
        atlas_depth=math.floor(depths[0] + 0.5),
    )


class AtlasContainer:
    """Symbols, frames and atlas pages of one build"""

    def __init__(
        self,
        version: int,
        build_name: str,
        atlas_names: List[str],
        symbols: List[AtlasSymbol],
        hash_table: HashTable,
        diagnostics: Optional[Diagnostics] = None,
    ):
        self.version = version
        self.build_name = build_name
        self.atlas_names = atlas_names
        self.symbols = symbols
        self.hash_table = hash_table
        self.diagnostics = diagnostics or Diagnostics()
        self._symbols_by_hash: Dict[int, AtlasSymbol] = {symbol.hash: symbol for symbol in symbols}

    @classmethod
    def from_bytes(cls, data: bytes, diagnostics: Optional[Diagnostics] = None) -> "AtlasContainer":
        """
        Parse a build container

        Args:
            data: Whole file contents
            diagnostics: Optional diagnostics sink

        Returns:
            The parsed container
        """
        diagnostics = diagnostics or Diagnostics()
        cursor = ByteCursor(data)

        magic = cursor.read_chars(4)
        if magic != BUILD_MAGIC:
            raise FormatError(f"Not a build file (magic {magic!r})")

        version = cursor.read_u32()
        symbol_count = cursor.read_u32()
        declared_frames = cursor.read_u32()
        build_name = cursor.read_string()
        atlas_names = cursor.repeat(cursor.read_u32(), lambda _: cursor.read_string())
        diagnostics.debug(
            "atlas",
            f"Build '{build_name}' v{version}: {symbol_count} symbol(s), "
            f"{declared_frames} frame(s), atlases {atlas_names}",
        )

        headers: List[Tuple[int, List[FrameHeader]]] = []
        for _ in range(symbol_count):
            symbol_hash = cursor.read_u32()
            frame_count = cursor.read_u32()
            frames = cursor.repeat(frame_count, lambda _: _read_frame_header(cursor))
            for header in frames:
                if header.alpha_count % 3:
                    raise FormatError(
                        f"Symbol {symbol_hash} frame {header.frame}: "
                        f"vertex count {header.alpha_count} is not a multiple of 3"
                    )
            headers.append((symbol_hash, frames))

        vertex_count = cursor.read_u32()
        expected = sum(header.triangle_count * 3 for _, frames in headers for header in frames)
        if vertex_count != expected:
            diagnostics.debug("atlas", f"Vertex count {vertex_count} differs from frame total {expected}")

        symbols = []
        for symbol_hash, frames in headers:
            derived = []
            for header in frames:
                triangles = cursor.repeat(
                    header.triangle_count,
                    lambda _: (_read_vertex(cursor), _read_vertex(cursor), _read_vertex(cursor)),
                )
                derived.append(derive_frame(symbol_hash, header, triangles))
            symbols.append(AtlasSymbol(hash=symbol_hash, frames=tuple(derived)))

        hash_table = read_hash_table(cursor)
        if not cursor.at_end():
            diagnostics.debug("atlas", f"{cursor.remaining} trailing byte(s) after hash table")
        return cls(version, build_name, atlas_names, symbols, hash_table, diagnostics)

    # ------------------------------------------------------------------ #
    # Lookups
    # ------------------------------------------------------------------ #
    def get_symbol(self, symbol_hash: int) -> Optional[AtlasSymbol]:
        return self._symbols_by_hash.get(symbol_hash)

    def find_frame(self, symbol_hash: int, frame_number: int) -> Optional[SymbolFrame]:
        """Return the frame numbered ``frame_number`` of a symbol, if present."""
        symbol = self.get_symbol(symbol_hash)
        if symbol is None:
            return None
        index = symbol.find_frame(frame_number)
        return symbol.frames[index] if index is not None else None

    # ------------------------------------------------------------------ #
    # Atlas pages
    # ------------------------------------------------------------------ #
    def _depths(self) -> List[int]:
        return [
            frame.atlas_depth
            for symbol in self.symbols
            for frame in symbol.frames
            if frame.atlas_depth is not None
        ]

    @property
    def sampler_offset(self) -> int:
        """Smallest atlas depth used by any frame"""
        depths = self._depths()
        return min(depths) if depths else 0

    @property
    def required_atlas_count(self) -> int:
        depths = self._depths()
        return max(depths) - min(depths) + 1 if depths else 0

    def atlas_for_depth(self, depth: int) -> Tuple[int, str]:
        """
        Resolve an atlas depth to an atlas page

        Args:
            depth: Atlas depth of a frame

        Returns:
            (atlas index, atlas file name)
        """
        required = self.required_atlas_count
        if required > len(self.atlas_names):
            raise ResourceLimitError(required, len(self.atlas_names), depth)
        index = depth - self.sampler_offset
        if index < 0 or index >= len(self.atlas_names):
            raise ResourceLimitError(index + 1, len(self.atlas_names), depth)
        return index, self.atlas_names[index]

    def get_image(self, symbol_hash: int, frame_number: int, texture: TextureSource) -> Optional[Image.Image]:
        """
        Cut a frame's image out of its atlas page

        Args:
            symbol_hash: Symbol hash
            frame_number: Frame number inside the symbol
            texture: The decoded atlas, or a callable loading an atlas by file name

        Returns:
            The cropped RGBA image, or None when the frame has no geometry
        """
        frame = self.find_frame(symbol_hash, frame_number)
        if frame is None or frame.bbox is None or frame.atlas_depth is None:
            return None

        _, atlas_name = self.atlas_for_depth(frame.atlas_depth)
        container = texture if isinstance(texture, TextureContainer) else texture(atlas_name)
        atlas = container.to_image()

        box = frame.bbox
        crop = (
            math.floor(box.left * atlas.width),
            math.floor(box.top * atlas.height),
            math.ceil(box.right * atlas.width),
            math.ceil(box.bottom * atlas.height),
        )
        return atlas.crop(crop)

    # ------------------------------------------------------------------ #
    # Export helpers
    # ------------------------------------------------------------------ #
    def folder_name(self, symbol_hash: int) -> str:
        name = self.hash_table.get(symbol_hash)
        if name is None:
            self.diagnostics.warning("atlas", f"Missing symbol name for hash {symbol_hash}")
            return str(symbol_hash)
        return name

    def file_table(self) -> List[AtlasFolder]:
        """One folder per symbol, one file per symbol frame."""
        folders = []
        for symbol in self.symbols:
            folder_name = self.folder_name(symbol.hash)
            files = []
            for frame in symbol.frames:
                pivot_x, pivot_y = frame.pivot
                files.append(AtlasFile(
                    name=f"{folder_name}-{frame.frame}.png",
                    width=frame.width,
                    height=frame.height,
                    pivot_x=pivot_x,
                    pivot_y=pivot_y,
                ))
            folders.append(AtlasFolder(
                symbol_hash=symbol.hash,
                name=folder_name,
                files=tuple(files),
                frame_numbers=tuple(frame.frame for frame in symbol.frames),
            ))
        return folders

    def to_dict(self) -> Dict:
        return {
            'version': self.version,
            'build_name': self.build_name,
            'atlases': list(self.atlas_names),
            'sampler_offset': self.sampler_offset,
            'symbols': [
                {
                    'hash': symbol.hash,
                    'name': self.hash_table.get(symbol.hash),
                    'frames': [frame.to_dict() for frame in symbol.frames],
                }
                for symbol in self.symbols
            ],
            'hash_table': self.hash_table.to_dict(),
        }
