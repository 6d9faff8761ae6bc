"""
Errors
Exception types raised while decoding Klei asset containers
"""

from typing import Optional, Tuple


class KleiAssetError(ValueError):
    """Base class for every structural failure while loading a container."""


class FormatError(KleiAssetError):
    """Wrong magic tag or a pixel format the codec does not handle."""


class BoundsError(KleiAssetError):
    """A read ran past the end of the buffer."""

    def __init__(self, offset: int, size: int, length: int, what: str = "bytes"):
        self.offset = offset
        self.size = size
        self.length = length
        super().__init__(
            f"Unexpected end of file while reading {what}: "
            f"{size} byte(s) at offset 0x{offset:04X} (buffer size {length})"
        )


class GeometryInconsistencyError(KleiAssetError):
    """Triangles of one atlas frame disagree on their atlas depth."""

    def __init__(self, symbol_hash: int, frame: int, low_w: float, high_w: float):
        self.symbol_hash = symbol_hash
        self.frame = frame
        super().__init__(
            f"Inconsistent depth in symbol {symbol_hash} frame {frame}: "
            f"w spans {low_w} to {high_w}"
        )


class ResourceLimitError(KleiAssetError):
    """The frames need more atlas pages than the build declares."""

    def __init__(self, required: int, available: int, depth: Optional[int] = None):
        self.required = required
        self.available = available
        self.depth = depth
        detail = f" (depth {depth})" if depth is not None else ""
        super().__init__(
            f"Build needs {required} atlas file(s) but only declares {available}{detail}"
        )


class UnresolvedReferenceWarning(UserWarning):
    """Symbol frames used by an animation that the build does not provide."""

    def __init__(self, symbol_hash: int, name: str, build_frames: Tuple[int, ...]):
        self.symbol_hash = symbol_hash
        self.name = name
        self.build_frames = build_frames
        frames = ",".join(str(frame) for frame in build_frames)
        super().__init__(f"{name} ({symbol_hash}): {frames}")
