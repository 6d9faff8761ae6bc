"""
File Loader
Reads container files into memory and hands them to the readers
"""

from pathlib import Path
from typing import Optional, Union

from .diagnostics import Diagnostics

PathLike = Union[str, Path]


def read_container(path: PathLike) -> bytes:
    """
    Read a whole container file

    Args:
        path: Path to the file

    Returns:
        File contents
    """
    with open(path, 'rb') as f:
        return f.read()


def detect_container(data: bytes) -> Optional[str]:
    """Return the 4-character magic of a container, or None if too short."""
    if len(data) < 4:
        return None
    return data[:4].decode('latin-1')


def load_texture(path: PathLike, diagnostics: Optional[Diagnostics] = None):
    """Load a KTEX texture container."""
    from ..core.texture import TextureContainer
    return TextureContainer.from_bytes(read_container(path), diagnostics)


def load_atlas(path: PathLike, diagnostics: Optional[Diagnostics] = None):
    """Load a BILD build container."""
    from ..core.texture_atlas import AtlasContainer
    return AtlasContainer.from_bytes(read_container(path), diagnostics)


def load_animation(path: PathLike, diagnostics: Optional[Diagnostics] = None):
    """Load an ANIM animation container."""
    from ..core.animation import AnimationContainer
    return AnimationContainer.from_bytes(read_container(path), diagnostics)
