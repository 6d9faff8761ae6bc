"""
Core module for kscml
Contains data structures, container readers, the texture codec and the Spriter export
"""

from .data_structures import (
    HashTable,
    Facing,
    animation_name,
    Affine,
    Element,
    AnimFrame,
    AnimationClip,
    AtlasSymbol,
    SymbolFrame,
)
from .errors import (
    KleiAssetError,
    FormatError,
    BoundsError,
    GeometryInconsistencyError,
    ResourceLimitError,
    UnresolvedReferenceWarning,
)
from .byte_cursor import ByteCursor, pack_bit_fields, unpack_bit_fields
from .texture import TextureContainer
from .texture_atlas import AtlasContainer
from .animation import AnimationContainer
from .layers import Layer, LayerReconciler
from .transform import decompose_matrix, display_angle, SpinTracker
from .document import DocNode
from .scml import SpriterEmitter, ConversionReport, build_scml

__all__ = [
    'HashTable',
    'Facing',
    'animation_name',
    'Affine',
    'Element',
    'AnimFrame',
    'AnimationClip',
    'AtlasSymbol',
    'SymbolFrame',
    'KleiAssetError',
    'FormatError',
    'BoundsError',
    'GeometryInconsistencyError',
    'ResourceLimitError',
    'UnresolvedReferenceWarning',
    'ByteCursor',
    'pack_bit_fields',
    'unpack_bit_fields',
    'TextureContainer',
    'AtlasContainer',
    'AnimationContainer',
    'Layer',
    'LayerReconciler',
    'decompose_matrix',
    'display_angle',
    'SpinTracker',
    'DocNode',
    'SpriterEmitter',
    'ConversionReport',
    'build_scml',
]
