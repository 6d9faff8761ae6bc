"""
Spriter export
Builds the Spriter (SCML) document from a build and an animation container
"""

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from .animation import AnimationContainer
from .data_structures import AnimationClip, AtlasFolder, Element
from .document import DocNode, fixed
from .errors import UnresolvedReferenceWarning
from .layers import LayerReconciler, reconcile
from .texture_atlas import AtlasContainer
from .transform import SpinTracker, decompose_matrix
from ..utils.diagnostics import Diagnostics
from ..utils.settings import ConversionSettings

SPRITER_ATTRIBUTES = {
    "scml_version": "1.0",
    "generator": "BrashMonkey Spriter",
    "generator_version": "b5",
}


@dataclass
class ConversionReport:
    """Reference problems found while exporting; never fatal"""
    missing: Dict[int, Set[int]] = field(default_factory=dict)
    unnamed_hashes: Set[int] = field(default_factory=set)
    names: Dict[int, str] = field(default_factory=dict)

    def add_missing(self, symbol_hash: int, build_frame: int, name: str):
        self.missing.setdefault(symbol_hash, set()).add(build_frame)
        self.names[symbol_hash] = name

    def unresolved(self) -> List[UnresolvedReferenceWarning]:
        """One entry per missing symbol, with its sorted build frames."""
        return [
            UnresolvedReferenceWarning(symbol_hash, self.names.get(symbol_hash, str(symbol_hash)), tuple(sorted(frames)))
            for symbol_hash, frames in self.missing.items()
        ]

    def missing_files(self) -> List[str]:
        """Relative image paths a caller may fill with placeholder art."""
        return [
            f"{reference.name}/{reference.name}-{frame}.png"
            for reference in self.unresolved()
            for frame in reference.build_frames
        ]

    def summary(self) -> str:
        lines = ["Missing Symbols:"]
        lines.extend(str(reference) for reference in self.unresolved())
        if self.unnamed_hashes:
            lines.append("Unnamed hashes: " + ", ".join(str(h) for h in sorted(self.unnamed_hashes)))
        return "\n".join(lines)

    @property
    def is_clean(self) -> bool:
        return not self.missing and not self.unnamed_hashes


@dataclass(frozen=True)
class ResolvedFile:
    """Folder/file indices of an element, with the file's size and pivot"""
    folder: int
    file: int
    width: int = 0
    height: int = 0
    pivot_x: float = 0.0
    pivot_y: float = 0.0
    missing: bool = False


class SpriterEmitter:
    """Assembles folders, entity, mainlines and timelines"""

    def __init__(
        self,
        animation: AnimationContainer,
        atlas: AtlasContainer,
        settings: Optional[ConversionSettings] = None,
        diagnostics: Optional[Diagnostics] = None,
    ):
        self.animation = animation
        self.atlas = atlas
        self.settings = settings or ConversionSettings()
        self.diagnostics = diagnostics or Diagnostics(self.settings.diagnostics)
        self.report = ConversionReport()
        self._folders: List[AtlasFolder] = []
        self._folder_index: Dict[int, int] = {}

    # ------------------------------------------------------------------ #
    # Name and file resolution
    # ------------------------------------------------------------------ #
    def _name(self, hash_value: int) -> str:
        name = self.animation.hash_table.get(hash_value)
        if name is None:
            name = self.atlas.hash_table.get(hash_value)
        if name is None:
            if hash_value not in self.report.unnamed_hashes:
                self.report.unnamed_hashes.add(hash_value)
                self.diagnostics.warning("emit", f"No name for hash {hash_value}")
            return str(hash_value)
        return name

    def _resolve(self, element: Element) -> ResolvedFile:
        folder = self._folder_index.get(element.symbol_hash, -1)
        if folder >= 0:
            symbol = self.atlas.get_symbol(element.symbol_hash)
            file_index = symbol.find_frame(element.build_frame)
            if file_index is not None:
                info = self._folders[folder].files[file_index]
                return ResolvedFile(folder, file_index, info.width, info.height, info.pivot_x, info.pivot_y)
        return ResolvedFile(folder, element.build_frame, missing=True)

    def _record_missing(self, element: Element):
        name = self._name(element.symbol_hash)
        frames = self.report.missing.get(element.symbol_hash, set())
        if element.build_frame not in frames:
            self.diagnostics.warning(
                "emit", f"External resource: {name} ({element.symbol_hash} - {element.build_frame})"
            )
        self.report.add_missing(element.symbol_hash, element.build_frame, name)

    # ------------------------------------------------------------------ #
    # Document
    # ------------------------------------------------------------------ #
    def emit(self) -> Tuple[DocNode, ConversionReport]:
        """
        Build the whole document

        Returns:
            (document root, report of unresolved references)
        """
        self.report = ConversionReport()
        self._folders = self.atlas.file_table()
        self._folder_index = {folder.symbol_hash: index for index, folder in enumerate(self._folders)}
        for folder in self._folders:
            if folder.symbol_hash not in self.atlas.hash_table:
                self.report.unnamed_hashes.add(folder.symbol_hash)

        root = DocNode("spriter_data", SPRITER_ATTRIBUTES)
        for index, folder in enumerate(self._folders):
            root.append(self._folder_node(index, folder))
        root.append(self._entity_node())

        if self.report.missing:
            self.diagnostics.info("emit", self.report.summary())
        return root, self.report

    def _folder_node(self, index: int, folder: AtlasFolder) -> DocNode:
        precision = self.settings.pivot_precision
        node = DocNode("folder", {"id": index, "name": folder.name})
        for file_index, info in enumerate(folder.files):
            node.append(DocNode("file", {
                "id": file_index,
                "name": f"{folder.name}/{info.name}",
                "width": info.width,
                "height": info.height,
                "pivot_x": fixed(info.pivot_x, precision),
                "pivot_y": fixed(info.pivot_y, precision),
            }))
        return node

    def _entity_node(self) -> DocNode:
        bank_hash = self.animation.bank_hash
        name = self._name(bank_hash) if bank_hash is not None else self.atlas.build_name
        entity = DocNode("entity", {"id": "0", "name": name})
        for index, clip in enumerate(self.animation.sorted_clips()):
            entity.append(self._animation_node(index, clip))
        return entity

    def _animation_node(self, index: int, clip: AnimationClip) -> DocNode:
        frames = clip.extended_frames()
        limit = self.settings.reconcile_frame_limit
        layer_frames = frames if limit is None else frames[:limit]
        layers = reconcile(layer_frames, self.diagnostics)
        self.diagnostics.debug("emit", f"Clip '{clip.name}': {len(layers.layers)} layer(s)")

        node = DocNode("animation", {
            "id": index,
            "name": clip.display_name,
            "length": math.floor(clip.length_ms),
        })
        node.append(self._mainline_node(clip, frames, layers))
        for layer_index in range(len(layers.layers)):
            node.append(self._timeline_node(clip, layer_index, layers))
        return node

    def _mainline_node(self, clip: AnimationClip, frames, layers: LayerReconciler) -> DocNode:
        precision = self.settings.pivot_precision
        mainline = DocNode("mainline")
        for frame_index, frame in enumerate(frames):
            key = mainline.append(DocNode("key", {
                "id": frame_index,
                "time": math.floor(frame_index * clip.frame_duration),
            }))
            count = len(frame.elements)
            for element_index, element in enumerate(frame.elements):
                resolved = self._resolve(element)
                if resolved.missing:
                    self._record_missing(element)
                layer_index = layers.layer_index(frame_index, element_index, element.z)
                key.append(DocNode("object_ref", {
                    "id": layer_index,
                    "name": self._name(element.symbol_hash),
                    "abs_x": 0,
                    "abs_y": 0,
                    "abs_pivot_x": fixed(resolved.pivot_x, precision),
                    "abs_pivot_y": fixed(resolved.pivot_y, precision),
                    "abs_angle": 0,
                    "abs_scale_x": 1,
                    "abs_scale_y": 1,
                    "abs_a": 1,
                    "timeline": layer_index,
                    "z_index": count - element_index,
                }))
        return mainline

    def _timeline_node(self, clip: AnimationClip, layer_index: int, layers: LayerReconciler) -> DocNode:
        settings = self.settings
        layer = layers.layers[layer_index]
        timeline = DocNode("timeline", {
            "id": layer_index,
            "name": self._name(layer.identity_hash),
            "data-zIndex": layer.z,
            "data-hash": layer.identity_hash,
        })

        spin = SpinTracker()
        for frame_index, element in layer.occurrences:
            resolved = self._resolve(element)
            transform = decompose_matrix(element.matrix)
            angle = transform.angle
            key = timeline.append(DocNode("key", {
                "id": frame_index,
                "time": math.floor(frame_index * clip.frame_duration),
                "spin": spin.next(angle),
            }))
            attributes = {
                "folder": resolved.folder,
                "file": resolved.file,
                "x": fixed(transform.translate_x, settings.position_precision),
                "y": -fixed(transform.translate_y, settings.position_precision),
                "scale_x": fixed(transform.scale_x, settings.scale_precision),
                "scale_y": fixed(transform.scale_y, settings.scale_precision),
                "angle": fixed(angle, settings.angle_precision),
            }
            if resolved.missing:
                attributes["pivot_x"] = 0
                attributes["pivot_y"] = 0
            key.append(DocNode("object", attributes))
        return timeline


def build_scml(
    animation: AnimationContainer,
    atlas: AtlasContainer,
    settings: Optional[ConversionSettings] = None,
    diagnostics: Optional[Diagnostics] = None,
) -> Tuple[str, ConversionReport]:
    """
    Convert a build and an animation container to SCML text

    Args:
        animation: Parsed animation container
        atlas: Parsed build container
        settings: Conversion settings
        diagnostics: Optional diagnostics sink

    Returns:
        (SCML text, report of unresolved references)
    """
    settings = settings or ConversionSettings()
    document, report = SpriterEmitter(animation, atlas, settings, diagnostics).emit()
    return document.to_xml(settings.indent), report
