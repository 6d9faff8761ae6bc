"""
Layer reconciliation
Turns per-frame element lists into stable, ordered timeline layers
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .data_structures import AnimFrame, Element
from ..utils.diagnostics import Diagnostics

# Priority of the first unmatched element of a frame, before any match
INITIAL_INSERT_PRIORITY = -100.0
# Ordering nudge between neighbours inserted in the same frame
PRIORITY_STEP = 0.01


@dataclass(eq=False)
class Layer:
    """A persistent slot that one element per frame occupies"""
    identity_hash: int
    z: float
    priority: float = 0.0
    occurrences: List[Tuple[int, Element]] = field(default_factory=list)

    def add(self, frame_index: int, element: Element):
        self.occurrences.append((frame_index, element))


class LayerReconciler:
    """
    Order-preserving merge of frame element lists into layers.

    The first frame seeds one layer per element in encounter order. Every
    later frame walks its elements with a rolling search cursor: an element
    whose layer hash matches an existing layer at or after the cursor joins
    it; any other element becomes a new layer slotted just after the last
    match (or at the front before any match). Established layers never
    change their relative order.
    """

    def __init__(self, diagnostics: Optional[Diagnostics] = None):
        self.diagnostics = diagnostics or Diagnostics()
        self.layers: List[Layer] = []
        self._assignments: Dict[Tuple[int, int], Layer] = {}
        self._seeded = False

    def add_frame(self, frame_index: int, elements: Sequence[Element]):
        """
        Merge one frame's elements into the layer list

        Args:
            frame_index: Index of the frame inside the clip
            elements: The frame's elements in stored order
        """
        if not self._seeded:
            self._seed(frame_index, elements)
            return

        for index, layer in enumerate(self.layers):
            layer.priority = float(index)

        insert_priority = INITIAL_INSERT_PRIORITY
        search_start = 0
        for element_index, element in enumerate(elements):
            match = self._find(element.layer_hash, search_start)
            if match is None:
                layer = Layer(element.layer_hash, element.z, insert_priority)
                self.layers.insert(0, layer)
                insert_priority += PRIORITY_STEP
                search_start += 1
                self.diagnostics.debug(
                    "layers", f"Frame {frame_index}: new layer {element.layer_hash} at {layer.priority:.2f}"
                )
            else:
                layer = self.layers[match]
                search_start = match + 1
                insert_priority = layer.priority + PRIORITY_STEP
            layer.add(frame_index, element)
            self._assignments[(frame_index, element_index)] = layer

        self.layers.sort(key=lambda layer: layer.priority)

    def _seed(self, frame_index: int, elements: Sequence[Element]):
        for element_index, element in enumerate(elements):
            layer = Layer(element.layer_hash, element.z, float(element_index))
            layer.add(frame_index, element)
            self.layers.append(layer)
            self._assignments[(frame_index, element_index)] = layer
        self._seeded = True

    def _find(self, layer_hash: int, start: int) -> Optional[int]:
        for index in range(start, len(self.layers)):
            if self.layers[index].identity_hash == layer_hash:
                return index
        return None

    def layer_index(self, frame_index: int, element_index: int, z: float) -> int:
        """
        Timeline index of an element

        Elements that went through :meth:`add_frame` map to their assigned
        layer rather than to a lookup by z key, so mainline references agree
        with the timeline that holds the element. Others map to the first
        layer with the same z key, or -1.
        """
        layer = self._assignments.get((frame_index, element_index))
        if layer is not None:
            return self.layers.index(layer)
        return self.index_of_z(z)

    def index_of_z(self, z: float) -> int:
        for index, layer in enumerate(self.layers):
            if layer.z == z:
                return index
        return -1


def reconcile(frames: Iterable[AnimFrame], diagnostics: Optional[Diagnostics] = None) -> LayerReconciler:
    """Run the reconciler over ``frames`` in order."""
    reconciler = LayerReconciler(diagnostics)
    for frame_index, frame in enumerate(frames):
        reconciler.add_frame(frame_index, frame.elements)
    return reconciler
