"""
Structure graph builder.

Walks the structure tree of the active sequence (IIIF ranges or legacy
sections) once and produces a normalized, cross-referenced model:

- every StructureNode gets a path: the root is "", each child appends
  "/<ordinal>" where the ordinal is its position in the parent's raw list
- every CanvasNode learns the structures that contain it, in traversal
  order, so the last entry is the deepest owning structure
- string references are resolved to nodes; references that do not resolve
  leave a None slot (canvases) or are dropped (child structures)
- a structure reachable from more than one parent is linked under the
  first parent reached and visited once; later references are skipped

The raw document models are only read, never annotated, so the graph can be
rebuilt from the same document any number of times.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, Mapping, Sequence as SequenceType
import logging

from quire.document.models import (
    Asset,
    AssetSequence,
    Canvas,
    Manifest,
    Manifestation,
    Package,
    Range,
    Section,
    Sequence,
)

from .tree import TreeNode


LOGGER = logging.getLogger(__name__)

TOP = "top"


@dataclass(eq=False)
class CanvasNode:
    """
    A canvas (dialect A) or asset (dialect B) of the active sequence.

    Attributes:
        index: Position in the sequence, the primary navigation coordinate
        id: Canvas @id (None for legacy assets without one)
        label: Display label, untrimmed
        structures: Owning structures in discovery order
        source: The raw Canvas or Asset model
    """

    index: int
    id: str | None
    label: str | None
    width: int | None = None
    height: int | None = None
    source: Any = field(default=None, repr=False)
    structures: list[StructureNode] = field(default_factory=list, repr=False)

    @property
    def deepest_structure(self) -> StructureNode | None:
        return self.structures[-1] if self.structures else None


@dataclass(eq=False)
class StructureNode:
    """
    A range, section or manifestation in the normalized structure tree.

    ``canvases`` keeps one slot per raw member reference, in order; slots
    whose reference could not be resolved hold None.
    """

    label: str | None = None
    path: str = ""
    id: str | None = None
    structure_type: str | None = None
    sequence_index: int | None = None
    parent: StructureNode | None = field(default=None, repr=False)
    children: list[StructureNode] = field(default_factory=list, repr=False)
    canvases: list[CanvasNode | None] = field(default_factory=list, repr=False)
    source: Any = field(default=None, repr=False)
    tree_node: TreeNode | None = field(default=None, repr=False)

    def iter_structures(self) -> Iterator[StructureNode]:
        """Yield this node and its descendants, depth-first pre-order."""
        yield self
        for child in self.children:
            yield from child.iter_structures()

    def canvas_indices(self) -> list[int]:
        return [c.index for c in self.canvases if c is not None]


@dataclass(eq=False)
class DocumentGraph:
    """
    Normalized model of the active sequence.

    Attributes:
        canvases: Canvas nodes in sequence order
        root: Root of the structure tree, None when the document has none
        manifestation_root: Root of the legacy manifestation tree
        active_manifestation: Manifestation node that owns the active sequence
    """

    canvases: list[CanvasNode] = field(default_factory=list)
    root: StructureNode | None = None
    manifestation_root: StructureNode | None = None
    active_manifestation: StructureNode | None = None

    def structures(self) -> list[StructureNode]:
        if self.root is None:
            return []
        return list(self.root.iter_structures())

    def structure_by_path(self, path: str) -> StructureNode | None:
        for structure in self.structures():
            if structure.path == path:
                return structure
        return None

    def structure_by_id(self, structure_id: str) -> StructureNode | None:
        for structure in self.structures():
            if structure.id == structure_id:
                return structure
        return None

    def canvas_by_id(self, canvas_id: str) -> CanvasNode | None:
        for canvas in self.canvases:
            if canvas.id == canvas_id:
                return canvas
        return None

    def canvas_index_by_id(self, canvas_id: str) -> int | None:
        canvas = self.canvas_by_id(canvas_id)
        return None if canvas is None else canvas.index


Members = Callable[[Any], tuple[SequenceType[Any], SequenceType[Any]]]
NodeFactory = Callable[[Any, str], StructureNode]


class StructureLinker:
    """
    Single-pass walker shared by both dialects.

    Parameters:
        canvases: Canvas nodes of the active sequence
        members: Returns (canvas references, child references) of a raw node
        make_node: Builds the StructureNode for a raw node at a path
        structures_by_id: Index used to resolve string child references
    """

    def __init__(
        self,
        canvases: list[CanvasNode],
        *,
        members: Members,
        make_node: NodeFactory,
        structures_by_id: Mapping[str, Any] | None = None,
    ) -> None:
        self.canvases = canvases
        self.canvases_by_id = {c.id: c for c in canvases if c.id is not None}
        self.members = members
        self.make_node = make_node
        self.structures_by_id = structures_by_id or {}
        self._parented: set[int] = set()

    def resolve_canvas(self, ref: Any) -> CanvasNode | None:
        if isinstance(ref, bool):
            return None
        if isinstance(ref, int):
            if 0 <= ref < len(self.canvases):
                return self.canvases[ref]
            return None
        if isinstance(ref, str):
            return self.canvases_by_id.get(ref)
        if isinstance(ref, dict):
            canvas_id = ref.get("@id") or ref.get("id")
            if isinstance(canvas_id, str):
                return self.canvases_by_id.get(canvas_id)
            return None
        return None

    def resolve_structure(self, ref: Any) -> Any:
        if isinstance(ref, str):
            return self.structures_by_id.get(ref)
        return ref

    def claim(self, raw: Any) -> bool:
        """Record that ``raw`` has a parent; False if it already had one."""
        key = id(raw)
        if key in self._parented:
            return False
        self._parented.add(key)
        return True

    def build(self, raw_root: Any) -> StructureNode:
        self.claim(raw_root)
        return self._walk(raw_root, "", None)

    def _walk(self, raw: Any, path: str, parent: StructureNode | None) -> StructureNode:
        node = self.make_node(raw, path)
        node.parent = parent
        canvas_refs, child_refs = self.members(raw)

        for ref in canvas_refs:
            canvas = self.resolve_canvas(ref)
            if canvas is None:
                LOGGER.warning(
                    "unresolved_canvas_reference",
                    extra={"structure_path": path, "reference": repr(ref)},
                )
                node.canvases.append(None)
                continue
            canvas.structures.append(node)
            node.canvases.append(canvas)

        for k, ref in enumerate(child_refs):
            raw_child = self.resolve_structure(ref)
            if raw_child is None:
                LOGGER.warning(
                    "unresolved_structure_reference",
                    extra={"structure_path": path, "reference": repr(ref)},
                )
                continue
            if not self.claim(raw_child):
                LOGGER.debug(
                    "structure_already_parented",
                    extra={"structure_path": f"{path}/{k}", "reference": repr(ref)[:200]},
                )
                continue
            node.children.append(self._walk(raw_child, f"{path}/{k}", node))

        return node


# -- dialect A ---------------------------------------------------------------


def iiif_canvas_nodes(sequence: Sequence | None) -> list[CanvasNode]:
    if sequence is None or not sequence.canvases:
        return []
    return [_iiif_canvas_node(i, canvas) for i, canvas in enumerate(sequence.canvases)]


def _iiif_canvas_node(index: int, canvas: Canvas) -> CanvasNode:
    return CanvasNode(
        index=index,
        id=canvas.id,
        label=canvas.label_text(),
        width=canvas.width,
        height=canvas.height,
        source=canvas,
    )


def iiif_root_range(manifest: Manifest) -> Range | None:
    """
    The range the structure tree hangs from.

    A range with ``viewingHint: "top"`` is the root. Without one, a
    synthetic root adopts every range in ``structures``.
    """
    if not manifest.structures:
        return None

    for rng in manifest.structures:
        if rng.viewing_hint == TOP:
            return rng

    return Range.model_construct(ranges=list(manifest.structures), canvases=[])


def _range_members(rng: Range) -> tuple[list[Any], list[Any]]:
    return rng.canvases, rng.ranges


def _range_node(rng: Range, path: str) -> StructureNode:
    return StructureNode(
        label=rng.label_text(),
        path=path,
        id=rng.id,
        structure_type=rng.type,
        source=rng,
    )


def build_iiif_graph(
    manifest: Manifest,
    sequence: Sequence | None,
    *,
    root_range: Range | None = None,
) -> DocumentGraph:
    """
    Build the graph for a dialect A manifest.

    Parameters:
        manifest: Parsed manifest
        sequence: Active sequence (None or a stub gives an empty graph)
        root_range: Root range, when already located by the caller

    Returns:
        DocumentGraph whose root mirrors the manifest's ranges
    """
    graph = DocumentGraph(canvases=iiif_canvas_nodes(sequence))

    if root_range is None:
        root_range = iiif_root_range(manifest)
    if root_range is None:
        return graph

    linker = StructureLinker(
        graph.canvases,
        members=_range_members,
        make_node=_range_node,
        structures_by_id={r.id: r for r in manifest.structures if r.id},
    )
    graph.root = linker.build(root_range)
    return graph


# -- dialect B ---------------------------------------------------------------


def legacy_canvas_nodes(sequence: AssetSequence | None) -> list[CanvasNode]:
    if sequence is None:
        return []
    return [_legacy_canvas_node(i, asset) for i, asset in enumerate(sequence.assets)]


def _legacy_canvas_node(index: int, asset: Asset) -> CanvasNode:
    extra = asset.model_extra or {}
    return CanvasNode(
        index=index,
        id=extra.get("@id") or extra.get("id"),
        label=asset.order_label,
        width=asset.width,
        height=asset.height,
        source=asset,
    )


def map_section_type(section_type: str | None, section_mappings: Mapping[str, str]) -> str | None:
    """Rename a legacy section type through the configured mappings."""
    if section_type is not None and section_mappings.get(section_type):
        return section_mappings[section_type]
    return section_type


def _section_members(section: Section) -> tuple[list[Any], list[Any]]:
    return section.assets, section.sections


def _manifestation_members(node: Manifestation) -> tuple[list[Any], list[Any]]:
    return [], node.structures


def _manifestation_node(node: Manifestation, path: str) -> StructureNode:
    return StructureNode(
        label=node.name,
        path=path,
        structure_type=node.section_type,
        sequence_index=node.asset_sequence,
        source=node,
    )


def build_legacy_graph(
    package: Package,
    sequence: AssetSequence | None,
    sequence_index: int,
    section_mappings: Mapping[str, str] | None = None,
) -> DocumentGraph:
    """
    Build the graph for a dialect B package.

    Two passes share the same path and first-parent rules: the manifestation
    tree (``rootStructure``), which records the node owning the active
    sequence, and the section tree of the active sequence, which links
    sections and assets.

    Parameters:
        package: Parsed package
        sequence: Active asset sequence
        sequence_index: Index of the active sequence
        section_mappings: Renames applied to section types
    """
    mappings = section_mappings or {}
    graph = DocumentGraph(canvases=legacy_canvas_nodes(sequence))

    if package.root_structure is not None:
        linker = StructureLinker([], members=_manifestation_members, make_node=_manifestation_node)
        graph.manifestation_root = linker.build(package.root_structure)
        # the last node (pre-order) presenting the active sequence wins
        for node in graph.manifestation_root.iter_structures():
            if node.sequence_index == sequence_index:
                graph.active_manifestation = node

    if sequence is None or sequence.root_section is None:
        return graph

    def section_node(section: Section, path: str) -> StructureNode:
        return StructureNode(
            label=section.title,
            path=path,
            id=section.id,
            structure_type=map_section_type(section.section_type, mappings),
            source=section,
        )

    linker = StructureLinker(graph.canvases, members=_section_members, make_node=section_node)
    graph.root = linker.build(sequence.root_section)
    return graph
