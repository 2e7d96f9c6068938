"""
Document providers.

A provider owns one parsed document and the active sequence, builds the
normalized structure graph for it and answers every navigation query the
presentation layer needs (canvas lookup, labels, paging, structure tree).

Both dialects share one contract, ``BaseProvider``. ``IIIFProvider`` serves
IIIF Presentation 2.1 manifests and ``LegacyProvider`` serves legacy
asset-sequence packages; ``create_provider`` picks the right one for a
parsed document.

Basic usage:
    >>> document = load_document(url)
    >>> provider = create_provider(document, settings=Settings(pagingEnabled=True))
    >>> provider.canvas_index = provider.get_canvas_index_by_label("100-101")
    >>> provider.get_paged_indices()
    [99, 100]
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, ClassVar, Mapping
import logging
import math
import re

import httpx

from quire.document.loaders import (
    DocumentNotFoundError,
    JSONP_CALLBACK,
    parse_document,
    resolve_sequence,
)
from quire.document.models import (
    AssetSequence,
    Dialect,
    Document,
    Manifest,
    Package,
    Range,
    Sequence,
    label_text,
)

from . import paging
from .graph import (
    CanvasNode,
    DocumentGraph,
    StructureNode,
    build_iiif_graph,
    build_legacy_graph,
    iiif_root_range,
)
from .labels import NOT_FOUND, find_label
from .sanitize import sanitize
from .settings import ProviderContext, Settings
from .tree import TreeNode


LOGGER = logging.getLogger(__name__)

ReloadCallback = Callable[[bool], None]

_DIGIT = re.compile(r"\d")


class ProviderNotLoadedError(RuntimeError):
    """Navigation was attempted before ``load()`` ran."""


@dataclass(frozen=True)
class Thumb:
    """
    Thumbnail descriptor for one canvas.

    Attributes:
        index: Canvas index
        uri: Image URI ("" when the canvas has no image service)
        label: Trimmed canvas label
        width: Thumbnail width
        height: Thumbnail height, following the canvas aspect ratio when known
        visible: Whether the thumbnail should be rendered
    """

    index: int
    uri: str
    label: str
    width: int
    height: int
    visible: bool = True


class BaseProvider(ABC):
    """
    Navigation contract shared by both dialects.

    Index arguments default to the current ``canvas_index`` when omitted.
    Out-of-range lookups return None (objects) or -1 (indices); they never
    raise. An active sequence without canvases is a valid, inert state:
    callers check ``get_total_canvases() > 0`` before navigating.

    Parameters:
        document: Parsed document of this provider's dialect
        settings: Viewer options (defaults apply when omitted)
        context: Environment hints (defaults to a standalone viewer)
    """

    dialect: ClassVar[Dialect]
    document_type: ClassVar[type]

    def __init__(
        self,
        document: Document,
        *,
        settings: Settings | None = None,
        context: ProviderContext | None = None,
    ) -> None:
        self.manifest = document
        self.settings = settings or Settings()
        self.context = context or ProviderContext()
        self.sequence_index = self.context.sequence_index
        self.canvas_index = paging.NO_CANVAS
        self.sequence: Sequence | AssetSequence | None = None
        self.sequences: list[Any] = []
        self._graph: DocumentGraph | None = None
        self._tree: TreeNode | None = None

    # -- loading -------------------------------------------------------------

    @property
    def graph(self) -> DocumentGraph:
        if self._graph is None:
            raise ProviderNotLoadedError(f"{type(self).__name__} used before load()")
        return self._graph

    @property
    def is_loaded(self) -> bool:
        return self._graph is not None

    def load(self) -> None:
        """
        Select the active sequence and (re)build all derived state.

        Reference stubs other than the active sequence are replaced with
        empty placeholders. Paths, back-references and the tree are rebuilt
        from scratch.
        """
        raw = self.raw_sequences()

        self.sequence = None
        if 0 <= self.sequence_index < len(raw):
            self.sequence = raw[self.sequence_index]

        self.sequences = [
            s if i == self.sequence_index or not s.is_reference else self.placeholder_sequence()
            for i, s in enumerate(raw)
        ]

        if self.sequence is None:
            LOGGER.warning(
                "sequence_not_found",
                extra={"sequence_index": self.sequence_index, "sequences": len(raw)},
            )
        elif self.sequence.is_reference:
            LOGGER.warning("sequence_not_resolved", extra={"sequence_index": self.sequence_index})

        self.parse_manifest()
        self._graph = self.parse_structure()
        self._tree = None

        LOGGER.info(
            "provider_loaded",
            extra={
                "dialect": self.dialect,
                "sequence_index": self.sequence_index,
                "canvases": len(self._graph.canvases),
                "structures": len(self._graph.structures()),
            },
        )

    def parse_manifest(self) -> None:
        """Manifest-level normalization run before the structure pass."""

    @abstractmethod
    def raw_sequences(self) -> list[Any]:
        ...

    @abstractmethod
    def placeholder_sequence(self) -> Any:
        ...

    @abstractmethod
    def parse_structure(self) -> DocumentGraph:
        ...

    def parse_document(self, data: dict[str, Any]) -> Document:
        document = parse_document(data)
        if not isinstance(document, self.document_type):
            raise DocumentNotFoundError(f"Document is not a {self.dialect} document")
        return document

    # -- reload --------------------------------------------------------------

    def cors_enabled(self) -> bool:
        return self.context.cors and not self.context.jsonp

    def add_timestamp(self, uri: str) -> str:
        return str(httpx.URL(uri).copy_add_param("t", str(self.context.clock())))

    def get_data_uri(self) -> str | None:
        data_uri = self.context.data_uri
        if data_uri and self.settings.data_base_uri:
            return self.settings.data_base_uri + data_uri
        return data_uri

    def get_reload_uri(self) -> str | None:
        data_uri = self.get_data_uri()
        if not data_uri:
            return None
        return self.add_timestamp(data_uri)

    def reload(self, callback: ReloadCallback) -> None:
        """
        Refetch the document, replace it and load it again.

        ``callback(True)`` runs after a successful reload, ``callback(False)``
        after a failed one; on failure the previous document and all derived
        state stay in place.
        """
        uri = self.get_reload_uri()
        if uri is None:
            LOGGER.error("reload_failed", extra={"reason": "no data uri"})
            callback(False)
            return

        LOGGER.info("reload", extra={"uri": uri, "cors": self.cors_enabled()})
        try:
            if self.cors_enabled():
                data = self.context.fetch(uri)
            else:
                data = self.context.fetch_jsonp(uri, callback=JSONP_CALLBACK)
            document = self.parse_document(data)
            document = resolve_sequence(
                document,
                self.sequence_index,
                manifest_uri=self.get_data_uri(),
                fetch=self.context.fetch,
            )
        except (httpx.HTTPError, ValueError, DocumentNotFoundError) as e:
            LOGGER.error("reload_failed", extra={"uri": uri, "error": str(e)})
            callback(False)
            return

        self.manifest = document
        self.load()
        callback(True)

    # -- canvases ------------------------------------------------------------

    def _index(self, canvas_index: int | None) -> int:
        return self.canvas_index if canvas_index is None else canvas_index

    def get_total_canvases(self) -> int:
        return len(self.graph.canvases)

    def get_canvas_by_index(self, index: int) -> CanvasNode | None:
        if paging.in_range(index, self.get_total_canvases()):
            return self.graph.canvases[index]
        return None

    def get_current_canvas(self) -> CanvasNode | None:
        return self.get_canvas_by_index(self.canvas_index)

    def get_canvas_by_id(self, canvas_id: str) -> CanvasNode | None:
        return self.graph.canvas_by_id(canvas_id)

    def get_canvas_index_by_id(self, canvas_id: str) -> int:
        index = self.graph.canvas_index_by_id(canvas_id)
        return NOT_FOUND if index is None else index

    def is_multi_canvas(self) -> bool:
        return self.get_total_canvases() > 1

    def is_multi_sequence(self) -> bool:
        return len(self.sequences) > 1

    def is_first_canvas(self, canvas_index: int | None = None) -> bool:
        return paging.is_first_canvas(self._index(canvas_index))

    def is_last_canvas(self, canvas_index: int | None = None) -> bool:
        return paging.is_last_canvas(self._index(canvas_index), self.get_total_canvases())

    def get_start_canvas_index(self) -> int:
        return 0

    # -- labels --------------------------------------------------------------

    def get_canvas_label(self, canvas: CanvasNode) -> str:
        return (canvas.label or "").strip()

    def get_last_canvas_label(self) -> str:
        """
        Label to show as the page count.

        Trailing canvases (blank leaves, back covers) often carry empty or
        non-numeric labels, so this returns the last label with a digit in
        it, or "-" when there is none.
        """
        for canvas in reversed(self.graph.canvases):
            if canvas.label and _DIGIT.search(canvas.label):
                return canvas.label.strip()
        return "-"

    def get_canvas_index_by_label(self, label: str) -> int:
        labels = [canvas.label for canvas in self.graph.canvases]
        return find_label(label, labels, self.dialect)

    # -- structures ----------------------------------------------------------

    def get_canvas_structure(self, canvas: CanvasNode | None) -> StructureNode | None:
        """Deepest structure the canvas belongs to."""
        if canvas is None:
            return None
        return canvas.deepest_structure

    def get_structure_by_canvas_index(self, index: int) -> StructureNode | None:
        if index == paging.NO_CANVAS:
            return None
        return self.get_canvas_structure(self.get_canvas_by_index(index))

    def get_root_structure(self) -> StructureNode | None:
        return self.graph.root

    def get_structure_by_path(self, path: str) -> StructureNode | None:
        return self.graph.structure_by_path(path)

    def get_structure_by_id(self, structure_id: str) -> StructureNode | None:
        return self.graph.structure_by_id(structure_id)

    def get_structure_by_index(self, structure: StructureNode, index: int) -> StructureNode | None:
        if 0 <= index < len(structure.children):
            return structure.children[index]
        return None

    def get_structure_index(self, path: str) -> int:
        """Index of the first canvas that belongs to the structure at ``path``."""
        for canvas in self.graph.canvases:
            for structure in canvas.structures:
                if structure.path == path:
                    return canvas.index
        return NOT_FOUND

    # -- tree ----------------------------------------------------------------

    def get_tree(self) -> TreeNode:
        """Root of the presentation tree, built once per load()."""
        if self._tree is None:
            self._tree = self.build_tree()
        return self._tree

    @abstractmethod
    def build_tree(self) -> TreeNode:
        ...

    def _structure_tree_node(
        self, structure: StructureNode, label: Callable[[StructureNode], str | None]
    ) -> TreeNode:
        node = TreeNode(label=label(structure), data=structure, type="structure")
        structure.tree_node = node
        for child in structure.children:
            node.add_node(self._structure_tree_node(child, label))
        return node

    # -- paging --------------------------------------------------------------

    def get_viewing_direction(self) -> str:
        if self.sequence is None or not self.sequence.viewing_direction:
            return paging.LEFT_TO_RIGHT
        return self.sequence.viewing_direction

    def is_paged(self) -> bool:
        hint = self.sequence.viewing_hint if self.sequence is not None else None
        return paging.is_paged(hint, self.settings.paging_enabled)

    def get_paged_indices(self, canvas_index: int | None = None) -> list[int]:
        return paging.get_paged_indices(
            self._index(canvas_index), self.get_total_canvases(), self.get_viewing_direction()
        )

    def get_first_page_index(self) -> int:
        return paging.get_first_page_index(self.get_total_canvases())

    def get_last_page_index(self) -> int:
        return paging.get_last_page_index(self.get_total_canvases())

    def get_prev_page_index(self, canvas_index: int | None = None) -> int:
        return paging.get_prev_page_index(
            self._index(canvas_index),
            self.get_total_canvases(),
            self.get_viewing_direction(),
            self.is_paged(),
        )

    def get_next_page_index(self, canvas_index: int | None = None) -> int:
        return paging.get_next_page_index(
            self._index(canvas_index),
            self.get_total_canvases(),
            self.get_viewing_direction(),
            self.is_paged(),
        )

    # -- document properties -------------------------------------------------

    @abstractmethod
    def get_title(self) -> str | None:
        ...

    @abstractmethod
    def get_see_also(self) -> Any:
        ...

    @abstractmethod
    def get_manifest_type(self) -> str:
        ...

    @abstractmethod
    def get_sequence_type(self) -> str:
        ...

    def get_attribution(self) -> Any:
        return self.manifest.attribution

    def get_license(self) -> Any:
        return self.manifest.license

    def get_logo(self) -> Any:
        return self.manifest.logo

    def get_manifest_see_also_uri(self) -> str | None:
        return None

    def get_metadata(self, include_root_properties: bool = False) -> list[dict[str, Any]] | None:
        return None

    def is_see_also_enabled(self) -> bool:
        return self.settings.see_also_enabled is not False

    def default_to_thumbs_view(self) -> bool:
        manifest_type = self.get_manifest_type()

        if manifest_type == "monograph":
            if not self.is_multi_sequence():
                return True
        elif manifest_type in ("archive", "boundmanuscript", "artwork"):
            return True

        return self.get_sequence_type() == "application-pdf"

    # -- uris ----------------------------------------------------------------

    def get_media_uri(self, media_uri: str) -> str:
        base_uri = self.settings.media_base_uri or ""
        return self.settings.media_uri_template.format(base_uri, media_uri)

    @abstractmethod
    def get_thumb_uri(self, canvas: CanvasNode, width: int, height: int) -> str:
        ...

    def get_thumbs(self, width: int, height: int) -> list[Thumb]:
        thumbs: list[Thumb] = []
        for canvas in self.graph.canvases:
            thumb_height = height
            if canvas.width and canvas.height:
                thumb_height = math.floor(width * (canvas.height / canvas.width))
            thumbs.append(
                Thumb(
                    index=canvas.index,
                    uri=self.get_thumb_uri(canvas, width, thumb_height),
                    label=self.get_canvas_label(canvas),
                    width=width,
                    height=thumb_height,
                )
            )
        return thumbs

    def get_domain(self) -> str | None:
        if not self.context.data_uri:
            return None
        return httpx.URL(self.context.data_uri).host or None

    def get_embed_domain(self) -> str | None:
        return self.context.embed_domain

    # -- environment ---------------------------------------------------------

    def is_deep_linking_enabled(self) -> bool:
        return self.context.is_home_domain and self.context.is_only_instance

    def sanitize(self, html: str | None) -> str:
        return sanitize(html)

    def get_settings(self) -> Settings:
        return self.settings

    def update_settings(self, settings: Settings | Mapping[str, Any]) -> None:
        if not isinstance(settings, Settings):
            settings = Settings.model_validate(dict(settings))
        self.settings = settings


class IIIFProvider(BaseProvider):
    """Provider for IIIF Presentation 2.1 manifests."""

    dialect = "iiif"
    document_type = Manifest

    manifest: Manifest

    def __init__(self, document: Manifest, **kwargs: Any) -> None:
        super().__init__(document, **kwargs)
        self.root_range: Range | None = None

    def raw_sequences(self) -> list[Sequence]:
        return list(self.manifest.sequences)

    def placeholder_sequence(self) -> Sequence:
        return Sequence(canvases=[])

    def parse_manifest(self) -> None:
        self.root_range = iiif_root_range(self.manifest)

    def parse_structure(self) -> DocumentGraph:
        sequence = self.sequence if isinstance(self.sequence, Sequence) else None
        return build_iiif_graph(self.manifest, sequence, root_range=self.root_range)

    def build_tree(self) -> TreeNode:
        root = self.graph.root
        tree_root = TreeNode(label="root", data=root, type="manifest")

        if root is None:
            return tree_root

        root.tree_node = tree_root
        for structure in root.children:
            tree_root.add_node(self._structure_tree_node(structure, lambda s: s.label))
        return tree_root

    def get_start_canvas_index(self) -> int:
        start = self.sequence.start_canvas if self.sequence is not None else None
        if start:
            index = self.get_canvas_index_by_id(start)
            if index != NOT_FOUND:
                return index
        return 0

    def get_title(self) -> str | None:
        return self.manifest.label_text()

    def get_see_also(self) -> Any:
        return self.manifest.see_also

    def get_manifest_type(self) -> str:
        return "monograph"

    def get_sequence_type(self) -> str:
        return "seadragon-iiif"

    def get_thumb_uri(self, canvas: CanvasNode, width: int, height: int) -> str:
        url = canvas.source.image_url(size=f"{width},{height}")
        return url or ""

    def get_metadata(self, include_root_properties: bool = False) -> list[dict[str, Any]] | None:
        """
        Manifest metadata pairs.

        Parameters:
            include_root_properties: Also append description, attribution,
                license and logo entries (only when metadata is present)

        Returns:
            A new list of {"label", "value"} dicts, or None without metadata
        """
        if self.manifest.metadata is None:
            return None

        metadata = list(self.manifest.metadata)
        if metadata and include_root_properties:
            m = self.manifest
            if m.description:
                metadata.append({"label": "description", "value": label_text(m.description)})
            if m.attribution:
                metadata.append({"label": "attribution", "value": label_text(m.attribution)})
            if m.license:
                metadata.append({"label": "license", "value": label_text(m.license)})
            if m.logo:
                logo = m.logo.get("@id") if isinstance(m.logo, dict) else m.logo
                metadata.append({"label": "logo", "value": f'<img src="{logo}"/>'})
        return metadata


class LegacyProvider(BaseProvider):
    """Provider for legacy asset-sequence packages."""

    dialect = "legacy"
    document_type = Package

    manifest: Package

    def raw_sequences(self) -> list[AssetSequence]:
        return list(self.manifest.asset_sequences)

    def placeholder_sequence(self) -> AssetSequence:
        return AssetSequence()

    def parse_structure(self) -> DocumentGraph:
        sequence = self.sequence if isinstance(self.sequence, AssetSequence) else None
        return build_legacy_graph(
            self.manifest,
            sequence,
            self.sequence_index,
            self.settings.section_mappings,
        )

    def build_tree(self) -> TreeNode:
        """
        Presentation tree for a package.

        The manifestation tree forms the upper levels; the sections of the
        active sequence hang under the manifestation that owns it (selected
        and expanded), or directly under the root when there is none.
        """
        graph = self.graph
        tree_root = TreeNode(label="root")
        sections_root: TreeNode | None = None

        if graph.manifestation_root is not None:
            sections_root = self._manifestation_tree_node(tree_root, graph.manifestation_root)

        if sections_root is None:
            sections_root = tree_root
            sections_root.data = graph.root
            sections_root.type = "manifest"
            if graph.root is not None:
                graph.root.tree_node = sections_root

        if graph.root is not None:
            for section in graph.root.children:
                sections_root.add_node(
                    self._structure_tree_node(section, lambda s: s.structure_type)
                )

        return tree_root

    def _manifestation_tree_node(
        self, node: TreeNode, manifestation: StructureNode
    ) -> TreeNode | None:
        node.label = manifestation.label or "root"
        node.data = manifestation
        node.type = "manifest"
        manifestation.tree_node = node

        sections_root = None
        if manifestation is self.graph.active_manifestation:
            node.selected = True
            node.expanded = True
            sections_root = node

        for child in manifestation.children:
            found = self._manifestation_tree_node(node.add_node(TreeNode()), child)
            sections_root = sections_root or found

        return sections_root

    def get_title(self) -> str | None:
        root = self.graph.root
        return root.source.title if root is not None else None

    def get_see_also(self) -> Any:
        return self.sequence.see_also if self.sequence is not None else None

    def get_manifest_type(self) -> str:
        root = self.graph.root
        if root is None or not root.structure_type:
            return ""
        return root.structure_type.lower()

    def get_sequence_type(self) -> str:
        if self.sequence is None or not self.sequence.asset_type:
            return ""
        return self.sequence.asset_type.replace("/", "-")

    def get_manifest_see_also_uri(self) -> str | None:
        see_also = self.manifest.see_also
        if isinstance(see_also, dict) and see_also.get("tag") and see_also.get("data"):
            if see_also["tag"] == "OpenExternal":
                return self.get_media_uri(see_also["data"])
        return None

    def get_canvas_media_uri(self, canvas: CanvasNode) -> str:
        asset = canvas.source
        return self.get_media_uri(asset.media_uri or asset.file_uri or "")

    def get_image_uri(
        self,
        canvas: CanvasNode,
        dzi_base_uri: str | None = None,
        dzi_uri_template: str | None = None,
    ) -> str:
        base_uri = dzi_base_uri or self.settings.dzi_base_uri or self.settings.data_base_uri or ""
        template = dzi_uri_template or self.settings.dzi_uri_template
        return template.format(base_uri, canvas.source.dzi_uri or "")

    def get_thumb_uri(self, canvas: CanvasNode, width: int, height: int) -> str:
        return ""


def create_provider(
    document: Document,
    *,
    settings: Settings | None = None,
    context: ProviderContext | None = None,
) -> BaseProvider:
    """
    Build and load the provider for a parsed document.

    Example:
        >>> provider = create_provider(parse_document(data))
        >>> provider.get_total_canvases()
        12
    """
    if isinstance(document, Manifest):
        provider: BaseProvider = IIIFProvider(document, settings=settings, context=context)
    elif isinstance(document, Package):
        provider = LegacyProvider(document, settings=settings, context=context)
    else:
        raise TypeError(f"Unsupported document type: {type(document).__name__}")

    provider.load()
    return provider
