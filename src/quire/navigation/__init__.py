"""
Document model resolution and navigation.

Turns a parsed document of either dialect into a cross-referenced model of
its active sequence and answers the navigation queries of a viewer: canvas
lookup, page-label search, paging through single pages or spreads, and the
structure tree.

Basic usage:
    >>> from quire.document import load_document
    >>> from quire.navigation import create_provider
    >>>
    >>> provider = create_provider(load_document(url))
    >>> index = provider.get_canvas_index_by_label("100-101")
    >>> provider.get_paged_indices(index)
    [99, 100]
    >>> for node in provider.get_tree().iter_nodes():
    ...     print("  " * node.depth, node.label)
"""

from .tree import TreeNode
from .labels import (
    find_iiif_label,
    find_label,
    find_legacy_label,
    normalize_label,
)
from .paging import (
    LEFT_TO_RIGHT,
    RIGHT_TO_LEFT,
    NO_CANVAS,
    get_first_page_index,
    get_last_page_index,
    get_next_page_index,
    get_paged_indices,
    get_prev_page_index,
    is_paged,
)
from .graph import (
    CanvasNode,
    StructureNode,
    DocumentGraph,
    build_iiif_graph,
    build_legacy_graph,
)
from .settings import ProviderContext, Settings
from .sanitize import sanitize
from .provider import (
    BaseProvider,
    IIIFProvider,
    LegacyProvider,
    ProviderNotLoadedError,
    Thumb,
    create_provider,
)

__all__ = [
    # Tree
    "TreeNode",
    # Labels
    "find_iiif_label",
    "find_label",
    "find_legacy_label",
    "normalize_label",
    # Paging
    "LEFT_TO_RIGHT",
    "RIGHT_TO_LEFT",
    "NO_CANVAS",
    "get_first_page_index",
    "get_last_page_index",
    "get_next_page_index",
    "get_paged_indices",
    "get_prev_page_index",
    "is_paged",
    # Graph
    "CanvasNode",
    "StructureNode",
    "DocumentGraph",
    "build_iiif_graph",
    "build_legacy_graph",
    # Configuration
    "ProviderContext",
    "Settings",
    "sanitize",
    # Providers
    "BaseProvider",
    "IIIFProvider",
    "LegacyProvider",
    "ProviderNotLoadedError",
    "Thumb",
    "create_provider",
]
