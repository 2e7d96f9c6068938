"""
Labelled n-ary tree exposed to the presentation layer.

Providers mirror their structure graph into TreeNodes so that tree views
never have to look at dialect-specific document fields.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, Literal


NodeType = Literal["manifest", "structure"]


@dataclass(eq=False)
class TreeNode:
    """
    Tree node with parent/child links.

    Attributes:
        label: Display text
        data: Shared reference to the mirrored StructureNode (not owned)
        type: "manifest" for manifest-level nodes, "structure" for ranges
            and sections
        nodes: Child nodes in display order
        parent: Parent node, None for the root
        selected: Whether the UI should show this node as selected
        expanded: Whether the UI should show this node expanded
    """

    label: str | None = None
    data: Any = None
    type: NodeType | None = None
    nodes: list[TreeNode] = field(default_factory=list)
    parent: TreeNode | None = field(default=None, repr=False)
    selected: bool = False
    expanded: bool = False

    def add_node(self, node: TreeNode) -> TreeNode:
        node.parent = self
        self.nodes.append(node)
        return node

    @property
    def depth(self) -> int:
        depth = 0
        node = self.parent
        while node is not None:
            depth += 1
            node = node.parent
        return depth

    def iter_nodes(self) -> Iterator[TreeNode]:
        """Yield this node and its descendants, depth-first pre-order."""
        yield self
        for child in self.nodes:
            yield from child.iter_nodes()

    def find(self, predicate: Callable[[TreeNode], bool]) -> TreeNode | None:
        for node in self.iter_nodes():
            if predicate(node):
                return node
        return None
