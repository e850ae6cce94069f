"""Tree building for fenrir_dom.

Key Components:
    TreeBuilder: Cursor-based construction from a token stream
    Document: Arena owning every node, addressed by integer handles
    Node: Navigable view of a single node
    NodeKind: Element kinds recognized by tag name
"""

from .builder import (
    BuildResult,
    TreeBuilder,
    build_tree,
)
from .node import (
    ROOT_HANDLE,
    TAG_KINDS,
    Document,
    Node,
    NodeKind,
    NodeRecord,
    kind_for_tag,
)

__all__ = [
    "BuildResult",
    "TreeBuilder",
    "build_tree",
    "ROOT_HANDLE",
    "TAG_KINDS",
    "Document",
    "Node",
    "NodeKind",
    "NodeRecord",
    "kind_for_tag",
]
