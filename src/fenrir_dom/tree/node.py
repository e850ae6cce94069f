"""Document tree storage.

Nodes live in an arena owned by ``Document`` and refer to each other through
integer handles. ``Node`` is a lightweight view pairing a document with a
handle; it is what callers navigate.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, Iterator, List, Optional

from fenrir_dom.tokenization import Attribute

ROOT_HANDLE = 0


class NodeKind(Enum):
    """Element kinds recognized by the tree builder."""

    ROOT = auto()
    H1 = auto()
    P = auto()
    DIV = auto()
    LINK = auto()
    UNKNOWN = auto()


# Case-sensitive; anything missing maps to UNKNOWN
TAG_KINDS: Dict[str, NodeKind] = {
    "h1": NodeKind.H1,
    "div": NodeKind.DIV,
    "a": NodeKind.LINK,
    "p": NodeKind.P,
}


def kind_for_tag(tag_name: str) -> NodeKind:
    return TAG_KINDS.get(tag_name, NodeKind.UNKNOWN)


@dataclass
class NodeRecord:
    """Arena slot for one node."""

    kind: NodeKind
    tag_name: Optional[str] = None
    parent: Optional[int] = None
    children: List[int] = field(default_factory=list)
    text: Optional[str] = None
    attributes: List[Attribute] = field(default_factory=list)


class Document:
    """Arena of nodes rooted at a single ROOT node.

    Nodes are only ever appended; a handle stays valid for the life of the
    document and a node's parent never changes after creation.
    """

    def __init__(self) -> None:
        self._records: List[NodeRecord] = [NodeRecord(kind=NodeKind.ROOT)]

    def __len__(self) -> int:
        return len(self._records)

    @property
    def root(self) -> "Node":
        return Node(self, ROOT_HANDLE)

    def node(self, handle: int) -> "Node":
        if not 0 <= handle < len(self._records):
            raise IndexError(f"No node with handle {handle}")
        return Node(self, handle)

    def record(self, handle: int) -> NodeRecord:
        return self._records[handle]

    def add_node(
        self,
        parent: int,
        kind: NodeKind,
        tag_name: str,
        attributes: Optional[List[Attribute]] = None
    ) -> int:
        """Create a node as the last child of ``parent`` and return its handle."""
        if not 0 <= parent < len(self._records):
            raise IndexError(f"No node with handle {parent}")
        if kind is NodeKind.ROOT:
            raise ValueError("A document has exactly one root")

        handle = len(self._records)
        self._records.append(NodeRecord(
            kind=kind,
            tag_name=tag_name,
            parent=parent,
            attributes=list(attributes or []),
        ))
        self._records[parent].children.append(handle)
        return handle

    def append_text(self, handle: int, text: str) -> None:
        record = self._records[handle]
        record.text = text if record.text is None else record.text + text

    def iter_nodes(self) -> Iterator["Node"]:
        """Yield every node in document (pre-)order, root first."""
        stack = [ROOT_HANDLE]
        while stack:
            handle = stack.pop()
            yield Node(self, handle)
            stack.extend(reversed(self._records[handle].children))

    @property
    def max_depth(self) -> int:
        """Deepest nesting level; the root is at depth 0."""
        deepest = 0
        stack = [(ROOT_HANDLE, 0)]
        while stack:
            handle, depth = stack.pop()
            deepest = max(deepest, depth)
            stack.extend((child, depth + 1) for child in self._records[handle].children)
        return deepest

    def find_all(self, tag_name: str) -> List["Node"]:
        return self.root.find_all(tag_name)

    def to_dict(self) -> Dict[str, Any]:
        return self.root.to_dict()


class Node:
    """View of one node in a ``Document``."""

    __slots__ = ("document", "handle")

    def __init__(self, document: Document, handle: int) -> None:
        self.document = document
        self.handle = handle

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Node):
            return NotImplemented
        return self.document is other.document and self.handle == other.handle

    def __hash__(self) -> int:
        return hash((id(self.document), self.handle))

    def __repr__(self) -> str:
        label = self.tag_name if self.tag_name is not None else "#root"
        return f"<Node {self.kind.name} {label!r} handle={self.handle}>"

    @property
    def _record(self) -> NodeRecord:
        return self.document.record(self.handle)

    @property
    def kind(self) -> NodeKind:
        return self._record.kind

    @property
    def tag_name(self) -> Optional[str]:
        return self._record.tag_name

    @property
    def text(self) -> Optional[str]:
        return self._record.text

    @property
    def attributes(self) -> List[Attribute]:
        return list(self._record.attributes)

    @property
    def is_root(self) -> bool:
        return self._record.parent is None

    @property
    def parent(self) -> Optional["Node"]:
        parent = self._record.parent
        return None if parent is None else Node(self.document, parent)

    @property
    def children(self) -> List["Node"]:
        return [Node(self.document, child) for child in self._record.children]

    @property
    def depth(self) -> int:
        """Number of ancestors; the root is at depth 0."""
        depth = 0
        parent = self._record.parent
        while parent is not None:
            depth += 1
            parent = self.document.record(parent).parent
        return depth

    def get_attribute(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Value of the first attribute called ``name``."""
        for attr_name, value in self._record.attributes:
            if attr_name == name:
                return value
        return default

    def iter_descendants(self) -> Iterator["Node"]:
        """Yield descendants in document order, excluding this node."""
        stack = list(reversed(self._record.children))
        while stack:
            handle = stack.pop()
            yield Node(self.document, handle)
            stack.extend(reversed(self.document.record(handle).children))

    def find(self, tag_name: str) -> Optional["Node"]:
        """First descendant with a matching tag name, in document order."""
        for node in self.iter_descendants():
            if node.tag_name == tag_name:
                return node
        return None

    def find_all(self, tag_name: str) -> List["Node"]:
        return [node for node in self.iter_descendants() if node.tag_name == tag_name]

    def find_by_kind(self, kind: NodeKind) -> List["Node"]:
        return [node for node in self.iter_descendants() if node.kind is kind]

    def to_dict(self) -> Dict[str, Any]:
        """Nested dictionary with kind, tag name, text, attributes and children.

        Built without recursion; unclosed void elements such as ``<br>`` make
        deep trees common.
        """
        def _shallow(record: NodeRecord) -> Dict[str, Any]:
            entry: Dict[str, Any] = {"kind": record.kind.name}
            if record.tag_name is not None:
                entry["tag_name"] = record.tag_name
            if record.text is not None:
                entry["text"] = record.text
            if record.attributes:
                entry["attributes"] = [list(pair) for pair in record.attributes]
            entry["children"] = []
            return entry

        result = _shallow(self._record)
        stack = [(self.handle, result)]
        while stack:
            handle, entry = stack.pop()
            for child in self.document.record(handle).children:
                child_entry = _shallow(self.document.record(child))
                entry["children"].append(child_entry)
                stack.append((child, child_entry))
        return result
