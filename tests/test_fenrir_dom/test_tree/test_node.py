"""Tests for the document arena and node views."""

import pytest

from fenrir_dom.tokenization import tokenize
from fenrir_dom.tree import (
    ROOT_HANDLE,
    Document,
    Node,
    NodeKind,
    build_tree,
    kind_for_tag,
)


@pytest.fixture
def document():
    """Small document with nested and sibling elements."""
    return build_tree(tokenize(
        '<div id="main">intro<p class="x">one</p>'
        '<a href="/next">next</a><p>two</p></div>'
    ))


class TestKindForTag:
    """Tests for tag name classification."""

    @pytest.mark.parametrize("tag, kind", [
        ("h1", NodeKind.H1),
        ("p", NodeKind.P),
        ("div", NodeKind.DIV),
        ("a", NodeKind.LINK),
        ("span", NodeKind.UNKNOWN),
        ("H1", NodeKind.UNKNOWN),
        ("br/", NodeKind.UNKNOWN),
    ])
    def test_classification(self, tag, kind):
        """Test exact-match classification of tag names."""
        assert kind_for_tag(tag) is kind


class TestDocument:
    """Tests for arena operations."""

    def test_new_document_has_root(self):
        """Test the initial single-root state."""
        document = Document()

        assert len(document) == 1
        assert document.root.handle == ROOT_HANDLE
        assert document.root.is_root
        assert document.root.parent is None
        assert document.root.tag_name is None

    def test_add_node_links_parent_and_child(self):
        """Test that a new node is the last child of its parent."""
        document = Document()
        first = document.add_node(ROOT_HANDLE, NodeKind.P, "p")
        second = document.add_node(ROOT_HANDLE, NodeKind.DIV, "div")

        assert [child.handle for child in document.root.children] == [first, second]
        assert document.node(second).parent == document.root

    def test_add_node_rejects_bad_parent(self):
        """Test that an unknown parent handle is an error."""
        with pytest.raises(IndexError):
            Document().add_node(7, NodeKind.P, "p")

    def test_add_node_rejects_second_root(self):
        """Test that only one root may exist."""
        with pytest.raises(ValueError, match="exactly one root"):
            Document().add_node(ROOT_HANDLE, NodeKind.ROOT, "root")

    def test_node_lookup_out_of_range(self):
        """Test that invalid handles raise IndexError."""
        document = Document()

        with pytest.raises(IndexError):
            document.node(1)
        with pytest.raises(IndexError):
            document.node(-1)

    def test_append_text(self):
        """Test that text accumulates in order."""
        document = Document()
        document.append_text(ROOT_HANDLE, "a")
        document.append_text(ROOT_HANDLE, "b")

        assert document.root.text == "ab"

    def test_iter_nodes_preorder(self, document):
        """Test document-order traversal starting at the root."""
        names = [node.tag_name for node in document.iter_nodes()]

        assert names == [None, "div", "p", "a", "p"]

    def test_find_all(self, document):
        """Test searching the whole document by tag name."""
        paragraphs = document.find_all("p")

        assert [node.text for node in paragraphs] == ["one", "two"]


class TestNode:
    """Tests for node navigation."""

    def test_properties(self, document):
        """Test kind, text and attribute accessors."""
        div = document.root.children[0]

        assert div.kind is NodeKind.DIV
        assert div.text == "intro"
        assert div.attributes == [("id", "main")]
        assert div.get_attribute("id") == "main"
        assert div.get_attribute("missing", "fallback") == "fallback"

    def test_attributes_are_a_copy(self, document):
        """Test that editing the returned list leaves the node unchanged."""
        div = document.root.children[0]

        div.attributes.append(("x", "y"))

        assert div.attributes == [("id", "main")]

    def test_depth(self, document):
        """Test ancestor counting."""
        div = document.root.children[0]

        assert document.root.depth == 0
        assert div.depth == 1
        assert div.children[0].depth == 2

    def test_equality_by_document_and_handle(self, document):
        """Test that views of the same node compare equal."""
        assert document.node(1) == document.root.children[0]
        assert document.node(1) != document.node(2)
        assert len({document.node(1), document.root.children[0]}) == 1

    def test_views_of_different_documents_differ(self):
        """Test that equal handles in separate documents are distinct."""
        assert Document().root != Document().root

    def test_find(self, document):
        """Test finding the first matching descendant."""
        link = document.root.find("a")

        assert link.kind is NodeKind.LINK
        assert link.get_attribute("href") == "/next"
        assert document.root.find("h1") is None

    def test_find_by_kind(self, document):
        """Test searching descendants by kind."""
        div = document.root.children[0]

        assert [node.text for node in div.find_by_kind(NodeKind.P)] == ["one", "two"]

    def test_iter_descendants_excludes_self(self, document):
        """Test that traversal starts below the node."""
        div = document.root.children[0]

        assert div not in list(div.iter_descendants())
        assert len(list(div.iter_descendants())) == 3

    def test_repr(self, document):
        """Test the debugging representation."""
        assert "DIV" in repr(document.root.children[0])
        assert "#root" in repr(document.root)

    def test_to_dict(self, document):
        """Test nested dictionary export."""
        data = document.to_dict()

        assert data["kind"] == "ROOT"
        assert "tag_name" not in data
        div = data["children"][0]
        assert div["tag_name"] == "div"
        assert div["text"] == "intro"
        assert div["attributes"] == [["id", "main"]]
        assert [child["kind"] for child in div["children"]] == ["P", "LINK", "P"]

    def test_subtree_to_dict(self, document):
        """Test exporting a single subtree."""
        link = document.root.find("a")

        assert link.to_dict() == {
            "kind": "LINK",
            "tag_name": "a",
            "text": "next",
            "attributes": [["href", "/next"]],
            "children": [],
        }

    def test_node_is_a_view(self, document):
        """Test that a view reflects later changes to the document."""
        view = Node(document, ROOT_HANDLE)

        document.append_text(ROOT_HANDLE, "late")

        assert view.text == "late"
