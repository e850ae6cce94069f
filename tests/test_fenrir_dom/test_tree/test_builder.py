"""Tests for tree construction."""

import pytest

from fenrir_dom.shared import DiagnosticSeverity, EndTagPolicy, TreeConfig
from fenrir_dom.tokenization import EndTag, StartTag, Text, tokenize
from fenrir_dom.tree import BuildResult, NodeKind, TreeBuilder, build_tree


def build(source, policy=EndTagPolicy.LENIENT):
    return TreeBuilder(TreeConfig(end_tag_policy=policy)).build(tokenize(source))


class TestTreeConstruction:
    """Tests for the basic tree shape."""

    def test_empty_token_stream(self):
        """Test that no tokens yields a lone root."""
        document = build_tree([])

        assert len(document) == 1
        assert document.root.kind is NodeKind.ROOT
        assert document.root.children == []
        assert document.root.text is None

    def test_nested_elements(self):
        """Test children are attached in order beneath their parent."""
        document = build_tree(tokenize("<div><h1>T</h1><p>x</p><a>y</a></div>"))

        div = document.root.children[0]
        assert div.kind is NodeKind.DIV
        assert [child.kind for child in div.children] == [
            NodeKind.H1, NodeKind.P, NodeKind.LINK
        ]
        assert [child.text for child in div.children] == ["T", "x", "y"]

    def test_text_concatenates_around_children(self):
        """Test that text before and after a child joins on the parent."""
        document = build_tree(tokenize("<div>a<p>b</p>c</div>"))

        div = document.root.children[0]
        assert div.text == "ac"
        assert div.children[0].text == "b"

    def test_root_text(self):
        """Test that text outside any element lands on the root."""
        document = build_tree(tokenize("hello<p>x</p>world<br>"))

        assert document.root.text == "helloworld"

    def test_unknown_tag_kept_with_name(self):
        """Test that unrecognized tags become UNKNOWN nodes with their name."""
        document = build_tree(tokenize("<span class=c>s</span>"))

        span = document.root.children[0]
        assert span.kind is NodeKind.UNKNOWN
        assert span.tag_name == "span"
        assert span.attributes == [("class", "c")]
        assert span.text == "s"

    def test_kind_lookup_is_case_sensitive(self):
        """Test that uppercase names are not recognized."""
        document = build_tree([StartTag("DIV")])

        assert document.root.children[0].kind is NodeKind.UNKNOWN

    def test_attributes_copied(self):
        """Test that node attributes do not alias the token's list."""
        token = StartTag("a", [("href", "x")])
        document = build_tree([token])

        token.attributes.append(("target", "y"))

        assert document.root.children[0].attributes == [("href", "x")]

    def test_max_depth_matches_nesting(self):
        """Test that depth counts the open elements along the deepest path."""
        document = build_tree(tokenize("<div><div><p>x</p></div></div><p></p>"))

        assert document.max_depth == 3

    def test_unclosed_void_elements_nest(self):
        """Test that each unclosed tag becomes the parent of what follows."""
        document = build_tree(tokenize("<br>a<br>b<br>c<br>"))

        assert document.max_depth == 4
        first = document.root.children[0]
        assert first.text == "a"
        assert first.children[0].children[0].text == "c"

    def test_deep_nesting_without_recursion(self):
        """Test very deep trees build and serialize."""
        depth = 5000
        document = build_tree([StartTag("div")] * depth)

        assert document.max_depth == depth
        as_dict = document.to_dict()
        assert as_dict["kind"] == "ROOT"


class TestLenientEndTags:
    """Tests for the default end tag policy."""

    def test_mismatched_end_tag_closes_current(self):
        """Test that an end tag closes the open element whatever its name."""
        result = build("<div></span>")

        assert isinstance(result, BuildResult)
        root = result.document.root
        assert len(root.children) == 1
        assert root.children[0].kind is NodeKind.DIV
        assert result.mismatched_end_tags == 1
        assert result.open_elements == 0

    def test_mismatch_then_sibling(self):
        """Test that after a mismatch the next element is a sibling."""
        result = build("<div></span><p>x</p>")

        kinds = [child.kind for child in result.document.root.children]
        assert kinds == [NodeKind.DIV, NodeKind.P]

    def test_end_tag_at_root_ignored(self):
        """Test that a stray end tag at the root is ignored."""
        result = build("</p>text<p>")

        assert result.end_tags_ignored == 1
        assert result.document.root.text == "text"
        assert result.diagnostics[0].severity is DiagnosticSeverity.WARNING

    def test_extra_end_tags(self):
        """Test that surplus end tags never move above the root."""
        result = build("<p>a</p></p></div><div>b</div>")

        kinds = [child.kind for child in result.document.root.children]
        assert kinds == [NodeKind.P, NodeKind.DIV]
        assert result.end_tags_ignored == 2

    def test_unclosed_elements_reported(self):
        """Test the count of elements still open at the end."""
        result = build("<div><p>text")

        assert result.open_elements == 2


class TestStrictEndTags:
    """Tests for the name-matching end tag policy."""

    def test_closes_nearest_matching_ancestor(self):
        """Test that intervening elements are closed with the match."""
        result = build("<div><p>x</div><h1>t</h1>", EndTagPolicy.STRICT)

        root = result.document.root
        assert [child.kind for child in root.children] == [NodeKind.DIV, NodeKind.H1]
        assert result.mismatched_end_tags == 1

    def test_unmatched_end_tag_ignored(self):
        """Test that an end tag matching nothing leaves the cursor alone."""
        result = build("<div></span>x</div>", EndTagPolicy.STRICT)

        div = result.document.root.children[0]
        assert div.text == "x"
        assert result.end_tags_ignored == 1
        assert result.open_elements == 0

    def test_exact_match(self):
        """Test a balanced document produces no diagnostics."""
        result = build("<div><p>x</p></div>", EndTagPolicy.STRICT)

        assert result.diagnostics == []
        assert result.end_tags_ignored == 0
        assert result.mismatched_end_tags == 0


class TestTreeBuilderUsage:
    """Tests for builder reuse and incremental use."""

    def test_process_tokens_incrementally(self):
        """Test feeding tokens one at a time."""
        builder = TreeBuilder()
        for token in [StartTag("p"), Text("a"), EndTag("p")]:
            builder.process(token)

        assert builder.document.root.children[0].text == "a"
        assert builder.current == 0

    def test_builder_reuse_starts_clean(self):
        """Test that each build returns an independent document."""
        builder = TreeBuilder()

        first = builder.build([StartTag("p")]).document
        second = builder.build([StartTag("div")]).document

        assert first is not second
        assert first.root.children[0].kind is NodeKind.P
        assert second.root.children[0].kind is NodeKind.DIV

    def test_token_source_errors_propagate(self):
        """Test that an exception from a lazy token source is not swallowed."""
        def tokens():
            yield StartTag("p")
            raise RuntimeError("source failed")

        with pytest.raises(RuntimeError, match="source failed"):
            TreeBuilder().build(tokens())

    def test_diagnostics_disabled(self):
        """Test that counters still work without diagnostics."""
        builder = TreeBuilder(collect_diagnostics=False)

        result = builder.build([EndTag("p")])

        assert result.diagnostics == []
        assert result.end_tags_ignored == 1
