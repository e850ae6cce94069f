"""Tree construction from a token stream.

The builder keeps a single cursor, the handle of the node that incoming
tokens attach to. Start tags push a new child and move the cursor into it;
end tags move the cursor back to the parent. Text accumulates on whatever
node the cursor is on.

With the default lenient end-tag policy an end tag closes whatever element
is open, without comparing names, and an end tag at the root is ignored.
This differs from standards-based HTML tree construction. The
strict policy instead closes the nearest open element whose tag name matches
and ignores end tags that match nothing.
"""

import time
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from fenrir_dom.shared import (
    DiagnosticEntry,
    DiagnosticSeverity,
    EndTagPolicy,
    TreeConfig,
    get_logger,
)
from fenrir_dom.tokenization import EndTag, StartTag, Text, Token, TokenType

from .node import ROOT_HANDLE, Document, kind_for_tag


@dataclass
class BuildResult:
    """Finished document plus statistics from the build."""

    document: Document
    tokens_consumed: int = 0
    nodes_created: int = 0
    end_tags_ignored: int = 0
    mismatched_end_tags: int = 0
    open_elements: int = 0  # Depth of the cursor when tokens ran out
    processing_time_ms: float = 0.0
    diagnostics: List[DiagnosticEntry] = field(default_factory=list)


class TreeBuilder:
    """Builds a ``Document`` from start tag, end tag and text tokens.

    Never raises on token content: every sequence, balanced or not, yields a
    valid tree.
    """

    def __init__(
        self,
        config: Optional[TreeConfig] = None,
        correlation_id: Optional[str] = None,
        collect_diagnostics: bool = True
    ) -> None:
        self.config = config or TreeConfig()
        self.correlation_id = correlation_id
        self.collect_diagnostics = collect_diagnostics
        self._logger = get_logger(__name__, correlation_id, "tree_builder")
        self._reset_state()

    def _reset_state(self) -> None:
        self.document = Document()
        self.current = ROOT_HANDLE
        self._tokens_consumed = 0
        self._end_tags_ignored = 0
        self._mismatched_end_tags = 0
        self._diagnostics: List[DiagnosticEntry] = []

    def build(self, tokens: Iterable[Token]) -> BuildResult:
        """Consume ``tokens`` and return the finished document.

        Exceptions raised by a lazy token source propagate unchanged and no
        document is returned.
        """
        start_time = time.time()
        self._reset_state()

        for token in tokens:
            self._tokens_consumed += 1
            self.process(token)

        document = self.document
        result = BuildResult(
            document=document,
            tokens_consumed=self._tokens_consumed,
            nodes_created=len(document) - 1,
            end_tags_ignored=self._end_tags_ignored,
            mismatched_end_tags=self._mismatched_end_tags,
            open_elements=document.node(self.current).depth,
            processing_time_ms=(time.time() - start_time) * 1000,
            diagnostics=list(self._diagnostics),
        )
        self._logger.debug(
            "Tree built",
            extra={
                "tokens": result.tokens_consumed,
                "nodes": result.nodes_created,
                "max_depth": document.max_depth,
                "open_elements": result.open_elements,
            },
        )
        return result

    def process(self, token: Token) -> None:
        """Apply one token to the tree under construction."""
        if token.type is TokenType.TEXT:
            self._handle_text(token)
        elif token.type is TokenType.START_TAG:
            self._handle_start_tag(token)
        elif token.type is TokenType.END_TAG:
            self._handle_end_tag(token)

    def _handle_text(self, token: Text) -> None:
        self.document.append_text(self.current, token.content)

    def _handle_start_tag(self, token: StartTag) -> None:
        self.current = self.document.add_node(
            self.current,
            kind_for_tag(token.name),
            token.name,
            token.attributes,
        )

    def _handle_end_tag(self, token: EndTag) -> None:
        if self.config.end_tag_policy is EndTagPolicy.STRICT:
            self._close_matching(token)
        else:
            self._close_current(token)

    def _close_current(self, token: EndTag) -> None:
        record = self.document.record(self.current)
        if record.parent is None:
            self._end_tags_ignored += 1
            self._diagnose(
                DiagnosticSeverity.WARNING,
                f"End tag </{token.name}> with no open element ignored",
                token.offset,
            )
            return

        if record.tag_name != token.name:
            self._mismatched_end_tags += 1
            self._diagnose(
                DiagnosticSeverity.INFO,
                f"End tag </{token.name}> closed <{record.tag_name}>",
                token.offset,
            )
        self.current = record.parent

    def _close_matching(self, token: EndTag) -> None:
        handle: Optional[int] = self.current
        while handle is not None:
            record = self.document.record(handle)
            if record.parent is None:
                break
            if record.tag_name == token.name:
                if handle != self.current:
                    self._mismatched_end_tags += 1
                    self._diagnose(
                        DiagnosticSeverity.INFO,
                        f"End tag </{token.name}> closed intervening open elements",
                        token.offset,
                    )
                self.current = record.parent
                return
            handle = record.parent

        self._end_tags_ignored += 1
        self._diagnose(
            DiagnosticSeverity.WARNING,
            f"End tag </{token.name}> matches no open element; ignored",
            token.offset,
        )

    def _diagnose(self, severity: DiagnosticSeverity, message: str, offset: int) -> None:
        if not self.collect_diagnostics:
            return
        self._diagnostics.append(DiagnosticEntry(
            severity=severity,
            message=message,
            component="tree_builder",
            offset=offset,
            correlation_id=self.correlation_id,
        ))
        self._logger.debug(message, extra={"offset": offset})


def build_tree(tokens: Iterable[Token], config: Optional[TreeConfig] = None) -> Document:
    """Build a document from ``tokens`` with a one-off builder."""
    return TreeBuilder(config).build(tokens).document
