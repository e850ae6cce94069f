"""Adapters exporting a parsed document to XML element-tree libraries.

Converted trees are rooted at a synthetic ``<document>`` element standing in
for the ROOT node. HTML tag and attribute names that are not valid XML names
are renamed or dropped, and characters XML cannot carry are removed from text
and attribute values; every such change is reported in the
``ConversionResult`` warnings.
"""

import re
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from fenrir_dom.shared import (
    DiagnosticEntry,
    DiagnosticSeverity,
    get_logger,
)
from fenrir_dom.tree import Document

from .parser import ParseResult

ROOT_TAG = "document"
UNKNOWN_TAG = "unknown"
ORIGINAL_TAG_ATTRIBUTE = "data-original-tag"

_XML_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_.\-]*$")
_XML_INVALID_CHARS = re.compile(
    r"[^\t\n\r\x20-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]"
)

Convertible = Union[ParseResult, Document]


@dataclass
class AdapterMetadata:
    """Metadata about an export adapter."""

    name: str
    target_library: str
    description: str


@dataclass
class ConversionResult:
    """Result of a conversion operation."""

    success: bool
    converted_data: Any
    conversion_time_ms: float
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)
    diagnostics: List[DiagnosticEntry] = field(default_factory=list)


class IntegrationAdapter(ABC):
    """Base class for adapters converting a ``Document`` to a target tree."""

    def __init__(self, correlation_id: Optional[str] = None) -> None:
        self.correlation_id = correlation_id
        self._logger = get_logger(__name__, correlation_id, self.__class__.__name__)

    @property
    @abstractmethod
    def metadata(self) -> AdapterMetadata:
        """Get adapter metadata."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the target library can be imported."""

    @abstractmethod
    def _element_factory(self) -> Callable[[str], Any]:
        """Return a callable creating an element from a tag name."""

    def to_target(self, source: Convertible) -> ConversionResult:
        """Convert a parse result or document to the target element tree."""
        start_time = time.time()
        document = source.document if isinstance(source, ParseResult) else source

        try:
            make_element = self._element_factory()
        except ImportError as e:
            return self._create_error_result(
                f"{self.metadata.target_library} is not available: {e}",
                (time.time() - start_time) * 1000,
            )

        warnings: List[str] = []
        try:
            root, element_count = self._convert(document, make_element, warnings)
        except (TypeError, ValueError) as e:
            return self._create_error_result(
                f"Failed to convert to {self.metadata.target_library}: {e}",
                (time.time() - start_time) * 1000,
            )

        processing_time = (time.time() - start_time) * 1000
        if warnings:
            self._logger.debug(
                "Conversion adjusted names or content",
                extra={"adjustments": len(warnings)},
            )
        return ConversionResult(
            success=True,
            converted_data=root,
            conversion_time_ms=processing_time,
            warnings=warnings,
            metadata={"element_count": element_count},
        )

    def _convert(
        self,
        document: Document,
        make_element: Callable[[str], Any],
        warnings: List[str]
    ) -> Tuple[Any, int]:
        """Copy the document without recursion, preserving child order."""
        root = make_element(ROOT_TAG)
        root_text = document.root.text
        if root_text:
            root.text = _clean_text(root_text, "root text", warnings)

        element_count = 1
        stack = [(document.root, root)]
        while stack:
            node, element = stack.pop()
            for child in node.children:
                tag = child.tag_name or UNKNOWN_TAG
                attributes = _clean_attributes(child.attributes, tag, warnings)
                if not _XML_NAME.match(tag):
                    warnings.append(f"Tag {tag!r} is not a valid XML name; renamed")
                    attributes.insert(0, (ORIGINAL_TAG_ATTRIBUTE, _strip_invalid(tag)))
                    tag = UNKNOWN_TAG

                child_element = make_element(tag)
                for name, value in attributes:
                    child_element.set(name, value)
                if child.text:
                    child_element.text = _clean_text(child.text, f"<{tag}> text", warnings)
                element.append(child_element)
                element_count += 1
                stack.append((child, child_element))
        return root, element_count

    def _create_error_result(
        self,
        error_message: str,
        conversion_time_ms: float = 0.0
    ) -> ConversionResult:
        self._logger.warning(error_message)
        return ConversionResult(
            success=False,
            converted_data=None,
            conversion_time_ms=conversion_time_ms,
            errors=[error_message],
            diagnostics=[
                DiagnosticEntry(
                    severity=DiagnosticSeverity.ERROR,
                    message=error_message,
                    component=self.__class__.__name__,
                    correlation_id=self.correlation_id,
                )
            ],
        )


def _strip_invalid(value: str) -> str:
    return _XML_INVALID_CHARS.sub("", value)


def _clean_text(text: str, where: str, warnings: List[str]) -> str:
    cleaned = _strip_invalid(text)
    if cleaned != text:
        warnings.append(f"Removed characters not allowed in XML from {where}")
    return cleaned


def _clean_attributes(
    attributes: List[Tuple[str, str]],
    tag: str,
    warnings: List[str]
) -> List[Tuple[str, str]]:
    """Keep the first occurrence of each attribute with a valid XML name."""
    seen = set()
    cleaned: List[Tuple[str, str]] = []
    for name, value in attributes:
        if not _XML_NAME.match(name):
            warnings.append(f"Dropped attribute {name!r} on <{tag}>: invalid XML name")
            continue
        if name in seen:
            warnings.append(f"Dropped duplicate attribute {name!r} on <{tag}>")
            continue
        seen.add(name)
        cleaned.append((name, _clean_text(value, f"attribute {name!r}", warnings)))
    return cleaned


class ElementTreeAdapter(IntegrationAdapter):
    """Adapter producing ``xml.etree.ElementTree`` elements."""

    @property
    def metadata(self) -> AdapterMetadata:
        return AdapterMetadata(
            name="elementtree",
            target_library="xml.etree.ElementTree",
            description="Export a document to the standard library ElementTree",
        )

    def is_available(self) -> bool:
        return True

    def _element_factory(self) -> Callable[[str], Any]:
        import xml.etree.ElementTree as ET
        return ET.Element


class LxmlAdapter(IntegrationAdapter):
    """Adapter producing ``lxml.etree`` elements."""

    @property
    def metadata(self) -> AdapterMetadata:
        return AdapterMetadata(
            name="lxml",
            target_library="lxml",
            description="Export a document to lxml.etree for XPath queries",
        )

    def is_available(self) -> bool:
        try:
            import lxml.etree  # noqa: F401
            return True
        except ImportError:
            return False

    def _element_factory(self) -> Callable[[str], Any]:
        import lxml.etree
        return lxml.etree.Element


_ADAPTERS = {
    "elementtree": ElementTreeAdapter,
    "lxml": LxmlAdapter,
}


def get_adapter(name: str, correlation_id: Optional[str] = None) -> IntegrationAdapter:
    """Look up an adapter by its metadata name."""
    try:
        adapter_class = _ADAPTERS[name.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown adapter {name!r}; available: {sorted(_ADAPTERS)}"
        ) from None
    return adapter_class(correlation_id)
