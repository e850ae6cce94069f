"""Token types produced by the HTML lexer."""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import ClassVar, List, Optional, Tuple, Union

Attribute = Tuple[str, str]


class TokenType(Enum):
    """Kinds of tokens the lexer emits."""

    START_TAG = auto()
    END_TAG = auto()
    TEXT = auto()


@dataclass
class StartTag:
    """Opening tag with its attributes in source order.

    ``offset`` is the position of the ``<`` in the decoded text and does not
    take part in equality.
    """

    name: str
    attributes: List[Attribute] = field(default_factory=list)
    offset: int = field(default=0, compare=False)

    type: ClassVar[TokenType] = TokenType.START_TAG

    def get_attribute(self, name: str) -> Optional[str]:
        """Value of the first attribute called ``name``, if any."""
        for attr_name, value in self.attributes:
            if attr_name == name:
                return value
        return None


@dataclass
class EndTag:
    """Closing tag; the name is kept verbatim and never matched by the lexer."""

    name: str
    offset: int = field(default=0, compare=False)

    type: ClassVar[TokenType] = TokenType.END_TAG


@dataclass
class Text:
    """Run of characters between tags."""

    content: str
    offset: int = field(default=0, compare=False)

    type: ClassVar[TokenType] = TokenType.TEXT


Token = Union[StartTag, EndTag, Text]
