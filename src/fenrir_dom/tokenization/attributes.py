"""Attribute-list sub-parser.

The attribute list of a start tag (everything between the tag name and the
closing ``>``) is scanned by a small state machine of its own. ``transition``
is a pure function of the current state and one character; the
``AttributeListParser`` applies the returned action to its buffers.
"""

from enum import Enum, auto
from typing import List, Tuple

from fenrir_dom.shared import DuplicateAttributePolicy

from .tokens import Attribute

WHITESPACE = frozenset(" \t\n\r\f\v")
QUOTES = frozenset("'\"")


class AttributeState(Enum):
    """States of the attribute-list scanner."""

    BEFORE_NAME = auto()   # Skipping whitespace between attributes
    NAME = auto()          # Reading an attribute name
    AFTER_NAME = auto()    # Whitespace after a name, waiting for '=' or a new name
    BEFORE_VALUE = auto()  # After '=', skipping whitespace
    VALUE = auto()         # Reading an unquoted stretch of the value
    QUOTED_VALUE = auto()  # Reading inside quotes; whitespace and '>' are literal


class AttributeAction(Enum):
    """Side effect requested by a transition."""

    IGNORE = auto()
    START_NAME = auto()      # Commit any pending attribute, begin a new name
    APPEND_NAME = auto()
    BEGIN_VALUE = auto()     # '=' seen, the pending attribute has a value
    APPEND_VALUE = auto()
    END_ATTRIBUTE = auto()   # Commit the pending attribute
    CLOSE = auto()           # '>' seen, commit pending attribute and finish


def transition(state: AttributeState, char: str) -> Tuple[AttributeState, AttributeAction]:
    """Compute the next state and action for one character."""
    if state is AttributeState.QUOTED_VALUE:
        if char in QUOTES:
            return AttributeState.VALUE, AttributeAction.IGNORE
        return AttributeState.QUOTED_VALUE, AttributeAction.APPEND_VALUE

    if char == ">":
        return AttributeState.BEFORE_NAME, AttributeAction.CLOSE

    if state is AttributeState.BEFORE_NAME or state is AttributeState.AFTER_NAME:
        if char in WHITESPACE:
            return state, AttributeAction.IGNORE
        if char == "=":
            return AttributeState.BEFORE_VALUE, AttributeAction.BEGIN_VALUE
        return AttributeState.NAME, AttributeAction.START_NAME

    if state is AttributeState.NAME:
        if char in WHITESPACE:
            return AttributeState.AFTER_NAME, AttributeAction.IGNORE
        if char == "=":
            return AttributeState.BEFORE_VALUE, AttributeAction.BEGIN_VALUE
        return AttributeState.NAME, AttributeAction.APPEND_NAME

    if state is AttributeState.BEFORE_VALUE:
        if char in WHITESPACE:
            return AttributeState.BEFORE_VALUE, AttributeAction.IGNORE
        if char in QUOTES:
            return AttributeState.QUOTED_VALUE, AttributeAction.IGNORE
        return AttributeState.VALUE, AttributeAction.APPEND_VALUE

    # AttributeState.VALUE
    if char in WHITESPACE:
        return AttributeState.BEFORE_NAME, AttributeAction.END_ATTRIBUTE
    if char in QUOTES:
        return AttributeState.QUOTED_VALUE, AttributeAction.IGNORE
    return AttributeState.VALUE, AttributeAction.APPEND_VALUE


class AttributeListParser:
    """Accumulates attributes one character at a time.

    Feed characters with ``feed`` until it returns True, then read
    ``attributes``. Call ``reset`` before reusing the parser for another tag.
    """

    def __init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        self.state = AttributeState.BEFORE_NAME
        self.attributes: List[Attribute] = []
        self._name: List[str] = []
        self._value: List[str] = []
        self._pending = False

    @property
    def in_quote(self) -> bool:
        return self.state is AttributeState.QUOTED_VALUE

    def feed(self, char: str) -> bool:
        """Consume one character; True once the closing '>' has been seen."""
        self.state, action = transition(self.state, char)

        if action is AttributeAction.APPEND_NAME:
            self._name.append(char)
        elif action is AttributeAction.APPEND_VALUE:
            self._value.append(char)
        elif action is AttributeAction.START_NAME:
            self._commit()
            self._name.append(char)
            self._pending = True
        elif action is AttributeAction.BEGIN_VALUE:
            self._pending = True
        elif action is AttributeAction.END_ATTRIBUTE:
            self._commit()
        elif action is AttributeAction.CLOSE:
            self._commit()
            return True
        return False

    def _commit(self) -> None:
        if not self._pending:
            return
        self.attributes.append(("".join(self._name), "".join(self._value)))
        self._name = []
        self._value = []
        self._pending = False


def parse_attribute_list(text: str) -> Tuple[List[Attribute], int]:
    """Parse attributes from ``text`` up to and including the closing '>'.

    Returns the attributes and the number of characters consumed. If no
    closing '>' is found the attributes parsed so far are returned with a
    consumed count of ``len(text)``; the lexer treats that as an unterminated
    tag and discards them.
    """
    parser = AttributeListParser()
    for index, char in enumerate(text):
        if parser.feed(char):
            return parser.attributes, index + 1
    return parser.attributes, len(text)


def resolve_duplicates(
    attributes: List[Attribute],
    policy: DuplicateAttributePolicy
) -> Tuple[List[Attribute], int]:
    """Apply a duplicate-name policy, returning the attributes and drop count."""
    if policy is DuplicateAttributePolicy.KEEP_ALL:
        return attributes, 0

    positions = {}
    resolved: List[Attribute] = []
    for name, value in attributes:
        if name not in positions:
            positions[name] = len(resolved)
            resolved.append((name, value))
        elif policy is DuplicateAttributePolicy.LAST_WINS:
            resolved[positions[name]] = (name, value)
    return resolved, len(attributes) - len(resolved)
