"""
Content source interface consumed by the verification engine.

A content source is a queryable tree of rendered text nodes. The engine only
ever asks it four kinds of question:

    - where does this literal text (or pattern) appear?
    - what contains this node?
    - what text does this node render?
    - is this node visually struck through?

Node handles are opaque to the engine. They are only valid for the lifetime
of the source that produced them and are never persisted.

Text matching semantics shared by all implementations:
    - Literal search is a case-insensitive substring match over
      whitespace-normalized rendered text.
    - Pattern search is a regular-expression search over the same text.
    - Only the deepest matching nodes are returned, in document order, so a
      container is never reported alongside the child that carries the text.
    - The parent of the root is the root itself.
"""

import re
from typing import Any, Protocol

# Opaque handle to a node of a content source
Occurrence = Any

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_whitespace(text: str) -> str:
    """
    Collapse runs of whitespace (including non-breaking spaces) to one space.

    Example:
        >>> normalize_whitespace("  R1\\u00a0039\\n pm ")
        'R1 039 pm'
    """
    return _WHITESPACE_RE.sub(" ", text).strip()


def compile_pattern(pattern: "str | re.Pattern[str]") -> "re.Pattern[str]":
    if isinstance(pattern, re.Pattern):
        return pattern
    return re.compile(pattern)


class ContentSource(Protocol):
    """
    Protocol for rendered page content.

    All queries are coroutines: a live page may need to settle before it can
    answer. Implementations raise ContentQueryError when the underlying
    renderer fails.
    """

    async def find_text(self, text: str) -> list[Occurrence]:
        """Return the deepest nodes whose rendered text contains `text`."""
        ...

    async def find_pattern(
        self, pattern: "str | re.Pattern[str]", within: Occurrence | None = None
    ) -> list[Occurrence]:
        """Return the deepest nodes under `within` (default: page) matching `pattern`."""
        ...

    async def parent(self, node: Occurrence) -> Occurrence:
        """Return the containing node (the root is its own parent)."""
        ...

    async def text_content(self, node: Occurrence) -> str:
        """Return the rendered text of a node, including its descendants."""
        ...

    async def is_struck_through(self, node: Occurrence) -> bool:
        """Return True if the node renders with a strikethrough treatment."""
        ...
