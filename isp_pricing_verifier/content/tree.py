"""
In-memory content tree.

TextTree is a ContentSource over a small synthetic node tree. It lets the
verification engine run without a browser: unit tests build pricing cards
out of TextNode objects, and saved snapshots can be replayed offline.

Example:
    >>> card = el("div", el("h3", "40GB"), el("span", "R199"))
    >>> tree = TextTree(el("body", card))
    >>> nodes = await tree.find_text("40gb")
    >>> nodes[0].tag
    'h3'
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from .source import compile_pattern, normalize_whitespace

# Utility class pricing pages use for crossed-out prices
STRIKETHROUGH_CLASS = "line-through"

# Elements the user-agent stylesheet renders struck through
STRIKETHROUGH_TAGS = frozenset({"s", "del", "strike"})


@dataclass(eq=False)
class TextNode:
    """
    One element of the tree.

    Attributes:
        tag: Element name, informational only
        text: Text rendered directly by this element
        children: Child elements in document order
        classes: CSS class names
        style: Inline style declarations ({"text-decoration": "line-through"})
        computed_style: Style resolved from stylesheets
        parent: Containing element, set when the node is attached
    """

    tag: str = "div"
    text: str = ""
    children: list[TextNode] = field(default_factory=list)
    classes: tuple[str, ...] = ()
    style: dict[str, str] = field(default_factory=dict)
    computed_style: dict[str, str] = field(default_factory=dict)
    parent: TextNode | None = field(default=None, repr=False)

    def __post_init__(self):
        for child in self.children:
            child.parent = self

    def append(self, *children: TextNode) -> TextNode:
        for child in children:
            child.parent = self
            self.children.append(child)
        return self

    @property
    def rendered_text(self) -> str:
        """Own text followed by the text of all descendants (DOM textContent)."""
        return self.text + "".join(child.rendered_text for child in self.children)


def el(
    tag: str,
    *content: str | TextNode,
    classes: tuple[str, ...] | str = (),
    style: dict[str, str] | None = None,
    computed_style: dict[str, str] | None = None,
) -> TextNode:
    """
    Build a TextNode. String arguments become the node's own text, node
    arguments its children.

    Example:
        >>> el("p", "R659pm", classes="price line-through").classes
        ('price', 'line-through')
    """
    if isinstance(classes, str):
        classes = tuple(classes.split())
    text = "".join(part for part in content if isinstance(part, str))
    children = [part for part in content if isinstance(part, TextNode)]
    return TextNode(
        tag=tag,
        text=text,
        children=children,
        classes=classes,
        style=dict(style or {}),
        computed_style=dict(computed_style or {}),
    )


def _has_line_through(declarations: dict[str, str]) -> bool:
    for prop in ("text-decoration", "text-decoration-line"):
        if "line-through" in declarations.get(prop, ""):
            return True
    return False


class TextTree:
    """ContentSource implementation over a TextNode tree."""

    def __init__(self, root: TextNode):
        self.root = root

    def _deepest(self, scope: TextNode, predicate) -> list[TextNode]:
        results: list[TextNode] = []

        def visit(node: TextNode) -> bool:
            child_hit = False
            for child in node.children:
                if visit(child):
                    child_hit = True
            if child_hit:
                return True
            if predicate(normalize_whitespace(node.rendered_text)):
                results.append(node)
                return True
            return False

        visit(scope)
        return results

    async def find_text(self, text: str) -> list[TextNode]:
        needle = normalize_whitespace(text).lower()
        if not needle:
            return []
        return self._deepest(self.root, lambda rendered: needle in rendered.lower())

    async def find_pattern(
        self, pattern: str | re.Pattern[str], within: TextNode | None = None
    ) -> list[TextNode]:
        regex = compile_pattern(pattern)
        scope = within if within is not None else self.root
        return self._deepest(scope, lambda rendered: regex.search(rendered) is not None)

    async def parent(self, node: TextNode) -> TextNode:
        return node.parent if node.parent is not None else node

    async def text_content(self, node: TextNode) -> str:
        return node.rendered_text

    async def is_struck_through(self, node: TextNode) -> bool:
        if node.tag.lower() in STRIKETHROUGH_TAGS:
            return True
        if _has_line_through(node.computed_style) or _has_line_through(node.style):
            return True
        return STRIKETHROUGH_CLASS in node.classes
