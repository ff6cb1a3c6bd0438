"""
Rendered-content access for isp-pricing-verifier.

Modules:
    source: ContentSource protocol and shared text helpers
    tree: In-memory TextTree used offline and in tests
    playwright_source: ContentSource over a live Playwright page
    proximity: Ancestor search collecting prices near a package
"""

from .source import ContentSource, Occurrence, normalize_whitespace
from .tree import TextNode, TextTree, el

__all__ = [
    "ContentSource",
    "Occurrence",
    "TextNode",
    "TextTree",
    "el",
    "normalize_whitespace",
]
