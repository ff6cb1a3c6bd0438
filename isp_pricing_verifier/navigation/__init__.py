"""
Browser navigation for isp-pricing-verifier.

Modules:
    brands: Brand registry (base URLs, selectors, product lines)
    sequencer: Steps from a landing page to a stable plan page
    smoke: Homepage smoke checks

Importing this package registers the built-in brands.
"""

from .brands import BrandProfile, BrandRegistry, ProductLine

__all__ = ["BrandProfile", "BrandRegistry", "ProductLine"]
