"""
Brand registry for isp-pricing-verifier.

Every brand (ISP storefront) is a plugin class registered at import time with
the @BrandRegistry.register decorator. A plugin provides a BrandProfile: the
base URLs per environment, the selectors the navigation steps rely on, and
the product lines (fibre, LTE) the storefront sells with the URL glob of the
generated plan-selection page.

Example:
    >>> profile = BrandRegistry.get_profile("mweb")
    >>> profile.base_url("dev")
    'https://dev.mwebaws.co.za/'
    >>> profile.product_line("lte").plan_url_glob
    '**/lte/choose-a-plan**'
"""

import logging
from dataclasses import dataclass, field
from typing import Protocol

logger = logging.getLogger(__name__)

ENVIRONMENTS = ("prod", "dev")


@dataclass(frozen=True)
class ProductLine:
    """
    A product line sold by a brand.

    Attributes:
        path: Landing page path relative to the brand base URL
        plan_url_glob: URL glob of the plan-selection page reached after an
            address is chosen
    """

    path: str
    plan_url_glob: str


@dataclass(frozen=True)
class BrandProfile:
    """
    Everything navigation needs to know about one storefront.

    Attributes:
        brand_id: Registry key used in configuration ("mweb")
        display_name: Human-readable brand name
        base_urls: Base URL per environment ("prod", "dev")
        product_lines: Product lines by name ("fibre", "lte")
        address_input: Selector of the address autocomplete input
        address_suggestion: Selector of one autocomplete suggestion
        priced_content_pattern: Regex whose appearance means prices rendered
        tab_selectors: Fallback selector chains per tab label
        nav_selector: Selector of the main navigation (homepage smoke check)
    """

    brand_id: str
    display_name: str
    base_urls: dict[str, str]
    product_lines: dict[str, ProductLine] = field(default_factory=dict)
    address_input: str = 'input[placeholder="Enter your address"]'
    address_suggestion: str = "li"
    priced_content_pattern: str = r"R[0-9,]+pm"
    tab_selectors: dict[str, tuple[str, ...]] = field(default_factory=dict)
    nav_selector: str = "nav"

    def base_url(self, environment: str) -> str:
        """Return the base URL for an environment or raise ValueError."""
        if environment not in self.base_urls:
            available = ", ".join(sorted(self.base_urls)) or "none"
            raise ValueError(
                f"Brand '{self.brand_id}' has no '{environment}' environment. "
                f"Available: {available}"
            )
        return self.base_urls[environment]

    def product_line(self, name: str) -> ProductLine:
        """Return a product line or raise ValueError."""
        if name not in self.product_lines:
            available = ", ".join(sorted(self.product_lines)) or "none"
            raise ValueError(
                f"Brand '{self.brand_id}' does not support product line '{name}'. "
                f"Available: {available}"
            )
        return self.product_lines[name]

    def supports(self, product_line: str) -> bool:
        return product_line in self.product_lines

    def tab_chain(self, tab: str) -> tuple[str, ...]:
        """
        Selector fallback chain for a tab label.

        Unknown tabs fall back to a plain text selector.
        """
        return self.tab_selectors.get(tab, (f"text={tab}",))


class BrandPlugin(Protocol):
    """
    Protocol for brand plugins.

    Plugins are factories: registration only stores the class, and the
    profile is built on demand.
    """

    @classmethod
    def brand_id(cls) -> str: ...

    @classmethod
    def profile(cls) -> BrandProfile: ...


class BrandRegistry:
    """
    Central registry of brand plugins.

    Class methods:
        register: Decorator to auto-register plugin classes
        get_profile: Build the BrandProfile for a brand id
        list_brands: Metadata of all registered brands
        is_registered: Check if a brand id is registered
    """

    _brands: dict[str, type] = {}

    @classmethod
    def register(cls, plugin_class: type) -> type:
        """
        Decorator to register a brand plugin class.

        Raises:
            AttributeError: If plugin class doesn't implement required methods
        """
        for method in ("brand_id", "profile"):
            if not hasattr(plugin_class, method):
                raise AttributeError(
                    f"Brand plugin {plugin_class.__name__} missing required method: {method}"
                )

        name = plugin_class.brand_id()

        if name in cls._brands:
            logger.warning(
                f"Brand '{name}' already registered. "
                f"Overwriting with {plugin_class.__name__}"
            )

        cls._brands[name] = plugin_class
        logger.debug(f"Registered brand plugin: {name} ({plugin_class.__name__})")

        return plugin_class

    @classmethod
    def get_profile(cls, brand_id: str) -> BrandProfile:
        """
        Build the profile of a registered brand.

        Raises:
            ValueError: If brand id is unknown
        """
        if brand_id not in cls._brands:
            available = ", ".join(sorted(cls._brands)) if cls._brands else "none"
            raise ValueError(
                f"Unknown brand: '{brand_id}'. Available brands: {available}"
            )
        return cls._brands[brand_id].profile()

    @classmethod
    def list_brands(cls) -> list[dict]:
        """
        List all registered brands with metadata.

        Returns:
            list[dict]: One dict per brand with keys name, display_name,
                environments, product_lines, class_name
        """
        brands = []
        for name, plugin in sorted(cls._brands.items()):
            profile = plugin.profile()
            brands.append(
                {
                    "name": name,
                    "display_name": profile.display_name,
                    "environments": sorted(profile.base_urls),
                    "product_lines": sorted(profile.product_lines),
                    "class_name": plugin.__name__,
                }
            )
        return brands

    @classmethod
    def is_registered(cls, brand_id: str) -> bool:
        return brand_id in cls._brands


SIM_ROUTER_TAB = "SIM + ROUTER"


@BrandRegistry.register
class MwebBrand:
    """Mweb storefront (fibre and fixed LTE)."""

    @classmethod
    def brand_id(cls) -> str:
        return "mweb"

    @classmethod
    def profile(cls) -> BrandProfile:
        return BrandProfile(
            brand_id="mweb",
            display_name="Mweb",
            base_urls={
                "prod": "https://mweb.co.za/",
                "dev": "https://dev.mwebaws.co.za/",
            },
            product_lines={
                "fibre": ProductLine(
                    path="/fibre", plan_url_glob="**/fibre/choose-a-plan**"
                ),
                "lte": ProductLine(path="/lte", plan_url_glob="**/lte/choose-a-plan**"),
            },
            tab_selectors={
                SIM_ROUTER_TAB: (
                    "text=SIM + ROUTER",
                    "text=SIM+ROUTER",
                    '[role="tab"]:has-text("SIM")',
                ),
                "SIM ONLY": ("text=SIM ONLY",),
                "FIBRE": ("text=FIBRE",),
                "FIXED LTE": ("text=FIXED LTE",),
            },
        )


@BrandRegistry.register
class WebafricaBrand:
    """
    Webafrica storefront.

    Only the shared selectors are known; no product line has been mapped
    yet, so scenarios targeting it fail configuration validation.
    """

    @classmethod
    def brand_id(cls) -> str:
        return "webafrica"

    @classmethod
    def profile(cls) -> BrandProfile:
        return BrandProfile(
            brand_id="webafrica",
            display_name="Webafrica",
            base_urls={"prod": "https://webafrica.co.za/"},
        )
