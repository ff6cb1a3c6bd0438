"""
Configuration schema models for isp-pricing-verifier.

This module defines Pydantic models for validating and parsing the
pricing.config.yaml file. All models use Pydantic v2 field validators.

Models:
    Timeouts: Navigation and content timeouts (milliseconds)
    Viewport: Browser viewport size
    RunSettings: Runtime settings (output path, environment, browser, retries)
    LocationFilters: Substrings that pick one address suggestion
    DualPrice: Deal price advertised next to a struck-through original price
    ExpectedEntry: One expected (package, price) pair from a pricing sheet
    Scenario: One address on one brand/product line with its expected entries
    PricingConfig: Root configuration model (validates entire YAML)
"""

import re
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .constants import (
    DEFAULT_ACTION_TIMEOUT_MS,
    DEFAULT_CONTENT_LOAD_TIMEOUT_MS,
    DEFAULT_ELEMENT_VISIBLE_TIMEOUT_MS,
    DEFAULT_INPUT_DELAY_MS,
    DEFAULT_NAVIGATION_TIMEOUT_MS,
    DEFAULT_TAB_SETTLE_MS,
    DEFAULT_TYPING_DELAY_MS,
    MAX_CONCURRENT_SCENARIOS,
    MAX_SCENARIO_RETRIES,
)

# Rand amount, optionally grouped ("R1 039", "R1,039") and optionally per month
PRICE_RE = re.compile(r"^R\d[\d ,]*(?:\.\d+)?(?:pm)?$")

SCENARIO_ID_RE = re.compile(r"^[a-z0-9][a-z0-9_-]*$")


def _validate_price(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("price cannot be empty")
    if not PRICE_RE.match(value):
        raise ValueError(
            f"price must be a rand amount like 'R199' or 'R1039pm', got: {value!r}"
        )
    return value


class Timeouts(BaseModel):
    """
    Timeouts used by the navigation steps, all in milliseconds.

    Attributes:
        navigation_ms: Page loads and the redirect to the plan page
        content_load_ms: Wait for priced content on the plan page
        element_visible_ms: Wait for inputs and suggestions to appear
        input_delay_ms: Pause after typing so suggestions can load
        typing_delay_ms: Delay between keystrokes
        action_ms: Default timeout of clicks and fills
        tab_settle_ms: Pause after switching product tab
    """

    navigation_ms: int = DEFAULT_NAVIGATION_TIMEOUT_MS
    content_load_ms: int = DEFAULT_CONTENT_LOAD_TIMEOUT_MS
    element_visible_ms: int = DEFAULT_ELEMENT_VISIBLE_TIMEOUT_MS
    input_delay_ms: int = DEFAULT_INPUT_DELAY_MS
    typing_delay_ms: int = DEFAULT_TYPING_DELAY_MS
    action_ms: int = DEFAULT_ACTION_TIMEOUT_MS
    tab_settle_ms: int = DEFAULT_TAB_SETTLE_MS

    @field_validator("navigation_ms", "content_load_ms", "element_visible_ms", "action_ms")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Validate wait timeouts are positive."""
        if v <= 0:
            raise ValueError(f"timeout must be positive, got: {v}")
        return v

    @field_validator("input_delay_ms", "typing_delay_ms", "tab_settle_ms")
    @classmethod
    def validate_non_negative(cls, v: int) -> int:
        """Validate delays are not negative."""
        if v < 0:
            raise ValueError(f"delay cannot be negative, got: {v}")
        return v


class Viewport(BaseModel):
    """Browser viewport size in CSS pixels."""

    width: int = 1920
    height: int = 1080

    @field_validator("width", "height")
    @classmethod
    def validate_dimension(cls, v: int) -> int:
        if v <= 0:
            raise ValueError(f"viewport dimensions must be positive, got: {v}")
        return v


class RunSettings(BaseModel):
    """
    Runtime settings for a verification run.

    Attributes:
        output_dir: Directory for run artifacts (JSON, screenshots, HTML report)
        environment: Which brand base URL to use ("prod" or "dev")
        base_url: Optional override of the brand base URL (staging hosts)
        browser: Playwright browser engine
        headless: Run the browser without a window
        max_concurrent_scenarios: Scenarios verified in parallel, each in its
            own browser context. Range: 1-8.
        retries: Extra attempts for a scenario that fails on navigation or
            browser errors. Pricing mismatches are never retried. Range: 0-5.
        take_screenshots: Capture a full-page snapshot of each plan page
        timeouts: Navigation and content timeouts
        viewport: Browser viewport size
    """

    output_dir: str = "./output"
    environment: Literal["prod", "dev"] = "prod"
    base_url: str | None = None
    browser: Literal["chromium", "firefox", "webkit"] = "chromium"
    headless: bool = True
    max_concurrent_scenarios: int = 1
    retries: int = 0
    take_screenshots: bool = True
    timeouts: Timeouts = Field(default_factory=Timeouts)
    viewport: Viewport = Field(default_factory=Viewport)

    @field_validator("max_concurrent_scenarios")
    @classmethod
    def validate_max_concurrent(cls, v: int) -> int:
        if not 1 <= v <= MAX_CONCURRENT_SCENARIOS:
            raise ValueError(
                f"max_concurrent_scenarios must be between 1 and "
                f"{MAX_CONCURRENT_SCENARIOS}, got: {v}"
            )
        return v

    @field_validator("retries")
    @classmethod
    def validate_retries(cls, v: int) -> int:
        if not 0 <= v <= MAX_SCENARIO_RETRIES:
            raise ValueError(
                f"retries must be between 0 and {MAX_SCENARIO_RETRIES}, got: {v}"
            )
        return v

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str | None) -> str | None:
        if v is not None and not v.startswith(("http://", "https://")):
            raise ValueError(f"base_url must be an http(s) URL, got: {v}")
        return v


class LocationFilters(BaseModel):
    """
    Two substrings that together identify one address suggestion.

    Example:
        location_filters:
          primary: "Ocean View"
          secondary: "Cape Town"
    """

    primary: str
    secondary: str

    @field_validator("primary", "secondary")
    @classmethod
    def validate_non_empty(cls, v: str) -> str:
        if not v or v.isspace():
            raise ValueError("location filter cannot be empty")
        return v


class DualPrice(BaseModel):
    """Promotional display: deal price plus the struck-through original price."""

    model_config = ConfigDict(frozen=True)

    deal: str
    original: str

    @field_validator("deal", "original")
    @classmethod
    def validate_price(cls, v: str) -> str:
        return _validate_price(v)


class ExpectedEntry(BaseModel):
    """
    One expected (package, price) pair from a pricing sheet.

    The price is either a single string or a DualPrice. The flat form used in
    pricing sheets is accepted as well:

        - {package: "40GB", price: "R199"}
        - {package: "20↑20Mbps", price: {deal: "R559pm", original: "R659pm"}}
        - {package: "20↑20Mbps", deal_price: "R559pm", original_price: "R659pm"}

    Attributes:
        package: Package label as advertised ("40GB", "20↑20Mbps", "1Gbps")
        price: Expected price string or deal/original pair
        description: Optional free text from the pricing sheet
    """

    model_config = ConfigDict(frozen=True)

    package: str
    price: str | DualPrice
    description: str | None = None

    @model_validator(mode="before")
    @classmethod
    def fold_flat_dual_price(cls, data: Any) -> Any:
        """Accept deal_price/original_price keys as a DualPrice."""
        if not isinstance(data, dict):
            return data
        if "deal_price" not in data and "original_price" not in data:
            return data
        if "price" in data:
            raise ValueError(
                "use either 'price' or 'deal_price'/'original_price', not both"
            )
        data = dict(data)
        data["price"] = {
            "deal": data.pop("deal_price", None),
            "original": data.pop("original_price", None),
        }
        return data

    @field_validator("package")
    @classmethod
    def validate_package(cls, v: str) -> str:
        if not v or v.isspace():
            raise ValueError("package label cannot be empty")
        return v.strip()

    @field_validator("price")
    @classmethod
    def validate_single_price(cls, v: str | DualPrice) -> str | DualPrice:
        if isinstance(v, str):
            return _validate_price(v)
        return v

    @property
    def is_dual(self) -> bool:
        return isinstance(self.price, DualPrice)

    @property
    def primary_price(self) -> str:
        """Price whose absence is a hard failure (the deal price when dual)."""
        return self.price.deal if isinstance(self.price, DualPrice) else self.price


class Scenario(BaseModel):
    """
    One verification scenario: an address on a brand's product line.

    Attributes:
        id: Unique slug, used in file names ("mweb-lte-telkom")
        brand: Registered brand id ("mweb")
        product_line: "fibre" or "lte"
        provider: Network provider whose packages are listed ("Evotel")
        address: Text typed into the address input
        location_filters: Substrings that pick the right suggestion
        tab: Optional product tab to open before matching ("SIM + ROUTER")
        content_load_timeout_ms: Optional override of timeouts.content_load_ms
        expected: Expected entries, verified in declaration order
    """

    id: str
    brand: str
    product_line: Literal["fibre", "lte"]
    provider: str
    address: str
    location_filters: LocationFilters
    tab: str | None = None
    content_load_timeout_ms: int | None = None
    expected: list[ExpectedEntry]

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        if not SCENARIO_ID_RE.match(v):
            raise ValueError(
                f"scenario id must be a lowercase slug (a-z, 0-9, '-', '_'), got: {v!r}"
            )
        return v

    @field_validator("provider", "address", "brand")
    @classmethod
    def validate_non_empty(cls, v: str) -> str:
        if not v or v.isspace():
            raise ValueError("value cannot be empty")
        return v

    @field_validator("content_load_timeout_ms")
    @classmethod
    def validate_timeout(cls, v: int | None) -> int | None:
        if v is not None and v <= 0:
            raise ValueError(f"timeout must be positive, got: {v}")
        return v

    @field_validator("expected")
    @classmethod
    def validate_expected(cls, v: list[ExpectedEntry]) -> list[ExpectedEntry]:
        if not v:
            raise ValueError("scenario must declare at least one expected entry")
        return v

    def content_timeout(self, timeouts: Timeouts) -> int:
        return self.content_load_timeout_ms or timeouts.content_load_ms


class PricingConfig(BaseModel):
    """
    Root configuration model for pricing.config.yaml.

    Example:
        run_settings:
          environment: prod
          retries: 1
        scenarios:
          - id: mweb-lte-telkom
            brand: mweb
            product_line: lte
            ...
    """

    run_settings: RunSettings = Field(default_factory=RunSettings)
    scenarios: list[Scenario]

    @field_validator("scenarios")
    @classmethod
    def validate_scenarios(cls, v: list[Scenario]) -> list[Scenario]:
        if not v:
            raise ValueError("at least one scenario is required")

        seen: set[str] = set()
        for scenario in v:
            if scenario.id in seen:
                raise ValueError(f"duplicate scenario id: {scenario.id}")
            seen.add(scenario.id)
        return v

    def get_scenario(self, scenario_id: str) -> Scenario:
        for scenario in self.scenarios:
            if scenario.id == scenario_id:
                return scenario
        raise KeyError(scenario_id)
