"""
Custom exceptions for isp-pricing-verifier.

This module provides a hierarchy of exceptions that enable type-safe error
handling throughout the application. All exceptions inherit from the base
PricingVerifierError for consistent catching.

Exception Hierarchy:
    PricingVerifierError (base)
    ├── ConfigurationError
    │   ├── ConfigFileNotFoundError
    │   └── ConfigValidationError
    ├── BrowserError
    │   ├── NavigationError
    │   └── ContentQueryError
    └── VerificationError
        ├── PriceNotFoundError
        └── SoftFailuresError

Failure policy:
    - A package that cannot be located is a *soft* failure. It is recorded and
      the scenario carries on; all of them surface together at the end as one
      SoftFailuresError.
    - A price that cannot be located for a located package is a *hard*
      failure. PriceNotFoundError is raised immediately.
    - BrowserError covers everything the page itself did wrong (timeouts,
      missing elements). Those are the only failures the runner retries.

Usage:
    from isp_pricing_verifier.exceptions import PriceNotFoundError

    try:
        await verify_entries(scenario.expected, source, report)
    except PriceNotFoundError as e:
        logger.error(f"Pricing regression: {e}")
"""


class PricingVerifierError(Exception):
    """
    Base exception for all isp-pricing-verifier errors.

    All custom exceptions in this application inherit from this class so the
    CLI can catch application errors with a single except clause.
    """

    pass


# ============================================================================
# Configuration Errors
# ============================================================================


class ConfigurationError(PricingVerifierError):
    """
    Base class for configuration-related errors.

    Raised when configuration loading, parsing, or validation fails.
    Should be caught and result in exit code 1 (configuration error).
    """

    pass


class ConfigFileNotFoundError(ConfigurationError):
    """
    Configuration file does not exist at the specified path.

    Example:
        raise ConfigFileNotFoundError("/path/to/pricing.config.yaml")
    """

    pass


class ConfigValidationError(ConfigurationError):
    """
    Configuration file is invalid (schema validation failed).

    Should include details about which field(s) failed validation.

    Example:
        raise ConfigValidationError("scenarios.0.expected.2.price: must start with 'R'")
    """

    pass


# ============================================================================
# Browser / infrastructure Errors
# ============================================================================


class BrowserError(PricingVerifierError):
    """
    Base class for failures of the browser or the page under test.

    These are infrastructure failures, not pricing regressions. The runner
    may retry a scenario that fails with one of these.
    """

    pass


class NavigationError(BrowserError):
    """
    A navigation step did not reach the expected page state.

    Raised when the address input is missing, no suggestion matches the
    location filters, or the plan-selection page never loads.

    Example:
        raise NavigationError("Timed out waiting for **/fibre/choose-a-plan**")
    """

    pass


class ContentQueryError(BrowserError):
    """
    A query against the rendered content failed.

    Raised by content sources when the underlying renderer errors or times
    out. During proximity search these are caught and treated as "no
    candidates"; anywhere else they fail the scenario.
    """

    pass


# ============================================================================
# Verification Errors
# ============================================================================


class VerificationError(PricingVerifierError):
    """
    Base class for pricing-page verification failures.

    A scenario that ends with one of these ran to a stable page state and
    found content that does not match the expected pricing sheet.
    """

    pass


class PriceNotFoundError(VerificationError):
    """
    Expected price was not found for a package that was found (hard failure).

    Attributes:
        package_label: Expected package label
        expected_price: Price string that was searched for
        candidates: Prices discovered near the package, for triage

    Example:
        raise PriceNotFoundError(
            "Expected price R199 for 40GB, but found: R249",
            package_label="40GB",
            expected_price="R199",
            candidates=["R249"],
        )
    """

    def __init__(
        self,
        message: str,
        package_label: str = "",
        expected_price: str = "",
        candidates: list[str] | None = None,
    ):
        super().__init__(message)
        self.package_label = package_label
        self.expected_price = expected_price
        self.candidates = list(candidates or [])


class SoftFailuresError(VerificationError):
    """
    One or more packages were not found (aggregated soft failures).

    Raised once, at the end of a scenario, so every missing package from a
    run is visible together.

    Attributes:
        failures: Individual soft-failure messages in declaration order
    """

    def __init__(self, failures: list[str]):
        self.failures = list(failures)
        count = len(self.failures)
        noun = "package" if count == 1 else "packages"
        super().__init__(
            f"{count} expected {noun} not found:\n"
            + "\n".join(f"  - {failure}" for failure in self.failures)
        )
