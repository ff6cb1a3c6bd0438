"""
Configuration constants for isp-pricing-verifier.

This module contains global constants used across the application
to avoid tight coupling between modules.
"""

# Prices are quoted per billing period and may render with or without this suffix
PER_MONTH_SUFFIX = "pm"

# Any rand amount; used to collect diagnostic candidates near a package
PRICE_CANDIDATE_PATTERN = r"R[0-9,]+"

# Page inventory logged before matching (how many texts of each kind to show)
PACKAGE_INVENTORY_PATTERN = r"GB|TB|Mbps"
PACKAGE_INVENTORY_LIMIT = 15
PRICE_INVENTORY_LIMIT = 10

# Proximity search: first ascend this many containment levels from the
# package occurrence, then widen one level at a time up to the maximum
PROXIMITY_START_LEVELS = 2
PROXIMITY_MAX_LEVELS = 3

# Default timeouts in milliseconds
DEFAULT_NAVIGATION_TIMEOUT_MS = 90_000
DEFAULT_CONTENT_LOAD_TIMEOUT_MS = 30_000
DEFAULT_ELEMENT_VISIBLE_TIMEOUT_MS = 10_000
DEFAULT_INPUT_DELAY_MS = 2_000
DEFAULT_TYPING_DELAY_MS = 100
DEFAULT_ACTION_TIMEOUT_MS = 30_000
DEFAULT_TAB_SETTLE_MS = 2_000

# Scenario-level concurrency and retry bounds
MAX_CONCURRENT_SCENARIOS = 8
MAX_SCENARIO_RETRIES = 5
