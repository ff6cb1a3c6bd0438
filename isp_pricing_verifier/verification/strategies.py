"""
Package search strategies.

Each strategy is a pure function from an expected package label to the
search terms it proposes, possibly none. PACKAGE_STRATEGIES lists them in
priority order; the package matcher tries the terms in that order and stops
at the first one present on the page.

Pricing pages are inconsistent about how they render a package, so the
later strategies progressively loosen the search:

    >>> speed_only("20↑20Mbps")
    ['20Mbps']
    >>> numeric_only("40GB")
    ['40']
    >>> unit_variants("1Gbps")
    ['1Gbps', '1000Mbps', '1000↑']
"""

import re
from collections.abc import Callable

from .models import MatchStrategy

UPLINK_ARROW = "↑"

BANDWIDTH_UNIT_RE = re.compile(r"(Mbps|Gbps)")

# First number of a label and the unit written right after it, if any
SPEED_TOKEN_RE = re.compile(r"(\d+(?:\.\d+)?)\s*(Mbps|Gbps)?")

NUMBER_RE = re.compile(r"\d+(?:\.\d+)?")

GBPS_RE = re.compile(r"(?<![\d.])(\d+)\s*Gbps")

Strategy = Callable[[str], list[str]]


def is_bandwidth_label(label: str) -> bool:
    """True for speed labels ("20Mbps", "20↑20Mbps", "1Gbps")."""
    return UPLINK_ARROW in label or BANDWIDTH_UNIT_RE.search(label) is not None


def exact_label(label: str) -> list[str]:
    """The label verbatim."""
    return [label]


def speed_only(label: str) -> list[str]:
    """
    Downlink speed of a bandwidth label.

    Takes the first number of the label with its unit. When the unit is not
    written next to the number, as in "20↑20Mbps", the first unit later in
    the label is used.

    Examples:
        >>> speed_only("500↑250Mbps")
        ['500Mbps']
        >>> speed_only("1Gbps↑500Mbps")
        ['1Gbps']
        >>> speed_only("40GB")
        []
    """
    if not is_bandwidth_label(label):
        return []

    match = SPEED_TOKEN_RE.search(label)
    if match is None:
        return []

    number, unit = match.groups()
    if unit is None:
        later = BANDWIDTH_UNIT_RE.search(label, match.end())
        if later is None:
            return []
        unit = later.group(1)

    return [f"{number}{unit}"]


def numeric_only(label: str) -> list[str]:
    """
    First number of a label with no bandwidth unit ("40GB" -> "40",
    "1.5TB" -> "1.5", "20↑20" -> "20").

    This is the loosest strategy. A bare number can match unrelated text
    such as a price or a contract term, so a package may be reported as
    found when it is not. Pricing sheets depend on this leniency for labels
    the page renders differently ("40 GB", "40GB Anytime"), so it is kept
    as is; treat a NUMERIC_ONLY match as weak evidence when triaging.
    """
    if BANDWIDTH_UNIT_RE.search(label) is not None:
        return []
    match = NUMBER_RE.search(label)
    return [match.group(0)] if match else []


def unit_variants(label: str) -> list[str]:
    """
    Equivalent renderings of a Gbps speed.

    Examples:
        >>> unit_variants("2Gbps↑1Gbps")
        ['2Gbps', '2000Mbps', '2000↑']
        >>> unit_variants("100Mbps")
        []
    """
    match = GBPS_RE.search(label)
    if match is None:
        return []
    n = match.group(1)
    return [f"{n}Gbps", f"{n}000Mbps", f"{n}000{UPLINK_ARROW}"]


PACKAGE_STRATEGIES: tuple[tuple[MatchStrategy, Strategy], ...] = (
    (MatchStrategy.EXACT_LABEL, exact_label),
    (MatchStrategy.SPEED_ONLY, speed_only),
    (MatchStrategy.NUMERIC_ONLY, numeric_only),
    (MatchStrategy.UNIT_VARIANT, unit_variants),
)
