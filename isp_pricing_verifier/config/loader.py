"""
Configuration loader for isp-pricing-verifier.

This module loads YAML configuration files, validates them with Pydantic
models and checks every scenario against the brand registry, so a run never
starts a browser for a scenario that cannot be navigated.

Functions:
    load_config: Main entrypoint to load and validate pricing.config.yaml
    select_scenarios: Narrow a config down to a subset of scenario ids
"""

from pathlib import Path

import yaml
from pydantic import ValidationError

from isp_pricing_verifier.exceptions import (
    ConfigFileNotFoundError,
    ConfigValidationError,
)
from isp_pricing_verifier.navigation.brands import BrandRegistry

from .schema import PricingConfig, Scenario


def load_config(config_path: str | Path) -> PricingConfig:
    """
    Load pricing.config.yaml and validate it.

    This function:
    1. Loads YAML from the specified path
    2. Validates structure using the PricingConfig Pydantic model
    3. Checks each scenario's brand, product line and environment exist

    Args:
        config_path: Path to the YAML file (relative or absolute)

    Returns:
        Validated PricingConfig

    Raises:
        ConfigFileNotFoundError: If config file doesn't exist at the specified path
        ConfigValidationError: If YAML is invalid or config validation fails

    Example:
        >>> config = load_config("examples/pricing.config.yaml")
        >>> [s.id for s in config.scenarios]
        ['mweb-fibre-evotel', 'mweb-fibre-zoom', 'mweb-lte-telkom']
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise ConfigFileNotFoundError(f"Configuration file not found: {config_path}")

    try:
        with config_path.open(encoding="utf-8") as f:
            raw_config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigValidationError(f"Invalid YAML syntax in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigValidationError(
            f"Failed to read configuration file {config_path}: {e}"
        ) from e

    if raw_config is None:
        raise ConfigValidationError(f"Configuration file is empty: {config_path}")

    try:
        pricing_config = PricingConfig.model_validate(raw_config)
    except ValidationError as e:
        # Format validation errors in a user-friendly way
        error_messages = []
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            msg = error["msg"]
            error_messages.append(f"  - {loc}: {msg}")

        raise ConfigValidationError(
            f"Configuration validation failed in {config_path}:\n"
            + "\n".join(error_messages)
        ) from e

    problems = _check_brand_references(pricing_config)
    if problems:
        raise ConfigValidationError(
            f"Configuration validation failed in {config_path}:\n"
            + "\n".join(f"  - {problem}" for problem in problems)
        )

    return pricing_config


def _check_brand_references(config: PricingConfig) -> list[str]:
    """Return one message per scenario that the brand registry cannot serve."""
    problems = []
    environment = config.run_settings.environment

    for index, scenario in enumerate(config.scenarios):
        loc = f"scenarios.{index}.brand"
        if not BrandRegistry.is_registered(scenario.brand):
            problems.append(f"{loc}: unknown brand '{scenario.brand}'")
            continue

        profile = BrandRegistry.get_profile(scenario.brand)
        if not profile.supports(scenario.product_line):
            problems.append(
                f"{loc}: brand '{scenario.brand}' does not support "
                f"product line '{scenario.product_line}'"
            )
        if config.run_settings.base_url is None and environment not in profile.base_urls:
            problems.append(
                f"{loc}: brand '{scenario.brand}' has no '{environment}' environment"
            )

    return problems


def select_scenarios(
    config: PricingConfig, scenario_ids: list[str] | None
) -> list[Scenario]:
    """
    Pick scenarios by id, preserving declaration order of the config.

    Args:
        config: Loaded configuration
        scenario_ids: Ids to keep; None or empty keeps every scenario

    Raises:
        ConfigValidationError: If an id does not exist in the config
    """
    if not scenario_ids:
        return list(config.scenarios)

    known = {scenario.id for scenario in config.scenarios}
    unknown = [sid for sid in scenario_ids if sid not in known]
    if unknown:
        raise ConfigValidationError(
            f"Unknown scenario id(s): {', '.join(unknown)}. "
            f"Available: {', '.join(sorted(known))}"
        )

    wanted = set(scenario_ids)
    return [scenario for scenario in config.scenarios if scenario.id in wanted]


def apply_overrides(config: PricingConfig, **overrides) -> PricingConfig:
    """
    Return a copy of config with run_settings fields replaced.

    None values are ignored so CLI options that were not given leave the
    file's settings alone. The result is validated like a freshly loaded
    config.

    Raises:
        ConfigValidationError: If an override is invalid for the scenarios

    Example:
        >>> config = apply_overrides(config, environment="dev", headless=False)
    """
    updates = {key: value for key, value in overrides.items() if value is not None}
    if not updates:
        return config

    raw = config.model_dump()
    raw["run_settings"].update(updates)
    try:
        updated = PricingConfig.model_validate(raw)
    except ValidationError as e:
        error_messages = [
            f"  - run_settings.{'.'.join(str(x) for x in error['loc'][1:])}: {error['msg']}"
            for error in e.errors()
        ]
        raise ConfigValidationError(
            "Invalid command-line override:\n" + "\n".join(error_messages)
        ) from e

    problems = _check_brand_references(updated)
    if problems:
        raise ConfigValidationError(
            "Invalid command-line override:\n"
            + "\n".join(f"  - {problem}" for problem in problems)
        )
    return updated
