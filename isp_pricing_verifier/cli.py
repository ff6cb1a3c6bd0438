"""
CLI entrypoint for ISP Pricing Verifier.

Provides a dual-mode command-line interface with:
- Human-friendly output: Rich spinners, tables, progress bars, colored text
- Agent-friendly output: Structured JSON for AI automation and CI
- Quiet mode: Tab-separated minimal output for shell scripts

Commands:
    run: Verify pricing pages and generate reports
    validate: Validate configuration without opening a browser
    smoke: Run homepage smoke checks for brands
    scenarios: List configured scenarios
    brands: List supported brands

Exit codes:
    0: Success - all scenarios passed
    1: Configuration error (invalid YAML, unknown brand or scenario)
    2: Browser error (browser could not be launched)
    3: Partial failure (some scenarios failed)
    4: Complete failure (no scenario passed)

Examples:
    # Human-friendly output with progress bars
    isp-pricing-verifier run --config pricing.config.yaml

    # One scenario against the dev storefront, with a visible browser
    isp-pricing-verifier run -c pricing.config.yaml -s mweb-lte-telkom --env dev --headed

    # Agent-friendly JSON output (no spinners, no colors)
    isp-pricing-verifier run --config pricing.config.yaml --format json

    # Quiet mode for scripts (tab-separated)
    isp-pricing-verifier run --config pricing.config.yaml --quiet
"""

import asyncio
import logging
from pathlib import Path

import typer
from rich.traceback import install as install_rich_traceback

from isp_pricing_verifier.config.loader import (
    apply_overrides,
    load_config,
    select_scenarios,
)
from isp_pricing_verifier.exceptions import (
    BrowserError,
    ConfigFileNotFoundError,
    ConfigurationError,
)
from isp_pricing_verifier.navigation.brands import BrandRegistry
from isp_pricing_verifier.report.generator import write_report
from isp_pricing_verifier.runner import run_all, run_smoke
from isp_pricing_verifier.utils.console import (
    console,
    create_progress_bar,
    error,
    info,
    output_mode,
    print_banner,
    print_final_summary,
    print_scenario_table,
    spinner,
    success,
    warning,
)
from isp_pricing_verifier.utils.logging import setup_logging

logger = logging.getLogger(__name__)

# Install Rich tracebacks for better error messages
install_rich_traceback(show_locals=False)

# Exit codes
EXIT_SUCCESS = 0  # All scenarios passed
EXIT_CONFIG_ERROR = 1  # Config validation failed
EXIT_BROWSER_ERROR = 2  # Browser could not be launched
EXIT_PARTIAL_FAILURE = 3  # Some scenarios failed
EXIT_COMPLETE_FAILURE = 4  # All scenarios failed

app = typer.Typer(
    name="isp-pricing-verifier",
    help="Verify advertised ISP packages and prices on live pricing pages",
    add_completion=False,
)

CONFIG_OPTION = typer.Option(
    ...,
    "--config",
    "-c",
    help="Path to YAML configuration file",
    exists=True,
    file_okay=True,
    dir_okay=False,
)


def _setup_output(format: str, quiet: bool, verbose: bool) -> None:
    output_mode.format = format
    output_mode.quiet = quiet
    # JSON logs would garble Rich output in human mode unless verbose
    setup_logging(verbose=verbose, quiet_logs=output_mode.is_human() and not verbose)


def _load_or_exit(config: Path, verbose: bool = False, **overrides):
    try:
        with spinner("Loading configuration..."):
            pricing_config = load_config(config)
            pricing_config = apply_overrides(pricing_config, **overrides)
    except ConfigFileNotFoundError as e:
        error(f"Configuration file not found: {e}")
        raise typer.Exit(EXIT_CONFIG_ERROR)
    except ConfigurationError as e:
        error(f"Configuration validation failed: {e}")
        if verbose:
            logger.debug("Configuration error", exc_info=True)
        raise typer.Exit(EXIT_CONFIG_ERROR)
    return pricing_config


def exit_code_for(passed: int, total: int) -> int:
    """
    Map scenario results to a process exit code.

    Example:
        >>> exit_code_for(passed=2, total=3)
        3
    """
    if total > 0 and passed == total:
        return EXIT_SUCCESS
    if passed == 0:
        return EXIT_COMPLETE_FAILURE
    return EXIT_PARTIAL_FAILURE


@app.command()
def run(
    config: Path = CONFIG_OPTION,
    scenario: list[str] | None = typer.Option(
        None,
        "--scenario",
        "-s",
        help="Scenario id to run (repeatable, default: all)",
    ),
    env: str | None = typer.Option(
        None,
        "--env",
        "-e",
        help="Storefront environment: 'prod' or 'dev' (overrides config)",
    ),
    base_url: str | None = typer.Option(
        None,
        "--base-url",
        help="Storefront base URL (overrides config and --env)",
    ),
    headed: bool = typer.Option(
        False,
        "--headed",
        help="Show the browser window",
    ),
    retries: int | None = typer.Option(
        None,
        "--retries",
        "-r",
        help="Extra attempts for scenarios failing on browser errors",
    ),
    format: str = typer.Option(
        "text",
        "--format",
        "-f",
        help="Output format: 'text' (human-friendly) or 'json' (machine-readable)",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Minimal output (tab-separated values)",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging",
    ),
):
    """
    Verify pricing pages and generate the HTML report.

    This command will:
    1. Load your configuration (run settings, scenarios)
    2. Drive each scenario's address to its plan-selection page
    3. Check every expected package and price on the page
    4. Write JSON results and snapshots to the run directory
    5. Generate HTML report

    Missing packages are collected per scenario; a wrong price for a found
    package fails the scenario immediately.

    Exit codes:
      0: All scenarios passed
      1: Configuration error
      2: Browser error
      3: Partial failure (some scenarios failed)
      4: Complete failure (no scenario passed)

    Examples:
      # Human mode (default)
      isp-pricing-verifier run --config pricing.config.yaml

      # Agent mode for CI
      isp-pricing-verifier run --config pricing.config.yaml --format json
    """
    _setup_output(format, quiet, verbose)
    print_banner(_read_version())

    pricing_config = _load_or_exit(
        config,
        verbose,
        environment=env,
        base_url=base_url,
        headless=False if headed else None,
        retries=retries,
    )

    try:
        scenarios = select_scenarios(pricing_config, scenario)
    except ConfigurationError as e:
        error(str(e))
        raise typer.Exit(EXIT_CONFIG_ERROR)

    settings = pricing_config.run_settings
    success(f"Loaded {len(scenarios)} scenario(s)")
    info(
        f"Environment: {settings.environment}"
        + (f" ({settings.base_url})" if settings.base_url else "")
    )

    try:
        progress = create_progress_bar()
        with progress:
            task = progress.add_task("Verifying scenarios", total=len(scenarios))
            results = asyncio.run(
                run_all(
                    pricing_config,
                    scenarios,
                    progress_callback=lambda: progress.advance(task),
                )
            )
    except BrowserError as e:
        error(f"Browser error: {e}")
        info("Install browsers with: playwright install chromium")
        raise typer.Exit(EXIT_BROWSER_ERROR)

    try:
        with spinner("Generating report..."):
            report_path = write_report(results["output_dir"], pricing_config, scenarios)
        success("Report generated successfully")
    except (OSError, ValueError) as e:
        # Scenario results stay on disk when the report fails
        warning(f"Report generation failed: {e}")
        report_path = None

    print_scenario_table([result.to_row() for result in results["results"]])

    print_final_summary(
        run_id=results["run_id"],
        output_dir=results["output_dir"],
        passed=results["passed"],
        total=results["total_scenarios"],
    )

    if report_path and output_mode.is_human() and not output_mode.quiet:
        info(f"View report: file://{Path(report_path).absolute()}")

    raise typer.Exit(exit_code_for(results["passed"], results["total_scenarios"]))


@app.command()
def validate(
    config: Path = CONFIG_OPTION,
    format: str = typer.Option(
        "text",
        "--format",
        "-f",
        help="Output format: 'text' or 'json'",
    ),
):
    """
    Validate configuration file without opening a browser.

    Checks:
    - YAML syntax is valid
    - All required fields are present
    - Prices are currency-prefixed ("R199", "R1039pm")
    - Every scenario's brand, product line and environment exist

    Exit codes:
      0: Configuration is valid
      1: Configuration is invalid

    Examples:
      isp-pricing-verifier validate --config pricing.config.yaml
      isp-pricing-verifier validate --config pricing.config.yaml --format json
    """
    output_mode.format = format

    try:
        with spinner("Validating configuration..."):
            pricing_config = load_config(config)
    except ConfigurationError as e:
        error(f"Validation failed: {e}")
        if output_mode.is_agent():
            output_mode.add_json("valid", False)
            output_mode.add_json("error", str(e))
            output_mode.add_json(
                "error_type",
                "file_not_found"
                if isinstance(e, ConfigFileNotFoundError)
                else "validation_error",
            )
            output_mode.flush_json()
        raise typer.Exit(EXIT_CONFIG_ERROR)

    entries = sum(len(s.expected) for s in pricing_config.scenarios)
    success("Configuration is valid")
    info(f"Scenarios: {len(pricing_config.scenarios)}")
    info(f"Expected entries: {entries}")
    info(f"Environment: {pricing_config.run_settings.environment}")

    if output_mode.is_agent():
        output_mode.add_json("valid", True)
        output_mode.add_json("scenarios_count", len(pricing_config.scenarios))
        output_mode.add_json("entries_count", entries)
        output_mode.add_json("environment", pricing_config.run_settings.environment)
        output_mode.flush_json()

    raise typer.Exit(EXIT_SUCCESS)


@app.command()
def smoke(
    config: Path = CONFIG_OPTION,
    brand: list[str] | None = typer.Option(
        None,
        "--brand",
        "-b",
        help="Brand to check (repeatable, default: brands used by scenarios)",
    ),
    env: str | None = typer.Option(
        None,
        "--env",
        "-e",
        help="Storefront environment: 'prod' or 'dev' (overrides config)",
    ),
    format: str = typer.Option(
        "text",
        "--format",
        "-f",
        help="Output format: 'text' or 'json'",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging",
    ),
):
    """
    Check that storefront homepages load before running scenarios.

    Each brand's homepage must have a title and a visible navigation bar and
    must render on both a phone-sized and a desktop viewport.

    Exit codes:
      0: All checks passed
      1: Configuration error (unknown brand)
      2: Browser error (browser could not start or homepage did not load)
      3: Some checks failed

    Examples:
      isp-pricing-verifier smoke --config pricing.config.yaml --brand mweb
    """
    _setup_output(format, False, verbose)
    pricing_config = _load_or_exit(config, verbose, environment=env)

    brand_ids = list(brand) if brand else sorted(
        {scenario.brand for scenario in pricing_config.scenarios}
    )
    unknown = [b for b in brand_ids if not BrandRegistry.is_registered(b)]
    if unknown:
        error(f"Unknown brand(s): {', '.join(unknown)}")
        raise typer.Exit(EXIT_CONFIG_ERROR)

    try:
        with spinner(f"Checking {len(brand_ids)} homepage(s)..."):
            results = asyncio.run(run_smoke(pricing_config, brand_ids))
    except ValueError as e:
        error(str(e))
        raise typer.Exit(EXIT_CONFIG_ERROR)
    except BrowserError as e:
        error(f"Browser error: {e}")
        raise typer.Exit(EXIT_BROWSER_ERROR)

    if output_mode.is_agent():
        output_mode.add_json("run_id", results["run_id"])
        output_mode.add_json("output_dir", results["output_dir"])
        output_mode.add_json("brands", results["brands"])
        output_mode.add_json("passed", results["passed"])
        output_mode.flush_json()
    else:
        for brand_id, checks in results["brands"].items():
            for check in checks:
                line = f"{brand_id}: {check['name']} - {check['detail']}"
                if check["passed"]:
                    success(line)
                else:
                    error(line)

    raise typer.Exit(EXIT_SUCCESS if results["passed"] else EXIT_PARTIAL_FAILURE)


@app.command()
def scenarios(
    config: Path = CONFIG_OPTION,
    format: str = typer.Option(
        "text",
        "--format",
        "-f",
        help="Output format: 'text' or 'json'",
    ),
):
    """
    List the scenarios declared in a configuration file.

    Examples:
      isp-pricing-verifier scenarios --config pricing.config.yaml
    """
    output_mode.format = format
    pricing_config = _load_or_exit(config)

    rows = [
        {
            "id": s.id,
            "brand": s.brand,
            "product_line": s.product_line,
            "provider": s.provider,
            "address": s.address,
            "tab": s.tab,
            "entries": len(s.expected),
        }
        for s in pricing_config.scenarios
    ]

    if output_mode.is_agent():
        output_mode.add_json("scenarios", rows)
        output_mode.flush_json()
        return

    from rich import box
    from rich.table import Table

    table = Table(title="Scenarios", box=box.ROUNDED)
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Brand")
    table.add_column("Line")
    table.add_column("Provider", style="magenta")
    table.add_column("Address")
    table.add_column("Tab")
    table.add_column("Entries", justify="right")
    for row in rows:
        table.add_row(
            row["id"],
            row["brand"],
            row["product_line"],
            row["provider"],
            row["address"],
            row["tab"] or "",
            str(row["entries"]),
        )
    console.print(table)


@app.command()
def brands(
    format: str = typer.Option(
        "text",
        "--format",
        "-f",
        help="Output format: 'text' or 'json'",
    ),
):
    """List supported brands with their environments and product lines."""
    output_mode.format = format
    registered = BrandRegistry.list_brands()

    if output_mode.is_agent():
        output_mode.add_json("brands", registered)
        output_mode.flush_json()
        return

    for entry in registered:
        lines = ", ".join(entry["product_lines"]) or "no product lines"
        envs = ", ".join(entry["environments"])
        console.print(
            f"[cyan]{entry['name']}[/cyan] ({entry['display_name']}): "
            f"{lines} [dim]environments: {envs}[/dim]"
        )


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
    ),
):
    """
    ISP Pricing Verifier - check advertised packages and prices.

    Drives ISP storefronts from an address to the generated plan page and
    verifies every expected package and price, tolerating the formatting
    differences real pricing pages show.

    Use 'isp-pricing-verifier COMMAND --help' for detailed command documentation.
    """
    if version:
        console.print(
            f"[bold cyan]isp-pricing-verifier[/bold cyan] version {_read_version()}"
        )
        raise typer.Exit(EXIT_SUCCESS)

    if ctx.invoked_subcommand is None:
        console.print("[yellow]Use --help to see available commands[/yellow]")
        console.print()
        console.print("Quick start:")
        console.print("  isp-pricing-verifier run --config pricing.config.yaml")
        console.print()
        console.print("Commands:")
        console.print("  run        Verify pricing pages and generate report")
        console.print("  validate   Validate configuration without running")
        console.print("  smoke      Check storefront homepages")
        console.print("  scenarios  List configured scenarios")
        console.print("  brands     List supported brands")


def _read_version() -> str:
    """Read version from package metadata (pyproject.toml)."""
    try:
        from importlib.metadata import version

        return version("isp-pricing-verifier")
    except Exception:
        # Fallback if package metadata is not available
        return "0.1.0"


if __name__ == "__main__":
    app()
