"""
HTML report generation for isp-pricing-verifier.

Reads the scenario result JSON files of a run directory and renders a
self-contained HTML report (inline CSS, no external assets): one section
per scenario with its entries, the price candidates seen near missing
prices and a link to the page snapshot.

Security:
- Jinja2 autoescaping is enabled; page texts and config values are escaped

Example:
    >>> write_report("./output/2025-06-12T08-00-00Z", config, scenarios)
"""

import json
import logging
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from ..config.schema import PricingConfig, Scenario
from ..storage.layout import get_run_meta_filename, get_scenario_result_filename
from ..storage.writer import write_report_html

logger = logging.getLogger(__name__)

STATUS_ORDER = {"error": 0, "failed": 1, "passed": 2}


def generate_report(
    run_dir: str,
    run_id: str,
    config: PricingConfig,
    scenarios: list[Scenario] | None = None,
) -> str:
    """
    Generate the HTML report of a run.

    Args:
        run_dir: Run output directory (contains scenario_{id}.json files)
        run_id: Run identifier (timestamp slug)
        config: Configuration the run used
        scenarios: Scenarios that ran (default: every configured scenario)

    Returns:
        HTML string

    Raises:
        FileNotFoundError: If run directory doesn't exist
        ValueError: If template loading or rendering fails

    Note:
        Scenarios without a result file are shown as "missing" rather than
        failing report generation.
    """
    run_dir_path = Path(run_dir)
    if not run_dir_path.exists():
        raise FileNotFoundError(f"Run directory not found: {run_dir}")

    logger.info(f"Generating HTML report for run: {run_id}")

    template_dir = Path(__file__).parent / "templates"
    env = Environment(
        loader=FileSystemLoader(str(template_dir)),
        autoescape=select_autoescape(["html", "xml", "j2"]),
    )

    try:
        template = env.get_template("report.html.j2")
    except Exception as e:
        logger.error(f"Failed to load template: {e}", exc_info=True)
        raise ValueError(f"Cannot load report template: {e}") from e

    template_data = _build_template_data(run_dir_path, run_id, config, scenarios)

    try:
        html = template.render(**template_data)
        logger.info("HTML report generated successfully")
        return html
    except Exception as e:
        logger.error(f"Failed to render template: {e}", exc_info=True)
        raise ValueError(f"Cannot render report template: {e}") from e


def write_report(
    run_dir: str,
    config: PricingConfig,
    scenarios: list[Scenario] | None = None,
) -> str:
    """
    Generate report.html and write it to the run directory.

    The run id is the last component of run_dir.

    Returns:
        Path of the written report
    """
    run_id = Path(run_dir).name
    html = generate_report(run_dir, run_id, config, scenarios)
    return write_report_html(run_dir, html)


def _load_json(path: Path) -> dict | None:
    if not path.exists():
        logger.warning(f"Result file not found: {path}")
        return None
    try:
        with path.open(encoding="utf-8") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Could not read result file {path}: {e}")
        return None


def _build_template_data(
    run_dir: Path,
    run_id: str,
    config: PricingConfig,
    scenarios: list[Scenario] | None,
) -> dict:
    scenarios = scenarios if scenarios is not None else list(config.scenarios)
    run_meta = _load_json(run_dir / get_run_meta_filename()) or {}

    sections = []
    for scenario in scenarios:
        result = _load_json(run_dir / get_scenario_result_filename(scenario.id))
        if result is None:
            result = {"status": "missing", "entries": [], "summary": None}

        screenshot = result.get("screenshot")
        sections.append(
            {
                "id": scenario.id,
                "brand": scenario.brand,
                "product_line": scenario.product_line,
                "provider": scenario.provider,
                "address": scenario.address,
                "tab": scenario.tab,
                "status": result.get("status", "missing"),
                "summary": result.get("summary"),
                "entries": result.get("entries", []),
                "inventory": result.get("inventory", {}),
                "error": result.get("error"),
                "attempts": result.get("attempts", 1),
                "screenshot": Path(screenshot).name if screenshot else None,
            }
        )

    sections.sort(key=lambda s: STATUS_ORDER.get(s["status"], -1))

    counts = {"passed": 0, "failed": 0, "error": 0, "missing": 0}
    for section in sections:
        counts[section["status"]] = counts.get(section["status"], 0) + 1

    return {
        "run_id": run_id,
        "timestamp_utc": run_meta.get("timestamp_utc", ""),
        "environment": run_meta.get("environment", config.run_settings.environment),
        "base_url": run_meta.get("base_url") or config.run_settings.base_url,
        "scenarios": sections,
        "total_scenarios": len(sections),
        "counts": counts,
    }
