"""
File naming conventions and path utilities for isp-pricing-verifier.

Output structure:
    output/
        {run_id}/
            run_meta.json
            report.html
            scenario_{id}.json
            scenario_{id}.png
            smoke_{brand}.json

Names are deterministic (the run id carries the timestamp) and scenario ids
are validated slugs, so every path is filesystem-safe.

Example:
    >>> get_run_directory("./output", "2025-06-12T08-00-00Z")
    './output/2025-06-12T08-00-00Z'
    >>> get_scenario_result_filename("mweb-lte-telkom")
    'scenario_mweb-lte-telkom.json'
"""

import os


def get_run_directory(output_dir: str, run_id: str) -> str:
    """
    Get path to run output directory.

    Does NOT create the directory; use storage.writer.create_run_directory().

    Example:
        >>> get_run_directory("/var/data", "test-run")
        '/var/data/test-run'
    """
    return os.path.join(output_dir, run_id)


def get_scenario_result_filename(scenario_id: str) -> str:
    """
    Filename of a scenario's result JSON.

    The file holds the scenario status, its SessionSummary and one outcome
    per expected entry.
    """
    return f"scenario_{scenario_id}.json"


def get_screenshot_filename(scenario_id: str) -> str:
    """Filename of the full-page snapshot of a scenario's plan page."""
    return f"scenario_{scenario_id}.png"


def get_smoke_result_filename(brand_id: str) -> str:
    """
    Filename of a brand's homepage smoke check results.

    Example:
        >>> get_smoke_result_filename("mweb")
        'smoke_mweb.json'
    """
    return f"smoke_{brand_id}.json"


def get_run_meta_filename() -> str:
    """
    Filename of the run metadata JSON (always "run_meta.json").

    Run metadata is the entry point for programmatic access to a run: run
    id, environment, timing and pass/fail counts.
    """
    return "run_meta.json"


def get_report_filename() -> str:
    """Filename of the HTML report (always "report.html")."""
    return "report.html"
