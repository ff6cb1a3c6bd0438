"""
File writing utilities for isp-pricing-verifier.

Handles all file I/O for run artifacts: the run directory, JSON results and
the HTML report. Snapshots are written by the browser itself; this module
only decides where they go.

Key features:
- UTF-8 encoding for all text files (package labels carry arrows)
- Pretty-printed JSON (indent=2)
- OSError/PermissionError re-raised with an actionable message

Example:
    >>> run_dir = create_run_directory("./output", "2025-06-12T08-00-00Z")
    >>> write_scenario_result(run_dir, "mweb-lte-telkom", {...})
    >>> write_run_meta(run_dir, {"run_id": "...", "passed": 3})
"""

import json
import logging
import os
from pathlib import Path

from .layout import (
    get_report_filename,
    get_run_directory,
    get_run_meta_filename,
    get_scenario_result_filename,
    get_screenshot_filename,
    get_smoke_result_filename,
)

logger = logging.getLogger(__name__)


def create_run_directory(output_dir: str, run_id: str) -> str:
    """
    Create run output directory (parents included, idempotent).

    Returns:
        Full path to created run directory

    Raises:
        PermissionError: If insufficient permissions to create directory
        OSError: If directory cannot be created (disk full, bad path)
    """
    run_dir = get_run_directory(output_dir, run_id)
    run_dir_path = Path(run_dir)

    try:
        run_dir_path.mkdir(parents=True, exist_ok=True)
        logger.info(f"Created run directory: {run_dir}")
        return run_dir
    except PermissionError as e:
        logger.error(f"Permission denied creating directory: {run_dir}", exc_info=True)
        raise PermissionError(
            f"Cannot create run directory '{run_dir}': Permission denied. "
            f"Check directory permissions."
        ) from e
    except OSError as e:
        logger.error(f"Failed to create directory: {run_dir}", exc_info=True)
        raise OSError(
            f"Cannot create run directory '{run_dir}': {e}. "
            f"Check disk space and permissions."
        ) from e


def write_json(filepath: str, data: dict | list) -> None:
    """
    Write data to a JSON file with UTF-8 encoding.

    Raises:
        OSError: If file cannot be written (permissions, disk full)
        TypeError: If data is not JSON-serializable
    """
    try:
        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
            f.write("\n")
        logger.debug(f"Wrote JSON file: {filepath}")
    except TypeError as e:
        logger.error(f"Cannot serialize data to JSON: {e}", exc_info=True)
        raise TypeError(
            f"Cannot write JSON to '{filepath}': Data is not JSON-serializable. {e}"
        ) from e
    except OSError as e:
        logger.error(f"Failed to write JSON file: {filepath}", exc_info=True)
        raise OSError(
            f"Cannot write JSON file '{filepath}': {e}. "
            f"Check disk space and permissions."
        ) from e


def write_scenario_result(run_dir: str, scenario_id: str, data: dict) -> str:
    """
    Write a scenario's result JSON and return its path.

    Example:
        >>> write_scenario_result(run_dir, "mweb-fibre-zoom", {
        ...     "status": "failed",
        ...     "summary": {"found_count": 5, "total_count": 6, ...},
        ...     "entries": [...],
        ... })
    """
    filepath = os.path.join(run_dir, get_scenario_result_filename(scenario_id))
    write_json(filepath, data)
    logger.info(f"Wrote scenario result: scenario={scenario_id}, status={data.get('status')}")
    return filepath


def write_smoke_result(run_dir: str, brand_id: str, data: dict) -> str:
    """Write a brand's smoke check results and return the path."""
    filepath = os.path.join(run_dir, get_smoke_result_filename(brand_id))
    write_json(filepath, data)
    logger.info(f"Wrote smoke results: brand={brand_id}")
    return filepath


def screenshot_path(run_dir: str, scenario_id: str) -> Path:
    """Where the browser should save a scenario's snapshot."""
    return Path(run_dir) / get_screenshot_filename(scenario_id)


def write_run_meta(run_dir: str, meta: dict) -> None:
    """
    Write run_meta.json to the run directory.

    Example:
        >>> write_run_meta(run_dir, {
        ...     "run_id": "2025-06-12T08-00-00Z",
        ...     "environment": "prod",
        ...     "total_scenarios": 3,
        ...     "passed": 2,
        ...     "failed": 1,
        ...     "errors": 0,
        ... })
    """
    filepath = os.path.join(run_dir, get_run_meta_filename())
    write_json(filepath, meta)
    logger.info(f"Wrote run metadata: {filepath}")


def write_report_html(run_dir: str, html: str) -> str:
    """
    Write report.html to the run directory and return its path.

    The HTML must already be escaped (the generator uses Jinja2 autoescaping).

    Raises:
        OSError: If file cannot be written
    """
    filepath = os.path.join(run_dir, get_report_filename())

    try:
        with open(filepath, "w", encoding="utf-8") as f:
            f.write(html)
        logger.info(f"Wrote HTML report: {filepath}")
        return filepath
    except OSError as e:
        logger.error(f"Failed to write HTML report: {filepath}", exc_info=True)
        raise OSError(
            f"Cannot write HTML report '{filepath}': {e}. "
            f"Check disk space and permissions."
        ) from e
