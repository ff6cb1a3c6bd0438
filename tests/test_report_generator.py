"""
Tests for report.generator module - HTML report rendering.

Tests cover:
- Rendering scenario results from a run directory
- Scenarios without a result file shown as "missing"
- Ordering (errors and failures first) and status counts
- HTML escaping of page texts
- write_report() output path
"""

import json
from pathlib import Path

import pytest

from isp_pricing_verifier.config.schema import PricingConfig
from isp_pricing_verifier.report.generator import generate_report, write_report

RUN_ID = "2025-06-12T08-00-00Z"


@pytest.fixture
def config():
    def scenario(scenario_id, provider, expected, **extra):
        data = {
            "id": scenario_id,
            "brand": "mweb",
            "product_line": "fibre",
            "provider": provider,
            "address": "10 Jacob Mare Ave",
            "location_filters": {"primary": "Jacob Mare", "secondary": "Monument"},
            "expected": expected,
        }
        data.update(extra)
        return data

    return PricingConfig.model_validate(
        {
            "run_settings": {"environment": "dev"},
            "scenarios": [
                scenario(
                    "mweb-fibre-evotel",
                    "Evotel",
                    [{"package": "20↑20Mbps", "deal_price": "R559pm", "original_price": "R659pm"}],
                ),
                scenario(
                    "mweb-lte-telkom",
                    "Telkom",
                    [{"package": "40GB", "price": "R199"}],
                    product_line="lte",
                    tab="SIM + ROUTER",
                ),
                scenario("mweb-fibre-zoom", "Zoom", [{"package": "1Gbps", "price": "R1209pm"}]),
            ],
        }
    )


@pytest.fixture
def run_dir(tmp_path):
    run_dir = tmp_path / RUN_ID
    run_dir.mkdir()

    def write(name, data):
        (run_dir / name).write_text(json.dumps(data), encoding="utf-8")

    write(
        "run_meta.json",
        {"run_id": RUN_ID, "timestamp_utc": "2025-06-12T08:00:00Z", "environment": "dev"},
    )
    write(
        "scenario_mweb-fibre-evotel.json",
        {
            "status": "passed",
            "summary": {"found_count": 1, "total_count": 1},
            "entries": [
                {
                    "package": "20↑20Mbps",
                    "description": None,
                    "deal_price": "R559pm",
                    "original_price": "R659pm",
                    "package_found": True,
                    "price_found": True,
                    "original_price_found": True,
                    "strikethrough_confirmed": True,
                    "candidate_prices": [],
                    "strategy": "exact",
                    "search_term": "20↑20Mbps",
                    "matched_price": "R559pm",
                }
            ],
            "inventory": {"packages": ["20↑20Mbps"], "prices": ["R559pm", "R659pm"]},
            "screenshot": str(run_dir / "scenario_mweb-fibre-evotel.png"),
            "attempts": 1,
        },
    )
    write(
        "scenario_mweb-lte-telkom.json",
        {
            "status": "failed",
            "summary": {"found_count": 1, "total_count": 1},
            "entries": [
                {
                    "package": "40GB",
                    "description": "<b>Uncapped</b>",
                    "price": "R199",
                    "package_found": True,
                    "price_found": False,
                    "original_price_found": None,
                    "strikethrough_confirmed": None,
                    "candidate_prices": ["R249", "R299"],
                    "strategy": "exact",
                    "search_term": "40GB",
                    "matched_price": None,
                }
            ],
            "error": "Expected price R199 for 40GB, but found: R249, R299",
            "attempts": 2,
        },
    )
    return run_dir


class TestGenerateReport:
    """Tests for generate_report()."""

    def test_renders_scenarios(self, run_dir, config):
        html = generate_report(str(run_dir), RUN_ID, config)

        assert f"Run {RUN_ID}" in html
        assert "2025-06-12T08:00:00Z" in html
        assert "Environment: dev" in html
        assert "20↑20Mbps" in html
        assert "R249, R299" in html
        assert "2 attempts" in html
        assert 'src="scenario_mweb-fibre-evotel.png"' in html

    def test_missing_result_file(self, run_dir, config):
        html = generate_report(str(run_dir), RUN_ID, config)

        assert 'id="mweb-fibre-zoom"' in html
        assert '<span class="badge missing">missing</span>' in html

    def test_failures_listed_first(self, run_dir, config):
        html = generate_report(str(run_dir), RUN_ID, config)

        missing = html.index('id="mweb-fibre-zoom"')
        failed = html.index('id="mweb-lte-telkom"')
        passed = html.index('id="mweb-fibre-evotel"')
        assert missing < failed < passed

    def test_escapes_page_text(self, run_dir, config):
        html = generate_report(str(run_dir), RUN_ID, config)

        assert "<b>Uncapped</b>" not in html
        assert "&lt;b&gt;Uncapped&lt;/b&gt;" in html

    def test_subset_of_scenarios(self, run_dir, config):
        html = generate_report(str(run_dir), RUN_ID, config, [config.scenarios[0]])

        assert 'id="mweb-fibre-evotel"' in html
        assert 'id="mweb-lte-telkom"' not in html

    def test_corrupt_result_file(self, run_dir, config):
        (run_dir / "scenario_mweb-fibre-evotel.json").write_text("{", encoding="utf-8")

        html = generate_report(str(run_dir), RUN_ID, config)

        assert html.count('<span class="badge missing">missing</span>') == 2

    def test_missing_run_directory(self, tmp_path, config):
        with pytest.raises(FileNotFoundError, match="Run directory not found"):
            generate_report(str(tmp_path / "nope"), RUN_ID, config)


class TestWriteReport:
    """Tests for write_report()."""

    def test_writes_report_html(self, run_dir, config):
        path = write_report(str(run_dir), config)

        assert Path(path) == run_dir / "report.html"
        assert RUN_ID in Path(path).read_text(encoding="utf-8")
