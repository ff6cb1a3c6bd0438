"""
Tests for runner module - scenario orchestration.

Browsers are replaced by mocks and pages by in-memory TextTree sources, so
these tests cover:
- Scenario statuses (passed, failed, error) and their result records
- Retries on browser errors only, each attempt in a fresh context
- Concurrent runs writing per-scenario JSON and run_meta.json
- Base URL resolution
"""

import json
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from freezegun import freeze_time
from playwright.async_api import Error as PlaywrightError

from isp_pricing_verifier import runner
from isp_pricing_verifier.config.schema import PricingConfig, RunSettings
from isp_pricing_verifier.content.tree import TextTree, el
from isp_pricing_verifier.exceptions import BrowserError, ContentQueryError, NavigationError
from isp_pricing_verifier.navigation.brands import BrandRegistry
from isp_pricing_verifier.runner import (
    ScenarioResult,
    execute_scenario,
    resolve_base_url,
    run_all,
    run_scenario,
)
from isp_pricing_verifier.verification.models import SessionSummary


def lte_card(label, price):
    return el(
        "div",
        el("div", el("h3", label)),
        el("div", el("span", price)),
        classes="card",
    )


def make_config(tmp_path, **run_settings):
    settings = {"output_dir": str(tmp_path / "output"), "retries": 1}
    settings.update(run_settings)
    return PricingConfig.model_validate(
        {
            "run_settings": settings,
            "scenarios": [
                {
                    "id": "mweb-lte-telkom",
                    "brand": "mweb",
                    "product_line": "lte",
                    "provider": "Telkom",
                    "address": "4 Ocean View Rd",
                    "location_filters": {"primary": "Ocean View", "secondary": "Cape Town"},
                    "tab": "SIM + ROUTER",
                    "expected": [
                        {"package": "40GB", "price": "R199"},
                        {"package": "2TB", "price": "R779"},
                    ],
                },
                {
                    "id": "mweb-lte-vodacom",
                    "brand": "mweb",
                    "product_line": "lte",
                    "provider": "Vodacom",
                    "address": "4 Ocean View Rd",
                    "location_filters": {"primary": "Ocean View", "secondary": "Cape Town"},
                    "expected": [{"package": "40GB", "price": "R199"}],
                },
            ],
        }
    )


def make_sequencer(suggestion="Ocean View Rd, Ocean View, Cape Town"):
    sequencer = MagicMock()
    sequencer.reach_pricing_page = AsyncMock(return_value=suggestion)
    sequencer.capture_snapshot = AsyncMock(side_effect=lambda path: path)
    return sequencer


def make_browser(contexts):
    browser = MagicMock()
    browser.new_context = AsyncMock(side_effect=contexts)
    browser.close = AsyncMock()
    return browser


def make_context():
    context = MagicMock()
    context.new_page = AsyncMock(return_value=MagicMock())
    context.close = AsyncMock()
    return context


@pytest.fixture
def no_backoff(monkeypatch):
    monkeypatch.setattr(runner, "RETRY_MIN_WAIT_SECONDS", 0)
    monkeypatch.setattr(runner, "RETRY_MAX_WAIT_SECONDS", 0)


class TestExecuteScenario:
    """Tests for execute_scenario()."""

    @pytest.mark.asyncio
    async def test_passed(self, tmp_path):
        scenario = make_config(tmp_path).scenarios[0]
        source = TextTree(el("body", lte_card("40GB", "R199"), lte_card("2TB", "R779")))
        sequencer = make_sequencer()
        snapshot = tmp_path / "scenario_mweb-lte-telkom.png"

        result = await execute_scenario(scenario, sequencer, source, snapshot_path=snapshot)

        assert result.status == "passed"
        assert result.summary == SessionSummary(2, 2, [], [])
        assert result.suggestion == "Ocean View Rd, Ocean View, Cape Town"
        assert result.screenshot == str(snapshot)
        assert result.inventory == {"packages": ["40GB", "2TB"], "prices": ["R199", "R779"]}
        assert [e["package"] for e in result.entries] == ["40GB", "2TB"]
        assert result.entries[0]["price"] == "R199"
        assert result.entries[0]["price_found"] is True
        sequencer.reach_pricing_page.assert_awaited_once_with(scenario)

    @pytest.mark.asyncio
    async def test_price_mismatch_fails(self, tmp_path):
        scenario = make_config(tmp_path).scenarios[0]
        source = TextTree(el("body", lte_card("40GB", "R249"), lte_card("2TB", "R779")))

        result = await execute_scenario(scenario, make_sequencer(), source)

        assert result.status == "failed"
        assert result.error_type == "PriceNotFoundError"
        assert result.error == "Expected price R199 for 40GB, but found: R249"
        assert len(result.entries) == 1
        assert result.screenshot is None

    @pytest.mark.asyncio
    async def test_missing_package_fails_after_all_entries(self, tmp_path):
        scenario = make_config(tmp_path).scenarios[0]
        source = TextTree(el("body", lte_card("2TB", "R779")))

        result = await execute_scenario(scenario, make_sequencer(), source)

        assert result.status == "failed"
        assert result.error_type == "SoftFailuresError"
        assert result.summary.found_count == 1
        assert result.summary.soft_failures == ["Expected package 40GB to be found"]
        assert len(result.entries) == 2

    @pytest.mark.asyncio
    async def test_content_query_error_propagates(self, tmp_path):
        scenario = make_config(tmp_path).scenarios[0]

        class StalledTree(TextTree):
            async def find_text(self, text):
                raise ContentQueryError(f"Text search for {text!r} failed: Timeout")

        source = StalledTree(el("body", lte_card("40GB", "R199")))

        with pytest.raises(ContentQueryError, match="Text search for '40GB' failed"):
            await execute_scenario(scenario, make_sequencer(), source)

    @pytest.mark.asyncio
    async def test_navigation_error_propagates(self, tmp_path):
        scenario = make_config(tmp_path).scenarios[0]
        sequencer = make_sequencer()
        sequencer.reach_pricing_page.side_effect = NavigationError("Timed out")

        with pytest.raises(NavigationError):
            await execute_scenario(scenario, sequencer, TextTree(el("body")))


class TestRunScenario:
    """Tests for run_scenario()."""

    @pytest.mark.asyncio
    async def test_retries_browser_errors(self, tmp_path, no_backoff):
        config = make_config(tmp_path)
        scenario = config.scenarios[0]
        contexts = [make_context(), make_context()]
        browser = make_browser(contexts)
        passed = ScenarioResult(scenario.id, scenario.provider, "passed")

        with patch.object(
            runner,
            "execute_scenario",
            AsyncMock(side_effect=[NavigationError("Timed out"), passed]),
        ) as mock_execute:
            result = await run_scenario(browser, scenario, config.run_settings)

        assert result.status == "passed"
        assert result.attempts == 2
        assert mock_execute.await_count == 2
        for context in contexts:
            context.close.assert_awaited_once()
        assert browser.new_context.call_args.kwargs["base_url"] == "https://mweb.co.za/"

    @pytest.mark.asyncio
    async def test_exhausted_retries_become_error(self, tmp_path, no_backoff):
        config = make_config(tmp_path, retries=2)
        scenario = config.scenarios[0]
        browser = make_browser(PlaywrightError("Browser has been closed"))

        result = await run_scenario(browser, scenario, config.run_settings)

        assert result.status == "error"
        assert result.error_type == "BrowserError"
        assert "Could not open a browser context" in result.error
        assert result.attempts == 3
        assert browser.new_context.await_count == 3

    @pytest.mark.asyncio
    async def test_pricing_failure_not_retried(self, tmp_path, no_backoff):
        config = make_config(tmp_path)
        scenario = config.scenarios[0]
        browser = make_browser([make_context(), make_context()])
        failed = ScenarioResult(scenario.id, scenario.provider, "failed", error="mismatch")

        with patch.object(runner, "execute_scenario", AsyncMock(return_value=failed)):
            result = await run_scenario(browser, scenario, config.run_settings)

        assert result.status == "failed"
        assert result.attempts == 1
        assert browser.new_context.await_count == 1

    @pytest.mark.asyncio
    async def test_snapshot_path_in_run_dir(self, tmp_path):
        config = make_config(tmp_path)
        scenario = config.scenarios[0]
        browser = make_browser([make_context()])
        passed = ScenarioResult(scenario.id, scenario.provider, "passed")

        with patch.object(
            runner, "execute_scenario", AsyncMock(return_value=passed)
        ) as mock_execute:
            await run_scenario(browser, scenario, config.run_settings, run_dir=str(tmp_path))

        snapshot = mock_execute.call_args.args[4]
        assert snapshot == Path(tmp_path) / "scenario_mweb-lte-telkom.png"


class TestRunAll:
    """Tests for run_all()."""

    @pytest.fixture
    def fake_playwright(self):
        browser = make_browser([])
        playwright = MagicMock()
        playwright.chromium.launch = AsyncMock(return_value=browser)
        manager = MagicMock()
        manager.__aenter__ = AsyncMock(return_value=playwright)
        manager.__aexit__ = AsyncMock(return_value=False)
        with patch.object(runner, "async_playwright", return_value=manager):
            yield playwright

    @pytest.mark.asyncio
    async def test_writes_results_and_meta(self, tmp_path, fake_playwright):
        config = make_config(tmp_path)
        results = {
            "mweb-lte-telkom": ScenarioResult(
                "mweb-lte-telkom", "Telkom", "passed", summary=SessionSummary(2, 2)
            ),
            "mweb-lte-vodacom": ScenarioResult(
                "mweb-lte-vodacom", "Vodacom", "failed", summary=SessionSummary(0, 1)
            ),
        }
        progress = MagicMock()

        async def fake_run_scenario(browser, scenario, settings, run_dir, run_id):
            return results[scenario.id]

        with patch.object(runner, "run_scenario", side_effect=fake_run_scenario):
            summary = await run_all(config, progress_callback=progress)

        assert summary["run_id"] == Path(summary["output_dir"]).name
        assert summary["passed"] == 1
        assert summary["failed"] == 1
        assert summary["errors"] == 0
        assert [r.scenario_id for r in summary["results"]] == [
            "mweb-lte-telkom",
            "mweb-lte-vodacom",
        ]
        assert progress.call_count == 2
        fake_playwright.chromium.launch.assert_awaited_once_with(headless=True)

        run_dir = Path(summary["output_dir"])
        meta = json.loads((run_dir / "run_meta.json").read_text(encoding="utf-8"))
        assert meta["total_scenarios"] == 2
        assert meta["scenarios"][1]["status"] == "failed"
        scenario_json = json.loads(
            (run_dir / "scenario_mweb-lte-telkom.json").read_text(encoding="utf-8")
        )
        assert scenario_json["status"] == "passed"
        assert scenario_json["timestamp_utc"].endswith("Z")

    @pytest.mark.asyncio
    async def test_crashed_scenario_becomes_error(self, tmp_path, fake_playwright):
        config = make_config(tmp_path)

        async def fake_run_scenario(browser, scenario, settings, run_dir, run_id):
            if scenario.id == "mweb-lte-vodacom":
                raise RuntimeError("unexpected")
            return ScenarioResult(scenario.id, scenario.provider, "passed")

        with patch.object(runner, "run_scenario", side_effect=fake_run_scenario):
            summary = await run_all(config, [config.scenarios[1]])

        assert summary["total_scenarios"] == 1
        assert summary["errors"] == 1
        assert summary["results"][0].error_type == "RuntimeError"
        assert (Path(summary["output_dir"]) / "scenario_mweb-lte-vodacom.json").exists()

    @pytest.mark.asyncio
    async def test_launch_failure(self, tmp_path, fake_playwright):
        fake_playwright.chromium.launch.side_effect = PlaywrightError("Executable doesn't exist")

        with pytest.raises(BrowserError, match="Could not launch chromium"):
            await run_all(make_config(tmp_path))


class TestHelpers:
    """Tests for resolve_base_url() and ScenarioResult."""

    def test_resolve_base_url_environment(self):
        profile = BrandRegistry.get_profile("mweb")

        assert resolve_base_url(RunSettings(environment="dev"), profile) == (
            "https://dev.mwebaws.co.za/"
        )

    def test_resolve_base_url_override(self):
        profile = BrandRegistry.get_profile("mweb")
        settings = RunSettings(base_url="http://localhost:3000/")

        assert resolve_base_url(settings, profile) == "http://localhost:3000/"

    def test_to_row_without_summary(self):
        result = ScenarioResult("mweb-lte-telkom", "Telkom", "error", error="Timed out")

        assert result.to_row() == {
            "scenario_id": "mweb-lte-telkom",
            "provider": "Telkom",
            "found_count": 0,
            "total_count": 0,
            "status": "error",
            "error": "Timed out",
        }
        assert not result.passed

    @freeze_time("2025-06-12 08:00:00")
    def test_to_dict(self):
        result = ScenarioResult(
            "mweb-lte-telkom",
            "Telkom",
            "passed",
            summary=SessionSummary(1, 1),
            duration_seconds=12.34567,
        )

        data = result.to_dict()

        assert data["summary"]["passed"] is True
        assert data["duration_seconds"] == 12.346
        assert data["timestamp_utc"] == "2025-06-12T08:00:00Z"
        assert json.dumps(data)
