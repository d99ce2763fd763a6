"""Tests for the scout CLI commands."""

import json

import pytest
from typer.testing import CliRunner

from cli.main import app
from scout.discovery.candidates import CandidateRef
from scout.errors import RunStartupError
from scout.pipeline import RunReport
from scout.records import build_record
from scout.scraper.models import ExtractionAttemptResult, ExtractionMethod

runner = CliRunner()

AID = "0123abcd-4567-89ef"
URL = f"https://claude.ai/public/artifacts/{AID}"


def _report(*urls: str) -> RunReport:
    report = RunReport(found=len(urls))
    for url in urls:
        cand = CandidateRef(id=url.rsplit("/", 1)[1], source_url=url)
        attempt = ExtractionAttemptResult.ok(ExtractionMethod.API, "<svg></svg>")
        report.records.append(build_record(cand, attempt))
        report.scraped += 1
    return report


@pytest.fixture
def out_dir(tmp_path, monkeypatch):
    monkeypatch.setattr("cli.main.settings.output_dir", tmp_path)
    monkeypatch.setattr(
        "cli.main.check_runtime", lambda headless: {"browser": True, "network": True}
    )
    return tmp_path


def test_run_writes_dataset_and_feed(out_dir, monkeypatch):
    monkeypatch.setattr("cli.main.run_scrape", lambda *a, **kw: _report(URL))
    result = runner.invoke(app, ["run", "--output-dir", str(out_dir)])

    assert result.exit_code == 0
    dataset = json.loads((out_dir / "scraped_artifacts.json").read_text())
    feed = json.loads((out_dir / "feed_data.json").read_text())
    assert dataset["totalArtifacts"] == 1
    assert dataset["artifacts"][0]["id"] == AID
    assert feed[0]["artifactId"] == AID


def test_run_update_only_merges_existing(out_dir, monkeypatch):
    old = {"id": "feedface00", "url": "https://claude.ai/public/artifacts/feedface00"}
    (out_dir / "scraped_artifacts.json").write_text(json.dumps({"artifacts": [old]}))

    captured = {}

    def fake_run(depth, **kwargs):
        captured.update(kwargs)
        return _report(URL)

    monkeypatch.setattr("cli.main.run_scrape", fake_run)
    result = runner.invoke(app, ["run", "--update-only", "--output-dir", str(out_dir)])

    assert result.exit_code == 0
    assert captured["update_only"] is True
    assert captured["existing_urls"] == {old["url"]}
    dataset = json.loads((out_dir / "scraped_artifacts.json").read_text())
    assert [a["id"] for a in dataset["artifacts"]] == ["feedface00", AID]


def test_run_update_only_nothing_new(out_dir, monkeypatch):
    monkeypatch.setattr("cli.main.run_scrape", lambda *a, **kw: RunReport())
    result = runner.invoke(app, ["run", "--update-only", "--output-dir", str(out_dir)])

    assert result.exit_code == 0
    assert "up to date" in result.stdout
    assert not (out_dir / "scraped_artifacts.json").exists()


def test_run_aborts_when_nothing_reachable(out_dir, monkeypatch):
    def unavailable(headless):
        raise RunStartupError("no browser and no network")

    monkeypatch.setattr("cli.main.check_runtime", unavailable)
    monkeypatch.setattr("cli.main.run_scrape", lambda *a, **kw: pytest.fail("should not run"))
    result = runner.invoke(app, ["run", "--output-dir", str(out_dir)])

    assert result.exit_code == 1


def test_smoke_command_writes_records(out_dir, monkeypatch):
    monkeypatch.setattr("cli.main.run_scrape", lambda depth, limit: _report(URL))
    output = out_dir / "test_result.json"
    result = runner.invoke(app, ["test", "--output", str(output)])

    assert result.exit_code == 0
    records = json.loads(output.read_text())
    assert records[0]["contentType"] == "svg"


def test_classify_command(tmp_path):
    source = tmp_path / "widget.jsx"
    source.write_text("export default function App() { return null }")
    result = runner.invoke(app, ["classify", str(source)])

    assert result.exit_code == 0
    assert result.stdout.strip() == "react\tjsx"


def test_check_reports_status(monkeypatch):
    monkeypatch.setattr(
        "cli.main.check_runtime", lambda headless: {"browser": False, "network": True}
    )
    result = runner.invoke(app, ["check"])

    assert result.exit_code == 0
    assert "unavailable" in result.stdout


def test_check_fails_when_nothing_available(monkeypatch):
    def unavailable(headless):
        raise RunStartupError("nothing")

    monkeypatch.setattr("cli.main.check_runtime", unavailable)
    result = runner.invoke(app, ["check"])
    assert result.exit_code == 1
