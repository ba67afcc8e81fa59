"""
CLI tests through Typer's CliRunner.
"""

import json

from typer.testing import CliRunner

from obsplanner.cli.main import app, router

runner = CliRunner()

CSV = """Id,ChannelName,Title,Date,Tx Start Time,Tx End Time
1,DX01,Men's Final,06/02/2026,10:00,12:00
2,DX02,Heat 1,06/02/2026,14:00,15:00
"""


def test_registered_groups():
    assert router.list_registered_groups() == ["events", "resource", "timeline", "db"]


class TestEventsCommands:
    def test_ingest_and_dates(self, tmp_path, events_path):
        feed = tmp_path / "feed.csv"
        feed.write_text(CSV, encoding="utf-8")

        result = runner.invoke(app, ["events", "ingest", str(feed), "--events-path", str(events_path)])
        assert result.exit_code == 0, result.output
        assert "Ingested 2 events" in result.output

        result = runner.invoke(app, ["events", "dates", "--events-path", str(events_path), "--json"])
        assert result.exit_code == 0
        assert json.loads(result.stdout) == {"status": "ok", "dates": ["2026-02-06"]}

    def test_ingest_missing_file_json(self, tmp_path, events_path):
        result = runner.invoke(
            app, ["events", "ingest", str(tmp_path / "nope.csv"), "--events-path", str(events_path), "--json"]
        )
        assert result.exit_code == 1
        payload = json.loads(result.stdout)
        assert payload["status"] == "error"
        assert payload["code"] == "NOT_FOUND"

    def test_dates_when_empty(self, events_path):
        result = runner.invoke(app, ["events", "dates", "--events-path", str(events_path)])
        assert result.exit_code == 0
        assert "No events stored" in result.output


class TestResourceCommands:
    def test_add_and_list(self):
        result = runner.invoke(app, ["resource", "add", "encoders", "TX 28"])
        assert result.exit_code == 0, result.output
        assert "Added encoder: TX 28" in result.output

        result = runner.invoke(app, ["resource", "list", "encoders", "--json"])
        payload = json.loads(result.stdout)
        assert payload["total"] == 1
        assert payload["encoders"][0]["name"] == "TX 28"

    def test_duplicate_add_fails(self):
        runner.invoke(app, ["resource", "add", "booths", "VT 51"])
        result = runner.invoke(app, ["resource", "add", "booths", "vt 51"])
        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_invalid_type_json(self):
        result = runner.invoke(app, ["resource", "list", "cameras", "--json"])
        assert result.exit_code == 1
        assert json.loads(result.stdout)["code"] == "VALIDATION_ERROR"

    def test_seed(self):
        result = runner.invoke(app, ["resource", "seed"])
        assert result.exit_code == 0
        assert "Seeded 27 encoders and 12 booths" in result.output


class TestTimelineCommands:
    def test_show_obs(self, tmp_path, events_path):
        feed = tmp_path / "feed.csv"
        feed.write_text(CSV, encoding="utf-8")
        runner.invoke(app, ["events", "ingest", str(feed), "--events-path", str(events_path)])

        result = runner.invoke(
            app, ["timeline", "show", "obs", "--date", "2026-02-06", "--events-path", str(events_path)]
        )
        assert result.exit_code == 0, result.output
        assert "Window: 2026-02-06T01:00:00.000Z -> 2026-02-07T01:00:00.000Z (24h)" in result.output
        assert "[DX01]" in result.output
        assert "Men's Final" in result.output

    def test_show_planning_json(self):
        runner.invoke(app, ["resource", "add", "encoders", "TX 1"])
        result = runner.invoke(app, ["timeline", "show", "planning", "--date", "2026-02-06", "--zoom", "48", "--json"])
        assert result.exit_code == 0, result.output
        timeline = json.loads(result.stdout)["timeline"]
        assert timeline["daySplitPercent"] == 50.0
        assert [lane["key"] for lane in timeline["lanes"]] == ["On Air", "TX 1"]

    def test_unknown_kind(self):
        result = runner.invoke(app, ["timeline", "show", "cbc", "--date", "2026-02-06"])
        assert result.exit_code == 1

    def test_bad_zoom(self, events_path):
        result = runner.invoke(
            app, ["timeline", "show", "obs", "--date", "2026-02-06", "--zoom", "30", "--events-path", str(events_path)]
        )
        assert result.exit_code == 1
        assert "Invalid zoom" in result.output


def test_db_init():
    result = runner.invoke(app, ["db", "init"])
    assert result.exit_code == 0
    assert "Database ready" in result.output
