"""Tests for the checklist analytics CLI."""

import json
from unittest.mock import patch

import pytest

from src.checklists import cli
from src.checklists.models import ListInstance


LIST_DUMP = {"data": {"listInstances": [
    {
        "id": "clean",
        "listTemplate": {"title": "Cleaning"},
        "displayTimestamp": 2000,
        "incompleteCount": 1,
        "itemResults": [],
    },
    {
        "id": "dfsl",
        "listTemplate": {"title": "DFSL Daypart 3"},
        "displayTimestamp": 1000,
        "incompleteCount": 0,
        "itemResults": [
            {"itemTemplate": {"text": "Chili Temp"}, "resultDouble": 70.5, "completionTimestamp": 1000 + i * 100}
            for i in range(4)
        ],
    },
]}}


@pytest.fixture
def dump_file(tmp_path):
    path = tmp_path / "lists.json"
    path.write_text(json.dumps(LIST_DUMP))
    return path


class TestSummarize:
    def test_summarize_prints_json(self, dump_file, capsys):
        rc = cli.main(["summarize", str(dump_file), "--now", "5000", "--today", "2026-10-19"])

        assert rc == 0
        out = json.loads(capsys.readouterr().out)
        assert [s["id"] for s in out] == ["dfsl", "clean"]
        assert out[0]["integrity_score"] == 0
        assert out[0]["duration"] == "0h 5m"
        assert out[1]["status"] == "In Progress"

    def test_summarize_to_file(self, dump_file, tmp_path):
        output = tmp_path / "out.json"
        rc = cli.main(["summarize", str(dump_file), "--now", "5000", "-o", str(output)])
        assert rc == 0
        assert len(json.loads(output.read_text())) == 2

    def test_missing_file(self, tmp_path, capsys):
        rc = cli.main(["summarize", str(tmp_path / "nope.json")])
        assert rc == 1
        assert "Error" in capsys.readouterr().err


class TestIntegrityCommand:
    def test_scores_list_instance(self, tmp_path, capsys):
        path = tmp_path / "list.json"
        path.write_text(json.dumps(LIST_DUMP["data"]["listInstances"][1]))

        assert cli.main(["integrity", str(path)]) == 0

        out = json.loads(capsys.readouterr().out)
        assert out["name"] == "DFSL Daypart 3"
        assert out["score"] == 0
        assert "Identical Temperatures" in out["issues"]

    def test_exempt_name_override(self, tmp_path, capsys):
        path = tmp_path / "items.json"
        path.write_text(json.dumps(LIST_DUMP["data"]["listInstances"][1]["itemResults"]))

        assert cli.main(["integrity", str(path), "--name", "Equipment Temperature Log"]) == 0
        out = json.loads(capsys.readouterr().out)
        assert out["score"] is None
        assert out["issues"] == []


class TestGrid:
    @patch("src.checklists.cli.JoltClient.fetch_lists_for_location")
    def test_grid_rows_in_location_order(self, mock_fetch, monkeypatch, tmp_path, capsys):
        monkeypatch.setenv("JOLT_PROXY_URL", "https://proxy.example")
        config = tmp_path / "jolt.yaml"
        config.write_text("grid:\n  chunk_size: 2\n  chunk_delay_seconds: 0\n")

        def fake_fetch(location_id, start_ts, end_ts):
            if location_id == "b":
                return [ListInstance(title="DFSL Daypart 5", incomplete_count=0)]
            return []

        mock_fetch.side_effect = fake_fetch

        rc = cli.main([
            "grid", "--date", "2026-10-19", "--config", str(config),
            "--location", "a", "--location", "b", "--location", "c",
        ])

        assert rc == 0
        rows = json.loads(capsys.readouterr().out)
        assert [r["id"] for r in rows] == ["a", "b", "c"]
        assert rows[1]["dp5"]["status"] == "Complete"
        assert rows[0]["dp5"]["status"] == "Missing"

    @patch("src.checklists.cli.JoltClient.fetch_lists_for_location", return_value=[])
    @patch("src.checklists.cli.JoltClient.fetch_locations")
    def test_grid_sorts_locations_with_missing_names(self, mock_locations, mock_fetch, monkeypatch, tmp_path, capsys):
        monkeypatch.setenv("JOLT_PROXY_URL", "https://proxy.example")
        config = tmp_path / "jolt.yaml"
        config.write_text("grid:\n  chunk_delay_seconds: 0\n")
        mock_locations.return_value = [{"id": "b", "name": "Bravo"}, {"id": "n", "name": None}, {"id": "a", "name": "Alpha"}]

        rc = cli.main(["grid", "--date", "2026-10-19", "--config", str(config)])

        assert rc == 0
        rows = json.loads(capsys.readouterr().out)
        assert [r["id"] for r in rows] == ["n", "a", "b"]
        assert rows[0]["name"] == ""

    def test_grid_without_proxy_url(self, monkeypatch, tmp_path, capsys):
        monkeypatch.delenv("JOLT_PROXY_URL", raising=False)
        config = tmp_path / "jolt.yaml"
        config.write_text("endpoint: ''\n")

        rc = cli.main(["grid", "--config", str(config), "--location", "a"])

        assert rc == 1
        assert "JOLT_PROXY_URL" in capsys.readouterr().err


class TestReportCommand:
    def test_report_from_file(self, dump_file, capsys):
        rc = cli.main(["report", "--file", str(dump_file), "--date", "2026-10-19", "--name", "Store 7"])

        assert rc == 0
        out = json.loads(capsys.readouterr().out)
        assert out["location"] == "Store 7"
        assert out["date"] == "10-19-2026"
        critical = out["sections"][0]["rows"][0]
        assert critical["label"] == "Critical Focus Completed"
        assert critical["cells"]["dp3"]["value"] == "Completed"
        assert critical["cells"]["dp1"]["value"] == "-"
        product_labels = [row["label"] for row in out["sections"][2]["rows"]]
        assert product_labels == ["Chili"]

    @patch("src.checklists.cli.JoltClient.fetch_lists_for_location", return_value=[])
    def test_report_fetches_location_day(self, mock_fetch, monkeypatch, tmp_path, capsys):
        monkeypatch.setenv("JOLT_PROXY_URL", "https://proxy.example")

        rc = cli.main(["report", "--location", "loc9", "--date", "2026-10-19", "--config", str(tmp_path / "none.yaml")])

        assert rc == 0
        location_id, start_ts, end_ts = mock_fetch.call_args.args
        assert location_id == "loc9"
        assert end_ts - start_ts == 86399
        assert json.loads(capsys.readouterr().out)["location"] == "loc9"

    def test_bad_date(self, dump_file, capsys):
        assert cli.main(["report", "--file", str(dump_file), "--date", "19/10/2026"]) == 1
        assert "Error" in capsys.readouterr().err


class TestAuditsCommand:
    def test_audits_from_file(self, tmp_path, capsys):
        path = tmp_path / "audits.json"
        path.write_text(json.dumps([
            {"id": "a1", "listTemplate": {"title": "Monthly Safety Audit"}, "displayTimestamp": 100,
             "incompleteCount": 0, "score": 45, "maxPossibleScore": 50},
            {"id": "a2", "listTemplate": {"title": "Safety Committee Agenda"}, "displayTimestamp": 200,
             "score": 3},
            {"id": "x", "listTemplate": {"title": "DFSL Daypart 1"}, "displayTimestamp": 300},
        ]))

        assert cli.main(["audits", "--file", str(path), "--month", "2026-10"]) == 0

        out = json.loads(capsys.readouterr().out)
        assert [a["id"] for a in out] == ["a2", "a1"]
        assert out[0]["pct"] is None
        assert out[1]["pct"] == 90

    def test_bad_month(self, tmp_path, capsys):
        path = tmp_path / "audits.json"
        path.write_text("[]")
        assert cli.main(["audits", "--file", str(path), "--month", "October"]) == 1


def test_month_bounds_cover_whole_month():
    start, end = cli.month_bounds(2026, 2)
    assert end - start == 28 * 86400 - 1


def test_day_bounds_span_one_day():
    from datetime import date
    start, end = cli.day_bounds(date(2026, 10, 19))
    assert end - start == 86399


def test_no_command_prints_help(capsys):
    assert cli.main([]) == 0
    assert "summarize" in capsys.readouterr().out
