"""Tests for the daily food safety report."""

from datetime import date, datetime, timedelta, timezone

import pytest

from src.checklists.models import ListInstance
from src.checklists.report import (
    BLOCKED_CELL,
    build_daypart_report,
    has_data,
    report_bucket,
    select_daypart_lists,
)
from src.checklists.traversal import flatten_with_clean_titles

from builders import item


DAY = date(2026, 10, 19)


def midnight_ts(offset_days=0):
    d = DAY + timedelta(days=offset_days)
    return datetime(d.year, d.month, d.day, tzinfo=timezone.utc).timestamp()


@pytest.fixture
def store_lists():
    return [
        ListInstance(id="clean", title="Cleaning", item_results=[item("Eggs cracked", value="no")]),
        ListInstance(id="dp1", title="DFSL Daypart 1", incomplete_count=0, item_results=[
            item("Sanitizer Strength", val=1),
            item("Sanitizer Exp. Date", val=midnight_ts(-1)),
            item("Breakfast", sub=[item("### Eggs *** Min: 160", val=165.5, peripheral="TEMPERATURE_PROBE")]),
            item("Walk-in Cooler", val=38.2, source="sensor"),
        ]),
        ListInstance(id="dp3", title="Food Safety Daypart 3", incomplete_count=2, item_results=[
            item("Chili Temp", val=150, peripheral="TEMPERATURE_PROBE"),
            item("Walk-in Cooler", na=True),
        ]),
    ]


def rows_by_label(report):
    return {row.label: row.cells for section in report.sections for row in section.rows}


class TestListSelection:
    @pytest.mark.parametrize("title,bucket", [
        ("DFSL Daypart 1", "dp1"),
        ("FSL Daypart 3", "dp3"),
        ("Food Safety - Daypart 5", "dp5"),
        ("Daypart 1 Cleaning", None),
        ("DFSL Daypart 2", None),
    ])
    def test_report_bucket(self, title, bucket):
        assert report_bucket(title) == bucket

    def test_later_list_replaces_earlier(self):
        lists = select_daypart_lists([
            ListInstance(id="first", title="DFSL Daypart 1"),
            ListInstance(id="second", title="DFSL Daypart 1"),
        ])
        assert lists["dp1"].id == "second"
        assert lists["dp3"] is None and lists["dp5"] is None

    def test_has_data_across_dayparts(self, store_lists):
        flats = {
            "dp1": flatten_with_clean_titles(store_lists[1]),
            "dp3": flatten_with_clean_titles(store_lists[2]),
            "dp5": [],
        }
        assert has_data(flats, ["chili"])
        assert has_data(flats, ["EGG"])
        assert not has_data(flats, ["Nugget"])


class TestDaypartReport:
    def test_header_and_sections(self, store_lists):
        report = build_daypart_report(store_lists, DAY, "Store 7", tz=timezone.utc)

        assert report.location == "Store 7"
        assert report.date == "10-19-2026"
        assert [s.title for s in report.sections] == [
            "CRITICAL DAILY FOCUS",
            "BREAKFAST PRODUCTS (DP1 Only)",
            "PRODUCT TEMPERATURES",
            "EQUIPMENT TEMPERATURES",
        ]

    def test_critical_focus_rows_always_present(self, store_lists):
        rows = rows_by_label(build_daypart_report(store_lists, DAY, tz=timezone.utc))

        completed = rows["Critical Focus Completed"]
        assert completed["dp1"]["value"] == "Completed"
        assert completed["dp3"]["value"] == "In Progress"
        assert completed["dp5"] == BLOCKED_CELL

        assert rows["Sanitizer Strength"]["dp1"] == {
            "value": "Within Range", "style": "cell-manual", "provenance": "manual",
        }
        assert rows["Sanitizer Strength"]["dp3"]["value"] == "-"
        assert rows["Sanitizer Exp. Date"]["dp1"] == {
            "value": "10-18-2026", "style": "cell-expired", "provenance": None,
        }
        assert rows["Probe Calibration"]["dp1"]["value"] == "-"

    def test_only_answered_rows_listed(self, store_lists):
        rows = rows_by_label(build_daypart_report(store_lists, DAY, tz=timezone.utc))

        assert "Eggs" in rows
        assert "Chili" in rows
        assert "Walk-in Cooler" in rows
        assert "Chicken Nuggets" not in rows
        assert "Walk-in Freezer" not in rows
        assert "Chili Meat" not in rows

    def test_blocked_dayparts_per_section(self, store_lists):
        rows = rows_by_label(build_daypart_report(store_lists, DAY, tz=timezone.utc))

        eggs = rows["Eggs"]
        assert eggs["dp1"] == {"value": "165.5", "style": "", "provenance": "probe"}
        assert eggs["dp3"] == BLOCKED_CELL and eggs["dp5"] == BLOCKED_CELL

        chili = rows["Chili"]
        assert chili["dp1"] == BLOCKED_CELL
        assert chili["dp3"] == {"value": 150, "style": "", "provenance": "probe"}
        assert chili["dp5"]["value"] == "-"

        cooler = rows["Walk-in Cooler"]
        assert cooler["dp1"] == {"value": "38.2", "style": "", "provenance": "sensor"}
        assert cooler["dp3"] == {"value": "N/A", "style": "cell-na", "provenance": None}
        assert cooler["dp5"]["value"] == "-"

    def test_no_lists(self):
        report = build_daypart_report([], DAY)
        rows = rows_by_label(report)

        assert rows["Critical Focus Completed"]["dp1"]["value"] == "-"
        assert set(rows) == {
            "Critical Focus Completed", "Sanitizer Strength", "Sanitizer Exp. Date", "Probe Calibration",
        }
        assert report.to_dict()["sections"][1] == {"title": "BREAKFAST PRODUCTS (DP1 Only)", "rows": []}
