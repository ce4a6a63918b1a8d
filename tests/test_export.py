"""Tests for JSON/CSV export and JSON import parsing."""

import json

import pytest

from habit_diary.engine.export import ExportData, export_to_csv, export_to_json, parse_export
from habit_diary.errors import ImportFormatError

from conftest import day


@pytest.fixture
def data(make_habit, make_entry):
    habits = [
        make_habit("a", name="Walk, outside", unit="days"),
        make_habit("b", name="Read", type="numeric", weekly_goal=70, unit="pages"),
    ]
    entries = [
        make_entry("b", day(1), 12.5, target_at_entry=10),
        make_entry("a", day(1)),
        make_entry("a", day(0)),
        make_entry("ghost", day(0), 3),
    ]
    return habits, entries


def test_csv_export(data):
    habits, entries = data

    lines = export_to_csv(habits, entries).split("\n")

    assert lines == [
        "Date,Habit,Type,Value,Goal,Unit",
        '2024-12-09,"Walk, outside",binary,1,7,days',
        '2024-12-10,"Walk, outside",binary,1,7,days',
        "2024-12-10,Read,numeric,12.5,70,pages",
    ]


def test_csv_export_without_entries(data):
    habits, _ = data
    assert export_to_csv(habits, []) == "Date,Habit,Type,Value,Goal,Unit"


def test_json_export(data, now):
    habits, entries = data

    document = json.loads(export_to_json(habits, entries, now))

    assert document["version"] == 1
    assert document["exportedAt"] == "2024-12-11T12:00:00"
    assert [h["id"] for h in document["habits"]] == ["a", "b"]
    assert document["habits"][1]["weeklyGoal"] == 70
    assert document["entries"][0]["targetAtEntry"] == 10
    assert "targetAtEntry" not in document["entries"][1]


def test_parse_export_reads_exported_document(data, now):
    habits, entries = data

    parsed_habits, parsed_entries = parse_export(export_to_json(habits, entries, now))

    assert parsed_habits == habits
    assert parsed_entries == entries


def test_parse_export_defaults_optional_fields():
    text = json.dumps(
        {
            "habits": [
                {"id": "x", "name": "X", "type": "binary", "weeklyGoal": 5, "createdAt": "2024-12-01T00:00:00Z"}
            ],
            "entries": [{"habitId": "x", "date": "2024-12-02", "value": 1}],
        }
    )

    habits, entries = parse_export(text)

    assert habits[0].unit == ""
    assert entries[0].id == "x_2024-12-02"
    assert entries[0].target_at_entry is None


@pytest.mark.parametrize(
    "text",
    [
        "{not json",
        json.dumps({"habits": []}),
        json.dumps({"habits": [], "entries": [{"habitId": "x", "date": "12/02/2024", "value": 1}]}),
        json.dumps({"habits": [], "entries": [{"habitId": "x", "date": "2024-12-02", "value": -1}]}),
        json.dumps(
            {"habits": [{"id": "x", "name": "X", "type": "daily", "weeklyGoal": 5, "createdAt": "2024-12-01"}], "entries": []}
        ),
    ],
)
def test_parse_export_rejects_invalid_documents(text):
    with pytest.raises(ImportFormatError):
        parse_export(text)


def test_export_document_model(data, now):
    habits, entries = data

    document = ExportData.model_validate_json(export_to_json(habits, entries, now))

    assert document.version == 1
    assert document.exported_at == "2024-12-11T12:00:00"
    assert document.habits[1].weekly_goal == 70
    assert document.entries[0].target_at_entry == 10
