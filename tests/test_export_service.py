import csv
import io
from datetime import datetime, timezone

import pytest

from wasfa.services.dashboard_service import growth_percentage
from wasfa.services.errors import ValidationError
from wasfa.services.export_service import CSV_BOM, generate_csv, generate_json, range_start


def test_csv_has_bom_and_no_trailing_newline():
    content = generate_csv([{"a": 1, "b": "x"}], ["a", "b"])
    assert content.startswith(CSV_BOM)
    assert content[len(CSV_BOM):] == "a,b\n1,x"


def test_csv_quotes_commas_quotes_and_newlines():
    rows = [{"name": 'Say "hi"', "notes": "a,b", "other": "line1\nline2", "missing": None}]
    content = generate_csv(rows, ["name", "notes", "other", "missing"])
    body = content[len(CSV_BOM):]
    assert body == 'name,notes,other,missing\n"Say ""hi""","a,b","line1\nline2",'


def test_csv_parses_back_to_the_same_values():
    rows = [
        {"patient": "أحمد, Jr.", "notes": 'Take "with" food\nTwice', "count": 3, "missing": None},
        {"patient": "Jane Doe", "notes": "", "count": 0, "missing": None},
    ]
    headers = ["patient", "notes", "count", "missing"]
    content = generate_csv(rows, headers)

    parsed = list(csv.reader(io.StringIO(content[len(CSV_BOM):], newline="")))
    assert parsed[0] == headers
    assert parsed[1:] == [
        ["أحمد, Jr.", 'Take "with" food\nTwice', "3", ""],
        ["Jane Doe", "", "0", ""],
    ]


def test_json_is_pretty_printed_and_keeps_unicode():
    content = generate_json([{"name": "أحمد"}])
    assert content == '[\n  {\n    "name": "أحمد"\n  }\n]'


def test_range_start():
    now = datetime(2025, 3, 12, 15, 30, tzinfo=timezone.utc)  # a Wednesday
    assert range_start("all", now) is None
    assert range_start("today", now) == datetime(2025, 3, 12, tzinfo=timezone.utc)
    assert range_start("week", now) == datetime(2025, 3, 9, tzinfo=timezone.utc)  # Sunday
    assert range_start("month", now) == datetime(2025, 3, 1, tzinfo=timezone.utc)
    assert range_start("year", now) == datetime(2025, 1, 1, tzinfo=timezone.utc)
    with pytest.raises(ValidationError):
        range_start("decade", now)


def test_growth_percentage():
    assert growth_percentage(15, 10) == 50
    assert growth_percentage(5, 10) == -50
    assert growth_percentage(3, 0) == 100
    assert growth_percentage(0, 0) == 100
