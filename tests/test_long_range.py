from __future__ import annotations

import pytest

from fclass_core import (
    CompetitionDay,
    EngineConfig,
    build_long_range_tables,
    long_range_day,
    long_range_event,
    long_range_label,
    with_long_range_days,
)

CONFIG = EngineConfig(min_year=2020, max_year=2030)
CHAMPIONSHIP = CompetitionDay(day="20250630", description="European Championships", is_championship=True)
CUP = CompetitionDay(day="20250401", description="Cup I", is_championship=False)


def _row(first, last, score, x=0, precision=None, class_id="1", standard=(100, 100, 100)):
    row = {
        "class_id": class_id,
        "first_name": first,
        "last_name": last,
        "score_4": score,
        "x_4": x,
        "precision_4": precision,
    }
    for n, value in enumerate(standard, start=1):
        row[f"score_{n}"] = value
    return row


def test_virtual_day_is_next_calendar_day():
    assert long_range_day("20250630") == "20250701"
    virtual = long_range_event(CHAMPIONSHIP, CONFIG)
    assert virtual.day == "20250701"
    assert virtual.is_long_range is True
    assert virtual.source_day == "20250630"


def test_label_depends_on_championship_flag():
    assert long_range_label(True, CONFIG) == "1000m"
    assert long_range_label(False, CONFIG) == "1000y"
    assert long_range_event(CUP, CONFIG).label == "1000y"
    custom = EngineConfig(min_year=2020, max_year=2030, long_range_championship_label="LR-m")
    assert long_range_label(True, custom) == "LR-m"


def test_virtual_event_cannot_be_derived_twice():
    with pytest.raises(ValueError):
        long_range_event(long_range_event(CHAMPIONSHIP, CONFIG), CONFIG)


def test_catalog_gets_virtual_day_for_championships_only():
    catalog = with_long_range_days([CUP, CHAMPIONSHIP], CONFIG)
    assert [(e.day, e.is_long_range) for e in catalog] == [
        ("20250401", False),
        ("20250630", False),
        ("20250701", True),
    ]
    every = with_long_range_days([CUP], CONFIG, championship_only=False)
    assert [e.day for e in every] == ["20250401", "20250402"]


def test_tables_use_only_the_long_range_leg():
    rows = [
        _row("Jan", "Kowalski", 90, 3, 0.8, standard=(150, 150, 150)),
        _row("Anna", "Nowak", 95, 1, None, standard=(0, 0, 0)),
        _row("Ewa", "Adamska", 90, 3, 0.6),
        _row("Piotr", "Zieliński", 0, 0, 0.1),
    ]
    tables = build_long_range_tables(CHAMPIONSHIP, rows, config=CONFIG)
    assert tables.day == "20250701"
    assert tables.is_long_range is True
    assert tables.label == "1000m"
    rows_out = tables.classes["1"].rows
    assert [r.last_name for r in rows_out] == ["Nowak", "Adamska", "Kowalski"]
    assert [r.rank for r in rows_out] == [1, 2, 3]
    assert all(len(r.legs) == 1 and r.legs[0].number == 4 for r in rows_out)
    by_name = {r.last_name: r for r in rows_out}
    # Single leg: the average is that leg's own precision
    assert by_name["Adamska"].avg_precision == 0.6
    assert by_name["Nowak"].avg_precision is None
    assert by_name["Kowalski"].total == 90


def test_sort_columns_restricted_to_long_range_leg():
    rows = [_row("Jan", "Kowalski", 90, 3, 0.8), _row("Anna", "Nowak", 80, 5, 0.5)]
    tables = build_long_range_tables(CHAMPIONSHIP, rows, sort="x_4", direction="desc", config=CONFIG)
    assert tables.sort == "x_4"
    assert [r.last_name for r in tables.classes["1"].rows] == ["Nowak", "Kowalski"]

    fallback = build_long_range_tables(CHAMPIONSHIP, rows, sort="score_1", direction="desc", config=CONFIG)
    assert fallback.sort == "rank"
