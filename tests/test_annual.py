from __future__ import annotations

from fclass_core import CompetitionDay, EngineConfig, build_annual_ranking, with_long_range_days

CONFIG = EngineConfig(min_year=2020, max_year=2030)

CHAMPIONSHIP = CompetitionDay(day="20250601", description="European Championships", is_championship=True)
APRIL = CompetitionDay(day="20250401", description="Cup I", is_championship=False)
MAY = CompetitionDay(day="20250501", description="Cup II", is_championship=False)
JULY = CompetitionDay(day="20250701", description="Cup III", is_championship=False)
EVENTS = [APRIL, MAY, CHAMPIONSHIP, JULY]


def _row(first, last, total, tens=0, class_id="1"):
    return {
        "class_id": class_id,
        "first_name": first,
        "last_name": last,
        "score_1": total,
        "x_1": tens,
    }


def _rows_by_day(entries):
    """entries: {day: [(first, last, total, tens), ...]}"""
    return {day: [_row(*entry) for entry in rows] for day, rows in entries.items()}


def _class_rows(ranking, class_id="1"):
    table = ranking.classes.get(class_id)
    return list(table.rows) if table else []


def test_selection_takes_best_championship_and_two_best_other():
    rows = _rows_by_day(
        {
            "20250401": [("Jan", "Kowalski", 70, 3)],
            "20250501": [("Jan", "Kowalski", 60, 2)],
            "20250601": [("Jan", "Kowalski", 50, 1)],
            "20250701": [("Jan", "Kowalski", 40, 9)],
        }
    )
    ranking = build_annual_ranking(2025, EVENTS, rows, CONFIG)
    (record,) = _class_rows(ranking)
    assert record.qualified is True
    assert record.total == 180
    assert record.tens == 6
    assert record.championship_day == "20250601"
    assert record.other_days == ("20250401", "20250501")
    assert (record.championship_score, record.best_other_score, record.second_other_score) == (50, 70, 60)
    assert record.starts == 4
    july = record.cell("20250701")
    assert july.score == 40
    assert july.selected is False
    assert record.cell("20250401").selected is True
    assert ranking.days == ("20250401", "20250501", "20250601", "20250701")
    assert ranking.total_events == 4
    assert ranking.championship_events == 1


def test_qualification_boundaries():
    rows = _rows_by_day(
        {
            "20250401": [("A", "Exact", 10), ("B", "OneOther", 10), ("C", "NoChamp", 10)],
            "20250501": [("A", "Exact", 10), ("C", "NoChamp", 10)],
            "20250601": [("A", "Exact", 10), ("B", "OneOther", 10)],
            "20250701": [("C", "NoChamp", 10)],
        }
    )
    ranking = build_annual_ranking(2025, EVENTS, rows, CONFIG, include_unqualified=True)
    by_name = {r.last_name: r for r in _class_rows(ranking)}
    assert by_name["Exact"].qualified is True
    assert by_name["Exact"].rank == 1
    assert by_name["OneOther"].qualified is False
    assert by_name["OneOther"].rank is None
    assert by_name["NoChamp"].qualified is False


def test_zero_scores_do_not_count_as_starts():
    rows = _rows_by_day(
        {
            "20250401": [("A", "Zero", 10)],
            "20250501": [("A", "Zero", 0)],
            "20250601": [("A", "Zero", 10)],
        }
    )
    ranking = build_annual_ranking(2025, EVENTS, rows, CONFIG)
    assert _class_rows(ranking) == []


def test_unqualified_participants_are_excluded_by_default():
    rows = _rows_by_day({"20250401": [("A", "Lonely", 100)]})
    ranking = build_annual_ranking(2025, EVENTS, rows, CONFIG)
    assert ranking.classes == {}


def test_equal_other_scores_pick_earliest_day():
    rows = _rows_by_day(
        {
            "20250401": [("A", "Tie", 60)],
            "20250501": [("A", "Tie", 70)],
            "20250601": [("A", "Tie", 50)],
            "20250701": [("A", "Tie", 70)],
        }
    )
    (record,) = _class_rows(build_annual_ranking(2025, EVENTS, rows, CONFIG))
    assert record.other_days == ("20250501", "20250701")
    assert record.cell("20250401").selected is False


def test_tie_break_chain_and_shared_rank():
    rows = _rows_by_day(
        {
            # Champ: higher championship score wins at equal total and tens
            "20250401": [("A", "Champ", 60), ("B", "Other", 70), ("C", "Twin", 60), ("D", "Twin2", 60)],
            "20250501": [("A", "Champ", 60), ("B", "Other", 60), ("C", "Twin", 60), ("D", "Twin2", 60)],
            "20250601": [("A", "Champ", 60), ("B", "Other", 50), ("C", "Twin", 50), ("D", "Twin2", 50)],
        }
    )
    ranking = build_annual_ranking(2025, EVENTS, rows, CONFIG)
    ordered = [(r.last_name, r.total, r.rank) for r in _class_rows(ranking)]
    assert ordered == [
        ("Champ", 180, 1),
        ("Other", 180, 2),
        ("Twin", 170, 3),
        ("Twin2", 170, 3),
    ]


def test_more_starts_break_tie():
    rows = _rows_by_day(
        {
            "20250401": [("A", "Busy", 60), ("B", "Idle", 60)],
            "20250501": [("A", "Busy", 60), ("B", "Idle", 60)],
            "20250601": [("A", "Busy", 60), ("B", "Idle", 60)],
            "20250701": [("A", "Busy", 10)],
        }
    )
    ranking = build_annual_ranking(2025, EVENTS, rows, CONFIG)
    assert [(r.last_name, r.rank) for r in _class_rows(ranking)] == [("Busy", 1), ("Idle", 2)]


def test_tens_level_can_be_disabled():
    rows = _rows_by_day(
        {
            "20250401": [("A", "Alpha", 60, 0), ("B", "Beta", 60, 9)],
            "20250501": [("A", "Alpha", 60, 0), ("B", "Beta", 60, 9)],
            "20250601": [("A", "Alpha", 60, 0), ("B", "Beta", 60, 9)],
        }
    )
    with_tens = build_annual_ranking(2025, EVENTS, rows, CONFIG)
    assert [(r.last_name, r.rank) for r in _class_rows(with_tens)] == [("Beta", 1), ("Alpha", 2)]

    config = EngineConfig(min_year=2020, max_year=2030, track_tens=False)
    without_tens = build_annual_ranking(2025, EVENTS, rows, config)
    assert [(r.last_name, r.rank) for r in _class_rows(without_tens)] == [("Alpha", 1), ("Beta", 1)]


def test_configurable_minimums():
    config = EngineConfig(min_year=2020, max_year=2030, min_championship_events=0, min_other_events=1)
    rows = _rows_by_day({"20250401": [("A", "Solo", 80)]})
    (record,) = _class_rows(build_annual_ranking(2025, EVENTS, rows, config))
    assert record.qualified is True
    assert record.championship_day is None
    assert record.total == 80


def test_classes_are_ranked_separately():
    rows = {
        "20250401": [_row("A", "One", 60, class_id="1"), _row("A", "One", 90, class_id="2")],
        "20250501": [_row("A", "One", 60, class_id="1"), _row("A", "One", 90, class_id="2")],
        "20250601": [_row("A", "One", 60, class_id="1")],
    }
    ranking = build_annual_ranking(2025, EVENTS, rows, CONFIG)
    assert list(ranking.classes) == ["1"]


def test_long_range_days_never_count():
    catalog = with_long_range_days(EVENTS, CONFIG)
    assert any(e.is_long_range for e in catalog)
    rows = _rows_by_day(
        {
            "20250401": [("A", "Shooter", 60)],
            "20250501": [("A", "Shooter", 60)],
            "20250601": [("A", "Shooter", 60)],
            # Virtual Long-Range day of the championship
            "20250602": [("A", "Shooter", 500)],
        }
    )
    ranking = build_annual_ranking(2025, catalog, rows, CONFIG)
    (record,) = _class_rows(ranking)
    assert record.total == 180
    assert "20250602" not in ranking.days
    assert ranking.total_events == 4


def test_repeated_event_day_counts_once():
    rows = _rows_by_day(
        {
            "20250401": [("Jan", "Kowalski", 50, 0)],
            "20250601": [("Jan", "Kowalski", 50, 0)],
        }
    )
    ranking = build_annual_ranking(2025, [APRIL, APRIL, CHAMPIONSHIP], rows, CONFIG)
    assert ranking.days == ("20250401", "20250601")
    assert ranking.total_events == 2
    assert _class_rows(ranking) == []

    ranking = build_annual_ranking(2025, [APRIL, APRIL, CHAMPIONSHIP], rows, CONFIG, include_unqualified=True)
    (record,) = _class_rows(ranking)
    assert record.qualified is False
    assert record.other_starts == 1
    assert record.starts == 2
