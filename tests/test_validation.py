from __future__ import annotations

from datetime import date

import pytest

from fclass_core import EngineConfig, ValidationError, normalize_day, validate_day, validate_sort, validate_year
from fclass_core.validation import ValidatedLeg, is_valid_member_name, parse_result_row, shift_day

CONFIG = EngineConfig(min_year=2020, max_year=2030)


def test_validate_day_accepts_calendar_date_in_range():
    assert validate_day("20250615", CONFIG) == "20250615"
    assert validate_day(20240229, CONFIG) == "20240229"


@pytest.mark.parametrize(
    "day, kind",
    [
        ("2025061", "invalid_day_format"),
        ("202506150", "invalid_day_format"),
        ("2025-6-15", "invalid_day_format"),
        ("abcdefgh", "invalid_day_format"),
        ("20250230", "invalid_day_date"),
        ("20231301", "invalid_day_date"),
        ("20190101", "day_out_of_range"),
        ("20310101", "day_out_of_range"),
    ],
)
def test_validate_day_rejects(day, kind):
    with pytest.raises(ValidationError) as exc:
        validate_day(day, CONFIG)
    assert exc.value.kind == kind


def test_validate_day_default_max_year_is_next_year():
    config = EngineConfig(min_year=2020)
    next_year = date.today().year + 1
    assert validate_day(f"{next_year}0101", config) == f"{next_year}0101"
    with pytest.raises(ValidationError):
        validate_day(f"{next_year + 1}0101", config)


def test_normalize_day_returns_none_instead_of_raising():
    assert normalize_day("20250615", CONFIG) == "20250615"
    assert normalize_day("20250230", CONFIG) is None
    assert normalize_day(None, CONFIG) is None


def test_validate_year_bounds():
    assert validate_year("2025", CONFIG) == 2025
    with pytest.raises(ValidationError):
        validate_year(2019, CONFIG)
    with pytest.raises(ValidationError):
        validate_year("next", CONFIG)


def test_shift_day_crosses_month_and_year():
    assert shift_day("20250131", 1) == "20250201"
    assert shift_day("20251231", 1) == "20260101"


def test_parse_result_row_defaults_and_coercion():
    row = parse_result_row(
        {
            "class_id": 3,
            "first_name": "  Jan ",
            "last_name": None,
            "score_1": "150",
            "x_1": None,
            "precision_1": "0,75",
            "score_2": "n/a",
            "precision_2": "",
        }
    )
    assert row.class_id == "3"
    assert row.first_name == "Jan"
    assert row.last_name == ""
    assert row.legs[1].score == 150
    assert row.legs[1].x_count == 0
    assert row.legs[1].precision == 0.75
    # Unparseable numbers become 0, blank precision stays absent
    assert row.legs[2].score == 0
    assert row.legs[2].precision is None
    assert row.legs[3].score == 0
    assert row.legs[3].precision is None


def test_validated_leg_falls_back_per_field():
    leg = ValidatedLeg(score="abc", x_count=" 3 ", precision="nan")
    assert (leg.score, leg.x_count, leg.precision) == (0, 3, None)

    leg = ValidatedLeg(score=149.9, x_count=True, precision=[0.5])
    assert (leg.score, leg.x_count, leg.precision) == (149, 0, None)

    assert ValidatedLeg() == ValidatedLeg(score=None, x_count="", precision="  ")


def test_parse_result_row_zero_precision_is_kept():
    row = parse_result_row({"class_id": "1", "first_name": "A", "precision_1": 0})
    assert row.legs[1].precision == 0.0


def test_validate_sort_falls_back_to_defaults():
    config = EngineConfig(min_year=2020, max_year=2030, default_sort="total", default_direction="desc")
    assert validate_sort("sum_x", "ASC", config=config) == ("sum_x", "asc")
    assert validate_sort("password", "sideways", config=config) == ("total", "desc")
    assert validate_sort(None, None, config=config) == ("total", "desc")


def test_validate_sort_restricts_leg_columns():
    assert validate_sort("score_4", "asc", leg_numbers=(4,), config=CONFIG) == ("score_4", "asc")
    assert validate_sort("score_1", "asc", leg_numbers=(4,), config=CONFIG) == ("rank", "asc")


def test_member_name_pattern():
    assert is_valid_member_name("Jan", "Kowalski", CONFIG)
    assert is_valid_member_name("Łucja", "O'Neil-Żak", CONFIG)
    assert not is_valid_member_name("R2D2", "Robot", CONFIG)
    assert not is_valid_member_name("", "", CONFIG)


def test_config_rejects_inverted_year_range():
    with pytest.raises(ValueError):
        EngineConfig(min_year=2025, max_year=2021)
