import calendar

import pytest

from app.utils.calendar_grid import (
    GRID_SIZE,
    build_month_grid,
    format_date_key,
    is_valid_date_key,
    month_label,
    month_of,
    shift_month,
)


@pytest.mark.parametrize("year", [1999, 2000, 2023, 2024, 2025, 2100])
def test_every_month_has_42_cells_and_true_day_count(year):
    for month in range(12):
        cells = build_month_grid(year, month)
        assert len(cells) == GRID_SIZE

        flags = [cell.is_current_month for cell in cells]
        first = flags.index(True)
        run = flags[first:].index(False) if False in flags[first:] else len(flags) - first
        days_in_month = calendar.monthrange(year, month + 1)[1]
        assert run == days_in_month
        # 当月のマスはひと続き
        assert sum(flags) == days_in_month


def test_leap_february_2024():
    cells = build_month_grid(2024, 1)
    current = [cell for cell in cells if cell.is_current_month]

    assert len(current) == 29
    # 2024-02-01 は木曜日
    assert cells[4].date == "2024-02-01"
    assert [cell.day for cell in cells[:4]] == [28, 29, 30, 31]
    assert current[-1].date == "2024-02-29"


def test_non_leap_february_2025():
    cells = build_month_grid(2025, 1)
    assert sum(cell.is_current_month for cell in cells) == 28


def test_padding_cells_have_no_date_key():
    cells = build_month_grid(2025, 2)
    for cell in cells:
        if cell.is_current_month:
            assert cell.date is not None
        else:
            assert cell.date is None


def test_december_rolls_into_january():
    cells = build_month_grid(2025, 11)
    # 2025-12-01 は月曜、11月は30日まで
    assert cells[0].day == 30 and not cells[0].is_current_month
    assert cells[1].date == "2025-12-01"
    trailing = cells[1 + 31:]
    assert [cell.day for cell in trailing] == list(range(1, 11))


def test_january_pads_from_previous_december():
    cells = build_month_grid(2022, 0)
    # 2022-01-01 は土曜
    assert [cell.day for cell in cells[:6]] == [26, 27, 28, 29, 30, 31]
    assert cells[6].date == "2022-01-01"


def test_today_is_marked():
    cells = build_month_grid(2025, 0, today="2025-01-15")
    marked = [cell.date for cell in cells if cell.is_today]
    assert marked == ["2025-01-15"]


def test_invalid_month_rejected():
    with pytest.raises(ValueError):
        build_month_grid(2025, 12)


def test_month_helpers():
    assert shift_month(2025, 11, 1) == (2026, 0)
    assert shift_month(2025, 0, -1) == (2024, 11)
    assert shift_month(2025, 5, -18) == (2023, 11)
    assert month_of("2024-02-29") == (2024, 1)
    assert month_label(2024, 1) == "February 2024"
    assert format_date_key(2025, 2, 10) == "2025-03-10"


@pytest.mark.parametrize(
    "value, expected",
    [
        ("2024-02-29", True),
        ("2025-02-29", False),
        ("2025-3-10", False),
        ("9999-12-31", True),
        ("", False),
        (None, False),
    ],
)
def test_date_key_validation(value, expected):
    assert is_valid_date_key(value) is expected
