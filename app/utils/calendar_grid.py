# digitals-calendar/app/utils/calendar_grid.py
"""
月表示のグリッド生成（6週 × 7日 = 42マス、日曜始まり）
"""

import calendar
import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import List, Optional, Tuple

GRID_SIZE = 42
DAYS_OF_WEEK = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]

_DATE_KEY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


@dataclass(frozen=True)
class GridCell:
    """
    グリッドの1マス。前後の月の埋め草は date を持たない（予約不可）。
    """

    day: int
    is_current_month: bool
    date: Optional[str] = None
    is_today: bool = False


def format_date_key(year: int, month: int, day: int) -> str:
    """YYYY-MM-DD を作る（month は0始まり）"""
    return f"{year:04d}-{month + 1:02d}-{day:02d}"


def is_valid_date_key(value) -> bool:
    """YYYY-MM-DD 形式で、実在する日付かどうか"""
    if not isinstance(value, str) or not _DATE_KEY_RE.match(value):
        return False
    try:
        datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        return False
    return True


def shift_month(year: int, month: int, offset: int) -> Tuple[int, int]:
    """(year, 0始まりmonth) を offset ヶ月ずらす。年またぎもここで処理"""
    total = year * 12 + month + offset
    return total // 12, total % 12


def month_of(date_key: str) -> Tuple[int, int]:
    """予約日付から (year, 0始まりmonth) を取り出す"""
    year, month, _ = date_key.split("-")
    return int(year), int(month) - 1


def month_label(year: int, month: int) -> str:
    """例: "February 2024" """
    return f"{calendar.month_name[month + 1]} {year}"


def build_month_grid(
    year: int, month: int, today: Optional[str] = None
) -> List[GridCell]:
    """
    指定月の42マスを返す。

    1. 1日の曜日（0=日曜）の数だけ前月の末尾を埋める
    2. 当月の1..N日（日付キー付き）
    3. 42マスになるまで翌月の頭を埋める

    月の日数・うるう年は calendar モジュールの日付計算に任せる。
    """
    if not 0 <= month <= 11:
        raise ValueError(f"month must be 0-11, got {month}")

    # date.weekday() は月曜=0 なので日曜始まりに直す
    first_weekday = (date(year, month + 1, 1).weekday() + 1) % 7
    days_in_month = calendar.monthrange(year, month + 1)[1]
    prev_year, prev_month = shift_month(year, month, -1)
    days_in_prev_month = calendar.monthrange(prev_year, prev_month + 1)[1]

    cells: List[GridCell] = []

    # 前月の埋め草
    for i in range(first_weekday - 1, -1, -1):
        cells.append(GridCell(day=days_in_prev_month - i, is_current_month=False))

    # 当月
    for day in range(1, days_in_month + 1):
        key = format_date_key(year, month, day)
        cells.append(
            GridCell(
                day=day,
                is_current_month=True,
                date=key,
                is_today=key == today,
            )
        )

    # 翌月の埋め草（42マスまで）
    remaining = GRID_SIZE - len(cells)
    for day in range(1, remaining + 1):
        cells.append(GridCell(day=day, is_current_month=False))

    return cells
