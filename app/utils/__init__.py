# digitals-calendar/app/utils/__init__.py
"""
ユーティリティモジュール
"""

from .calendar_grid import (
    DAYS_OF_WEEK,
    GRID_SIZE,
    GridCell,
    build_month_grid,
    format_date_key,
    is_valid_date_key,
    month_label,
    month_of,
    shift_month,
)
from .time_utils import (
    get_current_month,
    get_local_now,
    get_today_key,
    now_millis,
)
