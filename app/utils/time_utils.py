# digitals-calendar/app/utils/time_utils.py
"""
時刻関連のユーティリティ関数
"""

import time
from datetime import datetime
from pytz import timezone as tz

from app.core.config import settings


def get_local_tz():
    """設定されたタイムゾーン（「今日」の判定用）"""
    return tz(settings.TIMEZONE)


def get_local_now() -> datetime:
    """設定タイムゾーンの現在時刻を取得"""
    return datetime.now(get_local_tz())


def get_today_key() -> str:
    """今日の日付キー（YYYY-MM-DD）"""
    return get_local_now().strftime("%Y-%m-%d")


def get_current_month():
    """今日の (year, 0始まりmonth)"""
    now = get_local_now()
    return now.year, now.month - 1


def now_millis() -> int:
    """エポックミリ秒（予約の claimed_at 用）"""
    return int(time.time() * 1000)
