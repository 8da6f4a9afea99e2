# digitals-calendar/app/schemas/calendar.py
from pydantic import BaseModel
from typing import List, Optional

from app.schemas.claim import Claim
from app.schemas.profile import Profile


class CalendarCellView(BaseModel):
    """グリッドの1マス + その日の予約"""

    day: int
    is_current_month: bool
    date: Optional[str] = None  # 前後の月の埋め草は None（予約不可）
    is_today: bool = False
    is_selected_by_me: bool = False
    claims: List[Claim] = []


class CalendarView(BaseModel):
    """
    描画に必要な状態一式（グリッド、日ごとの予約、自分の予約、並べた一覧）
    """

    year: int
    month: int  # 0始まり
    label: str
    days_of_week: List[str]
    cells: List[CalendarCellView]
    own_claim: Optional[Claim] = None
    roster: List[Claim] = []
    roster_label: Optional[str] = None  # 予約が0件なら None（一覧を出さない）
    profile: Optional[Profile] = None
    signed_in: bool = False
    sync_state: Optional[str] = None
