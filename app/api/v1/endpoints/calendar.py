# app/api/v1/endpoints/calendar.py
"""
月表示API: グリッド + 日ごとの予約 + 自分の予約 + 日付順の一覧
"""

from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from app.api.deps import get_current_owner
from app.db.database import get_db
from app.schemas.calendar import CalendarView
from app.services import claim_repository
from app.services.calendar_session import build_calendar_view
from app.utils.time_utils import get_today_key

router = APIRouter()


@router.get("/{year}/{month}", response_model=CalendarView, summary="月表示の取得")
def read_month(
    year: int = Path(..., ge=1900, le=9999),
    month: int = Path(..., ge=1, le=12, description="1始まりの月"),
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_current_owner),
):
    """指定月の42マスと予約の投影を返す（monthはURLでは1始まり）"""
    claims = claim_repository.list_claims(db)
    view = build_calendar_view(
        year, month - 1, claims, owner_id=owner_id, today=get_today_key()
    )
    view.signed_in = True
    return view
