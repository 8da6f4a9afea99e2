# digitals-calendar/app/schemas/claim.py
from pydantic import BaseModel, ConfigDict, field_validator
from typing import List, Literal, Optional

from app.utils.calendar_grid import is_valid_date_key


class Claim(BaseModel):
    """
    1人1日の予約。owner_id が主キー。
    """

    owner_id: str
    display_name: str
    avatar_url: str
    date: str  # YYYY-MM-DD
    claimed_at: int  # エポックミリ秒

    # SQLAlchemyモデル（models.ClaimEntry）からの自動変換を有効にする
    # スナップショットの一部として共有されるので変更不可にしておく
    model_config = ConfigDict(from_attributes=True, frozen=True)


class ClaimWrite(BaseModel):
    """
    PUT /claims/me のリクエストボディ
    """

    display_name: str
    avatar_url: Optional[str] = None
    date: str
    # 省略時はサーバーの現在時刻
    claimed_at: Optional[int] = None

    @field_validator("display_name")
    @classmethod
    def display_name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("display_name must not be empty")
        return value

    @field_validator("date")
    @classmethod
    def date_is_calendar_date(cls, value: str) -> str:
        # 範囲（遠い過去・未来）はチェックしない。形式だけ
        if not is_valid_date_key(value):
            raise ValueError("date must be a valid YYYY-MM-DD calendar date")
        return value


class ClaimSnapshot(BaseModel):
    """コレクション全体のスナップショット（購読で毎回丸ごと配信）"""

    claims: List[Claim]


class ClaimChange(BaseModel):
    """差分しか配信しないバックエンド用の変更イベント"""

    type: Literal["added", "modified", "removed"]
    claim: Claim


class ClearResult(BaseModel):
    """DELETE /claims/me のレスポンス"""

    owner_id: str
    deleted: bool
