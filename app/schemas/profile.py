# digitals-calendar/app/schemas/profile.py
from pydantic import BaseModel, ConfigDict
from typing import Optional


class Identity(BaseModel):
    """
    IDプロバイダ（Googleログインなど）から受け取るユーザー情報
    """

    owner_id: str  # 安定したUID
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class Profile(BaseModel):
    """予約に載せる表示名とアバター"""

    display_name: str = ""
    avatar_url: str

    model_config = ConfigDict(from_attributes=True)


class ProfileOverrideData(BaseModel):
    """ローカルに保存したプロフィールの上書き値（未設定は None）"""

    owner_id: str
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
