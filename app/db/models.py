from sqlalchemy import BigInteger, Column, String, DateTime
from sqlalchemy.sql import func
from app.db.database import Base


# --- 1. 予約（1ユーザーにつき1件） ---
class ClaimEntry(Base):
    __tablename__ = "user_entries"

    # 予約の主キー = 持ち主のUID。同じ人が2件持つことはない
    owner_id = Column(String(255), primary_key=True, index=True)
    display_name = Column(String(255), nullable=False)
    avatar_url = Column(String(512), nullable=False)  # URLは長めにとる

    # YYYY-MM-DD。同じ日付に複数人いてもよい
    date = Column(String(10), index=True, nullable=False)

    # 最終書き込み時刻（エポックミリ秒）。表示順の参考のみ、競合解決には使わない
    claimed_at = Column(BigInteger, nullable=False)


# --- 2. プロフィール上書き（クライアントのローカル保存用） ---
class ProfileOverride(Base):
    __tablename__ = "profile_overrides"

    owner_id = Column(String(255), primary_key=True, index=True)
    display_name = Column(String(255), nullable=True)
    avatar_url = Column(String(512), nullable=True)

    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
