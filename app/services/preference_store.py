# digitals-calendar/app/services/preference_store.py
"""
プロフィール上書きのローカル保存（UIDごと、他のユーザーとは共有しない）
"""

from typing import Optional
from sqlalchemy.orm import sessionmaker

from app.core.config import settings
from app.db import models
from app.db.database import Base, build_engine
from app.schemas.profile import ProfileOverrideData


class PreferenceStore:
    def __init__(self, session_factory: Optional[sessionmaker] = None):
        if session_factory is None:
            engine = build_engine(settings.PREFERENCES_DB_URL)
            Base.metadata.create_all(bind=engine, tables=[models.ProfileOverride.__table__])
            session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
        self._session_factory = session_factory

    def load(self, owner_id: str) -> Optional[ProfileOverrideData]:
        """ログイン時に読む。保存がなければ None"""
        with self._session_factory() as db:
            row = db.get(models.ProfileOverride, owner_id)
            return ProfileOverrideData.model_validate(row) if row else None

    def save(self, owner_id: str, display_name: str, avatar_url: str) -> ProfileOverrideData:
        """プロフィール保存時に書く"""
        with self._session_factory() as db:
            row = db.get(models.ProfileOverride, owner_id)
            if row is None:
                row = models.ProfileOverride(owner_id=owner_id)
                db.add(row)
            row.display_name = display_name
            row.avatar_url = avatar_url
            db.commit()
            db.refresh(row)
            return ProfileOverrideData.model_validate(row)
