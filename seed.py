# digitals-calendar/seed.py

import random
from dotenv import load_dotenv
from sqlalchemy.orm import Session

load_dotenv()

from app.core.config import settings
from app.db.database import SessionLocal, engine, Base
from app.db import models  # noqa: F401
from app.schemas.claim import Claim
from app.services import claim_repository
from app.utils.calendar_grid import format_date_key
from app.utils.time_utils import get_current_month, now_millis

# --- ダミーユーザー ---
DEMO_USERS = [
    {"owner_id": "uid_1", "display_name": "Felix"},
    {"owner_id": "uid_2", "display_name": "Aneka"},
    {"owner_id": "uid_3", "display_name": "Jasper"},
    {"owner_id": "uid_4", "display_name": "Sasha"},
]


def seed_data():
    print("Seeding database...")
    db: Session = SessionLocal()

    try:
        # テーブル再作成（既存データはリセットされます）
        print("Dropping & Creating tables...")
        Base.metadata.drop_all(bind=engine)
        Base.metadata.create_all(bind=engine)

        # 今月のランダムな日に1人1件ずつ予約を入れる（同じ日に重なってもよい）
        year, month = get_current_month()
        print("Creating Claims...")
        for i, user in enumerate(DEMO_USERS):
            claim = Claim(
                owner_id=user["owner_id"],
                display_name=user["display_name"],
                avatar_url=settings.AVATARS[i % len(settings.AVATARS)],
                date=format_date_key(year, month, random.randint(1, 28)),
                claimed_at=now_millis(),
            )
            claim_repository.upsert_claim(db, claim)

        print("Seeding complete! ✅")
    except Exception as e:
        print(f"Error: {e}")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    seed_data()
