# digitals-calendar/app/main.py

import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# 必要なモジュール
from app.db import models  # noqa: F401  テーブル定義を登録する
from app.db.database import engine, Base
from app.api.v1.api import api_router
from app.core.config import settings

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Digitals Calendar API", version="1.0.0")


@app.on_event("startup")
def startup_event():
    # 1. DBエンジンの確認
    if engine is None:
        logger.warning("Database engine is None. Skipping operations.")
        # DB接続が失敗しても、FastAPI自体は起動させておく（ヘルスチェックをパスするため）
        return

    try:
        # 2. テーブル作成 (存在しない場合のみ作成されるため高速)
        Base.metadata.create_all(bind=engine)
        logger.info("Tables check passed.")

    except Exception as e:
        # 例外発生時も起動プロセスを停止させず、アプリを起動させる
        logger.error("Startup error: %s", e)


# --- CORS設定 ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- ルーター ---
app.include_router(api_router, prefix=settings.API_V1_STR)


# --- 簡易エンドポイント ---
@app.get("/api/v1/ping")
def ping():
    return {"status": "success"}


@app.get("/")
def read_root():
    return {"message": "Digitals Calendar API", "app_id": settings.APP_ID}
