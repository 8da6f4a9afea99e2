# digitals-calendar/app/core/config.py

import os
from dotenv import load_dotenv

# .envファイルを読み込む（ローカル開発用）
# 本番環境（Cloud Runなど）ではファイルがないため無視されます
load_dotenv()


# プリセットアバター（プロフィール設定で選択できるもの）
AVATARS = [
    "https://api.dicebear.com/7.x/avataaars/svg?seed=Felix",
    "https://api.dicebear.com/7.x/avataaars/svg?seed=Aneka",
    "https://api.dicebear.com/7.x/avataaars/svg?seed=Jasper",
    "https://api.dicebear.com/7.x/avataaars/svg?seed=Sasha",
    "https://api.dicebear.com/7.x/avataaars/svg?seed=Toby",
    "https://api.dicebear.com/7.x/avataaars/svg?seed=Milo",
]


class Settings:
    # API設定
    API_V1_STR: str = "/api/v1"
    APP_ID: str = os.getenv("APP_ID", "community-calendar-v1")

    # DB設定
    # INSTANCE_CONNECTION_NAME があれば Cloud SQL に接続、なければ DATABASE_URL を使う
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./calendar.db")
    DB_USER: str = os.getenv("DB_USER", "postgres")
    # .envではDB_PASSとなっているため、ここで名前を合わせて読み込みます
    DB_PASSWORD: str = os.getenv("DB_PASS", "password")
    DB_HOST: str = os.getenv("INSTANCE_CONNECTION_NAME", "")
    DB_NAME: str = os.getenv("DB_NAME", "calendar")

    # クライアント側のプロフィール上書き（ローカル保存）
    PREFERENCES_DB_URL: str = os.getenv(
        "PREFERENCES_DB_URL", "sqlite:///./preferences.db"
    )

    # クライアントが接続するAPIサーバー
    API_BASE_URL: str = os.getenv("API_BASE_URL", "http://localhost:8000")
    HTTP_TIMEOUT_SECONDS: float = float(os.getenv("HTTP_TIMEOUT_SECONDS", "10"))
    # 購読ストリームが切れたときの再接続待ち（秒）
    RECONNECT_DELAY_SECONDS: float = float(os.getenv("RECONNECT_DELAY_SECONDS", "2"))

    # 「今日」の判定に使うタイムゾーン
    TIMEZONE: str = os.getenv("TIMEZONE", "UTC")

    # アバター
    AVATARS: list = AVATARS
    DEFAULT_AVATAR: str = AVATARS[0]

    # CORS設定
    CORS_ORIGINS: list = [
        origin.strip()
        for origin in os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",")
        if origin.strip()
    ]

    # DEBUG mode
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "DEBUG" if DEBUG else "INFO")


# 設定インスタンスを作成してエクスポート
settings = Settings()
