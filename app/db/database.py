import sqlalchemy
from sqlalchemy.orm import sessionmaker, declarative_base
from app.core.config import settings


def getconnection():
    """
    Cloud SQL への接続を確立する関数.
    INSTANCE_CONNECTION_NAME が設定されているときだけ使われます。
    """
    from google.cloud.sql.connector import Connector

    global connector
    if connector is None:
        connector = Connector()

    # settings.DB_HOST には INSTANCE_CONNECTION_NAME が入っています
    conn = connector.connect(
        settings.DB_HOST,
        "pymysql",
        user=settings.DB_USER,
        password=settings.DB_PASSWORD,
        db=settings.DB_NAME,
        charset="utf8mb4",
    )
    return conn


def build_engine(url: str):
    """URLからエンジンを作る（SQLiteはスレッドチェックを外す）"""
    connect_args = {}
    if url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return sqlalchemy.create_engine(url, connect_args=connect_args)


connector = None

# エンジンの作成
# 接続情報がおかしい場合でもクラッシュしないよう保護
try:
    if settings.DB_HOST:
        engine = sqlalchemy.create_engine(
            "mysql+pymysql://",
            creator=getconnection,
        )
    else:
        engine = build_engine(settings.DATABASE_URL)
except Exception as e:
    print(f"Warning: Could not create database engine. {e}")
    engine = None

# セッション作成
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    """
    DBセッションを取得するための依存関係.
    """
    if engine is None:
        raise Exception("Database engine is not initialized.")

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
