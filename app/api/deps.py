# digitals-calendar/app/api/deps.py

from fastapi import HTTPException, Header, status


def get_current_owner(
    # フロントエンドから "X-Firebase-Uid" というヘッダーでUIDを受け取る
    x_firebase_uid: str | None = Header(default=None),
) -> str:
    """
    リクエストヘッダーのUIDを予約の持ち主IDとして返す。
    """
    if not x_firebase_uid:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="認証情報(X-Firebase-Uid)が不足しています",
        )
    return x_firebase_uid
