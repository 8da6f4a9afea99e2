# digitals-calendar/app/core/errors.py
"""
カレンダーのエラー分類

どのエラーも発生した操作の中だけで完結し、共有の予約セットを壊さない。
予約セットはサーバーから確定したスナップショットで丸ごと置き換えるだけなので。
"""


class CalendarError(Exception):
    """カレンダー関連エラーの基底クラス"""


class AuthFailure(CalendarError):
    """ID（ログイン）を確立できなかった。ユーザーに表示し、再試行可能。"""


class SyncTransportFailure(CalendarError):
    """購読の配信が途切れた。ログに出すだけで致命的ではない（再接続はトランスポート側）。"""


class WriteFailure(CalendarError):
    """予約の作成・削除が拒否された。呼び出し元に返し、再試行可能。"""

    def __init__(self, operation: str, owner_id: str, reason: str = ""):
        self.operation = operation
        self.owner_id = owner_id
        self.reason = reason
        message = f"{operation} failed for {owner_id}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class ProfileRequired(CalendarError):
    """表示名が未設定のまま予約しようとした。プロフィール設定を促す。"""
