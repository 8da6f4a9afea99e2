# digitals-calendar/app/services/identity.py
"""
IDプロバイダ（外部の認証機能）のインターフェース

ログイン状態が「あり」「なし」の間で変わるたびにリスナーへ通知する。
"""

import logging
from typing import Callable, List, Optional

from app.core.errors import AuthFailure
from app.schemas.profile import Identity

logger = logging.getLogger(__name__)

IdentityListener = Callable[[Optional[Identity]], None]


class IdentityProvider:
    def __init__(self):
        self.current: Optional[Identity] = None
        self._listeners: List[IdentityListener] = []

    def on_change(self, listener: IdentityListener) -> Callable[[], None]:
        """リスナーを登録。登録時に現在の状態で一度呼ぶ"""
        self._listeners.append(listener)
        listener(self.current)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def sign_in(self) -> Identity:
        """ログイン。失敗したら AuthFailure（ログアウト状態のまま）"""
        try:
            identity = await self._authenticate()
        except AuthFailure:
            raise
        except Exception as e:
            logger.error("sign-in error: %s", e)
            raise AuthFailure(str(e)) from e
        self._set(identity)
        return identity

    async def sign_out(self) -> None:
        await self._revoke()
        self._set(None)

    async def _authenticate(self) -> Identity:
        raise NotImplementedError

    async def _revoke(self) -> None:
        return None

    def _set(self, identity: Optional[Identity]) -> None:
        self.current = identity
        for listener in list(self._listeners):
            listener(identity)


class StaticIdentityProvider(IdentityProvider):
    """
    決まったユーザーでログインするプロバイダ（組み込み・テスト用）
    identity が None ならログインは AuthFailure になる。
    """

    def __init__(self, identity: Optional[Identity] = None):
        super().__init__()
        self._identity = identity

    async def _authenticate(self) -> Identity:
        if self._identity is None:
            raise AuthFailure("no account available for sign-in")
        return self._identity
