# digitals-calendar/app/services/sync_engine.py
"""
購読・同期エンジン

状態遷移:
    UNSUBSCRIBED --start()--> SUBSCRIBING --最初のスナップショット--> LIVE
    LIVE --スナップショット--> LIVE（全予約を丸ごと置き換えて通知）
    SUBSCRIBING / LIVE --stop()--> UNSUBSCRIBED（購読解放 + ローカルの予約を破棄）

トランスポートのエラーは通知するだけで購読は止めない（再接続はトランスポート側）。
ローカルの予約セットを書き換えるのはこのエンジンだけ。
"""

import asyncio
import logging
from enum import Enum
from typing import Callable, Iterable, List, Optional, Tuple

from app.core.errors import SyncTransportFailure
from app.schemas.claim import Claim, ClaimChange
from app.services.claim_backend import ClaimBackend, Subscription

logger = logging.getLogger(__name__)

ClaimsListener = Callable[[Tuple[Claim, ...]], None]
ErrorListener = Callable[[SyncTransportFailure], None]


class SyncState(str, Enum):
    UNSUBSCRIBED = "unsubscribed"
    SUBSCRIBING = "subscribing"
    LIVE = "live"


class SyncEngine:
    def __init__(self, backend: ClaimBackend):
        self._backend = backend
        self.state = SyncState.UNSUBSCRIBED
        self.owner_id: Optional[str] = None
        self.last_error: Optional[SyncTransportFailure] = None

        # スナップショットはタプルで丸ごと差し替える（途中の状態は見せない）
        self._claims: Tuple[Claim, ...] = ()
        self._subscription: Optional[Subscription] = None
        # 解放済みの購読から遅れて届いた通知を捨てるための世代番号
        self._generation = 0
        self._live = asyncio.Event()

        self._listeners: List[ClaimsListener] = []
        self._error_listeners: List[ErrorListener] = []

    @property
    def claims(self) -> Tuple[Claim, ...]:
        return self._claims

    def add_listener(self, listener: ClaimsListener) -> Callable[[], None]:
        """予約セットが置き換わるたびに呼ばれるリスナーを登録"""
        self._listeners.append(listener)
        return lambda: _discard(self._listeners, listener)

    def add_error_listener(self, listener: ErrorListener) -> Callable[[], None]:
        self._error_listeners.append(listener)
        return lambda: _discard(self._error_listeners, listener)

    def start(self, owner_id: str) -> None:
        """
        IDが使えるようになったら購読を始める（実行中のイベントループ内で呼ぶこと）
        別のユーザーで購読中なら、先に古い購読を片付ける。
        """
        if self.state is not SyncState.UNSUBSCRIBED:
            if self.owner_id == owner_id:
                return
            self.stop()

        self._generation += 1
        generation = self._generation
        self.owner_id = owner_id
        self.state = SyncState.SUBSCRIBING
        self.last_error = None
        self._live.clear()
        logger.info("subscribing to claims for %s", owner_id)

        self._subscription = self._backend.subscribe(
            lambda claims: self._apply_snapshot(generation, claims),
            lambda error: self._report_error(generation, error),
        )

    def stop(self) -> None:
        """IDを失ったら購読を同期的に解放し、ローカルの予約を捨てる"""
        if self.state is SyncState.UNSUBSCRIBED:
            return

        subscription, self._subscription = self._subscription, None
        self._generation += 1
        if subscription is not None:
            subscription.close()

        logger.info("unsubscribed from claims for %s", self.owner_id)
        self.owner_id = None
        self.state = SyncState.UNSUBSCRIBED
        self._claims = ()
        self._live.clear()
        self._notify()

    async def wait_live(self, timeout: Optional[float] = None) -> None:
        """最初のスナップショットが届くまで待つ"""
        await asyncio.wait_for(self._live.wait(), timeout)

    def _apply_snapshot(self, generation: int, claims: Iterable[Claim]) -> None:
        if generation != self._generation:
            logger.debug("dropping snapshot from released subscription")
            return

        self._claims = tuple(claims)
        if self.state is SyncState.SUBSCRIBING:
            self.state = SyncState.LIVE
            self._live.set()
            logger.info("claims live for %s (%d claims)", self.owner_id, len(self._claims))
        self._notify()

    def _report_error(self, generation: int, error: Exception) -> None:
        if generation != self._generation:
            return

        if not isinstance(error, SyncTransportFailure):
            failure = SyncTransportFailure(str(error))
            failure.__cause__ = error
            error = failure

        self.last_error = error
        logger.warning("claim subscription error: %s", error)
        for listener in list(self._error_listeners):
            listener(error)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self._claims)


def _discard(listeners: list, listener) -> None:
    if listener in listeners:
        listeners.remove(listener)


def fold_changes(
    claims: Iterable[Claim], changes: Iterable[ClaimChange]
) -> List[Claim]:
    """
    差分しか配信しないバックエンド向け: 到着順に差分を畳み込んで全予約を再構成する
    """
    by_owner = {claim.owner_id: claim for claim in claims}
    for change in changes:
        if change.type == "removed":
            by_owner.pop(change.claim.owner_id, None)
        else:
            by_owner[change.claim.owner_id] = change.claim
    return list(by_owner.values())
