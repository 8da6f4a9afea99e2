# digitals-calendar/app/services/claim_hub.py
"""
予約スナップショットの配信ハブ（プロセス内 pub/sub）

書き込みのたびに全予約を丸ごと publish する。差分は配らない。
リスナーはイベントループのスレッドから同期的に呼ばれる。
"""

import itertools
import logging
from typing import Callable, Dict, List

from app.schemas.claim import Claim

logger = logging.getLogger(__name__)

SnapshotListener = Callable[[List[Claim]], None]


class ClaimHub:
    def __init__(self):
        # subscription_id -> listener
        self._listeners: Dict[int, SnapshotListener] = {}
        self._ids = itertools.count(1)

    @property
    def subscriber_count(self) -> int:
        return len(self._listeners)

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        """リスナーを登録し、解除用の関数を返す（解除は何度呼んでもよい）"""
        subscription_id = next(self._ids)
        self._listeners[subscription_id] = listener

        def unsubscribe():
            self._listeners.pop(subscription_id, None)

        return unsubscribe

    def publish(self, claims: List[Claim]) -> None:
        """全リスナーに同じスナップショットを配る"""
        snapshot = list(claims)
        # 配信中に解除されてもいいようにコピーして回す
        for subscription_id, listener in list(self._listeners.items()):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("snapshot listener %s failed", subscription_id)


# アプリ全体で共有するハブ
claim_hub = ClaimHub()
