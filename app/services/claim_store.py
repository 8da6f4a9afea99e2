# digitals-calendar/app/services/claim_store.py
"""
予約ストアのクライアント

全予約のライブなミラー（SyncEngine）を持ち、自分の予約の作成・上書き・削除を行う。
書き込みは楽観的にローカルへ反映しない。確定した状態は次のスナップショットで届く。
"""

import logging
from typing import Optional, Tuple

from app.core.config import settings
from app.core.errors import ProfileRequired, WriteFailure
from app.schemas.claim import Claim
from app.services.claim_backend import ClaimBackend
from app.services.projection import own_claim
from app.services.sync_engine import SyncEngine
from app.utils.calendar_grid import is_valid_date_key
from app.utils.time_utils import now_millis

logger = logging.getLogger(__name__)


class ClaimStoreClient:
    def __init__(self, backend: ClaimBackend):
        self.backend = backend
        self.sync = SyncEngine(backend)

    @property
    def claims(self) -> Tuple[Claim, ...]:
        """現在のミラー（SyncEngine が最後に受け取ったスナップショット）"""
        return self.sync.claims

    async def set_claim(
        self,
        owner_id: str,
        date: str,
        display_name: Optional[str],
        avatar_url: Optional[str] = None,
    ) -> Claim:
        """
        自分の予約を書き込む（既にあれば丸ごと上書き）。

        表示名が空なら書き込まずに ProfileRequired を投げる。
        同じ引数で何度呼んでも安全。
        """
        name = (display_name or "").strip()
        if not name:
            raise ProfileRequired(f"display name required before {owner_id} can claim a day")
        if not is_valid_date_key(date):
            raise ValueError(f"invalid date key: {date!r}")

        claim = Claim(
            owner_id=owner_id,
            display_name=name,
            avatar_url=avatar_url or settings.DEFAULT_AVATAR,
            date=date,
            claimed_at=now_millis(),
        )
        try:
            await self.backend.set_document(claim)
        except WriteFailure as e:
            logger.warning("claim write failed: %s", e)
            raise
        logger.info("claimed %s for %s", date, owner_id)
        return claim

    async def clear_claim(self, owner_id: str) -> bool:
        """
        自分の予約を削除する。予約がなければ何もしない（エラーにしない）。
        削除を依頼したら True。
        """
        if own_claim(self.claims, owner_id) is None:
            return False
        try:
            await self.backend.delete_document(owner_id)
        except WriteFailure as e:
            logger.warning("claim delete failed: %s", e)
            raise
        logger.info("cleared claim for %s", owner_id)
        return True
