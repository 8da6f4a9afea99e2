# digitals-calendar/app/services/claim_backend.py
"""
予約ストレージのバックエンド（クライアントから見たインターフェース）

- subscribe: コレクション購読。変更のたびに全予約を丸ごと配信
- set_document: キー指定で書き込み（上書き）
- delete_document: キー指定で削除

実装は2つ:
- LocalClaimBackend: 同じプロセス内のDB + ClaimHub を直接使う
- RemoteClaimBackend: APIサーバーに httpx で接続（書き込みはREST、購読はNDJSONストリーム）
"""

import asyncio
import logging
from typing import Callable, List, Optional

import httpx
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import settings
from app.core.errors import SyncTransportFailure, WriteFailure
from app.schemas.claim import Claim, ClaimSnapshot, ClaimWrite
from app.services import claim_repository
from app.services.claim_hub import ClaimHub, claim_hub

logger = logging.getLogger(__name__)

SnapshotCallback = Callable[[List[Claim]], None]
ErrorCallback = Callable[[Exception], None]

OWNER_HEADER = "X-Firebase-Uid"


class Subscription:
    """
    購読のハンドル。close() は同期的に購読を解放する（何度呼んでもよい）
    """

    def __init__(self, closer: Callable[[], None]):
        self._closer = closer
        self.closed = False

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._closer()


class ClaimBackend:
    """バックエンドの共通インターフェース"""

    def subscribe(
        self, on_snapshot: SnapshotCallback, on_error: ErrorCallback
    ) -> Subscription:
        raise NotImplementedError

    async def set_document(self, claim: Claim) -> None:
        raise NotImplementedError

    async def delete_document(self, owner_id: str) -> None:
        raise NotImplementedError


# --- プロセス内 ---
class LocalClaimBackend(ClaimBackend):
    def __init__(self, session_factory, hub: Optional[ClaimHub] = None):
        self._session_factory = session_factory
        self._hub = hub or claim_hub

    def subscribe(
        self, on_snapshot: SnapshotCallback, on_error: ErrorCallback
    ) -> Subscription:
        """
        ハブに登録してから現在の全予約を次のループで配る
        （登録を先にしておけば、その間の書き込みを取りこぼさない）
        """
        unsubscribe = self._hub.subscribe(on_snapshot)
        loop = asyncio.get_running_loop()
        handle = loop.call_soon(self._deliver_initial, on_snapshot, on_error)

        def close():
            handle.cancel()
            unsubscribe()

        return Subscription(close)

    def _deliver_initial(self, on_snapshot: SnapshotCallback, on_error: ErrorCallback):
        try:
            with self._session_factory() as db:
                claims = claim_repository.list_claims(db)
        except SQLAlchemyError as e:
            on_error(SyncTransportFailure(f"initial snapshot failed: {e}"))
            return
        on_snapshot(claims)

    async def set_document(self, claim: Claim) -> None:
        try:
            with self._session_factory() as db:
                claim_repository.upsert_claim(db, claim)
                claim_repository.publish_snapshot(db, self._hub)
        except SQLAlchemyError as e:
            raise WriteFailure("set", claim.owner_id, str(e)) from e

    async def delete_document(self, owner_id: str) -> None:
        try:
            with self._session_factory() as db:
                if claim_repository.delete_claim(db, owner_id):
                    claim_repository.publish_snapshot(db, self._hub)
        except SQLAlchemyError as e:
            raise WriteFailure("delete", owner_id, str(e)) from e


# --- APIサーバー経由 ---
class RemoteClaimBackend(ClaimBackend):
    """
    APIサーバーに接続するバックエンド。

    購読は GET /claims/stream（1行1スナップショットのNDJSON）。
    ストリームが切れたらエラーを通知して reconnect_delay 秒後に張り直す。
    """

    def __init__(
        self,
        owner_id: str,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        reconnect_delay: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.owner_id = owner_id
        self.reconnect_delay = (
            settings.RECONNECT_DELAY_SECONDS if reconnect_delay is None else reconnect_delay
        )
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.API_BASE_URL,
            timeout=settings.HTTP_TIMEOUT_SECONDS if timeout is None else timeout,
            headers={OWNER_HEADER: owner_id},
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    def subscribe(
        self, on_snapshot: SnapshotCallback, on_error: ErrorCallback
    ) -> Subscription:
        task = asyncio.get_running_loop().create_task(
            self._stream_loop(on_snapshot, on_error)
        )
        return Subscription(task.cancel)

    async def _stream_loop(self, on_snapshot: SnapshotCallback, on_error: ErrorCallback):
        path = f"{settings.API_V1_STR}/claims/stream"
        while True:
            try:
                async with self._client.stream("GET", path, timeout=None) as response:
                    response.raise_for_status()
                    async for line in response.aiter_lines():
                        if not line.strip():
                            continue
                        snapshot = ClaimSnapshot.model_validate_json(line)
                        try:
                            on_snapshot(snapshot.claims)
                        except Exception as e:
                            # 受け取り側の失敗で購読を終わらせない
                            logger.exception("snapshot listener failed")
                            on_error(SyncTransportFailure(f"snapshot listener failed: {e}"))
                # サーバー側から閉じられた
                on_error(SyncTransportFailure("snapshot stream closed by server"))
            except (httpx.HTTPError, ValueError) as e:
                # pydantic の ValidationError も ValueError
                on_error(SyncTransportFailure(f"snapshot stream failed: {e}"))
            await asyncio.sleep(self.reconnect_delay)

    async def set_document(self, claim: Claim) -> None:
        body = ClaimWrite(
            display_name=claim.display_name,
            avatar_url=claim.avatar_url,
            date=claim.date,
            claimed_at=claim.claimed_at,
        )
        try:
            response = await self._client.put(
                f"{settings.API_V1_STR}/claims/me",
                json=body.model_dump(),
                headers={OWNER_HEADER: claim.owner_id},
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise WriteFailure("set", claim.owner_id, str(e)) from e

    async def delete_document(self, owner_id: str) -> None:
        try:
            response = await self._client.delete(
                f"{settings.API_V1_STR}/claims/me",
                headers={OWNER_HEADER: owner_id},
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise WriteFailure("delete", owner_id, str(e)) from e
