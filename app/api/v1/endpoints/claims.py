# app/api/v1/endpoints/claims.py
"""
予約（1人1日）のAPIエンドポイント
- REST: 全予約の取得、自分の予約の書き込み・削除
- WebSocket / NDJSONストリーム: 変更のたびに全予約を丸ごと配信
"""

import asyncio
import logging
from typing import Callable, Dict

from fastapi import (
    APIRouter,
    Depends,
    HTTPException,
    Query,
    WebSocket,
    WebSocketDisconnect,
    status,
)
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from app.api.deps import get_current_owner
from app.core.config import settings
from app.db.database import SessionLocal, get_db
from app.schemas.claim import Claim, ClaimSnapshot, ClaimWrite, ClearResult
from app.services import claim_repository
from app.services.claim_hub import ClaimHub, claim_hub
from app.utils.time_utils import now_millis

logger = logging.getLogger(__name__)

router = APIRouter()


def get_hub() -> ClaimHub:
    """配信ハブ（テストで差し替えられるように依存関係にしておく）"""
    return claim_hub


def snapshot_payload(claims) -> dict:
    return ClaimSnapshot(claims=list(claims)).model_dump()


def read_snapshot():
    """
    購読開始時の全予約を短いセッションで読む。
    接続中ずっとDBコネクションを握らないよう、依存関係のセッションは使わない。
    """
    with SessionLocal() as db:
        return claim_repository.list_claims(db)


# --- WebSocket Connection Manager ---
class ConnectionManager:
    def __init__(self):
        # WebSocket -> 送信待ちスナップショットのキュー
        self.active_connections: Dict[WebSocket, asyncio.Queue] = {}
        self._unsubscribers: Dict[WebSocket, Callable[[], None]] = {}

    async def connect(self, websocket: WebSocket, hub: ClaimHub) -> asyncio.Queue:
        await websocket.accept()
        queue: asyncio.Queue = asyncio.Queue()
        self.active_connections[websocket] = queue
        self._unsubscribers[websocket] = hub.subscribe(queue.put_nowait)
        return queue

    def disconnect(self, websocket: WebSocket):
        unsubscribe = self._unsubscribers.pop(websocket, None)
        if unsubscribe:
            unsubscribe()
        self.active_connections.pop(websocket, None)


manager = ConnectionManager()


# --- REST ---
@router.get("", response_model=ClaimSnapshot, summary="全予約の取得")
def read_claims(db: Session = Depends(get_db)):
    """コレクション全体のスナップショット"""
    return ClaimSnapshot(claims=claim_repository.list_claims(db))


@router.get("/me", response_model=Claim, summary="自分の予約の取得")
def read_own_claim(
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_current_owner),
):
    claim = claim_repository.get_claim(db, owner_id)
    if claim is None:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Claim not found")
    return claim


# PUT/DELETE は async のまま同期のDB呼び出しを行う。
# ハブの購読者は asyncio.Queue.put_nowait なので、配信はイベントループのスレッドから呼ぶ必要がある。
@router.put("/me", response_model=Claim, summary="自分の予約を書き込む（上書き）")
async def write_own_claim(
    body: ClaimWrite,
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_current_owner),
    hub: ClaimHub = Depends(get_hub),
):
    """
    自分の予約を書き込む。既にあれば丸ごと置き換える。
    書き込み後、全購読者に最新の全予約を配信する。
    """
    claim = Claim(
        owner_id=owner_id,
        display_name=body.display_name,
        avatar_url=body.avatar_url or settings.DEFAULT_AVATAR,
        date=body.date,
        claimed_at=body.claimed_at or now_millis(),
    )
    saved = claim_repository.upsert_claim(db, claim)
    claim_repository.publish_snapshot(db, hub)
    logger.info("claim set: %s -> %s", owner_id, saved.date)
    return saved


@router.delete("/me", response_model=ClearResult, summary="自分の予約を取り消す")
async def clear_own_claim(
    db: Session = Depends(get_db),
    owner_id: str = Depends(get_current_owner),
    hub: ClaimHub = Depends(get_hub),
):
    """予約がなくてもエラーにしない（何度呼んでも同じ結果）"""
    deleted = claim_repository.delete_claim(db, owner_id)
    if deleted:
        claim_repository.publish_snapshot(db, hub)
        logger.info("claim cleared: %s", owner_id)
    return ClearResult(owner_id=owner_id, deleted=deleted)


# --- NDJSONストリーム（Pythonクライアント用の購読） ---
@router.get("/stream", summary="全予約のスナップショットを配信し続ける")
async def stream_claims(
    owner_id: str = Depends(get_current_owner),
    hub: ClaimHub = Depends(get_hub),
):
    queue: asyncio.Queue = asyncio.Queue()
    # 先に登録してから現在の状態を読む（間の書き込みを取りこぼさない）
    unsubscribe = hub.subscribe(queue.put_nowait)
    try:
        initial = read_snapshot()
    except Exception:
        unsubscribe()
        raise

    async def event_stream():
        try:
            yield ClaimSnapshot(claims=initial).model_dump_json() + "\n"
            while True:
                claims = await queue.get()
                yield ClaimSnapshot(claims=claims).model_dump_json() + "\n"
        finally:
            unsubscribe()
            logger.info("snapshot stream closed for %s", owner_id)

    logger.info("snapshot stream opened for %s", owner_id)
    return StreamingResponse(event_stream(), media_type="application/x-ndjson")


# --- WebSocket Endpoint ---
async def _pump_snapshots(websocket: WebSocket, queue: asyncio.Queue):
    while True:
        claims = await queue.get()
        await websocket.send_json(snapshot_payload(claims))


@router.websocket("/ws")
async def websocket_endpoint(
    websocket: WebSocket,
    uid: str = Query(...),
    hub: ClaimHub = Depends(get_hub),
):
    """
    WebSocket接続エンドポイント
    接続直後に現在の全予約を送り、以降は変更のたびに全予約を送る。
    """
    queue = await manager.connect(websocket, hub)
    logger.info("websocket subscriber connected: %s", uid)

    sender = None
    try:
        await websocket.send_json(snapshot_payload(read_snapshot()))
        sender = asyncio.create_task(_pump_snapshots(websocket, queue))
        while True:
            data = await websocket.receive_text()
            # クライアントからのping/pongなど
            if data == "ping":
                await websocket.send_text("pong")
    except WebSocketDisconnect:
        logger.info("websocket subscriber disconnected: %s", uid)
    finally:
        if sender is not None:
            sender.cancel()
        manager.disconnect(websocket)
