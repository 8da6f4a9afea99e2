# digitals-calendar/app/services/calendar_session.py
"""
カレンダー画面のセッション（描画層との境界）

- 状態: ログイン中のID、プロフィール、表示中の月、全予約のミラー
- 操作: 日付を選ぶ / 自分の予約を取り消す / 月の移動 / プロフィール保存
- view(): 描画に必要なものを全部まとめて返す
"""

import logging
from typing import Iterable, Optional

from app.core.config import settings
from app.core.errors import ProfileRequired
from app.schemas.calendar import CalendarCellView, CalendarView
from app.schemas.claim import Claim
from app.schemas.profile import Identity, Profile
from app.services.claim_store import ClaimStoreClient
from app.services.identity import IdentityProvider
from app.services.preference_store import PreferenceStore
from app.services.projection import (
    claims_by_date,
    own_claim,
    roster_label,
    roster_sorted_by_date,
)
from app.utils.calendar_grid import (
    DAYS_OF_WEEK,
    build_month_grid,
    month_label,
    month_of,
    shift_month,
)
from app.utils.time_utils import get_current_month, get_today_key

logger = logging.getLogger(__name__)


def build_calendar_view(
    year: int,
    month: int,
    claims: Iterable[Claim],
    owner_id: Optional[str] = None,
    today: Optional[str] = None,
) -> CalendarView:
    """月のグリッドと予約の投影をまとめる（純粋関数）"""
    claims = list(claims)
    mine = own_claim(claims, owner_id)
    buckets = claims_by_date(claims)
    roster = roster_sorted_by_date(claims)

    cells = [
        CalendarCellView(
            day=cell.day,
            is_current_month=cell.is_current_month,
            date=cell.date,
            is_today=cell.is_today,
            is_selected_by_me=mine is not None and cell.date == mine.date,
            claims=buckets.get(cell.date, []) if cell.date else [],
        )
        for cell in build_month_grid(year, month, today=today)
    ]

    return CalendarView(
        year=year,
        month=month,
        label=month_label(year, month),
        days_of_week=DAYS_OF_WEEK,
        cells=cells,
        own_claim=mine,
        roster=roster,
        roster_label=roster_label(len(roster)) if roster else None,
    )


class CalendarSession:
    def __init__(
        self,
        identity_provider: IdentityProvider,
        store: ClaimStoreClient,
        preferences: PreferenceStore,
    ):
        self.identity_provider = identity_provider
        self.store = store
        self.preferences = preferences

        self.identity: Optional[Identity] = None
        self.profile = Profile(avatar_url=settings.DEFAULT_AVATAR)
        self.year, self.month = get_current_month()

        self._unsubscribe_identity = identity_provider.on_change(self.on_identity)

    @property
    def owner_id(self) -> Optional[str]:
        return self.identity.owner_id if self.identity else None

    # --- ログイン状態 ---
    async def sign_in(self) -> Identity:
        """失敗時は AuthFailure がそのまま呼び出し元へ（ログアウト状態のまま）"""
        return await self.identity_provider.sign_in()

    async def sign_out(self) -> None:
        await self.identity_provider.sign_out()

    def on_identity(self, identity: Optional[Identity]) -> None:
        """IDの「あり / なし」の切り替え"""
        if identity is None:
            self.store.sync.stop()
            self.identity = None
            self.profile = Profile(avatar_url=settings.DEFAULT_AVATAR)
            return

        if self.identity is not None and self.identity.owner_id != identity.owner_id:
            self.store.sync.stop()

        self.identity = identity
        self.profile = self._resolve_profile(identity)
        # ログインしたら今日の月から始める
        self.go_to_today()
        self.store.sync.start(identity.owner_id)

    def _resolve_profile(self, identity: Identity) -> Profile:
        """ローカルの上書き > IDプロバイダの値 > 既定値"""
        saved = self.preferences.load(identity.owner_id)
        saved_name = saved.display_name if saved else None
        saved_avatar = saved.avatar_url if saved else None
        return Profile(
            display_name=saved_name or identity.display_name or "",
            avatar_url=saved_avatar or identity.avatar_url or settings.DEFAULT_AVATAR,
        )

    def close(self) -> None:
        """画面を閉じるとき: 購読を残さない"""
        self._unsubscribe_identity()
        self.store.sync.stop()

    # --- 予約 ---
    @property
    def own_claim(self) -> Optional[Claim]:
        return own_claim(self.store.claims, self.owner_id)

    async def claim_date(self, date: Optional[str]) -> Optional[Claim]:
        """
        日付マスがクリックされた。ログインしていなければ無視。
        表示名がなければ ProfileRequired（プロフィール設定を出す）。
        """
        if self.identity is None:
            return None
        if date is None:
            raise ValueError("padding cells cannot be claimed")

        display_name = self.profile.display_name.strip() or (self.identity.display_name or "")
        if not display_name.strip():
            raise ProfileRequired("set a display name before claiming a day")

        return await self.store.set_claim(
            self.identity.owner_id, date, display_name, self.profile.avatar_url
        )

    async def clear_own_claim(self) -> bool:
        if self.identity is None or self.own_claim is None:
            return False
        return await self.store.clear_claim(self.identity.owner_id)

    async def save_profile(
        self, display_name: str, avatar_url: Optional[str] = None
    ) -> Optional[Profile]:
        """
        プロフィールを保存。既に予約があれば同じ日付で書き直して新しい名前・アバターを反映する。
        サインアウト中は何もしない（None）。
        """
        if self.identity is None:
            return None
        name = (display_name or "").strip()
        if not name:
            raise ProfileRequired("display name must not be empty")

        avatar = avatar_url or self.profile.avatar_url
        self.preferences.save(self.identity.owner_id, name, avatar)
        self.profile = Profile(display_name=name, avatar_url=avatar)
        logger.info("saved profile for %s", self.identity.owner_id)

        existing = self.own_claim
        if existing is not None:
            await self.claim_date(existing.date)
        return self.profile

    # --- 月の移動 ---
    def navigate_month(self, offset: int) -> None:
        self.year, self.month = shift_month(self.year, self.month, offset)

    def go_to_today(self) -> None:
        self.year, self.month = get_current_month()

    def jump_to_date(self, date: str) -> None:
        """一覧のアバターから、その予約の月へ飛ぶ"""
        self.year, self.month = month_of(date)

    # --- 描画用 ---
    def view(self) -> CalendarView:
        view = build_calendar_view(
            self.year,
            self.month,
            self.store.claims,
            owner_id=self.owner_id,
            today=get_today_key(),
        )
        view.profile = self.profile
        view.signed_in = self.identity is not None
        view.sync_state = self.store.sync.state.value
        return view
