import asyncio

import pytest

from app.core.config import settings
from app.core.errors import AuthFailure, ProfileRequired
from app.schemas.profile import Identity
from app.services.calendar_session import CalendarSession
from app.services.claim_backend import LocalClaimBackend
from app.services.claim_store import ClaimStoreClient
from app.services.identity import StaticIdentityProvider
from app.services.preference_store import PreferenceStore
from app.services.sync_engine import SyncState


@pytest.fixture(autouse=True)
def fixed_today(monkeypatch):
    monkeypatch.setattr(
        "app.services.calendar_session.get_current_month", lambda: (2025, 0)
    )
    monkeypatch.setattr(
        "app.services.calendar_session.get_today_key", lambda: "2025-01-15"
    )


def _session(session_factory, hub, identity):
    return CalendarSession(
        StaticIdentityProvider(identity),
        ClaimStoreClient(LocalClaimBackend(session_factory, hub)),
        PreferenceStore(session_factory),
    )


def test_sign_in_starts_live_subscription_and_claims(session_factory, hub):
    async def scenario():
        session = _session(session_factory, hub, Identity(owner_id="alice", display_name="Alice"))
        await session.sign_in()
        await session.store.sync.wait_live(timeout=1)
        await session.claim_date("2025-01-05")
        await session.claim_date("2025-01-06")
        return session.view()

    view = asyncio.run(scenario())
    assert view.signed_in
    assert view.sync_state == SyncState.LIVE.value
    assert view.own_claim.date == "2025-01-06"
    assert [c.owner_id for c in view.roster] == ["alice"]
    assert view.roster_label == "1 person selected"
    assert len(view.cells) == 42

    selected = [cell for cell in view.cells if cell.is_selected_by_me]
    assert [cell.date for cell in selected] == ["2025-01-06"]
    assert [c.owner_id for c in selected[0].claims] == ["alice"]
    assert [cell.date for cell in view.cells if cell.is_today] == ["2025-01-15"]


def test_claim_without_display_name_requests_profile(session_factory, hub):
    async def scenario():
        session = _session(session_factory, hub, Identity(owner_id="anon"))
        await session.sign_in()
        await session.store.sync.wait_live(timeout=1)
        with pytest.raises(ProfileRequired):
            await session.claim_date("2025-01-05")
        await session.save_profile("Astro Explorer")
        await session.claim_date("2025-01-05")
        return session.own_claim

    claim = asyncio.run(scenario())
    assert claim.display_name == "Astro Explorer"
    assert claim.avatar_url == settings.DEFAULT_AVATAR


def test_padding_cell_cannot_be_claimed(session_factory, hub):
    async def scenario():
        session = _session(session_factory, hub, Identity(owner_id="alice", display_name="Alice"))
        await session.sign_in()
        with pytest.raises(ValueError):
            await session.claim_date(None)

    asyncio.run(scenario())


def test_claim_is_ignored_when_signed_out(session_factory, hub):
    async def scenario():
        session = _session(session_factory, hub, Identity(owner_id="alice", display_name="Alice"))
        return await session.claim_date("2025-01-05"), await session.clear_own_claim()

    assert asyncio.run(scenario()) == (None, False)


def test_save_profile_refreshes_existing_claim(session_factory, hub):
    avatar = settings.AVATARS[2]

    async def scenario():
        session = _session(session_factory, hub, Identity(owner_id="alice", display_name="Alice"))
        await session.sign_in()
        await session.store.sync.wait_live(timeout=1)
        await session.claim_date("2025-01-20")
        await session.save_profile("Alice B.", avatar)
        return session.own_claim, session.preferences.load("alice")

    claim, saved = asyncio.run(scenario())
    assert claim.date == "2025-01-20"
    assert claim.display_name == "Alice B."
    assert claim.avatar_url == avatar
    assert saved.display_name == "Alice B."


def test_saved_override_wins_over_identity_metadata(session_factory, hub):
    PreferenceStore(session_factory).save("alice", "Saved Name", settings.AVATARS[3])

    async def scenario():
        session = _session(
            session_factory,
            hub,
            Identity(owner_id="alice", display_name="Google Name", avatar_url="https://g/a.png"),
        )
        await session.sign_in()
        return session.profile

    profile = asyncio.run(scenario())
    assert profile.display_name == "Saved Name"
    assert profile.avatar_url == settings.AVATARS[3]


def test_blank_profile_name_is_rejected(session_factory, hub):
    async def scenario():
        session = _session(session_factory, hub, Identity(owner_id="alice"))
        await session.sign_in()
        await session.save_profile("  ")

    with pytest.raises(ProfileRequired):
        asyncio.run(scenario())


def test_save_profile_is_ignored_when_signed_out(session_factory, hub):
    async def scenario():
        session = _session(session_factory, hub, Identity(owner_id="alice"))
        return await session.save_profile("Alice", settings.AVATARS[1])

    assert asyncio.run(scenario()) is None
    assert PreferenceStore(session_factory).load("alice") is None


def test_sign_out_discards_claims_and_sign_in_resubscribes(session_factory, hub):
    async def scenario():
        session = _session(session_factory, hub, Identity(owner_id="alice", display_name="Alice"))
        await session.sign_in()
        await session.store.sync.wait_live(timeout=1)
        await session.claim_date("2025-01-05")
        assert len(session.store.claims) == 1

        await session.sign_out()
        signed_out = (session.store.sync.state, session.store.claims, hub.subscriber_count)

        await session.sign_in()
        resubscribing = session.store.sync.state
        await session.store.sync.wait_live(timeout=1)
        return signed_out, resubscribing, session.store.claims, session.profile

    signed_out, resubscribing, claims, profile = asyncio.run(scenario())
    assert signed_out == (SyncState.UNSUBSCRIBED, (), 0)
    assert resubscribing is SyncState.SUBSCRIBING
    # サーバー側の予約は残っている（ローカルのミラーだけ捨てた）
    assert [c.date for c in claims] == ["2025-01-05"]
    assert profile.display_name == "Alice"


def test_failed_sign_in_stays_signed_out(session_factory, hub):
    async def scenario():
        session = _session(session_factory, hub, None)
        with pytest.raises(AuthFailure):
            await session.sign_in()
        return session.view()

    view = asyncio.run(scenario())
    assert not view.signed_in
    assert view.sync_state == SyncState.UNSUBSCRIBED.value


def test_clear_own_claim(session_factory, hub):
    async def scenario():
        session = _session(session_factory, hub, Identity(owner_id="alice", display_name="Alice"))
        await session.sign_in()
        await session.store.sync.wait_live(timeout=1)
        await session.claim_date("2025-01-05")
        cleared = await session.clear_own_claim()
        return cleared, session.own_claim, session.view().roster_label

    cleared, mine, label = asyncio.run(scenario())
    assert cleared is True
    assert mine is None
    assert label is None


def test_month_navigation(session_factory, hub):
    session = _session(session_factory, hub, None)
    assert (session.year, session.month) == (2025, 0)

    session.navigate_month(-1)
    assert (session.year, session.month) == (2024, 11)
    session.navigate_month(14)
    assert (session.year, session.month) == (2026, 1)

    session.jump_to_date("2027-08-09")
    assert session.view().label == "August 2027"

    session.go_to_today()
    assert (session.year, session.month) == (2025, 0)


def test_close_releases_subscription(session_factory, hub):
    async def scenario():
        session = _session(session_factory, hub, Identity(owner_id="alice", display_name="Alice"))
        await session.sign_in()
        session.close()
        return session.store.sync.state, hub.subscriber_count

    assert asyncio.run(scenario()) == (SyncState.UNSUBSCRIBED, 0)
