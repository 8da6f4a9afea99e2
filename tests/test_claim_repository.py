from app.db import models
from app.services import claim_repository
from tests.helpers import make_claim


def test_upsert_replaces_row_written_by_another_session(session_factory):
    with session_factory() as first, session_factory() as second:
        # 別のワーカーが「まだない」と読んだ直後に、先に書き込まれた状況
        first.get(models.ClaimEntry, "alice")
        claim_repository.upsert_claim(second, make_claim("alice", "2025-01-05", "Alice"))

        saved = claim_repository.upsert_claim(
            first, make_claim("alice", "2025-01-09", "Alice B.", claimed_at=5)
        )

    assert saved.date == "2025-01-09"
    assert saved.display_name == "Alice B."
    with session_factory() as db:
        claims = claim_repository.list_claims(db)
    assert [(c.owner_id, c.date, c.claimed_at) for c in claims] == [("alice", "2025-01-09", 5)]


def test_upsert_does_not_insert_blindly_after_a_stale_read(session_factory, monkeypatch):
    with session_factory() as db:
        claim_repository.upsert_claim(db, make_claim("alice", "2025-01-05"))

    with session_factory() as db:
        # 読み取りが古くて「行がない」と見えても主キー衝突にならない
        monkeypatch.setattr(db, "get", lambda *args, **kwargs: None)
        claim_repository.upsert_claim(db, make_claim("alice", "2025-01-07", claimed_at=3))

    with session_factory() as db:
        assert claim_repository.get_claim(db, "alice").date == "2025-01-07"


def test_delete_is_idempotent(session_factory):
    with session_factory() as db:
        claim_repository.upsert_claim(db, make_claim("bob", "2025-01-05"))
        assert claim_repository.delete_claim(db, "bob") is True
        assert claim_repository.delete_claim(db, "bob") is False
        assert claim_repository.list_claims(db) == []
