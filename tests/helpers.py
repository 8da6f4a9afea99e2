from app.schemas.claim import Claim
from app.services.claim_backend import ClaimBackend, Subscription


def make_claim(owner_id, date, display_name=None, claimed_at=1):
    return Claim(
        owner_id=owner_id,
        display_name=display_name or owner_id.title(),
        avatar_url=f"https://example.test/{owner_id}.svg",
        date=date,
        claimed_at=claimed_at,
    )


class FakeBackend(ClaimBackend):
    """購読のコールバックを手で叩けるバックエンド"""

    def __init__(self):
        self.subscriptions = []
        self.writes = []
        self.deletes = []

    def subscribe(self, on_snapshot, on_error):
        subscription = Subscription(lambda: None)
        self.subscriptions.append((on_snapshot, on_error, subscription))
        return subscription

    def push(self, claims, index=-1):
        on_snapshot, _, _ = self.subscriptions[index]
        on_snapshot(list(claims))

    def fail(self, error, index=-1):
        _, on_error, _ = self.subscriptions[index]
        on_error(error)

    async def set_document(self, claim):
        self.writes.append(claim)

    async def delete_document(self, owner_id):
        self.deletes.append(owner_id)
