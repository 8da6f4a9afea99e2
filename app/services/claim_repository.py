# digitals-calendar/app/services/claim_repository.py
"""
予約ドキュメントストア（サーバー側）

owner_id をキーにした「1人1件」のストア。書き込みはキー単位で丸ごと上書き。
"""

from typing import List, Optional
from sqlalchemy.dialects.mysql import insert as mysql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from app.db import models
from app.schemas.claim import Claim
from app.services.claim_hub import ClaimHub


def list_claims(db: Session) -> List[Claim]:
    """コレクション全体を取得（スナップショット）"""
    rows = (
        db.query(models.ClaimEntry)
        .order_by(models.ClaimEntry.claimed_at.asc(), models.ClaimEntry.owner_id.asc())
        .all()
    )
    return [Claim.model_validate(row) for row in rows]


def get_claim(db: Session, owner_id: str) -> Optional[Claim]:
    """キー指定で1件取得"""
    row = db.get(models.ClaimEntry, owner_id)
    return Claim.model_validate(row) if row else None


def _upsert_statement(dialect_name: str, values: dict):
    """方言ごとの1文のupsert（対応していなければNone）"""
    table = models.ClaimEntry.__table__
    fields = {k: v for k, v in values.items() if k != "owner_id"}
    if dialect_name == "sqlite":
        stmt = sqlite_insert(table).values(**values)
        return stmt.on_conflict_do_update(index_elements=[table.c.owner_id], set_=fields)
    if dialect_name == "mysql":
        stmt = mysql_insert(table).values(**values)
        return stmt.on_duplicate_key_update(**fields)
    return None


def upsert_claim(db: Session, claim: Claim) -> Claim:
    """
    予約を書き込む。既にあれば全フィールドを上書き（同じ人が2件持つことはない）
    読んでから追加するのではなく1文で書くので、同じ人の初回書き込みが重なっても衝突しない。
    """
    values = claim.model_dump()
    stmt = _upsert_statement(db.get_bind().dialect.name, values)
    if stmt is not None:
        db.execute(stmt)
    else:
        db.merge(models.ClaimEntry(**values))
    db.commit()
    return get_claim(db, claim.owner_id)


def delete_claim(db: Session, owner_id: str) -> bool:
    """予約を削除。なければ何もしない（エラーにしない）"""
    row = db.get(models.ClaimEntry, owner_id)
    if row is None:
        return False
    db.delete(row)
    db.commit()
    return True


def publish_snapshot(db: Session, hub: ClaimHub) -> List[Claim]:
    """書き込み後に最新の全予約を購読者へ配る"""
    claims = list_claims(db)
    hub.publish(claims)
    return claims
