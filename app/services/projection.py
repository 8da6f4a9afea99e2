# digitals-calendar/app/services/projection.py
"""
予約セットから表示用のビューを作る純粋関数群（I/Oなし）

予約セットか表示月が変わるたびに呼び直す。キャッシュは持たない。
"""

from typing import Dict, Iterable, List, Optional

from app.schemas.claim import Claim


def own_claim(claims: Iterable[Claim], owner_id: Optional[str]) -> Optional[Claim]:
    """自分の予約（なければ None）"""
    if owner_id is None:
        return None
    for claim in claims:
        if claim.owner_id == owner_id:
            return claim
    return None


def claims_for_date(claims: Iterable[Claim], date: Optional[str]) -> List[Claim]:
    """指定日の予約一覧。並びは到着順（意味はない）"""
    if date is None:
        return []
    return [claim for claim in claims if claim.date == date]


def claims_by_date(claims: Iterable[Claim]) -> Dict[str, List[Claim]]:
    """日付ごとのバケツ。全バケツを合わせると元の予約セットになる"""
    buckets: Dict[str, List[Claim]] = {}
    for claim in claims:
        buckets.setdefault(claim.date, []).append(claim)
    return buckets


def roster_sorted_by_date(claims: Iterable[Claim]) -> List[Claim]:
    """
    日付の昇順に並べた一覧（サマリー表示用）

    YYYY-MM-DD なので文字列比較で足りる。sorted は安定ソートなので
    同じ日付の中では元の順番が保たれる。
    """
    return sorted(claims, key=lambda claim: claim.date)


def roster_label(count: int) -> str:
    """例: "1 person selected" / "3 people selected" """
    noun = "person" if count == 1 else "people"
    return f"{count} {noun} selected"
