"""Read-side views of the marketplace: profiles, sales, badges, stats and activity."""

import logging
from collections import Counter
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..errors import NotFoundError
from ..models.claim import Verdict
from ..models.record import EPOCH, utc_now
from ..ports.record_store import RecordStore
from .revenue import PRICE_PER_CLAIM
from .settlement_service import BADGE_THRESHOLD, next_badge_in

logger = logging.getLogger(__name__)


def _by_time(records: List[Any], attr: str) -> List[Any]:
    return sorted(records[::-1], key=lambda r: getattr(r, attr) or EPOCH, reverse=True)


def _revenue(sale_count: int) -> str:
    return f"{sale_count * PRICE_PER_CLAIM:.2f}"


def _count_since(timestamps: List[Optional[datetime]], since: datetime) -> int:
    return sum(1 for ts in timestamps if ts is not None and ts >= since)


class MarketplaceQueryService:
    """Aggregate views over the record store. Only the profile lookup writes."""

    def __init__(self, store: RecordStore, badge_threshold: int = BADGE_THRESHOLD):
        self._store = store
        self._threshold = badge_threshold

    # Users

    async def get_or_create_profile(self, account_id: str) -> Dict[str, Any]:
        """Profile of an account, creating the user on first lookup."""
        user = await self._store.get_user(account_id)
        if user is None:
            logger.info(f"👤 Creating profile for {account_id}")
            user = await self._store.add_user(account_id)

        badges = await self._store.list_badges(recipient=account_id)
        purchases = await self._store.list_sales(buyer=account_id)
        return {
            **user.to_document(),
            "badges": len(badges),
            "purchases": len(purchases),
        }

    async def list_users(self, limit: int = 50) -> Dict[str, Any]:
        users = await self._store.list_users()
        return {
            "users": _by_time(users, "created_at")[:limit],
            "total": len(users),
        }

    async def dashboard(self, account_id: str) -> Dict[str, Any]:
        """Purchases, badges and progress of an existing user.

        Raises:
            NotFoundError: If the account has no profile
        """
        user = await self._store.get_user(account_id)
        if user is None:
            raise NotFoundError(f"No user found with account ID {account_id}")

        badges = _by_time(await self._store.list_badges(recipient=account_id), "minted_at")
        purchases = _by_time(await self._store.list_sales(buyer=account_id), "timestamp")
        return {
            "user": user,
            "stats": {
                "totalPurchases": len(purchases),
                "totalBadges": len(badges),
                "totalSpent": _revenue(len(purchases)),
                "nextBadgeIn": next_badge_in(user.purchase_count, self._threshold),
                "currentTier": badges[0].tier.value if badges else "NONE",
            },
            "recentPurchases": purchases[:5],
            "badges": badges,
        }

    # Sales

    async def list_sales(self, limit: int = 50, buyer: Optional[str] = None) -> Dict[str, Any]:
        sales = _by_time(await self._store.list_sales(buyer=buyer), "timestamp")[:limit]
        return {
            "sales": sales,
            "count": len(sales),
            "totalRevenue": _revenue(len(sales)),
        }

    async def marketplace_stats(self) -> Dict[str, Any]:
        sales = await self._store.list_sales()
        users = await self._store.list_users()
        return {
            "totalSales": len(sales),
            "totalRevenue": _revenue(len(sales)),
            "pricePerClaim": str(PRICE_PER_CLAIM),
            "activeUsers": sum(1 for u in users if u.purchase_count > 0),
            "avgPurchasesPerUser": round(len(sales) / len(users), 2) if users else 0,
            "avgConfidence": round(sum(s.confidence for s in sales) / len(sales), 1) if sales else 0,
        }

    # Badges

    async def badges_for(self, account_id: str) -> List[Any]:
        return await self._store.list_badges(recipient=account_id)

    async def list_badges(self, limit: int = 50) -> Dict[str, Any]:
        badges = await self._store.list_badges()
        return {
            "badges": _by_time(badges, "minted_at")[:limit],
            "total": len(badges),
        }

    async def badge_stats(self) -> Dict[str, Any]:
        badges = _by_time(await self._store.list_badges(), "minted_at")
        return {
            "totalBadges": len(badges),
            "tierDistribution": dict(Counter(b.tier.value for b in badges)),
            "latestBadge": badges[0] if badges else None,
        }

    # System

    async def system_stats(self) -> Dict[str, Any]:
        claims = await self._store.list_claims()
        users = await self._store.list_users()
        sales = await self._store.list_sales()
        badges = await self._store.list_badges()
        return {
            "totalClaims": len(claims),
            "trueClaims": sum(1 for c in claims if c.verdict == Verdict.TRUE),
            "falseClaims": sum(1 for c in claims if c.verdict == Verdict.FALSE),
            "totalUsers": len(users),
            "totalSales": len(sales),
            "totalBadges": len(badges),
            "totalRevenue": _revenue(len(sales)),
            "avgConfidence": round(sum(c.confidence for c in claims) / len(claims), 1) if claims else 0,
            "badgeThreshold": self._threshold,
            "pricePerClaim": str(PRICE_PER_CLAIM),
            "timestamp": utc_now().isoformat(),
        }

    async def leaderboard(self, limit: int = 10) -> List[Dict[str, Any]]:
        users = sorted(await self._store.list_users(), key=lambda u: u.purchase_count, reverse=True)
        return [
            {
                "accountId": u.account_id,
                "purchaseCount": u.purchase_count,
                "badgesEarned": u.badges_earned,
                "createdAt": u.created_at.isoformat() if u.created_at else None,
            }
            for u in users[:limit]
        ]

    async def activity(self, limit: int = 20) -> List[Dict[str, Any]]:
        """Interleaved feed of verifications, purchases and badges, newest first."""
        events = []
        for claim in await self._store.list_claims():
            events.append(("claim_verified", claim, claim.timestamp))
        for sale in await self._store.list_sales():
            events.append(("claim_purchased", sale, sale.timestamp))
        for badge in await self._store.list_badges():
            events.append(("badge_minted", badge, badge.minted_at))

        events.sort(key=lambda e: e[2] or EPOCH, reverse=True)
        return [
            {"type": kind, "data": record, "timestamp": ts.isoformat() if ts else None}
            for kind, record, ts in events[:limit]
        ]

    async def analytics(self) -> Dict[str, Any]:
        claims = await self._store.list_claims()
        sales = await self._store.list_sales()
        users = await self._store.list_users()
        badges = await self._store.list_badges()
        today = utc_now().replace(hour=0, minute=0, second=0, microsecond=0)

        return {
            "overview": {
                "totalClaims": len(claims),
                "totalSales": len(sales),
                "totalUsers": len(users),
                "totalBadges": len(badges),
                "totalRevenue": _revenue(len(sales)),
            },
            "verdicts": {
                verdict.value.lower(): sum(1 for c in claims if c.verdict == verdict)
                for verdict in Verdict
            },
            "confidence": {
                "high": sum(1 for c in claims if c.confidence >= 85),
                "medium": sum(1 for c in claims if 70 <= c.confidence < 85),
                "low": sum(1 for c in claims if c.confidence < 70),
                "average": round(sum(c.confidence for c in claims) / len(claims), 1) if claims else 0,
            },
            "tiers": dict(Counter(b.tier.value for b in badges)),
            "growth": {
                "dailyUsers": _count_since([u.created_at for u in users], today),
                "dailyClaims": _count_since([c.timestamp for c in claims], today),
                "dailySales": _count_since([s.timestamp for s in sales], today),
            },
        }
