"""Port interface for the record store backing claims, sales, users and badges."""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..models.badge import Badge
from ..models.claim import Claim, Verdict
from ..models.sale import Sale
from ..models.user import User


class RecordStore(ABC):
    """Append/update interface over the four entity collections.

    Every added record receives a generated id and timestamp when it does not
    carry one. Updates are by unique key; implementations must never rewrite a
    collection from a stale copy, and ``increment_user_counters`` must be an
    atomic increment-and-fetch.

    Implementations raise ``StorageError`` on durability failures.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Prepare the underlying storage."""
        pass

    # Claims
    @abstractmethod
    async def list_claims(self) -> List[Claim]:
        pass

    @abstractmethod
    async def add_claim(self, claim: Claim) -> Claim:
        pass

    @abstractmethod
    async def get_claim(self, claim_id: str) -> Optional[Claim]:
        pass

    @abstractmethod
    async def get_claim_by_text(self, text: str, verdict: Optional[Verdict] = None) -> Optional[Claim]:
        """Most recent claim with exactly this text (and verdict, if given)."""
        pass

    @abstractmethod
    async def get_or_add_claim(self, claim: Claim) -> Claim:
        """Store a claim unless one with the same text and verdict exists.

        Returns the existing claim or the newly stored one; lookup and insert
        are atomic.
        """
        pass

    # Sales
    @abstractmethod
    async def list_sales(self, buyer: Optional[str] = None) -> List[Sale]:
        pass

    @abstractmethod
    async def add_sale(self, sale: Sale) -> Sale:
        pass

    # Users
    @abstractmethod
    async def list_users(self) -> List[User]:
        pass

    @abstractmethod
    async def get_user(self, account_id: str) -> Optional[User]:
        pass

    @abstractmethod
    async def add_user(self, account_id: str) -> User:
        """Create the user, or return the existing one for this account."""
        pass

    @abstractmethod
    async def update_user(self, account_id: str, **updates) -> User:
        """Overwrite fields of an existing user; raises ``NotFoundError``."""
        pass

    @abstractmethod
    async def increment_user_counters(
        self,
        account_id: str,
        purchases: int = 0,
        badges: int = 0,
    ) -> User:
        """Atomically get-or-create the user and add to its counters.

        Returns:
            The user as it is right after this increment
        """
        pass

    # Badges
    @abstractmethod
    async def list_badges(self, recipient: Optional[str] = None) -> List[Badge]:
        pass

    @abstractmethod
    async def add_badge(self, badge: Badge) -> Badge:
        pass

    @abstractmethod
    async def clear_all(self) -> None:
        """Remove every record (demo reset)."""
        pass
