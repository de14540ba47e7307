"""JSON-file implementation of the record store."""

import asyncio
import json
import logging
import os
import random
import string
import tempfile
import time
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Type, TypeVar

from pydantic import ValidationError as PydanticValidationError

from ...domain.errors import NotFoundError, StorageError
from ...domain.models.badge import Badge
from ...domain.models.claim import Claim, Verdict
from ...domain.models.record import MarketRecord, utc_now
from ...domain.models.sale import Sale
from ...domain.models.user import User
from ...domain.ports.record_store import RecordStore

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=MarketRecord)

CLAIMS = "claims"
USERS = "users"
SALES = "sales"
BADGES = "badges"
COLLECTIONS = (CLAIMS, USERS, SALES, BADGES)

_ID_ALPHABET = string.digits + string.ascii_lowercase


def generate_id(prefix: str) -> str:
    """Record id of the form ``<prefix>_<epoch-ms>_<6 base36 chars>``."""
    suffix = "".join(random.choices(_ID_ALPHABET, k=6))
    return f"{prefix}_{int(time.time() * 1000)}_{suffix}"


class JsonRecordStore(RecordStore):
    """Record store keeping each collection in a JSON file.

    The in-memory copy of every collection is authoritative. Each mutation
    takes the collection's lock, applies the change to that copy, and writes
    the file atomically (temp file + rename) before releasing the lock; a
    failed write rolls the change back and raises ``StorageError``. With no
    ``data_dir`` the store is memory-only.
    """

    def __init__(self, data_dir: Optional[str] = None):
        """Initialize the store.

        Args:
            data_dir: Directory holding claims.json, users.json, sales.json and
                badges.json; None keeps everything in memory
        """
        self._data_dir = Path(data_dir) if data_dir else None
        self._collections: Dict[str, List[Dict[str, Any]]] = {name: [] for name in COLLECTIONS}
        self._locks: Dict[str, asyncio.Lock] = {name: asyncio.Lock() for name in COLLECTIONS}
        self._initialized = False

    async def initialize(self) -> None:
        """Create the data directory and load existing collections."""
        if self._initialized:
            return

        if self._data_dir is not None:
            try:
                self._data_dir.mkdir(parents=True, exist_ok=True)
                for name in COLLECTIONS:
                    path = self._path(name)
                    if path.exists():
                        self._collections[name] = json.loads(path.read_text(encoding="utf-8") or "[]")
                    else:
                        self._write_file(name, [])
            except (OSError, ValueError) as e:
                logger.error(f"❌ Storage initialization failed: {e}")
                raise StorageError(f"Storage initialization failed: {e}") from e

        self._initialized = True
        logger.info(f"✅ Record store initialized ({self._data_dir or 'in-memory'})")

    def _path(self, name: str) -> Path:
        return self._data_dir / f"{name}.json"

    def _write_file(self, name: str, documents: List[Dict[str, Any]]) -> None:
        path = self._path(name)
        fd, tmp_path = tempfile.mkstemp(dir=str(self._data_dir), prefix=f".{name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(documents, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    async def _persist(self, name: str) -> None:
        """Write a collection to disk; caller holds the collection lock."""
        if self._data_dir is None:
            return
        snapshot = list(self._collections[name])
        try:
            await asyncio.to_thread(self._write_file, name, snapshot)
        except OSError as e:
            raise StorageError(f"Failed to write {name}: {e}") from e

    async def _mutate(self, name: str, change: Callable[[List[Dict[str, Any]]], Any]) -> Any:
        """Apply ``change`` to a collection under its lock and persist it."""
        async with self._locks[name]:
            documents = self._collections[name]
            backup = [dict(d) for d in documents]
            try:
                result = change(documents)
                await self._persist(name)
            except StorageError:
                documents[:] = backup
                logger.error(f"❌ Storage write to {name} failed, change rolled back")
                raise
            return result

    def _load(self, model: Type[RecordT], documents: List[Dict[str, Any]]) -> List[RecordT]:
        try:
            return [model.model_validate(doc) for doc in documents]
        except PydanticValidationError as e:
            raise StorageError(f"Corrupt {model.__name__} record: {e}") from e

    def _new_document(self, prefix: str, record: MarketRecord, time_field: str) -> Dict[str, Any]:
        document = record.to_document()
        document["id"] = document.get("id") or generate_id(prefix)
        if not document.get(time_field):
            document[time_field] = utc_now().isoformat()
        return document

    async def _append(self, name: str, prefix: str, record: RecordT, time_field: str) -> RecordT:
        document = self._new_document(prefix, record, time_field)
        await self._mutate(name, lambda docs: docs.append(document))
        return type(record).model_validate(document)

    # Claims

    async def list_claims(self) -> List[Claim]:
        return self._load(Claim, list(self._collections[CLAIMS]))

    async def add_claim(self, claim: Claim) -> Claim:
        return await self._append(CLAIMS, "claim", claim, "timestamp")

    async def get_claim(self, claim_id: str) -> Optional[Claim]:
        for doc in self._collections[CLAIMS]:
            if doc.get("id") == claim_id:
                return Claim.model_validate(doc)
        return None

    async def get_or_add_claim(self, claim: Claim) -> Claim:
        def change(docs: List[Dict[str, Any]]) -> Dict[str, Any]:
            for doc in reversed(docs):
                if doc.get("text") == claim.text and doc.get("verdict") == claim.verdict.value:
                    return doc
            document = self._new_document("claim", claim, "timestamp")
            docs.append(document)
            return document

        return Claim.model_validate(await self._mutate(CLAIMS, change))

    async def get_claim_by_text(self, text: str, verdict: Optional[Verdict] = None) -> Optional[Claim]:
        for doc in reversed(self._collections[CLAIMS]):
            if doc.get("text") != text:
                continue
            if verdict is not None and doc.get("verdict") != verdict.value:
                continue
            return Claim.model_validate(doc)
        return None

    # Sales

    async def list_sales(self, buyer: Optional[str] = None) -> List[Sale]:
        docs = [d for d in self._collections[SALES] if buyer is None or d.get("buyer") == buyer]
        return self._load(Sale, docs)

    async def add_sale(self, sale: Sale) -> Sale:
        return await self._append(SALES, "sale", sale, "timestamp")

    # Users

    async def list_users(self) -> List[User]:
        return self._load(User, list(self._collections[USERS]))

    async def get_user(self, account_id: str) -> Optional[User]:
        doc = self._find_user(account_id)
        return User.model_validate(doc) if doc is not None else None

    def _find_user(self, account_id: str) -> Optional[Dict[str, Any]]:
        for doc in self._collections[USERS]:
            if doc.get("accountId") == account_id:
                return doc
        return None

    def _new_user_document(self, account_id: str) -> Dict[str, Any]:
        now = utc_now().isoformat()
        return User(
            id=generate_id("user"),
            account_id=account_id,
            purchase_count=0,
            badges_earned=0,
            created_at=now,
            updated_at=now,
        ).to_document()

    async def add_user(self, account_id: str) -> User:
        def change(docs: List[Dict[str, Any]]) -> Dict[str, Any]:
            existing = self._find_user(account_id)
            if existing is not None:
                return existing
            document = self._new_user_document(account_id)
            docs.append(document)
            return document

        return User.model_validate(await self._mutate(USERS, change))

    async def update_user(self, account_id: str, **updates) -> User:
        unknown = set(updates) - set(User.model_fields)
        if unknown:
            raise ValueError(f"Unknown user fields: {sorted(unknown)}")
        wire_updates = {User.model_fields[name].alias or name: value for name, value in updates.items()}

        def change(docs: List[Dict[str, Any]]) -> Dict[str, Any]:
            for index, doc in enumerate(docs):
                if doc.get("accountId") == account_id:
                    updated = {**doc, **wire_updates, "updatedAt": utc_now().isoformat()}
                    User.model_validate(updated)
                    docs[index] = updated
                    return docs[index]
            raise NotFoundError(f"User {account_id} not found")

        return User.model_validate(await self._mutate(USERS, change))

    async def increment_user_counters(
        self,
        account_id: str,
        purchases: int = 0,
        badges: int = 0,
    ) -> User:
        if purchases < 0 or badges < 0:
            raise ValueError("Counters never decrement")

        def change(docs: List[Dict[str, Any]]) -> Dict[str, Any]:
            for index, doc in enumerate(docs):
                if doc.get("accountId") == account_id:
                    break
            else:
                docs.append(self._new_user_document(account_id))
                index = len(docs) - 1

            doc = docs[index]
            docs[index] = {
                **doc,
                "purchaseCount": int(doc.get("purchaseCount", 0)) + purchases,
                "badgesEarned": int(doc.get("badgesEarned", 0)) + badges,
                "updatedAt": utc_now().isoformat(),
            }
            return docs[index]

        return User.model_validate(await self._mutate(USERS, change))

    # Badges

    async def list_badges(self, recipient: Optional[str] = None) -> List[Badge]:
        docs = [d for d in self._collections[BADGES] if recipient is None or d.get("recipient") == recipient]
        return self._load(Badge, docs)

    async def add_badge(self, badge: Badge) -> Badge:
        return await self._append(BADGES, "badge", badge, "mintedAt")

    async def clear_all(self) -> None:
        for name in COLLECTIONS:
            await self._mutate(name, lambda docs: docs.clear())
        logger.info("🗑️ All data cleared")
