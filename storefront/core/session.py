"""Session management for storefront shoppers"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Optional

from cart import CartEngine, CartStorage, FileCartStorage

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class IncompleteOrder:
    """Order created by a checkout whose items were only partly recorded"""
    order_id: int
    failed_product_ids: list[int]
    recorded_product_ids: list[int]
    created_at: datetime = field(default_factory=_utcnow)


@dataclass
class UserSession:
    """Shopper session owning one cart"""
    session_id: str
    cart: CartEngine
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)
    user_id: Optional[int] = None
    order_ids: list[int] = field(default_factory=list)
    incomplete_orders: list[IncompleteOrder] = field(default_factory=list)

    def touch(self) -> None:
        self.updated_at = _utcnow()

    def record_order(self, order_id: int) -> None:
        self.order_ids.append(order_id)
        self.touch()

    def record_incomplete_order(
        self,
        order_id: int,
        failed_product_ids: list[int],
        recorded_product_ids: list[int],
    ) -> IncompleteOrder:
        """Keep a partly recorded order so it can be reconciled later"""
        incomplete = IncompleteOrder(
            order_id=order_id,
            failed_product_ids=failed_product_ids,
            recorded_product_ids=recorded_product_ids,
        )
        self.incomplete_orders.append(incomplete)
        self.touch()
        return incomplete


StorageFactory = Callable[[str], CartStorage]


def file_storage_factory(root: Path) -> StorageFactory:
    """Give each session its own directory under root"""
    return lambda session_id: FileCartStorage(root / session_id)


class SessionManager:
    """
    Manages shopper sessions.

    Sessions live in memory. A session that is not in memory but has a saved
    cart is restored from storage on first access, so carts survive restarts.
    """

    def __init__(self, storage_factory: StorageFactory):
        self.sessions: dict[str, UserSession] = {}
        self._storage_factory = storage_factory

    async def create_session(self) -> UserSession:
        """Create a new session with an empty cart"""
        session_id = str(uuid.uuid4())
        engine = CartEngine(storage=self._storage_factory(session_id))
        session = UserSession(session_id=session_id, cart=engine)
        self.sessions[session_id] = session
        logger.debug(f"Session {session_id} created")
        return session

    async def get_session(self, session_id: str) -> Optional[UserSession]:
        """Get session by ID, restoring its cart from storage if needed"""
        session = self.sessions.get(session_id)
        if session:
            return session

        if not _is_session_id(session_id):
            return None

        storage = self._storage_factory(session_id)
        if not await storage.exists():
            return None

        engine = await CartEngine.load(storage)
        session = UserSession(session_id=session_id, cart=engine)
        self.sessions[session_id] = session
        logger.info(f"Session {session_id} restored with {engine.item_count} item(s)")
        return session

    async def get_or_create_session(self, session_id: Optional[str] = None) -> UserSession:
        """Get existing session or create new one"""
        if session_id:
            session = await self.get_session(session_id)
            if session:
                return session
        return await self.create_session()

    def delete_session(self, session_id: str) -> bool:
        """Drop a session from memory. Its saved cart is left in storage."""
        if session_id in self.sessions:
            del self.sessions[session_id]
            return True
        return False

    def cleanup_old_sessions(self, max_age_hours: int = 24) -> int:
        """Remove sessions idle for longer than max_age_hours"""
        now = _utcnow()
        old_sessions = [
            sid for sid, session in self.sessions.items()
            if (now - session.updated_at).total_seconds() > max_age_hours * 3600
        ]
        for sid in old_sessions:
            del self.sessions[sid]
        return len(old_sessions)


def _is_session_id(value: str) -> bool:
    # Session ids double as storage directory names
    try:
        return str(uuid.UUID(value)) == value
    except ValueError:
        return False
