"""Shared route dependencies"""

from typing import Optional

from fastapi import Depends, HTTPException

from ..core.config import settings
from ..core.session import SessionManager, UserSession, file_storage_factory
from ..services.checkout import CheckoutOrchestrator
from ..services.store_client import StoreClient

# Initialize services lazily; tests replace these through dependency_overrides
store_client: Optional[StoreClient] = None
session_manager: Optional[SessionManager] = None


def get_store_client() -> StoreClient:
    """Get or create store API client"""
    global store_client
    if store_client is None:
        store_client = StoreClient(
            base_url=settings.store_api_base_url,
            timeout=settings.store_api_timeout,
        )
    return store_client


def get_session_manager() -> SessionManager:
    """Get or create session manager"""
    global session_manager
    if session_manager is None:
        session_manager = SessionManager(file_storage_factory(settings.cart_storage_path))
    return session_manager


def get_orchestrator(store: StoreClient = Depends(get_store_client)) -> CheckoutOrchestrator:
    return CheckoutOrchestrator(
        store_client=store,
        concurrent_item_submission=settings.concurrent_item_submission,
    )


async def require_session(session_id: str, manager: SessionManager) -> UserSession:
    session = await manager.get_session(session_id)
    if not session:
        raise HTTPException(status_code=404, detail="Session not found")
    return session
