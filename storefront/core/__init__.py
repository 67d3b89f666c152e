# Core modules

from .config import settings, get_settings
from .session import IncompleteOrder, SessionManager, UserSession, file_storage_factory

__all__ = ["settings", "get_settings", "IncompleteOrder", "SessionManager", "UserSession", "file_storage_factory"]
