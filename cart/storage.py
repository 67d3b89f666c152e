"""
Cart persistence adapters

A cart is stored as one JSON document under a fixed key. Each session gets
its own storage instance, so the key never changes.
"""

import asyncio
import logging
import os
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)

STORAGE_KEY = "cart"


class CartStorageError(Exception):
    """Raised when a cart cannot be read from or written to storage"""
    pass


class CartStorage(ABC):
    """Key/value store holding one serialized cart"""

    key: str = STORAGE_KEY

    @abstractmethod
    async def read(self) -> Optional[str]:
        """Return the stored document, or None if nothing is stored"""

    @abstractmethod
    async def write(self, data: str) -> None:
        """Replace the stored document"""

    async def exists(self) -> bool:
        return await self.read() is not None


class MemoryCartStorage(CartStorage):
    """In-memory storage, lost when the process exits"""

    def __init__(self, key: str = STORAGE_KEY):
        self.key = key
        self.data: dict[str, str] = {}

    async def read(self) -> Optional[str]:
        return self.data.get(self.key)

    async def write(self, data: str) -> None:
        self.data[self.key] = data


class FileCartStorage(CartStorage):
    """
    Stores the cart as <directory>/<key>.json.

    Writes go to a temporary file first and are moved into place, so a
    reader never sees a half-written document.
    """

    def __init__(self, directory: Union[str, Path], key: str = STORAGE_KEY):
        self.directory = Path(directory)
        self.key = key

    @property
    def path(self) -> Path:
        return self.directory / f"{self.key}.json"

    async def read(self) -> Optional[str]:
        return await asyncio.to_thread(self._read)

    async def write(self, data: str) -> None:
        await asyncio.to_thread(self._write, data)

    async def exists(self) -> bool:
        return await asyncio.to_thread(self.path.is_file)

    def _read(self) -> Optional[str]:
        try:
            return self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise CartStorageError(f"Failed to read {self.path}: {e}") from e

    def _write(self, data: str) -> None:
        # One temporary file per write, so overlapping writers never share it
        tmp_path = self.directory / f".{self.key}.{uuid.uuid4().hex}.tmp"
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(data, encoding="utf-8")
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise CartStorageError(f"Failed to write {self.path}: {e}") from e
        logger.debug(f"Cart written to {self.path}")
