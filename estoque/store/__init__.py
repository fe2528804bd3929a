"""Data store base class and factory."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..config import EstoqueConfig


class DataStore(ABC):
    """Abstract tabular store holding one table per collection.

    Rows are plain dicts keyed by column name. Every method may raise
    StoreError.
    """

    @abstractmethod
    async def select_all(self, collection: str) -> list[dict]:
        """Return every row of a collection, unfiltered."""
        ...

    @abstractmethod
    async def insert(self, collection: str, rows: list[dict]) -> None:
        """Insert rows as one request. Rows without an id get a new one."""
        ...

    @abstractmethod
    async def upsert(self, collection: str, rows: list[dict]) -> None:
        """Insert rows, replacing existing rows with the same id."""
        ...

    async def close(self) -> None:
        return None


def create_store(config: EstoqueConfig) -> DataStore:
    """Create a data store based on configuration."""
    backend_name = config.store.backend

    match backend_name:
        case "sqlite":
            from .sqlite import SQLiteStore

            return SQLiteStore(config.store.sqlite.path)
        case "supabase":
            from .rest import RestStore

            return RestStore(
                url=config.store.supabase.url,
                api_key=config.store.supabase.api_key,
                timeout=config.store.supabase.timeout,
                page_size=config.store.supabase.page_size,
            )
        case _:
            raise ValueError(
                f"Backend de dados desconhecido: {backend_name!r}  "
                f"(escolha entre sqlite / supabase)"
            )
