"""Shared fixtures."""

import pytest

from estoque.errors import StoreError
from estoque.store import DataStore


class MemoryStore(DataStore):
    """In-memory store that records every call.

    Collections listed in ``fail_on`` reject writes with a StoreError;
    ``fail_reads`` does the same for reads.
    """

    def __init__(self, data=None, fail_on=(), fail_reads=()):
        self.data = {k: list(v) for k, v in (data or {}).items()}
        self.fail_on = set(fail_on)
        self.fail_reads = set(fail_reads)
        self.calls: list[tuple[str, str]] = []
        self.closed = False

    async def select_all(self, collection):
        self.calls.append(("select_all", collection))
        if collection in self.fail_reads:
            raise StoreError("falha de leitura", collection)
        return [dict(r) for r in self.data.get(collection, [])]

    async def insert(self, collection, rows):
        self.calls.append(("insert", collection))
        if collection in self.fail_on:
            raise StoreError("violação de chave estrangeira", collection)
        self.data.setdefault(collection, []).extend(dict(r) for r in rows)

    async def upsert(self, collection, rows):
        self.calls.append(("upsert", collection))
        if collection in self.fail_on:
            raise StoreError("violação de chave estrangeira", collection)
        existing = self.data.setdefault(collection, [])
        for row in rows:
            for i, old in enumerate(existing):
                if row.get("id") is not None and old.get("id") == row.get("id"):
                    existing[i] = dict(row)
                    break
            else:
                existing.append(dict(row))

    async def close(self):
        self.closed = True

    def writes(self):
        return [c for op, c in self.calls if op in ("insert", "upsert")]

    def reads(self):
        return [c for op, c in self.calls if op == "select_all"]


@pytest.fixture
def make_store():
    """Build a fresh MemoryStore: ``make_store(data, fail_on={...})``."""

    def factory(data=None, **kwargs) -> MemoryStore:
        return MemoryStore(data, **kwargs)

    return factory


@pytest.fixture
def sample_data():
    """A small consistent data set across all six collections."""
    return {
        "storage_locations": [
            {"id": "loc-1", "name": "Almoxarifado Central", "description": None},
        ],
        "invoices": [
            {"id": "nf-1", "numero": "NF-001", "data": "2025-01-15",
             "valor_total": 1500.0, "local_id": "loc-1"},
        ],
        "products": [
            {"id": "p-1", "produto": "Arroz", "marca": "Marca X",
             "quantidade": 100, "unidade": "kg", "validade": "2025-02-01",
             "valor": 5.99, "estoque_minimo": 10, "local_id": "loc-1",
             "status": "disponivel"},
            {"id": "p-2", "produto": "Feijão", "marca": "Marca Y",
             "quantidade": 2, "unidade": "kg", "validade": None,
             "valor": 8.5, "estoque_minimo": 5, "local_id": "loc-1",
             "status": "baixo_estoque"},
        ],
        "product_entries": [
            {"id": "e-1", "dia": "2025-01-15", "produto_id": "p-1",
             "local_id": "loc-1", "quantidade": 100, "invoice_id": "nf-1",
             "observacao": "Recebimento"},
        ],
        "product_exits": [
            {"id": "s-1", "dia": "2025-01-20", "produto_id": "p-1",
             "local_id": "loc-1", "quantidade": 10, "motivo": "Distribuição"},
        ],
        "shopping_list": [
            {"id": "c-1", "produto": "Óleo", "quantidade": 5, "unidade": "litro",
             "prioridade": "alta", "comprado": True},
            {"id": "c-2", "produto": "Sal", "quantidade": 2, "unidade": "kg",
             "prioridade": "baixa", "comprado": False},
        ],
    }
