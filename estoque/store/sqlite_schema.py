"""SQLite schema definitions and migration helpers."""

from __future__ import annotations

import sqlite3
from pathlib import Path

_SCHEMA_VERSION = 1

_DDL = """
CREATE TABLE IF NOT EXISTS storage_locations (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    description TEXT,
    created_by TEXT,
    created_at TEXT DEFAULT (datetime('now', 'localtime'))
);

CREATE TABLE IF NOT EXISTS invoices (
    id TEXT PRIMARY KEY,
    numero TEXT NOT NULL,
    data TEXT NOT NULL,
    valor_total REAL,
    local_id TEXT REFERENCES storage_locations(id) ON DELETE SET NULL,
    xml_file_path TEXT,
    pdf_file_path TEXT,
    qr_code TEXT,
    created_by TEXT,
    created_at TEXT DEFAULT (datetime('now', 'localtime'))
);

CREATE TABLE IF NOT EXISTS products (
    id TEXT PRIMARY KEY,
    produto TEXT NOT NULL,
    marca TEXT NOT NULL,
    quantidade REAL NOT NULL DEFAULT 0,
    unidade TEXT DEFAULT 'unidade'
        CHECK (unidade IN ('unidade', 'kg', 'litro', 'caixa', 'pacote')),
    validade TEXT,
    valor REAL,
    estoque_minimo REAL DEFAULT 0,
    local_id TEXT REFERENCES storage_locations(id) ON DELETE SET NULL,
    status TEXT DEFAULT 'disponivel'
        CHECK (status IN ('disponivel', 'baixo_estoque', 'fora_de_estoque')),
    created_by TEXT,
    created_at TEXT DEFAULT (datetime('now', 'localtime')),
    updated_at TEXT DEFAULT (datetime('now', 'localtime'))
);

CREATE INDEX IF NOT EXISTS idx_products_status ON products(status);
CREATE INDEX IF NOT EXISTS idx_products_validade ON products(validade);

CREATE TABLE IF NOT EXISTS product_entries (
    id TEXT PRIMARY KEY,
    dia TEXT NOT NULL DEFAULT (date('now', 'localtime')),
    produto_id TEXT REFERENCES products(id) ON DELETE CASCADE,
    local_id TEXT REFERENCES storage_locations(id) ON DELETE SET NULL,
    quantidade REAL NOT NULL,
    invoice_id TEXT REFERENCES invoices(id) ON DELETE SET NULL,
    observacao TEXT,
    created_by TEXT,
    created_at TEXT DEFAULT (datetime('now', 'localtime'))
);

CREATE INDEX IF NOT EXISTS idx_entries_dia ON product_entries(dia);

CREATE TABLE IF NOT EXISTS product_exits (
    id TEXT PRIMARY KEY,
    dia TEXT NOT NULL DEFAULT (date('now', 'localtime')),
    produto_id TEXT REFERENCES products(id) ON DELETE CASCADE,
    local_id TEXT REFERENCES storage_locations(id) ON DELETE SET NULL,
    quantidade REAL NOT NULL,
    motivo TEXT,
    created_by TEXT,
    created_at TEXT DEFAULT (datetime('now', 'localtime'))
);

CREATE INDEX IF NOT EXISTS idx_exits_dia ON product_exits(dia);

CREATE TABLE IF NOT EXISTS shopping_list (
    id TEXT PRIMARY KEY,
    produto TEXT NOT NULL,
    quantidade REAL NOT NULL,
    unidade TEXT DEFAULT 'unidade'
        CHECK (unidade IN ('unidade', 'kg', 'litro', 'caixa', 'pacote')),
    prioridade TEXT DEFAULT 'media',
    comprado BOOLEAN DEFAULT 0,
    created_by TEXT,
    created_at TEXT DEFAULT (datetime('now', 'localtime'))
);

CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER NOT NULL
);
"""


def ensure_schema(db_path: str | Path) -> sqlite3.Connection:
    """Open (or create) the database and ensure the schema is up to date.

    Args:
        db_path: Path to the SQLite database file.

    Returns:
        An open sqlite3.Connection with the schema applied and foreign keys
        enforced.
    """
    db_path = Path(db_path).expanduser()
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(str(db_path))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA foreign_keys=ON")

    try:
        row = conn.execute("SELECT version FROM schema_version").fetchone()
        current_version = row["version"] if row else 0
    except sqlite3.OperationalError:
        current_version = 0

    if current_version < _SCHEMA_VERSION:
        conn.executescript(_DDL)
        conn.execute("DELETE FROM schema_version")
        conn.execute(
            "INSERT INTO schema_version (version) VALUES (?)",
            (_SCHEMA_VERSION,),
        )
        conn.commit()

    return conn
