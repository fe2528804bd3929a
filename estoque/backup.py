"""Versioned JSON backup envelope."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Mapping, Sequence

from . import schema
from .errors import FormatError

BACKUP_VERSION = "1.0"
SUPPORTED_VERSIONS = frozenset({BACKUP_VERSION})


def to_envelope(
    collections: Mapping[str, Sequence[Mapping[str, Any]]],
    exported_at: datetime | None = None,
) -> dict:
    """Snapshot every row of every collection, verbatim."""
    exported_at = exported_at or datetime.now(timezone.utc)
    return {
        "version": BACKUP_VERSION,
        "exportedAt": exported_at.isoformat(),
        "data": {name: list(rows) for name, rows in collections.items()},
    }


def from_envelope(envelope: Any) -> dict[str, list[dict]]:
    """Return the rows of each collection held in an envelope.

    Every known collection is present in the result; the ones missing from
    the envelope map to an empty list. Unknown collection names are kept.

    Raises:
        FormatError: The envelope has no ``data`` object, a collection entry
            is not a list of objects, or the version tag is not recognized.
    """
    if not isinstance(envelope, Mapping) or "data" not in envelope:
        raise FormatError("Arquivo de backup inválido: campo 'data' ausente")

    version = envelope.get("version")
    if version is not None and str(version) not in SUPPORTED_VERSIONS:
        raise FormatError(f"Versão de backup não suportada: {version}")

    data = envelope["data"]
    if not isinstance(data, Mapping):
        raise FormatError("Arquivo de backup inválido: 'data' deve ser um objeto")

    result: dict[str, list[dict]] = {name: [] for name in schema.COLLECTIONS}
    for name, rows in data.items():
        if rows is None:
            continue
        if not isinstance(rows, list):
            raise FormatError(
                f"Arquivo de backup inválido: '{name}' deve ser uma lista"
            )
        if not all(isinstance(row, Mapping) for row in rows):
            raise FormatError(
                f"Arquivo de backup inválido: '{name}' contém linhas que não são objetos"
            )
        result[name] = rows
    return result


def dumps_envelope(envelope: dict) -> str:
    return json.dumps(envelope, ensure_ascii=False, indent=2, default=str)


def loads_envelope(text: str | bytes) -> Any:
    """Parse backup JSON.

    Raises:
        FormatError: If the text is not valid JSON.
    """
    try:
        return json.loads(text)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise FormatError(f"Arquivo de backup inválido: {e}") from e
