"""Remote data store speaking the Supabase (PostgREST) REST dialect."""

from __future__ import annotations

import json
import logging

import httpx

from .. import schema
from ..errors import StoreError
from . import DataStore

logger = logging.getLogger(__name__)


class RestStore(DataStore):
    """Reads and writes collections through ``/rest/v1/<table>``.

    Reads are paged with ``Range`` headers because the server caps the
    number of rows returned per request.
    """

    def __init__(
        self,
        url: str,
        api_key: str,
        timeout: float = 30.0,
        page_size: int = 1000,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not url or not api_key:
            raise ValueError(
                "URL e chave de API do Supabase são obrigatórias "
                "(SUPABASE_URL / SUPABASE_KEY)"
            )
        self._base_url = url.rstrip("/") + "/rest/v1/"
        self._api_key = api_key
        self._timeout = timeout
        self._page_size = page_size
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                headers={
                    "apikey": self._api_key,
                    "Authorization": f"Bearer {self._api_key}",
                },
                timeout=self._timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def select_all(self, collection: str) -> list[dict]:
        _check_collection(collection)
        client = self._get_client()
        rows: list[dict] = []
        start = 0
        while True:
            end = start + self._page_size - 1
            response = await self._send(
                collection,
                client.get(
                    collection,
                    params={"select": "*"},
                    headers={"Range-Unit": "items", "Range": f"{start}-{end}"},
                ),
            )
            page = response.json()
            rows.extend(page)
            if len(page) < self._page_size:
                break
            start += self._page_size
        logger.debug("%s: %d linha(s) lida(s)", collection, len(rows))
        return rows

    async def insert(self, collection: str, rows: list[dict]) -> None:
        await self._post(collection, rows, prefer="return=minimal")

    async def upsert(self, collection: str, rows: list[dict]) -> None:
        await self._post(
            collection, rows, prefer="resolution=merge-duplicates,return=minimal"
        )

    async def _post(self, collection: str, rows: list[dict], prefer: str) -> None:
        _check_collection(collection)
        if not rows:
            return
        # Rows may have differing keys; the union tells the server which
        # columns the payload covers.
        columns: list[str] = []
        for row in rows:
            for key in row:
                if key not in columns:
                    columns.append(key)
        client = self._get_client()
        await self._send(
            collection,
            client.post(
                collection,
                params={"columns": ",".join(columns)},
                content=json.dumps(rows, ensure_ascii=False, default=str),
                headers={"Content-Type": "application/json", "Prefer": prefer},
            ),
        )

    async def _send(self, collection: str, request) -> httpx.Response:
        try:
            response = await request
        except httpx.HTTPError as e:
            raise StoreError(f"Falha de conexão: {e}", collection) from e
        if response.is_error:
            raise StoreError(_error_message(response), collection)
        return response


def _check_collection(collection: str) -> None:
    if collection not in schema.COLLECTIONS:
        raise StoreError(f"Tabela desconhecida: {collection}", collection)


def _error_message(response: httpx.Response) -> str:
    """Extract PostgREST's error message, falling back to the status line."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"HTTP {response.status_code}: {response.text.strip() or response.reason_phrase}"
