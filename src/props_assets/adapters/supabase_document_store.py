"""Supabase-backed document store."""

from dataclasses import dataclass
from datetime import datetime

from supabase import Client

from props_assets.adapters.supabase_calls import run_store_call
from props_assets.domain.models import SERVER_TIMESTAMP
from props_assets.services.tree_store import Document, DocumentStore

_COLUMNS = "path, document_id, fields"


@dataclass
class SupabaseDocumentStore(DocumentStore):
    """Stores path-addressed documents in a single Postgres table."""

    client: Client
    table: str = "documents"

    async def get(self, path: str) -> Document | None:
        """Return the document stored at a path, if present."""
        response = await run_store_call(
            lambda: self.client.table(self.table)
            .select(_COLUMNS)
            .eq("path", path)
            .limit(1)
            .execute(),
            f"Reading {path}",
        )
        if not response.data:
            return None
        return _parse_document(response.data[0])

    async def set(self, path: str, fields: dict[str, object]) -> None:
        """Upsert a document; marked fields get the database clock."""
        collection, document_id = path.rsplit("/", 1)
        payload, stamped = _split_server_timestamps(fields)
        await run_store_call(
            lambda: self.client.rpc(
                "put_document",
                {
                    "p_path": path,
                    "p_collection": collection,
                    "p_document_id": document_id,
                    "p_fields": payload,
                    "p_server_timestamps": stamped,
                    "p_table": self.table,
                },
            ).execute(),
            f"Writing {path}",
        )

    async def delete(self, path: str) -> None:
        """Delete the document stored at a path."""
        await run_store_call(
            lambda: self.client.table(self.table).delete().eq("path", path).execute(),
            f"Deleting {path}",
        )

    async def query(
        self,
        collection_path: str,
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[Document]:
        """Return the documents of a collection, ordered by a field."""

        def _execute():  # type: ignore[no-untyped-def]
            request = (
                self.client.table(self.table)
                .select(_COLUMNS)
                .eq("collection", collection_path)
            )
            if order_by is not None:
                request = request.order(f"fields->>{order_by}", desc=descending)
            return request.execute()

        response = await run_store_call(_execute, f"Listing {collection_path}")
        return [_parse_document(row) for row in response.data or []]


def _split_server_timestamps(
    fields: dict[str, object],
) -> tuple[dict[str, object], list[str]]:
    """Separate marker fields from the JSON payload."""
    payload: dict[str, object] = {}
    stamped: list[str] = []
    for key, value in fields.items():
        if value is SERVER_TIMESTAMP:
            stamped.append(key)
        else:
            payload[key] = _to_json(value)
    return payload, stamped


def _to_json(value: object) -> object:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(key): _to_json(item) for key, item in value.items()}
    if isinstance(value, list | tuple):
        return [_to_json(item) for item in value]
    return value


def _parse_document(row: dict[str, object]) -> Document:
    fields = row.get("fields")
    return Document(
        id=str(row["document_id"]),
        path=str(row["path"]),
        fields=dict(fields) if isinstance(fields, dict) else {},
    )
