import logging
from datetime import datetime, timezone
from typing import Dict, List, Any, Tuple, Optional, Iterable

from supabase import create_client, Client

from config import load_config

logger = logging.getLogger(__name__)

_client: Optional[Client] = None
_schema: Optional[str] = None

# (operator, column, value), operator is a PostgREST filter method name
Filter = Tuple[str, str, Any]
FILTER_OPERATORS = ("eq", "neq", "gt", "gte", "lt", "lte", "ilike")


def _create_client() -> Tuple[Client, str]:
    config = load_config()
    if not config.supabase_url or not config.supabase_key:
        raise RuntimeError("Set SUPABASE_URL and SUPABASE_KEY in .env or environment variables")
    return create_client(config.supabase_url, config.supabase_key), config.schema


def get_client() -> Client:
    """Process-wide client for table access. Never signed in as a user."""
    global _client, _schema
    if _client is None:
        _client, _schema = _create_client()
    return _client


def new_auth_client() -> Client:
    """
    Fresh client for one browser session's auth calls. Streamlit serves
    every session from one process, so a signed-in client must not be shared.
    """
    client, _ = _create_client()
    return client


def _table(table_name: str):
    client = get_client()
    return client.schema(_schema).table(table_name)


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def fetch_rows(
        table_name: str,
        *,
        order_by: Optional[str] = "created_at",
        desc: bool = True,
        filters: Optional[Iterable[Filter]] = None,
        columns: str = "*",
) -> Tuple[bool, str, List[Dict[str, Any]]]:
    """
    Fetch rows from a table, optionally filtered and ordered.
    Returns (ok, message, rows)
    """
    try:
        query = _table(table_name).select(columns)

        for op, col_name, val in filters or ():
            if op not in FILTER_OPERATORS:
                return False, f"Unsupported filter operator: {op}", []
            query = getattr(query, op)(col_name, val)

        if order_by:
            query = query.order(order_by, desc=desc)

        resp = query.execute()

        if getattr(resp, "error", None):
            return False, f"Fetch failed: {resp.error}", []

        return True, "Fetched", list(resp.data or [])

    except Exception as e:
        logger.exception("Fetching %s failed", table_name)
        return False, f"Unexpected error: {e}", []


def get_row(table_name: str, row_id: str) -> Tuple[bool, str, Optional[Dict[str, Any]]]:
    """
    Returns (ok, message, row_or_none). A missing row is not an error.
    """
    try:
        resp = (
            _table(table_name)
            .select("*")
            .eq("id", row_id)
            .limit(1)
            .execute()
        )

        if getattr(resp, "error", None):
            return False, f"Fetch failed: {resp.error}", None

        if not resp.data:
            return True, "No row found", None

        return True, "Fetched", resp.data[0]

    except Exception as e:
        logger.exception("Fetching %s/%s failed", table_name, row_id)
        return False, f"Unexpected error: {e}", None


def insert_row(table_name: str, row: Dict[str, Any]) -> Tuple[bool, str, Optional[Dict[str, Any]]]:
    """
    Insert a single row, stamping created_at / updated_at.
    Returns (ok, message, inserted_row)
    """
    now = utc_now_iso()
    payload = {**row, "created_at": now, "updated_at": now}
    try:
        resp = _table(table_name).insert(payload).execute()

        if getattr(resp, "error", None):
            return False, f"Insert failed: {resp.error}", None

        inserted = resp.data[0] if resp.data else None
        logger.info("Inserted row into %s (id=%s)", table_name, inserted and inserted.get("id"))
        return True, "Inserted", inserted

    except Exception as e:
        logger.exception("Insert into %s failed", table_name)
        return False, str(e), None


def update_row(
        table_name: str,
        row_id: str,
        changes: Dict[str, Any],
) -> Tuple[bool, str, Optional[Dict[str, Any]]]:
    """
    Update a single row by id. `updated_at` is stamped unless given.
    Returns (ok, message, updated_row)
    """
    payload = {**changes}
    payload.setdefault("updated_at", utc_now_iso())
    try:
        resp = (
            _table(table_name)
            .update(payload)
            .eq("id", row_id)
            .execute()
        )

        if getattr(resp, "error", None):
            return False, f"Update failed: {resp.error}", None

        if not resp.data:
            return False, f"Update failed: no row with id {row_id}", None

        logger.info("Updated %s/%s fields=%s", table_name, row_id, sorted(payload))
        return True, "Updated", resp.data[0]

    except Exception as e:
        logger.exception("Update of %s/%s failed", table_name, row_id)
        return False, str(e), None


def upsert_row(table_name: str, row: Dict[str, Any]) -> Tuple[bool, str, Optional[Dict[str, Any]]]:
    """
    Insert or replace a row keyed by its `id`.
    Returns (ok, message, row)
    """
    try:
        resp = _table(table_name).upsert(row, on_conflict="id").execute()

        if getattr(resp, "error", None):
            return False, f"Upsert failed: {resp.error}", None

        saved = resp.data[0] if resp.data else None
        logger.info("Upserted %s/%s", table_name, row.get("id"))
        return True, "Saved", saved

    except Exception as e:
        logger.exception("Upsert into %s failed", table_name)
        return False, str(e), None


def delete_row(table_name: str, row_id: str) -> Tuple[bool, str]:
    try:
        resp = (
            _table(table_name)
            .delete()
            .eq("id", row_id)
            .execute()
        )

        if getattr(resp, "error", None):
            return False, f"Delete failed: {resp.error}"

        logger.info("Deleted %s/%s", table_name, row_id)
        return True, "Deleted"

    except Exception as e:
        logger.exception("Delete of %s/%s failed", table_name, row_id)
        return False, str(e)


def delete_rows(table_name: str, row_ids: List[str]) -> Tuple[bool, str, int]:
    """
    Delete many rows in one statement.

    A single `DELETE ... WHERE id IN (...)` runs in one transaction on the
    database, so either every selected row goes or none does.
    Returns (ok, message, deleted_count)
    """
    ids = list(dict.fromkeys(row_ids))
    if not ids:
        return True, "Nothing to delete", 0

    try:
        resp = (
            _table(table_name)
            .delete()
            .in_("id", ids)
            .execute()
        )

        if getattr(resp, "error", None):
            return False, f"Delete failed: {resp.error}", 0

        deleted = len(resp.data or [])
        logger.info("Deleted %d/%d rows from %s", deleted, len(ids), table_name)
        return True, "Deleted", deleted

    except Exception as e:
        logger.exception("Batch delete from %s failed", table_name)
        return False, str(e), 0


class LiveCollection:
    """
    Snapshot of one table held for the lifetime of a rendered view.

    Streamlit reruns the owning fragment on a timer, each run opens a fresh
    collection, so the snapshot tracks the remote table without a socket.

        with LiveCollection("orders") as orders:
            for row in orders.rows: ...
    """

    def __init__(
            self,
            table_name: str,
            *,
            order_by: Optional[str] = "created_at",
            desc: bool = True,
            filters: Optional[Iterable[Filter]] = None,
    ):
        self.table_name = table_name
        self.order_by = order_by
        self.desc = desc
        self.filters = list(filters or ())
        self.rows: List[Dict[str, Any]] = []
        self.ok = False
        self.message = "Not loaded"
        self.closed = False

    def refresh(self) -> bool:
        if self.closed:
            raise RuntimeError(f"LiveCollection({self.table_name}) is closed")
        self.ok, self.message, rows = fetch_rows(
            self.table_name,
            order_by=self.order_by,
            desc=self.desc,
            filters=self.filters,
        )
        if self.ok:
            self.rows = rows
        return self.ok

    def close(self) -> None:
        self.closed = True
        self.rows = []

    def __enter__(self) -> "LiveCollection":
        self.refresh()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
