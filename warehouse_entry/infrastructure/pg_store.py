"""
PostgreSQL-backed record store for the chooser.

Reads editor blocks from a table shaped like::

    CREATE TABLE note_blocks (
        note_id     BIGINT  NOT NULL,
        block_index INTEGER NOT NULL,
        type        TEXT    NOT NULL,
        data        JSONB   NOT NULL,
        PRIMARY KEY (note_id, block_index)
    );

and answers chooser queries with a case-insensitive prefix match on one JSON
field. Uses asyncpg directly; one short-lived connection per query.
"""

from __future__ import annotations

import json
import re
from typing import Any, List, Optional

import asyncpg
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from warehouse_entry.config import get_settings
from warehouse_entry.domain.models import (
    QUERYABLE_FIELDS,
    QueryRequest,
    QueryResponse,
    QueryResultItem,
)
from warehouse_entry.infrastructure.errors import RecordStoreError
from warehouse_entry.utils.logging import get_logger

log = get_logger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")

_QUERY_SQL = """
SELECT note_id, block_index, type, data
FROM {table}
WHERE type = $1
  AND ($2::text IS NULL OR $3::text = '' OR data->>$2 ILIKE $3 || '%')
ORDER BY note_id, block_index
LIMIT $4
"""


def escape_like(prefix: str) -> str:
    """Escape LIKE wildcards so user text matches literally."""
    return prefix.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type((OSError, ConnectionError, asyncpg.CannotConnectNowError)),
    reraise=True,
)
async def _connect(dsn: str) -> Any:
    return await asyncpg.connect(dsn)


class PostgresRecordStore:
    """
    Query capability over a PostgreSQL blocks table.

    Parameters
    ----------
    dsn : str | None
        Connection string. Defaults to the DSN composed from settings.
    table : str | None
        Blocks table (optionally schema-qualified). Defaults to settings.
    """

    def __init__(self, dsn: Optional[str] = None, table: Optional[str] = None) -> None:
        settings = get_settings()
        self.dsn = dsn or settings.dsn
        self.table = table or settings.blocks_table
        if not _IDENTIFIER.match(self.table):
            raise RecordStoreError(f"Invalid blocks table name '{self.table}'")

    def _row_to_item(self, row: Any) -> QueryResultItem:
        data = row["data"]
        if isinstance(data, str):
            data = json.loads(data)
        return QueryResultItem(
            record_type=row["type"],
            container_id=row["note_id"],
            position_index=row["block_index"],
            data=data or {},
        )

    async def __call__(self, request: QueryRequest) -> QueryResponse:
        if request.field is not None and request.field not in QUERYABLE_FIELDS:
            raise RecordStoreError(f"Field '{request.field}' is not queryable")

        sql = _QUERY_SQL.format(table=self.table)
        prefix = escape_like((request.q or "").strip())

        conn = await _connect(self.dsn)
        try:
            rows = await conn.fetch(sql, request.record_type, request.field, prefix, request.limit)
        finally:
            await conn.close()

        items: List[QueryResultItem] = [self._row_to_item(row) for row in rows]
        log.debug(
            "Postgres store query",
            extra={"table": self.table, "field": request.field, "matches": len(items)},
        )
        return QueryResponse(items=items)


__all__ = ["PostgresRecordStore", "escape_like"]
