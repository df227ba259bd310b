"""
In-memory record store usable as the chooser's query capability.

Hosts that already hold their documents in memory (or in a JSON export) can
hand an `InMemoryRecordStore` straight to `WidgetConfig.query_records`.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Iterable, List, Sequence

from warehouse_entry.domain.models import QueryRequest, QueryResponse, QueryResultItem
from warehouse_entry.infrastructure.errors import RecordStoreError
from warehouse_entry.utils.logging import get_logger

log = get_logger(__name__)


class InMemoryRecordStore:
    """
    Prefix search over a fixed list of result items.

    Matching is case-insensitive on the requested field. An empty `q` or a
    missing `field` returns every item of the requested type, in stored order,
    truncated to `limit`.
    """

    def __init__(self, items: Iterable[QueryResultItem] = ()) -> None:
        self.items: List[QueryResultItem] = list(items)

    def __len__(self) -> int:
        return len(self.items)

    def search(self, request: QueryRequest) -> List[QueryResultItem]:
        prefix = (request.q or "").casefold()
        matches: List[QueryResultItem] = []
        for item in self.items:
            if item.record_type != request.record_type:
                continue
            if request.field and prefix:
                value = item.data.to_persisted().get(request.field, "")
                if not value.casefold().startswith(prefix):
                    continue
            matches.append(item)
            if request.limit is not None and len(matches) >= request.limit:
                break
        return matches

    async def __call__(self, request: QueryRequest) -> QueryResponse:
        matches = self.search(request)
        log.debug(
            "In-memory store query",
            extra={"field": request.field, "q": request.q, "matches": len(matches)},
        )
        return QueryResponse(items=matches)

    @classmethod
    def from_documents(cls, documents: Sequence[Mapping[str, Any]]) -> "InMemoryRecordStore":
        """
        Flatten host documents into result items.

        Each document looks like ``{"id": 7, "blocks": [{"type": "warehouse",
        "data": {...}}, ...]}``; the block's position becomes `positionIndex`.
        """
        items: List[QueryResultItem] = []
        for document in documents:
            blocks = document.get("blocks") or []
            for index, block in enumerate(blocks):
                if not isinstance(block, Mapping):
                    continue
                items.append(
                    QueryResultItem(
                        record_type=block.get("type", ""),
                        container_id=document.get("id", 0),
                        position_index=index,
                        data=block.get("data") or {},
                    )
                )
        return cls(items)


def load_json_store(path: Path | str) -> InMemoryRecordStore:
    """
    Read a JSON export into a store.

    Accepts a list of documents or an object with a ``documents`` list.
    """
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as f:
            payload = json.load(f)
    except (OSError, ValueError) as exc:
        raise RecordStoreError(f"Cannot read record store '{path}': {exc}") from exc

    if isinstance(payload, Mapping):
        payload = payload.get("documents")
    if not isinstance(payload, list):
        raise RecordStoreError(f"Record store '{path}' must hold a list of documents")

    store = InMemoryRecordStore.from_documents(
        [doc for doc in payload if isinstance(doc, Mapping)]
    )
    log.info("Record store loaded", extra={"path": str(path), "items": len(store)})
    return store


__all__ = ["InMemoryRecordStore", "load_json_store"]
