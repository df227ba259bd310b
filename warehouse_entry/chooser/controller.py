"""
Chooser controller: pick an existing warehouse record and apply it wholesale.

State machine:

    CLOSED --open()--> OPEN_IDLE <--query()--> OPEN_QUERYING
    OPEN_* --select()/detach()--> CLOSED

The query capability is injected by the host. Queries are never cancelled;
two outstanding queries race and the last one to complete wins, unless
`sequence_queries` is enabled, in which case a completion older than the last
applied one is dropped.

Every write to the overlay is guarded by an attachment check because a query
may complete after the widget has been removed from the document.
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from typing import Any, Awaitable, Callable, List, Optional, Protocol, Union

from warehouse_entry.chooser.view import ChooserView
from warehouse_entry.domain.models import (
    QUERYABLE_FIELDS,
    RECORD_FIELDS,
    QueryRequest,
    QueryResponse,
    Record,
)
from warehouse_entry.notifications import (
    STYLE_ERROR,
    STYLE_WARNING,
    LoggingNotifier,
    Notifier,
)
from warehouse_entry.utils.logging import get_logger
from warehouse_entry.view import FIELD_LABELS

log = get_logger(__name__)

QueryCapability = Callable[[QueryRequest], Awaitable[Union[QueryResponse, Mapping]]]

DEFAULT_RECORD_TYPE = "warehouse"
DEFAULT_QUERY_LIMIT = 200

MSG_NOT_CONFIGURED = "No query interface configured; cannot choose from existing entries"
MSG_QUERY_FAILED = "Query failed, please try again later"


class ChooserState(enum.Enum):
    CLOSED = "closed"
    OPEN_IDLE = "open_idle"
    OPEN_QUERYING = "open_querying"


class ChooserHost(Protocol):
    """What the controller needs from the widget that owns it."""

    active_field: Optional[str]

    def focused_text(self) -> str:
        ...

    def apply_record(self, record: Record) -> None:
        ...


def _identity(text: str) -> str:
    return text


class ChooserController:
    """
    Drives the chooser overlay for one widget.

    Parameters
    ----------
    host : ChooserHost
        Widget whose record is replaced on selection.
    query_records : QueryCapability | None
        Async search over the external record store. None disables the chooser.
    notifier : Notifier | None
        Where warnings and errors are shown. Defaults to the package logger.
    translate : callable | None
        i18n hook applied to every user-visible string.
    record_type : str
        Block type tag sent with every query.
    limit : int
        Maximum number of results requested per query.
    sequence_queries : bool
        Drop completions that are older than the last applied one.
    """

    def __init__(
        self,
        host: ChooserHost,
        query_records: Optional[QueryCapability] = None,
        notifier: Optional[Notifier] = None,
        translate: Optional[Callable[[str], str]] = None,
        record_type: str = DEFAULT_RECORD_TYPE,
        limit: int = DEFAULT_QUERY_LIMIT,
        sequence_queries: bool = False,
    ) -> None:
        self._host = host
        self._query_records = query_records
        self._notifier = notifier or LoggingNotifier()
        self._t = translate or _identity
        self.record_type = record_type
        self.limit = limit
        self.sequence_queries = sequence_queries

        self.state = ChooserState.CLOSED
        self.view: Optional[ChooserView] = None
        self.items: List[Record] = []

        self._issued = 0
        self._last_applied = 0
        self._in_flight = 0

    @property
    def is_configured(self) -> bool:
        return self._query_records is not None

    @property
    def is_open(self) -> bool:
        return self.state is not ChooserState.CLOSED

    def _view_attached(self) -> bool:
        return self.view is not None and self.view.attached

    def _build_view(self) -> ChooserView:
        active = self._host.active_field
        selected = active if active in QUERYABLE_FIELDS else QUERYABLE_FIELDS[0]
        query_text = self._host.focused_text() if active else ""
        return ChooserView(
            field_options=[(name, self._t(FIELD_LABELS[name])) for name in QUERYABLE_FIELDS],
            selected_field=selected,
            query_text=query_text,
            headers=[self._t(FIELD_LABELS[name]) for name in RECORD_FIELDS],
        )

    async def open(self) -> None:
        """
        Show the overlay and run the initial query.

        Without a query capability only a warning is shown. When already open,
        visibility is toggled and nothing is re-queried.
        """
        if self._query_records is None:
            log.warning("Chooser opened without a query capability")
            self._notifier.show(self._t(MSG_NOT_CONFIGURED), style=STYLE_WARNING)
            return

        if self.is_open:
            if self._view_attached():
                self.view.toggle()
            return

        if self.view is not None:
            self.view.detach()
        self.view = self._build_view()
        self.state = ChooserState.OPEN_IDLE
        log.debug(
            "Chooser opened",
            extra={"field": self.view.selected_field, "q": self.view.query_text},
        )
        await self.run_query()

    async def run_query(self) -> None:
        """Query with the overlay's current field and trimmed filter text."""
        if self._query_records is None or not self._view_attached():
            return
        await self.query(self.view.selected_field, self.view.query_text.strip())

    async def query(self, field: str, prefix_text: str) -> None:
        """
        Issue one query and apply its result.

        Only valid while the chooser is open: a call made while closed is
        ignored and no request is issued. Failures are logged and shown as an
        error notification; the rows already on screen are left untouched and
        nothing is raised.
        """
        if self._query_records is None:
            return
        if not self.is_open:
            log.debug("Chooser query ignored while closed", extra={"field": field})
            return

        self._issued += 1
        sequence = self._issued
        self._in_flight += 1
        self.state = ChooserState.OPEN_QUERYING

        request = QueryRequest(
            record_type=self.record_type,
            field=field,
            q=prefix_text,
            limit=self.limit,
        )
        log.debug("Chooser query issued", extra={"sequence": sequence, **request.to_wire()})
        try:
            raw = await self._query_records(request)
            response = raw if isinstance(raw, QueryResponse) else QueryResponse.model_validate(raw)
        except Exception:  # noqa: BLE001 - any rejection is reported, never raised
            log.exception("Chooser query failed", extra={"sequence": sequence})
            self._notifier.show(self._t(MSG_QUERY_FAILED), style=STYLE_ERROR)
        else:
            self._apply_response(sequence, response)
        finally:
            self._in_flight -= 1
            if self._in_flight == 0 and self.state is ChooserState.OPEN_QUERYING:
                self.state = ChooserState.OPEN_IDLE

    def _apply_response(self, sequence: int, response: QueryResponse) -> None:
        if self.sequence_queries and sequence < self._last_applied:
            log.debug(
                "Dropping stale chooser result",
                extra={"sequence": sequence, "last_applied": self._last_applied},
            )
            return
        self._last_applied = sequence
        self.items = [item.data for item in response.items]
        log.info("Chooser results applied", extra={"items": len(self.items)})
        if self._view_attached():
            self.view.render_rows(self.items)

    def select(self, item: Union[Record, Mapping[str, Any]]) -> Record:
        """
        Replace the host's record with `item`, provenance included, and close.
        """
        record = item if isinstance(item, Record) else Record.from_persisted(dict(item))
        self._host.apply_record(record)
        if self._view_attached():
            self.view.hide()
        self.state = ChooserState.CLOSED
        log.info("Chooser selection applied", extra={"sku": record.sku})
        return record

    def select_row(self, index: int) -> Record:
        """Select the result shown at `index` in the table."""
        return self.select(self.items[index])

    def detach(self) -> None:
        if self.view is not None:
            self.view.detach()
        self.state = ChooserState.CLOSED


__all__ = [
    "ChooserController",
    "ChooserHost",
    "ChooserState",
    "QueryCapability",
]
