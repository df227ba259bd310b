"""
Warehouse entry block for a block-based document editor.

`WarehouseForm` is the piece the host editor instantiates per block. It builds
the canonical record (reconcile, then resolve provenance), renders it into a
`FormView`, tracks the focused field for the chooser, and turns the rendered
text back into a record when the host asks to save.

Usage:
    form = WarehouseForm(data=persisted, config=WidgetConfig(query_records=store))
    view = form.render()
    view.find("sku").html = "AB12"
    persisted = form.save().to_persisted()
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from warehouse_entry.chooser.controller import ChooserController, QueryCapability
from warehouse_entry.config import Settings, get_settings
from warehouse_entry.domain.metadata import (
    HostIdentity,
    IdentityLookup,
    resolve_created_at,
    resolve_created_by,
)
from warehouse_entry.domain.models import EDITABLE_FIELDS, RECORD_FIELDS, Record
from warehouse_entry.domain.reconciler import reconcile
from warehouse_entry.notifications import Notifier
from warehouse_entry.utils.logging import get_logger
from warehouse_entry.view import (
    DEFAULT_PLACEHOLDERS,
    FIELD_LABELS,
    FieldElement,
    FormView,
)

log = get_logger(__name__)


@dataclass
class WidgetConfig:
    """
    Host-supplied configuration for one block.

    All capabilities are optional; the widget degrades to empty provenance
    fields and a disabled chooser when they are missing.
    """

    placeholders: Dict[str, str] = field(default_factory=dict)
    query_records: Optional[QueryCapability] = None
    get_current_user_label: Optional[Callable[[], str]] = None
    get_now_label: Optional[Callable[[], str]] = None


def _identity(text: str) -> str:
    return text


class WarehouseForm:
    """Editor block capturing one warehouse record."""

    is_read_only_supported = True
    contentless = True
    enable_line_breaks = True
    toolbox = {"title": "Warehouse"}

    # Every field keeps line breaks only; the host sanitizer strips the rest.
    SANITIZE_CONFIG: Dict[str, Dict[str, bool]] = {key: {"br": True} for key in RECORD_FIELDS}

    def __init__(
        self,
        data: Any = None,
        config: Optional[WidgetConfig] = None,
        *,
        read_only: bool = False,
        notifier: Optional[Notifier] = None,
        identity: Optional[IdentityLookup] = None,
        translate: Optional[Callable[[str], str]] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        settings = settings or get_settings()
        self.config = config or WidgetConfig()
        self.read_only = read_only
        self._t = translate or _identity

        placeholders = {**DEFAULT_PLACEHOLDERS, **self.config.placeholders}
        self.placeholders = {key: self._t(text) for key, text in placeholders.items()}

        if identity is None:
            identity = HostIdentity(token_key=settings.token_storage_key)

        reconciled = reconcile(data)
        self.data: Record = reconciled.model_copy(
            update={
                "created_at": resolve_created_at(
                    reconciled.created_at, self.config.get_now_label
                ),
                "created_by": resolve_created_by(
                    reconciled.created_by, self.config.get_current_user_label, identity
                ),
            }
        )

        self.active_field: Optional[str] = None
        self.view: Optional[FormView] = None
        self.chooser = ChooserController(
            self,
            query_records=self.config.query_records,
            notifier=notifier,
            translate=self._t,
            record_type=settings.record_type,
            limit=settings.query_limit,
            sequence_queries=settings.sequence_queries,
        )

    def render(self) -> FormView:
        values = self.data.to_persisted()
        elements = [
            FieldElement(
                field=key,
                label=self._t(FIELD_LABELS[key]),
                html=values[key],
                placeholder=self.placeholders.get(key, ""),
                editable=key in EDITABLE_FIELDS and not self.read_only,
            )
            for key in RECORD_FIELDS
        ]
        self.view = FormView(elements=elements, show_chooser_button=not self.read_only)
        return self.view

    def focus(self, field_name: str) -> None:
        """Remember the field the user last focused; the chooser starts from it."""
        self.active_field = field_name

    def focused_text(self) -> str:
        if self.view is None:
            return ""
        element = self.view.find(self.active_field)
        if element is None:
            return ""
        return element.inner_text.strip()

    def save(self, view: Optional[FormView] = None) -> Record:
        """
        Read the rendered text back into a fresh record.

        Provenance comes from memory; editable values come from the view, ""
        for any cell that is no longer rendered.
        """
        view = view or self.view
        values = {
            "createdAt": self.data.created_at,
            "createdBy": self.data.created_by,
        }
        for key in EDITABLE_FIELDS:
            element = view.find(key) if view is not None else None
            values[key] = element.html if element is not None else ""
        self.data = Record.from_persisted(values)
        return self.data

    def validate(self, data: Record) -> bool:
        return True

    def apply_record(self, record: Record) -> None:
        """Replace the record and push every value into the rendered cells."""
        self.data = record
        if self.view is None or not self.view.attached:
            log.debug("Record replaced while form is not rendered")
            return
        values = record.to_persisted()
        for element in self.view:
            if element.attached and element.field in values:
                element.html = values[element.field]

    async def open_chooser(self) -> None:
        await self.chooser.open()

    def detach(self) -> None:
        if self.view is not None:
            self.view.detach()
        self.chooser.detach()


__all__ = ["WarehouseForm", "WidgetConfig"]
