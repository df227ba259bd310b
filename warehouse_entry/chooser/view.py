"""
View model for the chooser overlay: field selector, filter input and the
result table.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

from warehouse_entry.domain.models import RECORD_FIELDS, Record


@dataclass
class ChooserView:
    field_options: List[Tuple[str, str]]
    selected_field: str
    query_text: str = ""
    headers: List[str] = field(default_factory=list)
    rows: List[List[str]] = field(default_factory=list)
    visible: bool = True
    attached: bool = True

    def render_rows(self, records: Sequence[Record]) -> None:
        """Replace the table body with one row per record, columns in record order."""
        rows = []
        for record in records:
            values = record.to_persisted()
            rows.append([values[key] for key in RECORD_FIELDS])
        self.rows = rows

    def toggle(self) -> None:
        self.visible = not self.visible

    def hide(self) -> None:
        self.visible = False

    def detach(self) -> None:
        self.visible = False
        self.attached = False


__all__ = ["ChooserView"]
