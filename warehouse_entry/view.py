"""
Host-agnostic view model for the rendered form.

Each `FieldElement` stands in for one rendered value cell: it knows its field
name, label, placeholder, whether the user may edit it, and the markup it
currently shows. Hosts bind these objects to whatever they really draw.
"""

from __future__ import annotations

import html
import re
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

FIELD_LABELS: Dict[str, str] = {
    "libraryName": "Library",
    "category": "Category",
    "name": "Item name",
    "unitPriceWithTax": "Unit price (incl. tax)",
    "quantity": "Quantity",
    "taxRate": "Tax rate",
    "supplier": "Supplier",
    "sku": "SKU",
    "createdAt": "Created at",
    "createdBy": "Created by",
}

DEFAULT_PLACEHOLDERS: Dict[str, str] = {
    "libraryName": "Enter library name",
    "category": "Enter category",
    "name": "Enter item name",
    "unitPriceWithTax": "Enter unit price incl. tax",
    "quantity": "Enter quantity",
    "taxRate": "Enter tax rate",
    "supplier": "Enter supplier",
    "sku": "Enter SKU",
}

_LINE_BREAK = re.compile(r"<br\s*/?>", re.IGNORECASE)


def markup_to_text(markup: str) -> str:
    """Plain text of a field value: line breaks become newlines."""
    return html.unescape(_LINE_BREAK.sub("\n", markup or ""))


@dataclass
class FieldElement:
    field: str
    label: str
    html: str = ""
    placeholder: str = ""
    editable: bool = True
    attached: bool = True

    @property
    def inner_text(self) -> str:
        return markup_to_text(self.html)


@dataclass
class FormView:
    """The rendered form: value cells plus the optional chooser button."""

    elements: List[FieldElement] = field(default_factory=list)
    show_chooser_button: bool = True
    attached: bool = True

    def __iter__(self) -> Iterator[FieldElement]:
        return iter(self.elements)

    def find(self, field_name: Optional[str]) -> Optional[FieldElement]:
        if not self.attached or not field_name:
            return None
        for element in self.elements:
            if element.field == field_name and element.attached:
                return element
        return None

    def detach(self) -> None:
        self.attached = False
        for element in self.elements:
            element.attached = False


__all__ = [
    "DEFAULT_PLACEHOLDERS",
    "FIELD_LABELS",
    "FieldElement",
    "FormView",
    "markup_to_text",
]
