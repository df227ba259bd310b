"""
Domain models for the warehouse entry widget.

Defines the canonical 10-field inventory record and the query contract used
by the chooser. Python attributes are snake_case; the persisted and wire
shapes use the camelCase keys the host editor stores.
"""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Dict, List, Optional, Tuple

from pydantic import AliasChoices, BaseModel, Field, field_validator

EDITABLE_FIELDS: Tuple[str, ...] = (
    "libraryName",
    "category",
    "name",
    "unitPriceWithTax",
    "quantity",
    "taxRate",
    "supplier",
    "sku",
)
PROVENANCE_FIELDS: Tuple[str, ...] = ("createdAt", "createdBy")
RECORD_FIELDS: Tuple[str, ...] = EDITABLE_FIELDS + PROVENANCE_FIELDS

# Fields offered by the chooser's field selector, in display order.
QUERYABLE_FIELDS: Tuple[str, ...] = ("sku", "category", "name", "supplier", "libraryName")


class Record(BaseModel):
    """
    Canonical warehouse record. Every value is a string; "" means unset.
    """

    library_name: str = Field("", alias="libraryName", description="Library (storage) name.")
    category: str = Field("", description="Item category.")
    name: str = Field("", description="Item name.")
    unit_price_with_tax: str = Field(
        "", alias="unitPriceWithTax", description="Unit price including tax."
    )
    quantity: str = Field("", description="Quantity on record.")
    tax_rate: str = Field("", alias="taxRate", description="Tax rate.")
    supplier: str = Field("", description="Supplier name.")
    sku: str = Field("", description="Stock keeping unit.")
    created_at: str = Field("", alias="createdAt", description="Entry time, system generated.")
    created_by: str = Field("", alias="createdBy", description="Entry author, system generated.")

    model_config = {
        "frozen": True,
        "populate_by_name": True,
        "extra": "ignore",
    }

    @field_validator("*", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        if value is None:
            return ""
        return value if isinstance(value, str) else str(value)

    def to_persisted(self) -> Dict[str, str]:
        """Dump the flat camelCase shape the host stores, every key present."""
        return self.model_dump(by_alias=True)

    @classmethod
    def from_persisted(cls, data: Dict[str, Any]) -> "Record":
        """Build a record from an already canonical mapping."""
        return cls.model_validate(data)


class QueryRequest(BaseModel):
    """
    Request handed to the injected query capability.
    """

    record_type: str = Field(..., alias="recordType")
    field: Optional[str] = None
    q: Optional[str] = None
    limit: Optional[int] = None

    model_config = {
        "frozen": True,
        "populate_by_name": True,
    }

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class QueryResultItem(BaseModel):
    """
    One matching block returned by the external store.
    """

    record_type: str = Field(
        "", validation_alias=AliasChoices("recordType", "record_type", "type"),
        serialization_alias="recordType",
    )
    container_id: int = Field(
        0, validation_alias=AliasChoices("containerId", "container_id", "note_id"),
        serialization_alias="containerId",
    )
    position_index: int = Field(
        0, validation_alias=AliasChoices("positionIndex", "position_index", "block_index"),
        serialization_alias="positionIndex",
    )
    data: Record = Field(default_factory=Record)

    @field_validator("record_type", mode="before")
    @classmethod
    def _type_text(cls, value: Any) -> str:
        return value if isinstance(value, str) else ""

    # Location is informational only; a bad value must not sink the batch.
    @field_validator("container_id", "position_index", mode="before")
    @classmethod
    def _location(cls, value: Any) -> int:
        try:
            return int(value)
        except (TypeError, ValueError, OverflowError):
            return 0

    @field_validator("data", mode="before")
    @classmethod
    def _empty_data(cls, value: Any) -> Any:
        if isinstance(value, Record):
            return value
        return dict(value) if isinstance(value, Mapping) else {}


class QueryResponse(BaseModel):
    """
    Batch of results for one query. Non-list `items` degrade to an empty batch
    and entries that are not objects are skipped.
    """

    items: List[QueryResultItem] = Field(default_factory=list)

    @field_validator("items", mode="before")
    @classmethod
    def _items_list(cls, value: Any) -> Any:
        if not isinstance(value, list):
            return []
        return [item for item in value if isinstance(item, (Mapping, QueryResultItem))]


__all__ = [
    "EDITABLE_FIELDS",
    "PROVENANCE_FIELDS",
    "QUERYABLE_FIELDS",
    "RECORD_FIELDS",
    "QueryRequest",
    "QueryResponse",
    "QueryResultItem",
    "Record",
]
