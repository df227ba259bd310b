"""
Reconciliation of persisted block data into the canonical record.

Two schema versions exist in stored documents: the current 10-field shape and
the legacy 5-field shape (`sku, name, unitPrice, quantity, supplier`). The
mapping between them lives in an ordered rule table, so a new schema version
only adds rows to `FIELD_RULES`.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, NamedTuple, Optional, Tuple

from warehouse_entry.domain.models import Record


class FieldRule(NamedTuple):
    canonical_key: str
    primary_key: str
    fallback_key: Optional[str] = None
    default: str = ""


FIELD_RULES: Tuple[FieldRule, ...] = (
    FieldRule("libraryName", "libraryName"),
    FieldRule("category", "category"),
    FieldRule("name", "name"),
    FieldRule("unitPriceWithTax", "unitPriceWithTax", "unitPrice"),
    FieldRule("quantity", "quantity"),
    FieldRule("taxRate", "taxRate"),
    FieldRule("supplier", "supplier"),
    FieldRule("sku", "sku"),
    # Provenance passes through; the metadata resolver fills the blanks.
    FieldRule("createdAt", "createdAt"),
    FieldRule("createdBy", "createdBy"),
)


def _text(raw: Mapping, key: Optional[str]) -> Optional[str]:
    if key is None:
        return None
    value = raw.get(key)
    return value if isinstance(value, str) else None


def reconcile(raw: Any, rules: Tuple[FieldRule, ...] = FIELD_RULES) -> Record:
    """
    Map arbitrary persisted input onto the canonical record.

    Total and side-effect free: non-mapping input, non-string values and
    unknown keys all degrade to the rule's default.
    """
    if not isinstance(raw, Mapping):
        raw = {}

    values = {}
    for rule in rules:
        value = _text(raw, rule.primary_key)
        if value is None:
            value = _text(raw, rule.fallback_key)
        values[rule.canonical_key] = rule.default if value is None else value
    return Record.model_validate(values)


__all__ = ["FIELD_RULES", "FieldRule", "reconcile"]
