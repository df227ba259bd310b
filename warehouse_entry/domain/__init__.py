"""
Domain package for the warehouse entry widget.

Exports the canonical record model, the schema reconciler and the provenance
resolvers. Keep this package free of view and I/O concerns.
"""

from warehouse_entry.domain.metadata import (
    HostIdentity,
    IdentityLookup,
    resolve_created_at,
    resolve_created_by,
)
from warehouse_entry.domain.models import (
    EDITABLE_FIELDS,
    PROVENANCE_FIELDS,
    QUERYABLE_FIELDS,
    RECORD_FIELDS,
    QueryRequest,
    QueryResponse,
    QueryResultItem,
    Record,
)
from warehouse_entry.domain.reconciler import FIELD_RULES, FieldRule, reconcile

__all__ = [
    "EDITABLE_FIELDS",
    "FIELD_RULES",
    "FieldRule",
    "HostIdentity",
    "IdentityLookup",
    "PROVENANCE_FIELDS",
    "QUERYABLE_FIELDS",
    "QueryRequest",
    "QueryResponse",
    "QueryResultItem",
    "RECORD_FIELDS",
    "Record",
    "reconcile",
    "resolve_created_at",
    "resolve_created_by",
]
