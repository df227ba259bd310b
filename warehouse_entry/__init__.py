"""
Warehouse Entry - structured inventory records for a block-based editor.

This package provides the editor block that captures one warehouse record
(library, category, item, taxed unit price, quantity, tax rate, supplier,
SKU) together with its provenance, including:

- Reconciliation of persisted data across the legacy and current schemas
- Best-effort resolution of the creation time and creator
- A chooser that searches existing records and applies one wholesale
- Reference record stores for the chooser (in-memory/JSON and PostgreSQL)
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from warehouse_entry.chooser import ChooserController, ChooserState, ChooserView
from warehouse_entry.config import Settings, get_settings
from warehouse_entry.domain import (
    HostIdentity,
    IdentityLookup,
    QueryRequest,
    QueryResponse,
    QueryResultItem,
    Record,
    reconcile,
    resolve_created_at,
    resolve_created_by,
)
from warehouse_entry.notifications import LoggingNotifier, Notifier
from warehouse_entry.utils.logging import configure_logging, get_logger
from warehouse_entry.widget import WarehouseForm, WidgetConfig

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Domain
    "Record",
    "QueryRequest",
    "QueryResponse",
    "QueryResultItem",
    "reconcile",
    "resolve_created_at",
    "resolve_created_by",
    "HostIdentity",
    "IdentityLookup",
    # Widget and chooser
    "WarehouseForm",
    "WidgetConfig",
    "ChooserController",
    "ChooserState",
    "ChooserView",
    "Notifier",
    "LoggingNotifier",
    # Logging
    "configure_logging",
    "get_logger",
]
