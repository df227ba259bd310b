"""
Infrastructure package for the warehouse entry widget.

Reference implementations of the chooser's query capability and the wrappers
hosts use to bound its latency. Keep this layer focused on I/O, decoupled
from the widget and chooser logic.
"""

from warehouse_entry.infrastructure.bounded import bounded_query
from warehouse_entry.infrastructure.errors import RecordStoreError
from warehouse_entry.infrastructure.memory_store import InMemoryRecordStore, load_json_store
from warehouse_entry.infrastructure.pg_store import PostgresRecordStore

__all__ = [
    "InMemoryRecordStore",
    "PostgresRecordStore",
    "RecordStoreError",
    "bounded_query",
    "load_json_store",
]
