class RecordStoreError(Exception):
    """Raised by a record store when a query cannot be served."""


__all__ = ["RecordStoreError"]
