"""
Chooser package: search existing warehouse records and apply one wholesale.
"""

from warehouse_entry.chooser.controller import (
    ChooserController,
    ChooserHost,
    ChooserState,
    QueryCapability,
)
from warehouse_entry.chooser.view import ChooserView

__all__ = [
    "ChooserController",
    "ChooserHost",
    "ChooserState",
    "ChooserView",
    "QueryCapability",
]
