"""
pysyncd: integrity verification for WhatsApp-style app state ("syncd") collections.

The package keeps a per-collection LT-hash over the value MACs of all present
records and derives the snapshot, patch and content MACs that bind those
records to a collection name and version.
"""

from __future__ import annotations

from .config import AppStateConfig
from .exceptions import AppStateError, MissingPreviousSetValueOperation, PysyncdError

__all__ = [
    "AppStateConfig",
    "AppStateError",
    "MissingPreviousSetValueOperation",
    "PysyncdError",
]

__version__ = "0.1.0"
