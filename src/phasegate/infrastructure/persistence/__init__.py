"""
Persistence adapters.

- Mind sources: FilesystemMindSource (JSON file), InMemoryMindSource
- Run trace: InMemoryRunEventStore
"""

from phasegate.infrastructure.persistence.mind_sources import (
    FilesystemMindSource,
    InMemoryMindSource,
)
from phasegate.infrastructure.persistence.run_events import InMemoryRunEventStore

__all__ = [
    "FilesystemMindSource",
    "InMemoryMindSource",
    "InMemoryRunEventStore",
]
