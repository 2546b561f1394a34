"""Storage module for the ability engine.

Provides:
- Collaborator protocols the engine consumes (ledger, actors, locations, content)
- Thread-safe in-memory implementations
- SQLite-based durable ledger storage
"""

from ability_engine.storage.database import SqliteLedgerStore
from ability_engine.storage.memory import InMemoryLedgerStore, InMemoryWorld
from ability_engine.storage.repositories import (
    ActorRepository,
    ContentRepository,
    LedgerStore,
    LocationRepository,
    NothingHidden,
    SecretRevealer,
)

__all__ = [
    "LedgerStore",
    "ActorRepository",
    "LocationRepository",
    "ContentRepository",
    "SecretRevealer",
    "NothingHidden",
    "InMemoryLedgerStore",
    "InMemoryWorld",
    "SqliteLedgerStore",
]
