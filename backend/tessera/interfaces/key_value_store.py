"""
Key/value store interface.

Persisted planner state (saved plans, daily order lists, per-block overrides)
is stored as JSON strings under namespaced keys. Any backend that can get and
set strings can host it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional


class IKeyValueStore(ABC):
    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Return the raw value for ``key`` or None when absent."""
        pass

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Create or replace the value for ``key``."""
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Remove ``key``. Returns False when it did not exist."""
        pass
