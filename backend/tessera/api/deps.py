"""
Dependency injection for API endpoints.

This module provides FastAPI dependencies that inject the correct
infrastructure implementations based on environment configuration.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from tessera.core.config import get_settings
from tessera.interfaces.key_value_store import IKeyValueStore
from tessera.services.override_store import OverrideStore
from tessera.services.planner_service import PlannerService
from tessera.services.saved_plan_store import SavedPlanStore


# ===========================================
# Store Dependencies
# ===========================================


@lru_cache()
def get_key_value_store() -> IKeyValueStore:
    """Get key/value store instance."""
    settings = get_settings()
    if settings.uses_memory_store:
        from tessera.infrastructure.local.memory_store import InMemoryKeyValueStore
        return InMemoryKeyValueStore()
    else:
        from tessera.infrastructure.local.key_value_store import SqliteKeyValueStore
        return SqliteKeyValueStore()


def get_override_store(
    store: Annotated[IKeyValueStore, Depends(get_key_value_store)],
) -> OverrideStore:
    """Get daily order/override store."""
    return OverrideStore(store)


def get_saved_plan_store(
    store: Annotated[IKeyValueStore, Depends(get_key_value_store)],
) -> SavedPlanStore:
    """Get saved weekly plan store."""
    return SavedPlanStore(store)


# ===========================================
# Service Dependencies
# ===========================================


def get_planner_service(
    override_store: Annotated[OverrideStore, Depends(get_override_store)],
    plan_store: Annotated[SavedPlanStore, Depends(get_saved_plan_store)],
) -> PlannerService:
    """Get planner service wired to the configured stores."""
    return PlannerService(override_store=override_store, plan_store=plan_store)


# Type aliases for cleaner dependency injection
KeyValueStore = Annotated[IKeyValueStore, Depends(get_key_value_store)]
Planner = Annotated[PlannerService, Depends(get_planner_service)]
