"""
Saved weekly plan persistence.

One JSON document per week under ``<prefix>weeklyPlan:<monday>``.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from tessera.core.config import get_settings
from tessera.core.logger import setup_logger
from tessera.interfaces.key_value_store import IKeyValueStore
from tessera.models.plan import SavedPlan
from tessera.utils.datetime_utils import now_utc, week_monday, week_monday_iso

logger = setup_logger(__name__)

WEEKLY_PLAN_KEY = "weeklyPlan"


class SavedPlanStore:
    def __init__(self, store: IKeyValueStore, key_prefix: Optional[str] = None):
        self._store = store
        self._prefix = key_prefix if key_prefix is not None else get_settings().STORE_KEY_PREFIX

    def key_for(self, week_start: date) -> str:
        return f"{self._prefix}{WEEKLY_PLAN_KEY}:{week_monday_iso(week_start)}"

    async def load(self, week_start: date) -> Optional[SavedPlan]:
        """Saved plan for the week containing ``week_start``; None if absent or corrupt."""
        key = self.key_for(week_start)
        raw = await self._store.get(key)
        if not raw:
            return None
        try:
            return SavedPlan.model_validate_json(raw)
        except PydanticValidationError as e:
            logger.warning(f"Ignoring malformed saved plan under {key}: {e.error_count()} errors")
            return None

    async def save(self, plan: SavedPlan) -> SavedPlan:
        """
        Persist a plan keyed by the Monday of its week.

        The week start is normalized to Monday and ``saved_at`` is stamped.
        """
        stored = plan.model_copy(
            update={
                "week_start_iso": week_monday(plan.week_start_iso),
                "saved_at": now_utc(),
            }
        )
        await self._store.set(self.key_for(stored.week_start_iso), stored.model_dump_json(by_alias=True))
        logger.info(f"Saved weekly plan for {stored.week_start_iso.isoformat()}")
        return stored
