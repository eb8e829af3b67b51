"""
Persisted daily order lists, per-block time overrides and per-week project order.

Records are JSON documents under namespaced keys of an injected key/value
store. Corrupt or wrongly shaped documents read as "no saved state" and are
never raised to the caller.
"""

from __future__ import annotations

import json
from typing import Any, Iterable, Optional

from pydantic import ValidationError as PydanticValidationError

from tessera.core.config import get_settings
from tessera.core.logger import setup_logger
from tessera.interfaces.key_value_store import IKeyValueStore
from tessera.models.overrides import TimeOverride

logger = setup_logger(__name__)

DAILY_ORDER_KEY = "dailyRundownOrder"
DAILY_OVERRIDES_KEY = "dailyRundownOverrides"
PROJECT_ORDER_KEY = "plannerProjectOrder"


def _is_str_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(item, str) for item in value)


class OverrideStore:
    """Order and override records for the daily view."""

    def __init__(self, store: IKeyValueStore, key_prefix: Optional[str] = None):
        self._store = store
        self._prefix = key_prefix if key_prefix is not None else get_settings().STORE_KEY_PREFIX

    def _key(self, name: str, suffix: Optional[str] = None) -> str:
        if suffix is None:
            return f"{self._prefix}{name}"
        return f"{self._prefix}{name}:{suffix}"

    async def _read_json(self, key: str) -> Any:
        raw = await self._store.get(key)
        if not raw:
            return None
        try:
            return json.loads(raw)
        except (TypeError, ValueError):
            logger.warning(f"Ignoring malformed JSON under {key}")
            return None

    async def _read_map(self, key: str) -> dict[str, Any]:
        data = await self._read_json(key)
        if data is None:
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring {key}: expected an object, got {type(data).__name__}")
            return {}
        return data

    async def _write_json(self, key: str, value: Any) -> None:
        await self._store.set(key, json.dumps(value))

    # ------------------------------------------------------------------
    # Daily order
    # ------------------------------------------------------------------

    async def load_order(self, date_iso: str) -> Optional[list[str]]:
        """Saved block order for a date, or None when absent or malformed."""
        order = (await self._read_map(self._key(DAILY_ORDER_KEY))).get(date_iso)
        if order is None:
            return None
        if not _is_str_list(order):
            logger.warning(f"Ignoring malformed block order for {date_iso}")
            return None
        return order

    async def save_order(self, date_iso: str, order: list[str]) -> None:
        key = self._key(DAILY_ORDER_KEY)
        data = await self._read_map(key)
        data[date_iso] = list(order)
        await self._write_json(key, data)

    # ------------------------------------------------------------------
    # Time overrides
    # ------------------------------------------------------------------

    async def load_overrides(self, date_iso: str) -> dict[str, TimeOverride]:
        """
        Per-block overrides for a date.

        Entries that fail validation are dropped one by one; the rest are kept.
        """
        raw = (await self._read_map(self._key(DAILY_OVERRIDES_KEY))).get(date_iso)
        if raw is None:
            return {}
        if not isinstance(raw, dict):
            logger.warning(f"Ignoring malformed overrides for {date_iso}")
            return {}
        overrides: dict[str, TimeOverride] = {}
        for block_id, value in raw.items():
            try:
                overrides[block_id] = TimeOverride.model_validate(value)
            except PydanticValidationError:
                logger.warning(f"Ignoring malformed override for block {block_id} on {date_iso}")
        return overrides

    async def save_override(self, date_iso: str, block_id: str, override: TimeOverride) -> None:
        key = self._key(DAILY_OVERRIDES_KEY)
        data = await self._read_map(key)
        day = data.get(date_iso)
        if not isinstance(day, dict):
            day = {}
        day[block_id] = override.model_dump(by_alias=True)
        data[date_iso] = day
        await self._write_json(key, data)

    async def save_overrides_for_date(self, date_iso: str, overrides: dict[str, TimeOverride]) -> None:
        """Replace the whole override map of a date."""
        key = self._key(DAILY_OVERRIDES_KEY)
        data = await self._read_map(key)
        data[date_iso] = {
            block_id: override.model_dump(by_alias=True) for block_id, override in overrides.items()
        }
        await self._write_json(key, data)

    async def clear_overrides(self, date_iso: str, block_ids: Optional[Iterable[str]] = None) -> None:
        """Drop overrides for some blocks of a date, or all of them when ``block_ids`` is None."""
        key = self._key(DAILY_OVERRIDES_KEY)
        data = await self._read_map(key)
        if date_iso not in data:
            return
        if block_ids is None:
            del data[date_iso]
        else:
            day = data[date_iso] if isinstance(data[date_iso], dict) else {}
            for block_id in block_ids:
                day.pop(block_id, None)
            data[date_iso] = day
        await self._write_json(key, data)

    # ------------------------------------------------------------------
    # Weekly project order
    # ------------------------------------------------------------------

    async def load_project_order(self, week_start_iso: str) -> Optional[list[str]]:
        key = self._key(PROJECT_ORDER_KEY, week_start_iso)
        order = await self._read_json(key)
        if order is None:
            return None
        if not _is_str_list(order):
            logger.warning(f"Ignoring malformed project order under {key}")
            return None
        return order

    async def save_project_order(self, week_start_iso: str, order: list[str]) -> None:
        await self._write_json(self._key(PROJECT_ORDER_KEY, week_start_iso), list(order))
