"""Scenario store for what-if scenario management."""

import logging
import random
import string
import time
from datetime import datetime
from typing import Callable, Iterable, Optional

from sharevalue.core.exceptions import NotFoundError, ScenarioOrderError
from sharevalue.core.observable import Observable
from sharevalue.core.timezone import now_utc
from sharevalue.domain.models import WhatIfScenario
from sharevalue.services.cache_store import CacheStore

logger = logging.getLogger(__name__)

_ID_ALPHABET = string.digits + string.ascii_lowercase


def new_scenario_id() -> str:
    """Millisecond timestamp plus a random base-36 suffix."""
    suffix = "".join(random.choice(_ID_ALPHABET) for _ in range(9))
    return f"{int(time.time() * 1000)}-{suffix}"


class ScenarioStore:
    """
    Owns the ordered collection of what-if scenarios.

    Order values are always a permutation of 0..n-1. Every mutation persists
    the whole collection under one cache key and publishes the new list.
    """

    def __init__(
        self,
        cache: CacheStore,
        clock: Callable[[], datetime] = now_utc,
        id_factory: Callable[[], str] = new_scenario_id,
    ):
        self._cache = cache
        self._key = cache.keys.scenarios
        self._clock = clock
        self._id_factory = id_factory
        self._scenarios: list[WhatIfScenario] = self._load()
        self._stream: Observable[list[WhatIfScenario]] = Observable(
            self._snapshot(), name="scenario_list"
        )

    @property
    def scenarios(self) -> Observable[list[WhatIfScenario]]:
        return self._stream

    def list_all(self) -> list[WhatIfScenario]:
        """Scenarios sorted by order."""
        return self._snapshot()

    def get(self, scenario_id: str) -> WhatIfScenario:
        return self._scenarios[self._index_of(scenario_id)].copy()

    def add(self) -> WhatIfScenario:
        """
        Append a new scenario using live price and rate.

        Returns:
            The created scenario, named "What If Scenario {n}" after its position
        """
        now = self._clock()
        scenario = WhatIfScenario(
            id=self._id_factory(),
            name=f"What If Scenario {len(self._scenarios) + 1}",
            order=len(self._scenarios),
            created_at=now,
            updated_at=now,
        )
        self._scenarios.append(scenario)
        self._commit()
        logger.info("Added scenario %s", scenario.id)
        return scenario.copy()

    def update(self, scenario: WhatIfScenario) -> WhatIfScenario:
        """
        Replace a scenario by id.

        The stored order and creation time are kept; updated_at is refreshed.
        """
        index = self._index_of(scenario.id)
        existing = self._scenarios[index]
        updated = scenario.copy(
            order=existing.order,
            created_at=existing.created_at,
            updated_at=self._clock(),
        )
        self._scenarios[index] = updated
        self._commit()
        return updated.copy()

    def delete(self, scenario_id: str) -> None:
        """Remove a scenario and renumber the rest to 0..n-1."""
        index = self._index_of(scenario_id)
        del self._scenarios[index]
        self._renumber()
        self._commit()
        logger.info("Deleted scenario %s", scenario_id)

    def reorder(self, ids_in_new_order: Iterable[str]) -> list[WhatIfScenario]:
        """
        Apply a new order given as the full list of ids.

        Raises:
            ScenarioOrderError: if the ids are not exactly the stored ids
        """
        ids = list(ids_in_new_order)
        by_id = {scenario.id: scenario for scenario in self._scenarios}
        missing = [scenario_id for scenario_id in ids if scenario_id not in by_id]
        if missing:
            raise ScenarioOrderError(f"Unknown scenario id(s): {', '.join(missing)}")
        if len(ids) != len(by_id) or len(set(ids)) != len(ids):
            raise ScenarioOrderError(
                f"Expected each of the {len(by_id)} scenario ids exactly once, got {len(ids)} id(s)"
            )

        self._scenarios = [by_id[scenario_id] for scenario_id in ids]
        self._renumber()
        self._commit()
        return self._snapshot()

    def clear(self) -> None:
        """Remove every scenario and its persisted record."""
        self._scenarios = []
        self._cache.remove(self._key)
        self._stream.publish(self._snapshot())

    # Internals

    def _index_of(self, scenario_id: str) -> int:
        for index, scenario in enumerate(self._scenarios):
            if scenario.id == scenario_id:
                return index
        raise NotFoundError("Scenario", scenario_id)

    def _renumber(self) -> None:
        for order, scenario in enumerate(self._scenarios):
            if scenario.order != order:
                scenario.order = order

    def _snapshot(self) -> list[WhatIfScenario]:
        return [scenario.copy() for scenario in self._scenarios]

    def _commit(self) -> None:
        self._cache.set_json(self._key, [scenario.to_dict() for scenario in self._scenarios])
        self._stream.publish(self._snapshot())

    def _load(self) -> list[WhatIfScenario]:
        records = self._cache.get_json(self._key, [])
        if not isinstance(records, list):
            logger.warning("Discarding scenario record that is not a list")
            return []

        scenarios: list[WhatIfScenario] = []
        seen: set[str] = set()
        for record in records:
            scenario = self._parse(record)
            if scenario is None or scenario.id in seen:
                continue
            seen.add(scenario.id)
            scenarios.append(scenario)

        # repair gaps left by skipped records
        scenarios.sort(key=lambda s: s.order)
        for order, scenario in enumerate(scenarios):
            scenario.order = order
        return scenarios

    @staticmethod
    def _parse(record) -> Optional[WhatIfScenario]:
        if not isinstance(record, dict):
            return None
        try:
            return WhatIfScenario.from_dict(record)
        except (KeyError, TypeError, ValueError, OverflowError):
            logger.warning("Skipping unreadable scenario record %r", record.get("id"))
            return None
