"""
Derived valuation graph.

Every output is a derived Observable recomputed from the latest values of its
inputs, so only the outputs whose inputs changed are recomputed:

    current     <- current price, current rate, shares
    daily       <- intraday price series, intraday rate series, shares
    historical  <- historical price series, historical rate series, shares
    scenario(i) <- current price, current rate, shares, scenario i

usd = price * shares, gbp = usd * rate.
"""

import logging
from typing import Optional

from sharevalue.core.exceptions import NotFoundError
from sharevalue.core.observable import Observable, combine_latest
from sharevalue.domain.models import TimeSeries, WhatIfScenario
from sharevalue.domain.views import DerivedValuation, ValuationPoint
from sharevalue.services.series_join import join_nearest

logger = logging.getLogger(__name__)


def compute_valuation(price: float, rate: float, shares: int) -> DerivedValuation:
    usd = price * shares
    return DerivedValuation(usd_value=usd, gbp_value=usd * rate)


def compute_series(price_series: TimeSeries, rate_series: TimeSeries, shares: int) -> list[ValuationPoint]:
    """Pointwise valuation over the nearest-timestamp join, at the price timestamps."""
    points = []
    for joined in join_nearest(price_series, rate_series):
        valuation = compute_valuation(joined.a_value, joined.b_value, shares)
        points.append(
            ValuationPoint(
                timestamp=joined.timestamp,
                price=joined.a_value,
                rate=joined.b_value,
                usd_value=valuation.usd_value,
                gbp_value=valuation.gbp_value,
            )
        )
    return points


def scenario_inputs(
    scenario: WhatIfScenario, live_price: float, live_rate: float
) -> tuple[float, float]:
    """
    Price and rate a scenario values the holding at.

    A custom value replaces the live one when the scenario does not use live
    data. A missing custom value counts as 0 rather than falling back to live.
    """
    price = live_price if scenario.use_live_price else (scenario.custom_price or 0)
    rate = live_rate if scenario.use_live_rate else (scenario.custom_rate or 0)
    return price, rate


def compute_scenario_valuation(
    price: float, rate: float, shares: int, scenario: WhatIfScenario
) -> DerivedValuation:
    scenario_price, scenario_rate = scenario_inputs(scenario, price, rate)
    return compute_valuation(scenario_price, scenario_rate, shares)


def _valuation_fields(scenario: WhatIfScenario) -> tuple:
    return (
        scenario.use_live_price,
        scenario.use_live_rate,
        scenario.custom_price,
        scenario.custom_rate,
    )


class _ScenarioCell:
    """Input cell for one scenario plus its derived valuation."""

    def __init__(self, scenario: WhatIfScenario, sources: list[Observable]):
        self.scenario: Observable[WhatIfScenario] = Observable(
            scenario, name=f"scenario:{scenario.id}"
        )
        self.valuation: Observable[DerivedValuation] = combine_latest(
            [*sources, self.scenario],
            compute_scenario_valuation,
            name=f"scenario_valuation:{scenario.id}",
        )

    def update(self, scenario: WhatIfScenario) -> None:
        # name and order changes do not affect the valuation
        if _valuation_fields(scenario) != _valuation_fields(self.scenario.value):
            self.scenario.publish(scenario)

    def dispose(self) -> None:
        self.valuation.dispose()
        self.scenario.dispose()


class ValuationGraph:
    """Derived valuations for the current holding, its charts and its scenarios."""

    def __init__(
        self,
        current_price: Observable[float],
        current_rate: Observable[float],
        intraday_price: Observable[TimeSeries],
        intraday_rate: Observable[TimeSeries],
        historical_price: Observable[TimeSeries],
        historical_rate: Observable[TimeSeries],
        shares: Observable[int],
        scenarios: Optional[Observable[list[WhatIfScenario]]] = None,
    ):
        self._live_sources: list[Observable] = [current_price, current_rate, shares]
        self._current = combine_latest(self._live_sources, compute_valuation, name="current_valuation")
        self._current_usd = combine_latest([self._current], lambda v: v.usd_value, name="current_usd")
        self._current_gbp = combine_latest([self._current], lambda v: v.gbp_value, name="current_gbp")
        self._daily = combine_latest(
            [intraday_price, intraday_rate, shares], compute_series, name="daily_series"
        )
        self._historical = combine_latest(
            [historical_price, historical_rate, shares], compute_series, name="historical_series"
        )
        self._scenario_cells: dict[str, _ScenarioCell] = {}
        self._unsubscribe_scenarios = None
        if scenarios is not None:
            self._unsubscribe_scenarios = scenarios.subscribe(self._sync_scenarios)

    # Outputs

    @property
    def current(self) -> Observable[DerivedValuation]:
        return self._current

    @property
    def current_usd(self) -> Observable[float]:
        return self._current_usd

    @property
    def current_gbp(self) -> Observable[float]:
        return self._current_gbp

    @property
    def daily_series(self) -> Observable[list[ValuationPoint]]:
        return self._daily

    @property
    def historical_series(self) -> Observable[list[ValuationPoint]]:
        return self._historical

    @property
    def scenario_ids(self) -> list[str]:
        return list(self._scenario_cells)

    def valuation_for(self, scenario_id: str) -> Observable[DerivedValuation]:
        """The valuation stream of one scenario. Raises NotFoundError if unknown."""
        cell = self._scenario_cells.get(scenario_id)
        if cell is None:
            raise NotFoundError("Scenario", scenario_id)
        return cell.valuation

    # Scenario bookkeeping

    def _sync_scenarios(self, scenarios: list[WhatIfScenario]) -> None:
        current_ids = {scenario.id for scenario in scenarios}
        for scenario_id in [sid for sid in self._scenario_cells if sid not in current_ids]:
            self._scenario_cells.pop(scenario_id).dispose()
            logger.debug("Disposed valuation of scenario %s", scenario_id)

        for scenario in scenarios:
            cell = self._scenario_cells.get(scenario.id)
            if cell is None:
                self._scenario_cells[scenario.id] = _ScenarioCell(scenario, self._live_sources)
            else:
                cell.update(scenario)

    def dispose(self) -> None:
        """Detach every derived cell from its inputs."""
        if self._unsubscribe_scenarios is not None:
            self._unsubscribe_scenarios()
            self._unsubscribe_scenarios = None
        for cell in self._scenario_cells.values():
            cell.dispose()
        self._scenario_cells.clear()
        for derived in (self._current_usd, self._current_gbp, self._current, self._daily, self._historical):
            derived.dispose()
