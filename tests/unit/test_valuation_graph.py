"""
Unit tests for the derived valuation graph.

Tests cover:
- Current valuation from price, rate and shares
- Chart series over the nearest-timestamp join
- Recomputation only on relevant inputs
- Scenario overrides, including the blank-override-counts-as-zero behavior
- Scenario cell lifecycle
"""

import pytest

from sharevalue.core.exceptions import NotFoundError
from sharevalue.core.observable import Observable
from sharevalue.domain.models import WhatIfScenario
from sharevalue.domain.views import DerivedValuation
from sharevalue.services import ValuationGraph

from tests.conftest import make_series, utc_from_eastern


class GraphInputs:
    """Input cells for a graph under test."""

    def __init__(self, price=250.0, rate=0.80, shares=10):
        self.price = Observable(price, name="price")
        self.rate = Observable(rate, name="rate")
        self.intraday_price = Observable([], name="intraday_price")
        self.intraday_rate = Observable([], name="intraday_rate")
        self.historical_price = Observable([], name="historical_price")
        self.historical_rate = Observable([], name="historical_rate")
        self.shares = Observable(shares, name="shares")
        self.scenarios = Observable([], name="scenarios")

    def graph(self) -> ValuationGraph:
        return ValuationGraph(
            current_price=self.price,
            current_rate=self.rate,
            intraday_price=self.intraday_price,
            intraday_rate=self.intraday_rate,
            historical_price=self.historical_price,
            historical_rate=self.historical_rate,
            shares=self.shares,
            scenarios=self.scenarios,
        )


@pytest.fixture
def inputs() -> GraphInputs:
    return GraphInputs()


def _scenario(scenario_id="s1", **kwargs) -> WhatIfScenario:
    return WhatIfScenario(id=scenario_id, name="What If Scenario 1", order=0, **kwargs)


# =============================================================================
# CURRENT VALUATION TESTS
# =============================================================================


class TestCurrentValuation:
    """Tests for the live valuation."""

    def test_usd_and_gbp_values(self, inputs):
        """
        GIVEN 10 shares, price 250.0 and rate 0.80
        WHEN the graph computes the current valuation
        THEN usd = 2500.0 and gbp = 2000.0
        """
        graph = inputs.graph()

        assert graph.current.value.usd_value == 2500.0
        assert graph.current_usd.value == 2500.0
        assert graph.current_gbp.value == pytest.approx(2000.0)

    def test_recomputes_on_each_input(self, inputs):
        graph = inputs.graph()
        seen = []
        graph.current_usd.subscribe(seen.append, emit_current=False)

        inputs.shares.publish(20)
        inputs.price.publish(300.0)
        inputs.rate.publish(0.5)

        assert seen == [5000.0, 6000.0, 6000.0]
        assert graph.current_gbp.value == pytest.approx(3000.0)

    def test_zero_shares_value_nothing(self):
        graph = GraphInputs(shares=0).graph()

        assert graph.current.value == DerivedValuation(0.0, 0.0)


# =============================================================================
# CHART SERIES TESTS
# =============================================================================


class TestChartSeries:
    """Tests for the daily and historical chart series."""

    def test_daily_series_uses_price_timestamps(self, inputs, intraday_prices, intraday_rates):
        """
        GIVEN intraday prices and rates sampled two minutes apart
        WHEN both series are present
        THEN each price sample is valued with its nearest rate at the price timestamp
        """
        graph = inputs.graph()

        inputs.intraday_price.publish(intraday_prices)
        inputs.intraday_rate.publish(intraday_rates)

        points = graph.daily_series.value
        assert [p.timestamp for p in points] == [p.timestamp for p in intraday_prices]
        first = points[0]
        assert first.price == 250.0
        assert first.rate == 0.80
        assert first.usd_value == 2500.0
        assert first.gbp_value == pytest.approx(2000.0)

    def test_series_empty_until_rates_arrive(self, inputs, intraday_prices):
        graph = inputs.graph()

        inputs.intraday_price.publish(intraday_prices)

        assert graph.daily_series.value == []

    def test_historical_series_ignores_live_price(self, inputs):
        """
        GIVEN a historical chart
        WHEN only the live price changes
        THEN the historical series is not recomputed
        """
        day = utc_from_eastern(2024, 6, 13, 16, 0)
        inputs.historical_price.publish(make_series(day, [248.0]))
        inputs.historical_rate.publish(make_series(day, [0.81]))
        graph = inputs.graph()
        daily_seen, historical_seen = [], []
        graph.daily_series.subscribe(daily_seen.append, emit_current=False)
        graph.historical_series.subscribe(historical_seen.append, emit_current=False)

        inputs.price.publish(260.0)

        assert daily_seen == []
        assert historical_seen == []
        assert graph.historical_series.value[0].usd_value == 2480.0

    def test_shares_change_recomputes_charts(self, inputs):
        day = utc_from_eastern(2024, 6, 13, 16, 0)
        inputs.historical_price.publish(make_series(day, [248.0]))
        inputs.historical_rate.publish(make_series(day, [0.81]))
        graph = inputs.graph()

        inputs.shares.publish(1)

        assert graph.historical_series.value[0].usd_value == 248.0


# =============================================================================
# SCENARIO VALUATION TESTS
# =============================================================================


class TestScenarioValuation:
    """Tests for per-scenario valuations."""

    def test_live_scenario_matches_current_valuation(self, inputs):
        graph = inputs.graph()
        inputs.scenarios.publish([_scenario()])

        assert graph.valuation_for("s1").value == graph.current.value

    def test_custom_price_replaces_live_price(self, inputs):
        """
        GIVEN a scenario with custom price 300.0 and the live rate
        WHEN valued with 10 shares at rate 0.80
        THEN usd = 3000.0 and gbp = 2400.0
        """
        graph = inputs.graph()
        inputs.scenarios.publish([_scenario(use_live_price=False, custom_price=300.0)])

        valuation = graph.valuation_for("s1").value

        assert valuation.usd_value == 3000.0
        assert valuation.gbp_value == pytest.approx(2400.0)

    def test_custom_rate_replaces_live_rate(self, inputs):
        graph = inputs.graph()
        inputs.scenarios.publish([_scenario(use_live_rate=False, custom_rate=1.0)])

        assert graph.valuation_for("s1").value == DerivedValuation(2500.0, 2500.0)

    def test_blank_custom_price_counts_as_zero(self, inputs):
        """
        GIVEN a scenario not using the live price and no custom price
        WHEN valued
        THEN the price counts as 0, so usd = 0 whatever the share count
        """
        graph = inputs.graph()
        inputs.scenarios.publish([_scenario(use_live_price=False, custom_price=None)])

        assert graph.valuation_for("s1").value.usd_value == 0
        inputs.shares.publish(1000)
        assert graph.valuation_for("s1").value.usd_value == 0

    def test_blank_custom_rate_counts_as_zero(self, inputs):
        graph = inputs.graph()
        inputs.scenarios.publish([_scenario(use_live_rate=False, custom_rate="")])

        valuation = graph.valuation_for("s1").value

        assert valuation.usd_value == 2500.0
        assert valuation.gbp_value == 0

    def test_live_inputs_update_scenarios(self, inputs):
        graph = inputs.graph()
        inputs.scenarios.publish([_scenario(use_live_price=False, custom_price=100.0)])

        inputs.rate.publish(0.5)

        assert graph.valuation_for("s1").value == DerivedValuation(1000.0, 500.0)


# =============================================================================
# SCENARIO LIFECYCLE TESTS
# =============================================================================


class TestScenarioLifecycle:
    """Tests for creating, updating and disposing scenario cells."""

    def test_cells_follow_the_scenario_list(self, inputs):
        """
        GIVEN two scenarios
        WHEN one is removed from the list
        THEN its valuation stream is disposed and no longer found
        """
        graph = inputs.graph()
        inputs.scenarios.publish([_scenario("a"), _scenario("b")])
        assert graph.scenario_ids == ["a", "b"]

        inputs.scenarios.publish([_scenario("b")])

        assert graph.scenario_ids == ["b"]
        with pytest.raises(NotFoundError):
            graph.valuation_for("a")

    def test_updating_inputs_recomputes_same_stream(self, inputs):
        graph = inputs.graph()
        inputs.scenarios.publish([_scenario()])
        stream = graph.valuation_for("s1")
        seen = []
        stream.subscribe(seen.append, emit_current=False)

        inputs.scenarios.publish([_scenario(use_live_price=False, custom_price=200.0)])

        assert graph.valuation_for("s1") is stream
        assert len(seen) == 1
        assert seen[0].usd_value == 2000.0
        assert seen[0].gbp_value == pytest.approx(1600.0)

    def test_renaming_does_not_recompute(self, inputs):
        graph = inputs.graph()
        inputs.scenarios.publish([_scenario()])
        seen = []
        graph.valuation_for("s1").subscribe(seen.append, emit_current=False)

        inputs.scenarios.publish([_scenario().copy(name="Bull case", order=0)])

        assert seen == []

    def test_dispose_detaches_from_inputs(self, inputs):
        graph = inputs.graph()
        inputs.scenarios.publish([_scenario()])

        graph.dispose()

        for cell in (inputs.price, inputs.rate, inputs.shares, inputs.scenarios,
                     inputs.intraday_price, inputs.historical_rate):
            assert cell.subscriber_count == 0
