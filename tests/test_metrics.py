from datetime import date

import numpy as np
import pytest

from portfolio_projector.analytics.metrics import (
    cagr,
    excess_over_index,
    final_allocation,
    flow_totals,
    max_drawdown,
    mwrr_irr,
    total_values,
    twrr_annualized,
    twrr_monthly,
)
from portfolio_projector.config import Asset, ComparisonIndex, SimulationParameters
from portfolio_projector.engine.simulator import run_simulation
from portfolio_projector.engine.snapshot import SimulationSnapshot


@pytest.fixture
def scenario():
    params = SimulationParameters(initial_cash=100_000, simulation_period=3, start_date=date(2025, 1, 1))
    assets = [Asset("a", initial_allocation_percentage=100, monthly_returns=(0.01,) * 3)]
    return run_simulation(params, assets, [ComparisonIndex("flat")])

def snaps(totals, **kw):
    return [SimulationSnapshot(period=i, date=date(2025, 1, 1), total_value=v, **kw) for i, v in enumerate(totals)]


def test_growth_rates_of_constant_scenario(scenario):
    assert total_values(scenario) == pytest.approx([100_000, 101_000, 102_010, 103_030.1])
    assert cagr(scenario) == pytest.approx(1.01 ** 12 - 1)
    assert twrr_monthly(scenario) == pytest.approx([0.01, 0.01, 0.01])
    assert twrr_annualized(scenario) == pytest.approx(1.01 ** 12 - 1)
    assert mwrr_irr(scenario) == pytest.approx(0.12, abs=1e-6)
    assert max_drawdown(scenario) == 0

def test_excess_over_flat_index(scenario):
    assert excess_over_index(scenario, "flat") == pytest.approx([0, 1000, 2010, 3030.1])

def test_final_allocation_and_flows(scenario):
    assert final_allocation(scenario) == {"a": pytest.approx(1.0)}
    assert flow_totals(scenario) == {"contributions": 0.0, "withdrawals": 0.0, "dividends": 0.0}

def test_twrr_removes_contributions():
    params = SimulationParameters(initial_cash=1000, simulation_period=2, fixed_monthly_contribution=100,
                                  start_date=date(2025, 1, 1))
    out = run_simulation(params, [Asset("a", initial_allocation_percentage=100)], [])
    assert twrr_monthly(out) == pytest.approx([0.0, 0.0])
    assert flow_totals(out)["contributions"] == pytest.approx(200)

def test_max_drawdown():
    assert max_drawdown(snaps([100, 120, 90, 130])) == pytest.approx(-0.25)

def test_cagr_undefined_without_starting_value():
    assert np.isnan(cagr(snaps([0, 10])))
