import logging
import math
from datetime import date
from typing import Dict, List, Optional, Sequence

import pandas as pd

from ..config import Asset, ComparisonIndex, ItemId, SimulationParameters
from .cashflows import IndexedAmount, apply_withdrawal, size_withdrawal
from .returns import asset_return_series, index_return_series, return_at
from .snapshot import SimulationSnapshot

logger = logging.getLogger(__name__)


def _is_set(ref) -> bool:
    return ref is not None and ref != ""

class PortfolioSimulator:
    """Deterministic month-by-month projection of a portfolio and its benchmarks.

    Each month, in order: indexed contribution into cash, asset growth, index growth
    (indices absorb the same contribution), dividends into cash, profit measurement,
    indexed + percentage withdrawals (cash first, then assets pro rata), reinvestment of
    idle cash into the most underweight asset, and periodic rebalancing.
    """

    def __init__(self, params: SimulationParameters):
        self.params = params
        self.T = int(params.simulation_period)

    def run(self, assets: Sequence[Asset], indices: Sequence[ComparisonIndex]) -> List[SimulationSnapshot]:
        """
        assets, indices: records whose monthly_returns are already resolved
        Returns T+1 snapshots, period 0 being the initial allocation.
        """
        p, T = self.params, self.T
        start = p.start_date or date.today()
        logger.debug("Simulating %d months: %d assets, %d indices", T, len(assets), len(indices))

        asset_rets = {a.id: asset_return_series(a) for a in assets}
        index_rets = {ix.id: index_return_series(ix, T) for ix in indices}
        weights = {a.id: a.initial_allocation_percentage / 100.0 for a in assets}

        # 0) initial allocation; indices start from the amount actually invested
        values = {a.id: p.initial_cash * weights[a.id] for a in assets}
        invested = sum(values.values())
        cash = max(p.initial_cash - invested, 0.0)
        index_values = {ix.id: invested for ix in indices}

        snapshots = [SimulationSnapshot(
            period=0,
            date=start,
            asset_values=dict(values),
            index_values=dict(index_values),
            cash_balance=cash,
            total_value=invested + cash,
        )]

        contribution = IndexedAmount(p.fixed_monthly_contribution)
        withdrawal = IndexedAmount(p.fixed_monthly_withdrawal)
        bench = p.selected_comparison_index_for_withdrawal

        for i in range(1, T + 1):
            value_at_start = sum(values.values()) + cash

            # 1) contribution
            monthly_contribution = contribution.step(
                self._index_return(index_rets, p.contribution_adjustment_index_id, i))
            cash += monthly_contribution

            # 2) asset growth
            next_values = {k: v * (1.0 + return_at(asset_rets[k], T, i)) for k, v in values.items()}

            # 3) index growth
            next_index = {
                k: v * (1.0 + return_at(index_rets[k], T, i)) + monthly_contribution
                for k, v in index_values.items()
            }

            # 4) dividends on post-growth value
            dividends = 0.0
            for a in assets:
                if a.dividend_yield > 0:
                    paid = next_values[a.id] * (a.dividend_yield / 100.0)
                    cash += paid
                    dividends += paid

            # 5) profit of the month
            profit = sum(next_values.values()) + cash - value_at_start

            # 6-7) withdrawal sizing
            fixed_withdrawal = withdrawal.step(
                self._index_return(index_rets, p.withdrawal_adjustment_index_id, i))
            index_profit = None
            if _is_set(bench) and bench in index_values:
                index_profit = next_index[bench] - index_values[bench]
            monthly_withdrawal = size_withdrawal(p, fixed_withdrawal, profit, cash, index_profit)

            # 8) withdrawal application
            cash = apply_withdrawal(monthly_withdrawal, cash, next_values)
            cash_before_reinvestment = cash

            # 10) reinvest idle cash
            if cash > 0 and assets:
                cash = self._reinvest(assets, weights, next_values, cash)

            # 11) periodic rebalance
            if p.enable_rebalancing and p.rebalance_period > 0 and i % p.rebalance_period == 0:
                cash = self._rebalance(assets, weights, next_values, cash)

            snapshots.append(SimulationSnapshot(
                period=i,
                date=(pd.Timestamp(start) + pd.DateOffset(months=i)).date(),
                asset_values=dict(next_values),
                index_values=dict(next_index),
                cash_balance=cash_before_reinvestment,
                total_value=sum(next_values.values()) + cash,
                monthly_dividends=dividends,
                monthly_contribution=monthly_contribution,
                monthly_withdrawal=monthly_withdrawal,
                net_cash_flow=monthly_contribution + dividends - monthly_withdrawal,
            ))
            values = next_values
            index_values = next_index

        logger.debug("Final value after %d months: %.2f", T, snapshots[-1].total_value)
        return snapshots

    def _index_return(self, index_rets: Dict, index_id: Optional[ItemId], month: int) -> Optional[float]:
        # None => no adjustment index; an unknown id grows by 0%
        if not _is_set(index_id):
            return None
        series = index_rets.get(index_id)
        if series is None:
            return 0.0
        return return_at(series, self.T, month)

    @staticmethod
    def _reinvest(assets, weights, values, cash) -> float:
        total = sum(values.values()) + cash
        best_id, best_delta = None, -math.inf
        for a in assets:
            delta = total * weights[a.id] - values[a.id]
            if delta > best_delta:
                best_id, best_delta = a.id, delta

        if best_delta > 0:
            values[best_id] += cash
        else:
            # nobody underweight: spread by target weights
            weight_total = sum(weights.values())
            for a in assets:
                share = weights[a.id] / weight_total if weight_total > 0 else 1.0 / len(assets)
                values[a.id] += cash * share
        return 0.0

    @staticmethod
    def _rebalance(assets, weights, values, cash) -> float:
        # cash absorbs the net of all moves and may go negative
        total = sum(values.values()) + cash
        moved = 0.0
        for a in assets:
            delta = total * weights[a.id] - values[a.id]
            values[a.id] += delta
            moved += delta
        return cash - moved


def run_simulation(params: SimulationParameters, assets: Sequence[Asset],
                   indices: Sequence[ComparisonIndex]) -> List[SimulationSnapshot]:
    return PortfolioSimulator(params).run(assets, indices)
