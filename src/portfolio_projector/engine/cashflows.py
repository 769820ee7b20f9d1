from typing import Dict, Optional

from ..config import SimulationParameters


class IndexedAmount:
    """Fixed monthly amount that compounds with an index's monthly returns.

    Growth is carried across months (amount_t = amount_{t-1} * (1 + r_t)), so the
    accumulator must live for the whole run and never be shared between runs.
    """

    def __init__(self, base: float):
        self.amount = float(base)

    def step(self, index_return: Optional[float]) -> float:
        if index_return is not None:
            self.amount *= (1.0 + index_return)
        return self.amount


def size_withdrawal(params: SimulationParameters, fixed_amount: float, portfolio_profit: float,
                    cash: float, index_profit: Optional[float]) -> float:
    """Total withdrawal for the month from the fixed amount and the three percentage policies.

    index_profit is the selected benchmark's profit this month, None when no benchmark applies.
    """
    total = fixed_amount if fixed_amount > 0 else 0.0

    pct = params.percentage_profitability_withdrawal
    if pct > 0 and portfolio_profit > 0:
        total += portfolio_profit * (pct / 100.0)

    pct = params.percentage_cash_withdrawal
    if pct > 0 and cash > 0:
        total += cash * (pct / 100.0)

    pct = params.percentage_excess_profit_withdrawal
    if pct > 0 and index_profit is not None:
        excess = portfolio_profit - index_profit
        if excess > 0:
            total += excess * (pct / 100.0)
    return total


def apply_withdrawal(amount: float, cash: float, asset_values: Dict) -> float:
    """Take `amount` from cash first, then from assets pro rata to value. Returns the new cash.

    asset_values is updated in place. Nothing is taken from assets when they hold no value.
    """
    if amount <= 0:
        return cash
    from_cash = min(cash, amount)
    cash -= from_cash
    remaining = amount - from_cash
    if remaining > 0:
        total_assets = sum(asset_values.values())
        if total_assets > 0:
            for k, v in asset_values.items():
                asset_values[k] = v - remaining * (v / total_assets)
    return cash
