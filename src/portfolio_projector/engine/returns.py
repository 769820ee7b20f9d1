from typing import Sequence

import numpy as np

from ..sampling.synthetic import constant_monthly_rate


def return_at(series: Sequence[float], simulation_period: int, month: int) -> float:
    """Return used in `month` (1-based), reading the trailing `simulation_period` entries.

    Longer series contribute only their most recent values; positions outside the
    series (short or empty series) count as no growth.
    """
    pos = len(series) - simulation_period + month - 1
    if 0 <= pos < len(series):
        return float(series[pos])
    return 0.0

def asset_return_series(asset) -> np.ndarray:
    return np.asarray(asset.monthly_returns, dtype=float)

def index_return_series(index, simulation_period: int) -> np.ndarray:
    # manual (or empty api) indices grow at the constant rate implied by their annual rate
    if index.source == "api" and len(index.monthly_returns) > 0:
        return np.asarray(index.monthly_returns, dtype=float)
    return np.full(simulation_period, constant_monthly_rate(index.annual_profitability))
