import math
from dataclasses import dataclass, replace
from datetime import date
from typing import Dict, List, Literal, Optional, Sequence, Tuple, Union

ItemId = Union[int, str]
Source = Literal["manual", "api"]

MAX_SIMULATION_PERIOD = 1200  # 100 years of months

@dataclass(frozen=True)
class Asset:
    id: ItemId
    name: str = ""
    initial_allocation_percentage: float = 0.0  # 0..100
    dividend_yield: float = 0.0                 # % of value paid per month
    annual_profitability: float = 0.0           # % per year (manual mode)
    min_monthly_profitability: float = 0.0      # % per month (manual mode)
    max_monthly_profitability: float = 0.0
    ticker: str = ""
    source: Source = "manual"
    monthly_returns: Tuple[float, ...] = ()     # fractional, oldest first

    def __post_init__(self):
        _check_source(self.source)
        object.__setattr__(self, "monthly_returns", tuple(float(r) for r in self.monthly_returns))

    @property
    def seed_source(self) -> str:
        return self.ticker or self.name or str(self.id)

@dataclass(frozen=True)
class ComparisonIndex:
    id: ItemId
    name: str = ""
    annual_profitability: float = 0.0
    min_monthly_profitability: float = 0.0
    max_monthly_profitability: float = 0.0
    ticker: str = ""
    source: Source = "manual"
    monthly_returns: Tuple[float, ...] = ()

    def __post_init__(self):
        _check_source(self.source)
        object.__setattr__(self, "monthly_returns", tuple(float(r) for r in self.monthly_returns))

    @property
    def seed_source(self) -> str:
        return self.ticker or self.name or str(self.id)

@dataclass(frozen=True)
class SimulationParameters:
    initial_cash: float
    simulation_period: int                       # months
    fixed_monthly_contribution: float = 0.0
    contribution_adjustment_index_id: Optional[ItemId] = None
    fixed_monthly_withdrawal: float = 0.0
    withdrawal_adjustment_index_id: Optional[ItemId] = None
    percentage_profitability_withdrawal: float = 0.0
    percentage_cash_withdrawal: float = 0.0
    percentage_excess_profit_withdrawal: float = 0.0
    selected_comparison_index_for_withdrawal: Optional[ItemId] = None
    enable_rebalancing: bool = False
    rebalance_period: int = 12                   # months between full rebalances
    start_date: Optional[date] = None            # None => today

@dataclass(frozen=True)
class GeneratorSettings:
    block_months: int = 12
    max_attempts: int = 100
    widen_min_by: float = 0.0025
    widen_max_by: float = 0.005


class InvalidParametersError(ValueError):
    def __init__(self, errors: Dict[str, str]):
        self.errors = dict(errors)
        detail = "; ".join(f"{k}: {v}" for k, v in self.errors.items())
        super().__init__(f"Invalid simulation parameters ({detail})")


def _check_source(source):
    if source not in ("manual", "api"):
        raise ValueError(f"Unknown return source: {source!r}")

def _is_number(x) -> bool:
    return isinstance(x, (int, float)) and not isinstance(x, bool) and math.isfinite(x)

def validate_parameters(params: SimulationParameters) -> Dict[str, str]:
    """Return a field -> message map of problems; empty when the parameters are usable."""
    errors = {}
    if not _is_number(params.initial_cash) or params.initial_cash < 0:
        errors["initial_cash"] = "Must be a positive number."
    period = params.simulation_period
    if not isinstance(period, int) or isinstance(period, bool) or period < 1:
        errors["simulation_period"] = "Must be at least 1 month."
    elif period > MAX_SIMULATION_PERIOD:
        errors["simulation_period"] = f"Must be at most {MAX_SIMULATION_PERIOD} months."
    if params.enable_rebalancing:
        rp = params.rebalance_period
        if not isinstance(rp, int) or isinstance(rp, bool) or rp <= 0:
            errors["rebalance_period"] = "Must be > 0."
    for name in (
        "fixed_monthly_contribution",
        "fixed_monthly_withdrawal",
        "percentage_profitability_withdrawal",
        "percentage_cash_withdrawal",
        "percentage_excess_profit_withdrawal",
    ):
        value = getattr(params, name)
        if not _is_number(value):
            errors[name] = "Must be a number."
        elif name.startswith("percentage") and value < 0:
            errors[name] = "Must not be negative."
    return errors

def validate_asset(asset: Asset) -> Dict[str, str]:
    errors = {}
    for name in ("initial_allocation_percentage", "dividend_yield"):
        value = getattr(asset, name)
        if not _is_number(value) or value < 0:
            errors[name] = "Must be a non-negative number."
    for name in ("annual_profitability", "min_monthly_profitability", "max_monthly_profitability"):
        if not _is_number(getattr(asset, name)):
            errors[name] = "Must be a number."
    return errors

def ensure_valid(params: SimulationParameters) -> SimulationParameters:
    errors = validate_parameters(params)
    if errors:
        raise InvalidParametersError(errors)
    return params

def total_allocation_percentage(assets: Sequence[Asset]) -> float:
    return float(sum(a.initial_allocation_percentage for a in assets))

def normalize_allocations(assets: Sequence[Asset]) -> List[Asset]:
    """Rescale allocation percentages so they sum to 100 (rounded to cents of a percent).
    Assets are returned unchanged when the current total is zero.
    """
    total = total_allocation_percentage(assets)
    if total == 0:
        return list(assets)
    factor = 100.0 / total
    return [
        replace(a, initial_allocation_percentage=round(a.initial_allocation_percentage * factor, 2))
        for a in assets
    ]
