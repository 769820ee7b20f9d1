from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Sequence

import pandas as pd

from ..config import ItemId

@dataclass(frozen=True)
class SimulationSnapshot:
    period: int                     # 0 = initial state
    date: date
    asset_values: Dict[ItemId, float] = field(default_factory=dict)
    index_values: Dict[ItemId, float] = field(default_factory=dict)
    cash_balance: float = 0.0       # before the month's reinvestment
    total_value: float = 0.0
    monthly_dividends: float = 0.0
    monthly_contribution: float = 0.0
    monthly_withdrawal: float = 0.0
    net_cash_flow: float = 0.0


FLOW_COLUMNS = ["monthly_dividends", "monthly_contribution", "monthly_withdrawal", "net_cash_flow"]

def snapshots_to_frame(snapshots: Sequence[SimulationSnapshot], asset_names=None,
                       index_names=None) -> pd.DataFrame:
    """Tabular view of a run, one row per period.

    Asset and index columns are labelled by the optional id -> name maps, falling back
    to "asset <id>" / "index <id>". Raises ValueError when two columns would share a label.
    """
    asset_names = asset_names or {}
    index_names = index_names or {}
    if snapshots:
        first = snapshots[0]
        labels = (
            ["period", "date", "cash_balance", "total_value"] + FLOW_COLUMNS
            + [asset_names.get(k, f"asset {k}") for k in first.asset_values]
            + [index_names.get(k, f"index {k}") for k in first.index_values]
        )
        dupes = sorted({str(c) for c in labels if labels.count(c) > 1})
        if dupes:
            raise ValueError(f"Duplicate column labels: {dupes}")
    rows: List[dict] = []
    for s in snapshots:
        row = {"period": s.period, "date": pd.Timestamp(s.date)}
        for k, v in s.asset_values.items():
            row[asset_names.get(k, f"asset {k}")] = v
        for k, v in s.index_values.items():
            row[index_names.get(k, f"index {k}")] = v
        row["cash_balance"] = s.cash_balance
        for c in FLOW_COLUMNS:
            row[c] = getattr(s, c)
        row["total_value"] = s.total_value
        rows.append(row)
    return pd.DataFrame(rows).set_index("period")

def visible_flow_columns(snapshots: Sequence[SimulationSnapshot]) -> List[str]:
    """Flow columns worth showing: those with a positive value in some period."""
    cols = [c for c in FLOW_COLUMNS[:3] if any(getattr(s, c) > 0 for s in snapshots)]
    if cols:
        cols.append("net_cash_flow")
    return cols
