import logging
from dataclasses import replace
from typing import List, Optional, Sequence

import numpy as np

from ..config import Asset, ComparisonIndex
from .synthetic import constant_monthly_rate, generate_monthly_returns, seeded_rng

logger = logging.getLogger(__name__)


def _has_history(item) -> bool:
    return item.source == "api" and len(item.monthly_returns) > 0

def _pad_history(item, simulation_period: int, regenerate_counter: int):
    """Append uniform draws within the observed [min, max] until the history covers the period."""
    history = np.asarray(item.monthly_returns, dtype=float)
    missing = simulation_period - history.size
    if missing <= 0:
        return item
    rng = seeded_rng(item.seed_source, regenerate_counter)
    lo, hi = float(history.min()), float(history.max())
    filler = rng.uniform(lo, hi, size=missing) if lo < hi else np.full(missing, lo)
    logger.info(
        "%s: %d months of history, %d generated to complete the %d-month period",
        item.seed_source, history.size, missing, simulation_period,
    )
    return replace(item, monthly_returns=tuple(np.concatenate([history, filler])))

def resolve_assets(assets: Sequence[Asset], simulation_period: int,
                   regenerate_counter: int = 0) -> List[Asset]:
    out = []
    for a in assets:
        if _has_history(a):
            out.append(_pad_history(a, simulation_period, regenerate_counter))
        else:
            rng = seeded_rng(a.seed_source, regenerate_counter)
            rets = generate_monthly_returns(a, simulation_period, rng)
            out.append(replace(a, monthly_returns=tuple(rets)))
    logger.debug("Resolved %d assets for %d months", len(out), simulation_period)
    return out

def resolve_indices(indices: Sequence[ComparisonIndex], simulation_period: int,
                    regenerate_counter: int = 0) -> List[ComparisonIndex]:
    out = []
    for ix in indices:
        if _has_history(ix):
            out.append(_pad_history(ix, simulation_period, regenerate_counter))
        else:
            rate = constant_monthly_rate(ix.annual_profitability)
            out.append(replace(ix, monthly_returns=(rate,) * simulation_period))
    return out

def shortest_history(items) -> Optional[int]:
    """Length of the shortest fetched history, or None when no item has one."""
    lengths = [len(i.monthly_returns) for i in items if _has_history(i)]
    return min(lengths) if lengths else None
