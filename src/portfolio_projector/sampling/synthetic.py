import hashlib
import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from ..config import GeneratorSettings

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS = GeneratorSettings()


def seed_from_string(text: str) -> int:
    """Stable integer seed for a ticker or asset name (independent of PYTHONHASHSEED)."""
    h = hashlib.sha256(text.encode()).hexdigest()[:16]
    return int(h, 16)

def seeded_rng(seed_source: str, regenerate_counter: int = 0) -> np.random.Generator:
    # the counter lets a "regenerate" action vary the draws while keeping them reproducible
    return np.random.default_rng(seed_from_string(seed_source) + int(regenerate_counter))

def constant_monthly_rate(annual_pct: float) -> float:
    return (1.0 + annual_pct / 100.0) ** (1.0 / 12.0) - 1.0


@dataclass(frozen=True)
class BlockResult:
    returns: np.ndarray
    min_bound: float    # fractional range drawn from in the accepted (or last) attempt
    max_bound: float
    converged: bool
    attempts: int


def generate_block(annual_pct: float, min_pct: float, max_pct: float, n: int,
                   rng: np.random.Generator,
                   settings: GeneratorSettings = DEFAULT_SETTINGS) -> BlockResult:
    """Draw `n` monthly returns whose compounded product matches the annual target.

    Raw growth factors are drawn uniformly from [1+min, 1+max] and scaled by a common
    factor so their product equals 1 + annual/100. The scaled draw is kept only when every
    return stays inside the asset's own [min, max]; otherwise the draw range is widened and
    the draw repeated. If no attempt fits, unscaled draws within the last (widened) range
    are returned instead.

    rng: a numpy Generator, e.g. from seeded_rng
    """
    target = 1.0 + annual_pct / 100.0
    min_ret, max_ret = min_pct / 100.0, max_pct / 100.0
    lo, hi = min_ret, max_ret

    for attempt in range(1, settings.max_attempts + 1):
        raw = rng.uniform(1.0 + lo, 1.0 + hi, size=n)
        prod = float(np.prod(raw))
        if prod > 0 and target > 0:
            scaled = raw * (target / prod) ** (1.0 / n)
            rets = scaled - 1.0
            if np.all((rets >= min_ret) & (rets <= max_ret)):
                return BlockResult(rets, lo, hi, True, attempt)
        if attempt < settings.max_attempts:
            lo -= settings.widen_min_by
            hi += settings.widen_max_by

    logger.warning(
        "Could not match annual target %.4f%% within %d attempts; "
        "using unscaled draws in [%.4f, %.4f]",
        annual_pct, settings.max_attempts, lo, hi,
    )
    rets = rng.uniform(1.0 + lo, 1.0 + hi, size=n) - 1.0
    return BlockResult(rets, lo, hi, False, settings.max_attempts)


def generate_monthly_returns(asset, periods: int, rng: Optional[np.random.Generator] = None,
                             settings: GeneratorSettings = DEFAULT_SETTINGS) -> np.ndarray:
    """Synthetic monthly returns for a manually described asset or index.

    asset: anything with annual_profitability, min_monthly_profitability and
           max_monthly_profitability (percent units)
    rng: a numpy Generator (not a bare callable); defaults to seeded_rng(asset.seed_source)
    Returns a (periods,) array of fractional monthly returns. A degenerate range
    (min >= max) yields the constant monthly rate implied by the annual target.
    """
    periods = int(periods)
    if periods <= 0:
        return np.zeros(0, dtype=float)

    annual = float(asset.annual_profitability)
    min_pct = float(asset.min_monthly_profitability)
    max_pct = float(asset.max_monthly_profitability)
    if not min_pct < max_pct:
        return np.full(periods, constant_monthly_rate(annual), dtype=float)

    if rng is None:
        rng = seeded_rng(getattr(asset, "seed_source", ""))

    blocks = []
    remaining = periods
    while remaining > 0:
        n = min(settings.block_months, remaining)
        blocks.append(generate_block(annual, min_pct, max_pct, n, rng, settings).returns)
        remaining -= n
    return np.concatenate(blocks)[:periods]
