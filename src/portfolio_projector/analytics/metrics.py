import numpy as np

def total_values(snapshots):
    return np.array([s.total_value for s in snapshots], dtype=float)

def cagr(snapshots):
    v = total_values(snapshots)
    months = len(v) - 1
    if months <= 0 or v[0] <= 0 or v[-1] < 0:
        return np.nan
    return (v[-1] / v[0]) ** (12.0 / months) - 1.0

def twrr_monthly(snapshots):
    """Monthly returns with each month's external flows (contributions, withdrawals) removed."""
    v = total_values(snapshots)
    ext = np.array([s.monthly_contribution - s.monthly_withdrawal for s in snapshots[1:]])
    with np.errstate(divide='ignore', invalid='ignore'):
        return np.where(v[:-1] > 0, (v[1:] - ext) / v[:-1] - 1.0, np.nan)

def twrr_annualized(snapshots):
    r = twrr_monthly(snapshots)
    if r.size == 0 or np.isnan(r).any():
        return np.nan
    g = np.prod(1.0 + r)
    return g ** (12.0 / r.size) - 1.0

def mwrr_irr(snapshots):
    """Annualised money-weighted return seen from the investor's side of the flows."""
    import numpy_financial as npf
    v = total_values(snapshots)
    flows = [-v[0]] + [-(s.monthly_contribution - s.monthly_withdrawal) for s in snapshots[1:]]
    flows[-1] += v[-1]
    irr = npf.irr(flows)
    return irr * 12.0 if np.isfinite(irr) else np.nan

def max_drawdown(snapshots):
    x = total_values(snapshots)
    if x.size == 0:
        return 0.0
    peak = np.maximum.accumulate(x)
    with np.errstate(divide='ignore', invalid='ignore'):
        dd = np.where(peak > 0, (x - peak) / peak, 0.0)
    return float(dd.min())

def excess_over_index(snapshots, index_id):
    return np.array([s.total_value - s.index_values[index_id] for s in snapshots], dtype=float)

def final_allocation(snapshots):
    """Share of the final invested value held in each asset (empty when nothing is invested)."""
    last = snapshots[-1]
    total = sum(last.asset_values.values())
    if total <= 0:
        return {}
    return {k: v / total for k, v in last.asset_values.items()}

def flow_totals(snapshots):
    return {
        "contributions": float(sum(s.monthly_contribution for s in snapshots)),
        "withdrawals": float(sum(s.monthly_withdrawal for s in snapshots)),
        "dividends": float(sum(s.monthly_dividends for s in snapshots)),
    }
