import logging
from datetime import date

from portfolio_projector.config import Asset, ComparisonIndex, SimulationParameters, ensure_valid
from portfolio_projector.sampling.resolver import resolve_assets, resolve_indices
from portfolio_projector.engine.simulator import run_simulation
from portfolio_projector.engine.snapshot import snapshots_to_frame
from portfolio_projector.analytics.metrics import cagr, twrr_annualized, mwrr_irr, max_drawdown, final_allocation

def main():
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(name)s: %(message)s")

    # 1) Portfolio (manual return assumptions)
    assets = [
        Asset(1, "Bonds", 34, annual_profitability=4.5, min_monthly_profitability=0.3, max_monthly_profitability=0.7),
        Asset(2, "REITs", 33, annual_profitability=8, min_monthly_profitability=-10, max_monthly_profitability=15),
        Asset(3, "Stocks", 33, annual_profitability=12, min_monthly_profitability=-20, max_monthly_profitability=20),
    ]
    indices = [ComparisonIndex(1, "Inflation", annual_profitability=6)]

    # 2) Parameters
    params = ensure_valid(SimulationParameters(
        initial_cash=100_000,
        simulation_period=60,
        fixed_monthly_contribution=1_000,
        contribution_adjustment_index_id=1,   # contributions follow inflation
        percentage_excess_profit_withdrawal=10,
        selected_comparison_index_for_withdrawal=1,
        enable_rebalancing=True,
        rebalance_period=12,
        start_date=date(2025, 1, 1),
    ))

    # 3) Resolve returns and run
    resolved_assets = resolve_assets(assets, params.simulation_period, regenerate_counter=0)
    resolved_indices = resolve_indices(indices, params.simulation_period)
    snapshots = run_simulation(params, resolved_assets, resolved_indices)

    # 4) Simple summary
    df = snapshots_to_frame(snapshots, {a.id: a.name for a in assets}, {i.id: i.name for i in indices})
    print(df.tail(13).round(2).to_string())

    def pct(x): return f"{100*x:.2f}%"
    print("=== Projection Summary ===")
    print(f"Final value: ${snapshots[-1].total_value:,.2f}")
    print(f"Inflation benchmark: ${snapshots[-1].index_values[1]:,.2f}")
    print(f"CAGR: {pct(cagr(snapshots))}")
    print(f"TWRR: {pct(twrr_annualized(snapshots))}")
    print(f"IRR: {pct(mwrr_irr(snapshots))}")
    print(f"Max Drawdown: {pct(max_drawdown(snapshots))}")
    print("Final allocation:", {a.name: pct(w) for a, w in zip(assets, final_allocation(snapshots).values())})


if __name__ == "__main__":
    main()
