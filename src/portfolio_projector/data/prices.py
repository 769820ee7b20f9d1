import pandas as pd

def read_price_csv(path, column=None) -> pd.Series:
    """Load a dated price history (first column = date) as a Series.

    column: price column to use; defaults to the first non-date column.
    """
    df = pd.read_csv(path, index_col=0, parse_dates=True)
    if df.empty or len(df.columns) == 0:
        raise ValueError(f"No price columns found in {path}")
    col = column if column is not None else df.columns[0]
    if col not in df.columns:
        raise ValueError(f"Column {col!r} not found in {path}. Columns={list(df.columns)}")
    return pd.to_numeric(df[col], errors="coerce").dropna()

def monthly_returns_from_prices(prices: pd.Series) -> pd.Series:
    """Month-end simple returns from a (daily or monthly) adjusted-close series, oldest first.

    Months whose previous close is not positive are dropped.
    """
    px = prices.sort_index().dropna()
    if not isinstance(px.index, pd.DatetimeIndex):
        px.index = pd.to_datetime(px.index)
    monthly = px.resample("ME").last().dropna()
    prev = monthly.shift(1)
    rets = monthly / prev - 1.0
    return rets[prev > 0].rename("monthly_return")
