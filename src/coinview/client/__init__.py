"""HTTP access to the backtest backend."""
