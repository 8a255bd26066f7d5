"""Dashboard client for the free-coin backtest and training backend."""

__version__ = "0.3.0"
