"""sharpe-watch: rolling return, volatility and Sharpe analytics for daily prices."""

__version__ = "0.1.0"
