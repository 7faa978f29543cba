"""
Analysis Engine Module

Calculates fund metrics from dated level series:
- Returns (cumulative, annualized, excess over benchmark)
- Risk (annualized volatility, maximum drawdown, downside deviation)
- Risk-adjusted ratios (Sharpe, Sortino)
- Benchmark-relative metrics (beta, alpha, tracking error, information ratio)
- Trading profile (hit rate, best/worst period)
"""

__version__ = "0.1.0"
