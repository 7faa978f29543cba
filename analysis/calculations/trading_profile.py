"""
Trading profile metrics.
Hit rate and best/worst single-period returns.
"""

from typing import Optional, Sequence


def hit_rate_pct(returns: Sequence[float]) -> Optional[float]:
    """Share of strictly positive periods, in percent."""
    if len(returns) == 0:
        return None
    wins = sum(1 for r in returns if r > 0)
    return wins / len(returns) * 100


def best_return_pct(returns: Sequence[float]) -> Optional[float]:
    if len(returns) == 0:
        return None
    return max(returns) * 100


def worst_return_pct(returns: Sequence[float]) -> Optional[float]:
    if len(returns) == 0:
        return None
    return min(returns) * 100
