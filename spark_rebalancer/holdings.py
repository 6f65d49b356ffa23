"""Lookups over a list of normalized holdings."""

from typing import Optional, Sequence

from .models import Holding


def find_fund(fund_number: int, holdings: Sequence[Holding]) -> Optional[Holding]:
    """Return the holding of `fund_number`, or None if the account does not hold it."""
    for holding in holdings:
        if holding.fund_number is not None and holding.fund_number == fund_number:
            return holding
    return None


def summarize_percent(holdings: Sequence[Holding]) -> float:
    """Sum of the reported fund percents. Missing percents count as 0."""
    return float(sum(h.fund_percent for h in holdings if h.fund_percent is not None))
