"""Percent-basis balancing strategy.

Uses the percentages the broker already reports for each fund, renormalized
over the sum of all reported percentages, since those exclude cash in some
responses and need not add up to 100. Cash is never part of the base.
"""

from typing import Sequence

import numpy as np

from ..models import BalanceOptions, Holding, HoldingsSummary
from .base import BalanceStrategy


class PercentBasisStrategy(BalanceStrategy):
    """Measure current allocation from each fund's reported percent."""

    def portfolio_worth(self, summary: HoldingsSummary, options: BalanceOptions) -> float:
        return summary.invested_worth

    def current_percents(
        self,
        matched: Sequence[Holding],
        holdings: Sequence[Holding],
        portfolio_worth: float,
    ) -> np.ndarray:
        _, percents = self._collect_fund_data(matched)
        _, all_percents = self._collect_fund_data(holdings)
        return self._share_of(percents, float(all_percents.sum()))
