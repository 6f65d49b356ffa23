"""Worth-basis balancing strategy.

A fund's current share is its cash worth over the portfolio worth:

    portfolio_worth = total_worth + addition_to_portfolio
                      - (0 if use_cash_in_account else cash_worth)
    current_percent = fund_worth / portfolio_worth * 100
    amount          = (desired_percent - current_percent) / 100 * portfolio_worth

New cash injected through `addition_to_portfolio` grows the base the desired
percentages are applied to, so the amounts of all funds together spend it.
"""

from typing import Sequence

import numpy as np

from ..models import BalanceOptions, Holding, HoldingsSummary
from .base import BalanceStrategy


class WorthBasisStrategy(BalanceStrategy):
    """Measure current allocation from each fund's worth."""

    def portfolio_worth(self, summary: HoldingsSummary, options: BalanceOptions) -> float:
        cash = 0.0 if options.use_cash_in_account else summary.cash_worth
        return summary.total_worth + options.addition_to_portfolio - cash

    def current_percents(
        self,
        matched: Sequence[Holding],
        holdings: Sequence[Holding],
        portfolio_worth: float,
    ) -> np.ndarray:
        worths, _ = self._collect_fund_data(matched)
        return self._share_of(worths, portfolio_worth)
