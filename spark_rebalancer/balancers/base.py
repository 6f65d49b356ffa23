"""Abstract base class for balancing strategies."""

import logging
from abc import ABC, abstractmethod
from typing import Optional, Sequence

import numpy as np

from ..holdings import find_fund
from ..models import (
    BalancedHolding,
    BalanceOptions,
    DesiredAllocationEntry,
    Holding,
    HoldingsSummary,
)

logger = logging.getLogger(__name__)


class BalanceStrategy(ABC):
    """Computes the cash to add to (or withdraw from) each desired fund.

    Subclasses decide what the portfolio is worth and how a fund's current
    share of it is measured; the rest of the computation is shared.
    """

    def calculate_amounts(
        self,
        holdings: Sequence[Holding],
        summary: HoldingsSummary,
        desired_allocation: Sequence[DesiredAllocationEntry],
        options: BalanceOptions,
    ) -> list[Optional[BalancedHolding]]:
        """Calculate the balancing amount for every desired allocation entry.

        Args:
            holdings: Current holdings of the account.
            summary: Total and cash worth of the account.
            desired_allocation: Target percent per fund.
            options: Balancing policy.

        Returns:
            One entry per desired allocation entry, in the same order. Entries
            whose fund is not currently held are None.
        """
        matched = [find_fund(entry.fund_number, holdings) for entry in desired_allocation]
        for entry, holding in zip(desired_allocation, matched):
            if holding is None:
                logger.info("Fund %s is not held, skipping", entry.fund_number)

        present = [
            (entry, holding)
            for entry, holding in zip(desired_allocation, matched)
            if holding is not None
        ]
        if not present:
            return [None] * len(desired_allocation)

        portfolio_worth = self.portfolio_worth(summary, options)
        current = self.current_percents(
            [holding for _, holding in present], holdings, portfolio_worth
        )
        desired = np.array([entry.percent for entry, _ in present], dtype=float)
        amounts = (desired - current) / 100 * portfolio_worth

        balanced = iter(
            BalancedHolding.from_holding(holding, self._format_amount(amount))
            for (_, holding), amount in zip(present, amounts)
        )
        return [None if holding is None else next(balanced) for holding in matched]

    @abstractmethod
    def portfolio_worth(self, summary: HoldingsSummary, options: BalanceOptions) -> float:
        """Worth that the desired percentages are applied to."""
        pass

    @abstractmethod
    def current_percents(
        self,
        matched: Sequence[Holding],
        holdings: Sequence[Holding],
        portfolio_worth: float,
    ) -> np.ndarray:
        """Current percent of the portfolio held in each matched fund."""
        pass

    def _collect_fund_data(self, holdings: Sequence[Holding]) -> tuple[np.ndarray, np.ndarray]:
        """Extract worths and reported percents as numpy arrays. None counts as 0."""
        worths = [h.fund_worth if h.fund_worth is not None else 0.0 for h in holdings]
        percents = [h.fund_percent if h.fund_percent is not None else 0.0 for h in holdings]
        return np.array(worths, dtype=float), np.array(percents, dtype=float)

    @staticmethod
    def _share_of(parts: np.ndarray, whole: float) -> np.ndarray:
        """`parts / whole * 100`, with 0 wherever `whole` is 0."""
        if whole == 0:
            logger.debug("Nothing to allocate against, current percent taken as 0")
            return np.zeros_like(parts)
        return parts / whole * 100

    @staticmethod
    def _format_amount(amount: float) -> str:
        # Adding 0.0 turns -0.0 into 0.0
        return f"{round(float(amount), 2) + 0.0:.2f}"
