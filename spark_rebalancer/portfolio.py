import logging
from typing import Optional, Sequence

from .balancers import BalanceStrategy, PercentBasisStrategy, WorthBasisStrategy
from .config import BalanceMode
from .holdings import find_fund, summarize_percent
from .models import (
    BalancedHolding,
    BalanceOptions,
    DesiredAllocationEntry,
    Holding,
    HoldingsSummary,
)

logger = logging.getLogger(__name__)

STRATEGIES: dict[BalanceMode, type[BalanceStrategy]] = {
    BalanceMode.WORTH_BASIS: WorthBasisStrategy,
    BalanceMode.PERCENT_BASIS: PercentBasisStrategy,
}

__all__ = ["STRATEGIES", "balance_portfolio", "find_fund", "summarize_percent"]


def balance_portfolio(
    holdings: Sequence[Holding],
    summary: HoldingsSummary,
    desired_allocation: Sequence[DesiredAllocationEntry],
    options: BalanceOptions,
) -> list[Optional[BalancedHolding]]:
    """Calculate the cash needed per fund to reach a desired allocation.

    Args:
        holdings: Current holdings of the account.
        summary: Total and cash worth of the account.
        desired_allocation: Target percent per fund, in the order results
            should come back in.
        options: Balancing policy:
            - BalanceMode.WORTH_BASIS: current share from fund worth, with
              optional cash injection and use of the account's cash
            - BalanceMode.PERCENT_BASIS: current share from the reported fund
              percents; cash is excluded

    Returns:
        A list the same length as `desired_allocation`. Each item is the
        matched holding plus its `amount_to_balance`, or None when the account
        does not hold that fund.
    """
    strategy_cls = STRATEGIES.get(options.mode)
    if strategy_cls is None:
        raise ValueError(f"Unknown balance mode: {options.mode}")

    results = strategy_cls().calculate_amounts(holdings, summary, desired_allocation, options)
    logger.debug(
        "Balanced %d of %d desired funds (%s)",
        sum(r is not None for r in results),
        len(results),
        options.mode.value,
    )
    return results
