"""Data models for the Spark portfolio balancer."""

import math
from dataclasses import asdict, dataclass
from typing import Optional

from .config import BalanceMode


@dataclass(frozen=True)
class Account:
    """An account listed under a Spark user."""

    key: str
    name: Optional[str]
    number: Optional[str]


@dataclass(frozen=True)
class Holding:
    """A position in a single fund. Fields missing upstream are None."""

    fund_number: Optional[int]
    fund_name: Optional[str]
    fund_amount: Optional[float]
    fund_worth: Optional[float]
    fund_percent: Optional[float]


@dataclass(frozen=True)
class HoldingsSummary:
    total_worth: float
    cash_worth: float

    @property
    def invested_worth(self) -> float:
        return self.total_worth - self.cash_worth


@dataclass(frozen=True)
class DesiredAllocationEntry:
    """Target share of the balanced portfolio for one fund, in percent."""

    fund_number: int
    percent: float

    def __post_init__(self) -> None:
        if math.isnan(self.percent) or self.percent < 0 or self.percent > 100:
            raise ValueError(
                f"Desired percent for fund {self.fund_number} must be between 0 and 100, "
                f"got {self.percent}"
            )


@dataclass(frozen=True)
class BalanceOptions:
    """Balancing policy. `mode` has no default so callers must pick one.

    `addition_to_portfolio` and `use_cash_in_account` only apply to
    BalanceMode.WORTH_BASIS.
    """

    mode: BalanceMode
    addition_to_portfolio: float = 0.0
    use_cash_in_account: bool = False


@dataclass(frozen=True)
class BalancedHolding(Holding):
    """A holding with the signed cash amount that brings it to its target."""

    amount_to_balance: str = "0.00"

    @classmethod
    def from_holding(cls, holding: Holding, amount_to_balance: str) -> "BalancedHolding":
        return cls(**asdict(holding), amount_to_balance=amount_to_balance)

    def __str__(self) -> str:
        action = "WITHDRAW" if self.amount_to_balance.startswith("-") else "ADD"
        return (
            f"{action} {self.amount_to_balance.lstrip('-')} "
            f"{self.fund_number} ({self.fund_name})"
        )
