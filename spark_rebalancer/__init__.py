"""
Spark Rebalancer - Normalizes Spark brokerage account data and computes the
cash needed to bring a portfolio's funds to a desired allocation.

Exports:
    Account, Holding, HoldingsSummary: Normalized account data
    DesiredAllocationEntry: Target percent for one fund
    BalanceOptions: Balancing policy (mode and cash options)
    BalancedHolding: Holding plus the signed cash amount to balance it
    BalanceMode: Worth-basis or percent-basis balancing
    parse_*: Conversion of raw Spark payloads into the models above
    find_fund, balance_portfolio: Balancing computation
    SparkGateway: Authenticated client for the Spark API
"""

from .config import BalanceMode, SparkBroker, SparkConfig
from .exceptions import GatewayError, SchemaMismatch
from .gateway import SparkGateway
from .models import (
    Account,
    BalancedHolding,
    BalanceOptions,
    DesiredAllocationEntry,
    Holding,
    HoldingsSummary,
)
from .normalizer import (
    account_key_to_number,
    parse_account_balance,
    parse_account_holdings,
    parse_account_holdings_summary,
    parse_accounts,
)
from .portfolio import balance_portfolio, find_fund, summarize_percent

__all__ = [
    "Account",
    "BalancedHolding",
    "BalanceMode",
    "BalanceOptions",
    "DesiredAllocationEntry",
    "GatewayError",
    "Holding",
    "HoldingsSummary",
    "SchemaMismatch",
    "SparkBroker",
    "SparkConfig",
    "SparkGateway",
    "account_key_to_number",
    "balance_portfolio",
    "find_fund",
    "parse_account_balance",
    "parse_account_holdings",
    "parse_account_holdings_summary",
    "parse_accounts",
    "summarize_percent",
]
