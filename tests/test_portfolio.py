import pytest

from spark_rebalancer.config import BalanceMode
from spark_rebalancer.models import (
    BalancedHolding,
    BalanceOptions,
    DesiredAllocationEntry,
    Holding,
    HoldingsSummary,
)
from spark_rebalancer.portfolio import balance_portfolio, find_fund, summarize_percent


def _holding(fund_number, worth=None, percent=None, name="Fund"):
    return Holding(
        fund_number=fund_number,
        fund_name=name,
        fund_amount=None,
        fund_worth=worth,
        fund_percent=percent,
    )


WORTH = BalanceOptions(mode=BalanceMode.WORTH_BASIS)
PERCENT = BalanceOptions(mode=BalanceMode.PERCENT_BASIS)


class TestDesiredAllocationEntry:
    def test_valid(self):
        entry = DesiredAllocationEntry(fund_number=1, percent=50)
        assert entry.percent == 50

    def test_negative_percent(self):
        with pytest.raises(ValueError, match="between 0 and 100"):
            DesiredAllocationEntry(fund_number=1, percent=-1)

    def test_over_100_percent(self):
        with pytest.raises(ValueError, match="between 0 and 100"):
            DesiredAllocationEntry(fund_number=1, percent=100.5)

    def test_nan_percent(self):
        with pytest.raises(ValueError, match="between 0 and 100"):
            DesiredAllocationEntry(fund_number=1, percent=float("nan"))


class TestBalancedHolding:
    def test_from_holding_keeps_fields(self):
        holding = _holding(1, worth=400.0, percent=40.0, name="Bonds")
        balanced = BalancedHolding.from_holding(holding, "80.00")
        assert balanced.fund_number == 1
        assert balanced.fund_name == "Bonds"
        assert balanced.fund_worth == 400.0
        assert balanced.fund_percent == 40.0
        assert balanced.amount_to_balance == "80.00"

    def test_str_representation(self):
        balanced = BalancedHolding.from_holding(_holding(1, name="Bonds"), "-12.50")
        assert "WITHDRAW" in str(balanced)
        assert "12.50" in str(balanced)
        assert "Bonds" in str(balanced)


class TestFindFund:
    def test_found(self):
        holdings = [_holding(1), _holding(2)]
        assert find_fund(2, holdings) is holdings[1]

    def test_not_found(self):
        assert find_fund(999, [_holding(1)]) is None

    def test_empty_list(self):
        assert find_fund(1, []) is None

    def test_holding_without_fund_number(self):
        assert find_fund(1, [_holding(None)]) is None


class TestSummarizePercent:
    def test_sum(self):
        assert summarize_percent([_holding(1, percent=30), _holding(2, percent=45)]) == 75

    def test_missing_percent_counts_as_zero(self):
        assert summarize_percent([_holding(1, percent=30), _holding(2)]) == 30

    def test_empty(self):
        assert summarize_percent([]) == 0


class TestWorthBasis:
    holdings = [_holding(1, worth=400.0, percent=40.0)]
    summary = HoldingsSummary(total_worth=1000.0, cash_worth=200.0)

    def test_already_balanced(self):
        results = balance_portfolio(
            self.holdings, self.summary, [DesiredAllocationEntry(1, 50)], WORTH
        )
        assert results[0].amount_to_balance == "0.00"

    def test_add_cash(self):
        results = balance_portfolio(
            self.holdings, self.summary, [DesiredAllocationEntry(1, 60)], WORTH
        )
        assert results[0].amount_to_balance == "80.00"
        assert results[0].fund_worth == 400.0

    def test_withdraw_cash(self):
        results = balance_portfolio(
            self.holdings, self.summary, [DesiredAllocationEntry(1, 25)], WORTH
        )
        assert results[0].amount_to_balance == "-200.00"

    def test_use_cash_in_account(self):
        options = BalanceOptions(mode=BalanceMode.WORTH_BASIS, use_cash_in_account=True)
        results = balance_portfolio(
            self.holdings, self.summary, [DesiredAllocationEntry(1, 50)], options
        )
        # base 1000, current 40%
        assert results[0].amount_to_balance == "100.00"

    def test_addition_to_portfolio(self):
        options = BalanceOptions(mode=BalanceMode.WORTH_BASIS, addition_to_portfolio=200.0)
        results = balance_portfolio(
            self.holdings, self.summary, [DesiredAllocationEntry(1, 50)], options
        )
        # base 1000, current 40%
        assert results[0].amount_to_balance == "100.00"

    def test_zero_portfolio(self):
        summary = HoldingsSummary(total_worth=0.0, cash_worth=0.0)
        results = balance_portfolio(
            [_holding(1, worth=0.0)], summary, [DesiredAllocationEntry(1, 70)], WORTH
        )
        assert results[0].amount_to_balance == "0.00"

    def test_missing_worth_counts_as_zero(self):
        results = balance_portfolio(
            [_holding(1)], self.summary, [DesiredAllocationEntry(1, 10)], WORTH
        )
        assert results[0].amount_to_balance == "80.00"

    def test_rounds_only_the_final_amount(self):
        holdings = [_holding(1, worth=100.0), _holding(2, worth=200.0)]
        summary = HoldingsSummary(total_worth=300.0, cash_worth=0.0)
        results = balance_portfolio(
            holdings,
            summary,
            [DesiredAllocationEntry(1, 50), DesiredAllocationEntry(2, 50)],
            WORTH,
        )
        assert [r.amount_to_balance for r in results] == ["50.00", "-50.00"]


class TestPercentBasis:
    def test_renormalizes_reported_percents(self):
        # Reported percents exclude cash and add up to 80
        holdings = [
            _holding(1, worth=300.0, percent=30.0),
            _holding(2, worth=500.0, percent=50.0),
        ]
        summary = HoldingsSummary(total_worth=1000.0, cash_worth=200.0)
        results = balance_portfolio(
            holdings,
            summary,
            [DesiredAllocationEntry(1, 50), DesiredAllocationEntry(2, 50)],
            PERCENT,
        )
        # base 800; current 37.5% / 62.5%
        assert [r.amount_to_balance for r in results] == ["100.00", "-100.00"]

    def test_ignores_cash_options(self):
        holdings = [_holding(1, percent=40.0), _holding(2, percent=60.0)]
        summary = HoldingsSummary(total_worth=1000.0, cash_worth=0.0)
        options = BalanceOptions(
            mode=BalanceMode.PERCENT_BASIS,
            addition_to_portfolio=500.0,
            use_cash_in_account=True,
        )
        results = balance_portfolio(holdings, summary, [DesiredAllocationEntry(1, 50)], options)
        assert results[0].amount_to_balance == "100.00"

    def test_zero_percent_sum(self):
        holdings = [_holding(1, percent=0.0)]
        summary = HoldingsSummary(total_worth=500.0, cash_worth=100.0)
        results = balance_portfolio(holdings, summary, [DesiredAllocationEntry(1, 25)], PERCENT)
        assert results[0].amount_to_balance == "100.00"


class TestBalancePortfolio:
    holdings = [_holding(1, worth=400.0, percent=40.0), _holding(2, worth=400.0, percent=40.0)]
    summary = HoldingsSummary(total_worth=1000.0, cash_worth=200.0)

    def test_unheld_fund_is_skipped(self):
        results = balance_portfolio(
            self.holdings, self.summary, [DesiredAllocationEntry(999, 50)], WORTH
        )
        assert results == [None]

    def test_output_matches_desired_length_and_order(self):
        desired = [
            DesiredAllocationEntry(2, 60),
            DesiredAllocationEntry(999, 10),
            DesiredAllocationEntry(1, 30),
        ]
        results = balance_portfolio(self.holdings, self.summary, desired, WORTH)
        assert len(results) == 3
        assert results[0].fund_number == 2
        assert results[1] is None
        assert results[2].fund_number == 1
        assert results[0].amount_to_balance == "80.00"
        assert results[2].amount_to_balance == "-160.00"

    def test_empty_desired_allocation(self):
        assert balance_portfolio(self.holdings, self.summary, [], WORTH) == []

    def test_empty_holdings(self):
        desired = [DesiredAllocationEntry(1, 50), DesiredAllocationEntry(2, 50)]
        assert balance_portfolio([], self.summary, desired, PERCENT) == [None, None]

    def test_idempotent(self):
        desired = [DesiredAllocationEntry(1, 45), DesiredAllocationEntry(2, 55)]
        first = balance_portfolio(self.holdings, self.summary, desired, WORTH)
        second = balance_portfolio(self.holdings, self.summary, desired, WORTH)
        assert first == second

    def test_unknown_mode(self):
        options = BalanceOptions(mode="median")  # type: ignore[arg-type]
        with pytest.raises(ValueError, match="Unknown balance mode"):
            balance_portfolio(self.holdings, self.summary, [DesiredAllocationEntry(1, 50)], options)
