"""Conversion of raw Spark payloads into typed entities."""

import logging
from typing import Any, Callable, Optional, TypeVar

from .exceptions import SchemaMismatch
from .models import Account, Holding, HoldingsSummary
from .schema import MISSING, SCHEMA, get_path

logger = logging.getLogger(__name__)

T = TypeVar("T")


def parse_accounts(raw: Any) -> list[Account]:
    """Extract the user's accounts from a GetStaticData response.

    Args:
        raw: Response envelope, `{"data": [<group>, ...]}`.

    Returns:
        One Account per record found in the `ACC` groups, in payload order.
        An empty group list, or one without `ACC` groups, gives an empty list.

    Raises:
        SchemaMismatch: If `data` is missing, no group carries a type tag, or
            an `ACC` group has no account list.
    """
    schema = SCHEMA.ACCOUNT
    groups = _response_list(raw, "accounts")

    if groups and not any(
        isinstance(group, dict) and schema.DISCRIMINATOR in group for group in groups
    ):
        raise SchemaMismatch(
            f"No entry in accounts response carries the '{schema.DISCRIMINATOR}' type tag"
        )

    accounts: list[Account] = []
    for group in groups:
        if not isinstance(group, dict) or group.get(schema.DISCRIMINATOR) != schema.ACCOUNT_TAG:
            continue

        records = group.get(schema.ACCOUNT_LIST, MISSING)
        if records is MISSING or not isinstance(records, list):
            raise SchemaMismatch(
                f"Account group is missing its '{schema.ACCOUNT_LIST}' list"
            )
        accounts.extend(_account_from_raw(record) for record in records)

    logger.debug("Parsed %d accounts", len(accounts))
    return accounts


def parse_account_holdings(raw: Any) -> list[Holding]:
    """Extract an account's fund holdings from a GetHoldings response.

    Only the five tracked aliases are read; every other raw field is dropped.
    A record missing one of them still parses, with None in that field.
    """
    records = _response_list(raw, "holdings")
    holdings = [_holding_from_raw(record) for record in records]
    logger.debug("Parsed %d holdings", len(holdings))
    return holdings


def parse_account_holdings_summary(raw: Any) -> HoldingsSummary:
    """Extract total and cash worth from a GetAccountSecurities response."""
    schema = SCHEMA.SUMMARY
    body = get_path(raw, SCHEMA.RESPONSE)
    if not isinstance(body, dict):
        raise SchemaMismatch("Holdings summary response has no 'data' object")

    total = body.get(schema.TOTAL_WORTH, MISSING)
    cash = body.get(schema.CASH_WORTH, MISSING)
    if total is MISSING or cash is MISSING:
        raise SchemaMismatch(
            f"Holdings summary is missing '{schema.TOTAL_WORTH}' or '{schema.CASH_WORTH}'"
        )

    summary = HoldingsSummary(
        total_worth=_coerce(total, float, "total_worth"),
        cash_worth=_coerce(cash, float, "cash_worth"),
    )
    if not summary.total_worth >= summary.cash_worth >= 0:
        logger.warning(
            "Unusual holdings summary: total_worth=%s cash_worth=%s",
            summary.total_worth,
            summary.cash_worth,
        )
    return summary


def parse_account_balance(raw: Any) -> float:
    """Extract the account's total balance from a GetAccountSecurities response."""
    balance = get_path(raw, SCHEMA.RESPONSE + SCHEMA.SUMMARY.BALANCE)
    if balance is MISSING:
        raise SchemaMismatch("Account balance not found at data.a.o")
    return _coerce(balance, float, "balance")


def account_key_to_number(key: str) -> str:
    """Convert an account key (`ACC_XXX-YYYYYY`) to its account number (`YYYYYY`)."""
    _, sep, number = key.partition("-")
    if not sep or not number:
        raise ValueError(f"Malformed account key: '{key}'")
    return number


def _response_list(raw: Any, what: str) -> list:
    body = get_path(raw, SCHEMA.RESPONSE)
    if body is MISSING:
        raise SchemaMismatch(f"{what.capitalize()} response has no 'data' field")
    if not isinstance(body, list):
        raise SchemaMismatch(
            f"Expected a list under 'data' in {what} response, got {type(body).__name__}"
        )
    return body


def _account_from_raw(record: Any) -> Account:
    schema = SCHEMA.ACCOUNT
    key = get_path(record, schema.KEY)
    if key is MISSING:
        raise SchemaMismatch(f"Account record is missing its '{schema.KEY[0]}' key")

    name = get_path(record, schema.NAME)
    number = get_path(record, schema.NUMBER)
    if number is MISSING:
        try:
            number = account_key_to_number(str(key))
        except ValueError:
            number = None

    return Account(
        key=str(key),
        name=None if name is MISSING else _optional(name, str, "name"),
        number=_optional(number, str, "number"),
    )


def _holding_from_raw(record: Any) -> Holding:
    if not isinstance(record, dict):
        raise SchemaMismatch(f"Holding record is not an object: {record!r}")

    schema = SCHEMA.HOLDING
    return Holding(
        fund_number=_optional(record.get(schema.FUND_NUMBER), int, "fund_number"),
        fund_name=_optional(record.get(schema.FUND_NAME), str, "fund_name"),
        fund_amount=_optional(record.get(schema.FUND_AMOUNT), float, "fund_amount"),
        fund_worth=_optional(record.get(schema.FUND_WORTH), float, "fund_worth"),
        fund_percent=_optional(record.get(schema.FUND_PERCENT), float, "fund_percent"),
    )


def _optional(value: Any, kind: Callable[[Any], T], field: str) -> Optional[T]:
    if value is None:
        return None
    return _coerce(value, kind, field)


def _coerce(value: Any, kind: Callable[[Any], T], field: str) -> T:
    try:
        return kind(value)
    except (TypeError, ValueError) as e:
        raise SchemaMismatch(f"Cannot read {field} from {value!r}") from e
