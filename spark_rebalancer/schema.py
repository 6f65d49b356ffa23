"""Raw key aliases used by the Spark API.

The upstream payloads are minified: every field is a one or two letter key,
and the same letter means different things in different responses. All of
those keys live here so that an upstream rename only touches this module.
"""

from dataclasses import dataclass
from typing import Any, Sequence

Path = tuple[str | int, ...]


class _Missing:
    """Marker for a path step that is not present in a payload."""

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


@dataclass(frozen=True)
class AccountSchema:
    """Layout of `/DataProvider/GetStaticData`.

    The response holds a list of typed groups. Groups tagged `ACC` carry the
    user's accounts under `a`.
    Inside each account record the name sits at `a.b` and the number at `a.e`.
    """

    DISCRIMINATOR: str = "b"
    ACCOUNT_TAG: str = "ACC"
    ACCOUNT_LIST: str = "a"
    KEY: Path = ("_k",)
    NAME: Path = ("a", "b")
    NUMBER: Path = ("a", "e")


@dataclass(frozen=True)
class HoldingSchema:
    """Layout of a single record of `/Account/GetHoldings`."""

    FUND_NUMBER: str = "c"
    FUND_NAME: str = "j"
    FUND_AMOUNT: str = "bd"
    FUND_WORTH: str = "be"
    FUND_PERCENT: str = "bk"


@dataclass(frozen=True)
class SummarySchema:
    """Layout of `/Account/GetAccountSecurities`."""

    TOTAL_WORTH: str = "b"
    CASH_WORTH: str = "g"
    BALANCE: Path = ("a", "o")


@dataclass(frozen=True)
class RawSchema:
    RESPONSE: Path = ("data",)
    ACCOUNT: AccountSchema = AccountSchema()
    HOLDING: HoldingSchema = HoldingSchema()
    SUMMARY: SummarySchema = SummarySchema()


SCHEMA = RawSchema()


def get_path(raw: Any, path: Sequence[str | int]) -> Any:
    """Walk `path` through nested mappings and lists.

    Returns MISSING as soon as a step is absent, instead of raising, so callers
    can tell an absent field apart from one that is present but null.
    """
    node = raw
    for step in path:
        if isinstance(step, int):
            if not isinstance(node, list) or not -len(node) <= step < len(node):
                return MISSING
            node = node[step]
        else:
            if not isinstance(node, dict) or step not in node:
                return MISSING
            node = node[step]
    return node
