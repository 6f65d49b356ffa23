"""Configuration constants for the Spark portfolio balancer."""

from dataclasses import dataclass
from enum import Enum


class SparkBroker(Enum):
    """Brokers that expose a Spark (ordernet) API."""

    NESUA = "nesua"
    MEITAV = "meitav"
    PSAGOT = "psagot"


class BalanceMode(Enum):
    """How the current allocation of a fund is measured."""

    WORTH_BASIS = "worth"
    PERCENT_BASIS = "percent"


@dataclass(frozen=True)
class SparkConfig:
    """Configuration for the Spark gateway."""

    BASE_URL_TEMPLATE: str = "https://spark{broker}.ordernet.co.il/api"
    AUTHENTICATE_PATH: str = "/Auth/Authenticate"
    STATIC_DATA_PATH: str = "/DataProvider/GetStaticData"
    ACCOUNT_SECURITIES_PATH: str = "/Account/GetAccountSecurities"
    HOLDINGS_PATH: str = "/Account/GetHoldings"
    REQUEST_TIMEOUT_S: int = 30
    USER_AGENT: str = "Mozilla/5.0"

    def base_url(self, broker: SparkBroker) -> str:
        return self.BASE_URL_TEMPLATE.format(broker=broker.value)
