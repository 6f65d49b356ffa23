"""Client for the Spark account-data API."""

import json
import logging
from typing import Any, Optional
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

from .config import SparkBroker, SparkConfig
from .exceptions import GatewayError
from .models import Account, Holding, HoldingsSummary
from .normalizer import (
    parse_account_balance,
    parse_account_holdings,
    parse_account_holdings_summary,
    parse_accounts,
)

logger = logging.getLogger(__name__)


class SparkGateway:
    """Authenticated session against one broker's Spark API.

    The API URL and bearer token belong to the instance, so several sessions
    can be used side by side.
    """

    def __init__(
        self,
        broker: str | SparkBroker,
        config: Optional[SparkConfig] = None,
    ) -> None:
        self.config = config or SparkConfig()
        self.broker = broker if isinstance(broker, SparkBroker) else SparkBroker(broker)
        self.api_url = self.config.base_url(self.broker)
        self._authorization: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self._authorization is not None

    def authenticate(self, username: str, password: str) -> None:
        """Log in and keep the bearer token for the following calls."""
        response = self._request(
            self.config.AUTHENTICATE_PATH,
            body={"username": username, "password": password},
            authorized=False,
        )
        token = response["data"].get("l") if isinstance(response["data"], dict) else None
        if not token:
            raise GatewayError("Authentication response did not include a token")

        self._authorization = f"Bearer {token}"
        logger.info("Authenticated against %s", self.api_url)

    def get_accounts(self) -> list[Account]:
        return parse_accounts(self._request(self.config.STATIC_DATA_PATH))

    def get_account_balance(self, account: Account) -> float:
        return parse_account_balance(
            self._account_request(self.config.ACCOUNT_SECURITIES_PATH, account)
        )

    def get_account_holdings(self, account: Account) -> list[Holding]:
        return parse_account_holdings(self._account_request(self.config.HOLDINGS_PATH, account))

    def get_account_holdings_summary(self, account: Account) -> HoldingsSummary:
        return parse_account_holdings_summary(
            self._account_request(self.config.ACCOUNT_SECURITIES_PATH, account)
        )

    def _account_request(self, path: str, account: Account) -> dict[str, Any]:
        return self._request(path, params={"accountKey": account.key})

    def _request(
        self,
        path: str,
        params: Optional[dict[str, str]] = None,
        body: Optional[dict[str, Any]] = None,
        authorized: bool = True,
    ) -> dict[str, Any]:
        """Send one request and wrap the decoded body as `{"data": body}`."""
        headers = {"User-Agent": self.config.USER_AGENT, "Accept": "application/json"}
        if authorized:
            if self._authorization is None:
                raise GatewayError("Not authenticated. Call authenticate() first.")
            headers["Authorization"] = self._authorization

        url = f"{self.api_url}{path}"
        if params:
            url = f"{url}?{urlencode(params)}"

        data = None
        if body is not None:
            data = json.dumps(body).encode()
            headers["Content-Type"] = "application/json"

        req = Request(url, data=data, headers=headers, method="POST" if data else "GET")
        logger.debug("%s %s", req.get_method(), url)

        try:
            with urlopen(req, timeout=self.config.REQUEST_TIMEOUT_S) as resp:
                payload = json.loads(resp.read())
        except HTTPError as e:
            raise GatewayError(f"{path} failed with HTTP {e.code}") from e
        except URLError as e:
            raise GatewayError(f"{path} failed: {e.reason}") from e
        except OSError as e:
            raise GatewayError(f"{path} failed: {e}") from e
        except json.JSONDecodeError as e:
            raise GatewayError(f"{path} returned invalid JSON") from e

        return {"data": payload}
