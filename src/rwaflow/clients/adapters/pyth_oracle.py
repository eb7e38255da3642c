"""
Pyth Hermes price oracle adapter.

Fetches signed price updates and parsed prices from the Hermes REST API
(``/v2/updates/price/latest``) and normalizes them into the internal
``PriceQuote`` schema.  Reads of prices already posted on-chain are
delegated to an injected reader (normally the ledger adapter's
``read_latest_price``), since those live in the reader contract rather
than in Hermes.

Nothing is cached: every call goes to the network.
"""
from typing import Callable, List, Optional

import httpx
from loguru import logger

from src.rwaflow.clients.base import PriceOracleClient
from src.rwaflow.core.types import PriceQuote

LATEST_UPDATES_PATH = "/v2/updates/price/latest"

OnChainReader = Callable[[str], PriceQuote]


def _strip_0x(feed_id: str) -> str:
    return feed_id[2:] if feed_id.startswith("0x") else feed_id


def _with_0x(value: str) -> str:
    return value if value.startswith("0x") else f"0x{value}"


class PythHermesClient(PriceOracleClient):
    """Concrete ``PriceOracleClient`` backed by Pyth Hermes."""

    def __init__(
        self,
        api_url: str,
        onchain_reader: Optional[OnChainReader] = None,
        timeout: float = 10.0,
        http_client: Optional[httpx.Client] = None,
    ):
        """
        Args:
            api_url: Hermes base URL (e.g. ``https://hermes.pyth.network``).
            onchain_reader: Callable returning the latest posted price for a
                            feed id.  Without it ``get_latest_price`` raises.
            timeout: HTTP timeout in seconds.
            http_client: Pre-built client (tests inject one with a mock
                         transport).
        """
        self.api_url = api_url.rstrip("/")
        self.onchain_reader = onchain_reader
        self._client = http_client or httpx.Client(base_url=self.api_url, timeout=timeout)

    def close(self) -> None:
        self._client.close()

    def get_price_update_data(self, feed_ids: List[str]) -> List[str]:
        """Return the hex-encoded update payloads for *feed_ids*.

        Raises:
            ValueError: If Hermes returns no binary update data.
            httpx.HTTPError: On transport or HTTP status failures.
        """
        logger.info(f"Fetching price update data for {len(feed_ids)} feeds")
        body = self._latest_updates(feed_ids, parsed=False)

        binary = body.get("binary") or {}
        data = binary.get("data")
        if not data:
            logger.error("Hermes returned no binary price update data.")
            raise ValueError("No price update data received")

        return [_with_0x(chunk) for chunk in data]

    def fetch_latest_prices(self, feed_ids: List[str]) -> List[PriceQuote]:
        """Return parsed off-chain prices for *feed_ids*.

        Raises:
            LookupError: If Hermes knows none of the requested feeds.
        """
        body = self._latest_updates(feed_ids, parsed=True)

        parsed = body.get("parsed") or []
        if not parsed:
            logger.warning(f"No price feeds found for {feed_ids}")
            raise LookupError("No price feeds found")

        quotes = [
            PriceQuote(
                feed_id=_with_0x(feed["id"]),
                price=int(feed["price"]["price"]),
                expo=int(feed["price"]["expo"]),
                timestamp=int(feed["price"]["publish_time"]),
                confidence=int(feed["price"]["conf"]),
            )
            for feed in parsed
        ]
        logger.success(f"Fetched {len(quotes)} prices from Hermes.")
        return quotes

    def get_latest_price(self, feed_id: str) -> PriceQuote:
        if self.onchain_reader is None:
            raise RuntimeError("No on-chain price reader configured")
        return self.onchain_reader(feed_id)

    def _latest_updates(self, feed_ids: List[str], parsed: bool) -> dict:
        params = {
            "ids[]": [_strip_0x(f) for f in feed_ids],
            "encoding": "hex",
            "parsed": "true" if parsed else "false",
        }
        try:
            response = self._client.get(LATEST_UPDATES_PATH, params=params)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPError as e:
            logger.error(f"Hermes request failed: {e}")
            raise
