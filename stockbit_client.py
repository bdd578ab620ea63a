"""
Stockbit market-data API client
Handles authentication, rate limiting and retries for the reads the ARA detector needs:
orderbook, market detector (broker accumulation), historical summary, emiten info, watchlist.
"""
import os
import threading
import time
from typing import Dict, List, Optional

import requests

from ara_errors import StockbitAuthError
from logger_config import get_logger
from ticker_utils import mask_credential
from config import (
    STOCKBIT_BASE_URL,
    STOCKBIT_TOKEN_ENV,
    DEFAULT_RATE_LIMIT_DELAY,
    MAX_API_RETRIES,
    STOCKBIT_API_TIMEOUT,
    WATCHLIST_PAGE_LIMIT,
)

logger = get_logger(__name__)


class StockbitClient:
    """Client for the Stockbit (exodus) REST API"""

    BASE_URL = STOCKBIT_BASE_URL

    def __init__(self, token: Optional[str] = None, rate_limit_delay: float = DEFAULT_RATE_LIMIT_DELAY):
        """
        Initialize the client

        Args:
            token: Bearer token; falls back to the STOCKBIT_TOKEN environment variable
            rate_limit_delay: Minimum delay between API calls in seconds (default: from config)
        """
        self.token = (token or os.getenv(STOCKBIT_TOKEN_ENV) or "").strip()
        if not self.token:
            raise StockbitAuthError(
                f"Stockbit token is required. Set {STOCKBIT_TOKEN_ENV} in .env or pass --token."
            )
        self.rate_limit_delay = rate_limit_delay
        self._last_request_time = 0.0
        self._throttle_lock = threading.Lock()
        self._session = requests.Session()
        logger.debug(
            "StockbitClient initialized (token %s, rate_limit_delay=%s)",
            mask_credential(self.token), rate_limit_delay,
        )

    def _throttle(self) -> None:
        """Ensure minimum delay between requests (shared by all worker threads)."""
        with self._throttle_lock:
            elapsed = time.time() - self._last_request_time
            if elapsed < self.rate_limit_delay:
                time.sleep(self.rate_limit_delay - elapsed)
            self._last_request_time = time.time()

    def _make_request(self, method: str, endpoint: str, max_retries: int = MAX_API_RETRIES, **kwargs) -> Dict:
        """
        Make authenticated API request with rate limiting and retry logic

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: API endpoint
            max_retries: Maximum number of attempts for rate-limit / transient errors
            **kwargs: Additional arguments for requests
        """
        url = f"{self.BASE_URL}{endpoint}"
        headers = {
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/json",
        }
        headers.update(kwargs.pop("headers", {}))
        if "timeout" not in kwargs:
            kwargs["timeout"] = STOCKBIT_API_TIMEOUT

        for attempt in range(max_retries):
            self._throttle()
            try:
                response = self._session.request(method, url, headers=headers, **kwargs)

                if response.status_code == 429:
                    retry_after = int(response.headers.get("Retry-After", 0) or 0)
                    if attempt < max_retries - 1:
                        wait_time = retry_after if retry_after > 0 else (2 ** attempt) * 2
                        logger.warning("Rate limited. Waiting %s seconds before retry %d/%d...",
                                       wait_time, attempt + 1, max_retries)
                        time.sleep(wait_time)
                        continue

                response.raise_for_status()
                return response.json()

            except requests.exceptions.HTTPError as e:
                status = e.response.status_code if e.response is not None else None
                # Don't retry client errors - resource doesn't exist or token rejected
                if status in (401, 403, 404):
                    logger.debug("%s error for %s: %s", status, endpoint, e)
                    raise
                if attempt < max_retries - 1:
                    wait_time = (2 ** attempt) * 2
                    logger.warning("HTTP request failed: %s. Retrying in %d seconds... (attempt %d/%d)",
                                   e, wait_time, attempt + 1, max_retries)
                    time.sleep(wait_time)
                else:
                    logger.error("HTTP request failed after %d attempts: %s", max_retries, e)
                    raise
            except requests.exceptions.RequestException as e:
                if attempt < max_retries - 1:
                    wait_time = (2 ** attempt) * 2
                    logger.warning("Request failed: %s. Retrying in %d seconds... (attempt %d/%d)",
                                   e, wait_time, attempt + 1, max_retries)
                    time.sleep(wait_time)
                else:
                    logger.error("Request failed after %d attempts: %s", max_retries, e)
                    raise
        return {}

    def get_orderbook(self, emiten: str) -> Dict:
        """Orderbook with last price and total bid/offer lots"""
        return self._make_request("GET", f"/company-price-feed/v2/orderbook/companies/{emiten}")

    def get_market_detector(self, emiten: str, date_from: str, date_to: str) -> Dict:
        """Broker summary and bandar detector (accumulation/distribution) for a date range"""
        params = {
            "from": date_from,
            "to": date_to,
            "transaction_type": "TRANSACTION_TYPE_NET",
            "market_board": "MARKET_BOARD_REGULER",
            "investor_type": "INVESTOR_TYPE_ALL",
            "limit": 25,
        }
        return self._make_request("GET", f"/marketdetectors/{emiten}", params=params)

    def get_historical_summary(self, emiten: str, start_date: str, end_date: str, limit: int) -> List[Dict]:
        """Daily sessions (volume, close, net foreign), most recent first"""
        params = {
            "period": "HS_PERIOD_DAILY",
            "start_date": start_date,
            "end_date": end_date,
            "limit": limit,
            "page": 1,
        }
        result = self._make_request("GET", f"/company-price-feed/historical/summary/{emiten}", params=params)
        data = (result or {}).get("data")
        if isinstance(data, dict):
            data = data.get("result")
        if isinstance(data, list):
            return data
        logger.warning("Unexpected historical summary format for %s: %s", emiten, type(data))
        return []

    def get_emiten_info(self, emiten: str) -> Dict:
        """Company profile (sector, name)"""
        return self._make_request("GET", f"/emitten/{emiten}/info", max_retries=1)

    def get_watchlist(self, limit: int = WATCHLIST_PAGE_LIMIT) -> Dict:
        """Default watchlist of the account; items live under data.result"""
        return self._make_request("GET", "/watchlist", params={"page": 1, "limit": limit})
