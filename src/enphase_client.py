"""
Enphase API Client
Retrieves production and consumption stats from the Enphase Enlighten v2 API
"""
import requests
import logging
from typing import Dict, List

from enphase_intervals import EnphaseEndpoint, Interval, IntervalParseError, parse_intervals
from decider_settings import DEFAULT_BASE_URL, DEFAULT_REQUEST_TIMEOUT

logger = logging.getLogger(__name__)


class EnphaseAPIError(Exception):
    """Raised when a stats request fails or its body cannot be decoded"""


class EnphaseClient:
    """Client for the Enphase v2 stats endpoints, authenticated with a developer key and user id"""

    def __init__(self, api_key: str, user_id: str, system_id: str,
                 base_url: str = DEFAULT_BASE_URL, timeout: int = DEFAULT_REQUEST_TIMEOUT):
        """
        Initialize Enphase API client

        Args:
            api_key: Developer key from https://developer.enphase.com
            user_id: User id shown in the system's API settings page
            system_id: Your Enphase system ID
            base_url: API root, without trailing slash
            timeout: Per-request timeout in seconds
        """
        self.api_key = api_key
        self.user_id = user_id
        self.system_id = system_id
        self.base_url = base_url
        self.timeout = timeout

    def _get(self, endpoint: EnphaseEndpoint, start_at: int, end_at: int) -> Dict:
        url = f"{self.base_url}/systems/{self.system_id}/{endpoint.path}"
        params = {
            "start_at": start_at,
            "end_at": end_at,
            "key": self.api_key,
            "user_id": self.user_id,
        }
        logger.debug(f"GET {url} start_at={start_at} end_at={end_at}")

        try:
            response = requests.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except ValueError as e:
            # requests' JSONDecodeError is both a ValueError and a RequestException
            logger.error(f"Invalid JSON in {endpoint.label} response: {e}")
            raise EnphaseAPIError(f"{endpoint.label} response was not valid JSON") from e
        except requests.exceptions.RequestException as e:
            status_code = getattr(getattr(e, "response", None), "status_code", None)
            logger.error(f"Failed to retrieve {endpoint.label} stats: {e}")
            if status_code is not None:
                raise EnphaseAPIError(f"{endpoint.label} request returned HTTP {status_code}") from e
            raise EnphaseAPIError(f"{endpoint.label} request failed: {e}") from e

    def get_intervals(self, endpoint: EnphaseEndpoint, start_at: int, end_at: int) -> List[Interval]:
        """
        Get one window of intervals from a stats endpoint

        Args:
            endpoint: Production or consumption endpoint
            start_at: Unix timestamp for start of range
            end_at: Unix timestamp for end of range

        Returns:
            Intervals in API order
        """
        data = self._get(endpoint, start_at, end_at)
        try:
            intervals = parse_intervals(data, endpoint)
        except IntervalParseError as e:
            logger.error(f"Unexpected {endpoint.label} response shape: {e}")
            raise EnphaseAPIError(str(e)) from e

        logger.info(f"Retrieved {len(intervals)} {endpoint.label} intervals for system {self.system_id}")
        return intervals

    def get_production_stats(self, start_at: int, end_at: int) -> List[Interval]:
        """Get production intervals (wh_del) for one window"""
        return self.get_intervals(EnphaseEndpoint.PRODUCTION, start_at, end_at)

    def get_consumption_stats(self, start_at: int, end_at: int) -> List[Interval]:
        """Get consumption intervals (enwh) for one window"""
        return self.get_intervals(EnphaseEndpoint.CONSUMPTION, start_at, end_at)
