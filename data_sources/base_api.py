"""
Base API Client with connection pooling, timeouts and error classification.
API clients (poe.ninja) inherit from this.
"""

from typing import Optional, Dict, Any, Tuple, Union
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry
import logging

from core.constants import (
    API_CONNECT_RETRIES,
    API_TIMEOUT_CONNECT,
    API_TIMEOUT_READ,
    USER_AGENT_DEFAULT,
)

# Get logger - configuration should be done by application entrypoint, not library modules
logger = logging.getLogger(__name__)


class APIError(Exception):
    """Generic API error"""
    pass


class FetchError(APIError):
    """A dataset could not be fetched. The loader falls back on these."""
    pass


class RemoteRejected(FetchError):
    """Raised when the API answers with a non-success status"""

    def __init__(self, status_code: int, detail: str = ""):
        self.status_code = status_code
        message = f"API error {status_code}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class MalformedResponse(FetchError):
    """Raised when the body does not parse into the expected shape"""
    pass


class Unreachable(FetchError):
    """Raised on timeouts, DNS failures, refused or reset connections"""
    pass


TimeoutType = Union[int, float, Tuple[int, int], Tuple[float, float]]


class BaseAPIClient:
    """
    Base class for HTTP API clients.
    Provides a pooled session, timeouts and failure classification.
    """

    # Connection pool settings (shared across instances)
    POOL_CONNECTIONS = 4   # Number of connection pools to cache
    POOL_MAXSIZE = 4       # Max connections per pool

    def __init__(
            self,
            base_url: str,
            user_agent: Optional[str] = None,
            timeout: TimeoutType = (API_TIMEOUT_CONNECT, API_TIMEOUT_READ),
            connect_retries: int = API_CONNECT_RETRIES,
    ):
        """
        Args:
            base_url: Base URL for the API
            user_agent: Custom User-Agent header
            timeout: Request timeout in seconds, or (connect, read)
            connect_retries: Retries for failed connection attempts only
        """
        self.base_url = base_url.rstrip('/')
        self.timeout: TimeoutType = timeout
        self.user_agent = user_agent or USER_AGENT_DEFAULT

        self.session = requests.Session()
        self.session.headers.update({
            'User-Agent': self.user_agent,
            'Accept': 'application/json'
        })

        # Only retry connection establishment: a request that reached the
        # server is never sent twice, and statuses are left to us.
        retry_strategy = Retry(
            total=connect_retries,
            connect=connect_retries,
            read=0,
            status=0,
            other=0,
            backoff_factor=0.5,
            allowed_methods=["GET"],
            raise_on_status=False,
        )
        adapter = HTTPAdapter(
            pool_connections=self.POOL_CONNECTIONS,
            pool_maxsize=self.POOL_MAXSIZE,
            max_retries=retry_strategy
        )
        self.session.mount('https://', adapter)
        self.session.mount('http://', adapter)

        logger.debug(f"Initialized {self.__class__.__name__} - Base: {self.base_url}, Timeout: {timeout}")

    def get_json(
            self,
            endpoint: str,
            params: Optional[Dict[str, Any]] = None,
            timeout_override: Optional[TimeoutType] = None,
    ) -> Any:
        """
        Make one GET request and decode the JSON body.

        Args:
            endpoint: API endpoint (will be appended to base_url)
            params: Query parameters

        Returns:
            Decoded JSON body

        Raises:
            RemoteRejected: If the status is not 200
            MalformedResponse: If the body is not JSON
            Unreachable: On transport failures
        """
        url = f"{self.base_url}/{endpoint.lstrip('/')}"

        try:
            logger.debug(f"GET {url} - params: {params}")

            response = self.session.request(
                method='GET',
                url=url,
                params=params,
                timeout=(timeout_override if timeout_override is not None else self.timeout)
            )

            if response.status_code != 200:
                error_msg = f"API error {response.status_code} for {endpoint}"
                logger.debug(error_msg)
                raise RemoteRejected(response.status_code, (response.text or "")[:200])

            json_data = response.json()

        except requests.JSONDecodeError as e:
            # requests' JSONDecodeError also subclasses RequestException
            logger.debug(f"Invalid JSON from {endpoint}: {e}")
            raise MalformedResponse(f"Invalid JSON from {endpoint}: {e}") from e
        except ValueError as e:
            logger.debug(f"Invalid JSON from {endpoint}: {e}")
            raise MalformedResponse(f"Invalid JSON from {endpoint}: {e}") from e
        except requests.RequestException as e:
            logger.debug(f"Request failed: {e}")
            raise Unreachable(f"Request failed: {e}") from e

        logger.debug(f"Request successful: GET {endpoint}")
        return json_data

    def close(self):
        """Clean up resources"""
        self.session.close()
        logger.debug(f"Closed {self.__class__.__name__}")

    def __enter__(self):
        """Context manager entry - returns self for use in 'with' blocks."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - ensures session is closed."""
        self.close()
        return False  # Don't suppress exceptions
