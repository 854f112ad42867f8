"""
PoE.ninja API client for economy snapshots.
Inherits from BaseAPIClient for pooling, timeouts and error classification.
"""

from datetime import datetime
from typing import Any, Callable, Dict, Optional
import logging

from core.catalog import DatasetFamily, DatasetType, League
from core.constants import (
    CURRENCY_OVERVIEW_ENDPOINT,
    ITEM_OVERVIEW_ENDPOINT,
    POE_NINJA_BASE_URL,
    RESPONSE_LINES_KEY,
)
from core.models import RecordParseError, Snapshot, record_type_for
from data_sources.base_api import BaseAPIClient, MalformedResponse, TimeoutType

logger = logging.getLogger(__name__)

# Overview endpoint per dataset family
FAMILY_ENDPOINTS: Dict[DatasetFamily, str] = {
    DatasetFamily.CURRENCY: CURRENCY_OVERVIEW_ENDPOINT,
    DatasetFamily.ITEM: ITEM_OVERVIEW_ENDPOINT,
}


def local_now() -> datetime:
    """Current time, timezone-aware in the local zone."""
    return datetime.now().astimezone()


class PoeNinjaFetcher(BaseAPIClient):
    """
    Fetches currencyoverview / itemoverview snapshots from poe.ninja.

    The fetcher only does I/O and parsing; persisting the result is the
    loader's job.
    """

    def __init__(
            self,
            base_url: str = POE_NINJA_BASE_URL,
            user_agent: Optional[str] = None,
            timeout: Optional[TimeoutType] = None,
            connect_retries: Optional[int] = None,
            clock: Callable[[], datetime] = local_now,
    ):
        """
        Args:
            base_url: poe.ninja API root
            user_agent: User-Agent header
            timeout: Request timeout, or (connect, read)
            connect_retries: Retries for failed connection attempts
            clock: Source of the fetch timestamp
        """
        kwargs: Dict[str, Any] = {"base_url": base_url, "user_agent": user_agent}
        if timeout is not None:
            kwargs["timeout"] = timeout
        if connect_retries is not None:
            kwargs["connect_retries"] = connect_retries
        super().__init__(**kwargs)
        self.clock = clock

    @staticmethod
    def endpoint_for(dataset_type: DatasetType) -> str:
        """Overview endpoint serving ``dataset_type``."""
        return FAMILY_ENDPOINTS[dataset_type.family]

    def fetch(self, league: League, dataset_type: DatasetType) -> Snapshot:
        """
        Fetch one overview and parse it into a Snapshot.

        Args:
            league: League to query
            dataset_type: Currency or item type; its family selects the endpoint

        Returns:
            Snapshot stamped with the time the response was read

        Raises:
            RemoteRejected: non-200 status
            MalformedResponse: body is not an overview of the expected shape
            Unreachable: transport failure or timeout
        """
        endpoint = self.endpoint_for(dataset_type)
        params = {"league": league.api_name, "type": dataset_type.value}

        logger.debug(f"GET {endpoint} for {league.value}/{dataset_type.value}")
        data = self.get_json(endpoint, params=params)
        snapshot = self.parse_overview(data, dataset_type.family, fetched_at=self.clock())

        logger.debug(f"Fetched {len(snapshot)} {dataset_type.value} records for {league.value}")
        return snapshot

    @staticmethod
    def parse_overview(data: Any, family: DatasetFamily, fetched_at: datetime) -> Snapshot:
        """
        Parse an overview body into a Snapshot of ``family``.

        Raises:
            MalformedResponse: if the body or any line has the wrong shape
        """
        if not isinstance(data, dict):
            raise MalformedResponse(f"Expected a JSON object, got {type(data).__name__}")

        lines = data.get(RESPONSE_LINES_KEY)
        if not isinstance(lines, list):
            raise MalformedResponse(f"Response has no '{RESPONSE_LINES_KEY}' array")

        record_cls = record_type_for(family)
        try:
            records = tuple(record_cls.from_dict(line) for line in lines)
        except RecordParseError as e:
            raise MalformedResponse(f"Unexpected {family.value} line: {e}") from e

        extra = {k: v for k, v in data.items() if k not in (RESPONSE_LINES_KEY, "updated")}
        return Snapshot(records=records, fetched_at=fetched_at, extra=extra)
