"""GraphQL client for the checklist API proxy, with retry logic.

Transport failures, non-2xx responses and non-JSON bodies (the proxy returns
an HTML page when it times out) are retried with linear backoff. GraphQL
``errors`` in a well-formed response are a request problem and are raised
immediately.
"""

import logging
import re
import time
from typing import Any, Dict, List, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from src.checklists.models import ListInstance, parse_list_instances

logger = logging.getLogger(__name__)

DEFAULT_MAX_RETRIES = 3
DEFAULT_INITIAL_BACKOFF_SECONDS = 1
DEFAULT_TIMEOUT_SECONDS = 30

# Characters of a failed body quoted in error messages
ERROR_BODY_PREVIEW = 50

ITEM_FIELDS = (
    "id type __typename resultValue resultText resultDouble isMarkedNA completionTimestamp "
    "resultAssets { id name } resultCompanyFiles { fileURI } peripheral { type } "
    "itemTemplate { text type isScoringItemType isRequired } notes { body } correctiveActions { id }"
)

# Sub-lists nested below the top-level items
SUBLIST_DEPTH = 3


def _item_selection(depth: int) -> str:
    if depth == 0:
        return f"itemResults {{ {ITEM_FIELDS} }}"
    return f"itemResults {{ {ITEM_FIELDS} subList {{ id instanceTitle {_item_selection(depth - 1)} }} }}"


LIST_INSTANCES_QUERY = (
    "query GetChecklists($filter: ListInstancesFilter!) { listInstances(filter: $filter) { "
    "id displayTimestamp deadlineTimestamp incompleteCount isActive instanceTitle score "
    f"maxPossibleScore listTemplate {{ title }} {_item_selection(SUBLIST_DEPTH)} }} }}"
)

LOCATIONS_QUERY = "query GetLocations { locations { id name } }"

_HTML_TITLE = re.compile(r"<title>(.*?)</title>", re.IGNORECASE | re.DOTALL)

# Session-level retry for gateway transients
_retry = Retry(total=1, allowed_methods=["POST"], backoff_factor=1, status_forcelist=[502, 503, 504])
_session = requests.Session()
_session.mount("https://", HTTPAdapter(max_retries=_retry))


class FetchError(Exception):
    """Raised when a request fails after retries."""
    def __init__(self, endpoint: str, message: str, original_error: Optional[Exception] = None):
        self.endpoint = endpoint
        self.message = message
        self.original_error = original_error
        super().__init__(f"{endpoint}: {message}")


class GraphQLError(Exception):
    """Raised when the API returns GraphQL errors. Not retried."""
    def __init__(self, messages: List[str]):
        self.messages = messages
        super().__init__(", ".join(messages))


class _RetryableError(Exception):
    pass


class JoltClient:
    """Thin GraphQL client for the checklist proxy."""

    def __init__(
        self,
        proxy_url: str,
        max_retries: int = DEFAULT_MAX_RETRIES,
        initial_backoff_seconds: float = DEFAULT_INITIAL_BACKOFF_SECONDS,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
    ):
        self.proxy_url = proxy_url
        self.max_retries = max(1, max_retries)
        self.initial_backoff_seconds = initial_backoff_seconds
        self.timeout = timeout
        self.session = session or _session

    @classmethod
    def from_config(cls, config: Dict[str, Any], proxy_url: str) -> "JoltClient":
        retry = config.get("retry", {})
        return cls(
            proxy_url=proxy_url,
            max_retries=retry.get("max_retries", DEFAULT_MAX_RETRIES),
            initial_backoff_seconds=retry.get("initial_backoff_seconds", DEFAULT_INITIAL_BACKOFF_SECONDS),
            timeout=config.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS),
        )

    def _post_once(self, payload: Dict[str, Any], attempt: int) -> Dict[str, Any]:
        try:
            response = self.session.post(
                self.proxy_url,
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise _RetryableError(f"Request failed: {e}") from e

        text = response.text or ""
        if not response.ok:
            raise _RetryableError(
                f"API Error ({response.status_code}) on attempt {attempt}: {text[:ERROR_BODY_PREVIEW]}..."
            )

        try:
            result = response.json()
        except ValueError as e:
            message = "Proxy Timeout: Received HTML instead of data."
            match = _HTML_TITLE.search(text)
            if match and match.group(1).strip():
                message += f" [{match.group(1).strip()}]"
            raise _RetryableError(message) from e

        if not isinstance(result, dict):
            raise _RetryableError("Invalid JSON received: expected an object")

        errors = result.get("errors")
        if errors:
            raise GraphQLError([
                e.get("message", str(e)) if isinstance(e, dict) else str(e)
                for e in errors
            ])
        return result

    def execute(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Execute a GraphQL query with retries.

        Args:
            query: GraphQL document
            variables: Query variables

        Returns:
            Parsed response body (with a ``data`` key)

        Raises:
            GraphQLError: The API rejected the query
            FetchError: All attempts failed
        """
        payload = {"query": query, "variables": variables or {}}
        last_error: Optional[Exception] = None

        for attempt in range(1, self.max_retries + 1):
            try:
                return self._post_once(payload, attempt)
            except _RetryableError as e:
                last_error = e
                if attempt < self.max_retries:
                    backoff = self.initial_backoff_seconds * attempt
                    logger.warning(f"Retry {attempt}/{self.max_retries} in {backoff}s: {e}")
                    time.sleep(backoff)
                else:
                    logger.error(f"Failed after {self.max_retries} attempts: {e}")

        raise FetchError(self.proxy_url, str(last_error), last_error)

    def fetch_lists_for_location(self, location_id: str, start_ts: int, end_ts: int) -> List[ListInstance]:
        """
        Fetch top-level list instances displayed within [start_ts, end_ts].

        Failures are logged and yield an empty list so one store never
        breaks a multi-store grid.
        """
        variables = {
            "filter": {
                "locationIds": [location_id],
                "displayAfterTimestamp": start_ts,
                "displayBeforeTimestamp": end_ts,
                "isSublist": False,
            }
        }
        try:
            data = self.execute(LIST_INSTANCES_QUERY, variables)
        except (FetchError, GraphQLError) as e:
            logger.error(f"Failed to fetch lists for location {location_id}: {e}")
            return []
        return parse_list_instances(data)

    def fetch_locations(self) -> List[Dict[str, Any]]:
        """All locations visible to the proxy credentials as [{id, name}]."""
        data = self.execute(LOCATIONS_QUERY)
        locations = (data.get("data") or {}).get("locations") or []
        return [
            {"id": loc.get("id"), "name": loc.get("name") or ""}
            for loc in locations
            if isinstance(loc, dict)
        ]
