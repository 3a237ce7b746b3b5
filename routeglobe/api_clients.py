"""
API client for the route event store.
Reads the latest route events and the total event count from Firestore.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

from routeglobe.config import Config
from routeglobe.models import RouteRecord
from routeglobe.utils import log


class FetchError(Exception):
    """Raised when a backend query cannot be completed."""


@dataclass
class FetchResult:
    """Outcome of a backend query: a value plus the error, if any."""

    value: Any
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def decode_value(value: Dict[str, Any]) -> Any:
    """
    Decode a Firestore typed value into a Python value.

    Args:
        value: Typed value, e.g. {"doubleValue": 10.5}

    Returns:
        Decoded value, or None for null and unsupported types
    """
    if "doubleValue" in value:
        return float(value["doubleValue"])
    if "integerValue" in value:
        return int(value["integerValue"])
    if "stringValue" in value:
        return value["stringValue"]
    if "timestampValue" in value:
        return value["timestampValue"]
    if "booleanValue" in value:
        return value["booleanValue"]
    if "mapValue" in value:
        return decode_fields(value["mapValue"].get("fields", {}))
    if "arrayValue" in value:
        return [decode_value(v) for v in value["arrayValue"].get("values", [])]
    return None


def decode_fields(fields: Dict[str, Any]) -> Dict[str, Any]:
    """Decode a Firestore document field map."""
    return {name: decode_value(value) for name, value in fields.items()}


class FirestoreClient:
    """Fetch route events from a Firestore collection over REST."""

    def __init__(
        self,
        project_id: str,
        collection: str = "route_planned_events",
        database_id: str = "(default)",
        api_key: str = "",
        timeout: float = 15,
        base_url: str = "https://firestore.googleapis.com/v1",
        session: Optional[requests.Session] = None,
    ):
        self.project_id = project_id
        self.collection = collection
        self.database_id = database_id
        self.api_key = api_key
        self.timeout = timeout
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, config: Config) -> "FirestoreClient":
        """Build a client from the backend section of the configuration."""
        return cls(
            project_id=config.project_id,
            collection=config.collection,
            database_id=config.database_id,
            api_key=config.api_key,
            timeout=config.request_timeout,
            base_url=config.base_url,
        )

    @property
    def documents_url(self) -> str:
        return (
            f"{self.base_url}/projects/{self.project_id}"
            f"/databases/{self.database_id}/documents"
        )

    async def fetch_latest(self, n: int) -> FetchResult:
        """
        Fetch the newest route events.

        Args:
            n: Maximum number of records to return

        Returns:
            FetchResult with records ordered newest first, or an empty
            list and the error if the query failed
        """
        try:
            records = await asyncio.to_thread(self.query_latest, n)
        except FetchError as e:
            log("API", f"Error fetching route events: {e}")
            return FetchResult([], e)
        return FetchResult(records)

    async def get_total_count(self) -> FetchResult:
        """
        Count all route events in the collection.

        Returns:
            FetchResult with the count, or 0 and the error if the query
            failed
        """
        try:
            count = await asyncio.to_thread(self.query_count)
        except FetchError as e:
            log("API", f"Error getting count: {e}")
            return FetchResult(0, e)
        return FetchResult(count)

    def query_latest(self, n: int) -> List[RouteRecord]:
        """Run the top-N query synchronously."""
        body = {
            "structuredQuery": {
                "from": [{"collectionId": self.collection}],
                "orderBy": [
                    {
                        "field": {"fieldPath": "timestamp"},
                        "direction": "DESCENDING",
                    }
                ],
                "limit": n,
            }
        }
        rows = self._post("runQuery", body)

        records = []
        try:
            for row in rows:
                document = row.get("document")
                if document is None:
                    continue
                fields = decode_fields(document.get("fields", {}))
                records.append(
                    RouteRecord.from_document(fields, len(records) + 1)
                )
        except (AttributeError, TypeError, ValueError) as e:
            raise FetchError(f"Malformed query response: {e}") from e

        return records[:n]

    def query_count(self) -> int:
        """Run the count aggregation synchronously."""
        body = {
            "structuredAggregationQuery": {
                "structuredQuery": {
                    "from": [{"collectionId": self.collection}],
                },
                "aggregations": [{"alias": "total", "count": {}}],
            }
        }
        rows = self._post("runAggregationQuery", body)

        try:
            for row in rows:
                result = row.get("result")
                if result is None:
                    continue
                total = decode_value(result["aggregateFields"]["total"])
                return max(0, int(total))
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise FetchError(f"Malformed count response: {e}") from e

        raise FetchError("Count response contained no result")

    def _post(self, method: str, body: Dict[str, Any]) -> List[Any]:
        url = f"{self.documents_url}:{method}"
        params = {"key": self.api_key} if self.api_key else None
        try:
            r = self.session.post(
                url, json=body, params=params, timeout=self.timeout
            )
            r.raise_for_status()
            payload = r.json()
        except requests.RequestException as e:
            raise FetchError(f"{method} failed: {e}") from e
        except ValueError as e:
            raise FetchError(f"{method} returned invalid JSON: {e}") from e

        if not isinstance(payload, list):
            raise FetchError(f"{method} returned unexpected payload")
        return payload
