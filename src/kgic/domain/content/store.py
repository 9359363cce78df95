"""
Content store client for the hosted relational backend.

Speaks the PostgREST conventions of the hosted REST API: one endpoint per
table under /rest/v1, equality filters as `column=eq.value`, ordering as
`order=col.desc,col2.asc`, and stored procedures under /rest/v1/rpc.
"""

from typing import Any, Iterable, List, NamedTuple, Optional, Sequence, TypeVar, Union

import requests
from loguru import logger

from kgic.core.config import SupabaseConfig

from .models import Collection, ContentRecord, RecordId

REST_PATH = "/rest/v1"


class Order(NamedTuple):
    """One ORDER BY term."""

    column: str
    descending: bool = False
    nulls_last: bool = False


Row = dict[str, Any]

RecordT = TypeVar("RecordT", bound=ContentRecord)


class ContentStoreError(Exception):
    """Raised when the content store rejects or fails a request."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _order_param(order: Iterable[Order]) -> str:
    terms = []
    for term in order:
        value = f"{term.column}.{'desc' if term.descending else 'asc'}"
        if term.nulls_last:
            value += ".nullslast"
        terms.append(value)
    return ",".join(terms)


def _error_message(response: requests.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(payload, dict):
        return str(
            payload.get("message")
            or payload.get("error_description")
            or payload.get("error")
            or payload
        )
    return str(payload)


class ContentStore:
    """Table-level CRUD over the hosted REST API.

    The API key identifies the project; the optional access token identifies
    a signed-in user so row level security applies to their session.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        access_token: Optional[str] = None,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._access_token = access_token
        self._timeout = timeout
        self._session = session or requests.Session()

    @classmethod
    def from_config(
        cls,
        config: SupabaseConfig,
        access_token: Optional[str] = None,
        privileged: bool = False,
    ) -> "ContentStore":
        """Build a store from configuration.

        Args:
            config: Backend configuration
            access_token: Signed-in user's token, if any
            privileged: Use the service role key instead of the anon key
        """
        api_key = config.service_role if privileged else config.anon_key
        return cls(config.url, api_key, access_token=access_token)

    def _headers(self, prefer: Optional[str] = None) -> dict[str, str]:
        headers = {
            "apikey": self._api_key,
            "Authorization": f"Bearer {self._access_token or self._api_key}",
            "Content-Type": "application/json",
        }
        if prefer:
            headers["Prefer"] = prefer
        return headers

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, str]] = None,
        json: Any = None,
        prefer: Optional[str] = None,
    ) -> Any:
        url = f"{self.base_url}{REST_PATH}/{path}"
        try:
            response = self._session.request(
                method,
                url,
                params=params,
                json=json,
                headers=self._headers(prefer),
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            logger.warning(f"Content store {method} {path} failed: {e}")
            raise ContentStoreError(str(e)) from e

        if not response.ok:
            message = _error_message(response)
            logger.warning(
                f"Content store {method} {path} returned {response.status_code}: {message}"
            )
            raise ContentStoreError(message, response.status_code)

        if not response.content:
            return None
        return response.json()

    def list(
        self,
        table: Union[Collection, str],
        filters: Optional[dict[str, Any]] = None,
        order: Sequence[Order] = (),
        columns: str = "*",
        limit: Optional[int] = None,
    ) -> List[Row]:
        """List rows of a table.

        Args:
            table: Table name
            filters: Equality filters (column -> value)
            order: Ordering terms, most significant first
            columns: Comma separated column list
            limit: Maximum number of rows

        Returns:
            List of row dicts
        """
        params = {"select": columns}
        for column, value in (filters or {}).items():
            params[column] = f"eq.{value}"
        if order:
            params["order"] = _order_param(order)
        if limit is not None:
            params["limit"] = str(limit)
        return self._request("GET", Collection(table).value, params=params) or []

    def get(self, table: Union[Collection, str], record_id: RecordId) -> Optional[Row]:
        rows = self._request(
            "GET",
            Collection(table).value,
            params={"select": "*", "id": f"eq.{record_id}", "limit": "1"},
        )
        return rows[0] if rows else None

    def insert(self, table: Union[Collection, str], row: Row) -> Row:
        rows = self._request(
            "POST", Collection(table).value, json=row, prefer="return=representation"
        )
        if not rows:
            raise ContentStoreError("Insert returned no row")
        return rows[0]

    def update(
        self, table: Union[Collection, str], record_id: RecordId, patch: Row
    ) -> Row:
        rows = self._request(
            "PATCH",
            Collection(table).value,
            params={"id": f"eq.{record_id}"},
            json=patch,
            prefer="return=representation",
        )
        if not rows:
            raise ContentStoreError(f"No row with id {record_id}", 404)
        return rows[0]

    def delete(self, table: Union[Collection, str], record_id: RecordId) -> None:
        self._request("DELETE", Collection(table).value, params={"id": f"eq.{record_id}"})

    def rpc(self, function: str, params: Optional[dict[str, Any]] = None) -> Any:
        """Call a stored procedure."""
        return self._request("POST", f"rpc/{function}", json=params or {})

    def list_records(
        self,
        kind: type[RecordT],
        filters: Optional[dict[str, Any]] = None,
        order: Sequence[Order] = (),
    ) -> List[RecordT]:
        rows = self.list(kind.collection, filters=filters, order=order)
        return [kind.model_validate(row) for row in rows]

    def get_record(self, kind: type[RecordT], record_id: RecordId) -> Optional[RecordT]:
        row = self.get(kind.collection, record_id)
        return kind.model_validate(row) if row is not None else None
