"""
Data-platform REST client.
Wraps the /api/v2 surface the agent needs: service listing, schema discovery,
filtered and related table queries, and the search helpers built on them.
Every outbound URL is recorded in the client's endpoint log.
"""
import logging
from typing import Any, Optional, Union
from urllib.parse import quote

import httpx

from config import settings
from core.errors import (
    AccessForbiddenError,
    SessionRejectedError,
    UnauthenticatedError,
    UnknownFieldError,
    UnknownTableError,
    UpstreamError,
)
from core.filter_builder import (
    RESERVED_PREFIX,
    encode_filter,
    field_filter,
    name_filter,
    normalize_filter,
    search_filter,
)
from core.schema_cache import SchemaCache
from models.dataplatform import (
    PlatformCredentials,
    QueryParams,
    QueryResult,
    Service,
    ServiceSchema,
    TableSchema,
)

logger = logging.getLogger(__name__)

API_KEY_HEADER = "X-DreamFactory-API-Key"
SESSION_TOKEN_HEADER = "X-DreamFactory-Session-Token"


def error_message(resp: httpx.Response) -> Optional[str]:
    """The upstream error text, if the body carries one."""
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        err = body.get("error")
        if isinstance(err, dict) and err.get("message"):
            return str(err["message"])
        if isinstance(err, str) and err:
            return err
    return None


def translate_error(resp: httpx.Response) -> Exception:
    """Map a non-success response onto the error taxonomy."""
    message = error_message(resp) or (
        f"Failed to fetch from data platform: {resp.status_code} {resp.reason_phrase}"
    )
    if resp.status_code == 401:
        return SessionRejectedError(message)
    if resp.status_code == 403:
        return AccessForbiddenError(message)
    return UpstreamError(resp.status_code, message)


class EndpointLog:
    """Ordered record of every URL requested during one orchestration run."""

    def __init__(self):
        self._urls: list[str] = []

    def record(self, url: str) -> None:
        self._urls.append(url)

    def clear(self) -> None:
        self._urls.clear()

    def snapshot(self) -> list[str]:
        return list(self._urls)

    def __len__(self) -> int:
        return len(self._urls)


class DataPlatformClient:
    """Thin wrapper around the data platform's v2 REST API, scoped to one request."""

    def __init__(
        self,
        credentials: PlatformCredentials,
        base_url: Optional[str] = None,
        require_session: Optional[bool] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        if require_session is None:
            require_session = settings.DATAPLATFORM_REQUIRE_SESSION
        if not credentials.api_key:
            raise UnauthenticatedError("Data platform API key not found")
        if require_session and not credentials.session_token:
            raise UnauthenticatedError()

        self.base = (base_url or settings.DATAPLATFORM_URL).rstrip("/") + "/api/v2"
        headers = {API_KEY_HEADER: credentials.api_key, "Accept": "application/json"}
        if credentials.session_token:
            headers[SESSION_TOKEN_HEADER] = credentials.session_token
        self.client = httpx.Client(
            timeout=timeout or settings.DATAPLATFORM_TIMEOUT_SECONDS,
            headers=headers,
            transport=transport,
        )
        self.schemas = SchemaCache()
        self.endpoints = EndpointLog()

    # ── Transport ─────────────────────────────────────────────────────────────

    def _url(self, endpoint: str, params: Optional[dict[str, str]] = None) -> str:
        url = f"{self.base}/{endpoint.lstrip('/')}"
        if params:
            query = "&".join(
                f"{k}={encode_filter(v) if k == 'filter' else quote(v, safe=',')}"
                for k, v in params.items()
            )
            url = f"{url}?{query}"
        return url

    def _get(self, endpoint: str, params: Optional[dict[str, str]] = None) -> Any:
        url = self._url(endpoint, params)
        self.endpoints.record(url)
        logger.info("Making request to: %s", url)
        try:
            resp = self.client.get(url)
        except httpx.HTTPError as e:
            logger.warning("Data platform request failed: %s (%s)", url, e)
            raise UpstreamError(None, f"Data platform unreachable: {e}") from e
        if not resp.is_success:
            err = translate_error(resp)
            logger.warning("Data platform error %s for %s: %s", resp.status_code, url, err)
            raise err
        try:
            data = resp.json()
        except ValueError as e:
            logger.warning("Non-JSON response from %s", url)
            raise UpstreamError(resp.status_code, "Data platform returned a non-JSON response") from e
        logger.debug("Response from %s: %d bytes", url, len(resp.content))
        return data

    # ── Services & schema ─────────────────────────────────────────────────────

    def list_services(self) -> list[Service]:
        data = self._get("")
        return [Service.model_validate(s) for s in data.get("services") or []]

    def get_service_schema(self, service: str) -> ServiceSchema:
        return self.schemas.service_schema(
            service, lambda: ServiceSchema.model_validate(self._get(f"{service}/_schema"))
        )

    def get_table_schema(self, service: str, table: str) -> TableSchema:
        return self.schemas.table_schema(
            service, table,
            lambda: TableSchema.model_validate(self._get(f"{service}/_schema/{table}")),
        )

    def list_tables(self, service: str) -> list[str]:
        schema = self.get_service_schema(service)
        return [t.name for t in schema.resource if not t.name.startswith(RESERVED_PREFIX)]

    def find_table_with_field(self, service: str, field: str) -> Optional[str]:
        """First table (in listing order) with a field of that name, case-insensitive."""
        wanted = field.lower()
        for table in self.list_tables(service):
            schema = self.get_table_schema(service, table)
            if any(f.name.lower() == wanted for f in schema.fields):
                return table
        return None

    def validate_fields(self, service: str, table: str, fields: list[str]) -> TableSchema:
        """Raise UnknownFieldError unless every name in `fields` exists on the table."""
        schema = self.get_table_schema(service, table)
        available = schema.field_names
        missing = [f for f in fields if f not in available]
        if missing:
            raise UnknownFieldError(table, missing, available)
        return schema

    def _require_table(self, service: str, table: str) -> None:
        tables = self.list_tables(service)
        if table not in tables:
            logger.warning('Table "%s" does not exist in service "%s"', table, service)
            raise UnknownTableError(service, table, tables)

    # ── Queries ───────────────────────────────────────────────────────────────

    def query_table(
        self,
        service: str,
        table: str,
        params: Optional[Union[QueryParams, dict]] = None,
    ) -> QueryResult:
        self._require_table(service, table)
        if params is None:
            params = QueryParams()
        elif isinstance(params, dict):
            params = QueryParams.model_validate(params)
        if params.filter:
            params = params.model_copy(update={"filter": normalize_filter(params.filter)})
        data = self._get(f"{service}/_table/{table}", params.to_query())
        return QueryResult.model_validate(data)

    def search_table_by_field(
        self,
        service: str,
        table: str,
        field: str,
        value: Union[str, int, float],
        exact: bool = True,
        related: Optional[str] = None,
    ) -> QueryResult:
        flt = field_filter(field, value, exact=exact)
        return self.query_table(service, table, QueryParams(filter=flt, related=related))

    def search_by_name(
        self,
        service: str,
        table: str,
        name: str,
        first_name_field: str = "first_name",
        last_name_field: str = "last_name",
        related: Optional[str] = None,
    ) -> QueryResult:
        if not name.split():
            raise ValueError("name must contain at least one word")
        self._require_table(service, table)
        self.validate_fields(service, table, [first_name_field, last_name_field])
        flt = name_filter(first_name_field, last_name_field, name)
        logger.info("Using name search filter: %s", flt)
        return self.query_table(service, table, QueryParams(filter=flt, related=related))

    def search_table(
        self,
        service: str,
        table: str,
        term: str,
        related: Optional[str] = None,
    ) -> QueryResult:
        """Best-effort free-text search over a table's string fields."""
        if not term.split():
            raise ValueError("search term must contain at least one word")
        self._require_table(service, table)
        schema = self.get_table_schema(service, table)
        flt = search_filter(table, schema.fields, term)
        logger.info("Using search filter on %s: %s", table, flt)
        return self.query_table(service, table, QueryParams(filter=flt, related=related))

    # ── Lifecycle ─────────────────────────────────────────────────────────────

    def close(self):
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, *_):
        self.close()
