"""
Per-client memo of service and table schemas.

Entries live as long as the owning client (one request) and are never
invalidated; a schema that changes mid-request is served stale.
"""
import logging
from typing import Callable, Optional

from models.dataplatform import ServiceSchema, TableSchema

logger = logging.getLogger(__name__)


class SchemaCache:
    def __init__(self):
        self._services: dict[str, ServiceSchema] = {}
        self._tables: dict[str, TableSchema] = {}

    @staticmethod
    def table_key(service: str, table: str) -> str:
        return f"{service}/{table}"

    def get_service(self, service: str) -> Optional[ServiceSchema]:
        return self._services.get(service)

    def get_table(self, service: str, table: str) -> Optional[TableSchema]:
        return self._tables.get(self.table_key(service, table))

    def service_schema(self, service: str, fetch: Callable[[], ServiceSchema]) -> ServiceSchema:
        """Return the cached schema, calling `fetch` only on the first request for `service`."""
        if service not in self._services:
            logger.info("Fetching schema for service: %s", service)
            self._services[service] = fetch()
        return self._services[service]

    def table_schema(self, service: str, table: str, fetch: Callable[[], TableSchema]) -> TableSchema:
        key = self.table_key(service, table)
        if key not in self._tables:
            logger.info("Fetching schema for table: %s", key)
            self._tables[key] = fetch()
        return self._tables[key]

    def __len__(self) -> int:
        return len(self._services) + len(self._tables)
