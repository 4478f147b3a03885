"""
Tool registry — the callable tools declared to the language model.
Each tool pairs a JSON-schema parameter block with a handler bound to the
request's clients.
"""
import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional

from core.errors import ToolArgumentsError, UnknownToolError
from integrations.dataplatform_client import DataPlatformClient
from integrations.search_client import SearchClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Tool:
    name: str
    description: str
    parameters: dict
    handler: Callable[[dict], Any]

    @property
    def required(self) -> list[str]:
        return self.parameters.get("required", [])

    def schema(self) -> dict:
        """Declaration in the function-tool format Ollama accepts."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }


class ToolRegistry:
    def __init__(self, tools: Iterable[Tool] = ()):
        self._tools: dict[str, Tool] = {}
        for tool in tools:
            self.register(tool)

    def register(self, tool: Tool) -> None:
        self._tools[tool.name] = tool

    @property
    def names(self) -> list[str]:
        return list(self._tools)

    def get(self, name: str) -> Tool:
        if name not in self._tools:
            raise UnknownToolError(name, self.names)
        return self._tools[name]

    def schemas(self) -> list[dict]:
        return [t.schema() for t in self._tools.values()]

    def dispatch(self, name: str, arguments: dict) -> Any:
        tool = self.get(name)
        missing = [k for k in tool.required if arguments.get(k) in (None, "")]
        if missing:
            raise ToolArgumentsError(f"{name} is missing required arguments: {', '.join(missing)}")
        logger.info("Executing tool: %s", name)
        return tool.handler(arguments)

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)


# ── Parameter schemas ─────────────────────────────────────────────────────────

def _string(description: str) -> dict:
    return {"type": "string", "description": description}


_SERVICE = _string('The name of the service (e.g., "sqlserver")')
_TABLE = _string('The name of the table (e.g., "Application.Cities")')
_RELATED = _string("Comma-separated list of relationship names to include, exactly as listed "
                   "in the table schema's related array")

QUERY_PARAMS_SCHEMA = {
    "type": "object",
    "properties": {
        "filter": _string(
            "SQL-like filter. Wrap each condition in parentheses, quote strings with single "
            "quotes. Example: \"(CityName='Abbeville') and (StateProvinceID=1)\""
        ),
        "related": _RELATED,
        "limit": {"type": "number"},
        "offset": {"type": "number"},
        "order": _string('Sort order, e.g. "CityName ASC"'),
        "fields": {"type": "array", "items": {"type": "string"}},
        "include_count": {"type": "boolean"},
        "include_schema": {"type": "boolean"},
    },
}

_NO_ARGS = {"type": "object", "properties": {}}


def _object(properties: dict, required: list[str]) -> dict:
    return {"type": "object", "properties": properties, "required": required}


_TRUE = ("true", "1", "yes")
_FALSE = ("false", "0", "no")


def _flag(value: Any, default: bool) -> bool:
    """Models send booleans as JSON true/false or, sometimes, as strings."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ToolArgumentsError(f"Expected a boolean, got {value!r}")


# ── Registry factory ──────────────────────────────────────────────────────────

def build_registry(platform: DataPlatformClient, search: Optional[SearchClient] = None) -> ToolRegistry:
    """Declare every tool for one request. webSearch only exists when `search` is set."""
    tools = [
        Tool(
            "listServices",
            "List all available data platform services",
            _NO_ARGS,
            lambda a: platform.list_services(),
        ),
        Tool(
            "getServiceSchema",
            "Get the schema (table list) for a specific service",
            _object({"serviceName": _SERVICE}, ["serviceName"]),
            lambda a: platform.get_service_schema(a["serviceName"]),
        ),
        Tool(
            "getTableSchema",
            "Get the fields and relationships of a table in a service",
            _object({"serviceName": _SERVICE, "tableName": _TABLE}, ["serviceName", "tableName"]),
            lambda a: platform.get_table_schema(a["serviceName"], a["tableName"]),
        ),
        Tool(
            "listTables",
            "List all available tables in a service. Use this first to find the correct "
            "table name before querying.",
            _object({"serviceName": _SERVICE}, ["serviceName"]),
            lambda a: platform.list_tables(a["serviceName"]),
        ),
        Tool(
            "findTableWithField",
            "Find the first table in a service that has a field with the given name",
            _object(
                {"serviceName": _SERVICE, "fieldName": _string("The field name to look for")},
                ["serviceName", "fieldName"],
            ),
            lambda a: platform.find_table_with_field(a["serviceName"], a["fieldName"]),
        ),
        Tool(
            "queryTable",
            "Query a table in a service with optional filter and related data. Make sure "
            "the table exists by using listTables first.",
            _object(
                {"serviceName": _SERVICE, "tableName": _TABLE, "queryParams": QUERY_PARAMS_SCHEMA},
                ["serviceName", "tableName"],
            ),
            lambda a: platform.query_table(a["serviceName"], a["tableName"], a.get("queryParams") or {}),
        ),
        Tool(
            "searchTableByField",
            "Search any table by a specific field value with optional related data",
            _object(
                {
                    "serviceName": _SERVICE,
                    "tableName": _TABLE,
                    "fieldName": _string("The name of the field to search by"),
                    "value": {"type": ["string", "number"], "description": "The value to search for"},
                    "exact": {
                        "type": "boolean",
                        "description": 'Exact match (true) or "starts with" match (false)',
                        "default": True,
                    },
                    "related": _RELATED,
                },
                ["serviceName", "tableName", "fieldName", "value"],
            ),
            lambda a: platform.search_table_by_field(
                a["serviceName"], a["tableName"], a["fieldName"], a["value"],
                exact=_flag(a.get("exact"), default=True),
                related=a.get("related"),
            ),
        ),
        Tool(
            "searchByName",
            "Search for records by a person's name across first-name and last-name fields, "
            "with optional related data",
            _object(
                {
                    "serviceName": _SERVICE,
                    "tableName": _TABLE,
                    "name": _string("The name to search for"),
                    "firstNameField": {**_string("The field holding the first name"), "default": "first_name"},
                    "lastNameField": {**_string("The field holding the last name"), "default": "last_name"},
                    "related": _RELATED,
                },
                ["serviceName", "tableName", "name"],
            ),
            lambda a: platform.search_by_name(
                a["serviceName"], a["tableName"], a["name"],
                first_name_field=a.get("firstNameField") or "first_name",
                last_name_field=a.get("lastNameField") or "last_name",
                related=a.get("related"),
            ),
        ),
        Tool(
            "searchTable",
            "Free-text search over a table's string fields. Best effort: multi-word terms are "
            "matched against fields that look like name fields, which can pick the wrong "
            "columns, so check the returned rows.",
            _object(
                {
                    "serviceName": _SERVICE,
                    "tableName": _TABLE,
                    "searchTerm": _string("Words to look for"),
                    "related": _RELATED,
                },
                ["serviceName", "tableName", "searchTerm"],
            ),
            lambda a: platform.search_table(
                a["serviceName"], a["tableName"], a["searchTerm"], related=a.get("related"),
            ),
        ),
    ]
    if search is not None:
        tools.append(Tool(
            "webSearch",
            "Search the internet for real-time information like weather, news, stock prices, etc.",
            _object({"query": _string("The search query")}, ["query"]),
            lambda a: SearchClient.summarize_results(search.search(a["query"])),
        ))
    return ToolRegistry(tools)
