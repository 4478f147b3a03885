"""Pydantic schemas for data-platform services, table schemas and queries."""
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field


class PlatformCredentials(BaseModel):
    """Per-request credentials handed to each client constructor."""
    api_key: str
    session_token: Optional[str] = None


class Service(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: Optional[int] = None
    name: str
    label: Optional[str] = None
    description: Optional[str] = None
    type: Optional[str] = None


class TableSummary(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    label: Optional[str] = None


class ServiceSchema(BaseModel):
    """GET /{service}/_schema — the table collection of one service."""
    model_config = ConfigDict(extra="ignore")

    resource: list[TableSummary] = []


class FieldSchema(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    type: str = ""
    db_type: Optional[str] = None
    length: Optional[int] = None
    required: Optional[bool] = None
    label: Optional[str] = None


class RelationshipDescriptor(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str                      # the only valid value for ?related=
    type: str                      # belongs_to | has_many | many_many
    ref_table: Optional[str] = None
    ref_field: Optional[str] = None


class TableSchema(BaseModel):
    """GET /{service}/_schema/{table}. Upstream names the field list `field`."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: str
    label: Optional[str] = None
    primary_key: Optional[Any] = None
    name_field: Optional[str] = None
    fields: list[FieldSchema] = Field(default_factory=list, alias="field")
    related: list[RelationshipDescriptor] = []

    @property
    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]


class QueryParams(BaseModel):
    """Optional table-query parameters. Presence-checked only, no range checks."""
    model_config = ConfigDict(extra="ignore")

    filter: Optional[str] = None
    related: Optional[str] = None
    limit: Optional[int] = None
    offset: Optional[int] = None
    order: Optional[str] = None
    fields: Optional[list[str]] = None
    include_count: Optional[bool] = None
    include_schema: Optional[bool] = None

    def to_query(self) -> dict[str, str]:
        """Render the parameters that are set, in the platform's wire format."""
        params: dict[str, str] = {}
        if self.filter:
            params["filter"] = self.filter
        if self.related:
            params["related"] = self.related
        if self.limit:
            params["limit"] = str(self.limit)
        if self.offset:
            params["offset"] = str(self.offset)
        if self.order:
            params["order"] = self.order
        if self.fields:
            params["fields"] = ",".join(self.fields)
        if self.include_count is not None:
            params["include_count"] = str(self.include_count).lower()
        if self.include_schema is not None:
            params["include_schema"] = str(self.include_schema).lower()
        return params


class QueryResult(BaseModel):
    model_config = ConfigDict(extra="ignore")

    resource: list[dict[str, Any]] = []
    meta: Optional[dict[str, Any]] = None


class SessionProfile(BaseModel):
    """POST /user/session response."""
    model_config = ConfigDict(extra="ignore")

    session_token: str
    id: Optional[int] = None
    email: Optional[str] = None
    name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    last_login_date: Optional[str] = None
    host: Optional[str] = None
    role: Optional[str] = None
