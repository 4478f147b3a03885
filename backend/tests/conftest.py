import os
import sys

# Add the parent directory (backend) to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import httpx
import pytest
from fastapi.testclient import TestClient

from integrations.dataplatform_client import DataPlatformClient
from main import app
from models.dataplatform import PlatformCredentials

BASE_URL = "http://df.test"
API = f"{BASE_URL}/api/v2"

SERVICES = {
    "services": [
        {"id": 1, "name": "sqlserver", "label": "SQL Server", "type": "sqlsrv"},
        {"id": 2, "name": "files", "label": "Local Files", "type": "local_file"},
    ]
}

SERVICE_SCHEMA = {
    "resource": [
        {"name": "Application.Cities"},
        {"name": "Application.People"},
        {"name": "_internal_audit"},
    ]
}

CITIES_SCHEMA = {
    "name": "Application.Cities",
    "primary_key": ["CityID"],
    "name_field": "CityName",
    "field": [
        {"name": "CityID", "type": "integer", "db_type": "int", "required": True},
        {"name": "CityName", "type": "string", "db_type": "nvarchar", "length": 50, "label": "City Name"},
        {"name": "StateProvinceID", "type": "integer", "db_type": "int"},
    ],
    "related": [
        {
            "name": "Application.StateProvinces_by_StateProvinceID",
            "type": "belongs_to",
            "ref_table": "Application.StateProvinces",
            "ref_field": "StateProvinceID",
        }
    ],
}

PEOPLE_SCHEMA = {
    "name": "Application.People",
    "field": [
        {"name": "PersonID", "type": "integer", "db_type": "int"},
        {"name": "first_name", "type": "string", "db_type": "nvarchar", "label": "First Name"},
        {"name": "last_name", "type": "string", "db_type": "nvarchar", "label": "Last Name"},
        {"name": "email", "type": "string", "db_type": "nvarchar", "label": "Email"},
        {"name": "_rowguid", "type": "string", "db_type": "uniqueidentifier"},
    ],
    "related": [],
}

CITY_ROWS = {"resource": [{"CityID": 1, "CityName": "Abbeville", "StateProvinceID": 1}]}
PEOPLE_ROWS = {"resource": [{"PersonID": 7, "first_name": "Jane", "last_name": "Doe"}]}


class FakePlatform:
    """In-memory stand-in for the data platform, served through httpx.MockTransport."""

    def __init__(self, routes=None):
        self.routes = {
            "/api/v2/": (200, SERVICES),
            "/api/v2/sqlserver/_schema": (200, SERVICE_SCHEMA),
            "/api/v2/sqlserver/_schema/Application.Cities": (200, CITIES_SCHEMA),
            "/api/v2/sqlserver/_schema/Application.People": (200, PEOPLE_SCHEMA),
            "/api/v2/sqlserver/_table/Application.Cities": (200, CITY_ROWS),
            "/api/v2/sqlserver/_table/Application.People": (200, PEOPLE_ROWS),
        }
        self.routes.update(routes or {})
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status, body = self.routes.get(
            request.url.path, (404, {"error": {"code": 404, "message": "Not Found"}})
        )
        return httpx.Response(status, json=body)

    def paths(self) -> list[str]:
        return [r.url.path for r in self.requests]

    def client(self, session_token="session-abc", require_session=True) -> DataPlatformClient:
        creds = PlatformCredentials(api_key="service-key", session_token=session_token)
        return DataPlatformClient(
            creds,
            base_url=BASE_URL,
            require_session=require_session,
            transport=httpx.MockTransport(self.handler),
        )


@pytest.fixture
def fake_platform():
    return FakePlatform()


@pytest.fixture
def platform(fake_platform):
    with fake_platform.client() as c:
        yield c


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client
