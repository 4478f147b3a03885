import httpx
import pytest

from conftest import API, FakePlatform
from core.errors import (
    AccessForbiddenError,
    UnauthenticatedError,
    UnknownFieldError,
    UnknownTableError,
    UpstreamError,
)
from integrations.dataplatform_client import (
    API_KEY_HEADER,
    SESSION_TOKEN_HEADER,
    DataPlatformClient,
)
from models.dataplatform import PlatformCredentials, QueryParams

CITIES = "/api/v2/sqlserver/_table/Application.Cities"
PEOPLE = "/api/v2/sqlserver/_table/Application.People"


def _filters(fake, path):
    return [r.url.params.get("filter") for r in fake.requests if r.url.path == path]


# ── Construction ──────────────────────────────────────────────────────────────

def test_missing_session_is_rejected_before_any_request():
    fake = FakePlatform()
    with pytest.raises(UnauthenticatedError) as exc:
        fake.client(session_token=None)
    assert exc.value.message == "Data platform session not found"
    assert fake.requests == []


def test_session_optional_when_not_required():
    fake = FakePlatform()
    with fake.client(session_token=None, require_session=False) as platform:
        platform.list_services()
    assert SESSION_TOKEN_HEADER not in fake.requests[0].headers


def test_missing_api_key():
    with pytest.raises(UnauthenticatedError):
        DataPlatformClient(PlatformCredentials(api_key="", session_token="s"))


def test_credentials_sent_as_headers(fake_platform, platform):
    platform.list_services()
    headers = fake_platform.requests[0].headers
    assert headers[API_KEY_HEADER] == "service-key"
    assert headers[SESSION_TOKEN_HEADER] == "session-abc"


# ── Services & schema ─────────────────────────────────────────────────────────

def test_list_services(platform):
    services = platform.list_services()
    assert [s.name for s in services] == ["sqlserver", "files"]
    assert services[0].label == "SQL Server"


def test_list_tables_hides_reserved_names(platform):
    assert platform.list_tables("sqlserver") == ["Application.Cities", "Application.People"]


def test_table_schema_parsed(platform):
    schema = platform.get_table_schema("sqlserver", "Application.Cities")
    assert schema.field_names == ["CityID", "CityName", "StateProvinceID"]
    assert schema.related[0].name == "Application.StateProvinces_by_StateProvinceID"
    assert schema.related[0].type == "belongs_to"


def test_schemas_are_fetched_once(fake_platform, platform):
    platform.list_tables("sqlserver")
    platform.list_tables("sqlserver")
    platform.get_table_schema("sqlserver", "Application.Cities")
    platform.get_table_schema("sqlserver", "Application.Cities")
    assert fake_platform.paths() == [
        "/api/v2/sqlserver/_schema",
        "/api/v2/sqlserver/_schema/Application.Cities",
    ]
    assert len(platform.schemas) == 2


def test_find_table_with_field(platform):
    assert platform.find_table_with_field("sqlserver", "last_name") == "Application.People"
    assert platform.find_table_with_field("sqlserver", "cityname") == "Application.Cities"
    assert platform.find_table_with_field("sqlserver", "nope") is None


# ── Queries ───────────────────────────────────────────────────────────────────

def test_query_table_unknown_table_makes_no_table_request(fake_platform, platform):
    with pytest.raises(UnknownTableError) as exc:
        platform.query_table("sqlserver", "Cities")
    assert exc.value.available == ["Application.Cities", "Application.People"]
    assert "Application.Cities" in str(exc.value)
    assert not any("/_table/" in p for p in fake_platform.paths())


def test_query_table_encodes_parameters(fake_platform, platform):
    result = platform.query_table(
        "sqlserver", "Application.Cities",
        {
            "filter": "(CityName like 'Abbeville%')",
            "related": "Application.StateProvinces_by_StateProvinceID",
            "limit": 5,
        },
    )
    assert result.resource[0]["CityName"] == "Abbeville"
    assert platform.endpoints.snapshot()[-1] == (
        f"{API}/sqlserver/_table/Application.Cities"
        "?filter=%28CityName%20like%20%27Abbeville%25%27%29"
        "&related=Application.StateProvinces_by_StateProvinceID"
        "&limit=5"
    )
    params = fake_platform.requests[-1].url.params
    assert params["filter"] == "(CityName like 'Abbeville%')"
    assert params["limit"] == "5"


def test_query_table_normalizes_filter(fake_platform, platform):
    platform.query_table("sqlserver", "Application.Cities", QueryParams(filter="CityName = 'Abbeville'"))
    assert _filters(fake_platform, CITIES) == ["(CityName='Abbeville')"]


def test_query_table_without_params(fake_platform, platform):
    platform.query_table("sqlserver", "Application.Cities")
    assert platform.endpoints.snapshot()[-1] == f"{API}/sqlserver/_table/Application.Cities"


def test_search_by_name_full_name(fake_platform, platform):
    result = platform.search_by_name("sqlserver", "Application.People", "Jane Doe")
    assert result.resource[0]["PersonID"] == 7
    assert _filters(fake_platform, PEOPLE) == [
        "(first_name like 'Jane%') and (last_name like 'Doe%')"
    ]


def test_search_by_name_single_name(fake_platform, platform):
    platform.search_by_name("sqlserver", "Application.People", "Jane")
    assert _filters(fake_platform, PEOPLE) == [
        "(first_name like 'Jane%') or (last_name like 'Jane%')"
    ]


def test_search_by_name_unknown_fields(fake_platform, platform):
    with pytest.raises(UnknownFieldError) as exc:
        platform.search_by_name(
            "sqlserver", "Application.People", "Jane Doe",
            first_name_field="FirstName", last_name_field="last_name",
        )
    assert exc.value.missing == ["FirstName"]
    assert "first_name" in exc.value.available
    assert _filters(fake_platform, PEOPLE) == []


def test_search_by_name_empty(platform):
    with pytest.raises(ValueError):
        platform.search_by_name("sqlserver", "Application.People", "   ")


def test_search_table_by_field(fake_platform, platform):
    platform.search_table_by_field("sqlserver", "Application.Cities", "CityName", "Abbeville")
    platform.search_table_by_field("sqlserver", "Application.Cities", "CityName", "Abb", exact=False)
    assert _filters(fake_platform, CITIES) == [
        "(CityName='Abbeville')",
        "(CityName like 'Abb%')",
    ]


def test_search_table_single_word(fake_platform, platform):
    platform.search_table("sqlserver", "Application.People", "Jane")
    assert _filters(fake_platform, PEOPLE) == [
        "(first_name like 'Jane%') or (last_name like 'Jane%') or (email like 'Jane%')"
    ]


def test_search_table_blank_term(fake_platform, platform):
    with pytest.raises(ValueError):
        platform.search_table("sqlserver", "Application.People", "   ")
    assert fake_platform.requests == []


# ── Errors & endpoint log ─────────────────────────────────────────────────────

def test_forbidden_response():
    fake = FakePlatform({
        CITIES: (403, {"error": {"code": 403, "message": "Access Forbidden to 'Application.Cities'"}}),
    })
    with fake.client() as platform:
        with pytest.raises(AccessForbiddenError) as exc:
            platform.query_table("sqlserver", "Application.Cities")
    assert exc.value.status_code == 403
    assert exc.value.code == "access_forbidden"
    assert exc.value.resource == "Application.Cities"


def test_unauthorized_response():
    fake = FakePlatform({"/api/v2/": (401, {"error": {"message": "Invalid session"}})})
    with fake.client() as platform:
        with pytest.raises(UpstreamError) as exc:
            platform.list_services()
    assert isinstance(exc.value, UnauthenticatedError)
    assert exc.value.status_code == 401
    assert exc.value.message == "Invalid session"


def test_non_json_success_body():
    transport = httpx.MockTransport(lambda r: httpx.Response(200, text="<html>maintenance</html>"))
    creds = PlatformCredentials(api_key="k", session_token="s")
    with DataPlatformClient(creds, base_url="http://df.test", transport=transport) as platform:
        with pytest.raises(UpstreamError) as exc:
            platform.list_services()
    assert exc.value.status_code == 200


def test_server_error_carries_status_and_message():
    fake = FakePlatform({"/api/v2/sqlserver/_schema": (500, {"error": "database offline"})})
    with fake.client() as platform:
        with pytest.raises(UpstreamError) as exc:
            platform.list_tables("sqlserver")
    assert exc.value.status_code == 500
    assert str(exc.value) == "500 database offline"


def test_unreachable_platform():
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    creds = PlatformCredentials(api_key="k", session_token="s")
    with DataPlatformClient(creds, base_url="http://df.test", transport=httpx.MockTransport(refuse)) as platform:
        with pytest.raises(UpstreamError) as exc:
            platform.list_services()
        assert exc.value.status_code is None
        # the attempt is still logged
        assert platform.endpoints.snapshot() == [f"{API}/"]


def test_endpoint_log_order(platform):
    platform.query_table("sqlserver", "Application.Cities", {"limit": 1})
    assert platform.endpoints.snapshot() == [
        f"{API}/sqlserver/_schema",
        f"{API}/sqlserver/_table/Application.Cities?limit=1",
    ]
    platform.endpoints.clear()
    assert len(platform.endpoints) == 0
