import httpx
import pytest

from conftest import run
from core.models import ActivityFilter, DealFilter, LeadFilter
from core.provider import CrmProviderError, PipedriveProvider


API_KEY = "test-token"


class Recorder:
    """MockTransport handler that answers from a route table and records requests."""

    def __init__(self, routes):
        self.routes = routes
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        answer = self.routes.get(request.url.path)
        if answer is None:
            return httpx.Response(404, json={"success": False, "error": "Not found"})
        if isinstance(answer, httpx.Response):
            return answer
        return httpx.Response(200, json=answer)


def _call(routes, method, *args):
    recorder = Recorder(routes)

    async def scenario():
        async with PipedriveProvider(API_KEY, transport=httpx.MockTransport(recorder)) as provider:
            return await getattr(provider, method)(*args)

    return run(scenario()), recorder


def test_list_deals_returns_body_unmodified_and_sends_filters():
    body = {
        "success": True,
        "data": [{"id": 1, "title": "Big deal"}],
        "additional_data": {"next_cursor": "abc"},
    }
    result, recorder = _call(
        {"/api/v2/deals": body},
        "list_deals",
        DealFilter(pipeline_id=2, status="open"),
    )

    assert result == body
    params = recorder.requests[0].url.params
    assert params["api_token"] == API_KEY
    assert params["pipeline_id"] == "2"
    assert params["status"] == "open"
    assert "stage_id" not in params


def test_get_deal_returns_data():
    result, recorder = _call(
        {"/api/v2/deals/5": {"success": True, "data": {"id": 5, "person_id": 42}}},
        "get_deal",
        5,
    )
    assert result == {"id": 5, "person_id": 42}
    assert recorder.requests[0].method == "GET"


@pytest.mark.parametrize(
    "method, args, path",
    [
        ("list_activities", (ActivityFilter(user_id=9),), "/api/v2/activities"),
        ("list_leads", (LeadFilter(owner_id=3),), "/v1/leads"),
        ("list_pipelines", (), "/api/v2/pipelines"),
        ("list_stages", (1,), "/api/v2/stages"),
        ("list_users", (), "/v1/users"),
        ("get_person", (42,), "/api/v2/persons/42"),
        ("get_organization", (7,), "/api/v2/organizations/7"),
    ],
)
def test_each_operation_hits_its_endpoint(method, args, path):
    _, recorder = _call({path: {"success": True, "data": []}}, method, *args)
    assert [r.url.path for r in recorder.requests] == [path]


def test_query_parameter_names():
    _, recorder = _call({"/api/v2/activities": {"success": True, "data": []}},
                        "list_activities", ActivityFilter(deal_id=1, user_id=9, type="call"))
    params = recorder.requests[0].url.params
    assert (params["deal_id"], params["owner_id"], params["type"]) == ("1", "9", "call")

    _, recorder = _call({"/api/v2/stages": {"success": True, "data": []}}, "list_stages", 4)
    assert recorder.requests[0].url.params["pipeline_id"] == "4"


def test_not_found_raises_provider_error_with_detail():
    with pytest.raises(CrmProviderError) as excinfo:
        _call({}, "get_deal", 99)
    assert excinfo.value.status_code == 404
    assert "Not found" in str(excinfo.value)
    assert "/api/v2/deals/99" in str(excinfo.value)


def test_unauthorized_includes_error_info():
    routes = {
        "/v1/users": httpx.Response(
            401,
            json={"success": False, "error": "unauthorized access", "error_info": "Check the API token"},
        )
    }
    with pytest.raises(CrmProviderError, match="401.*unauthorized access \\(Check the API token\\)"):
        _call(routes, "list_users")


def test_success_false_body_is_an_error():
    routes = {"/api/v2/pipelines": {"success": False, "error": "Bad filter"}}
    with pytest.raises(CrmProviderError, match="Bad filter"):
        _call(routes, "list_pipelines")


def test_non_json_body_is_an_error():
    routes = {"/api/v2/pipelines": httpx.Response(200, text="<html>maintenance</html>")}
    with pytest.raises(CrmProviderError, match="non-JSON"):
        _call(routes, "list_pipelines")


def test_transport_failure_is_wrapped():
    def broken(request):
        raise httpx.ConnectError("connection refused", request=request)

    async def scenario():
        async with PipedriveProvider(API_KEY, transport=httpx.MockTransport(broken)) as provider:
            await provider.list_pipelines()

    with pytest.raises(CrmProviderError, match="connection refused"):
        run(scenario())


def test_base_url_is_configurable():
    recorder = Recorder({"/api/v2/pipelines": {"success": True, "data": []}})

    async def scenario():
        async with PipedriveProvider(
            API_KEY,
            base_url="https://sandbox.pipedrive.test/",
            transport=httpx.MockTransport(recorder),
        ) as provider:
            await provider.list_pipelines()

    run(scenario())
    assert recorder.requests[0].url.host == "sandbox.pipedrive.test"


def test_stages_query_carries_only_the_pipeline_filter():
    _, recorder = _call({"/api/v2/stages": {"success": True, "data": []}}, "list_stages", 7)
    params = dict(recorder.requests[0].url.params)
    params.pop("api_token")
    assert params == {"pipeline_id": "7"}
