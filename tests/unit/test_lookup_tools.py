import pytest

from superops_mcp.core_infrastructure import APIError
from superops_mcp.tools import lookups


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "tool, operation, key",
    [
        (lookups.get_statuses, "getStatusList", "statuses"),
        (lookups.get_priorities, "getPriorityList", "priorities"),
        (lookups.get_categories, "getCategoryList", "categories"),
        (lookups.get_causes, "getCauseList", "causes"),
        (lookups.get_impacts, "getImpactList", "impacts"),
        (lookups.get_urgencies, "getUrgencyList", "urgencies"),
        (lookups.get_resolution_codes, "getResolutionCodeList", "resolutionCodes"),
        (lookups.get_slas, "getSLAList", "slas"),
        (lookups.get_technician_groups, "getTechnicianGroupList", "technicianGroups"),
        (lookups.get_teams, "getTeamList", "teams"),
        (lookups.get_client_stages, "getClientStageList", "clientStages"),
    ],
)
async def test_simple_lookups_return_counted_lists(fake_client, tool, operation, key):
    fake_client.responses[operation] = {operation: [{"id": "1", "name": "A"}, {"id": "2", "name": "B"}]}

    out = await tool()

    assert fake_client.last_operation == operation
    assert fake_client.last_variables == {}
    assert out[key] == [{"id": "1", "name": "A"}, {"id": "2", "name": "B"}]
    assert out["count"] == 2
    assert out["corr_id"]


@pytest.mark.asyncio
async def test_lookup_with_null_result_is_empty(fake_client):
    fake_client.responses["getStatusList"] = {"getStatusList": None}
    out = await lookups.get_statuses()
    assert out["statuses"] == [] and out["count"] == 0


@pytest.mark.asyncio
async def test_get_technicians_pages(fake_client):
    fake_client.responses["getTechnicianList"] = {
        "getTechnicianList": {
            "userList": [{"userId": "u1", "name": "Tech One"}],
            "listInfo": {"page": 2, "pageSize": 100, "totalCount": 101, "hasMore": False},
        }
    }

    out = await lookups.get_technicians(page=2, page_size=500)

    assert fake_client.last_variables == {"input": {"page": 2, "pageSize": 100}}
    assert out["technicians"] == [{"userId": "u1", "name": "Tech One"}]
    assert out["pagination"] == {"page": 2, "pageSize": 100, "totalCount": 101, "hasMore": False}


@pytest.mark.asyncio
async def test_get_device_categories_filters(fake_client):
    fake_client.responses["getDeviceCategories"] = {"getDeviceCategories": [{"deviceCategoryId": "d1"}]}

    out = await lookups.get_device_categories(module=["ENDPOINT"], custom=False, class_id="c9")

    assert fake_client.last_variables == {"input": {"module": ["ENDPOINT"], "custom": False, "classId": "c9"}}
    assert out == {"deviceCategories": [{"deviceCategoryId": "d1"}], "count": 1, "corr_id": out["corr_id"]}


@pytest.mark.asyncio
async def test_get_device_categories_without_filters_sends_no_input(fake_client):
    fake_client.responses["getDeviceCategories"] = {"getDeviceCategories": []}
    await lookups.get_device_categories()
    assert fake_client.last_variables == {}


@pytest.mark.asyncio
async def test_lookup_failure_is_rendered_as_envelope(fake_client):
    fake_client.responses["getPriorityList"] = APIError(401, {"message": "nope"})
    out = await lookups.get_priorities()
    assert out["error"]["code"] == "auth_error"
    assert out["corr_id"]
