import pytest

from superops_mcp.core_infrastructure import ReadOnlyViolation
from superops_mcp.tools import assets

LIST_INFO = {"page": 1, "pageSize": 25, "totalCount": 3}

ACTIVITIES = [
    {"activityId": "1", "module": "SCRIPT", "activityType": "EXECUTED"},
    {"activityId": "2", "module": "PATCH", "activityType": "INSTALLED"},
    {"activityId": "3", "module": "SCRIPT", "activityType": "FAILED"},
]


@pytest.fixture
def activity_log(fake_client):
    fake_client.responses["getAssetActivity"] = {"getAssetActivity": {"activities": ACTIVITIES, "listInfo": LIST_INFO}}
    return fake_client


@pytest.mark.asyncio
async def test_get_asset(fake_client):
    fake_client.responses["getAsset"] = {"getAsset": {"assetId": "AS1", "name": "LAPTOP-01"}}
    out = await assets.get_asset("AS1")
    assert fake_client.last_variables == {"input": {"assetId": "AS1"}}
    assert out["asset"]["name"] == "LAPTOP-01"


@pytest.mark.asyncio
async def test_get_asset_not_found(fake_client):
    fake_client.responses["getAsset"] = {"getAsset": None}
    out = await assets.get_asset("AS404")
    assert out["error"]["code"] == "not_found"
    assert out["asset_id"] == "AS404"


@pytest.mark.asyncio
async def test_get_assets_uses_first_given_filter(fake_client):
    fake_client.responses["getAssetList"] = {"getAssetList": {"assets": [{"assetId": "AS1"}], "listInfo": LIST_INFO}}

    out = await assets.get_assets(site_id="S1", status="ONLINE", patch_status="Fully Patched")

    assert fake_client.last_variables == {
        "input": {
            "page": 1,
            "pageSize": 25,
            "condition": {"attribute": "site.id", "operator": "is", "value": "S1"},
        }
    }
    assert out["assets"] == [{"assetId": "AS1"}]
    assert out["pagination"] == LIST_INFO


@pytest.mark.asyncio
async def test_get_assets_without_filters(fake_client):
    fake_client.responses["getAssetList"] = {"getAssetList": None}
    out = await assets.get_assets()
    assert "condition" not in fake_client.last_variables["input"]
    assert out["assets"] == []
    assert out["pagination"] == {"page": None, "pageSize": None, "totalCount": None}


@pytest.mark.asyncio
async def test_get_asset_summary(fake_client):
    fake_client.responses["getAssetSummary"] = {"getAssetSummary": {"cpu": {"cpuUsage": 12}}}
    out = await assets.get_asset_summary("AS1")
    assert out["assetId"] == "AS1"
    assert out["summary"] == {"cpu": {"cpuUsage": 12}}


@pytest.mark.asyncio
async def test_get_asset_software_and_patches(fake_client):
    fake_client.responses["getAssetSoftwareList"] = {
        "getAssetSoftwareList": {"assetSoftwares": [{"software": "7-Zip"}], "listInfo": LIST_INFO}
    }
    fake_client.responses["getAssetPatchDetails"] = {
        "getAssetPatchDetails": {"assetPatches": [{"approvalStatus": "APPROVED"}], "listInfo": LIST_INFO}
    }

    software = await assets.get_asset_software("AS1")
    assert fake_client.last_variables == {"input": {"assetId": "AS1", "listInfo": {"page": 1, "pageSize": 50}}}
    assert software["software"] == [{"software": "7-Zip"}]

    patches = await assets.get_asset_patches("AS1", page=2, page_size=10)
    assert fake_client.last_variables["input"]["listInfo"] == {"page": 2, "pageSize": 10}
    assert patches["patches"] == [{"approvalStatus": "APPROVED"}]


@pytest.mark.asyncio
async def test_get_asset_disks_and_user_log_are_counted(fake_client):
    fake_client.responses["getAssetDiskDetails"] = {"getAssetDiskDetails": [{"drive": "C:"}, {"drive": "D:"}]}
    fake_client.responses["getAssetUserLog"] = {"getAssetUserLog": None}

    disks = await assets.get_asset_disks("AS1")
    assert disks["disks"] == [{"drive": "C:"}, {"drive": "D:"}]
    assert disks["count"] == 2
    assert disks["assetId"] == "AS1"

    users = await assets.get_asset_user_log("AS1")
    assert users["users"] == [] and users["count"] == 0


@pytest.mark.asyncio
async def test_get_asset_activity_returns_every_module(activity_log):
    out = await assets.get_asset_activity("AS1")
    assert activity_log.last_operation == "getAssetActivity"
    assert [a["activityId"] for a in out["activities"]] == ["1", "2", "3"]


@pytest.mark.asyncio
async def test_script_history_keeps_script_entries_and_adds_note(activity_log):
    out = await assets.get_asset_script_history("AS1")
    assert [a["activityId"] for a in out["activities"]] == ["1", "3"]
    assert out["note"] == assets.SCRIPT_OUTPUT_NOTE
    assert out["pagination"] == LIST_INFO


@pytest.mark.asyncio
async def test_patch_history_keeps_patch_entries(activity_log):
    out = await assets.get_asset_patch_history("AS1")
    assert [a["activityId"] for a in out["activities"]] == ["2"]
    assert "note" not in out


@pytest.mark.asyncio
async def test_get_unmonitored_assets(fake_client):
    fake_client.responses["getUnMonitoredAssetList"] = {
        "getUnMonitoredAssetList": {"assets": [{"assetId": "AS7"}], "listInfo": LIST_INFO}
    }
    out = await assets.get_unmonitored_assets(page_size=0)
    assert fake_client.last_variables == {"input": {"page": 1, "pageSize": 25}}
    assert out["assets"] == [{"assetId": "AS7"}]


def test_unmonitored_query_omits_rejected_fields():
    assert "primaryMac" not in assets.GET_UNMONITORED_ASSET_LIST_QUERY
    assert "primaryMac" in assets.GET_ASSET_LIST_QUERY


@pytest.mark.asyncio
async def test_update_asset(fake_client):
    fake_client.responses["updateAsset"] = {"updateAsset": {"assetId": "AS1"}}
    out = await assets.update_asset("AS1", client_id="C1", warranty_expiry_date="2027-01-31")
    assert fake_client.last_variables["input"] == {
        "assetId": "AS1",
        "client": {"accountId": "C1"},
        "warrantyExpiryDate": "2027-01-31",
    }
    assert out["asset"] == {"assetId": "AS1"}


@pytest.mark.asyncio
async def test_assign_device_category(fake_client):
    fake_client.responses["assignDeviceCategory"] = {"assignDeviceCategory": True}
    out = await assets.assign_device_category(["AS1", "AS2"], "DC1")
    assert fake_client.last_variables == {"input": {"assetIds": ["AS1", "AS2"], "deviceCategoryId": "DC1"}}
    assert out["success"] is True
    assert out["message"] == "Device category assigned to 2 asset(s)"


@pytest.mark.asyncio
async def test_delete_asset(fake_client):
    fake_client.responses["softDeleteAsset"] = {"softDeleteAsset": False}
    out = await assets.delete_asset("AS1")
    assert out == {"success": False, "message": "Failed to delete asset", "corr_id": out["corr_id"]}


@pytest.mark.asyncio
async def test_read_only_mode_blocks_mutations(fake_client):
    fake_client.responses["softDeleteAsset"] = ReadOnlyViolation()
    out = await assets.delete_asset("AS1")
    assert out["error"]["code"] == "read_only"
