"""
Asset (RMM endpoint) tools: inventory, health, activity history and
asset maintenance.

Activity-derived tools (script / patch history) fetch one page of the asset
activity log and keep only the entries of the matching module, so a page may
hold fewer items than `page_size`.
"""
from typing import Any, Literal

from msp_common.errors import typed_error
from superops_mcp.app import get_client, msp_tool
from superops_mcp.tools.common import LIST_INFO_FIELDS, condition, counted, drop_empty, list_info, pagination

DEFAULT_ASSET_PAGE_SIZE = 25
DEFAULT_DETAIL_PAGE_SIZE = 50

SCRIPT_OUTPUT_NOTE = "Script output/stdout is not available via API - only execution metadata."

ASSET_FIELDS = """
    assetId
    name
    assetClass
    client
    site
    requester
    primaryMac
    loggedInUser
    serialNumber
    manufacturer
    model
    hostName
    publicIp
    gateway
    platform
    domain
    status
    sysUptime
    lastCommunicatedTime
    agentVersion
    platformFamily
    platformCategory
    platformVersion
    patchStatus
    warrantyExpiryDate
    purchasedDate
    customFields
    lastReportedTime
    deviceCategory
"""

# getUnMonitoredAssetList rejects some of the regular asset fields (primaryMac among them)
UNMONITORED_ASSET_FIELDS = """
    assetId
    name
    assetClass
    client
    site
    requester
    serialNumber
    manufacturer
    model
    hostName
    platform
    status
    lastCommunicatedTime
    deviceCategory
"""

ASSET_SUMMARY_FIELDS = """
    cpu {
      assetId
      cpuName
      currentSpeed
      maxSpeed
      physicalCore
      logicalCore
      architecture
      l1Cache
      l2Cache
      l3Cache
      processCount
      threadsCount
      handlesCount
      cpuUsage
    }
    memory {
      totalMemory
      usedMemory
      availableMemory
      cachedMemory
      pagedPoolByte
      nonPagedPoolByte
      memoryUsage
      swapTotalMemory
      swapAvailableMemory
      swapUsedMemory
    }
    disk {
      disks {
        drive
        discType
        fileSystem
        size
        freeSize
        driveUsage
      }
      totalFreeSpace
      totalSize
    }
    assetInterface {
      name
      mac
      ipv4Address
      ipv6Address
      infIndex
      mtu
      connectType
      lineSpeed
      dataInPerSec
      dataOutPerSec
      adapterName
    }
    lastUserLog {
      id
      name
      lastLoginTime
    }
"""

ASSET_SOFTWARE_FIELDS = """
    id
    software
    version
    installedDate
    bitVersion
    installedPath
"""

ASSET_PATCH_FIELDS = """
    patchDetail {
      patchId
      patchKey
      title
      publishedDate
      category
      severity
      kbNumbers {
        kbNumber
      }
      restartRequired
    }
    approvalStatus
    installationTime
    installationStatus
    failedMessage
"""

ASSET_DISK_FIELDS = """
    drive
    discType
    fileSystem
    maxFileLength
    autoMounted
    compressed
    pageFile
    indexed
    size
    freeSize
    activeTime
    responseTime
    readSpeed
    writeSpeed
    driveUsage
"""

ASSET_ACTIVITY_FIELDS = """
    activityId
    module
    activityType
    activityData
    createdBy
    createdTime
"""

ASSET_USER_LOG_FIELDS = """
    id
    name
    lastLoginTime
"""

GET_ASSET_QUERY = f"""
query getAsset($input: AssetIdentifierInput!) {{
  getAsset(input: $input) {{
    {ASSET_FIELDS}
  }}
}}
"""

GET_ASSET_LIST_QUERY = f"""
query getAssetList($input: ListInfoInput!) {{
  getAssetList(input: $input) {{
    assets {{
      {ASSET_FIELDS}
    }}
    listInfo {{
      {LIST_INFO_FIELDS}
    }}
  }}
}}
"""

GET_ASSET_SUMMARY_QUERY = f"""
query getAssetSummary($input: AssetIdentifierInput!) {{
  getAssetSummary(input: $input) {{
    {ASSET_SUMMARY_FIELDS}
  }}
}}
"""

GET_ASSET_SOFTWARE_LIST_QUERY = f"""
query getAssetSoftwareList($input: AssetDetailsListInput!) {{
  getAssetSoftwareList(input: $input) {{
    assetSoftwares {{
      {ASSET_SOFTWARE_FIELDS}
    }}
    listInfo {{
      {LIST_INFO_FIELDS}
    }}
  }}
}}
"""

GET_ASSET_PATCH_DETAILS_QUERY = f"""
query getAssetPatchDetails($input: AssetDetailsListInput!) {{
  getAssetPatchDetails(input: $input) {{
    assetPatches {{
      {ASSET_PATCH_FIELDS}
    }}
    listInfo {{
      {LIST_INFO_FIELDS}
    }}
  }}
}}
"""

GET_ASSET_DISK_DETAILS_QUERY = f"""
query getAssetDiskDetails($input: AssetIdentifierInput!) {{
  getAssetDiskDetails(input: $input) {{
    {ASSET_DISK_FIELDS}
  }}
}}
"""

GET_ASSET_ACTIVITY_QUERY = f"""
query getAssetActivity($input: AssetDetailsListInput!) {{
  getAssetActivity(input: $input) {{
    activities {{
      {ASSET_ACTIVITY_FIELDS}
    }}
    listInfo {{
      {LIST_INFO_FIELDS}
    }}
  }}
}}
"""

GET_ASSET_USER_LOG_QUERY = f"""
query getAssetUserLog($input: AssetIdentifierInput!) {{
  getAssetUserLog(input: $input) {{
    {ASSET_USER_LOG_FIELDS}
  }}
}}
"""

GET_UNMONITORED_ASSET_LIST_QUERY = f"""
query getUnMonitoredAssetList($input: ListInfoInput!) {{
  getUnMonitoredAssetList(input: $input) {{
    assets {{
      {UNMONITORED_ASSET_FIELDS}
    }}
    listInfo {{
      {LIST_INFO_FIELDS}
    }}
  }}
}}
"""

UPDATE_ASSET_MUTATION = """
mutation updateAsset($input: UpdateAssetInput!) {
  updateAsset(input: $input) {
    assetId
    name
    assetClass
    client
    site
    requester
    customFields
  }
}
"""

ASSIGN_DEVICE_CATEGORY_MUTATION = """
mutation assignDeviceCategory($input: AssignDeviceCategoryInput) {
  assignDeviceCategory(input: $input)
}
"""

SOFT_DELETE_ASSET_MUTATION = """
mutation softDeleteAsset($input: AssetIdentifierInput) {
  softDeleteAsset(input: $input)
}
"""


def _asset_input(asset_id: str) -> dict:
    return {"input": {"assetId": asset_id}}


def _detail_input(asset_id: str, page: int | None, page_size: int | None, default_size: int) -> dict:
    return {"input": {"assetId": asset_id, "listInfo": list_info(page, page_size, default_size=default_size)}}


async def _activity_page(asset_id: str, page: int | None, page_size: int | None) -> tuple[list[dict], dict]:
    data = await get_client().execute(
        GET_ASSET_ACTIVITY_QUERY,
        _detail_input(asset_id, page, page_size, DEFAULT_ASSET_PAGE_SIZE),
    )
    result = (data or {}).get("getAssetActivity") or {}
    return list(result.get("activities") or []), pagination(result.get("listInfo"))


@msp_tool("get_asset")
async def get_asset(asset_id: str) -> dict:
    """
    Get full details of an asset: hardware, client/site assignment, network
    details, patch status and custom fields.
    """
    data = await get_client().execute(GET_ASSET_QUERY, _asset_input(asset_id))
    asset = (data or {}).get("getAsset")
    if not asset:
        return typed_error("not_found", f"Asset {asset_id} not found", asset_id=asset_id)
    return {"asset": asset}


@msp_tool("get_assets")
async def get_assets(
    page: int = 1,
    page_size: int = DEFAULT_ASSET_PAGE_SIZE,
    client_id: str | None = None,
    site_id: str | None = None,
    status: Literal["ONLINE", "OFFLINE"] | None = None,
    platform_category: Literal["WORKSTATION", "SERVER"] | None = None,
    patch_status: str | None = None,
) -> dict:
    """
    List assets. One filter is applied, the first given of: client_id, site_id,
    status, platform_category, patch_status (e.g. "Fully Patched").
    """
    candidates = (
        ("client.accountId", client_id),
        ("site.id", site_id),
        ("status", status),
        ("platformCategory", platform_category),
        ("patchStatus", patch_status),
    )
    conditions = [condition(attr, "is", value) for attr, value in candidates if value][:1]

    info = list_info(page, page_size, default_size=DEFAULT_ASSET_PAGE_SIZE, conditions=conditions)
    data = await get_client().execute(GET_ASSET_LIST_QUERY, {"input": info})
    result = (data or {}).get("getAssetList") or {}
    return {
        "assets": result.get("assets") or [],
        "pagination": pagination(result.get("listInfo")),
    }


@msp_tool("get_asset_summary")
async def get_asset_summary(asset_id: str) -> dict:
    """At-a-glance health of an asset: CPU, memory, disk space, network interfaces and last login."""
    data = await get_client().execute(GET_ASSET_SUMMARY_QUERY, _asset_input(asset_id))
    return {"assetId": asset_id, "summary": (data or {}).get("getAssetSummary")}


@msp_tool("get_asset_software")
async def get_asset_software(asset_id: str, page: int = 1, page_size: int = DEFAULT_DETAIL_PAGE_SIZE) -> dict:
    """List installed software on an asset with version, install date and path."""
    data = await get_client().execute(
        GET_ASSET_SOFTWARE_LIST_QUERY,
        _detail_input(asset_id, page, page_size, DEFAULT_DETAIL_PAGE_SIZE),
    )
    result = (data or {}).get("getAssetSoftwareList") or {}
    return {
        "software": result.get("assetSoftwares") or [],
        "pagination": pagination(result.get("listInfo")),
    }


@msp_tool("get_asset_patches")
async def get_asset_patches(asset_id: str, page: int = 1, page_size: int = DEFAULT_DETAIL_PAGE_SIZE) -> dict:
    """Patch status of an asset: available, installed and failed patches with severity and approval status."""
    data = await get_client().execute(
        GET_ASSET_PATCH_DETAILS_QUERY,
        _detail_input(asset_id, page, page_size, DEFAULT_DETAIL_PAGE_SIZE),
    )
    result = (data or {}).get("getAssetPatchDetails") or {}
    return {
        "patches": result.get("assetPatches") or [],
        "pagination": pagination(result.get("listInfo")),
    }


@msp_tool("get_asset_disks")
async def get_asset_disks(asset_id: str) -> dict:
    """Disk and partition details of an asset: drives, file systems, sizes, free space and I/O metrics."""
    data = await get_client().execute(GET_ASSET_DISK_DETAILS_QUERY, _asset_input(asset_id))
    out = counted((data or {}).get("getAssetDiskDetails"), "disks")
    out["assetId"] = asset_id
    return out


@msp_tool("get_asset_activity")
async def get_asset_activity(asset_id: str, page: int = 1, page_size: int = DEFAULT_ASSET_PAGE_SIZE) -> dict:
    """Full activity log of an asset: script executions, patch operations and other events."""
    activities, page_info = await _activity_page(asset_id, page, page_size)
    return {"activities": activities, "pagination": page_info}


@msp_tool("get_asset_script_history")
async def get_asset_script_history(
    asset_id: str,
    page: int = 1,
    page_size: int = DEFAULT_ASSET_PAGE_SIZE,
) -> dict:
    """
    Script execution history of an asset: script names, status, who triggered
    them and when. Script output is not available through the API.
    """
    activities, page_info = await _activity_page(asset_id, page, page_size)
    return {
        "activities": [a for a in activities if a.get("module") == "SCRIPT"],
        "pagination": page_info,
        "note": SCRIPT_OUTPUT_NOTE,
    }


@msp_tool("get_asset_patch_history")
async def get_asset_patch_history(
    asset_id: str,
    page: int = 1,
    page_size: int = DEFAULT_ASSET_PAGE_SIZE,
) -> dict:
    """Patch operation history of an asset: installations, scans and their status."""
    activities, page_info = await _activity_page(asset_id, page, page_size)
    return {
        "activities": [a for a in activities if a.get("module") == "PATCH"],
        "pagination": page_info,
    }


@msp_tool("get_asset_user_log")
async def get_asset_user_log(asset_id: str) -> dict:
    """User login history of an asset: usernames and their last login times."""
    data = await get_client().execute(GET_ASSET_USER_LOG_QUERY, _asset_input(asset_id))
    out = counted((data or {}).get("getAssetUserLog"), "users")
    out["assetId"] = asset_id
    return out


@msp_tool("get_unmonitored_assets")
async def get_unmonitored_assets(page: int = 1, page_size: int = DEFAULT_ASSET_PAGE_SIZE) -> dict:
    """List assets that are not monitored, e.g. devices gone offline or whose agent was removed."""
    info = list_info(page, page_size, default_size=DEFAULT_ASSET_PAGE_SIZE)
    data = await get_client().execute(GET_UNMONITORED_ASSET_LIST_QUERY, {"input": info})
    result = (data or {}).get("getUnMonitoredAssetList") or {}
    return {
        "assets": result.get("assets") or [],
        "pagination": pagination(result.get("listInfo")),
    }


@msp_tool("update_asset")
async def update_asset(
    asset_id: str,
    name: str | None = None,
    client_id: str | None = None,
    site_id: str | None = None,
    requester_id: str | None = None,
    warranty_expiry_date: str | None = None,
    purchased_date: str | None = None,
    custom_fields: dict[str, Any] | None = None,
) -> dict:
    """
    Update asset metadata: name, client/site assignment, requester, warranty
    and purchase dates (YYYY-MM-DD) and custom fields.
    """
    fields: dict[str, Any] = {"assetId": asset_id}
    fields.update(
        drop_empty(
            name=name,
            client={"accountId": client_id} if client_id else None,
            site={"id": site_id} if site_id else None,
            requester={"userId": requester_id} if requester_id else None,
            warrantyExpiryDate=warranty_expiry_date,
            purchasedDate=purchased_date,
            customFields=custom_fields,
        )
    )

    data = await get_client().execute(UPDATE_ASSET_MUTATION, {"input": fields})
    return {"asset": (data or {}).get("updateAsset")}


@msp_tool("assign_device_category")
async def assign_device_category(asset_ids: list[str], device_category_id: str) -> dict:
    """Assign a device category to one or more assets. See get_device_categories for the options."""
    data = await get_client().execute(
        ASSIGN_DEVICE_CATEGORY_MUTATION,
        {"input": {"assetIds": list(asset_ids), "deviceCategoryId": device_category_id}},
    )
    ok = bool((data or {}).get("assignDeviceCategory"))
    return {
        "success": ok,
        "message": f"Device category assigned to {len(asset_ids)} asset(s)" if ok else "Failed to assign device category",
    }


@msp_tool("delete_asset")
async def delete_asset(asset_id: str) -> dict:
    """Soft delete an asset. It is moved to trash and may be recoverable."""
    data = await get_client().execute(SOFT_DELETE_ASSET_MUTATION, _asset_input(asset_id))
    ok = bool((data or {}).get("softDeleteAsset"))
    return {
        "success": ok,
        "message": f"Asset {asset_id} has been deleted" if ok else "Failed to delete asset",
    }
