"""
Lookup / reference data tools.

These return the valid values other tools accept (statuses, priorities,
technicians, ...). Most are parameter-less queries returning a flat list.
"""
from typing import Literal

from superops_mcp.app import get_client, msp_tool
from superops_mcp.tools.common import counted, list_info, pagination

STATUS_LIST_QUERY = """
query getStatusList {
  getStatusList {
    id
    name
    description
  }
}
"""

PRIORITY_LIST_QUERY = """
query getPriorityList {
  getPriorityList {
    id
    name
    colorCode
  }
}
"""

CATEGORY_LIST_QUERY = """
query getCategoryList {
  getCategoryList {
    id
    name
    subCategories {
      id
      name
    }
  }
}
"""

CAUSE_LIST_QUERY = """
query getCauseList {
  getCauseList {
    id
    name
    subCauses {
      id
      name
      description
    }
  }
}
"""

IMPACT_LIST_QUERY = """
query getImpactList {
  getImpactList {
    id
    name
  }
}
"""

URGENCY_LIST_QUERY = """
query getUrgencyList {
  getUrgencyList {
    id
    name
  }
}
"""

RESOLUTION_CODE_LIST_QUERY = """
query getResolutionCodeList {
  getResolutionCodeList {
    id
    name
    description
  }
}
"""

SLA_LIST_QUERY = """
query getSLAList {
  getSLAList {
    id
    name
  }
}
"""

TECHNICIAN_LIST_QUERY = """
query getTechnicianList($input: ListInfoInput!) {
  getTechnicianList(input: $input) {
    userList {
      userId
      firstName
      lastName
      name
      email
      contactNumber
      designation
      team
      role
      groups
    }
    listInfo {
      page
      pageSize
      totalCount
      hasMore
    }
  }
}
"""

TECHNICIAN_GROUP_LIST_QUERY = """
query getTechnicianGroupList {
  getTechnicianGroupList {
    groupId
    name
  }
}
"""

TEAM_LIST_QUERY = """
query getTeamList {
  getTeamList {
    teamId
    name
  }
}
"""

DEVICE_CATEGORIES_QUERY = """
query getDeviceCategories($input: DeviceCategoryIdentifierInput) {
  getDeviceCategories(input: $input) {
    deviceCategoryId
    name
    custom
    assetClass
    createdTime
  }
}
"""

CLIENT_STAGE_LIST_QUERY = """
query getClientStageList {
  getClientStageList {
    stageId
    name
    constant
    statuses {
      statusId
      name
      constant
    }
  }
}
"""


async def _simple_list(query: str, field: str, key: str) -> dict:
    data = await get_client().execute(query)
    return counted((data or {}).get(field), key)


@msp_tool("get_statuses")
async def get_statuses() -> dict:
    """Get valid ticket statuses. Returns a list of status options that can be used when creating or updating tickets."""
    return await _simple_list(STATUS_LIST_QUERY, "getStatusList", "statuses")


@msp_tool("get_priorities")
async def get_priorities() -> dict:
    """Get priority levels for tickets. Returns a list of priority options with their color codes."""
    return await _simple_list(PRIORITY_LIST_QUERY, "getPriorityList", "priorities")


@msp_tool("get_categories")
async def get_categories() -> dict:
    """Get ticket categories and their subcategories. Returns a hierarchical list of categories for classifying tickets."""
    return await _simple_list(CATEGORY_LIST_QUERY, "getCategoryList", "categories")


@msp_tool("get_causes")
async def get_causes() -> dict:
    """Get ticket causes and their subcauses. Returns a hierarchical list of root causes for tickets."""
    return await _simple_list(CAUSE_LIST_QUERY, "getCauseList", "causes")


@msp_tool("get_impacts")
async def get_impacts() -> dict:
    """Get impact levels for tickets. Returns a list of impact options (e.g., Low, Medium, High)."""
    return await _simple_list(IMPACT_LIST_QUERY, "getImpactList", "impacts")


@msp_tool("get_urgencies")
async def get_urgencies() -> dict:
    """Get urgency levels for tickets. Returns a list of urgency options (e.g., Low, Medium, High)."""
    return await _simple_list(URGENCY_LIST_QUERY, "getUrgencyList", "urgencies")


@msp_tool("get_resolution_codes")
async def get_resolution_codes() -> dict:
    """Get resolution codes for closing tickets. Returns a list of resolution options with descriptions."""
    return await _simple_list(RESOLUTION_CODE_LIST_QUERY, "getResolutionCodeList", "resolutionCodes")


@msp_tool("get_slas")
async def get_slas() -> dict:
    """Get available SLAs (Service Level Agreements) that can be assigned to tickets."""
    return await _simple_list(SLA_LIST_QUERY, "getSLAList", "slas")


@msp_tool("get_technicians")
async def get_technicians(page: int = 1, page_size: int = 100) -> dict:
    """Get list of technicians with their contact info, team, role, and group memberships (page_size max 100)."""
    data = await get_client().execute(
        TECHNICIAN_LIST_QUERY,
        {"input": list_info(page, page_size, default_size=100)},
    )
    result = (data or {}).get("getTechnicianList") or {}
    return {
        "technicians": result.get("userList") or [],
        "pagination": pagination(result.get("listInfo")),
    }


@msp_tool("get_technician_groups")
async def get_technician_groups() -> dict:
    """Get technician groups that technicians can belong to for ticket assignment."""
    return await _simple_list(TECHNICIAN_GROUP_LIST_QUERY, "getTechnicianGroupList", "technicianGroups")


@msp_tool("get_teams")
async def get_teams() -> dict:
    """Get teams that technicians can be assigned to."""
    return await _simple_list(TEAM_LIST_QUERY, "getTeamList", "teams")


@msp_tool("get_device_categories")
async def get_device_categories(
    module: list[Literal["ENDPOINT", "NM_ASSET"]] | None = None,
    custom: bool | None = None,
    class_id: str | None = None,
) -> dict:
    """
    Get device categories for assets. Optionally filter by module type
    (ENDPOINT = managed endpoints, NM_ASSET = network assets), by custom (true)
    or default (false) categories, or by asset class ID.
    """
    filters: dict = {}
    if module:
        filters["module"] = list(module)
    if custom is not None:
        filters["custom"] = custom
    if class_id:
        filters["classId"] = class_id

    variables = {"input": filters} if filters else {}
    data = await get_client().execute(DEVICE_CATEGORIES_QUERY, variables)
    return counted((data or {}).get("getDeviceCategories"), "deviceCategories")


@msp_tool("get_client_stages")
async def get_client_stages() -> dict:
    """Get client lifecycle stages (Prospect, Active, Inactive, ...) with their associated statuses."""
    return await _simple_list(CLIENT_STAGE_LIST_QUERY, "getClientStageList", "clientStages")
