"""RMM alert tools."""
from superops_mcp.app import get_client, msp_tool
from superops_mcp.tools.common import LIST_INFO_FIELDS, condition, drop_empty, list_info, pagination

DEFAULT_ALERT_PAGE_SIZE = 50

ALERT_FIELDS = """
    id
    message
    createdTime
    status
    severity
    description
    asset
    policy
"""

GET_ALERT_LIST_QUERY = f"""
query getAlertList($input: ListInfoInput!) {{
  getAlertList(input: $input) {{
    alerts {{
      {ALERT_FIELDS}
    }}
    listInfo {{
      {LIST_INFO_FIELDS}
    }}
  }}
}}
"""

GET_ALERTS_FOR_ASSET_QUERY = f"""
query getAlertsForAsset($input: AssetDetailsListInput!) {{
  getAlertsForAsset(input: $input) {{
    alerts {{
      {ALERT_FIELDS}
    }}
    listInfo {{
      {LIST_INFO_FIELDS}
    }}
  }}
}}
"""

RESOLVE_ALERTS_MUTATION = """
mutation resolveAlerts($input: [ResolveAlertInput]) {
  resolveAlerts(input: $input)
}
"""

CREATE_ALERT_MUTATION = f"""
mutation createAlert($input: CreateAlertInput!) {{
  createAlert(input: $input) {{
    {ALERT_FIELDS}
  }}
}}
"""


@msp_tool("get_alerts")
async def get_alerts(
    page: int = 1,
    page_size: int = DEFAULT_ALERT_PAGE_SIZE,
    status: str | None = None,
    severity: str | None = None,
) -> dict:
    """
    List RMM alerts with status, severity and asset info. Filter by status
    (e.g. "Open", "Resolved") or, when no status is given, by severity
    (e.g. "Critical", "High", "Medium", "Low").
    """
    if status:
        conditions = [condition("status", "is", status)]
    elif severity:
        conditions = [condition("severity", "is", severity)]
    else:
        conditions = []

    info = list_info(page, page_size, default_size=DEFAULT_ALERT_PAGE_SIZE, conditions=conditions)
    data = await get_client().execute(GET_ALERT_LIST_QUERY, {"input": info})
    result = (data or {}).get("getAlertList") or {}
    return {
        "alerts": result.get("alerts") or [],
        "pagination": pagination(result.get("listInfo")),
    }


@msp_tool("get_asset_alerts")
async def get_asset_alerts(asset_id: str, page: int = 1, page_size: int = DEFAULT_ALERT_PAGE_SIZE) -> dict:
    """Get the alert history of an asset, resolved alerts included."""
    variables = {
        "input": {
            "assetId": asset_id,
            "listInfo": list_info(page, page_size, default_size=DEFAULT_ALERT_PAGE_SIZE),
        }
    }
    data = await get_client().execute(GET_ALERTS_FOR_ASSET_QUERY, variables)
    result = (data or {}).get("getAlertsForAsset") or {}
    return {
        "alerts": result.get("alerts") or [],
        "pagination": pagination(result.get("listInfo")),
    }


@msp_tool("resolve_alerts")
async def resolve_alerts(alert_ids: list[str]) -> dict:
    """Mark one or more alerts as resolved."""
    data = await get_client().execute(RESOLVE_ALERTS_MUTATION, {"input": [{"id": a} for a in alert_ids]})
    return {
        "success": (data or {}).get("resolveAlerts"),
        "resolvedCount": len(alert_ids),
        "alertIds": list(alert_ids),
    }


@msp_tool("create_alert")
async def create_alert(
    asset_id: str,
    message: str,
    description: str | None = None,
    severity: str | None = None,
) -> dict:
    """Create a manual alert on an asset, for custom monitoring or manual incident reporting."""
    fields = {"assetId": asset_id, "message": message}
    fields.update(drop_empty(description=description, severity=severity))

    data = await get_client().execute(CREATE_ALERT_MUTATION, {"input": fields})
    return {"alert": (data or {}).get("createAlert")}
