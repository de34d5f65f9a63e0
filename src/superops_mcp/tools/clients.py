"""
Client, site, contact and contract tools.
"""
from typing import Any

from msp_common.errors import typed_error
from superops_mcp.app import get_client, msp_tool
from superops_mcp.tools.common import LIST_INFO_FIELDS, condition, drop_empty, list_info, pagination

DEFAULT_CLIENT_PAGE_SIZE = 50

CLIENT_FIELDS = """
    accountId
    name
    stage
    status
    emailDomains
    accountManager
    primaryContact
    secondaryContact
    hqSite
    technicianGroups
    customFields
"""

CLIENT_SITE_FIELDS = """
    id
    name
    timezoneCode
    working24x7
    line1
    line2
    line3
    city
    postalCode
    countryCode
    stateCode
    contactNumber
    client
    hq
"""

CLIENT_USER_FIELDS = """
    userId
    firstName
    lastName
    name
    email
    contactNumber
    reportingManager
    site
    role
    client
    customFields
"""

CLIENT_CONTRACT_FIELDS = """
    contractId
    client
    contract {
      contractId
      name
      description
      contractType
    }
    startDate
    endDate
    contractStatus
"""

GET_CLIENT_QUERY = f"""
query getClient($input: ClientIdentifierInput!) {{
  getClient(input: $input) {{
    {CLIENT_FIELDS}
  }}
}}
"""

GET_CLIENT_LIST_QUERY = f"""
query getClientList($input: ListInfoInput!) {{
  getClientList(input: $input) {{
    clients {{
      {CLIENT_FIELDS}
    }}
    listInfo {{
      {LIST_INFO_FIELDS}
    }}
  }}
}}
"""

GET_CLIENT_SITE_LIST_QUERY = f"""
query getClientSiteList($input: GetClientSiteListInput!) {{
  getClientSiteList(input: $input) {{
    sites {{
      {CLIENT_SITE_FIELDS}
    }}
    listInfo {{
      {LIST_INFO_FIELDS}
    }}
  }}
}}
"""

GET_CLIENT_USER_LIST_QUERY = f"""
query getClientUserList($input: GetClientUserListInput!) {{
  getClientUserList(input: $input) {{
    userList {{
      {CLIENT_USER_FIELDS}
    }}
    listInfo {{
      {LIST_INFO_FIELDS}
    }}
  }}
}}
"""

GET_CLIENT_CONTRACT_LIST_QUERY = f"""
query getClientContractList($input: ListInfoInput) {{
  getClientContractList(input: $input) {{
    clientContracts {{
      {CLIENT_CONTRACT_FIELDS}
    }}
    listInfo {{
      {LIST_INFO_FIELDS}
    }}
  }}
}}
"""

CREATE_CLIENT_MUTATION = f"""
mutation createClientV2($input: CreateClientInputV2!) {{
  createClientV2(input: $input) {{
    {CLIENT_FIELDS}
  }}
}}
"""

CREATE_CLIENT_USER_MUTATION = f"""
mutation createClientUser($input: CreateClientUserInput!) {{
  createClientUser(input: $input) {{
    {CLIENT_USER_FIELDS}
  }}
}}
"""

CREATE_CLIENT_SITE_MUTATION = f"""
mutation createClientSite($input: CreateClientSiteInput!) {{
  createClientSite(input: $input) {{
    {CLIENT_SITE_FIELDS}
  }}
}}
"""

UPDATE_CLIENT_MUTATION = f"""
mutation updateClient($input: UpdateClientInput!) {{
  updateClient(input: $input) {{
    {CLIENT_FIELDS}
  }}
}}
"""

UPDATE_CLIENT_USER_MUTATION = f"""
mutation updateClientUser($input: UpdateClientUserInput!) {{
  updateClientUser(input: $input) {{
    {CLIENT_USER_FIELDS}
  }}
}}
"""

_ADDRESS_KEYS = ("line1", "line2", "city", "postalCode", "countryCode", "stateCode")


def _page(page: int | None, page_size: int | None) -> dict:
    return list_info(page, page_size, default_size=DEFAULT_CLIENT_PAGE_SIZE)


@msp_tool("get_client")
async def get_client_details(account_id: str) -> dict:
    """
    Get full details of a specific client by ID: name, stage, status, email
    domains, contacts, HQ site and technician groups.
    """
    data = await get_client().execute(GET_CLIENT_QUERY, {"input": {"accountId": account_id}})
    found = (data or {}).get("getClient")
    if not found:
        return typed_error("not_found", f"Client {account_id} not found", account_id=account_id)
    return {"client": found}


@msp_tool("get_clients")
async def get_clients(
    page: int = 1,
    page_size: int = DEFAULT_CLIENT_PAGE_SIZE,
    stage: str | None = None,
    status: str | None = None,
    search: str | None = None,
) -> dict:
    """
    List clients, optionally filtered by stage (e.g. "Active", "Prospect"),
    status (e.g. "Paid", "Trial") or a name search. Only one filter is applied,
    in that order of precedence.
    """
    conditions = []
    if stage:
        conditions.append(condition("stage", "is", stage))
    if status:
        conditions.append(condition("status", "is", status))
    if search:
        conditions.append(condition("name", "contains", search))

    # getClientList accepts a single condition
    info = list_info(page, page_size, default_size=DEFAULT_CLIENT_PAGE_SIZE, conditions=conditions[:1])
    data = await get_client().execute(GET_CLIENT_LIST_QUERY, {"input": info})
    result = (data or {}).get("getClientList") or {}
    return {
        "clients": result.get("clients") or [],
        "pagination": pagination(result.get("listInfo")),
    }


@msp_tool("get_client_sites")
async def get_client_sites(client_id: str, page: int = 1, page_size: int = DEFAULT_CLIENT_PAGE_SIZE) -> dict:
    """List sites/locations for a client with address, timezone and business-hours settings."""
    variables = {"input": {"clientId": client_id, "listInfo": _page(page, page_size)}}
    data = await get_client().execute(GET_CLIENT_SITE_LIST_QUERY, variables)
    result = (data or {}).get("getClientSiteList") or {}
    return {
        "sites": result.get("sites") or [],
        "pagination": pagination(result.get("listInfo")),
    }


@msp_tool("get_client_users")
async def get_client_users(client_id: str, page: int = 1, page_size: int = DEFAULT_CLIENT_PAGE_SIZE) -> dict:
    """List contacts/users of a client with name, email, role and site."""
    variables = {"input": {"clientId": client_id, "listInfo": _page(page, page_size)}}
    data = await get_client().execute(GET_CLIENT_USER_LIST_QUERY, variables)
    result = (data or {}).get("getClientUserList") or {}
    return {
        "users": result.get("userList") or [],
        "pagination": pagination(result.get("listInfo")),
    }


@msp_tool("get_client_contracts")
async def get_client_contracts(
    client_id: str | None = None,
    page: int = 1,
    page_size: int = DEFAULT_CLIENT_PAGE_SIZE,
) -> dict:
    """List contracts (type, status, start/end dates), for one client or for all clients."""
    conditions = [condition("client.accountId", "is", client_id)] if client_id else []
    info = list_info(page, page_size, default_size=DEFAULT_CLIENT_PAGE_SIZE, conditions=conditions)
    data = await get_client().execute(GET_CLIENT_CONTRACT_LIST_QUERY, {"input": info})
    result = (data or {}).get("getClientContractList") or {}
    return {
        "contracts": result.get("clientContracts") or [],
        "pagination": pagination(result.get("listInfo")),
    }


@msp_tool("create_client")
async def create_client(
    name: str,
    hq_site_name: str,
    hq_site_timezone: str,
    stage: str | None = None,
    status: str | None = None,
    email_domains: list[str] | None = None,
    account_manager_id: str | None = None,
    hq_site_working_24x7: bool = True,
    hq_site_address: dict[str, str] | None = None,
    custom_fields: dict[str, Any] | None = None,
) -> dict:
    """
    Create a new client together with its headquarters site.

    hq_site_timezone is an IANA name (e.g. "America/New_York"); hq_site_address
    may carry line1, line2, city, postalCode, countryCode and stateCode.
    """
    hq_site: dict[str, Any] = {
        "name": hq_site_name,
        "timezoneCode": hq_site_timezone,
        "working24x7": hq_site_working_24x7 is not False,
    }
    if hq_site_address:
        hq_site.update({k: hq_site_address.get(k) for k in _ADDRESS_KEYS})

    fields: dict[str, Any] = {"name": name, "hqSite": hq_site}
    fields.update(
        drop_empty(
            stage=stage,
            status=status,
            emailDomains=email_domains,
            accountManager={"userId": account_manager_id} if account_manager_id else None,
            customFields=custom_fields,
        )
    )

    data = await get_client().execute(CREATE_CLIENT_MUTATION, {"input": fields})
    return {"client": (data or {}).get("createClientV2")}


@msp_tool("create_client_user")
async def create_client_user(
    first_name: str,
    email: str,
    role_id: str,
    client_id: str,
    site_id: str,
    last_name: str | None = None,
    contact_number: str | None = None,
    reporting_manager_id: str | None = None,
    custom_fields: dict[str, Any] | None = None,
) -> dict:
    """Add a new contact to a client, associated with one of its sites."""
    fields: dict[str, Any] = {
        "firstName": first_name,
        "email": email,
        "role": {"roleId": role_id},
        "addAssociations": [{"client": {"accountId": client_id}, "site": {"id": site_id}}],
    }
    fields.update(
        drop_empty(
            lastName=last_name,
            contactNumber=contact_number,
            reportingManager={"userId": reporting_manager_id} if reporting_manager_id else None,
            customFields=custom_fields,
        )
    )

    data = await get_client().execute(CREATE_CLIENT_USER_MUTATION, {"input": fields})
    return {"user": (data or {}).get("createClientUser")}


@msp_tool("create_client_site")
async def create_client_site(
    client_id: str,
    name: str,
    timezone_code: str,
    working_24x7: bool = True,
    line1: str | None = None,
    line2: str | None = None,
    line3: str | None = None,
    city: str | None = None,
    postal_code: str | None = None,
    country_code: str | None = None,
    state_code: str | None = None,
    contact_number: str | None = None,
) -> dict:
    """Add a new site/location to an existing client."""
    fields: dict[str, Any] = {
        "client": {"accountId": client_id},
        "name": name,
        "timezoneCode": timezone_code,
        "working24x7": working_24x7 is not False,
    }
    fields.update(
        drop_empty(
            line1=line1,
            line2=line2,
            line3=line3,
            city=city,
            postalCode=postal_code,
            countryCode=country_code,
            stateCode=state_code,
            contactNumber=contact_number,
        )
    )

    data = await get_client().execute(CREATE_CLIENT_SITE_MUTATION, {"input": fields})
    return {"site": (data or {}).get("createClientSite")}


@msp_tool("update_client")
async def update_client(
    account_id: str,
    name: str | None = None,
    stage: str | None = None,
    status: str | None = None,
    email_domains: list[str] | None = None,
    account_manager_id: str | None = None,
    primary_contact_id: str | None = None,
    secondary_contact_id: str | None = None,
    hq_site_id: str | None = None,
    add_technician_group_ids: list[str] | None = None,
    delete_technician_group_ids: list[str] | None = None,
    custom_fields: dict[str, Any] | None = None,
) -> dict:
    """Update an existing client. Only the fields given are changed."""
    fields: dict[str, Any] = {"accountId": account_id}
    fields.update(
        drop_empty(
            name=name,
            stage=stage,
            status=status,
            emailDomains=email_domains,
            accountManager={"userId": account_manager_id} if account_manager_id else None,
            primaryContact={"userId": primary_contact_id} if primary_contact_id else None,
            secondaryContact={"userId": secondary_contact_id} if secondary_contact_id else None,
            hqSite={"id": hq_site_id} if hq_site_id else None,
            addTechnicianGroups=[{"groupId": g} for g in add_technician_group_ids or []],
            deleteTechnicianGroups=[{"groupId": g} for g in delete_technician_group_ids or []],
            customFields=custom_fields,
        )
    )

    data = await get_client().execute(UPDATE_CLIENT_MUTATION, {"input": fields})
    return {"client": (data or {}).get("updateClient")}


@msp_tool("update_client_user")
async def update_client_user(
    user_id: str,
    first_name: str | None = None,
    last_name: str | None = None,
    email: str | None = None,
    contact_number: str | None = None,
    reporting_manager_id: str | None = None,
    site_id: str | None = None,
    role_id: str | None = None,
    custom_fields: dict[str, Any] | None = None,
) -> dict:
    """Update an existing client contact. Only the fields given are changed."""
    fields: dict[str, Any] = {"userId": user_id}
    fields.update(
        drop_empty(
            firstName=first_name,
            lastName=last_name,
            email=email,
            contactNumber=contact_number,
            reportingManager={"userId": reporting_manager_id} if reporting_manager_id else None,
            site={"id": site_id} if site_id else None,
            role={"roleId": role_id} if role_id else None,
            customFields=custom_fields,
        )
    )

    data = await get_client().execute(UPDATE_CLIENT_USER_MUTATION, {"input": fields})
    return {"user": (data or {}).get("updateClientUser")}


@msp_tool("search_contacts")
async def search_contacts(search: str, page: int = 1, page_size: int = DEFAULT_CLIENT_PAGE_SIZE) -> dict:
    """Search contacts across all clients by name."""
    info = list_info(
        page,
        page_size,
        default_size=DEFAULT_CLIENT_PAGE_SIZE,
        conditions=[condition("name", "contains", search)],
    )
    data = await get_client().execute(GET_CLIENT_USER_LIST_QUERY, {"input": {"listInfo": info}})
    result = (data or {}).get("getClientUserList") or {}
    return {
        "users": result.get("userList") or [],
        "pagination": pagination(result.get("listInfo")),
        "searchTerm": search,
    }
