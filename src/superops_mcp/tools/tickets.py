"""
Ticket queue management and ticket action tools.

Queue tools filter `getTicketList` with ListInfoInput conditions; action
tools are thin wrappers over createTicket / updateTicket and friends.
"""
import datetime as _dt
from typing import Any, Literal

from msp_common.errors import typed_error
from superops_mcp.app import get_client, msp_tool
from superops_mcp.tools.common import condition, list_info, name_of, pagination

# The API has no "is not" operator, so "open" means "status includes every non-closed status".
NON_CLOSED_STATUSES = ["Open", "On Hold", "On-Site", "Waiting on third party", "Abandoned", "Resolved"]

DEFAULT_TICKET_PAGE_SIZE = 25

TICKET_FIELDS = """
    ticketId
    displayId
    subject
    ticketType
    requestType
    source
    client
    site
    requester
    additionalRequester
    followers
    techGroup
    technician
    status
    priority
    impact
    urgency
    category
    subcategory
    cause
    subcause
    resolutionCode
    sla
    createdTime
    updatedTime
    firstResponseDueTime
    firstResponseTime
    firstResponseViolated
    resolutionDueTime
    resolutionTime
    resolutionViolated
    customFields
    worklogTimespent
"""

CONVERSATION_FIELDS = """
    conversationId
    content
    time
    user
    toUsers {
      userId
      name
      email
    }
    ccUsers {
      userId
      name
      email
    }
    bccUsers {
      userId
      name
      email
    }
    attachments {
      name
      size
      downloadUrl
    }
    type
"""

NOTE_FIELDS = """
    noteId
    addedBy
    addedOn
    content
    attachments {
      name
      size
      downloadUrl
    }
    privacyType
"""

GET_TICKET_QUERY = f"""
query getTicket($input: TicketIdentifierInput!) {{
  getTicket(input: $input) {{
    {TICKET_FIELDS}
  }}
}}
"""

GET_TICKET_LIST_QUERY = f"""
query getTicketList($input: ListInfoInput!) {{
  getTicketList(input: $input) {{
    tickets {{
      {TICKET_FIELDS}
    }}
    listInfo {{
      page
      pageSize
      totalCount
      hasMore
    }}
  }}
}}
"""

GET_TICKET_CONVERSATION_LIST_QUERY = f"""
query getTicketConversationList($input: TicketIdentifierInput!) {{
  getTicketConversationList(input: $input) {{
    {CONVERSATION_FIELDS}
  }}
}}
"""

GET_TICKET_NOTE_LIST_QUERY = f"""
query getTicketNoteList($input: TicketIdentifierInput!) {{
  getTicketNoteList(input: $input) {{
    {NOTE_FIELDS}
  }}
}}
"""

CREATE_TICKET_MUTATION = f"""
mutation createTicket($input: CreateTicketInput!) {{
  createTicket(input: $input) {{
    {TICKET_FIELDS}
  }}
}}
"""

UPDATE_TICKET_MUTATION = f"""
mutation updateTicket($input: UpdateTicketInput!) {{
  updateTicket(input: $input) {{
    {TICKET_FIELDS}
  }}
}}
"""

CREATE_TICKET_CONVERSATION_MUTATION = f"""
mutation createTicketConversation($input: CreateTicketConversationInput!) {{
  createTicketConversation(input: $input) {{
    {CONVERSATION_FIELDS}
  }}
}}
"""

CREATE_TICKET_NOTE_MUTATION = f"""
mutation createTicketNote($input: CreateTicketNoteInput!) {{
  createTicketNote(input: $input) {{
    {NOTE_FIELDS}
  }}
}}
"""

SOFT_DELETE_TICKETS_MUTATION = """
mutation softDeleteTickets($input: [TicketIdentifierInput]) {
  softDeleteTickets(input: $input)
}
"""

TicketSource = Literal["FORM", "AGENT", "EMAIL", "AI", "PHONE", "INTEGRATION"]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _open_status_condition() -> dict:
    return condition("status", "includes", list(NON_CLOSED_STATUSES))


def hours_ago(hours: float, *, now: _dt.datetime | None = None) -> str:
    """UTC timestamp `hours` ago, ISO 8601 without the trailing Z (the format SuperOps filters accept)."""
    now = now or _dt.datetime.now(_dt.timezone.utc)
    since = now - _dt.timedelta(hours=hours)
    return since.replace(tzinfo=None).isoformat(timespec="milliseconds")


def summarize_ticket(ticket: dict | None) -> dict | None:
    """Compact, human-oriented view of a ticket."""
    if not ticket:
        return ticket
    return {
        "id": ticket.get("ticketId"),
        "displayId": ticket.get("displayId"),
        "subject": ticket.get("subject"),
        "status": ticket.get("status"),
        "priority": ticket.get("priority"),
        "client": name_of(ticket.get("client")),
        "requester": name_of(ticket.get("requester")),
        "technician": name_of(ticket.get("technician")),
        "techGroup": name_of(ticket.get("techGroup")),
        "category": ticket.get("category"),
        "subcategory": ticket.get("subcategory"),
        "createdTime": ticket.get("createdTime"),
        "updatedTime": ticket.get("updatedTime"),
        "sla": name_of(ticket.get("sla")),
        "firstResponseViolated": ticket.get("firstResponseViolated"),
        "resolutionViolated": ticket.get("resolutionViolated"),
        "source": ticket.get("source"),
    }


async def _ticket_list(
    tool: str,
    conditions: list[dict],
    *,
    page: int | None,
    page_size: int | None,
    sort_by: str = "createdTime",
) -> dict:
    info = list_info(
        page,
        page_size,
        default_size=DEFAULT_TICKET_PAGE_SIZE,
        conditions=conditions,
        sort=[{"attribute": sort_by, "order": "DESC"}],
    )
    data = await get_client().execute(GET_TICKET_LIST_QUERY, {"input": info})
    result = (data or {}).get("getTicketList") or {}
    return {
        "tickets": [summarize_ticket(t) for t in result.get("tickets") or []],
        "pagination": pagination(result.get("listInfo")),
        "_meta": {"tool": tool},
    }


async def _update_ticket(fields: dict[str, Any]) -> dict:
    data = await get_client().execute(UPDATE_TICKET_MUTATION, {"input": fields})
    return (data or {}).get("updateTicket") or {}


# ---------------------------------------------------------------------------
# Ticket queue management
# ---------------------------------------------------------------------------


@msp_tool("get_ticket")
async def get_ticket(ticket_id: str) -> dict:
    """Get full details of a specific ticket by ID, including status, priority, assignee, SLA info and custom fields."""
    data = await get_client().execute(GET_TICKET_QUERY, {"input": {"ticketId": ticket_id}})
    ticket = (data or {}).get("getTicket")
    if not ticket:
        return typed_error("not_found", f"Ticket {ticket_id} not found", ticket_id=ticket_id)
    return {"ticket": ticket, "_meta": {"tool": "get_ticket"}}


@msp_tool("get_open_tickets")
async def get_open_tickets(
    client_id: str | None = None,
    technician_id: str | None = None,
    priority: str | None = None,
    created_after: str | None = None,
    created_before: str | None = None,
    page: int = 1,
    page_size: int = DEFAULT_TICKET_PAGE_SIZE,
) -> dict:
    """
    List open (not closed) tickets, newest first, with optional filters by client,
    technician, priority (e.g. "High") and creation window (ISO 8601, e.g.
    "2024-01-15T00:00:00"). page_size max 100.
    """
    conditions = [_open_status_condition()]
    if client_id:
        conditions.append(condition("client.accountId", "is", client_id))
    if technician_id:
        conditions.append(condition("technician.userId", "is", technician_id))
    if priority:
        conditions.append(condition("priority", "is", priority))
    if created_after:
        conditions.append(condition("createdTime", "greater than", created_after))
    if created_before:
        conditions.append(condition("createdTime", "less than", created_before))

    return await _ticket_list("get_open_tickets", conditions, page=page, page_size=page_size)


@msp_tool("get_my_tickets")
async def get_my_tickets(
    technician_id: str | None = None,
    technician_email: str | None = None,
    page: int = 1,
    page_size: int = DEFAULT_TICKET_PAGE_SIZE,
) -> dict:
    """Get open tickets assigned to a technician (by user ID or email), most recently updated first."""
    if technician_id:
        conditions = [condition("technician.userId", "is", technician_id)]
    elif technician_email:
        conditions = [condition("technician.email", "is", technician_email)]
    else:
        return typed_error("bad_request", "Either technician_id or technician_email is required")

    conditions.append(_open_status_condition())
    return await _ticket_list(
        "get_my_tickets", conditions, page=page, page_size=page_size, sort_by="updatedTime"
    )


@msp_tool("get_new_tickets")
async def get_new_tickets(hours: float = 24, page: int = 1, page_size: int = DEFAULT_TICKET_PAGE_SIZE) -> dict:
    """Get tickets created within the last N hours (default 24). Useful for monitoring incoming volume."""
    hours = hours or 24
    since = hours_ago(hours)
    result = await _ticket_list(
        "get_new_tickets",
        [condition("createdTime", "greater than", since)],
        page=page,
        page_size=page_size,
    )
    result["timeRange"] = {"hours": hours, "since": since}
    return result


@msp_tool("get_urgent_tickets")
async def get_urgent_tickets(
    include_high_priority: bool = True,
    include_sla_violated: bool = True,
    page: int = 1,
    page_size: int = DEFAULT_TICKET_PAGE_SIZE,
) -> dict:
    """Get open tickets that are High priority and/or have violated their first-response or resolution SLA."""
    any_of: list[dict] = []
    if include_high_priority:
        any_of.append(condition("priority", "is", "High"))
    if include_sla_violated:
        any_of.append(condition("firstResponseViolated", "is", True))
        any_of.append(condition("resolutionViolated", "is", True))

    if not any_of:
        return typed_error(
            "bad_request",
            "At least one filter (include_high_priority or include_sla_violated) must be true",
        )

    conditions = [_open_status_condition(), {"operator": "OR", "value": any_of}]
    return await _ticket_list("get_urgent_tickets", conditions, page=page, page_size=page_size)


@msp_tool("get_tickets_by_client")
async def get_tickets_by_client(
    client_id: str,
    status: str | None = None,
    page: int = 1,
    page_size: int = DEFAULT_TICKET_PAGE_SIZE,
) -> dict:
    """Get all tickets for a client, optionally filtered by status (e.g. "New", "Open", "Closed")."""
    conditions = [condition("client.accountId", "is", client_id)]
    if status:
        conditions.append(condition("status", "is", status))
    return await _ticket_list("get_tickets_by_client", conditions, page=page, page_size=page_size)


@msp_tool("get_ticket_conversation")
async def get_ticket_conversation(ticket_id: str) -> dict:
    """Get the full conversation thread of a ticket: all messages between requester and technicians."""
    data = await get_client().execute(GET_TICKET_CONVERSATION_LIST_QUERY, {"input": {"ticketId": ticket_id}})
    conversations = (data or {}).get("getTicketConversationList") or []
    return {
        "ticketId": ticket_id,
        "conversationCount": len(conversations),
        "conversations": [
            {
                "id": c.get("conversationId"),
                "content": c.get("content"),
                "time": c.get("time"),
                "user": c.get("user"),
                "type": c.get("type"),
                "toUsers": c.get("toUsers"),
                "ccUsers": c.get("ccUsers"),
                "attachments": c.get("attachments"),
            }
            for c in conversations
        ],
        "_meta": {"tool": "get_ticket_conversation"},
    }


@msp_tool("get_ticket_notes")
async def get_ticket_notes(ticket_id: str) -> dict:
    """Get notes on a ticket. Notes are PUBLIC (visible to the requester) or PRIVATE (technicians only)."""
    data = await get_client().execute(GET_TICKET_NOTE_LIST_QUERY, {"input": {"ticketId": ticket_id}})
    notes = (data or {}).get("getTicketNoteList") or []
    return {
        "ticketId": ticket_id,
        "noteCount": len(notes),
        "notes": [
            {
                "id": n.get("noteId"),
                "content": n.get("content"),
                "addedBy": n.get("addedBy"),
                "addedOn": n.get("addedOn"),
                "privacyType": n.get("privacyType"),
                "attachments": n.get("attachments"),
            }
            for n in notes
        ],
        "_meta": {"tool": "get_ticket_notes"},
    }


# ---------------------------------------------------------------------------
# Ticket actions
# ---------------------------------------------------------------------------


@msp_tool("create_ticket")
async def create_ticket(
    subject: str,
    client_id: str,
    description: str | None = None,
    requester_id: str | None = None,
    technician_id: str | None = None,
    tech_group_id: str | None = None,
    status: str | None = None,
    priority: str | None = None,
    category: str | None = None,
    subcategory: str | None = None,
    impact: str | None = None,
    urgency: str | None = None,
    source: TicketSource = "FORM",
    custom_fields: dict[str, Any] | None = None,
) -> dict:
    """Create a new ticket for a client. Returns the created ticket with its new ID."""
    fields: dict[str, Any] = {
        "subject": subject,
        "client": {"accountId": client_id},
        "source": source or "FORM",
    }
    if description:
        fields["description"] = description
    if requester_id:
        fields["requester"] = {"userId": requester_id}
    if technician_id:
        fields["technician"] = {"userId": technician_id}
    if tech_group_id:
        fields["techGroup"] = {"groupId": tech_group_id}
    for key, value in (
        ("status", status),
        ("priority", priority),
        ("category", category),
        ("subcategory", subcategory),
        ("impact", impact),
        ("urgency", urgency),
    ):
        if value:
            fields[key] = value
    if custom_fields:
        fields["customFields"] = custom_fields

    data = await get_client().execute(CREATE_TICKET_MUTATION, {"input": fields})
    ticket = (data or {}).get("createTicket") or {}
    return {
        "success": True,
        "message": f"Ticket {ticket.get('displayId')} created successfully",
        "ticket": ticket,
        "_meta": {"tool": "create_ticket"},
    }


@msp_tool("reply_to_ticket")
async def reply_to_ticket(
    ticket_id: str,
    content: str,
    send_mail: bool = True,
    cc_emails: list[str] | None = None,
) -> dict:
    """Send a reply (HTML allowed) to the ticket requester, optionally emailing them and CC'ing others."""
    fields: dict[str, Any] = {
        "ticket": {"ticketId": ticket_id},
        "content": content,
        "sendMail": send_mail is not False,
    }
    if cc_emails:
        fields["ccUsers"] = [{"email": e} for e in cc_emails]

    data = await get_client().execute(CREATE_TICKET_CONVERSATION_MUTATION, {"input": fields})
    return {
        "success": True,
        "message": "Reply sent successfully",
        "conversation": (data or {}).get("createTicketConversation"),
        "emailSent": fields["sendMail"],
        "_meta": {"tool": "reply_to_ticket"},
    }


@msp_tool("add_ticket_note")
async def add_ticket_note(
    ticket_id: str,
    content: str,
    privacy_type: Literal["PUBLIC", "PRIVATE"] = "PRIVATE",
) -> dict:
    """Add a note to a ticket. PRIVATE notes (default) are only visible to technicians."""
    fields = {
        "ticket": {"ticketId": ticket_id},
        "content": content,
        "privacyType": privacy_type or "PRIVATE",
    }
    data = await get_client().execute(CREATE_TICKET_NOTE_MUTATION, {"input": fields})
    return {
        "success": True,
        "message": f"{fields['privacyType']} note added successfully",
        "note": (data or {}).get("createTicketNote"),
        "_meta": {"tool": "add_ticket_note"},
    }


@msp_tool("update_ticket_status")
async def update_ticket_status(ticket_id: str, status: str) -> dict:
    """Change the status of a ticket (e.g. New, Open, Pending, Resolved, Closed)."""
    ticket = await _update_ticket({"ticketId": ticket_id, "status": status})
    return {
        "success": True,
        "message": f'Ticket status updated to "{status}"',
        "ticket": summarize_ticket(ticket),
        "_meta": {"tool": "update_ticket_status"},
    }


@msp_tool("update_ticket_priority")
async def update_ticket_priority(ticket_id: str, priority: str) -> dict:
    """Change the priority of a ticket (e.g. High, Medium, Low)."""
    ticket = await _update_ticket({"ticketId": ticket_id, "priority": priority})
    return {
        "success": True,
        "message": f'Ticket priority updated to "{priority}"',
        "ticket": summarize_ticket(ticket),
        "_meta": {"tool": "update_ticket_priority"},
    }


@msp_tool("update_ticket_category")
async def update_ticket_category(
    ticket_id: str,
    category: str | None = None,
    subcategory: str | None = None,
) -> dict:
    """Change the category and/or subcategory of a ticket."""
    if not category and not subcategory:
        return typed_error("bad_request", "At least one of category or subcategory is required")

    fields: dict[str, Any] = {"ticketId": ticket_id}
    if category:
        fields["category"] = category
    if subcategory:
        fields["subcategory"] = subcategory

    ticket = await _update_ticket(fields)
    return {
        "success": True,
        "message": "Ticket category updated successfully",
        "ticket": summarize_ticket(ticket),
        "_meta": {"tool": "update_ticket_category"},
    }


@msp_tool("assign_ticket")
async def assign_ticket(
    ticket_id: str,
    technician_id: str | None = None,
    tech_group_id: str | None = None,
) -> dict:
    """Assign a ticket to a technician and/or technician group."""
    if not technician_id and not tech_group_id:
        return typed_error("bad_request", "At least one of technician_id or tech_group_id is required")

    fields: dict[str, Any] = {"ticketId": ticket_id}
    if technician_id:
        fields["technician"] = {"userId": technician_id}
    if tech_group_id:
        fields["techGroup"] = {"groupId": tech_group_id}

    ticket = await _update_ticket(fields)

    assigned_to = []
    technician = name_of(ticket.get("technician"))
    if isinstance(technician, str) and technician:
        assigned_to.append(f"technician: {technician}")
    group = name_of(ticket.get("techGroup"))
    if isinstance(group, str) and group:
        assigned_to.append(f"group: {group}")

    return {
        "success": True,
        "message": f"Ticket assigned to {', '.join(assigned_to)}" if assigned_to else "Ticket assigned",
        "ticket": summarize_ticket(ticket),
        "_meta": {"tool": "assign_ticket"},
    }


@msp_tool("change_ticket_requester")
async def change_ticket_requester(ticket_id: str, requester_id: str) -> dict:
    """Change who the ticket is for (the requester)."""
    ticket = await _update_ticket({"ticketId": ticket_id, "requester": {"userId": requester_id}})
    requester = name_of(ticket.get("requester"))
    shown = requester if isinstance(requester, str) and requester else requester_id
    return {
        "success": True,
        "message": f"Ticket requester changed to {shown}",
        "ticket": summarize_ticket(ticket),
        "_meta": {"tool": "change_ticket_requester"},
    }


@msp_tool("add_ticket_follower")
async def add_ticket_follower(ticket_id: str, technician_id: str) -> dict:
    """Add a technician as a follower on a ticket. Followers receive notifications about ticket updates."""
    ticket = await _update_ticket({"ticketId": ticket_id, "addFollowers": [{"userId": technician_id}]})
    return {
        "success": True,
        "message": "Follower added successfully",
        "ticket": summarize_ticket(ticket),
        "_meta": {"tool": "add_ticket_follower"},
    }


@msp_tool("close_ticket")
async def close_ticket(
    ticket_id: str,
    resolution_code: str | None = None,
    suppress_notification: bool = False,
) -> dict:
    """Close a ticket, optionally recording a resolution code (e.g. "Permanent Fix", "Workaround")."""
    fields: dict[str, Any] = {"ticketId": ticket_id, "status": "Closed"}
    if resolution_code:
        fields["resolutionCode"] = resolution_code
    if suppress_notification:
        fields["suppressCloseNotification"] = True

    ticket = await _update_ticket(fields)
    message = f"Ticket {ticket.get('displayId') or ticket_id} closed"
    if resolution_code:
        message += f" with resolution: {resolution_code}"
    return {
        "success": True,
        "message": message,
        "ticket": summarize_ticket(ticket),
        "_meta": {"tool": "close_ticket"},
    }


@msp_tool("delete_ticket")
async def delete_ticket(ticket_id: str) -> dict:
    """Soft delete (trash) a ticket. It can be restored from trash in SuperOps."""
    data = await get_client().execute(SOFT_DELETE_TICKETS_MUTATION, {"input": [{"ticketId": ticket_id}]})
    deleted = bool((data or {}).get("softDeleteTickets"))
    return {
        "success": deleted,
        "message": f"Ticket {ticket_id} moved to trash" if deleted else f"Failed to delete ticket {ticket_id}",
        "_meta": {"tool": "delete_ticket"},
    }
