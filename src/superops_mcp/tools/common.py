"""Helpers shared by the tool modules: list inputs, conditions and result shaping."""

from __future__ import annotations

from typing import Any, Iterable, Mapping

MAX_PAGE_SIZE = 100

LIST_INFO_FIELDS = """
  page
  pageSize
  totalCount
"""


def condition(attribute: str, operator: str, value: Any) -> dict:
    return {"attribute": attribute, "operator": operator, "value": value}


def clamp_page_size(page_size: int | None, default: int) -> int:
    size = page_size or default
    return max(1, min(int(size), MAX_PAGE_SIZE))


def list_info(
    page: int | None = None,
    page_size: int | None = None,
    *,
    default_size: int = 25,
    conditions: Iterable[Mapping[str, Any]] = (),
    sort: list[dict] | None = None,
) -> dict:
    """
    Build a ListInfoInput. One condition is sent as-is; several are combined
    under a single AND node.
    """
    out: dict[str, Any] = {
        "page": max(int(page or 1), 1),
        "pageSize": clamp_page_size(page_size, default_size),
    }

    conds = [dict(c) for c in conditions]
    if len(conds) == 1:
        out["condition"] = conds[0]
    elif len(conds) > 1:
        out["condition"] = {"operator": "AND", "value": conds}

    if sort:
        out["sort"] = sort
    return out


def pagination(info: Mapping[str, Any] | None) -> dict:
    info = info or {}
    out = {
        "page": info.get("page"),
        "pageSize": info.get("pageSize"),
        "totalCount": info.get("totalCount"),
    }
    if "hasMore" in info:
        out["hasMore"] = info.get("hasMore")
    return out


def counted(items: list | None, key: str) -> dict:
    lst = list(items or [])
    return {key: lst, "count": len(lst)}


def name_of(value: Any) -> Any:
    """SuperOps returns references as JSON objects; prefer their `name`."""
    if isinstance(value, Mapping):
        return value.get("name") or value
    return value


def drop_empty(**fields: Any) -> dict:
    """Keep only the fields that carry a value (None, "" and [] are dropped)."""
    return {k: v for k, v in fields.items() if v not in (None, "", [], {})}
