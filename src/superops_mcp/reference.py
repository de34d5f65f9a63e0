"""
Offline SuperOps GraphQL API reference.

Documentation tools answer from a bundled JSON index (`queries`, `mutations`,
`types`, `meta`) and never call the API.
"""
import json
import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

from msp_common.errors import typed_error
from msp_config.settings import api_index_path
from superops_mcp.app import msp_tool

logger = logging.getLogger(__name__)

PRODUCT_NAME = "SuperOps MSP"

_SECTIONS = ("queries", "mutations", "types")


class ReferenceUnavailable(RuntimeError):
    """The API index could not be read or parsed."""


def _load_index_file(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Invalid API index format: {path}")
    for section in _SECTIONS:
        if not isinstance(data.get(section, []), list):
            raise ValueError(f"Invalid API index format: {section!r} must be a list ({path})")
    return data


@dataclass
class ApiReference:
    """The API index, read from disk on first use and kept until `invalidate()`."""

    path: Path | None = None
    _data: dict[str, Any] | None = field(default=None, init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def load(self) -> dict[str, Any]:
        with self._lock:
            if self._data is None:
                p = self.path or api_index_path()
                try:
                    self._data = _load_index_file(p)
                except (OSError, ValueError) as e:
                    raise ReferenceUnavailable(f"Failed to load API data: {e}") from e
                logger.info(
                    "Loaded API index %s (%d queries, %d mutations, %d types)",
                    p,
                    len(self._data.get("queries") or []),
                    len(self._data.get("mutations") or []),
                    len(self._data.get("types") or []),
                )
            return self._data

    def invalidate(self) -> None:
        with self._lock:
            self._data = None

    # ---- lookups ---------------------------------------------------------

    def search(self, term: str) -> dict:
        data = self.load()
        needle = (term or "").lower()

        def hit(entry: dict) -> bool:
            return needle in str(entry.get("name", "")).lower() or needle in str(
                entry.get("description") or ""
            ).lower()

        results = {
            "queries": [
                {"name": op.get("name"), "description": op.get("description"), "returns": op.get("returns")}
                for op in data.get("queries") or []
                if hit(op)
            ],
            "mutations": [
                {"name": op.get("name"), "description": op.get("description"), "returns": op.get("returns")}
                for op in data.get("mutations") or []
                if hit(op)
            ],
            "types": [
                {"name": t.get("name"), "kind": t.get("kind"), "description": t.get("description")}
                for t in data.get("types") or []
                if hit(t)
            ],
        }
        return {
            "searchTerm": term,
            "totalResults": sum(len(v) for v in results.values()),
            "results": results,
        }

    def operation(self, name: str) -> dict | None:
        data = self.load()
        wanted = (name or "").lower()
        for section in ("queries", "mutations"):
            for op in data.get(section) or []:
                if str(op.get("name", "")).lower() == wanted:
                    return op
        return None

    def type_def(self, name: str) -> dict | None:
        wanted = (name or "").lower()
        for t in self.load().get("types") or []:
            if str(t.get("name", "")).lower() == wanted:
                return t
        return None

    def operations(self, kind: str) -> dict:
        data = self.load()
        out: dict[str, Any] = {}
        if kind in ("queries", "all"):
            out["queries"] = [{"name": q.get("name"), "description": q.get("description")} for q in data.get("queries") or []]
        if kind in ("mutations", "all"):
            out["mutations"] = [
                {"name": m.get("name"), "description": m.get("description")} for m in data.get("mutations") or []
            ]
        out["meta"] = data.get("meta")
        return out


reference = ApiReference()


def _unavailable(exc: ReferenceUnavailable) -> dict:
    return typed_error("reference_unavailable", str(exc))


@msp_tool("search_superops_api")
async def search_superops_api(query: str) -> dict:
    """Search the SuperOps MSP API documentation for queries, mutations and types by name or description."""
    try:
        return reference.search(query)
    except ReferenceUnavailable as e:
        return _unavailable(e)


@msp_tool("get_superops_operation")
async def get_superops_operation(name: str) -> dict:
    """Get full details of a SuperOps MSP API query or mutation (e.g. "getTicket", "createClientV2")."""
    try:
        op = reference.operation(name)
    except ReferenceUnavailable as e:
        return _unavailable(e)
    if op is None:
        return typed_error(
            "not_found",
            f'Operation "{name}" not found. Use search_superops_api to find available operations.',
        )
    return {"operation": op}


@msp_tool("get_superops_type")
async def get_superops_type(name: str) -> dict:
    """Get the definition of a SuperOps MSP API type (e.g. "Ticket", "Client", "Asset")."""
    try:
        t = reference.type_def(name)
    except ReferenceUnavailable as e:
        return _unavailable(e)
    if t is None:
        return typed_error(
            "not_found",
            f'Type "{name}" not found. Use search_superops_api to find available types.',
        )
    return {"type": t}


@msp_tool("list_superops_operations")
async def list_superops_operations(type: Literal["queries", "mutations", "all"] = "all") -> dict:
    """List the available SuperOps MSP API operations (queries, mutations or all)."""
    try:
        return reference.operations(type)
    except ReferenceUnavailable as e:
        return _unavailable(e)
