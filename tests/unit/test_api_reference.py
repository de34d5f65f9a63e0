import json

import pytest

from superops_mcp import reference as ref
from superops_mcp.reference import ApiReference, ReferenceUnavailable

INDEX = {
    "meta": {"product": "SuperOps MSP", "queryCount": 2, "mutationCount": 1},
    "queries": [
        {"name": "getTicket", "description": "Fetch a single ticket by its ID.", "returns": "Ticket"},
        {"name": "getAssetList", "description": "List RMM assets.", "returns": "AssetList"},
    ],
    "mutations": [
        {"name": "createTicket", "description": "Create a ticket.", "returns": "Ticket"},
    ],
    "types": [
        {"name": "Ticket", "kind": "OBJECT", "description": "A service desk ticket.", "fields": []},
    ],
}


@pytest.fixture
def index_file(tmp_path):
    p = tmp_path / "api-index.json"
    p.write_text(json.dumps(INDEX), encoding="utf-8")
    return p


@pytest.fixture
def installed(index_file, monkeypatch):
    api = ApiReference(path=index_file)
    monkeypatch.setattr(ref, "reference", api)
    return api


@pytest.mark.asyncio
async def test_search_matches_names_and_descriptions(installed):
    out = await ref.search_superops_api("TICKET")
    assert out["searchTerm"] == "TICKET"
    assert [q["name"] for q in out["results"]["queries"]] == ["getTicket"]
    assert [m["name"] for m in out["results"]["mutations"]] == ["createTicket"]
    assert [t["name"] for t in out["results"]["types"]] == ["Ticket"]
    assert out["totalResults"] == 3

    out = await ref.search_superops_api("rmm")
    assert [q["name"] for q in out["results"]["queries"]] == ["getAssetList"]


@pytest.mark.asyncio
async def test_search_without_hits(installed):
    out = await ref.search_superops_api("zzz")
    assert out["totalResults"] == 0
    assert out["results"] == {"queries": [], "mutations": [], "types": []}


@pytest.mark.asyncio
async def test_get_operation_is_case_insensitive(installed):
    out = await ref.get_superops_operation("CREATETICKET")
    assert out["operation"]["name"] == "createTicket"


@pytest.mark.asyncio
async def test_get_operation_not_found(installed):
    out = await ref.get_superops_operation("nope")
    assert out["error"]["code"] == "not_found"
    assert "search_superops_api" in out["error"]["message"]


@pytest.mark.asyncio
async def test_get_type(installed):
    assert (await ref.get_superops_type("ticket"))["type"]["kind"] == "OBJECT"
    assert (await ref.get_superops_type("Widget"))["error"]["code"] == "not_found"


@pytest.mark.asyncio
async def test_list_operations_by_kind(installed):
    everything = await ref.list_superops_operations()
    assert [q["name"] for q in everything["queries"]] == ["getTicket", "getAssetList"]
    assert [m["name"] for m in everything["mutations"]] == ["createTicket"]
    assert everything["meta"]["product"] == "SuperOps MSP"

    only_mutations = await ref.list_superops_operations(type="mutations")
    assert "queries" not in only_mutations
    assert only_mutations["mutations"] == [{"name": "createTicket", "description": "Create a ticket."}]


@pytest.mark.asyncio
async def test_unreadable_index_is_reported(tmp_path, monkeypatch):
    bad = tmp_path / "broken.json"
    bad.write_text("{not json", encoding="utf-8")
    monkeypatch.setattr(ref, "reference", ApiReference(path=bad))

    out = await ref.search_superops_api("ticket")
    assert out["error"]["code"] == "reference_unavailable"

    monkeypatch.setattr(ref, "reference", ApiReference(path=tmp_path / "missing.json"))
    assert (await ref.get_superops_type("Ticket"))["error"]["code"] == "reference_unavailable"


def test_index_sections_must_be_lists(tmp_path):
    p = tmp_path / "api-index.json"
    p.write_text(json.dumps({"queries": {"getTicket": {}}}), encoding="utf-8")
    with pytest.raises(ReferenceUnavailable):
        ApiReference(path=p).load()


def test_index_is_cached_until_invalidated(index_file):
    api = ApiReference(path=index_file)
    first = api.load()
    index_file.write_text(json.dumps({"queries": [], "mutations": [], "types": []}), encoding="utf-8")

    assert api.load() is first
    api.invalidate()
    assert api.load()["queries"] == []


def test_index_path_env_override(index_file, monkeypatch):
    monkeypatch.setenv("SUPEROPS_API_INDEX", str(index_file))
    assert ApiReference().operation("getAssetList")["returns"] == "AssetList"


def test_bundled_index_loads(monkeypatch):
    monkeypatch.delenv("SUPEROPS_API_INDEX", raising=False)
    data = ApiReference().load()
    names = {op["name"] for op in data["queries"]}
    assert {"getTicket", "getTicketList", "getClientList", "getAssetList"} <= names
    assert data["meta"]["queryCount"] == len(data["queries"])
    assert data["meta"]["mutationCount"] == len(data["mutations"])
    assert data["meta"]["typeCount"] == len(data["types"])
