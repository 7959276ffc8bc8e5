import pytest

from core.events import DoneEvent, ErrorEvent, collect
from fakes import failed, ok_json
from tools import search_repositories as search_tool

SEARCH = ("POST", "rest/search/latest/search")


def _repo(slug, project_key="PLAT"):
    return {
        "id": len(slug),
        "name": slug.title(),
        "slug": slug,
        "public": False,
        "archived": False,
        "project": {"key": project_key, "id": 1, "name": project_key.title(), "public": False, "type": "NORMAL"},
        "scmId": "git",
        "state": "AVAILABLE",
        "statusMessage": "Available",
        "forkable": True,
    }


@pytest.mark.asyncio
async def test_search_posts_repository_entity(make_context):
    repos = [_repo("auth-service"), _repo("auth-lib", "LIB")]
    context, client = make_context({SEARCH: ok_json({"repositories": {"values": repos, "count": 17}})})

    lines, terminal = await collect(search_tool.run(query="auth", limit=10, context=context))

    assert lines == ['Searching for repositories matching "auth"...']
    assert terminal == DoneEvent(result={"repositories": repos, "totalCount": 17})

    call = client.calls[0]
    assert call["method"] == "POST"
    assert call["params"] == {"avatarSize": 64}
    assert call["json"] == {"query": "auth", "entities": {"repositories": {}}, "limits": {"primary": 10}}


@pytest.mark.asyncio
async def test_default_limit_is_30(make_context):
    context, client = make_context({SEARCH: ok_json({"repositories": {"values": [], "count": 0}})})

    await collect(search_tool.run(query="x", context=context))

    assert client.calls[0]["json"]["limits"] == {"primary": 30}


@pytest.mark.asyncio
async def test_missing_repositories_section_is_empty_success(make_context):
    context, _ = make_context({SEARCH: ok_json({"scope": {"type": "GLOBAL"}, "query": {"substituted": False}})})

    _, terminal = await collect(search_tool.run(query="nothing", context=context))

    assert terminal == DoneEvent(result={"repositories": [], "totalCount": 0})


@pytest.mark.asyncio
async def test_ok_without_data_is_an_error(make_context):
    context, _ = make_context({SEARCH: ok_json(None)})

    _, terminal = await collect(search_tool.run(query="x", context=context))

    assert terminal == ErrorEvent(
        message="Error searching Bitbucket repositories: No data returned from Bitbucket repository search"
    )


@pytest.mark.asyncio
async def test_http_failure_includes_status_and_body(make_context):
    context, _ = make_context({SEARCH: failed(400, "Bad Request", text="x" * 300)})

    _, terminal = await collect(search_tool.run(query="x", context=context))

    assert isinstance(terminal, ErrorEvent)
    assert terminal.message.startswith(
        "Error searching Bitbucket repositories: Bitbucket repository search failed: 400 Bad Request - "
    )
    assert terminal.message.endswith("x" * 100)
    assert "x" * 101 not in terminal.message


@pytest.mark.asyncio
async def test_blank_query_is_rejected_before_any_request(make_context):
    context, client = make_context()

    events = [e async for e in search_tool.run(query="   ", context=context)]

    assert events == [ErrorEvent(message="query must be non-empty")]
    assert client.calls == []


@pytest.mark.asyncio
async def test_registered_tool(dummy_mcp, make_context):
    context, _ = make_context({SEARCH: ok_json({"repositories": {"values": [_repo("web")], "count": 1}})})
    search_tool.register(dummy_mcp, context=context)

    out = await dummy_mcp.tools["search_repositories"](query="web")

    assert out["totalCount"] == 1
    assert out["repositories"][0]["slug"] == "web"


@pytest.mark.asyncio
async def test_empty_object_body_is_empty_success(make_context):
    context, _ = make_context({SEARCH: ok_json({})})

    _, terminal = await collect(search_tool.run(query="x", context=context))

    assert terminal == DoneEvent(result={"repositories": [], "totalCount": 0})
