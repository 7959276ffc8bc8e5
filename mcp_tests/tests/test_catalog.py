from tools.catalog import TOOL_SPECS, register_all, specs_by_name


def test_catalog_lists_every_tool_once():
    names = [spec.name for spec in TOOL_SPECS]

    assert names == ["list_projects", "search_repositories", "code_search", "bitbucket_read", "bitbucket_glob"]


def test_specs_are_builtin_with_schemas():
    specs = specs_by_name()

    for spec in TOOL_SPECS:
        d = spec.to_dict()
        assert d["source"] == "builtin"
        assert d["description"]
        assert d["inputSchema"]["type"] == "object"

    assert specs["list_projects"].input_schema["required"] == []
    assert specs["search_repositories"].input_schema["required"] == ["query"]
    assert specs["code_search"].input_schema["required"] == ["query"]
    assert specs["bitbucket_read"].input_schema["required"] == ["project", "repository", "path"]
    assert specs["bitbucket_glob"].input_schema["required"] == ["project", "repository", "filePattern"]
    assert specs["list_projects"].input_schema["properties"]["limit"]["maximum"] == 100


def test_register_all_registers_every_tool(dummy_mcp, make_context):
    context, _ = make_context()

    register_all(dummy_mcp, context=context)

    assert sorted(dummy_mcp.tools) == sorted(spec.name for spec in TOOL_SPECS)
    for spec in TOOL_SPECS:
        assert dummy_mcp.descriptions[spec.name] == spec.description
