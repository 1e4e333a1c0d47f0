"""Tests for catalog loading from files and MCP tool listings."""
import json
import pytest
import yaml
from mcp import types
from src.toolfilter.catalog import load_catalog, server_from_mcp_tools
from src.toolfilter.errors import InvalidInputError
from tests.utils import make_servers


class TestLoadCatalog:
    def test_json_list(self, tmp_path):
        path = tmp_path / "servers.json"
        path.write_text(json.dumps(make_servers()))
        servers = load_catalog(path)
        assert len(servers) == 1
        assert [t.name for t in servers[0].tools] == ["email_search", "calendar_list", "web_search"]
        assert servers[0].tools[2].parameter_names() == ["query"]

    def test_yaml_mapping_with_servers_key(self, tmp_path):
        path = tmp_path / "servers.yaml"
        path.write_text(yaml.dump({"servers": make_servers()}))
        servers = load_catalog(path)
        assert servers[0].id == "test-server"
        assert servers[0].description == "A test MCP server"

    def test_missing_file(self, tmp_path):
        with pytest.raises(InvalidInputError):
            load_catalog(tmp_path / "missing.json")

    def test_malformed_json(self, tmp_path):
        path = tmp_path / "servers.json"
        path.write_text("{not json")
        with pytest.raises(InvalidInputError):
            load_catalog(path)

    def test_wrong_shape(self, tmp_path):
        path = tmp_path / "servers.yaml"
        path.write_text("servers: 3\n")
        with pytest.raises(InvalidInputError):
            load_catalog(path)

    def test_missing_required_field(self, tmp_path):
        path = tmp_path / "servers.yaml"
        path.write_text(yaml.dump([{"id": "s", "name": "S", "tools": [{"description": "no name"}]}]))
        with pytest.raises(InvalidInputError):
            load_catalog(path)


class TestServerFromMcpTools:
    def test_converts_tools(self):
        tools = [
            types.Tool(
                name="search_repositories",
                description="Search GitHub repositories",
                inputSchema={"type": "object", "properties": {"query": {"type": "string"}}},
            ),
        ]
        server = server_from_mcp_tools("github", tools, description="GitHub API")
        assert server.id == "github"
        assert server.name == "github"
        assert server.description == "GitHub API"
        assert server.tools[0].name == "search_repositories"
        assert server.tools[0].parameter_names() == ["query"]

    def test_tool_without_description_rejected(self):
        tools = [types.Tool(name="mystery", inputSchema={"type": "object"})]
        with pytest.raises(InvalidInputError):
            server_from_mcp_tools("srv", tools)
