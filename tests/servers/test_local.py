import pytest

from src.servers.local import available_servers, load_server


def test_jira_server_is_available():
    assert available_servers() == ["jira"]


def test_load_server():
    server_factory, get_initialization_options = load_server("jira")

    server = server_factory(user_id="local")
    options = get_initialization_options(server)

    assert server.user_id == "local"
    assert options.server_name
    assert options.capabilities.tools is not None


def test_unknown_server():
    with pytest.raises(ValueError, match="Available: jira"):
        load_server("confluence")
