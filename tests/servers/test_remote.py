from starlette.testclient import TestClient

from src.servers.remote import (
    create_metrics_app,
    create_starlette_app,
    parse_session_key,
)


def make_app():
    return create_starlette_app(
        "jira",
        server_factory=lambda user_id, api_key=None: None,
        get_init_options=lambda server_instance: None,
    )


def test_parse_session_key():
    assert parse_session_key("local") == ("local", None)
    assert parse_session_key("local:") == ("local", None)
    assert parse_session_key("user-1%3Atoken") == ("user-1", "token")
    assert parse_session_key("user-1%3Ame%40example.com%3Asecret") == (
        "user-1",
        "me@example.com:secret",
    )


def test_root_and_health_check():
    client = TestClient(make_app())

    root = client.get("/")
    health = client.get("/health_check")

    assert root.status_code == 200
    assert root.json()["servers"] == ["jira"]
    assert health.json() == {
        "status": "ok",
        "servers": ["jira"],
        "activeSessions": 0,
    }


def test_message_for_unknown_session():
    client = TestClient(make_app())

    response = client.post("/jira/nobody/messages/", json={"jsonrpc": "2.0"})

    assert response.status_code == 404


def test_metrics_endpoint():
    client = TestClient(create_metrics_app())

    response = client.get("/metrics")

    assert response.status_code == 200
    assert "jira_mcp_connection_total" in response.text
