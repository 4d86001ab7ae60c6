import pytest

from src.utils.jira.config import JiraSettings, load_settings

SETTINGS_ENV = [
    "JIRA_BASE_URL",
    "JIRA_TYPE",
    "JIRA_REQUEST_TIMEOUT",
    "JIRA_STORY_POINTS_FIELD",
    "JIRA_BULK_CACHE_TTL_SECONDS",
    "JIRA_BULK_CACHE_MAX_ENTRIES",
    "MCP_SERVER_NAME",
    "MCP_SERVER_VERSION",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in SETTINGS_ENV:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env):
    assert load_settings(dotenv=False) == JiraSettings()


def test_overrides(clean_env):
    clean_env.setenv("JIRA_BASE_URL", "https://jira.example.com/")
    clean_env.setenv("JIRA_TYPE", "Server")
    clean_env.setenv("JIRA_REQUEST_TIMEOUT", "5")
    clean_env.setenv("JIRA_STORY_POINTS_FIELD", "customfield_20000")
    clean_env.setenv("JIRA_BULK_CACHE_TTL_SECONDS", "60")
    clean_env.setenv("JIRA_BULK_CACHE_MAX_ENTRIES", "10")

    settings = load_settings(dotenv=False)

    assert settings.base_url == "https://jira.example.com"
    assert settings.is_server is True
    assert settings.request_timeout == 5.0
    assert settings.story_points_field == "customfield_20000"
    assert settings.cache_ttl_seconds == 60.0
    assert settings.cache_max_entries == 10


def test_invalid_jira_type(clean_env):
    clean_env.setenv("JIRA_TYPE", "datacenter")

    with pytest.raises(ValueError, match="Invalid JIRA_TYPE"):
        load_settings(dotenv=False)


def test_invalid_number(clean_env):
    clean_env.setenv("JIRA_BULK_CACHE_MAX_ENTRIES", "many")

    with pytest.raises(ValueError, match="JIRA_BULK_CACHE_MAX_ENTRIES"):
        load_settings(dotenv=False)
