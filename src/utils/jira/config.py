import os
import logging
from dataclasses import dataclass

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.atlassian.com"
DEFAULT_STORY_POINTS_FIELD = "customfield_10016"
JIRA_TYPES = ("cloud", "server")


@dataclass(frozen=True)
class JiraSettings:
    """Runtime settings for the Jira gateway, resolved from the environment."""

    base_url: str = DEFAULT_BASE_URL
    jira_type: str = "cloud"
    request_timeout: float = 30.0
    story_points_field: str = DEFAULT_STORY_POINTS_FIELD
    cache_ttl_seconds: float = 600.0
    cache_max_entries: int = 100
    server_name: str = "jira-mcp"
    server_version: str = "0.4.0"

    @property
    def is_server(self) -> bool:
        return self.jira_type == "server"


def _number_from_env(name, default, cast=float):
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw)
    except ValueError:
        raise ValueError(f"Invalid value for {name}: {raw!r}")


def load_settings(dotenv: bool = True) -> JiraSettings:
    """
    Build settings from a .env file (if present) and the process environment.

    Args:
        dotenv (bool): Whether to load a .env file before reading the environment.

    Returns:
        JiraSettings: The resolved settings.
    """
    if dotenv:
        load_dotenv()

    jira_type = os.environ.get("JIRA_TYPE", "cloud").strip().lower() or "cloud"
    if jira_type not in JIRA_TYPES:
        raise ValueError(
            f"Invalid JIRA_TYPE: {jira_type!r}. Expected one of {', '.join(JIRA_TYPES)}"
        )

    settings = JiraSettings(
        base_url=os.environ.get("JIRA_BASE_URL", DEFAULT_BASE_URL).rstrip("/"),
        jira_type=jira_type,
        request_timeout=_number_from_env("JIRA_REQUEST_TIMEOUT", 30.0),
        story_points_field=os.environ.get(
            "JIRA_STORY_POINTS_FIELD", DEFAULT_STORY_POINTS_FIELD
        ),
        cache_ttl_seconds=_number_from_env("JIRA_BULK_CACHE_TTL_SECONDS", 600.0),
        cache_max_entries=_number_from_env("JIRA_BULK_CACHE_MAX_ENTRIES", 100, int),
        server_name=os.environ.get("MCP_SERVER_NAME", "jira-mcp"),
        server_version=os.environ.get("MCP_SERVER_VERSION", "0.4.0"),
    )
    logger.debug(f"Loaded Jira settings: {settings}")
    return settings
