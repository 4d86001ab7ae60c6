import base64
import binascii
import logging
from typing import Dict, List, Any, Optional

import requests

from src.auth.factory import create_auth_client

# Atlassian endpoints used when the token is an OAuth (3LO) access token
JIRA_ACCESSIBLE_RESOURCES_URL = (
    "https://api.atlassian.com/oauth/token/accessible-resources"
)
JIRA_EXTERNAL_BASE_URL = "https://api.atlassian.com/ex/jira"
JIRA_AGILE_API_PATH = "rest/agile/1.0"

STATUS_MESSAGES = {
    400: "Bad request. Please check the request parameters.",
    401: "Authentication failed. Please check your API credentials.",
    403: "Access denied. You don't have permission to perform this action.",
    404: "Resource not found. Please check the issue key or project key.",
    429: "Rate limit exceeded. Please try again later.",
    500: "Internal server error. Please try again later.",
}

logger = logging.getLogger(__name__)


class JiraApiError(Exception):
    """Raised when the Jira REST API answers with a non-success status."""

    def __init__(
        self, status_code: int, message: Optional[str] = None, details: Any = None
    ):
        self.status_code = status_code
        self.message = message
        self.details = details
        super().__init__(
            f"JIRA API Error: {message or STATUS_MESSAGES.get(status_code, 'Unknown error')} "
            f"(Status: {status_code})"
        )


async def get_credentials(
    user_id: str, service_name: str, api_key: Optional[str] = None
) -> str:
    """
    Get the raw Jira token for a user.

    An explicit api_key (e.g. the bearer token carried by a remote session)
    always wins over stored credentials.
    """
    if api_key:
        return api_key

    auth_client = create_auth_client()
    credentials = auth_client.get_user_credentials(service_name, user_id)

    if not credentials:
        raise ValueError(
            f"Credentials not found for user {user_id}. Set JIRA_BEARER_TOKEN, or "
            f"JIRA_USER_EMAIL and JIRA_API_TOKEN."
        )

    if isinstance(credentials, dict):
        if credentials.get("access_token"):
            return credentials["access_token"]
        if credentials.get("email") and credentials.get("api_token"):
            return f"{credentials['email']}:{credentials['api_token']}"
        raise ValueError(f"Unsupported credentials format for user {user_id}")

    return credentials


def _is_jwt_like(token: str) -> bool:
    parts = token.split(".")
    return len(parts) == 3 and all(parts)


def parse_credentials(token: str) -> Dict[str, Any]:
    """
    Work out how a Jira token has to be presented.

    - JWT-like tokens (three dot separated parts) are OAuth access tokens.
    - "email:api_token" pairs are sent as Basic auth.
    - base64 strings that decode to "email:api_token" are already Basic encoded.
    - Anything else is treated as a personal access token (Bearer).
    """
    if not token:
        raise ValueError("Empty Jira token")

    if _is_jwt_like(token):
        return {"scheme": "Bearer", "token": token, "is_oauth": True, "email": None}

    if ":" in token:
        email, _, secret = token.partition(":")
        encoded = base64.b64encode(f"{email}:{secret}".encode("utf-8")).decode("ascii")
        return {"scheme": "Basic", "token": encoded, "is_oauth": False, "email": email}

    try:
        decoded = base64.b64decode(token, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        decoded = ""

    if decoded.count(":") == 1:
        email = decoded.split(":")[0]
        return {"scheme": "Basic", "token": token, "is_oauth": False, "email": email}

    return {"scheme": "Bearer", "token": token, "is_oauth": False, "email": None}


def build_auth_headers(
    credentials: Dict[str, Any], write: bool = False
) -> Dict[str, str]:
    """Build request headers for parsed credentials."""
    headers = {
        "Authorization": f"{credentials['scheme']} {credentials['token']}",
        "Accept": "application/json",
        "Content-Type": "application/json",
    }
    if write:
        # Required to bypass XSRF protection
        headers["X-Atlassian-Token"] = "nocheck"
    return headers


def fetch_accessible_resources(
    headers: Dict[str, str], timeout: float = 30
) -> List[Dict[str, Any]]:
    """List the Atlassian Cloud sites an OAuth token has access to."""
    response = requests.get(
        JIRA_ACCESSIBLE_RESOURCES_URL, headers=headers, timeout=timeout
    )
    if response.status_code != 200:
        raise JiraApiError(
            response.status_code,
            f"Failed to fetch accessible resources: {response.reason}",
        )
    return response.json()


def select_site(
    resources: List[Dict[str, Any]],
    target_cloud_id: Optional[str] = None,
    target_site_name: Optional[str] = None,
    selected_site_index: Optional[int] = None,
) -> Dict[str, Any]:
    """Pick one site out of the accessible resources."""
    if not resources:
        raise ValueError("No accessible Atlassian sites found")

    if target_cloud_id:
        for site in resources:
            if site.get("id") == target_cloud_id:
                return site
        raise ValueError(
            f"Specified cloud ID '{target_cloud_id}' not found in accessible sites"
        )

    if target_site_name:
        for site in resources:
            if site.get("name", "").lower() == target_site_name.lower():
                return site
        available_site_names = [site.get("name", "") for site in resources]
        raise ValueError(
            f"Specified site name '{target_site_name}' not found in accessible sites. "
            f"Available: {', '.join(available_site_names)}"
        )

    if (
        selected_site_index is None
        or selected_site_index < 0
        or selected_site_index >= len(resources)
    ):
        selected_site_index = 0
    return resources[selected_site_index]


def build_api_url(base_url: str, endpoint: str, jira_type: str = "cloud") -> str:
    """REST API URL; Server installations only speak v2."""
    version = "2" if jira_type == "server" else "3"
    return f"{base_url.rstrip('/')}/rest/api/{version}/{endpoint.lstrip('/')}"


def build_agile_url(base_url: str, endpoint: str) -> str:
    return f"{base_url.rstrip('/')}/{JIRA_AGILE_API_PATH}/{endpoint.lstrip('/')}"


def build_external_base_url(cloud_id: str) -> str:
    return f"{JIRA_EXTERNAL_BASE_URL}/{cloud_id}"


def format_issue_description(description: str, jira_type: str = "cloud") -> Any:
    """Format a plain text description for the target Jira flavour.

    Cloud expects Atlassian Document Format (ADF), Server takes plain text.
    """
    if not description:
        return None

    if jira_type == "server":
        return description

    return {
        "type": "doc",
        "version": 1,
        "content": [
            {"type": "paragraph", "content": [{"type": "text", "text": description}]}
        ],
    }


def format_comment_body(body: str, jira_type: str = "cloud") -> Dict[str, Any]:
    """Format a plain text comment payload for the target Jira flavour."""
    if jira_type == "server":
        return {"body": body}
    return {"body": format_issue_description(body, jira_type)}


def adf_to_text(node: Any) -> str:
    """Flatten an ADF document (or plain string) to text."""
    if node is None:
        return ""
    if isinstance(node, str):
        return node
    if isinstance(node, list):
        return "".join(adf_to_text(child) for child in node)

    if node.get("type") == "text":
        return node.get("text", "")
    if node.get("type") == "hardBreak":
        return "\n"

    text = adf_to_text(node.get("content", []))
    if node.get("type") in ("paragraph", "heading", "listItem"):
        text += "\n"
    return text


def extract_error_message(error: Exception) -> str:
    """Turn any exception raised while talking to Jira into user-facing text."""
    if isinstance(error, JiraApiError):
        if error.message:
            return str(error)
        return STATUS_MESSAGES.get(
            error.status_code, f"Request failed with status {error.status_code}"
        )

    if isinstance(error, requests.exceptions.Timeout):
        return "Request timeout. Please try again."
    if isinstance(error, requests.exceptions.ConnectionError):
        return "Connection refused. Please check if the service is running."
    if isinstance(error, requests.exceptions.HTTPError) and error.response is not None:
        return STATUS_MESSAGES.get(error.response.status_code, str(error))

    return str(error) or "An unexpected error occurred"
