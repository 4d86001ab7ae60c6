import os
import logging
from typing import Optional

from .BaseAuthClient import BaseAuthClient

logger = logging.getLogger("EnvAuthClient")


class EnvAuthClient(BaseAuthClient[str]):
    """
    Reads Jira credentials from environment variables.

    JIRA_BEARER_TOKEN wins; otherwise JIRA_USER_EMAIL and JIRA_API_TOKEN are
    combined into an "email:token" pair for Basic auth. The same credentials
    are returned for every user id.
    """

    def get_user_credentials(self, service_name: str, user_id: str) -> Optional[str]:
        bearer_token = os.environ.get("JIRA_BEARER_TOKEN")
        if bearer_token:
            return bearer_token

        email = os.environ.get("JIRA_USER_EMAIL")
        api_token = os.environ.get("JIRA_API_TOKEN")
        if email and api_token:
            return f"{email}:{api_token}"

        logger.warning(f"No {service_name} credentials found in the environment")
        return None
