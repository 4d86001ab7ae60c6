import os
import json
from pathlib import Path
from typing import Dict, Any, Optional, Union

from .BaseAuthClient import BaseAuthClient, CredentialsT

import logging

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("LocalAuthClient")


class LocalAuthClient(BaseAuthClient[CredentialsT]):
    """
    Reads/writes credentials as JSON files under
    ``<credentials_base_dir>/<service>/<user_id>_credentials.json``.

    A file holds either {"access_token": ...} or {"email": ..., "api_token": ...}.
    """

    def __init__(self, credentials_base_dir: Optional[str] = None):
        project_root = Path(__file__).parent.parent.parent.parent

        self.credentials_base_dir = credentials_base_dir or os.environ.get(
            "JIRA_MCP_CREDENTIALS_DIR",
            str(project_root / "local_auth" / "credentials"),
        )
        logger.info(f"Using credentials directory: {self.credentials_base_dir}")

    def _credentials_path(self, service_name: str, user_id: str) -> str:
        service_dir = os.path.join(self.credentials_base_dir, service_name)
        os.makedirs(service_dir, exist_ok=True)
        return os.path.join(service_dir, f"{user_id}_credentials.json")

    def get_user_credentials(
        self, service_name: str, user_id: str
    ) -> Optional[CredentialsT]:
        """Retrieve user credentials from local file"""
        creds_path = self._credentials_path(service_name, user_id)

        if not os.path.exists(creds_path):
            return None

        with open(creds_path, "r") as f:
            return json.load(f)

    def save_user_credentials(
        self,
        service_name: str,
        user_id: str,
        credentials: Union[CredentialsT, Dict[str, Any]],
    ) -> None:
        """Save user credentials to local file"""
        if isinstance(credentials, str):
            credentials = {"access_token": credentials}

        creds_path = self._credentials_path(service_name, user_id)
        with open(creds_path, "w") as f:
            json.dump(credentials, f)
        logger.info(f"Saved {service_name} credentials for user {user_id}")
