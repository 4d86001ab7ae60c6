import logging
import os
from typing import Optional, Type, TypeVar

from .clients.BaseAuthClient import BaseAuthClient

logger = logging.getLogger("auth-factory")

T = TypeVar("T", bound=BaseAuthClient)


def create_auth_client(client_type: Optional[Type[T]] = None) -> BaseAuthClient:
    """
    Factory function to create the appropriate auth client based on environment

    Args:
        client_type: Optional specific client class to instantiate

    Returns:
        An instance of the appropriate BaseAuthClient implementation
    """
    if client_type:
        return client_type()

    environment = os.environ.get("ENVIRONMENT", "env").lower()

    if environment == "local":
        from .clients.LocalAuthClient import LocalAuthClient

        return LocalAuthClient()

    # Default to credentials from environment variables
    from .clients.EnvAuthClient import EnvAuthClient

    return EnvAuthClient()
