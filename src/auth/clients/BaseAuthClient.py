import abc
from typing import Optional, TypeVar, Generic

# Credentials are either a raw token string or a JSON-compatible dict
CredentialsT = TypeVar("CredentialsT")


class BaseAuthClient(Generic[CredentialsT], abc.ABC):
    """
    Abstract base class for the sources of Jira credentials.
    """

    @abc.abstractmethod
    def get_user_credentials(
        self, service_name: str, user_id: str
    ) -> Optional[CredentialsT]:
        """
        Retrieves user credentials for a service, ready to be turned into an
        Authorization header.

        Args:
            service_name: Name of the service (e.g., "jira")
            user_id: Identifier for the user

        Returns:
            Credentials if found, None otherwise
        """
        pass

    def save_user_credentials(
        self, service_name: str, user_id: str, credentials: CredentialsT
    ) -> None:
        """
        Persists user credentials for later sessions

        Args:
            service_name: Name of the service (e.g., "jira")
            user_id: Identifier for the user
            credentials: Credentials to save
        """
        raise NotImplementedError(
            "This method is optional and not implemented by this client"
        )
