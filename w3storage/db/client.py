"""
Database client interface.
"""

from abc import ABC, abstractmethod

from .models import AuthContext, ImportCarInput, Upload


class DBClient(ABC):
    """
    Abstract interface over the database holding users, content and uploads.

    Implementations delegate to a managed backend; the in-memory
    implementation is used for local development and tests.
    """

    @abstractmethod
    async def import_car(self, data: ImportCarInput) -> Upload:
        """
        Record an uploaded CAR.

        Creates or reuses the Content for ``data.cid``, creates or reuses the
        user's Upload of that content, and records every pin.

        Args:
            data: The import input

        Returns:
            The created or existing Upload, with its Content's current DAG
            size (None when not yet known)

        Raises:
            DBError: if the user does not exist or the backend fails

        """
        pass

    @abstractmethod
    async def update_content_dag_size(self, content_id: str, dag_size: int) -> None:
        """
        Set the DAG size of a Content.

        Args:
            content_id: The content's id
            dag_size: Total size of the content's DAG in bytes

        """
        pass

    @abstractmethod
    async def get_auth_context(self, secret: str) -> AuthContext | None:
        """
        Resolve an API token secret to its user.

        Args:
            secret: The bearer token presented by the caller

        Returns:
            The user and token, or None if the secret is unknown or revoked

        """
        pass
