"""
Registry client for the image-registry v2 HTTP API.

Only the two read endpoints the copier needs are implemented:
``/v2/_catalog`` and ``/v2/<name>/tags/list``. Neither retries nor follows
pagination links.
"""

import json
from typing import Any, Dict, List, Optional

import requests
from requests.auth import HTTPBasicAuth

from regcopy.config_manager import RegistryConfig
from regcopy.error_utils import (
    ErrorCategory,
    RegistryError,
    create_registry_error,
    create_registry_status_error,
)
from regcopy.logging_utils import get_logger

logger = get_logger(__name__)


class RegistryClient:
    """Read-only client for one registry"""

    def __init__(self, registry: RegistryConfig, timeout: Optional[float] = None,
                 session: Optional[requests.Session] = None):
        """Initialize RegistryClient.

        Args:
            registry: Registry URL and credentials
            timeout: Request timeout in seconds (None waits indefinitely)
            session: Optional pre-built session, mainly for tests
        """
        self.registry = registry
        self.timeout = timeout
        self.session = session or requests.Session()
        if registry.login:
            self.session.auth = HTTPBasicAuth(registry.login, registry.password)

    def list_repositories(self) -> List[str]:
        """List all repository names in the registry catalog."""
        payload = self._get_json("/v2/_catalog", "catalog")
        return self._string_list(payload, "repositories", "catalog")

    def list_tags(self, repository: str) -> List[str]:
        """List all tags of a repository."""
        payload = self._get_json(f"/v2/{repository}/tags/list", f"tags {repository}")
        return self._string_list(payload, "tags", f"tags {repository}")

    def _get_json(self, path: str, operation: str) -> Dict[str, Any]:
        url = f"{self.registry.base_url}{path}"
        logger.debug(f"GET {url}")

        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise create_registry_error(self.registry.host, operation, e)

        if response.status_code != 200:
            raise create_registry_status_error(self.registry.host, operation, response.status_code, response.reason)

        if response.headers.get("Link"):
            logger.warning(
                f"{operation}: registry {self.registry.host} paginates its response, only the first page is processed"
            )

        try:
            payload = json.loads(response.text)
        except ValueError as e:
            raise RegistryError(
                f"{operation}: registry {self.registry.host} returned malformed JSON",
                category=ErrorCategory.PROTOCOL,
                details={"error_message": str(e)},
            )

        if not isinstance(payload, dict):
            raise RegistryError(
                f"{operation}: registry {self.registry.host} returned {type(payload).__name__}, expected an object",
                category=ErrorCategory.PROTOCOL,
            )
        return payload

    def _string_list(self, payload: Dict[str, Any], field: str, operation: str) -> List[str]:
        # A repository without tags is reported as "tags": null
        values = payload.get(field)
        if values is None:
            return []
        if not isinstance(values, list) or not all(isinstance(v, str) for v in values):
            raise RegistryError(
                f"{operation}: field '{field}' from registry {self.registry.host} is not a list of strings",
                category=ErrorCategory.PROTOCOL,
                details={field: values},
            )
        return values

    def close(self) -> None:
        self.session.close()
