# AGPL-3.0 License

"""
Abstract interface shared by every SCM provider client.
"""

from abc import ABC, abstractmethod
from typing import ClassVar, Iterator, List, Optional
from uuid import UUID

import requests

from tree_config.config_loader import get_settings
from tree_config.errors import NotFoundError, TransportError
from tree_config.log import get_logger


class ScmClient(ABC):
    """
    Read-only access to one repository on a hosting provider.

    A client is bound to a single repository for the duration of one
    resolution and owns its own authenticated HTTP session.
    """

    # Whether diffs can compare branches living in different repositories
    supports_fork_compare: ClassVar[bool] = False

    def __init__(
        self,
        request_id: UUID,
        namespace: str,
        name: str,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None
    ):
        """
        Args:
            request_id: Correlation id of the request the client serves
            namespace: Repository owner or workspace
            name: Repository name
            session: HTTP session to use (a new one is created when omitted)
            timeout: Seconds to wait for each call (defaults to config.request_timeout)
        """
        self.request_id = request_id
        self.namespace = namespace
        self.name = name
        self.session = session or requests.Session()
        if timeout is None:
            timeout = get_settings().get("config.request_timeout", 30)
        self.timeout = timeout
        self.logger = get_logger()

    @abstractmethod
    def changed_files_in_diff(self, before: str, after: str) -> List[str]:
        """
        List the files that differ between two revisions.

        Raises:
            NotFoundError: One of the revisions is unknown
            TransportError: The provider call failed
        """
        pass

    @abstractmethod
    def changed_files_in_pull_request(self, pr_id: int) -> List[str]:
        """
        List the files a pull request changes.

        Raises:
            TransportError: The provider call failed
        """
        pass

    @abstractmethod
    def get_file_contents(self, path: str, ref: str) -> str:
        """
        Read a file at a given revision.

        Raises:
            NotFoundError: The path does not exist at that revision
            TransportError: The provider call failed
        """
        pass

    def _get(self, url: str, **kwargs) -> requests.Response:
        """
        Issue a GET request, translating failures into TransportError.

        Raises:
            NotFoundError: The provider answered 404
            TransportError: Connection failure or any other non-2xx answer
        """
        try:
            response = self.session.get(url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise TransportError(f"GET {url} failed: {e}") from e

        if response.status_code == 404:
            raise NotFoundError(f"GET {url} returned 404")
        if not response.ok:
            raise TransportError(f"GET {url} returned {response.status_code}")
        return response

    def _json(self, response: requests.Response, url: str):
        """
        Decode a JSON answer.

        Raises:
            TransportError: The body is not valid JSON
        """
        try:
            return response.json()
        except ValueError as e:
            raise TransportError(f"GET {url} returned invalid JSON: {e}") from e

    def _paginate(self, url: str, **kwargs) -> Iterator:
        """Yield the decoded body of every page of a listing, following the provider's next links."""
        next_url: Optional[str] = url
        while next_url:
            response = self._get(next_url, **kwargs)
            data = self._json(response, next_url)
            yield data
            next_url = self._next_page(response, data)
            # Next links already carry the query string
            kwargs.pop("params", None)

    @abstractmethod
    def _next_page(self, response: requests.Response, data) -> Optional[str]:
        pass
