# AGPL-3.0 License

"""
GitHub and GitHub Enterprise implementation of ScmClient.
"""

import base64
import binascii
from typing import List, Optional
from urllib.parse import quote
from uuid import UUID

import requests

from tree_config.errors import NotFoundError, TransportError
from tree_config.scm_clients.scm_client import ScmClient

GITHUB_API_URL = "https://api.github.com"
PER_PAGE = 100


def _api_url(server: str) -> str:
    # Enterprise servers expose the REST API under /api/v3
    if not server:
        return GITHUB_API_URL
    server = server.rstrip("/")
    if not server.endswith("/api/v3"):
        server += "/api/v3"
    return server


class GitHubClient(ScmClient):
    """ScmClient backed by the GitHub REST API, authenticated with a token."""

    supports_fork_compare = True

    def __init__(
        self,
        request_id: UUID,
        server: str,
        token: str,
        namespace: str,
        name: str,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None
    ):
        super().__init__(request_id, namespace, name, session=session, timeout=timeout)
        self.api_url = _api_url(server)
        self.session.headers.update({
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
        })

    @property
    def repo_url(self) -> str:
        return f"{self.api_url}/repos/{quote(self.namespace)}/{quote(self.name)}"

    def changed_files_in_diff(self, before: str, after: str) -> List[str]:
        # Branch names may contain "/", fork refs read "owner:branch"
        spec = f"{quote(before, safe='/:~^')}...{quote(after, safe='/:~^')}"
        changed_files = []
        for page in self._paginate(f"{self.repo_url}/compare/{spec}", params={"per_page": PER_PAGE}):
            changed_files.extend(f["filename"] for f in page.get("files") or [])
        return changed_files

    def changed_files_in_pull_request(self, pr_id: int) -> List[str]:
        changed_files = []
        for page in self._paginate(f"{self.repo_url}/pulls/{pr_id}/files", params={"per_page": PER_PAGE}):
            changed_files.extend(f["filename"] for f in page)
        return changed_files

    def get_file_contents(self, path: str, ref: str) -> str:
        url = f"{self.repo_url}/contents/{quote(path.lstrip('/'))}"
        data = self._json(self._get(url, params={"ref": ref}), url)

        # Directories come back as a listing
        if not isinstance(data, dict) or data.get("type") != "file":
            raise NotFoundError(f"{path} is not a file at {ref}")

        if data.get("encoding") != "base64":
            raise TransportError(f"unsupported encoding {data.get('encoding')!r} for {path}")
        try:
            return base64.b64decode(data.get("content", "")).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as e:
            raise TransportError(f"unable to decode {path} at {ref}: {e}") from e

    def _next_page(self, response: requests.Response, data) -> Optional[str]:
        return response.links.get("next", {}).get("url")
