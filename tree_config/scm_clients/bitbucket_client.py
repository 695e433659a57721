# AGPL-3.0 License

"""
Bitbucket Cloud implementation of ScmClient.

Authentication uses an OAuth consumer (client id and secret) exchanged for an
access token with the client-credentials grant.
"""

from typing import List, Optional
from urllib.parse import quote
from uuid import UUID

import requests

from tree_config.errors import TransportError
from tree_config.scm_clients.scm_client import ScmClient


class BitbucketClient(ScmClient):
    """ScmClient backed by the Bitbucket Cloud 2.0 API."""

    def __init__(
        self,
        request_id: UUID,
        auth_server: str,
        server: str,
        client_id: str,
        client_secret: str,
        namespace: str,
        name: str,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None
    ):
        super().__init__(request_id, namespace, name, session=session, timeout=timeout)
        self.token_url = f"{auth_server.rstrip('/')}/site/oauth2/access_token"
        self.api_url = server.rstrip("/")
        self.client_id = client_id
        self.client_secret = client_secret
        self._access_token: Optional[str] = None

    @property
    def repo_url(self) -> str:
        return f"{self.api_url}/2.0/repositories/{quote(self.namespace)}/{quote(self.name)}"

    def changed_files_in_diff(self, before: str, after: str) -> List[str]:
        # Bitbucket specs read "<new>..<old>"
        spec = f"{quote(after, safe='~^')}..{quote(before, safe='~^')}"
        return self._diffstat_paths(f"{self.repo_url}/diffstat/{spec}")

    def changed_files_in_pull_request(self, pr_id: int) -> List[str]:
        return self._diffstat_paths(f"{self.repo_url}/pullrequests/{pr_id}/diffstat")

    def get_file_contents(self, path: str, ref: str) -> str:
        url = f"{self.repo_url}/src/{quote(ref, safe='~^')}/{quote(path.lstrip('/'))}"
        return self._get(url).text

    def _diffstat_paths(self, url: str) -> List[str]:
        changed_files = []
        for page in self._paginate(url):
            for entry in page.get("values", []):
                changed = entry.get("new") or entry.get("old")
                if changed:
                    changed_files.append(changed["path"])
        return changed_files

    def _get(self, url: str, **kwargs) -> requests.Response:
        headers = kwargs.pop("headers", {})
        headers["Authorization"] = f"Bearer {self._get_access_token()}"
        return super()._get(url, headers=headers, **kwargs)

    def _get_access_token(self) -> str:
        """Exchange the consumer credentials for an access token, once per client."""
        if self._access_token:
            return self._access_token

        self.logger.debug(f"{self.request_id} requesting bitbucket access token from {self.token_url}")
        try:
            response = self.session.post(
                self.token_url,
                auth=(self.client_id, self.client_secret),
                data={"grant_type": "client_credentials"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise TransportError(f"bitbucket token exchange failed: {e}") from e

        if not response.ok:
            raise TransportError(f"bitbucket token exchange returned {response.status_code}")

        token = self._json(response, self.token_url).get("access_token")
        if not token:
            raise TransportError("bitbucket token exchange returned no access token")
        self._access_token = token
        return token

    def _next_page(self, response: requests.Response, data) -> Optional[str]:
        return data.get("next")
