# AGPL-3.0 License

"""
Shared fixtures for the unit tests.
"""

from typing import Dict, List, Optional
from unittest.mock import Mock
from uuid import uuid4

import pytest

from tree_config.errors import NotFoundError
from tree_config.path_config import Build, Repo, Request
from tree_config.scm_clients.scm_client import ScmClient


class FakeScmClient(ScmClient):
    """In-memory ScmClient recording every call it receives."""

    def __init__(
        self,
        files: Optional[Dict[str, object]] = None,
        diff: Optional[List[str]] = None,
        pull_request_files: Optional[List[str]] = None,
        supports_fork_compare: bool = False
    ):
        super().__init__(uuid4(), "octo", "repo", session=Mock(), timeout=1)
        # Values are file contents, or exceptions to raise for that path
        self.files = files or {}
        self.diff = diff or []
        self.pull_request_files = pull_request_files or []
        self.supports_fork_compare = supports_fork_compare
        self.diff_calls = []
        self.pull_request_calls = []
        self.file_calls = []

    def changed_files_in_diff(self, before, after):
        self.diff_calls.append((before, after))
        if isinstance(self.diff, Exception):
            raise self.diff
        return list(self.diff)

    def changed_files_in_pull_request(self, pr_id):
        self.pull_request_calls.append(pr_id)
        if isinstance(self.pull_request_files, Exception):
            raise self.pull_request_files
        return list(self.pull_request_files)

    def get_file_contents(self, path, ref):
        self.file_calls.append((path, ref))
        content = self.files.get(path)
        if content is None:
            raise NotFoundError(f"{path} not found")
        if isinstance(content, Exception):
            raise content
        return content

    def _next_page(self, response, data):
        return None


@pytest.fixture
def make_client():
    """Build a FakeScmClient."""
    return FakeScmClient


@pytest.fixture
def make_request():
    """Build a Request around a client, with push-build defaults."""
    def _make_request(client, config="", branch="main", **build_fields):
        build = {
            "before": "1111111111111111111111111111111111111111",
            "after": "2222222222222222222222222222222222222222",
            "ref": "refs/heads/main",
        }
        build.update(build_fields)
        repo = Repo(namespace="octo", name="repo", config=config, branch=branch)
        return Request(repo=repo, build=Build(**build), client=client, uuid=client.request_id)
    return _make_request
