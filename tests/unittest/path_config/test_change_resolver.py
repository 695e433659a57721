"""
Unit tests for ChangeSetResolver.
"""

import pytest

from tree_config.errors import InvalidRefError, NotFoundError, TransportError
from tree_config.path_config.change_resolver import ChangeSetResolver, ZERO_COMMIT, parse_pull_request_id


class TestParsePullRequestId:

    @pytest.mark.parametrize("ref, expected", [
        ("refs/pull/42/head", 42),
        ("refs/pull/7/merge", 7),
        ("refs/pull-requests/13/from", 13),
        ("refs/heads/main", None),
        ("refs/tags/v1.0.0", None),
    ])
    def test_parse(self, ref, expected):
        assert parse_pull_request_id(ref) == expected

    @pytest.mark.parametrize("ref", ["refs/pull/abc/head", "refs/pull//head", "refs/pull-requests/x/from"])
    def test_malformed_pull_request_ref(self, ref):
        with pytest.raises(InvalidRefError):
            parse_pull_request_id(ref)


class TestChangeSetResolver:
    """Test suite for ChangeSetResolver."""

    def test_cron_returns_unknown(self, make_client, make_request):
        client = make_client(diff=["a.go"])
        req = make_request(client, trigger="@cron")

        assert ChangeSetResolver(req).resolve() is None
        assert client.diff_calls == []
        assert client.pull_request_calls == []

    def test_pull_request_uses_pull_request_files(self, make_client, make_request):
        client = make_client(pull_request_files=["src/a.go", "docs/b.md"])
        req = make_request(client, ref="refs/pull/42/head")

        assert ChangeSetResolver(req).resolve() == ["src/a.go", "docs/b.md"]
        assert client.pull_request_calls == [42]
        assert client.diff_calls == []

    def test_malformed_pull_request_ref_does_not_fall_back_to_diff(self, make_client, make_request):
        client = make_client(diff=["a.go"])
        req = make_request(client, ref="refs/pull/abc/head")

        with pytest.raises(InvalidRefError):
            ChangeSetResolver(req).resolve()
        assert client.diff_calls == []

    def test_push_uses_diff(self, make_client, make_request):
        client = make_client(diff=["a/b/app.go"])
        req = make_request(client, before="abc", after="def")

        assert ChangeSetResolver(req).resolve() == ["a/b/app.go"]
        assert client.diff_calls == [("abc", "def")]

    @pytest.mark.parametrize("before", [ZERO_COMMIT, ""])
    def test_first_push_diffs_against_parent(self, make_client, make_request, before):
        client = make_client(diff=["a.go"])
        req = make_request(client, before=before, after="def")

        ChangeSetResolver(req).resolve()

        assert client.diff_calls == [("def~1", "def")]

    def test_fork_build_compares_branches(self, make_client, make_request):
        client = make_client(diff=["a.go"], supports_fork_compare=True)
        req = make_request(client, branch="main", fork="contributor/repo", source="feature")

        ChangeSetResolver(req).resolve()

        assert client.diff_calls == [("octo:main", "contributor:feature")]

    def test_fork_equal_to_repository_is_not_a_fork(self, make_client, make_request):
        client = make_client(diff=["a.go"], supports_fork_compare=True)
        req = make_request(client, before="abc", after="def", fork="octo/repo", source="main")

        ChangeSetResolver(req).resolve()

        assert client.diff_calls == [("abc", "def")]

    def test_fork_equal_to_repository_first_push(self, make_client, make_request):
        client = make_client(diff=["a.go"], supports_fork_compare=True)
        req = make_request(client, before=ZERO_COMMIT, after="def", fork="octo/repo", source="main")

        ChangeSetResolver(req).resolve()

        assert client.diff_calls == [("def~1", "def")]

    def test_fork_ignored_when_provider_cannot_compare_forks(self, make_client, make_request):
        client = make_client(diff=["a.go"])
        req = make_request(client, before="abc", after="def", fork="contributor/repo", source="feature")

        ChangeSetResolver(req).resolve()

        assert client.diff_calls == [("abc", "def")]

    def test_empty_diff_is_not_unknown(self, make_client, make_request):
        client = make_client(diff=[])
        req = make_request(client)

        assert ChangeSetResolver(req).resolve() == []

    @pytest.mark.parametrize("error", [TransportError("boom"), NotFoundError("unknown commit")])
    def test_diff_errors_propagate(self, make_client, make_request, error):
        client = make_client(diff=error)
        req = make_request(client)

        with pytest.raises(TransportError):
            ChangeSetResolver(req).resolve()

    def test_pull_request_errors_propagate(self, make_client, make_request):
        client = make_client(pull_request_files=TransportError("boom"))
        req = make_request(client, ref="refs/pull/1/head")

        with pytest.raises(TransportError):
            ChangeSetResolver(req).resolve()
