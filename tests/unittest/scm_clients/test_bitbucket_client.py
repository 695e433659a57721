# AGPL-3.0 License

"""
Unit tests for BitbucketClient.
"""

from unittest.mock import Mock
from uuid import uuid4

import pytest
import requests

from tree_config.errors import NotFoundError, TransportError
from tree_config.scm_clients.bitbucket_client import BitbucketClient


def make_response(status_code=200, json_data=None, text=""):
    response = Mock(spec=requests.Response)
    response.status_code = status_code
    response.ok = status_code < 400
    response.json.return_value = json_data
    response.text = text
    return response


class TestBitbucketClient:
    """Test suite for BitbucketClient."""

    def setup_method(self):
        self.session = Mock()
        self.session.post.return_value = make_response(json_data={"access_token": "oauth-token"})
        self.client = BitbucketClient(
            uuid4(),
            auth_server="https://bitbucket.org",
            server="https://api.bitbucket.org/",
            client_id="client",
            client_secret="secret",
            namespace="team",
            name="repo",
            session=self.session,
            timeout=5,
        )

    def test_init(self):
        assert self.client.token_url == "https://bitbucket.org/site/oauth2/access_token"
        assert self.client.api_url == "https://api.bitbucket.org"
        assert self.client.supports_fork_compare is False

    def test_changed_files_in_diff(self):
        self.session.get.return_value = make_response(json_data={"values": [
            {"new": {"path": "a/app.go"}, "old": {"path": "a/app.go"}},
            {"new": None, "old": {"path": "removed.go"}},
        ]})

        files = self.client.changed_files_in_diff("abc", "def")

        assert files == ["a/app.go", "removed.go"]
        url = self.session.get.call_args.args[0]
        assert url == "https://api.bitbucket.org/2.0/repositories/team/repo/diffstat/def..abc"
        assert self.session.get.call_args.kwargs["headers"] == {"Authorization": "Bearer oauth-token"}

    def test_changed_files_in_pull_request_follows_pages(self):
        next_url = "https://api.bitbucket.org/2.0/repositories/team/repo/pullrequests/3/diffstat?page=2"
        self.session.get.side_effect = [
            make_response(json_data={"values": [{"new": {"path": "a.go"}}], "next": next_url}),
            make_response(json_data={"values": [{"new": {"path": "b.go"}}]}),
        ]

        files = self.client.changed_files_in_pull_request(3)

        assert files == ["a.go", "b.go"]
        assert self.session.get.call_args_list[1].args[0] == next_url

    def test_token_exchanged_once(self):
        self.session.get.return_value = make_response(text="kind: pipeline")

        self.client.get_file_contents("/.drone.yml", "def")
        self.client.get_file_contents("/a/.drone.yml", "def")

        self.session.post.assert_called_once()
        call = self.session.post.call_args
        assert call.args[0] == "https://bitbucket.org/site/oauth2/access_token"
        assert call.kwargs["auth"] == ("client", "secret")
        assert call.kwargs["data"] == {"grant_type": "client_credentials"}

    def test_token_exchange_failure(self):
        self.session.post.return_value = make_response(status_code=401)

        with pytest.raises(TransportError):
            self.client.get_file_contents("/.drone.yml", "def")
        self.session.get.assert_not_called()

    def test_token_exchange_invalid_json(self):
        response = make_response()
        response.json.side_effect = ValueError("Expecting value: line 1 column 1 (char 0)")
        self.session.post.return_value = response

        with pytest.raises(TransportError):
            self.client.get_file_contents("/.drone.yml", "def")

    def test_get_file_contents(self):
        self.session.get.return_value = make_response(text="kind: pipeline")

        assert self.client.get_file_contents("/a/.drone.yml", "def") == "kind: pipeline"
        url = self.session.get.call_args.args[0]
        assert url == "https://api.bitbucket.org/2.0/repositories/team/repo/src/def/a/.drone.yml"

    def test_get_file_contents_missing(self):
        self.session.get.return_value = make_response(status_code=404)

        with pytest.raises(NotFoundError):
            self.client.get_file_contents("/.drone.yml", "def")
