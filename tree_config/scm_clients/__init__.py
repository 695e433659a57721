# AGPL-3.0 License

"""
SCM provider clients and the rule that picks one per request.
"""

from uuid import UUID

from tree_config.config_loader import get_settings
from tree_config.errors import ConfigurationError
from tree_config.log import get_logger
from tree_config.scm_clients.bitbucket_client import BitbucketClient
from tree_config.scm_clients.github_client import GitHubClient
from tree_config.scm_clients.scm_client import ScmClient

__all__ = [
    'BitbucketClient',
    'GitHubClient',
    'ScmClient',
    'get_scm_client',
]


def get_scm_client(request_id: UUID, namespace: str, name: str) -> ScmClient:
    """
    Create the client for whichever provider has credentials configured.

    A GitHub token wins over Bitbucket credentials.

    Raises:
        ConfigurationError: No credentials are configured, or Bitbucket is
            configured without its API or auth server
    """
    settings = get_settings()

    github_token = settings.get("github.token", "")
    if github_token:
        return GitHubClient(
            request_id,
            server=settings.get("github.server", ""),
            token=github_token,
            namespace=namespace,
            name=name,
        )

    bitbucket_client = settings.get("bitbucket.client", "")
    if bitbucket_client:
        auth_server = settings.get("bitbucket.auth_server", "")
        server = settings.get("bitbucket.server", "")
        if not auth_server or not server:
            get_logger().error(f"{request_id} bitbucket needs both an api server and an auth server")
            raise ConfigurationError("bitbucket requires bitbucket.server and bitbucket.auth_server")
        return BitbucketClient(
            request_id,
            auth_server=auth_server,
            server=server,
            client_id=bitbucket_client,
            client_secret=settings.get("bitbucket.secret", ""),
            namespace=namespace,
            name=name,
        )

    get_logger().error(f"{request_id} unable to connect to SCM server")
    raise ConfigurationError("no SCM credentials specified")
