"""
Immutable inputs of one configuration resolution.
"""

from dataclasses import dataclass, field
from uuid import UUID, uuid4

from tree_config.config_loader import get_settings
from tree_config.scm_clients.scm_client import ScmClient


@dataclass(frozen=True)
class Repo:
    """Repository identity as Drone reports it."""
    namespace: str
    name: str
    config: str = ""  # Config path set on the repository, empty for the default
    branch: str = ""  # Default branch

    @property
    def slug(self) -> str:
        return f"{self.namespace}/{self.name}"


@dataclass(frozen=True)
class Build:
    """The build event that needs a configuration."""
    before: str
    after: str
    ref: str
    trigger: str = ""
    fork: str = ""  # "owner/repo" of the fork for pull requests from forks
    source: str = ""  # Source branch


@dataclass(frozen=True)
class Request:
    """
    Everything a resolution needs, created once per incoming build event.

    The bound client is owned by the request and never shared with another one.
    """
    repo: Repo
    build: Build
    client: ScmClient
    uuid: UUID = field(default_factory=uuid4)

    @property
    def config_file(self) -> str:
        """Config file name to look for in each directory."""
        return self.repo.config or get_settings().get("config.default_config_file", ".drone.yml")
