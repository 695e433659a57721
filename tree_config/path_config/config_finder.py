"""
Effective configuration lookup for a build event.

Ties together change-set resolution, candidate enumeration and aggregation.
"""

from typing import List, Optional

from tree_config.config_loader import get_settings
from tree_config.errors import NoConfigFoundError, NotFoundError, TransportError
from tree_config.log import get_logger
from tree_config.path_config.allow_list import AllowList
from tree_config.path_config.candidate_paths import CandidatePathEnumerator
from tree_config.path_config.change_resolver import ChangeSetResolver
from tree_config.path_config.config_aggregator import ConfigAggregator
from tree_config.path_config.request_context import Request


class ConfigFinder:
    """
    Finds the effective pipeline configuration for a build.

    Empty change sets: a cron build (changes unknown) tests the root config
    file, or every path of the consider file. A push or pull request that
    changed no file tests nothing, unless fallback is enabled, in which case
    it tests the root config file too.
    """

    def __init__(
        self,
        concat: Optional[bool] = None,
        fallback: Optional[bool] = None,
        consider_file: Optional[str] = None,
        allow_list: Optional[AllowList] = None
    ):
        """
        Args:
            concat: Ship every config found (defaults to config.concat)
            fallback: Test the root config when nothing changed (defaults to config.fallback)
            consider_file: Repository file listing the config paths worth testing
                (defaults to config.consider_file)
            allow_list: Repositories to answer for (defaults to config.allow_list_file,
                every repository when unset)
        """
        settings = get_settings()
        self.concat = settings.get("config.concat", False) if concat is None else concat
        self.fallback = settings.get("config.fallback", False) if fallback is None else fallback
        self.consider_file = settings.get("config.consider_file", "") if consider_file is None else consider_file
        if allow_list is None:
            allow_list_file = settings.get("config.allow_list_file", "")
            allow_list = AllowList.from_file(allow_list_file) if allow_list_file else None
        self.allow_list = allow_list
        self.logger = get_logger()

    def find(self, req: Request) -> Optional[str]:
        """
        Resolve the configuration for a build.

        Returns:
            The configuration text, or None when the repository is not on the
            allow list

        Raises:
            NoConfigFoundError: No candidate config file exists
            InvalidRefError: Malformed pull request ref
            TransportError: The changed files could not be listed
        """
        self.logger.info(f"{req.uuid} handling {req.repo.slug}: {req.build.before} to {req.build.after}")

        if self.allow_list is not None and not self.allow_list.is_allowed(req.repo.slug):
            self.logger.info(f"{req.uuid} {req.repo.slug} not on the allow list, skipping")
            return None

        changed_files = ChangeSetResolver(req).resolve()

        enumerator = CandidatePathEnumerator(req.config_file, considered=self._load_considered(req))
        if changed_files is None:
            candidates = enumerator.root_candidates()
        elif changed_files:
            candidates = enumerator.enumerate(changed_files)
        elif self.fallback:
            self.logger.info(f"{req.uuid} no changed files, falling back to the root config")
            candidates = enumerator.enumerate([""])
        else:
            candidates = []

        self.logger.debug(f"{req.uuid} testing {len(candidates)} candidate paths")
        aggregator = ConfigAggregator(req.client, concat=self.concat)
        try:
            return aggregator.aggregate(candidates, req.build.after)
        except NoConfigFoundError as e:
            self.logger.error(f"{req.uuid} {e}")
            raise

    def _load_considered(self, req: Request) -> Optional[List[str]]:
        """Read the consider file at the build's revision, None when unavailable."""
        if not self.consider_file:
            return None

        try:
            content = req.client.get_file_contents(self.consider_file, req.build.after)
        except NotFoundError:
            self.logger.info(f"{req.uuid} consider file {self.consider_file} not found, checking every directory")
            return None
        except TransportError as e:
            self.logger.warning(f"{req.uuid} unable to load consider file {self.consider_file}: {e}")
            return None

        considered = [
            line.strip() for line in content.splitlines()
            if line.strip() and not line.strip().startswith("#")
        ]
        self.logger.debug(f"{req.uuid} consider file lists {len(considered)} config files")
        return considered
