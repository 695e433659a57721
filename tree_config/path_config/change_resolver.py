"""
Change-set resolution: which files did a build event touch?
"""

import re
from typing import List, Optional

from tree_config.errors import InvalidRefError, TransportError
from tree_config.log import get_logger
from tree_config.path_config.request_context import Request

CRON_TRIGGER = "@cron"
ZERO_COMMIT = "0" * 40

# GitHub uses refs/pull/<id>/head, Bitbucket refs/pull-requests/<id>/from
PULL_REQUEST_PREFIXES = ("refs/pull/", "refs/pull-requests/")
PULL_REQUEST_REF = re.compile(r"^refs/pull(?:-requests)?/(\d+)(?:/|$)")


def parse_pull_request_id(ref: str) -> Optional[int]:
    """
    Extract the pull request number from a ref.

    Returns:
        The number, or None when the ref is not a pull request ref

    Raises:
        InvalidRefError: The ref has a pull request prefix but no number
    """
    if not ref.startswith(PULL_REQUEST_PREFIXES):
        return None

    match = PULL_REQUEST_REF.match(ref)
    if not match:
        raise InvalidRefError(f"unable to get pull request id from {ref}")
    return int(match.group(1))


class ChangeSetResolver:
    """
    Decides how to compute the changed files of a build and computes them.

    Strategies, first match wins:
    1. Cron builds: nothing is known, None is returned (scan from the root)
    2. Pull request refs: the pull request's file list
    3. Everything else: the diff between the build's before and after commits
    """

    def __init__(self, request: Request):
        self.request = request
        self.logger = get_logger()

    def resolve(self) -> Optional[List[str]]:
        """
        Compute the changed-file set.

        Returns:
            None for cron builds, otherwise the changed paths (possibly empty)

        Raises:
            InvalidRefError: Malformed pull request ref
            TransportError: The SCM provider could not produce the list
        """
        req = self.request

        if req.build.trigger == CRON_TRIGGER:
            self.logger.info(f"{req.uuid} @cron, rebuilding all")
            return None

        try:
            pr_id = parse_pull_request_id(req.build.ref)
        except InvalidRefError as e:
            self.logger.error(f"{req.uuid} {e}")
            raise

        try:
            if pr_id is not None:
                changed_files = req.client.changed_files_in_pull_request(pr_id)
            else:
                changed_files = self._diff()
        except TransportError as e:
            self.logger.error(f"{req.uuid} unable to fetch diff: {e}")
            raise

        if changed_files:
            changed_list = "\n  ".join(changed_files)
            self.logger.debug(f"{req.uuid} changed files: \n  {changed_list}")
        else:
            self.logger.info(f"{req.uuid} no changed files")
        return changed_files

    def _diff(self) -> List[str]:
        req = self.request
        before, after = req.build.before, req.build.after

        # Drone sets fork to the repository itself for non-fork builds
        is_fork = bool(req.build.fork) and req.build.fork != req.repo.slug
        if is_fork and req.client.supports_fork_compare:
            # Compare the base branch with the fork's source branch
            fork_owner = req.build.fork.split("/", 1)[0]
            before = f"{req.repo.namespace}:{req.repo.branch}"
            after = f"{fork_owner}:{req.build.source}"
        elif not before or before == ZERO_COMMIT:
            # First push of a branch has no before commit
            before = f"{after}~1"

        self.logger.debug(f"{req.uuid} comparing {before} to {after}")
        return req.client.changed_files_in_diff(before, after)
