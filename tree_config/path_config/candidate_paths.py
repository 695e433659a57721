"""
Candidate path enumeration for finding config files next to changed files.

Each changed file contributes one candidate per directory level, from the
directory holding the file up to the repository root.
"""

import posixpath
from typing import Iterable, List, Optional, Sequence, Set

from tree_config.log import get_logger

ROOT = "/"


def normalize_path(path: str) -> str:
    """
    Turn a repository path into an absolute, root-relative POSIX path.

    >>> normalize_path("src/app/main.go")
    '/src/app/main.go'
    """
    return posixpath.normpath(ROOT + path.lstrip("/"))


class CandidatePathEnumerator:
    """
    Enumerates the paths where a config file may live for a set of changed files.

    Output order is stable: changed files in the order given, and for each file
    its directories from the deepest one up to the root. A path is emitted once
    per enumeration even when several changed files share the directory.
    """

    def __init__(self, config_file: str, considered: Optional[Sequence[str]] = None):
        """
        Args:
            config_file: Config file name (or relative path) looked up in each directory
            considered: Optional list of absolute config paths; when given, only
                these paths are ever emitted
        """
        self.config_file = config_file.lstrip("/")
        self.considered = [normalize_path(p) for p in considered] if considered is not None else None
        self._considered_set: Optional[Set[str]] = set(self.considered) if self.considered is not None else None
        self.logger = get_logger()

    def enumerate(self, changed_files: Iterable[str]) -> List[str]:
        """
        Build the ordered, duplicate-free candidate list.

        Args:
            changed_files: Changed file paths, relative to the repository root

        Returns:
            Candidate config paths, each starting with "/"
        """
        seen: Set[str] = set()
        candidates: List[str] = []

        for file_path in changed_files:
            for candidate in self._walk_up_from_file(file_path):
                if candidate in seen:
                    continue
                seen.add(candidate)
                if self._is_considered(candidate):
                    candidates.append(candidate)

        return candidates

    def root_candidates(self) -> List[str]:
        """
        Candidates for a build with no known changes.

        Every considered path when a consider list is set, the root config
        file otherwise.
        """
        if self.considered is not None:
            return list(dict.fromkeys(self.considered))
        return [posixpath.join(ROOT, self.config_file)]

    def _walk_up_from_file(self, file_path: str) -> Iterable[str]:
        current_dir = posixpath.dirname(normalize_path(file_path))
        while True:
            yield posixpath.join(current_dir, self.config_file)
            if current_dir == ROOT:
                break
            current_dir = posixpath.dirname(current_dir)

    def _is_considered(self, candidate: str) -> bool:
        if self._considered_set is None:
            return True
        if candidate not in self._considered_set:
            self.logger.debug(f"Skipping {candidate}, not listed in the consider file")
            return False
        return True
