"""
Repository allow list: which repositories the extension answers for.
"""

import re
from pathlib import Path
from typing import List, Pattern

from tree_config.log import get_logger


class AllowList:
    """Regular expressions matched against "namespace/name" repository slugs."""

    def __init__(self, patterns: List[Pattern]):
        self.patterns = patterns

    @classmethod
    def from_lines(cls, lines: List[str]) -> "AllowList":
        patterns = []
        for line in lines:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            patterns.append(re.compile(line))
        return cls(patterns)

    @classmethod
    def from_file(cls, path: str) -> "AllowList":
        """
        Load an allow list, one regex per line. Blank lines and # comments are skipped.

        Raises:
            OSError: The file cannot be read
            re.error: A line is not a valid regular expression
        """
        allow_list = cls.from_lines(Path(path).read_text(encoding="utf-8").splitlines())
        get_logger().info(f"Loaded {len(allow_list.patterns)} allow list patterns from {path}")
        return allow_list

    def is_allowed(self, slug: str) -> bool:
        return any(pattern.fullmatch(slug) for pattern in self.patterns)
