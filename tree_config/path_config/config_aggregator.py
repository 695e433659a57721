"""
Config aggregation: fetch candidate config files and combine what exists.

Combining is textual. Fragments are either returned one at a time (first
match) or joined as a YAML multi-document stream with an origin comment on
each document.
"""

from dataclasses import dataclass
from typing import Iterable, List, Sequence

from tree_config.errors import NoConfigFoundError, NotFoundError, TransportError
from tree_config.log import get_logger
from tree_config.scm_clients.scm_client import ScmClient

ORIGIN_HEADER = "# .drone.yml origin: {path}\n"
DOCUMENT_SEPARATOR = "\n---\n"


@dataclass(frozen=True)
class ConfigFragment:
    """Content of a config file found at one candidate path."""
    path: str
    content: str


def combine_fragments(fragments: Sequence[ConfigFragment], concat: bool) -> str:
    """
    Turn found fragments into the final configuration text.

    Args:
        fragments: Fragments in discovery order, at least one
        concat: Join every fragment instead of shipping only the first

    Returns:
        The first fragment verbatim when not concatenating or when only one was
        found, otherwise all fragments as a multi-document stream
    """
    if not concat or len(fragments) == 1:
        return fragments[0].content

    documents = [
        ORIGIN_HEADER.format(path=fragment.path) + fragment.content + "\n"
        for fragment in fragments
    ]
    return DOCUMENT_SEPARATOR.join(documents)


class ConfigAggregator:
    """
    Fetches candidate config files through an SCM client and combines them.

    A candidate that cannot be fetched, for any reason, is skipped so that
    one missing file or provider hiccup never aborts the resolution.
    """

    def __init__(self, client: ScmClient, concat: bool = False):
        """
        Args:
            client: Client bound to the repository being built
            concat: Aggregate mode, ship every fragment instead of the first
        """
        self.client = client
        self.concat = concat
        self.logger = get_logger()

    def collect(self, candidates: Iterable[str], ref: str) -> List[ConfigFragment]:
        """
        Fetch every candidate at the given revision, keeping the ones that exist.

        Args:
            candidates: Candidate paths in discovery order
            ref: Revision to read the files at

        Returns:
            Found fragments, in candidate order
        """
        request_id = self.client.request_id
        fragments: List[ConfigFragment] = []

        for path in candidates:
            self.logger.debug(f"{request_id} checking {self.client.namespace}/{self.client.name} {path}")
            try:
                content = self.client.get_file_contents(path, ref)
            except NotFoundError:
                self.logger.info(f"{request_id} skipping {path}, not found")
                continue
            except TransportError as e:
                self.logger.warning(f"{request_id} skipping {path}, unable to load: {e}")
                continue

            self.logger.info(f"{request_id} found {self.client.namespace}/{self.client.name} {path}")
            fragments.append(ConfigFragment(path=path, content=content))

        return fragments

    def aggregate(self, candidates: Iterable[str], ref: str) -> str:
        """
        Fetch the candidates and build the final configuration.

        Raises:
            NoConfigFoundError: None of the candidates exists
        """
        fragments = self.collect(candidates, ref)
        if not fragments:
            raise NoConfigFoundError()

        if not self.concat:
            self.logger.info(f"{self.client.request_id} only shipping first match: {fragments[0].path}")
        return combine_fragments(fragments, self.concat)
