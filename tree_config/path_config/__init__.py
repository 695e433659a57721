"""
Config discovery for Drone builds.

Finds pipeline configuration files in the directories of the files a build
changed, walking from each file up to the repository root.
"""

from tree_config.path_config.allow_list import AllowList
from tree_config.path_config.candidate_paths import CandidatePathEnumerator
from tree_config.path_config.change_resolver import ChangeSetResolver
from tree_config.path_config.config_aggregator import ConfigAggregator, ConfigFragment
from tree_config.path_config.config_finder import ConfigFinder
from tree_config.path_config.request_context import Build, Repo, Request

__all__ = [
    'AllowList',
    'Build',
    'CandidatePathEnumerator',
    'ChangeSetResolver',
    'ConfigAggregator',
    'ConfigFinder',
    'ConfigFragment',
    'Repo',
    'Request',
]
