"""Caching and synchronization layer over the version-control client.

Components, leaves first: PathResolver, CommandExecutor, the output parsers,
CacheManager, OperationManager and DataAggregator. Consumers normally build a
DataAggregator with ``DataAggregator.from_config`` and use its
subscribe/load/refresh/mutate API.
"""

from ._aggregator import DataAggregator, SnapshotCallback
from ._cache import (
    CacheManager,
    InvalidationChannel,
    InvalidationEvent,
    InvalidationKind,
    InvalidationListener,
)
from ._executor import CommandExecutor
from ._fake import FakeCommandExecutor, FakeResponse
from ._models import (
    BlameEntry,
    CacheCategory,
    CacheKey,
    CommandOutput,
    FileSnapshot,
    InfoRecord,
    LoadOptions,
    LogEntry,
    OperationResult,
    StatusCode,
    StatusEntry,
)
from ._operations import (
    OperationManager,
    is_already_versioned,
    is_out_of_date,
    is_soft_failure,
    repository_path_from_url,
    validate_repository_name,
)
from ._parser import (
    has_conflict_markers,
    parse_blame_xml,
    parse_committed_revision,
    parse_info_xml,
    parse_list_size_xml,
    parse_log_xml,
    parse_properties_xml,
    parse_rev_size,
    parse_status_lines,
    parse_timestamp,
    parse_update_conflicts,
    parse_updated_revision,
    parse_verbose_status_lines,
)
from ._paths import PathResolver, ancestors_until, is_same_or_descendant, normalize_path
from ._protocol import CommandExecutorProtocol

__all__ = [
    "BlameEntry",
    "CacheCategory",
    "CacheKey",
    "CacheManager",
    "CommandExecutor",
    "CommandExecutorProtocol",
    "CommandOutput",
    "DataAggregator",
    "FakeCommandExecutor",
    "FakeResponse",
    "FileSnapshot",
    "InfoRecord",
    "InvalidationChannel",
    "InvalidationEvent",
    "InvalidationKind",
    "InvalidationListener",
    "LoadOptions",
    "LogEntry",
    "OperationManager",
    "OperationResult",
    "PathResolver",
    "SnapshotCallback",
    "StatusCode",
    "StatusEntry",
    "ancestors_until",
    "has_conflict_markers",
    "is_already_versioned",
    "is_out_of_date",
    "is_same_or_descendant",
    "is_soft_failure",
    "normalize_path",
    "parse_blame_xml",
    "parse_committed_revision",
    "parse_info_xml",
    "parse_list_size_xml",
    "parse_log_xml",
    "parse_properties_xml",
    "parse_rev_size",
    "parse_status_lines",
    "parse_timestamp",
    "parse_update_conflicts",
    "parse_updated_revision",
    "parse_verbose_status_lines",
    "repository_path_from_url",
    "validate_repository_name",
]
