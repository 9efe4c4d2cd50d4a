"""
Core data models API surface for docksync.

This file re-exports model classes from domain-specific modules so callers
can write imports like `from docksync.models import X`.
"""

from .github import (
    RepositoryReference,
    ContentEntry,
    GitHubUser,
    CreatedRepository,
)
from .files import (
    ContentKind,
    DependencyKind,
    RemoteFile,
    DependencyRecord,
    TechStack,
    ProjectInfo,
    AnalysisResult,
)
from .logging import LogLevel, LogEvent
from .config import SyncConfig
from .run import (
    PublishMode,
    PublishState,
    RunOutcome,
    SynchronizationRun,
)

__all__ = [
    # GitHub models
    "RepositoryReference",
    "ContentEntry",
    "GitHubUser",
    "CreatedRepository",
    # File and project models
    "ContentKind",
    "DependencyKind",
    "RemoteFile",
    "DependencyRecord",
    "TechStack",
    "ProjectInfo",
    "AnalysisResult",
    # Progress models
    "LogLevel",
    "LogEvent",
    # Config models
    "SyncConfig",
    # Run models
    "PublishMode",
    "PublishState",
    "RunOutcome",
    "SynchronizationRun",
]
