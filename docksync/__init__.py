"""
docksync: republish a GitHub repository together with generated Docker
artifacts.
"""

from .models import (
    ContentKind,
    PublishMode,
    PublishState,
    RemoteFile,
    RepositoryReference,
    RunOutcome,
    SyncConfig,
    SynchronizationRun,
)
from .interfaces.api import RepositorySyncer

__version__ = "0.1.0"

__all__ = [
    "ContentKind",
    "PublishMode",
    "PublishState",
    "RemoteFile",
    "RepositoryReference",
    "RunOutcome",
    "SyncConfig",
    "SynchronizationRun",
    "RepositorySyncer",
    "__version__",
]
