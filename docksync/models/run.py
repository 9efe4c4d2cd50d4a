"""
Synchronization run models for docksync.

This module contains the run context threaded through every pipeline call,
together with the enums describing its publish state machine and outcome.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from ..core.progress import ProgressLog
from ..infrastructure.error_handler import StateTransitionError, SyncError
from .files import DependencyRecord, ProjectInfo, RemoteFile, TechStack
from .github import CreatedRepository, GitHubUser, RepositoryReference


class PublishMode(Enum):
    """Which files a publish writes to the destination."""

    DOCKERFILE_ONLY = "dockerfile"    # Synthesized artifacts only
    FULL_PROJECT = "full"             # Artifacts plus every crawled file


class PublishState(Enum):
    """States of the publish state machine."""

    IDLE = "idle"
    CREATING_REPO = "creating_repo"
    PUSHING = "pushing"
    COMPLETE = "complete"
    FAILED = "failed"


class RunOutcome(Enum):
    """Caller-facing result of a run."""

    PENDING = "pending"
    PARTIAL = "partial"
    COMPLETE = "complete"
    FAILED = "failed"


ALLOWED_TRANSITIONS = {
    PublishState.IDLE: {PublishState.CREATING_REPO, PublishState.FAILED},
    PublishState.CREATING_REPO: {PublishState.PUSHING, PublishState.FAILED},
    PublishState.PUSHING: {PublishState.COMPLETE},
    PublishState.COMPLETE: set(),
    PublishState.FAILED: set(),
}


@dataclass
class SynchronizationRun:
    """
    Context of one crawl, synthesize and publish execution.

    The run is owned by its caller and passed into each pipeline step;
    the pipeline itself holds no global state.
    """

    source: Optional[RepositoryReference] = None
    destination_name: str = ""
    description: Optional[str] = None
    private: bool = False

    # Inputs gathered before publishing
    user: Optional[GitHubUser] = None
    project: Optional[ProjectInfo] = None
    tech_stack: Optional[TechStack] = None
    dependencies: List[DependencyRecord] = field(default_factory=list)
    build_file: Optional[str] = None

    # File sets
    crawled_files: List[RemoteFile] = field(default_factory=list)
    synthesized_files: List[RemoteFile] = field(default_factory=list)
    files: List[RemoteFile] = field(default_factory=list)
    shadowed_paths: List[str] = field(default_factory=list)

    # Publish results
    log: ProgressLog = field(default_factory=ProgressLog)
    state: PublishState = PublishState.IDLE
    outcome: RunOutcome = RunOutcome.PENDING
    destination: Optional[RepositoryReference] = None
    repository_url: Optional[str] = None
    pushed_files: List[str] = field(default_factory=list)
    failed_files: Dict[str, str] = field(default_factory=dict)
    error: Optional[SyncError] = None

    # Metadata
    run_id: str = field(default_factory=lambda: f"run_{datetime.now().strftime('%Y%m%d_%H%M%S')}")
    started_at: datetime = field(default_factory=datetime.now)
    completed_at: Optional[datetime] = None

    @property
    def is_finished(self) -> bool:
        return self.state in (PublishState.COMPLETE, PublishState.FAILED)

    @property
    def success_rate(self) -> float:
        total = len(self.pushed_files) + len(self.failed_files)
        if total == 0:
            return 0.0
        return (len(self.pushed_files) / total) * 100.0

    def _transition(self, target: PublishState) -> None:
        if target not in ALLOWED_TRANSITIONS[self.state]:
            raise StateTransitionError(
                f"Cannot move run from {self.state.value} to {target.value}"
            )
        self.state = target

    def begin_creation(self) -> None:
        self._transition(PublishState.CREATING_REPO)

    def begin_push(self, repository: CreatedRepository, branch: str) -> None:
        self._transition(PublishState.PUSHING)
        self.destination = repository.reference(branch)
        self.repository_url = repository.html_url

    def complete(self) -> RunOutcome:
        self._transition(PublishState.COMPLETE)
        self.outcome = RunOutcome.PARTIAL if self.failed_files else RunOutcome.COMPLETE
        self.completed_at = datetime.now()
        return self.outcome

    def fail(self, error: SyncError) -> RunOutcome:
        self._transition(PublishState.FAILED)
        self.error = error
        self.outcome = RunOutcome.FAILED
        self.completed_at = datetime.now()
        return self.outcome


__all__ = [
    "PublishMode",
    "PublishState",
    "RunOutcome",
    "ALLOWED_TRANSITIONS",
    "SynchronizationRun",
]
