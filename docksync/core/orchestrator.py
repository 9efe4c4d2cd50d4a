"""
Orchestrator for publishing a run's file set to a new
destination repository with per-file error isolation.
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Sequence, Set, Tuple

from ..models import (
    PublishMode, RemoteFile, RunOutcome, SyncConfig, SynchronizationRun
)
from ..services import GitHubAPIService
from ..infrastructure.error_handler import (
    AuthenticationError, InvalidInputError, SyncError
)

from ..infrastructure.logger import logger



####
##      PUBLISH STATISTICS MODEL
#####
@dataclass
class PublishStatistics:
    """Counters collected while pushing a file set."""

    total_files: int = 0
    pushed_files: int = 0
    failed_files: int = 0
    total_bytes: int = 0
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None

    @property
    def duration_seconds(self) -> float:
        """Get total duration in seconds."""

        if self.start_time and self.end_time:
            return (self.end_time - self.start_time).total_seconds()
        return 0.0


####
##      FILE SET CONSTRUCTION
#####
def build_file_set(
    synthesized: Sequence[RemoteFile],
    crawled: Sequence[RemoteFile],
    mode: PublishMode
) -> Tuple[List[RemoteFile], List[str]]:
    """
    Merge synthesized artifacts with crawled files.

    Synthesized files come first, in their own order; crawled files follow
    sorted by path (full-project mode only). The first file claiming a path
    wins.

    Returns:
        Tuple of (file set in push order, crawled paths that were dropped)
    """
    files: List[RemoteFile] = []
    seen: Set[str] = set()
    shadowed: List[str] = []

    for file in synthesized:
        if file.path in seen:
            continue
        seen.add(file.path)
        files.append(file)

    if mode is PublishMode.FULL_PROJECT:
        for file in sorted(crawled, key=lambda f: f.path):
            if file.path in seen:
                shadowed.append(file.path)
                logger.debug(f"Keeping synthesized {file.path}, dropping crawled copy")
                continue
            seen.add(file.path)
            files.append(file)

    return files, shadowed


####
##      PUBLISH ORCHESTRATOR
#####
class PublishOrchestrator:
    """
    Drives a run through its publish state machine:
    idle -> creating_repo -> pushing -> complete, or -> failed.
    """

    def __init__(
        self,
        github_service: GitHubAPIService,
        config: Optional[SyncConfig] = None
    ):
        self.github_service = github_service
        self.config = config or SyncConfig()
        self._current_run: Optional[SynchronizationRun] = None

    @property
    def current_run(self) -> Optional[SynchronizationRun]:
        return self._current_run

    def _reject(self, run: SynchronizationRun, error: SyncError) -> RunOutcome:
        run.log.error(error.message)
        return run.fail(error)

    def _default_description(self, run: SynchronizationRun) -> str:
        name = run.project.name if run.project else "project"
        return f"Dockerized {name} - generated by docksync"

    async def publish(
        self,
        run: SynchronizationRun,
        mode: PublishMode = PublishMode.FULL_PROJECT
    ) -> RunOutcome:
        """
        Create the destination repository and push the run's file set.

        Args:
            run: Run context holding synthesized and crawled files
            mode: Whether crawled project files are included

        Returns:
            The run's outcome; ``run.state`` and ``run.log`` carry the details
        """
        if not run.destination_name or not run.destination_name.strip():
            return self._reject(run, InvalidInputError("Please enter a repository name"))

        if run.user is None:
            return self._reject(
                run, AuthenticationError("A validated GitHub token is required to publish")
            )

        run.files, run.shadowed_paths = build_file_set(
            run.synthesized_files, run.crawled_files, mode
        )
        if not run.files:
            return self._reject(run, InvalidInputError("No files to push"))

        self._current_run = run
        try:
            if not await self._create_repository(run):
                return run.outcome

            await self._push_files(run)
            outcome = run.complete()

            if run.repository_url:
                run.log.info(f"Repository URL: {run.repository_url}")
            return outcome

        finally:
            self._current_run = None

    async def _create_repository(self, run: SynchronizationRun) -> bool:
        name = run.destination_name.strip()

        run.begin_creation()
        run.log.info("Creating GitHub repository...")

        try:
            repository = await self.github_service.create_repository(
                name,
                description=run.description or self._default_description(run),
                private=run.private,
            )
        except asyncio.CancelledError:
            raise
        except Exception as e:
            error = e if isinstance(e, SyncError) else SyncError(str(e), e)
            run.log.error(f"Error creating repository: {error.message}")
            run.fail(error)
            return False

        run.log.success(f"Repository '{name}' created successfully!")
        run.begin_push(repository, self.config.target_branch)
        return True

    async def _push_files(self, run: SynchronizationRun) -> PublishStatistics:
        """Push every file in order; a failing file never stops the loop."""

        stats = PublishStatistics(total_files=len(run.files), start_time=datetime.now())
        run.log.info(f"Pushing {len(run.files)} files to repository...")

        for file in run.files:
            run.log.info(f"Creating {file.path}...")
            try:
                await self.github_service.create_file(
                    run.destination,
                    file,
                    self.config.commit_message(file.path),
                )
            except asyncio.CancelledError:
                raise
            except Exception as e:
                reason = getattr(e, "message", None) or str(e)
                run.failed_files[file.path] = reason
                stats.failed_files += 1
                run.log.error(f"Error pushing {file.path}: {reason}")
                continue

            run.pushed_files.append(file.path)
            stats.pushed_files += 1
            stats.total_bytes += file.size_bytes or 0
            run.log.success(f"✓ {file.path} created successfully")

        stats.end_time = datetime.now()

        if stats.failed_files:
            run.log.error(
                f"Pushed {stats.pushed_files} of {stats.total_files} files; "
                f"{stats.failed_files} failed"
            )
        else:
            run.log.success("Repository files pushed successfully!")

        logger.debug(
            f"Push finished: {stats.pushed_files} pushed, {stats.failed_files} failed, "
            f"{stats.total_bytes} bytes in {stats.duration_seconds:.1f}s"
        )
        return stats


__all__ = [
    "PublishStatistics",
    "build_file_set",
    "PublishOrchestrator",
]
