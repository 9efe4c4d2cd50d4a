"""
Python API for docksync.

``RepositorySyncer`` wires the services together and runs the pipeline
validate -> analyze -> crawl -> synthesize -> publish for one run at a time.
"""

import logging
from datetime import datetime
from typing import Callable, List, Optional, Union

from ..models import (
    AnalysisResult, GitHubUser, LogEvent, PublishMode, RemoteFile,
    RepositoryReference, RunOutcome, SyncConfig, SynchronizationRun
)
from ..services import GitHubAPIService
from ..core.analyzer import ProjectAnalyzer
from ..core.crawler import RepositoryCrawler
from ..core.orchestrator import PublishOrchestrator, build_file_set
from ..core.progress import ProgressLog
from ..core.synthesizer import synthesize
from ..infrastructure.error_handler import (
    AuthenticationError, InvalidInputError, RunInProgressError, SyncError
)
from ..infrastructure.rate_limiter import RateLimiter
from ..infrastructure.retry_manager import RetryConfig, RetryManager

from ..infrastructure.logger import logger


Source = Union[str, RepositoryReference]


class RepositorySyncer:
    """
    High-level entry point for republishing a repository with generated
    deployment artifacts.

    Only one run may be in flight per instance; ``is_busy`` reports it.
    """

    def __init__(
        self,
        auth_token: Optional[str] = None,
        config: Optional[SyncConfig] = None,
        verbose: bool = False,
        github_service: Optional[GitHubAPIService] = None
    ):
        self.auth_token = auth_token
        self.config = config or SyncConfig()
        self.verbose = verbose
        self.set_verbose(verbose)

        self.rate_limiter = RateLimiter(default_delay=self.config.request_delay)
        self.retry_manager = RetryManager.from_config(RetryConfig(
            max_retries=self.config.max_retries,
            initial_delay=self.config.retry_base_delay,
            max_delay=self.config.retry_max_delay,
        ))
        self.github_service = github_service or GitHubAPIService(
            self.rate_limiter,
            self.retry_manager,
            auth_token=auth_token,
            config=self.config,
        )
        self.analyzer = ProjectAnalyzer(self.github_service)
        self.crawler = RepositoryCrawler(self.github_service, self.config)
        self.orchestrator = PublishOrchestrator(self.github_service, self.config)

        self._current_run: Optional[SynchronizationRun] = None
        self._busy = False

    def set_verbose(self, verbose: bool) -> None:
        self.verbose = verbose
        logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    @property
    def is_busy(self) -> bool:
        return self._busy

    @property
    def current_run(self) -> Optional[SynchronizationRun]:
        return self._current_run

    ####
    ##      PIPELINE STEPS
    #####
    def start_run(
        self,
        destination_name: str = "",
        source: Optional[RepositoryReference] = None,
        description: Optional[str] = None,
        private: bool = False,
        build_file: Optional[str] = None
    ) -> SynchronizationRun:
        """Discard the previous run and open a fresh run context."""

        if self._busy:
            raise RunInProgressError("A synchronization run is already in progress")

        self._current_run = SynchronizationRun(
            source=source,
            destination_name=destination_name,
            description=description,
            private=private,
            build_file=build_file,
        )
        return self._current_run

    async def validate_credential(self, log: Optional[ProgressLog] = None) -> GitHubUser:
        """
        Check the token against ``GET /user``.

        Raises:
            AuthenticationError: If no token is set or the host rejects it
        """
        if not self.auth_token:
            raise AuthenticationError("Please enter a GitHub token")

        user = await self.github_service.get_authenticated_user()
        if log is not None:
            log.success(f"Connected as {user.login}")
        return user

    async def analyze(self, run: SynchronizationRun, source: Optional[Source] = None) -> AnalysisResult:
        result = await self.analyzer.analyze(source or run.source, run.log)
        run.source = result.source
        run.project = result.project
        run.tech_stack = result.tech_stack
        run.dependencies = list(result.dependencies)
        return result

    async def crawl(self, run: SynchronizationRun) -> List[RemoteFile]:
        if run.source is None:
            raise SyncError("The run has no source repository to crawl")

        run.log.info("Fetching project files...")
        run.crawled_files = await self.crawler.crawl(run.source, run.log)
        run.log.info(f"Fetched {len(run.crawled_files)} project files")
        return run.crawled_files

    def synthesize(self, run: SynchronizationRun, now: Optional[datetime] = None) -> List[RemoteFile]:
        run.synthesized_files = synthesize(
            run.project,
            run.tech_stack,
            run.dependencies,
            run.build_file,
            now=now,
        )
        return run.synthesized_files

    async def publish(
        self,
        run: SynchronizationRun,
        mode: PublishMode = PublishMode.FULL_PROJECT
    ) -> RunOutcome:
        return await self.orchestrator.publish(run, mode)

    ####
    ##      END-TO-END OPERATIONS
    #####
    async def sync(
        self,
        source: Source,
        destination_name: str,
        build_file: Optional[str] = None,
        mode: PublishMode = PublishMode.FULL_PROJECT,
        private: bool = False,
        description: Optional[str] = None,
        on_event: Optional[Callable[[LogEvent], None]] = None
    ) -> SynchronizationRun:
        """
        Run the whole pipeline for one source/destination pair.

        Args:
            source: Source repository URL or reference
            destination_name: Name of the repository to create
            build_file: Container build file content
            mode: Publish only artifacts or the full project
            private: Create the destination as private
            description: Destination description
            on_event: Callback receiving every progress event

        Returns:
            The finished run; inspect ``outcome`` and ``log``
        """
        run = self.start_run(
            destination_name=destination_name,
            description=description,
            private=private,
            build_file=build_file,
        )
        if on_event is not None:
            run.log.subscribe(on_event)

        if not destination_name or not destination_name.strip():
            error = InvalidInputError("Please enter a repository name")
            run.log.error(error.message)
            run.fail(error)
            return run

        self._busy = True
        try:
            try:
                run.user = await self.validate_credential(run.log)
                await self.analyze(run, source)
            except SyncError as e:
                run.log.error(e.message)
                run.fail(e)
                return run

            if mode is PublishMode.FULL_PROJECT:
                await self.crawl(run)

            self.synthesize(run)
            await self.publish(run, mode)

            logger.info(
                f"Run {run.run_id} finished as {run.outcome.value}: "
                f"{len(run.pushed_files)} pushed, {len(run.failed_files)} failed"
            )
            return run

        finally:
            self._busy = False

    async def preview(
        self,
        source: Source,
        build_file: Optional[str] = None,
        mode: PublishMode = PublishMode.FULL_PROJECT,
        on_event: Optional[Callable[[LogEvent], None]] = None
    ) -> SynchronizationRun:
        """
        Dry run: compute the file set a publish would push without any
        write call. The run stays idle.
        """
        run = self.start_run(build_file=build_file)
        if on_event is not None:
            run.log.subscribe(on_event)

        self._busy = True
        try:
            try:
                await self.analyze(run, source)
            except SyncError as e:
                run.log.error(e.message)
                run.fail(e)
                return run

            if mode is PublishMode.FULL_PROJECT:
                await self.crawl(run)

            self.synthesize(run)
            run.files, run.shadowed_paths = build_file_set(
                run.synthesized_files, run.crawled_files, mode
            )
            run.log.info(f"Dry-run: {len(run.files)} files would be pushed")
            return run

        finally:
            self._busy = False

    def reset(self) -> None:
        """Forget the current run."""

        if self._busy:
            raise RunInProgressError("Cannot reset while a run is in progress")
        self._current_run = None

    async def close(self) -> None:
        await self.github_service.close()

    async def __aenter__(self) -> "RepositorySyncer":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()


__all__ = [
    "RepositorySyncer",
]
