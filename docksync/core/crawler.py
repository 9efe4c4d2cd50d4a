"""
Repository crawler: discovers and downloads a repository's file tree.
"""

import asyncio
from collections import deque
from typing import Deque, List, Optional, Set

from ..models import ContentEntry, RemoteFile, RepositoryReference, SyncConfig
from ..services import GitHubAPIService
from .classifier import classify, is_likely_binary
from .progress import ProgressLog

from ..infrastructure.logger import logger


class RepositoryCrawler:
    """
    Walks a remote repository with an explicit work queue.

    Every directory path is expanded at most once. A failure while listing a
    directory or downloading a file is logged and costs only that node; the
    crawl always runs to the end of the queue.
    """

    def __init__(
        self,
        github_service: GitHubAPIService,
        config: Optional[SyncConfig] = None
    ):
        self.github_service = github_service
        self.config = config or SyncConfig()
        self._semaphore = asyncio.Semaphore(self.config.max_concurrent_downloads)

    def should_prune(self, entry: ContentEntry) -> bool:
        return entry.name in self.config.excluded_directories

    def should_skip(self, entry: ContentEntry) -> bool:
        return entry.size > self.config.max_file_size or is_likely_binary(entry.name)

    async def crawl(
        self,
        source: RepositoryReference,
        log: Optional[ProgressLog] = None
    ) -> List[RemoteFile]:
        """
        Collect every eligible file of ``source``.

        Args:
            source: Repository and branch to crawl
            log: Progress log receiving skip and error events

        Returns:
            Crawled files sorted by path
        """
        log = log if log is not None else ProgressLog()
        logger.debug(f"Crawling {source.display_name}@{source.branch}")

        queue: Deque[str] = deque([""])
        visited: Set[str] = set()
        files: List[RemoteFile] = []

        while queue:
            path = queue.popleft()
            if path in visited:
                continue
            visited.add(path)

            try:
                entries = await self.github_service.list_directory(source, path)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                log.error(f"Error fetching directory {path or '/'}: {e}")
                continue

            to_download: List[ContentEntry] = []
            for entry in entries:
                if entry.is_directory:
                    if self.should_prune(entry):
                        logger.debug(f"Pruning excluded directory {entry.path}")
                        continue
                    if entry.path not in visited:
                        queue.append(entry.path)
                elif entry.is_file:
                    if self.should_skip(entry):
                        log.info(
                            f"Skipping large or binary file: {entry.path} ({entry.size} bytes)"
                        )
                        continue
                    to_download.append(entry)
                else:
                    logger.debug(f"Ignoring {entry.type} entry {entry.path}")

            results = await asyncio.gather(
                *(self._fetch_file(entry, log) for entry in to_download)
            )
            files.extend(file for file in results if file is not None)

        files.sort(key=lambda file: file.path)
        logger.debug(
            f"Crawl of {source.display_name} finished: {len(files)} files, "
            f"{len(visited)} directories"
        )
        return files

    async def _fetch_file(
        self,
        entry: ContentEntry,
        log: ProgressLog
    ) -> Optional[RemoteFile]:
        if not entry.download_url:
            log.error(f"Error fetching file {entry.path}: no download URL")
            return None

        async with self._semaphore:
            try:
                content = await self.github_service.get_file_content(entry.download_url)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                log.error(f"Error fetching file {entry.path}: {e}")
                return None

        return RemoteFile(
            path=entry.path,
            content=content,
            kind=classify(entry.name),
            size_bytes=entry.size,
        )


__all__ = [
    "RepositoryCrawler",
]
