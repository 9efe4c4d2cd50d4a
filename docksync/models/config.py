"""
Configuration models for docksync runs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet


DEFAULT_EXCLUDED_DIRECTORIES = frozenset({
    "node_modules",
    ".git",
    "dist",
    "build",
    "coverage",
})


@dataclass
class SyncConfig:
    """
    Unified configuration for a synchronization run.

    Covers the remote API endpoint, crawl policy, push target and the
    resilience settings applied at every remote call.
    """

    # Remote API settings
    api_url: str = "https://api.github.com"
    accept_header: str = "application/vnd.github.v3+json"
    timeout: float = 30.0

    # Crawl policy
    max_file_size: int = 1_000_000  # Size in bytes
    excluded_directories: FrozenSet[str] = field(
        default_factory=lambda: DEFAULT_EXCLUDED_DIRECTORIES
    )
    max_concurrent_downloads: int = 5

    # Push settings
    target_branch: str = "main"
    commit_message_template: str = "Add {path}"

    # Resilience settings
    max_retries: int = 3
    retry_base_delay: float = 1.0
    retry_max_delay: float = 30.0
    request_delay: float = 0.0

    def __post_init__(self) -> None:
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")
        if self.max_file_size <= 0:
            raise ValueError("max_file_size must be positive")
        if self.max_concurrent_downloads <= 0:
            raise ValueError("max_concurrent_downloads must be positive")
        if self.max_retries < 0:
            raise ValueError("max_retries cannot be negative")
        if not self.target_branch:
            raise ValueError("target_branch is required")
        self.api_url = self.api_url.rstrip("/")
        self.excluded_directories = frozenset(self.excluded_directories)

    def commit_message(self, path: str) -> str:
        return self.commit_message_template.format(path=path)


__all__ = [
    "DEFAULT_EXCLUDED_DIRECTORIES",
    "SyncConfig",
]
