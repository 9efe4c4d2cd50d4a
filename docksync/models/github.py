"""
GitHub domain models for docksync.

This module contains strongly typed data classes representing the
GitHub-side entities the pipeline reads from and writes to.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlparse

from ..infrastructure.error_handler import InvalidInputError


GITHUB_HOST = "github.com"
GITHUB_WEB_HOSTS = frozenset({GITHUB_HOST, f"www.{GITHUB_HOST}"})


@dataclass(frozen=True)
class RepositoryReference:
    """Immutable reference to a repository on a given branch."""

    owner: str
    name: str
    branch: str = "main"

    def __post_init__(self) -> None:
        if not self.owner or not self.name:
            raise InvalidInputError("Repository owner and name are required")
        if not self.branch:
            raise InvalidInputError("Repository branch is required")

    @property
    def display_name(self) -> str:
        return f"{self.owner}/{self.name}"

    def with_branch(self, branch: str) -> RepositoryReference:
        return RepositoryReference(owner=self.owner, name=self.name, branch=branch)

    @classmethod
    def from_url(cls, url: str, branch: str = "main") -> RepositoryReference:
        """
        Resolve a ``https://github.com/<owner>/<repo>`` URL.

        Trailing path segments (``/tree/...``, ``/blob/...``) and a ``.git``
        suffix are ignored.

        Raises:
            InvalidInputError: If the URL does not point at a GitHub repository
        """
        if not url or GITHUB_HOST not in url:
            raise InvalidInputError("Please enter a valid GitHub repository URL")

        candidate = url.strip()
        if "://" not in candidate:
            candidate = f"https://{candidate}"

        parsed = urlparse(candidate)
        host = parsed.netloc.lower()
        if host not in GITHUB_WEB_HOSTS:
            raise InvalidInputError(f"Not a GitHub repository URL: {url}")

        parts = [part for part in parsed.path.split("/") if part]
        if len(parts) < 2:
            raise InvalidInputError("Invalid repository URL format")

        name = parts[1]
        if name.endswith(".git"):
            name = name[:-len(".git")]

        return cls(owner=parts[0], name=name, branch=branch)


@dataclass
class ContentEntry:
    """One item of a repository contents listing."""

    name: str
    path: str
    type: str  # 'file', 'dir', 'symlink', 'submodule'
    size: int = 0
    download_url: Optional[str] = None
    sha: Optional[str] = None

    @property
    def is_file(self) -> bool:
        return self.type == "file"

    @property
    def is_directory(self) -> bool:
        return self.type == "dir"

    @classmethod
    def from_api(cls, payload: dict) -> ContentEntry:
        return cls(
            name=payload.get("name") or payload.get("path", "").rsplit("/", 1)[-1],
            path=payload.get("path", ""),
            type=payload.get("type", "file"),
            size=int(payload.get("size") or 0),
            download_url=payload.get("download_url"),
            sha=payload.get("sha"),
        )


@dataclass(frozen=True)
class GitHubUser:
    """Account a credential belongs to."""

    login: str
    name: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.name or self.login


@dataclass(frozen=True)
class CreatedRepository:
    """Descriptor of a freshly created destination repository."""

    owner: str
    name: str
    full_name: str
    html_url: str
    private: bool = False
    default_branch: Optional[str] = None

    def reference(self, branch: str) -> RepositoryReference:
        return RepositoryReference(owner=self.owner, name=self.name, branch=branch)


__all__ = [
    "RepositoryReference",
    "ContentEntry",
    "GitHubUser",
    "CreatedRepository",
]
