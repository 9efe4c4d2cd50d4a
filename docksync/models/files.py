"""
File and project domain models for docksync.

This module contains data classes and enums representing the files that
flow through a synchronization run and the project metadata used to
synthesize artifacts.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union

from .github import RepositoryReference


class ContentKind(Enum):
    """Presentation tag derived from a file name."""

    DOCKERFILE = "dockerfile"
    COMPOSE = "compose"
    DOCKERIGNORE = "dockerignore"
    README = "readme"
    JAVASCRIPT = "javascript"
    TYPESCRIPT = "typescript"
    STYLE = "style"
    MARKUP = "markup"
    JSON = "json"
    MARKDOWN = "markdown"
    PYTHON = "python"
    RUBY = "ruby"
    PHP = "php"
    JAVA = "java"
    GO = "go"
    PLAIN = "plain"


class DependencyKind(Enum):
    """Whether a dependency is needed at runtime or only for development."""

    PRODUCTION = "production"
    DEVELOPMENT = "development"


@dataclass
class RemoteFile:
    """A file destined for the remote repository."""

    path: str
    content: Union[str, bytes]
    kind: ContentKind = ContentKind.PLAIN
    size_bytes: Optional[int] = None

    def __post_init__(self) -> None:
        if not self.path:
            raise ValueError("File path is required")
        self.path = self.path.lstrip("/")
        if self.size_bytes is None:
            self.size_bytes = len(self.raw_bytes())
        if self.size_bytes < 0:
            raise ValueError("File size cannot be negative")

    @property
    def is_binary(self) -> bool:
        return isinstance(self.content, bytes)

    @property
    def name(self) -> str:
        return self.path.rsplit("/", 1)[-1]

    def raw_bytes(self) -> bytes:
        if isinstance(self.content, bytes):
            return self.content
        return self.content.encode("utf-8")

    def encoded_content(self) -> str:
        """Base64 transport encoding of the file's bytes."""
        return base64.b64encode(self.raw_bytes()).decode("ascii")


@dataclass(frozen=True)
class DependencyRecord:
    """A single declared dependency of the source project."""

    name: str
    version: str = "latest"
    kind: DependencyKind = DependencyKind.PRODUCTION

    def render(self) -> str:
        return f"{self.name}@{self.version} ({self.kind.value})"


@dataclass
class TechStack:
    """Detected language, frameworks and tooling of a project."""

    language: Optional[str] = None
    frameworks: List[str] = field(default_factory=list)
    databases: List[str] = field(default_factory=list)
    tools: List[str] = field(default_factory=list)
    deployment: List[str] = field(default_factory=list)


@dataclass
class ProjectInfo:
    """Metadata describing the source project."""

    name: str
    description: Optional[str] = None
    language: Optional[str] = None
    owner: Optional[str] = None
    repo: Optional[str] = None
    branch: Optional[str] = None
    url: Optional[str] = None
    size_kb: Optional[int] = None
    file_count: Optional[int] = None
    updated_at: Optional[str] = None

    @property
    def image_tag(self) -> str:
        return (self.name or "app").lower()


@dataclass
class AnalysisResult:
    """Everything learned about a source repository before crawling it."""

    source: RepositoryReference
    project: ProjectInfo
    tech_stack: TechStack = field(default_factory=TechStack)
    dependencies: List[DependencyRecord] = field(default_factory=list)


__all__ = [
    "ContentKind",
    "DependencyKind",
    "RemoteFile",
    "DependencyRecord",
    "TechStack",
    "ProjectInfo",
    "AnalysisResult",
]
