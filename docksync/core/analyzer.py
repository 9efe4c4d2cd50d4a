"""
Project analyzer: resolves a source repository and reads its manifests to
learn the project's tech stack and dependencies.
"""

import asyncio
import json
from typing import Dict, List, Optional, Union

from ..models import (
    AnalysisResult, ContentEntry, DependencyKind, DependencyRecord,
    ProjectInfo, RepositoryReference, TechStack
)
from ..services import GitHubAPIService
from .progress import ProgressLog

from ..infrastructure.logger import logger


JS_FRAMEWORKS = {'react', 'vue', 'angular', 'next', 'nuxt', 'svelte'}
JS_DATABASES = {'pg', 'mongodb', 'mongoose', 'sequelize', 'mysql', 'sqlite3', 'redis'}
JS_TOOLS = {'webpack', 'rollup', 'parcel', 'vite', 'esbuild'}
PY_FRAMEWORKS = {'django', 'flask', 'fastapi', 'tornado', 'pyramid'}
PY_DATABASES = {'psycopg2', 'pymongo', 'sqlalchemy', 'pymysql', 'redis'}
DOCKER_FILES = {'Dockerfile', 'docker-compose.yml'}


def parse_package_json(text: str, stack: TechStack) -> List[DependencyRecord]:
    """
    Read dependencies out of a ``package.json`` document.

    Frameworks, databases and build tools found among them are added to
    ``stack``.

    Raises:
        ValueError: If the document is not a JSON object
    """
    manifest = json.loads(text)
    if not isinstance(manifest, dict):
        raise ValueError("package.json is not a JSON object")

    records: List[DependencyRecord] = []

    for name, version in (manifest.get('dependencies') or {}).items():
        records.append(DependencyRecord(name, str(version), DependencyKind.PRODUCTION))
        if name in JS_FRAMEWORKS:
            stack.frameworks.append(name)
        if name in JS_DATABASES:
            stack.databases.append(name)

    for name, version in (manifest.get('devDependencies') or {}).items():
        records.append(DependencyRecord(name, str(version), DependencyKind.DEVELOPMENT))
        if name in JS_TOOLS:
            stack.tools.append(name)

    return records


def parse_requirements(text: str, stack: TechStack) -> List[DependencyRecord]:
    """Read ``name==version`` lines of a ``requirements.txt``."""

    records: List[DependencyRecord] = []

    for line in text.splitlines():
        line = line.split('#', 1)[0].strip()
        if not line or line.startswith('-'):
            continue

        name, _, version = line.partition('==')
        name = name.strip()
        records.append(DependencyRecord(
            name, version.strip() or 'latest', DependencyKind.PRODUCTION
        ))

        if name.lower() in PY_FRAMEWORKS:
            stack.frameworks.append(name)
        if name.lower() in PY_DATABASES:
            stack.databases.append(name)

    return records


class ProjectAnalyzer:
    """Builds the AnalysisResult the synthesizer consumes."""

    def __init__(self, github_service: GitHubAPIService):
        self.github_service = github_service

    async def _read_manifest(self, entry: ContentEntry) -> str:
        content = await self.github_service.get_file_content(entry.download_url)
        if isinstance(content, bytes):
            content = content.decode('utf-8', errors='replace')
        return content

    async def analyze(
        self,
        source: Union[str, RepositoryReference],
        log: Optional[ProgressLog] = None
    ) -> AnalysisResult:
        """
        Resolve ``source`` and inspect its root manifests.

        Args:
            source: Repository URL or an already resolved reference
            log: Progress log receiving analysis events

        Returns:
            Project metadata, tech stack and dependency list

        Raises:
            InvalidInputError: If ``source`` is not a GitHub repository URL
            SyncError: If the repository itself cannot be read
        """
        log = log if log is not None else ProgressLog()
        reference = (
            source if isinstance(source, RepositoryReference)
            else RepositoryReference.from_url(source)
        )

        log.info("Fetching repository information...")
        info = await self.github_service.get_repository_info(reference.owner, reference.name)
        reference = reference.with_branch(info.get('default_branch') or reference.branch)

        log.info("Analyzing repository structure...")
        entries = await self.github_service.list_directory(reference)
        by_name: Dict[str, ContentEntry] = {entry.name: entry for entry in entries}

        stack = TechStack(language=info.get('language') or 'Unknown')
        dependencies: List[DependencyRecord] = []

        for manifest, parser in (
            ('package.json', parse_package_json),
            ('requirements.txt', parse_requirements),
        ):
            entry = by_name.get(manifest)
            if entry is None or not entry.download_url:
                continue
            try:
                text = await self._read_manifest(entry)
                dependencies.extend(parser(text, stack))
            except asyncio.CancelledError:
                raise
            except Exception as e:
                log.error(f"Error reading {manifest}: {getattr(e, 'message', None) or e}")

        if DOCKER_FILES & set(by_name):
            stack.deployment.append('Docker')

        project = ProjectInfo(
            name=info.get('name') or reference.name,
            description=info.get('description') or 'No description available',
            language=info.get('language'),
            owner=reference.owner,
            repo=reference.name,
            branch=reference.branch,
            url=info.get('html_url'),
            size_kb=info.get('size'),
            file_count=len(entries),
            updated_at=info.get('updated_at'),
        )

        logger.debug(
            f"Analyzed {reference.display_name}: {len(dependencies)} dependencies, "
            f"frameworks={stack.frameworks}"
        )
        log.success("Repository analysis completed successfully!")

        return AnalysisResult(
            source=reference,
            project=project,
            tech_stack=stack,
            dependencies=dependencies,
        )


__all__ = [
    "parse_package_json",
    "parse_requirements",
    "ProjectAnalyzer",
]
