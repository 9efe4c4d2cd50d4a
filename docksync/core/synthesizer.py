"""
Artifact synthesizer: derives deployment files from project metadata.
"""

from datetime import datetime
from typing import Iterable, List, Optional

from ..models import ContentKind, DependencyRecord, ProjectInfo, RemoteFile, TechStack


DOCKERFILE_PATH = "Dockerfile"
DOCKERIGNORE_PATH = ".dockerignore"
COMPOSE_PATH = "docker-compose.yml"
README_PATH = "README.md"

DOCKERIGNORE_CONTENT = """node_modules
npm-debug.log
*.log
.git
.gitignore
.env
.nyc_output
coverage
.vscode
dist
build
*.md
!README.md
"""

COMPOSE_CONTENT = """version: '3.8'
services:
  app:
    build: .
    ports:
      - "3000:3000"
    environment:
      - NODE_ENV=production
    restart: unless-stopped
"""

README_TEMPLATE = """# {name}

{description}

## Tech Stack
- **Language**: {language}
- **Frameworks**: {frameworks}
- **Databases**: {databases}
- **Tools**: {tools}

## Dependencies
{dependencies}

## Docker Usage

Build the image:
```bash
docker build -t {tag} .
```

Run the container:
```bash
docker run -p 3000:3000 {tag}
```

## Development

```bash
# Install dependencies
npm install

# Start development server
npm run dev
```

---
*Generated by docksync on {generated}*
"""


def _joined(values: Optional[Iterable[str]]) -> str:
    values = [value for value in (values or []) if value]
    return ", ".join(values) if values else "None"


def render_readme(
    project: ProjectInfo,
    tech_stack: Optional[TechStack] = None,
    dependencies: Optional[Iterable[DependencyRecord]] = None,
    now: Optional[datetime] = None
) -> str:
    """Render the README for ``project``; missing data becomes placeholders."""

    stack = tech_stack or TechStack()
    dependency_lines = "\n".join(f"- {dep.render()}" for dep in dependencies or [])
    name = project.name or "app"

    return README_TEMPLATE.format(
        name=name,
        description=project.description or "A containerized application",
        language=stack.language or project.language or "Unknown",
        frameworks=_joined(stack.frameworks),
        databases=_joined(stack.databases),
        tools=_joined(stack.tools),
        dependencies=dependency_lines or "None",
        tag=project.image_tag,
        generated=(now or datetime.now()).strftime("%Y-%m-%d"),
    )


def synthesize(
    project: Optional[ProjectInfo] = None,
    tech_stack: Optional[TechStack] = None,
    dependencies: Optional[Iterable[DependencyRecord]] = None,
    build_file: Optional[str] = None,
    now: Optional[datetime] = None
) -> List[RemoteFile]:
    """
    Produce the derived artifacts for a run.

    Args:
        project: Source project metadata; enables the README
        tech_stack: Detected stack shown in the README
        dependencies: Dependency list shown in the README
        build_file: Container build file; enables Dockerfile, ignore and compose files
        now: Timestamp stamped into the README footer

    Returns:
        The artifacts in publish order (possibly empty)
    """
    files: List[RemoteFile] = []

    if build_file:
        files.append(RemoteFile(DOCKERFILE_PATH, build_file, ContentKind.DOCKERFILE))
        files.append(RemoteFile(DOCKERIGNORE_PATH, DOCKERIGNORE_CONTENT, ContentKind.DOCKERIGNORE))
        files.append(RemoteFile(COMPOSE_PATH, COMPOSE_CONTENT, ContentKind.COMPOSE))

    if project is not None:
        readme = render_readme(project, tech_stack, dependencies, now)
        files.append(RemoteFile(README_PATH, readme, ContentKind.README))

    return files


__all__ = [
    "DOCKERFILE_PATH",
    "DOCKERIGNORE_PATH",
    "COMPOSE_PATH",
    "README_PATH",
    "render_readme",
    "synthesize",
]
