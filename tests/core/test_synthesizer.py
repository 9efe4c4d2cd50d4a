from datetime import datetime

from docksync.core.synthesizer import (
    COMPOSE_PATH, DOCKERFILE_PATH, DOCKERIGNORE_PATH, README_PATH,
    render_readme, synthesize
)
from docksync.models import (
    ContentKind, DependencyKind, DependencyRecord, ProjectInfo, TechStack
)


BUILD_FILE = "FROM node:18-alpine\nWORKDIR /app\nCOPY . .\nCMD [\"npm\", \"start\"]\n"
NOW = datetime(2026, 10, 19, 12, 0, 0)


def test_no_inputs_yield_no_files():
    assert synthesize() == []
    assert synthesize(None, None, None, None) == []


def test_build_file_yields_three_fixed_files():
    files = synthesize(build_file=BUILD_FILE)

    assert [f.path for f in files] == [DOCKERFILE_PATH, DOCKERIGNORE_PATH, COMPOSE_PATH]
    assert all(f.content for f in files)
    assert files[0].content == BUILD_FILE
    assert [f.kind for f in files] == [
        ContentKind.DOCKERFILE, ContentKind.DOCKERIGNORE, ContentKind.COMPOSE
    ]


def test_ignore_file_lists_standard_exclusions():
    ignore = synthesize(build_file=BUILD_FILE)[1].content.splitlines()

    for pattern in ("node_modules", "*.log", ".git", ".env", "dist", "build", "*.md", "!README.md"):
        assert pattern in ignore


def test_compose_file_exposes_port_3000_and_restarts():
    compose = synthesize(build_file=BUILD_FILE)[2].content

    assert '"3000:3000"' in compose
    assert "restart: unless-stopped" in compose
    assert compose.count("build: .") == 1


def test_project_adds_readme_after_docker_files():
    project = ProjectInfo(name="Shop-API", description="An online shop")
    files = synthesize(project, build_file=BUILD_FILE, now=NOW)

    assert [f.path for f in files][-1] == README_PATH
    assert files[-1].kind is ContentKind.README


def test_project_without_build_file_yields_only_readme():
    files = synthesize(ProjectInfo(name="tool"), now=NOW)
    assert [f.path for f in files] == [README_PATH]


def test_readme_renders_stack_dependencies_and_image_tag():
    project = ProjectInfo(name="Shop-API", description="An online shop")
    stack = TechStack(language="JavaScript", frameworks=["react", "next"], tools=["vite"])
    dependencies = [
        DependencyRecord("react", "18.0.0", DependencyKind.PRODUCTION),
        DependencyRecord("vite", "^5.0.0", DependencyKind.DEVELOPMENT),
    ]

    readme = render_readme(project, stack, dependencies, now=NOW)

    assert readme.startswith("# Shop-API\n")
    assert "An online shop" in readme
    assert "- **Language**: JavaScript" in readme
    assert "- **Frameworks**: react, next" in readme
    assert "- **Databases**: None" in readme
    assert "- **Tools**: vite" in readme
    assert "- react@18.0.0 (production)" in readme
    assert "- vite@^5.0.0 (development)" in readme
    assert "docker build -t shop-api ." in readme
    assert "docker run -p 3000:3000 shop-api" in readme
    assert "2026-10-19" in readme


def test_readme_degrades_to_placeholders():
    readme = render_readme(ProjectInfo(name="bare"), now=NOW)

    assert "A containerized application" in readme
    assert "- **Language**: Unknown" in readme
    assert "- **Frameworks**: None" in readme
    assert "- **Tools**: None" in readme


def test_synthesis_is_deterministic_for_fixed_clock():
    project = ProjectInfo(name="same")
    first = synthesize(project, build_file=BUILD_FILE, now=NOW)
    second = synthesize(project, build_file=BUILD_FILE, now=NOW)

    assert [(f.path, f.content) for f in first] == [(f.path, f.content) for f in second]
