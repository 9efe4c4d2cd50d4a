import pytest
from unittest.mock import AsyncMock, MagicMock

from docksync.core.crawler import RepositoryCrawler
from docksync.core.progress import ProgressLog
from docksync.infrastructure.error_handler import RemoteNotFoundError, TransportError
from docksync.models import (
    ContentEntry, ContentKind, LogLevel, RepositoryReference, SyncConfig
)


SOURCE = RepositoryReference(owner="octo", name="app", branch="main")


def make_file(path: str, size: int = 100) -> ContentEntry:
    """Helper building a file entry whose download URL encodes its path."""
    return ContentEntry(
        name=path.rsplit("/", 1)[-1],
        path=path,
        type="file",
        size=size,
        download_url=f"https://raw.example/{path}",
    )


def make_dir(path: str) -> ContentEntry:
    return ContentEntry(name=path.rsplit("/", 1)[-1], path=path, type="dir")


def make_service(tree, broken_dirs=(), broken_files=()):
    """Mock GitHub service backed by an in-memory tree."""

    async def list_directory(repository, path=""):
        if path in broken_dirs:
            raise RemoteNotFoundError(f"Not Found: {path}")
        return list(tree.get(path, []))

    async def get_file_content(url):
        path = url.replace("https://raw.example/", "")
        if path in broken_files:
            raise TransportError("connection reset")
        return f"content of {path}"

    service = MagicMock()
    service.list_directory = AsyncMock(side_effect=list_directory)
    service.get_file_content = AsyncMock(side_effect=get_file_content)
    return service


@pytest.fixture
def tree():
    return {
        "": [
            make_file("package.json"),
            make_file("README.md"),
            make_dir("src"),
            make_dir("node_modules"),
            make_file("logo.png"),
        ],
        "src": [
            make_file("src/index.js"),
            make_dir("src/components"),
        ],
        "src/components": [
            make_file("src/components/App.jsx"),
        ],
        "node_modules": [
            make_file("node_modules/react/index.js"),
        ],
    }


@pytest.mark.asyncio
async def test_crawl_collects_eligible_files_sorted(tree):
    service = make_service(tree)
    crawler = RepositoryCrawler(service)

    files = await crawler.crawl(SOURCE, ProgressLog())

    assert [f.path for f in files] == [
        "README.md",
        "package.json",
        "src/components/App.jsx",
        "src/index.js",
    ]
    by_path = {f.path: f for f in files}
    assert by_path["src/index.js"].kind is ContentKind.JAVASCRIPT
    assert by_path["README.md"].kind is ContentKind.README
    assert by_path["package.json"].content == "content of package.json"
    assert by_path["package.json"].size_bytes == 100


@pytest.mark.asyncio
async def test_excluded_directory_is_pruned_without_listing(tree):
    """Scenario: files under node_modules never reach the result"""
    service = make_service(tree)
    crawler = RepositoryCrawler(service)

    files = await crawler.crawl(SOURCE)

    assert not any(f.path.startswith("node_modules/") for f in files)
    listed = [call.args[1] for call in service.list_directory.await_args_list]
    assert "node_modules" not in listed


@pytest.mark.asyncio
async def test_oversized_file_is_skipped_and_logged():
    tree = {"": [make_file("data.csv", size=2_000_000), make_file("small.txt")]}
    service = make_service(tree)
    log = ProgressLog()

    files = await RepositoryCrawler(service).crawl(SOURCE, log)

    assert [f.path for f in files] == ["small.txt"]
    assert any(
        "data.csv" in event.message and "2000000 bytes" in event.message
        for event in log.events
    )
    downloaded = [call.args[0] for call in service.get_file_content.await_args_list]
    assert "https://raw.example/data.csv" not in downloaded


@pytest.mark.asyncio
async def test_binary_file_is_skipped_and_logged(tree):
    service = make_service(tree)
    log = ProgressLog()

    files = await RepositoryCrawler(service).crawl(SOURCE, log)

    assert "logo.png" not in {f.path for f in files}
    skip_events = [e for e in log.events if "logo.png" in e.message]
    assert len(skip_events) == 1
    assert skip_events[0].level is LogLevel.INFO


@pytest.mark.asyncio
async def test_custom_threshold_and_exclusions_come_from_config():
    tree = {
        "": [make_file("a.txt", size=60), make_file("b.txt", size=40), make_dir("vendor")],
        "vendor": [make_file("vendor/lib.txt")],
    }
    config = SyncConfig(max_file_size=50, excluded_directories={"vendor"})

    files = await RepositoryCrawler(make_service(tree), config).crawl(SOURCE)

    assert [f.path for f in files] == ["b.txt"]


@pytest.mark.asyncio
async def test_failed_directory_contributes_nothing_but_crawl_continues(tree):
    service = make_service(tree, broken_dirs={"src/components"})
    log = ProgressLog()

    files = await RepositoryCrawler(service).crawl(SOURCE, log)

    assert "src/index.js" in {f.path for f in files}
    assert "src/components/App.jsx" not in {f.path for f in files}
    errors = log.errors()
    assert len(errors) == 1
    assert "src/components" in errors[0].message


@pytest.mark.asyncio
async def test_failed_root_listing_yields_empty_result():
    service = make_service({}, broken_dirs={""})
    log = ProgressLog()

    files = await RepositoryCrawler(service).crawl(SOURCE, log)

    assert files == []
    assert len(log.errors()) == 1


@pytest.mark.asyncio
async def test_failed_file_download_is_isolated(tree):
    service = make_service(tree, broken_files={"package.json"})
    log = ProgressLog()

    files = await RepositoryCrawler(service).crawl(SOURCE, log)

    paths = {f.path for f in files}
    assert "package.json" not in paths
    assert "README.md" in paths
    assert any("package.json" in e.message and "connection reset" in e.message for e in log.errors())


@pytest.mark.asyncio
async def test_directory_reported_twice_is_expanded_once():
    """Scenario: a listing that loops back onto a visited path"""
    tree = {
        "": [make_dir("a")],
        "a": [make_dir("a/b"), make_file("a/one.txt")],
        "a/b": [make_dir("a"), make_file("a/b/two.txt")],
    }
    service = make_service(tree)

    files = await RepositoryCrawler(service).crawl(SOURCE)

    assert [f.path for f in files] == ["a/b/two.txt", "a/one.txt"]
    listed = [call.args[1] for call in service.list_directory.await_args_list]
    assert sorted(listed) == ["", "a", "a/b"]


@pytest.mark.asyncio
async def test_symlinks_and_submodules_are_ignored():
    tree = {
        "": [
            ContentEntry(name="link", path="link", type="symlink", size=10),
            ContentEntry(name="vendored", path="vendored", type="submodule"),
            make_file("main.go"),
        ]
    }

    files = await RepositoryCrawler(make_service(tree)).crawl(SOURCE)

    assert [f.path for f in files] == ["main.go"]
