"""
File name classification used to tag crawled and synthesized files.

Both functions are pure: they look at the name only, never at content.
"""

from ..models.files import ContentKind


BINARY_EXTENSIONS = (
    # Images
    '.jpg', '.jpeg', '.png', '.gif', '.bmp', '.ico', '.svg',
    # Documents
    '.pdf', '.doc', '.docx', '.ppt', '.pptx', '.xls', '.xlsx',
    # Archives
    '.zip', '.tar', '.gz', '.rar', '.7z',
    # Executables and libraries
    '.exe', '.dll', '.so', '.dylib',
    # Audio and video
    '.mp3', '.mp4', '.avi', '.mov', '.webm',
    # Fonts
    '.ttf', '.woff', '.woff2', '.eot',
)

EXACT_NAMES = {
    'Dockerfile': ContentKind.DOCKERFILE,
    'docker-compose.yml': ContentKind.COMPOSE,
    'docker-compose.yaml': ContentKind.COMPOSE,
    '.dockerignore': ContentKind.DOCKERIGNORE,
}

# Checked in order; the first matching suffix wins
SUFFIX_RULES = (
    (('.js', '.jsx'), ContentKind.JAVASCRIPT),
    (('.ts', '.tsx'), ContentKind.TYPESCRIPT),
    (('.css', '.scss', '.sass'), ContentKind.STYLE),
    (('.html', '.htm'), ContentKind.MARKUP),
    (('.json',), ContentKind.JSON),
    (('.md',), ContentKind.MARKDOWN),
    (('.py',), ContentKind.PYTHON),
    (('.rb',), ContentKind.RUBY),
    (('.php',), ContentKind.PHP),
    (('.java',), ContentKind.JAVA),
    (('.go',), ContentKind.GO),
)


def base_name(filename: str) -> str:
    return filename.rstrip('/').rsplit('/', 1)[-1]


def classify(filename: str) -> ContentKind:
    """
    Map a file name (or repository path) to its ContentKind.

    Exact names are matched before suffixes. Anything unrecognised is
    ``ContentKind.PLAIN``.
    """
    name = base_name(filename)

    if name in EXACT_NAMES:
        return EXACT_NAMES[name]
    if name.lower() == 'readme.md':
        return ContentKind.README

    for suffixes, kind in SUFFIX_RULES:
        if name.endswith(suffixes):
            return kind

    return ContentKind.PLAIN


def is_likely_binary(filename: str) -> bool:
    """True when the name ends with a known binary extension."""
    return filename.lower().endswith(BINARY_EXTENSIONS)


__all__ = [
    "BINARY_EXTENSIONS",
    "classify",
    "is_likely_binary",
]
