"""
Remote service clients for docksync.
"""

from .github_api import GitHubAPIService

__all__ = ["GitHubAPIService"]
