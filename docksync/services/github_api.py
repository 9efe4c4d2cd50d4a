"""
GitHub API service: the only component that talks to the remote host.

Content calls (listings, raw downloads, file creation) go through an
``httpx.AsyncClient``; account-scoped calls (credential validation and
repository creation) go through PyGithub in a worker thread.
"""

import asyncio
import math
from typing import Any, Dict, List, Optional, Tuple, Type, Union
from urllib.parse import quote

import httpx
from github import Auth, Github

from ..models import (
    ContentEntry, CreatedRepository, GitHubUser, RemoteFile,
    RepositoryReference, SyncConfig
)
from ..infrastructure.error_handler import (
    WRITE_RETRYABLE_ERRORS, AuthenticationError, RateLimitError,
    handle_api_error, retry_on_error
)
from ..infrastructure.rate_limiter import RateLimiter
from ..infrastructure.retry_manager import RetryManager
from ..infrastructure.logger import logger


class GitHubAPIService:
    """Async facade over the GitHub REST API."""

    def __init__(
        self,
        rate_limiter: RateLimiter,
        retry_manager: RetryManager,
        auth_token: Optional[str] = None,
        config: Optional[SyncConfig] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        github_client: Optional[Github] = None
    ):
        self.rate_limiter = rate_limiter
        self.retry_manager = retry_manager
        self.auth_token = auth_token
        self.config = config or SyncConfig()
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            base_url=self.config.api_url,
            timeout=self.config.timeout,
            follow_redirects=True,
        )
        self._github = github_client

    ####
    ##      REQUEST PLUMBING
    #####
    @property
    def headers(self) -> Dict[str, str]:
        headers = {"Accept": self.config.accept_header}
        if self.auth_token:
            headers["Authorization"] = f"token {self.auth_token}"
        return headers

    @property
    def github(self) -> Github:
        """PyGithub client bound to the credential, created on first use."""

        if self._github is None:
            if not self.auth_token:
                raise AuthenticationError("A GitHub token is required for this operation")
            self._github = Github(
                auth=Auth.Token(self.auth_token),
                base_url=self.config.api_url,
                timeout=math.ceil(self.config.timeout),
            )
        return self._github

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        await self.rate_limiter.acquire()

        response = await self._client.request(method, url, headers=self.headers, **kwargs)
        await self.rate_limiter.update_rate_limit_info(response.headers)

        if response.status_code == 429 or (
            response.status_code == 403
            and response.headers.get("x-ratelimit-remaining") == "0"
        ):
            raise RateLimitError(f"Rate limit exceeded for {method} {url}")

        response.raise_for_status()
        return response

    async def _send(
        self,
        method: str,
        url: str,
        retryable: Optional[Tuple[Type[Exception], ...]] = None,
        **kwargs
    ) -> httpx.Response:
        return await self.retry_manager.execute(
            self._request, method, url, exceptions=retryable, **kwargs
        )

    @staticmethod
    def _contents_url(repository: RepositoryReference, path: str = "") -> str:
        url = f"/repos/{repository.owner}/{repository.name}/contents"
        if path:
            url = f"{url}/{quote(path.strip('/'), safe='/')}"
        return url

    ####
    ##      READ OPERATIONS
    #####
    @handle_api_error
    async def get_repository_info(self, owner: str, name: str) -> Dict[str, Any]:
        """Fetch the raw repository descriptor (``GET /repos/{owner}/{repo}``)."""

        response = await self._send("GET", f"/repos/{owner}/{name}")
        return response.json()

    @handle_api_error
    async def list_directory(
        self,
        repository: RepositoryReference,
        path: str = ""
    ) -> List[ContentEntry]:
        """
        List one directory of a repository.

        Args:
            repository: Repository and branch to read
            path: Directory path relative to the root ('' for the root)

        Returns:
            Entries of the directory in the order the API returned them
        """
        response = await self._send(
            "GET",
            self._contents_url(repository, path),
            params={"ref": repository.branch},
        )
        payload = response.json()

        # A file path yields a single object rather than a listing
        if isinstance(payload, dict):
            payload = [payload]

        return [ContentEntry.from_api(item) for item in payload]

    @handle_api_error
    async def get_file_content(self, download_url: str) -> Union[str, bytes]:
        """
        Download raw file content.

        Returns:
            Text when the bytes decode as UTF-8, otherwise the raw bytes
        """
        response = await self._send("GET", download_url)
        raw = response.content
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError:
            logger.debug(f"Keeping {download_url} as binary content")
            return raw

    ####
    ##      WRITE OPERATIONS
    #####
    @retry_on_error(max_retries=2, delay=1.0)
    def _fetch_user(self) -> GitHubUser:
        user = self.github.get_user()
        return GitHubUser(login=user.login, name=user.name)

    @retry_on_error(max_retries=2, delay=1.0, retryable=WRITE_RETRYABLE_ERRORS)
    def _create_repo(
        self,
        name: str,
        description: Optional[str],
        private: bool
    ) -> CreatedRepository:
        options: Dict[str, Any] = {"private": private, "auto_init": False}
        if description:
            options["description"] = description

        repo = self.github.get_user().create_repo(name, **options)
        return CreatedRepository(
            owner=repo.owner.login,
            name=repo.name,
            full_name=repo.full_name,
            html_url=repo.html_url,
            private=bool(repo.private),
            default_branch=repo.default_branch,
        )

    @handle_api_error
    async def get_authenticated_user(self) -> GitHubUser:
        """Validate the credential (``GET /user``) and return its account."""

        await self.rate_limiter.acquire()
        return await asyncio.to_thread(self._fetch_user)

    @handle_api_error
    async def create_repository(
        self,
        name: str,
        description: Optional[str] = None,
        private: bool = False
    ) -> CreatedRepository:
        """Create an empty repository owned by the authenticated user."""

        await self.rate_limiter.acquire()
        return await asyncio.to_thread(self._create_repo, name, description, private)

    @handle_api_error
    async def create_file(
        self,
        destination: RepositoryReference,
        file: RemoteFile,
        message: str
    ) -> Dict[str, Any]:
        """
        Commit one file to the destination (``PUT .../contents/{path}``).

        Content is base64 encoded from the file's bytes, so text and
        binary payloads round-trip unchanged.
        """
        response = await self._send(
            "PUT",
            self._contents_url(destination, file.path),
            retryable=WRITE_RETRYABLE_ERRORS,
            json={
                "message": message,
                "content": file.encoded_content(),
                "branch": destination.branch,
            },
        )
        return response.json()

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()
        if self._github is not None:
            self._github.close()

    async def __aenter__(self) -> "GitHubAPIService":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()


__all__ = [
    "GitHubAPIService",
]
