"""
The remote hosting API as the release pipeline sees it, and its GitHub
implementation over `httpx`.
"""

import base64
from pathlib import Path
from typing import Any, Protocol

import httpx
from pyvider.telemetry import logger

from .exceptions import RemoteAPIError
from .models import RemoteFile, RemoteRelease, RemoteRepository

TOKEN_ENV_VAR = "GITHUB_TOKEN"
API_BASE_URL = "https://api.github.com"
UPLOADS_BASE_URL = "https://uploads.github.com"


class RemoteHost(Protocol):
    def get_release_by_tag(
        self, repo: RemoteRepository, tag: str
    ) -> RemoteRelease | None: ...

    def create_release(
        self, repo: RemoteRepository, tag: str, name: str, draft: bool
    ) -> RemoteRelease: ...

    def upload_release_asset(
        self, repo: RemoteRepository, release: RemoteRelease, name: str, path: Path
    ) -> None: ...

    def get_file(self, repo: RemoteRepository, path: str) -> RemoteFile | None: ...

    def create_or_update_file(
        self,
        repo: RemoteRepository,
        path: str,
        content: str,
        message: str,
        sha: str | None,
    ) -> None: ...


def _release_from_json(data: dict[str, Any]) -> RemoteRelease:
    return RemoteRelease(
        id=int(data["id"]),
        tag_name=data.get("tag_name", ""),
        html_url=data.get("html_url", ""),
    )


class GitHubClient:
    def __init__(
        self,
        token: str,
        api_base_url: str = API_BASE_URL,
        uploads_base_url: str = UPLOADS_BASE_URL,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.uploads_base_url = uploads_base_url.rstrip("/")
        self._client = httpx.Client(
            base_url=api_base_url,
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
            },
            transport=transport,
            timeout=None,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "GitHubClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        logger.debug(f"{method} {url}")
        try:
            response = self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise RemoteAPIError(f"{method} {url} failed: {e}") from e

        if response.is_error:
            try:
                detail = response.json().get("message", response.text)
            except (ValueError, AttributeError):
                detail = response.text
            raise RemoteAPIError(
                f"{method} {url} returned {response.status_code}: {detail}",
                status_code=response.status_code,
            )
        return response

    def _get_optional(self, url: str) -> httpx.Response | None:
        """GET that maps 404 to None; every other failure raises."""
        try:
            return self._request("GET", url)
        except RemoteAPIError as e:
            if e.status_code == httpx.codes.NOT_FOUND:
                return None
            raise

    def get_release_by_tag(
        self, repo: RemoteRepository, tag: str
    ) -> RemoteRelease | None:
        response = self._get_optional(f"/repos/{repo.owner}/{repo.name}/releases/tags/{tag}")
        if response is None:
            return None
        return _release_from_json(response.json())

    def create_release(
        self, repo: RemoteRepository, tag: str, name: str, draft: bool
    ) -> RemoteRelease:
        response = self._request(
            "POST",
            f"/repos/{repo.owner}/{repo.name}/releases",
            json={"tag_name": tag, "name": name, "draft": draft},
        )
        return _release_from_json(response.json())

    def upload_release_asset(
        self, repo: RemoteRepository, release: RemoteRelease, name: str, path: Path
    ) -> None:
        url = (
            f"{self.uploads_base_url}/repos/{repo.owner}/{repo.name}"
            f"/releases/{release.id}/assets"
        )
        try:
            asset = path.open("rb")
        except OSError as e:
            raise RemoteAPIError(f"Failed to open asset file {path}: {e}") from e
        with asset:
            self._request(
                "POST",
                url,
                params={"name": name},
                headers={"Content-Type": "application/octet-stream"},
                content=asset,
            )

    def get_file(self, repo: RemoteRepository, path: str) -> RemoteFile | None:
        response = self._get_optional(f"/repos/{repo.owner}/{repo.name}/contents/{path}")
        if response is None:
            return None
        data = response.json()
        return RemoteFile(path=data.get("path", path), sha=data["sha"])

    def create_or_update_file(
        self,
        repo: RemoteRepository,
        path: str,
        content: str,
        message: str,
        sha: str | None,
    ) -> None:
        body: dict[str, Any] = {
            "message": message,
            "content": base64.b64encode(content.encode()).decode("ascii"),
        }
        if sha:
            body["sha"] = sha
        self._request(
            "PUT", f"/repos/{repo.owner}/{repo.name}/contents/{path}", json=body
        )
