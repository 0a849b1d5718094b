"""GitHub REST client used as the remote object store.

Deep module: callers ask for a repository to exist or for a file to hold
some content; status-code interpretation, base64 framing and the blob-sha
handshake are handled internally.

File writes are two-phase: ``probe_file`` reads the current blob sha and
``write_file`` sends it back so GitHub can reject a stale overwrite.
``upsert_file`` composes both. With ``conflict_retries=0`` the sequence is
last-write-wins; a rejected write surfaces as ``UpstreamConflictError``.
"""

import base64
import logging
from typing import Any, Dict, Optional, Union
from urllib.parse import quote

import requests

from ..core.config import Settings
from ..exceptions import UpstreamConflictError, UpstreamError

logger = logging.getLogger(__name__)

GITHUB_API_VERSION = "2022-11-28"


class GitHubClient:
    """Thin wrapper over the repository and contents endpoints.

    Args:
        token: Token with ``repo`` scope for the owning account.
        owner: Account that owns the repositories (used in contents URLs).
        api_url: REST base URL.
        branch: Branch files are read from and committed to.
        commit_message: Message for every commit this client makes.
        timeout: Per-request timeout in seconds.
        conflict_retries: How many times ``upsert_file`` re-probes and retries
            after a sha conflict.
        session: Optional preconfigured ``requests.Session``.
    """

    def __init__(
        self,
        token: str,
        owner: str,
        api_url: str = "https://api.github.com",
        branch: str = "main",
        commit_message: str = "Backup Update by Arsyilla AI",
        timeout: float = 30.0,
        conflict_retries: int = 0,
        session: Optional[requests.Session] = None,
    ):
        self.owner = owner
        self.api_url = api_url.rstrip("/")
        self.branch = branch
        self.commit_message = commit_message
        self.timeout = timeout
        self.conflict_retries = conflict_retries
        self.session = session or requests.Session()
        self.session.headers.update(self._headers(token))

    @classmethod
    def from_settings(cls, settings: Settings) -> "GitHubClient":
        return cls(
            token=settings.github_token,
            owner=settings.github_owner,
            api_url=settings.github_api_url,
            branch=settings.github_branch,
            commit_message=settings.commit_message,
            timeout=settings.github_timeout,
            conflict_retries=settings.github_conflict_retries,
        )

    def close(self) -> None:
        self.session.close()

    @staticmethod
    def _headers(token: str) -> Dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _contents_url(self, repo: str, path: str) -> str:
        return f"{self.api_url}/repos/{self.owner}/{repo}/contents/{quote(path, safe='/')}"

    # ----- repositories ---------------------------------------------------

    def create_repository(self, name: str) -> bool:
        """Create a repository under the authenticated account if absent.

        Returns True when GitHub created it, False when it already existed.
        Raises UpstreamError for any other failure.
        """
        try:
            response = self.session.post(
                f"{self.api_url}/user/repos",
                json={"name": name, "auto_init": True},
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as exc:
            raise UpstreamError(
                f"Repository creation failed: {exc}", operation="create_repository"
            ) from exc

        if response.status_code == 201:
            logger.info("Repository created", extra={"repo": name})
            return True

        if response.status_code == 422 and "already exists" in response.text:
            logger.debug("Repository already exists", extra={"repo": name})
            return False

        raise UpstreamError(
            f"Repository creation failed with {response.status_code}: {response.text[:200]}",
            status=response.status_code,
            operation="create_repository",
        )

    # ----- files: two-phase upsert ------------------------------------------

    def probe_file(self, repo: str, path: str) -> Optional[str]:
        """Return the current blob sha of ``path``, or None if it is absent.

        A failed probe is treated like an absent file; the following write
        then goes out as a create.
        """
        try:
            response = self.session.get(
                self._contents_url(repo, path),
                params={"ref": self.branch},
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as exc:
            logger.warning("Probe of %s/%s failed: %s", repo, path, exc)
            return None

        if response.status_code == 404:
            return None
        if response.status_code != 200:
            logger.warning(
                "Probe of %s/%s returned %d", repo, path, response.status_code
            )
            return None

        data = response.json()
        # A directory listing comes back as a list; there is no blob to replace.
        if not isinstance(data, dict):
            return None
        return data.get("sha")

    def write_file(
        self,
        repo: str,
        path: str,
        content: Union[str, bytes],
        sha: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Create or overwrite ``path``. ``sha`` must match the current blob to overwrite.

        Raises UpstreamConflictError when GitHub rejects the sha and
        UpstreamError for any other failure.
        """
        raw = content.encode("utf-8") if isinstance(content, str) else content
        payload: Dict[str, Any] = {
            "message": self.commit_message,
            "content": base64.b64encode(raw).decode("ascii"),
            "branch": self.branch,
        }
        if sha:
            payload["sha"] = sha

        try:
            response = self.session.put(
                self._contents_url(repo, path),
                json=payload,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as exc:
            raise UpstreamError(f"File upload failed: {exc}", operation="write_file") from exc

        if response.status_code in (200, 201):
            logger.info(
                "File written",
                extra={"repo": repo, "path": path, "created": response.status_code == 201},
            )
            return response.json()

        if response.status_code == 409 or (
            response.status_code == 422 and "sha" in response.text
        ):
            raise UpstreamConflictError(
                f"Write to {repo}/{path} rejected: file changed since probe",
                operation="write_file",
            )

        raise UpstreamError(
            f"File upload failed with {response.status_code}: {response.text[:200]}",
            status=response.status_code,
            operation="write_file",
        )

    def upsert_file(self, repo: str, path: str, content: Union[str, bytes]) -> Dict[str, Any]:
        """Probe for the current sha, then write. Retries on conflict if configured."""
        attempts = 1 + self.conflict_retries
        for attempt in range(attempts):
            sha = self.probe_file(repo, path)
            try:
                return self.write_file(repo, path, content, sha=sha)
            except UpstreamConflictError:
                if attempt == attempts - 1:
                    raise
                logger.warning(
                    "Write conflict on %s/%s (attempt %d/%d), re-probing",
                    repo, path, attempt + 1, attempts,
                )
