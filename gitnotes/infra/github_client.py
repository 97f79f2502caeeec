"""
GitHub API client infrastructure for gitnotes.

Typed wrapper around the GitHub REST endpoints the document store needs:
- users and repositories (profile, token validation, bootstrap)
- git data (refs, recursive trees, tree creation, commits)
- contents (get / create-or-update / delete a file)

Every non-2xx response raises from gitnotes.errors. Nothing is retried:
a conflict or a rate limit is reported to the caller as-is.
"""

import base64
import logging
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional
from urllib.parse import quote

import requests

from ..domain.tree import BLOB, TREE, TreeEntry, TreeSnapshot
from ..errors import (
    AlreadyExistsError,
    AuthenticationError,
    ConflictError,
    NetworkError,
    NotFoundError,
    RateLimitError,
    RemoteError,
    message_for_status,
)

logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"
DEFAULT_TIMEOUT = 30


@dataclass
class RateLimitStatus:
    """GitHub API rate limit status."""
    remaining: int
    limit: int
    reset_time: int  # Unix timestamp
    used: int

    @property
    def reset_datetime(self) -> datetime:
        """Get reset time as datetime."""
        return datetime.fromtimestamp(self.reset_time)

    @property
    def minutes_until_reset(self) -> int:
        """Minutes until rate limit resets."""
        now = int(time.time())
        return max(0, (self.reset_time - now) // 60)

    @property
    def is_low(self) -> bool:
        """Check if rate limit is getting low (< 100 remaining)."""
        return self.remaining < 100


@dataclass
class GitHubUser:
    """Authenticated GitHub user profile."""
    login: str
    name: str = ''
    bio: str = ''
    avatar_url: str = ''

    @classmethod
    def from_api_response(cls, data: Dict[str, Any]) -> 'GitHubUser':
        """Create from GitHub API response."""
        return cls(
            login=data.get('login', ''),
            name=data.get('name') or '',
            bio=data.get('bio') or '',
            avatar_url=data.get('avatar_url') or '',
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'login': self.login,
            'name': self.name,
            'bio': self.bio,
            'avatar_url': self.avatar_url,
        }


@dataclass
class GitHubRepository:
    """Repository summary used to bind a session."""
    owner: str
    name: str
    full_name: str
    description: Optional[str]
    default_branch: str
    html_url: str = ''
    is_private: bool = False

    @classmethod
    def from_api_response(cls, data: Dict[str, Any]) -> 'GitHubRepository':
        """Create from GitHub API response."""
        owner = data.get('owner', {})

        return cls(
            owner=owner.get('login', '') if isinstance(owner, dict) else str(owner),
            name=data.get('name', ''),
            full_name=data.get('full_name', ''),
            description=data.get('description'),
            default_branch=data.get('default_branch', 'main'),
            html_url=data.get('html_url', ''),
            is_private=data.get('private', False),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'owner': self.owner,
            'name': self.name,
            'full_name': self.full_name,
            'description': self.description,
            'default_branch': self.default_branch,
            'html_url': self.html_url,
            'is_private': self.is_private,
        }


@dataclass
class FileContent:
    """Decoded file content with the blob hash it was read at."""
    path: str
    content: str
    blob_hash: str
    size: int = 0


@dataclass
class PutResult:
    """Outcome of a create-or-update file write."""
    path: str
    blob_hash: str
    commit_hash: Optional[str] = None
    created: bool = False


def encode_content(text: str) -> str:
    """Encode text for the contents API."""
    return base64.b64encode(text.encode('utf-8')).decode('ascii')


def decode_content(data: str) -> str:
    """Decode contents API payload (Base64, possibly wrapped) to text."""
    return base64.b64decode(data.encode('ascii')).decode('utf-8')


def _tree_payload(entries: List[TreeEntry]) -> List[Dict[str, Any]]:
    """
    Serialize tree entries for tree creation.

    Directory entries without a hash are left out: the remote builds them
    from the nested blob paths. A directory that still has a hash is only
    sent when none of its children are listed.
    """
    listed_dirs = set()
    for entry in entries:
        parts = entry.path.split('/')[:-1]
        for i in range(1, len(parts) + 1):
            listed_dirs.add('/'.join(parts[:i]))

    payload = []
    for entry in entries:
        if entry.type == TREE and (entry.blob_hash is None or entry.path in listed_dirs):
            continue
        payload.append(entry.to_dict())
    return payload


class GitHubClient:
    """
    GitHub REST client bound to one auth token.

    Example:
        client = GitHubClient(token="ghp_...")
        snapshot = client.get_tree("octocat", "notes", "main")
        for entry in snapshot.entries:
            print(entry.path)
    """

    def __init__(
        self,
        token: Optional[str] = None,
        base_url: str = GITHUB_API_URL,
        timeout: int = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize GitHubClient.

        Args:
            token: GitHub personal access token
            base_url: API root (GitHub Enterprise uses https://host/api/v3)
            timeout: HTTP request timeout in seconds
            session: Pre-built requests session (mainly for tests)
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            'Accept': 'application/vnd.github.v3+json',
            'User-Agent': 'gitnotes',
        })
        self._token: Optional[str] = None
        self._rate_limit_status: Optional[RateLimitStatus] = None
        self.set_token(token)

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    def set_token(self, token: Optional[str]) -> None:
        """Use a token for authorization, or clear it with None."""
        self._token = token or None
        if self._token:
            self.session.headers['Authorization'] = f'token {self._token}'
        else:
            self.session.headers.pop('Authorization', None)

    def has_token(self) -> bool:
        return self._token is not None

    def get_rate_limit_status(self) -> Optional[RateLimitStatus]:
        """Rate limit status from the last API call, if any."""
        return self._rate_limit_status

    def _update_rate_limit_from_headers(self, headers: Mapping[str, str]) -> None:
        """Update rate limit status from response headers."""
        try:
            remaining = int(headers.get('X-RateLimit-Remaining', -1))
            limit = int(headers.get('X-RateLimit-Limit', -1))
            reset_time = int(headers.get('X-RateLimit-Reset', 0))
            used = int(headers.get('X-RateLimit-Used', 0))
        except (ValueError, TypeError):
            return

        if remaining >= 0 and limit >= 0:
            self._rate_limit_status = RateLimitStatus(
                remaining=remaining,
                limit=limit,
                reset_time=reset_time,
                used=used
            )

            if self._rate_limit_status.is_low:
                logger.warning(
                    f"GitHub API rate limit low: {remaining}/{limit} remaining, "
                    f"resets in {self._rate_limit_status.minutes_until_reset} minutes"
                )

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _request(
        self,
        method: str,
        endpoint: str,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
        errors: Optional[Dict[int, type]] = None
    ) -> requests.Response:
        """
        Send one request and map failures onto the error taxonomy.

        Args:
            method: HTTP method
            endpoint: Path relative to the API root
            json: JSON body
            params: Query parameters
            errors: Per-call overrides mapping status code to exception class

        Returns:
            The successful response
        """
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        logger.debug(f"{method} {url}")

        try:
            response = self.session.request(
                method, url, json=json, params=params, timeout=self.timeout
            )
        except requests.RequestException as e:
            raise NetworkError(f"GitHub API request failed: {e}") from e

        self._update_rate_limit_from_headers(response.headers)

        if 200 <= response.status_code < 300:
            return response

        raise self._error_for(response, errors or {})

    def _error_for(self, response: requests.Response, overrides: Dict[int, type]) -> RemoteError:
        status = response.status_code
        message = message_for_status(status)
        try:
            body = response.json()
            if isinstance(body, dict) and body.get('message'):
                message = body['message']
        except ValueError:
            pass

        logger.debug(f"GitHub API error {status}: {message}")

        if status in overrides:
            error_cls = overrides[status]
            if issubclass(error_cls, (NotFoundError, ConflictError, AlreadyExistsError)):
                return error_cls(message)
            return error_cls(status, message)
        if status == 401:
            return AuthenticationError(status, message)
        if status == 429 or (status == 403 and response.headers.get('X-RateLimit-Remaining') == '0'):
            return RateLimitError(status, message)
        if status == 404:
            return NotFoundError(message)
        if status == 409:
            return ConflictError(message)
        return RemoteError(status, message)

    @staticmethod
    def _repo_path(owner: str, repository: str) -> str:
        return f"repos/{quote(owner, safe='')}/{quote(repository, safe='')}"

    # ------------------------------------------------------------------
    # Users and repositories
    # ------------------------------------------------------------------

    def get_user(self) -> GitHubUser:
        """Get the authenticated user."""
        return GitHubUser.from_api_response(self._request('GET', 'user').json())

    def validate_token(self) -> bool:
        """
        Check whether the current token is accepted.

        Returns:
            False on 401; other failures propagate
        """
        if not self.has_token():
            return False
        try:
            self.get_user()
        except AuthenticationError:
            return False
        return True

    def get_repository(self, owner: str, repository: str) -> GitHubRepository:
        """Get repository metadata. Raises NotFoundError if it does not exist."""
        data = self._request('GET', self._repo_path(owner, repository)).json()
        return GitHubRepository.from_api_response(data)

    def create_repository(self, name: str, description: str = '', private: bool = True) -> GitHubRepository:
        """
        Create a repository for the authenticated user.

        The repository is initialized with a first commit so its default
        branch exists and can be read as a tree straight away.
        """
        data = self._request(
            'POST', 'user/repos',
            json={
                'name': name,
                'description': description,
                'private': private,
                'auto_init': True,
            },
            errors={422: AlreadyExistsError},
        ).json()
        logger.info(f"Created repository {data.get('full_name', name)}")
        return GitHubRepository.from_api_response(data)

    # ------------------------------------------------------------------
    # Git data
    # ------------------------------------------------------------------

    def get_ref(self, owner: str, repository: str, branch: str) -> str:
        """Get the commit hash at the head of a branch."""
        data = self._request(
            'GET', f"{self._repo_path(owner, repository)}/git/ref/heads/{quote(branch)}"
        ).json()
        return data['object']['sha']

    def update_ref(
        self,
        owner: str,
        repository: str,
        branch: str,
        commit_hash: str,
        force: bool = False
    ) -> str:
        """
        Move a branch to a commit.

        A non fast-forward update without `force` raises ConflictError.
        """
        data = self._request(
            'PATCH', f"{self._repo_path(owner, repository)}/git/refs/heads/{quote(branch)}",
            json={'sha': commit_hash, 'force': force},
            errors={422: ConflictError},
        ).json()
        return data['object']['sha']

    def get_tree(self, owner: str, repository: str, tree_ish: str) -> TreeSnapshot:
        """
        Get the full recursive tree for a branch, commit or tree hash.

        Returns:
            TreeSnapshot with the root tree hash and every entry
        """
        data = self._request(
            'GET', f"{self._repo_path(owner, repository)}/git/trees/{quote(tree_ish)}",
            params={'recursive': 1},
        ).json()

        truncated = bool(data.get('truncated', False))
        if truncated:
            logger.warning(f"Tree listing for {owner}/{repository} was truncated by the remote")

        return TreeSnapshot(
            root_hash=data['sha'],
            entries=[TreeEntry.from_api_response(item) for item in data.get('tree', [])],
            truncated=truncated,
        )

    def post_tree(self, owner: str, repository: str, entries: List[TreeEntry]) -> str:
        """
        Create a tree object from a full entry list.

        Returns:
            Hash of the new tree
        """
        payload = _tree_payload(entries)
        blobs = sum(1 for item in payload if item['type'] == BLOB)
        logger.debug(f"Posting tree with {len(payload)} entries ({blobs} blobs)")

        data = self._request(
            'POST', f"{self._repo_path(owner, repository)}/git/trees",
            json={'tree': payload},
        ).json()
        return data['sha']

    def create_commit(
        self,
        owner: str,
        repository: str,
        parent_hash: str,
        tree_hash: str,
        message: str
    ) -> str:
        """
        Create a commit object. Does not move any branch.

        Returns:
            Hash of the new commit
        """
        data = self._request(
            'POST', f"{self._repo_path(owner, repository)}/git/commits",
            json={
                'message': message,
                'tree': tree_hash,
                'parents': [parent_hash],
            },
        ).json()
        return data['sha']

    # ------------------------------------------------------------------
    # Contents
    # ------------------------------------------------------------------

    def _contents_path(self, owner: str, repository: str, path: str) -> str:
        return f"{self._repo_path(owner, repository)}/contents/{quote(path)}"

    def get_file_content(
        self,
        owner: str,
        repository: str,
        path: str,
        ref: Optional[str] = None
    ) -> FileContent:
        """
        Read a file.

        Raises:
            NotFoundError: If the path does not exist
        """
        data = self._request(
            'GET', self._contents_path(owner, repository, path),
            params={'ref': ref} if ref else None,
        ).json()

        if isinstance(data, list) or data.get('type') not in (None, 'file'):
            raise NotFoundError(f"{path} is not a file", details={'path': path})

        return FileContent(
            path=data.get('path', path),
            content=decode_content(data.get('content', '')),
            blob_hash=data['sha'],
            size=data.get('size', 0),
        )

    def put_file_content(
        self,
        owner: str,
        repository: str,
        path: str,
        content: str,
        message: str,
        branch: Optional[str] = None,
        blob_hash: Optional[str] = None
    ) -> PutResult:
        """
        Create or update a file.

        Args:
            content: Text content (encoded here)
            message: Commit message
            branch: Target branch (repository default when None)
            blob_hash: Current blob hash; given means update, None means create

        Raises:
            ConflictError: Update whose blob_hash no longer matches
            AlreadyExistsError: Create on a path that already has content
        """
        body: Dict[str, Any] = {
            'message': message,
            'content': encode_content(content),
        }
        if branch is not None:
            body['branch'] = branch
        if blob_hash is not None:
            body['sha'] = blob_hash

        # Without a sha the remote answers 422 for an existing file;
        # with a stale sha it answers 409 (or 422 on some deployments)
        on_422 = AlreadyExistsError if blob_hash is None else ConflictError
        response = self._request(
            'PUT', self._contents_path(owner, repository, path),
            json=body,
            errors={409: ConflictError, 422: on_422},
        )

        data = response.json()
        return PutResult(
            path=path,
            blob_hash=data['content']['sha'],
            commit_hash=(data.get('commit') or {}).get('sha'),
            created=response.status_code == 201,
        )

    def delete_file_content(
        self,
        owner: str,
        repository: str,
        path: str,
        message: str,
        blob_hash: str,
        branch: Optional[str] = None
    ) -> bool:
        """
        Delete a file.

        Raises:
            ConflictError: If blob_hash no longer matches the remote
        """
        body: Dict[str, Any] = {
            'message': message,
            'sha': blob_hash,
        }
        if branch is not None:
            body['branch'] = branch

        response = self._request(
            'DELETE', self._contents_path(owner, repository, path),
            json=body,
            errors={409: ConflictError, 422: ConflictError},
        )
        return response.status_code == 200
