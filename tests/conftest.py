"""
Shared fixtures for gitnotes tests.

FakeGitHub is an in-memory stand-in for GitHubClient: content-addressed
blobs, immutable trees and commits, one ref per branch, and the same
precondition checks the contents API applies.
"""

import hashlib
import json
from typing import Dict, List, Optional

import pytest

from gitnotes.domain.tree import BLOB, MODE_TREE, TREE, TreeEntry, TreeSnapshot
from gitnotes.errors import (
    AlreadyExistsError,
    AuthenticationError,
    ConflictError,
    NotFoundError,
    RemoteError,
)
from gitnotes.infra.github_client import (
    FileContent,
    GitHubRepository,
    GitHubUser,
    PutResult,
    _tree_payload,
)
from gitnotes.store import GitNotesCore


def git_blob_hash(content: str) -> str:
    """Git blob hash of text content."""
    data = content.encode('utf-8')
    return hashlib.sha1(b'blob %d\x00' % len(data) + data).hexdigest()


def _digest(obj) -> str:
    return hashlib.sha1(json.dumps(obj, sort_keys=True).encode('utf-8')).hexdigest()


class FakeGitHub:
    """In-memory repository implementing the GitHubClient contract."""

    def __init__(self, login: str = 'octocat', repository: str = 'notes', branch: str = 'main'):
        self.login = login
        self.repository = repository
        self.branch = branch
        self.token: Optional[str] = None
        self.valid_tokens = {'ghp_valid'}

        self.blobs: Dict[str, str] = {}
        self.trees: Dict[str, Dict[str, str]] = {}
        self.commits: Dict[str, dict] = {}
        self.refs: Dict[str, str] = {}
        self.calls: List[str] = []
        self._failures: Dict[str, Exception] = {}
        self.rate_limit = None
        self._counter = 0

        self.refs[branch] = self._commit({}, None, 'Initial commit')

    # -- helpers -------------------------------------------------------

    def _commit(self, files: Dict[str, str], parent: Optional[str], message: str) -> str:
        tree = self._store_tree(files)
        self._counter += 1
        sha = _digest({'tree': tree, 'parent': parent, 'message': message, 'n': self._counter})
        self.commits[sha] = {'tree': tree, 'parents': [parent] if parent else [], 'message': message}
        return sha

    def _store_tree(self, files: Dict[str, str]) -> str:
        sha = _digest(sorted(files.items()))
        self.trees[sha] = dict(files)
        return sha

    def _head_files(self, branch: Optional[str] = None) -> Dict[str, str]:
        head = self.refs[branch or self.branch]
        return dict(self.trees[self.commits[head]['tree']])

    def _advance(self, files: Dict[str, str], message: str, branch: Optional[str] = None) -> str:
        branch = branch or self.branch
        commit = self._commit(files, self.refs[branch], message)
        self.refs[branch] = commit
        return commit

    def _record(self, name: str) -> None:
        self.calls.append(name)
        if name in self._failures:
            raise self._failures.pop(name)

    def fail_next(self, method: str, error: Exception) -> None:
        """Make the next call of `method` raise `error`."""
        self._failures[method] = error

    def files(self) -> Dict[str, str]:
        """Path -> content at the branch head."""
        return {path: self.blobs[sha] for path, sha in self._head_files().items()}

    def messages(self) -> List[str]:
        """Commit messages on the branch, newest first."""
        result = []
        sha = self.refs[self.branch]
        while sha:
            commit = self.commits[sha]
            result.append(commit['message'])
            sha = commit['parents'][0] if commit['parents'] else None
        return result

    def write(self, path: str, content: str) -> str:
        """Write a file as another client would."""
        sha = git_blob_hash(content)
        self.blobs[sha] = content
        files = self._head_files()
        files[path] = sha
        self._advance(files, f"external write {path}")
        return sha

    # -- auth ----------------------------------------------------------

    def set_token(self, token):
        self.token = token or None

    def has_token(self):
        return self.token is not None

    def get_rate_limit_status(self):
        return self.rate_limit

    def get_user(self):
        self._record('get_user')
        if self.token not in self.valid_tokens:
            raise AuthenticationError(401, "Bad credentials")
        return GitHubUser(login=self.login, name='The Octocat', bio='', avatar_url='https://example.com/o.png')

    def validate_token(self):
        try:
            self.get_user()
        except AuthenticationError:
            return False
        return True

    def get_repository(self, owner, repository):
        self._record('get_repository')
        if owner != self.login or repository != self.repository:
            raise NotFoundError("Not Found")
        return GitHubRepository(
            owner=owner, name=repository, full_name=f"{owner}/{repository}",
            description=None, default_branch=self.branch,
        )

    def create_repository(self, name, description='', private=True):
        self._record('create_repository')
        self.repository = name
        return self.get_repository(self.login, name)

    # -- git data ------------------------------------------------------

    def get_ref(self, owner, repository, branch):
        self._record('get_ref')
        if branch not in self.refs:
            raise NotFoundError("Not Found")
        return self.refs[branch]

    def update_ref(self, owner, repository, branch, commit_hash, force=False):
        self._record('update_ref')
        parents = self.commits[commit_hash]['parents']
        if not force and self.refs[branch] not in parents:
            raise ConflictError("Update is not a fast forward")
        self.refs[branch] = commit_hash
        return commit_hash

    def get_tree(self, owner, repository, tree_ish):
        self._record('get_tree')
        if tree_ish in self.commits:
            tree_sha = self.commits[tree_ish]['tree']
        elif tree_ish in self.refs:
            tree_sha = self.commits[self.refs[tree_ish]]['tree']
        elif tree_ish in self.trees:
            tree_sha = tree_ish
        else:
            raise NotFoundError("Not Found")

        files = self.trees[tree_sha]
        dirs = {}
        for path in files:
            parts = path.split('/')[:-1]
            for i in range(1, len(parts) + 1):
                directory = '/'.join(parts[:i])
                dirs[directory] = _digest(sorted(
                    (p, s) for p, s in files.items() if p.startswith(directory + '/')
                ))

        entries = [TreeEntry(path=d, type=TREE, blob_hash=h, mode=MODE_TREE) for d, h in dirs.items()]
        entries += [
            TreeEntry(path=p, type=BLOB, blob_hash=s, size=len(self.blobs[s].encode('utf-8')))
            for p, s in files.items()
        ]
        entries.sort(key=lambda e: e.path)
        return TreeSnapshot(root_hash=tree_sha, entries=entries)

    def post_tree(self, owner, repository, entries):
        self._record('post_tree')
        files = {}
        for item in _tree_payload(entries):
            if item['type'] != BLOB:
                continue
            if item['path'] in files:
                raise RemoteError(422, f"Duplicate path {item['path']}")
            if item.get('sha') not in self.blobs:
                raise RemoteError(422, f"Unknown blob for {item['path']}")
            files[item['path']] = item['sha']
        return self._store_tree(files)

    def create_commit(self, owner, repository, parent_hash, tree_hash, message):
        self._record('create_commit')
        if parent_hash not in self.commits or tree_hash not in self.trees:
            raise RemoteError(422, "Invalid parent or tree")
        return self._commit(self.trees[tree_hash], parent_hash, message)

    # -- contents ------------------------------------------------------

    def get_file_content(self, owner, repository, path, ref=None):
        self._record('get_file_content')
        files = self._head_files(ref)
        if path not in files:
            raise NotFoundError("Not Found", details={'path': path})
        sha = files[path]
        return FileContent(path=path, content=self.blobs[sha], blob_hash=sha, size=len(self.blobs[sha]))

    def put_file_content(self, owner, repository, path, content, message, branch=None, blob_hash=None):
        self._record('put_file_content')
        files = self._head_files(branch)
        if blob_hash is None and path in files:
            raise AlreadyExistsError(f"{path} already exists")
        if blob_hash is not None and files.get(path) != blob_hash:
            raise ConflictError(f"{path} does not match {blob_hash}")

        sha = git_blob_hash(content)
        self.blobs[sha] = content
        files[path] = sha
        commit = self._advance(files, message, branch)
        return PutResult(path=path, blob_hash=sha, commit_hash=commit, created=blob_hash is None)

    def delete_file_content(self, owner, repository, path, message, blob_hash, branch=None):
        self._record('delete_file_content')
        files = self._head_files(branch)
        if path not in files:
            raise NotFoundError("Not Found")
        if files[path] != blob_hash:
            raise ConflictError(f"{path} does not match {blob_hash}")
        del files[path]
        self._advance(files, message, branch)
        return True


@pytest.fixture
def fake():
    return FakeGitHub()


@pytest.fixture
def core(fake):
    """Core bound to the fake repository with a bootstrapped index."""
    core = GitNotesCore(fake, version='0.1.0')
    core.init_user('octocat', 'notes', 'main', 'ghp_valid')
    core.load_meta()
    return core
