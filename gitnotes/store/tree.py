"""
In-memory mirror of the remote tree for one branch.

The mirror is replaced wholesale on every refresh, never patched. That
costs one recursive tree fetch (O(tree size)) per mutating operation,
which is fine for note collections but is the scaling limit of the store.
"""

import logging
from typing import Callable, Iterable, List, Optional

from ..domain.session import RepositoryIdentity
from ..domain.tree import PathMove, TreeEntry
from ..errors import NotReadyError, RemoteError
from ..infra.github_client import GitHubClient

logger = logging.getLogger(__name__)


class TreeMirror:
    """
    Snapshot of `{root_hash, entries}` for the bound branch.

    Example:
        mirror = TreeMirror(client, lambda: identity)
        mirror.refresh()
        entry = mirror.find_entry("notes/todo/Groceries.md")
    """

    def __init__(self, client: GitHubClient, identity: Callable[[], RepositoryIdentity]):
        """
        Initialize TreeMirror.

        Args:
            client: Remote content client
            identity: Returns the current session identity (raises when unset)
        """
        self._client = client
        self._identity = identity
        self._root_hash: Optional[str] = None
        self._head_commit: Optional[str] = None
        self._entries: List[TreeEntry] = []

    @property
    def is_ready(self) -> bool:
        return self._root_hash is not None

    def _require_ready(self) -> None:
        if not self.is_ready:
            raise NotReadyError("Tree not initialized; refresh the mirror first")

    @property
    def root_hash(self) -> str:
        self._require_ready()
        return self._root_hash

    @property
    def head_commit(self) -> str:
        """Commit the snapshot was taken at; parent of the next tree commit."""
        self._require_ready()
        return self._head_commit

    @property
    def entries(self) -> List[TreeEntry]:
        self._require_ready()
        return self._entries

    def refresh(self) -> None:
        """
        Replace the snapshot with the latest recursive tree of the branch.

        Raises:
            RemoteError: If the remote truncated the listing (the previous
                snapshot is kept)
        """
        identity = self._identity()
        head = self._client.get_ref(identity.owner, identity.name, identity.branch)
        snapshot = self._client.get_tree(identity.owner, identity.name, head)
        if snapshot.truncated:
            # Tree commits post the full entry list, so the mirror must be complete
            raise RemoteError(
                None,
                f"Tree listing for {identity.full_name} is truncated; refusing to mirror it",
                details={'commit': head},
            )

        self._head_commit = head
        self._root_hash = snapshot.root_hash
        self._entries = snapshot.entries
        logger.debug(
            f"Tree refreshed at {head[:7]}: {len(self._entries)} entries"
        )

    def clear(self) -> None:
        self._root_hash = None
        self._head_commit = None
        self._entries = []

    def find_entry(self, path: str) -> Optional[TreeEntry]:
        """Exact-path lookup."""
        for entry in self.entries:
            if entry.path == path:
                return entry
        return None

    def entries_under(self, prefix: str) -> List[TreeEntry]:
        """Entries equal to or nested under a directory prefix."""
        nested = prefix.rstrip('/') + '/'
        return [e for e in self.entries if e.path == prefix or e.path.startswith(nested)]

    def paths(self) -> Iterable[str]:
        return (e.path for e in self.entries)

    def rewrite_paths(self, moves: List[PathMove]) -> int:
        """
        Rewrite entry paths in place.

        Each entry is rewritten by the first move that covers it. Every
        directory entry touched loses its hash so the remote recomputes it.

        Args:
            moves: Source/target prefix pairs

        Returns:
            Number of entries rewritten
        """
        rewritten = 0
        for entry in self.entries:
            for move in moves:
                new_path = move.apply(entry.path)
                if new_path is None:
                    continue
                entry.path = new_path
                if entry.is_tree:
                    entry.blob_hash = None
                rewritten += 1
                break

        # Parent directories of both ends change content too
        ancestors = set()
        for move in moves:
            for path in (move.source, move.target):
                parts = path.split('/')[:-1]
                ancestors.update('/'.join(parts[:i]) for i in range(1, len(parts) + 1))
        for entry in self.entries:
            if entry.is_tree and entry.path in ancestors:
                entry.blob_hash = None

        logger.debug(f"Rewrote {rewritten} tree entries for {len(moves)} move(s)")
        return rewritten
