"""
Git tree objects for gitnotes.

Mirrors the shape of the remote's recursive tree listing. TreeEntry is
mutable on purpose: a move rewrites paths in place on a fresh snapshot
and the rewritten list is posted back as a new tree.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

BLOB = 'blob'
TREE = 'tree'

# Git file modes
MODE_FILE = '100644'
MODE_TREE = '040000'


@dataclass
class TreeEntry:
    """
    One path in a recursive tree listing.

    Attributes:
        path: Repository-relative path
        type: "blob" or "tree"
        blob_hash: Object hash; None once a move invalidated a directory
        size: Blob size in bytes (0 for trees)
        mode: Git file mode
    """

    path: str
    type: str = BLOB
    blob_hash: Optional[str] = None
    size: int = 0
    mode: str = MODE_FILE

    @property
    def is_tree(self) -> bool:
        return self.type == TREE

    @classmethod
    def from_api_response(cls, data: Dict[str, Any]) -> 'TreeEntry':
        """Create from one item of the remote tree listing."""
        entry_type = data.get('type', BLOB)
        return cls(
            path=data['path'],
            type=entry_type,
            blob_hash=data.get('sha'),
            size=data.get('size', 0) or 0,
            mode=data.get('mode') or (MODE_TREE if entry_type == TREE else MODE_FILE),
        )

    def to_dict(self) -> Dict[str, Any]:
        result = {
            'path': self.path,
            'mode': self.mode,
            'type': self.type,
        }
        if self.blob_hash is not None:
            result['sha'] = self.blob_hash
        return result


@dataclass
class TreeSnapshot:
    """Result of fetching a recursive tree for a branch head."""
    root_hash: str
    entries: List[TreeEntry] = field(default_factory=list)
    truncated: bool = False


@dataclass(frozen=True)
class PathMove:
    """A directory or file move: every path equal to or under `source` goes to `target`."""
    source: str
    target: str

    def apply(self, path: str) -> Optional[str]:
        """
        Rewrite a path if it is covered by this move.

        Returns:
            New path, or None when the path is not under `source`
        """
        if path == self.source:
            return self.target
        prefix = self.source + '/'
        if path.startswith(prefix):
            return self.target + '/' + path[len(prefix):]
        return None
