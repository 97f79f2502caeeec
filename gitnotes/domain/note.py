"""
Note domain object for gitnotes.

Notes carry identity and bookkeeping only; the body lives in its own
blob at the path derived from (tag name, title).
"""

import time
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

from .tag import create_id


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


# Sentinel for "leave this field unchanged" where None is a meaningful value
_UNSET: Any = object()


@dataclass(frozen=True)
class Note:
    """
    Note record as stored in the metadata index.

    Attributes:
        id: Stable identifier (UUID string)
        tag: Id of the owning tag, or None for untagged notes
        title: Note title, also the basis of its filename
        created_at: Creation time in epoch milliseconds
        updated_at: Last update time in epoch milliseconds, None if never updated
    """

    id: str
    title: str
    tag: Optional[str] = None
    created_at: int = 0
    updated_at: Optional[int] = None

    @classmethod
    def create(cls, title: str, tag: Optional[str] = None) -> 'Note':
        """Create a new note with a fresh id and creation time."""
        return cls(id=create_id(), title=title, tag=tag, created_at=now_ms())

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Note':
        """Create from a metadata index record (camelCase keys)."""
        updated_at = data.get('updatedAt')
        return cls(
            id=str(data['id']),
            title=str(data.get('title', '')),
            tag=data.get('tag') or None,
            created_at=int(data.get('createdAt') or 0),
            updated_at=int(updated_at) if updated_at is not None else None,
        )

    def with_changes(
        self,
        title: Optional[str] = None,
        tag: Any = _UNSET,
        touch: bool = False
    ) -> 'Note':
        """
        Return a copy with the given fields replaced.

        Args:
            title: New title, or None to keep the current one
            tag: New tag id (None detaches); omit to keep the current tag
            touch: Set updated_at to now
        """
        return replace(
            self,
            title=title if title is not None else self.title,
            tag=self.tag if tag is _UNSET else tag,
            updated_at=now_ms() if touch else self.updated_at,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'id': self.id,
            'tag': self.tag,
            'title': self.title,
            'createdAt': self.created_at,
            'updatedAt': self.updated_at,
        }
