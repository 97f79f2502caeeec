"""
Metadata index document for gitnotes.

The index is the source of truth for tag and note identities. It is
stored as pretty-printed JSON; keys this version does not know about are
carried through untouched so older clients do not drop newer data.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List

from .note import Note
from .tag import Tag

KNOWN_KEYS = ('version', 'tags', 'notes')


@dataclass
class GitNotesMeta:
    """
    Parsed metadata index.

    Attributes:
        version: Version of the client that produced the document
        tags: Tag records
        notes: Note records
        extra: Unknown top-level keys, preserved verbatim
    """

    version: str
    tags: List[Tag] = field(default_factory=list)
    notes: List[Note] = field(default_factory=list)
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def empty(cls, version: str) -> 'GitNotesMeta':
        return cls(version=version)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GitNotesMeta':
        """
        Build from a decoded JSON document.

        Raises:
            ValueError: If the document is not an object or records are malformed
        """
        if not isinstance(data, dict):
            raise ValueError("metadata index must be a JSON object")

        try:
            tags = [Tag.from_dict(t) for t in data.get('tags') or []]
            notes = [Note.from_dict(n) for n in data.get('notes') or []]
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"invalid record: {e}") from e

        return cls(
            version=str(data.get('version', '')),
            tags=tags,
            notes=notes,
            extra={k: v for k, v in data.items() if k not in KNOWN_KEYS},
        )

    @classmethod
    def from_json(cls, text: str) -> 'GitNotesMeta':
        """Parse the index file content."""
        return cls.from_dict(json.loads(text))

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            'version': self.version,
            'tags': [t.to_dict() for t in self.tags],
            'notes': [n.to_dict() for n in self.notes],
        }
        for key, value in self.extra.items():
            result.setdefault(key, value)
        return result

    def to_json(self) -> str:
        """Serialize as 2-space indented JSON."""
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)
