"""
Domain layer for gitnotes.

Contains pure domain objects with no I/O or side effects:
- Tag, Note: entities recorded in the metadata index
- GitNotesMeta: the metadata index document
- TreeEntry, TreeSnapshot, PathMove: remote tree objects
- RepositoryIdentity, SessionRecord: session binding
- Operation, OperationState: progress of a compound edit
"""

from .tag import Tag, TAG_COLORS, DEFAULT_TAG_COLOR
from .note import Note
from .meta import GitNotesMeta
from .tree import TreeEntry, TreeSnapshot, PathMove
from .session import RepositoryIdentity, SessionRecord
from .operation import Operation, OperationState

__all__ = [
    'Tag',
    'TAG_COLORS',
    'DEFAULT_TAG_COLOR',
    'Note',
    'GitNotesMeta',
    'TreeEntry',
    'TreeSnapshot',
    'PathMove',
    'RepositoryIdentity',
    'SessionRecord',
    'Operation',
    'OperationState',
]
