"""
Store layer for gitnotes.

Maps notes and tags onto a Git tree:
- paths: deterministic note/tag path resolution
- TreeMirror: in-memory snapshot of the remote tree
- MetadataIndex: the `.gitnotes` index with optimistic locking
- GitNotesCore: compound document operations
"""

from .paths import (
    META_FILE,
    NOTES_FOLDER,
    TAG_MARKER,
    sanitize_filename,
    note_path,
    tag_dir,
    tag_meta_path,
)
from .tree import TreeMirror
from .meta import MetadataIndex
from .core import GitNotesCore, content_message

__all__ = [
    'META_FILE',
    'NOTES_FOLDER',
    'TAG_MARKER',
    'sanitize_filename',
    'note_path',
    'tag_dir',
    'tag_meta_path',
    'TreeMirror',
    'MetadataIndex',
    'GitNotesCore',
    'content_message',
]
