"""
gitnotes - Markdown notes stored in a GitHub repository.

Each note is a Markdown file under notes/, each tag is a folder of notes,
and a JSON index (.gitnotes) at the repository root records tags, notes
and timestamps. Renaming a tag moves its whole folder in a single commit.

Quick Start:
    import gitnotes

    gn = gitnotes.GitNotes()
    gn.login(token="ghp_...", repository="notes", create=True)

    todo = gn.add_tag("todo", color="red")
    gn.add_note("Groceries", "- milk", tag_id=todo.id)
    gn.rename_tag(todo.id, "work")

Domain Objects:
    Tag - Folder of notes with a colour
    Note - Note record (id, title, tag, timestamps)
    GitNotesMeta - The metadata index document

Layers:
    GitHubClient - Remote git data and contents API
    GitNotesCore - Document operations over the tree and the index
"""

__version__ = "0.1.0"

from .api import GitNotes
from .domain import Note, Tag, GitNotesMeta
from .errors import (
    GitNotesError,
    NotFoundError,
    ConflictError,
    AlreadyExistsError,
    NotReadyError,
    RemoteError,
)
from .infra import GitHubClient
from .store import GitNotesCore

__all__ = [
    '__version__',
    'GitNotes',
    'GitNotesCore',
    'GitHubClient',
    'Note',
    'Tag',
    'GitNotesMeta',
    'GitNotesError',
    'NotFoundError',
    'ConflictError',
    'AlreadyExistsError',
    'NotReadyError',
    'RemoteError',
]
