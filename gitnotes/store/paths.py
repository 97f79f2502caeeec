"""
Mapping between notes/tags and repository paths.

Layout inside the repository:

    .gitnotes                   metadata index
    notes/<title>.md            untagged note
    notes/<tag>/<title>.md      tagged note
    notes/<tag>/.tag            tag marker

Everything here is pure string manipulation.
"""

import re
import unicodedata
from typing import Optional

META_FILE = '.gitnotes'
NOTES_FOLDER = 'notes'
TAG_MARKER = '.tag'
NOTE_SUFFIX = '.md'

UNTITLED = 'untitled'
MAX_SEGMENT_LENGTH = 120

# Path separators, Windows-reserved characters and control characters
_UNSAFE = re.compile(r'[<>:"/\\|?*\x00-\x1f\x7f]')
_PUNCT_RUN = re.compile(r'[^\w\s.\-]+')
_SPACE_RUN = re.compile(r'\s+')
_DOT_DASH_RUN = re.compile(r'[.\-]{2,}')


def sanitize_filename(raw: str) -> str:
    """
    Turn arbitrary text into a safe single path segment.

    Unsafe characters become spaces, other punctuation runs become a
    single dash, whitespace runs collapse to one space, and leading or
    trailing dots, dashes and spaces are dropped. Idempotent.

    Args:
        raw: Title or tag name

    Returns:
        Sanitized segment, never empty
    """
    name = unicodedata.normalize('NFC', raw or '')
    name = _UNSAFE.sub(' ', name)
    name = _PUNCT_RUN.sub('-', name)
    name = _SPACE_RUN.sub(' ', name)
    name = _DOT_DASH_RUN.sub('-', name)
    name = name[:MAX_SEGMENT_LENGTH].strip(' .-')
    return name or UNTITLED


def tag_dir(tag_name: str) -> str:
    """Directory holding a tag's notes: notes/<tag>."""
    return f"{NOTES_FOLDER}/{sanitize_filename(tag_name)}"


def tag_meta_path(tag_name: str) -> str:
    """Path of a tag's marker file: notes/<tag>/.tag."""
    return f"{tag_dir(tag_name)}/{TAG_MARKER}"


def note_path(title: str, tag_name: Optional[str] = None) -> str:
    """
    Path of a note file.

    Examples:
        note_path("Groceries")          -> "notes/Groceries.md"
        note_path("Groceries", "todo")  -> "notes/todo/Groceries.md"
    """
    filename = sanitize_filename(title) + NOTE_SUFFIX
    if tag_name:
        return f"{tag_dir(tag_name)}/{filename}"
    return f"{NOTES_FOLDER}/{filename}"


def is_note_path(path: str) -> bool:
    """True for paths shaped like a note file (tagged or not)."""
    parts = path.split('/')
    return (
        parts[0] == NOTES_FOLDER
        and len(parts) in (2, 3)
        and parts[-1].endswith(NOTE_SUFFIX)
        and len(parts[-1]) > len(NOTE_SUFFIX)
    )


def resolve_tag_from_path(path: str) -> Optional[str]:
    """
    Tag directory name of a note or marker path.

    Returns:
        The tag segment, or None for untagged notes and foreign paths
    """
    parts = path.split('/')
    if len(parts) == 3 and parts[0] == NOTES_FOLDER:
        return parts[1]
    return None


def title_from_path(path: str) -> Optional[str]:
    """
    Title segment of a note path (the sanitized title).

    Returns:
        Filename without the .md suffix, or None if not a note path
    """
    if not is_note_path(path):
        return None
    return path.rsplit('/', 1)[-1][:-len(NOTE_SUFFIX)]
