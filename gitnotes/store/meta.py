"""
Metadata index persistence for gitnotes.

The index (`.gitnotes` at the repository root) lists every tag and note.
Writes are guarded by the blob hash of the last content we saw: the
remote refuses an update whose hash is stale, and that refusal is
surfaced as ConflictError. The index is never merged or auto-retried.
"""

import logging
from typing import Callable, List, Optional

from .. import __version__
from ..domain.meta import GitNotesMeta
from ..domain.note import Note
from ..domain.session import RepositoryIdentity
from ..domain.tag import Tag, find_tag, find_tag_by_name
from ..errors import MetadataParseError, NotReadyError
from ..infra.github_client import GitHubClient
from .paths import META_FILE
from .tree import TreeMirror

logger = logging.getLogger(__name__)

COMMIT_PREFIX = 'GitNotes: '
SAVE_MESSAGE = COMMIT_PREFIX + 'Metadata saved'


class MetadataIndex:
    """
    In-memory metadata index plus its optimistic-lock token.

    Example:
        index = MetadataIndex(client, mirror, lambda: identity)
        index.load()
        index.add_tag(Tag.create("work"))
        index.save()
    """

    def __init__(
        self,
        client: GitHubClient,
        mirror: TreeMirror,
        identity: Callable[[], RepositoryIdentity],
        version: str = __version__
    ):
        self._client = client
        self._mirror = mirror
        self._identity = identity
        self.version = version
        self._meta: Optional[GitNotesMeta] = None
        self._meta_hash: Optional[str] = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def is_loaded(self) -> bool:
        return self._meta is not None

    @property
    def meta(self) -> GitNotesMeta:
        if self._meta is None:
            raise NotReadyError("Metadata index not loaded")
        return self._meta

    @property
    def meta_hash(self) -> Optional[str]:
        """Blob hash of the last content read or written."""
        return self._meta_hash

    @meta_hash.setter
    def meta_hash(self, value: Optional[str]) -> None:
        self._meta_hash = value

    @property
    def tags(self) -> List[Tag]:
        return self.meta.tags

    @property
    def notes(self) -> List[Note]:
        return self.meta.notes

    def snapshot(self) -> GitNotesMeta:
        """Copy of the in-memory index, for rollback."""
        meta = self.meta
        return GitNotesMeta(
            version=meta.version,
            tags=list(meta.tags),
            notes=list(meta.notes),
            extra=dict(meta.extra),
        )

    def restore(self, snapshot: GitNotesMeta) -> None:
        self._meta = snapshot

    def clear(self) -> None:
        self._meta = None
        self._meta_hash = None

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def load(self) -> GitNotesMeta:
        """
        Load the index from the remote, creating it if missing.

        Raises:
            NotReadyError: If the tree mirror has not been refreshed
            MetadataParseError: If the stored document is malformed
        """
        identity = self._identity()

        if self._mirror.find_entry(META_FILE) is None:
            logger.info(f"No metadata index in {identity.full_name}, creating one")
            self._meta = GitNotesMeta.empty(self.version)
            self._meta_hash = None
            self.save()
            return self._meta

        try:
            remote = self._client.get_file_content(
                identity.owner, identity.name, META_FILE, ref=identity.branch
            )
            meta = GitNotesMeta.from_json(remote.content)
        except ValueError as e:
            raise MetadataParseError(META_FILE, str(e)) from e

        self._meta = meta
        self._meta_hash = remote.blob_hash
        logger.debug(
            f"Loaded metadata index v{meta.version}: "
            f"{len(meta.tags)} tags, {len(meta.notes)} notes"
        )
        return meta

    def save(self) -> str:
        """
        Write the index using the last known blob hash as precondition.

        Returns:
            New blob hash of the index

        Raises:
            ConflictError: If the index changed remotely since it was read
        """
        identity = self._identity()
        meta = self.meta
        meta.version = self.version

        result = self._client.put_file_content(
            identity.owner,
            identity.name,
            META_FILE,
            meta.to_json(),
            message=SAVE_MESSAGE,
            branch=identity.branch,
            blob_hash=self._meta_hash,
        )
        self._meta_hash = result.blob_hash
        logger.debug(f"Saved metadata index ({result.blob_hash[:7]})")
        return result.blob_hash

    # ------------------------------------------------------------------
    # Lookups and in-memory edits
    # ------------------------------------------------------------------

    def find_tag(self, tag_id: str) -> Optional[Tag]:
        return find_tag(self.tags, tag_id)

    def find_tag_by_name(self, name: str) -> Optional[Tag]:
        return find_tag_by_name(self.tags, name)

    def find_note(self, note_id: str) -> Optional[Note]:
        for note in self.notes:
            if note.id == note_id:
                return note
        return None

    def notes_for_tag(self, tag_id: Optional[str]) -> List[Note]:
        """Notes under a tag; None selects untagged notes."""
        return [n for n in self.notes if n.tag == tag_id]

    def add_tag(self, tag: Tag) -> None:
        self.tags.append(tag)

    def replace_tag(self, tag: Tag) -> None:
        self.meta.tags = [tag if t.id == tag.id else t for t in self.tags]

    def remove_tag(self, tag_id: str) -> None:
        self.meta.tags = [t for t in self.tags if t.id != tag_id]

    def add_note(self, note: Note) -> None:
        self.notes.append(note)

    def replace_note(self, note: Note) -> None:
        self.meta.notes = [note if n.id == note.id else n for n in self.notes]

    def remove_note(self, note_id: str) -> None:
        self.meta.notes = [n for n in self.notes if n.id != note_id]
