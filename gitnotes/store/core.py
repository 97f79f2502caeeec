"""
Document operations for gitnotes.

GitNotesCore is the session context object: it owns the repository
identity, the tree mirror and the metadata index, and runs every
create/update/move/delete as the same sequence

    resolve paths -> refresh tree -> mutate remote -> mutate index -> persist index

Remote calls are strictly sequential. The in-memory index is only touched
after the remote mutation succeeded and is rolled back if anything fails
before the index is durably saved. A failure after a tree move but before
the index save is not undone remotely; `load_meta()` resynchronizes.
"""

import json
import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Generator, List, Optional

from .. import __version__
from ..domain.meta import GitNotesMeta
from ..domain.note import Note
from ..domain.operation import Operation, OperationState
from ..domain.session import RepositoryIdentity, SessionRecord
from ..domain.tag import Tag
from ..domain.tree import PathMove
from ..errors import (
    AlreadyExistsError,
    NoteNotFoundError,
    NotFoundError,
    NotReadyError,
    TagNotFoundError,
)
from ..infra.github_client import GitHubClient
from .meta import COMMIT_PREFIX, MetadataIndex
from .paths import NOTES_FOLDER, is_note_path, note_path, tag_dir, tag_meta_path
from .tree import TreeMirror

logger = logging.getLogger(__name__)


def content_message(when: Optional[datetime] = None) -> str:
    """Commit message for content writes, e.g. 'GitNotes 2024.03.01 09:15:00'."""
    return f"GitNotes {(when or datetime.now()).strftime('%Y.%m.%d %H:%M:%S')}"


class GitNotesCore:
    """
    Git-tree-backed document store for one session.

    Example:
        core = GitNotesCore(GitHubClient())
        core.init_user("octocat", "notes", "main", token)
        core.load_meta()
        tag = core.create_tag("todo", "red")
        note = core.create_note("Groceries", "- milk", tag_id=tag.id)
        core.update_tag(tag.id, "work")
    """

    def __init__(self, client: GitHubClient, version: str = __version__):
        """
        Initialize GitNotesCore.

        Args:
            client: Remote content client (its token is replaced by init_user)
            version: Version written into the metadata index
        """
        self.client = client
        self._identity: Optional[RepositoryIdentity] = None
        self.tree = TreeMirror(client, self._require_identity)
        self.index = MetadataIndex(client, self.tree, self._require_identity, version=version)
        self.last_operation: Optional[Operation] = None

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    @property
    def identity(self) -> Optional[RepositoryIdentity]:
        return self._identity

    def _require_identity(self) -> RepositoryIdentity:
        if self._identity is None:
            raise NotReadyError("Not authenticated; call init_user first")
        return self._identity

    def _require_loaded(self) -> RepositoryIdentity:
        identity = self._require_identity()
        if not self.index.is_loaded:
            raise NotReadyError("Metadata index not loaded; call load_meta first")
        return identity

    def init_user(self, owner: str, repository: str, branch: str, token: str) -> None:
        """
        Bind the session to a repository and fetch its tree.

        Args:
            owner: Repository owner login
            repository: Repository name
            branch: Branch that receives every commit
            token: Personal access token
        """
        self.client.set_token(token)
        self._identity = RepositoryIdentity(
            owner=owner, name=repository, branch=branch, auth_token=token
        )
        try:
            self.tree.refresh()
        except Exception:
            self._identity = None
            self.tree.clear()
            raise
        logger.info(f"Session bound to {owner}/{repository}@{branch}")

    def init_session(self, record: SessionRecord) -> None:
        """Bind the session from a cached session record."""
        identity = record.identity()
        self.init_user(identity.owner, identity.name, identity.branch, identity.auth_token)

    def reset(self) -> None:
        """Forget identity, token, tree and index."""
        self._identity = None
        self.client.set_token(None)
        self.tree.clear()
        self.index.clear()
        self.last_operation = None

    def load_meta(self) -> GitNotesMeta:
        """Refresh the tree and load (or bootstrap) the metadata index."""
        self._require_identity()
        self.tree.refresh()
        return self.index.load()

    def save_meta(self) -> GitNotesMeta:
        """Persist the in-memory index as it is."""
        self._require_loaded()
        self.index.save()
        return self.index.meta

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_tags(self) -> List[Tag]:
        self._require_loaded()
        return list(self.index.tags)

    def list_notes(self, tag_id: Optional[str] = None) -> List[Note]:
        """All notes, or only those under `tag_id`."""
        self._require_loaded()
        if tag_id is None:
            return list(self.index.notes)
        if self.index.find_tag(tag_id) is None:
            raise TagNotFoundError(tag_id)
        return self.index.notes_for_tag(tag_id)

    def get_tag(self, tag_id: str) -> Tag:
        self._require_loaded()
        tag = self.index.find_tag(tag_id)
        if tag is None:
            raise TagNotFoundError(tag_id)
        return tag

    def get_note_record(self, note_id: str) -> Note:
        self._require_loaded()
        note = self.index.find_note(note_id)
        if note is None:
            raise NoteNotFoundError(note_id)
        return note

    def get_note(self, note_id: str) -> str:
        """Read a note's content."""
        identity = self._require_loaded()
        path = self.note_path_of(self.get_note_record(note_id))
        return self.client.get_file_content(
            identity.owner, identity.name, path, ref=identity.branch
        ).content

    def note_path_of(self, note: Note) -> str:
        """Current repository path of a note."""
        return note_path(note.title, self._tag_name(note.tag))

    def _tag_name(self, tag_id: Optional[str]) -> Optional[str]:
        if tag_id is None:
            return None
        tag = self.index.find_tag(tag_id)
        if tag is None:
            raise TagNotFoundError(tag_id)
        return tag.name

    # ------------------------------------------------------------------
    # Operation plumbing
    # ------------------------------------------------------------------

    @contextmanager
    def _operation(self, name: str, target: Optional[str] = None) -> Generator[Operation, None, None]:
        """Track one compound operation and roll the index back on failure."""
        self._require_loaded()
        op = Operation(name=name, target=target)
        self.last_operation = op
        snapshot = self.index.snapshot()
        op.advance(OperationState.RESOLVING)

        try:
            yield op
        except Exception as e:
            self.index.restore(snapshot)
            op.fail(e)
            logger.debug(f"{name} failed in {op.history[-2].value}: {e}")
            raise

        op.advance(OperationState.DONE)
        logger.info(f"{name} done ({len(op.commits)} tree commit(s))")

    def _persist(self, op: Operation) -> None:
        op.advance(OperationState.PERSISTING)
        self.index.save()

    def _move(self, op: Operation, moves: List[PathMove], message: str) -> Optional[str]:
        """
        Apply path moves to the refreshed tree as one commit on the branch.

        Returns:
            The new commit hash, or None when nothing needed to move
        """
        identity = self._require_identity()
        moves = [m for m in moves if m.source != m.target]
        if not moves:
            return None

        if not self.tree.rewrite_paths(moves):
            return None

        tree_hash = self.client.post_tree(identity.owner, identity.name, self.tree.entries)
        commit = self.client.create_commit(
            identity.owner, identity.name, self.tree.head_commit, tree_hash, message
        )
        self.client.update_ref(identity.owner, identity.name, identity.branch, commit)
        op.commits.append(commit)
        logger.debug(f"Committed {commit[:7]}: {message}")

        self.tree.refresh()
        return commit

    def _put(self, path: str, content: str, blob_hash: Optional[str] = None) -> str:
        identity = self._require_identity()
        result = self.client.put_file_content(
            identity.owner,
            identity.name,
            path,
            content,
            message=content_message(),
            branch=identity.branch,
            blob_hash=blob_hash,
        )
        self.tree.refresh()
        return result.blob_hash

    def _delete(self, path: str, blob_hash: str) -> None:
        identity = self._require_identity()
        self.client.delete_file_content(
            identity.owner,
            identity.name,
            path,
            message=content_message(),
            blob_hash=blob_hash,
            branch=identity.branch,
        )
        self.tree.refresh()

    def _require_entry(self, path: str):
        entry = self.tree.find_entry(path)
        if entry is None:
            raise NotFoundError(f"{path} not found", details={'path': path})
        return entry

    # ------------------------------------------------------------------
    # Notes
    # ------------------------------------------------------------------

    def create_note(self, title: str, content: str, tag_id: Optional[str] = None) -> Note:
        """
        Create a note file and record it in the index.

        Raises:
            TagNotFoundError: If tag_id is given but unknown
            AlreadyExistsError: If a file already exists at the note's path
        """
        with self._operation('create_note') as op:
            tag = self.get_tag(tag_id) if tag_id is not None else None
            path = note_path(title, tag.name if tag else None)
            self.tree.refresh()

            op.advance(OperationState.REMOTE_MUTATING)
            self._put(path, content)

            op.advance(OperationState.INDEX_MUTATING)
            note = Note.create(title, tag.id if tag else None)
            op.target = note.id
            self.index.add_note(note)

            self._persist(op)
            return note

    def update_note(
        self,
        note_id: str,
        title: Optional[str] = None,
        content: Optional[str] = None,
        tag_id: Optional[str] = None,
        detach_tag: bool = False
    ) -> Note:
        """
        Rename, retag and/or rewrite a note.

        A title change and a tag change together are one move from the
        original path straight to the final path.

        Args:
            note_id: Note to edit
            title: New title
            content: New content
            tag_id: Move the note under this tag
            detach_tag: Move the note out of its tag to the notes root
        """
        if tag_id is not None and detach_tag:
            raise ValueError("tag_id and detach_tag are mutually exclusive")

        with self._operation('update_note', note_id) as op:
            note = self.get_note_record(note_id)
            old_tag_id = note.tag
            if detach_tag:
                new_tag_id = None
            elif tag_id is not None:
                new_tag_id = self.get_tag(tag_id).id
            else:
                new_tag_id = old_tag_id

            old_path = self.note_path_of(note)
            new_path = note_path(title if title is not None else note.title, self._tag_name(new_tag_id))
            self.tree.refresh()

            op.advance(OperationState.REMOTE_MUTATING)
            if new_path != old_path:
                self._require_entry(old_path)
                self._move(op, [PathMove(old_path, new_path)], f"{COMMIT_PREFIX}Move {old_path} -> {new_path}")

            if content is not None:
                entry = self._require_entry(new_path)
                self._put(new_path, content, blob_hash=entry.blob_hash)

            op.advance(OperationState.INDEX_MUTATING)
            updated = note.with_changes(title=title, tag=new_tag_id, touch=True)
            self.index.replace_note(updated)

            self._persist(op)
            return updated

    def delete_note(self, note_id: str) -> None:
        """Delete a note file and drop it from the index."""
        with self._operation('delete_note', note_id) as op:
            note = self.get_note_record(note_id)
            path = self.note_path_of(note)
            self.tree.refresh()

            op.advance(OperationState.REMOTE_MUTATING)
            entry = self._require_entry(path)
            self._delete(path, entry.blob_hash)

            op.advance(OperationState.INDEX_MUTATING)
            self.index.remove_note(note_id)

            self._persist(op)

    # ------------------------------------------------------------------
    # Tags
    # ------------------------------------------------------------------

    def _check_tag_name(self, name: str, exclude_id: Optional[str] = None) -> str:
        name = name.strip()
        if not name:
            raise ValueError("Tag name must not be empty")
        target_dir = tag_dir(name)
        for tag in self.index.tags:
            if tag.id != exclude_id and tag_dir(tag.name) == target_dir:
                raise AlreadyExistsError(
                    f"Tag '{tag.name}' already uses directory {target_dir}",
                    details={'tag_id': tag.id},
                )
        return name

    def create_tag(self, name: str, color: Optional[str] = None) -> Tag:
        """Create a tag directory (its .tag marker) and record the tag."""
        with self._operation('create_tag') as op:
            name = self._check_tag_name(name)
            tag = Tag.create(name, color)
            op.target = tag.id
            self.tree.refresh()

            op.advance(OperationState.REMOTE_MUTATING)
            self._put(tag_meta_path(tag.name), json.dumps(tag.to_dict(), indent=2))

            op.advance(OperationState.INDEX_MUTATING)
            self.index.add_tag(tag)

            self._persist(op)
            return tag

    def update_tag(self, tag_id: str, name: str, color: Optional[str] = None) -> Tag:
        """
        Rename and/or recolour a tag.

        Renaming moves the whole tag directory (notes and marker) in one
        commit. Notes keep referencing the tag by id, so their records do
        not change.
        """
        with self._operation('update_tag', tag_id) as op:
            tag = self.get_tag(tag_id)
            new_name = self._check_tag_name(name, exclude_id=tag.id)
            updated = tag.with_changes(name=new_name, color=color)
            old_dir, new_dir = tag_dir(tag.name), tag_dir(updated.name)
            self.tree.refresh()

            op.advance(OperationState.REMOTE_MUTATING)
            if old_dir != new_dir:
                self._move(op, [PathMove(old_dir, new_dir)], f"{COMMIT_PREFIX}Move {old_dir} -> {new_dir}")

            if updated != tag:
                marker = self.tree.find_entry(tag_meta_path(updated.name))
                if marker is not None:
                    self._put(marker.path, json.dumps(updated.to_dict(), indent=2), blob_hash=marker.blob_hash)

            op.advance(OperationState.INDEX_MUTATING)
            self.index.replace_tag(updated)

            self._persist(op)
            return updated

    move_tag = update_tag

    def delete_tag(self, tag_id: str) -> List[Note]:
        """
        Delete a tag, moving its notes up to the notes root.

        Returns:
            The notes that were detached from the tag
        """
        with self._operation('delete_tag', tag_id) as op:
            tag = self.get_tag(tag_id)
            directory = tag_dir(tag.name)
            self.tree.refresh()

            op.advance(OperationState.REMOTE_MUTATING)
            marker = self.tree.find_entry(tag_meta_path(tag.name))
            if marker is not None:
                self._delete(marker.path, marker.blob_hash)

            moves = [
                PathMove(e.path, f"{NOTES_FOLDER}/{e.path.rsplit('/', 1)[-1]}")
                for e in self.tree.entries_under(directory)
                if not e.is_tree and is_note_path(e.path)
            ]
            self._move(op, moves, f"{COMMIT_PREFIX}Move {directory} -> {NOTES_FOLDER}")

            op.advance(OperationState.INDEX_MUTATING)
            detached = []
            for note in self.index.notes_for_tag(tag.id):
                moved = note.with_changes(tag=None)
                self.index.replace_note(moved)
                detached.append(moved)
            self.index.remove_tag(tag.id)

            self._persist(op)
            return detached
