"""
High-level Python API for gitnotes.

Example:
    import gitnotes

    gn = gitnotes.GitNotes()
    gn.login(token="ghp_...", repository="notes", create=True)

    work = gn.add_tag("work", color="green")
    note = gn.add_note("Standup", "- shipped the parser", tag_id=work.id)

    for note in gn.notes(tag_id=work.id):
        print(note.title, gn.read(note.id))

    gn.rename_tag(work.id, "office")
    gn.logout()

    # Low-level access
    gn.core
    gn.client
"""

import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import load_config
from .database import (
    Database,
    clear_sessions,
    delete_session,
    get_session,
    save_session,
    transaction,
    update_session,
)
from .domain import Note, SessionRecord, Tag
from .errors import AuthenticationError, NotFoundError, NotReadyError
from .infra import GitHubClient, RateLimitStatus
from .store import GitNotesCore

logger = logging.getLogger(__name__)


class GitNotes:
    """
    High-level API for gitnotes.

    Wraps a GitNotesCore with login/logout and the local session cache.
    """

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        client: Optional[GitHubClient] = None,
        db_path: Optional[Path] = None
    ):
        """
        Initialize GitNotes.

        Args:
            config: Full config dict (loaded from file if omitted)
            client: Pre-built client (built from the github config section if omitted)
            db_path: Session cache location (overrides config)
        """
        self._config = config if config is not None else load_config()
        github = self._config.get('github', {})

        self._client = client or GitHubClient(
            base_url=github.get('api_url') or 'https://api.github.com',
            timeout=github.get('timeout_seconds', 30),
        )
        self._db_path = db_path
        self._core = GitNotesCore(self._client)
        self._session: Optional[SessionRecord] = None

    @property
    def core(self) -> GitNotesCore:
        return self._core

    @property
    def client(self) -> GitHubClient:
        return self._client

    @property
    def config(self) -> Dict[str, Any]:
        return self._config

    @property
    def session(self) -> Optional[SessionRecord]:
        return self._session

    def _database(self) -> Database:
        return Database(db_path=self._db_path, config=self._config)

    # =========================================================================
    # SESSION
    # =========================================================================

    def login(
        self,
        token: str,
        repository: str,
        owner: Optional[str] = None,
        branch: Optional[str] = None,
        create: bool = False,
        remember: bool = True
    ) -> SessionRecord:
        """
        Authenticate, bind a repository and load its metadata index.

        Args:
            token: Personal access token
            repository: Repository name
            owner: Repository owner (defaults to the token's login)
            branch: Branch to write to (defaults to the repository's default branch)
            create: Create the repository under the user's account if missing
            remember: Cache the session locally for later runs

        Returns:
            The session record
        """
        self._client.set_token(token)
        user = self._client.get_user()
        owner = owner or user.login

        try:
            repo = self._client.get_repository(owner, repository)
        except NotFoundError:
            if not create or owner != user.login:
                raise
            description = self._config.get('github', {}).get('repository_description', '')
            repo = self._client.create_repository(repository, description=description)

        record = SessionRecord(
            login=user.login,
            token=token,
            repository=repo.name,
            branch=branch or repo.default_branch,
            owner=repo.owner if repo.owner != user.login else '',
            name=user.name,
            bio=user.bio,
            photo=user.avatar_url,
        )
        self._start(record)

        if remember:
            with self._database() as db, transaction(db):
                save_session(db, record)
            logger.debug(f"Cached session for {record.login}")
        return record

    def resume(self) -> SessionRecord:
        """
        Restore the session from the local cache, falling back to config.

        A cached session whose token the remote rejects is dropped.

        Raises:
            NotReadyError: If there is no cached session and no token configured
            AuthenticationError: If the cached token is no longer accepted
        """
        if self._session is not None:
            return self._session

        with self._database() as db:
            record = get_session(db)

        if record is not None:
            self._client.set_token(record.token)
            if not self._client.validate_token():
                with self._database() as db:
                    delete_session(db, record.login)
                raise AuthenticationError(401, "Cached token was rejected; run 'gitnotes login' again")
        else:
            github = self._config.get('github', {})
            if not (github.get('token') and github.get('repository')):
                raise NotReadyError("Not logged in; run 'gitnotes login' first")
            self._client.set_token(github['token'])
            user = self._client.get_user()
            record = SessionRecord(
                login=user.login,
                token=github['token'],
                repository=github['repository'],
                branch=github.get('branch') or 'main',
                owner=github.get('owner') or '',
                name=user.name,
                bio=user.bio,
                photo=user.avatar_url,
            )

        self._start(record)
        return record

    def _start(self, record: SessionRecord) -> None:
        self._core.init_session(record)
        self._core.load_meta()
        self._session = record

    def logout(self, all_sessions: bool = False) -> None:
        """
        Forget the session in memory and in the local cache.

        Args:
            all_sessions: Clear every cached session, not just the current one
        """
        login = self._session.login if self._session is not None else None
        self._core.reset()
        self._session = None

        with self._database() as db:
            if all_sessions:
                removed = clear_sessions(db)
            else:
                if login is None:
                    cached = get_session(db)
                    login = cached.login if cached is not None else None
                removed = 1 if login is not None and delete_session(db, login) else 0
        logger.debug(f"Cleared {removed} cached session(s)")

    def whoami(self) -> SessionRecord:
        """Cached session without touching the remote."""
        if self._session is not None:
            return self._session
        with self._database() as db:
            record = get_session(db)
        if record is None:
            raise NotReadyError("Not logged in; run 'gitnotes login' first")
        return record

    def refresh_profile(self) -> SessionRecord:
        """Re-read name, bio and photo from the remote into the session cache."""
        record = self.resume()
        user = self._client.get_user()
        changes = {'name': user.name, 'bio': user.bio, 'photo': user.avatar_url}

        with self._database() as db:
            updated = update_session(db, record.login, changes)
        self._session = updated or replace(record, **changes)
        return self._session

    def rate_limit(self) -> Optional[RateLimitStatus]:
        """Rate limit reported by the last remote call, if any."""
        return self._client.get_rate_limit_status()

    # =========================================================================
    # NOTES
    # =========================================================================

    def notes(self, tag_id: Optional[str] = None) -> List[Note]:
        return self._core.list_notes(tag_id)

    def note(self, note_id: str) -> Note:
        return self._core.get_note_record(note_id)

    def read(self, note_id: str) -> str:
        """Content of a note."""
        return self._core.get_note(note_id)

    def add_note(self, title: str, content: str = '', tag_id: Optional[str] = None) -> Note:
        return self._core.create_note(title, content, tag_id=tag_id)

    def edit_note(
        self,
        note_id: str,
        title: Optional[str] = None,
        content: Optional[str] = None,
        tag_id: Optional[str] = None,
        detach_tag: bool = False
    ) -> Note:
        return self._core.update_note(
            note_id, title=title, content=content, tag_id=tag_id, detach_tag=detach_tag
        )

    def remove_note(self, note_id: str) -> None:
        self._core.delete_note(note_id)

    # =========================================================================
    # TAGS
    # =========================================================================

    def tags(self) -> List[Tag]:
        return self._core.list_tags()

    def add_tag(self, name: str, color: Optional[str] = None) -> Tag:
        if color is None:
            color = self._config.get('store', {}).get('default_tag_color')
        return self._core.create_tag(name, color)

    def rename_tag(self, tag_id: str, name: str, color: Optional[str] = None) -> Tag:
        return self._core.update_tag(tag_id, name, color=color)

    def remove_tag(self, tag_id: str) -> List[Note]:
        """Delete a tag; returns the notes moved back to the notes root."""
        return self._core.delete_tag(tag_id)
