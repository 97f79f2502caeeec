"""
Session objects for gitnotes.

- RepositoryIdentity: which remote repository/branch a core instance writes to
- SessionRecord: the cached user profile remembered between runs
"""

from dataclasses import dataclass, field, fields
from typing import Any, Dict


@dataclass(frozen=True)
class RepositoryIdentity:
    """Remote repository bound to one session. Immutable for its lifetime."""
    owner: str
    name: str
    branch: str
    auth_token: str = field(repr=False)

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


@dataclass
class SessionRecord:
    """User profile and repository binding cached in the local session store."""
    login: str
    token: str = field(repr=False)
    repository: str
    branch: str = 'main'
    owner: str = ''
    name: str = ''
    bio: str = ''
    photo: str = ''

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SessionRecord':
        known = {f.name for f in fields(cls)}
        return cls(**{k: ('' if v is None else v) for k, v in data.items() if k in known})

    def to_dict(self) -> Dict[str, Any]:
        return {
            'login': self.login,
            'name': self.name,
            'bio': self.bio,
            'photo': self.photo,
            'token': self.token,
            'repository': self.repository,
            'branch': self.branch,
            'owner': self.owner,
        }

    def identity(self) -> RepositoryIdentity:
        return RepositoryIdentity(
            owner=self.owner or self.login,
            name=self.repository,
            branch=self.branch,
            auth_token=self.token,
        )
