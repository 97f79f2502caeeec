"""
Tag domain object for gitnotes.

A tag groups notes. Its name doubles as a directory segment under the
notes folder, so renaming a tag moves every file under that directory.

Tags are immutable value objects; edits produce a new Tag via `with_changes`.
"""

import uuid
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional

# Colours offered by the original web client
TAG_COLORS = (
    'red',
    'pink',
    'orange',
    'yellow',
    'green',
    'blue',
    'purple',
    'black',
)

DEFAULT_TAG_COLOR = 'blue'


def create_id() -> str:
    """Generate a new random entity id."""
    return str(uuid.uuid4())


@dataclass(frozen=True)
class Tag:
    """
    Tag record as stored in the metadata index.

    Examples:
        Tag.create("work")                 -> Tag(id=<uuid>, name="work", color="blue")
        Tag.from_dict({"id": "t1", ...})   -> Tag(id="t1", ...)

    Attributes:
        id: Stable identifier (UUID string); notes reference tags by id
        name: Display name, also the tag's directory name
        color: Display colour
    """

    id: str
    name: str
    color: str = DEFAULT_TAG_COLOR

    @classmethod
    def create(cls, name: str, color: Optional[str] = None) -> 'Tag':
        """Create a tag with a fresh id."""
        return cls(id=create_id(), name=name.strip(), color=color or DEFAULT_TAG_COLOR)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Tag':
        """Create from a metadata index record."""
        return cls(
            id=str(data['id']),
            name=str(data.get('name', '')),
            color=str(data.get('color') or DEFAULT_TAG_COLOR),
        )

    def with_changes(self, name: Optional[str] = None, color: Optional[str] = None) -> 'Tag':
        """Return a copy with the given fields replaced."""
        return replace(
            self,
            name=name.strip() if name is not None else self.name,
            color=color if color is not None else self.color,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'id': self.id,
            'name': self.name,
            'color': self.color,
        }

    def __str__(self) -> str:
        return self.name


# =============================================================================
# UTILITY FUNCTIONS (operate on Tag objects)
# =============================================================================

def find_tag(tags: List[Tag], tag_id: str) -> Optional[Tag]:
    """Find a tag by id."""
    for tag in tags:
        if tag.id == tag_id:
            return tag
    return None


def find_tag_by_name(tags: List[Tag], name: str) -> Optional[Tag]:
    """Find a tag by name (exact match after stripping whitespace)."""
    name = name.strip()
    for tag in tags:
        if tag.name == name:
            return tag
    return None
