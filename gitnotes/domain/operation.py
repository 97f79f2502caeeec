"""
Operation tracking for gitnotes document operations.

Every compound edit walks the same states:

    idle -> resolving -> remote-mutating -> index-mutating -> persisting -> done

and any failure moves it to `failed`. The record is kept on the core so
callers (and tests) can see how far the last operation got.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class OperationState(Enum):
    """State of a compound document operation."""
    IDLE = "idle"
    RESOLVING = "resolving"
    REMOTE_MUTATING = "remote-mutating"
    INDEX_MUTATING = "index-mutating"
    PERSISTING = "persisting"
    DONE = "done"
    FAILED = "failed"


# Allowed forward transitions; FAILED is reachable from any non-terminal state
_TRANSITIONS = {
    OperationState.IDLE: {OperationState.RESOLVING},
    OperationState.RESOLVING: {OperationState.REMOTE_MUTATING, OperationState.INDEX_MUTATING},
    OperationState.REMOTE_MUTATING: {OperationState.INDEX_MUTATING},
    OperationState.INDEX_MUTATING: {OperationState.PERSISTING},
    OperationState.PERSISTING: {OperationState.DONE},
}

TERMINAL_STATES = frozenset({OperationState.DONE, OperationState.FAILED})


@dataclass
class Operation:
    """
    One compound document operation.

    Attributes:
        name: Operation name (e.g. "create_note", "update_tag")
        target: Id of the note or tag being edited
        state: Current state
        history: States visited, in order
        commits: Commit hashes created by tree rewrites
        error: Error message if the operation failed
    """
    name: str
    target: Optional[str] = None
    state: OperationState = OperationState.IDLE
    history: List[OperationState] = field(default_factory=lambda: [OperationState.IDLE])
    commits: List[str] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def done(self) -> bool:
        return self.state == OperationState.DONE

    @property
    def failed(self) -> bool:
        return self.state == OperationState.FAILED

    def advance(self, state: OperationState) -> None:
        """
        Move to the next state.

        Raises:
            ValueError: If the transition is not allowed
        """
        if state == OperationState.FAILED:
            if self.state in TERMINAL_STATES:
                raise ValueError(f"{self.name}: cannot fail from {self.state.value}")
        elif state not in _TRANSITIONS.get(self.state, set()):
            raise ValueError(
                f"{self.name}: invalid transition {self.state.value} -> {state.value}"
            )
        self.state = state
        self.history.append(state)

    def fail(self, error: BaseException) -> None:
        self.error = str(error)
        self.advance(OperationState.FAILED)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result = {
            'operation': self.name,
            'state': self.state.value,
            'history': [s.value for s in self.history],
        }
        if self.target:
            result['target'] = self.target
        if self.commits:
            result['commits'] = list(self.commits)
        if self.error:
            result['error'] = self.error
        return result
