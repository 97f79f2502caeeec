"""
Standard exit codes for gitnotes commands.

Following Unix/POSIX conventions for command-line tools.
"""

from .errors import (
    AlreadyExistsError,
    AuthenticationError,
    ConflictError,
    GitNotesError,
    MetadataParseError,
    NetworkError,
    NotFoundError,
    NotReadyError,
    RateLimitError,
    RemoteError,
)

# Standard POSIX exit codes
SUCCESS = 0              # Successful termination
GENERAL_ERROR = 1        # General errors
USAGE_ERROR = 2          # Misuse of shell command (wrong arguments, etc.)

# Application-specific exit codes (64-113 are typically available)
NOT_FOUND = 64           # Note, tag or path not found
API_ERROR = 65           # Remote API call failed
CONFIG_ERROR = 66        # Configuration file error
NOT_READY = 67           # Not logged in / store not initialized
NETWORK_ERROR = 68       # Network connection failed
AUTH_ERROR = 69          # Authentication/authorization failed
DATA_ERROR = 70          # Data format or validation error
ALREADY_EXISTS = 71      # Create attempted on an existing path
CONFLICT = 72            # Remote changed since last read
INTERRUPTED = 130        # Terminated by Ctrl+C (SIGINT)

# Most specific class first
EXCEPTION_EXIT_CODES = [
    (NotFoundError, NOT_FOUND),
    (ConflictError, CONFLICT),
    (AlreadyExistsError, ALREADY_EXISTS),
    (AuthenticationError, AUTH_ERROR),
    (RateLimitError, API_ERROR),
    (NetworkError, NETWORK_ERROR),
    (RemoteError, API_ERROR),
    (NotReadyError, NOT_READY),
    (MetadataParseError, DATA_ERROR),
    (GitNotesError, GENERAL_ERROR),
    (ValueError, DATA_ERROR),
    (KeyboardInterrupt, INTERRUPTED),
]


def get_exit_code_for_exception(exc: BaseException) -> int:
    """
    Get the appropriate exit code for an exception.

    Args:
        exc: The exception that occurred

    Returns:
        Appropriate exit code
    """
    for exc_type, code in EXCEPTION_EXIT_CODES:
        if isinstance(exc, exc_type):
            return code
    return GENERAL_ERROR

