"""
Infrastructure layer for gitnotes.

Contains abstractions for external systems:
- GitHubClient: GitHub REST API access (git data + contents)

These provide clean interfaces that can be mocked for testing.
"""

from .github_client import (
    GitHubClient,
    GitHubRepository,
    GitHubUser,
    FileContent,
    PutResult,
    RateLimitStatus,
)

__all__ = [
    'GitHubClient',
    'GitHubRepository',
    'GitHubUser',
    'FileContent',
    'PutResult',
    'RateLimitStatus',
]
