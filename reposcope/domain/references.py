import re
from typing import List, Pattern

from reposcope.domain.exceptions import InvalidReferenceException
from reposcope.domain.models import RepositoryReference

# Tried in order, first match wins.
REFERENCE_PATTERNS: List[Pattern[str]] = [
    re.compile(r"^https?://(?:www\.)?github\.com/([^/\s]+)/([^/\s?#]+?)(?:\.git)?(?:[/?#].*)?$", re.IGNORECASE),
    re.compile(r"^git@github\.com:([^/\s]+)/([^/\s]+?)(?:\.git)?/?$", re.IGNORECASE),
    re.compile(r"^([A-Za-z0-9_.-]+)/([A-Za-z0-9_.-]+?)(?:\.git)?/?$"),
]

# Path segments that would escape the /repos/{owner}/{repo} API path.
_DOT_SEGMENTS = frozenset({".", ".."})


def canonicalize(reference: str) -> str:
    """Trim, lower-case and strip a trailing `.git` and `/`."""
    value = reference.strip().lower()
    if value.endswith(".git"):
        value = value[: -len(".git")]
    if value.endswith("/"):
        value = value[:-1]
    return value


def parse_reference(reference: str) -> RepositoryReference:
    """
    Parses a GitHub web URL, SSH remote or `owner/repo` shorthand.

    Raises:
        InvalidReferenceException: if no accepted form matches, or a segment is `.` or `..`.
    """
    value = canonicalize(reference or "")
    for pattern in REFERENCE_PATTERNS:
        match = pattern.match(value)
        if match:
            owner, repo = match.group(1), match.group(2)
            if owner in _DOT_SEGMENTS or repo in _DOT_SEGMENTS:
                break
            return RepositoryReference(owner=owner, repo=repo)
    raise InvalidReferenceException(reference)


def normalize_reference(reference: str) -> str:
    """Returns the canonical cache key of a reference."""
    return parse_reference(reference).key
