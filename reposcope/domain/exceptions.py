from typing import Optional


class RepoScopeException(Exception):
    """Base exception for all reposcope errors."""
    pass

class ConfigurationException(RepoScopeException):
    """Raised when an environment setting cannot be parsed."""
    pass

class InvalidReferenceException(RepoScopeException):
    """Raised when a repository reference matches none of the accepted forms."""
    def __init__(self, reference: str, message: str = "Invalid GitHub repository reference."):
        self.reference = reference
        super().__init__(f"{message} Got: {reference!r}")

class RepositoryNotFoundException(RepoScopeException):
    """Raised when GitHub reports the repository does not exist."""
    def __init__(self, full_name: str):
        self.full_name = full_name
        super().__init__(f"Repository not found: {full_name}")

class AccessForbiddenException(RepoScopeException):
    """Raised when GitHub denies access to the repository."""
    def __init__(self, full_name: str):
        self.full_name = full_name
        super().__init__(f"Repository access forbidden: {full_name}")

class UpstreamTimeoutException(RepoScopeException):
    """Raised when a GitHub request exceeds the request timeout."""
    def __init__(self, path: str, timeout: float):
        self.path = path
        self.timeout = timeout
        super().__init__(f"GitHub request to {path} timed out after {timeout:g}s.")

class UpstreamFailureException(RepoScopeException):
    """Raised when a GitHub request fails for any other reason."""
    def __init__(self, path: str, status: Optional[int] = None, message: str = "GitHub request failed."):
        self.path = path
        self.status = status
        detail = f" (HTTP {status})" if status is not None else ""
        super().__init__(f"{message}{detail} Path: {path}")

class RateLimitExceededException(UpstreamFailureException):
    """Raised when the GitHub REST rate limit is hit."""
    def __init__(self, path: str, reset_at: Optional[str]):
        self.reset_at = reset_at
        super().__init__(path, status=403, message=f"GitHub API rate limit exceeded. Resets at: {reset_at}.")
