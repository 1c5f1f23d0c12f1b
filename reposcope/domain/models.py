from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional
from pydantic import BaseModel, Field, ConfigDict, field_validator


class RepositoryReference(BaseModel):
    """
    A parsed GitHub repository reference.
    `key` is the canonical cache key shared by every accepted form of the same repository.
    """
    model_config = ConfigDict(frozen=True)

    owner: str = Field(..., min_length=1, description="Owner login as written in the reference")
    repo: str = Field(..., min_length=1, description="Repository name as written in the reference")

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    @property
    def key(self) -> str:
        return f"https://github.com/{self.owner}/{self.repo}".lower()


class RepositoryOwner(BaseModel):
    model_config = ConfigDict(frozen=True)

    login: str
    avatar_url: Optional[str] = None
    type: Optional[str] = None


class RepositoryMetadata(BaseModel):
    """
    Immutable snapshot of the GitHub repository resource.
    This is the only mandatory fact of a composite record.
    """
    model_config = ConfigDict(frozen=True)

    id: int = Field(..., description="Numeric GitHub repository id")
    name: str
    full_name: str
    owner: RepositoryOwner
    description: Optional[str] = None
    url: str = Field(..., description="html_url of the repository")
    clone_url: Optional[str] = None
    homepage: Optional[str] = None
    topics: List[str] = Field(default_factory=list)
    language: Optional[str] = None
    size: int = Field(0, ge=0, description="Repository size in KB")
    stars: int = Field(0, ge=0)
    forks: int = Field(0, ge=0)
    watchers: int = Field(0, ge=0)
    open_issues: int = Field(0, ge=0)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    pushed_at: Optional[datetime] = None
    license: Optional[str] = None
    is_private: bool = False
    is_fork: bool = False
    archived: bool = False


class ReadmeDocument(BaseModel):
    model_config = ConfigDict(frozen=True)

    content: str
    html: str
    filename: Optional[str] = None


class LanguageStat(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    bytes: int = Field(..., ge=0)
    percentage: float = Field(..., ge=0, le=100)


class LanguageBreakdown(BaseModel):
    model_config = ConfigDict(frozen=True)

    raw: Dict[str, int] = Field(default_factory=dict)
    stats: List[LanguageStat] = Field(default_factory=list, description="Sorted by bytes, largest first")
    primary: str = "Unknown"


class TechStack(BaseModel):
    """Technology names detected for a repository, bucketed by role. Buckets never hold duplicates."""
    model_config = ConfigDict(frozen=True)

    frontend: List[str] = Field(default_factory=list)
    backend: List[str] = Field(default_factory=list)
    database: List[str] = Field(default_factory=list)
    tools: List[str] = Field(default_factory=list)
    frameworks: List[str] = Field(default_factory=list)

    @field_validator("frontend", "backend", "database", "tools", "frameworks")
    @classmethod
    def _dedupe(cls, value: List[str]) -> List[str]:
        return list(dict.fromkeys(value))

    def technologies(self) -> List[str]:
        return [*self.frontend, *self.backend, *self.database, *self.tools, *self.frameworks]


class RepositoryAnalytics(BaseModel):
    model_config = ConfigDict(frozen=True)

    commit_count: int = Field(0, ge=0)
    contributor_count: int = Field(0, ge=0)
    release_count: int = Field(0, ge=0)


class ComplexityTier(str, Enum):
    SIMPLE = "Simple"
    MODERATE = "Moderate"
    COMPLEX = "Complex"


class DeployabilityTier(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class ProjectAnalysis(BaseModel):
    model_config = ConfigDict(frozen=True)

    complexity: ComplexityTier
    category: str
    deployability: DeployabilityTier
    score: int = Field(..., ge=0, le=100)


class CompositeRecord(BaseModel):
    """
    Everything gathered and derived for one repository.
    This is the unit of work of the aggregator and the value held by the cache.
    """
    model_config = ConfigDict(frozen=True)

    repository: RepositoryMetadata
    readme: Optional[ReadmeDocument] = None
    languages: LanguageBreakdown = Field(default_factory=LanguageBreakdown)
    tech_stack: TechStack = Field(default_factory=TechStack)
    analytics: RepositoryAnalytics = Field(default_factory=RepositoryAnalytics)
    analysis: ProjectAnalysis
    features: List[str] = Field(default_factory=list, max_length=10)
    generated_at: datetime


class CacheEntry(BaseModel):
    """
    A cached composite record plus its bookkeeping.
    Mutable: access counters and expiry are updated in place by the cache store.
    """
    key: str
    record: CompositeRecord
    created_at: datetime
    updated_at: datetime
    expires_at: datetime
    access_count: int = Field(1, ge=1)
    last_accessed: datetime

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at <= now


class CacheEntrySummary(BaseModel):
    """Listing view of a cache entry, as returned by search, recent and top-accessed queries."""
    model_config = ConfigDict(frozen=True)

    key: str
    full_name: str
    name: str
    description: Optional[str] = None
    language: Optional[str] = None
    stars: int = 0
    topics: List[str] = Field(default_factory=list)
    created_at: datetime
    last_accessed: datetime
    access_count: int

    @classmethod
    def from_entry(cls, entry: CacheEntry) -> "CacheEntrySummary":
        repository = entry.record.repository
        return cls(
            key=entry.key,
            full_name=repository.full_name,
            name=repository.name,
            description=repository.description,
            language=repository.language,
            stars=repository.stars,
            topics=list(repository.topics),
            created_at=entry.created_at,
            last_accessed=entry.last_accessed,
            access_count=entry.access_count,
        )


class CachePage(BaseModel):
    model_config = ConfigDict(frozen=True)

    results: List[CacheEntrySummary] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    page_size: int
    pages: int = 0


class CacheStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_entries: int = 0
    valid_entries: int = 0
    expired_entries: int = 0
    total_accesses: int = 0
    avg_access_count: float = 0.0
    oldest_entry: Optional[datetime] = None
    newest_entry: Optional[datetime] = None
    top_accessed: List[CacheEntrySummary] = Field(default_factory=list)


class CacheEntryStatus(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str
    cached: bool
    last_analyzed: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    access_count: Optional[int] = None
    is_expired: Optional[bool] = None


class AnalysisResult(BaseModel):
    """Response of one analyze call."""
    model_config = ConfigDict(frozen=True)

    record: CompositeRecord
    cached: bool
    access_count: int
    cache_age_seconds: Optional[float] = Field(None, description="Age of the cache entry on a cache hit")
    analysis_time_seconds: Optional[float] = Field(None, description="Wall time of the aggregation on a cache miss")
