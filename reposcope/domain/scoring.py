"""
Scoring engine: pure functions deriving the analysis block of a composite record.

Quality score weights (divisors chosen so that 400 stars and 100 forks saturate):
    stars / 10            capped at 40
    forks / 5             capped at 20
    20 - days_idle / 7    clamped to [0, 20], zero at 140 days
    contributors * 2      capped at 10
    +5 description, +5 homepage
"""
from datetime import datetime, timezone
from typing import Optional

from reposcope.domain.models import (
    ComplexityTier,
    DeployabilityTier,
    LanguageBreakdown,
    ProjectAnalysis,
    RepositoryAnalytics,
    RepositoryMetadata,
    TechStack,
)
from reposcope.domain.tech_catalog import (
    CONTAINERIZATION_TOOLS,
    DEPLOYABLE_FRAMEWORKS,
    LANGUAGE_CATEGORIES,
)

LANGUAGE_WEIGHT = 10
TECHNOLOGY_WEIGHT = 5
MODERATE_THRESHOLD = 30
COMPLEX_THRESHOLD = 60

STAR_DIVISOR = 10
STAR_CAP = 40
FORK_DIVISOR = 5
FORK_CAP = 20
RECENCY_CAP = 20
RECENCY_DECAY_DAYS = 7  # one point lost per week idle
CONTRIBUTOR_WEIGHT = 2
CONTRIBUTOR_CAP = 10
DESCRIPTION_BONUS = 5
HOMEPAGE_BONUS = 5
MAX_SCORE = 100

DEFAULT_CATEGORY = "General Project"


def complexity_tier(languages: LanguageBreakdown, tech_stack: TechStack) -> ComplexityTier:
    points = LANGUAGE_WEIGHT * len(languages.stats) + TECHNOLOGY_WEIGHT * len(tech_stack.technologies())
    if points < MODERATE_THRESHOLD:
        return ComplexityTier.SIMPLE
    if points < COMPLEX_THRESHOLD:
        return ComplexityTier.MODERATE
    return ComplexityTier.COMPLEX


def _has_container_tool(tech_stack: TechStack) -> bool:
    return any(tool in CONTAINERIZATION_TOOLS for tool in tech_stack.tools)


def categorize(repository: RepositoryMetadata, tech_stack: TechStack) -> str:
    if tech_stack.frontend and tech_stack.backend:
        return "Full-Stack Application"
    if tech_stack.frontend:
        return "Frontend Application"
    if tech_stack.backend:
        return "Backend Service"
    if _has_container_tool(tech_stack):
        return "DevOps/Infrastructure"
    if repository.language in LANGUAGE_CATEGORIES:
        return LANGUAGE_CATEGORIES[repository.language]
    return DEFAULT_CATEGORY


def deployability_tier(tech_stack: TechStack) -> DeployabilityTier:
    candidates = [*tech_stack.frontend, *tech_stack.frameworks]
    if any(name in DEPLOYABLE_FRAMEWORKS for name in candidates) or _has_container_tool(tech_stack):
        return DeployabilityTier.HIGH
    if tech_stack.backend:
        return DeployabilityTier.MEDIUM
    return DeployabilityTier.LOW


def _recency_points(updated_at: Optional[datetime], now: datetime) -> float:
    if updated_at is None:
        return 0.0
    if updated_at.tzinfo is None:
        updated_at = updated_at.replace(tzinfo=timezone.utc)
    days_idle = (now - updated_at).total_seconds() / 86400
    return min(max(RECENCY_CAP - days_idle / RECENCY_DECAY_DAYS, 0.0), RECENCY_CAP)


def quality_score(
    repository: RepositoryMetadata,
    analytics: RepositoryAnalytics,
    now: Optional[datetime] = None,
) -> int:
    now = now or datetime.now(timezone.utc)

    score = 0.0
    score += min(repository.stars / STAR_DIVISOR, STAR_CAP)
    score += min(repository.forks / FORK_DIVISOR, FORK_CAP)
    score += _recency_points(repository.updated_at, now)
    score += min(analytics.contributor_count * CONTRIBUTOR_WEIGHT, CONTRIBUTOR_CAP)
    if repository.description:
        score += DESCRIPTION_BONUS
    if repository.homepage:
        score += HOMEPAGE_BONUS

    # Round half up, then clamp.
    return max(0, min(int(score + 0.5), MAX_SCORE))


def analyze_project(
    repository: RepositoryMetadata,
    languages: LanguageBreakdown,
    tech_stack: TechStack,
    analytics: RepositoryAnalytics,
    now: Optional[datetime] = None,
) -> ProjectAnalysis:
    return ProjectAnalysis(
        complexity=complexity_tier(languages, tech_stack),
        category=categorize(repository, tech_stack),
        deployability=deployability_tier(tech_stack),
        score=quality_score(repository, analytics, now),
    )
