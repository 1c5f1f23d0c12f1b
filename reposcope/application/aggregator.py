import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Optional

import aiohttp

from reposcope.application.tech_stack_detector import TechStackDetector
from reposcope.domain.features import extract_features
from reposcope.domain.models import (
    CompositeRecord,
    LanguageBreakdown,
    ReadmeDocument,
    RepositoryAnalytics,
    RepositoryMetadata,
    TechStack,
)
from reposcope.domain.scoring import analyze_project
from reposcope.infrastructure.acl import GitHubTranslator
from reposcope.infrastructure.github_client import GitHubRestClient

logger = logging.getLogger(__name__)

# Limit concurrent connections per aggregation; analytics alone issues three requests.
CONNECTOR_LIMIT = 10


class RepositoryAggregator:
    """
    Gathers every fact about one repository concurrently and assembles a CompositeRecord.

    The repository metadata fetch is mandatory and its exception propagates unchanged.
    README, languages, tech stack and analytics are best-effort: a failure in any of
    them is logged and replaced by that fact's empty default.
    """

    def __init__(
            self,
            github_client: GitHubRestClient,
            tech_stack_detector: Optional[TechStackDetector] = None,
            clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.github_client = github_client
        self.tech_stack_detector = tech_stack_detector or TechStackDetector(github_client)
        self.clock = clock

    async def aggregate(self, owner: str, repo: str) -> CompositeRecord:
        full_name = f"{owner}/{repo}"
        logger.info(f"Aggregating repository {full_name}.")

        async with aiohttp.ClientSession(
            connector=aiohttp.TCPConnector(limit=CONNECTOR_LIMIT),
        ) as session:
            # Join barrier: every fetch settles before any result is used.
            metadata, readme, languages, tech_stack, analytics = await asyncio.gather(
                self._fetch_metadata(session, owner, repo),
                self._fetch_readme(session, owner, repo),
                self._fetch_languages(session, owner, repo),
                self.tech_stack_detector.detect(session, owner, repo),
                self._fetch_analytics(session, owner, repo),
                return_exceptions=True,
            )

        if isinstance(metadata, BaseException):
            logger.error(f"Aggregation failed for {full_name}: {metadata}")
            raise metadata

        readme = self._or_default(readme, None, "README", full_name)
        languages = self._or_default(languages, LanguageBreakdown(), "languages", full_name)
        tech_stack = self._or_default(tech_stack, TechStack(), "tech stack", full_name)
        analytics = self._or_default(analytics, RepositoryAnalytics(), "analytics", full_name)

        now = self.clock()
        record = CompositeRecord(
            repository=metadata,
            readme=readme,
            languages=languages,
            tech_stack=tech_stack,
            analytics=analytics,
            analysis=analyze_project(metadata, languages, tech_stack, analytics, now=now),
            features=extract_features(readme.content if readme else None),
            generated_at=now,
        )

        logger.info(
            f"Aggregated {full_name}: score={record.analysis.score}, "
            f"category={record.analysis.category!r}, features={len(record.features)}."
        )
        return record

    @staticmethod
    def _or_default(result: Any, default: Any, fact: str, full_name: str) -> Any:
        if isinstance(result, BaseException):
            logger.warning(f"Could not fetch {fact} for {full_name}, using default: {result}")
            return default
        return result

    async def _fetch_metadata(self, session: aiohttp.ClientSession, owner: str, repo: str) -> RepositoryMetadata:
        raw_repo = await self.github_client.get_repository(session, owner, repo)
        return GitHubTranslator.to_metadata(raw_repo)

    async def _fetch_readme(self, session: aiohttp.ClientSession, owner: str, repo: str) -> Optional[ReadmeDocument]:
        raw_readme = await self.github_client.get_readme(session, owner, repo)
        if raw_readme is None:
            return None
        return GitHubTranslator.to_readme(raw_readme)

    async def _fetch_languages(self, session: aiohttp.ClientSession, owner: str, repo: str) -> LanguageBreakdown:
        raw_languages = await self.github_client.get_languages(session, owner, repo)
        return GitHubTranslator.to_languages(raw_languages)

    async def _fetch_analytics(self, session: aiohttp.ClientSession, owner: str, repo: str) -> RepositoryAnalytics:
        commits, contributors, releases = await asyncio.gather(
            self.github_client.count_items(session, owner, repo, "commits"),
            self.github_client.count_items(session, owner, repo, "contributors"),
            self.github_client.count_items(session, owner, repo, "releases"),
            return_exceptions=True,
        )

        def _count(result: Any, resource: str) -> int:
            if isinstance(result, BaseException):
                logger.warning(f"Could not count {resource} for {owner}/{repo}: {result}")
                return 0
            return result

        return RepositoryAnalytics(
            commit_count=_count(commits, "commits"),
            contributor_count=_count(contributors, "contributors"),
            release_count=_count(releases, "releases"),
        )
