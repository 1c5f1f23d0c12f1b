import base64
import json
import unittest
from datetime import datetime, timezone

from reposcope.application.aggregator import RepositoryAggregator
from reposcope.domain.exceptions import (
    AccessForbiddenException,
    RepositoryNotFoundException,
    UpstreamFailureException,
    UpstreamTimeoutException,
)
from reposcope.domain.models import DeployabilityTier

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)

README = """# Example

## Features
- Live reload
- Zero config

## License
MIT
"""


def _encoded(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def _raw_repo(**overrides):
    raw = {
        "id": 99,
        "name": "example",
        "full_name": "octocat/example",
        "owner": {"login": "octocat"},
        "html_url": "https://github.com/octocat/example",
        "description": "An example",
        "homepage": "https://example.dev",
        "language": "JavaScript",
        "stargazers_count": 1000,
        "forks_count": 100,
        "updated_at": NOW.isoformat().replace("+00:00", "Z"),
    }
    raw.update(overrides)
    return raw


class _FakeGitHubClient:
    """Serves canned responses; a value that is an Exception is raised instead."""

    def __init__(self, **responses) -> None:
        self.responses = {
            "repository": _raw_repo(),
            "readme": {"name": "README.md", "content": _encoded(README)},
            "languages": {"JavaScript": 900, "CSS": 100},
            "contents": [
                {"name": "package.json", "type": "file"},
                {"name": "Dockerfile", "type": "file"},
                {"name": "src", "type": "dir"},
            ],
            "package.json": {"content": _encoded(json.dumps({"dependencies": {"react": "^18", "express": "^4"}}))},
            "commits": 321,
            "contributors": 5,
            "releases": 4,
        }
        self.responses.update(responses)
        self.calls = []

    def _serve(self, name):
        self.calls.append(name)
        value = self.responses[name]
        if isinstance(value, Exception):
            raise value
        return value

    async def get_repository(self, session, owner, repo):
        return self._serve("repository")

    async def get_readme(self, session, owner, repo):
        return self._serve("readme")

    async def get_languages(self, session, owner, repo):
        return self._serve("languages")

    async def get_contents(self, session, owner, repo, path=""):
        return self._serve(path or "contents")

    async def count_items(self, session, owner, repo, resource):
        return self._serve(resource)


class TestRepositoryAggregator(unittest.IsolatedAsyncioTestCase):
    async def test_full_aggregation(self) -> None:
        client = _FakeGitHubClient()
        aggregator = RepositoryAggregator(client, clock=lambda: NOW)

        record = await aggregator.aggregate("octocat", "example")

        self.assertEqual(record.repository.full_name, "octocat/example")
        self.assertEqual(record.readme.filename, "README.md")
        self.assertEqual(record.features, ["Live reload", "Zero config"])
        self.assertEqual(record.languages.primary, "JavaScript")
        self.assertEqual(record.tech_stack.frontend, ["React"])
        self.assertEqual(record.tech_stack.backend, ["Node.js", "Express.js"])
        self.assertEqual(record.tech_stack.tools, ["Docker"])
        self.assertEqual(record.analytics.commit_count, 321)
        self.assertEqual(record.analysis.category, "Full-Stack Application")
        self.assertEqual(record.analysis.deployability, DeployabilityTier.HIGH)
        self.assertEqual(record.generated_at, NOW)

    async def test_saturated_repository_scores_100(self) -> None:
        aggregator = RepositoryAggregator(_FakeGitHubClient(), clock=lambda: NOW)

        record = await aggregator.aggregate("octocat", "example")

        self.assertEqual(record.analysis.score, 100)

    async def test_failed_languages_fall_back_to_unknown(self) -> None:
        client = _FakeGitHubClient(languages=UpstreamFailureException("/languages", status=500))
        aggregator = RepositoryAggregator(client, clock=lambda: NOW)

        with self.assertLogs("reposcope.application.aggregator", level="WARNING"):
            record = await aggregator.aggregate("octocat", "example")

        self.assertEqual(record.languages.primary, "Unknown")
        self.assertEqual(record.languages.stats, [])
        self.assertEqual(record.repository.stars, 1000)

    async def test_every_optional_fact_failing_uses_defaults(self) -> None:
        boom = UpstreamTimeoutException("/x", 10)
        client = _FakeGitHubClient(
            readme=boom, languages=boom, contents=boom, commits=boom, contributors=boom, releases=boom,
        )
        aggregator = RepositoryAggregator(client, clock=lambda: NOW)

        record = await aggregator.aggregate("octocat", "example")

        self.assertIsNone(record.readme)
        self.assertEqual(record.features, [])
        self.assertEqual(record.tech_stack.technologies(), [])
        self.assertEqual(record.analytics.commit_count, 0)
        self.assertEqual(record.analytics.contributor_count, 0)
        self.assertEqual(record.analytics.release_count, 0)
        # stars 40 + forks 20 + recency 20 + bonus 10, no contributors
        self.assertEqual(record.analysis.score, 90)

    async def test_one_failed_count_keeps_the_others(self) -> None:
        client = _FakeGitHubClient(commits=UpstreamFailureException("/commits", status=409))
        aggregator = RepositoryAggregator(client, clock=lambda: NOW)

        record = await aggregator.aggregate("octocat", "example")

        self.assertEqual(record.analytics.commit_count, 0)
        self.assertEqual(record.analytics.contributor_count, 5)
        self.assertEqual(record.analytics.release_count, 4)

    async def test_missing_readme_is_not_a_failure(self) -> None:
        client = _FakeGitHubClient(readme=None)
        aggregator = RepositoryAggregator(client, clock=lambda: NOW)

        record = await aggregator.aggregate("octocat", "example")

        self.assertIsNone(record.readme)
        self.assertEqual(record.features, [])

    async def test_metadata_failure_propagates_unchanged(self) -> None:
        for error in (
            RepositoryNotFoundException("octocat/example"),
            AccessForbiddenException("octocat/example"),
            UpstreamTimeoutException("/repos/octocat/example", 10),
        ):
            with self.subTest(error=type(error).__name__):
                client = _FakeGitHubClient(repository=error)
                aggregator = RepositoryAggregator(client, clock=lambda: NOW)

                with self.assertRaises(type(error)) as ctx:
                    await aggregator.aggregate("octocat", "example")

                self.assertIs(ctx.exception, error)
                # The optional fetches still ran to completion.
                self.assertIn("releases", client.calls)
