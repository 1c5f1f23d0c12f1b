import base64
import json
import unittest

from reposcope.application.tech_stack_detector import (
    TechStackDetector,
    classify,
    parse_package_json,
    parse_requirements,
)
from reposcope.domain.exceptions import UpstreamFailureException


def _file(text: str) -> dict:
    return {"encoding": "base64", "content": base64.b64encode(text.encode("utf-8")).decode("ascii")}


class _FakeContentsClient:
    def __init__(self, files: dict) -> None:
        self.files = files

    async def get_contents(self, session, owner, repo, path=""):
        value = self.files[path]
        if isinstance(value, Exception):
            raise value
        return value


class TestClassify(unittest.TestCase):
    def test_file_tables(self) -> None:
        stack = classify(["go.mod", "next.config.js", "Dockerfile", "README.md"], [])

        self.assertEqual(stack.backend, ["Go"])
        self.assertEqual(stack.frameworks, ["Next.js"])
        self.assertEqual(stack.tools, ["Docker"])
        self.assertEqual(stack.frontend, [])

    def test_dependencies_and_dedup(self) -> None:
        stack = classify(
            ["package.json", "tsconfig.json"],
            ["react", "React", "pg", "@nestjs/core", "nestjs", "typescript"],
        )

        self.assertEqual(stack.frontend, ["React"])
        self.assertEqual(stack.backend, ["Node.js", "NestJS"])
        self.assertEqual(stack.database, ["PostgreSQL"])
        self.assertEqual(stack.tools, ["TypeScript"])

    def test_nothing_matches(self) -> None:
        self.assertEqual(classify(["LICENSE"], ["left-pad"]).technologies(), [])


class TestManifestParsers(unittest.TestCase):
    def test_package_json_merges_dev_dependencies(self) -> None:
        text = json.dumps({"dependencies": {"vue": "^3"}, "devDependencies": {"vite": "^5"}})

        self.assertEqual(parse_package_json(text), ["vue", "vite"])

    def test_requirements(self) -> None:
        text = "# web\nDjango>=4.2\npsycopg2-binary==2.9.9  # db\n-r dev.txt\nredis[hiredis]\n\n"

        self.assertEqual(parse_requirements(text), ["Django", "psycopg2-binary", "redis"])


class TestTechStackDetector(unittest.IsolatedAsyncioTestCase):
    async def test_detects_from_files_and_manifests(self) -> None:
        client = _FakeContentsClient({
            "": [
                {"name": "requirements.txt", "type": "file"},
                {"name": "docker-compose.yml", "type": "file"},
                {"name": "package.json", "type": "dir"},
            ],
            "requirements.txt": _file("fastapi\nsqlalchemy\n"),
        })

        stack = await TechStackDetector(client).detect(None, "octocat", "example")

        self.assertEqual(stack.backend, ["Python", "FastAPI"])
        self.assertEqual(stack.database, ["SQLAlchemy"])
        self.assertEqual(stack.tools, ["Docker Compose"])

    async def test_broken_manifest_keeps_file_matches(self) -> None:
        client = _FakeContentsClient({
            "": [{"name": "package.json", "type": "file"}],
            "package.json": _file("{not json"),
        })

        with self.assertLogs("reposcope.application.tech_stack_detector", level="WARNING"):
            stack = await TechStackDetector(client).detect(None, "octocat", "example")

        self.assertEqual(stack.backend, ["Node.js"])
        self.assertEqual(stack.frontend, [])

    async def test_listing_failure_degrades_to_empty(self) -> None:
        client = _FakeContentsClient({"": UpstreamFailureException("/contents/", status=500)})

        stack = await TechStackDetector(client).detect(None, "octocat", "example")

        self.assertEqual(stack.technologies(), [])
