import json
import logging
import re
from typing import Dict, Iterable, List

import aiohttp

from reposcope.domain.models import TechStack
from reposcope.domain.tech_catalog import (
    DEPENDENCY_TABLES,
    FRAMEWORK_FILES,
    PACKAGE_FILES,
    TOOL_FILES,
)
from reposcope.infrastructure.acl import decode_content
from reposcope.infrastructure.github_client import GitHubRestClient

logger = logging.getLogger(__name__)

# Requirement name up to the first version specifier, extra or marker.
_REQUIREMENT_NAME_RE = re.compile(r"^\s*([A-Za-z0-9][A-Za-z0-9._-]*)")


def parse_package_json(text: str) -> List[str]:
    manifest = json.loads(text)
    if not isinstance(manifest, dict):
        return []
    names: List[str] = []
    for section in ("dependencies", "devDependencies"):
        names.extend((manifest.get(section) or {}).keys())
    return names


def parse_requirements(text: str) -> List[str]:
    names: List[str] = []
    for line in text.splitlines():
        line = line.split("#", 1)[0].strip()
        if not line or line.startswith("-"):
            continue
        match = _REQUIREMENT_NAME_RE.match(line)
        if match:
            names.append(match.group(1))
    return names


MANIFEST_PARSERS = {
    "package.json": parse_package_json,
    "requirements.txt": parse_requirements,
}


def classify(file_names: Iterable[str], dependencies: Iterable[str]) -> TechStack:
    """Buckets top-level file names and manifest dependency names using the catalog tables."""
    buckets: Dict[str, List[str]] = {
        "frontend": [], "backend": [], "database": [], "tools": [], "frameworks": [],
    }

    for name in file_names:
        if name in PACKAGE_FILES:
            buckets["backend"].append(PACKAGE_FILES[name])
        if name in FRAMEWORK_FILES:
            buckets["frameworks"].append(FRAMEWORK_FILES[name])
        if name in TOOL_FILES:
            buckets["tools"].append(TOOL_FILES[name])

    for dependency in dependencies:
        lowered = dependency.lower()
        for bucket, table in DEPENDENCY_TABLES.items():
            if lowered in table:
                buckets[bucket].append(table[lowered])

    return TechStack(**buckets)


class TechStackDetector:
    """
    Heuristic technology detection from a repository's top-level files and dependency manifests.
    Never raises: any failure degrades to whatever has been detected so far, or an empty stack.
    """

    def __init__(self, github_client: GitHubRestClient):
        self.github_client = github_client

    async def detect(self, session: aiohttp.ClientSession, owner: str, repo: str) -> TechStack:
        try:
            listing = await self.github_client.get_contents(session, owner, repo)
        except Exception as e:
            logger.warning(f"Failed to list contents of {owner}/{repo}: {e}")
            return TechStack()

        file_names = [
            item.get("name", "") for item in listing or []
            if isinstance(item, dict) and item.get("type") == "file"
        ]

        dependencies: List[str] = []
        for manifest, parser in MANIFEST_PARSERS.items():
            if manifest not in file_names:
                continue
            try:
                raw_file = await self.github_client.get_contents(session, owner, repo, manifest)
                dependencies.extend(parser(decode_content(raw_file)))
            except Exception as e:
                logger.warning(f"Failed to parse {manifest} of {owner}/{repo}: {e}")

        return classify(file_names, dependencies)
