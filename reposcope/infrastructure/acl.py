import base64
import binascii
from datetime import datetime
from typing import Any, Dict, Optional

import markdown

from reposcope.domain.models import (
    LanguageBreakdown,
    LanguageStat,
    ReadmeDocument,
    RepositoryMetadata,
    RepositoryOwner,
)


def _parse_timestamp(raw_date: Optional[str]) -> Optional[datetime]:
    if not raw_date:
        return None
    return datetime.fromisoformat(raw_date.replace("Z", "+00:00"))


def decode_content(raw_file: Dict[str, Any]) -> str:
    """
    Decodes the `content` field of a GitHub contents/readme resource.

    Raises:
        ValueError: if the payload is not valid base64 text.
    """
    content = raw_file.get("content") or ""
    if (raw_file.get("encoding") or "base64").lower() != "base64":
        return content
    try:
        return base64.b64decode(content).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise ValueError(f"Undecodable file content for {raw_file.get('path', '?')}: {e}") from e


class GitHubTranslator:
    """
    Anti-corruption layer that translates raw GitHub REST JSON responses into domain models.
    """

    @staticmethod
    def to_metadata(raw_repo: Dict[str, Any]) -> RepositoryMetadata:
        """
        Transforms a raw `/repos/{owner}/{repo}` response into RepositoryMetadata.

        Args:
            raw_repo (Dict[str, Any]): The raw JSON body from GitHub's REST API.

        Returns:
            RepositoryMetadata: The domain model instance representing the repository.
        """
        # Extract nested fields with safe defaults
        owner_data = raw_repo.get('owner') or {}
        license_data = raw_repo.get('license') or {}

        return RepositoryMetadata(
            id=raw_repo.get('id', 0),
            name=raw_repo.get('name', ''),
            full_name=raw_repo.get('full_name', ''),
            owner=RepositoryOwner(
                login=owner_data.get('login', ''),
                avatar_url=owner_data.get('avatar_url'),
                type=owner_data.get('type'),
            ),
            description=raw_repo.get('description'),
            url=raw_repo.get('html_url', ''),
            clone_url=raw_repo.get('clone_url'),
            homepage=raw_repo.get('homepage') or None,
            topics=raw_repo.get('topics') or [],
            language=raw_repo.get('language'),
            size=raw_repo.get('size') or 0,
            stars=raw_repo.get('stargazers_count') or 0,
            forks=raw_repo.get('forks_count') or 0,
            watchers=raw_repo.get('watchers_count') or 0,
            open_issues=raw_repo.get('open_issues_count') or 0,
            created_at=_parse_timestamp(raw_repo.get('created_at')),
            updated_at=_parse_timestamp(raw_repo.get('updated_at')),
            pushed_at=_parse_timestamp(raw_repo.get('pushed_at')),
            license=license_data.get('name'),
            is_private=bool(raw_repo.get('private', False)),
            is_fork=bool(raw_repo.get('fork', False)),
            archived=bool(raw_repo.get('archived', False)),
        )

    @staticmethod
    def to_readme(raw_readme: Dict[str, Any]) -> ReadmeDocument:
        """Decodes a `/readme` response and renders it to HTML."""
        content = decode_content(raw_readme)
        return ReadmeDocument(
            content=content,
            html=markdown.markdown(content, extensions=["fenced_code", "tables"]),
            filename=raw_readme.get('name'),
        )

    @staticmethod
    def to_languages(raw_languages: Dict[str, int]) -> LanguageBreakdown:
        """Turns a language -> bytes map into percentages, largest language first."""
        total = sum(raw_languages.values())
        ranked = sorted(raw_languages.items(), key=lambda item: item[1], reverse=True)
        stats = [
            LanguageStat(
                name=name,
                bytes=size,
                percentage=round(size / total * 100, 1) if total else 0.0,
            )
            for name, size in ranked
        ]
        return LanguageBreakdown(
            raw=dict(raw_languages),
            stats=stats,
            primary=stats[0].name if stats else "Unknown",
        )
