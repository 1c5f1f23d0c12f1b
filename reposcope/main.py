import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from reposcope.application.aggregator import RepositoryAggregator
from reposcope.application.analysis_service import AnalysisService
from reposcope.config import load_settings
from reposcope.domain.exceptions import RepoScopeException
from reposcope.infrastructure.cache_store import CacheStore
from reposcope.infrastructure.github_client import GitHubRestClient
from reposcope.logging_config import setup_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="reposcope", description="Analyze GitHub repositories.")
    parser.add_argument("references", nargs="+", help="GitHub URL, SSH remote or owner/repo")
    parser.add_argument("--force", action="store_true", help="Bypass the cache for every reference")
    parser.add_argument("--stats", action="store_true", help="Print cache statistics after analyzing")
    parser.add_argument("--search", metavar="QUERY", help="Search the analyzed repositories afterwards")
    return parser


def build_service(github_token: Optional[str], cache_store: CacheStore) -> AnalysisService:
    github_client = GitHubRestClient(token=github_token)
    return AnalysisService(aggregator=RepositoryAggregator(github_client), cache_store=cache_store)


async def run(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    settings = load_settings()
    setup_logging(settings.log_level, settings.environment)

    if not settings.github_token:
        logger.warning("GITHUB_TOKEN is not set; unauthenticated GitHub rate limits apply.")

    service = build_service(settings.github_token, CacheStore(ttl=settings.cache_ttl))

    exit_code = 0
    for reference in args.references:
        try:
            result = await service.analyze(reference, force_refresh=args.force)
        except RepoScopeException as e:
            logger.error(f"Could not analyze {reference}: {e}")
            exit_code = 1
            continue
        print(result.model_dump_json(indent=2, exclude={"record": {"readme": {"html"}}}))

    if args.search:
        print(service.cache_search(args.search).model_dump_json(indent=2))
    if args.stats:
        print(service.cache_stats().model_dump_json(indent=2))

    return exit_code


def main() -> None:
    try:
        sys.exit(asyncio.run(run()))
    except KeyboardInterrupt:
        logger.info("Interrupted by user. Exiting gracefully.")
    except Exception as e:
        logger.exception(f"An unexpected error occurred: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
