#!/usr/bin/env python3
"""
Funder fit command line: search organizations, inspect filings, and score
a foundation's grantmaking against a funder profile.

Results are printed to stdout as JSON; logs go to stderr.

Usage:
    python analyze.py search "gates foundation"
    python analyze.py org 56-2618866
    python analyze.py analyze 56-2618866 --profile merit_america
    python analyze.py analyze 56-2618866 --min 250000 --cause "Workforce Development" --no-news
    python analyze.py parse-xml filing.xml --form-type 2

Exit codes: 0 success, 1 analysis/upstream/input failure, 2 organization not found.
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

from pydantic_core import to_jsonable_python

from funder_fit.collectors.news_search import NewsSearchCollector
from funder_fit.collectors.propublica import ProPublicaClient
from funder_fit.config import Settings
from funder_fit.exceptions import (
    AnalysisFailedError,
    InvalidEinError,
    OrganizationNotFoundError,
    UpstreamError,
)
from funder_fit.parsers.grant_parser import parse_filing_summary
from funder_fit.schemas.grants import FormType
from funder_fit.schemas.scoring import RecipientType, UserPreferences
from funder_fit.scorers.profile_registry import FunderProfile, get_funder_profile, list_profiles
from funder_fit.services.analysis_service import FoundationAnalyzer
from funder_fit.utils.logger import PipelineLogger, configure_global_logging
from funder_fit.utils.lookup_cache import LookupCache


def _print_json(data) -> None:
    print(json.dumps(to_jsonable_python(data), indent=2))


def _build_preferences(profile: FunderProfile, args) -> Optional[UserPreferences]:
    """Profile preferences with any command-line overrides applied (None if no overrides)."""
    overrides = {}
    if args.min is not None:
        overrides["grant_size_min"] = args.min
    if args.max is not None:
        overrides["grant_size_max"] = args.max
    if args.cause:
        overrides["cause_areas"] = args.cause
    if args.recipient_type:
        overrides["recipient_type"] = args.recipient_type
    if not overrides:
        return None
    return UserPreferences(**{**profile.preferences.model_dump(), **overrides})


async def run_search(args, settings: Settings, logger: PipelineLogger) -> int:
    async with ProPublicaClient(timeout=settings.http_timeout, logger=logger) as propublica:
        result = await propublica.search_organizations(args.query, page=args.page)
    _print_json(result.model_dump(mode="json"))
    return 0


async def run_org(args, settings: Settings, logger: PipelineLogger) -> int:
    async with ProPublicaClient(timeout=settings.http_timeout, logger=logger) as propublica:
        profile = await propublica.get_organization(args.ein)
    _print_json(profile.model_dump(mode="json"))
    return 0


async def run_analyze(args, settings: Settings, logger: PipelineLogger) -> int:
    funder_profile = get_funder_profile(args.profile, settings.profiles_path)
    preferences = _build_preferences(funder_profile, args)
    cache = LookupCache.from_settings(settings, logger=logger)

    async with ProPublicaClient(cache=cache, timeout=settings.http_timeout, logger=logger) as propublica:
        async with NewsSearchCollector(rss_timeout=settings.news_timeout, logger=logger) as news:
            analyzer = FoundationAnalyzer(propublica, news=news, profile=funder_profile, logger=logger)
            result = await analyzer.analyze(args.ein, preferences=preferences, include_leadership=not args.no_news)

    cache_stats = logger.generate_summary()["cache"]
    logger.debug("Lookup cache", hits=cache_stats["hits"], misses=cache_stats["misses"])
    _print_json(result.model_dump(mode="json"))
    return 0


def run_parse_xml(args, settings: Settings, logger: PipelineLogger) -> int:
    """Offline analysis of a local e-file XML document (no network)."""
    xml_path = Path(args.path)
    if not xml_path.exists():
        print(f"Error: XML file not found: {xml_path}", file=sys.stderr)
        return 1

    xml_content = xml_path.read_text(encoding="utf-8")
    funder_profile = get_funder_profile(args.profile, settings.profiles_path)
    analyzer = FoundationAnalyzer(ProPublicaClient(), profile=funder_profile, logger=logger)

    core = analyzer.analyze_document(xml_content, args.form_type, _build_preferences(funder_profile, args))
    _print_json({"filing_summary": parse_filing_summary(xml_content), **core})
    return 0


def _add_preference_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--profile", type=str, default=None, help="Funder profile name (default: from config)")
    parser.add_argument("--min", type=int, default=None, help="Grant size sweet spot minimum (dollars)")
    parser.add_argument("--max", type=int, default=None, help="Grant size sweet spot maximum (dollars)")
    parser.add_argument(
        "--cause",
        type=str,
        action="append",
        default=[],
        help="Priority cause area (can be used multiple times), e.g. 'Workforce Development'",
    )
    parser.add_argument(
        "--recipient-type",
        type=str,
        choices=[t.value for t in RecipientType],
        default=None,
        help="Preferred recipient type",
    )


def main():
    parser = argparse.ArgumentParser(description="Score a foundation's grantmaking against a funder profile")
    parser.add_argument("--verbose", action="store_true", help="Show debug logging on stderr")
    subparsers = parser.add_subparsers(dest="command", required=True)

    search = subparsers.add_parser("search", help="Search organizations by name")
    search.add_argument("query", type=str)
    search.add_argument("--page", type=int, default=0, help="Result page (default: 0)")

    org = subparsers.add_parser("org", help="Organization metadata and filings")
    org.add_argument("ein", type=str, help="EIN (format: XX-XXXXXXX or 9 digits)")

    analyze = subparsers.add_parser("analyze", help="Full analysis of the most recent filing")
    analyze.add_argument("ein", type=str, help="EIN (format: XX-XXXXXXX or 9 digits)")
    analyze.add_argument("--no-news", action="store_true", help="Skip the press coverage search")
    _add_preference_arguments(analyze)

    parse_xml = subparsers.add_parser("parse-xml", help="Analyze a local e-file XML document")
    parse_xml.add_argument("path", type=str, help="Path to the XML file")
    parse_xml.add_argument(
        "--form-type",
        type=int,
        default=FormType.FORM_990.value,
        help="ProPublica form type: 0 = 990, 1 = 990-EZ, 2 = 990-PF (default: 0)",
    )
    _add_preference_arguments(parse_xml)

    subparsers.add_parser("profiles", help="List configured funder profiles")

    args = parser.parse_args()

    settings = Settings.from_env()
    log_level = "DEBUG" if args.verbose else settings.log_level
    configure_global_logging(log_level)
    logger = PipelineLogger("funder_fit", log_level=log_level)

    try:
        if args.command == "search":
            exit_code = asyncio.run(run_search(args, settings, logger))
        elif args.command == "org":
            exit_code = asyncio.run(run_org(args, settings, logger))
        elif args.command == "analyze":
            exit_code = asyncio.run(run_analyze(args, settings, logger))
        elif args.command == "parse-xml":
            exit_code = run_parse_xml(args, settings, logger)
        else:
            _print_json(list_profiles(settings.profiles_path))
            exit_code = 0
    except OrganizationNotFoundError as e:
        print(f"Error: {e.detail} ({e.ein})", file=sys.stderr)
        sys.exit(2)
    except AnalysisFailedError as e:
        logger.error("Analysis failed", exception=e.cause, ein=e.ein)
        print(f"Error: {AnalysisFailedError.USER_MESSAGE}", file=sys.stderr)
        sys.exit(1)
    except (InvalidEinError, UpstreamError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except (KeyError, ValueError) as e:
        # Unknown profile, bad cause label, or an invalid sweet spot
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
