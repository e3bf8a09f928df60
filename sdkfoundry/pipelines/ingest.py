"""Ingestion entry point: SDK checkout in, partitioned cache out.

Stages run strictly in sequence: scan and extract, harvest examples, infer
relationships, materialize. Layout problems abort the run before anything
is written; per-file problems are counted and reported in the summary.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, TextIO

from ..config import Settings, get_settings
from ..content import ContentLoader
from ..observability import log_performance, setup_logging
from .docs_fetch import DocsFetcher
from .examples import ExampleHarvester
from .extractor import DeclarationExtractor
from .materializer import PARTITIONS, CacheMaterializer
from .models import IngestResult, IngestStats
from .relationships import analyze_co_occurrences, infer_requires, link_systems, mine_compositions
from .scanner import IngestionError, SourceScanner, find_commit, find_package_version, validate_repository

logger = logging.getLogger(__name__)


@log_performance(threshold_ms=30000.0)
def build_result(repo_path: Path, settings: Optional[Settings] = None) -> IngestResult:
    """Run every in-memory stage and return the enriched records."""
    settings = settings or get_settings()
    root = validate_repository(repo_path, settings)

    stats = IngestStats()
    result = IngestResult(
        version=find_package_version(root, settings),
        commit=find_commit(root),
        stats=stats,
    )
    logger.info(f"Repository version: {result.version}")

    scanner = SourceScanner(root, settings, stats)
    extraction = DeclarationExtractor(settings, stats).extract_all(scanner.iter_all())
    result.components = extraction.components
    result.systems = extraction.systems
    result.types = extraction.types
    logger.info(
        f"Found {len(result.components)} components, {len(result.systems)} systems, "
        f"{len(result.types)} types"
    )

    result.examples = ExampleHarvester(root, settings, stats).harvest()

    thresholds = settings.get_inference_thresholds()
    infer_requires(result.components, extraction.declared_requires, extraction.entity_lookups)
    link_systems(result.components, result.systems)
    analyze_co_occurrences(result.components, result.examples, thresholds['lower'], thresholds['upper'])
    result.compositions = mine_compositions(result.examples, thresholds['min_count'], thresholds['min_share'])

    return result


def run_ingestion(repo_path: Path, settings: Optional[Settings] = None, cache_dir: Optional[Path] = None,
                  content: Optional[ContentLoader] = None) -> IngestResult:
    settings = settings or get_settings()
    result = build_result(Path(repo_path), settings)
    materializer = CacheMaterializer(cache_dir, settings, content)
    materializer.materialize(result, Path(repo_path).expanduser().resolve())
    return result


def print_summary(result: IngestResult, cache_dir: Path, out: Optional[TextIO] = None) -> None:
    out = out or sys.stdout
    stats = result.stats
    lines = [
        f"Cache written to {cache_dir}/",
        f"  Partitions:    {len(PARTITIONS)}",
        f"  Components:    {len(result.components)}",
        f"  Systems:       {len(result.systems)}",
        f"  Types:         {len(result.types)}",
        f"  Examples:      {len(result.examples)}",
        f"  Compositions:  {len(result.compositions)}",
        f"  Guides copied: {stats.guides_copied}",
        "",
        f"  Files scanned:        {stats.files_scanned}",
        f"  Files unreadable:     {stats.files_unreadable}",
        f"  Files with syntax errors: {stats.parse_failures}",
        f"  Packages skipped:     {len(stats.packages_skipped)}"
        + (f" ({', '.join(stats.packages_skipped)})" if stats.packages_skipped else ""),
        f"  Examples skipped:     {stats.examples_skipped}",
        f"  Name collisions:      {len(stats.name_collisions)}",
    ]
    for collision in stats.name_collisions:
        lines.append(f"    - {collision}")
    print("\n".join(lines), file=out)


def _settings_from_args(args) -> Settings:
    if args.cache_dir:
        return Settings(overrides={'cache_dir': args.cache_dir})
    return get_settings()


def _configure_logging(args, settings: Settings) -> None:
    setup_logging(level=args.log_level or settings.get('logging.level', 'INFO'),
                  log_file=settings.get('logging.file'),
                  use_json=args.json_logs or bool(settings.get('logging.json', False)))


def _build_parser(description: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument('repo', help="Path to a cloned SDK repository")
    parser.add_argument('--cache-dir', help="Output directory (default from configuration)")
    parser.add_argument('--log-level', default=None, help="Logging level")
    parser.add_argument('--json-logs', action='store_true', help="Emit console logs as JSON")
    return parser


def _ingest_or_report(args, settings: Settings) -> Optional[IngestResult]:
    try:
        result = run_ingestion(Path(args.repo), settings)
    except (IngestionError, OSError) as e:
        print(f"Ingestion failed: {e}", file=sys.stderr)
        return None
    print_summary(result, settings.cache_dir)
    return result


def main(argv: Optional[List[str]] = None) -> int:
    parser = _build_parser("Ingest SDK source code into the knowledge cache")
    args = parser.parse_args(argv)
    settings = _settings_from_args(args)
    _configure_logging(args, settings)

    return 0 if _ingest_or_report(args, settings) is not None else 1


def setup_main(argv: Optional[List[str]] = None) -> int:
    """Ingest a checkout and then fetch the official documentation."""
    parser = _build_parser("Prepare the knowledge cache: ingest sources and fetch documentation")
    parser.add_argument('--skip-docs', action='store_true', help="Do not download documentation")
    args = parser.parse_args(argv)
    settings = _settings_from_args(args)
    _configure_logging(args, settings)

    if _ingest_or_report(args, settings) is None:
        return 1

    if not args.skip_docs:
        report = DocsFetcher(settings).fetch_all()
        print(f"Fetched {report.success} document(s), {report.failed} failed")

    return 0


if __name__ == "__main__":
    sys.exit(main())
