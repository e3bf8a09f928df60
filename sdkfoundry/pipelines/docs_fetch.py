"""Best-effort download of official documentation into the cache.

Documents are listed in the source YAML files under ``sdkfoundry/sources``.
Each is fetched once, sequentially, and written with a provenance header.
Failures are logged and skipped.
"""

import argparse
import logging
import sys
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

import requests
from bs4 import BeautifulSoup

from ..config import Settings, get_settings
from ..observability import setup_logging
from ..sources import DocSourceConfig, DocumentRef, SourceConfigError, SourceLoader

logger = logging.getLogger(__name__)

DEFAULT_SOURCE_TITLE = "Meta Developers - Official IWSDK Documentation"
DEFAULT_LICENSE_HINT = "Check Meta's developer documentation license"


@dataclass
class FetchReport:
    success: int = 0
    failed: int = 0
    written: List[Path] = field(default_factory=list)


def is_error_page(body: str) -> bool:
    """Detect an HTML error page served in place of the document."""
    if '<!DOCTYPE html>' not in body:
        return False
    soup = BeautifulSoup(body, 'html.parser')
    return soup.title is not None and soup.title.get_text(strip=True) == 'Error'


def provenance_header(url: str, source: DocSourceConfig, fetched: Optional[datetime] = None) -> str:
    fetched = fetched or datetime.now(timezone.utc)
    return (
        "<!--\n"
        f"Source: {source.title or DEFAULT_SOURCE_TITLE}\n"
        f"URL: {url}\n"
        f"Fetched: {fetched.isoformat().replace('+00:00', 'Z')}\n"
        f"License: {source.license_hint or DEFAULT_LICENSE_HINT}\n"
        "-->\n\n"
    )


class DocsFetcher:
    def __init__(self, settings: Optional[Settings] = None, session: Optional[requests.Session] = None,
                 output_dir: Optional[Path] = None):
        self.settings = settings or get_settings()
        self.session = session or requests.Session()
        self.session.headers.setdefault('User-Agent', self.settings.get('docs.user_agent', 'SDKFoundry/1.0'))
        self.timeout = self.settings.get('docs.timeout', 30)
        self.min_length = self.settings.get('docs.min_length', 100)
        self.output_dir = Path(output_dir) if output_dir else self.settings.cache_dir / 'docs'

    def fetch_document(self, source: DocSourceConfig, doc: DocumentRef) -> Optional[str]:
        """Download one document. Returns the body, or None if it was rejected."""
        url = doc.url(source.base_url)
        logger.info(f"Fetching {doc.name} from {url}")

        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning(f"Failed to fetch {doc.name}: {e}")
            return None

        if not response.ok:
            logger.warning(f"Failed to fetch {doc.name}: HTTP {response.status_code}")
            return None

        body = response.text
        if is_error_page(body):
            logger.warning(f"Failed to fetch {doc.name}: server returned an error page")
            return None

        if len(body) < self.min_length:
            logger.warning(f"Failed to fetch {doc.name}: content too short ({len(body)} characters)")
            return None

        return body

    def fetch_source(self, source: DocSourceConfig, report: Optional[FetchReport] = None) -> FetchReport:
        report = report or FetchReport()
        self.output_dir.mkdir(parents=True, exist_ok=True)

        for doc in source.documents:
            body = self.fetch_document(source, doc)
            if body is None:
                report.failed += 1
                continue

            path = self.output_dir / doc.name
            path.write_text(provenance_header(doc.url(source.base_url), source) + body, encoding='utf-8')
            logger.info(f"Saved {doc.name} ({len(body)} characters)")
            report.success += 1
            report.written.append(path)

        return report

    def load_sources(self, names: Optional[List[str]] = None) -> List[DocSourceConfig]:
        """Load the named sources, or every enabled one.

        Raises:
            SourceConfigError: a named source is missing or invalid.
        """
        loader = SourceLoader()
        if names:
            sources = [loader.load_source_config(name) for name in names]
        else:
            sources = loader.load_enabled_sources()

        # The configured base URL wins over the one in the source file
        base_url = self.settings.get('docs.base_url')
        if base_url:
            for source in sources:
                source.base_url = base_url
        return sources

    def fetch_all(self, sources: Optional[List[DocSourceConfig]] = None) -> FetchReport:
        if sources is None:
            sources = self.load_sources()

        report = FetchReport()
        for source in sources:
            self.fetch_source(source, report)

        logger.info(f"Documentation fetch complete: {report.success} succeeded, {report.failed} failed")
        return report


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Download official SDK documentation into the cache")
    parser.add_argument('--cache-dir', help="Cache directory (default from configuration)")
    parser.add_argument('--source', action='append', help="Source name to fetch (default: all enabled)")
    parser.add_argument('--log-level', default=None, help="Logging level")
    args = parser.parse_args(argv)

    overrides = {'cache_dir': args.cache_dir} if args.cache_dir else None
    settings = Settings(overrides=overrides) if overrides else get_settings()
    setup_logging(level=args.log_level or settings.get('logging.level', 'INFO'))

    try:
        fetcher = DocsFetcher(settings)
        report = fetcher.fetch_all(fetcher.load_sources(args.source))
    except SourceConfigError as e:
        print(f"Documentation fetch failed: {e}", file=sys.stderr)
        return 1

    print(f"Fetched {report.success} document(s), {report.failed} failed")
    return 0


if __name__ == "__main__":
    sys.exit(main())
