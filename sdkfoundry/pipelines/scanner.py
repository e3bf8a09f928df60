"""Walks the SDK checkout and yields the TypeScript sources of each package."""

from __future__ import annotations
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional

from ..config import Settings, get_settings
from .models import IngestStats

logger = logging.getLogger(__name__)


class IngestionError(Exception):
    """Fatal ingestion failure. No partition is written when this is raised."""


class RepositoryLayoutError(IngestionError):
    """The given path is not a recognizable SDK checkout."""


@dataclass(frozen=True)
class SourceUnit:
    path: Path
    relative_path: str
    package: str
    content: str


def validate_repository(root: Path, settings: Optional[Settings] = None) -> Path:
    """Check the multi-package layout before any parsing begins."""
    settings = settings or get_settings()
    root = Path(root).expanduser().resolve()

    if not root.exists():
        raise RepositoryLayoutError(f"Repository path does not exist: {root}")

    packages_dir = root / "packages"
    if not packages_dir.is_dir():
        raise RepositoryLayoutError(
            f"Not a valid SDK repository (missing packages/ directory): {root}"
        )

    core = settings.get('sdk.core_package', 'core')
    if not (packages_dir / core).is_dir():
        raise RepositoryLayoutError(f"Not a valid SDK repository (missing packages/{core}): {root}")

    logger.info(f"Valid SDK repository found at: {root}")
    return root


def find_package_version(root: Path, settings: Optional[Settings] = None) -> str:
    """Read the core package version, falling back to the configured default."""
    settings = settings or get_settings()
    default = settings.get('sdk.default_version', '0.1.0')
    package_json = Path(root) / "packages" / settings.get('sdk.core_package', 'core') / "package.json"

    try:
        with open(package_json, 'r', encoding='utf-8') as f:
            return json.load(f).get('version') or default
    except (OSError, ValueError) as e:
        logger.debug(f"Could not read version from {package_json}: {e}")
        return default


def find_commit(root: Path) -> str:
    """Resolve the checked-out commit from .git/HEAD, or 'local'."""
    git_dir = Path(root) / ".git"
    try:
        head = (git_dir / "HEAD").read_text(encoding='utf-8').strip()
        if head.startswith("ref: "):
            ref = head[5:]
            ref_file = git_dir / ref
            if ref_file.exists():
                return ref_file.read_text(encoding='utf-8').strip()
            packed = git_dir / "packed-refs"
            if packed.exists():
                for line in packed.read_text(encoding='utf-8').splitlines():
                    if line.endswith(" " + ref):
                        return line.split(" ", 1)[0]
            return "local"
        return head or "local"
    except OSError:
        return "local"


class SourceScanner:
    """Enumerates source files package by package.

    Each call to iter_package performs an independent walk, so a package can
    be re-scanned without sharing state with another walk.
    """

    def __init__(self, root: Path, settings: Optional[Settings] = None, stats: Optional[IngestStats] = None):
        self.settings = settings or get_settings()
        self.root = Path(root)
        self.stats = stats if stats is not None else IngestStats()
        self.extensions = tuple(self.settings.get('sdk.source_extensions', ['.ts', '.tsx']))

    def source_dir(self, pkg: str) -> Path:
        return self.root / "packages" / pkg / "src"

    def iter_package(self, pkg: str) -> Iterator[SourceUnit]:
        src_dir = self.source_dir(pkg)
        if not src_dir.is_dir():
            logger.info(f"Package {pkg} has no src directory, skipping")
            if pkg not in self.stats.packages_skipped:
                self.stats.packages_skipped.append(pkg)
            return

        package_id = self.settings.package_id(pkg)
        for path in self._walk(src_dir):
            try:
                content = path.read_text(encoding='utf-8')
            except (OSError, UnicodeDecodeError) as e:
                logger.warning(f"Could not read {path}: {e}")
                self.stats.files_unreadable += 1
                continue

            self.stats.files_scanned += 1
            yield SourceUnit(
                path=path,
                relative_path=path.relative_to(self.root).as_posix(),
                package=package_id,
                content=content,
            )

    def iter_all(self, packages: Optional[List[str]] = None) -> Iterator[SourceUnit]:
        for pkg in packages or self.settings.packages:
            yield from self.iter_package(pkg)

    def _walk(self, directory: Path) -> Iterator[Path]:
        # Sorted listing keeps output order stable across runs
        for entry in sorted(directory.iterdir(), key=lambda p: p.name):
            if entry.is_dir():
                yield from self._walk(entry)
            elif entry.is_file() and entry.name.endswith(self.extensions):
                yield entry
