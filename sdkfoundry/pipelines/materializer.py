"""Writes an ingestion result to the partitioned JSON cache."""

from __future__ import annotations
import json
import logging
import os
import shutil
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..config import Settings, get_settings
from ..content import ContentLoader, get_content_loader
from .models import (
    ComponentRecord,
    IngestResult,
    OrderingConstraint,
    Relationship,
    RelationshipKind,
    Severity,
    SystemRecord,
    TypeRecord,
    ValidationRule,
)
from .scanner import IngestionError

logger = logging.getLogger(__name__)

PARTITIONS = (
    'metadata.json',
    'components.json',
    'systems.json',
    'types.json',
    'examples.json',
    'relationships.json',
    'common-mistakes.json',
    'exports.json',
    'best-practices.json',
    'setup-guides.json',
    'asset-guides.json',
    'troubleshooting.json',
)


def requires_edges(components: Dict[str, ComponentRecord]) -> List[Relationship]:
    return [
        Relationship(from_=component.name, to=required, type=RelationshipKind.REQUIRES)
        for component in components.values()
        for required in component.requires
    ]


def query_edges(systems: Dict[str, SystemRecord]) -> List[Relationship]:
    return [
        Relationship(from_=system.name, to=name, type=RelationshipKind.QUERIES)
        for system in systems.values()
        for name in system.queries_components
    ]


def ordering_constraints(components: Dict[str, ComponentRecord]) -> List[OrderingConstraint]:
    """One constraint per required component: it must be attached first."""
    return [
        OrderingConstraint(
            before=name,
            after=required,
            reason=f"{name} requires {required} to be added first",
        )
        for name, component in components.items()
        for required in component.requires
    ]


def validation_rules(components: Dict[str, ComponentRecord], systems: Dict[str, SystemRecord]) -> List[ValidationRule]:
    rules: List[ValidationRule] = []

    for name, component in components.items():
        if component.requires:
            required = ', '.join(component.requires)
            rules.append(ValidationRule(
                id=f"component-{name}-requires",
                description=f"Check if {name} has required components",
                check=f"entity has {required} when using {name}",
                message=f"{name} requires {required} component(s)",
                severity=Severity.ERROR,
            ))

        if component.used_by_systems:
            registered = ' or '.join(component.used_by_systems)
            rules.append(ValidationRule(
                id=f"component-{name}-system",
                description=f"Check if {name} has required system",
                check=f"world has {registered} registered when using {name}",
                message=f"{name} requires {registered} to be registered",
                severity=Severity.WARNING,
            ))

    for name, system in systems.items():
        if system.queries_components:
            queried = ', '.join(system.queries_components)
            rules.append(ValidationRule(
                id=f"system-{name}-components",
                description=f"Check if {name} has entities with required components",
                check=f"entities have {queried} when using {name}",
                message=f"{name} queries for {queried} component(s)",
                severity=Severity.WARNING,
            ))

    rules.append(ValidationRule(
        id='entity-creation',
        description='Check entity creation method',
        check='use createTransformEntity() for entities that need position/rotation',
        message='Use createTransformEntity() instead of createEntity() for 3D positioned entities',
        severity=Severity.WARNING,
    ))

    return rules


def package_exports(
    components: Dict[str, ComponentRecord],
    systems: Dict[str, SystemRecord],
    types: Dict[str, TypeRecord],
    settings: Optional[Settings] = None,
) -> Dict[str, Dict[str, List[str]]]:
    """Per-package export lists. Only the core package lists the factory functions."""
    settings = settings or get_settings()
    core_id = settings.package_id(settings.get('sdk.core_package', 'core'))
    factories = [settings.get('sdk.component_factory'), settings.get('sdk.system_factory')]

    exports: Dict[str, Dict[str, List[str]]] = {}
    for package_id in settings.package_ids():
        package_systems = [name for name, s in systems.items() if s.package == package_id]
        package_components = [name for name, c in components.items() if c.package == package_id]
        package_types = [name for name, t in types.items() if t.package == package_id]
        if package_id != core_id and not (package_systems or package_components or package_types):
            continue

        exports[package_id] = {
            'classes': list(package_systems),
            'functions': list(factories) if package_id == core_id else [],
            'types': package_types,
            'components': package_components,
            'systems': package_systems,
        }

    return exports


class CacheMaterializer:
    """Owns every write into the cache directory."""

    def __init__(self, cache_dir: Optional[Path] = None, settings: Optional[Settings] = None,
                 content: Optional[ContentLoader] = None):
        self.settings = settings or get_settings()
        self.cache_dir = Path(cache_dir) if cache_dir else self.settings.cache_dir
        self.content = content or get_content_loader()

    @staticmethod
    def _write(directory: Path, filename: str, data: Any) -> Path:
        path = directory / filename
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        return path

    def metadata(self, result: IngestResult) -> Dict[str, str]:
        return {
            'ingestDate': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
            'iwsdkVersion': result.version,
            'repository': self.settings.get('sdk.repository'),
            'commit': result.commit,
        }

    def build_partitions(self, result: IngestResult) -> Dict[str, Any]:
        """Assemble every partition in memory, keyed by file name."""
        relationships = {
            'componentRequires': [r.to_dict() for r in requires_edges(result.components)],
            'systemQueries': [r.to_dict() for r in query_edges(result.systems)],
            'typicalCompositions': [p.to_dict() for p in result.compositions],
            'ordering': [c.to_dict() for c in ordering_constraints(result.components)],
            'validation': [r.to_dict() for r in validation_rules(result.components, result.systems)],
        }

        partitions = {
            'metadata.json': self.metadata(result),
            'components.json': {name: c.to_dict() for name, c in result.components.items()},
            'systems.json': {name: s.to_dict() for name, s in result.systems.items()},
            'types.json': {name: t.to_dict() for name, t in result.types.items()},
            'examples.json': [e.to_dict() for e in result.examples],
            'relationships.json': relationships,
            'exports.json': package_exports(result.components, result.systems, result.types, self.settings),
        }
        partitions.update(self.content.reference_partitions())
        return partitions

    def copy_guides(self, root: Path) -> int:
        source_dir = Path(root) / 'docs' / 'guides'
        if not source_dir.is_dir():
            logger.info(f"No guides directory at {source_dir}")
            return 0

        dest_dir = self.cache_dir / 'docs' / 'guides'
        dest_dir.mkdir(parents=True, exist_ok=True)

        copied = 0
        for path in sorted(source_dir.glob('*.md')):
            shutil.copyfile(path, dest_dir / path.name)
            copied += 1
        return copied

    def materialize(self, result: IngestResult, root: Optional[Path] = None) -> Dict[str, Any]:
        """Write all partitions, replacing existing files, and copy guides.

        Partitions are written to a staging directory beside the cache and
        only moved into place once every write has succeeded, so a failure
        leaves the previous cache untouched.

        Raises:
            IngestionError: an existing partition path cannot be replaced.
            OSError: the cache or staging directory cannot be written.
        """
        # All partitions are built before the first write
        partitions = self.build_partitions(result)

        self.cache_dir.mkdir(parents=True, exist_ok=True)
        for filename in PARTITIONS:
            target = self.cache_dir / filename
            if target.exists() and not target.is_file():
                raise IngestionError(f"Cannot replace {target}: not a regular file")

        staging = Path(tempfile.mkdtemp(prefix=f".{self.cache_dir.name}-", dir=self.cache_dir.parent))
        try:
            for filename in PARTITIONS:
                self._write(staging, filename, partitions[filename])
            for filename in PARTITIONS:
                os.replace(staging / filename, self.cache_dir / filename)
        finally:
            shutil.rmtree(staging, ignore_errors=True)
        logger.info(f"Wrote {len(PARTITIONS)} partitions to {self.cache_dir}")

        if root is not None:
            result.stats.guides_copied = self.copy_guides(root)

        return partitions
