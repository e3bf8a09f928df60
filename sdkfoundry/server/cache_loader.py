"""Read-only access to the knowledge cache written by ingestion."""

import json
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

from ..config import Settings, get_settings

logger = logging.getLogger(__name__)

CORE_PARTITIONS = (
    'metadata',
    'components',
    'systems',
    'types',
    'examples',
    'relationships',
    'common-mistakes',
    'exports',
)


class CacheNotFoundError(RuntimeError):
    """A cache partition is missing. The cache has to be rebuilt."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(
            f"Cache file not found: {path}. "
            "Run ingestion first: sdkfoundry-ingest <path-to-sdk-repo>"
        )


def _freeze(value: Any) -> Any:
    if isinstance(value, dict):
        return MappingProxyType({k: _freeze(v) for k, v in value.items()})
    if isinstance(value, list):
        return tuple(_freeze(v) for v in value)
    return value


class KnowledgeCache:
    """Loads the core partitions once, on first use, and serves lookups over them."""

    def __init__(self, cache_dir: Optional[Path] = None, settings: Optional[Settings] = None):
        settings = settings or get_settings()
        self.cache_dir = Path(cache_dir) if cache_dir else settings.cache_dir
        self._data: Optional[Dict[str, Any]] = None
        self._references: Dict[str, Any] = {}

    def _read(self, name: str) -> Any:
        path = self.cache_dir / f"{name}.json"
        if not path.exists():
            raise CacheNotFoundError(path)
        with open(path, 'r', encoding='utf-8') as f:
            return _freeze(json.load(f))

    def load(self) -> Dict[str, Any]:
        if self._data is None:
            self._data = {name: self._read(name) for name in CORE_PARTITIONS}
            logger.info(
                f"Loaded cache from {self.cache_dir}: {len(self._data['components'])} components, "
                f"{len(self._data['systems'])} systems, {len(self._data['examples'])} examples"
            )
        return self._data

    # Records

    @property
    def metadata(self) -> Mapping[str, Any]:
        return self.load()['metadata']

    @property
    def components(self) -> Mapping[str, Mapping[str, Any]]:
        return self.load()['components']

    @property
    def systems(self) -> Mapping[str, Mapping[str, Any]]:
        return self.load()['systems']

    @property
    def types(self) -> Mapping[str, Mapping[str, Any]]:
        return self.load()['types']

    @property
    def examples(self) -> tuple:
        return self.load()['examples']

    def get_component(self, name: str) -> Optional[Mapping[str, Any]]:
        return self.components.get(name)

    def get_system(self, name: str) -> Optional[Mapping[str, Any]]:
        return self.systems.get(name)

    def get_type(self, name: str) -> Optional[Mapping[str, Any]]:
        return self.types.get(name)

    def all_components(self) -> List[Mapping[str, Any]]:
        return list(self.components.values())

    def all_systems(self) -> List[Mapping[str, Any]]:
        return list(self.systems.values())

    def search_examples(self, query: str, category: Optional[str] = None) -> List[Mapping[str, Any]]:
        """Case-insensitive substring match over title, description, tags and code."""
        needle = query.lower()
        results = []
        for example in self.examples:
            matches = (
                needle in example['title'].lower()
                or needle in example['description'].lower()
                or any(needle in tag.lower() for tag in example.get('tags', ()))
                or needle in example['code'].lower()
            )
            in_category = not category or category == 'any' or example.get('category') == category
            if matches and in_category:
                results.append(example)
        return results

    # Relationships and constraints

    def relationships(self) -> Mapping[str, Any]:
        return self.load()['relationships']

    def validation_rules(self, component_or_system: Optional[str] = None) -> List[Mapping[str, Any]]:
        rules = self.relationships()['validation']
        if not component_or_system:
            return list(rules)
        return [
            rule for rule in rules
            if component_or_system in rule['id']
            or component_or_system in rule['description']
            or component_or_system in rule['check']
        ]

    def ordering_constraints(self, component: Optional[str] = None) -> List[Mapping[str, Any]]:
        constraints = self.relationships()['ordering']
        if not component:
            return list(constraints)
        return [c for c in constraints if c['before'] == component or c['after'] == component]

    def component_requirements(self, name: str) -> List[str]:
        component = self.get_component(name)
        return list(component.get('requires', ())) if component else []

    def system_components(self, name: str) -> List[str]:
        system = self.get_system(name)
        return list(system.get('queriesComponents', ())) if system else []

    # Troubleshooting

    def common_mistakes(self, category: Optional[str] = None) -> List[Mapping[str, Any]]:
        mistakes = self.load()['common-mistakes']
        if not category:
            return list(mistakes)
        return [m for m in mistakes if m['category'] == category]

    def search_common_mistakes(self, query: str) -> List[Mapping[str, Any]]:
        needle = query.lower()
        return [
            m for m in self.load()['common-mistakes']
            if needle in m['title'].lower()
            or needle in m['description'].lower()
            or needle in m['category'].lower()
        ]

    # Exports and reference content

    def package_exports(self, package: Optional[str] = None) -> Optional[Mapping[str, Any]]:
        exports = self.load()['exports']
        if package is None:
            return exports
        return exports.get(package)

    def reference(self, name: str) -> Any:
        """Load a static reference partition such as 'best-practices'."""
        if name not in self._references:
            self._references[name] = self._read(name)
        return self._references[name]

    def overview(self) -> Optional[str]:
        """The fetched overview document, or None if docs were never fetched."""
        path = self.cache_dir / 'docs' / 'overview.md'
        try:
            return path.read_text(encoding='utf-8')
        except FileNotFoundError:
            return None


_cache: Optional[KnowledgeCache] = None


def get_cache() -> KnowledgeCache:
    global _cache
    if _cache is None:
        _cache = KnowledgeCache()
    return _cache
