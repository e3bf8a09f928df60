"""Harvests example programs from ``<repo>/examples/<name>/src``."""

from __future__ import annotations
import logging
import re
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from ..config import Settings, get_settings
from .models import ExampleRecord, IngestStats

logger = logging.getLogger(__name__)

ENTRY_FILE_PRIORITY: Tuple[str, ...] = ('index.js', 'index.ts', 'main.ts', 'main.js')

Predicate = Callable[[str], bool]


def contains(*needles: str) -> Predicate:
    return lambda code: any(needle in code for needle in needles)


# First match wins
CATEGORY_RULES: Tuple[Tuple[Predicate, str], ...] = (
    (contains('Interactable', 'onClick'), 'interaction'),
    (contains('PhysicsSystem'), 'physics'),
    (contains('UIKitDocument'), 'ui'),
    (contains('LocomotionSystem'), 'locomotion'),
)
DEFAULT_CATEGORY = 'setup'

# Every matching rule contributes its tag
TAG_RULES: Tuple[Tuple[Predicate, str], ...] = (
    (contains('Interactable'), 'interactable'),
    (contains('Grabbable'), 'grabbing'),
    (contains('PhysicsBody'), 'physics'),
    (contains('UIKit'), 'ui'),
    (contains('LocomotionSystem'), 'locomotion'),
    (contains('AudioSystem'), 'audio'),
)

_INIT_PATTERN = re.compile(r'World\.create\s*\([^)]*\)(?:\s*\.then)?', re.DOTALL)
_ALIAS = re.compile(r'\s+as\s+\w+$')


def import_pattern(namespace: str) -> re.Pattern:
    return re.compile(r'import\s+{([^}]+)}\s+from\s+[\'"]' + re.escape(namespace) + r'/[^\'"]+[\'"]')


def title_from_dir(name: str) -> str:
    return ' '.join(part[:1].upper() + part[1:] for part in name.split('-'))


def categorize(code: str, rules=CATEGORY_RULES, default: str = DEFAULT_CATEGORY) -> str:
    for predicate, category in rules:
        if predicate(code):
            return category
    return default


def tag(code: str, rules=TAG_RULES) -> List[str]:
    return [label for predicate, label in rules if predicate(code)]


def find_init_pattern(code: str) -> Optional[str]:
    match = _INIT_PATTERN.search(code)
    return match.group(0) if match else None


def classify_imports(code: str, namespace: str = '@iwsdk', suffix: str = 'System') -> Tuple[List[str], List[str]]:
    """Split names imported from the SDK into (components, systems)."""
    components: List[str] = []
    systems: List[str] = []

    for match in import_pattern(namespace).finditer(code):
        for raw in match.group(1).split(','):
            name = _ALIAS.sub('', raw.strip())
            # Type-only imports are not components
            if not name or name.startswith('type '):
                continue
            if name.endswith(suffix):
                if name not in systems:
                    systems.append(name)
            elif name[0].isupper():
                if name not in components:
                    components.append(name)

    return components, systems


class ExampleHarvester:
    def __init__(self, root: Path, settings: Optional[Settings] = None, stats: Optional[IngestStats] = None):
        self.settings = settings or get_settings()
        self.root = Path(root)
        self.stats = stats if stats is not None else IngestStats()
        self.entry_files = tuple(self.settings.get('sdk.example_entry_files', ENTRY_FILE_PRIORITY))
        self.namespace = self.settings.namespace
        self.suffix = self.settings.get('sdk.system_suffix', 'System')

    @property
    def examples_dir(self) -> Path:
        return self.root / 'examples'

    def find_entry(self, example_dir: Path) -> Optional[Path]:
        src_dir = example_dir / 'src'
        if not src_dir.is_dir():
            return None
        for candidate in self.entry_files:
            path = src_dir / candidate
            if path.is_file():
                return path
        return None

    def harvest(self) -> List[ExampleRecord]:
        if not self.examples_dir.is_dir():
            logger.info(f"No examples directory at {self.examples_dir}, skipping examples")
            return []

        examples = []
        for example_dir in sorted(p for p in self.examples_dir.iterdir() if p.is_dir()):
            record = self.harvest_one(example_dir)
            if record is None:
                self.stats.examples_skipped += 1
            else:
                examples.append(record)

        logger.info(f"Harvested {len(examples)} examples")
        return examples

    def harvest_one(self, example_dir: Path) -> Optional[ExampleRecord]:
        entry = self.find_entry(example_dir)
        if entry is None:
            logger.info(f"Example {example_dir.name} has no entry file, skipping")
            return None

        try:
            code = entry.read_text(encoding='utf-8')
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Could not read {entry}: {e}")
            return None

        title = title_from_dir(example_dir.name)
        components, systems = classify_imports(code, self.namespace, self.suffix)

        return ExampleRecord(
            title=title,
            file_path=f"examples/{example_dir.name}/src/{entry.name}",
            description=f"Example: {title}",
            code=code,
            category=categorize(code),
            tags=tag(code),
            components_used=components,
            systems_used=systems,
            init_pattern=find_init_pattern(code),
        )
