"""Cross-reference inference between extracted declarations.

Four independent passes run over the registries after extraction:
requires inference, system/component linking, co-occurrence analysis over
examples, and mining of typical component compositions.
"""

from __future__ import annotations
import logging
from collections import Counter
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from .models import CompositionPattern, ComponentRecord, ExampleRecord, SystemRecord

logger = logging.getLogger(__name__)

# Domain pairs that cannot be recovered from the sources alone
KNOWN_REQUIREMENTS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ('OneHandGrabbable', ('Interactable',)),
    ('TwoHandsGrabbable', ('Interactable',)),
    ('DistanceGrabbable', ('Interactable',)),
    ('PhysicsBody', ('PhysicsShape',)),
)

DEFAULT_OPTIONAL_LOWER = 0.5
DEFAULT_OPTIONAL_UPPER = 1.0
DEFAULT_COMPOSITION_MIN_COUNT = 2
DEFAULT_COMPOSITION_MIN_SHARE = 0.1


def infer_requires(
    components: Dict[str, ComponentRecord],
    declared: Optional[Mapping[str, List[str]]] = None,
    lookups: Optional[Mapping[str, List[str]]] = None,
    known: Iterable[Tuple[str, Iterable[str]]] = KNOWN_REQUIREMENTS,
) -> None:
    """Fill ``requires`` on every component.

    Sources are merged in order: the known table, the @requires tag of the
    component's own doc comment, then entity lookups found in its source file.
    """
    declared = declared or {}
    lookups = lookups or {}
    known_map = {name: list(reqs) for name, reqs in known}

    for name, component in components.items():
        requires: List[str] = list(known_map.get(name, []))
        requires.extend(declared.get(name, []))
        requires.extend(other for other in lookups.get(component.file_path, []) if other != name)

        component.requires = list(dict.fromkeys(requires))
        if component.requires:
            logger.debug(f"{name} requires {component.requires}")


def link_systems(components: Dict[str, ComponentRecord], systems: Dict[str, SystemRecord]) -> None:
    """Record on each component the systems whose queries name it."""
    for system_name, system in systems.items():
        for component_name in system.queries_components:
            component = components.get(component_name)
            if component is None:
                continue
            if system_name not in component.used_by_systems:
                component.used_by_systems.append(system_name)


def analyze_co_occurrences(
    components: Dict[str, ComponentRecord],
    examples: List[ExampleRecord],
    lower: float = DEFAULT_OPTIONAL_LOWER,
    upper: float = DEFAULT_OPTIONAL_UPPER,
) -> None:
    """Compute co-occurrence frequencies and the optionalWith band.

    For component C, the frequency of D is the share of examples importing C
    that also import D.
    """
    imports = [list(dict.fromkeys(example.components_used)) for example in examples]

    for name, component in components.items():
        with_component = [used for used in imports if name in used]
        if not with_component:
            continue

        counts: Counter = Counter()
        for used in with_component:
            counts.update(other for other in used if other != name)

        total = len(with_component)
        component.co_occurrences = {other: count / total for other, count in counts.items()}
        component.optional_with = [
            other for other, freq in component.co_occurrences.items()
            if lower < freq < upper
        ]


def mine_compositions(
    examples: List[ExampleRecord],
    min_count: int = DEFAULT_COMPOSITION_MIN_COUNT,
    min_share: float = DEFAULT_COMPOSITION_MIN_SHARE,
) -> List[CompositionPattern]:
    """Group examples by component set and keep the recurring sets."""
    groups: Dict[Tuple[str, ...], List[ExampleRecord]] = {}

    for example in examples:
        key = tuple(sorted(set(example.components_used)))
        if len(key) < 2:
            continue
        groups.setdefault(key, []).append(example)

    total = len(examples) or 1
    patterns = []
    for key, members in groups.items():
        count = len(members)
        if count >= min_count or count / total > min_share:
            patterns.append(CompositionPattern(
                name='+'.join(key),
                components=list(key),
                frequency=count / total,
                category=members[0].category,
            ))

    patterns.sort(key=lambda p: p.frequency, reverse=True)
    return patterns
