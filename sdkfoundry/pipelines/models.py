"""Records produced by the ingestion pipeline.

Records serialize with camelCase keys, the wire format read by the serving
layer. Optional attributes that are unset are omitted from the output.
"""

from __future__ import annotations
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Dict, List, Optional


def camelize(name: str) -> str:
    """Convert a snake_case attribute name to its camelCase JSON key."""
    head, *rest = name.rstrip('_').split('_')
    return head + ''.join(part[:1].upper() + part[1:] for part in rest)


def _dump(value: Any) -> Any:
    if isinstance(value, Record):
        return value.to_dict()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, list):
        return [_dump(v) for v in value]
    if isinstance(value, dict):
        return {k: _dump(v) for k, v in value.items()}
    return value


class Record:
    """Mixin giving dataclasses a camelCase to_dict. None values are omitted."""

    def to_dict(self) -> Dict[str, Any]:
        result = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            result[camelize(f.name)] = _dump(value)
        return result


class RelationshipKind(Enum):
    REQUIRES = "REQUIRES"
    QUERIES = "QUERIES"


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"


class TypeKind(Enum):
    INTERFACE = "interface"
    TYPE = "type"
    ENUM = "enum"


@dataclass
class ComponentField(Record):
    """One field of a component schema. ``default`` keeps the raw source text."""
    name: str
    type: str = "unknown"
    default: Optional[str] = None
    description: Optional[str] = None


@dataclass
class ComponentRecord(Record):
    name: str
    package: str
    file_path: str
    description: str = ""
    remarks: Optional[str] = None
    category: Optional[str] = None
    jsdoc_examples: List[str] = field(default_factory=list)
    fields: List[ComponentField] = field(default_factory=list)
    source_code: str = ""
    usage_examples: List[str] = field(default_factory=list)
    requires: List[str] = field(default_factory=list)
    optional_with: List[str] = field(default_factory=list)
    used_by_systems: List[str] = field(default_factory=list)
    co_occurrences: Dict[str, float] = field(default_factory=dict)
    import_path: str = ""
    keywords: List[str] = field(default_factory=list)


@dataclass
class SystemMethod(Record):
    name: str
    signature: str
    description: str = ""
    return_type: Optional[str] = None


@dataclass
class SystemProperty(Record):
    name: str
    type: str = "unknown"
    description: str = ""


@dataclass
class SystemRecord(Record):
    name: str
    package: str
    file_path: str
    description: str = ""
    remarks: Optional[str] = None
    category: Optional[str] = None
    methods: List[SystemMethod] = field(default_factory=list)
    properties: List[SystemProperty] = field(default_factory=list)
    source_code: str = ""
    queries_components: List[str] = field(default_factory=list)
    import_path: str = ""
    keywords: List[str] = field(default_factory=list)


@dataclass
class TypeField(Record):
    name: str
    type: str = "unknown"
    optional: bool = False


@dataclass
class TypeRecord(Record):
    name: str
    package: str
    file_path: str
    kind: TypeKind = TypeKind.TYPE
    definition: str = ""
    # Only interfaces carry fields
    fields: Optional[List[TypeField]] = None


@dataclass
class ExampleRecord(Record):
    title: str
    file_path: str
    description: str
    code: str
    category: str = "setup"
    tags: List[str] = field(default_factory=list)
    components_used: List[str] = field(default_factory=list)
    systems_used: List[str] = field(default_factory=list)
    init_pattern: Optional[str] = None


@dataclass
class Relationship(Record):
    from_: str
    to: str
    type: RelationshipKind


@dataclass
class CompositionPattern(Record):
    name: str
    components: List[str]
    frequency: float
    category: str


@dataclass
class OrderingConstraint(Record):
    """Component ``after`` must be attached before component ``before``."""
    before: str
    after: str
    reason: str


@dataclass
class ValidationRule(Record):
    id: str
    description: str
    check: str
    message: str
    severity: Severity = Severity.WARNING


@dataclass
class IngestStats:
    """Counters reported in the end-of-run summary."""
    files_scanned: int = 0
    files_unreadable: int = 0
    parse_failures: int = 0
    packages_skipped: List[str] = field(default_factory=list)
    examples_skipped: int = 0
    name_collisions: List[str] = field(default_factory=list)
    guides_copied: int = 0


@dataclass
class IngestResult:
    """Everything one ingestion run produces, before it is written out."""
    components: Dict[str, ComponentRecord] = field(default_factory=dict)
    systems: Dict[str, SystemRecord] = field(default_factory=dict)
    types: Dict[str, TypeRecord] = field(default_factory=dict)
    examples: List[ExampleRecord] = field(default_factory=list)
    compositions: List[CompositionPattern] = field(default_factory=list)
    version: str = "0.1.0"
    commit: str = "local"
    stats: IngestStats = field(default_factory=IngestStats)
