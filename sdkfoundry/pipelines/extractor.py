"""Declaration extraction from TypeScript syntax trees.

Sources are parsed with tree-sitter. Three declaration shapes are recognized:

* components: ``const X = createComponent('Name', { field: { type, default } }, 'desc')``
* systems: ``class FooSystem extends createSystem({ query: { required: [A] } }) { ... }``
* types: interfaces, type aliases and enums

Anything else is ignored. Registries are keyed by name; a later declaration
with the same name replaces the earlier one and the collision is recorded.
"""

from __future__ import annotations
import logging
import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional

from tree_sitter_language_pack import get_parser

from ..config import Settings, get_settings
from .docblocks import DocBlock, is_doc_comment, parse_doc_comment, resolve_description
from .models import (
    ComponentField,
    ComponentRecord,
    IngestStats,
    SystemMethod,
    SystemProperty,
    SystemRecord,
    TypeField,
    TypeKind,
    TypeRecord,
)
from .scanner import SourceUnit

logger = logging.getLogger(__name__)

SYSTEM_SOURCE_LIMIT = 500

_QUOTES = re.compile(r"['\"`]")
_WORDS = re.compile(r'\b\w{4,}\b')
_CAMEL_SPLIT = re.compile(r'(?=[A-Z])')
_ENTITY_LOOKUP = re.compile(r'(?:hasComponent|getComponent)\s*\(\s*entity\s*,\s*(\w+)')
_CAPITALIZED = re.compile(r'^[A-Z]')

_VARIABLE_DECLARATIONS = {'lexical_declaration', 'variable_declaration'}
_CLASS_DECLARATIONS = {'class_declaration', 'abstract_class_declaration'}
_METHOD_NODES = {'method_definition', 'abstract_method_signature', 'method_signature'}
_PROPERTY_NODES = {'public_field_definition', 'property_declaration'}


def strip_quotes(text: str) -> str:
    return _QUOTES.sub('', text)


def generate_keywords(name: str, doc: DocBlock) -> List[str]:
    """Search keywords: name words, leading description words, category."""
    keywords = [part.lower() for part in _CAMEL_SPLIT.split(name) if part]

    if doc.summary:
        keywords.extend(_WORDS.findall(doc.summary.lower())[:5])

    if doc.category:
        keywords.append(doc.category.lower())

    return list(dict.fromkeys(keywords))


@dataclass
class ExtractionResult:
    components: Dict[str, ComponentRecord] = field(default_factory=dict)
    systems: Dict[str, SystemRecord] = field(default_factory=dict)
    types: Dict[str, TypeRecord] = field(default_factory=dict)
    # component name -> names listed in its @requires tag
    declared_requires: Dict[str, List[str]] = field(default_factory=dict)
    # source path -> X of every hasComponent(entity, X) / getComponent(entity, X) call
    entity_lookups: Dict[str, List[str]] = field(default_factory=dict)


class DeclarationExtractor:
    """Accumulates declarations from source units into name-keyed registries."""

    def __init__(self, settings: Optional[Settings] = None, stats: Optional[IngestStats] = None):
        self.settings = settings or get_settings()
        self.stats = stats if stats is not None else IngestStats()
        self.component_factory = self.settings.get('sdk.component_factory', 'createComponent')
        self.system_factory = self.settings.get('sdk.system_factory', 'createSystem')
        self.system_suffix = self.settings.get('sdk.system_suffix', 'System')
        self.result = ExtractionResult()
        self._parsers = {}

    # Parsing helpers

    def _parser_for(self, path: str):
        language = 'tsx' if path.endswith('.tsx') else 'typescript'
        if language not in self._parsers:
            self._parsers[language] = get_parser(language)
        return self._parsers[language]

    def extract_all(self, units: Iterable[SourceUnit]) -> ExtractionResult:
        for unit in units:
            self.extract(unit)
        return self.result

    def extract(self, unit: SourceUnit) -> bool:
        """Extract declarations from one unit. Returns False if the file was skipped."""
        source = unit.content.encode('utf-8')
        tree = self._parser_for(unit.relative_path).parse(source)

        if tree.root_node.has_error:
            logger.warning(f"Syntax errors in {unit.relative_path}, skipping file")
            self.stats.parse_failures += 1
            return False

        _FileVisitor(self, unit, source).visit(tree.root_node)
        return True

    # Registry writes

    def _register(self, registry: Dict[str, object], kind: str, name: str, record) -> None:
        existing = registry.get(name)
        if existing is not None and existing.file_path != record.file_path:
            note = f"{kind} {name}: {existing.file_path} replaced by {record.file_path}"
            logger.warning(f"Name collision, {note}")
            self.stats.name_collisions.append(note)
        registry[name] = record


class _FileVisitor:
    """Walks one syntax tree and feeds matching declarations to the extractor."""

    def __init__(self, extractor: DeclarationExtractor, unit: SourceUnit, source: bytes):
        self.extractor = extractor
        self.unit = unit
        self.source = source

    def text(self, node) -> str:
        return self.source[node.start_byte:node.end_byte].decode('utf-8', errors='replace')

    def visit(self, root) -> None:
        stack = [root]
        while stack:
            node = stack.pop()
            node_type = node.type

            if node_type in _VARIABLE_DECLARATIONS:
                self.visit_variable_declaration(node)
            elif node_type in _CLASS_DECLARATIONS:
                self.visit_class(node)
            elif node_type == 'interface_declaration':
                self.visit_interface(node)
            elif node_type == 'type_alias_declaration':
                self.visit_named_type(node, TypeKind.TYPE)
            elif node_type == 'enum_declaration':
                self.visit_named_type(node, TypeKind.ENUM)
            elif node_type == 'call_expression':
                self.visit_call(node)

            # Reversed so siblings are visited in source order
            stack.extend(reversed(node.children))

    # Shared helpers

    def anchor(self, node):
        """The node a doc comment attaches to: the export statement if exported."""
        parent = node.parent
        if parent is not None and parent.type == 'export_statement':
            return parent
        return node

    def doc_comment(self, node) -> DocBlock:
        prev = self.anchor(node).prev_named_sibling
        if prev is not None and prev.type == 'comment':
            text = self.text(prev)
            if is_doc_comment(text):
                return parse_doc_comment(text)
        return DocBlock()

    def arguments(self, call) -> List:
        args = call.child_by_field_name('arguments')
        if args is None:
            return []
        return [child for child in args.named_children if child.type != 'comment']

    def callee(self, call) -> str:
        function = call.child_by_field_name('function')
        return self.text(function) if function is not None else ''

    def pairs(self, obj) -> Iterator:
        for child in obj.named_children:
            if child.type == 'pair':
                yield child

    def key_text(self, pair) -> str:
        return strip_quotes(self.text(pair.child_by_field_name('key')))

    def annotation(self, node, field_name: str = 'type') -> Optional[str]:
        annotation = node.child_by_field_name(field_name)
        if annotation is None:
            return None
        return self.text(annotation).lstrip(':').strip() or None

    # Components

    def visit_variable_declaration(self, node) -> None:
        declarator = next((c for c in node.named_children if c.type == 'variable_declarator'), None)
        if declarator is None:
            return

        value = declarator.child_by_field_name('value')
        if value is None or value.type != 'call_expression':
            return
        if self.callee(value) != self.extractor.component_factory:
            return

        args = self.arguments(value)
        if len(args) < 2:
            return

        name = strip_quotes(self.text(args[0])).strip()
        if not name:
            return

        doc = self.doc_comment(node)
        inline_description = strip_quotes(self.text(args[2])) if len(args) > 2 else None
        package = self.unit.package

        record = ComponentRecord(
            name=name,
            package=package,
            file_path=self.unit.relative_path,
            description=resolve_description(inline_description, doc.summary),
            remarks=doc.remarks,
            category=doc.category,
            jsdoc_examples=list(doc.examples),
            fields=self.schema_fields(args[1]),
            source_code=self.text(declarator),
            import_path=f"import {{ {name} }} from '{package}';",
            keywords=generate_keywords(name, doc),
        )
        self.extractor._register(self.extractor.result.components, 'component', name, record)

        if doc.requires:
            self.extractor.result.declared_requires[name] = list(doc.requires)
        else:
            self.extractor.result.declared_requires.pop(name, None)

    def schema_fields(self, schema) -> List[ComponentField]:
        fields: List[ComponentField] = []
        if schema.type != 'object':
            return fields

        for pair in self.pairs(schema):
            value = pair.child_by_field_name('value')
            if value is None or value.type != 'object':
                continue

            field_type = 'unknown'
            default = None
            for prop in self.pairs(value):
                prop_name = self.key_text(prop)
                prop_value = self.text(prop.child_by_field_name('value'))
                if prop_name == 'type':
                    field_type = prop_value.replace('Types.', '', 1)
                elif prop_name == 'default':
                    default = prop_value

            description = self.doc_comment(pair).summary
            fields.append(ComponentField(
                name=self.key_text(pair),
                type=field_type,
                default=default,
                description=description or None,
            ))

        return fields

    # Systems

    def visit_class(self, node) -> None:
        name_node = node.child_by_field_name('name')
        if name_node is None:
            return
        name = self.text(name_node)
        if not name.endswith(self.extractor.system_suffix):
            return

        doc = self.doc_comment(node)
        methods: List[SystemMethod] = []
        properties: List[SystemProperty] = []

        body = node.child_by_field_name('body')
        for member in (body.named_children if body is not None else []):
            if member.type in _METHOD_NODES:
                methods.append(self.method_summary(member))
            elif member.type in _PROPERTY_NODES:
                prop_name = member.child_by_field_name('name')
                if prop_name is None:
                    continue
                properties.append(SystemProperty(
                    name=self.text(prop_name),
                    type=self.annotation(member) or 'unknown',
                    description=self.member_doc(member).summary,
                ))

        package = self.unit.package
        record = SystemRecord(
            name=name,
            package=package,
            file_path=self.unit.relative_path,
            description=resolve_description(doc.summary),
            remarks=doc.remarks,
            category=doc.category,
            methods=methods,
            properties=properties,
            source_code=self.text(self.anchor(node))[:SYSTEM_SOURCE_LIMIT],
            queries_components=self.queried_components(node),
            import_path=f"import {{ {name} }} from '{package}';",
            keywords=generate_keywords(name, doc),
        )
        self.extractor._register(self.extractor.result.systems, 'system', name, record)

    def member_doc(self, member) -> DocBlock:
        prev = member.prev_named_sibling
        if prev is not None and prev.type == 'comment':
            text = self.text(prev)
            if is_doc_comment(text):
                return parse_doc_comment(text)
        return DocBlock()

    def method_summary(self, member) -> SystemMethod:
        body = member.child_by_field_name('body')
        if body is not None:
            signature = self.source[member.start_byte:body.start_byte].decode('utf-8', errors='replace')
        else:
            signature = self.text(member).rstrip(';')

        return SystemMethod(
            name=self.text(member.child_by_field_name('name')),
            signature=signature.strip(),
            description=self.member_doc(member).summary,
            return_type=self.annotation(member, 'return_type'),
        )

    def queried_components(self, class_node) -> List[str]:
        components: List[str] = []

        for heritage in class_node.named_children:
            if heritage.type != 'class_heritage':
                continue
            for clause in heritage.named_children:
                if clause.type != 'extends_clause':
                    continue
                for expr in clause.named_children:
                    if expr.type != 'call_expression' or self.callee(expr) != self.extractor.system_factory:
                        continue
                    args = self.arguments(expr)
                    if not args or args[0].type != 'object':
                        continue
                    for query in self.pairs(args[0]):
                        query_def = query.child_by_field_name('value')
                        if query_def is None or query_def.type != 'object':
                            continue
                        for prop in self.pairs(query_def):
                            if self.key_text(prop) != 'required':
                                continue
                            required = prop.child_by_field_name('value')
                            if required is None or required.type != 'array':
                                continue
                            for element in required.named_children:
                                if element.type == 'comment':
                                    continue
                                element_name = self.text(element)
                                if _CAPITALIZED.match(element_name):
                                    components.append(element_name)

        return list(dict.fromkeys(components))

    # Types

    def visit_interface(self, node) -> None:
        name_node = node.child_by_field_name('name')
        if name_node is None:
            return

        fields: List[TypeField] = []
        body = node.child_by_field_name('body')
        for member in (body.named_children if body is not None else []):
            if member.type != 'property_signature':
                continue
            member_name = member.child_by_field_name('name')
            if member_name is None:
                continue
            fields.append(TypeField(
                name=self.text(member_name),
                type=self.annotation(member) or 'unknown',
                optional=any(child.type == '?' for child in member.children),
            ))

        self.register_type(node, name_node, TypeKind.INTERFACE, fields)

    def visit_named_type(self, node, kind: TypeKind) -> None:
        name_node = node.child_by_field_name('name')
        if name_node is not None:
            self.register_type(node, name_node, kind, None)

    def register_type(self, node, name_node, kind: TypeKind, fields: Optional[List[TypeField]]) -> None:
        name = self.text(name_node)
        record = TypeRecord(
            name=name,
            package=self.unit.package,
            file_path=self.unit.relative_path,
            kind=kind,
            definition=self.text(self.anchor(node)),
            fields=fields,
        )
        self.extractor._register(self.extractor.result.types, 'type', name, record)

    # Entity lookups

    def visit_call(self, node) -> None:
        text = self.text(node)
        if 'hasComponent' not in text and 'getComponent' not in text:
            return
        match = _ENTITY_LOOKUP.search(text)
        if match:
            lookups = self.extractor.result.entity_lookups.setdefault(self.unit.relative_path, [])
            if match.group(1) not in lookups:
                lookups.append(match.group(1))
