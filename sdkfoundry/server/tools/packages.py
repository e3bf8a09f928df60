"""Package export listings and per-class API documentation."""

from typing import Any, Mapping, Optional

from .context import ToolContext

PACKAGE_DESCRIPTIONS = {
    '@iwsdk/core': 'main runtime',
    '@iwsdk/xr-input': 'input handling',
    '@iwsdk/glxf': 'scene format',
    '@iwsdk/locomotor': 'movement physics',
}

EXPORT_SECTIONS = (
    ('classes', 'Classes'),
    ('functions', 'Functions'),
    ('components', 'Components'),
    ('systems', 'Systems'),
    ('types', 'Types'),
)


def _known_packages(ctx: ToolContext, describe: bool) -> str:
    names = list(PACKAGE_DESCRIPTIONS)
    names.extend(p for p in ctx.cache.package_exports() if p not in PACKAGE_DESCRIPTIONS)
    if describe:
        return "\n".join(
            f"- {name} ({PACKAGE_DESCRIPTIONS[name]})" if name in PACKAGE_DESCRIPTIONS else f"- {name}"
            for name in names
        )
    return "\n".join(f"- {name}" for name in names)


def lookup_package_exports(ctx: ToolContext, package_name: str) -> str:
    exports = ctx.cache.package_exports(package_name)

    if exports is None:
        return f'Package "{package_name}" not found.\n\nAvailable packages:\n{_known_packages(ctx, True)}'

    result = f"# {package_name}\n\n"
    for key, heading in EXPORT_SECTIONS:
        names = exports.get(key, ())
        if names:
            result += f"## {heading}\n\n"
            for name in names:
                result += f"- **{name}**\n"
            result += "\n"

    result += "\n---\n\n"
    result += "Use `get_api_documentation` to get detailed information about specific classes.\n"
    result += "Use `get_component_schema` to get field definitions for components.\n"
    return result.strip()


def _find_declaration(ctx: ToolContext, package_name: str, class_name: str) -> Optional[Mapping[str, Any]]:
    for record in (ctx.cache.get_system(class_name), ctx.cache.get_component(class_name)):
        if record is not None and record['package'] == package_name:
            return record
    return None


def get_api_documentation(ctx: ToolContext, package_name: str, class_name: str,
                          method_name: Optional[str] = None) -> str:
    doc = _find_declaration(ctx, package_name, class_name)

    if doc is None:
        return (
            f"No documentation found for {class_name} in {package_name}.\n\n"
            f"Available packages:\n{_known_packages(ctx, False)}\n\n"
            "Try using the lookup_package_exports tool to see what's available in each package."
        )

    result = f"# {doc['name']}\n\n**Package:** {doc['package']}\n\n{doc.get('description', '')}\n\n"
    methods = {m['name']: m for m in doc.get('methods', ())}

    if method_name and method_name in methods:
        method = methods[method_name]
        result += f"## Method: {method_name}\n\n"
        result += f"```typescript\n{method['signature']}\n```\n\n"
        result += f"{method.get('description', '')}\n\n"
        if method.get('returnType'):
            result += f"### Returns\n\n`{method['returnType']}`\n\n"
        return result.strip()

    properties = doc.get('properties', ())
    if properties:
        result += "## Properties\n\n"
        for prop in properties:
            result += f"### {prop['name']}\n\n"
            result += f"**Type:** `{prop.get('type', 'unknown')}`\n\n"
            result += f"{prop.get('description', '')}\n\n"

    fields = doc.get('fields', ())
    if fields:
        result += "## Fields\n\n"
        for field in fields:
            result += f"### {field['name']}\n\n"
            result += f"**Type:** `{field.get('type', 'unknown')}`\n\n"
            if field.get('description'):
                result += f"{field['description']}\n\n"

    if methods:
        result += "## Methods\n\n"
        for name, method in methods.items():
            result += f"### {name}\n\n"
            result += f"```typescript\n{method['signature']}\n```\n\n"
            result += f"{method.get('description', '')}\n\n"

    examples = doc.get('jsdocExamples', ())
    if examples:
        result += "## Examples\n\n"
        for example in examples:
            result += f"```typescript\n{example}\n```\n\n"

    return result.strip()
