import json

from .context import ToolContext

KNOWN_NAMES_SHOWN = 15


def get_component_schema(ctx: ToolContext, component_name: str) -> str:
    component = ctx.cache.get_component(component_name)

    if component is None:
        names = [c['name'] for c in ctx.cache.all_components()]
        text = f'Component "{component_name}" not found.\n\nKnown components:\n'
        text += "\n".join(f"- {n}" for n in names[:KNOWN_NAMES_SHOWN])
        if len(names) > KNOWN_NAMES_SHOWN:
            text += f"\n\n... and {len(names) - KNOWN_NAMES_SHOWN} more."
        text += "\n\nUse the search tools to find the component you need."
        return text

    name = component['name']
    result = f"# {name} Component\n\n"
    result += f"**Package:** `{component['package']}`\n"
    result += f"**Category:** {component.get('category') or 'General'}\n\n"
    result += f"## Import\n\n```typescript\n{component.get('importPath', '')}\n```\n\n"
    result += f"## Description\n\n{component.get('description', '')}\n\n"

    if component.get('remarks'):
        result += f"## Remarks\n\n{component['remarks']}\n\n"

    requires = component.get('requires', ())
    if requires:
        result += "## Requirements\n\n"
        result += "This component requires the following components to be added first:\n\n"
        for req in requires:
            result += f"- **{req}** (must be added before {name})\n"
        result += "\n"

    used_by = component.get('usedBySystems', ())
    if used_by:
        result += "## Used By Systems\n\n"
        result += "This component is queried by:\n"
        for system in used_by:
            result += f"- {system}\n"
        result += "\n"

    result += "## Fields\n\n"
    for field in component.get('fields', ()):
        result += f"### {field['name']}\n\n"
        result += f"**Type:** `{field.get('type', 'unknown')}`\n"
        if 'default' in field:
            result += f"**Default:** `{json.dumps(field['default'])}`\n"
        if field.get('description'):
            result += f"\n{field['description']}\n"
        result += "\n"

    examples = component.get('jsdocExamples', ())
    if examples:
        result += "## Example Usage\n\n"
        for example in examples:
            result += f"{example}\n\n"

    optional_with = component.get('optionalWith', ())
    if optional_with:
        result += "## Often Used With\n\n"
        result += "This component is frequently combined with:\n"
        for other in optional_with:
            result += f"- {other}\n"
        result += "\n"

    return result.strip()
