import json
from typing import Any, Dict, List, Optional

from .context import ToolContext


def get_system_info(ctx: ToolContext, system_name: str) -> str:
    system = ctx.cache.get_system(system_name)

    if system is None:
        names = [s['name'] for s in ctx.cache.all_systems()]
        return f'System "{system_name}" not found.\n\nKnown systems:\n' + "\n".join(f"- {n}" for n in names)

    result = f"# {system['name']}\n\n"
    result += f"**Package:** `{system['package']}`\n"
    result += f"**Category:** {system.get('category') or 'General'}\n\n"
    result += f"## Import\n\n```typescript\n{system.get('importPath', '')}\n```\n\n"
    result += f"## Description\n\n{system.get('description', '')}\n\n"

    if system.get('remarks'):
        result += f"## Remarks\n\n{system['remarks']}\n\n"

    queried = system.get('queriesComponents', ())
    if queried:
        result += "## Queries Components\n\n"
        result += "This system queries entities with the following components:\n\n"
        for name in queried:
            result += f"- {name}\n"
        result += "\n"

    methods = system.get('methods', ())
    if methods:
        result += "## Methods\n\n"
        for method in methods:
            result += f"### {method['name']}\n\n"
            result += f"```typescript\n{method['signature']}\n```\n\n"
            if method.get('description'):
                result += f"{method['description']}\n\n"

    properties = system.get('properties', ())
    if properties:
        result += "## Properties\n\n"
        for prop in properties:
            result += f"### {prop['name']}\n\n"
            result += f"**Type:** `{prop.get('type', 'unknown')}`\n\n"
            if prop.get('description'):
                result += f"{prop['description']}\n\n"

    return result.strip()


def default_for_type(field_type: str) -> Any:
    if 'Float' in field_type or 'Int' in field_type or 'Uint' in field_type:
        return 0
    if 'Boolean' in field_type:
        return False
    if 'String' in field_type:
        return ''
    return None


def generate_system_template(
    ctx: ToolContext,
    system_name: str,
    queries: List[Dict[str, Any]],
    config_fields: Optional[List[Dict[str, Any]]] = None,
) -> str:
    """Render a createSystem class skeleton for the given queries and config."""
    result = f"# {system_name} Template\n\n"
    result += "Below is a TypeScript template for your custom ECS system:\n\n"
    result += "```typescript\n"
    result += "import { createSystem, Types } from '@iwsdk/core';\n"

    imports: List[str] = []
    for query in queries:
        for name in list(query.get('required', [])) + list(query.get('excluded') or []):
            if name not in imports:
                imports.append(name)

    if imports:
        result += "// Import your components\n"
        result += f"// import {{ {', '.join(imports)} }} from './components';\n\n"

    result += f"class {system_name} extends createSystem(\n"
    result += "  // Queries\n"
    result += "  {\n"
    for query in queries:
        result += f"    {query['name']}: {{\n"
        result += f"      required: [{', '.join(query.get('required', []))}]"
        if query.get('excluded'):
            result += f",\n      excluded: [{', '.join(query['excluded'])}]"
        result += "\n    },\n"
    result += "  }"

    if config_fields:
        result += ",\n  // Configuration\n"
        result += "  {\n"
        for field in config_fields:
            default = field['default'] if 'default' in field else default_for_type(field['type'])
            result += f"    {field['name']}: {{ type: {field['type']}, default: {json.dumps(default)} }},\n"
        result += "  }"

    result += "\n) {\n"
    result += "  init() {\n"
    result += "    // Called once when system is registered\n"
    result += f"    console.log('{system_name} initialized');\n"
    result += "  }\n\n"

    result += "  update(dt: number) {\n"
    result += "    // Called every frame\n"
    for query in queries:
        result += f"    \n    // Process {query['name']}\n"
        result += f"    for (const entity of this.queries.{query['name']}.entities) {{\n"
        result += f"      // TODO: Implement logic for {query['name']}\n"
        for name in query.get('required', []):
            result += f"      // const value = entity.getValue({name}, 'fieldName');\n"
        result += "    }\n"
    result += "  }\n\n"

    result += "  onEntityAdded(entity: Entity) {\n"
    result += "    // Called when entity matches any query\n"
    result += "  }\n\n"
    result += "  onEntityRemoved(entity: Entity) {\n"
    result += "    // Called when entity stops matching any query\n"
    result += "  }\n\n"
    result += "  destroy() {\n"
    result += "    // Called when system is removed\n"
    result += "  }\n"
    result += "}\n\n"
    result += "// Register with world\n"
    result += f"// world.registerSystem({system_name});\n"
    result += "```\n\n"

    result += "## Usage\n\n"
    result += "1. Define the components used in the queries\n"
    result += "2. Register the components with the world\n"
    result += "3. Register this system with the world\n"
    result += "4. Implement the update logic for each query\n\n"

    result += "## Query Details\n\n"
    for query in queries:
        result += f"- **{query['name']}**: Entities with {', '.join(query.get('required', []))}"
        if query.get('excluded'):
            result += f" (excluding {', '.join(query['excluded'])})"
        result += "\n"

    return result.strip()
