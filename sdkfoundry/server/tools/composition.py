from typing import Any, Dict, List, Optional

from .context import ToolContext

GENERAL_APPROACH = """I couldn't find a specific composition for this feature. Here's how to break it down:

## General Approach

1. **Identify Components**: What data does this feature need?
   - Use `search_code_examples` to find similar features
   - Use `get_component_schema` to see available components

2. **Identify Systems**: What behavior is needed?
   - Use `find_implementation_pattern` for common patterns
   - Use `lookup_package_exports` to see available systems

3. **Find Examples**: Get working code to adapt
   - Use `search_code_examples` with relevant keywords
   - Use `get_api_documentation` for exact APIs

## Recommended Queries

Try these MCP tools:
- `search_code_examples` with keywords from your feature
- `find_implementation_pattern` for similar functionality
- `get_best_practices` for "ecs-patterns"

Common feature types:
- **Interactive objects**: Require Interactable component
- **Movement**: Use LocomotionSystem
- **Physics**: Use PhysicsSystem + PhysicsBody + PhysicsShape
- **UI**: Use PanelUISystem + UIKitDocument
- **Manipulation**: Use grabbing components"""


def match_composition(compositions: List[Dict[str, Any]], description: str) -> Optional[Dict[str, Any]]:
    """First composition with a keyword contained in the description."""
    lower = description.lower()
    for composition in compositions:
        if any(keyword in lower for keyword in composition.get('keywords', [])):
            return composition
    return None


def compose_feature(ctx: ToolContext, feature_description: str) -> str:
    composition = match_composition(ctx.content.feature_compositions(), feature_description)

    if composition is None:
        return f"# Feature Composition: {feature_description}\n\n{GENERAL_APPROACH}"

    result = f"# Feature Composition: {feature_description}\n\n"

    result += "## Required Components\n\n"
    for component in composition.get('components', []):
        result += f"- **{component}**\n"
    result += "\n"

    result += "## Required Systems\n\n"
    for system in composition.get('systems', []):
        result += f"- **{system}**\n"
    result += "\n"

    result += "## Key APIs Used\n\n"
    for api in composition.get('apis', []):
        result += f"- **{api['class']}.{api['method']}**\n"
    result += "\n"

    result += "## Implementation Steps\n\n"
    for i, step in enumerate(composition.get('steps', []), 1):
        result += f"{i}. {step}\n"
    result += "\n"

    result += f"## Complete Working Code\n\n```typescript\n{composition['example']}\n```\n"
    return result
