"""Tools answering from the static reference partitions and fetched docs."""

from ..cache_loader import CacheNotFoundError
from .context import ToolContext

MISTAKES_APPENDED = 5
TROUBLESHOOTING_TOPICS_SHOWN = 10

AVAILABLE_CONCEPTS = """**Available concepts:**
- iwsdk, overview, introduction
- ecs, entities, components, systems, queries
- locomotion, grabbing, physics, audio
- scene-understanding, spatial-ui, input"""


def get_best_practices(ctx: ToolContext, topic: str) -> str:
    try:
        practices = ctx.cache.reference('best-practices')
    except CacheNotFoundError as e:
        return f"Error loading best practices: {e}"

    guidance = practices.get(topic.lower())
    if guidance is None:
        return (
            f'Best practices for "{topic}" not found.\n\n**Available topics:**\n'
            f"{', '.join(practices)}\n\n**More resources:**\n"
            "- `get_common_mistakes()` - See common mistakes and how to fix them\n"
            "- `get_validation_rules()` - See validation rules\n"
            f'- `search_code_examples("{topic}")` - Find examples'
        )

    mistakes_text = "\n\n---\n\n## Common Mistakes\n\n"
    for mistake in ctx.cache.common_mistakes()[:MISTAKES_APPENDED]:
        mistakes_text += f"### {mistake['title']}\n\n"
        mistakes_text += f"{mistake['description']}\n\n"
        if mistake.get('wrongCode'):
            mistakes_text += f"**Wrong:**\n```typescript\n{mistake['wrongCode']}\n```\n\n"
        if mistake.get('correctCode'):
            mistakes_text += f"**Correct:**\n```typescript\n{mistake['correctCode']}\n```\n\n"

    return f"{guidance['content']}{mistakes_text}"


def explain_concept(ctx: ToolContext, concept: str) -> str:
    overview = ctx.cache.overview()
    if overview is None:
        return (
            f"Error loading documentation: {ctx.cache.cache_dir / 'docs' / 'overview.md'} not found\n\n"
            "Please run: sdkfoundry-setup /path/to/immersive-web-sdk"
        )

    concepts = ctx.content.concepts()
    key = concept.lower()

    if key in concepts.get('overview_aliases', []):
        return overview

    guide = concepts.get('guides', {}).get(key)
    if guide:
        return f"# {concept}\n\n{guide}\n\n## Overview\n\n{overview}"

    return (
        f'Concept "{concept}" not found.\n\n{AVAILABLE_CONCEPTS}\n\n'
        "**For detailed information:**\n"
        "- Use `get_component_schema` for component details\n"
        "- Use `get_system_info` for system details\n"
        "- Use `search_code_examples` for code examples\n\n"
        f"## IWSDK Overview\n\n{overview}"
    )


def get_setup_guide(ctx: ToolContext, project_type: str) -> str:
    try:
        guides = ctx.cache.reference('setup-guides')
    except CacheNotFoundError as e:
        return f"Error loading setup guide: {e}"

    guide = guides.get(project_type.lower())
    if guide is not None:
        return guide['content']

    return (
        f'Setup guide for "{project_type}" not found.\n\n'
        f"**Available guides:**\n{', '.join(guides)}\n\n"
        "**For more help:**\n"
        '- `search_code_examples("world.create")` - See setup examples\n'
        '- `explain_concept("iwsdk")` - Get IWSDK overview\n'
        f'- `scaffold_project("{project_type}")` - Generate complete project structure'
    )


def explain_asset_pipeline(ctx: ToolContext, asset_type: str, operation: str) -> str:
    try:
        guides = ctx.cache.reference('asset-guides')
    except CacheNotFoundError as e:
        return f"Error loading asset guide: {e}"

    asset_key = asset_type.lower()
    operation_key = operation.lower()
    operations = guides.get(asset_key)

    if operations is not None and operation_key in operations:
        return operations[operation_key]['content']

    if operations is not None:
        available = "\n".join(f"- {asset_key} {op}" for op in operations)
    else:
        available = "\n".join(f"- {kind} (operations: {', '.join(ops)})" for kind, ops in guides.items())

    return (
        f'Asset pipeline guide for "{asset_type}" - "{operation}" not available.\n\n'
        f"**Available:**\n{available}\n\n"
        "**For more help:**\n"
        '- Use `search_code_examples("gltf")` for working examples\n'
        '- Use `search_code_examples("loader")` for loading patterns\n'
        "- Check Three.js documentation: https://threejs.org/docs/#examples/en/loaders/GLTFLoader"
    )


def troubleshoot_error(ctx: ToolContext, error_message: str) -> str:
    try:
        solutions = ctx.cache.reference('troubleshooting')['solutions']
    except CacheNotFoundError as e:
        return f"Error loading troubleshooting guide: {e}"

    lower = error_message.lower()
    matched = next(
        (s for s in solutions if any(keyword.lower() in lower for keyword in s['keywords'])),
        None,
    )

    if matched is not None:
        response = f"# {matched['title']}\n\n"
        response += f"## Problem\n{matched['problem']}\n\n"
        response += "## Solutions\n\n"
        for i, solution in enumerate(matched['solutions'], 1):
            response += f"### {i}. {solution}\n\n"
        if matched.get('code'):
            response += f"\n## Code Example\n\n```typescript\n{matched['code']}\n```\n"
        return response

    topics = "\n".join(f"- {s['title']}" for s in solutions[:TROUBLESHOOTING_TOPICS_SHOWN])
    return (
        f'No specific solution found for: "{error_message}"\n\n'
        "**General troubleshooting steps:**\n"
        "1. Check browser console for detailed error messages\n"
        "2. Ensure HTTPS is enabled (required for WebXR)\n"
        "3. Verify component dependencies are met\n"
        "4. Check that systems are properly registered\n"
        "5. Review component initialization order\n\n"
        "**Available resources:**\n"
        "- `get_common_mistakes()` - See common IWSDK mistakes\n"
        "- `get_validation_rules()` - Understand component requirements\n"
        '- `search_code_examples("error handling")` - Find error handling patterns\n\n'
        f"**Available troubleshooting topics:**\n{topics}"
    )
