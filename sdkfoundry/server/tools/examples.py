"""Example search, similarity ranking and feature implementation patterns."""

from typing import Any, List, Mapping, Optional, Tuple

from .context import ToolContext

SIMILAR_RESULTS = 3
PATTERN_EXAMPLES_SHOWN = 5

SEARCH_SUGGESTIONS = ('grabbing', 'locomotion', 'spatial-ui', 'interactable', 'physics', 'component', 'system', 'input')


def search_code_examples(ctx: ToolContext, feature: str, category: Optional[str] = None) -> str:
    examples = ctx.cache.search_examples(feature, category)

    if not examples:
        scope = f' in category "{category}"' if category else ''
        return (
            f'No code examples found for "{feature}"{scope}.\n\nTry searching for:\n'
            + "\n".join(f"- {s}" for s in SEARCH_SUGGESTIONS)
        )

    result = f'# Code Examples for "{feature}"\n\n'
    result += f"Found {len(examples)} example{'s' if len(examples) > 1 else ''}:\n\n"
    for example in examples:
        result += f"## {example['title']}\n\n"
        result += f"{example['description']}\n\n"
        result += f"**Category:** {example['category']}\n"
        result += f"**Tags:** {', '.join(example.get('tags', ()))}\n\n"
        result += f"```typescript\n{example['code']}\n```\n\n"
        result += "---\n\n"

    return result.strip()


def score_example(example: Mapping[str, Any], description: str) -> int:
    """Relevance of one example to a free-text description."""
    needle = description.lower()
    score = 0
    if needle in example['title'].lower():
        score += 10
    if needle in example['description'].lower():
        score += 5
    for tag in example.get('tags', ()):
        if tag.lower() in needle:
            score += 3
    if needle in example['code'].lower():
        score += 2
    return score


def find_similar_code(ctx: ToolContext, description: str) -> str:
    scored: List[Tuple[Mapping[str, Any], int]] = [
        (example, score_example(example, description)) for example in ctx.cache.examples
    ]
    top = sorted((item for item in scored if item[1] > 0), key=lambda item: item[1], reverse=True)[:SIMILAR_RESULTS]

    if not top:
        return (
            f'No similar code examples found for "{description}".\n\n'
            "Try using `search_code_examples` with specific keywords or "
            "`find_implementation_pattern` for common features."
        )

    result = f'# Similar Code Examples for "{description}"\n\n'
    result += f"Found {len(top)} relevant example{'s' if len(top) > 1 else ''}:\n\n"
    for i, (example, score) in enumerate(top, 1):
        result += f"## {i}. {example['title']}\n\n"
        result += f"**Relevance**: {score} points\n"
        result += f"**Description**: {example['description']}\n"
        result += f"**Category**: {example['category']}\n"
        result += f"**Tags**: {', '.join(example.get('tags', ()))}\n\n"
        result += f"```typescript\n{example['code']}\n```\n\n"
        result += "---\n\n"

    return result


def find_implementation_pattern(ctx: ToolContext, feature: str) -> str:
    patterns = ctx.content.implementation_patterns()
    mapping = patterns.get(feature.lower())

    if mapping is None:
        return (
            f'Implementation pattern for "{feature}" not found.\n\n**Available patterns:**\n'
            + "\n".join(f"- {name}" for name in patterns)
            + "\n\n**Recommended approach:**\n"
            "1. Use `get_component_schema` to understand component fields\n"
            "2. Use `get_system_info` to understand system behavior\n"
            "3. Use `search_code_examples` to find relevant examples\n"
            "4. Use `compose_feature` to generate complete implementations"
        )

    components = mapping.get('components') or []
    systems = mapping.get('systems') or []
    query = mapping['query']

    response = f"# {feature[:1].upper() + feature[1:]} Implementation Pattern\n\n"

    if components:
        response += "## Components\n\n"
        response += f"Use these components for {feature}:\n\n"
        for name in components:
            response += f'- **{name}** - Use `get_component_schema("{name}")` for details\n'
        response += "\n"

    if systems:
        response += "## Systems\n\n"
        response += f"These systems handle {feature} logic:\n\n"
        for name in systems:
            response += f'- **{name}** - Use `get_system_info("{name}")` for details\n'
        response += "\n"

    response += "## Code Examples\n\n"
    examples = ctx.cache.search_examples(query, 'any')
    if examples:
        response += f'Found {len(examples)} examples. Use `search_code_examples("{query}")` to see detailed code.\n\n'
        response += "**Example files:**\n"
        for example in examples[:PATTERN_EXAMPLES_SHOWN]:
            response += f"- {example['title']}\n"
    else:
        response += f'No code examples found. Try `search_code_examples("{query}")`\n'

    response += "\n## Quick Start\n\n"
    response += f'1. Get component details: `get_component_schema("{components[0] if components else "ComponentName"}")`\n'
    if systems:
        response += f'2. Understand the system: `get_system_info("{systems[0]}")`\n'
    response += f'3. Find examples: `search_code_examples("{query}")`\n'
    response += f'4. Generate code: `compose_feature("{feature}")`\n'

    return response
