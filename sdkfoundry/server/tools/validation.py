"""Code validation, validation rules, ordering constraints and common mistakes."""

import re
from typing import Callable, List, Optional, Tuple

from .context import ToolContext

_REQUIRES_RULE = re.compile(r'component-(\w+)-requires')

# (applies to code, issue or None, suggestion)
CODE_CHECKS: Tuple[Tuple[Callable[[str], bool], Optional[str], str], ...] = (
    (
        lambda code: 'world.createEntity()' in code and '.object3D' in code,
        'Using createEntity() but accessing object3D - use createTransformEntity() instead',
        'Change world.createEntity() to world.createTransformEntity()',
    ),
    (
        lambda code: 'addComponent(Interactable)' in code and not any(
            marker in code for marker in ('onClick', 'onHover', 'OneHandGrabbable', 'TwoHandsGrabbable')
        ),
        None,
        'Interactable component added but no event handlers or grabbing. '
        'Add onClick/onHoverEnter handlers or grabbing components.',
    ),
    (
        lambda code: 'PhysicsBody' in code and 'PhysicsShape' not in code,
        'PhysicsBody without PhysicsShape - both are required for physics',
        'Add PhysicsShape component with appropriate shape (box, sphere, capsule)',
    ),
    (
        lambda code: 'PhysicsSystem' in code and 'registerSystem' not in code,
        'Using physics components but PhysicsSystem not registered',
        'Add: world.registerSystem(PhysicsSystem);',
    ),
    (
        lambda code: 'UIKitDocument' in code and 'PanelUISystem' not in code,
        'Using UIKitDocument but PanelUISystem not registered',
        'Add: world.registerSystem(PanelUISystem);',
    ),
    (
        lambda code: 'LocomotionSystem' in code and 'enableLocomotion' not in code
        and 'registerSystem(LocomotionSystem' not in code,
        None,
        'Consider using features.enableLocomotion: true in World.create() for simpler setup',
    ),
    (
        lambda code: 'new THREE.Mesh' in code and 'object3D!.add' not in code,
        'Created THREE.Mesh but not added to entity or scene',
        'Add mesh to entity: entity.object3D!.add(mesh);',
    ),
)


def _numbered(items: List[str]) -> str:
    return "".join(f"{i}. {item}\n" for i, item in enumerate(items, 1))


def validate_code(ctx: ToolContext, code: str) -> str:
    issues: List[str] = []
    suggestions: List[str] = []

    for applies, issue, suggestion in CODE_CHECKS:
        if applies(code):
            if issue:
                issues.append(issue)
            suggestions.append(suggestion)

    # Requirement rules derived from the ingested components
    for rule in ctx.cache.validation_rules():
        match = _REQUIRES_RULE.match(rule['id'])
        if not match or match.group(1) not in code:
            continue
        for required in ctx.cache.component_requirements(match.group(1)):
            if required in code:
                continue
            issues.append(f"{rule['message']} - Missing {required}")

    result = "# Code Validation Results\n\n"
    if not issues and not suggestions:
        result += "**No issues found!** The code looks good.\n\n"
        result += "The code follows IWSDK best practices and should work correctly.\n"
        return result

    if issues:
        result += "## Issues Found\n\n" + _numbered(issues) + "\n"
    if suggestions:
        result += "## Suggestions\n\n" + _numbered(suggestions) + "\n"
    return result


def get_validation_rules(ctx: ToolContext, component_or_system: Optional[str] = None) -> str:
    rules = ctx.cache.validation_rules(component_or_system)

    if not rules:
        if component_or_system:
            return f'No validation rules found for "{component_or_system}".'
        return "No validation rules available."

    if component_or_system:
        result = f"# Validation Rules for {component_or_system}\n\n"
    else:
        result = "# All Validation Rules\n\n"

    result += f"Found {len(rules)} validation rule(s):\n\n"
    for rule in rules:
        result += f"## {rule['id']}\n\n"
        result += f"**Severity:** {rule['severity']}\n\n"
        result += f"**Description:** {rule['description']}\n\n"
        result += f"**Check:** {rule['check']}\n\n"
        result += f"**Message:** {rule['message']}\n\n"
        result += "---\n\n"

    return result.strip()


def check_component_order(ctx: ToolContext, component_name: str) -> str:
    constraints = ctx.cache.ordering_constraints(component_name)

    if not constraints:
        return (
            f'No ordering constraints found for "{component_name}".\n\n'
            "This component has no specific ordering requirements."
        )

    must_add_before = [c for c in constraints if c['before'] == component_name]
    must_add_after = [c for c in constraints if c['after'] == component_name]

    result = f"# Component Ordering for {component_name}\n\n"

    if must_add_before:
        result += f"## Must Add These Components BEFORE {component_name}:\n\n"
        for constraint in must_add_before:
            result += f"- **{constraint['after']}**\n"
            result += f"  - Reason: {constraint['reason']}\n\n"

    if must_add_after:
        result += f"## These Components Must Be Added AFTER {component_name}:\n\n"
        for constraint in must_add_after:
            result += f"- **{constraint['before']}**\n"
            result += f"  - Reason: {constraint['reason']}\n\n"

    result += "## Correct Order Example\n\n```typescript\n"
    for constraint in must_add_before:
        result += f"entity.addComponent({constraint['after']});\n"
    result += f"entity.addComponent({component_name});\n"
    for constraint in must_add_after:
        result += f"entity.addComponent({constraint['before']});\n"
    result += "```\n"

    return result.strip()


def get_common_mistakes(ctx: ToolContext, query: Optional[str] = None) -> str:
    mistakes = ctx.cache.search_common_mistakes(query) if query else ctx.cache.common_mistakes()

    if not mistakes:
        if query:
            return f'No common mistakes found for "{query}".'
        return "No troubleshooting information available."

    result = f"# Troubleshooting: {query}\n\n" if query else "# Common Mistakes Guide\n\n"
    result += f"Found {len(mistakes)} common mistake(s):\n\n"

    for mistake in mistakes:
        result += f"## {mistake['title']}\n\n"
        result += f"**Category:** {mistake['category']}\n\n"
        result += f"{mistake['description']}\n\n"
        result += f"### Wrong\n\n```typescript\n{mistake['wrongCode']}\n```\n\n"
        result += f"### Correct\n\n```typescript\n{mistake['correctCode']}\n```\n\n"
        result += "---\n\n"

    return result.strip()
