"""Tool catalogue: names, input schemas and the renderers behind them."""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from . import components, composition, examples, guides, packages, scaffolding, systems, validation
from .context import ToolContext

logger = logging.getLogger(__name__)


class ToolError(ValueError):
    """Unknown tool or malformed arguments."""


@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    input_schema: Dict[str, Any]
    handler: Callable[..., str]
    # (argument name in the request, keyword of the handler)
    arguments: Tuple[Tuple[str, str], ...]

    def definition(self) -> Dict[str, Any]:
        return {"name": self.name, "description": self.description, "inputSchema": self.input_schema}

    def required(self) -> List[str]:
        return list(self.input_schema.get("required", []))


def _string(description: str, enum: Optional[List[str]] = None) -> Dict[str, Any]:
    if enum:
        return {"type": "string", "enum": enum, "description": description}
    return {"type": "string", "description": description}


def _object(properties: Dict[str, Any], required: Optional[List[str]] = None) -> Dict[str, Any]:
    schema: Dict[str, Any] = {"type": "object", "properties": properties}
    if required:
        schema["required"] = required
    return schema


TOOLS: Tuple[ToolSpec, ...] = (
    ToolSpec(
        name="get_api_documentation",
        description="Query API documentation for specific IWSDK classes, methods, or components. "
                    "Returns exact API signatures, parameters, return types, and descriptions.",
        input_schema=_object({
            "packageName": _string("The IWSDK package name (e.g., @iwsdk/core, @iwsdk/xr-input)"),
            "className": _string("The class or component name to look up"),
            "methodName": _string("Optional: specific method to query"),
        }, ["packageName", "className"]),
        handler=packages.get_api_documentation,
        arguments=(("packageName", "package_name"), ("className", "class_name"), ("methodName", "method_name")),
    ),
    ToolSpec(
        name="search_code_examples",
        description="Find relevant code examples from official IWSDK documentation. "
                    "Returns annotated code snippets with explanations.",
        input_schema=_object({
            "feature": _string('Feature or keyword to search for (e.g., "grabbing", "locomotion", "spatial UI")'),
            "category": _string("Category of code example", ["component", "system", "interaction", "setup", "any"]),
        }, ["feature"]),
        handler=examples.search_code_examples,
        arguments=(("feature", "feature"), ("category", "category")),
    ),
    ToolSpec(
        name="explain_concept",
        description="Get detailed explanations of IWSDK concepts including ECS architecture, locomotion, "
                    "spatial UI, input handling, and more.",
        input_schema=_object({
            "concept": _string("The concept to explain", [
                "ecs", "entities", "components", "systems", "queries", "locomotion", "slide", "teleport",
                "turn", "spatial-ui", "uikit", "uikitml", "input", "controllers", "hand-tracking", "pointers",
                "grabbing", "physics", "audio", "scene-understanding", "glxf", "three-js-integration",
            ]),
        }, ["concept"]),
        handler=guides.explain_concept,
        arguments=(("concept", "concept"),),
    ),
    ToolSpec(
        name="get_component_schema",
        description="Get the exact schema definition for an IWSDK component including field names, "
                    "types, and default values.",
        input_schema=_object({
            "componentName": _string("Name of the component (e.g., Interactable, Health, PhysicsBody)"),
        }, ["componentName"]),
        handler=components.get_component_schema,
        arguments=(("componentName", "component_name"),),
    ),
    ToolSpec(
        name="generate_system_template",
        description="Generate TypeScript boilerplate code for creating a custom ECS system with proper "
                    "typing and query setup.",
        input_schema=_object({
            "systemName": _string("Name for the system (e.g., HealthRegenSystem)"),
            "queries": {
                "type": "array",
                "items": _object({
                    "name": _string("Query name"),
                    "required": {"type": "array", "items": {"type": "string"}, "description": "Required components"},
                    "excluded": {"type": "array", "items": {"type": "string"}, "description": "Excluded components"},
                }, ["name", "required"]),
                "description": "Entity queries for the system",
            },
            "configFields": {
                "type": "array",
                "items": _object({
                    "name": {"type": "string"},
                    "type": {"type": "string"},
                    "default": {},
                }, ["name", "type"]),
                "description": "Configuration fields for the system",
            },
        }, ["systemName", "queries"]),
        handler=systems.generate_system_template,
        arguments=(("systemName", "system_name"), ("queries", "queries"), ("configFields", "config_fields")),
    ),
    ToolSpec(
        name="get_setup_guide",
        description="Get step-by-step instructions for setting up an IWSDK project including commands "
                    "and configuration.",
        input_schema=_object({
            "projectType": _string("Type of project to set up", ["basic", "vr", "ar", "interactive", "multiplayer"]),
        }, ["projectType"]),
        handler=guides.get_setup_guide,
        arguments=(("projectType", "project_type"),),
    ),
    ToolSpec(
        name="find_implementation_pattern",
        description="Get complete implementation guides for common IWSDK features with example code "
                    "and configuration.",
        input_schema=_object({
            "feature": _string("Feature to implement", [
                "grabbing", "locomotion", "spatial-ui", "audio", "physics", "input-handling",
                "scene-loading", "custom-component", "custom-system",
            ]),
        }, ["feature"]),
        handler=examples.find_implementation_pattern,
        arguments=(("feature", "feature"),),
    ),
    ToolSpec(
        name="lookup_package_exports",
        description="List all exported classes, functions, types, and components from a specific IWSDK package.",
        input_schema=_object({
            "packageName": _string("Package to query", ["@iwsdk/core", "@iwsdk/xr-input", "@iwsdk/glxf", "@iwsdk/locomotor"]),
        }, ["packageName"]),
        handler=packages.lookup_package_exports,
        arguments=(("packageName", "package_name"),),
    ),
    ToolSpec(
        name="get_best_practices",
        description="Get recommended patterns and anti-patterns for IWSDK development including "
                    "performance tips and common mistakes.",
        input_schema=_object({
            "topic": _string("Topic for best practices", [
                "performance", "ecs-patterns", "input-handling", "state-management", "asset-loading", "testing",
            ]),
        }, ["topic"]),
        handler=guides.get_best_practices,
        arguments=(("topic", "topic"),),
    ),
    ToolSpec(
        name="scaffold_project",
        description="Generate a complete IWSDK project structure including package.json, Vite config, "
                    "TypeScript setup, and starter code.",
        input_schema=_object({
            "template": _string("Project template to use", ["minimal", "interactive", "locomotion", "ui-demo", "full-featured"]),
            "projectName": _string("Name for the project"),
        }, ["template", "projectName"]),
        handler=scaffolding.scaffold_project,
        arguments=(("template", "template"), ("projectName", "project_name")),
    ),
    ToolSpec(
        name="explain_asset_pipeline",
        description="Get guidance on GLXF/GLTF asset handling including import, optimization, and loading.",
        input_schema=_object({
            "assetType": _string("Type of asset", ["glxf", "gltf", "texture", "audio"]),
            "operation": _string("Asset operation", ["import", "optimize", "load", "runtime"]),
        }, ["assetType", "operation"]),
        handler=guides.explain_asset_pipeline,
        arguments=(("assetType", "asset_type"), ("operation", "operation")),
    ),
    ToolSpec(
        name="troubleshoot_error",
        description="Get diagnostic steps and solutions for common IWSDK errors and issues.",
        input_schema=_object({
            "errorMessage": _string("Error message or description of the issue"),
        }, ["errorMessage"]),
        handler=guides.troubleshoot_error,
        arguments=(("errorMessage", "error_message"),),
    ),
    ToolSpec(
        name="compose_feature",
        description="Compose a complete feature implementation by providing all necessary components, "
                    "systems, APIs, and complete working code. Best for requests like "
                    '"add a grabbable ball", "create a clickable button", etc.',
        input_schema=_object({
            "featureDescription": _string(
                'Description of the feature to implement (e.g., "add a grabbable ball to the scene")'),
        }, ["featureDescription"]),
        handler=composition.compose_feature,
        arguments=(("featureDescription", "feature_description"),),
    ),
    ToolSpec(
        name="validate_code",
        description="Validate generated IWSDK code against best practices and common mistakes. Checks for "
                    "missing components, unregistered systems, and API misuse.",
        input_schema=_object({
            "code": _string("The IWSDK code to validate"),
        }, ["code"]),
        handler=validation.validate_code,
        arguments=(("code", "code"),),
    ),
    ToolSpec(
        name="find_similar_code",
        description="Find the most similar code examples to a given description. Returns top 3 most "
                    "relevant examples with relevance scores.",
        input_schema=_object({
            "description": _string("Description of what you want to find code for"),
        }, ["description"]),
        handler=examples.find_similar_code,
        arguments=(("description", "description"),),
    ),
    ToolSpec(
        name="get_system_info",
        description="Get detailed information about an IWSDK system including description, methods, "
                    "properties, and which components it queries.",
        input_schema=_object({
            "systemName": _string("Name of the system (e.g., PhysicsSystem, GrabSystem, LocomotionSystem)"),
        }, ["systemName"]),
        handler=systems.get_system_info,
        arguments=(("systemName", "system_name"),),
    ),
    ToolSpec(
        name="get_validation_rules",
        description="Get validation rules for a specific component or system. Returns checks that should "
                    "be performed when using that component/system.",
        input_schema=_object({
            "componentOrSystem": _string(
                "Component or system name to get validation rules for "
                "(optional - returns all rules if not specified)"),
        }),
        handler=validation.get_validation_rules,
        arguments=(("componentOrSystem", "component_or_system"),),
    ),
    ToolSpec(
        name="check_component_order",
        description="Check the correct ordering for adding components. Returns which components must be "
                    "added before or after the specified component.",
        input_schema=_object({
            "componentName": _string("Component name to check ordering for"),
        }, ["componentName"]),
        handler=validation.check_component_order,
        arguments=(("componentName", "component_name"),),
    ),
    ToolSpec(
        name="get_common_mistakes",
        description="Search for common mistakes and troubleshooting help. Returns wrong/correct code "
                    "examples for common IWSDK pitfalls.",
        input_schema=_object({
            "query": _string('Search query for common mistakes (e.g., "physics", "grabbable", "entity creation")'),
        }),
        handler=validation.get_common_mistakes,
        arguments=(("query", "query"),),
    ),
)

TOOLS_BY_NAME: Dict[str, ToolSpec] = {tool.name: tool for tool in TOOLS}


def tool_definitions() -> List[Dict[str, Any]]:
    return [tool.definition() for tool in TOOLS]


def text_content(text: str) -> Dict[str, Any]:
    return {"content": [{"type": "text", "text": text}]}


def call_tool(ctx: ToolContext, name: str, arguments: Optional[Dict[str, Any]]) -> str:
    """Run one tool and return its rendered text.

    Raises:
        ToolError: unknown tool, missing arguments object or missing required argument.
    """
    tool = TOOLS_BY_NAME.get(name)
    if tool is None:
        raise ToolError(f"Unknown tool: {name}")
    if arguments is None:
        raise ToolError("Missing arguments")

    for key in tool.required():
        if arguments.get(key) is None:
            raise ToolError(f"Missing required argument: {key}")

    kwargs = {kwarg: arguments[key] for key, kwarg in tool.arguments if arguments.get(key) is not None}
    return tool.handler(ctx, **kwargs)


def dispatch(ctx: ToolContext, name: str, arguments: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Run a tool and wrap the outcome as text content. Errors become 'Error: ...' text."""
    try:
        return text_content(call_tool(ctx, name, arguments))
    except ToolError as e:
        return text_content(f"Error: {e}")
    except Exception as e:
        logger.exception(f"Tool {name} failed")
        return text_content(f"Error: {e}")
