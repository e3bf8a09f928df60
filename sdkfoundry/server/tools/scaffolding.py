from .context import ToolContext

PLACEHOLDER = '{{project_name}}'

FENCE_LANGUAGES = (
    ('.ts', 'typescript'),
    ('.json', 'json'),
    ('.html', 'html'),
)


def fence_language(filename: str) -> str:
    for suffix, language in FENCE_LANGUAGES:
        if filename.endswith(suffix):
            return language
    return ''


def scaffold_project(ctx: ToolContext, template: str, project_name: str) -> str:
    templates = ctx.content.scaffold_templates()
    tmpl = templates.get(template)

    if tmpl is None:
        available = "\n".join(f"- {name}: {t['description']}" for name, t in templates.items())
        return f'Template "{template}" not found.\n\nAvailable templates:\n{available}'

    files = {name: body.replace(PLACEHOLDER, project_name) for name, body in tmpl['files'].items()}

    result = f"# {project_name} - {tmpl['description']}\n\n"
    result += "## Project Structure\n\n```\n"
    result += f"{project_name}/\n"
    for filename in sorted(files):
        indent = '  ' if filename.startswith('src/') else ''
        result += f"{indent}├── {filename}\n"
    result += "```\n\n"

    result += "## Setup Instructions\n\n"
    result += f"1. Create project directory:\n```bash\nmkdir {project_name} && cd {project_name}\n```\n\n"
    result += "2. Create the following files:\n\n"
    for filename, body in files.items():
        result += f"### {filename}\n\n```{fence_language(filename)}\n{body}\n```\n\n"

    result += "## Installation\n\n```bash\nnpm install\n```\n\n"
    result += "## Development\n\n```bash\nnpm run dev\n```\n\n"
    result += "Visit https://localhost:3000 in a WebXR-compatible browser!\n"
    return result
