"""Render templates and write the generated Node project.

Takes the tools from context_builder and produces package.json and
index.js. Both files are rendered before either is written.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Sequence

import jinja2
import structlog

from .config import GeneratorSettings
from .context_builder import build_context
from .exceptions import OutputDirectoryNotEmptyError
from .js import js_string
from .models import Tool

logger = structlog.get_logger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"

MANIFEST_NAME = "package.json"
ENTRY_SCRIPT_NAME = "index.js"


def _environment() -> jinja2.Environment:
    env = jinja2.Environment(
        loader=jinja2.FileSystemLoader(str(TEMPLATE_DIR)),
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
        undefined=jinja2.StrictUndefined,
    )
    env.filters["js_string"] = js_string
    return env


def build_manifest(settings: GeneratorSettings) -> dict[str, Any]:
    """package.json contents for the generated project."""
    return {
        "name": settings.project_name,
        "version": settings.project_version,
        "type": "module",
        "scripts": {"start": f"node {ENTRY_SCRIPT_NAME}"},
        "dependencies": {
            "fastmcp": settings.fastmcp_version,
            "zod": settings.zod_version,
        },
    }


def render_manifest(settings: GeneratorSettings) -> str:
    return json.dumps(build_manifest(settings), indent=2, sort_keys=True) + "\n"


def render_entry_script(context: dict[str, Any]) -> str:
    """Render index.js from a context built by build_context()."""
    template = _environment().get_template("index.js.j2")
    return template.render(**context)


def render_project(
    tools: Sequence[Tool],
    settings: GeneratorSettings | None = None,
) -> dict[str, str]:
    """File name -> content for every generated artifact."""
    settings = settings or GeneratorSettings()
    context = build_context(tools, settings)
    return {
        MANIFEST_NAME: render_manifest(settings),
        ENTRY_SCRIPT_NAME: render_entry_script(context),
    }


def prepare_output_dir(output_dir: Path, force: bool = False) -> None:
    """Create *output_dir*; refuse a non-empty one unless *force*."""
    output_dir.mkdir(parents=True, exist_ok=True)
    if not force and any(output_dir.iterdir()):
        raise OutputDirectoryNotEmptyError()


def generate(
    output_dir: Path,
    tools: Sequence[Tool],
    settings: GeneratorSettings | None = None,
) -> list[Path]:
    """Render the project and write it to *output_dir*."""
    files = render_project(tools, settings)

    output_dir.mkdir(parents=True, exist_ok=True)
    written = []
    for name, content in files.items():
        path = output_dir / name
        path.write_text(content, encoding="utf-8")
        path.chmod(0o755 if name == ENTRY_SCRIPT_NAME else 0o644)
        written.append(path)

    logger.info("Generated project", output_dir=str(output_dir), tools=len(tools))
    return written
