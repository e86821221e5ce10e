"""
Lathe Templating - Jinja2 environment and identifier case helpers

Used to interpolate recipe parameters into step arguments and to render the
replacement documents (README) shipped with the package.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError

from lathe.errors import RecipeError


TEMPLATES_DIR = Path(__file__).parent / "templates"


# ═══════════════════════════════════════════════════════════════════════════
# CASE HELPERS
# ═══════════════════════════════════════════════════════════════════════════


def _words(s: str) -> list[str]:
    s = re.sub(r"([a-z0-9])([A-Z])", r"\1 \2", s)
    return [w for w in re.split(r"[\s_\-.]+", s) if w]


def camel_case(s: str) -> str:
    """my-service -> myService"""
    words = _words(s)
    if not words:
        return ""
    return words[0].lower() + "".join(w.capitalize() for w in words[1:])


def pascal_case(s: str) -> str:
    """my-service -> MyService"""
    return "".join(w[0].upper() + w[1:] for w in _words(s))


def kebab_case(s: str) -> str:
    """MyService -> my-service"""
    return "-".join(w.lower() for w in _words(s))


def snake_case(s: str) -> str:
    """MyService -> my_service"""
    return "_".join(w.lower() for w in _words(s))


def package_segment(s: str) -> str:
    """
    Turn a name into a legal lowercase package segment.

    my-service -> myservice, 2fast -> _2fast
    """
    segment = re.sub(r"[^a-z0-9_]", "", s.lower())
    if segment and segment[0].isdigit():
        segment = "_" + segment
    return segment


# ═══════════════════════════════════════════════════════════════════════════
# JINJA ENVIRONMENT
# ═══════════════════════════════════════════════════════════════════════════


def create_jinja_env(templates_dir: Path | None = None) -> Environment:
    """Create a Jinja2 environment with the case filters registered."""
    env = Environment(
        loader=FileSystemLoader(str(templates_dir or TEMPLATES_DIR)),
        undefined=StrictUndefined,
        keep_trailing_newline=True,
        autoescape=False,
    )

    env.filters["camel_case"] = camel_case
    env.filters["pascal_case"] = pascal_case
    env.filters["kebab_case"] = kebab_case
    env.filters["snake_case"] = snake_case
    env.filters["package_segment"] = package_segment

    return env


_default_env: Environment | None = None


def _env() -> Environment:
    global _default_env
    if _default_env is None:
        _default_env = create_jinja_env()
    return _default_env


def render_string(text: str, context: dict[str, Any], env: Environment | None = None) -> str:
    """
    Render a template string.

    Raises:
        RecipeError: on syntax errors or undefined parameters
    """
    if "{{" not in text and "{%" not in text:
        return text
    try:
        return (env or _env()).from_string(text).render(**context)
    except TemplateError as e:
        raise RecipeError(f"Cannot render {text!r}: {e}") from e


def render_file(name: str, context: dict[str, Any], env: Environment | None = None) -> str:
    """Render a named template from the templates directory."""
    try:
        return (env or _env()).get_template(name).render(**context)
    except TemplateError as e:
        raise RecipeError(f"Cannot render template {name}: {e}") from e
