"""Shared Jinja2 environment for HTML fragments.

Autoescaping is always on: values from evaluated code are shown as text,
never interpreted as markup. Fragments are returned as Markup so they can be
nested into other templates without being escaped twice.
"""

from typing import Any

from jinja2 import BaseLoader, Environment, Template
from markupsafe import Markup

env = Environment(
    loader=BaseLoader(),
    autoescape=True,
    trim_blocks=True,
    lstrip_blocks=True,
)


def format_size(size: int) -> str:
    """Byte count with thousands separators, e.g. '1,234 bytes'."""
    return f"{size:,} bytes"


env.filters["size"] = format_size


def template(source: str) -> Template:
    """Compile a fragment template against the shared environment."""
    return env.from_string(source)


def render(tmpl: Template, **context: Any) -> Markup:
    """Render a compiled template into a Markup fragment."""
    return Markup(tmpl.render(**context))
