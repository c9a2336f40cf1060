"""HTML rendering: Jinja2 environment, render context and page assembly."""
