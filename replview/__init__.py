"""replview - browser-based value inspector for an interactive Python REPL.

Evaluated values are shown through pluggable visualizers:
- Visualizer registry and precedence-based dispatch
- Drill-down navigation with breadcrumbs
- One-shot download tokens for file resources
"""

__version__ = "0.1.0"
