"""In-process evaluation engine and per-browser sessions.

Every evaluation mints a result identity that owns its navigation stack.
"""
