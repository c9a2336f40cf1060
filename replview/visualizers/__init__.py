"""Visualizers: pluggable rendering strategies for evaluated values.

Each visualizer declares which values it supports and a precedence used
to pick among several applicable ones. The registry is built once at
startup; the dispatcher selects visualizers for a value.
"""
