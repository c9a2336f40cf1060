"""Evaluate Python source the way an interactive prompt does.

All statements are executed; a trailing expression statement is evaluated
and becomes the value. Exceptions raised by the code become the value too,
so they can be inspected like any other result.
"""

import ast
import logging
from typing import Any

logger = logging.getLogger(__name__)

SOURCE_NAME = "<repl>"


def evaluate_source(source: str, namespace: dict[str, Any]) -> tuple[Any, bool]:
    """Run ``source`` in ``namespace``.

    Returns:
        (value, failed) where failed is True if the value is the exception
        the code raised (including syntax errors).
    """
    try:
        tree = ast.parse(source, filename=SOURCE_NAME, mode="exec")
        last_expr = None
        if tree.body and isinstance(tree.body[-1], ast.Expr):
            last_expr = tree.body.pop()

        if tree.body:
            exec(compile(tree, SOURCE_NAME, "exec"), namespace)
        if last_expr is None:
            return None, False

        expression = ast.Expression(body=last_expr.value)
        return eval(compile(expression, SOURCE_NAME, "eval"), namespace), False
    except (Exception, SystemExit) as e:
        logger.info(f"Evaluation raised {type(e).__name__}: {e}")
        return e, True
